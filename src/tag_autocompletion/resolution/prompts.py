from langchain_core.prompts import PromptTemplate


SEARCH_QUALITY_PROMPT = PromptTemplate.from_template(
"""Original tag: "{original_tag}"
Search results: {candidates}

CONTEXT: {context_tags}

Are these search results good quality matches for the original tag?

{tag_checks}

Answer ONLY "YES" if the results adequately represent the original meaning, or ONLY "NO" if no good matches exist."""
)

COMPOUND_QUALITY_CHECKS = """This is a compound tag "{original_tag}". Check if the results preserve the FULL meaning:
- Do any results contain or represent "{first}"?
- Do any results contain or represent "{second}"?
- For compound tags, BOTH components should be represented among the candidates."""

SIMPLE_QUALITY_CHECKS = """This is a single-word tag "{original_tag}". Check if any result is a good match:
- Look for exact matches, plurals, or very similar variations
- Examples: "indoor" matches "indoors", "cat" matches "cats", "smile" matches "smiling"
- One excellent match is sufficient for single-word tags."""


FALLBACK_TERMS_PROMPT = PromptTemplate.from_template(
"""For the image tag "{original_tag}", generate 3-5 simpler, more specific search terms that ONLY relate to the same semantic category and visual concept.

LIMITED CONTEXT: {context_tags}

STRICT REQUIREMENTS:
- Stay within the same semantic category (body→body, pose→pose, clothing→clothing, lighting→lighting)
- NO environmental terms for body/clothing tags
- NO body terms for environmental tags
- NO object terms for action tags
- NO smoking or object terms for lighting tags
- Break compound tags into their meaningful components ONLY

Examples:
- "bright_lighting" → lighting, light, bright, illumination
- "knee_scrape" → knee, scrape, injury, bruise
- "hugging_own_knees" → hugging, embrace, knees, sitting
- "steel_walls" → walls, wall, steel, metal

Return ONLY a comma-separated list of semantically consistent words. No explanations."""
)


SUFFICIENCY_PROMPT = PromptTemplate.from_template(
"""Original compound tag: "{original_tag}"
Current candidates found: {candidates}

CONTEXT: {context_tags}

Question: Can you find ALL the core components of the original compound tag among these candidates with CONTEXTUALLY APPROPRIATE matches?

For "{original_tag}", you MUST find:
{required_components}

IMPORTANT: Components must be contextually appropriate, not just word matches.

Answer YES ONLY if you can find ALL required components with PROPER CONTEXT among the candidates.
Answer NO if ANY component is missing OR if matches are contextually wrong.

Examples:
- "steel_walls" with candidates ["steel", "wall", "pokemon"] → YES (steel + wall both found in proper context)
- "padded_room" with candidates ["padded jacket", "padded walls"] → NO (padded found, but room missing)
- "padded_room" with candidates ["padded walls", "room"] → YES (padded + room both found in proper context)
- "padded_floor" with candidates ["breast padding", "floor"] → NO (breast padding wrong context for floor padding)
- "ceiling_hatch" with candidates ["ceiling", "wallet"] → NO (ceiling found, but hatch missing)

Answer ONLY "YES" or "NO"."""
)


SELECTION_PROMPT = PromptTemplate.from_template(
"""You must select the BEST danbooru/e621 tag for "{original_tag}" from the provided candidates. Choose the most appropriate tag that matches the visual concept. Do not stop until you have identified the optimal tag choice.
{context_block}
AVAILABLE CANDIDATES: {candidates}

SELECTION CRITERIA:
- Choose the tag that best represents the visual concept of "{original_tag}"
- Select tags semantically closest to the original meaning
- Focus on visual and descriptive elements

CRITICAL RULES:
- Return ONLY ONE tag name from the candidates list
- Use only the exact tag text from the candidates (no variations)
- Do not add descriptors, adjectives, or any words that are not part of the chosen tag
- Prioritize exact semantic matches over partial matches
- Reject character names, franchises, or other contextually inappropriate tags
- For compound concepts, prefer tags that capture the core visual meaning
- Only combine multiple tags (comma-separated) if they together represent the original concept better than any single tag
{extra_rules}- No explanations, reasoning, or additional text

OUTPUT FORMAT: Return only the selected tag name (or comma-separated tags if multiple), nothing else."""
)

VISUAL_FOCUS_RULE = "- Context is for image generation - focus on visual, descriptive elements\n"


VALIDATION_PROMPT = PromptTemplate.from_template(
"""You are a semantic validator for danbooru/e621 tags. Check if this tag selection makes sense.

ORIGINAL TAG: "{original_tag}"
SELECTED TAG: "{selected_tag}"
ALL AVAILABLE CANDIDATES: {candidates}

VALIDATION RULES:
1. The selected tag should capture the core visual/descriptive meaning of the original
2. Reject selections that change semantic category (e.g., lighting → smoking, body parts → clothing)
3. Reject selections that are contextually inappropriate
4. Consider if other candidates would be better matches

EXAMPLES OF INVALID SELECTIONS:
- "bright_lighting" → "lighting cigarette" (lighting context changed to smoking)
- "indoor" → "white dress" (location changed to clothing)
- "knee_scrape" → "naked shirt" (injury changed to clothing item)
- "hugging_own_knees" → "lighting practice" (action changed to lighting context)
- "dropped" → "dropped food" (person falling changed to food falling)

EXAMPLES OF VALID SELECTIONS:
- "metal_floor" → "floor" (simplified but kept meaning)
- "shivering" → "trembling" (good synonym)
- "bare_foot" → "barefoot" (format correction)
- "wide_eyes" → "wide-eyed" (format correction, same meaning)
- "hair_over_shoulder" → "hair over shoulder" (underscore to space conversion)

Answer ONLY "VALID" if the selection makes semantic sense, or "INVALID" if it doesn't.
If INVALID, suggest the best alternative from the candidates list.

FORMAT:
VALID
OR
INVALID: [best_alternative_tag]"""
)
