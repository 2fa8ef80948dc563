"""
Context-aware selection of one candidate per tag.
"""
import logging
from typing import List, Optional

from ..context.context_builders import get_context_builder
from ..context.generation_context import GenerationContext
from ..models import GenerationMode
from ..oracle import OracleSession
from .prompts import SELECTION_PROMPT, VISUAL_FOCUS_RULE
from .resolution_policy import ResolutionPolicy
from .response_parser import ResponseParser
from .validator import TagValidator

logger = logging.getLogger(__name__)


class TagSelector:
    """
    Picks the best candidate for a tag using the mode's context.

    Usage:
        selector = TagSelector(session, context, validator, suggestion_policy)
        tag = await selector.select(["padded walls", "room"], "padded_room", GenerationMode.BACKGROUND)
    """

    def __init__(
        self,
        session: OracleSession,
        context: GenerationContext,
        validator: TagValidator,
        suggestion_policy: ResolutionPolicy,
        parser: Optional[ResponseParser] = None,
    ):
        self._session = session
        self._context = context
        self._validator = validator
        self._suggestion_policy = suggestion_policy
        self._parser = parser or ResponseParser()

    async def select(
        self,
        candidates: List[str],
        original_tag: str,
        mode: Optional[GenerationMode],
    ) -> str:
        """
        :param candidates: Ranked candidates from the resolver
        :param original_tag: Tag as written in the prompt
        :param mode: Generation mode selecting the context builder
        :return: Selected candidate, or original_tag when there are none
        """
        if not candidates:
            return original_tag
        if len(candidates) == 1:
            return candidates[0]

        try:
            selection_context = get_context_builder(mode)(self._context, original_tag)
            if selection_context is None:
                logger.info(f'No {getattr(mode, "name", mode)} context for "{original_tag}", using first candidate')
                return candidates[0]

            context_block = ""
            if selection_context.context_block:
                context_block = f"\n{selection_context.context_block}\n"

            prompt = SELECTION_PROMPT.format(
                original_tag=original_tag,
                context_block=context_block,
                candidates=", ".join(candidates),
                extra_rules=VISUAL_FOCUS_RULE if selection_context.visual_focus else "",
            )
            logger.debug(f"Selection prompt for '{original_tag}':\n{prompt}")

            answer = await self._session.ask(
                f"select_{selection_context.label}_{original_tag}", prompt
            )
            selection = self._parser.parse(answer, candidates)
        except Exception as exc:
            logger.warning(f"Selection failed for '{original_tag}': {exc}")
            return candidates[0]

        return await self._validated(original_tag, selection, candidates)

    async def _validated(self, original_tag: str, selection: str, candidates: List[str]) -> str:
        try:
            result = await self._validator.validate(original_tag, selection, candidates)
        except Exception as exc:
            logger.warning(f"Validator error for '{original_tag}', keeping '{selection}': {exc}")
            return selection

        if result.is_valid:
            return selection

        suggestion = self._suggestion_policy.snap(result.suggestion, candidates)
        replacement = suggestion if suggestion is not None else candidates[0]
        logger.info(
            f'Validation rejected "{selection}" for "{original_tag}" ({result.reason}), '
            f'using "{replacement}"'
        )
        return replacement
