"""
Top-level prompt correction: segmentation, lease, batch run, reassembly.
"""
import asyncio
import dataclasses
import logging
from typing import List, Optional, Union

from ..config import TagAutocompletionConfig
from ..context.generation_context import GenerationContext
from ..coordination.operation_registry import RegistryTracker
from ..coordination.profile_lease import ProfileLeaseManager
from ..models import BatchStats, GenerationMode, Tag, get_processing_strategy
from ..oracle import OracleSession, TagOracle
from ..resolution.resolver_factory import create_resolver, create_selector
from ..search.tag_search_client import TagSearchClient
from ..text_cleaning import clean_prompt, split_tags, unique_in_order
from .batch_scheduler import BatchScheduler

logger = logging.getLogger(__name__)


class TagResolutionOrchestrator:
    """
    Rewrites a comma-separated tag prompt into vocabulary tags.

    All oracle calls of a run happen under one profile lease. Each run gets
    its own operation registry, drained before the lease is released, whether
    the run succeeded or not. Nothing escapes ``resolve``: on any failure the
    original prompt is returned.
    """

    def __init__(
        self,
        config: TagAutocompletionConfig,
        oracle: TagOracle,
        search_client: TagSearchClient,
        lease_manager: ProfileLeaseManager,
        registries: Optional[RegistryTracker] = None,
    ):
        self.config = config
        self.oracle = oracle
        self.search_client = search_client
        self.lease_manager = lease_manager
        self.registries = registries or RegistryTracker(poll_interval=config.lease_poll_interval)
        self.last_stats: Optional[BatchStats] = None

    async def resolve(
        self,
        prompt: str,
        mode: Union[GenerationMode, int, None],
        context: Optional[GenerationContext] = None,
    ) -> str:
        """
        :param prompt: Raw prompt from the model, possibly with reasoning text
        :param mode: Generation mode (host integers are accepted)
        :param context: Host chat context for mode-specific selection
        :return: Corrected prompt, or the input unchanged on any failure
        """
        if not self.config.enabled:
            return prompt
        if not prompt or not prompt.strip():
            return prompt

        try:
            return await self._resolve(prompt, GenerationMode.coerce(mode), context)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"Tag autocompletion failed, returning original prompt: {exc}")
            return prompt

    async def _resolve(
        self,
        prompt: str,
        mode: Optional[GenerationMode],
        context: Optional[GenerationContext],
    ) -> str:
        cleaned = clean_prompt(prompt)
        tags = [Tag.parse(raw) for raw in split_tags(cleaned)]
        if not tags:
            logger.info("No tags found in prompt, leaving it unchanged")
            return prompt

        if context is None:
            context = GenerationContext(prompt=cleaned)
        elif not context.prompt:
            context = dataclasses.replace(context, prompt=cleaned)

        strategy = get_processing_strategy(mode, self.config.candidate_limit)
        logger.info(
            f"Processing {len(tags)} tags for mode {getattr(mode, 'name', 'DEFAULT')} "
            f"with {strategy.strategy} strategy"
        )

        registry = self.registries.open()
        session = OracleSession(self.oracle, registry)
        scheduler = BatchScheduler(
            create_resolver(self.config, session, self.search_client, context),
            create_selector(self.config, session, context),
            batch_size=self.config.batch_size,
            phase_timeout=self.config.search_phase_timeout,
            selection_pause=self.config.selection_pause,
            batch_pause=self.config.batch_pause,
        )
        stats = BatchStats()
        self.last_stats = stats

        async def run() -> List[str]:
            try:
                return await scheduler.run(tags, strategy, mode, stats)
            finally:
                await registry.drain(self.config.drain_timeout)

        try:
            results = await self.lease_manager.with_lease(run)
        finally:
            self.registries.close(registry)

        final_tags = unique_in_order([tag for result in results for tag in split_tags(result)])
        corrected = ", ".join(final_tags)
        logger.info(f"Corrected prompt: {corrected}")
        return corrected
