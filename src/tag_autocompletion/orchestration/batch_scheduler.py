"""
Two-phase batch processing of prompt tags.

Phase 1 searches every tag of a batch concurrently; phase 2 selects one
candidate per tag sequentially with a short pause between oracle calls.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from ..models import BatchStats, CandidateSet, GenerationMode, ProcessingStrategy, Tag
from ..resolution.candidate_resolver import CandidateResolver
from ..resolution.selector import TagSelector

logger = logging.getLogger(__name__)


class BatchScheduler:
    """
    Usage:
        scheduler = BatchScheduler(resolver, selector)
        corrected = await scheduler.run(tags, strategy, GenerationMode.CHARACTER)

    ``run`` returns exactly one string per input tag, in input order. Any
    failure for a tag (or a whole batch) keeps the tag's original text.
    """

    def __init__(
        self,
        resolver: CandidateResolver,
        selector: TagSelector,
        batch_size: int = 8,
        phase_timeout: float = 120.0,
        selection_pause: float = 0.075,
        batch_pause: float = 0.1,
    ):
        """
        :param batch_size: Tags per batch
        :param phase_timeout: Seconds allowed for the concurrent search phase
        :param selection_pause: Seconds between sequential selection calls
        :param batch_pause: Seconds between batches
        """
        self._resolver = resolver
        self._selector = selector
        self.batch_size = batch_size
        self.phase_timeout = phase_timeout
        self.selection_pause = selection_pause
        self.batch_pause = batch_pause

    async def run(
        self,
        tags: List[Tag],
        strategy: ProcessingStrategy,
        mode: Optional[GenerationMode],
        stats: Optional[BatchStats] = None,
    ) -> List[str]:
        stats = stats or BatchStats()
        stats.total = len(tags)

        batches = [tags[i:i + self.batch_size] for i in range(0, len(tags), self.batch_size)]
        logger.info(
            f"Processing {len(tags)} tags in {len(batches)} batches of {self.batch_size} "
            f"(strategy={strategy.strategy}, limit={strategy.candidate_limit})"
        )

        results: List[str] = []
        for index, batch in enumerate(batches):
            try:
                results.extend(await self._run_batch(batch, strategy, mode, stats))
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.error(f"Batch {index + 1} failed, keeping original tags: {exc}")
                results.extend(tag.raw for tag in batch)
                stats.processed = len(results)

            logger.info(
                f"Batch {index + 1}/{len(batches)} complete "
                f"({stats.processed}/{stats.total}, {stats.progress_percent}%)"
            )
            if index < len(batches) - 1:
                await asyncio.sleep(self.batch_pause)

        stats.log_summary(logger)
        return results

    async def _run_batch(
        self,
        batch: List[Tag],
        strategy: ProcessingStrategy,
        mode: Optional[GenerationMode],
        stats: BatchStats,
    ) -> List[str]:
        candidate_sets = await self._search_phase(batch, strategy, stats)

        results = []
        selection_made = False
        for position, tag in enumerate(batch):
            if tag.passes_through:
                stats.skipped += 1
                results.append(tag.raw)
            elif position not in candidate_sets or not candidate_sets[position].has_candidates:
                results.append(tag.raw)
            else:
                if selection_made:
                    await asyncio.sleep(self.selection_pause)
                selection_made = True
                results.append(await self._select(tag, candidate_sets[position], mode, stats))
            stats.processed += 1

        return results

    async def _search_phase(
        self,
        batch: List[Tag],
        strategy: ProcessingStrategy,
        stats: BatchStats,
    ) -> Dict[int, CandidateSet]:
        """Resolve candidates for every searchable tag concurrently."""
        tasks = {
            asyncio.ensure_future(
                self._resolver.resolve(tag.search_text, strategy.candidate_limit)
            ): position
            for position, tag in enumerate(batch)
            if not tag.passes_through
        }
        if not tasks:
            return {}

        done, pending = await asyncio.wait(tasks.keys(), timeout=self.phase_timeout)

        if pending:
            logger.error(
                f"Search phase timed out after {self.phase_timeout}s, "
                f"{len(pending)} tags keep their original text"
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            stats.search_failures += len(pending)

        candidate_sets: Dict[int, CandidateSet] = {}
        for task in done:
            position = tasks[task]
            if task.cancelled():
                stats.search_failures += 1
                continue
            exc = task.exception()
            if exc is not None:
                logger.warning(f'Search failed for "{batch[position].search_text}": {exc}')
                stats.search_failures += 1
                continue

            candidate_set = task.result()
            if not candidate_set.has_candidates:
                logger.info(f'No candidates for "{batch[position].search_text}", keeping original')
                stats.search_failures += 1
            candidate_sets[position] = candidate_set

        return candidate_sets

    async def _select(
        self,
        tag: Tag,
        candidate_set: CandidateSet,
        mode: Optional[GenerationMode],
        stats: BatchStats,
    ) -> str:
        try:
            selection = await self._selector.select(candidate_set.candidates, tag.search_text, mode)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f'Selection failed for "{tag.search_text}": {exc}')
            stats.selection_failures += 1
            return tag.raw

        stats.successful_corrections += 1
        logger.info(f'"{tag.search_text}" -> "{selection}"')
        return tag.recombine(selection)
