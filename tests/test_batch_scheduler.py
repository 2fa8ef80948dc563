"""
Tests for two-phase batch scheduling.
"""
import asyncio

from tag_autocompletion.models import BatchStats, CandidateSet, GenerationMode, ProcessingStrategy, Tag
from tag_autocompletion.orchestration import BatchScheduler


STRATEGY = ProcessingStrategy(10, "fast")


class FakeResolver:
    """Returns scripted candidates; can fail or hang per query."""

    def __init__(self, results=None, failing=(), hanging=()):
        self.results = results or {}
        self.failing = set(failing)
        self.hanging = set(hanging)
        self.calls = []

    async def resolve(self, tag, limit):
        self.calls.append((tag, limit))
        if tag in self.failing:
            raise RuntimeError("search exploded")
        if tag in self.hanging:
            await asyncio.sleep(10)
        return CandidateSet(query=tag, candidates=self.results.get(tag, []))


class FakeSelector:
    """Picks the first candidate; can fail per tag."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def select(self, candidates, original_tag, mode):
        self.calls.append((original_tag, mode))
        if original_tag in self.failing:
            raise RuntimeError("selection exploded")
        return candidates[0]


def _run(scheduler, raw_tags, stats=None):
    tags = [Tag.parse(raw) for raw in raw_tags]
    return asyncio.run(scheduler.run(tags, STRATEGY, GenerationMode.NOW, stats))


def _scheduler(resolver, selector, **options):
    settings = {"selection_pause": 0, "batch_pause": 0}
    settings.update(options)
    return BatchScheduler(resolver, selector, **settings)


class TestBatchScheduler:
    """Tests for BatchScheduler.run."""

    def test_one_output_per_tag_in_order(self):
        """Test pass-through, mixed recombination and missing candidates."""
        resolver = FakeResolver({"smile": ["smiling"], "padded_room": ["padded walls"]})
        stats = BatchStats()

        result = _run(
            _scheduler(resolver, FakeSelector()),
            ["smile", "[ASPECT:wide]", "(from_side:1.1)", "[ASPECT:square] padded_room", "unknown_tag"],
            stats,
        )

        assert result == [
            "smiling",
            "[ASPECT:wide]",
            "(from_side:1.1)",
            "[ASPECT:square] padded walls",
            "unknown_tag",
        ]
        assert stats.total == 5
        assert stats.processed == 5
        assert stats.skipped == 2
        assert stats.successful_corrections == 2
        assert stats.search_failures == 1

    def test_passthrough_tags_are_never_searched(self):
        resolver = FakeResolver()

        _run(_scheduler(resolver, FakeSelector()), ["[ASPECT:wide]", "(from_side:1.1)"])

        assert resolver.calls == []

    def test_uses_strategy_limit_and_mode(self):
        resolver = FakeResolver({"smile": ["smiling", "grin"]})
        selector = FakeSelector()

        _run(_scheduler(resolver, selector), ["smile"])

        assert resolver.calls == [("smile", 10)]
        assert selector.calls == [("smile", GenerationMode.NOW)]

    def test_multiple_batches_keep_order(self):
        raw_tags = [f"tag{i}" for i in range(7)]
        resolver = FakeResolver({tag: [tag.upper()] for tag in raw_tags})

        result = _run(_scheduler(resolver, FakeSelector(), batch_size=3), raw_tags)

        assert result == [tag.upper() for tag in raw_tags]

    def test_search_failure_keeps_original(self):
        resolver = FakeResolver({"smile": ["smiling"]}, failing={"bad_tag"})
        stats = BatchStats()

        result = _run(_scheduler(resolver, FakeSelector()), ["bad_tag", "smile"], stats)

        assert result == ["bad_tag", "smiling"]
        assert stats.search_failures == 1

    def test_search_phase_timeout_cancels_pending_items(self):
        """Test that a hanging search falls back while finished ones are kept."""
        resolver = FakeResolver({"smile": ["smiling"]}, hanging={"slow_tag"})
        stats = BatchStats()

        result = _run(
            _scheduler(resolver, FakeSelector(), phase_timeout=0.05),
            ["smile", "slow_tag"],
            stats,
        )

        assert result == ["smiling", "slow_tag"]
        assert stats.search_failures == 1

    def test_selection_failure_keeps_original(self):
        resolver = FakeResolver({"smile": ["smiling"], "grin": ["grinning"]})
        stats = BatchStats()

        result = _run(_scheduler(resolver, FakeSelector(failing={"smile"})), ["smile", "grin"], stats)

        assert result == ["smile", "grinning"]
        assert stats.selection_failures == 1
        assert stats.successful_corrections == 1

    def test_empty_tag_list(self):
        assert _run(_scheduler(FakeResolver(), FakeSelector()), []) == []
