"""
LangChain callbacks for oracle latency tracking.
"""
from typing import Any, Dict, List, Optional
from time import time
from uuid import UUID

from langchain_core.callbacks import BaseCallbackHandler


class OracleLatencyCallback(BaseCallbackHandler):
    """
    Callback handler that tracks oracle call latency.

    Accumulates execution time for every chat model call made during a
    resolution run. Failed calls are timed and counted as errors. Only the
    most recent ``max_tracked`` per-call latencies are kept; totals cover
    every call.
    """

    def __init__(self, max_tracked: int = 100):
        super().__init__()
        self._max_tracked = max_tracked
        self._start_times: Dict[UUID, float] = {}
        self._latencies: Dict[UUID, float] = {}
        self._total_time: float = 0.0
        self.call_count: int = 0
        self.error_count: int = 0

    def on_chat_model_start(
        self,
        serialized: Dict[str, Any],
        messages: List[List[Any]],
        *,
        run_id: UUID,
        parent_run_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> None:
        """Record call start time."""
        self._start_times[run_id] = time()

    def on_llm_start(
        self,
        serialized: Dict[str, Any],
        prompts: List[str],
        *,
        run_id: UUID,
        parent_run_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> None:
        """Record call start time for completion-style models."""
        self._start_times[run_id] = time()

    def on_llm_end(
        self,
        response: Any,
        *,
        run_id: UUID,
        parent_run_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> None:
        """Record call end time and calculate latency."""
        self._finish(run_id)

    def on_llm_error(
        self,
        error: BaseException,
        *,
        run_id: UUID,
        parent_run_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> None:
        """Failed calls still count toward latency."""
        if self._finish(run_id):
            self.error_count += 1

    def _finish(self, run_id: UUID) -> bool:
        if run_id not in self._start_times:
            return False
        latency = time() - self._start_times.pop(run_id)
        self._latencies[run_id] = latency
        while len(self._latencies) > self._max_tracked:
            del self._latencies[next(iter(self._latencies))]
        self._total_time += latency
        self.call_count += 1
        return True

    def get_total_latency_ms(self) -> int:
        """Total oracle time in milliseconds."""
        return int(self._total_time * 1000)

    def get_latencies(self) -> Dict[UUID, float]:
        """Latency of the most recent calls in seconds, keyed by run id."""
        return self._latencies.copy()

    def reset(self) -> None:
        """Reset all tracking state."""
        self._start_times.clear()
        self._latencies.clear()
        self._total_time = 0.0
        self.call_count = 0
        self.error_count = 0
