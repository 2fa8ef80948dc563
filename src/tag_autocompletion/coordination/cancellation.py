"""
Cancellation token passed through every oracle call boundary.
"""
import asyncio
from typing import Callable, List, Optional


class CancellationToken:
    """
    Cancels the asyncio task running one oracle call.

    The oracle attaches its task with ``attach``; ``cancel`` may be called
    before, during or after the call and is idempotent.
    """

    def __init__(self):
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def attach(self, task: asyncio.Task) -> None:
        """Bind the running call. A token cancelled earlier cancels it at once."""
        self._task = task
        if self._cancelled:
            task.cancel()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Register extra cleanup to run on cancel."""
        self._callbacks.append(callback)

    def cancel(self) -> None:
        """
        Cancel the attached call.

        Callbacks run after the task is cancelled; an exception from one of
        them propagates to the caller once the remaining ones have run.
        """
        if self._cancelled:
            return
        self._cancelled = True

        if self._task is not None and not self._task.done():
            self._task.cancel()

        errors = []
        for callback in self._callbacks:
            try:
                callback()
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise errors[0]
