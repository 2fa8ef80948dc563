"""
Bookkeeping for in-flight oracle calls of one resolution run.
"""
import asyncio
import logging
import time
from typing import Dict, List, Optional, Set

from .cancellation import CancellationToken

logger = logging.getLogger(__name__)


class OperationRegistry:
    """
    Tracks active oracle operations and their cancellation tokens.

    Operations are registered right before an oracle call and ended in a
    ``finally`` block. ``drain`` is awaited before the profile lease is
    released so a stuck call cannot hold the lease.
    """

    def __init__(self, poll_interval: float = 0.1):
        self._poll_interval = poll_interval
        self._active: Set[str] = set()
        self._tokens: Dict[str, CancellationToken] = {}
        self._counter = 0

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def active_operations(self) -> List[str]:
        return sorted(self._active)

    def start(self, name: str, token: Optional[CancellationToken] = None) -> str:
        """
        Register an operation.

        :param name: Operation label, e.g. "select_padded_room"
        :param token: Token cancelling the underlying call
        :return: Unique operation id
        """
        self._counter += 1
        operation_id = f"{name}_{self._counter}"
        self._active.add(operation_id)
        if token is not None:
            self._tokens[operation_id] = token

        logger.debug(f"Started oracle operation: {operation_id} ({len(self._active)} total active)")
        return operation_id

    def end(self, operation_id: str) -> None:
        """Remove an operation and cancel its token (no-op for finished calls)."""
        self._active.discard(operation_id)
        token = self._tokens.pop(operation_id, None)
        if token is not None:
            self._cancel_token(operation_id, token)

        logger.debug(f"Ended oracle operation: {operation_id} ({len(self._active)} remaining active)")

    async def drain(self, max_wait: float = 10.0) -> None:
        """
        Wait for active operations to finish, then force-cancel stragglers.

        Never blocks past ``max_wait`` seconds, even when cancelling a token fails.
        """
        if self._active:
            logger.info(f"Waiting for {len(self._active)} oracle operations to complete...")

        deadline = time.monotonic() + max_wait
        while self._active and time.monotonic() < deadline:
            logger.debug(f"Still waiting for {len(self._active)} operations: {self.active_operations}")
            await asyncio.sleep(min(self._poll_interval, max(deadline - time.monotonic(), 0)))

        if self._active:
            logger.warning(
                f"Timeout waiting for oracle operations. {len(self._active)} still active: "
                f"{self.active_operations}"
            )
            self._force_cancel_remaining()

    def cancel_all(self) -> None:
        """Emergency reset: cancel everything and restart operation numbering."""
        self._force_cancel_remaining()
        self._counter = 0

    def _force_cancel_remaining(self) -> None:
        for operation_id, token in list(self._tokens.items()):
            logger.warning(f"Force cancelling operation: {operation_id}")
            self._cancel_token(operation_id, token)

        self._active.clear()
        self._tokens.clear()

    def _cancel_token(self, operation_id: str, token: CancellationToken) -> None:
        try:
            token.cancel()
        except Exception as exc:
            logger.warning(f"Failed to cancel operation {operation_id}: {exc}")


class RegistryTracker:
    """
    Hands out one OperationRegistry per resolution run.

    Runs never share a registry, so draining one run cannot wait on or cancel
    another run's oracle calls. Live registries stay listed here for
    diagnostics and emergency reset only.
    """

    def __init__(self, poll_interval: float = 0.1):
        self._poll_interval = poll_interval
        self._live: List[OperationRegistry] = []

    def __len__(self) -> int:
        return len(self._live)

    @property
    def active_count(self) -> int:
        return sum(registry.active_count for registry in self._live)

    @property
    def active_operations(self) -> List[str]:
        return sorted(op for registry in self._live for op in registry.active_operations)

    def open(self) -> OperationRegistry:
        """Create and track the registry of a new run."""
        registry = OperationRegistry(poll_interval=self._poll_interval)
        self._live.append(registry)
        return registry

    def close(self, registry: OperationRegistry) -> None:
        """Stop tracking a finished run's registry."""
        if registry in self._live:
            self._live.remove(registry)

    def cancel_all(self) -> None:
        """Emergency reset of every live run."""
        for registry in list(self._live):
            registry.cancel_all()
