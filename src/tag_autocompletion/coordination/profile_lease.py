"""
Exclusive lease on the dedicated oracle connection profile.

The host application has one active connection profile at a time. A
resolution run switches to the dedicated profile once, performs every oracle
call under it and switches back, so the user's own chat traffic never runs
on the tagging profile and tagging never runs on the user's profile.
"""
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Optional, TypeVar

from ..exceptions import ProfileNotFoundError, ProfileSwitchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_PROFILE = "<None>"


class LeaseState(str, Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    HELD = "held"
    RELEASING = "releasing"


class ProfileSwitch(ABC):
    """
    Host-side connection profile control.

    Implementations wrap whatever the host offers (a slash command, an HTTP
    settings endpoint). ``get_active`` returns None when no profile is selected.
    """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether a profile with this name is configured."""

    @abstractmethod
    async def get_active(self) -> Optional[str]:
        """Name of the currently active profile."""

    @abstractmethod
    async def switch_to(self, name: str) -> str:
        """Activate a profile (NO_PROFILE deselects). Returns the host's result text."""


class InMemoryProfileSwitch(ProfileSwitch):
    """Profile switch kept in process memory, for local runs and tests."""

    def __init__(self, profiles: Iterable[str], active: Optional[str] = None):
        self._profiles = set(profiles)
        self._active = active
        self.switch_history = []

    def exists(self, name: str) -> bool:
        return name in self._profiles

    async def get_active(self) -> Optional[str]:
        return self._active

    async def switch_to(self, name: str) -> str:
        self.switch_history.append(name)
        if name == NO_PROFILE:
            self._active = None
            return "Profile cleared"
        if name not in self._profiles:
            return f"Profile '{name}' not found"
        self._active = name
        return f"Switched to {name}"


class ProfileLeaseManager:
    """
    Runs a coroutine while the dedicated profile is active.

    State machine: idle -> acquiring -> held -> releasing -> idle. A single
    in-progress flag serializes runs; a waiter that exceeds ``wait_timeout``
    assumes the flag is stale, clears it and proceeds.

    A run that forces its way in while an earlier lease is still held joins
    that lease: the original profile captured by the outermost run is kept and
    only the last run to leave restores it.
    """

    def __init__(
        self,
        profile_switch: ProfileSwitch,
        profile_name: str,
        wait_timeout: float = 5.0,
        poll_interval: float = 0.1,
        settle_delay: float = 0.2,
    ):
        self._switch = profile_switch
        self.profile_name = profile_name
        self._wait_timeout = wait_timeout
        self._poll_interval = poll_interval
        self._settle_delay = settle_delay

        self._in_progress = False
        self._state = LeaseState.IDLE
        self._holders = 0
        self._original_profile: Optional[str] = None

    @property
    def state(self) -> LeaseState:
        return self._state

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def profile_available(self) -> bool:
        return self._switch.exists(self.profile_name)

    async def with_lease(self, run: Callable[[], Awaitable[T]]) -> T:
        """
        Execute ``run`` under the dedicated profile.

        :param run: Zero-argument coroutine function
        :return: Whatever ``run`` returns
        :raises ProfileNotFoundError: The dedicated profile is not configured
        :raises ProfileSwitchError: The switch could not be verified
        """
        if not self.profile_available():
            raise ProfileNotFoundError(f'Profile "{self.profile_name}" not available')

        await self._wait_for_previous_lease()

        self._in_progress = True
        self._state = LeaseState.ACQUIRING
        outermost = self._holders == 0
        self._holders += 1

        try:
            if outermost:
                self._original_profile = await self._read_active_profile()
                logger.info(f'Original profile detected: "{self._original_profile or "None"}"')
            else:
                logger.warning(
                    f"Joining a lease still held by {self._holders - 1} run(s); keeping original "
                    f'profile "{self._original_profile or "None"}"'
                )
            logger.info(
                f'Switching from profile "{self._original_profile or "None"}" to "{self.profile_name}"'
            )
            switch_result = await self._switch.switch_to(self.profile_name)
            logger.debug(f"Profile switch result: {switch_result}")
            await asyncio.sleep(self._settle_delay)

            current = await self._switch.get_active()
            if current != self.profile_name:
                logger.error(
                    f'Profile switch failed! Expected "{self.profile_name}", got "{current}"'
                )
                raise ProfileSwitchError(
                    f'Profile switch failed: expected "{self.profile_name}", got "{current}"'
                )

            self._state = LeaseState.HELD
            return await run()
        finally:
            self._holders -= 1
            if self._holders > 0:
                logger.info(f"Profile lease still held by {self._holders} run(s), deferring restore")
            else:
                await self._release()

    async def _release(self) -> None:
        self._state = LeaseState.RELEASING
        try:
            await self._restore(self._original_profile)
        finally:
            self._original_profile = None
            self._in_progress = False
            self._state = LeaseState.IDLE
            logger.debug("Profile lease released")

    async def wait_until_idle(self, max_wait: float = 10.0, poll_interval: float = 0.05) -> bool:
        """
        Block until no lease is being acquired, held or released.

        :param max_wait: Seconds to wait before giving up
        :return: True when the lease went idle, False on timeout
        """
        deadline = time.monotonic() + max_wait
        while self._in_progress and time.monotonic() < deadline:
            await asyncio.sleep(min(poll_interval, max(deadline - time.monotonic(), 0)))

        if self._in_progress:
            logger.warning(f"Profile lease still in progress after {max_wait}s, not waiting any longer")
            return False
        return True

    def force_reset(self) -> None:
        """Emergency reset of a stuck in-progress flag."""
        logger.warning("Emergency reset of profile lease state")
        self._in_progress = False
        self._state = LeaseState.IDLE

    def status(self) -> Dict[str, object]:
        return {
            "profile_name": self.profile_name,
            "state": self._state.value,
            "in_progress": self._in_progress,
            "holders": self._holders,
        }

    async def _wait_for_previous_lease(self) -> None:
        deadline = time.monotonic() + self._wait_timeout
        while self._in_progress and time.monotonic() < deadline:
            logger.debug("Waiting for ongoing profile lease to complete...")
            await asyncio.sleep(self._poll_interval)

        if self._in_progress:
            logger.error("Profile lease wait timed out - forcing reset of stale lease flag")
            self._in_progress = False

    async def _read_active_profile(self) -> Optional[str]:
        try:
            return await self._switch.get_active()
        except Exception as exc:
            logger.warning(f"Could not read current profile, assuming None: {exc}")
            return None

    async def _restore(self, original_profile: Optional[str]) -> None:
        if original_profile and original_profile.strip() and original_profile != NO_PROFILE:
            target = original_profile
        else:
            target = NO_PROFILE

        try:
            logger.info(f'Restoring original profile "{target}"')
            restore_result = await self._switch.switch_to(target)
            logger.debug(f"Profile restore result: {restore_result}")
            await asyncio.sleep(self._settle_delay)

            final_profile = await self._switch.get_active()
            expected = None if target == NO_PROFILE else target
            if final_profile != expected:
                logger.error(
                    f'Profile restore mismatch: expected "{target}", got "{final_profile or "None"}"'
                )
            else:
                logger.info(f'Profile after restoration: "{final_profile or "None"}"')
        except Exception as exc:
            logger.warning(f"Failed to restore original profile: {exc}")
