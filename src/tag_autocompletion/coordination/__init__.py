"""
Coordination primitives for one resolution run.

- CancellationToken: per-call cancellation handle
- OperationRegistry: in-flight oracle call bookkeeping with bounded drain
- RegistryTracker: one registry per run, listed for diagnostics
- ProfileLeaseManager: exclusive use of the dedicated connection profile
"""
from .cancellation import CancellationToken
from .operation_registry import OperationRegistry, RegistryTracker
from .profile_lease import (
    NO_PROFILE,
    InMemoryProfileSwitch,
    LeaseState,
    ProfileLeaseManager,
    ProfileSwitch,
)

__all__ = [
    "CancellationToken",
    "OperationRegistry",
    "RegistryTracker",
    "NO_PROFILE",
    "InMemoryProfileSwitch",
    "LeaseState",
    "ProfileLeaseManager",
    "ProfileSwitch",
]
