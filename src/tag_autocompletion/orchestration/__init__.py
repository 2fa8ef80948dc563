"""
Run-level orchestration of tag resolution.
"""
from .batch_scheduler import BatchScheduler
from .tag_orchestrator import TagResolutionOrchestrator

__all__ = [
    "BatchScheduler",
    "TagResolutionOrchestrator",
]
