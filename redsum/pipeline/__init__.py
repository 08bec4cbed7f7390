"""Summary run orchestration and checkpoint management."""

from __future__ import annotations

from .checkpoint import CheckpointInfo, CheckpointStore
from .orchestrator import RunCriteria, RunReport, RunState, SummarizerOrchestrator
from .targets import resolve_publish_target

__all__ = [
    "CheckpointInfo",
    "CheckpointStore",
    "RunCriteria",
    "RunReport",
    "RunState",
    "SummarizerOrchestrator",
    "resolve_publish_target",
]
