"""Issue tracker publishing package."""

from __future__ import annotations

from .client import TrackerPublisher
from .models import (
    ConnectivityResult,
    IssueRef,
    IssueTarget,
    ProbeResult,
    ProjectInfo,
    PublishTarget,
    WikiPageTarget,
    WikiRef,
)

__all__ = [
    "ConnectivityResult",
    "IssueRef",
    "IssueTarget",
    "ProbeResult",
    "ProjectInfo",
    "PublishTarget",
    "TrackerPublisher",
    "WikiPageTarget",
    "WikiRef",
]
