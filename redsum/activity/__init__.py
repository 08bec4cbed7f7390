"""Activity aggregation over the tracker database."""

from __future__ import annotations

from .dates import parse_date, parse_date_range
from .export import export_activities
from .models import ActivityRecord, ActivityType, RunScope, SourceWindow
from .store import ActivityStore

__all__ = [
    "ActivityRecord",
    "ActivityStore",
    "ActivityType",
    "RunScope",
    "SourceWindow",
    "export_activities",
    "parse_date",
    "parse_date_range",
]
