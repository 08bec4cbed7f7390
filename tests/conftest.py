"""Pytest helpers for path configuration and shared fixtures."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from redsum.activity.models import ActivityRecord, ActivityType  # noqa: E402


@pytest.fixture()
def sample_records() -> list[ActivityRecord]:
    """Two issue events in one project, newest first."""

    return [
        ActivityRecord(
            issue_id=12,
            issue_subject="Fix login redirect",
            project_name="Portal",
            author="alice",
            created_at=datetime(2025, 1, 15, 14, 30, 0),
            activity_type=ActivityType.ISSUE_EDIT,
            comment="Redirect now keeps the original path",
            issue_description="Users land on the dashboard after login",
        ),
        ActivityRecord(
            issue_id=11,
            issue_subject="Add CSV export",
            project_name="Portal",
            author="bob",
            created_at=datetime(2025, 1, 14, 9, 0, 0),
            activity_type=ActivityType.ISSUE_ADD,
        ),
    ]
