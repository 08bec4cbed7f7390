"""Data models shared by the activity store and its consumers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class ActivityType(str, Enum):
    ISSUE_ADD = "issue_add"
    ISSUE_EDIT = "issue_edit"
    CHANGESET = "changeset"


@dataclass(slots=True, frozen=True)
class ActivityRecord:
    """One normalised event (issue created, issue edited, code committed)."""

    issue_id: int | None
    issue_subject: str
    project_name: str
    author: str
    created_at: datetime
    activity_type: ActivityType
    comment: str = ""
    issue_description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "issue_subject": self.issue_subject,
            "issue_description": self.issue_description,
            "project_name": self.project_name,
            "author": self.author,
            "comment": self.comment,
            "created_at": self.created_at.isoformat(sep=" "),
            "activity_type": self.activity_type.value,
        }


@dataclass(slots=True, frozen=True)
class SourceWindow:
    """Time window covered by a run: a day count or an explicit date pair."""

    days: int | None = None
    from_date: date | None = None
    to_date: date | None = None

    def __post_init__(self) -> None:
        has_days = self.days is not None
        has_range = self.from_date is not None and self.to_date is not None
        if has_days == has_range:
            raise ValueError("SourceWindow needs either 'days' or both 'from_date' and 'to_date'")

    @classmethod
    def last_days(cls, days: int) -> "SourceWindow":
        return cls(days=days)

    @classmethod
    def between(cls, from_date: date, to_date: date) -> "SourceWindow":
        return cls(from_date=from_date, to_date=to_date)

    @property
    def is_range(self) -> bool:
        return self.days is None

    def describe(self) -> str:
        if self.is_range:
            return f"{self.from_date:%Y-%m-%d}から{self.to_date:%Y-%m-%d}"
        return f"過去{self.days}日間"

    def slug(self) -> str:
        if self.is_range:
            return f"{self.from_date:%Y-%m-%d}_to_{self.to_date:%Y-%m-%d}"
        return f"{self.days}days"


@dataclass(slots=True, frozen=True)
class RunScope:
    """Filtering dimension of a run: global or one project, optionally one author."""

    project_id: int | None = None
    author_login: str | None = None

    @property
    def is_global(self) -> bool:
        return self.project_id is None

    def slug(self) -> str:
        base = "all" if self.project_id is None else f"project{self.project_id}"
        if self.author_login:
            safe_login = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in self.author_login)
            base += f"_user-{safe_login}"
        return base


__all__ = ["ActivityRecord", "ActivityType", "RunScope", "SourceWindow"]
