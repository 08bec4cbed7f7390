"""Read-only access to tracker activity stored in the Redmine database."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

import sqlalchemy as sa
from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from redsum.config.database import DatabaseConfig
from redsum.errors import StorageUnavailable

from .dates import parse_date_range, range_bounds
from .models import ActivityRecord, ActivityType
from .schema import changesets, issues, journals, projects, repositories, users


class ActivityStore:
    """Produce normalised activity records from issues, journals and changesets.

    Every query is assembled with the SQLAlchemy expression language, so the
    optional project, author and date filters are always bound parameters.
    Sub-queries are combined with a set-based ``UNION``: identical rows
    coming from different sources collapse into one record. Changesets are
    part of date-range queries only.
    """

    def __init__(self, engine: Engine, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._engine = engine
        self._clock = clock

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "ActivityStore":
        engine = sa.create_engine(config.effective_url, echo=config.echo, future=True)
        return cls(engine)

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    def fetch_recent(
        self,
        window_days: int,
        project_id: int | None = None,
        author_login: str | None = None,
    ) -> list[ActivityRecord]:
        """Return activity newer than ``now - window_days`` (evaluated per call)."""

        if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days <= 0:
            raise ValueError(f"window_days must be a positive integer, got {window_days!r}")
        since = self._clock() - timedelta(days=window_days)
        logger.debug(
            "Fetching activity since {} (project={}, author={})",
            since,
            project_id,
            author_login,
        )
        return self._fetch(
            since=since,
            until=None,
            project_id=project_id,
            author_login=author_login,
            include_changesets=False,
        )

    def fetch_by_date_range(
        self,
        from_date: str,
        to_date: str,
        project_id: int | None = None,
        author_login: str | None = None,
    ) -> list[ActivityRecord]:
        """Return activity between ``from_date 00:00:00`` and ``to_date 23:59:59`` inclusive."""

        start, end = parse_date_range(from_date, to_date)
        since, until = range_bounds(start, end)
        logger.debug(
            "Fetching activity between {} and {} (project={}, author={})",
            since,
            until,
            project_id,
            author_login,
        )
        return self._fetch(
            since=since,
            until=until,
            project_id=project_id,
            author_login=author_login,
            include_changesets=True,
        )

    # ------------------------------------------------------------------
    def _fetch(
        self,
        *,
        since: datetime,
        until: datetime | None,
        project_id: int | None,
        author_login: str | None,
        include_changesets: bool,
    ) -> list[ActivityRecord]:
        statement = build_activity_query(
            since=since,
            until=until,
            project_id=project_id,
            author_login=author_login,
            include_changesets=include_changesets,
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(statement).mappings().all()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(f"Activity query failed: {exc}") from exc

        records = [_row_to_record(row) for row in rows]
        logger.info("Fetched {} activity records", len(records))
        return records


def build_activity_query(
    *,
    since: datetime,
    until: datetime | None = None,
    project_id: int | None = None,
    author_login: str | None = None,
    include_changesets: bool = False,
) -> sa.Select:
    """Compose the activity union ordered by ``created_at`` descending.

    Changesets join the union only when ``include_changesets`` is set, which
    the date-range query does.
    """

    def _bounded(column: sa.ColumnElement[Any]) -> list[sa.ColumnElement[bool]]:
        clauses = [column >= since]
        if until is not None:
            clauses.append(column <= until)
        return clauses

    # (1) journal entries on issues
    edit_conditions = [journals.c.journalized_type == "Issue", *_bounded(journals.c.created_on)]
    if project_id is not None:
        edit_conditions.append(projects.c.id == project_id)
    if author_login is not None:
        edit_conditions.append(users.c.login == author_login)
    issue_edits = (
        sa.select(
            issues.c.id.label("issue_id"),
            issues.c.subject.label("issue_subject"),
            issues.c.description.label("issue_description"),
            projects.c.name.label("project_name"),
            users.c.login.label("author"),
            sa.func.coalesce(journals.c.notes, "").label("comment"),
            journals.c.created_on.label("created_at"),
            sa.literal(ActivityType.ISSUE_EDIT.value).label("activity_type"),
        )
        .select_from(
            journals.join(issues, journals.c.journalized_id == issues.c.id)
            .join(projects, issues.c.project_id == projects.c.id)
            .join(users, journals.c.user_id == users.c.id)
        )
        .where(*edit_conditions)
    )

    # (2) issue creations
    add_conditions = _bounded(issues.c.created_on)
    if project_id is not None:
        add_conditions.append(projects.c.id == project_id)
    if author_login is not None:
        add_conditions.append(users.c.login == author_login)
    issue_adds = (
        sa.select(
            issues.c.id.label("issue_id"),
            issues.c.subject.label("issue_subject"),
            issues.c.description.label("issue_description"),
            projects.c.name.label("project_name"),
            users.c.login.label("author"),
            sa.literal("").label("comment"),
            issues.c.created_on.label("created_at"),
            sa.literal(ActivityType.ISSUE_ADD.value).label("activity_type"),
        )
        .select_from(
            issues.join(users, issues.c.author_id == users.c.id).join(
                projects, issues.c.project_id == projects.c.id
            )
        )
        .where(*add_conditions)
    )

    selects = [issue_edits, issue_adds]

    # (3) source-control changesets, date-range queries only; the subject is
    # trimmed to the first line later
    if include_changesets:
        committer = sa.func.coalesce(users.c.login, changesets.c.committer, "")
        commit_conditions = _bounded(changesets.c.committed_on)
        if project_id is not None:
            commit_conditions.append(projects.c.id == project_id)
        if author_login is not None:
            commit_conditions.append(committer == author_login)
        commits = (
            sa.select(
                sa.cast(sa.null(), sa.Integer).label("issue_id"),
                sa.func.coalesce(changesets.c.comments, "").label("issue_subject"),
                changesets.c.comments.label("issue_description"),
                projects.c.name.label("project_name"),
                committer.label("author"),
                sa.literal("").label("comment"),
                changesets.c.committed_on.label("created_at"),
                sa.literal(ActivityType.CHANGESET.value).label("activity_type"),
            )
            .select_from(
                changesets.join(repositories, changesets.c.repository_id == repositories.c.id)
                .join(projects, repositories.c.project_id == projects.c.id)
                .outerjoin(users, changesets.c.user_id == users.c.id)
            )
            .where(*commit_conditions)
        )
        selects.append(commits)

    combined = sa.union(*selects).subquery("activities")
    return sa.select(combined).order_by(combined.c.created_at.desc())


def _row_to_record(row: Mapping[str, Any]) -> ActivityRecord:
    activity_type = ActivityType(row["activity_type"])
    subject = row["issue_subject"] or ""
    if activity_type is ActivityType.CHANGESET:
        subject = _first_line(subject)
    issue_id = row["issue_id"]
    return ActivityRecord(
        issue_id=int(issue_id) if issue_id is not None else None,
        issue_subject=subject,
        issue_description=row["issue_description"],
        project_name=row["project_name"] or "",
        author=row["author"] or "",
        comment=row["comment"] or "",
        created_at=_coerce_datetime(row["created_at"]),
        activity_type=activity_type,
    )


def _first_line(message: str) -> str:
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _coerce_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise StorageUnavailable(f"Unexpected created_at value from database: {value!r}")


__all__ = ["ActivityStore", "build_activity_query"]
