"""Derive the tracker destination of a summary from its scope and window."""

from __future__ import annotations

from datetime import date

from redsum.activity.models import RunScope, SourceWindow
from redsum.tracker.models import IssueTarget, PublishTarget, WikiPageTarget

GLOBAL_WIKI_PREFIX = "ActivitySummary"
ISSUE_SUBJECT_TEMPLATE = "プロジェクトアクティビティ要約 ({date})"


def project_wiki_prefix(project_id: int) -> str:
    return f"Project{project_id}_ActivitySummary"


def wiki_title(prefix: str, window: SourceWindow, today: date) -> str:
    if window.is_range:
        return f"{prefix}_{window.from_date:%Y-%m-%d}_to_{window.to_date:%Y-%m-%d}"
    return f"{prefix}_{today:%Y-%m-%d}"


def change_note(scope: RunScope, window: SourceWindow) -> str:
    period = f"{window.describe()}まで" if window.is_range else window.describe()
    note = f"{period}のアクティビティ要約を自動生成"
    if scope.project_id is not None:
        note = f"プロジェクト{scope.project_id}の{note}"
    return note


def resolve_publish_target(
    scope: RunScope,
    window: SourceWindow,
    *,
    default_project_id: int,
    today: date,
    title_prefix: str | None = None,
) -> PublishTarget:
    """Pick the wiki page or issue that receives the summary.

    Global runs always go to a wiki page of ``default_project_id``. Project
    runs over a day window open an issue unless a title prefix is given;
    project runs over a date range always update a wiki page.
    """

    if scope.project_id is None:
        prefix = title_prefix or GLOBAL_WIKI_PREFIX
        return WikiPageTarget(
            project_id=default_project_id,
            title=wiki_title(prefix, window, today),
            change_note=change_note(scope, window),
        )

    if not window.is_range and not title_prefix:
        return IssueTarget(
            project_id=scope.project_id,
            subject=ISSUE_SUBJECT_TEMPLATE.format(date=f"{today:%Y-%m-%d}"),
        )

    prefix = title_prefix or project_wiki_prefix(scope.project_id)
    return WikiPageTarget(
        project_id=scope.project_id,
        title=wiki_title(prefix, window, today),
        change_note=change_note(scope, window),
    )


__all__ = [
    "GLOBAL_WIKI_PREFIX",
    "ISSUE_SUBJECT_TEMPLATE",
    "change_note",
    "project_wiki_prefix",
    "resolve_publish_target",
    "wiki_title",
]
