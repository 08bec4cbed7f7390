from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
import sqlalchemy as sa

from redsum.activity import ActivityStore, ActivityType
from redsum.activity import schema
from redsum.errors import InvalidDateFormat, InvalidDateRange, StorageUnavailable

NOW = datetime(2025, 1, 20, 12, 0, 0)


@pytest.fixture()
def engine(tmp_path: Path) -> sa.Engine:
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'redmine.db'}")
    schema.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(
            schema.projects.insert(),
            [
                {"id": 1, "name": "Portal", "identifier": "portal"},
                {"id": 2, "name": "Backend", "identifier": "backend"},
            ],
        )
        conn.execute(
            schema.users.insert(),
            [
                {"id": 1, "login": "alice"},
                {"id": 2, "login": "bob"},
                {"id": 3, "login": "carol"},
            ],
        )
        conn.execute(
            schema.issues.insert(),
            [
                {
                    "id": 11,
                    "project_id": 1,
                    "subject": "Add CSV export",
                    "description": None,
                    "author_id": 2,
                    "created_on": datetime(2025, 1, 14, 9, 0, 0),
                },
                {
                    "id": 12,
                    "project_id": 1,
                    "subject": "Fix login redirect",
                    "description": "Users land on the dashboard after login",
                    "author_id": 1,
                    "created_on": datetime(2024, 12, 1, 8, 0, 0),
                },
                {
                    "id": 21,
                    "project_id": 2,
                    "subject": "Tune queries",
                    "description": "Slow report page",
                    "author_id": 3,
                    "created_on": datetime(2025, 1, 18, 8, 0, 0),
                },
            ],
        )
        conn.execute(
            schema.journals.insert(),
            [
                {
                    "id": 1,
                    "journalized_id": 12,
                    "journalized_type": "Issue",
                    "user_id": 1,
                    "notes": "Redirect fixed",
                    "created_on": datetime(2025, 1, 15, 14, 30, 0),
                },
                {
                    "id": 2,
                    "journalized_id": 21,
                    "journalized_type": "Issue",
                    "user_id": 2,
                    "notes": None,
                    "created_on": datetime(2025, 1, 19, 10, 0, 0),
                },
                {
                    "id": 3,
                    "journalized_id": 11,
                    "journalized_type": "Version",
                    "user_id": 2,
                    "notes": "not an issue journal",
                    "created_on": datetime(2025, 1, 16, 10, 0, 0),
                },
                {
                    "id": 4,
                    "journalized_id": 11,
                    "journalized_type": "Issue",
                    "user_id": 2,
                    "notes": "Kick-off",
                    "created_on": datetime(2025, 1, 1, 0, 0, 0),
                },
                {
                    "id": 5,
                    "journalized_id": 11,
                    "journalized_type": "Issue",
                    "user_id": 2,
                    "notes": "Late update",
                    "created_on": datetime(2025, 1, 14, 23, 59, 59),
                },
            ],
        )
        conn.execute(schema.repositories.insert(), [{"id": 1, "project_id": 2}])
        conn.execute(
            schema.changesets.insert(),
            [
                {
                    "id": 1,
                    "repository_id": 1,
                    "revision": "abc123",
                    "committer": "Carol <carol@example.com>",
                    "user_id": 3,
                    "comments": "\nRefactor connection pool\n\nLonger explanation",
                    "committed_on": datetime(2025, 1, 17, 16, 0, 0),
                },
                {
                    "id": 2,
                    "repository_id": 1,
                    "revision": "def456",
                    "committer": "ghost <ghost@example.com>",
                    "user_id": None,
                    "comments": "Hotfix",
                    "committed_on": datetime(2025, 1, 20, 11, 0, 0),
                },
            ],
        )
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine: sa.Engine) -> ActivityStore:
    return ActivityStore(engine, clock=lambda: NOW)


def test_fetch_recent_returns_issue_events_newest_first(store: ActivityStore) -> None:
    records = store.fetch_recent(7)

    assert [(r.activity_type, r.created_at) for r in records] == [
        (ActivityType.ISSUE_EDIT, datetime(2025, 1, 19, 10, 0, 0)),
        (ActivityType.ISSUE_ADD, datetime(2025, 1, 18, 8, 0, 0)),
        (ActivityType.ISSUE_EDIT, datetime(2025, 1, 15, 14, 30, 0)),
        (ActivityType.ISSUE_EDIT, datetime(2025, 1, 14, 23, 59, 59)),
        (ActivityType.ISSUE_ADD, datetime(2025, 1, 14, 9, 0, 0)),
    ]


def test_fetch_recent_leaves_out_changesets(store: ActivityStore) -> None:
    kinds = {r.activity_type for r in store.fetch_recent(30)}

    assert kinds == {ActivityType.ISSUE_ADD, ActivityType.ISSUE_EDIT}


def test_fetch_by_date_range_unions_all_sources_newest_first(store: ActivityStore) -> None:
    records = store.fetch_by_date_range("2025-01-13", "2025-01-20")

    assert [(r.activity_type, r.created_at) for r in records] == [
        (ActivityType.CHANGESET, datetime(2025, 1, 20, 11, 0, 0)),
        (ActivityType.ISSUE_EDIT, datetime(2025, 1, 19, 10, 0, 0)),
        (ActivityType.ISSUE_ADD, datetime(2025, 1, 18, 8, 0, 0)),
        (ActivityType.CHANGESET, datetime(2025, 1, 17, 16, 0, 0)),
        (ActivityType.ISSUE_EDIT, datetime(2025, 1, 15, 14, 30, 0)),
        (ActivityType.ISSUE_EDIT, datetime(2025, 1, 14, 23, 59, 59)),
        (ActivityType.ISSUE_ADD, datetime(2025, 1, 14, 9, 0, 0)),
    ]


def test_fetch_recent_maps_columns(store: ActivityStore) -> None:
    records = store.fetch_recent(7)
    by_key = {(r.activity_type, r.created_at): r for r in records}

    edit = by_key[(ActivityType.ISSUE_EDIT, datetime(2025, 1, 15, 14, 30, 0))]
    assert edit.issue_id == 12
    assert edit.issue_subject == "Fix login redirect"
    assert edit.issue_description == "Users land on the dashboard after login"
    assert edit.project_name == "Portal"
    assert edit.author == "alice"
    assert edit.comment == "Redirect fixed"

    empty_notes = by_key[(ActivityType.ISSUE_EDIT, datetime(2025, 1, 19, 10, 0, 0))]
    assert empty_notes.comment == ""

    added = by_key[(ActivityType.ISSUE_ADD, datetime(2025, 1, 14, 9, 0, 0))]
    assert added.author == "bob"
    assert added.comment == ""


def test_changesets_use_first_line_and_committer_fallback(store: ActivityStore) -> None:
    commits = [
        r
        for r in store.fetch_by_date_range("2025-01-13", "2025-01-20")
        if r.activity_type is ActivityType.CHANGESET
    ]

    assert [c.issue_id for c in commits] == [None, None]
    assert commits[0].author == "ghost <ghost@example.com>"
    assert commits[0].issue_subject == "Hotfix"
    assert commits[1].author == "carol"
    assert commits[1].issue_subject == "Refactor connection pool"
    assert commits[1].project_name == "Backend"


def test_fetch_recent_filters_by_project(store: ActivityStore) -> None:
    records = store.fetch_recent(7, project_id=2)

    assert {r.project_name for r in records} == {"Backend"}
    assert len(records) == 2


def test_fetch_recent_filters_by_author(store: ActivityStore) -> None:
    records = store.fetch_recent(7, author_login="carol")

    assert [(r.activity_type, r.issue_id) for r in records] == [(ActivityType.ISSUE_ADD, 21)]
    assert records[0].author == "carol"


def test_fetch_by_date_range_filters_changesets_by_committer(store: ActivityStore) -> None:
    records = store.fetch_by_date_range("2025-01-01", "2025-01-31", author_login="carol")

    assert sorted(r.activity_type.value for r in records) == ["changeset", "issue_add"]
    assert all(r.author == "carol" for r in records)


def test_fetch_recent_filters_by_project_and_author(store: ActivityStore) -> None:
    records = store.fetch_recent(7, project_id=1, author_login="bob")

    assert [(r.activity_type, r.issue_id) for r in records] == [
        (ActivityType.ISSUE_EDIT, 11),
        (ActivityType.ISSUE_ADD, 11),
    ]


def test_fetch_recent_window_is_relative_to_clock(engine: sa.Engine) -> None:
    store = ActivityStore(engine, clock=lambda: datetime(2025, 1, 20, 9, 0, 0))
    assert [r.created_at for r in store.fetch_recent(1)] == [datetime(2025, 1, 19, 10, 0, 0)]

    later = ActivityStore(engine, clock=lambda: datetime(2025, 3, 1))
    assert later.fetch_recent(7) == []


@pytest.mark.parametrize("days", [0, -3])
def test_fetch_recent_rejects_non_positive_window(store: ActivityStore, days: int) -> None:
    with pytest.raises(ValueError):
        store.fetch_recent(days)


def test_fetch_by_date_range_is_inclusive(store: ActivityStore) -> None:
    records = store.fetch_by_date_range("2025-01-01", "2025-01-14")

    assert [r.created_at for r in records] == [
        datetime(2025, 1, 14, 23, 59, 59),
        datetime(2025, 1, 14, 9, 0, 0),
        datetime(2025, 1, 1, 0, 0, 0),
    ]


def test_fetch_by_date_range_single_day(store: ActivityStore) -> None:
    records = store.fetch_by_date_range("2025-01-17", "2025-01-17")

    assert len(records) == 1
    assert records[0].activity_type is ActivityType.CHANGESET


def test_fetch_by_date_range_with_project(store: ActivityStore) -> None:
    records = store.fetch_by_date_range("2025-01-01", "2025-01-31", project_id=1)

    assert {r.project_name for r in records} == {"Portal"}
    assert len(records) == 4


@pytest.mark.parametrize("value", ["2025-1-1", "01-01-2025", "", "2025-02-30"])
def test_fetch_by_date_range_rejects_bad_format(store: ActivityStore, value: str) -> None:
    with pytest.raises(InvalidDateFormat):
        store.fetch_by_date_range(value, "2025-01-31")


def test_fetch_by_date_range_rejects_reversed_range(store: ActivityStore) -> None:
    with pytest.raises(InvalidDateRange):
        store.fetch_by_date_range("2025-02-01", "2025-01-01")


def test_identical_rows_collapse(engine: sa.Engine, store: ActivityStore) -> None:
    with engine.begin() as conn:
        conn.execute(
            schema.journals.insert(),
            {
                "id": 99,
                "journalized_id": 12,
                "journalized_type": "Issue",
                "user_id": 1,
                "notes": "Redirect fixed",
                "created_on": datetime(2025, 1, 15, 14, 30, 0),
            },
        )

    records = store.fetch_recent(7)

    matches = [r for r in records if r.created_at == datetime(2025, 1, 15, 14, 30, 0)]
    assert len(matches) == 1


def test_query_failure_maps_to_storage_unavailable(tmp_path: Path) -> None:
    empty = sa.create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    store = ActivityStore(empty, clock=lambda: NOW)

    with pytest.raises(StorageUnavailable):
        store.fetch_recent(7)
    empty.dispose()
