"""Table metadata for the subset of the Redmine schema that is queried."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text

metadata = MetaData()

projects = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("identifier", String(255)),
)

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("login", String(255), nullable=False),
)

issues = Table(
    "issues",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("project_id", Integer, nullable=False),
    Column("subject", String(255), nullable=False),
    Column("description", Text),
    Column("author_id", Integer, nullable=False),
    Column("created_on", DateTime),
)

journals = Table(
    "journals",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("journalized_id", Integer, nullable=False),
    Column("journalized_type", String(30), nullable=False),
    Column("user_id", Integer, nullable=False),
    Column("notes", Text),
    Column("created_on", DateTime, nullable=False),
)

repositories = Table(
    "repositories",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("project_id", Integer, nullable=False),
)

changesets = Table(
    "changesets",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("repository_id", Integer, nullable=False),
    Column("revision", String(255), nullable=False),
    Column("committer", String(255)),
    Column("user_id", Integer),
    Column("comments", Text),
    Column("committed_on", DateTime, nullable=False),
)


__all__ = ["changesets", "issues", "journals", "metadata", "projects", "repositories", "users"]
