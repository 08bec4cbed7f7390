"""Value objects exchanged with the issue tracker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(slots=True, frozen=True)
class ProjectInfo:
    id: int
    identifier: str
    name: str


@dataclass(slots=True, frozen=True)
class IssueRef:
    id: int | None
    subject: str


@dataclass(slots=True, frozen=True)
class WikiRef:
    project_identifier: str
    title: str
    version: int | None = None
    created: bool = False


@dataclass(slots=True, frozen=True)
class ConnectivityResult:
    ok: bool
    message: str


@dataclass(slots=True, frozen=True)
class ProbeResult:
    url: str
    ok: bool
    status: int | None = None
    error: str | None = None
    elapsed_ms: float | None = None


@dataclass(slots=True, frozen=True)
class WikiPageTarget:
    project_id: int
    title: str
    change_note: str


@dataclass(slots=True, frozen=True)
class IssueTarget:
    project_id: int
    subject: str


PublishTarget = Union[WikiPageTarget, IssueTarget]


__all__ = [
    "ConnectivityResult",
    "IssueRef",
    "IssueTarget",
    "ProbeResult",
    "ProjectInfo",
    "PublishTarget",
    "WikiPageTarget",
    "WikiRef",
]
