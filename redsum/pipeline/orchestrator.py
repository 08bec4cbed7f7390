"""High-level orchestration: fetch, summarise, checkpoint, publish, clean up."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from loguru import logger

from redsum.activity.dates import parse_date_range
from redsum.activity.models import ActivityRecord, RunScope, SourceWindow
from redsum.activity.store import ActivityStore
from redsum.config import AppConfig
from redsum.summary.generator import SummaryGenerator
from redsum.summary.models import SummaryArtifact
from redsum.tracker.client import TrackerPublisher
from redsum.tracker.models import IssueRef, IssueTarget, PublishTarget, WikiRef

from .checkpoint import CheckpointInfo, CheckpointStore
from .targets import resolve_publish_target


class RunState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUMMARIZING = "summarizing"
    CHECKPOINTED = "checkpointed"
    PUBLISHING = "publishing"
    CLEANED = "cleaned"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(slots=True)
class RunCriteria:
    """Caller-supplied parameters of one pipeline run.

    ``from_date``/``to_date`` select an explicit window; otherwise
    ``window_days`` (or the configured default) is used.
    """

    window_days: int | None = None
    from_date: str | None = None
    to_date: str | None = None
    project_id: int | None = None
    author_login: str | None = None
    prompt_template: str | None = None
    title_prefix: str | None = None
    model: str | None = None
    include_token_usage: bool | None = None

    @property
    def scope(self) -> RunScope:
        return RunScope(project_id=self.project_id, author_login=self.author_login)


@dataclass(slots=True)
class RunReport:
    """Outcome of a single run, including the state it ended in."""

    state: RunState
    scope: RunScope
    window: SourceWindow | None = None
    record_count: int = 0
    artifact: SummaryArtifact | None = None
    target: PublishTarget | None = None
    published: IssueRef | WikiRef | None = None
    checkpoint_path: Path | None = None
    error: Exception | None = None
    history: list[RunState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state in (RunState.CLEANED, RunState.EMPTY)


class SummarizerOrchestrator:
    """Sequence the activity store, summary generator and tracker publisher."""

    def __init__(
        self,
        config: AppConfig,
        *,
        store: ActivityStore,
        generator: SummaryGenerator,
        publisher: TrackerPublisher,
        checkpoints: CheckpointStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._store = store
        self._generator = generator
        self._publisher = publisher
        self._checkpoints = checkpoints or CheckpointStore(config.summary.checkpoint_dir, clock=clock)
        self._clock = clock

    @classmethod
    def from_config(cls, config: AppConfig) -> "SummarizerOrchestrator":
        return cls(
            config,
            store=ActivityStore.from_config(config.database),
            generator=SummaryGenerator(config.llm),
            publisher=TrackerPublisher(config.tracker),
        )

    @property
    def checkpoints(self) -> CheckpointStore:
        return self._checkpoints

    def ensure_checkpoint_directory(self) -> Path:
        return self._checkpoints.ensure_directory()

    def close(self) -> None:
        self._store.close()

    # ------------------------------------------------------------------
    def run(self, criteria: RunCriteria) -> RunReport:
        """Execute one run. Pipeline faults end in ``FAILED`` rather than raising."""

        report = RunReport(state=RunState.IDLE, scope=criteria.scope)
        report.history.append(RunState.IDLE)
        try:
            report.window = self._resolve_window(criteria)

            self._advance(report, RunState.FETCHING)
            records = self._fetch(criteria, report.window)
            report.record_count = len(records)
            if not records:
                logger.info(
                    "No activity for {} ({}); nothing to summarise",
                    _scope_label(report.scope),
                    report.window.describe(),
                )
                self._advance(report, RunState.EMPTY)
                return report
            logger.info("Fetched {} activities for {}", len(records), _scope_label(report.scope))

            self._advance(report, RunState.SUMMARIZING)
            include_usage = (
                criteria.include_token_usage
                if criteria.include_token_usage is not None
                else self._config.summary.include_token_usage
            )
            report.artifact = self._generator.summarize(
                records,
                criteria.prompt_template,
                include_usage,
                model=criteria.model,
                window=report.window,
                scope=report.scope,
            )

            report.checkpoint_path = self._checkpoints.write(
                report.artifact, scope=report.scope, window=report.window
            )
            self._advance(report, RunState.CHECKPOINTED)

            self._advance(report, RunState.PUBLISHING)
            report.target = resolve_publish_target(
                report.scope,
                report.window,
                default_project_id=self._config.tracker.default_project_id,
                today=self._clock().date(),
                title_prefix=criteria.title_prefix,
            )
            report.published = self._publish(report.target, report.artifact.body)

            self._checkpoints.delete(report.checkpoint_path)
            self._advance(report, RunState.CLEANED)
            return report
        except Exception as exc:  # noqa: BLE001
            report.error = exc
            self._advance(report, RunState.FAILED)
            logger.error("Summary run failed: {}", exc)
            if report.checkpoint_path is not None:
                logger.error(
                    "The generated summary is preserved in {}; publish it manually or rerun later",
                    report.checkpoint_path,
                )
            return report

    def list_checkpoints(self) -> list[CheckpointInfo]:
        return self._checkpoints.list_checkpoints()

    def prune_checkpoints(self, older_than_days: int | None = None) -> list[Path]:
        days = self._config.summary.prune_after_days if older_than_days is None else older_than_days
        removed = self._checkpoints.prune(days)
        logger.info("Pruned {} checkpoint(s) older than {} days", len(removed), days)
        return removed

    # ------------------------------------------------------------------
    def _resolve_window(self, criteria: RunCriteria) -> SourceWindow:
        if criteria.from_date is not None or criteria.to_date is not None:
            if criteria.from_date is None or criteria.to_date is None:
                raise ValueError("Both from_date and to_date are required for a date range")
            start, end = parse_date_range(criteria.from_date, criteria.to_date)
            return SourceWindow.between(start, end)
        days = criteria.window_days if criteria.window_days is not None else self._config.summary.activity_days
        return SourceWindow.last_days(days)

    def _fetch(self, criteria: RunCriteria, window: SourceWindow) -> list[ActivityRecord]:
        if window.days is not None:
            return self._store.fetch_recent(
                window.days,
                project_id=criteria.project_id,
                author_login=criteria.author_login,
            )
        return self._store.fetch_by_date_range(
            f"{window.from_date:%Y-%m-%d}",
            f"{window.to_date:%Y-%m-%d}",
            project_id=criteria.project_id,
            author_login=criteria.author_login,
        )

    def _publish(self, target: PublishTarget, body: str) -> IssueRef | WikiRef:
        if isinstance(target, IssueTarget):
            issue = self._publisher.create_issue(target.project_id, target.subject, body)
            logger.info("Summary posted as issue: {}", target.subject)
            return issue
        page = self._publisher.upsert_wiki_page(target.project_id, target.title, body, target.change_note)
        logger.info("Summary posted to wiki: {}", target.title)
        return page

    @staticmethod
    def _advance(report: RunReport, state: RunState) -> None:
        logger.debug("Run state {} -> {}", report.state.value, state.value)
        report.state = state
        report.history.append(state)


def _scope_label(scope: RunScope) -> str:
    label = "all projects" if scope.project_id is None else f"project {scope.project_id}"
    if scope.author_login:
        label += f" (user {scope.author_login})"
    return label


__all__ = ["RunCriteria", "RunReport", "RunState", "SummarizerOrchestrator"]
