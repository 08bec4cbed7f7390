"""Local checkpoint files that keep generated summaries until publishing succeeds."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from loguru import logger

from redsum.activity.models import RunScope, SourceWindow
from redsum.errors import CheckpointIoError
from redsum.summary.models import SummaryArtifact

_PREFIX = "summary_"
_SUFFIX = ".md"
_SEPARATOR = "---"


@dataclass(slots=True, frozen=True)
class CheckpointInfo:
    path: Path
    size: int
    modified_at: datetime


class CheckpointStore:
    """Write, list and prune summary checkpoints inside one directory.

    Construction has no filesystem side effects; call
    :meth:`ensure_directory` once before writing.
    """

    def __init__(self, directory: Path, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self.directory = Path(directory)
        self._clock = clock

    def ensure_directory(self) -> Path:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CheckpointIoError(f"Cannot create checkpoint directory {self.directory}: {exc}") from exc
        return self.directory

    def filename_for(self, scope: RunScope, window: SourceWindow, generated_at: datetime) -> str:
        return f"{_PREFIX}{scope.slug()}_{window.slug()}_{generated_at:%Y%m%d_%H%M%S_%f}{_SUFFIX}"

    def write(self, artifact: SummaryArtifact, *, scope: RunScope, window: SourceWindow) -> Path:
        """Persist ``artifact`` with its metadata header and return the new file path."""

        content = render_checkpoint(artifact, scope=scope, window=window)
        base = self.directory / self.filename_for(scope, window, artifact.generated_at)
        candidate = base
        counter = 1
        while True:
            try:
                with candidate.open("x", encoding="utf-8") as fp:
                    fp.write(content)
                break
            except FileExistsError:
                candidate = base.with_name(f"{base.stem}-{counter}{_SUFFIX}")
                counter += 1
            except OSError as exc:
                raise CheckpointIoError(f"Cannot write checkpoint {candidate}: {exc}") from exc
        logger.info("Summary checkpoint written to {}", candidate)
        return candidate

    def delete(self, path: Path) -> bool:
        """Remove one checkpoint; failures are logged and reported as ``False``."""

        try:
            Path(path).unlink()
        except FileNotFoundError:
            logger.warning("Checkpoint {} was already removed", path)
            return False
        except OSError as exc:
            logger.warning("Failed to delete checkpoint {}: {}", path, exc)
            return False
        logger.debug("Deleted checkpoint {}", path)
        return True

    def list_checkpoints(self) -> list[CheckpointInfo]:
        if not self.directory.exists():
            return []
        try:
            entries = []
            for path in self.directory.glob(f"{_PREFIX}*{_SUFFIX}"):
                if not path.is_file():
                    continue
                stat = path.stat()
                entries.append(
                    CheckpointInfo(
                        path=path,
                        size=stat.st_size,
                        modified_at=datetime.fromtimestamp(stat.st_mtime),
                    )
                )
        except OSError as exc:
            raise CheckpointIoError(f"Cannot list checkpoints in {self.directory}: {exc}") from exc
        return sorted(entries, key=lambda info: info.modified_at, reverse=True)

    def prune(self, older_than_days: int = 7) -> list[Path]:
        """Delete checkpoints last modified before ``now - older_than_days``."""

        if older_than_days < 0:
            raise ValueError("older_than_days must not be negative")
        cutoff = self._clock() - timedelta(days=older_than_days)
        removed: list[Path] = []
        for info in self.list_checkpoints():
            if info.modified_at < cutoff and self.delete(info.path):
                logger.info("Removed expired checkpoint {}", info.path.name)
                removed.append(info.path)
        return removed


def render_checkpoint(artifact: SummaryArtifact, *, scope: RunScope, window: SourceWindow) -> str:
    project_label = "全体" if scope.project_id is None else str(scope.project_id)
    header = [
        f"# 生成日時: {artifact.generated_at:%Y-%m-%d %H:%M:%S}",
        f"# 対象期間: {window.describe()}",
        f"# プロジェクトID: {project_label}",
    ]
    if scope.author_login:
        header.append(f"# ユーザー: {scope.author_login}")
    return "\n".join([*header, _SEPARATOR, "", artifact.body])


__all__ = ["CheckpointInfo", "CheckpointStore", "render_checkpoint"]
