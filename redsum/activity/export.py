"""JSON export of fetched activity records."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from loguru import logger

from .models import ActivityRecord, RunScope, SourceWindow


def default_export_name(scope: RunScope, window: SourceWindow, *, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"activities_{scope.slug()}_{window.slug()}_{stamp}.json"


def export_activities(
    records: Sequence[ActivityRecord],
    *,
    scope: RunScope,
    window: SourceWindow,
    directory: Path,
    output_path: Path | None = None,
    now: datetime | None = None,
) -> Path:
    """Write ``records`` to a JSON document and return its path."""

    generated_at = now or datetime.now()
    target = output_path or directory / default_export_name(scope, window, now=generated_at)
    target.parent.mkdir(parents=True, exist_ok=True)

    document = {
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "window": window.describe(),
        "project_id": scope.project_id,
        "author": scope.author_login,
        "count": len(records),
        "activities": [record.to_dict() for record in records],
    }
    target.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Exported {} activity records to {}", len(records), target)
    return target


__all__ = ["default_export_name", "export_activities"]
