"""Patch notes stored as a small JSON document in the data directory.

File shape::

    {"patchNotes": "...", "updated_at": "<iso8601>", "updated_by": "<username>"}
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog

from kingdom.exceptions import ValidationError

logger = structlog.get_logger()


@dataclass
class PatchNotes:
    content: str = ""
    updated_at: str | None = None
    updated_by: str | None = None


def read_patch_notes(path: Path) -> PatchNotes:
    """Load the current notes. A missing or corrupt file reads as empty."""
    if not path.exists():
        return PatchNotes()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("patch_notes_unreadable", path=str(path), error=str(e))
        return PatchNotes()
    if not isinstance(data, dict):
        return PatchNotes()
    return PatchNotes(
        content=data.get("patchNotes") or "",
        updated_at=data.get("updated_at"),
        updated_by=data.get("updated_by"),
    )


def write_patch_notes(path: Path, content: str, username: str) -> PatchNotes:
    """Replace the notes document.

    Raises:
        ValidationError: If the content is empty.
    """
    if not content or not content.strip():
        msg = "Patch notes content is required"
        raise ValidationError(msg)

    notes = PatchNotes(
        content=content,
        updated_at=datetime.now(timezone.utc).isoformat(),
        updated_by=username,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(
        json.dumps(
            {"patchNotes": notes.content, "updated_at": notes.updated_at, "updated_by": notes.updated_by},
            indent=2,
        ),
        encoding="utf-8",
    )
    os.replace(tmp, path)
    logger.info("patch_notes_updated", updated_by=username)
    return notes
