"""File access for the editor.

Reads and writes report their outcome as a :class:`FileResult` instead of
raising, so a caller can tell a failed write from a cancelled file dialog.
A ``None`` path stands for a dialog the user dismissed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from questgraph.models import utcnow
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)

FileStatus = Literal["success", "failure", "cancelled"]


@dataclass(frozen=True)
class FileResult:
    """Outcome of a file read or write.

    Attributes:
        status: "success", "failure", or "cancelled".
        path: The file involved, if one was chosen.
        data: File contents, for successful reads.
        error: Description of the failure.
    """

    status: FileStatus
    path: Path | None = None
    data: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def cancelled(cls) -> FileResult:
        return cls(status="cancelled")


def read_text_file(path: Path | None) -> FileResult:
    """Read a UTF-8 text file."""
    if path is None:
        return FileResult.cancelled()
    try:
        data = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.warning("file_read_failed", path=str(path), error=str(e))
        return FileResult(status="failure", path=path, error=str(e))
    return FileResult(status="success", path=path, data=data)


def write_text_file(path: Path | None, content: str) -> FileResult:
    """Write a UTF-8 text file, creating parent directories as needed."""
    if path is None:
        return FileResult.cancelled()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        log.warning("file_write_failed", path=str(path), error=str(e))
        return FileResult(status="failure", path=path, error=str(e))
    log.debug("file_written", path=str(path), chars=len(content))
    return FileResult(status="success", path=path)


@dataclass(frozen=True)
class RecentProject:
    """The last project opened or saved."""

    path: str
    name: str
    last_opened: datetime


def remember_recent_project(record_path: Path, project_path: Path, name: str) -> FileResult:
    """Record a project as the most recently used one.

    Args:
        record_path: Where the record lives (see ``EditorConfig.recent_project_path``).
        project_path: The project file.
        name: The project's display name.
    """
    record = {
        "path": str(project_path),
        "name": name,
        "lastOpened": utcnow().isoformat(),
    }
    return write_text_file(record_path, json.dumps(record, indent=2))


def load_recent_project(record_path: Path) -> RecentProject | None:
    """Read the recent-project record. Missing or unreadable records yield None."""
    if not record_path.exists():
        return None
    result = read_text_file(record_path)
    if not result.ok or result.data is None:
        return None
    try:
        data = json.loads(result.data)
        return RecentProject(
            path=str(data["path"]),
            name=str(data["name"]),
            last_opened=datetime.fromisoformat(data["lastOpened"]),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        log.warning("recent_project_invalid", path=str(record_path), error=str(e))
        return None
