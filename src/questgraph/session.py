"""Editor session: the open project, its file, and unsaved-change tracking.

The session is the one stateful piece of the editor core. It holds the
current project and applies the pure document operations to it, marking
the project dirty on every change. Only a successful save clears the
dirty flag.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from questgraph.export import (
    dump_project,
    export_quest,
    parse_imported_quest,
    parse_project_file,
    to_json_string,
)
from questgraph.graph import document
from questgraph.graph.errors import QuestNotFoundError
from questgraph.observability.logging import get_logger
from questgraph.storage import FileResult, read_text_file, remember_recent_project, write_text_file

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from questgraph.models import Project, Quest

log = get_logger(__name__)


class EditorSession:
    """State of one editing session.

    Args:
        project: The open project, or None before one is created or opened.
        file_path: Where the project was last opened from or saved to.
        recent_record: Where to record the most recently used project,
            or None to skip recording.
    """

    def __init__(
        self,
        project: Project | None = None,
        file_path: Path | None = None,
        *,
        recent_record: Path | None = None,
    ) -> None:
        self.project = project
        self.file_path = file_path
        self.recent_record = recent_record
        self.current_quest_id: str | None = project.quests[0].id if project and project.quests else None
        self.is_dirty = False

    @classmethod
    def new(cls, name: str, *, recent_record: Path | None = None) -> EditorSession:
        """Start a session on a new, unsaved project."""
        session = cls(document.create_project(name), recent_record=recent_record)
        session.is_dirty = True
        return session

    def mark_dirty(self) -> None:
        self.is_dirty = True

    def _require_project(self) -> Project:
        if self.project is None:
            raise RuntimeError("No project is open")
        return self.project

    @property
    def current_quest(self) -> Quest | None:
        if self.project is None or self.current_quest_id is None:
            return None
        return self.project.get_quest(self.current_quest_id)

    def select_quest(self, quest_id: str) -> Quest:
        """Make a quest the current one.

        Raises:
            QuestNotFoundError: If the project has no quest with that id.
        """
        project = self._require_project()
        quest = project.get_quest(quest_id)
        if quest is None:
            raise QuestNotFoundError(quest_id, available=[q.id for q in project.quests])
        self.current_quest_id = quest_id
        return quest

    def set_project(self, project: Project) -> None:
        """Replace the open project with an edited version."""
        self.project = project
        if self.current_quest_id is not None and project.get_quest(self.current_quest_id) is None:
            self.current_quest_id = project.quests[0].id if project.quests else None
        self.mark_dirty()

    def create_quest(self, name: str) -> Quest:
        """Add an empty quest and make it current."""
        quest = document.create_quest(name)
        self.set_project(document.add_quest(self._require_project(), quest))
        self.current_quest_id = quest.id
        return quest

    def edit_quest(
        self,
        operation: Callable[..., Quest],
        *args: Any,
        **kwargs: Any,
    ) -> Quest:
        """Apply a quest-level document operation to the current quest.

        Example::

            session.edit_quest(document.delete_node, node_id)

        Raises:
            QuestNotFoundError: If no quest is current.
        """
        quest = self.current_quest
        if quest is None:
            raise QuestNotFoundError(
                self.current_quest_id or "",
                context="no current quest",
            )
        updated = operation(quest, *args, **kwargs)
        self.set_project(document.replace_quest(self._require_project(), updated))
        return updated

    def open(self, path: Path | None) -> FileResult:
        """Open a project file, replacing the current project on success."""
        result = read_text_file(path)
        if not result.ok or result.data is None:
            return result

        project = parse_project_file(result.data)
        if project is None:
            return FileResult(status="failure", path=path, error="Not a valid project file")

        self.project = project
        self.file_path = path
        self.current_quest_id = project.quests[0].id if project.quests else None
        self.is_dirty = False
        self._remember()
        log.info("project_opened", path=str(path), project=project.name)
        return result

    def save(self, path: Path | None = None) -> FileResult:
        """Save the project to ``path``, or to the file it came from.

        With neither a path nor a known file the save counts as cancelled.
        The dirty flag is cleared only when the write succeeds.
        """
        project = self._require_project()
        target = path or self.file_path
        result = write_text_file(target, dump_project(project))
        if result.ok:
            self.file_path = target
            self.is_dirty = False
            self._remember()
            log.info("project_saved", path=str(target), project=project.name)
        return result

    def _remember(self) -> None:
        if self.recent_record is None or self.file_path is None or self.project is None:
            return
        remember_recent_project(self.recent_record, self.file_path, self.project.name)

    def import_quest(self, text: str) -> Quest | None:
        """Import an exported quest into the project and make it current.

        Returns:
            The imported quest, or None if ``text`` is not a quest.
        """
        quest = parse_imported_quest(text)
        if quest is None:
            return None
        self.set_project(document.add_quest(self._require_project(), quest))
        self.current_quest_id = quest.id
        return quest

    def export_current_quest(self) -> str | None:
        """Export the current quest as JSON text, or None if none is current."""
        quest = self.current_quest
        if quest is None:
            return None
        return to_json_string(export_quest(quest))
