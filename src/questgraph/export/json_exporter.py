"""Portable JSON export formats.

Exported files wrap a quest or a whole project with a format version and
an export timestamp. Internal editor state (viewport, timestamps, tags,
project settings) is left out; node payloads are kept in full.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from questgraph.models import PROJECT_FORMAT_VERSION, utcnow
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from questgraph.models import Project, Quest

log = get_logger(__name__)

EXPORT_FORMAT_VERSION = PROJECT_FORMAT_VERSION

_QUEST_EXPORT_FIELDS = {"id", "name", "description", "nodes", "connections"}
_EVENT_EXPORT_FIELDS = {"id", "name", "description", "parameters"}


def _exported_at() -> str:
    return utcnow().isoformat().replace("+00:00", "Z")


def _quest_body(quest: Quest) -> dict[str, Any]:
    return quest.model_dump(
        mode="json",
        by_alias=True,
        exclude_none=True,
        include=_QUEST_EXPORT_FIELDS,
    )


def export_quest(quest: Quest) -> dict[str, Any]:
    """Wrap one quest in the portable export format.

    Returns:
        ``{"version", "exportedAt", "quest": {id, name, description?, nodes,
        connections}}`` with camelCase keys.
    """
    data = {
        "version": EXPORT_FORMAT_VERSION,
        "exportedAt": _exported_at(),
        "quest": _quest_body(quest),
    }
    log.debug("quest_exported", quest_id=quest.id, nodes=len(quest.nodes))
    return data


def export_project(project: Project) -> dict[str, Any]:
    """Wrap a project's quests and event definitions in the export format."""
    data = {
        "version": EXPORT_FORMAT_VERSION,
        "exportedAt": _exported_at(),
        "project": {
            "name": project.name,
            "quests": [_quest_body(q) for q in project.quests],
            "events": [
                e.model_dump(
                    mode="json",
                    by_alias=True,
                    exclude_none=True,
                    include=_EVENT_EXPORT_FIELDS,
                )
                for e in project.events
            ],
        },
    }
    log.debug(
        "project_exported",
        project_id=project.id,
        quests=len(project.quests),
        events=len(project.events),
    )
    return data


def to_json_string(data: dict[str, Any]) -> str:
    """Serialize export data as JSON with 2-space indentation."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def dump_project(project: Project) -> str:
    """Serialize a project as a persisted project file.

    Keeps every field, including ids, settings and ISO-8601 timestamps, so
    :func:`questgraph.export.parse_project_file` restores it unchanged.
    """
    return project.model_dump_json(by_alias=True, exclude_none=True, indent=2)
