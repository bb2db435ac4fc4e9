"""Import and export of quests and projects as JSON."""

from __future__ import annotations

from questgraph.export.importer import parse_imported_quest, parse_project_file
from questgraph.export.json_exporter import (
    EXPORT_FORMAT_VERSION,
    dump_project,
    export_project,
    export_quest,
    to_json_string,
)

__all__ = [
    "EXPORT_FORMAT_VERSION",
    "dump_project",
    "export_project",
    "export_quest",
    "parse_imported_quest",
    "parse_project_file",
    "to_json_string",
]
