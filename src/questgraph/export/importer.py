"""Import of exported quests and persisted project files.

Both parsers accept untrusted text and never raise: malformed JSON or an
unexpected shape is logged as a warning and reported as ``None``.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from questgraph.graph.document import new_id
from questgraph.models import Project, Quest, QuestNode, Viewport, utcnow
from questgraph.observability.logging import get_logger

log = get_logger(__name__)

_NODES_ADAPTER: TypeAdapter[list[QuestNode]] = TypeAdapter(list[QuestNode])


def _load_json_object(text: str, what: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        log.warning("import_invalid_json", kind=what, error=str(e))
        return None
    if not isinstance(data, dict):
        log.warning("import_unexpected_shape", kind=what, found=type(data).__name__)
        return None
    return data


def parse_imported_quest(text: str) -> Quest | None:
    """Parse an exported quest (wrapped or bare) into a fresh quest.

    The quest, every node, every option and every connection get new ids;
    connection endpoints and option references are rewritten to match.
    Named outputs and target handles are kept. Connections whose endpoints
    are not among the imported nodes are dropped.

    Args:
        text: JSON text of an export wrapper or a bare quest object.

    Returns:
        The imported quest, named ``"<name> (Imported)"`` with a reset
        viewport and fresh timestamps, or None if the text is not a quest.
    """
    data = _load_json_object(text, "quest")
    if data is None:
        return None

    quest_data = data["quest"] if isinstance(data.get("quest"), dict) else data
    raw_nodes = quest_data.get("nodes")
    if not isinstance(raw_nodes, list) or not all(isinstance(n, dict) for n in raw_nodes):
        log.warning("import_missing_nodes", kind="quest")
        return None

    node_ids: dict[str, str] = {}
    option_ids: dict[str, str] = {}
    rekeyed_nodes: list[dict[str, Any]] = []
    for raw in raw_nodes:
        node = dict(raw)
        if "id" in node:
            fresh = new_id()
            node_ids[str(node["id"])] = fresh
            node["id"] = fresh
        options = node.get("options")
        if isinstance(options, list):
            node["options"] = [_rekey_option(opt, option_ids) for opt in options]
        rekeyed_nodes.append(node)

    try:
        nodes = _NODES_ADAPTER.validate_python(rekeyed_nodes)
    except ValidationError as e:
        log.warning("import_invalid_nodes", kind="quest", errors=e.error_count())
        return None

    connections: list[dict[str, Any]] = []
    dropped = 0
    raw_connections = quest_data.get("connections")
    for raw in raw_connections if isinstance(raw_connections, list) else []:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        source = node_ids.get(str(raw.get("sourceNodeId")))
        target = node_ids.get(str(raw.get("targetNodeId")))
        if source is None or target is None:
            dropped += 1
            continue
        conn = {**raw, "id": new_id(), "sourceNodeId": source, "targetNodeId": target}
        option_ref = raw.get("sourceOptionId")
        if option_ref is not None:
            conn["sourceOptionId"] = option_ids.get(str(option_ref), option_ref)
        connections.append(conn)

    if dropped:
        log.warning("import_connections_dropped", dropped=dropped)

    name = quest_data.get("name") or "Quest"
    try:
        quest = Quest.model_validate(
            {
                "id": new_id(),
                "name": f"{name} (Imported)",
                "description": quest_data.get("description"),
                "nodes": nodes,
                "connections": connections,
                "viewport": Viewport(),
                "createdAt": utcnow(),
                "updatedAt": utcnow(),
                "tags": quest_data.get("tags"),
            }
        )
    except ValidationError as e:
        log.warning("import_invalid_quest", errors=e.error_count())
        return None

    log.info(
        "quest_imported",
        quest_id=quest.id,
        nodes=len(quest.nodes),
        connections=len(quest.connections),
    )
    return quest


def _rekey_option(option: Any, option_ids: dict[str, str]) -> Any:
    if not isinstance(option, dict) or "id" not in option:
        return option
    fresh = new_id()
    option_ids[str(option["id"])] = fresh
    return {**option, "id": fresh}


def parse_project_file(text: str) -> Project | None:
    """Parse a persisted project file or an exported project wrapper.

    The exported wrapper (``{"project": {"quests", "events"}}``) carries no
    ids, settings or timestamps for the project itself; a fresh id, default
    settings and the current time are filled in. The persisted shape keeps
    its own values, with defaults for anything absent. Quest, node and
    option ids are kept in both cases.

    Returns:
        The project, or None if the text is not a project.
    """
    data = _load_json_object(text, "project")
    if data is None:
        return None

    wrapped = data.get("project")
    if isinstance(wrapped, dict) and "quests" in wrapped:
        payload: dict[str, Any] = {
            "id": new_id(),
            "name": wrapped.get("name") or "Imported Project",
            "quests": wrapped.get("quests"),
            "events": wrapped.get("events") or [],
        }
    elif "quests" in data:
        payload = {**data}
        payload.setdefault("id", new_id())
        payload.setdefault("name", "Untitled Project")
        payload.setdefault("events", [])
    else:
        log.warning("import_unexpected_shape", kind="project", keys=sorted(data))
        return None

    try:
        project = Project.model_validate(payload)
    except ValidationError as e:
        log.warning("import_invalid_project", errors=e.error_count())
        return None

    log.info(
        "project_loaded",
        project_id=project.id,
        quests=len(project.quests),
        events=len(project.events),
    )
    return project

