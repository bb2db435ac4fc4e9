"""Document operations: constructors, partial updates, and deletes.

Every operation takes a model and returns a new one; inputs are never
mutated. Quest-level operations refresh the quest's ``updated_at``;
project-level operations refresh the project's ``updated_at``. Callers that
edit a quest inside a project write it back with :func:`replace_quest`.

References that do not resolve raise the errors in
:mod:`questgraph.graph.errors`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from questgraph.graph.errors import (
    ConnectionEndpointError,
    ConnectionNotFoundError,
    DuplicateIdError,
    EventNotFoundError,
    NodeNotFoundError,
    NodeTypeError,
    QuestNotFoundError,
)
from questgraph.models import (
    AndNode,
    ChoiceNode,
    Connection,
    DialogueNode,
    EndNode,
    EventNode,
    GlobalEvent,
    IfNode,
    NodeType,
    Option,
    OrNode,
    Position,
    Project,
    Quest,
    QuestNode,
    StartNode,
    has_binary_outputs,
    has_options,
    node_options,
    utcnow,
)
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

log = get_logger(__name__)

_NODE_ADAPTER: TypeAdapter[QuestNode] = TypeAdapter(QuestNode)
_IMMUTABLE_NODE_FIELDS = frozenset({"id", "type"})


def new_id() -> str:
    """Generate a fresh unique identifier."""
    return str(uuid4())


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def create_project(name: str) -> Project:
    """Create an empty project with default settings."""
    return Project(id=new_id(), name=name)


def create_quest(name: str) -> Quest:
    """Create an empty quest."""
    return Quest(id=new_id(), name=name, description="", tags=[])


def create_node(node_type: NodeType | str, position: Position | None = None) -> QuestNode:
    """Create a node of the given type from its default template.

    Args:
        node_type: One of the :class:`NodeType` values.
        position: Canvas position; defaults to the origin.

    Returns:
        New node with a fresh id (and fresh option ids where it has options).

    Raises:
        ValueError: If ``node_type`` is not a known node type.
    """
    kind = NodeType(node_type)
    pos = position or Position()
    node_id = new_id()

    if kind is NodeType.START:
        return StartNode(
            id=node_id,
            position=pos,
            title="Quest Start",
            description="Enter quest description...",
            options=[Option(id=new_id(), label="Accept")],
        )
    if kind is NodeType.DIALOGUE:
        return DialogueNode(
            id=node_id,
            position=pos,
            speaker="",
            text="Enter dialogue text...",
            options=[Option(id=new_id(), label="Continue")],
        )
    if kind is NodeType.CHOICE:
        return ChoiceNode(
            id=node_id,
            position=pos,
            prompt="What do you do?",
            options=[Option(id=new_id(), label="Option 1"), Option(id=new_id(), label="Option 2")],
        )
    if kind is NodeType.EVENT:
        return EventNode(id=node_id, position=pos, event_id="", action="TRIGGER")
    if kind is NodeType.IF:
        return IfNode(id=node_id, position=pos, condition="")
    if kind is NodeType.AND:
        return AndNode(id=node_id, position=pos, input_count=2)
    if kind is NodeType.OR:
        return OrNode(id=node_id, position=pos, input_count=2)
    return EndNode(
        id=node_id,
        position=pos,
        title="Quest Complete",
        outcome="SUCCESS",
        description="",
    )


def create_event(name: str, description: str | None = None) -> GlobalEvent:
    """Create a global event definition with no parameters."""
    return GlobalEvent(id=new_id(), name=name, description=description)


# ---------------------------------------------------------------------------
# Project operations
# ---------------------------------------------------------------------------


def _touch_project(project: Project, **changes: Any) -> Project:
    return project.model_copy(update={**changes, "updated_at": utcnow()})


def rename_project(project: Project, name: str) -> Project:
    return _touch_project(project, name=name)


def add_quest(project: Project, quest: Quest) -> Project:
    """Append a quest (new or imported) to the project."""
    return _touch_project(project, quests=[*project.quests, quest])


def _require_quest(project: Project, quest_id: str) -> Quest:
    quest = project.get_quest(quest_id)
    if quest is None:
        raise QuestNotFoundError(quest_id, available=[q.id for q in project.quests])
    return quest


def replace_quest(project: Project, quest: Quest) -> Project:
    """Write back an edited quest, matched by id.

    Raises:
        QuestNotFoundError: If the project has no quest with that id.
    """
    _require_quest(project, quest.id)
    return _touch_project(
        project,
        quests=[quest if q.id == quest.id else q for q in project.quests],
    )


def update_quest(project: Project, quest_id: str, **changes: Any) -> Project:
    """Apply a partial update to one quest.

    Raises:
        QuestNotFoundError: If the project has no quest with that id.
    """
    quest = _require_quest(project, quest_id)
    return replace_quest(project, quest.model_copy(update={**changes, "updated_at": utcnow()}))


def delete_quest(project: Project, quest_id: str) -> Project:
    """Remove a quest. Its nodes and connections go with it."""
    _require_quest(project, quest_id)
    return _touch_project(project, quests=[q for q in project.quests if q.id != quest_id])


def _require_event(project: Project, event_id: str) -> GlobalEvent:
    event = project.get_event(event_id)
    if event is None:
        raise EventNotFoundError(event_id, available=[e.id for e in project.events])
    return event


def add_event(project: Project, event: GlobalEvent) -> Project:
    return _touch_project(project, events=[*project.events, event])


def update_event(project: Project, event_id: str, **changes: Any) -> Project:
    """Apply a partial update to one global event.

    Raises:
        EventNotFoundError: If the project has no event with that id.
    """
    event = _require_event(project, event_id)
    updated = event.model_copy(update={**changes, "updated_at": utcnow()})
    return _touch_project(
        project,
        events=[updated if e.id == event_id else e for e in project.events],
    )


def delete_event(project: Project, event_id: str) -> Project:
    _require_event(project, event_id)
    return _touch_project(project, events=[e for e in project.events if e.id != event_id])


def toggle_auto_save(project: Project) -> Project:
    settings = project.settings.model_copy(update={"auto_save": not project.settings.auto_save})
    return _touch_project(project, settings=settings)


# ---------------------------------------------------------------------------
# Quest operations
# ---------------------------------------------------------------------------


def _touch_quest(quest: Quest, **changes: Any) -> Quest:
    return quest.model_copy(update={**changes, "updated_at": utcnow()})


def _require_node(quest: Quest, node_id: str) -> QuestNode:
    node = quest.get_node(node_id)
    if node is None:
        raise NodeNotFoundError(node_id, available=[n.id for n in quest.nodes])
    return node


def _check_ids_free(quest: Quest, node: QuestNode, *, replacing: str | None = None) -> None:
    others = [n for n in quest.nodes if n.id != replacing]
    if any(n.id == node.id for n in others):
        raise DuplicateIdError("Node", node.id)
    taken = {o.id for n in others for o in node_options(n)}
    for option in node_options(node):
        if option.id in taken:
            raise DuplicateIdError("Option", option.id)
        taken.add(option.id)


def add_node(quest: Quest, node: QuestNode) -> Quest:
    """Append a node to the quest.

    Raises:
        DuplicateIdError: If the node's id or one of its option ids is
            already used in the quest.
    """
    _check_ids_free(quest, node)
    return _touch_quest(quest, nodes=[*quest.nodes, node])


def update_node(quest: Quest, node_id: str, **changes: Any) -> Quest:
    """Apply a partial update to one node.

    Changes use Python field names and are validated against the node's
    variant.

    Raises:
        NodeNotFoundError: If the quest has no node with that id.
        NodeTypeError: If a change targets ``id``/``type``, names a field the
            variant does not have, or fails validation.
        DuplicateIdError: If new options reuse an option id of the quest.
    """
    node = _require_node(quest, node_id)

    immutable = _IMMUTABLE_NODE_FIELDS & changes.keys()
    if immutable:
        raise NodeTypeError(node_id, node.type, f"cannot change {', '.join(sorted(immutable))}")
    unknown = changes.keys() - type(node).model_fields.keys()
    if unknown:
        raise NodeTypeError(node_id, node.type, f"unknown field(s) {', '.join(sorted(unknown))}")

    try:
        updated = _NODE_ADAPTER.validate_python({**node.model_dump(), **changes})
    except ValidationError as e:
        raise NodeTypeError(node_id, node.type, str(e)) from e
    _check_ids_free(quest, updated, replacing=node_id)

    return _touch_quest(quest, nodes=[updated if n.id == node_id else n for n in quest.nodes])


def delete_node(quest: Quest, node_id: str) -> Quest:
    """Remove a node and every connection entering or leaving it.

    Raises:
        NodeNotFoundError: If the quest has no node with that id.
    """
    _require_node(quest, node_id)
    connections = [
        c for c in quest.connections if c.source_node_id != node_id and c.target_node_id != node_id
    ]
    log.debug(
        "node_deleted",
        node_id=node_id,
        connections_removed=len(quest.connections) - len(connections),
    )
    return _touch_quest(
        quest,
        nodes=[n for n in quest.nodes if n.id != node_id],
        connections=connections,
    )


def clone_node(node: QuestNode, position: Position) -> QuestNode:
    """Copy a node with a fresh id, fresh option ids, and a new position."""
    update: dict[str, Any] = {"id": new_id(), "position": position}
    if has_options(node):
        update["options"] = [opt.model_copy(update={"id": new_id()}) for opt in node.options]
    return node.model_copy(update=update, deep=True)


def paste_node(quest: Quest, node: QuestNode, position: Position) -> tuple[Quest, QuestNode]:
    """Paste a copy of ``node`` into the quest.

    Returns:
        The updated quest and the pasted node.
    """
    pasted = clone_node(node, position)
    return add_node(quest, pasted), pasted


def add_connection(
    quest: Quest,
    source_node_id: str,
    target_node_id: str,
    *,
    source_option_id: str | None = None,
    source_output: str | None = None,
    target_handle: str | None = None,
) -> tuple[Quest, Connection]:
    """Connect an output port of one node to another node.

    Raises:
        ConnectionEndpointError: If an endpoint is missing, both port fields
            are given, the option does not belong to the source, or the named
            output does not exist on the source.

    Returns:
        The updated quest and the new connection.
    """
    source = quest.get_node(source_node_id)
    target = quest.get_node(target_node_id)
    if source is None or target is None:
        missing = [nid for nid, n in ((source_node_id, source), (target_node_id, target)) if n is None]
        raise ConnectionEndpointError(
            source_node_id, target_node_id, f"node(s) not found: {', '.join(missing)}"
        )
    if source_option_id and source_output:
        raise ConnectionEndpointError(
            source_node_id, target_node_id, "give either an option or a named output, not both"
        )
    if source_option_id and source_option_id not in {o.id for o in node_options(source)}:
        raise ConnectionEndpointError(
            source_node_id, target_node_id, f"option '{source_option_id}' is not on the source"
        )
    if source_output and not (has_binary_outputs(source) and source_output in ("true", "false")):
        raise ConnectionEndpointError(
            source_node_id, target_node_id, f"source has no '{source_output}' output"
        )

    connection = Connection(
        id=new_id(),
        source_node_id=source_node_id,
        target_node_id=target_node_id,
        source_option_id=source_option_id,
        source_output=source_output,
        target_handle=target_handle,
    )
    return _touch_quest(quest, connections=[*quest.connections, connection]), connection


def delete_connection(quest: Quest, connection_id: str) -> Quest:
    """Remove one connection.

    Raises:
        ConnectionNotFoundError: If the quest has no connection with that id.
    """
    if not any(c.id == connection_id for c in quest.connections):
        raise ConnectionNotFoundError(connection_id, available=[c.id for c in quest.connections])
    return _touch_quest(quest, connections=[c for c in quest.connections if c.id != connection_id])


def apply_layout(quest: Quest, positions: Mapping[str, Position]) -> Quest:
    """Move nodes to the given positions. Nodes not in the map stay put."""
    nodes = [
        n.model_copy(update={"position": positions[n.id]}) if n.id in positions else n
        for n in quest.nodes
    ]
    return _touch_quest(quest, nodes=nodes)
