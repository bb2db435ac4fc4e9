"""Quest graph models.

A quest is a directed graph of typed nodes joined by connections. Each
connection leaves its source node through one output port:

- an option (``source_option_id``) on START, DIALOGUE and CHOICE nodes
- a named output (``source_output`` of ``"true"``/``"false"``) on IF and
  EVENT/CHECK nodes
- the single unnamed output (no port fields) on AND, OR and EVENT/TRIGGER

Node variants are flat records discriminated by their ``type`` tag. Field
names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Any, Literal, TypeGuard

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from collections.abc import Iterable


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Base for document models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeType(StrEnum):
    """Discriminator values for quest node variants."""

    START = "START"
    DIALOGUE = "DIALOGUE"
    CHOICE = "CHOICE"
    EVENT = "EVENT"
    IF = "IF"
    AND = "AND"
    OR = "OR"
    END = "END"


class Position(CamelModel):
    """Canvas coordinates."""

    x: float = 0.0
    y: float = 0.0


class Viewport(CamelModel):
    """Saved canvas pan/zoom for a quest."""

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


class Option(CamelModel):
    """A labeled output port offering the player a choice."""

    id: str = Field(min_length=1)
    label: str = ""
    short_label: str | None = None


class Location(CamelModel):
    """Where a quest begins in the game world."""

    name: str | None = None
    x: float | None = None
    y: float | None = None
    z: float | None = None


class NPC(CamelModel):
    """Quest giver shown on the START node."""

    id: str | None = None
    name: str
    type: str | None = None


class Reward(CamelModel):
    """Something granted when an END node is reached."""

    type: Literal["ITEM", "GOLD", "EXPERIENCE", "CUSTOM"]
    value: str | int | float
    quantity: int | None = None


class FactionChange(CamelModel):
    """Reputation delta applied when an END node is reached."""

    faction_id: str
    faction_name: str
    change: int


# ---------------------------------------------------------------------------
# Node variants
# ---------------------------------------------------------------------------


class _NodeFields(CamelModel):
    """Fields shared by every node variant."""

    id: str = Field(min_length=1)
    position: Position = Field(default_factory=Position)
    width: float | None = None
    height: float | None = None


class StartNode(_NodeFields):
    type: Literal["START"] = "START"
    title: str = ""
    description: str = ""
    location: Location | None = None
    npc: NPC | None = None
    options: list[Option] = Field(default_factory=list)


class DialogueNode(_NodeFields):
    type: Literal["DIALOGUE"] = "DIALOGUE"
    speaker: str | None = None
    text: str = ""
    options: list[Option] = Field(default_factory=list)


class ChoiceNode(_NodeFields):
    type: Literal["CHOICE"] = "CHOICE"
    prompt: str | None = None
    options: list[Option] = Field(default_factory=list)


class EventNode(_NodeFields):
    """Triggers or checks a project-wide event.

    TRIGGER nodes continue through a single unnamed port; CHECK nodes branch
    through ``"true"`` and ``"false"`` ports.
    """

    type: Literal["EVENT"] = "EVENT"
    event_id: str = ""
    event_name: str | None = None
    action: Literal["TRIGGER", "CHECK"] = "TRIGGER"
    parameters: dict[str, Any] | None = None


class IfNode(_NodeFields):
    """Branches on an opaque condition string (never evaluated here)."""

    type: Literal["IF"] = "IF"
    condition: str = ""


class AndNode(_NodeFields):
    type: Literal["AND"] = "AND"
    input_count: int = Field(default=2, ge=2)


class OrNode(_NodeFields):
    type: Literal["OR"] = "OR"
    input_count: int = Field(default=2, ge=2)


class EndNode(_NodeFields):
    type: Literal["END"] = "END"
    title: str = ""
    outcome: Literal["SUCCESS", "FAILURE", "NEUTRAL"] = "SUCCESS"
    description: str | None = None
    rewards: list[Reward] | None = None
    faction_changes: list[FactionChange] | None = None
    triggered_events: list[str] | None = None


OptionNode = StartNode | DialogueNode | ChoiceNode

QuestNode = Annotated[
    StartNode | DialogueNode | ChoiceNode | EventNode | IfNode | AndNode | OrNode | EndNode,
    Field(discriminator="type"),
]


def has_options(node: QuestNode) -> TypeGuard[OptionNode]:
    """True for variants whose output ports are options."""
    return isinstance(node, StartNode | DialogueNode | ChoiceNode)


def node_options(node: QuestNode) -> list[Option]:
    """Options of a node, or an empty list for variants without options."""
    return node.options if has_options(node) else []


def has_binary_outputs(node: QuestNode) -> bool:
    """True for nodes branching through ``"true"``/``"false"`` ports."""
    return isinstance(node, IfNode) or (isinstance(node, EventNode) and node.action == "CHECK")


def has_single_output(node: QuestNode) -> bool:
    """True for nodes continuing through one unnamed output port."""
    return isinstance(node, AndNode | OrNode) or (
        isinstance(node, EventNode) and node.action == "TRIGGER"
    )


def is_terminal(node: QuestNode) -> bool:
    """True for nodes where a forward walk may legitimately stop."""
    return isinstance(node, EndNode) or (isinstance(node, EventNode) and node.action == "TRIGGER")


# ---------------------------------------------------------------------------
# Connections and quests
# ---------------------------------------------------------------------------


class Connection(CamelModel):
    """A directed edge leaving one output port of the source node.

    At most one of ``source_option_id`` / ``source_output`` is set; neither
    means the source's single unnamed port. ``target_handle`` picks an input
    port on multi-input (AND/OR) targets.
    """

    id: str = Field(min_length=1)
    source_node_id: str
    target_node_id: str
    source_option_id: str | None = None
    source_output: str | None = None
    target_handle: str | None = None


def _duplicates(ids: Iterable[str]) -> list[str]:
    return sorted(i for i, count in Counter(ids).items() if count > 1)


class Quest(CamelModel):
    """One quest graph. Owns its nodes and connections.

    Node ids and option ids are unique within the quest.
    """

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    nodes: list[QuestNode] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    viewport: Viewport = Field(default_factory=Viewport)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    tags: list[str] | None = None

    @model_validator(mode="after")
    def ids_unique(self) -> Quest:
        """Reject quests where two nodes, or two options, share an id."""
        node_dupes = _duplicates(n.id for n in self.nodes)
        if node_dupes:
            msg = f"duplicate node id(s): {', '.join(node_dupes)}"
            raise ValueError(msg)
        option_dupes = _duplicates(o.id for n in self.nodes for o in node_options(n))
        if option_dupes:
            msg = f"duplicate option id(s): {', '.join(option_dupes)}"
            raise ValueError(msg)
        return self

    def get_node(self, node_id: str) -> QuestNode | None:
        """Return the node with the given id, or None."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
