"""Pydantic models for the quest document.

Quests are graphs of typed nodes; projects own quests and global events.
Models serialize with camelCase keys (``sourceNodeId``) and accept either
camelCase or snake_case on input.
"""

from questgraph.models.project import (
    PROJECT_FORMAT_VERSION,
    EventParameter,
    GlobalEvent,
    Project,
    ProjectSettings,
)
from questgraph.models.quest import (
    NPC,
    AndNode,
    ChoiceNode,
    Connection,
    DialogueNode,
    EndNode,
    EventNode,
    FactionChange,
    IfNode,
    Location,
    NodeType,
    Option,
    OptionNode,
    OrNode,
    Position,
    Quest,
    QuestNode,
    Reward,
    StartNode,
    Viewport,
    has_binary_outputs,
    has_options,
    has_single_output,
    is_terminal,
    node_options,
    utcnow,
)

__all__ = [
    "NPC",
    "PROJECT_FORMAT_VERSION",
    "AndNode",
    "ChoiceNode",
    "Connection",
    "DialogueNode",
    "EndNode",
    "EventNode",
    "EventParameter",
    "FactionChange",
    "GlobalEvent",
    "IfNode",
    "Location",
    "NodeType",
    "Option",
    "OptionNode",
    "OrNode",
    "Position",
    "Project",
    "ProjectSettings",
    "Quest",
    "QuestNode",
    "Reward",
    "StartNode",
    "Viewport",
    "has_binary_outputs",
    "has_options",
    "has_single_output",
    "is_terminal",
    "node_options",
    "utcnow",
]
