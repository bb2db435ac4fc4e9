"""Hierarchical auto-layout for quest graphs.

Levels come from a multi-source breadth-first search over the connections,
starting from every node without parents. Each level becomes a row (TB) or
a column (LR); nodes inside a level are placed side by side in node-list
order and the level is centered on a shared axis. A global offset keeps all
coordinates non-negative.

Node sizes come from the rendering surface when it has measured them, and
otherwise from a per-type height estimate plus a default width.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, assert_never

from questgraph.graph.algorithms import bfs_levels
from questgraph.models import (
    AndNode,
    ChoiceNode,
    DialogueNode,
    EndNode,
    EventNode,
    IfNode,
    OrNode,
    Position,
    StartNode,
)
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from questgraph.models import Quest, QuestNode

log = get_logger(__name__)

Direction = Literal["TB", "LR"]

# Height estimation constants, matched to the node components' rendering
HEADER_HEIGHT = 44
NODE_CONTENT_WIDTH = 260 - 24
LINE_HEIGHT = 20
CHAR_WIDTH = 6
TEXT_PADDING = 16
OPTION_ROW_HEIGHT = 30
LIST_ROW_HEIGHT = 24
MIN_NODE_HEIGHT = 80
CANVAS_MARGIN = 50


@dataclass(frozen=True)
class NodeSize:
    """On-screen size of a rendered node."""

    width: float
    height: float


@dataclass(frozen=True)
class LayoutOptions:
    """Layout configuration.

    Attributes:
        direction: "TB" stacks levels top to bottom, "LR" left to right.
        node_width: Width used for nodes without a measured size.
        node_height: Fallback height (sizes are normally estimated per type).
        horizontal_spacing: Gap between neighbours in a row, or between columns.
        vertical_spacing: Gap between rows, or between neighbours in a column.
    """

    direction: Direction = "TB"
    node_width: float = 300
    node_height: float = 150
    horizontal_spacing: float = 80
    vertical_spacing: float = 60


@dataclass
class _LayoutNode:
    id: str
    width: float
    height: float
    level: int = 0
    index: int = 0


def layout(
    quest: Quest,
    measured_sizes: Mapping[str, NodeSize] | None = None,
    options: LayoutOptions | None = None,
) -> dict[str, Position]:
    """Compute new positions for every node of a quest.

    Args:
        quest: Quest to lay out. Not modified.
        measured_sizes: Node id -> rendered size. Zero or missing dimensions
            fall back to the default width and the estimated height.
        options: Layout configuration; defaults to :class:`LayoutOptions`.

    Returns:
        Node id -> position. Empty when the quest has no nodes.
    """
    opts = options or LayoutOptions()
    if not quest.nodes:
        return {}

    measured_sizes = measured_sizes or {}
    nodes: dict[str, _LayoutNode] = {}
    for node in quest.nodes:
        if node.id in nodes:
            continue
        measured = measured_sizes.get(node.id)
        nodes[node.id] = _LayoutNode(
            id=node.id,
            width=(measured.width if measured and measured.width else opts.node_width),
            height=(measured.height if measured and measured.height else estimate_node_height(node)),
        )

    children: dict[str, list[str]] = {node_id: [] for node_id in nodes}
    has_parent: set[str] = set()
    for conn in quest.connections:
        if conn.source_node_id in nodes and conn.target_node_id in nodes:
            children[conn.source_node_id].append(conn.target_node_id)
            has_parent.add(conn.target_node_id)

    # A fully cyclic graph has no parentless node; start from the first one
    roots = [node_id for node_id in nodes if node_id not in has_parent] or [quest.nodes[0].id]

    for node_id, level in bfs_levels(nodes, children, roots).items():
        nodes[node_id].level = level

    levels: dict[int, list[_LayoutNode]] = {}
    for lnode in nodes.values():
        members = levels.setdefault(lnode.level, [])
        lnode.index = len(members)
        members.append(lnode)
    ordered = [levels.get(lvl, []) for lvl in range(max(levels) + 1)]

    if opts.direction == "TB":
        positions = _place(ordered, opts, transpose=False)
    elif opts.direction == "LR":
        positions = _place(ordered, opts, transpose=True)
    else:
        assert_never(opts.direction)

    log.debug(
        "quest_laid_out",
        quest_id=quest.id,
        nodes=len(positions),
        levels=len(ordered),
        direction=opts.direction,
    )
    return positions


def _place(
    levels: list[list[_LayoutNode]],
    opts: LayoutOptions,
    *,
    transpose: bool,
) -> dict[str, Position]:
    """Place levels along the main axis and center nodes on the cross axis.

    In TB the main axis is y (level depth uses node heights) and the cross
    axis is x (neighbours use node widths). LR swaps both.
    """

    def depth(n: _LayoutNode) -> float:
        return n.width if transpose else n.height

    def breadth(n: _LayoutNode) -> float:
        return n.height if transpose else n.width

    level_gap = opts.horizontal_spacing if transpose else opts.vertical_spacing
    sibling_gap = opts.vertical_spacing if transpose else opts.horizontal_spacing

    level_offsets: list[float] = []
    cumulative = 0.0
    for members in levels:
        level_offsets.append(cumulative)
        level_depth = max((depth(n) for n in members), default=0)
        cumulative += max(level_depth, MIN_NODE_HEIGHT) + level_gap

    level_spans = [
        sum(breadth(n) for n in members) + max(len(members) - 1, 0) * sibling_gap
        for members in levels
    ]
    cross_offset = max(level_spans) / 2 + CANVAS_MARGIN

    positions: dict[str, Position] = {}
    for lvl, members in enumerate(levels):
        cross = -level_spans[lvl] / 2 + cross_offset
        main = level_offsets[lvl] + CANVAS_MARGIN
        for lnode in members:
            if transpose:
                positions[lnode.id] = Position(x=main, y=cross)
            else:
                positions[lnode.id] = Position(x=cross, y=main)
            cross += breadth(lnode) + sibling_gap
    return positions


# ---------------------------------------------------------------------------
# Size estimation
# ---------------------------------------------------------------------------


def estimate_text_lines(text: str | None, container_width: int = NODE_CONTENT_WIDTH) -> int:
    """Estimate wrapped line count at a fixed average character width.

    Errs towards more lines so the layout overestimates node height.
    """
    if not text:
        return 0
    chars_per_line = max(1, container_width // CHAR_WIDTH)
    return math.ceil(len(text) / chars_per_line)


def _text_block(text: str | None) -> int:
    return estimate_text_lines(text) * LINE_HEIGHT + TEXT_PADDING


def estimate_node_height(node: QuestNode) -> float:
    """Estimate the rendered height of a node from its content."""
    height: int
    if isinstance(node, StartNode):
        height = HEADER_HEIGHT
        location_name = node.location.name if node.location else None
        npc_name = node.npc.name if node.npc else None
        if location_name or npc_name:
            height += TEXT_PADDING + LINE_HEIGHT * (bool(location_name) + bool(npc_name))
        height += _text_block(node.description)
        height += len(node.options) * OPTION_ROW_HEIGHT
    elif isinstance(node, DialogueNode):
        height = HEADER_HEIGHT
        if node.speaker:
            height += 32
        height += _text_block(node.text)
        height += len(node.options) * OPTION_ROW_HEIGHT
    elif isinstance(node, ChoiceNode):
        height = HEADER_HEIGHT + _text_block(node.prompt)
        height += len(node.options) * OPTION_ROW_HEIGHT
    elif isinstance(node, IfNode):
        height = HEADER_HEIGHT + _text_block(node.condition)
    elif isinstance(node, AndNode | OrNode):
        height = HEADER_HEIGHT + _text_block(None)
        height += max(0, node.input_count - 2) * LINE_HEIGHT
    elif isinstance(node, EventNode):
        height = HEADER_HEIGHT + 40
    elif isinstance(node, EndNode):
        # Outcome badge
        height = HEADER_HEIGHT + 32
        height += _text_block(node.description)
        height += len(node.rewards or []) * LIST_ROW_HEIGHT
        height += len(node.faction_changes or []) * LIST_ROW_HEIGHT
    else:
        assert_never(node)
    return max(MIN_NODE_HEIGHT, height)
