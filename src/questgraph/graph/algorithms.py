"""Shared graph algorithms for the analysis engines.

Pure functions that operate on a quest without modifying it. Validation
uses the adjacency maps and the forward walk; layout uses the BFS leveling.
Both traversals keep an explicit visited set, so cyclic quests terminate.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from questgraph.models import Quest, QuestNode


def build_outgoing(quest: Quest) -> dict[str, list[str]]:
    """Map each source node id to its distinct target ids, in connection order.

    Includes connections whose endpoints are not nodes of the quest; callers
    look nodes up by id and skip unknown ones.
    """
    outgoing: dict[str, list[str]] = {}
    for conn in quest.connections:
        targets = outgoing.setdefault(conn.source_node_id, [])
        if conn.target_node_id not in targets:
            targets.append(conn.target_node_id)
    return outgoing


def build_incoming(quest: Quest) -> dict[str, list[str]]:
    """Map each target node id to its distinct source ids, in connection order."""
    incoming: dict[str, list[str]] = {}
    for conn in quest.connections:
        sources = incoming.setdefault(conn.target_node_id, [])
        if conn.source_node_id not in sources:
            sources.append(conn.source_node_id)
    return incoming


def node_index(quest: Quest) -> dict[str, QuestNode]:
    """Map node id to node. On duplicate ids the first node wins."""
    index: dict[str, QuestNode] = {}
    for node in quest.nodes:
        index.setdefault(node.id, node)
    return index


def find_start_nodes(quest: Quest) -> list[QuestNode]:
    """Return all START nodes in node order."""
    return [node for node in quest.nodes if node.type == "START"]


def reachable_from(
    start_id: str,
    outgoing: dict[str, list[str]],
    nodes: dict[str, QuestNode],
    is_leaf: Callable[[QuestNode], bool],
) -> set[str]:
    """Depth-first forward walk from ``start_id``.

    Leaf nodes are visited but not expanded. Ids without a node (dangling
    connection targets) are recorded as visited and not expanded.

    Args:
        start_id: Node id to start from.
        outgoing: Source id -> target ids.
        nodes: Node id -> node.
        is_leaf: Predicate for nodes where the walk stops.

    Returns:
        Set of visited ids, including ``start_id``.
    """
    visited: set[str] = set()
    stack = [start_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)

        node = nodes.get(current)
        if node is None or is_leaf(node):
            continue

        # Reverse so the first target is explored first
        for target in reversed(outgoing.get(current, [])):
            if target not in visited:
                stack.append(target)
    return visited


def bfs_levels(
    node_ids: Iterable[str],
    children: dict[str, list[str]],
    roots: list[str],
) -> dict[str, int]:
    """Assign levels by multi-source breadth-first search.

    All roots start at level 0. A node's level is fixed the first time it is
    dequeued and visited nodes are never enqueued again, so a node reachable
    along paths of different length takes the level of whichever copy the
    level-order traversal dequeues first. Nodes never reached get level 0.

    Args:
        node_ids: Every node id to assign a level to.
        children: Node id -> child ids.
        roots: Ids to start from, in order.

    Returns:
        Node id -> level.
    """
    levels: dict[str, int] = {}
    queue: deque[tuple[str, int]] = deque((root, 0) for root in roots)

    while queue:
        current, level = queue.popleft()
        if current in levels:
            continue
        levels[current] = level

        for child in children.get(current, []):
            if child not in levels:
                queue.append((child, level + 1))

    return {node_id: levels.get(node_id, 0) for node_id in node_ids}
