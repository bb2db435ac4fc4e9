"""Full-text search over quest nodes.

Each type-relevant text field of a node is tested on its own, so one node
can produce several matches. Matching is case-insensitive substring
containment; AND/OR nodes carry no searchable text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, assert_never

from questgraph.models import (
    AndNode,
    ChoiceNode,
    DialogueNode,
    EndNode,
    EventNode,
    IfNode,
    OrNode,
    StartNode,
)
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from questgraph.models import Quest, QuestNode

log = get_logger(__name__)

MatchType = Literal["name", "speaker", "content", "eventName", "choice", "option"]


@dataclass(frozen=True)
class SearchMatch:
    """One matching field of one node.

    Attributes:
        node_id: The node containing the match.
        match_type: Which kind of field matched.
        matched_text: The full original field value (not lower-cased).
    """

    node_id: str
    match_type: MatchType
    matched_text: str


def search(quest: Quest, query: str) -> list[SearchMatch]:
    """Search the nodes of a quest.

    Args:
        quest: Quest to search. Not modified.
        query: Text to look for. Empty or whitespace-only returns no matches.

    Returns:
        Matches in node order, then field order within each node.
    """
    normalized = query.strip().lower()
    if not normalized:
        return []

    matches = [
        SearchMatch(node_id=node.id, match_type=match_type, matched_text=text)
        for node in quest.nodes
        for match_type, text in _searchable_fields(node)
        if text and normalized in text.lower()
    ]

    log.debug("quest_searched", quest_id=quest.id, query=normalized, matches=len(matches))
    return matches


def _searchable_fields(node: QuestNode) -> Iterator[tuple[MatchType, str | None]]:
    """Yield ``(match_type, text)`` for each searchable field of a node."""
    if isinstance(node, StartNode | EndNode):
        yield "name", node.title
        yield "content", node.description
    elif isinstance(node, DialogueNode):
        yield "speaker", node.speaker
        yield "content", node.text
        for option in node.options:
            yield "option", option.label
    elif isinstance(node, ChoiceNode):
        yield "content", node.prompt
        for option in node.options:
            yield "choice", option.label
    elif isinstance(node, EventNode):
        yield "eventName", node.event_name
    elif isinstance(node, IfNode):
        yield "content", node.condition
    elif isinstance(node, AndNode | OrNode):
        return
    else:
        assert_never(node)


def get_unique_node_ids(matches: list[SearchMatch]) -> list[str]:
    """Collapse matches to distinct node ids, in order of first appearance."""
    return list(dict.fromkeys(m.node_id for m in matches))
