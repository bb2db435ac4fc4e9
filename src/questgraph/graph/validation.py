"""Structural validation of quest graphs.

Pure, deterministic checks over a single quest. No check raises on user
data: connections pointing at unknown nodes are simply skipped where they
cannot be resolved.

Checks, in output order:
- Start cardinality: exactly one START node
- Per node: orphans, option completeness, true/false branch completeness,
  single-output completeness (dead ends)
- Reachability from the sole START node

Severity policy: structure that makes the quest unplayable is an error;
orphans, unreachable branches and empty labels are warnings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from questgraph.graph.algorithms import (
    build_incoming,
    build_outgoing,
    find_start_nodes,
    node_index,
    reachable_from,
)
from questgraph.graph.validation_types import (
    IssueType,
    Severity,
    ValidationIssue,
    ValidationReport,
)
from questgraph.models import (
    AndNode,
    ChoiceNode,
    DialogueNode,
    EndNode,
    EventNode,
    IfNode,
    OrNode,
    StartNode,
    has_binary_outputs,
    has_single_output,
    is_terminal,
    node_options,
)
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from questgraph.models import Quest, QuestNode

log = get_logger(__name__)

__all__ = [
    "has_errors",
    "is_quest_valid",
    "node_label",
    "validate",
    "validate_report",
]


def node_label(node: QuestNode) -> str:
    """Human-readable label for a node, used in issue messages."""
    if isinstance(node, StartNode):
        return node.title or "START"
    if isinstance(node, DialogueNode):
        return f"Dialogue: {node.speaker}" if node.speaker else "Dialogue"
    if isinstance(node, ChoiceNode):
        return f"Choice: {node.prompt[:20]}..." if node.prompt else "Choice"
    if isinstance(node, EventNode):
        return f"Event: {node.event_name or node.event_id or 'unnamed'}"
    if isinstance(node, IfNode):
        return f"IF: {node.condition[:20] or 'no condition'}..."
    if isinstance(node, AndNode):
        return "AND"
    if isinstance(node, OrNode):
        return "OR"
    if isinstance(node, EndNode):
        return node.title or "END"
    assert_never(node)


class _IssueCollector:
    """Accumulates issues with sequential per-call ids."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add(
        self,
        severity: Severity,
        issue_type: IssueType,
        message: str,
        node_id: str | None = None,
        option_id: str | None = None,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                id=f"issue-{len(self.issues) + 1}",
                severity=severity,
                type=issue_type,
                message=message,
                node_id=node_id,
                option_id=option_id,
            )
        )


def validate(quest: Quest) -> list[ValidationIssue]:
    """Validate a quest and return all issues found.

    Args:
        quest: The quest to check. Not modified.

    Returns:
        Issues in check order. Compare as a set: only content is meaningful,
        ids are assigned sequentially per call.
    """
    collector = _IssueCollector()

    start_nodes = find_start_nodes(quest)
    if not start_nodes:
        collector.add("error", IssueType.MISSING_START, "Quest has no START node")
    elif len(start_nodes) > 1:
        collector.add("error", IssueType.MULTIPLE_START, "Quest has multiple START nodes")

    outgoing = build_outgoing(quest)
    incoming = build_incoming(quest)
    connected_options = {c.source_option_id for c in quest.connections if c.source_option_id}
    connected_outputs = {
        (c.source_node_id, c.source_output) for c in quest.connections if c.source_output
    }

    for node in quest.nodes:
        _check_node(node, collector, outgoing, incoming, connected_options, connected_outputs)

    if len(start_nodes) == 1:
        _check_reachability(quest, start_nodes[0], outgoing, collector)

    log.debug(
        "quest_validated",
        quest_id=quest.id,
        nodes=len(quest.nodes),
        issues=len(collector.issues),
    )
    return collector.issues


def _check_node(
    node: QuestNode,
    collector: _IssueCollector,
    outgoing: dict[str, list[str]],
    incoming: dict[str, list[str]],
    connected_options: set[str],
    connected_outputs: set[tuple[str, str]],
) -> None:
    label = node_label(node)

    if node.type != "START" and node.id not in incoming:
        collector.add(
            "warning",
            IssueType.ORPHAN_NODE,
            f'Node "{label}" has no incoming connections',
            node.id,
        )

    for option in node_options(node):
        if option.id not in connected_options:
            collector.add(
                "error",
                IssueType.UNCONNECTED_OPTION,
                f'Option "{option.label}" in node "{label}" has no connection',
                node.id,
                option.id,
            )
        if not option.label.strip():
            collector.add(
                "warning",
                IssueType.EMPTY_OPTION,
                f'Option in node "{label}" has no label',
                node.id,
                option.id,
            )

    if has_binary_outputs(node):
        for branch in ("true", "false"):
            if (node.id, branch) not in connected_outputs:
                collector.add(
                    "error",
                    IssueType.UNCONNECTED_OUTPUT,
                    f'"{branch.capitalize()}" output of "{label}" has no connection',
                    node.id,
                )

    if has_single_output(node) and not outgoing.get(node.id):
        collector.add(
            "error",
            IssueType.DEAD_END,
            f'Node "{label}" has no outgoing connection',
            node.id,
        )


def _check_reachability(
    quest: Quest,
    start: QuestNode,
    outgoing: dict[str, list[str]],
    collector: _IssueCollector,
) -> None:
    # END and EVENT/TRIGGER nodes are valid places for a walk to stop
    reachable = reachable_from(start.id, outgoing, node_index(quest), is_terminal)

    for node in quest.nodes:
        if node.id not in reachable and node.type != "START":
            collector.add(
                "warning",
                IssueType.UNREACHABLE,
                f'Node "{node_label(node)}" cannot be reached from START',
                node.id,
            )


def validate_report(quest: Quest) -> ValidationReport:
    """Validate a quest and wrap the issues in a :class:`ValidationReport`."""
    return ValidationReport(issues=validate(quest))


def has_errors(issues: list[ValidationIssue]) -> bool:
    """Check if any issue is an error (not just a warning)."""
    return any(issue.severity == "error" for issue in issues)


def is_quest_valid(quest: Quest) -> bool:
    """Check if a quest has no validation errors."""
    return not has_errors(validate(quest))
