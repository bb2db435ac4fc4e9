"""Graph package - quest graph engines and document operations.

The analysis engines (validation, search, layout) are pure functions over a
single quest. Document operations return updated copies of their inputs.
"""

from questgraph.graph.document import (
    add_connection,
    add_event,
    add_node,
    add_quest,
    apply_layout,
    clone_node,
    create_event,
    create_node,
    create_project,
    create_quest,
    delete_connection,
    delete_event,
    delete_node,
    delete_quest,
    new_id,
    paste_node,
    rename_project,
    replace_quest,
    toggle_auto_save,
    update_event,
    update_node,
    update_quest,
)
from questgraph.graph.errors import (
    ConnectionEndpointError,
    ConnectionNotFoundError,
    DuplicateIdError,
    EventNotFoundError,
    NodeNotFoundError,
    NodeTypeError,
    QuestGraphError,
    QuestNotFoundError,
)
from questgraph.graph.layout import (
    LayoutOptions,
    NodeSize,
    estimate_node_height,
    estimate_text_lines,
    layout,
)
from questgraph.graph.search import SearchMatch, get_unique_node_ids, search
from questgraph.graph.simulation import QuestSimulation, SimulationChoice
from questgraph.graph.validation import (
    has_errors,
    is_quest_valid,
    node_label,
    validate,
    validate_report,
)
from questgraph.graph.validation_types import (
    IssueType,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "ConnectionEndpointError",
    "ConnectionNotFoundError",
    "DuplicateIdError",
    "EventNotFoundError",
    "IssueType",
    "LayoutOptions",
    "NodeNotFoundError",
    "NodeSize",
    "NodeTypeError",
    "QuestGraphError",
    "QuestNotFoundError",
    "QuestSimulation",
    "SearchMatch",
    "SimulationChoice",
    "ValidationIssue",
    "ValidationReport",
    "add_connection",
    "add_event",
    "add_node",
    "add_quest",
    "apply_layout",
    "clone_node",
    "create_event",
    "create_node",
    "create_project",
    "create_quest",
    "delete_connection",
    "delete_event",
    "delete_node",
    "delete_quest",
    "estimate_node_height",
    "estimate_text_lines",
    "get_unique_node_ids",
    "has_errors",
    "is_quest_valid",
    "layout",
    "new_id",
    "node_label",
    "paste_node",
    "rename_project",
    "replace_quest",
    "search",
    "toggle_auto_save",
    "update_event",
    "update_node",
    "update_quest",
    "validate",
    "validate_report",
]
