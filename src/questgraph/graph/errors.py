"""Document integrity error types.

These errors are raised by document operations when a reference does not
resolve, similar to foreign key violations in a database. The analysis
engines (validation, search, layout) never raise them: broken references in
user data are skipped there instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches


class QuestGraphError(Exception):
    """Base class for document integrity violations."""


@dataclass
class _ReferenceError(QuestGraphError):
    """Shared shape for "id does not resolve" errors."""

    kind = "Item"

    ref_id: str
    available: list[str] = field(default_factory=list)
    context: str = ""

    def __post_init__(self) -> None:
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"{self.kind} '{self.ref_id}' not found"
        if self.context:
            msg += f" ({self.context})"
        suggestions = self.suggestions()
        if suggestions:
            msg += f"; did you mean {', '.join(repr(s) for s in suggestions)}?"
        return msg

    def suggestions(self) -> list[str]:
        """Find similar ids that might be typos."""
        return get_close_matches(self.ref_id, self.available, n=3, cutoff=0.6)


@dataclass
class NodeNotFoundError(_ReferenceError):
    """Raised when referencing a node that is not in the quest."""

    kind = "Node"


@dataclass
class QuestNotFoundError(_ReferenceError):
    """Raised when referencing a quest that is not in the project."""

    kind = "Quest"


@dataclass
class EventNotFoundError(_ReferenceError):
    """Raised when referencing a global event that is not in the project."""

    kind = "Event"


@dataclass
class ConnectionNotFoundError(_ReferenceError):
    """Raised when deleting a connection that is not in the quest."""

    kind = "Connection"


@dataclass
class ConnectionEndpointError(QuestGraphError):
    """Raised when a new connection references missing endpoints or ports.

    Attributes:
        source_node_id: Source node ID.
        target_node_id: Target node ID.
        reason: What is wrong with the endpoints.
    """

    source_node_id: str
    target_node_id: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(
            f"Cannot connect '{self.source_node_id}' -> '{self.target_node_id}': {self.reason}"
        )


@dataclass
class NodeTypeError(QuestGraphError):
    """Raised when an update does not fit the node's variant.

    Attributes:
        node_id: The node being updated.
        node_type: The node's ``type`` tag.
        reason: What is wrong with the update.
    """

    node_id: str
    node_type: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Invalid update for {self.node_type} node '{self.node_id}': {self.reason}")


@dataclass
class DuplicateIdError(QuestGraphError):
    """Raised when a node or option id is already used in the quest.

    Attributes:
        kind: "Node" or "Option".
        ref_id: The id that is already taken.
    """

    kind: str
    ref_id: str

    def __post_init__(self) -> None:
        super().__init__(f"{self.kind} id '{self.ref_id}' is already used in the quest")
