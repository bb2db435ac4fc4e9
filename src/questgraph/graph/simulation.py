"""Step-through preview of a quest.

The simulation walks the graph the way a player would: from the START
node through options, true/false branches, or the single continuation of
nodes without options. Moves through unconnected ports are refused and
leave the state unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from questgraph.graph.algorithms import find_start_nodes
from questgraph.graph.errors import NodeNotFoundError
from questgraph.models import EndNode, has_binary_outputs, has_options, node_options
from questgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from questgraph.models import Connection, Quest, QuestNode

log = get_logger(__name__)

ChoiceKind = Literal["option", "branch", "continue"]


@dataclass(frozen=True)
class SimulationChoice:
    """An exit the player can take from the current node.

    Attributes:
        kind: "option", "branch" (true/false) or "continue".
        label: Text shown to the player.
        port: Option id, branch name, or None for "continue".
        target_node_id: Where the exit leads, or None if unconnected.
    """

    kind: ChoiceKind
    label: str
    port: str | None
    target_node_id: str | None

    @property
    def available(self) -> bool:
        return self.target_node_id is not None


class QuestSimulation:
    """Interactive walk through a quest's nodes.

    Args:
        quest: Quest to preview. Not modified.
        start_node_id: Node to start from. Defaults to the START node, or the
            first node when the quest has none.

    Raises:
        NodeNotFoundError: If ``start_node_id`` is given but not in the quest.
        ValueError: If the quest has no nodes.
    """

    def __init__(self, quest: Quest, start_node_id: str | None = None) -> None:
        if not quest.nodes:
            raise ValueError(f"Quest '{quest.name}' has no nodes to preview")
        self.quest = quest

        if start_node_id is None:
            starts = find_start_nodes(quest)
            start_node_id = starts[0].id if starts else quest.nodes[0].id
        elif quest.get_node(start_node_id) is None:
            raise NodeNotFoundError(start_node_id, available=[n.id for n in quest.nodes])

        self.history: list[str] = [start_node_id]
        log.debug("simulation_started", quest_id=quest.id, node_id=start_node_id)

    @property
    def current_node(self) -> QuestNode:
        node = self.quest.get_node(self.history[-1])
        # History only ever holds ids of nodes in the quest
        assert node is not None
        return node

    @property
    def step(self) -> int:
        """1-based number of the current step."""
        return len(self.history)

    @property
    def is_finished(self) -> bool:
        return isinstance(self.current_node, EndNode)

    def _outgoing(self) -> list[Connection]:
        node_id = self.history[-1]
        return [c for c in self.quest.connections if c.source_node_id == node_id]

    def _target_of(self, **port: str) -> str | None:
        ((field, value),) = port.items()
        for conn in self._outgoing():
            if getattr(conn, field) == value and self.quest.get_node(conn.target_node_id):
                return conn.target_node_id
        return None

    def choices(self) -> list[SimulationChoice]:
        """List the exits of the current node, connected or not."""
        node = self.current_node
        if has_options(node):
            return [
                SimulationChoice(
                    kind="option",
                    label=opt.label,
                    port=opt.id,
                    target_node_id=self._target_of(source_option_id=opt.id),
                )
                for opt in node.options
            ]
        if has_binary_outputs(node):
            return [
                SimulationChoice(
                    kind="branch",
                    label=branch.capitalize(),
                    port=branch,
                    target_node_id=self._target_of(source_output=branch),
                )
                for branch in ("true", "false")
            ]
        if self.is_finished:
            return []

        outgoing = self._outgoing()
        target = outgoing[0].target_node_id if len(outgoing) == 1 else None
        if target is not None and self.quest.get_node(target) is None:
            target = None
        return [SimulationChoice(kind="continue", label="Continue", port=None, target_node_id=target)]

    def _go_to(self, node_id: str | None) -> bool:
        if node_id is None:
            return False
        self.history.append(node_id)
        log.debug("simulation_moved", quest_id=self.quest.id, node_id=node_id, step=self.step)
        return True

    def choose_option(self, option_id: str) -> bool:
        """Follow the connection leaving one of the current node's options."""
        if option_id not in {o.id for o in node_options(self.current_node)}:
            return False
        return self._go_to(self._target_of(source_option_id=option_id))

    def choose_branch(self, branch: Literal["true", "false"]) -> bool:
        """Follow the true or false output of an IF or EVENT/CHECK node."""
        if not has_binary_outputs(self.current_node):
            return False
        return self._go_to(self._target_of(source_output=branch))

    def advance(self) -> bool:
        """Continue from a node without options that has exactly one exit."""
        node = self.current_node
        if has_options(node):
            return False
        outgoing = self._outgoing()
        if len(outgoing) != 1 or self.quest.get_node(outgoing[0].target_node_id) is None:
            return False
        return self._go_to(outgoing[0].target_node_id)

    def go_back(self) -> bool:
        """Return to the previous node. The first node cannot be left this way."""
        if len(self.history) <= 1:
            return False
        self.history.pop()
        return True

    def restart(self) -> None:
        del self.history[1:]
