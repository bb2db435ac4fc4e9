"""Tests for quest search."""

from __future__ import annotations

from pydantic import TypeAdapter

from questgraph.graph.search import SearchMatch, _searchable_fields, get_unique_node_ids, search
from questgraph.models import (
    AndNode,
    ChoiceNode,
    DialogueNode,
    EndNode,
    EventNode,
    IfNode,
    NodeType,
    Option,
    OrNode,
    Quest,
    QuestNode,
    StartNode,
)


def _wizard_quest() -> Quest:
    """Helper to build a quest with text in every searchable field."""
    return Quest(
        id="q",
        name="Wizard",
        nodes=[
            StartNode(id="start", title="Find Gandalf", description="The grey wizard is missing"),
            DialogueNode(
                id="talk",
                speaker="Gandalf",
                text="You shall not pass!",
                options=[Option(id="o1", label="Run from the wizard")],
            ),
            ChoiceNode(
                id="choose",
                prompt="Follow the wizard?",
                options=[Option(id="o2", label="Yes"), Option(id="o3", label="Ask the Wizard why")],
            ),
            EventNode(id="ev", event_id="evt", event_name="Wizard Fireworks"),
            IfNode(id="if", condition="wizard_trusted"),
            AndNode(id="and"),
            OrNode(id="or"),
            EndNode(id="end", title="Farewell", description="The wizard departs"),
        ],
    )


class TestSearch:
    def test_empty_query_returns_nothing(self) -> None:
        quest = _wizard_quest()

        assert search(quest, "") == []
        assert search(quest, "   ") == []

    def test_case_insensitive(self) -> None:
        quest = _wizard_quest()

        assert search(quest, "GANDALF") == search(quest, "gandalf")
        assert search(quest, "  Gandalf ") == search(quest, "gandalf")

    def test_speaker_match(self) -> None:
        matches = search(_wizard_quest(), "gandalf")

        assert SearchMatch("talk", "speaker", "Gandalf") in matches
        assert SearchMatch("start", "name", "Find Gandalf") in matches

    def test_matched_text_keeps_original_case(self) -> None:
        matches = search(_wizard_quest(), "PASS")

        assert matches == [SearchMatch("talk", "content", "You shall not pass!")]

    def test_field_mapping_for_every_type(self) -> None:
        """Each node type reports its fields under the documented match types."""
        matches = search(_wizard_quest(), "wizard")

        assert [(m.node_id, m.match_type) for m in matches] == [
            ("start", "content"),
            ("talk", "option"),
            ("choose", "content"),
            ("choose", "choice"),
            ("ev", "eventName"),
            ("if", "content"),
            ("end", "content"),
        ]

    def test_one_node_can_match_several_fields(self) -> None:
        quest = Quest(
            id="q",
            name="Q",
            nodes=[DialogueNode(id="d", speaker="Ann", text="Ann speaks", options=[])],
        )

        matches = search(quest, "ann")

        assert [m.match_type for m in matches] == ["speaker", "content"]
        assert get_unique_node_ids(matches) == ["d"]

    def test_event_id_is_not_searched(self) -> None:
        quest = Quest(id="q", name="Q", nodes=[EventNode(id="e", event_id="secret-event")])

        assert search(quest, "secret") == []

    def test_missing_optional_text(self) -> None:
        """Nodes with unset optional fields are skipped, not crashed on."""
        quest = Quest(
            id="q",
            name="Q",
            nodes=[DialogueNode(id="d"), ChoiceNode(id="c"), EndNode(id="e")],
        )

        assert search(quest, "x") == []

    def test_no_matches(self) -> None:
        assert search(_wizard_quest(), "dragon") == []


class TestGetUniqueNodeIds:
    def test_first_appearance_order(self) -> None:
        matches = [
            SearchMatch("b", "name", "x"),
            SearchMatch("a", "content", "x"),
            SearchMatch("b", "content", "x"),
        ]

        assert get_unique_node_ids(matches) == ["b", "a"]

    def test_empty(self) -> None:
        assert get_unique_node_ids([]) == []


def test_every_node_type_has_a_search_mapping() -> None:
    """Field extraction handles every NodeType without error."""
    adapter: TypeAdapter[QuestNode] = TypeAdapter(QuestNode)
    for node_type in NodeType:
        node = adapter.validate_python({"type": node_type.value, "id": "n"})
        fields = list(_searchable_fields(node))
        if node_type in (NodeType.AND, NodeType.OR):
            assert fields == []
        else:
            assert fields
