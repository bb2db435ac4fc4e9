"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from questgraph.models import (
    Connection,
    DialogueNode,
    EndNode,
    Option,
    Position,
    Project,
    Quest,
    StartNode,
)


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the editor config directory at a temp dir.

    Keeps tests from reading or writing ~/.config/questgraph.
    """
    config_dir = tmp_path / "config"
    monkeypatch.setenv("QG_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("QG_LAYOUT_DIRECTION", raising=False)
    return config_dir


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def village_quest() -> Quest:
    """A small valid quest: START -> DIALOGUE -> END."""
    return Quest(
        id="quest-village",
        name="Save the Village",
        description="Help the elder",
        nodes=[
            StartNode(
                id="start",
                position=Position(x=0, y=0),
                title="The Call",
                description="A stranger needs help",
                options=[Option(id="opt-accept", label="Accept")],
            ),
            DialogueNode(
                id="elder",
                position=Position(x=0, y=200),
                speaker="Elder",
                text="The village is in danger.",
                options=[Option(id="opt-go", label="I'll go")],
            ),
            EndNode(id="end", position=Position(x=0, y=400), title="Village Saved"),
        ],
        connections=[
            Connection(
                id="c1",
                source_node_id="start",
                target_node_id="elder",
                source_option_id="opt-accept",
            ),
            Connection(
                id="c2",
                source_node_id="elder",
                target_node_id="end",
                source_option_id="opt-go",
            ),
        ],
    )


@pytest.fixture
def village_project(village_quest: Quest) -> Project:
    """A project holding the village quest."""
    return Project(id="project-1", name="Realm", quests=[village_quest])
