"""Test CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from rich.console import Console
from typer.testing import CliRunner

from questgraph import __version__
from questgraph.cli import app
from questgraph.export import dump_project, export_quest, parse_project_file, to_json_string
from questgraph.graph import document
from questgraph.models import Option
from questgraph.observability import LOG_FILE_NAME, close_file_logging

if TYPE_CHECKING:
    from pathlib import Path

    from questgraph.models import Project

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep Rich from wrapping long paths across lines."""
    monkeypatch.setattr("questgraph.cli.console", Console(width=200))


@pytest.fixture
def project_file(tmp_path: Path, village_project: Project) -> Path:
    """The village project saved to disk."""
    path = tmp_path / "realm.json"
    path.write_text(dump_project(village_project))
    return path


@pytest.fixture
def broken_project_file(tmp_path: Path, village_project: Project) -> Path:
    """The village project with the elder's only option disconnected."""
    quest = document.delete_connection(village_project.quests[0], "c2")
    path = tmp_path / "broken.json"
    path.write_text(dump_project(document.replace_quest(village_project, quest)))
    return path


def _load(path: Path) -> Project:
    project = parse_project_file(path.read_text())
    assert project is not None
    return project


def test_version_command() -> None:
    """Test qg version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"v{__version__}" in result.stdout


def test_no_args_shows_help() -> None:
    """Test that no arguments shows help."""
    result = runner.invoke(app, [])
    # no_args_is_help=True returns exit code 2 (not 0 like --help)
    assert result.exit_code == 2
    assert "QuestGraph" in result.stdout


def test_log_flag_writes_jsonl(isolated_config_dir: Path) -> None:
    result = runner.invoke(app, ["--log", "version"])
    close_file_logging()

    assert result.exit_code == 0
    lines = (isolated_config_dir / "logs" / LOG_FILE_NAME).read_text().splitlines()
    assert any(json.loads(line)["message"] == "file_logging_enabled" for line in lines)


# --- New Command Tests ---


def test_new_creates_project(tmp_path: Path) -> None:
    output = tmp_path / "realm.json"

    result = runner.invoke(app, ["new", "Realm", "-o", str(output)])

    assert result.exit_code == 0
    assert "Created project" in result.stdout
    project = _load(output)
    assert project.name == "Realm"
    assert project.quests == []


def test_new_with_quest(tmp_path: Path) -> None:
    output = tmp_path / "realm.json"

    result = runner.invoke(app, ["new", "Realm", "-o", str(output), "-q", "Intro"])

    assert result.exit_code == 0
    quest = _load(output).quests[0]
    assert quest.name == "Intro"
    assert [n.type for n in quest.nodes] == ["START"]


def test_new_refuses_to_overwrite(project_file: Path) -> None:
    result = runner.invoke(app, ["new", "Other", "-o", str(project_file)])

    assert result.exit_code == 1
    assert "already exists" in result.stdout
    assert _load(project_file).name == "Realm"


# --- Validate Command Tests ---


def test_validate_clean_quest(project_file: Path) -> None:
    result = runner.invoke(app, ["validate", str(project_file)])

    assert result.exit_code == 0
    assert "Save the Village: no issues" in result.stdout


def test_validate_reports_errors(broken_project_file: Path) -> None:
    result = runner.invoke(app, ["validate", str(broken_project_file)])

    assert result.exit_code == 1
    assert "1 error, 2 warnings" in result.stdout


def test_validate_json(broken_project_file: Path) -> None:
    result = runner.invoke(app, ["validate", str(broken_project_file), "--json"])

    assert result.exit_code == 1
    issues = json.loads(result.stdout)["quest-village"]
    assert {i["type"] for i in issues} == {"UNCONNECTED_OPTION", "ORPHAN_NODE", "UNREACHABLE"}


def test_validate_unknown_quest(project_file: Path) -> None:
    result = runner.invoke(app, ["validate", str(project_file), "-q", "Nope"])

    assert result.exit_code == 1
    assert "Quest 'Nope' not found" in result.stdout


def test_validate_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Cannot open" in result.stdout


def test_validate_project_without_quests(tmp_path: Path) -> None:
    output = tmp_path / "empty.json"
    runner.invoke(app, ["new", "Empty", "-o", str(output)])

    result = runner.invoke(app, ["validate", str(output)])

    assert result.exit_code == 1
    assert "Project has no quests" in result.stdout


# --- Search Command Tests ---


def test_search_finds_speaker(project_file: Path) -> None:
    result = runner.invoke(app, ["search", str(project_file), "elder"])

    assert result.exit_code == 0
    assert "1 node(s) match 'elder'" in result.stdout
    assert "speaker" in result.stdout


def test_search_no_matches(project_file: Path) -> None:
    result = runner.invoke(app, ["search", str(project_file), "dragon"])

    assert result.exit_code == 0
    assert "No matches for 'dragon'" in result.stdout


# --- Layout Command Tests ---


def test_layout_saves_positions(project_file: Path) -> None:
    result = runner.invoke(app, ["layout", str(project_file)])

    assert result.exit_code == 0
    assert "Saved 3 positions" in result.stdout
    quest = _load(project_file).quests[0]
    positions = {n.id: n.position for n in quest.nodes}
    assert positions["start"].x == positions["elder"].x == positions["end"].x == 50
    assert positions["start"].y < positions["elder"].y < positions["end"].y


def test_layout_left_to_right(project_file: Path) -> None:
    result = runner.invoke(app, ["layout", str(project_file), "-d", "LR"])

    assert result.exit_code == 0
    quest = _load(project_file).quests[0]
    positions = {n.id: n.position for n in quest.nodes}
    assert positions["start"].x < positions["elder"].x < positions["end"].x


def test_layout_direction_from_environment(
    project_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("QG_LAYOUT_DIRECTION", "LR")

    result = runner.invoke(app, ["layout", str(project_file), "--dry-run"])

    assert result.exit_code == 0
    assert "(LR)" in result.stdout


def test_layout_dry_run_leaves_file(project_file: Path) -> None:
    before = project_file.read_text()

    result = runner.invoke(app, ["layout", str(project_file), "--dry-run"])

    assert result.exit_code == 0
    assert project_file.read_text() == before


def test_layout_unknown_direction(project_file: Path) -> None:
    result = runner.invoke(app, ["layout", str(project_file), "-d", "diagonal"])

    assert result.exit_code == 1
    assert "Unknown layout direction" in result.stdout


def test_layout_uses_config_file(project_file: Path, isolated_config_dir: Path) -> None:
    isolated_config_dir.mkdir(parents=True)
    (isolated_config_dir / "config.yaml").write_text("layout:\n  direction: LR\n")

    result = runner.invoke(app, ["layout", str(project_file), "--dry-run"])

    assert result.exit_code == 0
    assert "(LR)" in result.stdout


def test_invalid_config_file(project_file: Path, isolated_config_dir: Path) -> None:
    isolated_config_dir.mkdir(parents=True)
    (isolated_config_dir / "config.yaml").write_text("layout: [broken\n")

    result = runner.invoke(app, ["layout", str(project_file)])

    assert result.exit_code == 1
    assert "Error" in result.stdout


# --- Export / Import Command Tests ---


def test_export_quest(project_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "out" / "quest.json"

    result = runner.invoke(app, ["export", str(project_file), "-o", str(output)])

    assert result.exit_code == 0
    data = json.loads(output.read_text())
    assert data["version"] == "1.0.0"
    assert data["quest"]["name"] == "Save the Village"
    assert "viewport" not in data["quest"]


def test_export_project(project_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "project-export.json"

    result = runner.invoke(app, ["export", str(project_file), "-o", str(output), "--project"])

    assert result.exit_code == 0
    data = json.loads(output.read_text())
    assert data["project"]["name"] == "Realm"


def test_import_quest(project_file: Path, tmp_path: Path, village_project: Project) -> None:
    quest_file = tmp_path / "quest.json"
    quest_file.write_text(to_json_string(export_quest(village_project.quests[0])))

    result = runner.invoke(app, ["import", str(project_file), str(quest_file)])

    assert result.exit_code == 0
    assert "3 nodes, 2 connections" in result.stdout
    names = [q.name for q in _load(project_file).quests]
    assert names == ["Save the Village", "Save the Village (Imported)"]


def test_import_rejects_non_quest(project_file: Path, tmp_path: Path) -> None:
    quest_file = tmp_path / "quest.json"
    quest_file.write_text("{}")

    result = runner.invoke(app, ["import", str(project_file), str(quest_file)])

    assert result.exit_code == 1
    assert "does not contain a quest" in result.stdout
    assert len(_load(project_file).quests) == 1


# --- Preview Command Tests ---


def test_preview_walks_to_end(project_file: Path) -> None:
    result = runner.invoke(app, ["preview", str(project_file)], input="1\n1\n")

    assert result.exit_code == 0
    assert "The Call" in result.stdout
    assert "Elder: The village is in danger." in result.stdout
    assert "Quest finished." in result.stdout


def test_preview_back_and_quit(project_file: Path) -> None:
    result = runner.invoke(app, ["preview", str(project_file)], input="b\n1\nb\nq\n")

    assert result.exit_code == 0
    assert "Already at the first step." in result.stdout
    assert "Quest finished." not in result.stdout


def test_preview_rejects_bad_choice(project_file: Path) -> None:
    result = runner.invoke(app, ["preview", str(project_file)], input="7\nq\n")

    assert result.exit_code == 0
    assert "Enter 1-1" in result.stdout


def test_preview_unconnected_option(broken_project_file: Path) -> None:
    result = runner.invoke(app, ["preview", str(broken_project_file)], input="1\n1\nq\n")

    assert result.exit_code == 0
    assert "not connected" in result.stdout


def test_preview_prints_labels_verbatim(tmp_path: Path, village_project: Project) -> None:
    label = "[bold]Accept[/bold]"
    quest = document.update_node(
        village_project.quests[0], "start", options=[Option(id="opt-accept", label=label)]
    )
    path = tmp_path / "markup.json"
    path.write_text(dump_project(document.replace_quest(village_project, quest)))

    result = runner.invoke(app, ["preview", str(path)], input="q\n")

    assert result.exit_code == 0
    assert f"1. {label}" in result.stdout


# --- Recent Command Tests ---


def test_recent_without_record() -> None:
    result = runner.invoke(app, ["recent"])

    assert result.exit_code == 0
    assert "No recent project." in result.stdout


def test_recent_after_save(tmp_path: Path) -> None:
    runner.invoke(app, ["new", "Realm", "-o", str(tmp_path / "realm.json")])

    result = runner.invoke(app, ["recent"])

    assert result.exit_code == 0
    assert "Realm" in result.stdout
    assert "Last opened" in result.stdout
