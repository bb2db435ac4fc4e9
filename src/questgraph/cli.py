"""QuestGraph CLI - typer application entry point."""

from __future__ import annotations

import atexit
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, assert_never

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from questgraph.config import DEFAULT_CONFIG_DIR, ConfigError, EditorConfig, load_editor_config
from questgraph.export import export_project, export_quest, to_json_string
from questgraph.graph import (
    QuestSimulation,
    create_node,
    document,
    get_unique_node_ids,
    layout,
    node_label,
    search,
    validate_report,
)
from questgraph.models import (
    AndNode,
    ChoiceNode,
    DialogueNode,
    EndNode,
    EventNode,
    IfNode,
    NodeType,
    OrNode,
    Position,
    StartNode,
)
from questgraph.observability import close_file_logging, configure_logging, get_logger
from questgraph.session import EditorSession
from questgraph.storage import load_recent_project, read_text_file, write_text_file

if TYPE_CHECKING:
    from questgraph.models import Quest, QuestNode

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="qg",
    help="QuestGraph: validate, search, lay out and convert quest graphs.",
    no_args_is_help=True,
)
console = Console()

# Global state for logging flags (set by callback, used by commands)
_config_dir: Path = DEFAULT_CONFIG_DIR

_SEVERITY_STYLES = {"error": "[red]✗ error[/red]", "warning": "[yellow]! warning[/yellow]"}


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_to_file: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to {config dir}/logs/debug.jsonl.",
        ),
    ] = False,
    config_dir: Annotated[
        Path,
        typer.Option(
            "--config-dir",
            help="Editor config directory (default: ~/.config/questgraph).",
            envvar="QG_CONFIG_DIR",
        ),
    ] = DEFAULT_CONFIG_DIR,
) -> None:
    """QuestGraph: validate, search, lay out and convert quest graphs."""
    global _config_dir
    _config_dir = config_dir

    if log_to_file:
        log_path = configure_logging(
            verbosity=verbose, log_to_file=True, log_dir=config_dir / "logs"
        )
        atexit.register(close_file_logging)
        get_logger(__name__).info("file_logging_enabled", path=str(log_path))
    else:
        configure_logging(verbosity=verbose)


def _load_config() -> EditorConfig:
    try:
        return load_editor_config(_config_dir)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _open_session(project_file: Path) -> EditorSession:
    """Open a project file, exit with error if it cannot be loaded."""
    config = _load_config()
    session = EditorSession(recent_record=config.recent_project_path)
    result = session.open(project_file)
    if not result.ok:
        console.print(f"[red]Error:[/red] Cannot open '{project_file}': {result.error}")
        raise typer.Exit(1)
    return session


def _save_session(session: EditorSession) -> None:
    result = session.save()
    if not result.ok:
        console.print(f"[red]Error:[/red] Cannot save '{session.file_path}': {result.error}")
        raise typer.Exit(1)


def _select_quest(session: EditorSession, quest_ref: str | None) -> Quest:
    """Pick a quest by id or name, or the first quest when no ref is given."""
    project = session.project
    assert project is not None
    if quest_ref is None:
        quest = session.current_quest
    else:
        quest = next((q for q in project.quests if quest_ref in (q.id, q.name)), None)
    if quest is None and quest_ref is None:
        console.print("[red]Error:[/red] Project has no quests")
        raise typer.Exit(1)
    if quest is None:
        available = ", ".join(q.name for q in project.quests) or "none"
        console.print(f"[red]Error:[/red] Quest '{quest_ref}' not found. Available: {available}")
        raise typer.Exit(1)
    session.select_quest(quest.id)
    return quest


ProjectArg = Annotated[Path, typer.Argument(help="Project file (.json)")]
QuestOpt = Annotated[
    str | None,
    typer.Option("--quest", "-q", help="Quest id or name (default: first quest)."),
]


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from questgraph import __version__

    console.print(f"QuestGraph v{__version__}")


@app.command()
def new(
    name: Annotated[str, typer.Argument(help="Project name")],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Project file to create."),
    ],
    quest: Annotated[
        str | None,
        typer.Option("--quest", "-q", help="Also create a quest with a START node."),
    ] = None,
) -> None:
    """Create a new project file."""
    if output.exists():
        console.print(f"[red]Error:[/red] File '{output}' already exists")
        raise typer.Exit(1)

    config = _load_config()
    session = EditorSession.new(name, recent_record=config.recent_project_path)
    if quest:
        session.create_quest(quest)
        session.edit_quest(document.add_node, create_node(NodeType.START, Position(x=50, y=50)))

    result = session.save(output)
    if not result.ok:
        console.print(f"[red]Error:[/red] Cannot write '{output}': {result.error}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Created project: [bold]{name}[/bold]")
    console.print(f"  Location: {output.absolute()}")


@app.command()
def validate(
    project_file: ProjectArg,
    quest: QuestOpt = None,
    all_quests: Annotated[
        bool,
        typer.Option("--all", "-a", help="Validate every quest in the project."),
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print issues as JSON.")] = False,
) -> None:
    """Check quests for structural problems.

    Exits with status 1 when any quest has errors.
    """
    session = _open_session(project_file)
    assert session.project is not None
    quests = session.project.quests if all_quests else [_select_quest(session, quest)]

    any_errors = False
    json_out: dict[str, list[dict[str, object]]] = {}
    for q in quests:
        report = validate_report(q)
        any_errors = any_errors or report.has_errors
        if as_json:
            json_out[q.id] = [issue.to_dict() for issue in report.issues]
            continue

        if not report.issues:
            console.print(f"[green]✓[/green] {q.name}: no issues")
            continue

        table = Table(title=f"{q.name}: {report.summary}")
        table.add_column("Severity")
        table.add_column("Type", style="cyan")
        table.add_column("Message")
        for issue in report.issues:
            table.add_row(_SEVERITY_STYLES[issue.severity], str(issue.type), issue.message)
        console.print()
        console.print(table)

    if as_json:
        console.print_json(json.dumps(json_out))

    if any_errors:
        raise typer.Exit(1)


@app.command("search")
def search_cmd(
    project_file: ProjectArg,
    query: Annotated[str, typer.Argument(help="Text to look for")],
    quest: QuestOpt = None,
) -> None:
    """Find nodes whose text contains the query (case-insensitive)."""
    session = _open_session(project_file)
    q = _select_quest(session, quest)
    matches = search(q, query)

    if not matches:
        console.print(f"No matches for '{query}' in {q.name}")
        return

    table = Table(title=f"{len(get_unique_node_ids(matches))} node(s) match '{query}'")
    table.add_column("Node", style="cyan")
    table.add_column("Field", style="dim")
    table.add_column("Text")
    for match in matches:
        node = q.get_node(match.node_id)
        label = node_label(node) if node else match.node_id
        table.add_row(label, match.match_type, match.matched_text)
    console.print(table)


@app.command("layout")
def layout_cmd(
    project_file: ProjectArg,
    quest: QuestOpt = None,
    direction: Annotated[
        str | None,
        typer.Option("--direction", "-d", help="TB (top to bottom) or LR (left to right)."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print positions without saving."),
    ] = False,
) -> None:
    """Arrange a quest's nodes in levels and save the new positions."""
    config = _load_config()
    try:
        options = config.layout.to_options(direction)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    session = _open_session(project_file)
    q = _select_quest(session, quest)
    positions = layout(q, options=options)

    table = Table(title=f"Layout of {q.name} ({options.direction})")
    table.add_column("Node", style="cyan")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for node in q.nodes:
        pos = positions.get(node.id)
        if pos is not None:
            table.add_row(node_label(node), f"{pos.x:g}", f"{pos.y:g}")
    console.print(table)

    if dry_run:
        return
    session.edit_quest(document.apply_layout, positions)
    _save_session(session)
    console.print(f"[green]✓[/green] Saved {len(positions)} positions to {project_file}")


@app.command("export")
def export_cmd(
    project_file: ProjectArg,
    output: Annotated[Path, typer.Option("--output", "-o", help="File to write.")],
    quest: QuestOpt = None,
    whole_project: Annotated[
        bool,
        typer.Option("--project", "-p", help="Export the whole project instead of one quest."),
    ] = False,
) -> None:
    """Write a quest (or the whole project) in the portable export format."""
    session = _open_session(project_file)
    assert session.project is not None
    if whole_project:
        data = export_project(session.project)
    else:
        data = export_quest(_select_quest(session, quest))

    result = write_text_file(output, to_json_string(data))
    if not result.ok:
        console.print(f"[red]Error:[/red] Cannot write '{output}': {result.error}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Exported to {output}")


@app.command("import")
def import_cmd(
    project_file: ProjectArg,
    quest_file: Annotated[Path, typer.Argument(help="Exported quest file")],
) -> None:
    """Import an exported quest into a project with fresh ids."""
    session = _open_session(project_file)
    result = read_text_file(quest_file)
    if not result.ok or result.data is None:
        console.print(f"[red]Error:[/red] Cannot read '{quest_file}': {result.error}")
        raise typer.Exit(1)

    quest = session.import_quest(result.data)
    if quest is None:
        console.print(f"[red]Error:[/red] '{quest_file}' does not contain a quest")
        raise typer.Exit(1)

    _save_session(session)
    console.print(
        f"[green]✓[/green] Imported [bold]{quest.name}[/bold] "
        f"({len(quest.nodes)} nodes, {len(quest.connections)} connections)"
    )


@app.command()
def preview(
    project_file: ProjectArg,
    quest: QuestOpt = None,
) -> None:
    """Step through a quest from its START node.

    Enter a choice number to move on, 'b' to go back, 'q' to quit.
    """
    session = _open_session(project_file)
    q = _select_quest(session, quest)
    try:
        sim = QuestSimulation(q)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    while True:
        node = sim.current_node
        title = escape(f"Step {sim.step}: {node_label(node)}")
        console.print(Panel(escape(_describe(node)), title=title))
        if sim.is_finished:
            console.print("[green]Quest finished.[/green]")
            return

        choices = sim.choices()
        for i, choice in enumerate(choices, start=1):
            style = "" if choice.available else "[dim]"
            suffix = "" if choice.available else " (not connected)[/dim]"
            console.print(f"  {style}{i}. {escape(choice.label)}{suffix}")

        answer = typer.prompt("Choice", default="q").strip().lower()
        if answer == "q":
            return
        if answer == "b":
            if not sim.go_back():
                console.print("[yellow]Already at the first step.[/yellow]")
            continue
        if not answer.isdigit() or not 1 <= int(answer) <= len(choices):
            console.print(f"[yellow]Enter 1-{len(choices)}, 'b' or 'q'.[/yellow]")
            continue

        choice = choices[int(answer) - 1]
        if choice.kind == "option" and choice.port is not None:
            moved = sim.choose_option(choice.port)
        elif choice.kind == "branch":
            moved = sim.choose_branch("true" if choice.port == "true" else "false")
        else:
            moved = sim.advance()
        if not moved:
            console.print("[yellow]That path is not connected.[/yellow]")


def _describe(node: QuestNode) -> str:
    """Player-facing text of a node for the preview panel."""
    if isinstance(node, StartNode):
        return node.description
    elif isinstance(node, DialogueNode):
        return f"{node.speaker}: {node.text}" if node.speaker else node.text
    elif isinstance(node, ChoiceNode):
        return node.prompt or ""
    elif isinstance(node, EventNode):
        return f"{node.action} {node.event_name or node.event_id or 'unnamed event'}"
    elif isinstance(node, IfNode):
        return node.condition
    elif isinstance(node, AndNode | OrNode):
        return ""
    elif isinstance(node, EndNode):
        return node.description or node.outcome
    else:
        assert_never(node)


@app.command()
def recent() -> None:
    """Show the most recently opened or saved project."""
    config = _load_config()
    record = load_recent_project(config.recent_project_path)
    if record is None:
        console.print("No recent project.")
        return
    console.print(f"[bold]{record.name}[/bold]  {record.path}")
    console.print(f"  Last opened: {record.last_opened:%Y-%m-%d %H:%M}")


if __name__ == "__main__":
    app()
