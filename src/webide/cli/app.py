"""
Web IDE CLI: edit, run and synchronize a project kept in a workspace snapshot.

Each command is one step of an editing session:
- Loads the workspace snapshot (the starter project when the file is missing)
- Runs one operation through the Workspace service
- Prints the terminal lines the operation produced
- Writes the snapshot back when the tree changed
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from webide.cli.formatters import build_tree_view, print_lines
from webide.cli.load_helpers import load_or_exit
from webide.cli.paths import find_snapshot_file, resolve_export_path, workspace_path
from webide.config import load_config
from webide.core.errors import WebIDEError
from webide.core.terminal import WELCOME_LINE
from webide.core.tree.filtering import count_matches
from webide.core.tree.models import default_seed
from webide.io.snapshot import export_snapshot, import_snapshot
from webide.services.workspace_service import Workspace
from webide.utils.logging import configure_logging

app = typer.Typer(help="Web IDE CLI: edit, run and synchronize a project tree.")
console = Console()


@dataclass
class CLIState:
    workspace: Optional[str] = None
    config: Optional[str] = None
    log_level: Optional[str] = None
    verbose_load: bool = False


@app.callback()
def main(
    ctx: typer.Context,
    workspace: Optional[str] = typer.Option(None, "--workspace", "-w", help="Workspace snapshot file"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to webide.yaml"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
    verbose: bool = typer.Option(False, "--verbose-load", help="Display full validation trace on load errors"),
) -> None:
    ctx.obj = CLIState(workspace=workspace, config=config, log_level=log_level, verbose_load=verbose)


def _state(ctx: typer.Context) -> CLIState:
    return ctx.obj if isinstance(ctx.obj, CLIState) else CLIState()


@contextmanager
def _open_workspace(ctx: typer.Context) -> Iterator[Workspace]:
    state = _state(ctx)
    config = load_or_exit(load_config, state.config, console=console, verbose_errors=state.verbose_load)
    configure_logging(state.log_level or config.log_level)

    path = workspace_path(state.workspace, config.workspace)
    tree = None
    if path.exists():
        tree = load_or_exit(import_snapshot, path, console=console, verbose_errors=state.verbose_load)
    ws = Workspace.from_config(config, tree=tree)
    mark = len(ws.terminal)
    before = ws.tree

    try:
        yield ws
    except WebIDEError:
        print_lines(console, ws.terminal.since(mark))
        raise typer.Exit(code=1)

    print_lines(console, ws.terminal.since(mark))
    if ws.tree is not before:
        load_or_exit(export_snapshot, ws.tree, path, console=console)


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing workspace"),
) -> None:
    """Create the workspace snapshot with the starter project."""
    state = _state(ctx)
    config = load_or_exit(load_config, state.config, console=console)
    path = workspace_path(state.workspace, config.workspace)
    if path.exists() and not force:
        console.print(f"[yellow]Workspace already exists[/yellow]: {escape(str(path))} (use --force)")
        raise typer.Exit(code=1)
    load_or_exit(export_snapshot, default_seed(), path, console=console)
    console.print(WELCOME_LINE, markup=False)
    console.print(f"[green]OK[/green] Initialized workspace {escape(str(path))}")


@app.command()
def tree(
    ctx: typer.Context,
    search: str = typer.Option("", "--search", "-s", help="Show only names containing this text"),
) -> None:
    """Show the project tree, optionally filtered."""
    with _open_workspace(ctx) as ws:
        nodes = ws.search(search)
        console.print(build_tree_view(nodes))
        if search:
            matches = count_matches(ws.tree, search)
            if matches:
                console.print(f"[dim]{matches} match(es) for {escape(search)!r}[/dim]")
            else:
                console.print(f"[dim]No matches for {escape(search)!r}[/dim]")


@app.command("new-file")
def new_file(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="File name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent folder path"),
) -> None:
    """Create an empty file."""
    with _open_workspace(ctx) as ws:
        ws.create_file(name, parent)


@app.command("new-folder")
def new_folder(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Folder name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent folder path"),
) -> None:
    """Create an empty folder."""
    with _open_workspace(ctx) as ws:
        ws.create_folder(name, parent)


@app.command()
def rename(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Node path"),
    new_name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a file or folder in place."""
    with _open_workspace(ctx) as ws:
        ws.rename(path, new_name)


@app.command()
def move(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Node path"),
    to: Optional[str] = typer.Option(None, "--to", help="Destination folder (project root when omitted)"),
) -> None:
    """Move a file or folder under another folder."""
    with _open_workspace(ctx) as ws:
        ws.move(path, to)


@app.command()
def delete(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Node path"),
) -> None:
    """Delete a file or a folder with everything inside it."""
    with _open_workspace(ctx) as ws:
        ws.delete(path)


@app.command()
def cat(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File path"),
) -> None:
    """Print the content of a file."""
    with _open_workspace(ctx) as ws:
        node = ws.open(path)
        console.print(node.content, markup=False, highlight=False, soft_wrap=True)


@app.command()
def write(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File path"),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="New file content"),
    from_file: Optional[str] = typer.Option(None, "--from-file", "-f", help="Read new content from a local file"),
) -> None:
    """Replace the content of a file and save it."""
    if (text is None) == (from_file is None):
        console.print("[red]Provide exactly one of --text or --from-file[/red]")
        raise typer.Exit(code=2)
    if from_file is not None:
        try:
            text = Path(from_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            console.print(f"[red]Cannot read {escape(from_file)}:[/red] {escape(str(exc))}")
            raise typer.Exit(code=1)
    with _open_workspace(ctx) as ws:
        ws.write(path, text or "")


@app.command()
def run(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Script path"),
) -> None:
    """Run a script and print its output."""
    with _open_workspace(ctx) as ws:
        result = asyncio.run(ws.run(path))
    if result.supported and result.error:
        raise typer.Exit(code=1)


@app.command("export")
def export_project(
    ctx: typer.Context,
    out: str = typer.Argument(..., help="Target file (.json, .yaml or .yml)"),
) -> None:
    """Download the project to a snapshot file."""
    with _open_workspace(ctx) as ws:
        written = ws.export(resolve_export_path(out))
    console.print(f"[dim]Saved: {escape(str(written))}[/dim]")


@app.command("import")
def import_project(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Snapshot file to upload"),
) -> None:
    """Replace the project with the content of a snapshot file."""
    try:
        resolved = find_snapshot_file(source)
    except FileNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    with _open_workspace(ctx) as ws:
        ws.import_(resolved)


@app.command()
def connect(ctx: typer.Context) -> None:
    """Check the configured access token."""
    with _open_workspace(ctx) as ws:
        account = asyncio.run(ws.connect())
    if account:
        console.print(f"[dim]Account: {escape(account)}[/dim]")


@app.command()
def push(
    ctx: typer.Context,
    message: str = typer.Option("", "--message", "-m", help="Commit message"),
) -> None:
    """Push the whole project as one commit."""
    with _open_workspace(ctx) as ws:
        ack = asyncio.run(ws.push(message))
    if ack.revision:
        console.print(f"[dim]Revision: {escape(ack.revision)}[/dim]")


@app.command()
def pull(ctx: typer.Context) -> None:
    """Replace the project with the remote repository content."""
    with _open_workspace(ctx) as ws:
        asyncio.run(ws.pull())


__all__ = ["app"]
