"""CLI commands for termdesk."""

from __future__ import annotations

import asyncio
import shutil
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from termdesk import __logo__, __version__

if TYPE_CHECKING:
    from termdesk.config.schema import Config

app = typer.Typer(
    name="termdesk",
    help=f"{__logo__} termdesk - terminal-centred desktop workspace",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} termdesk v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log at DEBUG level."),
) -> None:
    """termdesk entrypoint."""
    del version
    from termdesk.config.loader import load_config
    from termdesk.logging_setup import configure_logging

    cfg = load_config()
    configure_logging(
        "DEBUG" if verbose else cfg.logging.level,
        cfg.logging.file,
        cfg.logging.rotation,
    )


@app.command()
def onboard(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config without prompt."),
) -> None:
    """Write a default configuration file."""
    from termdesk.config.loader import get_config_path, save_config
    from termdesk.config.schema import Config
    from termdesk.runtime.preflight import build_env, resolve_command

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    config = Config()
    save_config(config)
    console.print(f"[green]OK[/green] Created config at {config_path}")

    env = build_env(config.session.extra_paths, config.session.term)
    resolved = resolve_command(config.session.command, env)
    if resolved:
        console.print(f"[green]OK[/green] Found {config.session.command}: [cyan]{resolved}[/cyan]")
    else:
        console.print(f"[yellow]{config.session.command} not found on PATH[/yellow]")


@app.command()
def check() -> None:
    """Check that the session tool can be found."""
    from termdesk.config.loader import load_config
    from termdesk.runtime.preflight import build_env, resolve_command

    config = load_config()
    env = build_env(config.session.extra_paths, config.session.term)
    resolved = resolve_command(config.session.command, env)
    if resolved is None:
        console.print(f"[red]{config.session.command} is not installed or not on PATH[/red]")
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] {config.session.command}: [cyan]{resolved}[/cyan]")


@app.command()
def tree(
    path: Path = typer.Argument(Path("."), help="Directory to show."),
    expand_all: bool = typer.Option(False, "--expand-all", "-a", help="Expand every subdirectory."),
) -> None:
    """Print the workspace file tree for a directory."""
    from termdesk.files.listing import LocalDirectoryLister
    from termdesk.workspace.file_tree import FileTreeCache

    root = str(path.expanduser().resolve())
    cache = FileTreeCache(LocalDirectoryLister(), root=root)

    async def _build() -> None:
        await cache.refresh()
        if expand_all:
            for node in list(cache.nodes):
                if node.entry.is_directory:
                    await cache.expand_all(node.path)

    asyncio.run(_build())

    rendered = Tree(f"[bold]{root}[/bold]")

    def _add(parent: Tree, nodes: list) -> None:
        for node in nodes:
            if node.entry.is_directory:
                marker = "▾" if node.is_expanded else "▸"
                branch = parent.add(f"[cyan]{marker} {node.entry.name}[/cyan]")
                _add(branch, node.children or [])
            else:
                parent.add(f"· {node.entry.name}")

    _add(rendered, cache.nodes)
    console.print(rendered)


@app.command()
def recent(
    clear: bool = typer.Option(False, "--clear", help="Forget all recent sessions."),
) -> None:
    """List recently used session directories."""
    from termdesk.config.loader import load_config
    from termdesk.session.recent_store import RecentSessionStore

    store = RecentSessionStore(load_config().state_path)
    if clear:
        store.clear()
        console.print("[green]OK[/green] Cleared recent sessions")
        return

    entries = store.load()
    if not entries:
        console.print("[dim]No recent sessions[/dim]")
        return

    table = Table(title="Recent sessions")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    table.add_column("Last used", style="dim")
    for entry in entries:
        when = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        table.add_row(entry.name, entry.path, when)
    console.print(table)


@app.command()
def render(path: Path = typer.Argument(..., help="File to render.")) -> None:
    """Render a file the way a file tab would and summarise the result."""
    from termdesk.documents.renderers import DocumentRenderer
    from termdesk.errors import ConversionError

    try:
        document = DocumentRenderer().render(str(path.expanduser().resolve()))
    except ConversionError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    console.print(f"[bold]{document.name}[/bold] [dim]({document.category.value})[/dim]")
    data = document.data
    if "content" in data:
        console.print(data["content"][:2000])
    elif "rows" in data:
        console.print(f"{len(data['rows'])} row(s)")
    elif "sheets" in data:
        for name, rows in data["sheets"].items():
            console.print(f"  sheet [cyan]{name}[/cyan]: {len(rows)} row(s)")
    elif "slides" in data:
        for slide in data["slides"]:
            console.print(f"  {slide['index']}. {slide['title'] or '(untitled)'}")
    elif "blocks" in data:
        console.print(f"{len(data['blocks'])} block(s)")
    else:
        console.print(", ".join(f"{k}" for k in data))


@app.command()
def run(
    path: Path = typer.Argument(Path("."), help="Working directory for the session."),
) -> None:
    """Run the session tool headless, streaming its output to stdout."""
    from termdesk.config.loader import load_config

    config = load_config()
    try:
        code = asyncio.run(_run_session(config, str(path.expanduser().resolve())))
    except KeyboardInterrupt:
        code = 130
    raise typer.Exit(code or 0)


async def _run_session(config: "Config", workdir: str) -> int | None:
    from termdesk.events import TERMINAL_EXITED, TERMINAL_OUTPUT, WORKSPACE_PROMPT
    from termdesk.workspace.workspace import Workspace

    workspace = Workspace(config, workdir=workdir)
    loop = asyncio.get_running_loop()
    exited: asyncio.Future = loop.create_future()

    def _on_output(event: object) -> None:
        sys.stdout.write(event.text)
        sys.stdout.flush()

    def _on_exit(event: object) -> None:
        if not exited.done():
            exited.set_result(event)

    workspace.hub.subscribe(TERMINAL_OUTPUT, _on_output)
    workspace.hub.subscribe(TERMINAL_EXITED, _on_exit)
    workspace.hub.subscribe(WORKSPACE_PROMPT, lambda event: console.print(f"[yellow]{event.text}[/yellow]"))

    size = shutil.get_terminal_size()
    if not await workspace.start_session(size.columns, size.lines):
        if exited.done() and exited.result().error:
            console.print(f"[red]{exited.result().error}[/red]")
        return 1

    def _forward_stdin() -> None:
        for line in sys.stdin:
            loop.call_soon_threadsafe(workspace.send_keys, line.replace("\n", "\r"))

    threading.Thread(target=_forward_stdin, daemon=True, name="termdesk-stdin").start()
    pump = asyncio.create_task(workspace.session.run(config.session.poll_interval_s))
    try:
        event = await exited
    finally:
        workspace.session.close()
        pump.cancel()
    logger.debug(f"[cli] Session finished: {event}")
    return event.code
