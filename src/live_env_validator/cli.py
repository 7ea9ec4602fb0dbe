from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

import typer

from .diagnostics import DiagnosticStore
from .errors import EnvValidatorError
from .server import serve_http
from .validator import FixRequest
from .workspace import Workspace, WorkspaceWatcher
from .ws import serve_ws

app = typer.Typer(add_completion=False, help="live-env-validator - flag env vars missing from .env files")


def _workspace(ctx: typer.Context) -> Workspace:
    ctx.ensure_object(dict)
    root = ctx.obj.get("root")
    if root is None:
        root = Path.cwd()
    try:
        return Workspace(root)
    except EnvValidatorError as exc:
        _fail(str(exc))


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _echo_diagnostics(store: DiagnosticStore) -> None:
    for document, diagnostics in store.items():
        for diagnostic in diagnostics:
            start = diagnostic.span.start
            typer.echo(
                f"{document}:{start.line + 1}:{start.character + 1}: "
                f"{diagnostic.severity.value}: {diagnostic.message}"
            )


def _prompt_choice(candidates: Sequence[Path]) -> Optional[Path]:
    typer.echo("Select the .env file to add the variable to:")
    for index, path in enumerate(candidates, start=1):
        typer.echo(f"  {index}. {path.name} ({path})")
    choice = typer.prompt("Number", type=int, default=1)
    if 1 <= choice <= len(candidates):
        return candidates[choice - 1]
    return None


@app.callback()
def cli(
    ctx: typer.Context,
    root: Path = typer.Option(Path.cwd(), help="Workspace root"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"root": root}


@app.command()
def check(
    ctx: typer.Context,
    paths: Optional[List[Path]] = typer.Argument(None, help="Files to check (defaults to the whole workspace)"),
    as_json: bool = typer.Option(False, "--json", help="Print diagnostics as JSON"),
) -> None:
    """Report env var references missing from every .env file."""
    workspace = _workspace(ctx)
    store = DiagnosticStore()
    workspace.update_diagnostics(store, paths or None)
    if as_json:
        typer.echo(json.dumps(store.snapshot(), indent=2))
    else:
        _echo_diagnostics(store)
        typer.echo(f"{store.total} undefined reference(s) in {len(store.items())} document(s)")
    if store.total:
        raise typer.Exit(1)


@app.command()
def env(ctx: typer.Context) -> None:
    """List .env files and the names they declare."""
    workspace = _workspace(ctx)
    files = workspace.env_files()
    if not files:
        typer.echo("No .env file found in the workspace.")
        return
    for path in files:
        typer.echo(f"- {workspace.identity(path)}")
    for name in sorted(workspace.declared()):
        typer.echo(name)


@app.command()
def fix(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Variable to declare"),
    document: str = typer.Option("", help="Document the reference was found in"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Target .env file (skips selection)"),
) -> None:
    """Append NAME= to a .env file unless it is already declared."""
    workspace = _workspace(ctx)
    request = FixRequest(name=name, document=document)
    try:
        outcome = workspace.add_env_var(request, choose=_prompt_choice, env_file=env_file)
    except EnvValidatorError as exc:
        _fail(str(exc))
    typer.echo(workspace.describe(outcome))


@app.command()
def watch(
    ctx: typer.Context,
    interval: float = typer.Option(1.0, help="Seconds between polls"),
) -> None:
    """Re-check the workspace whenever a source or .env file changes."""
    workspace = _workspace(ctx)
    store = DiagnosticStore()
    watcher = WorkspaceWatcher(workspace, store)
    typer.echo("--- Watching; press Ctrl+C to stop ---")
    try:
        while True:
            if watcher.poll():
                typer.echo(f"[{store.updated_at}] {store.total} undefined reference(s)")
                _echo_diagnostics(store)
            time.sleep(interval)
    except KeyboardInterrupt:
        typer.echo("Stopped watch")


@app.command()
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Bind host"),
    port: int = typer.Option(8124, help="Port"),
) -> None:
    workspace = _workspace(ctx)
    store = DiagnosticStore()
    workspace.update_diagnostics(store)
    typer.echo(f"Serving live-env-validator on http://{host}:{port}")
    serve_http(workspace, store, host=host, port=port)


@app.command()
def ws(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Bind host"),
    port: int = typer.Option(8766, help="WebSocket port"),
) -> None:
    workspace = _workspace(ctx)
    store = DiagnosticStore()
    watcher = WorkspaceWatcher(workspace, store)
    watcher.poll()
    typer.echo(f"Streaming diagnostics on ws://{host}:{port}/<document>")
    serve_ws(store, watcher, host=host, port=port)
