"""CLI entry point for vhandle.

Invoked as::

    vhandle [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m vhandle.cli.main

Commands
--------
parse        Break a handle into prefix, suffix and version
grammar      Print the handle grammar
init         Create an empty workspace file
add-object   Create a repository object in the workspace
new-version  Create the next version of an object's lineage
mint         Mint (or return) an object's handle
register     Register an object, optionally under an explicit handle
reserve      Bind a handle without version checks or metadata changes
resolve      Find the object a handle is bound to
lookup       Show the handle bound to an object
delete       Unbind an object's handle
show         Show an object's handle, version and identifier metadata
version      Show version information
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from vhandle.engine import HandleEngine, Outcome
    from vhandle.model import RepositoryObject
    from vhandle.stores import MemoryBackend

console = Console()
err_console = Console(stderr=True)

DEFAULT_WORKSPACE = "vhandle-workspace.yaml"


@dataclass
class _State:
    workspace: Path
    config_path: Path | None


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def _load(state: _State) -> "MemoryBackend":
    """Load the workspace, exiting on error."""
    from vhandle.workspace import WorkspaceError, load_workspace

    try:
        return load_workspace(state.workspace)
    except (WorkspaceError, OSError) as exc:
        _fail(f"Cannot load workspace {state.workspace}: {exc}")


def _save(state: _State, backend: "MemoryBackend") -> None:
    from vhandle.workspace import save_workspace

    try:
        save_workspace(backend, state.workspace)
    except OSError as exc:
        _fail(f"Cannot write workspace {state.workspace}: {exc}")


def _engine(state: _State, backend: "MemoryBackend") -> "HandleEngine":
    """Build an engine over ``backend``, exiting on configuration errors."""
    from vhandle.config import ConfigurationError, load_config

    try:
        return backend.engine(load_config(state.config_path))
    except ConfigurationError as exc:
        _fail(str(exc))


def _object_or_exit(backend: "MemoryBackend", object_id: str) -> "RepositoryObject":
    obj = backend.get_object(object_id)
    if obj is None:
        _fail(f"No object {object_id} in the workspace")
    return obj


def _report(outcome: "Outcome[str]") -> None:
    """Print an outcome and exit non-zero unless it is ``Ok``."""
    from vhandle.engine import Failed, NotFound

    if isinstance(outcome, Failed):
        err_console.print(f"[red]Failed:[/red] {outcome.error}")
        sys.exit(1)
    if isinstance(outcome, NotFound):
        err_console.print(f"[yellow]Not found:[/yellow] {outcome.reason}")
        sys.exit(1)
    console.print(outcome.value)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="vhandle")
@click.option(
    "--workspace",
    "-w",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_WORKSPACE,
    show_default=True,
    help="Workspace file holding objects, handles and histories",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (defaults to ./vhandle.yaml if present)",
)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)")
@click.pass_context
def cli(ctx: click.Context, workspace: Path, config_path: Path | None, verbose: int) -> None:
    """Versioned handle minting and resolution engine."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = _State(workspace=workspace, config_path=config_path)


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from vhandle import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]vhandle[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# grammar commands
# ---------------------------------------------------------------------------


@cli.command(name="parse")
@click.argument("text")
@click.pass_obj
def parse_command(state: _State, text: str) -> None:
    """Break a handle into prefix, suffix and version.

    TEXT is a bare handle or any accepted resolvable form.
    """
    from vhandle.config import ConfigurationError, load_config
    from vhandle.grammar import canonical_form, parse

    try:
        config = load_config(state.config_path)
    except ConfigurationError as exc:
        _fail(str(exc))

    identifier = parse(text, config.canonical_prefix)
    if not identifier:
        _fail(f"{text!r} is not a handle: {identifier.reason}")

    table = Table(title=f"Handle: {text}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("canonical", identifier.canonical)
    table.add_row("prefix", identifier.prefix)
    table.add_row("suffix", identifier.suffix)
    table.add_row(
        "version",
        str(identifier.version_ordinal) if identifier.version_ordinal else "[dim]unversioned[/dim]",
    )
    table.add_row("resolvable", canonical_form(identifier.canonical, config.canonical_prefix))
    console.print(table)


@cli.command(name="grammar")
def grammar_command() -> None:
    """Print the handle grammar in EBNF-like notation."""
    from vhandle.grammar import FULL_GRAMMAR

    console.print(Syntax(FULL_GRAMMAR, "text", line_numbers=False))


# ---------------------------------------------------------------------------
# workspace commands
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing workspace")
@click.pass_obj
def init_command(state: _State, force: bool) -> None:
    """Create an empty workspace file."""
    from vhandle.stores import MemoryBackend

    if state.workspace.exists() and not force:
        _fail(f"{state.workspace} already exists (use --force to overwrite)")
    _save(state, MemoryBackend())
    console.print(f"[green]Created[/green] {state.workspace}")


@cli.command(name="add-object")
@click.argument(
    "kind", type=click.Choice(["item", "collection", "community", "bitstream", "site"])
)
@click.option(
    "--no-versioning", is_flag=True, default=False, help="Create the object without version support"
)
@click.option(
    "--identifier",
    "identifiers",
    multiple=True,
    help="Seed an identifier metadata value (repeatable)",
)
@click.pass_obj
def add_object_command(
    state: _State, kind: str, no_versioning: bool, identifiers: tuple[str, ...]
) -> None:
    """Create a repository object of KIND and print its id."""
    from vhandle.model import DEFAULT_CAPABILITIES, Capability, ObjectKind

    backend = _load(state)
    object_kind = ObjectKind[kind.upper()]
    capabilities = DEFAULT_CAPABILITIES[object_kind]
    if no_versioning:
        capabilities = capabilities - {Capability.VERSIONED}
    obj = backend.add_object(object_kind, capabilities=capabilities)

    if identifiers:
        field = _engine(state, backend).config.identifier_field
        for value in identifiers:
            backend.metadata.add_value(obj, field, None, value)
        backend.metadata.persist(obj)

    _save(state, backend)
    console.print(obj.id)


@cli.command(name="new-version")
@click.argument("object_id")
@click.option("--summary", default="", help="Summary recorded on the new version")
@click.pass_obj
def new_version_command(state: _State, object_id: str, summary: str) -> None:
    """Create the next version of OBJECT_ID's lineage and print the new snapshot's id."""
    backend = _load(state)
    previous = _object_or_exit(backend, object_id)
    try:
        snapshot = backend.new_version(previous, summary=summary)
    except ValueError as exc:
        _fail(str(exc))
    _save(state, backend)
    console.print(snapshot.id)


# ---------------------------------------------------------------------------
# engine commands
# ---------------------------------------------------------------------------


@cli.command(name="mint")
@click.argument("object_id")
@click.pass_obj
def mint_command(state: _State, object_id: str) -> None:
    """Mint a handle for OBJECT_ID, or print the one it already has."""
    backend = _load(state)
    engine = _engine(state, backend)
    outcome = engine.mint(_object_or_exit(backend, object_id))
    _save(state, backend)
    _report(outcome)


@cli.command(name="register")
@click.argument("object_id")
@click.argument("handle", required=False)
@click.pass_obj
def register_command(state: _State, object_id: str, handle: str | None) -> None:
    """Register OBJECT_ID, under HANDLE when given.

    A versioned HANDLE (e.g. 123456789/100.4) is checked against the
    object's version history, and recreates the history when none exists.
    """
    backend = _load(state)
    engine = _engine(state, backend)
    outcome = engine.register(_object_or_exit(backend, object_id), handle)
    _save(state, backend)
    _report(outcome)


@cli.command(name="reserve")
@click.argument("object_id")
@click.argument("handle")
@click.pass_obj
def reserve_command(state: _State, object_id: str, handle: str) -> None:
    """Bind HANDLE to OBJECT_ID without version checks or metadata changes."""
    backend = _load(state)
    engine = _engine(state, backend)
    outcome = engine.reserve(_object_or_exit(backend, object_id), handle)
    _save(state, backend)
    _report(outcome)


@cli.command(name="resolve")
@click.argument("text")
@click.pass_obj
def resolve_command(state: _State, text: str) -> None:
    """Print the id of the object TEXT is bound to."""
    from vhandle.engine import Ok

    backend = _load(state)
    outcome = _engine(state, backend).resolve(text)
    if isinstance(outcome, Ok):
        console.print(f"{outcome.value.id} [dim]({outcome.value.kind.label})[/dim]")
        return
    _report(outcome)


@cli.command(name="lookup")
@click.argument("object_id")
@click.pass_obj
def lookup_command(state: _State, object_id: str) -> None:
    """Print the handle bound to OBJECT_ID."""
    backend = _load(state)
    _report(_engine(state, backend).lookup(_object_or_exit(backend, object_id)))


@cli.command(name="delete")
@click.argument("object_id")
@click.argument("handle", required=False)
@click.pass_obj
def delete_command(state: _State, object_id: str, handle: str | None) -> None:
    """Unbind OBJECT_ID's handle and print it."""
    backend = _load(state)
    engine = _engine(state, backend)
    outcome = engine.delete(_object_or_exit(backend, object_id), handle)
    _save(state, backend)
    _report(outcome)


@cli.command(name="show")
@click.argument("object_id")
@click.pass_obj
def show_command(state: _State, object_id: str) -> None:
    """Show OBJECT_ID's handle, version and identifier metadata."""
    backend = _load(state)
    engine = _engine(state, backend)
    obj = _object_or_exit(backend, object_id)

    handle = backend.registry.find_bound(obj)
    history = backend.versions.find_history(obj)
    version = history.version_of(obj) if history else None

    table = Table(title=f"Object: {obj.id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("kind", obj.kind.label)
    table.add_row("capabilities", ", ".join(sorted(c.name.lower() for c in obj.capabilities)) or "-")
    table.add_row("handle", handle or "[dim]none[/dim]")
    if history is not None and version is not None:
        table.add_row("version", f"{version.version_number} of {len(history)} (history {history.id})")
    else:
        table.add_row("version", "[dim]unversioned[/dim]")
    field = engine.config.identifier_field
    values = backend.metadata.get_field(obj, field)
    table.add_row(field, "\n".join(v.value for v in values) or "[dim]empty[/dim]")
    console.print(table)


if __name__ == "__main__":
    cli()
