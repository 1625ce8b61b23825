"""talon CLI entry point."""

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from talon import __version__, cli_logger, exit_codes
from talon.env import get_env_status
from talon.errors import TalonError, handle_cli_error
from talon.home import DEFAULT_CLI_DIR
from talon.index import TalonEntry
from talon.loader import TalonLoader
from talon.registry import TalonRegistry
from talon.scaffold import init_example_talon
from talon.validation import validate_talon_dir

app = typer.Typer(
    name="talon",
    help="FemtoClaw Talon Manager - install, discover, and inspect capability packages.",
    no_args_is_help=True,
)

console = Console(highlight=False)


def open_registry(ctx: typer.Context) -> TalonRegistry:
    """Open the registry bound to the --dir option.

    Raises:
        typer.Exit: With the mapped exit code if the registry cannot be opened.
    """
    talons_dir: Path = ctx.obj
    try:
        return TalonRegistry.from_dir(talons_dir)
    except TalonError as e:
        raise typer.Exit(handle_cli_error(e)) from e


def _print_entries_table(entries: list[TalonEntry]) -> None:
    """Print talon summaries as a table, sorted by name."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", style="cyan")
    table.add_column("VERSION")
    table.add_column("DESCRIPTION")
    table.add_column("AUTHOR")
    table.add_column("TAGS")

    for entry in sorted(entries, key=lambda e: e.name):
        table.add_row(
            escape(entry.name),
            escape(entry.version),
            escape(entry.description),
            escape(entry.author) if entry.author else "-",
            escape(", ".join(entry.tags)) if entry.tags else "-",
        )

    console.print(table)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"talon {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    talons_dir: Annotated[
        Path,
        typer.Option(
            "--dir",
            envvar="TALON_DIR",
            help="Registry directory to operate on.",
        ),
    ] = DEFAULT_CLI_DIR,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show talon version and exit.",
    ),
) -> None:
    """FemtoClaw Talon Manager - install, discover, and inspect capability packages."""
    ctx.obj = talons_dir


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List installed talons."""
    registry = open_registry(ctx)
    entries = registry.list_talons()

    if not entries:
        cli_logger.dim("No talons installed. Run `talon discover` to find talons.")
        raise typer.Exit(exit_codes.SUCCESS)

    cli_logger.heading("Installed Talons:")
    _print_entries_table(entries)
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[
        str,
        typer.Argument(help="Text to look for in names, descriptions, and tags."),
    ],
) -> None:
    """Search installed talons (case-insensitive)."""
    registry = open_registry(ctx)
    results = registry.search_talons(query)

    if not results:
        cli_logger.info(f"No talons found matching '{escape(query)}'")
        raise typer.Exit(exit_codes.SUCCESS)

    cli_logger.heading(f"Search results for '{escape(query)}':")
    _print_entries_table(results)
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def info(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Talon name.")],
) -> None:
    """Show details of an installed talon."""
    registry = open_registry(ctx)
    entry = registry.get_talon(name)

    if entry is None:
        cli_logger.error(f"Talon '{escape(name)}' not found")
        raise typer.Exit(exit_codes.TALON_NOT_FOUND)

    cli_logger.heading(escape(entry.name))
    cli_logger.info(f"Version: {escape(entry.version)}")
    cli_logger.info(f"Description: {escape(entry.description)}")
    if entry.author:
        cli_logger.info(f"Author: {escape(entry.author)}")
    if entry.license:
        cli_logger.info(f"License: {escape(entry.license)}")
    if entry.tags:
        cli_logger.info(f"Tags: {escape(', '.join(entry.tags))}")
    cli_logger.info(f"Path: {escape(str(entry.path))}")

    try:
        talon = TalonLoader(registry).load_talon(name)
    except TalonError as e:
        cli_logger.warning(f"Could not read manifest: {escape(str(e))}")
        raise typer.Exit(exit_codes.SUCCESS) from e

    manifest = talon.manifest
    if manifest.runtime:
        runtime = manifest.runtime.kind
        if manifest.runtime.version:
            runtime += f" {manifest.runtime.version}"
        cli_logger.info(f"Runtime: {escape(runtime)}")
    if manifest.permissions:
        cli_logger.info(f"Permissions: {escape(', '.join(manifest.permissions))}")

    if manifest.commands:
        cli_logger.info("Commands:")
        for command in manifest.commands:
            cli_logger.bullet(f"{escape(command.name)}: {escape(command.description)}")

    env_statuses = get_env_status(manifest, talon.path)
    if env_statuses:
        cli_logger.info("Environment:")
        for status in env_statuses:
            if status.missing:
                marker = "[red]missing[/red]"
            elif status.uses_default:
                marker = "[yellow]default[/yellow]"
            elif status.is_set:
                marker = "[green]set[/green]"
            else:
                marker = "[dim]unset[/dim]"
            required = " (required)" if status.required else ""
            cli_logger.bullet(f"{escape(status.name)}{required}: {marker}")

    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def add(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(help="Directory containing a TALON.md to install."),
    ],
) -> None:
    """Install a talon from a local directory.

    Reinstalling a talon with the same name replaces its previous contents.
    """
    registry = open_registry(ctx)

    try:
        name = registry.add_talon(path)
    except TalonError as e:
        raise typer.Exit(handle_cli_error(e)) from e

    cli_logger.success(f"Added talon: {escape(name)}")
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def remove(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Talon name to remove.")],
) -> None:
    """Remove an installed talon and delete its directory.

    If the talon is not installed, this is a no-op.
    """
    registry = open_registry(ctx)

    try:
        removed = registry.remove_talon(name)
    except TalonError as e:
        raise typer.Exit(handle_cli_error(e)) from e

    if removed:
        cli_logger.success(f"Removed talon: {escape(name)}")
    else:
        cli_logger.warning(f"Talon '{escape(name)}' not found (no-op)")
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def discover(ctx: typer.Context) -> None:
    """Scan the registry directory and index every talon found."""
    registry = open_registry(ctx)

    try:
        discovered = registry.discover_talons()
    except TalonError as e:
        raise typer.Exit(handle_cli_error(e)) from e

    cli_logger.success(f"Discovered {len(discovered)} talon(s)")
    for talon in discovered:
        cli_logger.bullet(f"{escape(talon.manifest.name)} v{escape(talon.manifest.version)}")

    for skipped in registry.last_skipped:
        cli_logger.warning(f"Skipped {escape(str(skipped.path))}: {escape(skipped.reason)}")

    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def init(ctx: typer.Context) -> None:
    """Create an example talon in the registry directory."""
    talons_dir: Path = ctx.obj

    try:
        result = init_example_talon(talons_dir)
    except TalonError as e:
        raise typer.Exit(handle_cli_error(e)) from e

    if result.created:
        cli_logger.success(f"Created example talon at {escape(str(result.path))}")
    else:
        cli_logger.dim(f"Example talon already exists at {escape(str(result.path))}")
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def capabilities(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Talon name.")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output capabilities as JSON."),
    ] = False,
) -> None:
    """Show the capabilities (commands) a talon provides."""
    loader = TalonLoader(open_registry(ctx))

    try:
        caps = loader.get_capabilities(name)
    except TalonError as e:
        raise typer.Exit(handle_cli_error(e)) from e

    if json_output:
        print(json.dumps([cap.to_dict() for cap in caps], indent=2))
        raise typer.Exit(exit_codes.SUCCESS)

    if not caps:
        cli_logger.dim(f"Talon '{escape(name)}' declares no commands.")
        raise typer.Exit(exit_codes.SUCCESS)

    for cap in caps:
        cli_logger.info(f"[cyan]{escape(cap.name)}[/cyan]: {escape(cap.description)}")
        for arg in cap.args:
            required = "required" if arg.required else "optional"
            line = f"{escape(arg.name)} ({escape(arg.type)}, {required})"
            if arg.description:
                line += f" - {escape(arg.description)}"
            cli_logger.bullet(line, indent=4)

    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def prompt(
    ctx: typer.Context,
    names: Annotated[
        list[str],
        typer.Argument(help="Talon names to include, in order."),
    ],
) -> None:
    """Print a system-prompt summary of the given talons.

    Talons that cannot be loaded are left out.
    """
    loader = TalonLoader(open_registry(ctx))
    print(loader.generate_system_prompt(names), end="")
    raise typer.Exit(exit_codes.SUCCESS)


@app.command()
def validate(
    path: Annotated[
        Path,
        typer.Argument(help="Talon directory to check."),
    ],
) -> None:
    """Check that a directory is a valid talon without installing it."""
    result = validate_talon_dir(path)

    if result.is_valid:
        assert result.manifest is not None
        cli_logger.success(
            f"Valid talon '{escape(result.manifest.name)}' v{escape(result.manifest.version)}"
        )
        raise typer.Exit(exit_codes.SUCCESS)

    cli_logger.error(f"Invalid talon at {escape(str(path))}")
    for error in result.errors:
        cli_logger.dim(f"  • {escape(error)}")
    raise typer.Exit(result.error_code or exit_codes.TALON_INVALID)


def main_cli() -> None:
    """CLI entry point with top-level exception handling.

    Wraps the Typer app to catch any unhandled exceptions and format them
    as clean error messages instead of raw tracebacks.
    """
    try:
        app()
    except Exception as e:
        sys.exit(handle_cli_error(e))


if __name__ == "__main__":
    main_cli()
