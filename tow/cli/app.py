"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from tow import __version__
from tow.core.app import TowApp
from tow.exceptions import TowError
from tow.models.config import DEFAULT_VERSION, TowConfig
from tow.storage.config_manager import resolve_config

from .formatters import (
    format_error_with_suggestions,
    print_binaries_table,
    print_installed_entry,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("tow")

app = typer.Typer(
    name="tow",
    help=(
        "Install binaries from the web and keep track of them. Use 'tow"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def _fail(error: TowError) -> typer.Exit:
    console.print(format_error_with_suggestions(error))
    return typer.Exit(code=1)


def _open_app(ctx: typer.Context) -> TowApp:
    config: TowConfig = ctx.obj
    try:
        return TowApp.from_config(config)
    except TowError as e:
        raise _fail(e) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    binaries_dir: Path | None = typer.Option(
        None,
        "--binaries-dir",
        help="Where binaries are installed (overrides TOW_BINARIES_DIR).",
    ),
    store_dir: Path | None = typer.Option(
        None,
        "--store-dir",
        help="Where the registry file lives (overrides TOW_STORE_DIR).",
    ),
):
    """tow binary installer"""
    if version:
        console.print(f"[bold]tow[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("tow").setLevel(log_level)

    try:
        ctx.obj = resolve_config(
            os.environ,
            Path.home(),
            {"binaries_dir": binaries_dir, "store_dir": store_dir},
        )
    except TowError as e:
        raise _fail(e) from e

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def install(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="The http(s) URL of the file to install."),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Name to record (default: the downloaded filename)."
    ),
    release: str | None = typer.Option(
        None,
        "--version",
        "-V",
        help=f"Version to record (default: '{DEFAULT_VERSION}').",
    ),
):
    """Download a file and add it to the installed binaries."""
    tow_app = _open_app(ctx)

    async def _install_async():
        with ProgressManager(console) as progress_manager:
            progress_manager.start_download(url)
            return await tow_app.install_binary(
                url, name, release, progress_callback=progress_manager.update
            )

    try:
        entry = asyncio.run(_install_async())
    except TowError as e:
        raise _fail(e) from e

    print_installed_entry(entry, console)


@app.command(name="list")
def list_command(ctx: typer.Context):
    """List installed binaries."""
    tow_app = _open_app(ctx)
    print_binaries_table(tow_app.list_binaries(), console)


@app.command()
def uninstall(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the installed binary."),
    release: str | None = typer.Option(
        None,
        "--version",
        "-V",
        help=f"Version to remove (default: '{DEFAULT_VERSION}').",
    ),
):
    """Delete an installed binary and forget it."""
    tow_app = _open_app(ctx)
    try:
        tow_app.uninstall_binary(name, release)
    except TowError as e:
        raise _fail(e) from e

    console.print(
        f"[green]✓ Removed {name}-{release or tow_app.config.default_version}"
        "[/green]"
    )
