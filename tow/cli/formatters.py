"""
Functions for formatting and displaying data in the console using Rich.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tow.models.entry import BinaryEntry
from tow.utils.formatting import format_file_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AlreadyExistsError": [
            "• This name and version are already installed.",
            "• Run `tow uninstall <NAME> --version <VERSION>` first, or pick"
            " another --version.",
        ],
        "NotFoundError": [
            "• Run `tow list` to see installed names and versions.",
            "• Pass the same --version that was used at install time.",
        ],
        "HeaderMissingError": [
            "• The server did not send a Content-Disposition header.",
            "• Use a direct download link (e.g. a release asset URL).",
        ],
        "FilenameUnparsableError": [
            "• The server's Content-Disposition header has no filename.",
            "• Use a direct download link (e.g. a release asset URL).",
        ],
        "UrlParseError": [
            "• Provide an absolute URL starting with http:// or https://.",
        ],
        "NetworkError": [
            "• A network connection issue occurred.",
            "• Check that the URL is reachable and try again.",
        ],
        "SerializationError": [
            "• The registry file is corrupt.",
            "• A backup of the previous version is kept next to it"
            " (towstore.json.bak).",
        ],
        "StorageIOError": [
            "• Check permissions and free space of the binaries and store"
            " directories.",
        ],
        "ConfigurationError": [
            "• Check the TOW_BINARIES_DIR and TOW_STORE_DIR environment variables.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_binaries_table(entries: list[BinaryEntry], console: Console) -> None:
    """Displays installed binaries as a table."""
    if not entries:
        console.print("[yellow]No binaries installed.[/yellow]")
        return

    table = Table(title="Installed Binaries", box=box.ROUNDED, show_lines=False)
    table.add_column("Name", style="bold cyan")
    table.add_column("Version", style="magenta")
    table.add_column("Size", justify="right")
    table.add_column("Path", style="green")
    table.add_column("Source", style="dim", overflow="fold")

    for entry in entries:
        table.add_row(
            entry.name,
            entry.version,
            format_file_size(entry.path),
            str(entry.path),
            entry.source,
        )

    console.print(table)
    console.print(f"Total: {len(entries)} binaries")


def print_installed_entry(entry: BinaryEntry, console: Console) -> None:
    """Displays the result of a successful install."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Name:", entry.name)
    table.add_row("Version:", entry.version)
    table.add_row("Path:", f"[green]{entry.path}[/green]")
    table.add_row("Source:", f"[dim]{entry.source}[/dim]")

    console.print(
        Panel(
            table,
            title=f"[bold green]✓ Installed {entry.key}[/bold green]",
            border_style="green",
            expand=False,
        )
    )
