"""
Renders the progress of a single download with a Rich progress bar.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class ProgressManager:
    """
    Wraps a Rich Progress showing one download. A total of 0 means the size is
    unknown and the bar pulses instead of filling up.
    """

    def __init__(self, console: Console):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None

    def start_download(self, url: str) -> None:
        description = url if len(url) <= 55 else url[:52] + "..."
        self._task_id = self.progress.add_task(
            f"Downloading {description}", total=None, start=True
        )

    def update(self, completed: int, total: int) -> None:
        """Progress callback for the downloader."""
        if self._task_id is None:
            return
        self.progress.update(
            self._task_id, completed=completed, total=total or None
        )

    def __enter__(self):
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()
