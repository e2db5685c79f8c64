"""Progress display and run summary."""

from contextlib import contextmanager
from typing import Iterator, Optional
from rich.console import Console
from rich.progress import Progress, TextColumn, BarColumn, TaskID
from rich.table import Table

from .config import ProcessingStats, UpdateResult


PROGRESS_TEMPLATE = (
    "Processing: {task.completed}/{task.total} ({task.fields[percentage]}%) - "
    "Created: {task.fields[created]}, Stock Updates: {task.fields[stock_updates]}"
)


class Reporter:
    """Tracks counters and renders progress for a sync run."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.stats = ProcessingStats()
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @contextmanager
    def track(self, total: int) -> Iterator["Reporter"]:
        """Show a single progress line, overwritten after every row."""
        self.stats.total_rows = total
        progress = Progress(
            TextColumn(PROGRESS_TEMPLATE),
            BarColumn(),
            console=self.console,
            transient=False,
        )
        with progress:
            self._progress = progress
            self._task = progress.add_task(
                "sync", total=total, percentage=0.0, created=0, stock_updates=0
            )
            try:
                yield self
            finally:
                self._progress = None
                self._task = None

    def add_result(self, result: UpdateResult) -> None:
        """Count a row result and refresh the progress line."""
        self.stats.add_result(result)

        if self._progress is not None and self._task is not None:
            self._progress.update(
                self._task,
                completed=self.stats.processed,
                percentage=self.stats.percentage,
                created=self.stats.created,
                stock_updates=self.stats.stock_updates,
            )

    def summary_line(self) -> str:
        s = self.stats
        return (
            f"Done. Processed={s.processed}, Created={s.created}, "
            f"ProductMetaUpdated={s.meta_updates}, PriceUpdated={s.price_updates}, "
            f"StockUpdated={s.stock_updates}, Errors={s.errors}"
        )

    def print_summary(self, dry_run: bool = False) -> None:
        """Print a summary table and the final counts line."""
        title = "DRY RUN SUMMARY" if dry_run else "SYNC SUMMARY"

        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Count", justify="right", style="green")

        table.add_row("Total Rows", str(self.stats.total_rows))
        table.add_row("Processed", str(self.stats.processed))
        table.add_row("Created", str(self.stats.created))
        table.add_row("Meta Updates", str(self.stats.meta_updates))
        table.add_row("Price Updates", str(self.stats.price_updates))
        table.add_row("Stock Updates", str(self.stats.stock_updates))
        table.add_row("Skipped", str(self.stats.skipped))
        table.add_row("Errors", str(self.stats.errors))

        self.console.print(table)
        self.console.print(self.summary_line(), highlight=False)
