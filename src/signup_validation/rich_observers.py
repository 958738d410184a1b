"""Rich-based observers for batch validation runs.

Display runner progress and, once a run completes, a summary of the most
common rejection reasons.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from signup_validation.events import ValidationEvent, ValidationEventType

if TYPE_CHECKING:
    from rich.progress import Progress, TaskID

__all__ = ["RichSummaryObserver", "SimpleProgressObserver"]


class SimpleProgressObserver:
    """Progress bar with pass/fail counts.

    Must be used within a started Rich Progress.

    Example:
        with Progress() as progress:
            runner.add_observer(SimpleProgressObserver(progress))
            async for row in runner.run():
                ...
    """

    def __init__(self, progress: Progress, task_description: str = "Validating") -> None:
        self._progress = progress
        self._task_id: TaskID | None = None
        self._description = task_description
        self.valid = 0
        self.failed = 0

    def on_event(self, event: ValidationEvent) -> None:
        if event.event_type == ValidationEventType.VALIDATION_STARTED:
            total = event.data.get("total_hint") or 0
            self._task_id = self._progress.add_task(
                self._description,
                total=total if total > 0 else None,
            )

        elif event.event_type == ValidationEventType.ROW_PROCESSED:
            stats = event.data.get("stats_snapshot", {})
            self.valid = stats.get("valid", 0)
            self.failed = stats.get("failed", 0)

            if self._task_id is not None:
                self._progress.update(
                    self._task_id,
                    advance=1,
                    description=(
                        f"{self._description} [green]✓{self.valid}[/] [red]✗{self.failed}[/]"
                    ),
                )

        elif event.event_type == ValidationEventType.VALIDATION_COMPLETED:
            if self._task_id is not None and self.valid + self.failed > 0:
                self._progress.update(self._task_id, completed=self.valid + self.failed)


class RichSummaryObserver:
    """Print a statistics panel and top-rejections table when a run completes.

    Example:
        runner.add_observer(RichSummaryObserver(Console(stderr=True)))
    """

    def __init__(self, console: Console | None = None, top_errors_count: int = 10) -> None:
        self._console = console or Console()
        self._top_errors_count = top_errors_count
        self._total = 0
        self._valid = 0
        self._error_counts: Counter[tuple[str, str]] = Counter()

    def on_event(self, event: ValidationEvent) -> None:
        if event.event_type == ValidationEventType.VALIDATION_STARTED:
            self._total = 0
            self._valid = 0
            self._error_counts.clear()

        elif event.event_type == ValidationEventType.ROW_PROCESSED:
            self._total += 1
            if event.data.get("is_valid"):
                self._valid += 1
            for field, msg in event.data.get("errors", []):
                self._error_counts[(field, msg)] += 1

        elif event.event_type == ValidationEventType.VALIDATION_COMPLETED:
            if "stats" in event.data:
                self._console.print(self.render())

    def render(self) -> Group:
        """Build the summary display from the rows seen so far."""
        return Group(self._build_stats_panel(), self._build_errors_table())

    def _build_stats_panel(self) -> Panel:
        failed = self._total - self._valid
        rate = (self._valid / self._total * 100) if self._total > 0 else 0

        text = Text()
        text.append(f"Total: {self._total:,}  ", style="bold")
        text.append(f"Valid: {self._valid:,}  ", style="green")
        text.append(f"Rejected: {failed:,}  ", style="red")
        text.append(f"Success Rate: {rate:.1f}%", style="bold cyan")

        return Panel(text, title="[bold]Sign-up validation[/]", border_style="blue")

    def _build_errors_table(self) -> Panel:
        table = Table(
            title="Top Rejections",
            show_header=True,
            header_style="bold magenta",
            expand=True,
        )
        table.add_column("Field", style="cyan", width=12)
        table.add_column("Reason", style="yellow")
        table.add_column("Count", justify="right", style="red", width=10)
        table.add_column("%", justify="right", width=8)

        total_errors = sum(self._error_counts.values())
        for (field, msg), count in self._error_counts.most_common(self._top_errors_count):
            pct = (count / total_errors * 100) if total_errors > 0 else 0
            table.add_row(field, msg, f"{count:,}", f"{pct:.1f}%")

        if not self._error_counts:
            table.add_row("-", "No rejections", "-", "-")

        return Panel(table, border_style="red")
