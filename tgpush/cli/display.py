"""Progress display with one bar per in-flight transfer."""
from rich.console import Group
from rich.progress import Progress, BarColumn, DownloadColumn, TransferSpeedColumn, TextColumn, SpinnerColumn, TaskID
from rich.panel import Panel
from rich.text import Text
from ..models import TransferUnit
from ..pipeline import PipelineCallbacks


class Display:
    """Upload bars, totals and a short log. Doubles as the pipeline's progress sink."""

    def __init__(self, total: int = 0):
        self._upload = Progress(
            SpinnerColumn(),
            TextColumn("[green]↑[/green]"),
            TextColumn("{task.fields[name]}", style="bold"),
            BarColumn(bar_width=25),
            DownloadColumn(),
            TransferSpeedColumn(),
            expand=False,
        )
        self._tasks: dict[int, TaskID] = {}

        self.total = total
        self.uploaded = 0
        self.failed = 0
        self._logs: list[tuple[str, str]] = []

    def __rich__(self):
        """Render the display."""
        stats = Text()
        stats.append(f"✓ {self.uploaded} ", style="green bold")
        stats.append(f"✗ {self.failed} ", style="red bold")
        stats.append(f"/ {self.total}", style="bold")

        logs = Text()
        for msg, style in self._logs[-3:]:
            logs.append(f"{msg}\n", style=style)

        return Group(
            Panel(self._upload, title="Upload", border_style="green"),
            stats,
            logs,
        )

    def callbacks(self) -> PipelineCallbacks:
        return PipelineCallbacks(
            on_start=self.start,
            on_finish=self.finish,
            on_progress=self.update,
            on_delay=self.delay,
        )

    # Upload progress
    def start(self, unit: TransferUnit):
        self._tasks[id(unit)] = self._upload.add_task("up", total=unit.size, name=unit.name[:40])

    def update(self, unit: TransferUnit, current: int, total: int):
        task = self._tasks.get(id(unit))
        if task is not None:
            self._upload.update(task, completed=current, total=total)

    def finish(self, unit: TransferUnit, error: Exception | None):
        task = self._tasks.pop(id(unit), None)
        if task is not None:
            self._upload.remove_task(task)
        if error is None:
            self.uploaded += 1
            self._log(f"✓ {unit.name[:45]}", "green")
        else:
            self.failed += 1
            self._log(f"✗ {unit.name[:30]}: {str(error)[:45]}", "red")

    # Logging
    def delay(self, seconds: float):
        self._log(f"⏸ delay {seconds:g}s", "yellow")

    def _log(self, msg: str, style: str = ""):
        self._logs.append((msg, style))
        if len(self._logs) > 10:
            self._logs = self._logs[-5:]
