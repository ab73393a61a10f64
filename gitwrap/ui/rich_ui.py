"""Rich-based UI implementation for gitwrap."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TaskProgressColumn, TextColumn

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from gitwrap.models.progress import ProgressEvent


class RichUI:
    """Rich-based UI implementation."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize Rich UI."""
        self.console = console or Console()

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def create_progress_context(self) -> AbstractContextManager[Progress]:
        """Create a progress context manager with a completion bar."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self.console,
        )

    def create_task(self, progress: Progress, description: str) -> TaskID:
        """Create a new task in the progress tracker, measured from 0 to 1."""
        return progress.add_task(description, total=1.0)

    def update_task(self, progress: Progress, task_id: TaskID, event: ProgressEvent) -> None:
        """Move a task to the completion reported by a progress event."""
        description = event.title if event.description is None else f"{event.title}: {event.description}"
        progress.update(task_id, completed=event.value, description=description)
