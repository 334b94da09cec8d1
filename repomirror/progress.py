"""
Progress reporting for repomirror commands.

Messages go to stderr so stdout stays clean for JSONL data.
"""

import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape


class ProgressReporter:
    """Reports progress on stderr; errors are always shown."""

    def __init__(self, enabled: Optional[bool] = None, console: Optional[Console] = None):
        """
        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            console: Console to write to (default: stderr)
        """
        self.console = console or Console(stderr=True, highlight=False)
        if enabled is None:
            # Auto-detect: show progress if stderr is a terminal
            self.enabled = sys.stderr.isatty()
        else:
            self.enabled = enabled

    def __call__(self, message: str, force: bool = False):
        if force or self.enabled:
            self.console.print(message, markup=False)

    def error(self, message: str):
        self.console.print(f"[red]ERROR:[/red] {escape(message)}")

    def warning(self, message: str):
        if self.enabled:
            self.console.print(f"[yellow]WARNING:[/yellow] {escape(message)}")

    def success(self, message: str):
        if self.enabled:
            self.console.print(f"[green]✓[/green] {escape(message)}")


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    return ProgressReporter(enabled=enabled)
