"""Console notifications for conversion outcomes."""

from typing import Optional

from rich.console import Console


class Notifier:
    """Prints success and error notices, unless notifications are disabled."""

    def __init__(self, console: Optional[Console] = None, enabled: bool = True):
        self.console = console or Console(stderr=True)
        self.enabled = enabled

    def success(self, message: str) -> None:
        if self.enabled:
            self.console.print(f"[bold green]Web2Markdown:[/bold green] {message}")

    def error(self, message: str) -> None:
        if self.enabled:
            self.console.print(f"[bold red]Web2Markdown Error:[/bold red] {message}")
