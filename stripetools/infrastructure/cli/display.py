import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from stripetools.core.command_handler import ToolResult

logger = logging.getLogger(__name__)

class ConsoleDisplay:
    """Renders command results to the terminal using the rich library."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        """Initializes the rich Consoles (results on stdout, errors on stderr)."""
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def display_result(self, result: ToolResult) -> None:
        """Prints a successful result as JSON, or an error line.

        Args:
            result: The envelope produced by the CommandHandler.
        """
        logger.debug(f"display_result called: is_error={result.is_error}, length={len(result.text)}")
        if result.is_error:
            self.display_error(result.text)
            return
        self.console.print_json(result.text)

    def display_error(self, message: str) -> None:
        """Displays an error message to the user."""
        self.error_console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False, soft_wrap=True)

