import logging
from typing import Any, Optional, Sequence

from rich.box import HEAVY, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dircontacts.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        """Initializes the rich consoles (stdout for results, stderr for messages)."""
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def display_contacts(self, contacts: Sequence[str], **kwargs: Any) -> None:
        """Prints contact addresses, one per line or as a table.

        Args:
            contacts: Addresses in display order.
            **kwargs: as_table (bool) renders a numbered rich table.
        """
        if kwargs.get("as_table", False):
            table = Table(title=kwargs.get("title", "Contacts"), box=SIMPLE)
            table.add_column("#", justify="right", style="dim")
            table.add_column("Address")
            for index, address in enumerate(contacts, start=1):
                table.add_row(str(index), Text(address))
            self.console.print(table)
            return
        for address in contacts:
            # Addresses may contain '[' which rich would read as markup
            self.console.print(address, markup=False, highlight=False)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.err_console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.console.print(Text(info_message, style="blue"))

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message with enhanced styling."""
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.err_console.print(panel)
