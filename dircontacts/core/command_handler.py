"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), asks the
ContactsService to load contacts and hands the result to the user
interface. Returns a process exit code for each command.
"""

import logging
from typing import List, Optional

from dircontacts.core.services.contacts_service import ContactsService
from dircontacts.domain.errors import ContactsError
from dircontacts.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def filter_contacts(contacts: List[str], match: Optional[str]) -> List[str]:
    """Keeps the sentinel plus every address containing match (case-insensitive)."""
    if not match or not contacts:
        return contacts
    needle = match.lower()
    sentinel, rest = contacts[0], contacts[1:]
    return [sentinel] + [c for c in rest if needle in c.lower()]


class CommandHandler:
    """Handles incoming commands and delegates to the contacts service."""

    def __init__(self, contacts_service: ContactsService, ui: UserInterface):
        self.contacts_service = contacts_service
        self.ui = ui

    async def _load(self) -> bool:
        try:
            await self.contacts_service.load_contacts()
        except ContactsError as e:
            logger.error(f"Loading contacts failed: {e}", exc_info=True)
            self.ui.display_error(f"Loading contacts failed: {e}")
            return False
        return True

    async def handle_list(self, match: Optional[str] = None, as_table: bool = False) -> int:
        """Handles the 'list' command."""
        logger.info(f"Handling 'list' command (match={match!r}, table={as_table})")
        if not await self._load():
            return EXIT_FAILURE
        loaded = self.contacts_service.contacts()
        if len(loaded) <= 1:
            self.ui.display_warning("The contact group has no email addresses.")
        contacts = filter_contacts(loaded, match)
        self.ui.display_contacts(contacts, as_table=as_table)
        return EXIT_OK

    async def handle_count(self) -> int:
        """Handles the 'count' command."""
        if not await self._load():
            return EXIT_FAILURE
        # Sentinel excluded
        count = len(self.contacts_service.contacts()) - 1
        self.ui.display_info(f"{count} contact addresses")
        return EXIT_OK
