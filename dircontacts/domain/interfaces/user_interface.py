"""Interface for presenting results to the user.

Defines the contract for displaying contact lists, errors, warnings and
informational messages, allowing different UI implementations
(e.g., rich console, plain text).
"""

import abc
from typing import Any, Sequence

class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_contacts(self, contacts: Sequence[str], **kwargs: Any) -> None:
        """Displays a list of formatted addresses.

        Args:
            contacts: Addresses in display order.
            **kwargs: Additional arguments for formatting (e.g., as_table).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass
