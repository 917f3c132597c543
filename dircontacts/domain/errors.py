"""Exceptions raised while loading contacts."""

from typing import Optional


class ContactsError(Exception):
    """Base class for all contact loading failures."""


class ContactListingError(ContactsError):
    """The contact group could not be enumerated."""

    def __init__(self, group_id: str, original_exception: Exception):
        self.group_id = group_id
        self.original_exception = original_exception
        super().__init__(f"Failed to list members of {group_id}: {original_exception}")


class BatchFetchError(ContactsError):
    """A batch-get call failed with a non-quota error."""

    def __init__(self, batch_index: int, batch_size: int, original_exception: Exception):
        self.batch_index = batch_index
        self.batch_size = batch_size
        self.original_exception = original_exception
        super().__init__(
            f"Batch {batch_index} ({batch_size} contacts) failed: {original_exception}"
        )


class QuotaExceededError(ContactsError):
    """Quota errors persisted past the configured retry cap."""

    def __init__(self, original_exception: Exception, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(f"Quota retries ({attempts}) exhausted. Last error: {original_exception}")


class FetchCancelledError(ContactsError):
    """The fetch deadline elapsed before every batch finished."""

    def __init__(self, timeout_s: Optional[float] = None):
        self.timeout_s = timeout_s
        if timeout_s is None:
            super().__init__("Contact fetch was cancelled")
        else:
            super().__init__(f"Contact fetch did not finish within {timeout_s:g}s")


class ConfigurationError(ContactsError):
    """A configuration value is missing or malformed."""


class DirectoryUnavailableError(ContactsError):
    """The directory client could not be constructed."""
