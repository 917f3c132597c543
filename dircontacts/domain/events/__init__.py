"""Domain Events for the contact fetching context."""

from dircontacts.domain.events.fetch_events import (
    DomainEvent, BatchFetchStarted, BatchFetchSucceeded,
    QuotaRetryScheduled, BatchFetchFailed,
)

__all__ = [
    "DomainEvent",
    "BatchFetchStarted",
    "BatchFetchSucceeded",
    "QuotaRetryScheduled",
    "BatchFetchFailed",
]
