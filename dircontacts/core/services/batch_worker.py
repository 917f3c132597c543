"""Fetches and formats one batch of contacts.

A worker makes a single batch-get call for its slice of member IDs,
retrying the same call while the directory reports quota errors, and turns
every email address in the response into a display address. Failures are
reported as values on the error queue; a worker never raises out of its
task except on cancellation.
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

from dircontacts.core.services.address_formatter import format_address
from dircontacts.domain.errors import BatchFetchError, ContactsError
from dircontacts.domain.events.fetch_events import (
    BatchFetchFailed, BatchFetchStarted, BatchFetchSucceeded, QuotaRetryScheduled,
)
from dircontacts.domain.interfaces.directory import DirectoryClient
from dircontacts.domain.models.contacts import (
    ContactID, FormattedAddress, PersonRecord, PERSON_FIELDS,
)
from dircontacts.infrastructure.resilience.quota_retry import (
    QuotaRetryPolicy, call_with_quota_retry,
)
from dircontacts.infrastructure.resilience.rate_limiter import BatchRateLimiter

logger = logging.getLogger(__name__)


def _log_event(event: Any) -> None:
    logger.debug(f"EVENT: {event}")


def addresses_from_records(records: Sequence[PersonRecord]) -> List[FormattedAddress]:
    """Formats every email of every record, using each record's first name."""
    addresses: List[FormattedAddress] = []
    for record in records:
        name = record.primary_name
        for email in record.email_addresses:
            addresses.append(format_address(name, email))
    return addresses


class BatchWorker:
    """Runs batch-get calls against the directory for the fan-out coordinator."""

    def __init__(
        self,
        directory: DirectoryClient,
        retry_policy: Optional[QuotaRetryPolicy] = None,
        rate_limiter: Optional[BatchRateLimiter] = None,
        fields: Sequence[str] = PERSON_FIELDS,
        dispatch_event: Callable[[Any], None] = _log_event,
    ):
        self.directory = directory
        self.retry_policy = retry_policy or QuotaRetryPolicy()
        self.rate_limiter = rate_limiter
        self.fields = tuple(fields)
        self.dispatch_event = dispatch_event

    async def _batch_get(self, batch_index: int, ids: Sequence[ContactID], attempt: List[int]) -> List[PersonRecord]:
        attempt[0] += 1
        self.dispatch_event(BatchFetchStarted(batch_index=batch_index, batch_size=len(ids), attempt_number=attempt[0]))
        if self.rate_limiter is None:
            return await self.directory.batch_get_people(ids, self.fields)
        async with self.rate_limiter.slot():
            return await self.directory.batch_get_people(ids, self.fields)

    async def fetch(self, batch_index: int, ids: Sequence[ContactID]) -> List[FormattedAddress]:
        """Fetches one batch and returns its formatted addresses.

        An empty batch returns an empty list without calling the directory.

        Raises:
            BatchFetchError: The call failed with a non-quota error.
            QuotaExceededError: A configured quota retry cap was reached.
            asyncio.CancelledError: The worker was cancelled.
        """
        if not ids:
            return []

        attempt = [0]

        def on_retry(retry_number: int, delay: float, error: Exception) -> None:
            self.dispatch_event(QuotaRetryScheduled(batch_index=batch_index, attempt_number=retry_number, delay_seconds=delay))

        start_time = time.perf_counter()
        try:
            records = await call_with_quota_retry(
                self._batch_get, batch_index, ids, attempt,
                policy=self.retry_policy,
                on_retry=on_retry,
            )
        except ContactsError as e:
            self.dispatch_event(BatchFetchFailed(batch_index=batch_index, error_type=type(e).__name__, error_message=str(e), attempts=attempt[0]))
            raise
        except Exception as e:
            self.dispatch_event(BatchFetchFailed(batch_index=batch_index, error_type=type(e).__name__, error_message=str(e), attempts=attempt[0]))
            raise BatchFetchError(batch_index, len(ids), e) from e

        addresses = addresses_from_records(records)
        latency_ms = (time.perf_counter() - start_time) * 1000
        self.dispatch_event(BatchFetchSucceeded(batch_index=batch_index, record_count=len(records), address_count=len(addresses), latency_ms=latency_ms))
        return addresses

    async def run(
        self,
        batch_index: int,
        ids: Sequence[ContactID],
        results: "asyncio.Queue[Any]",
        errors: "asyncio.Queue[Any]",
    ) -> None:
        """Fetches one batch, sending addresses to results or one error to errors."""
        try:
            addresses = await self.fetch(batch_index, ids)
        except ContactsError as e:
            errors.put_nowait(e)
            return
        for address in addresses:
            await results.put(address)
