"""Core service for loading the directory's contact list.

Lists the members of a contact group, fans the member IDs out to one
batch worker per fixed-size batch, gathers the formatted addresses and
errors through two queues and publishes the sorted result to the contact
store. Loading is all-or-nothing: the first batch error fails the whole
load and the previously stored list stays in place.
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from dircontacts.core.services.address_formatter import sort_addresses
from dircontacts.core.services.batch_worker import BatchWorker
from dircontacts.domain.errors import ContactListingError, FetchCancelledError
from dircontacts.domain.interfaces.directory import DirectoryClient
from dircontacts.domain.models.contacts import ContactID, FormattedAddress, GroupID
from dircontacts.infrastructure.cache.contact_store import ContactStore

logger = logging.getLogger(__name__)

DEFAULT_GROUP_ID = GroupID("contactGroups/all")
DEFAULT_MAX_MEMBERS = 10000
DEFAULT_BATCH_SIZE = 50

# Marks the end of a queue once every worker has finished
_CLOSED = object()


def partition(ids: Sequence[ContactID], batch_size: int) -> List[List[ContactID]]:
    """Splits ids into consecutive batches of batch_size; the last may be shorter."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [list(ids[start:start + batch_size]) for start in range(0, len(ids), batch_size)]


def error_queue_size(member_count: int, batch_size: int) -> int:
    """Capacity of the error queue: one slot per possible batch."""
    return member_count // batch_size + 1


class ContactsService:
    """Orchestrates the concurrent contact fetch and owns the published list."""

    def __init__(
        self,
        directory: DirectoryClient,
        store: Optional[ContactStore] = None,
        worker: Optional[BatchWorker] = None,
        group_id: GroupID = DEFAULT_GROUP_ID,
        max_members: int = DEFAULT_MAX_MEMBERS,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout_s: Optional[float] = None,
    ):
        """Initializes the ContactsService with its dependencies.

        Args:
            directory: Directory client used for listing and batch-get calls.
            store: Where loaded contacts are published.
            worker: Batch worker; one is built around the directory if omitted.
            group_id: Contact group to enumerate.
            max_members: Maximum number of members requested from the listing.
            batch_size: Number of member IDs per batch-get call.
            timeout_s: Deadline for one fetch; None waits indefinitely.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.directory = directory
        self.store = store or ContactStore()
        self.worker = worker or BatchWorker(directory)
        self.group_id = group_id
        self.max_members = max_members
        self.batch_size = batch_size
        self.timeout_s = timeout_s

    def contacts(self) -> List[str]:
        """Returns the sentinel-prefixed list from the last successful load."""
        return self.store.contacts()

    async def load_contacts(self) -> None:
        """Fetches the contact list and replaces the published one.

        Raises:
            ContactsError: Whatever get_contacts raised; the store is unchanged.
        """
        contacts = await self.get_contacts()
        self.store.replace(contacts)
        logger.info(f"Loaded {len(contacts)} contact addresses")

    async def get_contacts(self) -> List[FormattedAddress]:
        """Fetches every address of the group's members, sorted.

        Raises:
            ContactListingError: The group could not be listed.
            BatchFetchError: A batch failed with a non-quota error.
            QuotaExceededError: A batch stayed throttled past the retry cap.
            FetchCancelledError: The configured deadline elapsed.
        """
        if self.timeout_s is None:
            return await self._fetch_all()
        try:
            return await asyncio.wait_for(self._fetch_all(), timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            logger.error(f"Contact fetch timed out after {self.timeout_s}s")
            raise FetchCancelledError(self.timeout_s) from e

    async def _list_members(self) -> List[ContactID]:
        try:
            listing = await self.directory.list_group_members(self.group_id, self.max_members)
        except Exception as e:
            logger.error(f"Failed to list contact group {self.group_id}: {e}")
            raise ContactListingError(self.group_id, e) from e
        logger.info(f"Retrieved {len(listing.member_ids)} of {listing.total_count} contacts")
        return list(listing.member_ids)

    async def _fetch_all(self) -> List[FormattedAddress]:
        member_ids = await self._list_members()
        batches = partition(member_ids, self.batch_size)

        results: "asyncio.Queue[Any]" = asyncio.Queue()
        errors: "asyncio.Queue[Any]" = asyncio.Queue(maxsize=error_queue_size(len(member_ids), self.batch_size))

        workers = [
            asyncio.create_task(self.worker.run(index, batch, results, errors))
            for index, batch in enumerate(batches)
        ]
        supervisor = asyncio.create_task(self._close_when_done(workers, results, errors))
        logger.debug(f"Started {len(workers)} batch workers of up to {self.batch_size} contacts")

        collected: List[FormattedAddress] = []
        first_error: Optional[BaseException] = None
        try:
            while True:
                item = await results.get()
                if item is _CLOSED:
                    break
                collected.append(item)
            while True:
                item = await errors.get()
                if item is _CLOSED:
                    break
                if first_error is None:
                    first_error = item
            await supervisor
        except asyncio.CancelledError:
            for task in (*workers, supervisor):
                task.cancel()
            await asyncio.gather(*workers, supervisor, return_exceptions=True)
            raise

        if first_error is not None:
            logger.error(f"Discarding {len(collected)} fetched addresses: {first_error}")
            raise first_error
        return sort_addresses(collected)

    @staticmethod
    async def _close_when_done(workers: List["asyncio.Task[None]"], results: "asyncio.Queue[Any]", errors: "asyncio.Queue[Any]") -> None:
        outcomes = await asyncio.gather(*workers, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, asyncio.CancelledError):
                errors.put_nowait(FetchCancelledError())
            elif isinstance(outcome, BaseException):
                errors.put_nowait(outcome)
        results.put_nowait(_CLOSED)
        await errors.put(_CLOSED)
