import pytest
from typer.testing import CliRunner
from typing import Dict, List, Optional, Sequence

from dircontacts.domain.interfaces.directory import DirectoryClient
from dircontacts.domain.models.contacts import (
    ContactID, GroupID, GroupListing, PersonRecord, PERSON_FIELDS
)
from dircontacts.infrastructure.config.settings import clear_test_config


class FakeDirectory(DirectoryClient):
    """In-memory directory used in place of the People API.

    Each member ID "people/cN" resolves to one person. Failures can be
    scripted per batch, keyed by the first ID of the batch: every call for
    that batch pops the next exception from the list until it is empty.
    """

    def __init__(
        self,
        people: Dict[str, PersonRecord],
        total_count: Optional[int] = None,
        listing_error: Optional[Exception] = None,
        batch_errors: Optional[Dict[str, List[Exception]]] = None,
    ):
        self.people = people
        self.total_count = total_count if total_count is not None else len(people)
        self.listing_error = listing_error
        self.batch_errors = batch_errors or {}
        self.list_calls: List[tuple] = []
        self.batch_calls: List[List[str]] = []

    async def list_group_members(self, group_id: GroupID, max_members: int) -> GroupListing:
        self.list_calls.append((group_id, max_members))
        if self.listing_error is not None:
            raise self.listing_error
        ids = [ContactID(i) for i in list(self.people)[:max_members]]
        return GroupListing(member_ids=ids, total_count=self.total_count)

    async def batch_get_people(self, ids: Sequence[ContactID], fields: Sequence[str] = PERSON_FIELDS) -> List[PersonRecord]:
        self.batch_calls.append(list(ids))
        pending = self.batch_errors.get(ids[0])
        if pending:
            raise pending.pop(0)
        return [self.people[i] for i in ids]


def make_people(count: int) -> Dict[str, PersonRecord]:
    """Builds count people named PersonNNNN with one address each."""
    return {
        f"people/c{n:04d}": PersonRecord(
            display_names=(f"Person{n:04d}",),
            email_addresses=(f"person{n:04d}@example.com",),
        )
        for n in range(count)
    }


@pytest.fixture
def fake_directory_factory():
    """Returns the FakeDirectory class so tests can script their own directory."""
    return FakeDirectory


@pytest.fixture
def people_factory():
    return make_people


@pytest.fixture
def small_directory():
    """A handful of contacts covering every address shape."""
    return FakeDirectory({
        "people/c1": PersonRecord(display_names=("Zed",), email_addresses=("z@x.com",)),
        "people/c2": PersonRecord(display_names=(), email_addresses=("alice@x.com",)),
        "people/c3": PersonRecord(display_names=("Bob Jones", "Robert"), email_addresses=("bob@x.com", "bj@work.com")),
        "people/c4": PersonRecord(display_names=("NoMail",), email_addresses=()),
    })


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_test_config():
    """Drops configuration overrides between tests."""
    yield
    clear_test_config()
