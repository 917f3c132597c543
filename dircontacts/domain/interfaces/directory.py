"""Interface for the remote contact directory.

Defines the two operations the contact fetcher needs from a directory
service: enumerating the members of a group and fetching person details
for a list of member IDs. Authentication, transport and pagination are
the implementation's business.
"""

import abc
from typing import List, Sequence

from dircontacts.domain.models.contacts import (
    ContactID, GroupID, GroupListing, PersonRecord, PERSON_FIELDS
)

class DirectoryClient(abc.ABC):
    """Abstract Base Class for directory API clients."""

    @abc.abstractmethod
    async def list_group_members(self, group_id: GroupID, max_members: int) -> GroupListing:
        """Lists the member IDs of a contact group.

        Args:
            group_id: Resource name of the group (e.g., "contactGroups/all").
            max_members: Upper bound on the number of member IDs returned.

        Returns:
            The member IDs together with the total member count reported
            by the directory (which may exceed len(member_ids)).

        Raises:
            Exception: Any transport or API error; callers treat it as terminal.
        """
        pass

    @abc.abstractmethod
    async def batch_get_people(
        self,
        ids: Sequence[ContactID],
        fields: Sequence[str] = PERSON_FIELDS,
    ) -> List[PersonRecord]:
        """Fetches person details for a batch of member IDs.

        Args:
            ids: Member IDs to fetch, all in a single remote call.
            fields: Person fields to request.

        Returns:
            One PersonRecord per returned person.

        Raises:
            Exception: Any API error. Throttling errors mention "quota"
                in their text.
        """
        pass
