"""Google People API implementation of the DirectoryClient interface.

Wraps the synchronous google-api-python-client service; each request is
executed in a worker thread so the batch workers can run concurrently on
the event loop. Credentials are read from an authorized-user token file
produced by a separate OAuth flow.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from dircontacts.domain.errors import DirectoryUnavailableError
from dircontacts.domain.interfaces.directory import DirectoryClient
from dircontacts.domain.models.contacts import (
    ContactID, GroupID, GroupListing, PersonRecord, PERSON_FIELDS,
)

logger = logging.getLogger(__name__)

CONTACTS_READONLY_SCOPE = "https://www.googleapis.com/auth/contacts.readonly"


def person_from_response(person: Dict[str, Any]) -> PersonRecord:
    """Converts a People API person resource into a PersonRecord."""
    names = tuple(n.get("displayName", "") for n in person.get("names", []) or [])
    emails = tuple(e["value"] for e in person.get("emailAddresses", []) or [] if e.get("value"))
    return PersonRecord(display_names=names, email_addresses=emails)


class GooglePeopleDirectory(DirectoryClient):
    """Directory client backed by the Google People API (v1)."""

    def __init__(self, credentials: Credentials, service: Optional[Any] = None):
        """Initializes the client.

        Args:
            credentials: Valid Google OAuth2 credentials with a contacts scope.
            service: Prebuilt People API service resource (built lazily if None).
        """
        self.credentials = credentials
        self._service = service

    @classmethod
    def from_token_file(cls, token_file: Path) -> "GooglePeopleDirectory":
        """Builds a client from an authorized-user token file.

        Raises:
            DirectoryUnavailableError: If the token file is missing or unreadable.
        """
        if not token_file.is_file():
            raise DirectoryUnavailableError(f"Google token file not found: {token_file}")
        try:
            credentials = Credentials.from_authorized_user_file(str(token_file), scopes=[CONTACTS_READONLY_SCOPE])
        except (OSError, ValueError) as e:
            raise DirectoryUnavailableError(f"Could not read Google credentials from {token_file}: {e}") from e
        return cls(credentials)

    @property
    def service(self) -> Any:
        """Get or create the Google API service object."""
        if self._service is None:
            try:
                self._service = build("people", "v1", credentials=self.credentials, cache_discovery=False)
            except Exception as e:
                logger.error(f"Failed to create People API service: {e}")
                raise DirectoryUnavailableError(f"Failed to create People API service: {e}") from e
            logger.debug("Created People API service")
        return self._service

    async def list_group_members(self, group_id: GroupID, max_members: int) -> GroupListing:
        request = self.service.contactGroups().get(resourceName=group_id, maxMembers=max_members)
        response = await asyncio.to_thread(request.execute)
        member_ids = [ContactID(r) for r in response.get("memberResourceNames", []) or []]
        return GroupListing(member_ids=member_ids, total_count=int(response.get("memberCount", len(member_ids))))

    async def batch_get_people(
        self,
        ids: Sequence[ContactID],
        fields: Sequence[str] = PERSON_FIELDS,
    ) -> List[PersonRecord]:
        request = self.service.people().getBatchGet(resourceNames=list(ids), personFields=",".join(fields))
        response = await asyncio.to_thread(request.execute)
        return [
            person_from_response(r.get("person") or {})
            for r in response.get("responses", []) or []
        ]
