"""Value Objects for the contacts bounded context.

Contact IDs come from the group listing, person records come back from a
batch-get call and only live for the duration of one response. Formatted
addresses are the canonical mailbox strings handed to callers.
"""

from dataclasses import dataclass, field
from typing import List, NewType, Tuple

# === Core Value Objects ===

ContactID = NewType("ContactID", str)              # API resource reference, e.g. "people/c123"
FormattedAddress = NewType("FormattedAddress", str)  # "email", "Name <email>" or "\"Some Name\" <email>"
GroupID = NewType("GroupID", str)                  # e.g. "contactGroups/all"

# Fields requested from the batch-get collaborator
PERSON_FIELDS: Tuple[str, ...] = ("names", "emailAddresses")

# === Structured Data ===

@dataclass(frozen=True)
class PersonRecord:
    """One directory entry as returned by a batch-get call.

    Only the first display name is ever used; every email address yields
    one formatted address.
    """
    display_names: Tuple[str, ...] = ()
    email_addresses: Tuple[str, ...] = ()

    @property
    def primary_name(self) -> str:
        """First listed display name, or an empty string."""
        return self.display_names[0] if self.display_names else ""


@dataclass
class GroupListing:
    """Result of enumerating the members of one contact group."""
    member_ids: List[ContactID] = field(default_factory=list)
    total_count: int = 0
