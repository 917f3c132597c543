"""Formatting and ordering of display addresses.

Turns a (name, email) pair into an RFC 5322 style mailbox string and
provides the sort order used for the published contact list.
"""

import logging
import re
from typing import Iterable, List

from dircontacts.domain.models.contacts import FormattedAddress

logger = logging.getLogger(__name__)

# Valid RFC 5322 comment field. Somewhat stricter than section 3.2.3
# allows; anything else gets quoted.
RFC5322_PLAIN_NAME_RE = re.compile(r"[A-Za-z0-9]+")

_SHORT_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _escape_char(char: str) -> str:
    if char in _SHORT_ESCAPES:
        return _SHORT_ESCAPES[char]
    if char.isprintable():
        return char
    code = ord(char)
    if code < 0x80:
        return f"\\x{code:02x}"
    if code < 0x10000:
        return f"\\u{code:04x}"
    return f"\\U{code:08x}"


def quote_name_if_needed(name: str) -> str:
    r"""Returns the name unchanged if it is plain, otherwise double-quoted.

    Inside the quotes, backslashes and double quotes are escaped and
    non-printable characters become escape sequences (\n, \t, \x1b,
    \u2028), so a quoted name never spans more than one line.
    """
    if RFC5322_PLAIN_NAME_RE.fullmatch(name):
        return name
    escaped = "".join(_escape_char(c) for c in name)
    return f'"{escaped}"'


def format_address(name: str, email: str) -> FormattedAddress:
    """Builds the display address for one email of a contact.

    Args:
        name: Display name of the contact (may be empty).
        email: The email address.

    Returns:
        "Name <email>", "\"Some Name\" <email>" or the bare email. An email
        containing a space already carries its name and is returned as is.
    """
    if " " in email:
        logger.warning(f"Contact email address contains a space: {email!r}")
        return FormattedAddress(email)
    if name:
        return FormattedAddress(f"{quote_name_if_needed(name)} <{email}>")
    return FormattedAddress(email)


def address_sort_key(address: str) -> str:
    """Sort key ignoring the leading quote of a quoted name."""
    return address.lstrip('"')


def sort_addresses(addresses: Iterable[str]) -> List[FormattedAddress]:
    """Returns the addresses in ascending order of their sort key."""
    return sorted((FormattedAddress(a) for a in addresses), key=address_sort_key)
