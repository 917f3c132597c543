"""dircontacts: concurrent, quota-aware bulk loader for directory contacts.

Fetches every member of a contact group in parallel batches, turns each
email address into a display mailbox string and keeps the sorted result
available to the rest of the process.
"""

__version__ = "0.1.0"
