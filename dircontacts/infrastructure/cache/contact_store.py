"""Process-wide storage for the loaded contact list.

Readers take a shared lock, the loader takes an exclusive lock and swaps
the whole list in one assignment, so a reader sees either the previous
list or the new one, never a mix.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL = "me"


class ReadWriteLock:
    """Writer-preferring shared/exclusive lock built on threading.Condition."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ContactStore:
    """Holds the most recently loaded, sorted contact list."""

    def __init__(self, sentinel: str = DEFAULT_SENTINEL):
        self.sentinel = sentinel
        self._lock = ReadWriteLock()
        self._contacts: Tuple[str, ...] = ()

    def contacts(self) -> List[str]:
        """Returns the sentinel followed by the loaded contacts.

        Returns just the sentinel if nothing was ever loaded. Never
        performs I/O.
        """
        with self._lock.read_locked():
            return [self.sentinel, *self._contacts]

    def replace(self, contacts: Sequence[str]) -> None:
        """Replaces the stored list with a new one."""
        snapshot = tuple(contacts)
        with self._lock.write_locked():
            self._contacts = snapshot
        logger.debug(f"Contact store replaced with {len(snapshot)} entries")

