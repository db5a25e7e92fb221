"""In-memory correction cache.

Maps lower-cased original tokens to their current best correction. Reads
happen on every transcription, writes only when a correction is learned
or the cache is reloaded, so access is guarded by a reader/writer lock.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from types import MappingProxyType
from typing import Iterator, Mapping

from typo_learn.models import CachedCorrection


class ReadWriteLock:
    """Multiple-reader / single-writer lock.

    Readers share the lock; a writer holds it exclusively. Waiting writers
    block new readers, so a steady stream of lookups cannot starve a write.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class CorrectionCache:
    """Thread-safe mapping of lower-cased original token -> CachedCorrection.

    Every key passed in is lower-cased, so lookups are case-insensitive.
    """

    def __init__(self, entries: Mapping[str, CachedCorrection] | None = None):
        self._lock = ReadWriteLock()
        self._entries: dict[str, CachedCorrection] = {}
        if entries:
            self._entries = {k.lower(): v for k, v in entries.items()}

    def get(self, original: str) -> CachedCorrection | None:
        """Look up the correction for a token."""
        with self._lock.read_locked():
            return self._entries.get(original.lower())

    def contains(self, original: str) -> bool:
        """Check whether a token has a cached correction."""
        with self._lock.read_locked():
            return original.lower() in self._entries

    def insert(self, original: str, corrected: str, confidence: float) -> None:
        """Insert or overwrite the correction for a token."""
        entry = CachedCorrection(corrected=corrected, confidence=confidence)
        with self._lock.write_locked():
            self._entries[original.lower()] = entry

    def remove(self, original: str) -> bool:
        """Remove a token's correction.

        Returns:
            True if an entry was removed
        """
        with self._lock.write_locked():
            return self._entries.pop(original.lower(), None) is not None

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock.write_locked():
            self._entries.clear()

    def replace_all(self, entries: Mapping[str, CachedCorrection]) -> None:
        """Atomically swap in a new set of entries."""
        fresh = {k.lower(): v for k, v in entries.items()}
        with self._lock.write_locked():
            self._entries = fresh

    def items(self) -> list[tuple[str, CachedCorrection]]:
        """Snapshot of all entries."""
        with self._lock.read_locked():
            return list(self._entries.items())

    @contextmanager
    def reading(self) -> Iterator[Mapping[str, CachedCorrection]]:
        """Hold the read lock across several lookups.

        Yields a read-only view that must not escape the with-block. The
        lock is not re-entrant and waiting writers block new readers, so
        do not call other cache methods inside the block: look entries up
        through the view, or the call deadlocks once a writer is queued.
        """
        with self._lock.read_locked():
            yield MappingProxyType(self._entries)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    def __contains__(self, original: object) -> bool:
        return isinstance(original, str) and self.contains(original)
