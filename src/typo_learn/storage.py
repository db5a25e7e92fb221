"""Correction stores for typo-learn.

The learning engine talks to persistence through the CorrectionStore
protocol only. Two adapters are provided: an in-process store and a
JSON file store with atomic writes.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from typo_learn.errors import NotFoundError, StorageError
from typo_learn.logging import get_logger
from typo_learn.models import Correction

logger = get_logger(__name__)

STORE_FORMAT_VERSION = 1


@runtime_checkable
class CorrectionStore(Protocol):
    """Persistence operations the learning engine depends on."""

    def get_corrections(self, min_confidence: float) -> list[Correction]:
        """Return corrections with confidence >= min_confidence, most confident first."""
        ...

    def save_correction(self, correction: Correction) -> Correction:
        """Upsert a correction keyed by (original, corrected).

        `correction.occurrences` is the number of new observations. An
        existing record has them added to its count; a new record is
        created with them. Confidence is recomputed either way and the
        stored record is returned.
        """
        ...


def _sorted_by_confidence(corrections: list[Correction]) -> list[Correction]:
    return sorted(corrections, key=lambda c: (-c.confidence, -c.occurrences, c.original, c.corrected))


def _upsert(records: dict[tuple[str, str], Correction], correction: Correction) -> Correction:
    existing = records.get(correction.key)
    if existing is not None:
        existing.record_occurrence(max(1, correction.occurrences))
        return existing.model_copy()

    stored = correction.model_copy()
    stored.occurrences = max(1, stored.occurrences)
    stored.update_confidence()
    records[stored.key] = stored
    return stored.model_copy()


class MemoryCorrectionStore:
    """In-process correction store.

    Useful for embedding the engine without durable state and for tests.
    """

    def __init__(self, corrections: list[Correction] | None = None):
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str], Correction] = {}
        for correction in corrections or []:
            self._records[correction.key] = correction.model_copy()

    def get_corrections(self, min_confidence: float) -> list[Correction]:
        with self._lock:
            matching = [c.model_copy() for c in self._records.values() if c.confidence >= min_confidence]
        return _sorted_by_confidence(matching)

    def save_correction(self, correction: Correction) -> Correction:
        with self._lock:
            return _upsert(self._records, correction)

    def delete_correction(self, original: str, corrected: str | None = None) -> int:
        """Delete corrections for `original` (optionally only one replacement).

        Returns:
            Number of records removed
        """
        with self._lock:
            keys = _matching_keys(self._records, original, corrected)
            for key in keys:
                del self._records[key]
        return len(keys)

    def list_corrections(self) -> list[Correction]:
        """All stored corrections, most confident first."""
        return self.get_corrections(0.0)

    def count(self) -> int:
        """Number of stored corrections."""
        with self._lock:
            return len(self._records)


def _matching_keys(
    records: dict[tuple[str, str], Correction],
    original: str,
    corrected: str | None,
) -> list[tuple[str, str]]:
    original = original.lower()
    return [
        key for key in records
        if key[0] == original and (corrected is None or key[1] == corrected)
    ]


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write data to a file atomically.

    Writes to a temporary file in the same directory, then renames to target.
    This prevents data corruption from interrupted writes.

    Args:
        path: Target file path
        data: String data to write
        encoding: File encoding (default utf-8)

    Raises:
        StorageError: If the write operation fails
    """
    fd = None
    temp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=path.stem + "_",
            dir=path.parent,
        )
        os.write(fd, data.encode(encoding))
        os.fsync(fd)
        os.close(fd)
        fd = None

        os.replace(temp_path, path)
        temp_path = None

    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}", context={"path": str(path)}) from e
    finally:
        # Clean up on failure
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass
        if temp_path is not None:
            try:
                os.unlink(temp_path)
            except OSError:
                pass


def atomic_write_json(path: Path, data: dict | list, indent: int = 2) -> None:
    """Write JSON data to a file atomically."""
    atomic_write(path, json.dumps(data, indent=indent, ensure_ascii=False))


def read_json(path: Path) -> dict | list:
    """Read JSON data from a file.

    Raises:
        NotFoundError: If file doesn't exist
        StorageError: If file is unreadable, not UTF-8 or invalid JSON
    """
    if not path.exists():
        raise NotFoundError(f"File not found: {path}", context={"path": str(path)})

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in {path}: {e}", context={"path": str(path)}, recoverable=False) from e
    except UnicodeDecodeError as e:
        raise StorageError(f"Invalid encoding in {path}: {e}", context={"path": str(path)}, recoverable=False) from e
    except OSError as e:
        raise StorageError(f"Failed to read {path}: {e}", context={"path": str(path)}) from e


class JsonCorrectionStore:
    """Correction store backed by a single JSON document.

    File layout:
        {"version": 1, "corrections": [<Correction>, ...]}

    A missing file is an empty store. Every save rewrites the whole file
    atomically, which is fine for a per-user dictionary of a few thousand
    entries.
    """

    def __init__(self, path: Path | str):
        """Initialize the store.

        Args:
            path: Path to the JSON file (created on first save)
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[tuple[str, str], Correction]:
        try:
            data = read_json(self.path)
        except NotFoundError:
            return {}

        if not isinstance(data, dict) or not isinstance(data.get("corrections"), list):
            raise StorageError(
                "Correction store has an unexpected layout",
                context={"path": str(self.path)},
                recoverable=False,
            )

        records: dict[tuple[str, str], Correction] = {}
        try:
            for item in data["corrections"]:
                correction = Correction.model_validate(item)
                records[correction.key] = correction
        except Exception as e:
            raise StorageError(
                f"Invalid correction record in {self.path}: {e}",
                context={"path": str(self.path)},
                recoverable=False,
            ) from e
        return records

    def _dump(self, records: dict[tuple[str, str], Correction]) -> None:
        atomic_write_json(self.path, {
            "version": STORE_FORMAT_VERSION,
            "corrections": [c.model_dump(mode="json") for c in _sorted_by_confidence(list(records.values()))],
        })

    def get_corrections(self, min_confidence: float) -> list[Correction]:
        with self._lock:
            records = self._load()
        return _sorted_by_confidence([c for c in records.values() if c.confidence >= min_confidence])

    def save_correction(self, correction: Correction) -> Correction:
        with self._lock:
            records = self._load()
            stored = _upsert(records, correction)
            self._dump(records)

        logger.debug(
            "Saved correction",
            extra={
                "original": stored.original,
                "corrected": stored.corrected,
                "occurrences": stored.occurrences,
            },
        )
        return stored

    def delete_correction(self, original: str, corrected: str | None = None) -> int:
        """Delete corrections for `original` (optionally only one replacement).

        Returns:
            Number of records removed
        """
        with self._lock:
            records = self._load()
            keys = _matching_keys(records, original, corrected)
            if keys:
                for key in keys:
                    del records[key]
                self._dump(records)
        return len(keys)

    def list_corrections(self) -> list[Correction]:
        """All stored corrections, most confident first."""
        return self.get_corrections(0.0)

    def count(self) -> int:
        """Number of stored corrections."""
        with self._lock:
            return len(self._load())
