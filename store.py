"""History and preference stores.

`HistoryStore` keeps the calculation log newest-first and writes the
whole log back to storage after every mutation. `PreferencesStore` does
the same for the theme flag. Both read their key once at construction.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from models import CalculationRecord, Preferences, reserve_ids
from persistence import HISTORY_KEY, THEME_KEY, KeyValueStorage, read_json, write_json

logger = logging.getLogger(__name__)


class RecordNotFoundError(Exception):
    """Raised when a history lookup fails."""

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"Calculation not found: {record_id}")


class HistoryStore:
    """Ordered, persisted log of completed calculations."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self._records: list[CalculationRecord] = self._load()

    # -- helpers -------------------------------------------------------------

    def _load(self) -> list[CalculationRecord]:
        raw = read_json(self._storage, HISTORY_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring stored history: expected a list")
            return []
        records = []
        for item in raw:
            try:
                records.append(CalculationRecord.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed history entry: %r", item)
        if records:
            reserve_ids(max(r.id for r in records))
        return records

    def _persist(self) -> None:
        write_json(
            self._storage,
            HISTORY_KEY,
            [r.model_dump(by_alias=True) for r in self._records],
        )

    # -- operations ----------------------------------------------------------

    def append(self, record: CalculationRecord) -> CalculationRecord:
        """Insert a record at the head of the log."""
        self._records.insert(0, record)
        self._persist()
        logger.debug("Recorded %s", record)
        return record

    def get(self, record_id: int) -> CalculationRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def list(self, *, offset: int = 0, limit: int | None = None) -> list[CalculationRecord]:
        """Records newest-first, optionally paginated."""
        end = None if limit is None else offset + limit
        return self._records[offset:end]

    def remove(self, record_id: int) -> None:
        """Delete the record with this id. Unknown ids are ignored."""
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) != len(self._records):
            logger.debug("Removed calculation %s", record_id)
        self._records = remaining
        self._persist()

    def clear(self) -> None:
        self._records = []
        self._storage.delete(HISTORY_KEY)
        logger.debug("Cleared history")

    def reuse(self, record_id: int) -> str:
        """Result text of a record, for loading back into the calculator."""
        return self.get(record_id).result_text

    def count(self) -> int:
        return len(self._records)


class PreferencesStore:
    """Persisted user preferences (currently only the theme)."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self._preferences = self._load()

    def _load(self) -> Preferences:
        raw = read_json(self._storage, THEME_KEY)
        if raw is None:
            return Preferences()
        if not isinstance(raw, bool):
            logger.warning("Ignoring stored theme %r: expected a boolean", raw)
            return Preferences()
        return Preferences(dark_mode=raw)

    def get(self) -> Preferences:
        return self._preferences

    def update(self, preferences: Preferences) -> Preferences:
        self._preferences = preferences
        write_json(self._storage, THEME_KEY, preferences.dark_mode)
        return preferences

    def toggle_theme(self) -> Preferences:
        return self.update(Preferences(dark_mode=not self._preferences.dark_mode))
