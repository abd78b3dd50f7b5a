"""Key-value persistence for saved days and the draft."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrilite.domain.days import DayRecord, Draft, Mode
from nutrilite.domain.meals import MealLog, Totals, to_number
from nutrilite.services.totals import compute_totals

DAYS_KEY = "nutrilite_days_v1"
DRAFT_KEY = "nutrilite_draft_v1"
DEFAULT_GOAL = 2000

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Interface for a byte-oriented key-value store."""

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None when absent."""

    def set(self, key: str, value: bytes) -> None:
        """Store a value under a key."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used when no external backend is configured."""

    _entries: dict[str, bytes]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> bytes | None:
        return self._entries.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._entries[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)


@dataclass
class DayStorage:
    """Reads and writes the days map and the draft.

    Reads never raise: a missing, unreadable or corrupted entry is treated as
    empty. Write failures are logged and reported through the return value.
    """

    store: KeyValueStore

    def load_days(self) -> dict[str, DayRecord]:
        """Return all saved days keyed by date key."""
        raw = self._read_json(DAYS_KEY)
        if not isinstance(raw, dict):
            return {}
        days: dict[str, DayRecord] = {}
        for date_key, value in raw.items():
            record = day_from_raw(value, fallback_key=str(date_key))
            if record is not None:
                days[record.date_key] = record
        return days

    def save_days(self, days: dict[str, DayRecord]) -> bool:
        payload = {key: day_to_dict(record) for key, record in days.items()}
        return self._write_json(DAYS_KEY, payload)

    def get_day(self, date_key: str) -> DayRecord | None:
        return self.load_days().get(date_key)

    def put_day(self, record: DayRecord) -> bool:
        """Insert or overwrite one saved day."""
        days = self.load_days()
        days[record.date_key] = record
        return self.save_days(days)

    def remove_day(self, date_key: str) -> bool:
        """Delete one saved day; return True when it existed and was removed."""
        days = self.load_days()
        if days.pop(date_key, None) is None:
            return False
        return self.save_days(days)

    def export_days(self) -> dict[str, dict[str, object]]:
        """Return the days map in its serialized shape."""
        return {key: day_to_dict(record) for key, record in self.load_days().items()}

    def load_draft(self) -> Draft | None:
        return draft_from_raw(self._read_json(DRAFT_KEY))

    def save_draft(self, draft: Draft) -> bool:
        return self._write_json(DRAFT_KEY, draft_to_dict(draft))

    def clear_draft(self) -> None:
        try:
            self.store.delete(DRAFT_KEY)
        except Exception:
            _logger.exception("Failed to clear draft")

    def _read_json(self, key: str) -> object | None:
        try:
            raw = self.store.get(key)
        except Exception:
            _logger.warning("Storage unavailable while reading %s", key, exc_info=True)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, ValueError):
            _logger.warning("Ignoring corrupted storage entry %s", key)
            return None

    def _write_json(self, key: str, payload: object) -> bool:
        data = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        try:
            self.store.set(key, data)
        except Exception:
            _logger.exception("Failed to write storage entry %s", key)
            return False
        return True


def day_to_dict(record: DayRecord) -> dict[str, object]:
    """Serialize a saved day using the persisted key names."""
    return {
        "dateKey": record.date_key,
        "savedAt": record.saved_at,
        "mode": record.mode.value,
        "goal": record.goal,
        "waterCups": record.water_cups,
        "steps": record.steps,
        "burned": record.burned,
        "mealLog": record.meal_log.to_dict(),
        "totals": record.totals.to_dict(),
    }


def day_from_raw(raw: object, fallback_key: str | None = None) -> DayRecord | None:
    """Parse a stored day, or None when it is not an object."""
    if not isinstance(raw, dict):
        return None
    date_key = str(raw.get("dateKey") or fallback_key or "")
    if not date_key:
        return None
    meal_log = MealLog.from_raw(raw.get("mealLog"))
    return DayRecord(
        date_key=date_key,
        saved_at=str(raw.get("savedAt") or ""),
        mode=Mode.parse(raw.get("mode")),
        goal=_positive_goal(raw.get("goal")),
        water_cups=max(0, int(to_number(raw.get("waterCups")))),
        steps=max(0, int(to_number(raw.get("steps")))),
        burned=max(0, int(to_number(raw.get("burned")))),
        meal_log=meal_log,
        totals=Totals.from_raw(raw.get("totals")) or compute_totals(meal_log),
    )


def draft_to_dict(draft: Draft) -> dict[str, object]:
    return {
        "dateKey": draft.date_key,
        "mealLog": draft.meal_log.to_dict(),
        "waterCups": draft.water_cups,
        "steps": draft.steps,
        "mode": draft.mode.value,
        "dailyGoal": draft.daily_goal,
        "lastSavedAt": draft.last_saved_at,
        "updatedAt": draft.updated_at,
    }


def draft_from_raw(raw: object) -> Draft | None:
    if not isinstance(raw, dict) or not raw.get("dateKey"):
        return None
    return Draft(
        date_key=str(raw["dateKey"]),
        meal_log=MealLog.from_raw(raw.get("mealLog")),
        water_cups=max(0, int(to_number(raw.get("waterCups")))),
        steps=max(0, int(to_number(raw.get("steps")))),
        mode=Mode.parse(raw.get("mode")),
        daily_goal=_positive_goal(raw.get("dailyGoal")),
        last_saved_at=str(raw["lastSavedAt"]) if raw.get("lastSavedAt") else None,
        updated_at=str(raw.get("updatedAt") or ""),
    )


def _positive_goal(value: object) -> int:
    goal = int(to_number(value))
    return goal if goal > 0 else DEFAULT_GOAL
