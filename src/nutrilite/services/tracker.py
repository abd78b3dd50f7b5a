"""Draft and save lifecycle for daily meal tracking."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from nutrilite.domain.days import DayRecord, Draft, Mode, WorkingDay
from nutrilite.domain.meals import FoodItem, MealSlot
from nutrilite.services.merge import merge_meal_logs
from nutrilite.services.storage import DayStorage
from nutrilite.services.totals import compute_totals, estimate_burned_from_steps

_logger = logging.getLogger(__name__)


def local_date_key(now: datetime | None = None, timezone_name: str = "UTC") -> str:
    """Return the YYYY-MM-DD key of a moment in the given timezone."""
    tz = ZoneInfo(timezone_name)
    moment = now.astimezone(tz) if now else datetime.now(tz=tz)
    return moment.strftime("%Y-%m-%d")


@dataclass
class DayTracker:
    """Coordinates the draft, saved days and their merge."""

    storage: DayStorage
    timezone: str = "UTC"
    kcal_per_step: float = 0.04
    default_goal: int = 2000
    default_steps: int = 2500

    def today_key(self, now: datetime | None = None) -> str:
        return local_date_key(now, self.timezone)

    def empty_day(self, date_key: str) -> WorkingDay:
        """Return default working state for a date key."""
        return WorkingDay(
            date_key=date_key,
            steps=self.default_steps,
            goal=self.default_goal,
        )

    def load(self, date_key: str | None = None) -> WorkingDay:
        """Return the working state for a date key.

        A draft for the key wins. Otherwise a saved record is adopted; for
        today a draft mirroring it is written. Otherwise defaults are returned.
        Loading another day never replaces the draft.
        """
        key = date_key or self.today_key()
        draft = self.storage.load_draft()
        if draft is not None and draft.date_key == key:
            return WorkingDay(
                date_key=key,
                meal_log=draft.meal_log,
                water_cups=draft.water_cups,
                steps=draft.steps,
                mode=draft.mode,
                goal=draft.daily_goal,
                last_saved_at=draft.last_saved_at,
            )

        saved = self.storage.get_day(key)
        if saved is None:
            return self.empty_day(key)

        working = WorkingDay(
            date_key=key,
            meal_log=saved.meal_log,
            water_cups=saved.water_cups,
            steps=saved.steps,
            mode=saved.mode,
            goal=saved.goal,
            last_saved_at=saved.saved_at or None,
        )
        if key == self.today_key():
            self.persist_draft(working)
        return working

    def persist_draft(self, working: WorkingDay, now: datetime | None = None) -> Draft:
        """Write the working state as the current draft."""
        draft = Draft(
            date_key=working.date_key,
            meal_log=working.meal_log,
            water_cups=working.water_cups,
            steps=working.steps,
            mode=working.mode,
            daily_goal=working.goal,
            last_saved_at=working.last_saved_at,
            updated_at=_iso(now),
        )
        self.storage.save_draft(draft)
        return draft

    def save(
        self, working: WorkingDay, now: datetime | None = None
    ) -> tuple[DayRecord, WorkingDay]:
        """Merge the working log into the saved day and persist both.

        Returns the saved record and the working state that now mirrors it.
        """
        saved_at = _iso(now)
        existing = self.storage.get_day(working.date_key)
        merged_log = merge_meal_logs(
            existing.meal_log if existing else None, working.meal_log
        )
        record = DayRecord(
            date_key=working.date_key,
            saved_at=saved_at,
            mode=working.mode,
            goal=working.goal,
            water_cups=working.water_cups,
            steps=working.steps,
            burned=estimate_burned_from_steps(working.steps, self.kcal_per_step),
            meal_log=merged_log,
            totals=compute_totals(merged_log),
        )
        if not self.storage.put_day(record):
            _logger.warning("Day %s was not persisted", record.date_key)
        mirrored = replace(working, meal_log=merged_log, last_saved_at=saved_at)
        if self.owns_draft(working.date_key):
            self.persist_draft(mirrored, now=now)
        _logger.info(
            "Saved day %s: %s items, %s kcal",
            record.date_key,
            len(merged_log.all_items()),
            record.totals.calories,
        )
        return record, mirrored

    def clear(self, date_key: str | None = None) -> WorkingDay:
        """Reset the working state and drop its draft; saved days stay.

        A draft that belongs to another day is left alone.
        """
        key = date_key or self.today_key()
        self._drop_draft_for(key)
        return self.empty_day(key)

    def delete_day(self, date_key: str) -> bool:
        """Remove a saved day; a draft for the same key is dropped too."""
        removed = self.storage.remove_day(date_key)
        self._drop_draft_for(date_key)
        return removed

    def list_days(self) -> list[DayRecord]:
        """Return saved days, newest first."""
        days = self.storage.load_days()
        return [days[key] for key in sorted_date_keys(days)]

    def get_day(self, date_key: str) -> DayRecord | None:
        return self.storage.get_day(date_key)

    def owns_draft(self, date_key: str) -> bool:
        """Whether a draft for the key may be written.

        Today always may. Another day may only when the slot is empty or
        already holds that day, so a past day never displaces today's edits.
        """
        if date_key == self.today_key():
            return True
        draft = self.storage.load_draft()
        return draft is None or draft.date_key == date_key

    def _drop_draft_for(self, date_key: str) -> None:
        draft = self.storage.load_draft()
        if draft is not None and draft.date_key == date_key:
            self.storage.clear_draft()


def add_food(working: WorkingDay, slot: MealSlot, item: FoodItem) -> WorkingDay:
    """Prepend an item to a slot."""
    items = (item, *working.meal_log.slot(slot))
    return replace(working, meal_log=working.meal_log.with_slot(slot, items))


def remove_food(working: WorkingDay, slot: MealSlot, index: int) -> WorkingDay:
    """Remove the item at an index of a slot; out-of-range is a no-op."""
    items = working.meal_log.slot(slot)
    if index < 0 or index >= len(items):
        return working
    remaining = items[:index] + items[index + 1 :]
    return replace(working, meal_log=working.meal_log.with_slot(slot, remaining))


def update_day(
    working: WorkingDay,
    *,
    water_cups: int | None = None,
    steps: int | None = None,
    mode: Mode | str | None = None,
    goal: int | None = None,
) -> WorkingDay:
    """Apply settings changes; negative counts clamp to zero."""
    changes: dict[str, object] = {}
    if water_cups is not None:
        changes["water_cups"] = max(0, int(water_cups))
    if steps is not None:
        changes["steps"] = max(0, int(steps))
    if mode is not None:
        changes["mode"] = Mode.parse(mode)
    if goal is not None and int(goal) > 0:
        changes["goal"] = int(goal)
    return replace(working, **changes)


def sorted_date_keys(days: dict[str, object]) -> list[str]:
    """Return date keys newest first."""
    return sorted(days, reverse=True)


def select_after_delete(
    days: dict[str, object], deleted_key: str, selected_key: str, today_key: str
) -> str:
    """Choose the selected date after a day was deleted.

    The selection only moves when it pointed at the deleted day: to today if
    today still has a record, otherwise to the newest remaining day, or to
    today when nothing is left.
    """
    if selected_key != deleted_key:
        return selected_key
    remaining = {key: value for key, value in days.items() if key != deleted_key}
    if today_key in remaining:
        return today_key
    keys = sorted_date_keys(remaining)
    return keys[0] if keys else today_key


def _iso(now: datetime | None) -> str:
    moment = now or datetime.now(tz=UTC)
    return moment.isoformat()
