# backend/studio/services/slots/availability.py
"""
Level 2: Slot availability for a day.

Takes into account:
- Fixed grid for the weekday (Level 1)
- Closed dates (date_overrides.is_closed) → no slots at all
- Occupied slots (occupied_slots)
- Slots that already started (reference `now`)

The pure merge works on plain values; the DB helpers below only load those
values and are the single place that touches storage.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from .calculator import calculate_end_time, display_block, slots_for_date
from .config import SlotConfig, get_slot_config, normalize_time, time_str_to_minutes
from .redis_store import AvailabilityRedisStore


@dataclass(frozen=True)
class SlotStatus:
    start_time: str
    end_time: str
    display_start: str
    display_end: str
    is_available: bool
    unavailable_reason: Optional[str] = None  # "occupied" | "past"


def filter_past_slots(slots: list[str], target_date: date, now: datetime) -> list[str]:
    """
    Drop slots that are no longer bookable at `now`.

    Past dates → nothing; today → only slots starting after now;
    future dates → unchanged.
    """
    today = now.date()
    if target_date < today:
        return []
    if target_date > today:
        return list(slots)

    current = now.hour * 60 + now.minute
    return [s for s in slots if time_str_to_minutes(s) > current]


def merge_availability(
    target_date: date,
    occupied: Iterable[str] = (),
    is_closed: bool = False,
    now: datetime | None = None,
    config: SlotConfig | None = None,
) -> list[SlotStatus]:
    """Grid for the date with an availability flag per slot."""
    config = config or get_slot_config()
    if is_closed:
        return []

    grid = slots_for_date(target_date, config)
    taken = {normalize_time(t) for t in occupied}
    bookable = set(filter_past_slots(grid, target_date, now)) if now is not None else set(grid)

    result = []
    for start in grid:
        if start in taken:
            reason = "occupied"
        elif start not in bookable:
            reason = "past"
        else:
            reason = None

        display_start, display_end = display_block(start, config)
        result.append(SlotStatus(
            start_time=start,
            end_time=calculate_end_time(start, config),
            display_start=display_start,
            display_end=display_end,
            is_available=reason is None,
            unavailable_reason=reason,
        ))
    return result


def open_slots(statuses: list[SlotStatus]) -> list[str]:
    return [s.start_time for s in statuses if s.is_available]


# ── DB-backed ────────────────────────────────────────────────────────────


def calculate_day_availability(
    db: Session,
    target_date: date,
    now: datetime,
    config: SlotConfig | None = None,
) -> list[SlotStatus]:
    """Availability for one date, loading overrides and occupied slots."""
    override = _get_date_override(db, target_date)
    occupied = _get_occupied_times(db, [target_date]).get(target_date, set())
    return merge_availability(
        target_date,
        occupied=occupied,
        is_closed=bool(override and override.is_closed),
        now=now,
        config=config,
    )


def calculate_calendar(
    db: Session,
    dates: list[date],
    now: datetime,
    store: AvailabilityRedisStore | None = None,
    config: SlotConfig | None = None,
) -> dict[date, int]:
    """
    Open-slot count per date.

    Cached days are read from Redis; misses are calculated in one batch and
    written back. Past slots are excluded by the cache query itself.
    """
    config = config or get_slot_config()

    cached = store.mget_counts(dates, now) if store is not None else {}
    missing = [dt for dt in dates if cached.get(dt) is None]

    counts = {dt: cached[dt] for dt in dates if cached.get(dt) is not None}
    if not missing:
        return counts

    closed = _get_closed_dates(db, missing)
    occupied = _get_occupied_times(db, missing)

    days_to_store: dict[date, list[str]] = {}
    for dt in missing:
        # cache the whole day (minus occupied) so the entry stays valid as time passes
        full_day = open_slots(merge_availability(dt, occupied.get(dt, ()), dt in closed, None, config))
        days_to_store[dt] = full_day
        counts[dt] = len(filter_past_slots(full_day, dt, now))

    if store is not None:
        store.store_multiple_days(days_to_store)

    return counts


def _get_date_override(db: Session, target_date: date):
    """Get the override row for a date, if any."""
    from ...models import DateOverrides
    return db.query(DateOverrides).filter(DateOverrides.date == target_date).first()


def _get_closed_dates(db: Session, dates: list[date]) -> set[date]:
    from ...models import DateOverrides

    rows = (
        db.query(DateOverrides.date)
        .filter(
            DateOverrides.date.in_(dates),
            DateOverrides.is_closed == 1,
        )
        .all()
    )
    return {row.date for row in rows}


def _get_occupied_times(db: Session, dates: list[date]) -> dict[date, set[str]]:
    from ...models import OccupiedSlots

    rows = (
        db.query(OccupiedSlots.date, OccupiedSlots.start_time)
        .filter(OccupiedSlots.date.in_(dates))
        .all()
    )
    occupied: dict[date, set[str]] = {}
    for row in rows:
        occupied.setdefault(row.date, set()).add(normalize_time(row.start_time))
    return occupied
