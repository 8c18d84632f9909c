# backend/studio/services/calendar/holidays.py
"""
Holiday table keyed by year.

The table is configuration, not rules: it has to be extended every year.
Lookups for a year that has no entry are logged once per year (or raise
in strict mode) so a stale table shows up instead of silently turning
holidays into regular days.

File format for HOLIDAYS_FILE:
    {"2027": ["2027-01-01", "2027-02-01", ...], ...}
"""

import json
import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Mapping

from ...config import get_settings
from ...errors import HolidayCalendarError, InvalidDateError
from .day_types import parse_date

logger = logging.getLogger(__name__)


DEFAULT_HOLIDAYS: dict[int, tuple[date, ...]] = {
    2024: (
        date(2024, 1, 1),    # Año Nuevo
        date(2024, 2, 5),    # Día de la Constitución
        date(2024, 3, 18),   # Natalicio de Benito Juárez
        date(2024, 5, 1),    # Día del Trabajo
        date(2024, 9, 16),   # Día de la Independencia
        date(2024, 11, 1),   # Día de Muertos
        date(2024, 11, 18),  # Día de la Revolución
        date(2024, 12, 25),  # Navidad
    ),
    2025: (
        date(2025, 1, 1),
        date(2025, 2, 3),
        date(2025, 3, 17),
        date(2025, 5, 1),
        date(2025, 9, 16),
        date(2025, 11, 1),
        date(2025, 11, 17),
        date(2025, 12, 25),
    ),
    2026: (
        date(2026, 1, 1),
        date(2026, 2, 2),
        date(2026, 3, 16),
        date(2026, 5, 1),
        date(2026, 9, 16),
        date(2026, 11, 16),
        date(2026, 12, 25),
        # high-demand days
        date(2026, 4, 2),    # Jueves Santo
        date(2026, 4, 3),    # Viernes Santo
        date(2026, 5, 10),   # Día de las Madres
        date(2026, 12, 12),  # Virgen de Guadalupe
        date(2026, 12, 24),  # Nochebuena
        date(2026, 12, 31),  # Fin de Año
    ),
}


class HolidayCalendar:
    """
    Immutable holiday lookup.

    Attributes:
        strict: raise HolidayCalendarError for years missing from the table
                instead of logging a warning.
    """

    def __init__(self, holidays: Mapping[int, Iterable[date]], strict: bool = False):
        table: dict[int, frozenset[date]] = {}
        for year, days in holidays.items():
            year = int(year)
            days = frozenset(days)
            misplaced = sorted(d for d in days if d.year != year)
            if misplaced:
                raise HolidayCalendarError(
                    f"Holidays filed under {year} belong to another year: "
                    + ", ".join(d.isoformat() for d in misplaced)
                )
            table[year] = days

        self._table = table
        self.strict = strict
        self._warned_years: set[int] = set()

    @property
    def years(self) -> list[int]:
        return sorted(self._table)

    def covers(self, year: int) -> bool:
        return year in self._table

    def holidays_in(self, year: int) -> list[date]:
        return sorted(self._table.get(year, ()))

    def is_holiday(self, d: date) -> bool:
        days = self._table.get(d.year)
        if days is None:
            self._report_missing_year(d.year)
            return False
        return d in days

    def _report_missing_year(self, year: int) -> None:
        if self.strict:
            raise HolidayCalendarError(f"Holiday table has no entry for {year}")
        if year not in self._warned_years:
            self._warned_years.add(year)
            logger.warning(f"Holiday table has no entry for {year}, treating all days as regular")

    def __contains__(self, d: date) -> bool:
        return self.is_holiday(d)

    def __repr__(self) -> str:
        return f"HolidayCalendar(years={self.years}, strict={self.strict})"


def load_holidays_file(path: Path) -> dict[int, list[date]]:
    """Read a {"year": ["YYYY-MM-DD", ...]} JSON file."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise HolidayCalendarError(f"Cannot read holidays file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise HolidayCalendarError(f"Holidays file {path} must contain an object keyed by year")

    table: dict[int, list[date]] = {}
    for year, days in raw.items():
        try:
            year_int = int(year)
        except ValueError as e:
            raise HolidayCalendarError(f"Invalid year key {year!r} in {path}") from e
        if not isinstance(days, list):
            raise HolidayCalendarError(f"Holidays for {year} must be a list of dates")
        try:
            table[year_int] = [parse_date(d) for d in days]
        except InvalidDateError as e:
            raise HolidayCalendarError(f"Invalid holiday in {path}: {e}") from e
    return table


@lru_cache
def get_holiday_calendar() -> HolidayCalendar:
    """Holiday calendar from settings (file if configured, otherwise defaults)."""
    settings = get_settings()
    if settings.holidays_file:
        holidays = load_holidays_file(settings.holidays_file)
        logger.info(f"Loaded holidays for years {sorted(holidays)} from {settings.holidays_file}")
    else:
        holidays = DEFAULT_HOLIDAYS
    return HolidayCalendar(holidays, strict=settings.holidays_strict)
