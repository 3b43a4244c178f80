from __future__ import annotations

from datetime import date
from functools import lru_cache

# (month, day) -> name; repeats every year
ITALIAN_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "Capodanno",
    (1, 6): "Epifania",
    (4, 25): "Liberazione",
    (5, 1): "Festa del Lavoro",
    (6, 2): "Festa della Repubblica",
    (8, 15): "Assunzione (Ferragosto)",
    (10, 4): "San Francesco",
    (11, 1): "Ognissanti",
    (12, 8): "Immacolata",
    (12, 25): "Natale",
    (12, 26): "Santo Stefano",
}
PATRON_SAINT_NAME = "Santo Patrono"


@lru_cache(maxsize=64)
def parse_month_day(value: str | None) -> tuple[int, int] | None:
    if not value:
        return None
    month_raw, _, day_raw = value.partition("-")
    try:
        return int(month_raw), int(day_raw)
    except ValueError:
        return None


def holiday_name(day: date, patron_saint_date: str | None = None) -> str | None:
    name = ITALIAN_HOLIDAYS.get((day.month, day.day))
    if name is not None:
        return name
    if parse_month_day(patron_saint_date) == (day.month, day.day):
        return PATRON_SAINT_NAME
    return None


def is_holiday(day: date, patron_saint_date: str | None = None) -> bool:
    return holiday_name(day, patron_saint_date) is not None
