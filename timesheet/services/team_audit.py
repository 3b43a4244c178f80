from __future__ import annotations

import logging
from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from timesheet.models import Causal
from timesheet.schemas import AppState, AuditRange
from timesheet.services.causals import causal_rule
from timesheet.services.day_classifier import is_weekend, sunday_based_weekday
from timesheet.services.holiday_calendar import is_holiday
from timesheet.services.periods import iter_days, month_bounds

logger = logging.getLogger("timesheet.team_audit")

DEFAULT_TEAM_MAX_USERS = 10
EMPTY_OFFICE_MESSAGE = "Ufficio Vuoto: nessun operatore presente fisicamente"
GRID_TITLE = "Servizio Stipendi Pensioni"
GRID_DAY_COLUMNS = 31
ANONYMOUS_USER = "Utente"
ITALIAN_WEEKDAYS = ("Domenica", "Lunedì", "Martedì", "Mercoledì", "Giovedì", "Venerdì", "Sabato")


@dataclass(frozen=True, slots=True)
class AuditAnomaly:
    day: date
    message: str


@dataclass(frozen=True, slots=True)
class AttendanceGrid:
    year: int
    month: int
    weekday_row: list[str]
    day_number_row: list[str]
    rows: list[list[str]]

    @property
    def filename_stem(self) -> str:
        return f"Prospetto_Presenze_{self.year}_{self.month}"

    def all_rows(self) -> list[list[str]]:
        return [self.weekday_row, self.day_number_row, *self.rows]


def merge_team(users: Iterable[AppState], *, max_users: int = DEFAULT_TEAM_MAX_USERS) -> list[AppState]:
    """Keep the first state per user name, up to ``max_users`` states."""
    merged: list[AppState] = []
    seen: set[str] = set()
    for user in users:
        name = user.settings.user_name
        if name in seen:
            logger.info("team_user_duplicate_skipped", extra={"user_name": name})
            continue
        seen.add(name)
        merged.append(user)
    if len(merged) > max_users:
        logger.info("team_users_truncated", extra={"received": len(merged), "kept": max_users})
    return merged[:max_users]


def audit_period(year: int, month: int, range_name: AuditRange = "month") -> tuple[date, date]:
    start, end = month_bounds(year, month)
    if range_name == "quarter":
        index = (month - 1) + 2
        end_year, end_month = year + index // 12, index % 12 + 1
        end = date(end_year, end_month, monthrange(end_year, end_month)[1])
    return start, end


def _in_office(user: AppState, day: date) -> bool:
    entry = user.entries.get(day)
    return entry is None or entry.causal == Causal.UFFICIO


def audit_office_coverage(users: list[AppState], start: date, end: date) -> list[AuditAnomaly]:
    if not users:
        return []
    # the first user's patron day stands for the whole office
    patron_saint_date = users[0].settings.patron_saint_date
    anomalies: list[AuditAnomaly] = []
    for day in iter_days(start, end):
        if is_weekend(day) or is_holiday(day, patron_saint_date):
            continue
        if not any(_in_office(user, day) for user in users):
            anomalies.append(AuditAnomaly(day=day, message=EMPTY_OFFICE_MESSAGE))
    return anomalies


def attendance_code(user: AppState, day: date) -> str:
    if is_weekend(day) or is_holiday(day, user.settings.patron_saint_date):
        return ""
    entry = user.entries.get(day)
    if entry is None:
        return causal_rule(Causal.UFFICIO).report_code
    return causal_rule(entry.causal).report_code


def build_attendance_grid(users: list[AppState], year: int, month: int) -> AttendanceGrid:
    days_in_month = monthrange(year, month)[1]
    month_days = [date(year, month, number) for number in range(1, days_in_month + 1)]
    padding = [""] * (GRID_DAY_COLUMNS - days_in_month)

    weekday_row = [GRID_TITLE, *(ITALIAN_WEEKDAYS[sunday_based_weekday(day)] for day in month_days), *padding]
    day_number_row = ["", *(str(number) for number in range(1, GRID_DAY_COLUMNS + 1))]
    rows = [
        [user.settings.user_name or ANONYMOUS_USER, *(attendance_code(user, day) for day in month_days), *padding]
        for user in users
    ]
    return AttendanceGrid(
        year=year,
        month=month,
        weekday_row=weekday_row,
        day_number_row=day_number_row,
        rows=rows,
    )
