from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from timesheet.models import Causal, TimeClassType
from timesheet.schemas import AppState
from timesheet.services.causals import annually_capped_causals, causal_rule
from timesheet.services.day_classifier import (
    is_long_day,
    smart_working_config_for,
    time_class_for,
    week_bounds,
)
from timesheet.services.periods import FERIE_BASE_DAYS

SMART_WORKING_WEEK_MAX = 2
SMART_WORKING_LONG_WEEK_MAX = 1
# a monthly limit of 10 lifts the weekly caps
WEEKLY_CAPS_WAIVED_LIMIT = 10


@dataclass(frozen=True, slots=True)
class AnnualViolation:
    year: int
    causal: Causal
    count: int
    limit: float


@dataclass(frozen=True, slots=True)
class ViolationReport:
    by_date: dict[date, list[str]]
    annual: list[AnnualViolation]

    @property
    def blocking(self) -> bool:
        return bool(self.by_date) or bool(self.annual)


def _smart_days(state: AppState) -> list[date]:
    return [day for day, entry in state.entries.items() if entry.causal == Causal.SMART]


def validate_day(day: date, state: AppState) -> list[str]:
    entry = state.entries.get(day)
    if entry is None or entry.causal != Causal.SMART:
        return []

    errors: list[str] = []
    settings = state.settings
    smart_days = _smart_days(state)
    limit = smart_working_config_for(day, settings).limit

    month_count = sum(1 for other in smart_days if (other.year, other.month) == (day.year, day.month))
    if month_count > limit:
        errors.append(f"Limite mensile Smart Working superato ({month_count}/{limit})")

    if time_class_for(day, settings).type != TimeClassType.ALTERNATED or limit == WEEKLY_CAPS_WAIVED_LIMIT:
        return errors

    week_start, week_end = week_bounds(day)
    week_days = [other for other in smart_days if week_start <= other <= week_end]
    if len(week_days) > SMART_WORKING_WEEK_MAX:
        errors.append(f"Limite settimanale Smart Working superato ({len(week_days)}/{SMART_WORKING_WEEK_MAX})")

    long_count = sum(1 for other in week_days if is_long_day(other, settings, state.day_overrides))
    if long_count > SMART_WORKING_LONG_WEEK_MAX:
        errors.append(
            "Limite settimanale Smart Working in giorni lunghi superato "
            f"({long_count}/{SMART_WORKING_LONG_WEEK_MAX})"
        )
    return errors


def ferie_limit(state: AppState) -> float:
    return FERIE_BASE_DAYS + state.settings.initial_ferie


def annual_violations(state: AppState) -> list[AnnualViolation]:
    counts: dict[tuple[int, Causal], int] = {}
    for day, entry in state.entries.items():
        counts[(day.year, entry.causal)] = counts.get((day.year, entry.causal), 0) + 1

    limits: dict[Causal, float] = {rule.causal: float(rule.annual_cap or 0) for rule in annually_capped_causals()}
    limits[Causal.FERIE] = ferie_limit(state)

    violations: list[AnnualViolation] = []
    for year in sorted({year for year, _ in counts}):
        for causal, limit in limits.items():
            count = counts.get((year, causal), 0)
            if count > limit:
                violations.append(AnnualViolation(year=year, causal=causal, count=count, limit=limit))
    return violations


def violation_report(state: AppState) -> ViolationReport:
    by_date: dict[date, list[str]] = {}
    for day in sorted(state.entries):
        messages = validate_day(day, state)
        if messages:
            by_date[day] = messages
    return ViolationReport(by_date=by_date, annual=annual_violations(state))


def has_blocking_violations(state: AppState) -> bool:
    if annual_violations(state):
        return True
    return any(validate_day(day, state) for day in state.entries)


def annual_quota_warning(day: date, causal: Causal, state: AppState) -> str | None:
    """Advisory check run before saving a capped causal on ``day``.

    Counts the other entries of the same year, so re-saving an existing
    entry does not count against itself.
    """
    rule = causal_rule(causal)
    if rule.annual_cap is None:
        return None
    count = sum(
        1
        for other, entry in state.entries.items()
        if other.year == day.year and other != day and entry.causal == rule.causal
    )
    if count >= rule.annual_cap:
        return f"Limite annuo {rule.quota_label} raggiunto ({rule.annual_cap})."
    return None
