from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from math import floor

from timesheet.models import Causal
from timesheet.schemas import AppState, DailyEntry, UserSettings
from timesheet.services.causals import PresenceWeight, annually_capped_causals, causal_rule
from timesheet.services.day_calc import calculate_day_stats, effective_causal
from timesheet.services.day_classifier import (
    TARGET_MINUTES_SHORT,
    DayOverrides,
    classify_day,
    is_weekend,
    smart_working_config_for,
)

FERIE_BASE_DAYS = 28


@dataclass(frozen=True, slots=True)
class AnnualCounter:
    causal: Causal
    count: int
    limit: int

    @property
    def exceeded(self) -> bool:
        return self.count > self.limit


@dataclass(frozen=True, slots=True)
class MonthSummary:
    year: int
    month: int
    worked_minutes: int
    target_minutes: int
    buoni_pasto: int
    smart_working_count: int
    smart_working_limit: int
    law_104_count: int
    law_104_limit: int
    paid_minutes: int
    month_delta_minutes: int
    hour_bank_minutes: int
    annual_presence_days: float
    remaining_ferie: int
    annual_counters: list[AnnualCounter] = field(default_factory=list)

    @property
    def smart_working_exceeded(self) -> bool:
        return self.smart_working_count > self.smart_working_limit


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def presence_in_period(
    start: date,
    end: date,
    entries: Mapping[date, DailyEntry],
    settings: UserSettings,
    overrides: DayOverrides | None = None,
) -> float:
    presence = 0.0
    for day in iter_days(start, end):
        if is_weekend(day):
            continue
        entry = entries.get(day)
        rule = causal_rule(effective_causal(classify_day(day, settings, overrides), entry))
        if rule.presence == PresenceWeight.FULL:
            presence += 1
        elif rule.presence == PresenceWeight.MINUS_PERMIT:
            stats = calculate_day_stats(day, entry, settings, overrides)
            target = stats.target_minutes if stats.target_minutes > 0 else TARGET_MINUTES_SHORT
            permit = entry.permesso_minutes if entry is not None else 0
            presence += max(0.0, 1 - permit / target)
    return presence


def hour_bank_minutes(state: AppState) -> int:
    """Initial balance plus worked-minus-target over every stored entry, minus paid hours."""
    balance = state.settings.bank_hours_initial
    for day, entry in state.entries.items():
        stats = calculate_day_stats(day, entry, state.settings, state.day_overrides)
        balance += stats.worked_minutes - stats.target_minutes
    balance -= sum(int(minutes or 0) for minutes in state.paid_hours.values())
    return balance


def entries_in_year(state: AppState, year: int) -> list[DailyEntry]:
    return [entry for day, entry in state.entries.items() if day.year == year]


def count_causal(entries: list[DailyEntry], causal: Causal) -> int:
    return sum(1 for entry in entries if entry.causal == causal)


def remaining_ferie(state: AppState, year: int) -> int:
    used = count_causal(entries_in_year(state, year), Causal.FERIE)
    return floor(FERIE_BASE_DAYS + state.settings.initial_ferie - used)


def month_summary(state: AppState, year: int, month: int) -> MonthSummary:
    first_day, last_day = month_bounds(year, month)
    worked_total = 0
    target_total = 0
    vouchers = 0
    smart_working_count = 0
    law_104_count = 0

    for day in iter_days(first_day, last_day):
        entry = state.entries.get(day)
        stats = calculate_day_stats(day, entry, state.settings, state.day_overrides)
        worked_total += stats.worked_minutes
        target_total += stats.target_minutes
        if stats.buono_pasto:
            vouchers += 1
        if entry is not None:
            if entry.causal == Causal.SMART:
                smart_working_count += 1
            elif entry.causal == Causal.L104:
                law_104_count += 1

    paid_minutes = int(state.paid_hours.get(month_key(first_day), 0) or 0)
    year_entries = entries_in_year(state, year)
    counters = [
        AnnualCounter(causal=rule.causal, count=count_causal(year_entries, rule.causal), limit=rule.annual_cap or 0)
        for rule in annually_capped_causals()
    ]

    return MonthSummary(
        year=year,
        month=month,
        worked_minutes=worked_total,
        target_minutes=target_total,
        buoni_pasto=vouchers,
        smart_working_count=smart_working_count,
        smart_working_limit=smart_working_config_for(first_day, state.settings).limit,
        law_104_count=law_104_count,
        law_104_limit=causal_rule(Causal.L104).monthly_cap or 0,
        paid_minutes=paid_minutes,
        month_delta_minutes=worked_total - target_total - paid_minutes,
        hour_bank_minutes=hour_bank_minutes(state),
        annual_presence_days=presence_in_period(
            date(year, 1, 1),
            date(year, 12, 31),
            state.entries,
            state.settings,
            state.day_overrides,
        ),
        remaining_ferie=remaining_ferie(state, year),
        annual_counters=counters,
    )
