from __future__ import annotations

from datetime import date

from timesheet.schemas import (
    AnnualCounterRead,
    AnnualViolationRead,
    AppState,
    CalendarDayRead,
    CalendarMonthRead,
    DayDetailRead,
    DayStatsRead,
    MonthSummaryRead,
    ViolationReportRead,
)
from timesheet.services.compliance import validate_day, violation_report
from timesheet.services.day_calc import DayStats, calculate_day_stats, effective_causal
from timesheet.services.day_classifier import classify_day, default_entry, swap_candidates
from timesheet.services.holiday_calendar import holiday_name
from timesheet.services.periods import iter_days, month_bounds, month_summary


def stats_read(stats: DayStats) -> DayStatsRead:
    return DayStatsRead(
        worked_minutes=stats.worked_minutes,
        target_minutes=stats.target_minutes,
        buono_pasto=stats.buono_pasto,
        is_holiday=stats.is_holiday,
        is_long_day=stats.is_long_day,
        time_class=stats.time_class,
        errors=list(stats.errors),
    )


def build_calendar_month(state: AppState, year: int, month: int) -> CalendarMonthRead:
    first_day, last_day = month_bounds(year, month)
    days: list[CalendarDayRead] = []
    for day in iter_days(first_day, last_day):
        entry = state.entries.get(day)
        day_class = classify_day(day, state.settings, state.day_overrides)
        days.append(
            CalendarDayRead(
                day=day,
                is_weekend=day_class.weekend,
                holiday_name=holiday_name(day, state.settings.patron_saint_date),
                effective_causal=effective_causal(day_class, entry),
                override=state.day_overrides.get(day),
                entry=entry,
                stats=stats_read(calculate_day_stats(day, entry, state.settings, state.day_overrides)),
                violations=validate_day(day, state),
            )
        )
    return CalendarMonthRead(year=year, month=month, days=days)


def build_day_detail(state: AppState, day: date) -> DayDetailRead:
    stored = state.entries.get(day)
    entry = stored if stored is not None else default_entry(day, state.settings, state.day_overrides)
    return DayDetailRead(
        day=day,
        entry=entry,
        is_default_entry=stored is None,
        stats=stats_read(calculate_day_stats(day, stored, state.settings, state.day_overrides)),
        violations=validate_day(day, state),
        swap_candidates=swap_candidates(day, state.settings, state.day_overrides),
    )


def build_month_summary(state: AppState, year: int, month: int) -> MonthSummaryRead:
    summary = month_summary(state, year, month)
    return MonthSummaryRead(
        year=summary.year,
        month=summary.month,
        worked_minutes=summary.worked_minutes,
        target_minutes=summary.target_minutes,
        buoni_pasto=summary.buoni_pasto,
        smart_working_count=summary.smart_working_count,
        smart_working_limit=summary.smart_working_limit,
        smart_working_exceeded=summary.smart_working_exceeded,
        law_104_count=summary.law_104_count,
        law_104_limit=summary.law_104_limit,
        paid_minutes=summary.paid_minutes,
        month_delta_minutes=summary.month_delta_minutes,
        hour_bank_minutes=summary.hour_bank_minutes,
        annual_presence_days=summary.annual_presence_days,
        remaining_ferie=summary.remaining_ferie,
        annual_counters=[
            AnnualCounterRead(
                causal=counter.causal,
                count=counter.count,
                limit=counter.limit,
                exceeded=counter.exceeded,
            )
            for counter in summary.annual_counters
        ],
    )


def build_violation_report(state: AppState) -> ViolationReportRead:
    report = violation_report(state)
    return ViolationReportRead(
        by_date=report.by_date,
        annual=[
            AnnualViolationRead(year=item.year, causal=item.causal, count=item.count, limit=item.limit)
            for item in report.annual
        ],
        blocking=report.blocking,
    )
