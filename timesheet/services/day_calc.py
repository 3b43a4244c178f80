from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from timesheet.models import Causal, TimeClassType
from timesheet.schemas import DailyEntry, UserSettings
from timesheet.services.causals import CausalRule, VoucherRule, causal_rule
from timesheet.services.day_classifier import (
    TARGET_MINUTES_SHORT,
    DayClass,
    DayOverrides,
    classify_day,
    default_entry,
    target_minutes,
)

BREAK_MINUTES = 30
WORKED_CAP_MINUTES = 540
EARLIEST_CREDITED_START = 7 * 60 + 30
# a short day may run up to 30 minutes over target before the break is deducted
SHORT_DAY_GRACE_LIMIT = TARGET_MINUTES_SHORT + 30
FLAT_VOUCHER_THRESHOLD = 15 * 60 + 12
SHORT_DAY_VOUCHER_SPAN = 565


@dataclass(frozen=True, slots=True)
class DayStats:
    worked_minutes: int
    target_minutes: int
    buono_pasto: bool
    is_holiday: bool
    is_long_day: bool
    time_class: TimeClassType
    errors: tuple[str, ...] = ()


def time_to_minutes(value: str | None) -> int:
    if not value:
        return 0
    hours_raw, _, minutes_raw = value.partition(":")
    return _int_or_zero(hours_raw) * 60 + _int_or_zero(minutes_raw)


def _int_or_zero(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        return 0


def format_minutes(minutes: int) -> str:
    prefix = "-" if minutes < 0 else ""
    hours, mins = divmod(abs(int(minutes)), 60)
    return f"{prefix}{hours}h {mins:02d}m"


def effective_causal(day_class: DayClass, entry: DailyEntry | None) -> Causal:
    if entry is not None:
        return entry.causal
    return Causal.FESTA if day_class.holiday else Causal.UFFICIO


def clocked_worked_minutes(raw_diff: int, day_class: DayClass) -> int:
    if day_class.full_day_rules:
        worked = raw_diff - BREAK_MINUTES
    elif raw_diff > TARGET_MINUTES_SHORT:
        worked = TARGET_MINUTES_SHORT if raw_diff <= SHORT_DAY_GRACE_LIMIT else raw_diff - BREAK_MINUTES
    else:
        worked = raw_diff
    return min(worked, WORKED_CAP_MINUTES)


def meal_voucher(rule: CausalRule, day_class: DayClass, start_raw: int, end: int) -> bool:
    if rule.voucher == VoucherRule.FULL_DAY:
        return day_class.full_day_rules
    if rule.voucher == VoucherRule.SHIFT_THRESHOLD:
        if day_class.full_day_rules:
            return end > FLAT_VOUCHER_THRESHOLD
        return end > start_raw + SHORT_DAY_VOUCHER_SPAN
    return False


def _zeroed(day_class: DayClass) -> DayStats:
    return DayStats(
        worked_minutes=0,
        target_minutes=0,
        buono_pasto=False,
        is_holiday=day_class.holiday,
        is_long_day=day_class.is_long_day,
        time_class=day_class.time_class,
    )


def calculate_day_stats(
    day: date,
    entry: DailyEntry | None,
    settings: UserSettings,
    overrides: DayOverrides | None = None,
) -> DayStats:
    day_class = classify_day(day, settings, overrides)
    target = target_minutes(day_class)

    if causal_rule(effective_causal(day_class, entry)).synthetic:
        return _zeroed(day_class)

    effective_entry = entry
    if effective_entry is None:
        if day_class.weekend:
            return _zeroed(day_class)
        effective_entry = default_entry(day, settings, overrides)

    rule = causal_rule(effective_entry.causal)
    start_raw = time_to_minutes(effective_entry.start_time)
    end = time_to_minutes(effective_entry.end_time)
    # arrivals before 07:30 are not credited; a negative span is left as is
    raw_diff = end - max(start_raw, EARLIEST_CREDITED_START)

    if rule.clocked:
        worked = clocked_worked_minutes(raw_diff, day_class)
    elif day_class.working_day:
        worked = target
    else:
        worked = 0

    worked += effective_entry.permesso_minutes or 0
    if rule.clocked:
        worked = min(worked, WORKED_CAP_MINUTES)

    return DayStats(
        worked_minutes=worked,
        target_minutes=target,
        buono_pasto=meal_voucher(rule, day_class, start_raw, end),
        is_holiday=day_class.holiday,
        is_long_day=day_class.is_long_day,
        time_class=day_class.time_class,
    )
