from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache

from timesheet.models import Causal, DayKind, TimeClassType
from timesheet.schemas import (
    TIMELINE_EPOCH,
    DailyEntry,
    LongDayConfig,
    SmartWorkingConfig,
    TimeClassConfig,
    UserSettings,
)
from timesheet.services.holiday_calendar import is_holiday
from timesheet.services.timeline import Timeline

TARGET_MINUTES_LONG = 540
TARGET_MINUTES_SHORT = 360
TARGET_MINUTES_FLAT = 432

DEFAULT_START_TIME = "07:30"
DEFAULT_END_SHORT = "13:30"
DEFAULT_END_LONG = "17:00"
# 07:30 + 432 target + 30 break
DEFAULT_END_FLAT = "15:12"
HOLIDAY_TIME = "00:00"

FRIDAY = 4

DayOverrides = Mapping[date, DayKind]

_FALLBACK_LONG_DAYS = LongDayConfig(start_date=TIMELINE_EPOCH, days=())
_FALLBACK_SMART_WORKING = SmartWorkingConfig(start_date=TIMELINE_EPOCH, limit=8)
_FALLBACK_TIME_CLASS = TimeClassConfig(start_date=TIMELINE_EPOCH, type=TimeClassType.ALTERNATED)


@dataclass(frozen=True, slots=True)
class SettingsTimelines:
    long_days: Timeline[LongDayConfig]
    smart_working: Timeline[SmartWorkingConfig]
    time_class: Timeline[TimeClassConfig]


@dataclass(frozen=True, slots=True)
class DayClass:
    day: date
    holiday: bool
    weekend: bool
    is_long_day: bool
    time_class: TimeClassType

    @property
    def working_day(self) -> bool:
        return not self.holiday and not self.weekend

    @property
    def full_day_rules(self) -> bool:
        """Flat days and long alternated days share break and voucher rules."""
        return self.time_class == TimeClassType.FLAT or self.is_long_day


@lru_cache(maxsize=32)
def settings_timelines(settings: UserSettings) -> SettingsTimelines:
    return SettingsTimelines(
        long_days=Timeline(settings.long_day_configs, default=_FALLBACK_LONG_DAYS),
        smart_working=Timeline(settings.sw_configs, default=_FALLBACK_SMART_WORKING),
        time_class=Timeline(settings.time_class_configs, default=_FALLBACK_TIME_CLASS),
    )


def sunday_based_weekday(day: date) -> int:
    return day.isoweekday() % 7


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def week_bounds(day: date) -> tuple[date, date]:
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def time_class_for(day: date, settings: UserSettings) -> TimeClassConfig:
    return settings_timelines(settings).time_class.resolve(day)


def smart_working_config_for(day: date, settings: UserSettings) -> SmartWorkingConfig:
    return settings_timelines(settings).smart_working.resolve(day)


def scheduled_long_day(day: date, settings: UserSettings) -> bool:
    active = settings_timelines(settings).long_days.resolve(day)
    return sunday_based_weekday(day) in active.days


def is_long_day(day: date, settings: UserSettings, overrides: DayOverrides | None = None) -> bool:
    """Long-day layer without the time-class gate: a one-off override beats the timeline."""
    if overrides:
        kind = overrides.get(day)
        if kind is not None:
            return kind == DayKind.LONG
    return scheduled_long_day(day, settings)


def classify_day(day: date, settings: UserSettings, overrides: DayOverrides | None = None) -> DayClass:
    time_class = time_class_for(day, settings).type
    return DayClass(
        day=day,
        holiday=is_holiday(day, settings.patron_saint_date),
        weekend=is_weekend(day),
        is_long_day=time_class == TimeClassType.ALTERNATED and is_long_day(day, settings, overrides),
        time_class=time_class,
    )


def target_minutes(day_class: DayClass) -> int:
    if not day_class.working_day:
        return 0
    if day_class.time_class == TimeClassType.FLAT:
        return TARGET_MINUTES_FLAT
    return TARGET_MINUTES_LONG if day_class.is_long_day else TARGET_MINUTES_SHORT


def default_entry(day: date, settings: UserSettings, overrides: DayOverrides | None = None) -> DailyEntry:
    day_class = classify_day(day, settings, overrides)
    if day_class.holiday:
        return DailyEntry(
            day=day,
            causal=Causal.FESTA,
            start_time=HOLIDAY_TIME,
            end_time=HOLIDAY_TIME,
            permesso_minutes=0,
            notes="Giorno Festivo",
        )

    if day_class.time_class == TimeClassType.FLAT:
        end_time = DEFAULT_END_FLAT
    elif day_class.is_long_day:
        end_time = DEFAULT_END_LONG
    else:
        end_time = DEFAULT_END_SHORT

    return DailyEntry(
        day=day,
        causal=Causal.UFFICIO,
        start_time=DEFAULT_START_TIME,
        end_time=end_time,
        permesso_minutes=0,
        notes="Default Ufficio (Lunga)" if day_class.is_long_day else "Default Ufficio (Corta)",
    )


def swap_candidates(day: date, settings: UserSettings, overrides: DayOverrides | None = None) -> list[date]:
    """Days of the same week and month that can take over a long day."""
    day_class = classify_day(day, settings, overrides)
    if not day_class.is_long_day:
        return []

    week_start, week_end = week_bounds(day)
    candidates: list[date] = []
    current = week_start
    while current <= week_end:
        if (
            current != day
            and current.month == day.month
            and current.weekday() != FRIDAY
            and not is_weekend(current)
            and not is_holiday(current, settings.patron_saint_date)
            and not is_long_day(current, settings, overrides)
        ):
            candidates.append(current)
        current += timedelta(days=1)
    return candidates
