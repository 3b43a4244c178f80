from __future__ import annotations

import re
from datetime import date
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from timesheet.models import Causal, DayKind, TimeClassType
from timesheet.services.causals import causal_rule

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
_MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
# error type raised when a document stores a computed causal
SYNTHETIC_CAUSAL_ERROR = "synthetic_causal"

Weekday = Annotated[int, Field(ge=0, le=6)]
SmartWorkingLimit = Literal[6, 8, 10]
ExportRange = Literal["all", "month", "quarter"]
AuditRange = Literal["month", "quarter"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(frozen=True)


class LongDayConfig(FrozenCamelModel):
    start_date: date
    # 0=Sunday .. 6=Saturday
    days: tuple[Weekday, ...] = Field(default=(), max_length=2)


class SmartWorkingConfig(FrozenCamelModel):
    start_date: date
    limit: SmartWorkingLimit = 8


class TimeClassConfig(FrozenCamelModel):
    start_date: date
    type: TimeClassType = TimeClassType.ALTERNATED


TIMELINE_EPOCH = date(2020, 1, 1)
DEFAULT_LONG_DAY_CONFIGS = (LongDayConfig(start_date=TIMELINE_EPOCH, days=(1, 4)),)
DEFAULT_SW_CONFIGS = (SmartWorkingConfig(start_date=TIMELINE_EPOCH, limit=8),)
DEFAULT_TIME_CLASS_CONFIGS = (TimeClassConfig(start_date=TIMELINE_EPOCH, type=TimeClassType.ALTERNATED),)


class UserSettings(FrozenCamelModel):
    user_name: str = ""
    initial_ferie: float = 0
    monthly_ferie_accrual: float = 2.16
    bank_hours_initial: int = 0
    patron_saint_date: str = Field(default="09-04", pattern=r"^(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")
    long_day_configs: tuple[LongDayConfig, ...] = DEFAULT_LONG_DAY_CONFIGS
    sw_configs: tuple[SmartWorkingConfig, ...] = DEFAULT_SW_CONFIGS
    time_class_configs: tuple[TimeClassConfig, ...] = DEFAULT_TIME_CLASS_CONFIGS

    @model_validator(mode="before")
    @classmethod
    def _fill_missing_with_defaults(cls, data: Any) -> Any:
        # Older exports carry nulls (or empty patron days) where defaults now exist.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None and value != ""}
        return data


class DailyEntry(FrozenCamelModel):
    day: date = Field(alias="date")
    causal: Causal
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    permesso_minutes: int = Field(default=0, ge=0)
    notes: str | None = None
    spring_request: bool | None = None


class AppState(FrozenCamelModel):
    entries: dict[date, DailyEntry] = Field(default_factory=dict)
    settings: UserSettings = Field(default_factory=UserSettings)
    paid_hours: dict[str, int] = Field(default_factory=dict)
    day_overrides: dict[date, DayKind] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_validator("entries")
    @classmethod
    def _reject_synthetic_causals(cls, value: dict[date, DailyEntry]) -> dict[date, DailyEntry]:
        for day, entry in value.items():
            if causal_rule(entry.causal).synthetic:
                raise PydanticCustomError(
                    SYNTHETIC_CAUSAL_ERROR,
                    "Causal {causal} on {day} is computed and cannot be stored.",
                    {"causal": entry.causal.value, "day": day.isoformat()},
                )
        return value

    @field_validator("paid_hours")
    @classmethod
    def _check_month_keys(cls, value: dict[str, int]) -> dict[str, int]:
        for key in value:
            if not _MONTH_KEY_RE.match(key):
                raise ValueError(f"paidHours key must be YYYY-MM, got {key!r}")
        return value

    @model_validator(mode="after")
    def _check_entry_keys(self) -> AppState:
        for key, entry in self.entries.items():
            if key != entry.day:
                raise ValueError(f"entry keyed {key.isoformat()} carries date {entry.day.isoformat()}")
        return self


class DayStatsRead(CamelModel):
    worked_minutes: int
    target_minutes: int
    buono_pasto: bool
    is_holiday: bool
    is_long_day: bool
    time_class: TimeClassType
    errors: list[str] = Field(default_factory=list)


class CalendarDayRead(CamelModel):
    day: date = Field(alias="date")
    is_weekend: bool
    holiday_name: str | None = None
    effective_causal: Causal
    override: DayKind | None = None
    entry: DailyEntry | None = None
    stats: DayStatsRead
    violations: list[str] = Field(default_factory=list)


class CalendarMonthRead(CamelModel):
    year: int
    month: int
    days: list[CalendarDayRead]


class DayDetailRead(CamelModel):
    day: date = Field(alias="date")
    entry: DailyEntry
    is_default_entry: bool
    stats: DayStatsRead
    violations: list[str] = Field(default_factory=list)
    swap_candidates: list[date] = Field(default_factory=list)


class EntryUpsertRequest(CamelModel):
    causal: Causal
    start_time: str = Field(default="07:30", pattern=HHMM_PATTERN)
    end_time: str = Field(default="13:30", pattern=HHMM_PATTERN)
    permesso_minutes: int = Field(default=0, ge=0, le=24 * 60)
    notes: str | None = Field(default=None, max_length=1000)
    spring_request: bool = False


class EntrySaveResponse(CamelModel):
    entry: DailyEntry
    stats: DayStatsRead
    warnings: list[str] = Field(default_factory=list)
    violations: list[str] = Field(default_factory=list)


class SwapRequest(CamelModel):
    from_date: date
    to_date: date


class SwapResponse(CamelModel):
    day_overrides: dict[date, DayKind]


class PaidHoursRequest(CamelModel):
    minutes: int = Field(ge=0)


class AnnualCounterRead(CamelModel):
    causal: Causal
    count: int
    limit: int
    exceeded: bool


class MonthSummaryRead(CamelModel):
    year: int
    month: int
    worked_minutes: int
    target_minutes: int
    buoni_pasto: int
    smart_working_count: int
    smart_working_limit: int
    smart_working_exceeded: bool
    law_104_count: int
    law_104_limit: int
    paid_minutes: int
    month_delta_minutes: int
    hour_bank_minutes: int
    annual_presence_days: float
    remaining_ferie: int
    annual_counters: list[AnnualCounterRead]


class AnnualViolationRead(CamelModel):
    year: int
    causal: Causal
    count: int
    limit: float


class ViolationReportRead(CamelModel):
    by_date: dict[date, list[str]]
    annual: list[AnnualViolationRead]
    blocking: bool


class TeamAuditRequest(CamelModel):
    users: list[AppState] = Field(min_length=1)
    year: int = Field(ge=1970, le=9999)
    month: int = Field(ge=1, le=12)
    range: AuditRange = "month"


class AuditAnomalyRead(CamelModel):
    day: date = Field(alias="date")
    message: str


class TeamAuditResponse(CamelModel):
    users: list[str]
    start_date: date
    end_date: date
    anomalies: list[AuditAnomalyRead]
