from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from timesheet.audit import log_audit
from timesheet.errors import ApiError, EntryNotFoundError
from timesheet.models import DayKind
from timesheet.schemas import (
    DailyEntry,
    EntryUpsertRequest,
    EntrySaveResponse,
    SwapRequest,
    SwapResponse,
    UserSettings,
)
from timesheet.services.calendar_view import stats_read
from timesheet.services.causals import causal_rule
from timesheet.services.compliance import annual_quota_warning, validate_day
from timesheet.services.day_calc import calculate_day_stats, time_to_minutes
from timesheet.services.day_classifier import classify_day, swap_candidates
from timesheet.services.state_store import (
    delete_day_rows,
    load_app_state,
    save_settings,
    set_day_overrides,
    set_paid_hours,
    upsert_entry_row,
)

logger = logging.getLogger("timesheet.entries")

EARLIEST_START_MINUTES = 7 * 60
LATEST_START_MINUTES = 12 * 60


def _ensure_start_window(start_time: str) -> None:
    start = time_to_minutes(start_time)
    if start < EARLIEST_START_MINUTES or start > LATEST_START_MINUTES:
        raise ApiError(422, "INVALID_START_TIME", "L'orario di ingresso deve essere tra le 07:00 e le 12:00.")


def save_entry(
    db: Session,
    *,
    day_date: date,
    payload: EntryUpsertRequest,
    request_id: str | None = None,
) -> EntrySaveResponse:
    rule = causal_rule(payload.causal)
    if rule.synthetic:
        raise ApiError(422, "SYNTHETIC_CAUSAL", f"Causal {rule.causal.value} is computed and cannot be saved.")
    _ensure_start_window(payload.start_time)

    before = load_app_state(db)
    warnings: list[str] = []
    quota_warning = annual_quota_warning(day_date, rule.causal, before)
    if quota_warning is not None:
        warnings.append(quota_warning)

    entry = DailyEntry(
        day=day_date,
        causal=rule.causal,
        start_time=payload.start_time,
        end_time=payload.end_time,
        permesso_minutes=payload.permesso_minutes,
        notes=payload.notes or None,
        spring_request=False if rule.clocked else payload.spring_request,
    )
    upsert_entry_row(db, entry)
    after = load_app_state(db)
    stats = calculate_day_stats(day_date, entry, after.settings, after.day_overrides)
    violations = validate_day(day_date, after)

    log_audit(
        db,
        action="ENTRY_SAVED",
        entity_type="daily_entry",
        entity_id=day_date.isoformat(),
        details={
            "causal": entry.causal.value,
            "worked_minutes": stats.worked_minutes,
            "warnings": warnings,
            "violations": violations,
        },
        request_id=request_id,
    )
    logger.info(
        "entry_saved",
        extra={
            "request_id": request_id,
            "date": day_date.isoformat(),
            "causal": entry.causal.value,
            "worked_minutes": stats.worked_minutes,
            "target_minutes": stats.target_minutes,
            "violation_count": len(violations),
        },
    )
    return EntrySaveResponse(entry=entry, stats=stats_read(stats), warnings=warnings, violations=violations)


def delete_entry(db: Session, *, day_date: date, request_id: str | None = None) -> None:
    entry_existed, override_existed = delete_day_rows(db, day_date)
    if not entry_existed and not override_existed:
        raise EntryNotFoundError(day_date)

    log_audit(
        db,
        action="ENTRY_DELETED",
        entity_type="daily_entry",
        entity_id=day_date.isoformat(),
        details={"override_removed": override_existed},
        request_id=request_id,
    )
    logger.info(
        "entry_deleted",
        extra={"request_id": request_id, "date": day_date.isoformat(), "override_removed": override_existed},
    )


def swap_long_day(db: Session, *, payload: SwapRequest, request_id: str | None = None) -> SwapResponse:
    """Move the long day of ``from_date`` onto ``to_date`` within the same week."""
    state = load_app_state(db)
    if not classify_day(payload.from_date, state.settings, state.day_overrides).is_long_day:
        raise ApiError(422, "SWAP_NOT_ALLOWED", f"{payload.from_date.isoformat()} is not a long day.")
    if payload.to_date not in swap_candidates(payload.from_date, state.settings, state.day_overrides):
        raise ApiError(
            422,
            "SWAP_NOT_ALLOWED",
            f"{payload.to_date.isoformat()} cannot take the long day of {payload.from_date.isoformat()}.",
        )

    set_day_overrides(db, {payload.from_date: DayKind.SHORT, payload.to_date: DayKind.LONG})
    log_audit(
        db,
        action="LONG_DAY_SWAPPED",
        entity_type="day_override",
        entity_id=payload.from_date.isoformat(),
        details={"from_date": payload.from_date.isoformat(), "to_date": payload.to_date.isoformat()},
        request_id=request_id,
    )
    logger.info(
        "long_day_swapped",
        extra={
            "request_id": request_id,
            "from_date": payload.from_date.isoformat(),
            "to_date": payload.to_date.isoformat(),
        },
    )
    return SwapResponse(day_overrides=load_app_state(db).day_overrides)


def update_settings(db: Session, *, settings: UserSettings, request_id: str | None = None) -> UserSettings:
    saved = save_settings(db, settings)
    log_audit(
        db,
        action="SETTINGS_UPDATED",
        entity_type="user_profile",
        details={
            "long_day_configs": len(saved.long_day_configs),
            "sw_configs": len(saved.sw_configs),
            "time_class_configs": len(saved.time_class_configs),
        },
        request_id=request_id,
    )
    logger.info("settings_updated", extra={"request_id": request_id, "user_name": saved.user_name})
    return saved


def update_paid_hours(db: Session, *, month: str, minutes: int, request_id: str | None = None) -> dict[str, int]:
    set_paid_hours(db, month, minutes)
    log_audit(
        db,
        action="PAID_HOURS_UPDATED",
        entity_type="paid_hours",
        entity_id=month,
        details={"minutes": minutes},
        request_id=request_id,
    )
    logger.info("paid_hours_updated", extra={"request_id": request_id, "month": month, "minutes": minutes})
    return load_app_state(db).paid_hours
