from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from timesheet.audit import log_audit
from timesheet.errors import ApiError, ExportBlockedError
from timesheet.schemas import AppState, ExportRange
from timesheet.services.compliance import violation_report
from timesheet.services.state_store import load_app_state, replace_app_state

logger = logging.getLogger("timesheet.exchange")

QUARTER_MONTHS = 3


def range_months(range_name: ExportRange, year: int | None, month: int | None) -> list[tuple[int, int]] | None:
    """(year, month) pairs covered by an export range; ``None`` means every month."""
    if range_name == "all":
        return None
    if year is None or month is None:
        raise ApiError(422, "VALIDATION_ERROR", f"Range '{range_name}' requires year and month.")

    count = 1 if range_name == "month" else QUARTER_MONTHS
    months: list[tuple[int, int]] = []
    for offset in range(count):
        index = (month - 1) + offset
        months.append((year + index // 12, index % 12 + 1))
    return months


def filter_entries(state: AppState, months: list[tuple[int, int]] | None) -> AppState:
    if months is None:
        return state
    wanted = set(months)
    entries = {day: entry for day, entry in state.entries.items() if (day.year, day.month) in wanted}
    return state.model_copy(update={"entries": entries})


def export_filename(state: AppState, range_name: ExportRange, year: int | None, month: int | None) -> str:
    if range_name == "all":
        suffix = "full"
    else:
        suffix = f"{range_name}_{year}_{month}"
    return f"timesheet_{state.settings.user_name or 'user'}_{suffix}.json"


def export_state(
    db: Session,
    *,
    range_name: ExportRange = "all",
    year: int | None = None,
    month: int | None = None,
    request_id: str | None = None,
) -> tuple[AppState, str]:
    state = load_app_state(db)
    report = violation_report(state)
    if report.blocking:
        violation_count = sum(len(messages) for messages in report.by_date.values()) + len(report.annual)
        logger.warning(
            "state_export_blocked",
            extra={"request_id": request_id, "range": range_name, "violation_count": violation_count},
        )
        log_audit(
            db,
            action="STATE_EXPORT",
            success=False,
            entity_type="app_state",
            details={"range": range_name, "violation_count": violation_count},
            request_id=request_id,
        )
        raise ExportBlockedError(violation_count)

    exported = filter_entries(state, range_months(range_name, year, month))
    filename = export_filename(state, range_name, year, month)
    log_audit(
        db,
        action="STATE_EXPORT",
        entity_type="app_state",
        details={"range": range_name, "entry_count": len(exported.entries), "filename": filename},
        request_id=request_id,
    )
    return exported, filename


def import_state(db: Session, *, state: AppState, request_id: str | None = None) -> AppState:
    stored = replace_app_state(db, state)
    years = sorted({day.year for day in stored.entries})
    log_audit(
        db,
        action="STATE_IMPORTED",
        entity_type="app_state",
        details={"entry_count": len(stored.entries), "years": years},
        request_id=request_id,
    )
    logger.info(
        "state_imported",
        extra={"request_id": request_id, "entry_count": len(stored.entries), "override_count": len(stored.day_overrides)},
    )
    return stored
