from __future__ import annotations

import json
from datetime import date, datetime

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status
from sqlalchemy.orm import Session

from timesheet.db import get_db
from timesheet.schemas import (
    AppState,
    CalendarMonthRead,
    DayDetailRead,
    EntrySaveResponse,
    EntryUpsertRequest,
    ExportRange,
    MonthSummaryRead,
    PaidHoursRequest,
    SwapRequest,
    SwapResponse,
    UserSettings,
    ViolationReportRead,
)
from timesheet.services.calendar_view import (
    build_calendar_month,
    build_day_detail,
    build_month_summary,
    build_violation_report,
)
from timesheet.services.entries import (
    delete_entry,
    save_entry,
    swap_long_day,
    update_paid_hours,
    update_settings,
)
from timesheet.services.exchange import export_state, import_state
from timesheet.services.state_store import load_app_state
from timesheet.settings import get_timesheet_timezone

router = APIRouter(tags=["timesheet"])
JSON_MEDIA_TYPE = "application/json"
MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _resolve_month(year: int | None, month: int | None) -> tuple[int, int]:
    today = datetime.now(get_timesheet_timezone()).date()
    return year or today.year, month or today.month


@router.get("/api/state", response_model=AppState)
def get_state(db: Session = Depends(get_db)) -> AppState:
    return load_app_state(db)


@router.get("/api/calendar", response_model=CalendarMonthRead)
def get_calendar(
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> CalendarMonthRead:
    resolved_year, resolved_month = _resolve_month(year, month)
    return build_calendar_month(load_app_state(db), resolved_year, resolved_month)


@router.get("/api/days/{day_date}", response_model=DayDetailRead)
def get_day(day_date: date, db: Session = Depends(get_db)) -> DayDetailRead:
    return build_day_detail(load_app_state(db), day_date)


@router.put("/api/entries/{day_date}", response_model=EntrySaveResponse)
def put_entry(
    day_date: date,
    payload: EntryUpsertRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> EntrySaveResponse:
    return save_entry(db, day_date=day_date, payload=payload, request_id=_request_id(request))


@router.delete("/api/entries/{day_date}", status_code=status.HTTP_204_NO_CONTENT)
def remove_entry(day_date: date, request: Request, db: Session = Depends(get_db)) -> Response:
    delete_entry(db, day_date=day_date, request_id=_request_id(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/day-overrides/swap", response_model=SwapResponse)
def post_swap(payload: SwapRequest, request: Request, db: Session = Depends(get_db)) -> SwapResponse:
    return swap_long_day(db, payload=payload, request_id=_request_id(request))


@router.get("/api/settings", response_model=UserSettings)
def get_user_settings(db: Session = Depends(get_db)) -> UserSettings:
    return load_app_state(db).settings


@router.put("/api/settings", response_model=UserSettings)
def put_user_settings(payload: UserSettings, request: Request, db: Session = Depends(get_db)) -> UserSettings:
    return update_settings(db, settings=payload, request_id=_request_id(request))


@router.put("/api/paid-hours/{month_key}", response_model=dict[str, int])
def put_paid_hours(
    payload: PaidHoursRequest,
    request: Request,
    month_key: str = Path(pattern=MONTH_KEY_PATTERN),
    db: Session = Depends(get_db),
) -> dict[str, int]:
    return update_paid_hours(db, month=month_key, minutes=payload.minutes, request_id=_request_id(request))


@router.get("/api/dashboard", response_model=MonthSummaryRead)
def get_dashboard(
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> MonthSummaryRead:
    resolved_year, resolved_month = _resolve_month(year, month)
    return build_month_summary(load_app_state(db), resolved_year, resolved_month)


@router.get("/api/violations", response_model=ViolationReportRead)
def get_violations(db: Session = Depends(get_db)) -> ViolationReportRead:
    return build_violation_report(load_app_state(db))


@router.get("/api/state/export")
def get_state_export(
    request: Request,
    range_name: ExportRange = Query(default="all", alias="range"),
    year: int | None = Query(default=None, ge=1970, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> Response:
    state, filename = export_state(
        db,
        range_name=range_name,
        year=year,
        month=month,
        request_id=_request_id(request),
    )
    payload = json.dumps(state.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)
    return Response(
        content=payload.encode("utf-8"),
        media_type=JSON_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


@router.post("/api/state/import", response_model=AppState)
def post_state_import(payload: AppState, request: Request, db: Session = Depends(get_db)) -> AppState:
    return import_state(db, state=payload, request_id=_request_id(request))
