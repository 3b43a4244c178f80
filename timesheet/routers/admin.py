from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from timesheet.audit import log_audit
from timesheet.db import get_db
from timesheet.errors import AuditAnomaliesError
from timesheet.schemas import AppState, AuditAnomalyRead, TeamAuditRequest, TeamAuditResponse
from timesheet.services.exports import build_attendance_csv_bytes, build_attendance_xlsx_bytes
from timesheet.services.team_audit import (
    AttendanceGrid,
    audit_office_coverage,
    audit_period,
    build_attendance_grid,
    merge_team,
)
from timesheet.settings import get_settings

router = APIRouter(tags=["admin"])
logger = logging.getLogger("timesheet.admin")
settings = get_settings()
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _run_audit(payload: TeamAuditRequest, users: list[AppState]) -> TeamAuditResponse:
    start_date, end_date = audit_period(payload.year, payload.month, payload.range)
    anomalies = audit_office_coverage(users, start_date, end_date)
    return TeamAuditResponse(
        users=[user.settings.user_name for user in users],
        start_date=start_date,
        end_date=end_date,
        anomalies=[AuditAnomalyRead(day=item.day, message=item.message) for item in anomalies],
    )


def _attendance_grid(payload: TeamAuditRequest) -> AttendanceGrid:
    users = merge_team(payload.users, max_users=settings.team_max_users)
    audit = _run_audit(payload, users)
    if audit.anomalies:
        logger.warning(
            "team_attendance_export_blocked",
            extra={"year": payload.year, "month": payload.month, "anomaly_count": len(audit.anomalies)},
        )
        raise AuditAnomaliesError(len(audit.anomalies))
    return build_attendance_grid(users, payload.year, payload.month)


@router.post("/api/admin/team/audit", response_model=TeamAuditResponse)
def post_team_audit(
    payload: TeamAuditRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> TeamAuditResponse:
    result = _run_audit(payload, merge_team(payload.users, max_users=settings.team_max_users))
    log_audit(
        db,
        action="TEAM_AUDIT",
        entity_type="team",
        details={
            "users": result.users,
            "start_date": result.start_date.isoformat(),
            "end_date": result.end_date.isoformat(),
            "anomaly_count": len(result.anomalies),
        },
        request_id=getattr(request.state, "request_id", None),
    )
    return result


@router.post("/api/admin/team/attendance.csv")
def post_team_attendance_csv(
    payload: TeamAuditRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> Response:
    grid = _attendance_grid(payload)
    content = build_attendance_csv_bytes(grid)
    log_audit(
        db,
        action="ATTENDANCE_EXPORT_CSV",
        entity_type="export",
        entity_id=grid.filename_stem,
        details={"year": grid.year, "month": grid.month, "user_count": len(grid.rows)},
        request_id=getattr(request.state, "request_id", None),
    )
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{grid.filename_stem}.csv"',
        },
    )


@router.post("/api/admin/team/attendance.xlsx")
def post_team_attendance_xlsx(
    payload: TeamAuditRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> Response:
    grid = _attendance_grid(payload)
    content = build_attendance_xlsx_bytes(grid)
    log_audit(
        db,
        action="ATTENDANCE_EXPORT_XLSX",
        entity_type="export",
        entity_id=grid.filename_stem,
        details={"year": grid.year, "month": grid.month, "user_count": len(grid.rows)},
        request_id=getattr(request.state, "request_id", None),
    )
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{grid.filename_stem}.xlsx"',
        },
    )
