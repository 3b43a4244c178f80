from __future__ import annotations

from datetime import date

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class EntryNotFoundError(ApiError):
    def __init__(self, day_date: date):
        super().__init__(404, "ENTRY_NOT_FOUND", f"No entry stored for {day_date.isoformat()}.")


class ExportBlockedError(ApiError):
    def __init__(self, violation_count: int):
        super().__init__(
            409,
            "EXPORT_BLOCKED",
            "Risolvi prima i conflitti nel calendario (errori smart, ferie o limiti annui superati) "
            f"per poter esportare i dati. Violazioni: {violation_count}.",
        )


class AuditAnomaliesError(ApiError):
    def __init__(self, anomaly_count: int):
        super().__init__(
            409,
            "AUDIT_ANOMALIES",
            f"Audit found {anomaly_count} day(s) without office presence; export is disabled.",
        )


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "request_id": get_request_id(request),
            }
        },
    )
