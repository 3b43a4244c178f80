from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from timesheet.models import AuditActorType, AuditLog

logger = logging.getLogger("timesheet.audit")

LOCAL_USER_ID = "local-user"


def log_audit(
    db: Session,
    *,
    action: str,
    success: bool = True,
    actor_type: AuditActorType = AuditActorType.USER,
    actor_id: str = LOCAL_USER_ID,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> None:
    payload = dict(details or {})
    db.add(
        AuditLog(
            ts_utc=datetime.now(timezone.utc),
            actor_type=actor_type,
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            success=success,
            details=payload,
        )
    )
    log_extra = {
        "request_id": request_id,
        "action": action,
        "actor_type": actor_type.value,
        "actor_id": actor_id,
        "success": success,
    }
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("audit_log_write_failed", extra=log_extra)
        return

    logger.info(
        "audit_event",
        extra={**log_extra, "entity_type": entity_type, "entity_id": entity_id, "details": payload},
    )
