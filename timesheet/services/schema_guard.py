from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine


@dataclass(frozen=True, slots=True)
class SchemaGuardResult:
    ok: bool
    checked_at_utc: datetime
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "checked_at_utc": self.checked_at_utc.isoformat(),
            "issues": list(self.issues),
            "warnings": list(self.warnings),
            "issue_count": len(self.issues),
            "warning_count": len(self.warnings),
        }


REQUIRED_TABLE_COLUMNS: dict[str, set[str]] = {
    "user_profiles": {"id", "user_name", "initial_ferie", "bank_hours_initial", "patron_saint_date"},
    "long_day_configs": {"id", "profile_id", "start_date", "days"},
    "smart_working_configs": {"id", "profile_id", "start_date", "monthly_limit"},
    "time_class_configs": {"id", "profile_id", "start_date", "type"},
    "daily_entries": {"id", "profile_id", "day_date", "causal", "start_time", "end_time", "permesso_minutes"},
    "day_overrides": {"id", "profile_id", "day_date", "kind"},
    "paid_hours": {"id", "profile_id", "month", "minutes"},
    "audit_logs": {"id", "action", "details"},
}


def verify_runtime_schema(engine: Engine, *, require_alembic_version: bool = True) -> SchemaGuardResult:
    issues: list[str] = []
    warnings: list[str] = []
    checked_at_utc = datetime.now(timezone.utc)
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    for table_name, required_columns in REQUIRED_TABLE_COLUMNS.items():
        if table_name not in existing_tables:
            issues.append(f"MISSING_TABLE:{table_name}")
            continue
        column_names = {str(item.get("name")) for item in inspector.get_columns(table_name)}
        missing_columns = sorted(item for item in required_columns if item not in column_names)
        if missing_columns:
            issues.append(f"MISSING_COLUMNS:{table_name}:{','.join(missing_columns)}")

    if "alembic_version" not in existing_tables:
        if require_alembic_version:
            issues.append("ALEMBIC_VERSION_MISSING")
        else:
            warnings.append("ALEMBIC_VERSION_MISSING")
    else:
        with engine.connect() as connection:
            row = connection.execute(text("SELECT version_num FROM alembic_version LIMIT 1")).scalar()
        if not (str(row).strip() if row is not None else ""):
            issues.append("ALEMBIC_VERSION_EMPTY")

    return SchemaGuardResult(
        ok=len(issues) == 0,
        checked_at_utc=checked_at_utc,
        issues=issues,
        warnings=warnings,
    )
