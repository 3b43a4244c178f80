from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet.db import Base


class Causal(str, enum.Enum):
    UFFICIO = "Ufficio"
    SMART = "Smart"
    FERIE = "Ferie"
    MALATTIA = "Malattia"
    L104 = "104"
    ART25 = "Art.25"
    ART26 = "Art.26"
    FS = "FS"
    PSTU = "PSTU"
    PESA = "PESA"
    WEEKEND = "Weekend"
    FESTA = "Festa"


class TimeClassType(str, enum.Enum):
    ALTERNATED = "alternated"
    FLAT = "flat"


class DayKind(str, enum.Enum):
    LONG = "long"
    SHORT = "short"


class AuditActorType(str, enum.Enum):
    USER = "USER"
    SYSTEM = "SYSTEM"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default=text("''"))
    initial_ferie: Mapped[float] = mapped_column(Float, nullable=False, default=0, server_default=text("0"))
    monthly_ferie_accrual: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=2.16,
        server_default=text("2.16"),
    )
    bank_hours_initial: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    patron_saint_date: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
        default="09-04",
        server_default=text("'09-04'"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    long_day_configs: Mapped[list[LongDayConfigRow]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="LongDayConfigRow.id",
    )
    smart_working_configs: Mapped[list[SmartWorkingConfigRow]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="SmartWorkingConfigRow.id",
    )
    time_class_configs: Mapped[list[TimeClassConfigRow]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="TimeClassConfigRow.id",
    )
    entries: Mapped[list[DailyEntryRow]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="DailyEntryRow.day_date",
    )
    day_overrides: Mapped[list[DayOverrideRow]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="DayOverrideRow.day_date",
    )
    paid_hours: Mapped[list[PaidHoursRow]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="PaidHoursRow.month",
    )


class LongDayConfigRow(Base):
    __tablename__ = "long_day_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    # 0=Sunday .. 6=Saturday
    days: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    profile: Mapped[UserProfile] = relationship(back_populates="long_day_configs")


class SmartWorkingConfigRow(Base):
    __tablename__ = "smart_working_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=8, server_default=text("8"))

    profile: Mapped[UserProfile] = relationship(back_populates="smart_working_configs")


class TimeClassConfigRow(Base):
    __tablename__ = "time_class_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    type: Mapped[TimeClassType] = mapped_column(
        Enum(
            TimeClassType,
            name="time_class_type",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=TimeClassType.ALTERNATED,
    )

    profile: Mapped[UserProfile] = relationship(back_populates="time_class_configs")


class DailyEntryRow(Base):
    __tablename__ = "daily_entries"
    __table_args__ = (
        UniqueConstraint("profile_id", "day_date", name="uq_daily_entries_profile_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    causal: Mapped[Causal] = mapped_column(
        Enum(
            Causal,
            name="entry_causal",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    permesso_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    spring_request: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    profile: Mapped[UserProfile] = relationship(back_populates="entries")


class DayOverrideRow(Base):
    __tablename__ = "day_overrides"
    __table_args__ = (
        UniqueConstraint("profile_id", "day_date", name="uq_day_overrides_profile_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_date: Mapped[date] = mapped_column(Date, nullable=False)
    kind: Mapped[DayKind] = mapped_column(
        Enum(
            DayKind,
            name="day_override_kind",
            native_enum=False,
            length=8,
            values_callable=_enum_values,
        ),
        nullable=False,
    )

    profile: Mapped[UserProfile] = relationship(back_populates="day_overrides")


class PaidHoursRow(Base):
    __tablename__ = "paid_hours"
    __table_args__ = (
        UniqueConstraint("profile_id", "month", name="uq_paid_hours_profile_month"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # YYYY-MM
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    profile: Mapped[UserProfile] = relationship(back_populates="paid_hours")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ts_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
    actor_type: Mapped[AuditActorType] = mapped_column(
        Enum(
            AuditActorType,
            name="audit_actor_type",
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
