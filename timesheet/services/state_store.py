from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from timesheet.models import (
    DailyEntryRow,
    DayKind,
    DayOverrideRow,
    LongDayConfigRow,
    PaidHoursRow,
    SmartWorkingConfigRow,
    TimeClassConfigRow,
    UserProfile,
)
from timesheet.schemas import (
    AppState,
    DailyEntry,
    LongDayConfig,
    SmartWorkingConfig,
    TimeClassConfig,
    UserSettings,
)


def _apply_settings(profile: UserProfile, settings: UserSettings) -> None:
    profile.user_name = settings.user_name
    profile.initial_ferie = settings.initial_ferie
    profile.monthly_ferie_accrual = settings.monthly_ferie_accrual
    profile.bank_hours_initial = settings.bank_hours_initial
    profile.patron_saint_date = settings.patron_saint_date
    profile.long_day_configs = [
        LongDayConfigRow(start_date=item.start_date, days=list(item.days)) for item in settings.long_day_configs
    ]
    profile.smart_working_configs = [
        SmartWorkingConfigRow(start_date=item.start_date, monthly_limit=item.limit) for item in settings.sw_configs
    ]
    profile.time_class_configs = [
        TimeClassConfigRow(start_date=item.start_date, type=item.type) for item in settings.time_class_configs
    ]


def get_or_create_profile(db: Session) -> UserProfile:
    profile = db.scalar(select(UserProfile).order_by(UserProfile.id.asc()))
    if profile is not None:
        return profile

    profile = UserProfile()
    _apply_settings(profile, UserSettings())
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def profile_settings(profile: UserProfile) -> UserSettings:
    return UserSettings(
        user_name=profile.user_name,
        initial_ferie=profile.initial_ferie,
        monthly_ferie_accrual=profile.monthly_ferie_accrual,
        bank_hours_initial=profile.bank_hours_initial,
        patron_saint_date=profile.patron_saint_date,
        long_day_configs=tuple(
            LongDayConfig(start_date=row.start_date, days=tuple(row.days or ())) for row in profile.long_day_configs
        ),
        sw_configs=tuple(
            SmartWorkingConfig(start_date=row.start_date, limit=row.monthly_limit)
            for row in profile.smart_working_configs
        ),
        time_class_configs=tuple(
            TimeClassConfig(start_date=row.start_date, type=row.type) for row in profile.time_class_configs
        ),
    )


def _entry_from_row(row: DailyEntryRow) -> DailyEntry:
    return DailyEntry(
        day=row.day_date,
        causal=row.causal,
        start_time=row.start_time,
        end_time=row.end_time,
        permesso_minutes=row.permesso_minutes,
        notes=row.notes,
        spring_request=row.spring_request,
    )


def load_app_state(db: Session) -> AppState:
    profile = get_or_create_profile(db)
    return AppState(
        entries={row.day_date: _entry_from_row(row) for row in profile.entries},
        settings=profile_settings(profile),
        paid_hours={row.month: row.minutes for row in profile.paid_hours},
        day_overrides={row.day_date: row.kind for row in profile.day_overrides},
    )


def save_settings(db: Session, settings: UserSettings) -> UserSettings:
    profile = get_or_create_profile(db)
    _apply_settings(profile, settings)
    db.commit()
    db.refresh(profile)
    return profile_settings(profile)


def upsert_entry_row(db: Session, entry: DailyEntry) -> DailyEntryRow:
    profile = get_or_create_profile(db)
    row = db.scalar(
        select(DailyEntryRow).where(
            DailyEntryRow.profile_id == profile.id,
            DailyEntryRow.day_date == entry.day,
        )
    )
    if row is None:
        row = DailyEntryRow(profile_id=profile.id, day_date=entry.day)
        db.add(row)

    row.causal = entry.causal
    row.start_time = entry.start_time
    row.end_time = entry.end_time
    row.permesso_minutes = entry.permesso_minutes
    row.notes = entry.notes
    row.spring_request = entry.spring_request
    db.commit()
    db.refresh(row)
    db.expire(profile)
    return row


def delete_day_rows(db: Session, day_date: date) -> tuple[bool, bool]:
    """Drop the entry and the long/short override stored for ``day_date``.

    Returns which of the two rows existed.
    """
    profile = get_or_create_profile(db)
    entry_row = db.scalar(
        select(DailyEntryRow).where(
            DailyEntryRow.profile_id == profile.id,
            DailyEntryRow.day_date == day_date,
        )
    )
    override_row = db.scalar(
        select(DayOverrideRow).where(
            DayOverrideRow.profile_id == profile.id,
            DayOverrideRow.day_date == day_date,
        )
    )
    if entry_row is not None:
        db.delete(entry_row)
    if override_row is not None:
        db.delete(override_row)
    db.commit()
    db.expire(profile)
    return entry_row is not None, override_row is not None


def set_day_overrides(db: Session, overrides: dict[date, DayKind]) -> None:
    profile = get_or_create_profile(db)
    existing = {
        row.day_date: row
        for row in db.scalars(
            select(DayOverrideRow).where(
                DayOverrideRow.profile_id == profile.id,
                DayOverrideRow.day_date.in_(list(overrides)),
            )
        )
    }
    for day_date, kind in overrides.items():
        row = existing.get(day_date)
        if row is None:
            db.add(DayOverrideRow(profile_id=profile.id, day_date=day_date, kind=kind))
        else:
            row.kind = kind
    db.commit()
    db.expire(profile)


def set_paid_hours(db: Session, month: str, minutes: int) -> PaidHoursRow:
    profile = get_or_create_profile(db)
    row = db.scalar(
        select(PaidHoursRow).where(
            PaidHoursRow.profile_id == profile.id,
            PaidHoursRow.month == month,
        )
    )
    if row is None:
        row = PaidHoursRow(profile_id=profile.id, month=month)
        db.add(row)
    row.minutes = minutes
    db.commit()
    db.refresh(row)
    db.expire(profile)
    return row


def replace_app_state(db: Session, state: AppState) -> AppState:
    profile = get_or_create_profile(db)
    profile.entries.clear()
    profile.day_overrides.clear()
    profile.paid_hours.clear()
    # unique (profile, day) rows must be gone before their replacements are inserted
    db.flush()

    _apply_settings(profile, state.settings)
    profile.entries.extend(
        DailyEntryRow(
            day_date=entry.day,
            causal=entry.causal,
            start_time=entry.start_time,
            end_time=entry.end_time,
            permesso_minutes=entry.permesso_minutes,
            notes=entry.notes,
            spring_request=entry.spring_request,
        )
        for entry in state.entries.values()
    )
    profile.day_overrides.extend(
        DayOverrideRow(day_date=day_date, kind=kind) for day_date, kind in state.day_overrides.items()
    )
    profile.paid_hours.extend(
        PaidHoursRow(month=month, minutes=int(minutes)) for month, minutes in state.paid_hours.items()
    )
    db.commit()
    db.expire(profile)
    return load_app_state(db)
