from __future__ import annotations

from datetime import date, timedelta
import unittest

from timesheet.models import Causal, DayKind, TimeClassType
from timesheet.schemas import AppState, DailyEntry, SmartWorkingConfig, TimeClassConfig, UserSettings
from timesheet.services.compliance import (
    AnnualViolation,
    annual_quota_warning,
    annual_violations,
    has_blocking_violations,
    validate_day,
    violation_report,
)

MONDAY = date(2024, 5, 6)
TUESDAY = date(2024, 5, 7)
WEDNESDAY = date(2024, 5, 8)
THURSDAY = date(2024, 5, 9)
EPOCH = date(2020, 1, 1)


def _entry(day: date, causal: Causal) -> DailyEntry:
    return DailyEntry(day=day, causal=causal, start_time="07:30", end_time="13:30")


def _state(days: list[date], causal: Causal = Causal.SMART, **kwargs) -> AppState:  # type: ignore[no-untyped-def]
    return AppState(entries={day: _entry(day, causal) for day in days}, **kwargs)


class SmartWorkingCapTests(unittest.TestCase):
    def test_weekly_cap_exceeded(self) -> None:
        state = _state([MONDAY, TUESDAY, WEDNESDAY])
        self.assertEqual(validate_day(MONDAY, state), ["Limite settimanale Smart Working superato (3/2)"])

    def test_weekly_long_day_cap(self) -> None:
        state = _state([MONDAY, THURSDAY])
        self.assertEqual(
            validate_day(THURSDAY, state),
            ["Limite settimanale Smart Working in giorni lunghi superato (2/1)"],
        )

    def test_long_day_count_honours_overrides(self) -> None:
        state = _state([MONDAY, THURSDAY], day_overrides={MONDAY: DayKind.SHORT})
        self.assertEqual(validate_day(MONDAY, state), [])

    def test_limit_ten_waives_weekly_caps(self) -> None:
        settings = UserSettings(sw_configs=(SmartWorkingConfig(start_date=EPOCH, limit=10),))
        state = _state([MONDAY, TUESDAY, WEDNESDAY, THURSDAY], settings=settings)
        self.assertEqual(validate_day(MONDAY, state), [])

    def test_flat_time_class_keeps_only_monthly_cap(self) -> None:
        settings = UserSettings(
            sw_configs=(SmartWorkingConfig(start_date=EPOCH, limit=6),),
            time_class_configs=(TimeClassConfig(start_date=EPOCH, type=TimeClassType.FLAT),),
        )
        days = [MONDAY + timedelta(days=offset) for offset in (0, 1, 2, 3, 4, 7, 8)]
        state = _state(days, settings=settings)
        self.assertEqual(validate_day(MONDAY, state), ["Limite mensile Smart Working superato (7/6)"])

    def test_weekly_caps_span_the_month_boundary(self) -> None:
        # week of Monday 2024-04-29; 1 May is a holiday
        state = _state([date(2024, 4, 29), date(2024, 4, 30), date(2024, 5, 2)])
        expected = [
            "Limite settimanale Smart Working superato (3/2)",
            "Limite settimanale Smart Working in giorni lunghi superato (2/1)",
        ]
        self.assertEqual(validate_day(date(2024, 5, 2), state), expected)
        self.assertEqual(validate_day(date(2024, 4, 29), state), expected)

    def test_only_smart_entries_are_checked(self) -> None:
        state = _state([MONDAY, TUESDAY, WEDNESDAY])
        state = state.model_copy(update={"entries": {**state.entries, THURSDAY: _entry(THURSDAY, Causal.UFFICIO)}})
        self.assertEqual(validate_day(THURSDAY, state), [])
        self.assertEqual(validate_day(date(2024, 5, 10), state), [])


class AnnualQuotaTests(unittest.TestCase):
    def test_capped_causal_over_limit(self) -> None:
        days = [date(2024, 2, day) for day in (5, 6, 7, 8)]
        violations = annual_violations(_state(days, Causal.ART25))
        self.assertEqual(violations, [AnnualViolation(year=2024, causal=Causal.ART25, count=4, limit=3.0)])

    def test_counts_are_per_calendar_year(self) -> None:
        days = [date(2023, 12, 27), date(2023, 12, 28), date(2024, 1, 2), date(2024, 1, 3)]
        self.assertEqual(annual_violations(_state(days, Causal.ART26)), [])

    def test_ferie_limit_includes_initial_days(self) -> None:
        days = [date(2023, 1, 2) + timedelta(days=offset) for offset in range(30)]
        self.assertEqual(
            annual_violations(_state(days, Causal.FERIE, settings=UserSettings(initial_ferie=1))),
            [AnnualViolation(year=2023, causal=Causal.FERIE, count=30, limit=29.0)],
        )
        self.assertEqual(annual_violations(_state(days, Causal.FERIE, settings=UserSettings(initial_ferie=2))), [])

    def test_blocking_violations(self) -> None:
        self.assertTrue(has_blocking_violations(_state([MONDAY, TUESDAY, WEDNESDAY])))
        self.assertTrue(has_blocking_violations(_state([date(2024, 3, day) for day in range(4, 13)], Causal.PESA)))
        self.assertFalse(has_blocking_violations(_state([MONDAY, TUESDAY])))
        self.assertFalse(has_blocking_violations(AppState()))

    def test_violation_report_lists_every_offending_date(self) -> None:
        report = violation_report(_state([MONDAY, TUESDAY, WEDNESDAY]))
        self.assertEqual(sorted(report.by_date), [MONDAY, TUESDAY, WEDNESDAY])
        self.assertEqual(report.annual, [])
        self.assertTrue(report.blocking)

    def test_quota_warning_before_save(self) -> None:
        state = _state([date(2024, 2, 5), date(2024, 2, 6), date(2024, 2, 7)], Causal.ART25)
        self.assertEqual(
            annual_quota_warning(date(2024, 6, 3), Causal.ART25, state),
            "Limite annuo Art. 25 raggiunto (3).",
        )
        # re-saving one of the three does not count against itself
        self.assertIsNone(annual_quota_warning(date(2024, 2, 5), Causal.ART25, state))
        self.assertIsNone(annual_quota_warning(date(2025, 1, 7), Causal.ART25, state))
        self.assertIsNone(annual_quota_warning(date(2024, 6, 3), Causal.UFFICIO, state))

    def test_quota_warning_uses_display_label(self) -> None:
        state = _state([date(2024, 2, day) for day in (5, 6, 7, 8)], Causal.FS)
        self.assertEqual(
            annual_quota_warning(date(2024, 6, 3), Causal.FS, state),
            "Limite annuo Festività Soppresse raggiunto (4).",
        )


if __name__ == "__main__":
    unittest.main()
