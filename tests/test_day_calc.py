from __future__ import annotations

from datetime import date
import unittest

from timesheet.models import Causal, DayKind, TimeClassType
from timesheet.schemas import DailyEntry, LongDayConfig, TimeClassConfig, UserSettings
from timesheet.services.day_calc import calculate_day_stats, format_minutes, time_to_minutes

MONDAY = date(2024, 5, 6)
TUESDAY = date(2024, 5, 7)
SATURDAY = date(2024, 5, 11)
LABOUR_DAY = date(2024, 5, 1)

FLAT_SETTINGS = UserSettings(
    time_class_configs=(TimeClassConfig(start_date=date(2020, 1, 1), type=TimeClassType.FLAT),),
)


def _entry(day: date, causal: Causal, start: str = "07:30", end: str = "13:30", permit: int = 0) -> DailyEntry:
    return DailyEntry(day=day, causal=causal, start_time=start, end_time=end, permesso_minutes=permit)


class TimeHelpersTests(unittest.TestCase):
    def test_time_to_minutes(self) -> None:
        self.assertEqual(time_to_minutes("07:30"), 450)
        self.assertEqual(time_to_minutes(""), 0)
        self.assertEqual(time_to_minutes(None), 0)

    def test_format_minutes(self) -> None:
        self.assertEqual(format_minutes(540), "9h 00m")
        self.assertEqual(format_minutes(-65), "-1h 05m")
        self.assertEqual(format_minutes(0), "0h 00m")


class DayStatsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = UserSettings(
            long_day_configs=(LongDayConfig(start_date=date(2020, 1, 1), days=(1,)),),
        )

    def test_fixed_holiday_without_entry_is_zeroed(self) -> None:
        stats = calculate_day_stats(LABOUR_DAY, None, self.settings)
        self.assertEqual(stats.worked_minutes, 0)
        self.assertEqual(stats.target_minutes, 0)
        self.assertFalse(stats.buono_pasto)
        self.assertTrue(stats.is_holiday)
        self.assertEqual(stats.errors, ())

    def test_long_monday_office_day(self) -> None:
        stats = calculate_day_stats(MONDAY, _entry(MONDAY, Causal.UFFICIO, end="17:00"), self.settings)
        self.assertEqual(stats.worked_minutes, 540)
        self.assertEqual(stats.target_minutes, 540)
        self.assertTrue(stats.buono_pasto)
        self.assertTrue(stats.is_long_day)

    def test_flat_office_day_at_voucher_boundary(self) -> None:
        stats = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, end="15:12"), FLAT_SETTINGS)
        self.assertEqual(stats.worked_minutes, 432)
        self.assertEqual(stats.target_minutes, 432)
        self.assertFalse(stats.buono_pasto)
        self.assertEqual(stats.time_class, TimeClassType.FLAT)

    def test_short_day_grace_window(self) -> None:
        at_limit = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, end="14:00"), self.settings)
        past_limit = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, end="14:01"), self.settings)
        self.assertEqual(at_limit.worked_minutes, 360)
        self.assertEqual(past_limit.worked_minutes, 361)

    def test_short_day_under_target_keeps_break(self) -> None:
        stats = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.SMART, end="13:00"), self.settings)
        self.assertEqual(stats.worked_minutes, 330)

    def test_arrivals_before_0730_are_not_credited(self) -> None:
        stats = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, start="06:00"), self.settings)
        self.assertEqual(stats.worked_minutes, 360)

    def test_clocked_days_are_capped_at_540(self) -> None:
        long_shift = calculate_day_stats(MONDAY, _entry(MONDAY, Causal.UFFICIO, end="19:00"), self.settings)
        with_permit = calculate_day_stats(
            MONDAY,
            _entry(MONDAY, Causal.SMART, end="16:00", permit=120),
            self.settings,
        )
        self.assertEqual(long_shift.worked_minutes, 540)
        self.assertEqual(with_permit.worked_minutes, 540)

    def test_credited_causals_get_target_plus_permit(self) -> None:
        ferie = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.FERIE), self.settings)
        malattia = calculate_day_stats(MONDAY, _entry(MONDAY, Causal.MALATTIA, permit=60), self.settings)
        self.assertEqual(ferie.worked_minutes, 360)
        self.assertEqual(malattia.worked_minutes, 600)
        self.assertFalse(malattia.buono_pasto)

    def test_negative_span_is_preserved(self) -> None:
        stats = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, start="10:00", end="09:00"), self.settings)
        self.assertEqual(stats.worked_minutes, -60)

    def test_short_day_office_voucher_uses_raw_start(self) -> None:
        on_boundary = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, end="16:55"), self.settings)
        past_boundary = calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.UFFICIO, end="16:56"), self.settings)
        self.assertFalse(on_boundary.buono_pasto)
        self.assertTrue(past_boundary.buono_pasto)
        self.assertEqual(past_boundary.worked_minutes, 536)

    def test_smart_and_pstu_vouchers_follow_day_length(self) -> None:
        self.assertTrue(calculate_day_stats(MONDAY, _entry(MONDAY, Causal.SMART, end="17:00"), self.settings).buono_pasto)
        self.assertFalse(calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.SMART), self.settings).buono_pasto)
        self.assertTrue(calculate_day_stats(MONDAY, _entry(MONDAY, Causal.PSTU), self.settings).buono_pasto)
        self.assertTrue(calculate_day_stats(TUESDAY, _entry(TUESDAY, Causal.PSTU), FLAT_SETTINGS).buono_pasto)

    def test_unset_weekday_uses_default_entry(self) -> None:
        monday = calculate_day_stats(MONDAY, None, self.settings)
        tuesday = calculate_day_stats(TUESDAY, None, self.settings)
        self.assertEqual((monday.worked_minutes, monday.target_minutes), (540, 540))
        self.assertEqual((tuesday.worked_minutes, tuesday.target_minutes), (360, 360))

    def test_unset_weekend_is_zeroed(self) -> None:
        stats = calculate_day_stats(SATURDAY, None, self.settings)
        self.assertEqual((stats.worked_minutes, stats.target_minutes), (0, 0))

    def test_override_turns_monday_short(self) -> None:
        stats = calculate_day_stats(
            MONDAY,
            _entry(MONDAY, Causal.UFFICIO, end="14:00"),
            self.settings,
            {MONDAY: DayKind.SHORT},
        )
        self.assertFalse(stats.is_long_day)
        self.assertEqual(stats.target_minutes, 360)
        self.assertEqual(stats.worked_minutes, 360)

    def test_calculation_is_repeatable(self) -> None:
        entry = _entry(MONDAY, Causal.UFFICIO, start="08:10", end="17:45", permit=15)
        self.assertEqual(
            calculate_day_stats(MONDAY, entry, self.settings),
            calculate_day_stats(MONDAY, entry, self.settings),
        )


if __name__ == "__main__":
    unittest.main()
