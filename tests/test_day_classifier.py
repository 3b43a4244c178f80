from __future__ import annotations

from datetime import date
import unittest

from timesheet.models import Causal, DayKind, TimeClassType
from timesheet.schemas import LongDayConfig, TimeClassConfig, UserSettings
from timesheet.services.day_classifier import (
    classify_day,
    default_entry,
    is_long_day,
    sunday_based_weekday,
    swap_candidates,
    target_minutes,
    week_bounds,
)

MONDAY = date(2024, 5, 6)
TUESDAY = date(2024, 5, 7)
WEDNESDAY = date(2024, 5, 8)
THURSDAY = date(2024, 5, 9)

FLAT_SETTINGS = UserSettings(
    time_class_configs=(TimeClassConfig(start_date=date(2020, 1, 1), type=TimeClassType.FLAT),),
)


class DayClassifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = UserSettings()

    def test_sunday_based_weekday(self) -> None:
        self.assertEqual(sunday_based_weekday(date(2024, 5, 5)), 0)
        self.assertEqual(sunday_based_weekday(MONDAY), 1)
        self.assertEqual(sunday_based_weekday(date(2024, 5, 11)), 6)

    def test_default_long_days_are_monday_and_thursday(self) -> None:
        self.assertTrue(is_long_day(MONDAY, self.settings))
        self.assertFalse(is_long_day(TUESDAY, self.settings))
        self.assertTrue(is_long_day(THURSDAY, self.settings))

    def test_long_day_timeline_changes_over_time(self) -> None:
        settings = UserSettings(
            long_day_configs=(
                LongDayConfig(start_date=date(2020, 1, 1), days=(1, 4)),
                LongDayConfig(start_date=date(2024, 5, 7), days=(2,)),
            ),
        )
        self.assertTrue(is_long_day(MONDAY, settings))
        self.assertTrue(is_long_day(TUESDAY, settings))
        self.assertFalse(is_long_day(THURSDAY, settings))

    def test_override_beats_timeline(self) -> None:
        overrides = {MONDAY: DayKind.SHORT, TUESDAY: DayKind.LONG}
        self.assertFalse(is_long_day(MONDAY, self.settings, overrides))
        self.assertTrue(is_long_day(TUESDAY, self.settings, overrides))
        self.assertTrue(is_long_day(THURSDAY, self.settings, overrides))

    def test_flat_days_are_never_long(self) -> None:
        day_class = classify_day(MONDAY, FLAT_SETTINGS)
        self.assertFalse(day_class.is_long_day)
        self.assertEqual(day_class.time_class, TimeClassType.FLAT)
        self.assertEqual(target_minutes(day_class), 432)

    def test_target_minutes(self) -> None:
        self.assertEqual(target_minutes(classify_day(MONDAY, self.settings)), 540)
        self.assertEqual(target_minutes(classify_day(TUESDAY, self.settings)), 360)
        self.assertEqual(target_minutes(classify_day(date(2024, 5, 11), self.settings)), 0)
        self.assertEqual(target_minutes(classify_day(date(2024, 5, 1), self.settings)), 0)

    def test_default_entries(self) -> None:
        long_entry = default_entry(MONDAY, self.settings)
        self.assertEqual(long_entry.causal, Causal.UFFICIO)
        self.assertEqual((long_entry.start_time, long_entry.end_time), ("07:30", "17:00"))
        self.assertEqual(long_entry.notes, "Default Ufficio (Lunga)")

        short_entry = default_entry(TUESDAY, self.settings)
        self.assertEqual(short_entry.end_time, "13:30")
        self.assertEqual(short_entry.notes, "Default Ufficio (Corta)")

        self.assertEqual(default_entry(TUESDAY, FLAT_SETTINGS).end_time, "15:12")

        holiday_entry = default_entry(date(2024, 5, 1), self.settings)
        self.assertEqual(holiday_entry.causal, Causal.FESTA)
        self.assertEqual((holiday_entry.start_time, holiday_entry.end_time), ("00:00", "00:00"))
        self.assertEqual(holiday_entry.notes, "Giorno Festivo")

    def test_week_bounds_run_monday_to_sunday(self) -> None:
        self.assertEqual(week_bounds(WEDNESDAY), (MONDAY, date(2024, 5, 12)))
        self.assertEqual(week_bounds(date(2024, 5, 12)), (MONDAY, date(2024, 5, 12)))

    def test_swap_candidates_skip_long_days_and_fridays(self) -> None:
        self.assertEqual(swap_candidates(MONDAY, self.settings), [TUESDAY, WEDNESDAY])

    def test_swap_candidates_stay_in_month(self) -> None:
        # week of 2024-04-29 spills into May; 1 May is also a holiday
        self.assertEqual(swap_candidates(date(2024, 4, 29), self.settings), [date(2024, 4, 30)])

    def test_swap_candidates_empty_for_short_or_flat_days(self) -> None:
        self.assertEqual(swap_candidates(TUESDAY, self.settings), [])
        self.assertEqual(swap_candidates(MONDAY, FLAT_SETTINGS), [])


if __name__ == "__main__":
    unittest.main()
