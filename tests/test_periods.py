from __future__ import annotations

from datetime import date
import unittest

from timesheet.models import Causal
from timesheet.schemas import AppState, DailyEntry, UserSettings
from timesheet.services.periods import hour_bank_minutes, month_bounds, month_summary, presence_in_period


def _entry(day: date, causal: Causal, start: str = "07:30", end: str = "13:30", permit: int = 0) -> DailyEntry:
    return DailyEntry(day=day, causal=causal, start_time=start, end_time=end, permesso_minutes=permit)


def _state(*entries: DailyEntry, **kwargs) -> AppState:  # type: ignore[no-untyped-def]
    return AppState(entries={entry.day: entry for entry in entries}, **kwargs)


class PresenceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = UserSettings()

    def test_plain_weekdays_count_one_each(self) -> None:
        self.assertEqual(presence_in_period(date(2024, 5, 6), date(2024, 5, 12), {}, self.settings), 5.0)

    def test_holidays_count_zero(self) -> None:
        self.assertEqual(presence_in_period(date(2024, 4, 29), date(2024, 5, 3), {}, self.settings), 4.0)

    def test_causal_weights(self) -> None:
        entries = {
            date(2024, 5, 7): _entry(date(2024, 5, 7), Causal.PSTU, permit=120),
            date(2024, 5, 8): _entry(date(2024, 5, 8), Causal.FERIE),
            date(2024, 5, 9): _entry(date(2024, 5, 9), Causal.MALATTIA),
        }
        presence = presence_in_period(date(2024, 5, 7), date(2024, 5, 9), entries, self.settings)
        self.assertAlmostEqual(presence, 1 + (1 - 120 / 360))

    def test_pstu_presence_never_negative(self) -> None:
        entries = {date(2024, 5, 7): _entry(date(2024, 5, 7), Causal.PSTU, permit=600)}
        self.assertEqual(presence_in_period(date(2024, 5, 7), date(2024, 5, 7), entries, self.settings), 0.0)


class HourBankAndSummaryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = _state(
            _entry(date(2024, 5, 6), Causal.SMART, end="17:00"),
            _entry(date(2024, 5, 7), Causal.UFFICIO, end="14:30"),
            _entry(date(2024, 3, 12), Causal.FERIE),
            _entry(date(2024, 3, 13), Causal.FERIE),
            _entry(date(2024, 3, 14), Causal.FERIE),
            _entry(date(2024, 2, 6), Causal.ART25),
            settings=UserSettings(bank_hours_initial=30, initial_ferie=2.5),
            paid_hours={"2024-05": 20},
        )

    def test_month_bounds(self) -> None:
        self.assertEqual(month_bounds(2024, 2), (date(2024, 2, 1), date(2024, 2, 29)))

    def test_hour_bank_folds_stored_entries(self) -> None:
        self.assertEqual(hour_bank_minutes(self.state), 30 + 30 - 20)

    def test_month_summary(self) -> None:
        summary = month_summary(self.state, 2024, 5)
        self.assertEqual(summary.worked_minutes - summary.target_minutes, 30)
        self.assertEqual(summary.paid_minutes, 20)
        self.assertEqual(summary.month_delta_minutes, 10)
        self.assertEqual(summary.hour_bank_minutes, 40)
        # four Mondays and five Thursdays
        self.assertEqual(summary.buoni_pasto, 9)
        self.assertEqual(summary.smart_working_count, 1)
        self.assertEqual(summary.smart_working_limit, 8)
        self.assertFalse(summary.smart_working_exceeded)
        self.assertEqual(summary.law_104_limit, 3)
        self.assertEqual(summary.remaining_ferie, 27)

        counters = {counter.causal: counter for counter in summary.annual_counters}
        self.assertEqual(set(counters), {Causal.ART25, Causal.ART26, Causal.FS, Causal.PESA})
        self.assertEqual(counters[Causal.ART25].count, 1)
        self.assertFalse(counters[Causal.ART25].exceeded)


if __name__ == "__main__":
    unittest.main()
