from __future__ import annotations

from datetime import date
import unittest

from timesheet.schemas import SmartWorkingConfig
from timesheet.services.timeline import Timeline, resolve_config

DEFAULT = SmartWorkingConfig(start_date=date(2020, 1, 1), limit=8)


class TimelineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = [
            SmartWorkingConfig(start_date=date(2024, 6, 1), limit=10),
            SmartWorkingConfig(start_date=date(2023, 1, 1), limit=6),
            SmartWorkingConfig(start_date=date(2024, 1, 15), limit=8),
        ]

    def test_resolves_latest_record_not_after_day(self) -> None:
        timeline = Timeline(self.records, default=DEFAULT)
        self.assertEqual(timeline.resolve(date(2023, 7, 1)).limit, 6)
        self.assertEqual(timeline.resolve(date(2024, 1, 14)).limit, 6)
        self.assertEqual(timeline.resolve(date(2024, 1, 15)).limit, 8)
        self.assertEqual(timeline.resolve(date(2024, 5, 31)).limit, 8)

    def test_returns_default_before_first_record(self) -> None:
        timeline = Timeline(self.records, default=DEFAULT)
        self.assertIs(timeline.resolve(date(2022, 12, 31)), DEFAULT)

    def test_empty_timeline_uses_default(self) -> None:
        self.assertIs(resolve_config(date(2024, 1, 1), [], DEFAULT), DEFAULT)

    def test_last_record_holds_for_every_later_day(self) -> None:
        timeline = Timeline(self.records, default=DEFAULT)
        for day in (date(2024, 6, 1), date(2025, 3, 3), date(2040, 12, 31)):
            self.assertEqual(timeline.resolve(day).limit, 10)

    def test_storage_order_is_irrelevant(self) -> None:
        forward = Timeline(self.records, default=DEFAULT)
        backward = Timeline(list(reversed(self.records)), default=DEFAULT)
        for day in (date(2023, 2, 1), date(2024, 2, 1), date(2024, 7, 1)):
            self.assertEqual(forward.resolve(day), backward.resolve(day))
        self.assertEqual([item.start_date for item in forward], sorted(item.start_date for item in self.records))

    def test_first_listed_record_wins_on_same_start_date(self) -> None:
        first = SmartWorkingConfig(start_date=date(2024, 3, 1), limit=6)
        second = SmartWorkingConfig(start_date=date(2024, 3, 1), limit=10)
        self.assertEqual(resolve_config(date(2024, 3, 10), [first, second], DEFAULT).limit, 6)
        self.assertEqual(resolve_config(date(2024, 3, 10), [second, first], DEFAULT).limit, 10)


if __name__ == "__main__":
    unittest.main()
