from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable, Iterable, Iterator
from datetime import date
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _start_date(record: Any) -> date:
    return record.start_date


class Timeline(Generic[T]):
    """Configuration records ordered by the date they take effect.

    ``resolve(day)`` answers "which record was in force on ``day``": the one
    with the greatest effective date not after ``day``, or ``default`` when
    every record starts later (or there are none). Among records sharing an
    effective date, the one listed first wins.
    """

    def __init__(
        self,
        records: Iterable[T],
        *,
        default: T,
        key: Callable[[T], date] = _start_date,
    ) -> None:
        ordered = sorted(enumerate(records), key=lambda item: (key(item[1]), -item[0]))
        self._records: list[T] = [record for _, record in ordered]
        self._keys: list[date] = [key(record) for record in self._records]
        self.default = default

    def resolve(self, day: date) -> T:
        index = bisect_right(self._keys, day)
        if index == 0:
            return self.default
        return self._records[index - 1]

    def __iter__(self) -> Iterator[T]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


def resolve_config(
    day: date,
    records: Iterable[T],
    default: T,
    *,
    key: Callable[[T], date] = _start_date,
) -> T:
    return Timeline(records, default=default, key=key).resolve(day)
