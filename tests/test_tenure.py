"""Tests for whole-unit tenure calculation."""

from __future__ import annotations

from datetime import date

import pytest

from workforce_pto.services.tenure import tenure_months, tenure_years


@pytest.mark.parametrize(
    ("start", "today", "expected"),
    [
        (date(2023, 6, 15), date(2024, 6, 15), 1),  # anniversary counts
        (date(2023, 6, 15), date(2024, 6, 14), 0),
        (date(2020, 2, 29), date(2024, 2, 28), 3),
        (date(2020, 2, 29), date(2024, 2, 29), 4),
        (date(2014, 1, 1), date(2024, 6, 1), 10),
        (date(2024, 6, 15), date(2024, 6, 15), 0),
    ],
)
def test_tenure_years(start: date, today: date, expected: int) -> None:
    assert tenure_years(start, today) == expected


@pytest.mark.parametrize(
    ("start", "today", "expected"),
    [
        (date(2024, 1, 15), date(2024, 2, 15), 1),
        (date(2024, 1, 15), date(2024, 2, 14), 0),
        (date(2024, 1, 31), date(2024, 3, 30), 1),
        (date(2023, 6, 15), date(2024, 6, 15), 12),
        (date(2024, 1, 15), date(2024, 1, 15), 0),
    ],
)
def test_tenure_months(start: date, today: date, expected: int) -> None:
    assert tenure_months(start, today) == expected


def test_future_start_date_yields_zero_tenure() -> None:
    assert tenure_years(date(2025, 1, 1), date(2024, 1, 1)) == 0
    assert tenure_months(date(2025, 1, 1), date(2024, 1, 1)) == 0
