"""Data quality report for built daily bars.

Per-record problems (non-finite values, non-positive prices, negative
volume, high/low not bracketing open/close) are rejected by
``store.parse_record`` and ordering/duplicates are settled by
``store.build_bars``. What is left to check on a built series is whether
it holds anything and which calendar days it skips.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from seasonality.models.bar import Bar


@dataclass
class ValidationCheck:
    """Single validation check result."""

    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationResult:
    """Aggregate validation result."""

    checks: list[ValidationCheck] = field(default_factory=list)
    missing_dates: list[date] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if not c.passed]


def find_missing_dates(bars: list[Bar]) -> list[date]:
    """Calendar days skipped between consecutive (ascending) bars."""
    missing: list[date] = []
    for prev, cur in zip(bars, bars[1:]):
        day = prev.date + timedelta(days=1)
        while day < cur.date:
            missing.append(day)
            day += timedelta(days=1)
    return missing


def validate_bars(bars: list[Bar]) -> ValidationResult:
    """Run the quality report on an ordered list of daily bars.

    Checks:
        1. Not empty
        2. Gap detection (crypto trades every day, so any skipped day is a gap)

    Neither check rejects a load; the store logs failed checks.
    """
    result = ValidationResult()
    if not bars:
        result.checks.append(ValidationCheck("not_empty", False, "No bars provided"))
        return result
    result.checks.append(ValidationCheck("not_empty", True, f"{len(bars)} bars"))

    result.missing_dates = find_missing_dates(bars)
    n = len(result.missing_dates)
    message = f"{n} missing days from {result.missing_dates[0].isoformat()}" if n else ""
    result.checks.append(ValidationCheck("gap_detection", n == 0, message))
    return result
