"""Alert rule and alert event data models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class AlertRule:
    """User-defined threshold rule.

    Attributes:
        anchor_date: Calendar day the rule was created from.
        volatility_threshold: Fire when volatility exceeds this value.
        performance_threshold: Fire when |open-to-close %| exceeds this value.
        rule_id: Identifier used to delete the rule.
    """

    anchor_date: date
    volatility_threshold: float | None = None
    performance_threshold: float | None = None
    rule_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if self.volatility_threshold is None and self.performance_threshold is None:
            raise ValueError("AlertRule needs a volatility or performance threshold")


@dataclass(frozen=True)
class AlertEvent:
    """A rule firing on one date.

    Attributes:
        date: Date of the bar that triggered the rule.
        rule: The rule that fired.
        observed_volatility: Volatility on that date, if defined.
        observed_performance_pct: Open-to-close move on that date, in percent.
        reasons: Which thresholds were crossed ("volatility", "performance").
    """

    date: date
    rule: AlertRule
    observed_volatility: float | None = None
    observed_performance_pct: float | None = None
    reasons: tuple[str, ...] = ()
