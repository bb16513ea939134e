"""Alert rules registry and threshold evaluation."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Iterator

from seasonality.models.alert import AlertEvent, AlertRule
from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric


class AlertRegistry:
    """Ordered, session-scoped list of alert rules. Nothing is persisted."""

    def __init__(self, rules: Iterable[AlertRule] = ()) -> None:
        self._rules: list[AlertRule] = list(rules)

    def __iter__(self) -> Iterator[AlertRule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> list[AlertRule]:
        return list(self._rules)

    def add(
        self,
        anchor_date: date,
        volatility_threshold: float | None = None,
        performance_threshold: float | None = None,
    ) -> AlertRule:
        rule = AlertRule(
            anchor_date=anchor_date,
            volatility_threshold=volatility_threshold,
            performance_threshold=performance_threshold,
        )
        self._rules.append(rule)
        return rule

    def remove(self, rule_id: str) -> bool:
        """Delete a rule by id; returns False if no such rule."""
        for i, rule in enumerate(self._rules):
            if rule.rule_id == rule_id:
                del self._rules[i]
                return True
        return False

    def clear(self) -> None:
        self._rules.clear()


def evaluate_alerts(
    bars: list[Bar],
    metrics: list[RollingMetric],
    rules: Iterable[AlertRule],
) -> list[AlertEvent]:
    """Check every bar against every rule.

    A rule fires on a date when the day's volatility exceeds its
    volatility threshold, or the absolute open-to-close move exceeds its
    performance threshold. Each (date, rule) firing is one event; events
    come back in date order, then rule order.
    """
    rules = list(rules)
    by_date = {m.date: m for m in metrics}
    events: list[AlertEvent] = []

    for bar in bars:
        metric = by_date.get(bar.date)
        volatility = metric.volatility if metric else None
        perf = bar.performance_pct

        for rule in rules:
            reasons: list[str] = []
            if (
                rule.volatility_threshold is not None
                and volatility is not None
                and volatility > rule.volatility_threshold
            ):
                reasons.append("volatility")
            if rule.performance_threshold is not None and abs(perf) > rule.performance_threshold:
                reasons.append("performance")
            if reasons:
                events.append(AlertEvent(
                    date=bar.date,
                    rule=rule,
                    observed_volatility=volatility,
                    observed_performance_pct=perf,
                    reasons=tuple(reasons),
                ))
    return events
