"""Tests for the alert registry and threshold evaluation."""

from datetime import date

import pytest

from conftest import make_series
from seasonality.alerts import AlertRegistry, evaluate_alerts
from seasonality.metrics import compute_metrics
from seasonality.models.alert import AlertRule


@pytest.fixture
def spike_bars():
    """5 days; only day 5 moves (+3.75%), so day-5 volatility is 0.015."""
    return make_series(
        date(2024, 3, 1),
        closes=[100.0, 100.0, 100.0, 100.0, 103.75],
        opens=[100.0] * 5,
    )


class TestAlertRule:
    def test_requires_a_threshold(self):
        with pytest.raises(ValueError):
            AlertRule(anchor_date=date(2024, 3, 1))

    def test_frozen(self):
        rule = AlertRule(anchor_date=date(2024, 3, 1), volatility_threshold=0.01)
        with pytest.raises(AttributeError):
            rule.volatility_threshold = 0.5  # type: ignore[misc]

    def test_ids_are_unique(self):
        a = AlertRule(anchor_date=date(2024, 3, 1), volatility_threshold=0.01)
        b = AlertRule(anchor_date=date(2024, 3, 1), volatility_threshold=0.01)
        assert a.rule_id != b.rule_id


class TestRegistry:
    def test_add_keeps_order(self):
        reg = AlertRegistry()
        r1 = reg.add(date(2024, 3, 1), volatility_threshold=0.01)
        r2 = reg.add(date(2024, 3, 2), performance_threshold=2.0)
        assert reg.rules == [r1, r2]
        assert len(reg) == 2

    def test_remove(self):
        reg = AlertRegistry()
        r1 = reg.add(date(2024, 3, 1), volatility_threshold=0.01)
        assert reg.remove(r1.rule_id)
        assert not reg.remove(r1.rule_id)
        assert len(reg) == 0

    def test_clear(self):
        reg = AlertRegistry()
        reg.add(date(2024, 3, 1), volatility_threshold=0.01)
        reg.clear()
        assert reg.rules == []


class TestEvaluate:
    def test_volatility_fires_once_on_day_five(self, spike_bars):
        metrics = compute_metrics(spike_bars)
        assert metrics[4].volatility == pytest.approx(0.015)
        rule = AlertRule(anchor_date=date(2024, 3, 1), volatility_threshold=0.01)

        events = evaluate_alerts(spike_bars, metrics, [rule])

        assert len(events) == 1
        assert events[0].date == date(2024, 3, 5)
        assert events[0].rule is rule
        assert events[0].observed_volatility == pytest.approx(0.015)
        assert events[0].reasons == ("volatility",)

    def test_threshold_is_strict(self, spike_bars):
        metrics = compute_metrics(spike_bars)
        rule = AlertRule(
            anchor_date=date(2024, 3, 1),
            volatility_threshold=metrics[4].volatility,
        )
        assert evaluate_alerts(spike_bars, metrics, [rule]) == []

    def test_performance_uses_absolute_move(self):
        bars = make_series(
            date(2024, 3, 1),
            closes=[100.0, 97.0, 100.5],
            opens=[100.0, 100.0, 100.0],
        )
        rule = AlertRule(anchor_date=date(2024, 3, 1), performance_threshold=2.0)
        events = evaluate_alerts(bars, compute_metrics(bars), [rule])
        assert [e.date for e in events] == [date(2024, 3, 2)]
        assert events[0].observed_performance_pct == pytest.approx(-3.0)
        assert events[0].observed_volatility is None
        assert events[0].reasons == ("performance",)

    def test_either_condition_single_event(self, spike_bars):
        rule = AlertRule(
            anchor_date=date(2024, 3, 1),
            volatility_threshold=0.01,
            performance_threshold=1.0,
        )
        events = evaluate_alerts(spike_bars, compute_metrics(spike_bars), [rule])
        assert len(events) == 1
        assert events[0].reasons == ("volatility", "performance")

    def test_each_rule_fires_independently(self, spike_bars):
        metrics = compute_metrics(spike_bars)
        rules = [
            AlertRule(anchor_date=date(2024, 3, 1), volatility_threshold=0.01),
            AlertRule(anchor_date=date(2024, 3, 1), performance_threshold=3.0),
        ]
        events = evaluate_alerts(spike_bars, metrics, rules)
        assert len(events) == 2
        assert {e.rule.rule_id for e in events} == {r.rule_id for r in rules}
        assert all(e.date == date(2024, 3, 5) for e in events)

    def test_lowering_threshold_reevaluates_history(self, spike_bars):
        metrics = compute_metrics(spike_bars)
        strict = AlertRule(anchor_date=date(2024, 3, 5), performance_threshold=5.0)
        loose = AlertRule(anchor_date=date(2024, 3, 5), performance_threshold=3.0)
        assert evaluate_alerts(spike_bars, metrics, [strict]) == []
        assert len(evaluate_alerts(spike_bars, metrics, [loose])) == 1

    def test_no_rules(self, spike_bars):
        assert evaluate_alerts(spike_bars, compute_metrics(spike_bars), []) == []
