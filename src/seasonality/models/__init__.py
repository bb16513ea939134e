"""Seasonality data models."""

from seasonality.models.alert import AlertEvent, AlertRule
from seasonality.models.bar import Bar
from seasonality.models.intraday import IntradayTick
from seasonality.models.metric import RollingMetric
from seasonality.models.order_book import OrderBookLevel, OrderBookSnapshot
from seasonality.models.snapshot import DashboardSnapshot
from seasonality.models.summary import CalendarAggregate, MonthSummary, WeekSummary

__all__ = [
    "Bar",
    "RollingMetric",
    "WeekSummary",
    "MonthSummary",
    "CalendarAggregate",
    "AlertRule",
    "AlertEvent",
    "OrderBookLevel",
    "OrderBookSnapshot",
    "IntradayTick",
    "DashboardSnapshot",
]
