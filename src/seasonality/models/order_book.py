"""Order book snapshot data model."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OrderBookLevel:
    """One price level on either side of the book."""

    price: float
    quantity: float


@dataclass(frozen=True)
class OrderBookSnapshot:
    """Point-in-time depth snapshot.

    Attributes:
        symbol: Trading pair, e.g. ``BTCUSDT``.
        bids: Bid levels, best (highest) price first.
        asks: Ask levels, best (lowest) price first.
        last_update_id: Exchange sequence number of the snapshot.
    """

    symbol: str
    bids: list[OrderBookLevel] = field(default_factory=list)
    asks: list[OrderBookLevel] = field(default_factory=list)
    last_update_id: int | None = None

    @property
    def best_bid(self) -> float | None:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> float | None:
        return self.asks[0].price if self.asks else None

    @property
    def spread(self) -> float | None:
        """Best ask minus best bid."""
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

    @property
    def mid_price(self) -> float | None:
        """Midpoint of the best bid and ask."""
        if self.best_bid is None or self.best_ask is None:
            return None
        return (self.best_bid + self.best_ask) / 2
