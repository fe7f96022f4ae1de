"""Core data types of the matching engine: orders, sides, reports and snapshots."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


def _now() -> int:
    return int(time.time())


class Side(Enum):
    """Direction of an order."""

    BUY = "Buy"
    SELL = "Sell"

    def opposite(self) -> Side:
        """The side an order on this side trades against."""
        return Side.SELL if self is Side.BUY else Side.BUY


class OrderType(Enum):
    """Market orders trade at whatever price is available; limit orders only at their price or better."""

    MARKET = "Market"
    LIMIT = "Limit"


class MarketDataEvent(Enum):
    """Kinds of market data published by the exchange."""

    ORDER_BOOK_UPDATE = "OrderBookUpdate"
    TRADE_UPDATE = "TradeUpdate"
    CANDLESTICK_UPDATE = "CandlestickUpdate"
    EXECUTION = "Execution"


@dataclass
class Order:
    """An order, or a request to cancel one when ``is_cancel`` is set."""

    id: str
    symbol: str
    side: Side
    order_type: OrderType
    price: int
    quantity: int
    remaining_quantity: int | None = None
    client_id: str = ""
    timestamp: int = field(default_factory=_now)
    is_cancel: bool = False
    target_order_id: str | None = None

    def __post_init__(self) -> None:
        if self.remaining_quantity is None:
            self.remaining_quantity = self.quantity

    @classmethod
    def cancel(cls, target_order_id: str) -> Order:
        """Build a request that cancels the order with the given id."""
        return cls(
            id=f"cancel-{target_order_id}",
            symbol="",
            side=Side.BUY,
            order_type=OrderType.MARKET,
            price=0,
            quantity=0,
            remaining_quantity=0,
            client_id="system",
            is_cancel=True,
            target_order_id=target_order_id,
        )

    def fill(self, quantity: int) -> None:
        """Reduce the open quantity, never below zero."""
        if quantity < 0:
            raise ValueError("fill quantity must not be negative")
        self.remaining_quantity = max(0, self.remaining_quantity - quantity)

    def is_filled(self) -> bool:
        return self.remaining_quantity == 0


@dataclass(frozen=True)
class ExecutionReport:
    """One side of a trade, or the confirmation of a cancellation."""

    execution_id: str
    order_id: str
    symbol: str
    side: Side
    price: int
    quantity: int
    remaining_quantity: int
    timestamp: int
    counterparty_id: str
    is_maker: bool


@dataclass
class OrderBookSnapshot:
    """Aggregated price levels of a book: bids best first, asks best first."""

    symbol: str
    bids: list[tuple[int, int]] = field(default_factory=list)
    asks: list[tuple[int, int]] = field(default_factory=list)