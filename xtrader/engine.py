"""The matching engine: routes orders to per-symbol books and reports executions."""

from __future__ import annotations

import logging
import time
import uuid
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from .matcher import Fill, match_limit_order, match_market_order
from .model import ExecutionReport, Order, OrderBookSnapshot, OrderType, Side
from .order_book import OrderBook

logger = logging.getLogger(__name__)

ReportSink = Callable[[ExecutionReport], None]


class EngineError(ValueError):
    """An order the engine cannot process."""


def _now() -> int:
    return int(time.time())


class MatchingEngine:
    """Keeps one order book per symbol and emits execution reports to a sink.

    ``report`` is called with every :class:`ExecutionReport` the engine
    produces, in order: for a trade, the taker's report comes first and the
    maker's second.
    """

    def __init__(self, symbols: Iterable[str], report: ReportSink) -> None:
        self._order_books: dict[str, OrderBook] = {
            symbol: OrderBook(symbol) for symbol in symbols
        }
        self._order_store: dict[str, Order] = {}
        self._report = report

    def run(self, orders: Iterable[Order]) -> None:
        """Process orders until the iterable is exhausted; bad orders are logged and skipped."""
        logger.info("matching engine started")
        for order in orders:
            try:
                if order.is_cancel:
                    logger.debug("cancel request received: %s", order.id)
                    self.handle_cancel_order(order)
                else:
                    logger.debug(
                        "new order received: %s (%s, %s, price: %d, quantity: %d)",
                        order.id,
                        order.symbol,
                        order.side.value,
                        order.price,
                        order.quantity,
                    )
                    self.process_order(order)
            except EngineError as exc:
                logger.error("order rejected: %s", exc)
        logger.info("matching engine stopped")

    def handle_cancel_order(self, cancel_order: Order) -> Order | None:
        """Cancel the order named by ``cancel_order.target_order_id``.

        Returns the cancelled order, or None when no such resting order is
        known. Raises :class:`EngineError` if the request names no target.
        """
        target_id = cancel_order.target_order_id
        if target_id is None:
            raise EngineError(f"cancel request has no target order id: {cancel_order.id}")

        stored = self._order_store.get(target_id)
        if stored is None:
            logger.warning("order to cancel not found in store: %s", target_id)
            return None

        order_book = self._order_books.get(stored.symbol)
        if order_book is None:
            logger.warning("order book not found: %s", stored.symbol)
            return None

        cancelled = order_book.cancel_order(target_id)
        if cancelled is None:
            logger.warning("order to cancel not found in book: %s", target_id)
            return None

        self._report(
            ExecutionReport(
                execution_id=str(uuid.uuid4()),
                order_id=target_id,
                symbol=cancelled.symbol,
                side=cancelled.side,
                price=cancelled.price,
                quantity=0,
                remaining_quantity=0,
                timestamp=_now(),
                counterparty_id="system",
                is_maker=False,
            )
        )
        logger.debug("order cancelled: %s", target_id)
        del self._order_store[target_id]
        return cancelled

    def process_order(self, order: Order) -> None:
        """Match a new order; an unfilled limit order rests on the book.

        Raises :class:`EngineError` for a symbol the engine does not trade.
        """
        order_book = self._order_books.get(order.symbol)
        if order_book is None:
            raise EngineError(f"unsupported symbol: {order.symbol}")

        self._order_store[order.id] = order

        if order.order_type is OrderType.MARKET:
            logger.debug("processing market order: %s", order.id)
            self._publish(order, match_market_order(order, order_book))
            self._order_store.pop(order.id, None)
            return

        logger.debug("processing limit order: %s (price: %d)", order.id, order.price)
        self._publish(order, match_limit_order(order, order_book))
        if order.is_filled():
            logger.debug("fully filled order removed: %s", order.id)
            self._order_store.pop(order.id, None)
        else:
            logger.debug(
                "resting limit order: %s, remaining: %d", order.id, order.remaining_quantity
            )
            order_book.add_order(order)

    def _publish(self, taker: Order, fills: list[Fill]) -> None:
        for fill in fills:
            if fill.maker_filled:
                self._order_store.pop(fill.maker_id, None)
            else:
                self._order_store[fill.maker_id] = fill.maker

            now = _now()
            execution_id = str(uuid.uuid4())
            self._report(
                ExecutionReport(
                    execution_id=execution_id,
                    order_id=taker.id,
                    symbol=taker.symbol,
                    side=taker.side,
                    price=fill.price,
                    quantity=fill.quantity,
                    remaining_quantity=fill.taker_remaining,
                    timestamp=now,
                    counterparty_id=fill.maker_id,
                    is_maker=False,
                )
            )
            self._report(
                ExecutionReport(
                    execution_id=execution_id,
                    order_id=fill.maker_id,
                    symbol=fill.maker.symbol,
                    side=fill.maker.side,
                    price=fill.price,
                    quantity=fill.quantity,
                    remaining_quantity=fill.maker.remaining_quantity,
                    timestamp=now,
                    counterparty_id=taker.id,
                    is_maker=True,
                )
            )

    @property
    def order_books(self) -> Mapping[str, OrderBook]:
        """Read-only view of the order books by symbol."""
        return MappingProxyType(self._order_books)

    def get_order(self, order_id: str) -> Order | None:
        """A known open order by id, or None."""
        return self._order_store.get(order_id)

    def snapshot(self, symbol: str, depth: int) -> OrderBookSnapshot | None:
        """Snapshot of a symbol's book, or None for an unknown symbol."""
        order_book = self._order_books.get(symbol)
        return None if order_book is None else order_book.snapshot(depth)

    def print_stats(self) -> None:
        """Log the number of resting orders per symbol."""
        for symbol, order_book in self._order_books.items():
            logger.info(
                "symbol: %s, bids: %d, asks: %d, total: %d",
                symbol,
                order_book.bid_count(),
                order_book.ask_count(),
                order_book.order_count(),
            )


__all__ = ["EngineError", "MatchingEngine", "Side"]