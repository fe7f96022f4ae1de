"""Order book with price-time priority: price levels of FIFO queues for each side."""

from __future__ import annotations

import dataclasses
import logging
from itertools import islice
from operator import neg
from typing import Iterator

from sortedcontainers import SortedDict

from .linked_list import DoublyLinkedList, Node
from .model import Order, OrderBookSnapshot, Side

logger = logging.getLogger(__name__)


class PriceLevel:
    """All resting orders at one price, oldest first."""

    def __init__(self) -> None:
        self._orders: DoublyLinkedList[Order] = DoublyLinkedList()
        self._nodes: dict[str, Node[Order]] = {}
        self.total_volume = 0

    def add_order(self, order: Order) -> None:
        """Queue an order behind the ones already at this price."""
        node = self._orders.push_back(order)
        self._nodes[order.id] = node
        self.total_volume += order.remaining_quantity

    def remove_order(self, order_id: str) -> Order | None:
        """Take an order out of the queue; None if it is not here."""
        node = self._nodes.pop(order_id, None)
        if node is None:
            return None
        order = node.value
        self.total_volume = max(0, self.total_volume - order.remaining_quantity)
        self._orders.remove(node)
        return order

    def peek_front(self) -> tuple[str, Order, int] | None:
        """The id, a copy and the open quantity of the oldest order, or None."""
        node = self._orders.peek_front()
        if node is None:
            return None
        order = dataclasses.replace(node.value)
        return order.id, order, order.remaining_quantity

    def front_quantity(self) -> int | None:
        """Open quantity of the oldest order, or None if the level is empty."""
        node = self._orders.peek_front()
        return None if node is None else node.value.remaining_quantity

    def match_partial(self, match_quantity: int) -> tuple[str, Order, int] | None:
        """Fill the oldest order by up to ``match_quantity``.

        Returns the maker's id, a copy of the maker after the fill and the
        quantity actually traded, or None if the level is empty. A maker that
        is filled completely leaves the queue.
        """
        node = self._orders.peek_front()
        if node is None:
            return None
        maker = node.value
        current = maker.remaining_quantity
        actual = min(match_quantity, current)
        self.total_volume = max(0, self.total_volume - actual)
        maker.fill(actual)

        if actual >= current:
            del self._nodes[maker.id]
            self._orders.remove(node)
            logger.debug("order fully filled: %s, quantity: %d", maker.id, actual)
        else:
            logger.debug(
                "order partially filled: %s, quantity: %d, remaining: %d",
                maker.id,
                actual,
                maker.remaining_quantity,
            )
        return maker.id, dataclasses.replace(maker), actual

    def is_empty(self) -> bool:
        return self._orders.is_empty()

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(self._orders)

    def __repr__(self) -> str:
        return f"PriceLevel(orders={len(self)}, total_volume={self.total_volume})"


class OrderBook:
    """Bids sorted highest price first, asks lowest price first."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        self.bids: SortedDict = SortedDict(neg)
        self.asks: SortedDict = SortedDict()
        self.orders: dict[str, tuple[Side, int]] = {}

    def _levels(self, side: Side) -> SortedDict:
        return self.bids if side is Side.BUY else self.asks

    def add_order(self, order: Order) -> bool:
        """Rest an order on its side of the book."""
        levels = self._levels(order.side)
        level = levels.get(order.price)
        if level is None:
            level = levels[order.price] = PriceLevel()
        level.add_order(order)
        self.orders[order.id] = (order.side, order.price)
        logger.debug(
            "%s order added: %s (price: %d, quantity: %d)",
            order.side.value,
            order.id,
            order.price,
            order.remaining_quantity,
        )
        return True

    def cancel_order(self, order_id: str) -> Order | None:
        """Remove a resting order; None if the book does not hold it."""
        entry = self.orders.pop(order_id, None)
        if entry is not None:
            side, price = entry
            levels = self._levels(side)
            level = levels.get(price)
            if level is not None:
                order = level.remove_order(order_id)
                if level.is_empty():
                    del levels[price]
                    logger.debug("empty %s level removed: %d", side.value, price)
                logger.debug("%s order cancelled: %s (price: %d)", side.value, order_id, price)
                return order
        logger.debug("cancel failed, no such order: %s", order_id)
        return None

    def ask_level(self, price: int) -> PriceLevel | None:
        return self.asks.get(price)

    def bid_level(self, price: int) -> PriceLevel | None:
        return self.bids.get(price)

    def best_bid(self) -> tuple[int, PriceLevel] | None:
        """Highest bid price and its level, or None."""
        return self.bids.peekitem(0) if self.bids else None

    def best_ask(self) -> tuple[int, PriceLevel] | None:
        """Lowest ask price and its level, or None."""
        return self.asks.peekitem(0) if self.asks else None

    def snapshot(self, depth: int) -> OrderBookSnapshot:
        """The best ``depth`` levels of each side as (price, volume) pairs."""
        bids = [(price, level.total_volume) for price, level in islice(self.bids.items(), depth)]
        asks = [(price, level.total_volume) for price, level in islice(self.asks.items(), depth)]
        return OrderBookSnapshot(symbol=self.symbol, bids=bids, asks=asks)

    def bid_count(self) -> int:
        return sum(len(level) for level in self.bids.values())

    def ask_count(self) -> int:
        return sum(len(level) for level in self.asks.values())

    def order_count(self) -> int:
        return self.bid_count() + self.ask_count()

    def __repr__(self) -> str:
        return f"OrderBook({self.symbol!r}, bids={self.bid_count()}, asks={self.ask_count()})"