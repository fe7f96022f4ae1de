"""Matching of an incoming (taker) order against the resting side of an order book."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from .model import Order, Side
from .order_book import OrderBook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fill:
    """One trade between a taker and the maker at the front of a price level.

    ``maker`` is a copy of the maker order as it stood right after the trade,
    and ``taker_remaining`` is the taker's open quantity right after it.
    """

    price: int
    quantity: int
    taker_id: str
    taker_remaining: int
    maker_id: str
    maker: Order

    @property
    def maker_filled(self) -> bool:
        """Whether the maker has no open quantity left after this trade."""
        return self.maker.is_filled()


def _best_opposite(order: Order, order_book: OrderBook) -> int | None:
    """Best price on the side the order trades against, or None if that side is empty."""
    best = order_book.best_ask() if order.side is Side.BUY else order_book.best_bid()
    return None if best is None else best[0]


def match_at_price_level(
    order: Order, order_book: OrderBook, price: int, quantity: int
) -> Fill | None:
    """Trade ``order`` against the oldest maker at ``price`` for up to ``quantity``.

    The taker is filled in place, the maker leaves the book when it is filled
    completely, and an emptied price level is removed. Returns None when
    nothing traded.
    """
    if quantity <= 0:
        return None

    maker_side = order.side.opposite()
    levels = order_book.bids if maker_side is Side.BUY else order_book.asks
    level = levels.get(price)
    if level is None:
        return None

    result = level.match_partial(quantity)
    if result is None:
        return None
    maker_id, maker, traded = result

    if level.is_empty():
        del levels[price]
        logger.debug("empty %s level removed: %d", maker_side.value, price)

    order.fill(traded)
    if maker.is_filled():
        order_book.orders.pop(maker_id, None)

    logger.debug(
        "trade: %s <-> %s, price: %d, quantity: %d", order.id, maker_id, price, traded
    )
    return Fill(
        price=price,
        quantity=traded,
        taker_id=order.id,
        taker_remaining=order.remaining_quantity,
        maker_id=maker_id,
        maker=dataclasses.replace(maker),
    )


def _sweep(order: Order, order_book: OrderBook, limited: bool) -> list[Fill]:
    fills: list[Fill] = []
    while not order.is_filled():
        price = _best_opposite(order, order_book)
        if price is None:
            logger.debug("no opposite orders left for %s", order.id)
            break
        if limited:
            crosses = order.price >= price if order.side is Side.BUY else order.price <= price
            if not crosses:
                logger.debug(
                    "no match: order price %d does not cross best opposite %d",
                    order.price,
                    price,
                )
                break
        fill = match_at_price_level(order, order_book, price, order.remaining_quantity)
        if fill is None:
            break
        fills.append(fill)
    return fills


def match_market_order(order: Order, order_book: OrderBook) -> list[Fill]:
    """Fill a market order from the best opposite prices until it is done or the side runs dry."""
    fills = _sweep(order, order_book, limited=False)
    logger.debug(
        "market order done: %s, filled %d/%d",
        order.id,
        order.quantity - order.remaining_quantity,
        order.quantity,
    )
    return fills


def match_limit_order(order: Order, order_book: OrderBook) -> list[Fill]:
    """Fill a limit order against opposite prices that are at its limit or better."""
    return _sweep(order, order_book, limited=True)