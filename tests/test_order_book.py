import uuid

import pytest

from xtrader.model import Order, OrderType, Side
from xtrader.order_book import OrderBook, PriceLevel


def make_order(side, price, quantity, order_id=None):
    return Order(
        id=order_id or str(uuid.uuid4()),
        symbol="BTC-KRW",
        side=side,
        order_type=OrderType.LIMIT,
        price=price,
        quantity=quantity,
        timestamp=0,
    )


def test_price_level_add_order():
    level = PriceLevel()
    level.add_order(make_order(Side.BUY, 1000, 100))
    assert level.total_volume == 100
    assert len(level) == 1

    level.add_order(make_order(Side.BUY, 1000, 200))
    assert level.total_volume == 300
    assert len(level) == 2


def test_price_level_remove_order():
    level = PriceLevel()
    order = make_order(Side.BUY, 1000, 100)
    level.add_order(order)

    removed = level.remove_order(order.id)

    assert removed is not None
    assert removed.id == order.id
    assert level.total_volume == 0
    assert len(level) == 0
    assert level.is_empty()


def test_price_level_remove_unknown_order():
    level = PriceLevel()
    level.add_order(make_order(Side.BUY, 1000, 100))
    assert level.remove_order("missing") is None
    assert level.total_volume == 100


def test_price_level_match_partial():
    level = PriceLevel()
    order = make_order(Side.BUY, 1000, 100)
    level.add_order(order)

    result = level.match_partial(40)
    assert result is not None
    matched_id, matched_order, matched_qty = result
    assert matched_id == order.id
    assert matched_qty == 40
    assert matched_order.remaining_quantity == 60
    assert level.total_volume == 60
    assert len(level) == 1

    result = level.match_partial(60)
    assert result is not None
    matched_id, matched_order, matched_qty = result
    assert matched_id == order.id
    assert matched_qty == 60
    assert matched_order.remaining_quantity == 0
    assert level.total_volume == 0
    assert len(level) == 0
    assert level.is_empty()


def test_price_level_match_more_than_available():
    level = PriceLevel()
    level.add_order(make_order(Side.SELL, 1000, 30, "a"))
    level.add_order(make_order(Side.SELL, 1000, 50, "b"))

    matched_id, maker, qty = level.match_partial(100)

    assert (matched_id, qty, maker.remaining_quantity) == ("a", 30, 0)
    assert level.front_quantity() == 50
    assert level.total_volume == 50


def test_price_level_match_empty_returns_none():
    assert PriceLevel().match_partial(10) is None


def test_price_level_peek_front_and_front_quantity():
    level = PriceLevel()
    assert level.peek_front() is None
    assert level.front_quantity() is None

    level.add_order(make_order(Side.BUY, 1000, 70, "first"))
    level.add_order(make_order(Side.BUY, 1000, 20, "second"))

    order_id, order, qty = level.peek_front()
    assert (order_id, order.id, qty) == ("first", "first", 70)
    assert level.front_quantity() == 70
    assert len(level) == 2


def test_price_level_keeps_time_priority():
    level = PriceLevel()
    for name in ("a", "b", "c"):
        level.add_order(make_order(Side.BUY, 1000, 10, name))
    level.remove_order("b")
    assert [o.id for o in level] == ["a", "c"]


def test_order_book_add_orders():
    book = OrderBook("BTC-KRW")
    book.add_order(make_order(Side.BUY, 9000, 100))
    book.add_order(make_order(Side.SELL, 10000, 200))

    assert book.bid_count() == 1
    assert book.ask_count() == 1
    assert book.order_count() == 2

    best_bid, _ = book.best_bid()
    best_ask, _ = book.best_ask()
    assert best_bid == 9000
    assert best_ask == 10000


def test_order_book_empty_has_no_best_prices():
    book = OrderBook("BTC-KRW")
    assert book.best_bid() is None
    assert book.best_ask() is None
    assert book.order_count() == 0


def test_order_book_cancel_order():
    book = OrderBook("BTC-KRW")
    order = make_order(Side.BUY, 9000, 100)
    book.add_order(order)

    cancelled = book.cancel_order(order.id)

    assert cancelled is not None
    assert cancelled.id == order.id
    assert book.bid_count() == 0
    assert len(book.bids) == 0
    assert order.id not in book.orders


def test_order_book_cancel_unknown_order():
    book = OrderBook("BTC-KRW")
    book.add_order(make_order(Side.SELL, 9000, 100))
    assert book.cancel_order("missing") is None
    assert book.ask_count() == 1


def test_order_book_cancel_sell_removes_level():
    book = OrderBook("BTC-KRW")
    order = make_order(Side.SELL, 10000, 5)
    book.add_order(order)
    assert book.cancel_order(order.id).price == 10000
    assert book.ask_level(10000) is None


def test_order_book_multiple_price_levels():
    book = OrderBook("BTC-KRW")
    book.add_order(make_order(Side.BUY, 9000, 100))
    book.add_order(make_order(Side.BUY, 9100, 200))
    book.add_order(make_order(Side.BUY, 8900, 300))
    book.add_order(make_order(Side.SELL, 10000, 100))
    book.add_order(make_order(Side.SELL, 9900, 200))
    book.add_order(make_order(Side.SELL, 10100, 300))

    assert book.bid_count() == 3
    assert book.ask_count() == 3

    best_bid, _ = book.best_bid()
    best_ask, _ = book.best_ask()
    assert best_bid == 9100
    assert best_ask == 9900

    snapshot = book.snapshot(10)
    assert len(snapshot.bids) == 3
    assert len(snapshot.asks) == 3
    assert [p for p, _ in snapshot.bids] == [9100, 9000, 8900]
    assert [p for p, _ in snapshot.asks] == [9900, 10000, 10100]


def test_order_book_snapshot_depth_and_volume():
    book = OrderBook("BTC-KRW")
    book.add_order(make_order(Side.BUY, 9000, 100))
    book.add_order(make_order(Side.BUY, 9000, 50))
    book.add_order(make_order(Side.BUY, 8000, 10))
    book.add_order(make_order(Side.SELL, 9500, 7))

    snapshot = book.snapshot(1)

    assert snapshot.symbol == "BTC-KRW"
    assert snapshot.bids == [(9000, 150)]
    assert snapshot.asks == [(9500, 7)]


def test_same_price_level():
    book = OrderBook("BTC-KRW")
    first = make_order(Side.BUY, 9000, 100)
    book.add_order(first)
    book.add_order(make_order(Side.BUY, 9000, 200))

    assert book.bid_count() == 2
    level = book.bid_level(9000)
    assert level.total_volume == 300
    assert len(level) == 2

    assert book.cancel_order(first.id) is not None

    assert len(book.bids) == 1
    level = book.bid_level(9000)
    assert level.total_volume == 200
    assert len(level) == 1


@pytest.mark.parametrize("side", [Side.BUY, Side.SELL])
def test_orders_index_records_side_and_price(side):
    book = OrderBook("BTC-KRW")
    order = make_order(side, 1234, 5, "x")
    book.add_order(order)
    assert book.orders["x"] == (side, 1234)