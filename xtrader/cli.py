"""Command that runs the matching engine through a fixed set of order scenarios."""

from __future__ import annotations

import argparse
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Protocol

from .engine import MatchingEngine
from .model import ExecutionReport, Order, OrderType, Side


class OrderSink(Protocol):
    def put(self, item: Order) -> None: ...


def _default_symbols() -> list[str]:
    return ["AAPL", "MSFT", "GOOG"]


@dataclass
class Config:
    """Ports and traded symbols of the exchange."""

    ws_port: int = 8080
    rest_port: int = 8081
    symbols: list[str] = field(default_factory=_default_symbols)


@dataclass(frozen=True)
class OrderBookUpdate:
    """Market data event: the aggregated levels of a book."""

    symbol: str
    bids: list[tuple[int, int]]
    asks: list[tuple[int, int]]


@dataclass(frozen=True)
class Trade:
    """Market data event: one trade."""

    symbol: str
    price: int
    quantity: int
    timestamp: int


def create_test_order(
    order_id: str, symbol: str, side: Side, order_type: OrderType, price: int, quantity: int
) -> Order:
    """An order with no client and a zero timestamp."""
    return Order(
        id=order_id,
        symbol=symbol,
        side=side,
        order_type=order_type,
        price=price,
        quantity=quantity,
        remaining_quantity=quantity,
        client_id="",
        timestamp=0,
    )


def create_cancel_order(order_id: str, symbol: str, target_id: str) -> Order:
    """A request to cancel ``target_id``; side and price carry no meaning."""
    return Order(
        id=order_id,
        symbol=symbol,
        side=Side.BUY,
        order_type=OrderType.LIMIT,
        price=0,
        quantity=0,
        remaining_quantity=0,
        client_id="",
        timestamp=0,
        is_cancel=True,
        target_order_id=target_id,
    )


def _pause(milliseconds: int) -> None:
    time.sleep(milliseconds / 1000)


def scenario_basic_matching(order_queue: OrderSink) -> None:
    """A sell and a buy at the same price and size that match completely."""
    print("Scenario 1: basic matching")
    order_queue.put(
        create_test_order("sell-basic-1", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10000, 100)
    )
    _pause(10)
    order_queue.put(
        create_test_order("buy-basic-1", "BTC-KRW", Side.BUY, OrderType.LIMIT, 10000, 100)
    )
    print("Scenario 1 orders sent.")


def scenario_partial_matching(order_queue: OrderSink) -> None:
    """One large sell filled in part by two smaller buys."""
    print("Scenario 2: partial matching")
    order_queue.put(
        create_test_order("sell-partial-1", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10100, 200)
    )
    _pause(10)
    order_queue.put(
        create_test_order("buy-partial-1", "BTC-KRW", Side.BUY, OrderType.LIMIT, 10100, 50)
    )
    _pause(10)
    order_queue.put(
        create_test_order("buy-partial-2", "BTC-KRW", Side.BUY, OrderType.LIMIT, 10100, 70)
    )
    print("Scenario 2 orders sent.")


def scenario_multiple_price_levels(order_queue: OrderSink) -> None:
    """Sells and buys spread over several price levels."""
    print("Scenario 3: matching across price levels")
    sells = [
        create_test_order("sell-multi-1", "ETH-KRW", Side.SELL, OrderType.LIMIT, 2000000, 1),
        create_test_order("sell-multi-2", "ETH-KRW", Side.SELL, OrderType.LIMIT, 2010000, 2),
        create_test_order("sell-multi-3", "ETH-KRW", Side.SELL, OrderType.LIMIT, 2020000, 3),
    ]
    for order in sells:
        order_queue.put(order)
        _pause(5)
    buys = [
        create_test_order("buy-multi-1", "ETH-KRW", Side.BUY, OrderType.LIMIT, 1980000, 1),
        create_test_order("buy-multi-2", "ETH-KRW", Side.BUY, OrderType.LIMIT, 1990000, 2),
        create_test_order("buy-multi-3", "ETH-KRW", Side.BUY, OrderType.LIMIT, 2000000, 3),
    ]
    for order in buys:
        order_queue.put(order)
        _pause(5)
    print("Scenario 3 orders sent.")


def scenario_cancellation(order_queue: OrderSink) -> None:
    """A resting sell followed by a request to cancel it."""
    print("Scenario 4: cancellation")
    order_queue.put(
        create_test_order("sell-cancel-target", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10500, 50)
    )
    _pause(10)
    order_queue.put(create_cancel_order("cancel-1", "BTC-KRW", "sell-cancel-target"))
    print("Scenario 4 orders sent.")


def scenario_market_orders(order_queue: OrderSink) -> None:
    """A market buy sweeping asks and a market sell sweeping bids."""
    print("Scenario 5: market orders")
    sells = [
        create_test_order("sell-market-1", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10200, 10),
        create_test_order("sell-market-2", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10300, 20),
        create_test_order("sell-market-3", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10400, 30),
    ]
    for order in sells:
        order_queue.put(order)
        _pause(5)
    order_queue.put(
        create_test_order("buy-market-1", "BTC-KRW", Side.BUY, OrderType.MARKET, 0, 40)
    )
    _pause(20)
    buys = [
        create_test_order("buy-market-limit-1", "ETH-KRW", Side.BUY, OrderType.LIMIT, 2050000, 1),
        create_test_order("buy-market-limit-2", "ETH-KRW", Side.BUY, OrderType.LIMIT, 2040000, 1),
        create_test_order("buy-market-limit-3", "ETH-KRW", Side.BUY, OrderType.LIMIT, 2030000, 1),
    ]
    for order in buys:
        order_queue.put(order)
        _pause(5)
    order_queue.put(
        create_test_order("sell-market-1", "ETH-KRW", Side.SELL, OrderType.MARKET, 0, 2)
    )
    print("Scenario 5 orders sent.")


def scenario_stress(order_queue: OrderSink) -> None:
    """Five sells at one price taken by a single large buy."""
    print("Scenario 6: many orders at one price")
    for i in range(1, 6):
        order_queue.put(
            create_test_order(
                f"sell-stress-{i}", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10000, 100
            )
        )
        _pause(2)
    order_queue.put(
        create_test_order("buy-stress-1", "BTC-KRW", Side.BUY, OrderType.LIMIT, 10000, 430)
    )
    print("Scenario 6 orders sent.")


def run_integration_tests(order_queue: OrderSink) -> None:
    """Send every scenario in turn, pausing between them for the engine to catch up."""
    print("\n===== integration scenarios start =====\n")
    steps = [
        (scenario_basic_matching, 100),
        (scenario_partial_matching, 100),
        (scenario_multiple_price_levels, 100),
        (scenario_cancellation, 100),
        (scenario_market_orders, 100),
        (scenario_stress, 200),
    ]
    for scenario, wait in steps:
        scenario(order_queue)
        _pause(wait)
    print("\n===== integration scenarios done =====\n")


def _run(config: Config) -> list[ExecutionReport]:
    orders: queue.Queue[Order | None] = queue.Queue()
    reports: queue.Queue[ExecutionReport | None] = queue.Queue()
    market_data: queue.Queue[OrderBookUpdate | Trade | None] = queue.Queue()
    collected: list[ExecutionReport] = []
    lock = threading.Lock()

    engine = MatchingEngine(config.symbols, reports.put)
    engine_thread = threading.Thread(
        target=engine.run, args=(iter(orders.get, None),), name="engine"
    )

    def consume_reports() -> None:
        for report in iter(reports.get, None):
            print(
                f"execution report: order {report.order_id} "
                f"(quantity: {report.quantity}, price: {report.price}, "
                f"remaining: {report.remaining_quantity})"
            )
            with lock:
                collected.append(report)

    def consume_market_data() -> None:
        for event in iter(market_data.get, None):
            print(f"market data event: {event!r}")

    report_thread = threading.Thread(target=consume_reports, name="reports")
    market_data_thread = threading.Thread(target=consume_market_data, name="market-data")
    for thread in (engine_thread, report_thread, market_data_thread):
        thread.start()

    try:
        run_integration_tests(orders)
    finally:
        orders.put(None)
        market_data.put(None)
        engine_thread.join()
        reports.put(None)
        report_thread.join()
        market_data_thread.join()

    with lock:
        return list(collected)


def main(argv: list[str] | None = None) -> int:
    """Start the engine, run the scenarios against it and print every report."""
    parser = argparse.ArgumentParser(
        prog="xtrader", description="Run the order matching engine through its scenarios."
    )
    parser.add_argument(
        "--symbols", nargs="+", metavar="SYMBOL", help="symbols the engine trades"
    )
    args = parser.parse_args(argv)

    config = Config() if not args.symbols else Config(symbols=list(args.symbols))
    print("order matching system starting (scenario mode)")
    _run(config)
    print("all scenarios finished, exiting.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())