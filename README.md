# xtrader

An in-memory order matching engine. Orders are kept in one order book per
symbol and matched by price-time priority: the best price first, and at one
price the earliest order first.

Supported orders:

- **Limit** orders match against the opposite side while the price crosses;
  any remainder rests in the book.
- **Market** orders take liquidity from the best price onwards until they
  are filled or the opposite side is empty; they never rest.
- **Cancel** requests (`Order.cancel(target_id)`, or any `Order` with
  `is_cancel=True` and a `target_order_id`) remove a resting order and
  produce a cancel report with quantity 0 and counterparty `"system"`.

Every match produces two `ExecutionReport`s that share one execution id:
the taker's first, then the maker's.

## Installation

```
pip install .
```

Install the test dependencies with `pip install .[test]`.

## Using the engine

`MatchingEngine(symbols, report)` takes the symbols it trades and a callable
that receives every `ExecutionReport`, in order.

```python
import queue

from xtrader.engine import MatchingEngine
from xtrader.model import Order, OrderType, Side

reports = queue.Queue()
engine = MatchingEngine(["BTC-KRW"], reports.put)

engine.process_order(Order("s1", "BTC-KRW", Side.SELL, OrderType.LIMIT, 10000, 100))
engine.process_order(Order("b1", "BTC-KRW", Side.BUY, OrderType.LIMIT, 10000, 60))

taker = reports.get_nowait()   # b1, quantity 60, remaining 0
maker = reports.get_nowait()   # s1, quantity 60, remaining 40

snapshot = engine.snapshot("BTC-KRW", 5)
print(snapshot.asks)           # [(10000, 40)]

cancelled = engine.handle_cancel_order(Order.cancel("s1"))
```

- `process_order` raises `xtrader.engine.EngineError` for a symbol the
  engine does not trade.
- `handle_cancel_order` returns the cancelled order, or `None` when the
  target is not a resting order; it raises `EngineError` when the request
  names no target.
- `get_order(order_id)` returns a known open order, `order_books` is a
  read-only mapping of symbol to `OrderBook`, and `print_stats()` logs the
  number of resting orders per symbol.

`MatchingEngine.run(orders)` processes every order from an iterable until it
is exhausted, logging and skipping orders it rejects. To drive it from its
own thread, feed it from a queue, for example
`engine.run(iter(order_queue.get, None))`, and put `None` to stop it.

The building blocks can be used on their own: `xtrader.order_book` provides
`OrderBook` and `PriceLevel`, `xtrader.matcher` provides
`match_limit_order`, `match_market_order` and `match_at_price_level` (which
return `Fill` records), `xtrader.model` provides the data types, and
`xtrader.linked_list` provides the `DoublyLinkedList` that keeps time
priority inside a price level.

## Command line

```
xtrader --symbols BTC-KRW ETH-KRW
```

runs the built-in scenarios (basic matching, partial fills, multiple price
levels, cancellation, market orders and many orders at one price) against an
engine on a background thread and prints every execution report as it
arrives. The scenarios trade `BTC-KRW` and `ETH-KRW`; without `--symbols`
the engine trades `AAPL`, `MSFT` and `GOOG`, so the scenario orders are
rejected and no reports are printed.

## What it does not do

- It has no network interface. `Config` carries `ws_port` and `rest_port`,
  but nothing listens on them; the engine is driven only from Python.
- It publishes no market data. `MarketDataEvent`, `OrderBookUpdate` and
  `Trade` describe such events, but the engine never produces them.
- Nothing is stored: books and orders live in memory only.

## Running the tests

```
pytest
```