"""Simulated market orders walked against a limit order book."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from poolquote.serum_fees import FeeTier


@dataclass
class Order:
    """A resting limit order; price in quote lots per base lot, quantity in base lots."""

    order_id: int
    price: int
    quantity: int

    def __post_init__(self) -> None:
        if self.price <= 0:
            raise ValueError("order price must be positive")
        if self.quantity < 0:
            raise ValueError("order quantity must not be negative")


@dataclass
class OrderBook:
    """Both sides of a market, with its lot sizes."""

    pc_lot_size: int
    coin_lot_size: int
    bids: list[Order] = field(default_factory=list)
    asks: list[Order] = field(default_factory=list)

    def best_ask(self) -> Order | None:
        """Lowest-priced ask, earliest first among equal prices."""
        return min(self.asks, key=lambda o: (o.price, o.order_id), default=None)

    def best_bid(self) -> Order | None:
        """Highest-priced bid, earliest first among equal prices."""
        return max(self.bids, key=lambda o: (o.price, -o.order_id), default=None)


@dataclass
class Iteration:
    amount_in: int
    amount_out: int = 0


def bid_iteration(iteration: Iteration, fee_tier: FeeTier, book: OrderBook) -> bool:
    """Buy base with quote against the best ask; True when no more can be filled."""
    quote_lot_size = book.pc_lot_size
    start_amount_in = iteration.amount_in
    max_pc_qty = fee_tier.remove_taker_fee(iteration.amount_in) // quote_lot_size
    pc_qty_remaining = max_pc_qty

    done = True
    best = book.best_ask()
    if best is not None:
        trade_qty = min(best.quantity, pc_qty_remaining // best.price)
        if trade_qty > 0:
            pc_qty_remaining -= trade_qty * best.price
            iteration.amount_out += trade_qty
            best.quantity -= trade_qty
            if best.quantity == 0:
                book.asks.remove(best)
            done = False

    native_fill = (max_pc_qty - pc_qty_remaining) * quote_lot_size
    native_fee = fee_tier.taker_fee(native_fill)
    iteration.amount_in = start_amount_in - native_fill - native_fee
    return done


def ask_iteration(iteration: Iteration, fee_tier: FeeTier, book: OrderBook) -> bool:
    """Sell base for quote against the best bid; True when no more can be filled."""
    unfilled_qty = iteration.amount_in // book.coin_lot_size
    accum_fill_price = 0

    done = True
    best = book.best_bid()
    if best is not None:
        trade_qty = min(best.quantity, unfilled_qty)
        if trade_qty > 0:
            best.quantity -= trade_qty
            unfilled_qty -= trade_qty
            accum_fill_price += trade_qty * best.price
            if best.quantity == 0:
                book.bids.remove(best)
            done = False

    native_pc_qty = accum_fill_price * book.pc_lot_size
    native_fee = fee_tier.taker_fee(native_pc_qty)
    iteration.amount_out += native_pc_qty - native_fee
    iteration.amount_in = unfilled_qty * book.coin_lot_size
    return done


def _simulate(step, amount_in: int, fee_tier: FeeTier, book: OrderBook) -> Iteration:
    working = copy.deepcopy(book)
    iteration = Iteration(amount_in=amount_in)
    while not step(iteration, fee_tier, working):
        pass
    return iteration


def simulate_bid(amount_in: int, fee_tier: FeeTier, book: OrderBook) -> Iteration:
    """Fill a market buy on a copy of the book; the given book is left untouched."""
    return _simulate(bid_iteration, amount_in, fee_tier, book)


def simulate_ask(amount_in: int, fee_tier: FeeTier, book: OrderBook) -> Iteration:
    """Fill a market sell on a copy of the book; the given book is left untouched."""
    return _simulate(ask_iteration, amount_in, fee_tier, book)