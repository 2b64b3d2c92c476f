import pytest

from poolquote.orderbook import (
    Iteration,
    Order,
    OrderBook,
    ask_iteration,
    bid_iteration,
    simulate_ask,
    simulate_bid,
)
from poolquote.serum_fees import FeeTier


def make_book():
    return OrderBook(
        pc_lot_size=1,
        coin_lot_size=1,
        bids=[Order(1, 8, 4), Order(2, 9, 3), Order(3, 9, 2)],
        asks=[Order(4, 12, 1), Order(5, 10, 5), Order(6, 11, 2)],
    )


def test_best_ask_is_lowest_price():
    assert make_book().best_ask().order_id == 5


def test_best_bid_is_highest_price_earliest():
    assert make_book().best_bid().order_id == 2


def test_empty_book_has_no_best():
    book = OrderBook(pc_lot_size=1, coin_lot_size=1)
    assert book.best_ask() is None
    assert book.best_bid() is None


def test_zero_price_rejected():
    with pytest.raises(ValueError):
        Order(1, 0, 5)


def test_bid_iteration_consumes_best_ask():
    book = OrderBook(1, 1, asks=[Order(1, 10, 5)])
    iteration = Iteration(amount_in=1_000_000)
    done = bid_iteration(iteration, FeeTier.BASE, book)
    assert done is False
    assert iteration.amount_out == 5
    assert iteration.amount_in == 1_000_000 - 50 - FeeTier.BASE.taker_fee(50)
    assert book.asks == []


def test_bid_iteration_partial_fill_keeps_order():
    book = OrderBook(1, 1, asks=[Order(1, 10, 5)])
    iteration = Iteration(amount_in=35)
    bid_iteration(iteration, FeeTier.BASE, book)
    assert iteration.amount_out == 3
    assert book.asks[0].quantity == 2


def test_bid_iteration_too_small_budget_is_done():
    book = OrderBook(1, 1, asks=[Order(1, 10, 5)])
    iteration = Iteration(amount_in=5)
    assert bid_iteration(iteration, FeeTier.BASE, book) is True
    assert iteration.amount_in == 5
    assert iteration.amount_out == 0
    assert book.asks[0].quantity == 5


def test_bid_iteration_empty_book_is_done():
    book = OrderBook(1, 1)
    iteration = Iteration(amount_in=100)
    assert bid_iteration(iteration, FeeTier.BASE, book) is True
    assert iteration.amount_in == 100


def test_ask_iteration_fills_best_bid():
    book = OrderBook(1, 1, bids=[Order(1, 10, 3)])
    iteration = Iteration(amount_in=5)
    assert ask_iteration(iteration, FeeTier.BASE, book) is False
    assert iteration.amount_out == 30 - FeeTier.BASE.taker_fee(30)
    assert iteration.amount_in == 2
    assert book.bids == []
    assert ask_iteration(iteration, FeeTier.BASE, book) is True
    assert iteration.amount_in == 2


def test_ask_iteration_drops_sub_lot_remainder():
    book = OrderBook(1, 10, bids=[Order(1, 7, 100)])
    iteration = Iteration(amount_in=25)
    ask_iteration(iteration, FeeTier.BASE, book)
    assert iteration.amount_in == 0
    assert book.bids[0].quantity == 98


def test_simulate_bid_leaves_book_untouched():
    book = make_book()
    result = simulate_bid(1_000_000, FeeTier.BASE, book)
    assert result.amount_out == 1 + 5 + 2
    assert [o.quantity for o in book.asks] == [1, 5, 2]


def test_simulate_ask_sums_all_bids():
    book = make_book()
    result = simulate_ask(100, FeeTier.BASE, book)
    fills = 3 * 9 + 2 * 9 + 4 * 8
    assert result.amount_out <= fills
    assert result.amount_in == 100 - 9
    assert [o.quantity for o in book.bids] == [4, 3, 2]


def test_simulate_bid_spends_no_more_than_given():
    result = simulate_bid(500, FeeTier.MSRM, make_book())
    assert 0 <= result.amount_in <= 500