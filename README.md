# poolquote

Offline quoting for token swaps. Given pool reserves or an order book,
`poolquote` works out how much you would receive for a trade, using exact
integer arithmetic with fixed rounding rules. It has no dependencies beyond
the standard library.

## Modules

- `poolquote.stable`: the stable-swap invariant.
  - `compute_a(amp)` gives the leverage (`amp * 2`).
  - `compute_d(leverage, amount_a, amount_b)` finds the invariant D by
    Newton's method, using at most 32 iterations.
  - `compute_new_destination_amount(leverage, new_source_amount, d_val)`
    solves for the destination reserve after a swap.
  - `StableCurve(amp)` is the curve calculator. It offers
    `swap_without_fees`, `pool_tokens_to_trading_tokens`,
    `deposit_single_token_type`, `withdraw_single_token_type_exact_out`,
    `normalized_value` (the invariant D), `validate`, and 8-byte
    little-endian `pack` and `unpack`.
  - `Stable(amp, fee_numerator, fee_denominator)` quotes a swap with
    per-token precision multipliers and takes the fee fraction off the
    output.
  - `TradeDirection` (`A_TO_B`, `B_TO_A`), `RoundDirection` (`FLOOR`,
    `CEILING`), `SwapWithoutFeesResult` and `TradingTokenResult` go with
    these.
- `poolquote.serum_fees`: order-book fee tiers.
  - `FeeTier` runs from `BASE` through `SRM2` to `SRM6`, then `MSRM` and
    `STABLE`.
  - `FeeTier.from_srm_and_msrm_balances(market, srm_held, msrm_held)`
    picks a tier. A set of known stable markets always gets `STABLE`.
  - `taker_fee(pc_qty)` rounds up. `remove_taker_fee(pc_qty_incl_fee)`
    gives the largest quantity that, with its fee added, fits in the
    amount. `maker_rebate(pc_qty)` is also provided.
  - `referrer_rebate(amount)` is one fifth of the amount.
- `poolquote.orderbook`: an in-memory `OrderBook(pc_lot_size, coin_lot_size,
  bids, asks)` of `Order(order_id, price, quantity)` entries.
  - `best_ask()` returns the lowest-priced ask and `best_bid()` the
    highest-priced bid. Among equal prices, the lower `order_id` wins.
  - `bid_iteration` and `ask_iteration` fill one level against an
    `Iteration(amount_in, amount_out)`. They return `True` once nothing
    more can be filled.
  - `simulate_bid(amount_in, fee_tier, book)` runs a full market buy, and
    `simulate_ask(amount_in, fee_tier, book)` a full market sell. Both
    work on a copy of the book and return the final `Iteration`.
- `poolquote.pools`: `MercurialPool` and `SaberPool`.
  - `from_dict` builds a pool from its JSON description.
  - `get_update_accounts()` lists the vault addresses to fetch, in sorted
    mint order.
  - `set_update_accounts(accounts)` records vault balances from raw token
    account bytes, in that same order.
  - `can_trade` is false while any recorded vault balance is zero.
  - `get_quote_with_amounts_scaled(amount, mint_in, mint_out)` quotes a
    swap.
  - `get_name`, `mint_2_addr`, `mint_2_scale` and `get_mints` are also
    provided.
  - Mercurial pools use their precision multipliers and a fee
    denominator of 10¹⁰. Saber pools use multipliers of 1 and their own
    fee fraction.
- `poolquote.serialize`: records and the token account layout.
  - `Pubkey` is a 32-byte key that prints as base58. It offers
    `from_string` and `to_bytes`.
  - `Token`, `Fraction` and `JSONFeeStructure` each have a `from_dict`.
    `JSONFeeStructure` reads the `traderFee` and `ownerFee` keys.
  - `unpack_token_account(data)` decodes the 165-byte token account
    layout into a `TokenAccount` with an `AccountState`. It raises
    `InvalidAccountDataError` on short or malformed data.
- `poolquote.utils`:
  - `read_json_dir(directory)` returns the sorted paths of the `.json`
    entries in a directory.
  - `PoolGraph` stores quotes between token indices: `add_quote(src, dst,
    quote)` and `quotes(src, dst)`.
- `poolquote.openorders`:
  - `layout_version(program_id)` gives the account layout version of a
    known dex program. It raises `KeyError` for other programs.
  - `open_orders_space(program_id)` gives the bytes to allocate: 3220 for
    layout version 1, 3228 otherwise.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

A stable-swap quote:

```python
from poolquote.stable import Stable

quoter = Stable(amp=100, fee_numerator=4, fee_denominator=10_000)
out = quoter.get_quote([1_000_000_000, 1_000_000_000], [1, 1], 1_000_000)
```

A curve swap without fees:

```python
from poolquote.stable import StableCurve, TradeDirection

curve = StableCurve(amp=100)
result = curve.swap_without_fees(1_000, 1_000_000, 1_000_000, TradeDirection.A_TO_B)
print(result.destination_amount_swapped)
```

Walking an order book with a market buy:

```python
from poolquote.orderbook import Order, OrderBook, simulate_bid
from poolquote.serum_fees import FeeTier

book = OrderBook(
    pc_lot_size=1,
    coin_lot_size=1,
    asks=[Order(order_id=1, price=10, quantity=5)],
)
result = simulate_bid(1_000, FeeTier.BASE, book)
print(result.amount_in, result.amount_out)  # residual input, base lots bought
```

Quoting a pool loaded from its JSON description. Here `vault_a_data` and
`vault_b_data` are raw token-account bytes that you fetched yourself, in the
order of `pool.get_update_accounts()`:

```python
import json
from poolquote.pools import SaberPool

with open("pool.json") as fh:
    pool = SaberPool.from_dict(json.load(fh))
pool.set_update_accounts([vault_a_data, vault_b_data])
mint_in, mint_out = pool.get_mints()
if pool.can_trade(mint_in, mint_out):
    print(pool.get_quote_with_amounts_scaled(1_000_000, mint_in, mint_out))
```

The stable-swap calculations raise `OverflowError`, `ZeroDivisionError` or
`ArithmeticError` when the arithmetic would overflow, divide by zero or
underflow. They do not return a made-up number.

## What it does not do

`poolquote` does no networking and holds no keys.

- It does not fetch account data from a node. You supply the bytes.
- It does not load order books from on-chain accounts.
- It does not build, sign, simulate or send transactions.
- It does not create open-orders accounts. `poolquote.openorders` only
  tells you how large one must be.
- It quotes only stable-swap pools and order books. There is no
  constant-product pool type.
- It has no command-line interface.