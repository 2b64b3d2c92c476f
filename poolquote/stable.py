"""Stable-swap invariant calculator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from poolquote.serialize import InvalidAccountDataError

N_COINS = 2
N_COINS_SQUARED = 4
ITERATIONS = 32

_U64 = 1 << 64
_U128 = 1 << 128
_U256 = 1 << 256

_ONE = 10**12
_HALF = _ONE // 2


def _bounded(value: int, limit: int) -> int:
    if value < 0 or value >= limit:
        raise OverflowError("arithmetic result out of range")
    return value


def _div(numerator: int, denominator: int) -> int:
    if denominator == 0:
        raise ZeroDivisionError("division by zero in curve calculation")
    return numerator // denominator


def _ceil_div(numerator: int, denominator: int) -> int:
    quotient = _div(numerator, denominator)
    if quotient == 0:
        raise ArithmeticError("ceiling division of a smaller number by a larger one")
    if numerator % denominator:
        quotient += 1
    return quotient


# Fixed-point helpers: values are integers scaled by _ONE and bounded to 256 bits.


def _precise(value: int) -> int:
    return _bounded(value * _ONE, _U256)


def _pmul(a: int, b: int) -> int:
    product = a * b
    if product < _U256:
        return _bounded(product + _HALF, _U256) // _ONE
    big, small = (a, b) if a >= b else (b, a)
    return _bounded((big // _ONE) * small, _U256)


def _pdiv(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("division by zero in curve calculation")
    scaled = a * _ONE
    if scaled < _U256:
        return _bounded(scaled + _HALF, _U256) // b
    return _bounded((_bounded(a + _HALF, _U256) // b) * _ONE, _U256)


def _pfloor(value: int) -> int:
    return value // _ONE * _ONE


def _pceiling(value: int) -> int:
    return _bounded(value + _ONE - 1, _U256) // _ONE * _ONE


def _imprecise(value: int) -> int:
    return _bounded(_bounded(value + _HALF, _U256) // _ONE, _U128)


class TradeDirection(Enum):
    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"


class RoundDirection(Enum):
    FLOOR = "floor"
    CEILING = "ceiling"


@dataclass(frozen=True)
class SwapWithoutFeesResult:
    source_amount_swapped: int
    destination_amount_swapped: int


@dataclass(frozen=True)
class TradingTokenResult:
    token_a_amount: int
    token_b_amount: int


def compute_a(amp: int) -> int:
    """Leverage used for D: amp times the number of coins."""
    return _bounded(_bounded(amp, _U64) * N_COINS, _U64)


def _calculate_step(initial_d: int, leverage: int, sum_x: int, d_product: int) -> int:
    leverage_mul = _bounded(leverage * sum_x, _U256)
    d_p_mul = _bounded(d_product * N_COINS, _U256)
    l_val = _bounded(_bounded(leverage_mul + d_p_mul, _U256) * initial_d, _U256)
    leverage_sub = _bounded(initial_d * _bounded(leverage - 1, _U64), _U256)
    n_coins_sum = _bounded(d_product * (N_COINS + 1), _U256)
    r_val = _bounded(leverage_sub + n_coins_sum, _U256)
    return _div(l_val, r_val)


def compute_d(leverage: int, amount_a: int, amount_b: int) -> int:
    """Stable-swap invariant D, found by Newton's method."""
    amount_a = _bounded(amount_a, _U128)
    amount_b = _bounded(amount_b, _U128)
    a_times_coins = amount_a * N_COINS + 1
    b_times_coins = amount_b * N_COINS + 1
    sum_x = _bounded(amount_a + amount_b, _U128)
    if sum_x == 0:
        return 0
    d = sum_x
    for _ in range(ITERATIONS):
        d_product = _bounded(d * d, _U256) // a_times_coins
        d_product = _bounded(d_product * d, _U256) // b_times_coins
        previous = d
        d = _calculate_step(d, leverage, sum_x, d_product)
        if d == previous:
            break
    return _bounded(d, _U128)


def compute_new_destination_amount(leverage: int, new_source_amount: int, d_val: int) -> int:
    """Solve y**2 + b*y = c for the destination reserve after a swap."""
    x = _bounded(new_source_amount, _U128)
    d = _bounded(d_val, _U128)
    c = _div(
        _bounded(d**3, _U256),
        _bounded(_bounded(x * N_COINS_SQUARED, _U256) * leverage, _U256),
    )
    b = _bounded(x + _div(d, leverage), _U256)
    y = d
    for _ in range(ITERATIONS):
        numerator = _bounded(_bounded(y * y, _U256) + c, _U256)
        denominator = _bounded(_bounded(_bounded(y * 2, _U256) + b, _U256) - d, _U256)
        y_new = _ceil_div(numerator, denominator)
        if y_new == y:
            break
        y = y_new
    return _bounded(y, _U128)


@dataclass(frozen=True)
class Stable:
    """Stable-swap quoting with per-token precision multipliers and a fee."""

    amp: int
    fee_numerator: int
    fee_denominator: int

    def get_quote(self, pool_amounts, precision_multipliers, scaled_amount_in) -> int:
        src_amount, dst_amount = pool_amounts
        src_mult, dst_mult = precision_multipliers
        xp_src = _bounded(src_amount * src_mult, _U128)
        xp_dst = _bounded(dst_amount * dst_mult, _U128)
        dx = _bounded(scaled_amount_in * src_mult, _U128)
        x = _bounded(xp_src + dx, _U128)

        leverage = compute_a(self.amp)
        d = compute_d(leverage, xp_src, xp_dst)
        y = compute_new_destination_amount(leverage, x, d)
        dy = _bounded(xp_dst - y, _U128)
        out_amount = _div(dy, dst_mult)

        fees = _div(_bounded(out_amount * self.fee_numerator, _U128), self.fee_denominator)
        return _bounded(out_amount - fees, _U128)


@dataclass(frozen=True)
class StableCurve:
    """Stable-swap curve with an amplification constant."""

    amp: int = 0

    LEN = 8

    def swap_without_fees(
        self, source_amount, swap_source_amount, swap_destination_amount, trade_direction
    ) -> SwapWithoutFeesResult:
        if source_amount == 0:
            return SwapWithoutFeesResult(0, 0)
        leverage = compute_a(self.amp)
        new_source_amount = _bounded(swap_source_amount + source_amount, _U128)
        d = compute_d(leverage, swap_source_amount, swap_destination_amount)
        new_destination_amount = compute_new_destination_amount(leverage, new_source_amount, d)
        swapped = _bounded(swap_destination_amount - new_destination_amount, _U128)
        return SwapWithoutFeesResult(source_amount, swapped)

    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens,
        pool_token_supply,
        swap_token_a_amount,
        swap_token_b_amount,
        round_direction,
    ) -> TradingTokenResult:
        product_a = _bounded(pool_tokens * swap_token_a_amount, _U128)
        product_b = _bounded(pool_tokens * swap_token_b_amount, _U128)
        token_a_amount = _div(product_a, pool_token_supply)
        token_b_amount = _div(product_b, pool_token_supply)
        if round_direction is RoundDirection.CEILING:
            if product_a % pool_token_supply and token_a_amount > 0:
                token_a_amount += 1
            if product_b % pool_token_supply and token_b_amount > 0:
                token_b_amount += 1
        return TradingTokenResult(token_a_amount, token_b_amount)

    def _ordered(self, trade_direction, swap_token_a_amount, swap_token_b_amount):
        if trade_direction is TradeDirection.A_TO_B:
            return swap_token_a_amount, swap_token_b_amount
        return swap_token_b_amount, swap_token_a_amount

    def deposit_single_token_type(
        self,
        source_amount,
        swap_token_a_amount,
        swap_token_b_amount,
        pool_supply,
        trade_direction,
    ) -> int:
        """Pool tokens minted for depositing one side only."""
        if source_amount == 0:
            return 0
        leverage = compute_a(self.amp)
        d0 = _precise(compute_d(leverage, swap_token_a_amount, swap_token_b_amount))
        deposit_amount, other_amount = self._ordered(
            trade_direction, swap_token_a_amount, swap_token_b_amount
        )
        updated = _bounded(deposit_amount + source_amount, _U128)
        d1 = _precise(compute_d(leverage, updated, other_amount))
        diff = _bounded(d1 - d0, _U256)
        final = _pdiv(_pmul(diff, _precise(pool_supply)), d0)
        return _imprecise(_pfloor(final))

    def withdraw_single_token_type_exact_out(
        self,
        source_amount,
        swap_token_a_amount,
        swap_token_b_amount,
        pool_supply,
        trade_direction,
    ) -> int:
        """Pool tokens burned to withdraw an exact amount of one side."""
        if source_amount == 0:
            return 0
        leverage = compute_a(self.amp)
        d0 = _precise(compute_d(leverage, swap_token_a_amount, swap_token_b_amount))
        withdraw_amount, other_amount = self._ordered(
            trade_direction, swap_token_a_amount, swap_token_b_amount
        )
        updated = _bounded(withdraw_amount - source_amount, _U128)
        d1 = _precise(compute_d(leverage, updated, other_amount))
        diff = _bounded(d0 - d1, _U256)
        final = _pdiv(_pmul(diff, _precise(pool_supply)), d0)
        return _imprecise(_pceiling(final))

    def normalized_value(self, swap_token_a_amount, swap_token_b_amount) -> int:
        """The invariant D of the pool."""
        return compute_d(compute_a(self.amp), swap_token_a_amount, swap_token_b_amount)

    def validate(self) -> None:
        """Any amplification value that fits in 64 bits is accepted."""
        _bounded(self.amp, _U64)

    def pack(self) -> bytes:
        return _bounded(self.amp, _U64).to_bytes(self.LEN, "little")

    @classmethod
    def unpack(cls, data) -> "StableCurve":
        if len(data) != cls.LEN:
            raise InvalidAccountDataError("stable curve data must be 8 bytes")
        return cls(amp=int.from_bytes(bytes(data), "little"))