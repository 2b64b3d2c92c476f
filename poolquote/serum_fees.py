"""Order-book taker and maker fee schedule."""

from __future__ import annotations

from enum import IntEnum

_FRAC_BITS = 64
_FRAC_MASK = (1 << _FRAC_BITS) - 1
_ONE = 1 << _FRAC_BITS
_U64 = 1 << 64
_ONE_SRM = 1_000_000

_STABLE_MARKETS = frozenset(
    {
        "77quYg4MGneUdjgXCunt9GgM1usmrxKY31twEy3WHwcS",
        "5cLrMai1DsLRYc1Nio9qMTicsWtvzjzZfJPXyAoF4t1Z",
        "EERNEEnBqdGzBS8dd46wwNY5F2kwnaCQ3vsq2fNKGogZ",
        "8sFf9TW3KzxLiBXcDcjAxqabEsRroo4EiRr3UG1xbJ9m",
        "2iDSTGhjJEiRxNaLF27CY6daMYPs5hgYrP2REHd5YD62",
    }
)


def _check_u64(value: int) -> int:
    if value < 0 or value >= _U64:
        raise OverflowError("quantity does not fit in 64 bits")
    return value


def _fee_tenth_of_bps(tenth_of_bps: int) -> int:
    """Rate as a 64.64 fixed-point number."""
    return (tenth_of_bps << _FRAC_BITS) // 100_000


def _rebate_tenth_of_bps(tenth_of_bps: int) -> int:
    return _fee_tenth_of_bps(tenth_of_bps) + 1


_TAKER_TENTH_BPS = {
    0: 40,
    1: 39,
    2: 38,
    3: 36,
    4: 34,
    5: 32,
    6: 30,
    7: 10,
}


class FeeTier(IntEnum):
    BASE = 0
    SRM2 = 1
    SRM3 = 2
    SRM4 = 3
    SRM5 = 4
    SRM6 = 5
    MSRM = 6
    STABLE = 7

    @classmethod
    def from_srm_and_msrm_balances(cls, market, srm_held: int, msrm_held: int) -> "FeeTier":
        """Pick the tier for a market given the trader's SRM and MSRM holdings."""
        if str(market) in _STABLE_MARKETS:
            return cls.STABLE
        if msrm_held >= 1:
            return cls.MSRM
        thresholds = (
            (1_000_000, cls.SRM6),
            (100_000, cls.SRM5),
            (10_000, cls.SRM4),
            (1_000, cls.SRM3),
            (100, cls.SRM2),
        )
        for multiple, tier in thresholds:
            if srm_held >= _ONE_SRM * multiple:
                return tier
        return cls.BASE

    def _taker_rate(self) -> int:
        return _fee_tenth_of_bps(_TAKER_TENTH_BPS[int(self)])

    def maker_rebate(self, pc_qty: int) -> int:
        return (_rebate_tenth_of_bps(0) * _check_u64(pc_qty)) >> _FRAC_BITS

    def taker_fee(self, pc_qty: int) -> int:
        """Fee charged on a fill, rounded up."""
        exact = self._taker_rate() * _check_u64(pc_qty)
        return (exact >> _FRAC_BITS) + (1 if exact & _FRAC_MASK else 0)

    def remove_taker_fee(self, pc_qty_incl_fee: int) -> int:
        """Largest quantity whose value plus fee fits in the given amount."""
        numerator = _check_u64(pc_qty_incl_fee) << _FRAC_BITS
        return _check_u64(numerator // (_ONE + self._taker_rate()))


def referrer_rebate(amount: int) -> int:
    return amount // 5