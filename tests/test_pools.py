import pytest

from poolquote.pools import MercurialPool, SaberPool
from poolquote.serialize import InvalidAccountDataError, Pubkey
from poolquote.stable import Stable


def _key(n: int) -> Pubkey:
    return Pubkey(bytes([n]) * 32)


MINT_A = _key(1)
MINT_B = _key(2)
VAULT_A = _key(3)
VAULT_B = _key(4)
POOL = _key(5)
AUTHORITY = _key(6)
LP_MINT = _key(7)
FEE_A = _key(8)
FEE_B = _key(9)
UNKNOWN = _key(10)

KINDS = ["mercurial", "saber"]


def _tokens():
    return {
        str(MINT_A): {
            "tag": "usdc",
            "name": "USD Coin",
            "mint": str(MINT_A),
            "scale": 6,
            "addr": str(VAULT_A),
        },
        str(MINT_B): {
            "tag": "usdt",
            "name": "Tether",
            "mint": str(MINT_B),
            "scale": 9,
            "addr": str(VAULT_B),
        },
    }


def _mercurial(multipliers=(1, 1), fee_numerator=4_000_000, amp=100):
    return MercurialPool.from_dict(
        {
            "pool_account": str(POOL),
            "pool_token_mint": str(LP_MINT),
            "authority": str(AUTHORITY),
            "token_ids": [str(MINT_B), str(MINT_A)],
            "tokens": _tokens(),
            "amp": amp,
            "fee_numerator": fee_numerator,
            "admin_numerator": 0,
            "precision_factor": 1,
            "precision_multiplier": list(multipliers),
        }
    )


def _saber(fee_numerator=4, fee_denominator=10_000, amp=100):
    return SaberPool.from_dict(
        {
            "pool_account": str(POOL),
            "authority": str(AUTHORITY),
            "pool_token_mint": str(LP_MINT),
            "token_ids": [str(MINT_B), str(MINT_A)],
            "tokens": _tokens(),
            "target_amp": amp,
            "fee_numerator": fee_numerator,
            "fee_denominator": fee_denominator,
            "fee_accounts": {str(MINT_A): str(FEE_A), str(MINT_B): str(FEE_B)},
        }
    )


def _make(kind):
    if kind == "mercurial":
        return _mercurial()
    return _saber()


def _account_data(mint: Pubkey, amount: int) -> bytes:
    return (
        mint.to_bytes()
        + bytes(32)
        + amount.to_bytes(8, "little")
        + bytes(36)
        + bytes([1])
        + bytes(12)
        + bytes(8)
        + bytes(36)
    )


def test_mercurial_from_dict_fields():
    pool = _mercurial(multipliers=(3, 5))
    assert pool.pool_account == POOL
    assert pool.authority == AUTHORITY
    assert pool.precision_multiplier == [3, 5]
    assert pool.tokens[str(MINT_A)].addr == VAULT_A
    assert pool.pool_amounts == {}


def test_saber_from_dict_fee_accounts():
    pool = _saber()
    assert pool.fee_accounts[str(MINT_B)] == FEE_B
    assert pool.target_amp == 100
    assert pool.tokens[str(MINT_B)].scale == 9


def test_names():
    assert _mercurial().get_name() == "Mercurial"
    assert _saber().get_name() == "Saber"


@pytest.mark.parametrize("kind", KINDS)
def test_get_mints_sorted(kind):
    pool = _make(kind)
    assert pool.get_mints() == [MINT_A, MINT_B]


@pytest.mark.parametrize("kind", KINDS)
def test_update_accounts_follow_sorted_mints(kind):
    pool = _make(kind)
    assert pool.get_update_accounts() == [VAULT_A, VAULT_B]


@pytest.mark.parametrize("kind", KINDS)
def test_mint_lookups(kind):
    pool = _make(kind)
    assert pool.mint_2_addr(MINT_B) == VAULT_B
    assert pool.mint_2_scale(MINT_A) == 6
    with pytest.raises(KeyError):
        pool.mint_2_addr(UNKNOWN)


@pytest.mark.parametrize("kind", KINDS)
def test_set_update_accounts_round_trip(kind):
    pool = _make(kind)
    pool.set_update_accounts([_account_data(MINT_A, 1_000_000), _account_data(MINT_B, 2_500_000)])
    assert pool.pool_amounts == {str(MINT_A): 1_000_000, str(MINT_B): 2_500_000}


@pytest.mark.parametrize("kind", KINDS)
def test_set_update_accounts_missing_account(kind):
    pool = _make(kind)
    with pytest.raises(ValueError):
        pool.set_update_accounts([_account_data(MINT_A, 5), None])
    with pytest.raises(ValueError):
        pool.set_update_accounts([_account_data(MINT_A, 5)])


def test_set_update_accounts_bad_data():
    pool = _saber()
    with pytest.raises(InvalidAccountDataError):
        pool.set_update_accounts([b"short", _account_data(MINT_B, 5)])


@pytest.mark.parametrize("kind", KINDS)
def test_can_trade(kind):
    pool = _make(kind)
    pool.set_update_accounts([_account_data(MINT_A, 10), _account_data(MINT_B, 20)])
    assert pool.can_trade(MINT_A, MINT_B) is True
    pool.set_update_accounts([_account_data(MINT_A, 0), _account_data(MINT_B, 20)])
    assert pool.can_trade(MINT_A, MINT_B) is False


def test_saber_quote_matches_stable_calculator():
    pool = _saber()
    pool.set_update_accounts(
        [_account_data(MINT_A, 5_000_000_000), _account_data(MINT_B, 7_000_000_000)]
    )
    quote = pool.get_quote_with_amounts_scaled(1_000_000, MINT_A, MINT_B)
    expected = Stable(100, 4, 10_000).get_quote((5_000_000_000, 7_000_000_000), (1, 1), 1_000_000)
    assert quote == expected
    assert 0 < quote < 1_000_000 * 2


def test_saber_full_fee_gives_nothing():
    pool = _saber(fee_numerator=1, fee_denominator=1)
    pool.set_update_accounts([_account_data(MINT_A, 10**9), _account_data(MINT_B, 10**9)])
    assert pool.get_quote_with_amounts_scaled(10**6, MINT_A, MINT_B) == 0


def test_mercurial_quote_uses_fixed_fee_denominator_and_multipliers():
    pool = _mercurial(multipliers=(1, 1000), fee_numerator=4_000_000)
    # token_ids are [MINT_B, MINT_A], so MINT_B carries multiplier 1 and MINT_A 1000
    pool.set_update_accounts([_account_data(MINT_A, 2_000_000), _account_data(MINT_B, 3 * 10**9)])
    quote = pool.get_quote_with_amounts_scaled(1_000, MINT_A, MINT_B)
    expected = Stable(100, 4_000_000, 10**10).get_quote((2_000_000, 3 * 10**9), (1000, 1), 1_000)
    assert quote == expected
    reverse = pool.get_quote_with_amounts_scaled(10**6, MINT_B, MINT_A)
    expected_reverse = Stable(100, 4_000_000, 10**10).get_quote(
        (3 * 10**9, 2_000_000), (1, 1000), 10**6
    )
    assert reverse == expected_reverse


def test_mercurial_symmetric_pool_symmetric_quotes():
    pool = _mercurial()
    pool.set_update_accounts([_account_data(MINT_A, 10**12), _account_data(MINT_B, 10**12)])
    forward = pool.get_quote_with_amounts_scaled(10**6, MINT_A, MINT_B)
    backward = pool.get_quote_with_amounts_scaled(10**6, MINT_B, MINT_A)
    assert forward == backward
    assert 0 < forward <= 10**6


@pytest.mark.parametrize("kind", KINDS)
def test_quote_grows_with_amount(kind):
    pool = _make(kind)
    pool.set_update_accounts([_account_data(MINT_A, 10**10), _account_data(MINT_B, 10**10)])
    small = pool.get_quote_with_amounts_scaled(10**5, MINT_A, MINT_B)
    large = pool.get_quote_with_amounts_scaled(10**7, MINT_A, MINT_B)
    assert small < large


@pytest.mark.parametrize("kind", KINDS)
def test_quote_without_balances_raises(kind):
    pool = _make(kind)
    with pytest.raises(KeyError):
        pool.get_quote_with_amounts_scaled(100, MINT_A, MINT_B)