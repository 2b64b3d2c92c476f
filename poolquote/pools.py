"""Stable-swap pools that quote from their two vault balances."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from poolquote.serialize import Pubkey, Token, unpack_token_account
from poolquote.stable import Stable

_MERCURIAL_FEE_DENOMINATOR = 10**10


def _tokens_from_dict(raw: Mapping[str, Any]) -> dict[str, Token]:
    return {key: Token.from_dict(value) for key, value in raw.items()}


def _sorted_mints(token_ids: Iterable[str]) -> list[Pubkey]:
    return sorted(Pubkey.from_string(token_id) for token_id in token_ids)


def _all_nonzero(pool_amounts: Mapping[str, int]) -> bool:
    return all(amount != 0 for amount in pool_amounts.values())


def _record_balances(
    mints: list[Pubkey], accounts: Iterable[bytes | None], pool_amounts: dict[str, int]
) -> None:
    mints = mints[:2]
    data = list(accounts)
    if len(data) < len(mints):
        raise ValueError("an account is needed for each pool mint")
    for mint, account in zip(mints, data):
        if account is None:
            raise ValueError(f"account data for mint {mint} is missing")
        pool_amounts[str(mint)] = unpack_token_account(account).amount


@dataclass
class MercurialPool:
    pool_account: Pubkey
    pool_token_mint: Pubkey
    authority: Pubkey
    token_ids: list[str]
    tokens: dict[str, Token]
    amp: int
    fee_numerator: int
    admin_numerator: int
    precision_factor: int
    precision_multiplier: list[int]
    pool_amounts: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MercurialPool":
        return cls(
            pool_account=Pubkey.from_string(data["pool_account"]),
            pool_token_mint=Pubkey.from_string(data["pool_token_mint"]),
            authority=Pubkey.from_string(data["authority"]),
            token_ids=[str(token_id) for token_id in data["token_ids"]],
            tokens=_tokens_from_dict(data["tokens"]),
            amp=int(data["amp"]),
            fee_numerator=int(data["fee_numerator"]),
            admin_numerator=int(data["admin_numerator"]),
            precision_factor=int(data["precision_factor"]),
            precision_multiplier=[int(m) for m in data["precision_multiplier"]],
        )

    def get_quote_with_amounts_scaled(
        self, scaled_amount_in: int, mint_in: Pubkey, mint_out: Pubkey
    ) -> int:
        calculator = Stable(
            amp=self.amp,
            fee_numerator=self.fee_numerator,
            fee_denominator=_MERCURIAL_FEE_DENOMINATOR,
        )
        pool_amounts = (self.pool_amounts[str(mint_in)], self.pool_amounts[str(mint_out)])
        input_idx = self.token_ids.index(str(mint_in))
        output_idx = (input_idx + 1) % 2
        multipliers = (
            self.precision_multiplier[input_idx],
            self.precision_multiplier[output_idx],
        )
        return calculator.get_quote(pool_amounts, multipliers, scaled_amount_in)

    def can_trade(self, mint_in: Pubkey, mint_out: Pubkey) -> bool:
        """A pool can trade only while no vault is empty."""
        return _all_nonzero(self.pool_amounts)

    def get_name(self) -> str:
        return "Mercurial"

    def get_update_accounts(self) -> list[Pubkey]:
        """Vault addresses to fetch, in the order of the sorted mints."""
        return [self.mint_2_addr(mint) for mint in self.get_mints()]

    def set_update_accounts(self, accounts: Iterable[bytes | None]) -> None:
        """Record vault balances from token account data, ordered like get_update_accounts."""
        _record_balances(self.get_mints(), accounts, self.pool_amounts)

    def mint_2_addr(self, mint: Pubkey) -> Pubkey:
        return self.tokens[str(mint)].addr

    def mint_2_scale(self, mint: Pubkey) -> int:
        return self.tokens[str(mint)].scale

    def get_mints(self) -> list[Pubkey]:
        """Pool mints, sorted so the order is the same across pools."""
        return _sorted_mints(self.token_ids)


@dataclass
class SaberPool:
    pool_account: Pubkey
    authority: Pubkey
    pool_token_mint: Pubkey
    token_ids: list[str]
    tokens: dict[str, Token]
    target_amp: int
    fee_numerator: int
    fee_denominator: int
    fee_accounts: dict[str, Pubkey]
    pool_amounts: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SaberPool":
        return cls(
            pool_account=Pubkey.from_string(data["pool_account"]),
            authority=Pubkey.from_string(data["authority"]),
            pool_token_mint=Pubkey.from_string(data["pool_token_mint"]),
            token_ids=[str(token_id) for token_id in data["token_ids"]],
            tokens=_tokens_from_dict(data["tokens"]),
            target_amp=int(data["target_amp"]),
            fee_numerator=int(data["fee_numerator"]),
            fee_denominator=int(data["fee_denominator"]),
            fee_accounts={
                key: Pubkey.from_string(value) for key, value in data["fee_accounts"].items()
            },
        )

    def get_quote_with_amounts_scaled(
        self, scaled_amount_in: int, mint_in: Pubkey, mint_out: Pubkey
    ) -> int:
        calculator = Stable(
            amp=self.target_amp,
            fee_numerator=self.fee_numerator,
            fee_denominator=self.fee_denominator,
        )
        pool_amounts = (self.pool_amounts[str(mint_in)], self.pool_amounts[str(mint_out)])
        return calculator.get_quote(pool_amounts, (1, 1), scaled_amount_in)

    def can_trade(self, mint_in: Pubkey, mint_out: Pubkey) -> bool:
        """A pool can trade only while no vault is empty."""
        return _all_nonzero(self.pool_amounts)

    def get_name(self) -> str:
        return "Saber"

    def get_update_accounts(self) -> list[Pubkey]:
        """Vault addresses to fetch, in the order of the sorted mints."""
        return [self.mint_2_addr(mint) for mint in self.get_mints()]

    def set_update_accounts(self, accounts: Iterable[bytes | None]) -> None:
        """Record vault balances from token account data, ordered like get_update_accounts."""
        _record_balances(self.get_mints(), accounts, self.pool_amounts)

    def mint_2_addr(self, mint: Pubkey) -> Pubkey:
        return self.tokens[str(mint)].addr

    def mint_2_scale(self, mint: Pubkey) -> int:
        return self.tokens[str(mint)].scale

    def get_mints(self) -> list[Pubkey]:
        """Pool mints, sorted so the order is the same across pools."""
        return _sorted_mints(self.token_ids)