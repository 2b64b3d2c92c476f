"""Pool description records and the on-chain token account layout."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {ch: i for i, ch in enumerate(_ALPHABET)}
_PUBKEY_LEN = 32
_MAX_PUBKEY_STR_LEN = 44


class InvalidAccountDataError(ValueError):
    """Raised when account bytes do not follow the expected layout."""


def _b58encode(raw: bytes) -> str:
    n = int.from_bytes(raw, "big")
    digits = []
    while n:
        n, rem = divmod(n, 58)
        digits.append(_ALPHABET[rem])
    leading_zeros = len(raw) - len(raw.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


def _b58decode(text: str) -> bytes:
    n = 0
    for ch in text:
        try:
            n = n * 58 + _INDEX[ch]
        except KeyError:
            raise ValueError(f"invalid base58 character {ch!r}") from None
    leading_ones = len(text) - len(text.lstrip("1"))
    body = n.to_bytes((n.bit_length() + 7) // 8, "big")
    return b"\0" * leading_ones + body


@dataclass(frozen=True, order=True)
class Pubkey:
    """A 32-byte public key, shown in base58."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)) or len(self.raw) != _PUBKEY_LEN:
            raise ValueError("a public key is exactly 32 bytes")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def from_string(cls, s: str) -> "Pubkey":
        """Parse a base58 string into a key."""
        if len(s) > _MAX_PUBKEY_STR_LEN:
            raise ValueError("public key string is too long")
        raw = _b58decode(s)
        if len(raw) != _PUBKEY_LEN:
            raise ValueError("public key string does not decode to 32 bytes")
        return cls(raw)

    def to_bytes(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return _b58encode(self.raw)

    def __repr__(self) -> str:
        return f"Pubkey({str(self)!r})"


@dataclass(frozen=True)
class Token:
    """A token held by a pool, as described in the pool JSON files."""

    tag: str
    name: str
    mint: Pubkey
    scale: int
    addr: Pubkey

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Token":
        return cls(
            tag=str(data["tag"]),
            name=str(data["name"]),
            mint=Pubkey.from_string(data["mint"]),
            scale=int(data["scale"]),
            addr=Pubkey.from_string(data["addr"]),
        )


@dataclass(frozen=True)
class Fraction:
    numerator: int
    denominator: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Fraction":
        return cls(numerator=int(data["numerator"]), denominator=int(data["denominator"]))


@dataclass(frozen=True)
class JSONFeeStructure:
    """Trader and owner fees of a pool."""

    trader_fee: Fraction
    owner_fee: Fraction

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JSONFeeStructure":
        return cls(
            trader_fee=Fraction.from_dict(data["traderFee"]),
            owner_fee=Fraction.from_dict(data["ownerFee"]),
        )


class AccountState(IntEnum):
    UNINITIALIZED = 0
    INITIALIZED = 1
    FROZEN = 2


@dataclass(frozen=True)
class TokenAccount:
    """Decoded SPL token account."""

    mint: Pubkey
    owner: Pubkey
    amount: int
    delegate: Pubkey | None = None
    state: AccountState = AccountState.UNINITIALIZED
    is_native: int | None = None
    delegated_amount: int = 0
    close_authority: Pubkey | None = None


_TOKEN_ACCOUNT = struct.Struct("<32s32sQ36sB12sQ36s")
_TAG_NONE = b"\0\0\0\0"
_TAG_SOME = b"\1\0\0\0"


def _optional_key(blob: bytes) -> Pubkey | None:
    tag, body = blob[:4], blob[4:]
    if tag == _TAG_NONE:
        return None
    if tag == _TAG_SOME:
        return Pubkey(body)
    raise InvalidAccountDataError("invalid option tag")


def _optional_u64(blob: bytes) -> int | None:
    tag, body = blob[:4], blob[4:]
    if tag == _TAG_NONE:
        return None
    if tag == _TAG_SOME:
        return int.from_bytes(body, "little")
    raise InvalidAccountDataError("invalid option tag")


def unpack_token_account(data: bytes) -> TokenAccount:
    """Decode the first 165 bytes of a token account."""
    if len(data) < _TOKEN_ACCOUNT.size:
        raise InvalidAccountDataError("token account data is too short")
    mint, owner, amount, delegate, state, is_native, delegated, close = _TOKEN_ACCOUNT.unpack_from(
        bytes(data)
    )
    try:
        account_state = AccountState(state)
    except ValueError:
        raise InvalidAccountDataError(f"invalid account state {state}") from None
    return TokenAccount(
        mint=Pubkey(mint),
        owner=Pubkey(owner),
        amount=amount,
        delegate=_optional_key(delegate),
        state=account_state,
        is_native=_optional_u64(is_native),
        delegated_amount=delegated,
        close_authority=_optional_key(close),
    )