"""
Pool state record and its fixed 274-byte layout.

Layout (offsets cumulative, integers little-endian):

    is_initialized        1
    bump_seed             1
    token_program_id     32
    token_a              32
    token_b              32
    pool_mint            32
    token_a_mint         32
    token_b_mint         32
    token_a_fee_account  32
    token_b_fee_account  32
    fees                 16  (numerator u64, denominator u64)

The field order is part of the binary format and must not change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from ..core.errors import ErrorCode, swap_error
from ..core.fees import FEES_LEN, Fees
from .accounts import Address, require_address
from .canonical import ADDRESS_LEN, ByteReader, encode_address, encode_u8, address_to_hex


_ADDRESS_FIELDS: Tuple[str, ...] = (
    "token_program_id",
    "token_a",
    "token_b",
    "pool_mint",
    "token_a_mint",
    "token_b_mint",
    "token_a_fee_account",
    "token_b_fee_account",
)

POOL_LEN = 1 + 1 + ADDRESS_LEN * len(_ADDRESS_FIELDS) + FEES_LEN

_ZERO_ADDRESS = bytes(ADDRESS_LEN)


@dataclass(frozen=True)
class SwapPool:
    """
    Identity, linked accounts and fee schedule of one pool.

    Balances are deliberately absent: they live on the ledger and are read
    fresh by every operation.
    """

    is_initialized: bool = False
    bump_seed: int = 0
    token_program_id: Address = _ZERO_ADDRESS
    token_a: Address = _ZERO_ADDRESS
    token_b: Address = _ZERO_ADDRESS
    pool_mint: Address = _ZERO_ADDRESS
    token_a_mint: Address = _ZERO_ADDRESS
    token_b_mint: Address = _ZERO_ADDRESS
    token_a_fee_account: Address = _ZERO_ADDRESS
    token_b_fee_account: Address = _ZERO_ADDRESS
    fees: Fees = field(default_factory=Fees)

    def __post_init__(self) -> None:
        if not isinstance(self.is_initialized, bool):
            raise TypeError("is_initialized must be a bool")
        if not isinstance(self.bump_seed, int) or isinstance(self.bump_seed, bool) or not (0 <= self.bump_seed <= 0xFF):
            raise ValueError(f"bump_seed must be in [0, 255]: {self.bump_seed!r}")
        for name in _ADDRESS_FIELDS:
            require_address(name, getattr(self, name))
        if not isinstance(self.fees, Fees):
            raise TypeError("fees must be a Fees instance")

    def pack(self) -> bytes:
        out = bytearray()
        out += encode_u8(1 if self.is_initialized else 0)
        out += encode_u8(self.bump_seed)
        for name in _ADDRESS_FIELDS:
            out += encode_address(getattr(self, name))
        out += self.fees.pack()
        if len(out) != POOL_LEN:
            raise AssertionError(f"packed pool is {len(out)} bytes, expected {POOL_LEN}")
        return bytes(out)

    @classmethod
    def unpack_unchecked(cls, data: bytes) -> "SwapPool":
        """
        Decode a record whether or not it is initialized.

        Raises:
            AccountError: ``InvalidAccountData`` on a wrong length or an
                initialization flag other than 0/1
        """
        if len(data) != POOL_LEN:
            raise swap_error(ErrorCode.INVALID_ACCOUNT_DATA, f"pool record must be {POOL_LEN} bytes, got {len(data)}")
        reader = ByteReader(data, error_code=ErrorCode.INVALID_ACCOUNT_DATA)
        flag = reader.read_u8("is_initialized")
        if flag not in (0, 1):
            raise swap_error(ErrorCode.INVALID_ACCOUNT_DATA, f"invalid is_initialized byte: {flag}")
        bump_seed = reader.read_u8("bump_seed")
        addresses = {name: reader.read_address(name) for name in _ADDRESS_FIELDS}
        fees = Fees.read_from(reader)
        return cls(is_initialized=bool(flag), bump_seed=bump_seed, fees=fees, **addresses)

    @classmethod
    def unpack(cls, data: bytes) -> "SwapPool":
        """Decode an initialized record; ``UninitializedAccount`` otherwise."""
        pool = cls.unpack_unchecked(data)
        if not pool.is_initialized:
            raise swap_error(ErrorCode.UNINITIALIZED_ACCOUNT)
        return pool

    def __repr__(self) -> str:
        return (
            f"SwapPool(initialized={self.is_initialized}, bump_seed={self.bump_seed}, "
            f"token_a={address_to_hex(self.token_a)[:12]}..., "
            f"token_b={address_to_hex(self.token_b)[:12]}..., "
            f"fees={self.fees.trade_fee_numerator}/{self.fees.trade_fee_denominator})"
        )
