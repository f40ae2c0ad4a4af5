"""
Trading fee model (deterministic, integer-only).

A fee schedule is a numerator/denominator fraction of the swap input. The
pattern here is a **minimum fee**: once a nonzero fee is configured, no trade
can round its fee down to zero.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..state.canonical import ByteReader, encode_u64
from .checked_math import U128_MAX, require_u64
from .errors import ErrorCode, swap_error


FEES_LEN = 16


def calculate_fee(token_amount: int, fee_numerator: int, fee_denominator: int) -> int:
    """
    Compute ``floor(token_amount * fee_numerator / fee_denominator)``.

    Returns 0 when either the amount or the numerator is 0. Any other result
    that floors to 0 is bumped to 1 (minimum fee of one token).

    Raises:
        NumericError: if the product leaves u128 or the denominator is 0
    """
    if fee_numerator == 0 or token_amount == 0:
        return 0
    product = token_amount * fee_numerator
    if product > U128_MAX:
        raise swap_error(ErrorCode.FEE_CALCULATION_FAILURE, "fee product overflows u128")
    if fee_denominator == 0:
        raise swap_error(ErrorCode.FEE_CALCULATION_FAILURE, "fee denominator is zero")
    fee = product // fee_denominator
    if fee == 0:
        return 1
    return fee


def validate_fraction(numerator: int, denominator: int) -> None:
    if numerator == 0 and denominator == 0:
        return
    if numerator >= denominator:
        raise swap_error(ErrorCode.INVALID_FEE, f"{numerator}/{denominator}")


@dataclass(frozen=True)
class Fees:
    """
    Fee schedule of a pool.

    Trade fees are withheld from the swap input and routed to the pool's fee
    account for the input side. ``Fees()`` (0/0) means "no fee".
    """

    trade_fee_numerator: int = 0
    trade_fee_denominator: int = 0

    def __post_init__(self) -> None:
        require_u64("trade_fee_numerator", self.trade_fee_numerator)
        require_u64("trade_fee_denominator", self.trade_fee_denominator)

    def trading_fee(self, trading_tokens: int) -> int:
        """Fee owed on ``trading_tokens`` of input."""
        return calculate_fee(trading_tokens, self.trade_fee_numerator, self.trade_fee_denominator)

    def validate(self) -> None:
        """Raise ``InvalidFee`` unless the fraction is 0/0 or strictly below 1."""
        validate_fraction(self.trade_fee_numerator, self.trade_fee_denominator)

    def pack(self) -> bytes:
        return encode_u64(self.trade_fee_numerator) + encode_u64(self.trade_fee_denominator)

    @classmethod
    def unpack(cls, data: bytes) -> "Fees":
        if len(data) != FEES_LEN:
            raise swap_error(ErrorCode.INVALID_ACCOUNT_DATA, f"fee record must be {FEES_LEN} bytes")
        return cls.read_from(ByteReader(data, error_code=ErrorCode.INVALID_ACCOUNT_DATA))

    @classmethod
    def read_from(cls, reader: ByteReader) -> "Fees":
        numerator = reader.read_u64("trade_fee_numerator")
        denominator = reader.read_u64("trade_fee_denominator")
        return cls(trade_fee_numerator=numerator, trade_fee_denominator=denominator)
