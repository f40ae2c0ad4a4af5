"""
Pool-creation constraints.

These checks run only when a pool is initialized. They are stricter than the
per-swap validation in ``fees.py``: a pool must start with liquidity on both
sides and with a fee below roughly one third of the input.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ErrorCode, swap_error
from .fees import Fees


DEFAULT_FEE_MULTIPLIER = 3


@dataclass(frozen=True)
class SwapConstraints:
    """Initialization policy; ``fee_multiplier=3`` caps fees below 33%."""

    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER

    def __post_init__(self) -> None:
        if not isinstance(self.fee_multiplier, int) or isinstance(self.fee_multiplier, bool):
            raise TypeError("fee_multiplier must be an int")
        if self.fee_multiplier < 1:
            raise ValueError(f"fee_multiplier must be >= 1: {self.fee_multiplier}")

    def validate_fees(self, fees: Fees) -> None:
        # (0, 0) fails here too: a pool must charge a nonzero fee.
        if fees.trade_fee_denominator > fees.trade_fee_numerator * self.fee_multiplier:
            return
        raise swap_error(
            ErrorCode.INVALID_FEE,
            f"fee {fees.trade_fee_numerator}/{fees.trade_fee_denominator} "
            f"must be below 1/{self.fee_multiplier}",
        )


def validate_supply(token_a_amount: int, token_b_amount: int) -> None:
    """Both sides of a new constant-product pool must hold tokens."""
    if token_a_amount == 0:
        raise swap_error(ErrorCode.EMPTY_SUPPLY, "token A balance is zero")
    if token_b_amount == 0:
        raise swap_error(ErrorCode.EMPTY_SUPPLY, "token B balance is zero")


def validate_fees(fees: Fees, constraints: SwapConstraints = SwapConstraints()) -> None:
    constraints.validate_fees(fees)
