"""
Constant Product Market Maker (CPMM) arithmetic.

This module implements the pool's pricing and share math with deterministic
floor rounding. Inputs are u64 balances/amounts; every intermediate product is
kept within u128 and every result is narrowed back to u64 explicitly.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per operation
- Rounding: amount_out = y - floor(x * y / (x + net)), so the output is rounded up
  and x' * y' may fall below x * y by less than x' (one unit of output)
"""

from __future__ import annotations

from dataclasses import dataclass

from .checked_math import checked_add, checked_div, checked_mul, checked_sub, to_u128, to_u64
from .errors import ErrorCode, swap_error
from .fees import Fees

# Pool-share supply minted when a pool is created, independent of the
# deposited asset amounts.
INITIAL_SWAP_POOL_AMOUNT = 1_000_000_000


@dataclass(frozen=True)
class SwapQuote:
    trading_fee: int
    net_input: int
    amount_out: int


@dataclass(frozen=True)
class DepositQuote:
    pool_token_amount: int
    token_a_amount: int
    token_b_amount: int


@dataclass(frozen=True)
class WithdrawQuote:
    pool_token_amount: int
    token_a_amount: int
    token_b_amount: int


def swap_exact_in(
    source_balance: int,
    destination_balance: int,
    amount_in: int,
    fees: Fees,
    minimum_amount_out: int = 0,
) -> SwapQuote:
    """
    Quote an exact-in swap against the pool's live balances.

        fee        = trading_fee(amount_in)
        net_input  = amount_in - fee
        amount_out = y - floor(x * y / (x + net_input))

    Args:
        source_balance: Pool balance of the input asset (x)
        destination_balance: Pool balance of the output asset (y)
        amount_in: Gross input supplied by the trader
        fees: Pool fee schedule
        minimum_amount_out: Slippage bound

    Returns:
        SwapQuote with the fee, the net input and the output amount

    Raises:
        NumericError: on overflow, narrowing failure or a zero divisor
        BusinessRuleError: ``ExceededSlippage`` if amount_out < minimum_amount_out
    """
    amount_in = to_u128(amount_in)
    trading_fee = fees.trading_fee(amount_in)
    net_input = checked_sub(amount_in, trading_fee)

    x = to_u128(source_balance)
    y = to_u128(destination_balance)
    # (x + net_input) * (y - amount_out) = x * y
    k = checked_mul(x, y)
    amount_out = checked_sub(y, checked_div(k, checked_add(x, net_input)))

    if amount_out < minimum_amount_out:
        raise swap_error(
            ErrorCode.EXCEEDED_SLIPPAGE,
            f"amount_out ({amount_out}) < minimum_amount_out ({minimum_amount_out})",
        )

    return SwapQuote(
        trading_fee=to_u64(trading_fee),
        net_input=to_u64(net_input),
        amount_out=to_u64(amount_out),
    )


def _proportional(balance: int, pool_token_amount: int, pool_supply: int) -> int:
    return checked_div(checked_mul(to_u128(balance), to_u128(pool_token_amount)), pool_supply)


def deposit_amounts(
    balance_a: int,
    balance_b: int,
    pool_token_amount: int,
    pool_supply: int,
    maximum_token_a_amount: int,
    maximum_token_b_amount: int,
) -> DepositQuote:
    """
    Token amounts required to mint ``pool_token_amount`` pool tokens.

    For a pool with live supply:
        token_x = floor(balance_x * pool_token_amount / supply)

    A pool whose share supply has dropped to zero is re-seeded: the caller's
    amount is replaced by ``INITIAL_SWAP_POOL_AMOUNT`` and used as the supply
    too, so the depositor matches the current balances one-for-one.

    Raises:
        BusinessRuleError: ``ExceededSlippage`` above a maximum,
            ``ZeroTradingTokens`` if a side rounds to nothing
    """
    if pool_supply > 0:
        pool_token_amount = to_u128(pool_token_amount)
    else:
        pool_token_amount = INITIAL_SWAP_POOL_AMOUNT
        pool_supply = INITIAL_SWAP_POOL_AMOUNT

    token_a_amount = to_u64(_proportional(balance_a, pool_token_amount, pool_supply))
    if token_a_amount > maximum_token_a_amount:
        raise swap_error(
            ErrorCode.EXCEEDED_SLIPPAGE,
            f"token A required ({token_a_amount}) > maximum ({maximum_token_a_amount})",
        )
    if token_a_amount == 0:
        raise swap_error(ErrorCode.ZERO_TRADING_TOKENS, "token A amount rounds to zero")

    token_b_amount = to_u64(_proportional(balance_b, pool_token_amount, pool_supply))
    if token_b_amount > maximum_token_b_amount:
        raise swap_error(
            ErrorCode.EXCEEDED_SLIPPAGE,
            f"token B required ({token_b_amount}) > maximum ({maximum_token_b_amount})",
        )
    if token_b_amount == 0:
        raise swap_error(ErrorCode.ZERO_TRADING_TOKENS, "token B amount rounds to zero")

    return DepositQuote(
        pool_token_amount=to_u64(pool_token_amount),
        token_a_amount=token_a_amount,
        token_b_amount=token_b_amount,
    )


def _withdraw_side(
    side: str,
    balance: int,
    pool_token_amount: int,
    pool_supply: int,
    minimum: int,
) -> int:
    amount = to_u64(min(_proportional(balance, pool_token_amount, pool_supply), balance))
    if amount < minimum:
        raise swap_error(
            ErrorCode.EXCEEDED_SLIPPAGE,
            f"token {side} out ({amount}) < minimum ({minimum})",
        )
    if amount == 0 and balance != 0:
        raise swap_error(ErrorCode.ZERO_TRADING_TOKENS, f"token {side} amount rounds to zero")
    return amount


def withdraw_amounts(
    balance_a: int,
    balance_b: int,
    pool_token_amount: int,
    pool_supply: int,
    minimum_token_a_amount: int,
    minimum_token_b_amount: int,
) -> WithdrawQuote:
    """
    Token amounts released by burning ``pool_token_amount`` pool tokens.

        token_x = min(floor(balance_x * pool_token_amount / supply), balance_x)

    The clamp means a share larger than the supply can never release more than
    the pool holds.
    """
    if pool_supply == 0:
        raise swap_error(ErrorCode.CALCULATION_FAILURE, "pool token supply is zero")

    token_a_amount = _withdraw_side("A", balance_a, pool_token_amount, pool_supply, minimum_token_a_amount)
    token_b_amount = _withdraw_side("B", balance_b, pool_token_amount, pool_supply, minimum_token_b_amount)
    return WithdrawQuote(
        pool_token_amount=to_u64(pool_token_amount),
        token_a_amount=token_a_amount,
        token_b_amount=token_b_amount,
    )
