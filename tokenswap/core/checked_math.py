"""Checked fixed-width integer helpers.

Python ints never wrap, so the widths of the on-ledger representation are
enforced explicitly: amounts and balances are u64, intermediate products of two
balances are u128. Narrowing that would lose value raises instead of
truncating.
"""

from __future__ import annotations

from .errors import ErrorCode, swap_error

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1


def require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u64(name: str, value: int) -> int:
    """Validate a caller-supplied u64 field (raises ValueError, not a SwapError)."""
    require_int(name, value)
    if not (0 <= value <= U64_MAX):
        raise ValueError(f"{name} must be in [0, 2**64): {value}")
    return value


def to_u64(value: int) -> int:
    """Narrow to u64; ``ConversionFailure`` if the value does not fit."""
    if not (0 <= value <= U64_MAX):
        raise swap_error(ErrorCode.CONVERSION_FAILURE, f"{value} does not fit in u64")
    return value


def to_u128(value: int) -> int:
    if not (0 <= value <= U128_MAX):
        raise swap_error(ErrorCode.CONVERSION_FAILURE, f"{value} does not fit in u128")
    return value


def checked_mul(a: int, b: int) -> int:
    """u128 multiplication; ``CalculationFailure`` on overflow."""
    product = a * b
    if product > U128_MAX:
        raise swap_error(ErrorCode.CALCULATION_FAILURE, "u128 multiplication overflow")
    return product


def checked_add(a: int, b: int) -> int:
    total = a + b
    if total > U128_MAX:
        raise swap_error(ErrorCode.CALCULATION_FAILURE, "u128 addition overflow")
    return total


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise swap_error(ErrorCode.CALCULATION_FAILURE, "subtraction underflow")
    return a - b


def checked_div(numerator: int, denominator: int) -> int:
    """Floor division that refuses a zero divisor."""
    if denominator == 0:
        raise swap_error(ErrorCode.CALCULATION_FAILURE, "division by zero")
    return numerator // denominator
