# [TESTER] v1

from __future__ import annotations

import pytest

from tokenswap.core.errors import ErrorCode, InstructionError, NumericError, SwapError
from tokenswap.core.fees import FEES_LEN, Fees, calculate_fee


def test_calculate_fee_floors_the_fraction() -> None:
    assert calculate_fee(1000, 1, 100) == 10
    assert calculate_fee(1999, 1, 100) == 19


def test_calculate_fee_bumps_nonzero_dust_to_one() -> None:
    assert calculate_fee(50, 1, 100) == 1
    assert calculate_fee(1, 1, 10_000) == 1


def test_calculate_fee_is_zero_without_amount_or_numerator() -> None:
    assert calculate_fee(0, 1, 100) == 0
    assert calculate_fee(1000, 0, 100) == 0
    # A zero numerator short-circuits before the denominator is looked at.
    assert calculate_fee(1000, 0, 0) == 0


def test_calculate_fee_rejects_zero_denominator() -> None:
    with pytest.raises(NumericError) as excinfo:
        calculate_fee(1000, 1, 0)
    assert excinfo.value.code is ErrorCode.FEE_CALCULATION_FAILURE


def test_calculate_fee_rejects_u128_overflow() -> None:
    with pytest.raises(NumericError, match="FeeCalculationFailure"):
        calculate_fee(1 << 100, 1 << 40, 3)


def test_fees_validate_accepts_zero_and_proper_fractions() -> None:
    Fees(0, 0).validate()
    Fees(1, 100).validate()
    Fees(99, 100).validate()


@pytest.mark.parametrize("numerator,denominator", [(1, 1), (2, 1), (1, 0)])
def test_fees_validate_rejects_fractions_at_or_above_one(numerator: int, denominator: int) -> None:
    with pytest.raises(SwapError) as excinfo:
        Fees(numerator, denominator).validate()
    assert excinfo.value.code is ErrorCode.INVALID_FEE


def test_fees_pack_layout_is_two_little_endian_u64() -> None:
    packed = Fees(1, 100).pack()
    assert len(packed) == FEES_LEN
    assert packed == (1).to_bytes(8, "little") + (100).to_bytes(8, "little")
    assert Fees.unpack(packed) == Fees(1, 100)


def test_fees_unpack_requires_exact_length() -> None:
    with pytest.raises(SwapError) as excinfo:
        Fees.unpack(bytes(15))
    assert excinfo.value.code is ErrorCode.INVALID_ACCOUNT_DATA
    assert not isinstance(excinfo.value, InstructionError)


def test_fees_fields_must_be_u64() -> None:
    with pytest.raises(ValueError):
        Fees(-1, 100)
    with pytest.raises(ValueError):
        Fees(1, 1 << 64)
    with pytest.raises(TypeError):
        Fees(True, 100)


def test_trading_fee_uses_schedule() -> None:
    assert Fees(3, 1000).trading_fee(10_000) == 30
    assert Fees().trading_fee(10_000) == 0
