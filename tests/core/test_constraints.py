# [TESTER] v1

from __future__ import annotations

import pytest

from tokenswap.core.constraints import SwapConstraints, validate_fees, validate_supply
from tokenswap.core.errors import BusinessRuleError, ErrorCode
from tokenswap.core.fees import Fees


def test_default_multiplier_accepts_fees_below_one_third() -> None:
    validate_fees(Fees(1, 100))
    validate_fees(Fees(1, 4))


def test_default_multiplier_rejects_one_third_and_above() -> None:
    with pytest.raises(BusinessRuleError) as excinfo:
        validate_fees(Fees(1, 3))
    assert excinfo.value.code is ErrorCode.INVALID_FEE
    with pytest.raises(BusinessRuleError):
        validate_fees(Fees(1, 2))


def test_zero_fee_is_rejected_at_creation() -> None:
    with pytest.raises(BusinessRuleError, match="InvalidFee"):
        validate_fees(Fees(0, 0))


def test_custom_multiplier() -> None:
    strict = SwapConstraints(fee_multiplier=100)
    strict.validate_fees(Fees(1, 101))
    with pytest.raises(BusinessRuleError):
        strict.validate_fees(Fees(1, 100))


def test_constraints_reject_bad_multiplier() -> None:
    with pytest.raises(ValueError):
        SwapConstraints(fee_multiplier=0)
    with pytest.raises(TypeError):
        SwapConstraints(fee_multiplier="3")  # type: ignore[arg-type]


def test_validate_supply() -> None:
    validate_supply(1, 1)
    for a, b in ((0, 1), (1, 0), (0, 0)):
        with pytest.raises(BusinessRuleError) as excinfo:
            validate_supply(a, b)
        assert excinfo.value.code is ErrorCode.EMPTY_SUPPLY
