"""Exception types for the token swap program.

Every rejection carries an ``ErrorCode``. The concrete exception class encodes
the error kind so callers can catch a whole family (e.g. every
``AuthorizationError``) without matching on codes:

- ``InstructionError``: the instruction buffer could not be decoded.
- ``AuthorizationError``: wrong program / owner / derived authority.
- ``AccountError``: the supplied account set has the wrong shape.
- ``NumericError``: overflow, narrowing or division failure.
- ``BusinessRuleError``: slippage, rounding-to-zero, fee policy.

All of them are terminal for the current operation.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    # decoding
    INVALID_INSTRUCTION = "InvalidInstruction"

    # authorization
    INCORRECT_PROGRAM_ID = "IncorrectProgramId"
    INCORRECT_TOKEN_PROGRAM_ID = "IncorrectTokenProgramId"
    INVALID_PROGRAM_ADDRESS = "InvalidProgramAddress"
    INVALID_OWNER = "InvalidOwner"
    INVALID_OUTPUT_OWNER = "InvalidOutputOwner"

    # account shape
    ALREADY_IN_USE = "AlreadyInUse"
    UNINITIALIZED_ACCOUNT = "UninitializedAccount"
    INVALID_ACCOUNT_DATA = "InvalidAccountData"
    NOT_ENOUGH_ACCOUNT_KEYS = "NotEnoughAccountKeys"
    EXPECTED_ACCOUNT = "ExpectedAccount"
    EXPECTED_MINT = "ExpectedMint"
    REPEATED_MINT = "RepeatedMint"
    INVALID_DELEGATE = "InvalidDelegate"
    INVALID_CLOSE_AUTHORITY = "InvalidCloseAuthority"
    INVALID_FREEZE_AUTHORITY = "InvalidFreezeAuthority"
    INVALID_SUPPLY = "InvalidSupply"
    INVALID_INPUT = "InvalidInput"
    INCORRECT_SWAP_ACCOUNT = "IncorrectSwapAccount"
    INCORRECT_POOL_MINT = "IncorrectPoolMint"
    INCORRECT_FEE_ACCOUNT = "IncorrectFeeAccount"

    # numeric
    CONVERSION_FAILURE = "ConversionFailure"
    CALCULATION_FAILURE = "CalculationFailure"
    FEE_CALCULATION_FAILURE = "FeeCalculationFailure"

    # business rules
    EMPTY_SUPPLY = "EmptySupply"
    EXCEEDED_SLIPPAGE = "ExceededSlippage"
    ZERO_TRADING_TOKENS = "ZeroTradingTokens"
    INVALID_FEE = "InvalidFee"


class SwapError(Exception):
    """Base class for every rejection raised by the swap program."""

    def __init__(self, code: ErrorCode, detail: Optional[str] = None) -> None:
        self.code = code
        self.detail = detail
        msg = code.value if not detail else f"{code.value}: {detail}"
        super().__init__(msg)


class InstructionError(SwapError):
    """Raised when an instruction buffer cannot be decoded."""


class AuthorizationError(SwapError):
    """Raised when an account is not controlled by the expected program or authority."""


class AccountError(SwapError):
    """Raised when the presented account set violates a structural requirement."""


class NumericError(SwapError):
    """Raised on overflow, lossy narrowing or a guarded division."""


class BusinessRuleError(SwapError):
    """Raised when a well-formed request violates a pool rule (slippage, fees, rounding)."""


class LedgerError(Exception):
    """Raised by a ledger client that refuses a transfer / mint / burn command."""


_KIND_BY_CODE: dict[ErrorCode, type[SwapError]] = {
    ErrorCode.INVALID_INSTRUCTION: InstructionError,
    ErrorCode.INCORRECT_PROGRAM_ID: AuthorizationError,
    ErrorCode.INCORRECT_TOKEN_PROGRAM_ID: AuthorizationError,
    ErrorCode.INVALID_PROGRAM_ADDRESS: AuthorizationError,
    ErrorCode.INVALID_OWNER: AuthorizationError,
    ErrorCode.INVALID_OUTPUT_OWNER: AuthorizationError,
    ErrorCode.ALREADY_IN_USE: AccountError,
    ErrorCode.UNINITIALIZED_ACCOUNT: AccountError,
    ErrorCode.INVALID_ACCOUNT_DATA: AccountError,
    ErrorCode.NOT_ENOUGH_ACCOUNT_KEYS: AccountError,
    ErrorCode.EXPECTED_ACCOUNT: AccountError,
    ErrorCode.EXPECTED_MINT: AccountError,
    ErrorCode.REPEATED_MINT: AccountError,
    ErrorCode.INVALID_DELEGATE: AccountError,
    ErrorCode.INVALID_CLOSE_AUTHORITY: AccountError,
    ErrorCode.INVALID_FREEZE_AUTHORITY: AccountError,
    ErrorCode.INVALID_SUPPLY: AccountError,
    ErrorCode.INVALID_INPUT: AccountError,
    ErrorCode.INCORRECT_SWAP_ACCOUNT: AccountError,
    ErrorCode.INCORRECT_POOL_MINT: AccountError,
    ErrorCode.INCORRECT_FEE_ACCOUNT: AccountError,
    ErrorCode.CONVERSION_FAILURE: NumericError,
    ErrorCode.CALCULATION_FAILURE: NumericError,
    ErrorCode.FEE_CALCULATION_FAILURE: NumericError,
    ErrorCode.EMPTY_SUPPLY: BusinessRuleError,
    ErrorCode.EXCEEDED_SLIPPAGE: BusinessRuleError,
    ErrorCode.ZERO_TRADING_TOKENS: BusinessRuleError,
    ErrorCode.INVALID_FEE: BusinessRuleError,
}


def swap_error(code: ErrorCode, detail: Optional[str] = None) -> SwapError:
    """Build the exception of the right kind for ``code`` (caller raises it)."""
    return _KIND_BY_CODE[code](code, detail)
