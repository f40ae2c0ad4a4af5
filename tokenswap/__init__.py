"""
Constant-product token swap program.

Two-asset pools priced by x * y = k, with a per-pool trading fee and
pool-share tokens for liquidity providers.
"""

from .core.errors import (
    AccountError,
    AuthorizationError,
    BusinessRuleError,
    ErrorCode,
    InstructionError,
    LedgerError,
    NumericError,
    SwapError,
)
from .core.fees import Fees, calculate_fee
from .core.constraints import SwapConstraints, validate_fees, validate_supply
from .core.cpmm import INITIAL_SWAP_POOL_AMOUNT, deposit_amounts, swap_exact_in, withdraw_amounts
from .state.accounts import Mint, TokenAccount
from .state.pool import POOL_LEN, SwapPool
from .state.repository import InMemoryPoolRepository, PoolRepository
from .integration.instruction import DepositTokens, Initialize, Swap, WithdrawTokens, decode, encode
from .integration.authority import AuthorityProof, create_authority_address, find_authority_address
from .integration.ledger import InMemoryLedger, LedgerClient
from .integration.processor import Processor
from .integration.client import AccountMeta, InstructionRequest, load_pool
from .integration.runtime import ExecutionEnvironment, InvokeResult
from .config import SwapConfig, configure_logging, load_config

__all__ = [
    "AccountError",
    "AuthorizationError",
    "BusinessRuleError",
    "ErrorCode",
    "InstructionError",
    "LedgerError",
    "NumericError",
    "SwapError",
    "Fees",
    "calculate_fee",
    "SwapConstraints",
    "validate_fees",
    "validate_supply",
    "INITIAL_SWAP_POOL_AMOUNT",
    "deposit_amounts",
    "swap_exact_in",
    "withdraw_amounts",
    "Mint",
    "TokenAccount",
    "POOL_LEN",
    "SwapPool",
    "InMemoryPoolRepository",
    "PoolRepository",
    "DepositTokens",
    "Initialize",
    "Swap",
    "WithdrawTokens",
    "decode",
    "encode",
    "AuthorityProof",
    "create_authority_address",
    "find_authority_address",
    "InMemoryLedger",
    "LedgerClient",
    "Processor",
    "AccountMeta",
    "InstructionRequest",
    "load_pool",
    "ExecutionEnvironment",
    "InvokeResult",
    "SwapConfig",
    "configure_logging",
    "load_config",
]
