"""
Client-side instruction builders.

Each builder returns an ``InstructionRequest`` with the accounts laid out in
the order the processor reads them and the encoded instruction data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..core.errors import ErrorCode, swap_error
from ..core.fees import Fees
from ..state.accounts import Address, require_address
from ..state.pool import SwapPool
from ..state.repository import PoolRepository
from .instruction import DepositTokens, Initialize, Swap, WithdrawTokens, encode


@dataclass(frozen=True)
class AccountMeta:
    address: Address
    is_signer: bool = False
    is_writable: bool = False

    def __post_init__(self) -> None:
        require_address("address", self.address)


@dataclass(frozen=True)
class InstructionRequest:
    program_id: Address
    accounts: Tuple[AccountMeta, ...]
    data: bytes


def _readonly(address: Address) -> AccountMeta:
    return AccountMeta(address, is_signer=False, is_writable=False)


def _writable(address: Address) -> AccountMeta:
    return AccountMeta(address, is_signer=False, is_writable=True)


def _signer(address: Address) -> AccountMeta:
    return AccountMeta(address, is_signer=True, is_writable=False)


def initialize(
    program_id: Address,
    token_program_id: Address,
    pool: Address,
    authority: Address,
    token_a: Address,
    token_b: Address,
    pool_mint: Address,
    fee_account_a: Address,
    fee_account_b: Address,
    destination: Address,
    fees: Fees,
) -> InstructionRequest:
    accounts = (
        AccountMeta(pool, is_signer=True, is_writable=True),
        _readonly(authority),
        _readonly(token_a),
        _readonly(token_b),
        _writable(pool_mint),
        _readonly(fee_account_a),
        _readonly(fee_account_b),
        _writable(destination),
        _readonly(token_program_id),
    )
    return InstructionRequest(program_id, accounts, encode(Initialize(fees)))


def deposit_tokens(
    program_id: Address,
    token_program_id: Address,
    pool: Address,
    authority: Address,
    user_transfer_authority: Address,
    source_a: Address,
    source_b: Address,
    token_a: Address,
    token_b: Address,
    pool_mint: Address,
    destination: Address,
    pool_token_amount: int,
    maximum_token_a_amount: int,
    maximum_token_b_amount: int,
) -> InstructionRequest:
    data = encode(DepositTokens(pool_token_amount, maximum_token_a_amount, maximum_token_b_amount))
    accounts = (
        _readonly(pool),
        _readonly(authority),
        _signer(user_transfer_authority),
        _writable(source_a),
        _writable(source_b),
        _writable(token_a),
        _writable(token_b),
        _writable(pool_mint),
        _writable(destination),
        _readonly(token_program_id),
    )
    return InstructionRequest(program_id, accounts, data)


def withdraw_tokens(
    program_id: Address,
    token_program_id: Address,
    pool: Address,
    authority: Address,
    user_transfer_authority: Address,
    pool_mint: Address,
    source: Address,
    token_a: Address,
    token_b: Address,
    destination_a: Address,
    destination_b: Address,
    pool_token_amount: int,
    minimum_token_a_amount: int,
    minimum_token_b_amount: int,
) -> InstructionRequest:
    data = encode(WithdrawTokens(pool_token_amount, minimum_token_a_amount, minimum_token_b_amount))
    accounts = (
        _readonly(pool),
        _readonly(authority),
        _signer(user_transfer_authority),
        _writable(pool_mint),
        _writable(source),
        _writable(token_a),
        _writable(token_b),
        _writable(destination_a),
        _writable(destination_b),
        _readonly(token_program_id),
    )
    return InstructionRequest(program_id, accounts, data)


def swap(
    program_id: Address,
    token_program_id: Address,
    pool: Address,
    authority: Address,
    user_transfer_authority: Address,
    source: Address,
    swap_source: Address,
    swap_destination: Address,
    destination: Address,
    fee_account: Address,
    amount_in: int,
    minimum_amount_out: int,
) -> InstructionRequest:
    accounts = (
        _readonly(pool),
        _readonly(authority),
        _signer(user_transfer_authority),
        _writable(source),
        _writable(swap_source),
        _writable(swap_destination),
        _writable(destination),
        _writable(fee_account),
        _readonly(token_program_id),
    )
    return InstructionRequest(program_id, accounts, encode(Swap(amount_in, minimum_amount_out)))


def load_pool(repository: PoolRepository, key: Address) -> SwapPool:
    """
    Read a pool record for display or for building follow-up instructions.

    Raises:
        AccountError: ``UninitializedAccount`` for an empty or uninitialized slot
    """
    pool = repository.load(key)
    if pool is None or not pool.is_initialized:
        raise swap_error(ErrorCode.UNINITIALIZED_ACCOUNT)
    return pool
