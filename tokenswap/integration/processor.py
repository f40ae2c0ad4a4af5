"""
Swap program processor.

``Processor.process(accounts, data)`` is the single entry point. It:

1. Decodes the instruction buffer.
2. Dispatches to the handler for the instruction variant.
3. Validates the presented account set against the pool record and the live
   ledger snapshots, then computes every amount.
4. Only then issues transfer / mint / burn commands, in a fixed order.

No handler performs a check after its first ledger command. The host commits
or discards all commands of one invocation together.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence, Type

from ..core.constraints import SwapConstraints, validate_supply
from ..core.cpmm import INITIAL_SWAP_POOL_AMOUNT, deposit_amounts, swap_exact_in, withdraw_amounts
from ..core.errors import ErrorCode, swap_error
from ..state.accounts import Address, Mint, TokenAccount, require_address
from ..state.pool import SwapPool
from ..state.repository import PoolRepository
from .authority import AuthorityProof, create_authority_address, find_authority_bump
from .instruction import DepositTokens, Initialize, Swap, SwapInstruction, WithdrawTokens, decode
from .ledger import LedgerClient

logger = logging.getLogger(__name__)


class Processor:
    """Validates and executes swap instructions for one program id."""

    def __init__(
        self,
        program_id: Address,
        ledger: LedgerClient,
        repository: PoolRepository,
        *,
        constraints: SwapConstraints = SwapConstraints(),
    ) -> None:
        self.program_id = require_address("program_id", program_id)
        self.ledger = ledger
        self.repository = repository
        self.constraints = constraints

    # -- account helpers -----------------------------------------------------

    def unpack_token_account(self, address: Address, token_program_id: Address) -> TokenAccount:
        account = self.ledger.get_token_account(address)
        if account is None:
            raise swap_error(ErrorCode.EXPECTED_ACCOUNT)
        if account.program_id != token_program_id:
            raise swap_error(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID)
        return account

    def unpack_mint(self, address: Address, token_program_id: Address) -> Mint:
        mint = self.ledger.get_mint(address)
        if mint is None:
            raise swap_error(ErrorCode.EXPECTED_MINT)
        if mint.program_id != token_program_id:
            raise swap_error(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID)
        return mint

    def authority_id(self, pool_key: Address, bump_seed: int) -> Address:
        return create_authority_address(self.program_id, pool_key, bump_seed)

    def load_pool(self, pool_key: Address) -> SwapPool:
        stored = self.repository.load(pool_key)
        if stored is None:
            raise swap_error(ErrorCode.INCORRECT_PROGRAM_ID, "pool slot is not owned by this program")
        if not stored.is_initialized:
            raise swap_error(ErrorCode.UNINITIALIZED_ACCOUNT)
        return stored

    def _proof(self, pool_key: Address, pool: SwapPool) -> AuthorityProof:
        return AuthorityProof(program_id=self.program_id, pool_key=pool_key, bump_seed=pool.bump_seed)

    def _check_token_program(self, token_program: Address, expected: Address) -> None:
        if token_program != expected or token_program != self.ledger.token_program_id:
            raise swap_error(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID)

    def check_accounts(
        self,
        pool: SwapPool,
        pool_key: Address,
        authority: Address,
        token_a: Address,
        token_b: Address,
        pool_mint: Address,
        token_program: Address,
        user_token_a: Optional[Address] = None,
        user_token_b: Optional[Address] = None,
    ) -> None:
        """Revalidate the pool-linked accounts presented for a deposit or withdrawal."""
        if authority != self.authority_id(pool_key, pool.bump_seed):
            raise swap_error(ErrorCode.INVALID_PROGRAM_ADDRESS)
        if token_a != pool.token_a:
            raise swap_error(ErrorCode.INCORRECT_SWAP_ACCOUNT, "token A account")
        if token_b != pool.token_b:
            raise swap_error(ErrorCode.INCORRECT_SWAP_ACCOUNT, "token B account")
        if pool_mint != pool.pool_mint:
            raise swap_error(ErrorCode.INCORRECT_POOL_MINT)
        self._check_token_program(token_program, pool.token_program_id)
        if user_token_a is not None and user_token_a == token_a:
            raise swap_error(ErrorCode.INVALID_INPUT, "user token A account is the pool's own")
        if user_token_b is not None and user_token_b == token_b:
            raise swap_error(ErrorCode.INVALID_INPUT, "user token B account is the pool's own")

    # -- handlers ------------------------------------------------------------

    def process_initialize(self, instruction: Initialize, accounts: Sequence[Address]) -> None:
        (
            pool_key,
            authority,
            token_a_key,
            token_b_key,
            pool_mint_key,
            fee_a_key,
            fee_b_key,
            destination_key,
            token_program_id,
        ) = _take_accounts(accounts, 9)
        fees = instruction.fees

        existing = self.repository.load(pool_key)
        if existing is not None and existing.is_initialized:
            raise swap_error(ErrorCode.ALREADY_IN_USE)

        bump_seed = find_authority_bump(self.program_id, pool_key, authority)
        if token_program_id != self.ledger.token_program_id:
            raise swap_error(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID)

        token_a = self.unpack_token_account(token_a_key, token_program_id)
        token_b = self.unpack_token_account(token_b_key, token_program_id)
        fee_a = self.unpack_token_account(fee_a_key, token_program_id)
        fee_b = self.unpack_token_account(fee_b_key, token_program_id)
        destination = self.unpack_token_account(destination_key, token_program_id)
        pool_mint = self.unpack_mint(pool_mint_key, token_program_id)

        if token_a.owner != authority:
            raise swap_error(ErrorCode.INVALID_OWNER, "token A account")
        if token_b.owner != authority:
            raise swap_error(ErrorCode.INVALID_OWNER, "token B account")
        if destination.owner == authority:
            raise swap_error(ErrorCode.INVALID_OUTPUT_OWNER, "pool token destination")
        if fee_a.owner == authority:
            raise swap_error(ErrorCode.INVALID_OUTPUT_OWNER, "token A fee account")
        if fee_b.owner == authority:
            raise swap_error(ErrorCode.INVALID_OUTPUT_OWNER, "token B fee account")
        if pool_mint.mint_authority != authority:
            raise swap_error(ErrorCode.INVALID_OWNER, "pool mint authority")

        if token_a.mint == token_b.mint:
            raise swap_error(ErrorCode.REPEATED_MINT)

        validate_supply(token_a.amount, token_b.amount)

        if token_a.delegate is not None or token_b.delegate is not None:
            raise swap_error(ErrorCode.INVALID_DELEGATE)
        if token_a.close_authority is not None or token_b.close_authority is not None:
            raise swap_error(ErrorCode.INVALID_CLOSE_AUTHORITY)
        if token_a.mint != fee_a.mint:
            raise swap_error(ErrorCode.INCORRECT_FEE_ACCOUNT, "token A fee account mint")
        if token_b.mint != fee_b.mint:
            raise swap_error(ErrorCode.INCORRECT_FEE_ACCOUNT, "token B fee account mint")

        if pool_mint.supply != 0:
            raise swap_error(ErrorCode.INVALID_SUPPLY)
        if pool_mint.freeze_authority is not None:
            raise swap_error(ErrorCode.INVALID_FREEZE_AUTHORITY)

        fees.validate()
        self.constraints.validate_fees(fees)

        pool = SwapPool(
            is_initialized=True,
            bump_seed=bump_seed,
            token_program_id=token_program_id,
            token_a=token_a_key,
            token_b=token_b_key,
            pool_mint=pool_mint_key,
            token_a_mint=token_a.mint,
            token_b_mint=token_b.mint,
            token_a_fee_account=fee_a_key,
            token_b_fee_account=fee_b_key,
            fees=fees,
        )

        self.ledger.mint_to(pool_mint_key, destination_key, self._proof(pool_key, pool), INITIAL_SWAP_POOL_AMOUNT)
        self.repository.store(pool_key, pool)
        logger.debug("pool created: %r", pool)

    def process_deposit_tokens(self, instruction: DepositTokens, accounts: Sequence[Address]) -> None:
        (
            pool_key,
            authority,
            user_transfer_authority,
            source_a,
            source_b,
            token_a_key,
            token_b_key,
            pool_mint_key,
            destination,
            token_program,
        ) = _take_accounts(accounts, 10)

        pool = self.load_pool(pool_key)
        self.check_accounts(
            pool, pool_key, authority, token_a_key, token_b_key, pool_mint_key, token_program,
            user_token_a=source_a, user_token_b=source_b,
        )

        token_a = self.unpack_token_account(token_a_key, pool.token_program_id)
        token_b = self.unpack_token_account(token_b_key, pool.token_program_id)
        pool_mint = self.unpack_mint(pool_mint_key, pool.token_program_id)

        quote = deposit_amounts(
            balance_a=token_a.amount,
            balance_b=token_b.amount,
            pool_token_amount=instruction.pool_token_amount,
            pool_supply=pool_mint.supply,
            maximum_token_a_amount=instruction.maximum_token_a_amount,
            maximum_token_b_amount=instruction.maximum_token_b_amount,
        )
        logger.debug(
            "deposit: token_a=%d token_b=%d pool_tokens=%d",
            quote.token_a_amount, quote.token_b_amount, quote.pool_token_amount,
        )

        self.ledger.transfer(source_a, token_a_key, user_transfer_authority, quote.token_a_amount)
        self.ledger.transfer(source_b, token_b_key, user_transfer_authority, quote.token_b_amount)
        self.ledger.mint_to(pool_mint_key, destination, self._proof(pool_key, pool), quote.pool_token_amount)

    def process_withdraw_tokens(self, instruction: WithdrawTokens, accounts: Sequence[Address]) -> None:
        (
            pool_key,
            authority,
            user_transfer_authority,
            pool_mint_key,
            source,
            token_a_key,
            token_b_key,
            destination_a,
            destination_b,
            token_program,
        ) = _take_accounts(accounts, 10)

        pool = self.load_pool(pool_key)
        self.check_accounts(
            pool, pool_key, authority, token_a_key, token_b_key, pool_mint_key, token_program,
            user_token_a=destination_a, user_token_b=destination_b,
        )

        token_a = self.unpack_token_account(token_a_key, pool.token_program_id)
        token_b = self.unpack_token_account(token_b_key, pool.token_program_id)
        pool_mint = self.unpack_mint(pool_mint_key, pool.token_program_id)

        quote = withdraw_amounts(
            balance_a=token_a.amount,
            balance_b=token_b.amount,
            pool_token_amount=instruction.pool_token_amount,
            pool_supply=pool_mint.supply,
            minimum_token_a_amount=instruction.minimum_token_a_amount,
            minimum_token_b_amount=instruction.minimum_token_b_amount,
        )
        logger.debug(
            "withdraw: pool_tokens=%d token_a=%d token_b=%d",
            quote.pool_token_amount, quote.token_a_amount, quote.token_b_amount,
        )

        proof = self._proof(pool_key, pool)
        self.ledger.burn(source, pool_mint_key, user_transfer_authority, quote.pool_token_amount)
        if quote.token_a_amount > 0:
            self.ledger.transfer(token_a_key, destination_a, proof, quote.token_a_amount)
        if quote.token_b_amount > 0:
            self.ledger.transfer(token_b_key, destination_b, proof, quote.token_b_amount)

    def process_swap(self, instruction: Swap, accounts: Sequence[Address]) -> None:
        (
            pool_key,
            authority,
            user_transfer_authority,
            source,
            swap_source,
            swap_destination,
            destination,
            fee_account,
            token_program,
        ) = _take_accounts(accounts, 9)

        pool = self.load_pool(pool_key)
        if authority != self.authority_id(pool_key, pool.bump_seed):
            raise swap_error(ErrorCode.INVALID_PROGRAM_ADDRESS)
        pool_accounts = (pool.token_a, pool.token_b)
        if swap_source not in pool_accounts:
            raise swap_error(ErrorCode.INCORRECT_SWAP_ACCOUNT, "swap source")
        if swap_destination not in pool_accounts:
            raise swap_error(ErrorCode.INCORRECT_SWAP_ACCOUNT, "swap destination")
        if swap_source == swap_destination:
            raise swap_error(ErrorCode.INVALID_INPUT, "swap source equals swap destination")
        if swap_source == source:
            raise swap_error(ErrorCode.INVALID_INPUT, "user source is the pool's own account")
        if swap_destination == destination:
            raise swap_error(ErrorCode.INVALID_INPUT, "user destination is the pool's own account")
        if fee_account not in (pool.token_a_fee_account, pool.token_b_fee_account):
            raise swap_error(ErrorCode.INCORRECT_FEE_ACCOUNT)
        self._check_token_program(token_program, pool.token_program_id)

        source_account = self.unpack_token_account(swap_source, pool.token_program_id)
        destination_account = self.unpack_token_account(swap_destination, pool.token_program_id)
        fee = self.unpack_token_account(fee_account, pool.token_program_id)
        if fee.mint != source_account.mint:
            raise swap_error(ErrorCode.INCORRECT_FEE_ACCOUNT, "fee account mint differs from source")

        quote = swap_exact_in(
            source_balance=source_account.amount,
            destination_balance=destination_account.amount,
            amount_in=instruction.amount_in,
            fees=pool.fees,
            minimum_amount_out=instruction.minimum_amount_out,
        )
        logger.debug(
            "swap: amount_in=%d fee=%d net_in=%d amount_out=%d",
            instruction.amount_in, quote.trading_fee, quote.net_input, quote.amount_out,
        )

        self.ledger.transfer(source, swap_source, user_transfer_authority, quote.net_input)
        self.ledger.transfer(swap_destination, destination, self._proof(pool_key, pool), quote.amount_out)
        self.ledger.transfer(source, fee_account, user_transfer_authority, quote.trading_fee)

    # -- dispatch ------------------------------------------------------------

    def process(self, accounts: Sequence[Address], data: bytes) -> None:
        instruction = decode(data)
        name, handler = _DISPATCH[type(instruction)]
        logger.info("Instruction: %s", name)
        handler(self, instruction, [require_address("account", a) for a in accounts])


HandlerFn = Callable[[Processor, SwapInstruction, Sequence[Address]], None]

_DISPATCH: Dict[Type[SwapInstruction], tuple[str, HandlerFn]] = {
    Initialize: ("Init", Processor.process_initialize),
    DepositTokens: ("DepositTokens", Processor.process_deposit_tokens),
    WithdrawTokens: ("WithdrawTokens", Processor.process_withdraw_tokens),
    Swap: ("Swap", Processor.process_swap),
}


def _take_accounts(accounts: Sequence[Address], n: int) -> Sequence[Address]:
    if len(accounts) < n:
        raise swap_error(ErrorCode.NOT_ENOUGH_ACCOUNT_KEYS, f"expected {n} accounts, got {len(accounts)}")
    return accounts[:n]
