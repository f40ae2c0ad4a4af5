from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable, Optional

import pytest

from tokenswap.core.fees import Fees
from tokenswap.integration import client
from tokenswap.integration.authority import find_authority_address
from tokenswap.integration.ledger import InMemoryLedger
from tokenswap.integration.runtime import ExecutionEnvironment, InvokeResult
from tokenswap.state.repository import InMemoryPoolRepository


def addr(label: str) -> bytes:
    return hashlib.sha256(label.encode("utf-8")).digest()


PROGRAM_ID = addr("swap-program")
TOKEN_PROGRAM_ID = addr("token-program")
POOL = addr("pool")
USER = addr("user")
FEE_OWNER = addr("fee-owner")

MINT_A = addr("mint-a")
MINT_B = addr("mint-b")
POOL_MINT = addr("pool-mint")

TOKEN_A = addr("pool-token-a")
TOKEN_B = addr("pool-token-b")
FEE_A = addr("fee-a")
FEE_B = addr("fee-b")
USER_A = addr("user-a")
USER_B = addr("user-b")
USER_POOL = addr("user-pool")


@dataclass
class SwapHarness:
    """A pool wired to an in-memory ledger, with a funded user."""

    ledger: InMemoryLedger
    repository: InMemoryPoolRepository
    env: ExecutionEnvironment
    authority: bytes

    def initialize(self, fees: Fees = Fees(1, 100), *, authority: Optional[bytes] = None) -> InvokeResult:
        request = client.initialize(
            PROGRAM_ID,
            TOKEN_PROGRAM_ID,
            POOL,
            self.authority if authority is None else authority,
            TOKEN_A,
            TOKEN_B,
            POOL_MINT,
            FEE_A,
            FEE_B,
            USER_POOL,
            fees,
        )
        return self.env.invoke(request)

    def deposit(self, pool_token_amount: int, max_a: int, max_b: int) -> InvokeResult:
        request = client.deposit_tokens(
            PROGRAM_ID,
            TOKEN_PROGRAM_ID,
            POOL,
            self.authority,
            USER,
            USER_A,
            USER_B,
            TOKEN_A,
            TOKEN_B,
            POOL_MINT,
            USER_POOL,
            pool_token_amount,
            max_a,
            max_b,
        )
        return self.env.invoke(request)

    def withdraw(self, pool_token_amount: int, min_a: int, min_b: int) -> InvokeResult:
        request = client.withdraw_tokens(
            PROGRAM_ID,
            TOKEN_PROGRAM_ID,
            POOL,
            self.authority,
            USER,
            POOL_MINT,
            USER_POOL,
            TOKEN_A,
            TOKEN_B,
            USER_A,
            USER_B,
            pool_token_amount,
            min_a,
            min_b,
        )
        return self.env.invoke(request)

    def swap_a_to_b(
        self,
        amount_in: int,
        minimum_amount_out: int,
        *,
        source: bytes = USER_A,
        swap_source: bytes = TOKEN_A,
        swap_destination: bytes = TOKEN_B,
        destination: bytes = USER_B,
        fee_account: bytes = FEE_A,
    ) -> InvokeResult:
        request = client.swap(
            PROGRAM_ID,
            TOKEN_PROGRAM_ID,
            POOL,
            self.authority,
            USER,
            source,
            swap_source,
            swap_destination,
            destination,
            fee_account,
            amount_in,
            minimum_amount_out,
        )
        return self.env.invoke(request)


def build_harness(
    *,
    token_a_amount: int = 1000,
    token_b_amount: int = 1000,
    token_b_mint: bytes = MINT_B,
    token_a_owner: Optional[bytes] = None,
    token_a_delegate: Optional[bytes] = None,
    token_b_close_authority: Optional[bytes] = None,
    fee_a_mint: bytes = MINT_A,
    fee_b_owner: bytes = FEE_OWNER,
    destination_owner: bytes = USER,
    pool_mint_supply: int = 0,
    pool_mint_authority: Optional[bytes] = None,
    pool_mint_freeze_authority: Optional[bytes] = None,
) -> SwapHarness:
    authority, _ = find_authority_address(PROGRAM_ID, POOL)

    ledger = InMemoryLedger(TOKEN_PROGRAM_ID)
    ledger.create_mint(MINT_A, mint_authority=addr("mint-a-authority"))
    ledger.create_mint(MINT_B, mint_authority=addr("mint-b-authority"))
    ledger.create_mint(
        POOL_MINT,
        mint_authority=authority if pool_mint_authority is None else pool_mint_authority,
        freeze_authority=pool_mint_freeze_authority,
        supply=pool_mint_supply,
    )

    ledger.create_account(
        TOKEN_A,
        mint=MINT_A,
        owner=authority if token_a_owner is None else token_a_owner,
        amount=token_a_amount,
        delegate=token_a_delegate,
        delegated_amount=1 if token_a_delegate is not None else 0,
    )
    ledger.create_account(
        TOKEN_B,
        mint=token_b_mint,
        owner=authority,
        amount=token_b_amount,
        close_authority=token_b_close_authority,
    )
    ledger.create_account(FEE_A, mint=fee_a_mint, owner=FEE_OWNER)
    ledger.create_account(FEE_B, mint=MINT_B, owner=fee_b_owner)
    ledger.create_account(USER_A, mint=MINT_A, owner=USER, amount=10_000)
    ledger.create_account(USER_B, mint=MINT_B, owner=USER, amount=10_000)
    ledger.create_account(USER_POOL, mint=POOL_MINT, owner=destination_owner)

    repository = InMemoryPoolRepository()
    repository.allocate(POOL)
    env = ExecutionEnvironment(PROGRAM_ID, ledger, repository)
    return SwapHarness(ledger=ledger, repository=repository, env=env, authority=authority)


@pytest.fixture
def make_harness() -> Callable[..., SwapHarness]:
    return build_harness


@pytest.fixture
def harness() -> SwapHarness:
    """Accounts in place, pool not yet initialized."""
    return build_harness()


@pytest.fixture
def pool(harness: SwapHarness) -> SwapHarness:
    """Initialized pool: 1000 A / 1000 B, fee 1/100, 1e9 pool tokens held by the user."""
    result = harness.initialize(Fees(1, 100))
    assert result.ok, result.error
    harness.ledger.calls.clear()
    return harness
