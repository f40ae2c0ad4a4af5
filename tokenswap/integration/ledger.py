"""
Token ledger interface and an in-memory implementation.

The swap program never edits balances itself. It reads account snapshots and
asks a ``LedgerClient`` to transfer, mint or burn. ``InMemoryLedger`` applies
SPL-token-like rules so the processor can be exercised end to end without a
real ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Optional, Protocol, Tuple, Union

from ..core.checked_math import U64_MAX, require_u64
from ..core.errors import LedgerError
from ..state.accounts import Address, Amount, Mint, TokenAccount, require_address
from ..state.canonical import address_to_hex
from .authority import AuthorityProof

logger = logging.getLogger(__name__)

# A user signer address, or the pool authority proving its seeds.
Authority = Union[Address, AuthorityProof]


class LedgerClient(Protocol):
    @property
    def token_program_id(self) -> Address:
        ...

    def get_token_account(self, address: Address) -> Optional[TokenAccount]:
        ...

    def get_mint(self, address: Address) -> Optional[Mint]:
        ...

    def transfer(self, source: Address, destination: Address, authority: Authority, amount: Amount) -> None:
        ...

    def mint_to(self, mint: Address, destination: Address, authority: Authority, amount: Amount) -> None:
        ...

    def burn(self, account: Address, mint: Address, authority: Authority, amount: Amount) -> None:
        ...


@dataclass(frozen=True)
class LedgerCall:
    """One accepted ledger command, recorded in execution order."""

    op: str
    amount: Amount
    authority: Address
    source: Optional[Address] = None
    destination: Optional[Address] = None
    mint: Optional[Address] = None


def _short(address: Address) -> str:
    return address_to_hex(address)[:12]


class InMemoryLedger:
    """
    Dict-backed token ledger.

    Note: plain address authorities must be among the signers of the current
    invocation (see ``set_signers``); pool authorities are accepted only
    through an ``AuthorityProof`` that re-derives the expected address.
    """

    def __init__(self, token_program_id: Address) -> None:
        self._token_program_id = require_address("token_program_id", token_program_id)
        self._accounts: Dict[Address, TokenAccount] = {}
        self._mints: Dict[Address, Mint] = {}
        self._signers: FrozenSet[Address] = frozenset()
        self.calls: List[LedgerCall] = []

    @property
    def token_program_id(self) -> Address:
        return self._token_program_id

    # -- setup ---------------------------------------------------------------

    def create_mint(
        self,
        address: Address,
        *,
        mint_authority: Optional[Address] = None,
        freeze_authority: Optional[Address] = None,
        supply: Amount = 0,
        decimals: int = 0,
        program_id: Optional[Address] = None,
    ) -> Mint:
        address = require_address("address", address)
        if address in self._mints or address in self._accounts:
            raise ValueError(f"address already in use: {_short(address)}")
        mint = Mint(
            address=address,
            program_id=self._token_program_id if program_id is None else program_id,
            supply=supply,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
            decimals=decimals,
        )
        self._mints[address] = mint
        return mint

    def create_account(
        self,
        address: Address,
        *,
        mint: Address,
        owner: Address,
        amount: Amount = 0,
        delegate: Optional[Address] = None,
        delegated_amount: Amount = 0,
        close_authority: Optional[Address] = None,
        program_id: Optional[Address] = None,
    ) -> TokenAccount:
        """
        Open a token account. ``amount`` is credited out of thin air and added
        to the mint's supply when the mint is known, so supplies stay consistent.
        """
        address = require_address("address", address)
        if address in self._mints or address in self._accounts:
            raise ValueError(f"address already in use: {_short(address)}")
        account = TokenAccount(
            address=address,
            program_id=self._token_program_id if program_id is None else program_id,
            mint=mint,
            owner=owner,
            amount=amount,
            delegate=delegate,
            delegated_amount=delegated_amount,
            close_authority=close_authority,
        )
        self._accounts[address] = account
        mint_state = self._mints.get(bytes(mint))
        if mint_state is not None and amount:
            self._mints[mint_state.address] = replace(mint_state, supply=require_u64("supply", mint_state.supply + amount))
        return account

    def set_signers(self, signers: Iterable[Address]) -> None:
        self._signers = frozenset(bytes(s) for s in signers)

    # -- reads ---------------------------------------------------------------

    def get_token_account(self, address: Address) -> Optional[TokenAccount]:
        return self._accounts.get(bytes(address))

    def get_mint(self, address: Address) -> Optional[Mint]:
        return self._mints.get(bytes(address))

    def balance(self, address: Address) -> Amount:
        return self._require_account(address).amount

    def supply(self, mint: Address) -> Amount:
        return self._require_mint(mint).supply

    # -- commands ------------------------------------------------------------

    def transfer(self, source: Address, destination: Address, authority: Authority, amount: Amount) -> None:
        require_u64("amount", amount)
        src = self._require_account(source)
        dst = self._require_account(destination)
        signer = self._resolve_authority(authority)
        if src.mint != dst.mint:
            raise LedgerError("transfer between accounts of different mints")
        if amount > src.amount:
            raise LedgerError(f"insufficient funds: {src.amount} < {amount}")
        if src.address != dst.address and dst.amount + amount > U64_MAX:
            raise LedgerError("destination balance overflow")
        src = self._debit_authorized(src, signer, amount)

        self._accounts[src.address] = replace(src, amount=src.amount - amount)
        dst = self._accounts[dst.address]
        self._accounts[dst.address] = replace(dst, amount=dst.amount + amount)
        self._record(LedgerCall(op="transfer", amount=amount, authority=signer, source=src.address, destination=dst.address))

    def mint_to(self, mint: Address, destination: Address, authority: Authority, amount: Amount) -> None:
        require_u64("amount", amount)
        mint_state = self._require_mint(mint)
        dst = self._require_account(destination)
        signer = self._resolve_authority(authority)
        if dst.mint != mint_state.address:
            raise LedgerError("destination account belongs to another mint")
        if mint_state.mint_authority is None or mint_state.mint_authority != signer:
            raise LedgerError("signer is not the mint authority")
        if mint_state.supply + amount > U64_MAX or dst.amount + amount > U64_MAX:
            raise LedgerError("mint overflow")

        self._mints[mint_state.address] = replace(mint_state, supply=mint_state.supply + amount)
        self._accounts[dst.address] = replace(dst, amount=dst.amount + amount)
        self._record(LedgerCall(op="mint_to", amount=amount, authority=signer, mint=mint_state.address, destination=dst.address))

    def burn(self, account: Address, mint: Address, authority: Authority, amount: Amount) -> None:
        require_u64("amount", amount)
        acct = self._require_account(account)
        mint_state = self._require_mint(mint)
        signer = self._resolve_authority(authority)
        if acct.mint != mint_state.address:
            raise LedgerError("account belongs to another mint")
        if amount > acct.amount:
            raise LedgerError(f"insufficient funds: {acct.amount} < {amount}")
        acct = self._debit_authorized(acct, signer, amount)

        self._accounts[acct.address] = replace(acct, amount=acct.amount - amount)
        self._mints[mint_state.address] = replace(mint_state, supply=mint_state.supply - amount)
        self._record(LedgerCall(op="burn", amount=amount, authority=signer, source=acct.address, mint=mint_state.address))

    # -- atomicity support ---------------------------------------------------

    def snapshot(self) -> Tuple[Dict[Address, TokenAccount], Dict[Address, Mint], int]:
        return dict(self._accounts), dict(self._mints), len(self.calls)

    def restore(self, snapshot: Tuple[Dict[Address, TokenAccount], Dict[Address, Mint], int]) -> None:
        accounts, mints, n_calls = snapshot
        self._accounts = dict(accounts)
        self._mints = dict(mints)
        del self.calls[n_calls:]

    # -- helpers -------------------------------------------------------------

    def _require_account(self, address: Address) -> TokenAccount:
        acct = self._accounts.get(bytes(address))
        if acct is None:
            raise LedgerError(f"unknown token account: {_short(address)}")
        return acct

    def _require_mint(self, address: Address) -> Mint:
        mint = self._mints.get(bytes(address))
        if mint is None:
            raise LedgerError(f"unknown mint: {_short(address)}")
        return mint

    def _resolve_authority(self, authority: Authority) -> Address:
        if isinstance(authority, AuthorityProof):
            return authority.address
        signer = require_address("authority", authority)
        if signer not in self._signers:
            raise LedgerError(f"missing signature for {_short(signer)}")
        return signer

    def _debit_authorized(self, account: TokenAccount, signer: Address, amount: Amount) -> TokenAccount:
        """Check that ``signer`` may move ``amount`` out of ``account``; consume delegation."""
        if signer == account.owner:
            return account
        if account.delegate is not None and signer == account.delegate:
            if amount > account.delegated_amount:
                raise LedgerError("amount exceeds delegated allowance")
            remaining = account.delegated_amount - amount
            if remaining == 0:
                return replace(account, delegate=None, delegated_amount=0)
            return replace(account, delegated_amount=remaining)
        raise LedgerError(f"{_short(signer)} may not move tokens out of {_short(account.address)}")

    def _record(self, call: LedgerCall) -> None:
        logger.debug("ledger %s amount=%d", call.op, call.amount)
        self.calls.append(call)
