"""
Read-only snapshots of ledger accounts.

The swap program never mutates these; it reads them to validate an account
set and to source live balances for its arithmetic. Mutation is requested from
the ledger through transfer / mint / burn commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.checked_math import require_u64
from .canonical import ADDRESS_LEN, address_to_hex


# Type aliases
Address = bytes  # 32 raw bytes
Amount = int  # u64


def require_address(name: str, value: object) -> Address:
    if not isinstance(value, (bytes, bytearray)) or len(value) != ADDRESS_LEN:
        raise TypeError(f"{name} must be a {ADDRESS_LEN}-byte address")
    return bytes(value)


def _optional_address(name: str, value: object) -> Optional[Address]:
    if value is None:
        return None
    return require_address(name, value)


@dataclass(frozen=True)
class TokenAccount:
    """
    Snapshot of a token account.

    Attributes:
        address: Account address
        program_id: Ledger program that owns the account data
        mint: Mint of the tokens held
        owner: Authority allowed to move the tokens
        amount: Balance
        delegate: Optional third party allowed to move up to `delegated_amount`
        delegated_amount: Allowance of `delegate`
        close_authority: Optional third party allowed to close the account
    """

    address: Address
    program_id: Address
    mint: Address
    owner: Address
    amount: Amount = 0
    delegate: Optional[Address] = None
    delegated_amount: Amount = 0
    close_authority: Optional[Address] = None

    def __post_init__(self) -> None:
        for name in ("address", "program_id", "mint", "owner"):
            require_address(name, getattr(self, name))
        _optional_address("delegate", self.delegate)
        _optional_address("close_authority", self.close_authority)
        require_u64("amount", self.amount)
        require_u64("delegated_amount", self.delegated_amount)
        if self.delegate is None and self.delegated_amount:
            raise ValueError("delegated_amount requires a delegate")

    def __repr__(self) -> str:
        return (
            f"TokenAccount(address={address_to_hex(self.address)[:12]}..., "
            f"mint={address_to_hex(self.mint)[:12]}..., amount={self.amount})"
        )


@dataclass(frozen=True)
class Mint:
    """Snapshot of a token mint."""

    address: Address
    program_id: Address
    supply: Amount = 0
    mint_authority: Optional[Address] = None
    freeze_authority: Optional[Address] = None
    decimals: int = 0

    def __post_init__(self) -> None:
        require_address("address", self.address)
        require_address("program_id", self.program_id)
        _optional_address("mint_authority", self.mint_authority)
        _optional_address("freeze_authority", self.freeze_authority)
        require_u64("supply", self.supply)
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool) or not (0 <= self.decimals <= 255):
            raise ValueError(f"decimals must be in [0, 255]: {self.decimals!r}")

    def __repr__(self) -> str:
        return f"Mint(address={address_to_hex(self.address)[:12]}..., supply={self.supply})"
