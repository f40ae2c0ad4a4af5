"""
Pool authority derivation.

Each pool is controlled by an address derived from (program id, pool key, bump
seed). Nobody holds a private key for it: the swap program proves control by
presenting an ``AuthorityProof`` with the seeds, and the ledger re-derives the
address before honouring a command signed with it.

    address = sha256(pool_key || bump_seed || program_id || "ProgramDerivedAddress")
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Tuple

from ..core.errors import ErrorCode, swap_error
from ..state.accounts import Address, require_address
from ..state.canonical import address_to_hex


MAX_SEED_LEN = 32
PDA_MARKER = b"ProgramDerivedAddress"


def create_authority_address(program_id: Address, pool_key: Address, bump_seed: int) -> Address:
    """
    Derive the authority address for one bump seed.

    Raises:
        AuthorizationError: ``InvalidProgramAddress`` for malformed seeds
    """
    program_id = require_address("program_id", program_id)
    if not isinstance(pool_key, (bytes, bytearray)) or len(pool_key) > MAX_SEED_LEN:
        raise swap_error(ErrorCode.INVALID_PROGRAM_ADDRESS, "pool key seed must be at most 32 bytes")
    if not isinstance(bump_seed, int) or isinstance(bump_seed, bool) or not (0 <= bump_seed <= 0xFF):
        raise swap_error(ErrorCode.INVALID_PROGRAM_ADDRESS, f"bump seed out of range: {bump_seed!r}")
    h = hashlib.sha256()
    h.update(bytes(pool_key))
    h.update(bytes((bump_seed,)))
    h.update(program_id)
    h.update(PDA_MARKER)
    return h.digest()


def find_authority_address(program_id: Address, pool_key: Address) -> Tuple[Address, int]:
    """Canonical (highest-bump) authority address for a pool."""
    return create_authority_address(program_id, pool_key, 0xFF), 0xFF


def find_authority_bump(program_id: Address, pool_key: Address, authority: Address) -> int:
    """
    Find the bump seed under which ``authority`` derives from this pool.

    Bumps are tried from 255 down to 0.

    Raises:
        AuthorizationError: ``InvalidProgramAddress`` if no bump matches
    """
    for bump_seed in range(0xFF, -1, -1):
        if create_authority_address(program_id, pool_key, bump_seed) == authority:
            return bump_seed
    raise swap_error(
        ErrorCode.INVALID_PROGRAM_ADDRESS,
        f"{address_to_hex(authority)} is not derived from pool {address_to_hex(pool_key)}",
    )


@dataclass(frozen=True)
class AuthorityProof:
    """Capability presented to the ledger when the pool authority signs a command."""

    program_id: Address
    pool_key: Address
    bump_seed: int

    def __post_init__(self) -> None:
        require_address("program_id", self.program_id)
        require_address("pool_key", self.pool_key)

    @property
    def address(self) -> Address:
        return create_authority_address(self.program_id, self.pool_key, self.bump_seed)
