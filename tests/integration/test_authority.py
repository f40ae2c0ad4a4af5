from __future__ import annotations

import pytest

from tokenswap.core.errors import AuthorizationError, ErrorCode
from tokenswap.integration.authority import (
    AuthorityProof,
    create_authority_address,
    find_authority_address,
    find_authority_bump,
)

PROGRAM = b"\x11" * 32
POOL = b"\x22" * 32


def test_derivation_is_deterministic_and_seed_sensitive() -> None:
    a = create_authority_address(PROGRAM, POOL, 255)
    assert a == create_authority_address(PROGRAM, POOL, 255)
    assert len(a) == 32
    assert a != create_authority_address(PROGRAM, POOL, 254)
    assert a != create_authority_address(b"\x12" * 32, POOL, 255)
    assert a != create_authority_address(PROGRAM, b"\x23" * 32, 255)


def test_find_authority_address_uses_highest_bump() -> None:
    address, bump = find_authority_address(PROGRAM, POOL)
    assert bump == 255
    assert address == create_authority_address(PROGRAM, POOL, 255)


def test_find_authority_bump_recovers_any_bump() -> None:
    for bump in (255, 254, 17, 0):
        address = create_authority_address(PROGRAM, POOL, bump)
        assert find_authority_bump(PROGRAM, POOL, address) == bump


def test_find_authority_bump_rejects_foreign_address() -> None:
    with pytest.raises(AuthorizationError) as excinfo:
        find_authority_bump(PROGRAM, POOL, b"\x33" * 32)
    assert excinfo.value.code is ErrorCode.INVALID_PROGRAM_ADDRESS


def test_oversized_seed_is_rejected() -> None:
    with pytest.raises(AuthorizationError, match="InvalidProgramAddress"):
        create_authority_address(PROGRAM, b"\x00" * 33, 255)
    with pytest.raises(AuthorizationError):
        create_authority_address(PROGRAM, POOL, 256)


def test_proof_address_matches_derivation() -> None:
    proof = AuthorityProof(program_id=PROGRAM, pool_key=POOL, bump_seed=3)
    assert proof.address == create_authority_address(PROGRAM, POOL, 3)
