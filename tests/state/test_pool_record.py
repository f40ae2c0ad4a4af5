# [TESTER] v1

from __future__ import annotations

import hashlib

import pytest

from tokenswap.core.errors import AccountError, ErrorCode
from tokenswap.core.fees import Fees
from tokenswap.state.pool import POOL_LEN, SwapPool
from tokenswap.state.repository import InMemoryPoolRepository


def _addr(label: str) -> bytes:
    return hashlib.sha256(label.encode()).digest()


def _pool() -> SwapPool:
    return SwapPool(
        is_initialized=True,
        bump_seed=254,
        token_program_id=_addr("token-program"),
        token_a=_addr("a"),
        token_b=_addr("b"),
        pool_mint=_addr("pool-mint"),
        token_a_mint=_addr("mint-a"),
        token_b_mint=_addr("mint-b"),
        token_a_fee_account=_addr("fee-a"),
        token_b_fee_account=_addr("fee-b"),
        fees=Fees(1, 100),
    )


def test_pool_record_is_274_bytes() -> None:
    assert POOL_LEN == 274
    assert len(_pool().pack()) == 274
    assert len(SwapPool().pack()) == 274


def test_pool_record_field_offsets() -> None:
    data = _pool().pack()
    assert data[0] == 1
    assert data[1] == 254
    assert data[2:34] == _addr("token-program")
    assert data[34:66] == _addr("a")
    assert data[66:98] == _addr("b")
    assert data[98:130] == _addr("pool-mint")
    assert data[130:162] == _addr("mint-a")
    assert data[162:194] == _addr("mint-b")
    assert data[194:226] == _addr("fee-a")
    assert data[226:258] == _addr("fee-b")
    assert data[258:266] == (1).to_bytes(8, "little")
    assert data[266:274] == (100).to_bytes(8, "little")


def test_unpack_inverts_pack() -> None:
    pool = _pool()
    assert SwapPool.unpack(pool.pack()) == pool


def test_unpack_rejects_uninitialized_record() -> None:
    zeroed = bytes(POOL_LEN)
    assert SwapPool.unpack_unchecked(zeroed) == SwapPool()
    with pytest.raises(AccountError) as excinfo:
        SwapPool.unpack(zeroed)
    assert excinfo.value.code is ErrorCode.UNINITIALIZED_ACCOUNT


@pytest.mark.parametrize("length", [0, 273, 275])
def test_unpack_rejects_wrong_length(length: int) -> None:
    with pytest.raises(AccountError) as excinfo:
        SwapPool.unpack_unchecked(bytes(length))
    assert excinfo.value.code is ErrorCode.INVALID_ACCOUNT_DATA


def test_unpack_rejects_garbage_initialized_flag() -> None:
    data = bytearray(_pool().pack())
    data[0] = 2
    with pytest.raises(AccountError) as excinfo:
        SwapPool.unpack_unchecked(bytes(data))
    assert excinfo.value.code is ErrorCode.INVALID_ACCOUNT_DATA


def test_pool_rejects_out_of_range_bump() -> None:
    with pytest.raises(ValueError):
        SwapPool(bump_seed=256)


def test_repository_stores_packed_records() -> None:
    repo = InMemoryPoolRepository()
    key = _addr("pool")
    assert repo.load(key) is None

    repo.allocate(key)
    assert repo.load(key) == SwapPool()
    with pytest.raises(ValueError):
        repo.allocate(key)

    repo.store(key, _pool())
    assert repo.load_raw(key) == _pool().pack()
    assert repo.load(key) == _pool()


def test_repository_snapshot_restore() -> None:
    repo = InMemoryPoolRepository()
    key = _addr("pool")
    repo.allocate(key)
    snap = repo.snapshot()
    repo.store(key, _pool())
    repo.restore(snap)
    assert repo.load(key) == SwapPool()


def test_repository_surfaces_corrupt_slot() -> None:
    repo = InMemoryPoolRepository()
    key = _addr("pool")
    repo.store_raw(key, b"\x07" + bytes(POOL_LEN - 1))
    with pytest.raises(AccountError):
        repo.load(key)
