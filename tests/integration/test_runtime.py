from __future__ import annotations

import dataclasses
import logging

import pytest

from conftest import FEE_A, POOL, PROGRAM_ID, TOKEN_A, TOKEN_B, TOKEN_PROGRAM_ID, USER, USER_A, USER_B, addr
from tokenswap.config import config_from_mapping
from tokenswap.core.errors import BusinessRuleError, ErrorCode, LedgerError
from tokenswap.core.fees import Fees
from tokenswap.integration import client
from tokenswap.integration.client import InstructionRequest
from tokenswap.integration.runtime import ExecutionEnvironment
from tokenswap.state.canonical import address_to_hex


def _swap_request(pool, minimum_amount_out: int = 0) -> InstructionRequest:
    return client.swap(
        PROGRAM_ID, TOKEN_PROGRAM_ID, POOL, pool.authority, USER,
        USER_A, TOKEN_A, TOKEN_B, USER_B, FEE_A, 100, minimum_amount_out,
    )


def test_failure_after_first_command_restores_everything(pool, monkeypatch) -> None:
    real_transfer = pool.ledger.transfer
    seen = []

    def flaky_transfer(source, destination, authority, amount):
        seen.append(amount)
        if len(seen) == 2:
            raise LedgerError("injected failure")
        real_transfer(source, destination, authority, amount)

    monkeypatch.setattr(pool.ledger, "transfer", flaky_transfer)

    result = pool.env.invoke(_swap_request(pool))
    assert not result.ok
    assert isinstance(result.error, LedgerError)
    assert seen == [99, 91]
    assert pool.ledger.balance(USER_A) == 10_000
    assert pool.ledger.balance(TOKEN_A) == 1000
    assert pool.ledger.calls == []


def test_invoke_or_raise_reraises_and_logs_rollback(pool, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="tokenswap"):
        with pytest.raises(BusinessRuleError):
            pool.env.invoke_or_raise(_swap_request(pool, minimum_amount_out=10**6))
    assert "rolled back" in caplog.text


def test_signers_do_not_leak_between_invocations(pool) -> None:
    assert pool.env.invoke(_swap_request(pool)).ok
    with pytest.raises(LedgerError, match="missing signature"):
        pool.ledger.transfer(USER_A, TOKEN_A, USER, 1)


def test_extra_signers_are_honoured(pool) -> None:
    request = _swap_request(pool)
    unsigned = InstructionRequest(
        request.program_id,
        tuple(client.AccountMeta(m.address, False, m.is_writable) for m in request.accounts),
        request.data,
    )
    assert isinstance(pool.env.invoke(unsigned).error, LedgerError)
    assert pool.env.invoke(unsigned, signers=[USER]).ok


def test_request_for_another_program_is_refused(pool) -> None:
    request = _swap_request(pool)
    foreign = InstructionRequest(addr("other-program"), request.accounts, request.data)
    with pytest.raises(ValueError):
        pool.env.invoke(foreign)


def test_environment_from_config_applies_program_and_constraints(make_harness) -> None:
    config = config_from_mapping(
        {"program_id": address_to_hex(PROGRAM_ID), "constraints": {"fee_multiplier": 100}}
    )
    harness = make_harness()
    env = ExecutionEnvironment.from_config(config, harness.ledger, harness.repository)
    assert env.program_id == PROGRAM_ID
    strict = dataclasses.replace(harness, env=env)

    assert strict.initialize(Fees(1, 100)).error.code is ErrorCode.INVALID_FEE
    assert strict.initialize(Fees(1, 101)).ok
