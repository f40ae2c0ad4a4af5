"""
Instruction codec.

Wire format: one tag byte followed by the variant's fields as little-endian
u64 values, concatenated without padding.

    tag 0  Initialize      fees (numerator u64, denominator u64)
    tag 1  DepositTokens   pool_token_amount, maximum_token_a_amount, maximum_token_b_amount
    tag 2  WithdrawTokens  pool_token_amount, minimum_token_a_amount, minimum_token_b_amount
    tag 3  Swap            amount_in, minimum_amount_out
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique
from typing import Union

from ..core.checked_math import require_u64
from ..core.errors import ErrorCode, swap_error
from ..core.fees import FEES_LEN, Fees
from ..state.canonical import ByteReader, encode_u64, encode_u8


@unique
class InstructionTag(IntEnum):
    INITIALIZE = 0
    DEPOSIT_TOKENS = 1
    WITHDRAW_TOKENS = 2
    SWAP = 3


@dataclass(frozen=True)
class Initialize:
    fees: Fees

    tag = InstructionTag.INITIALIZE

    def __post_init__(self) -> None:
        if not isinstance(self.fees, Fees):
            raise TypeError("fees must be a Fees instance")


@dataclass(frozen=True)
class DepositTokens:
    """Mint ``pool_token_amount`` pool tokens; A/B amounts follow the pool ratio."""

    pool_token_amount: int
    maximum_token_a_amount: int
    maximum_token_b_amount: int

    tag = InstructionTag.DEPOSIT_TOKENS

    def __post_init__(self) -> None:
        require_u64("pool_token_amount", self.pool_token_amount)
        require_u64("maximum_token_a_amount", self.maximum_token_a_amount)
        require_u64("maximum_token_b_amount", self.maximum_token_b_amount)


@dataclass(frozen=True)
class WithdrawTokens:
    """Burn ``pool_token_amount`` pool tokens for the proportional share of A and B."""

    pool_token_amount: int
    minimum_token_a_amount: int
    minimum_token_b_amount: int

    tag = InstructionTag.WITHDRAW_TOKENS

    def __post_init__(self) -> None:
        require_u64("pool_token_amount", self.pool_token_amount)
        require_u64("minimum_token_a_amount", self.minimum_token_a_amount)
        require_u64("minimum_token_b_amount", self.minimum_token_b_amount)


@dataclass(frozen=True)
class Swap:
    amount_in: int
    minimum_amount_out: int

    tag = InstructionTag.SWAP

    def __post_init__(self) -> None:
        require_u64("amount_in", self.amount_in)
        require_u64("minimum_amount_out", self.minimum_amount_out)


SwapInstruction = Union[Initialize, DepositTokens, WithdrawTokens, Swap]


def decode(data: bytes) -> SwapInstruction:
    """
    Decode an instruction buffer.

    Raises:
        InstructionError: empty buffer, unknown tag, or a truncated field
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("instruction data must be bytes")
    if len(data) == 0:
        raise swap_error(ErrorCode.INVALID_INSTRUCTION, "empty instruction buffer")

    reader = ByteReader(data)
    tag = reader.read_u8("tag")

    if tag == InstructionTag.INITIALIZE:
        if reader.remaining != FEES_LEN:
            raise swap_error(
                ErrorCode.INVALID_INSTRUCTION,
                f"Initialize payload must be {FEES_LEN} bytes, got {reader.remaining}",
            )
        return Initialize(fees=Fees.read_from(reader))
    if tag == InstructionTag.DEPOSIT_TOKENS:
        return DepositTokens(
            pool_token_amount=reader.read_u64("pool_token_amount"),
            maximum_token_a_amount=reader.read_u64("maximum_token_a_amount"),
            maximum_token_b_amount=reader.read_u64("maximum_token_b_amount"),
        )
    if tag == InstructionTag.WITHDRAW_TOKENS:
        return WithdrawTokens(
            pool_token_amount=reader.read_u64("pool_token_amount"),
            minimum_token_a_amount=reader.read_u64("minimum_token_a_amount"),
            minimum_token_b_amount=reader.read_u64("minimum_token_b_amount"),
        )
    if tag == InstructionTag.SWAP:
        return Swap(
            amount_in=reader.read_u64("amount_in"),
            minimum_amount_out=reader.read_u64("minimum_amount_out"),
        )
    raise swap_error(ErrorCode.INVALID_INSTRUCTION, f"unknown instruction tag: {tag}")


def encode(instruction: SwapInstruction) -> bytes:
    """Exact inverse of ``decode``."""
    if isinstance(instruction, Initialize):
        return encode_u8(instruction.tag) + instruction.fees.pack()
    if isinstance(instruction, DepositTokens):
        return (
            encode_u8(instruction.tag)
            + encode_u64(instruction.pool_token_amount)
            + encode_u64(instruction.maximum_token_a_amount)
            + encode_u64(instruction.maximum_token_b_amount)
        )
    if isinstance(instruction, WithdrawTokens):
        return (
            encode_u8(instruction.tag)
            + encode_u64(instruction.pool_token_amount)
            + encode_u64(instruction.minimum_token_a_amount)
            + encode_u64(instruction.minimum_token_b_amount)
        )
    if isinstance(instruction, Swap):
        return (
            encode_u8(instruction.tag)
            + encode_u64(instruction.amount_in)
            + encode_u64(instruction.minimum_amount_out)
        )
    raise TypeError(f"unsupported instruction type: {type(instruction).__name__}")
