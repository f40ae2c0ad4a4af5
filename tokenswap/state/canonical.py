"""
Fixed-width binary encoding primitives.

Every on-ledger structure (instruction buffers, the pool record, the fee
record) is a concatenation of fixed-width little-endian unsigned integers and
32-byte addresses with no padding. These helpers keep the byte arithmetic in
one place so the record layouts read as a list of fields.
"""

from __future__ import annotations

import re
import struct

from ..core.errors import ErrorCode, swap_error

ADDRESS_LEN = 32

_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")
_U64 = struct.Struct("<Q")


def encode_u8(value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool) or not (0 <= value <= 0xFF):
        raise ValueError(f"u8 must be an int in [0, 255], got {value!r}")
    return bytes((value,))


def encode_u64(value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"u64 must be an int, got {value!r}")
    try:
        return _U64.pack(value)
    except struct.error as exc:
        raise ValueError(f"u64 out of range: {value}") from exc


def encode_address(value: bytes) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != ADDRESS_LEN:
        raise ValueError(f"address must be {ADDRESS_LEN} bytes")
    return bytes(value)


class ByteReader:
    """
    Sequential reader over an immutable buffer.

    Every short read raises a ``SwapError`` with ``error_code`` so the caller
    decides whether truncation is an instruction or an account-data problem.
    """

    def __init__(self, data: bytes, *, error_code: ErrorCode = ErrorCode.INVALID_INSTRUCTION) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0
        self._error_code = error_code

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def _take(self, n: int, what: str) -> bytes:
        if self.remaining < n:
            raise swap_error(self._error_code, f"truncated {what}: need {n} bytes, have {self.remaining}")
        chunk = bytes(self._data[self._pos:self._pos + n])
        self._pos += n
        return chunk

    def read_u8(self, what: str = "u8") -> int:
        return self._take(1, what)[0]

    def read_u64(self, what: str = "u64") -> int:
        return _U64.unpack(self._take(8, what))[0]

    def read_address(self, what: str = "address") -> bytes:
        return self._take(ADDRESS_LEN, what)


def address_from_hex(hex_str: str, *, name: str = "address") -> bytes:
    """Parse a 32-byte address from hex (``0x`` prefix optional)."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    s = hex_str.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    expected_len = 2 * ADDRESS_LEN
    if len(s) != expected_len:
        raise ValueError(f"{name} must be {ADDRESS_LEN} bytes (hex length {expected_len})")
    if not _HEX_CHARS_RE.fullmatch(s):
        raise ValueError(f"{name} must be valid hex")
    return bytes.fromhex(s)


def address_to_hex(address: bytes) -> str:
    return "0x" + encode_address(address).hex()
