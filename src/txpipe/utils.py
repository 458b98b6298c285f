from __future__ import annotations

from typing import Any, Union

from eth_utils import is_address, to_checksum_address

from .errors import TransactionFormatError

UINT64_MAX = 2**64 - 1


def to_quantity(value: int) -> str:
    """Encode an integer as a JSON-RPC quantity (0x-prefixed, no leading zeros)."""
    if value < 0:
        raise ValueError(f"Quantity must be non-negative: {value}")
    return hex(value)


def from_quantity(value: Any) -> int:
    """Decode a JSON-RPC quantity. Plain ints and decimal strings pass through."""
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Not a quantity: {value!r}")
    if value.startswith(("0x", "0X")):
        return int(value, 16)
    return int(value)


def to_data(data: bytes) -> str:
    return "0x" + data.hex()


def from_data(value: str) -> bytes:
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def coerce_bytes(data: Union[bytes, bytearray, str, None]) -> bytes:
    """Accept call data as bytes or as a hex string (0x prefix optional)."""
    if data is None:
        return b""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        try:
            return from_data(data.strip())
        except ValueError as exc:
            raise TransactionFormatError(f"Invalid hex data: {data!r}") from exc
    raise TransactionFormatError(f"Unsupported data type: {type(data).__name__}")


def checksum_address(address: str) -> str:
    """Validate a 20-byte hex address and return its EIP-55 form."""
    if not isinstance(address, str) or not is_address(address):
        raise TransactionFormatError(f"Invalid address: {address!r}")
    return to_checksum_address(address)
