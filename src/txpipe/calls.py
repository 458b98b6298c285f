"""
Read calls - simulate a contract call against current state (eth_call).

No nonce, no gas payment, no signature.  The identity's address is only
used as the simulated ``msg.sender``.
"""

from __future__ import annotations

from typing import Any, Union

from .abi import AbiCodec
from .errors import CallError, RPCError
from .node.connector import Connection
from .utils import checksum_address, coerce_bytes, from_data, to_data


def call(
    conn: Connection,
    sender: str,
    to: str,
    encoded_input: Union[bytes, str],
    block: str = "latest",
) -> bytes:
    """
    Execute a read-only call.

    Args:
        conn: Node connection
        sender: Simulated sender address
        to: Contract address
        encoded_input: ABI-encoded call data
        block: Block tag or hex number to read at

    Returns:
        Raw return data

    Raises:
        CallError: If the node rejects the call or returns malformed data
    """
    payload = {
        "from": sender,
        "to": checksum_address(to),
        "data": to_data(coerce_bytes(encoded_input)),
    }
    try:
        result = conn.rpc.request("eth_call", [payload, block])
    except RPCError as exc:
        raise CallError(f"Call to {payload['to']} failed: {exc}") from exc

    if result is None:
        return b""
    try:
        return from_data(result)
    except (TypeError, ValueError) as exc:
        raise CallError(f"Malformed eth_call result: {result!r}") from exc


def call_function(
    conn: Connection,
    sender: str,
    to: str,
    codec: AbiCodec,
    name: str,
    *args: Any,
) -> tuple[Any, ...]:
    """Pack ``name(*args)``, call it, and unpack the result."""
    raw = call(conn, sender, to, codec.pack(name, *args))
    if not raw:
        return ()
    return codec.unpack(name, raw)
