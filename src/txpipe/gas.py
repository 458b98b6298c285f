"""
Gas Estimator - node-suggested prices and simulated gas limits.

Price suggestions are advisory: callers may fall back to a default when
the node cannot answer, since an underpriced transaction is simply
rejected or left unmined.  A gas limit is not advisory; without one the
transaction cannot be built safely.
"""

from __future__ import annotations

from typing import Optional

from .errors import RPCError
from .node.connector import Connection
from .utils import UINT64_MAX, from_quantity, to_data, to_quantity


def suggest_price(conn: Connection) -> int:
    """
    Node-suggested legacy gas price in wei (eth_gasPrice).

    Raises:
        RPCError: If the node cannot answer
    """
    return _quantity(conn, "eth_gasPrice", [])


def suggest_priority_fee(conn: Connection) -> int:
    """Node-suggested tip per gas in wei (eth_maxPriorityFeePerGas)."""
    return _quantity(conn, "eth_maxPriorityFeePerGas", [])


def latest_base_fee(conn: Connection) -> int:
    """Base fee of the latest block.

    Raises:
        RPCError: If the block cannot be read or predates the London fork
    """
    method = "eth_getBlockByNumber"
    block = conn.rpc.request(method, ["latest", False])
    if not isinstance(block, dict) or block.get("baseFeePerGas") is None:
        raise RPCError("Latest block has no baseFeePerGas", method=method)
    return _parse(method, block["baseFeePerGas"])


def suggest_dynamic_fees(conn: Connection) -> tuple[int, int]:
    """
    Fee cap and tip for a dynamic-fee transaction.

    The cap leaves room for the base fee to double before inclusion.

    Returns:
        Tuple of (max_fee_per_gas, max_priority_fee_per_gas)
    """
    tip = suggest_priority_fee(conn)
    base_fee = latest_base_fee(conn)
    return 2 * base_fee + tip, tip


def estimate_gas_limit(
    conn: Connection,
    sender: str,
    to: str,
    value: int = 0,
    data: bytes = b"",
) -> int:
    """
    Simulate the call on the node and return the gas it would use.

    Raises:
        RPCError: If the simulation fails (revert, insufficient balance, ...)
    """
    call: dict[str, str] = {"from": sender, "to": to}
    if value:
        call["value"] = to_quantity(value)
    if data:
        call["data"] = to_data(data)
    limit = _quantity(conn, "eth_estimateGas", [call])
    if limit > UINT64_MAX:
        raise RPCError(f"eth_estimateGas: estimate {limit} exceeds uint64", method="eth_estimateGas")
    return limit


def _quantity(conn: Connection, method: str, params: list) -> int:
    return _parse(method, conn.rpc.request(method, params))


def _parse(method: str, result: Optional[str]) -> int:
    try:
        return from_quantity(result)
    except ValueError as exc:
        raise RPCError(f"{method}: malformed quantity {result!r}", method=method) from exc
