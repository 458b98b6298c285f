from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import ReceiptTimeout, RPCError
from ..utils import from_quantity
from .connector import Connection

DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_POLL_INTERVAL = 2.0


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    status: int
    block_number: int
    gas_used: Optional[int]
    contract_address: Optional[str]
    raw: dict[str, Any]

    @classmethod
    def from_rpc(cls, payload: dict[str, Any]) -> "Receipt":
        gas_used = payload.get("gasUsed")
        return cls(
            tx_hash=payload.get("transactionHash", ""),
            status=from_quantity(payload.get("status", "0x0")),
            block_number=from_quantity(payload["blockNumber"]),
            gas_used=from_quantity(gas_used) if gas_used is not None else None,
            contract_address=payload.get("contractAddress"),
            raw=payload,
        )


def get_receipt(conn: Connection, tx_hash: str) -> Optional[Receipt]:
    """Return the receipt if the transaction is mined, else None.

    Raises:
        RPCError: If the call fails or the node answers with a malformed receipt
    """
    payload = conn.rpc.request("eth_getTransactionReceipt", [tx_hash])
    if not payload:
        return None
    if not isinstance(payload, dict):
        raise RPCError(f"malformed receipt {payload!r}", method="eth_getTransactionReceipt")
    if payload.get("blockNumber") is None:
        return None
    try:
        return Receipt.from_rpc(payload)
    except (ValueError, TypeError) as exc:
        raise RPCError(
            f"malformed receipt for {tx_hash}: {exc}", method="eth_getTransactionReceipt"
        ) from exc


def wait_for_receipt(
    conn: Connection,
    tx_hash: str,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel: Optional[threading.Event] = None,
) -> Receipt:
    """
    Poll for a transaction receipt.

    Args:
        conn: Node connection
        tx_hash: Transaction hash
        timeout: Maximum wait time in seconds
        poll_interval: Delay between polls in seconds
        cancel: Optional event; setting it stops the wait early

    Returns:
        The mined transaction's receipt

    Raises:
        ReceiptTimeout: If no receipt appears before the deadline or the
            wait is cancelled
        RPCError: If a poll fails
    """
    cancel = cancel or threading.Event()
    start = time.monotonic()
    deadline = start + timeout

    while True:
        if cancel.is_set():
            raise ReceiptTimeout(tx_hash, time.monotonic() - start, cancelled=True)

        receipt = get_receipt(conn, tx_hash)
        if receipt is not None:
            return receipt

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ReceiptTimeout(tx_hash, timeout)
        if cancel.wait(min(poll_interval, remaining)):
            raise ReceiptTimeout(tx_hash, time.monotonic() - start, cancelled=True)
