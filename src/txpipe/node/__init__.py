"""
Node layer - JSON-RPC transport, connection, and receipt polling.

Uses httpx instead of the heavyweight web3.py.
"""

from .connector import Connection, connect
from .receipts import Receipt, get_receipt, wait_for_receipt
from .rpc import RpcClient

__all__ = [
    "Connection",
    "Receipt",
    "RpcClient",
    "connect",
    "get_receipt",
    "wait_for_receipt",
]
