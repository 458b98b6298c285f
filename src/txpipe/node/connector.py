"""
Node Connector - a live JSON-RPC handle plus the chain id used for signing.

The chain id is read once when connecting and never refreshed; every
signature produced through a Connection is bound to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..errors import NodeConnectionError, RPCError
from ..utils import from_quantity
from .rpc import DEFAULT_TIMEOUT, RpcClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connection:
    """
    Attributes:
        rpc: JSON-RPC client for the endpoint
        chain_id: Chain identifier fetched at connect time
    """
    rpc: RpcClient
    chain_id: int

    @property
    def endpoint(self) -> str:
        return self.rpc.url

    def pending_nonce(self, address: str) -> int:
        """Next nonce for ``address``, counting its not-yet-mined transactions."""
        result = self.rpc.request("eth_getTransactionCount", [address, "pending"])
        return from_quantity(result)

    def close(self) -> None:
        self.rpc.close()


def _fetch_chain_id(rpc: RpcClient) -> int:
    try:
        return from_quantity(rpc.request("eth_chainId"))
    except RPCError as exc:
        # Nodes without eth_chainId (pre EIP-695) still answer net_version.
        if exc.code is None:
            raise
        logger.debug("eth_chainId unsupported (%s), falling back to net_version", exc)
    return from_quantity(rpc.request("net_version"))


def connect(
    endpoint: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> Connection:
    """
    Open a connection to a node and cache its chain id.

    Args:
        endpoint: HTTP(S) JSON-RPC URL
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport override

    Returns:
        Connection with a resolved chain id

    Raises:
        NodeConnectionError: If the endpoint is unusable or the chain id
            cannot be read
    """
    if not endpoint:
        raise NodeConnectionError("RPC endpoint is empty")

    rpc = RpcClient(endpoint, timeout=timeout, transport=transport)
    try:
        chain_id = _fetch_chain_id(rpc)
    except (RPCError, ValueError) as exc:
        rpc.close()
        raise NodeConnectionError(f"Cannot read chain id from {endpoint}: {exc}") from exc

    logger.info("Connected to %s (chain id %d)", endpoint, chain_id)
    return Connection(rpc=rpc, chain_id=chain_id)
