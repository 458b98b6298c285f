"""
JSON-RPC transport for Ethereum-compatible nodes.

Lightweight alternative to web3.py: a single httpx client posting
JSON-RPC 2.0 envelopes to one endpoint.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Optional

import httpx

from ..errors import RPCError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class RpcClient:
    """
    Blocking JSON-RPC client bound to a single endpoint.

    Args:
        url: HTTP(S) endpoint of the node
        timeout: Per-request timeout in seconds (connect + read)
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self._http = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"RpcClient(url={self.url!r})"

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def request(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RPCError: On transport failure, HTTP error status, malformed
                response, or a JSON-RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._next_id(),
        }
        logger.debug("rpc -> %s", method)

        try:
            response = self._http.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise RPCError(f"{method}: request timed out", method=method) from exc
        except httpx.HTTPError as exc:
            raise RPCError(f"{method}: {exc}", method=method) from exc
        except ValueError as exc:
            raise RPCError(f"{method}: invalid JSON response", method=method) from exc

        if not isinstance(data, dict):
            raise RPCError(f"{method}: unexpected response shape", method=method)

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RPCError(
                    f"{method}: {error.get('message', 'unknown error')}",
                    method=method,
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RPCError(f"{method}: {error}", method=method)

        logger.debug("rpc <- %s ok", method)
        return data.get("result")

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
