"""
Shared fixtures: an in-memory JSON-RPC node behind httpx.MockTransport.

No network access; every test talks to FakeNode.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Callable, Optional

import httpx
import pytest
from eth_utils import keccak

from txpipe.client import Client
from txpipe.config import ClientConfig

# Well-known throwaway test key (never funded on any real network).
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

RPC_URL = "http://node.test:8545"


class RpcFault(Exception):
    """Raised by a handler to make FakeNode answer with a JSON-RPC error."""

    def __init__(self, message: str, code: int = -32000, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class FakeNode:
    """
    Minimal Ethereum JSON-RPC node.

    Defaults: chain id 1337, pending nonce 5, gas price 20 wei, gas limit
    21000; broadcast transactions are mined immediately with status 1 in
    block 16.  Override any method with ``on(method, result)`` or
    ``on(method, handler=fn)``; ``fail(method, ...)`` makes it error.
    """

    def __init__(self, chain_id: int = 1337) -> None:
        self.chain_id = chain_id
        self.base_nonce = 5
        self.sent: list[bytes] = []
        self.calls: list[tuple[str, list]] = []
        self.receipt_status = 1
        self.mine = True
        self._lock = threading.Lock()
        self._handlers: dict[str, Callable[[list], Any]] = {
            "eth_chainId": lambda params: hex(self.chain_id),
            "net_version": lambda params: str(self.chain_id),
            "eth_getTransactionCount": self._nonce,
            "eth_estimateGas": lambda params: hex(21000),
            "eth_gasPrice": lambda params: hex(20),
            "eth_maxPriorityFeePerGas": lambda params: hex(2),
            "eth_getBlockByNumber": lambda params: {"number": "0x10", "baseFeePerGas": hex(10)},
            "eth_sendRawTransaction": self._send_raw,
            "eth_getTransactionReceipt": self._receipt,
            "eth_call": lambda params: "0x",
        }

    # ---- configuration ----

    def on(self, method: str, result: Any = None, *, handler: Optional[Callable[[list], Any]] = None) -> None:
        self._handlers[method] = handler or (lambda params: result)

    def fail(self, method: str, message: str = "boom", code: int = -32000) -> None:
        def _raise(params: list) -> Any:
            raise RpcFault(message, code)

        self._handlers[method] = _raise

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def params_of(self, method: str) -> list:
        for name, params in self.calls:
            if name == method:
                return params
        raise AssertionError(f"{method} was never called")

    # ---- default handlers ----

    def _nonce(self, params: list) -> str:
        with self._lock:
            return hex(self.base_nonce + len(self.sent))

    def _send_raw(self, params: list) -> str:
        raw = bytes.fromhex(params[0][2:])
        with self._lock:
            self.sent.append(raw)
        return "0x" + keccak(raw).hex()

    def _receipt(self, params: list) -> Optional[dict]:
        tx_hash = params[0]
        known = {"0x" + keccak(raw).hex() for raw in self.sent}
        if not self.mine or tx_hash not in known:
            return None
        return {
            "transactionHash": tx_hash,
            "status": hex(self.receipt_status),
            "blockNumber": "0x10",
            "gasUsed": hex(21000),
            "contractAddress": None,
        }

    # ---- transport ----

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body.get("params", [])
        with self._lock:
            self.calls.append((method, params))

        handler = self._handlers.get(method)
        if handler is None:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "method not found"}},
            )
        try:
            result = handler(params)
        except RpcFault as fault:
            error = {"code": fault.code, "message": fault.message}
            if fault.data is not None:
                error["data"] = fault.data
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig(
        rpc_url=RPC_URL,
        rpc_timeout=5.0,
        receipt_timeout=1.0,
        poll_interval=0.0,
        fallback_gas_price=7,
    )


@pytest.fixture()
def client(node: FakeNode, config: ClientConfig) -> Client:
    c = Client.connect(TEST_PRIVATE_KEY, config=config, transport=node.transport())
    yield c
    c.close()
