"""
Client - the explicit context every operation runs against.

A Client binds one Connection (endpoint + chain id) to one Identity
(signing key) and owns the lock that serializes nonce acquisition
through broadcast.  Several clients may coexist in one process, for
example one per chain.
"""

from __future__ import annotations

import threading
from typing import Any, Optional, Union

import httpx

from . import gas, pipeline
from .abi import AbiCodec
from .calls import call, call_function
from .config import ClientConfig
from .identity.keys import Identity, init_identity
from .node.connector import Connection, connect
from .pipeline import SinkLike, SubmissionOutcome
from .tx import UnsignedTransaction


class Client:
    """
    One signing identity on one node.

    ``submit_lock`` belongs to this instance.  Two Clients built from the
    same key on the same chain do not share it and can race for the same
    pending nonce; share one Client across threads instead.
    """

    def __init__(
        self,
        connection: Connection,
        identity: Identity,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self.connection = connection
        self.identity = identity
        self.config = config or ClientConfig(rpc_url=connection.endpoint)
        self.submit_lock = threading.Lock()

    @classmethod
    def connect(
        cls,
        private_key_hex: str,
        endpoint: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "Client":
        """
        Parse the key, connect to the node, and read its chain id.

        Raises:
            KeyFormatError: If the key is malformed
            NodeConnectionError: If the node is unreachable
        """
        config = config or ClientConfig()
        identity = init_identity(private_key_hex)
        connection = connect(
            endpoint or config.rpc_url,
            timeout=config.rpc_timeout,
            transport=transport,
        )
        return cls(connection, identity, config)

    def __repr__(self) -> str:
        return f"Client(endpoint={self.connection.endpoint!r}, chain_id={self.chain_id}, address={self.address})"

    @property
    def address(self) -> str:
        return self.identity.address

    @property
    def chain_id(self) -> int:
        return self.connection.chain_id

    # ---- Node queries ----

    def nonce(self) -> int:
        return self.connection.pending_nonce(self.address)

    def suggest_gas_price(self) -> int:
        return gas.suggest_price(self.connection)

    def call(self, to: str, encoded_input: Union[bytes, str]) -> bytes:
        return call(self.connection, self.address, to, encoded_input)

    def call_function(self, to: str, codec: AbiCodec, name: str, *args: Any) -> tuple[Any, ...]:
        return call_function(self.connection, self.address, to, codec, name, *args)

    # ---- Transactions ----

    def submit(self, to: str, data: Union[bytes, str, None] = b"", **kwargs: Any) -> SubmissionOutcome:
        """See :func:`txpipe.pipeline.submit`."""
        return pipeline.submit(self, to, data, **kwargs)

    def send_signed(self, unsigned_tx: UnsignedTransaction, **kwargs: Any) -> SubmissionOutcome:
        """See :func:`txpipe.pipeline.send_signed`."""
        return pipeline.send_signed(self, unsigned_tx, **kwargs)

    def invoke(
        self,
        to: str,
        codec: AbiCodec,
        name: str,
        *args: Any,
        sink: SinkLike = None,
        **kwargs: Any,
    ) -> SubmissionOutcome:
        """Pack ``name(*args)`` with ``codec`` and submit it."""
        return pipeline.submit(self, to, codec.pack(name, *args), sink=sink, **kwargs)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
