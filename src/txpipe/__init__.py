__all__ = [
    # Context
    "Client",
    "ClientConfig",
    # Node
    "Connection",
    "RpcClient",
    "connect",
    # Identity
    "Identity",
    "SignedTransaction",
    "generate_key",
    "init_identity",
    "load_private_key",
    "recover_sender",
    "sign",
    # Transactions
    "UnsignedTransaction",
    "build",
    "estimate_gas_limit",
    "suggest_price",
    "suggest_dynamic_fees",
    # Pipeline
    "ReceiptStatus",
    "Stage",
    "SubmissionOutcome",
    "send_signed",
    "submit",
    # Read calls
    "AbiCodec",
    "call",
    "call_function",
    # Sinks
    "LineSink",
    "ListSink",
    "LoggingSink",
    "EchoSink",
    "NullSink",
    # Errors
    "TxPipeError",
    "ConfigError",
    "NodeConnectionError",
    "KeyFormatError",
    "TransactionFormatError",
    "AbiError",
    "RPCError",
    "CallError",
    "ReceiptTimeout",
    "PipelineError",
    "NonceError",
    "GasEstimationError",
    "SigningError",
    "BroadcastError",
]

__version__ = "0.3.0"

from .abi import AbiCodec
from .calls import call, call_function
from .client import Client
from .config import ClientConfig
from .errors import (
    AbiError,
    BroadcastError,
    CallError,
    ConfigError,
    GasEstimationError,
    KeyFormatError,
    NodeConnectionError,
    NonceError,
    PipelineError,
    ReceiptTimeout,
    RPCError,
    SigningError,
    TransactionFormatError,
    TxPipeError,
)
from .gas import estimate_gas_limit, suggest_dynamic_fees, suggest_price
from .identity.keys import (
    Identity,
    SignedTransaction,
    generate_key,
    init_identity,
    load_private_key,
    recover_sender,
    sign,
)
from .node.connector import Connection, connect
from .node.rpc import RpcClient
from .pipeline import ReceiptStatus, Stage, SubmissionOutcome, send_signed, submit
from .sinks import EchoSink, LineSink, ListSink, LoggingSink, NullSink
from .tx import UnsignedTransaction, build
