"""
Submission Pipeline - nonce, gas, build, sign, broadcast, receipt.

Stages run strictly in order and never loop back:

1. FetchNonce     pending nonce of the sender          (fatal: NonceError)
2. EstimateGas    eth_estimateGas                      (fatal: GasEstimationError)
3. PriceGas       eth_gasPrice or fee cap/tip          (absorbed: fallback price)
4. Build          UnsignedTransaction
5. Sign           chain-id aware signature             (fatal: SigningError)
6. Broadcast      eth_sendRawTransaction               (fatal: BroadcastError)
7. AwaitReceipt   poll until mined / timeout / cancel  (absorbed: status UNKNOWN)

Stages 1-6 hold the client's submission lock so two submissions from the
same client never read the same pending nonce.  Stage 7 runs unlocked.

Each stage writes into the SubmissionOutcome as it completes; a failing
stage raises a PipelineError carrying that partial outcome.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, NoReturn, Optional, Type, Union

from . import gas
from .errors import (
    BroadcastError,
    GasEstimationError,
    NonceError,
    PipelineError,
    ReceiptTimeout,
    RPCError,
    SigningError,
    TransactionFormatError,
)
from .identity.keys import SignedTransaction, sign
from .node.receipts import wait_for_receipt
from .sinks import LineSink, as_sink
from .tx import UnsignedTransaction, build
from .utils import checksum_address, coerce_bytes

if TYPE_CHECKING:
    from .client import Client

SinkLike = Union[LineSink, Callable[[str], None], None]


class Stage(str, Enum):
    FETCH_NONCE = "fetch_nonce"
    ESTIMATE_GAS = "estimate_gas"
    PRICE_GAS = "price_gas"
    BUILD = "build"
    SIGN = "sign"
    BROADCAST = "broadcast"
    AWAIT_RECEIPT = "await_receipt"


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    REVERTED = "reverted"
    UNKNOWN = "unknown"


@dataclass
class SubmissionOutcome:
    """
    Structured record of one submission, filled in stage by stage.

    Attributes:
        sender: Address that signs and pays
        to: Destination address
        value: Amount in wei
        chain_id: Chain the transaction is signed for
        nonce: Nonce used (set after FetchNonce)
        gas_limit: Gas limit (set after EstimateGas)
        gas_price: Legacy gas price (set after PriceGas)
        max_fee_per_gas: Fee cap for dynamic-fee transactions
        max_priority_fee_per_gas: Tip for dynamic-fee transactions
        fallback_price_used: True when the node's price suggestion failed
        tx_hash: Hash accepted by the node (set after Broadcast)
        status: None before broadcast, then a ReceiptStatus
        block_number: Block containing the transaction, once mined
        gas_used: Gas consumed, once mined
        stage: Last stage that completed
        warnings: Non-fatal problems met along the way
        error: Message of the error that stopped the pipeline
    """
    sender: str
    to: str
    value: int
    chain_id: int
    nonce: Optional[int] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    fallback_price_used: bool = False
    tx_hash: Optional[str] = None
    status: Optional[ReceiptStatus] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    stage: Optional[Stage] = None
    warnings: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def broadcast(self) -> bool:
        return self.tx_hash is not None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value if self.status else None
        data["stage"] = self.stage.value if self.stage else None
        return data


def _fail(
    outcome: SubmissionOutcome,
    sink: LineSink,
    error_cls: Type[PipelineError],
    message: str,
    cause: BaseException,
) -> NoReturn:
    outcome.error = f"{message}: {cause}"
    sink.record(outcome.error)
    raise error_cls(outcome.error, outcome) from cause


def _price_gas(
    client: "Client",
    outcome: SubmissionOutcome,
    sink: LineSink,
    dynamic_fee: bool,
    fallback: int,
) -> None:
    try:
        if dynamic_fee:
            max_fee, tip = gas.suggest_dynamic_fees(client.connection)
            outcome.max_fee_per_gas = max_fee
            outcome.max_priority_fee_per_gas = tip
        else:
            outcome.gas_price = gas.suggest_price(client.connection)
    except RPCError as exc:
        # Price is advisory: an underpriced transaction is rejected by the chain.
        outcome.fallback_price_used = True
        outcome.warnings.append(f"gas price suggestion failed ({exc}); using fallback {fallback}")
        sink.record(f"get gasPrice error, using fallback {fallback}: {exc}")
        if dynamic_fee:
            outcome.max_fee_per_gas = fallback
            outcome.max_priority_fee_per_gas = fallback
        else:
            outcome.gas_price = fallback


def _sign_and_broadcast(
    client: "Client",
    unsigned_tx: UnsignedTransaction,
    outcome: SubmissionOutcome,
    sink: LineSink,
) -> SignedTransaction:
    try:
        signed = sign(client.connection.chain_id, unsigned_tx, client.identity)
    except SigningError as exc:
        _fail(outcome, sink, SigningError, "sign tx error", exc)
    outcome.stage = Stage.SIGN

    try:
        returned = client.connection.rpc.request("eth_sendRawTransaction", [signed.raw_hex])
    except RPCError as exc:
        _fail(outcome, sink, BroadcastError, "send transaction error", exc)

    outcome.tx_hash = signed.tx_hash
    outcome.status = ReceiptStatus.PENDING
    outcome.stage = Stage.BROADCAST
    if isinstance(returned, str) and returned.lower() != signed.tx_hash:
        outcome.warnings.append(f"node returned hash {returned}, expected {signed.tx_hash}")
    sink.record(f"tx broadcast: {outcome.tx_hash}")
    return signed


def _await_receipt(
    client: "Client",
    outcome: SubmissionOutcome,
    sink: LineSink,
    timeout: float,
    poll_interval: float,
    cancel: Optional[threading.Event],
) -> None:
    try:
        receipt = wait_for_receipt(
            client.connection,
            outcome.tx_hash,
            timeout=timeout,
            poll_interval=poll_interval,
            cancel=cancel,
        )
    except (ReceiptTimeout, RPCError) as exc:
        # Broadcast already succeeded; the transaction may still be mined.
        outcome.status = ReceiptStatus.UNKNOWN
        outcome.warnings.append(f"receipt unavailable: {exc}")
        sink.record(f"wait mined error. {exc}")
        return

    outcome.status = ReceiptStatus.SUCCESS if receipt.status == 1 else ReceiptStatus.REVERTED
    outcome.block_number = receipt.block_number
    outcome.gas_used = receipt.gas_used
    outcome.stage = Stage.AWAIT_RECEIPT
    sink.record(f"receipted - status:{receipt.status}, blockNumber:{receipt.block_number}")


def _fee_line(outcome: SubmissionOutcome) -> str:
    if outcome.max_fee_per_gas is not None:
        return (
            f"nonce:{outcome.nonce} maxFee:{outcome.max_fee_per_gas} "
            f"tip:{outcome.max_priority_fee_per_gas} gasLimit:{outcome.gas_limit}"
        )
    return f"nonce:{outcome.nonce} gasPrice:{outcome.gas_price} gasLimit:{outcome.gas_limit}"


def submit(
    client: "Client",
    to: str,
    data: Union[bytes, str, None] = b"",
    *,
    value: int = 0,
    gas_price: Optional[int] = None,
    fallback_gas_price: Optional[int] = None,
    dynamic_fee: bool = False,
    wait: bool = True,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
    sink: SinkLike = None,
) -> SubmissionOutcome:
    """
    Build, sign, broadcast, and (optionally) confirm one transaction.

    Args:
        client: Connected client (connection + identity)
        to: Destination address
        data: Call data (bytes or hex string)
        value: Amount in wei
        gas_price: Fixed legacy gas price; skips the price suggestion
        fallback_gas_price: Price used when the suggestion fails
            (default: client config)
        dynamic_fee: Send a fee cap/tip transaction instead of a legacy one
        wait: Wait for the receipt after broadcast
        timeout: Receipt wait limit in seconds (default: client config)
        poll_interval: Receipt poll delay in seconds (default: client config)
        cancel: Event that aborts the receipt wait when set
        sink: Where progress lines go

    Returns:
        The outcome.  ``status`` is UNKNOWN when the receipt wait ended
        without a receipt; that is not an error.

    Raises:
        NonceError, GasEstimationError, SigningError, BroadcastError:
            With ``.outcome`` holding the partial record
        PipelineError: If node-supplied values do not form a valid
            transaction, also with ``.outcome``
        TransactionFormatError: On invalid arguments, before any RPC call
    """
    line_sink = as_sink(sink)
    config = client.config
    if gas_price is not None and dynamic_fee:
        raise TransactionFormatError("gas_price override applies to legacy transactions only")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TransactionFormatError(f"value must be a non-negative integer, got {value!r}")

    destination = checksum_address(to)
    payload = coerce_bytes(data)
    fallback = config.fallback_gas_price if fallback_gas_price is None else fallback_gas_price

    outcome = SubmissionOutcome(
        sender=client.address,
        to=destination,
        value=value,
        chain_id=client.chain_id,
    )
    line_sink.record(f"contract address: {destination}")

    with client.submit_lock:
        try:
            outcome.nonce = client.connection.pending_nonce(client.address)
        except (RPCError, ValueError) as exc:
            _fail(outcome, line_sink, NonceError, "get nonce error", exc)
        outcome.stage = Stage.FETCH_NONCE

        try:
            outcome.gas_limit = gas.estimate_gas_limit(
                client.connection, client.address, destination, value, payload
            )
        except RPCError as exc:
            _fail(outcome, line_sink, GasEstimationError, "get gaslimit error", exc)
        outcome.stage = Stage.ESTIMATE_GAS

        if gas_price is not None:
            outcome.gas_price = gas_price
        else:
            _price_gas(client, outcome, line_sink, dynamic_fee, fallback)
        outcome.stage = Stage.PRICE_GAS

        try:
            unsigned_tx = build(
                outcome.nonce,
                destination,
                value,
                outcome.gas_limit,
                outcome.gas_price,
                payload,
                max_fee_per_gas=outcome.max_fee_per_gas,
                max_priority_fee_per_gas=outcome.max_priority_fee_per_gas,
            )
        except TransactionFormatError as exc:
            # Node-supplied fields (nonce, fees) can still be out of range.
            _fail(outcome, line_sink, PipelineError, "build tx error", exc)
        outcome.stage = Stage.BUILD
        line_sink.record(_fee_line(outcome))

        _sign_and_broadcast(client, unsigned_tx, outcome, line_sink)

    if wait:
        _await_receipt(
            client,
            outcome,
            line_sink,
            config.receipt_timeout if timeout is None else timeout,
            config.poll_interval if poll_interval is None else poll_interval,
            cancel,
        )
    return outcome


def send_signed(
    client: "Client",
    unsigned_tx: UnsignedTransaction,
    *,
    wait: bool = True,
    timeout: Optional[float] = None,
    poll_interval: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
    sink: SinkLike = None,
) -> SubmissionOutcome:
    """
    Sign and broadcast a transaction the caller already built.

    Runs stages Sign, Broadcast, and AwaitReceipt only; nonce and gas are
    taken from ``unsigned_tx`` as-is.
    """
    line_sink = as_sink(sink)
    config = client.config
    outcome = SubmissionOutcome(
        sender=client.address,
        to=unsigned_tx.to,
        value=unsigned_tx.value,
        chain_id=client.chain_id,
        nonce=unsigned_tx.nonce,
        gas_limit=unsigned_tx.gas_limit,
        gas_price=unsigned_tx.gas_price,
        max_fee_per_gas=unsigned_tx.max_fee_per_gas,
        max_priority_fee_per_gas=unsigned_tx.max_priority_fee_per_gas,
        stage=Stage.BUILD,
    )
    line_sink.record(f"contract address: {unsigned_tx.to}")
    line_sink.record(_fee_line(outcome))

    with client.submit_lock:
        _sign_and_broadcast(client, unsigned_tx, outcome, line_sink)

    if wait:
        _await_receipt(
            client,
            outcome,
            line_sink,
            config.receipt_timeout if timeout is None else timeout,
            config.poll_interval if poll_interval is None else poll_interval,
            cancel,
        )
    return outcome
