from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .pipeline import SubmissionOutcome


class TxPipeError(RuntimeError):
    exit_code: int = 1


class ConfigError(TxPipeError):
    exit_code = 2


class NodeConnectionError(TxPipeError):
    exit_code = 3


class KeyFormatError(TxPipeError, ValueError):
    exit_code = 4


class TransactionFormatError(TxPipeError, ValueError):
    exit_code = 5


class AbiError(TxPipeError, ValueError):
    exit_code = 5


class RPCError(TxPipeError):
    """A JSON-RPC call failed at the transport or at the node."""

    exit_code = 6

    def __init__(
        self,
        message: str,
        *,
        method: str = "",
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.code = code
        self.data = data


class CallError(TxPipeError):
    exit_code = 6


class ReceiptTimeout(TimeoutError):
    """No receipt before the deadline, or the wait was cancelled."""

    def __init__(self, tx_hash: str, waited: float, cancelled: bool = False) -> None:
        reason = "cancelled" if cancelled else f"not mined within {waited:g}s"
        super().__init__(f"Transaction {tx_hash} {reason}")
        self.tx_hash = tx_hash
        self.waited = waited
        self.cancelled = cancelled


# ---------------------------------------------------------------------------
# Pipeline errors carry the partial outcome
# ---------------------------------------------------------------------------


class PipelineError(TxPipeError):
    exit_code = 10

    def __init__(self, message: str, outcome: Optional["SubmissionOutcome"] = None) -> None:
        super().__init__(message)
        self.outcome = outcome


class NonceError(PipelineError):
    exit_code = 11


class GasEstimationError(PipelineError):
    exit_code = 12


class SigningError(PipelineError):
    exit_code = 13


class BroadcastError(PipelineError):
    exit_code = 14


__all__ = [
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
