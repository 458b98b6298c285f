"""
Transaction Builder - assemble unsigned transactions.

Only type and range checks happen here.  Whether the sender can pay, or
whether the destination is a contract, is for the node to decide at
simulation or broadcast time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from .errors import TransactionFormatError
from .utils import UINT64_MAX, checksum_address, coerce_bytes, to_data


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Attributes:
        nonce: Sender sequence number
        to: EIP-55 destination address
        value: Amount in wei
        gas_limit: Maximum gas units
        gas_price: Legacy price per gas (None for dynamic-fee transactions)
        data: Call data
        max_fee_per_gas: Fee cap (dynamic-fee transactions only)
        max_priority_fee_per_gas: Tip (dynamic-fee transactions only)
    """
    nonce: int
    to: str
    value: int
    gas_limit: int
    gas_price: Optional[int]
    data: bytes
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    @property
    def is_dynamic_fee(self) -> bool:
        return self.max_fee_per_gas is not None

    def to_signable(self, chain_id: int) -> dict[str, Any]:
        """Transaction dict in the shape eth-account signs."""
        tx: dict[str, Any] = {
            "nonce": self.nonce,
            "to": self.to,
            "value": self.value,
            "gas": self.gas_limit,
            "data": to_data(self.data),
            "chainId": chain_id,
        }
        if self.is_dynamic_fee:
            tx["type"] = 2
            tx["maxFeePerGas"] = self.max_fee_per_gas
            tx["maxPriorityFeePerGas"] = self.max_priority_fee_per_gas
        else:
            tx["gasPrice"] = self.gas_price
        return tx


def _check_int(name: str, value: Any, upper: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TransactionFormatError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise TransactionFormatError(f"{name} must be >= 0, got {value}")
    if upper is not None and value > upper:
        raise TransactionFormatError(f"{name} out of range: {value}")
    return value


def build(
    nonce: int,
    to: str,
    value: int,
    gas_limit: int,
    gas_price: Optional[int],
    data: Union[bytes, str, None] = b"",
    *,
    max_fee_per_gas: Optional[int] = None,
    max_priority_fee_per_gas: Optional[int] = None,
) -> UnsignedTransaction:
    """
    Build an unsigned transaction.

    Pass ``gas_price`` for a legacy transaction, or leave it None and pass
    ``max_fee_per_gas`` and ``max_priority_fee_per_gas`` for a dynamic-fee one.

    Raises:
        TransactionFormatError: On a type or range violation
    """
    _check_int("nonce", nonce, UINT64_MAX)
    _check_int("gas_limit", gas_limit, UINT64_MAX)
    _check_int("value", value)

    dynamic = max_fee_per_gas is not None or max_priority_fee_per_gas is not None
    if dynamic:
        if gas_price is not None:
            raise TransactionFormatError("Pass either gas_price or the fee cap/tip pair, not both")
        if max_fee_per_gas is None or max_priority_fee_per_gas is None:
            raise TransactionFormatError("Dynamic-fee transactions need both fee cap and tip")
        _check_int("max_fee_per_gas", max_fee_per_gas)
        _check_int("max_priority_fee_per_gas", max_priority_fee_per_gas)
        if max_priority_fee_per_gas > max_fee_per_gas:
            raise TransactionFormatError("max_priority_fee_per_gas exceeds max_fee_per_gas")
    else:
        if gas_price is None:
            raise TransactionFormatError("gas_price is required for legacy transactions")
        _check_int("gas_price", gas_price)

    return UnsignedTransaction(
        nonce=nonce,
        to=checksum_address(to),
        value=value,
        gas_limit=gas_limit,
        gas_price=gas_price,
        data=coerce_bytes(data),
        max_fee_per_gas=max_fee_per_gas,
        max_priority_fee_per_gas=max_priority_fee_per_gas,
    )
