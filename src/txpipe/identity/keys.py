"""
ECDSA / secp256k1 identity and transaction signing.

An Identity wraps an eth-account LocalAccount.  The sender address is
always read from the account object, so it can never drift from the key.
Keys are never serialized, logged, or shown in a repr.

Keys may be supplied directly or loaded from a dotenv file
(~/.txpipe/.env by default) as PRIVATE_KEY.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import KeyFormatError, SigningError
from ..tx import UnsignedTransaction

# Default config directory
TXPIPE_DIR = Path.home() / ".txpipe"
TXPIPE_ENV = TXPIPE_DIR / ".env"

# Order of the secp256k1 group; valid keys are in [1, N-1].
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass(frozen=True)
class Identity:
    """Process-held signing key. ``address`` is derived, never stored."""
    _account: LocalAccount = field(repr=False)

    @property
    def address(self) -> str:
        return self._account.address

    def __repr__(self) -> str:
        return f"Identity(address={self.address})"


@dataclass(frozen=True)
class SignedTransaction:
    """
    A transaction bound to a chain id by its signature.

    Attributes:
        tx: The unsigned transaction that was signed
        chain_id: Chain the signature is valid on
        raw: RLP-encoded (or typed-envelope) signed payload
        tx_hash: 0x-prefixed keccak hash of ``raw``
        r, s, v: Signature components
    """
    tx: UnsignedTransaction
    chain_id: int
    raw: bytes = field(repr=False)
    tx_hash: str
    r: int = field(repr=False)
    s: int = field(repr=False)
    v: int = field(repr=False)

    @property
    def raw_hex(self) -> str:
        return "0x" + self.raw.hex()


def _normalize_key(private_key_hex: str) -> str:
    if not isinstance(private_key_hex, str):
        raise KeyFormatError("Private key must be a hex string")
    key = private_key_hex.strip()
    if key.startswith(("0x", "0X")):
        key = key[2:]
    if len(key) != 64:
        raise KeyFormatError("Private key must be 32 bytes (64 hex characters)")
    try:
        scalar = int(key, 16)
    except ValueError as exc:
        raise KeyFormatError("Private key is not valid hex") from exc
    if not 0 < scalar < SECP256K1_N:
        raise KeyFormatError("Private key is outside the secp256k1 range")
    return "0x" + key.lower()


def init_identity(private_key_hex: str) -> Identity:
    """
    Create an Identity from a hex private key (0x prefix optional).

    Raises:
        KeyFormatError: If the string is not a valid secp256k1 key
    """
    return Identity(Account.from_key(_normalize_key(private_key_hex)))


def generate_key() -> tuple[str, str]:
    """
    Generate a new secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    return private_key, Account.from_key(private_key).address


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load the private key from a dotenv file or the environment.

    Args:
        env_path: Path to .env file (default: ~/.txpipe/.env)

    Returns:
        0x-prefixed hex private key

    Raises:
        KeyFormatError: If PRIVATE_KEY is missing
    """
    env_path = env_path or TXPIPE_ENV

    if env_path.exists():
        load_dotenv(env_path, override=False)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise KeyFormatError(f"PRIVATE_KEY not found. Set it in the environment or in {env_path}")

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return private_key


def sign(chain_id: int, unsigned_tx: UnsignedTransaction, identity: Identity) -> SignedTransaction:
    """
    Sign a transaction for one chain.

    Legacy transactions are signed with EIP-155 replay protection; dynamic-fee
    transactions carry the chain id in their typed envelope.  The result is
    deterministic (RFC 6979 nonces).

    Raises:
        SigningError: If the transaction cannot be signed
    """
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id <= 0:
        raise SigningError(f"Invalid chain id: {chain_id!r}")

    try:
        signed = identity._account.sign_transaction(unsigned_tx.to_signable(chain_id))
    except Exception as exc:
        raise SigningError(f"Cannot sign transaction: {exc}") from exc

    return SignedTransaction(
        tx=unsigned_tx,
        chain_id=chain_id,
        raw=bytes(signed.raw_transaction),
        tx_hash="0x" + bytes(signed.hash).hex(),
        r=signed.r,
        s=signed.s,
        v=signed.v,
    )


def recover_sender(signed_tx: SignedTransaction) -> str:
    """Recover the checksummed sender address from a signed transaction."""
    return Account.recover_transaction(signed_tx.raw)
