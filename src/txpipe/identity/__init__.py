"""
Identity - secp256k1 keys and chain-id aware transaction signing.

Uses eth-account (no full web3.py needed).
"""

from .keys import (
    Identity,
    SignedTransaction,
    generate_key,
    init_identity,
    load_private_key,
    recover_sender,
    sign,
)

__all__ = [
    "Identity",
    "SignedTransaction",
    "generate_key",
    "init_identity",
    "load_private_key",
    "recover_sender",
    "sign",
]
