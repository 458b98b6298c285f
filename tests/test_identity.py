"""Unit tests for keys, identity, and chain-id aware signing."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from eth_account import Account

from txpipe.errors import KeyFormatError, SigningError
from txpipe.identity.keys import (
    generate_key,
    init_identity,
    load_private_key,
    recover_sender,
    sign,
)
from txpipe.tx import build

from conftest import TEST_PRIVATE_KEY

RECIPIENT = "0xabcd000000000000000000000000000000000001"


def _legacy_tx(nonce: int = 5):
    return build(nonce, RECIPIENT, 1000, 21000, 20, b"")


def _dynamic_tx(nonce: int = 5):
    return build(
        nonce, RECIPIENT, 1000, 21000, None, b"\x01\x02",
        max_fee_per_gas=30, max_priority_fee_per_gas=2,
    )


class TestInitIdentity:
    def test_address_matches_eth_account(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        assert identity.address == Account.from_key(TEST_PRIVATE_KEY).address

    def test_prefix_is_optional(self) -> None:
        with_prefix = init_identity(TEST_PRIVATE_KEY)
        without_prefix = init_identity(TEST_PRIVATE_KEY[2:])
        assert with_prefix.address == without_prefix.address

    def test_uppercase_hex_accepted(self) -> None:
        identity = init_identity("0x" + TEST_PRIVATE_KEY[2:].upper())
        assert identity.address == init_identity(TEST_PRIVATE_KEY).address

    @pytest.mark.parametrize(
        "bad_key",
        [
            "",
            "0x1234",
            "zz" * 32,
            "0x" + "00" * 32,
            "0x" + "ff" * 32,
            TEST_PRIVATE_KEY + "00",
        ],
    )
    def test_invalid_keys_rejected(self, bad_key: str) -> None:
        with pytest.raises(KeyFormatError):
            init_identity(bad_key)

    def test_key_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            init_identity("not a key")

    def test_repr_hides_key(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        assert TEST_PRIVATE_KEY[2:] not in repr(identity)
        assert identity.address in repr(identity)

    def test_generate_key_roundtrip(self) -> None:
        private_key, address = generate_key()
        assert private_key.startswith("0x")
        assert len(private_key) == 66
        assert init_identity(private_key).address == address


class TestLoadPrivateKey:
    def test_reads_dotenv_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(f"PRIVATE_KEY={TEST_PRIVATE_KEY[2:]}\n", encoding="utf-8")
        with patch.dict(os.environ, {}, clear=True):
            assert load_private_key(env_file) == TEST_PRIVATE_KEY

    def test_environment_wins_over_file(self, tmp_path: Path) -> None:
        other, _ = generate_key()
        env_file = tmp_path / ".env"
        env_file.write_text(f"PRIVATE_KEY={other}\n", encoding="utf-8")
        with patch.dict(os.environ, {"PRIVATE_KEY": TEST_PRIVATE_KEY}, clear=True):
            assert load_private_key(env_file) == TEST_PRIVATE_KEY

    def test_missing_key(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(KeyFormatError, match="PRIVATE_KEY not found"):
                load_private_key(tmp_path / "missing.env")


class TestSign:
    def test_signature_recovers_sender(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        signed = sign(1337, _legacy_tx(), identity)
        assert recover_sender(signed) == identity.address

    def test_dynamic_fee_signature_recovers_sender(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        signed = sign(1337, _dynamic_tx(), identity)
        assert signed.raw[0] == 2  # typed envelope
        assert recover_sender(signed) == identity.address

    def test_signing_is_deterministic(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        tx = _legacy_tx()
        first = sign(1337, tx, identity)
        second = sign(1337, tx, identity)
        assert first.raw == second.raw
        assert (first.r, first.s, first.v) == (second.r, second.s, second.v)
        assert first.tx_hash == second.tx_hash

    def test_chain_id_changes_signature(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        tx = _legacy_tx()
        mainnet = sign(1, tx, identity)
        devnet = sign(1337, tx, identity)
        assert mainnet.raw != devnet.raw
        assert mainnet.tx_hash != devnet.tx_hash
        assert recover_sender(mainnet) == recover_sender(devnet) == identity.address

    def test_legacy_v_is_replay_protected(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        signed = sign(1337, _legacy_tx(), identity)
        # EIP-155: v = chain_id * 2 + 35 + recovery_id
        assert signed.v in (1337 * 2 + 35, 1337 * 2 + 36)

    def test_signed_tx_keeps_source(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        tx = _legacy_tx(nonce=9)
        signed = sign(10, tx, identity)
        assert signed.tx is tx
        assert signed.chain_id == 10
        assert signed.raw_hex.startswith("0x")
        assert len(signed.tx_hash) == 66

    @pytest.mark.parametrize("chain_id", [0, -1, True, "1"])
    def test_invalid_chain_id(self, chain_id) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        with pytest.raises(SigningError):
            sign(chain_id, _legacy_tx(), identity)

    def test_signer_errors_are_wrapped(self) -> None:
        identity = init_identity(TEST_PRIVATE_KEY)
        with patch.object(type(identity._account), "sign_transaction", side_effect=TypeError("bad field")):
            with pytest.raises(SigningError, match="bad field"):
                sign(1337, _legacy_tx(), identity)
