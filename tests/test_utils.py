"""Unit tests for hex helpers and line sinks."""

from __future__ import annotations

import logging

import pytest

from txpipe.errors import TransactionFormatError
from txpipe.sinks import CallbackSink, EchoSink, ListSink, LoggingSink, NullSink, as_sink
from txpipe.utils import checksum_address, coerce_bytes, from_data, from_quantity, to_data, to_quantity


class TestQuantities:
    def test_to_quantity(self) -> None:
        assert to_quantity(0) == "0x0"
        assert to_quantity(21000) == "0x5208"

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_quantity(-1)

    def test_from_quantity(self) -> None:
        assert from_quantity("0x5208") == 21000
        assert from_quantity("0X10") == 16
        assert from_quantity("1337") == 1337
        assert from_quantity(7) == 7

    @pytest.mark.parametrize("value", [None, "", "0xzz", 1.5])
    def test_from_quantity_rejects(self, value) -> None:
        with pytest.raises(ValueError):
            from_quantity(value)


class TestData:
    def test_roundtrip_helpers(self) -> None:
        assert to_data(b"") == "0x"
        assert from_data("0x") == b""
        assert from_data("dead") == b"\xde\xad"

    def test_coerce_bytes(self) -> None:
        assert coerce_bytes(None) == b""
        assert coerce_bytes(bytearray(b"\x01")) == b"\x01"
        assert coerce_bytes(" 0xBEEF ") == b"\xbe\xef"

    @pytest.mark.parametrize("value", ["0x123", 12])
    def test_coerce_bytes_rejects(self, value) -> None:
        with pytest.raises(TransactionFormatError):
            coerce_bytes(value)

    def test_checksum_address(self) -> None:
        valid = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        assert checksum_address(valid.lower()) == valid
        with pytest.raises(TransactionFormatError):
            checksum_address("0x5aaeb6053F3E94C9b9A09f33669435E7Ef1BeAed")


class TestSinks:
    def test_list_sink(self) -> None:
        sink = ListSink()
        sink.record("a")
        sink.record("b")
        assert sink.lines == ["a", "b"]

    def test_logging_sink(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("txpipe.test")
        with caplog.at_level(logging.INFO, logger="txpipe.test"):
            LoggingSink(logger).record("tx broadcast: 0x01")
        assert "tx broadcast: 0x01" in caplog.text

    def test_echo_sink(self, capsys: pytest.CaptureFixture[str]) -> None:
        EchoSink(prefix="> ").record("hello")
        assert capsys.readouterr().out == "> hello\n"

    def test_as_sink(self) -> None:
        assert isinstance(as_sink(None), NullSink)
        sink = ListSink()
        assert as_sink(sink) is sink
        lines: list[str] = []
        wrapped = as_sink(lines.append)
        assert isinstance(wrapped, CallbackSink)
        wrapped.record("x")
        assert lines == ["x"]

    def test_as_sink_rejects(self) -> None:
        with pytest.raises(TypeError):
            as_sink(42)  # type: ignore[arg-type]
