"""Unit tests for utils.py functions."""

from __future__ import annotations

from datetime import timedelta

import pytest

from enactor.utils import bytes_to_hex, format_duration, hex_to_bytes, parse_duration, to_checksum_address


class TestChecksumAddress:
    def test_eip55_vector(self) -> None:
        # From the EIP-55 test vectors
        expected = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        assert to_checksum_address(expected.lower()) == expected

    def test_idempotent(self) -> None:
        expected = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
        assert to_checksum_address(expected) == expected

    def test_rejects_bad_length(self) -> None:
        with pytest.raises(ValueError):
            to_checksum_address("0x1234")


class TestHex:
    def test_round_trip(self) -> None:
        assert hex_to_bytes("0x0a0b") == b"\x0a\x0b"
        assert hex_to_bytes("0a0b") == b"\x0a\x0b"
        assert bytes_to_hex(b"\x0a\x0b") == "0x0a0b"

    def test_strings_pass_through(self) -> None:
        assert bytes_to_hex("0xff") == "0xff"
        assert bytes_to_hex("ff") == "0xff"
        assert hex_to_bytes(b"\x01") == b"\x01"


class TestDurations:
    @pytest.mark.parametrize(
        "text,seconds",
        [("24h", 86400), ("1h30m", 5400), ("90s", 90), ("2h0m5s", 7205)],
    )
    def test_parse(self, text: str, seconds: int) -> None:
        assert parse_duration(text) == timedelta(seconds=seconds)

    @pytest.mark.parametrize("text", ["", "24", "1d", "h1", "3h junk"])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_format(self) -> None:
        assert format_duration(timedelta(hours=24)) == "24h0m0s"
        assert format_duration(timedelta(minutes=5)) == "5m0s"
        assert format_duration(timedelta(seconds=42)) == "42s"
        assert format_duration(timedelta(0)) == "0s"
