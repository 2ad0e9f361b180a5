"""Tests for base64url helpers."""

import pytest

from sigcore.core.errors import DecodingFailedError
from sigcore.crypto.encoding import (
    b64url_decode,
    b64url_encode,
    int_to_base64url,
    is_base64url,
)


class TestBase64Url:
    """Tests for unpadded base64url encode/decode."""

    def test_encode_strips_padding(self) -> None:
        assert b64url_encode(b"\xfb\xff") == "-_8"

    def test_decode_unpadded(self) -> None:
        assert b64url_decode("-_8") == b"\xfb\xff"
        assert b64url_decode("eyJhIjoxfQ") == b'{"a":1}'

    def test_rejects_standard_alphabet(self) -> None:
        with pytest.raises(DecodingFailedError):
            b64url_decode("+/8")

    def test_rejects_padding(self) -> None:
        with pytest.raises(DecodingFailedError):
            b64url_decode("-_8=")

    def test_rejects_impossible_length(self) -> None:
        assert not is_base64url("abcde")
        with pytest.raises(DecodingFailedError):
            b64url_decode("abcde")


class TestIntToBase64Url:
    """Tests for integer encoding."""

    def test_minimal_width(self) -> None:
        assert int_to_base64url(65537) == "AQAB"
        assert int_to_base64url(0) == "AA"

    def test_fixed_width(self) -> None:
        assert b64url_decode(int_to_base64url(1, 32)) == b"\x00" * 31 + b"\x01"
