"""Unpadded base64url helpers for JWS segments and JWK fields."""

import re

from jwt.utils import base64url_decode, base64url_encode

from sigcore.core.errors import DecodingFailedError

_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")


def is_base64url(value: str) -> bool:
    """Return True if value is well-formed unpadded base64url."""
    return bool(_BASE64URL_RE.match(value)) and len(value) % 4 != 1


def b64url_decode(value: str) -> bytes:
    """Decode unpadded base64url, rejecting foreign characters."""
    if not is_base64url(value):
        raise DecodingFailedError("Value is not valid base64url.")
    return base64url_decode(value)


def b64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64url_encode(data).decode("ascii")


def int_to_base64url(value: int, length: int | None = None) -> str:
    """Encode a non-negative integer big-endian, optionally fixed-width."""
    byte_length = length or max(1, (value.bit_length() + 7) // 8)
    return b64url_encode(value.to_bytes(byte_length, byteorder="big"))
