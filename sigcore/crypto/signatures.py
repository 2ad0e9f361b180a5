"""Conversion between raw (r || s) and DER ECDSA signature encodings."""

from typing import Self

from pydantic import BaseModel, ConfigDict, field_validator

from sigcore.core.errors import DecodingFailedError
from sigcore.crypto.der import (
    SEQUENCE_TAG,
    decode_sequence_of_two_integers,
    encode_integer,
    encode_sequence,
)

P256_COMPONENT_SIZE = 32
P256_RAW_SIGNATURE_SIZE = 2 * P256_COMPONENT_SIZE


class RawSignature(BaseModel):
    """Fixed-width P-256 signature as used in JWS (RFC 7518 section 3.4)."""

    model_config = ConfigDict(frozen=True)

    r: bytes
    s: bytes

    @field_validator("r", "s")
    @classmethod
    def _fixed_width(cls, value: bytes) -> bytes:
        if len(value) != P256_COMPONENT_SIZE:
            raise ValueError(f"component must be {P256_COMPONENT_SIZE} bytes")
        return value

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Split a 64-byte r || s buffer."""
        if len(data) != P256_RAW_SIGNATURE_SIZE:
            raise DecodingFailedError(
                f"Raw signature must be {P256_RAW_SIGNATURE_SIZE} bytes, "
                f"got {len(data)}."
            )
        return cls(r=data[:P256_COMPONENT_SIZE], s=data[P256_COMPONENT_SIZE:])

    def to_bytes(self) -> bytes:
        return self.r + self.s

    def to_der(self) -> "DERSignature":
        """Encode as ECDSA-Sig-Value with minimal INTEGERs.

        Leading zero bytes of r and s are dropped before encoding. OpenSSL
        rejects INTEGERs with redundant leading zeros as non-canonical DER.
        """
        payload = encode_integer(_minimal(self.r)) + encode_integer(_minimal(self.s))
        return DERSignature(encoded=encode_sequence(payload))


class DERSignature(BaseModel):
    """ECDSA-Sig-Value: SEQUENCE { INTEGER r, INTEGER s }."""

    model_config = ConfigDict(frozen=True)

    encoded: bytes

    def to_raw(self) -> RawSignature:
        r, s = decode_sequence_of_two_integers(self.encoded, width=P256_COMPONENT_SIZE)
        return RawSignature(r=r, s=s)


def raw_to_der(raw: bytes) -> bytes:
    """Convert a 64-byte r || s signature to DER."""
    return RawSignature.from_bytes(raw).to_der().encoded


def der_to_raw(der: bytes) -> bytes:
    """Convert a DER ECDSA signature to 64-byte r || s."""
    return DERSignature(encoded=der).to_raw().to_bytes()


def is_der_signature(signature: bytes) -> bool:
    """Return True if signature is a well-formed DER ECDSA-Sig-Value."""
    if not signature or signature[0] != SEQUENCE_TAG:
        return False
    try:
        decode_sequence_of_two_integers(signature, width=P256_COMPONENT_SIZE)
    except DecodingFailedError:
        return False
    return True


def ensure_der(signature: bytes) -> bytes:
    """Return signature in DER form, converting from raw if needed.

    A leading SEQUENCE tag alone is not trusted: a raw r may start with
    0x30, so the buffer must also parse as DER to be passed through.
    """
    if is_der_signature(signature):
        return signature
    return raw_to_der(signature)


def _minimal(component: bytes) -> bytes:
    return component.lstrip(b"\x00") or b"\x00"
