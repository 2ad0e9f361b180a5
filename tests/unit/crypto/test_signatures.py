"""Tests for raw <-> DER ECDSA signature conversion."""

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from pydantic import ValidationError

from sigcore.core.errors import DecodingFailedError
from sigcore.crypto.signatures import (
    DERSignature,
    RawSignature,
    der_to_raw,
    ensure_der,
    is_der_signature,
    raw_to_der,
)

RAW_VECTORS = [
    bytes(range(1, 65)),
    b"\xff" * 64,
    b"\x80" + b"\x00" * 31 + b"\x7f" + b"\xff" * 31,
    b"\x00" * 31 + b"\x01" + b"\x00" * 31 + b"\x02",
    b"\x00\x9a" + b"\x33" * 30 + b"\x00\x00\x05" + b"\x44" * 29,
    b"\x30" + b"\x11" * 63,
]


def _to_int(component: bytes) -> int:
    return int.from_bytes(component, byteorder="big")


class TestRawToDer:
    """Tests for raw to DER conversion."""

    def test_roundtrip(self) -> None:
        for raw in RAW_VECTORS:
            assert der_to_raw(raw_to_der(raw)) == raw

    def test_matches_canonical_encoder(self) -> None:
        for raw in RAW_VECTORS:
            expected = encode_dss_signature(_to_int(raw[:32]), _to_int(raw[32:]))
            assert raw_to_der(raw) == expected

    def test_high_bit_components_padded(self) -> None:
        der = raw_to_der(b"\x80" * 64)
        assert der[:2] == b"\x30\x46"
        assert der[2:5] == b"\x02\x21\x00"

    def test_leading_zero_components_minimized(self) -> None:
        raw = b"\x00\x01" + b"\x22" * 30 + b"\x00" * 32
        der = raw_to_der(raw)
        r, s = decode_dss_signature(der)
        assert r == _to_int(raw[:32])
        assert s == 0
        assert der[2:4] == b"\x02\x1f"

    def test_wrong_length_rejected(self) -> None:
        for size in (0, 63, 65, 72):
            with pytest.raises(DecodingFailedError):
                raw_to_der(b"\x01" * size)


class TestDerToRaw:
    """Tests for DER to raw conversion."""

    def test_signature_from_library(self) -> None:
        key = ec.generate_private_key(ec.SECP256R1())
        der = key.sign(b"payload", ec.ECDSA(hashes.SHA256()))
        raw = der_to_raw(der)
        r, s = decode_dss_signature(der)
        assert len(raw) == 64
        assert raw == r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def test_malformed_rejected(self) -> None:
        with pytest.raises(DecodingFailedError):
            der_to_raw(b"\x30\x03\x02\x01")


class TestSignatureTypes:
    """Tests for the typed signature values."""

    def test_raw_from_bytes_splits_components(self) -> None:
        raw = RawSignature.from_bytes(RAW_VECTORS[0])
        assert raw.r == RAW_VECTORS[0][:32]
        assert raw.s == RAW_VECTORS[0][32:]
        assert raw.to_bytes() == RAW_VECTORS[0]

    def test_raw_rejects_wrong_component_width(self) -> None:
        with pytest.raises(ValidationError):
            RawSignature(r=b"\x01" * 31, s=b"\x01" * 32)

    def test_conversion_between_types(self) -> None:
        raw = RawSignature.from_bytes(RAW_VECTORS[2])
        der = raw.to_der()
        assert isinstance(der, DERSignature)
        assert der.to_raw() == raw


class TestEnsureDer:
    """Tests for the already-DER guard."""

    def test_der_passes_through(self) -> None:
        der = raw_to_der(RAW_VECTORS[0])
        assert is_der_signature(der)
        assert ensure_der(der) is der

    def test_raw_is_converted(self) -> None:
        assert ensure_der(RAW_VECTORS[1]) == raw_to_der(RAW_VECTORS[1])

    def test_raw_starting_with_sequence_tag_is_converted(self) -> None:
        raw = RAW_VECTORS[5]
        assert not is_der_signature(raw)
        assert ensure_der(raw) == raw_to_der(raw)

    def test_neither_form_rejected(self) -> None:
        with pytest.raises(DecodingFailedError):
            ensure_der(b"\x30\x01\x02")
