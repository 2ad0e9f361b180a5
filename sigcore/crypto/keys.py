"""Public key construction from JWK descriptors, and the reverse."""

import logging

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from sigcore.core.errors import (
    DecodingFailedError,
    KeyCreationFailedError,
    UnsupportedAlgorithmError,
)
from sigcore.crypto.der import (
    RSA_ALGORITHM_IDENTIFIER,
    encode_bit_string,
    encode_integer,
    encode_sequence,
)
from sigcore.crypto.encoding import b64url_decode, int_to_base64url
from sigcore.crypto.types import P256_CURVE, Algorithm, KeyDescriptor, KeyType

logger = logging.getLogger(__name__)

P256_COORDINATE_SIZE = 32
UNCOMPRESSED_POINT_PREFIX = b"\x04"

PublicKey = rsa.RSAPublicKey | ec.EllipticCurvePublicKey


def rsa_subject_public_key_info(modulus: bytes, exponent: bytes) -> bytes:
    """Build a DER SubjectPublicKeyInfo for an RSA public key."""
    rsa_public_key = encode_sequence(encode_integer(modulus) + encode_integer(exponent))
    return encode_sequence(RSA_ALGORITHM_IDENTIFIER + encode_bit_string(rsa_public_key))


def ec_uncompressed_point(x: bytes, y: bytes) -> bytes:
    """Build the SEC1 uncompressed point 0x04 || X || Y."""
    return UNCOMPRESSED_POINT_PREFIX + x + y


def build_public_key(descriptor: KeyDescriptor, algorithm: Algorithm) -> PublicKey:
    """Build a verifying key for algorithm from a published descriptor."""
    _check_descriptor_matches(descriptor, algorithm)
    if algorithm is Algorithm.RS256:
        return _build_rsa_key(descriptor)
    return _build_p256_key(descriptor)


def _check_descriptor_matches(descriptor: KeyDescriptor, algorithm: Algorithm) -> None:
    expected_type = KeyType.RSA if algorithm is Algorithm.RS256 else KeyType.EC
    if descriptor.kty != expected_type:
        logger.warning(
            "Key %s has type %s, cannot verify %s",
            descriptor.kid,
            descriptor.kty,
            algorithm,
        )
        raise UnsupportedAlgorithmError(
            f"Key type {descriptor.kty!r} cannot verify {algorithm}."
        )
    if algorithm is Algorithm.ES256 and descriptor.crv != P256_CURVE:
        raise UnsupportedAlgorithmError(f"EC curve {descriptor.crv!r} not supported.")
    if descriptor.alg is not None and descriptor.alg != algorithm:
        raise UnsupportedAlgorithmError(
            f"Key {descriptor.kid!r} is published for {descriptor.alg}, not {algorithm}."
        )
    if descriptor.use is not None and descriptor.use != "sig":
        raise UnsupportedAlgorithmError(
            f"Key {descriptor.kid!r} is published for use {descriptor.use!r}."
        )


def _build_rsa_key(descriptor: KeyDescriptor) -> rsa.RSAPublicKey:
    if descriptor.n is None or descriptor.e is None:
        raise DecodingFailedError("RSA key is missing modulus or exponent.")
    modulus = b64url_decode(descriptor.n)
    exponent = b64url_decode(descriptor.e)
    if not modulus or not exponent:
        raise DecodingFailedError("RSA key has an empty modulus or exponent.")

    spki = rsa_subject_public_key_info(modulus, exponent)
    try:
        key = serialization.load_der_public_key(spki)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyCreationFailedError(f"Invalid RSA key {descriptor.kid!r}.") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyCreationFailedError(f"Key {descriptor.kid!r} did not load as RSA.")
    logger.debug("Built RSA-%d key %s", key.key_size, descriptor.kid)
    return key


def _build_p256_key(descriptor: KeyDescriptor) -> ec.EllipticCurvePublicKey:
    if descriptor.x is None or descriptor.y is None:
        raise DecodingFailedError("EC key is missing x or y coordinate.")
    x = _coordinate(b64url_decode(descriptor.x))
    y = _coordinate(b64url_decode(descriptor.y))

    try:
        key = ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256R1(), ec_uncompressed_point(x, y)
        )
    except ValueError as exc:
        raise KeyCreationFailedError(
            f"Key {descriptor.kid!r} is not a point on P-256."
        ) from exc
    logger.debug("Built P-256 key %s", descriptor.kid)
    return key


def _coordinate(value: bytes) -> bytes:
    if not value or len(value) > P256_COORDINATE_SIZE:
        raise DecodingFailedError(
            f"P-256 coordinates must be at most {P256_COORDINATE_SIZE} bytes."
        )
    return value.rjust(P256_COORDINATE_SIZE, b"\x00")


def public_key_to_descriptor(public_key: PublicKey, kid: str) -> KeyDescriptor:
    """Describe an RSA or P-256 public key as a JWK entry."""
    if isinstance(public_key, rsa.RSAPublicKey):
        numbers = public_key.public_numbers()
        return KeyDescriptor(
            kty=KeyType.RSA.value,
            kid=kid,
            alg=Algorithm.RS256.value,
            use="sig",
            n=int_to_base64url(numbers.n),
            e=int_to_base64url(numbers.e),
        )
    if isinstance(public_key, ec.EllipticCurvePublicKey) and isinstance(
        public_key.curve, ec.SECP256R1
    ):
        point = public_key.public_numbers()
        return KeyDescriptor(
            kty=KeyType.EC.value,
            kid=kid,
            alg=Algorithm.ES256.value,
            use="sig",
            crv=P256_CURVE,
            x=int_to_base64url(point.x, P256_COORDINATE_SIZE),
            y=int_to_base64url(point.y, P256_COORDINATE_SIZE),
        )
    raise UnsupportedAlgorithmError("Only RSA and P-256 keys can be published.")


def pem_to_descriptor(public_key_pem: str, kid: str) -> KeyDescriptor:
    """Convert a PEM public key to a JWK entry."""
    try:
        loaded = serialization.load_pem_public_key(public_key_pem.encode())
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyCreationFailedError("Invalid PEM public key.") from exc
    if not isinstance(loaded, (rsa.RSAPublicKey, ec.EllipticCurvePublicKey)):
        raise UnsupportedAlgorithmError("Only RSA and P-256 keys can be published.")
    return public_key_to_descriptor(loaded, kid)
