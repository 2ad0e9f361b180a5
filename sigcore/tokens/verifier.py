"""Compact JWS verification against a published key set (RS256 / ES256)."""

import json
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from pydantic import ValidationError

from sigcore.core.errors import (
    DecodingFailedError,
    InvalidTokenFormatError,
    SignatureInvalidError,
    UnsupportedAlgorithmError,
)
from sigcore.core.settings import VerifierSettings
from sigcore.crypto.encoding import b64url_decode, is_base64url
from sigcore.crypto.keys import PublicKey, build_public_key
from sigcore.crypto.signatures import ensure_der
from sigcore.crypto.types import Algorithm, TokenHeader
from sigcore.jwks.cache import KeySetCache
from sigcore.tokens.types import VerifiedToken

logger = logging.getLogger(__name__)

TOKEN_SEGMENT_COUNT = 3


class TokenVerifier:
    """Verifies compact tokens signed by keys from one trust domain."""

    def __init__(self, key_cache: KeySetCache) -> None:
        self._key_cache = key_cache

    @property
    def key_cache(self) -> KeySetCache:
        return self._key_cache

    async def verify(self, token: str) -> VerifiedToken:
        """Verify the token signature and return its decoded parts.

        Raises a SigCoreError subclass on any failure. Format and algorithm
        checks happen before the key set is consulted.
        """
        header_segment, payload_segment, signature_segment = _split_token(token)
        header = _decode_header(header_segment)
        signature = b64url_decode(signature_segment)

        descriptor = await self._key_cache.resolve(header.kid)
        public_key = build_public_key(descriptor, header.alg)

        if header.alg is Algorithm.ES256:
            signature = ensure_der(signature)

        signing_input = f"{header_segment}.{payload_segment}".encode()
        _check_signature(public_key, header.alg, signing_input, signature)

        logger.debug("Verified %s token signed by %s", header.alg, header.kid)
        return VerifiedToken(header=header, payload=b64url_decode(payload_segment))


def _split_token(token: str) -> tuple[str, str, str]:
    segments = token.split(".")
    if len(segments) != TOKEN_SEGMENT_COUNT:
        logger.warning("Rejected token with %d segments", len(segments))
        raise InvalidTokenFormatError(
            f"Expected {TOKEN_SEGMENT_COUNT} segments, got {len(segments)}."
        )
    if not all(segments):
        raise InvalidTokenFormatError("Token has an empty segment.")
    if not all(is_base64url(segment) for segment in segments):
        raise InvalidTokenFormatError("Token segment is not base64url.")
    header, payload, signature = segments
    return header, payload, signature


def _decode_header(segment: str) -> TokenHeader:
    try:
        raw = json.loads(b64url_decode(segment))
    except ValueError as exc:
        raise DecodingFailedError("Token header is not JSON.") from exc
    if not isinstance(raw, dict):
        raise DecodingFailedError("Token header is not a JSON object.")

    alg = raw.get("alg")
    if not isinstance(alg, str) or alg not in {a.value for a in Algorithm}:
        logger.warning("Rejected token with algorithm %r", alg)
        raise UnsupportedAlgorithmError(f"Algorithm {alg!r} is not supported.")

    try:
        return TokenHeader.model_validate(raw)
    except ValidationError as exc:
        raise DecodingFailedError("Token header is missing a key id.") from exc


def _check_signature(
    public_key: PublicKey,
    algorithm: Algorithm,
    signing_input: bytes,
    signature: bytes,
) -> None:
    try:
        if algorithm is Algorithm.RS256 and isinstance(public_key, rsa.RSAPublicKey):
            public_key.verify(
                signature, signing_input, padding.PKCS1v15(), hashes.SHA256()
            )
        elif algorithm is Algorithm.ES256 and isinstance(
            public_key, ec.EllipticCurvePublicKey
        ):
            public_key.verify(signature, signing_input, ec.ECDSA(hashes.SHA256()))
        else:
            raise UnsupportedAlgorithmError(f"Key cannot verify {algorithm}.")
    except (InvalidSignature, ValueError) as exc:
        logger.warning("Signature check failed for %s token", algorithm)
        raise SignatureInvalidError() from exc


def create_token_verifier(settings: VerifierSettings | None = None) -> TokenVerifier:
    """Build a verifier with its own key cache from settings."""
    settings = settings or VerifierSettings()
    if not settings.jwks_url:
        raise ValueError("SIGCORE_JWKS_URL must be configured")
    cache = KeySetCache(
        settings.jwks_url,
        ttl_seconds=settings.jwks_cache_ttl,
        timeout_seconds=settings.jwks_timeout,
    )
    return TokenVerifier(cache)
