"""Error taxonomy for token verification and signer recovery."""

from enum import StrEnum
from typing import ClassVar


class ErrorKind(StrEnum):
    """Machine-readable failure kinds."""

    INVALID_TOKEN_FORMAT = "invalid_token_format"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    MISSING_KEY = "missing_key"
    SIGNATURE_INVALID = "signature_invalid"
    KEY_CREATION_FAILED = "key_creation_failed"
    JWKS_FETCH_FAILED = "jwks_fetch_failed"
    DECODING_FAILED = "decoding_failed"
    SIGNATURE_PARSE_FAILED = "signature_parse_failed"
    RECOVERY_FAILED = "recovery_failed"


class SigCoreError(Exception):
    """Base class for every failure raised by sigcore."""

    kind: ClassVar[ErrorKind]
    default_message: ClassVar[str] = "Signature operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidTokenFormatError(SigCoreError):
    kind = ErrorKind.INVALID_TOKEN_FORMAT
    default_message = "Token is not a valid compact JWS."


class UnsupportedAlgorithmError(SigCoreError):
    kind = ErrorKind.UNSUPPORTED_ALGORITHM
    default_message = "Unsupported signing algorithm."


class MissingKeyError(SigCoreError):
    kind = ErrorKind.MISSING_KEY
    default_message = "Unable to find matching signing key."


class SignatureInvalidError(SigCoreError):
    kind = ErrorKind.SIGNATURE_INVALID
    default_message = "Token signature is invalid."


class KeyCreationFailedError(SigCoreError):
    kind = ErrorKind.KEY_CREATION_FAILED
    default_message = "Failed to build public key from key descriptor."


class JWKSFetchFailedError(SigCoreError):
    kind = ErrorKind.JWKS_FETCH_FAILED
    default_message = "Unable to fetch the published key set."


class DecodingFailedError(SigCoreError):
    kind = ErrorKind.DECODING_FAILED
    default_message = "Failed to decode token or key data."


class SignatureParseFailedError(SigCoreError):
    kind = ErrorKind.SIGNATURE_PARSE_FAILED
    default_message = "Failed to parse recoverable signature."


class RecoveryFailedError(SigCoreError):
    kind = ErrorKind.RECOVERY_FAILED
    default_message = "Failed to recover public key from signature."
