"""Tests for the error taxonomy."""

from sigcore.core import errors
from sigcore.core.errors import ErrorKind, MissingKeyError, SigCoreError

ERROR_CLASSES = [
    errors.InvalidTokenFormatError,
    errors.UnsupportedAlgorithmError,
    errors.MissingKeyError,
    errors.SignatureInvalidError,
    errors.KeyCreationFailedError,
    errors.JWKSFetchFailedError,
    errors.DecodingFailedError,
    errors.SignatureParseFailedError,
    errors.RecoveryFailedError,
]


class TestErrorKinds:
    """Tests for error kinds and messages."""

    def test_one_class_per_kind(self) -> None:
        assert {cls.kind for cls in ERROR_CLASSES} == set(ErrorKind)

    def test_all_share_base(self) -> None:
        assert all(issubclass(cls, SigCoreError) for cls in ERROR_CLASSES)

    def test_default_message(self) -> None:
        assert str(MissingKeyError()) == "Unable to find matching signing key."

    def test_custom_message(self) -> None:
        err = MissingKeyError("kid 'x' not published")
        assert str(err) == "kid 'x' not published"
        assert err.kind == "missing_key"
