"""Type definitions for verified tokens."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from sigcore.core.errors import DecodingFailedError
from sigcore.crypto.types import Algorithm, TokenHeader


class VerifiedToken(BaseModel):
    """A compact JWS whose signature checked out against a published key.

    Only the signature is vouched for. Issuer, audience and expiry claims
    are left to the caller.
    """

    model_config = ConfigDict(frozen=True)

    header: TokenHeader
    payload: bytes

    @property
    def kid(self) -> str:
        return self.header.kid

    @property
    def algorithm(self) -> Algorithm:
        return self.header.alg

    @property
    def claims(self) -> dict[str, Any]:
        """Payload parsed as a JSON object."""
        try:
            parsed = json.loads(self.payload)
        except ValueError as exc:
            raise DecodingFailedError("Token payload is not JSON.") from exc
        if not isinstance(parsed, dict):
            raise DecodingFailedError("Token payload is not a JSON object.")
        return parsed
