"""Type definitions for published keys and JWS headers."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Algorithm(StrEnum):
    """Supported JWS signing algorithms."""

    RS256 = "RS256"
    ES256 = "ES256"


class KeyType(StrEnum):
    """JWK key types understood by the key builder."""

    RSA = "RSA"
    EC = "EC"


P256_CURVE = "P-256"


class KeyDescriptor(BaseModel):
    """Single JWK entry from a published key set.

    Numeric fields stay base64url-encoded until a key is built so that one
    malformed entry cannot poison the rest of the set.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    kty: str
    kid: str | None = None
    alg: str | None = None
    use: str | None = None
    crv: str | None = None
    x: str | None = None
    y: str | None = None
    n: str | None = None
    e: str | None = None


class KeySet(BaseModel):
    """JSON Web Key Set document."""

    keys: list[KeyDescriptor]


class TokenHeader(BaseModel):
    """Protected header of a compact JWS."""

    model_config = ConfigDict(extra="allow", frozen=True)

    alg: Algorithm
    kid: str = Field(min_length=1)
    typ: str | None = None
