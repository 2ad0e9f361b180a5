"""Shared test fixtures for sigcore."""

from collections.abc import Callable, Iterator
from typing import Any

import jwt
import pytest
import respx
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm, RSAAlgorithm

from keyset_constants import EC_KID, JWKS_URL, RSA_KID


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host SIGCORE_* variables out of settings under test."""
    for name in ("SIGCORE_JWKS_URL", "SIGCORE_JWKS_CACHE_TTL", "SIGCORE_JWKS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def rsa_jwk(rsa_private_key: rsa.RSAPrivateKey) -> dict[str, Any]:
    """Public JWK for the RSA test key, serialized by pyjwt."""
    jwk = RSAAlgorithm.to_jwk(rsa_private_key.public_key(), as_dict=True)
    return {**jwk, "kid": RSA_KID}


@pytest.fixture(scope="session")
def ec_jwk(ec_private_key: ec.EllipticCurvePrivateKey) -> dict[str, Any]:
    """Public JWK for the P-256 test key, serialized by pyjwt."""
    jwk = ECAlgorithm.to_jwk(ec_private_key.public_key(), as_dict=True)
    return {**jwk, "kid": EC_KID}


@pytest.fixture
def jwks_document(rsa_jwk: dict[str, Any], ec_jwk: dict[str, Any]) -> dict[str, Any]:
    return {"keys": [rsa_jwk, ec_jwk]}


@pytest.fixture
def mock_http() -> Iterator[respx.MockRouter]:
    """Intercept outgoing httpx requests."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def jwks_route(mock_http: respx.MockRouter, jwks_document: dict[str, Any]) -> respx.Route:
    """Key-publication endpoint serving both test keys."""
    return mock_http.get(JWKS_URL).respond(json=jwks_document)


@pytest.fixture
def sign_token(
    rsa_private_key: rsa.RSAPrivateKey,
    ec_private_key: ec.EllipticCurvePrivateKey,
) -> Callable[..., str]:
    """Mint a compact token with pyjwt using one of the test keys."""

    def _sign(
        algorithm: str = "RS256",
        kid: str | None = None,
        claims: dict[str, Any] | None = None,
    ) -> str:
        if algorithm == "RS256":
            key: Any = rsa_private_key
            kid = kid or RSA_KID
        else:
            key = ec_private_key
            kid = kid or EC_KID
        return jwt.encode(
            claims or {"sub": "user-1"},
            key,
            algorithm=algorithm,
            headers={"kid": kid},
        )

    return _sign
