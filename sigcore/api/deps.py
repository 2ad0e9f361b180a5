"""FastAPI dependency that authenticates requests by bearer token."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sigcore.core.errors import JWKSFetchFailedError, SigCoreError
from sigcore.tokens.types import VerifiedToken
from sigcore.tokens.verifier import TokenVerifier

_security = HTTPBearer(auto_error=False)

_UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


class RequireVerifiedToken:
    """Dependency returning the VerifiedToken for the request's bearer token."""

    def __init__(self, verifier: TokenVerifier) -> None:
        self._verifier = verifier

    async def __call__(
        self,
        credentials: Annotated[
            HTTPAuthorizationCredentials | None, Depends(_security)
        ],
    ) -> VerifiedToken:
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                headers=_UNAUTHORIZED_HEADERS,
            )
        try:
            return await self._verifier.verify(credentials.credentials)
        except JWKSFetchFailedError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            ) from exc
        except SigCoreError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=exc.kind.value,
                headers=_UNAUTHORIZED_HEADERS,
            ) from exc
