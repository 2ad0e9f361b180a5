"""TTL cache over a remote JSON Web Key Set."""

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import httpx
from pydantic import ValidationError

from sigcore.core.errors import JWKSFetchFailedError, MissingKeyError
from sigcore.core.settings import JWKS_CACHE_TTL_DEFAULT, JWKS_TIMEOUT_DEFAULT
from sigcore.crypto.types import KeyDescriptor, KeySet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Immutable key map and the clock reading it was fetched at."""

    keys: Mapping[str, KeyDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )
    refreshed_at: float | None = None


class KeySetCache:
    """Resolves key ids against a published key set.

    The whole map is replaced on every refresh. Readers see either the old
    or the new snapshot, never a mix. Refreshes are serialized by a lock;
    lookups against a fresh snapshot take no lock at all.
    """

    def __init__(
        self,
        jwks_url: str,
        *,
        ttl_seconds: float = JWKS_CACHE_TTL_DEFAULT,
        timeout_seconds: float = JWKS_TIMEOUT_DEFAULT,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if not jwks_url:
            raise ValueError("JWKS URL must be provided")
        self._jwks_url = jwks_url
        self._ttl_seconds = ttl_seconds
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._clock = clock or time.monotonic
        self._snapshot = _Snapshot()
        self._lock = asyncio.Lock()

    @property
    def jwks_url(self) -> str:
        return self._jwks_url

    @property
    def is_fresh(self) -> bool:
        """True while the last successful refresh is younger than the TTL."""
        return self._is_fresh(self._snapshot)

    def _is_fresh(self, snapshot: _Snapshot) -> bool:
        if snapshot.refreshed_at is None:
            return False
        return self._clock() - snapshot.refreshed_at < self._ttl_seconds

    def peek(self, kid: str) -> KeyDescriptor | None:
        """Return the cached descriptor for kid if the cache is fresh."""
        snapshot = self._snapshot
        if not self._is_fresh(snapshot):
            return None
        return snapshot.keys.get(kid)

    async def resolve(self, kid: str) -> KeyDescriptor:
        """Return the descriptor for kid, refreshing once on miss or staleness."""
        observed = self._snapshot
        if self._is_fresh(observed) and kid in observed.keys:
            return observed.keys[kid]

        async with self._lock:
            # Another caller may have refreshed while we waited; an
            # invalidate in the meantime still needs a fetch.
            current = self._snapshot
            if current is observed or not self._is_fresh(current):
                await self._refresh_locked()
            descriptor = self._snapshot.keys.get(kid)

        if descriptor is None:
            logger.warning("Key id %s not present in published key set", kid)
            raise MissingKeyError(f"No published key with kid {kid!r}.")
        return descriptor

    async def refresh(self) -> int:
        """Fetch the key set now; return the number of usable keys."""
        async with self._lock:
            await self._refresh_locked()
            return len(self._snapshot.keys)

    def invalidate(self) -> None:
        """Drop all cached keys so the next resolve refetches."""
        self._snapshot = _Snapshot()

    async def _refresh_locked(self) -> None:
        key_set = await self._fetch_key_set()
        self._snapshot = _Snapshot(
            keys=MappingProxyType(_index_by_kid(key_set)),
            refreshed_at=self._clock(),
        )
        logger.info(
            "Refreshed key set from %s: %d keys",
            self._jwks_url,
            len(self._snapshot.keys),
        )

    async def _fetch_key_set(self) -> KeySet:
        logger.debug("Fetching key set from %s", self._jwks_url)
        try:
            if self._http_client is not None:
                response = await self._get(self._http_client)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                    response = await self._get(client)
        except httpx.HTTPError as exc:
            logger.warning("Key set fetch from %s failed: %s", self._jwks_url, exc)
            raise JWKSFetchFailedError(f"Request to {self._jwks_url} failed.") from exc

        if not response.is_success:
            logger.warning(
                "Key set fetch from %s returned HTTP %d",
                self._jwks_url,
                response.status_code,
            )
            raise JWKSFetchFailedError(
                f"Key set endpoint returned HTTP {response.status_code}."
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Key set from %s is not JSON", self._jwks_url)
            raise JWKSFetchFailedError("Key set response is malformed.") from exc
        return _parse_key_set(payload)

    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.get(self._jwks_url, headers={"Accept": "application/json"})


def _parse_key_set(payload: Any) -> KeySet:
    """Validate entries one by one, dropping those that do not parse."""
    if isinstance(payload, list):
        entries = payload
    elif isinstance(payload, dict) and isinstance(payload.get("keys"), list):
        entries = payload["keys"]
    else:
        raise JWKSFetchFailedError("Key set response has no keys array.")

    descriptors: list[KeyDescriptor] = []
    for index, entry in enumerate(entries):
        try:
            descriptors.append(KeyDescriptor.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed key set entry at index %d", index)
    return KeySet(keys=descriptors)


def _index_by_kid(key_set: KeySet) -> dict[str, KeyDescriptor]:
    indexed: dict[str, KeyDescriptor] = {}
    for descriptor in key_set.keys:
        if not descriptor.kid:
            logger.debug("Skipping published key without kid")
            continue
        if descriptor.kid in indexed:
            logger.warning("Duplicate kid %s in key set, keeping first", descriptor.kid)
            continue
        indexed[descriptor.kid] = descriptor
    return indexed
