"""Verifier settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

JWKS_CACHE_TTL_DEFAULT = 600
JWKS_TIMEOUT_DEFAULT = 5.0


class VerifierSettings(BaseSettings):
    """Key-publication endpoint and cache settings."""

    model_config = SettingsConfigDict(env_prefix="SIGCORE_")

    jwks_url: str = ""
    jwks_cache_ttl: int = JWKS_CACHE_TTL_DEFAULT
    jwks_timeout: float = JWKS_TIMEOUT_DEFAULT
