"""Process configuration loaded from the environment."""

from __future__ import annotations

import httpx
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_gateway.gateway import DEFAULT_FALLBACK_MODEL, DEFAULT_FALLBACK_URL, FallbackConfig
from llm_gateway.registry import (
    CachedProviderRegistry,
    ProviderRegistry,
    RestProviderRegistry,
    StaticProviderRegistry,
)


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LLM_GATEWAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Default fallback backend
    fallback_url: str = DEFAULT_FALLBACK_URL
    fallback_api_key: SecretStr | None = None
    fallback_model: str = DEFAULT_FALLBACK_MODEL

    # Per-attempt HTTP timeout
    attempt_timeout_s: float = 60.0

    # Provider registry (PostgREST); empty url means no configured providers
    registry_url: str = ""
    registry_api_key: SecretStr | None = None
    registry_table: str = "ai_api_keys"
    registry_cache_ttl_s: float = 0.0

    log_level: str = "INFO"

    def fallback_config(self) -> FallbackConfig:
        return FallbackConfig(
            url=self.fallback_url,
            api_key=self.fallback_api_key,
            model=self.fallback_model,
        )

    def build_registry(self, client: httpx.AsyncClient | None = None) -> ProviderRegistry:
        """Build the provider registry described by these settings."""
        if not self.registry_url:
            return StaticProviderRegistry()

        api_key = self.registry_api_key.get_secret_value() if self.registry_api_key else ""
        registry: ProviderRegistry = RestProviderRegistry(
            base_url=self.registry_url,
            api_key=api_key,
            table=self.registry_table,
            client=client,
        )
        if self.registry_cache_ttl_s > 0:
            registry = CachedProviderRegistry(registry, self.registry_cache_ttl_s)
        return registry
