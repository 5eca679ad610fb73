"""Read-only access to the configured provider list."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any

import httpx
from pydantic import ValidationError

from llm_gateway.errors import RegistryUnavailable
from llm_gateway.types import ProviderConfig

logger = logging.getLogger(__name__)

_DEFAULT_TABLE = "ai_api_keys"


def order_providers(providers: Iterable[ProviderConfig]) -> list[ProviderConfig]:
    """Keep active providers, ordered by priority then id."""
    return sorted((p for p in providers if p.active), key=lambda p: (p.priority, p.id))


class ProviderRegistry(ABC):
    """Abstract source of provider configurations."""

    @abstractmethod
    async def list_active_providers(self) -> list[ProviderConfig]:
        """Return active providers in dispatch order.

        Raises RegistryUnavailable when the backing store cannot be read.
        """
        raise NotImplementedError


class StaticProviderRegistry(ProviderRegistry):
    """Registry backed by an in-memory list."""

    def __init__(self, providers: Iterable[ProviderConfig] = ()) -> None:
        self._providers = tuple(providers)

    async def list_active_providers(self) -> list[ProviderConfig]:
        return order_providers(self._providers)


class RestProviderRegistry(ProviderRegistry):
    """Registry reading the provider table through a PostgREST endpoint."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        table: str = _DEFAULT_TABLE,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None
        self._url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def aclose(self) -> None:
        """Close the HTTP client if this registry created it."""
        if self._owns_client:
            await self._client.aclose()

    async def list_active_providers(self) -> list[ProviderConfig]:
        params = {"select": "*", "is_active": "eq.true", "order": "priority.asc"}
        try:
            response = await self._client.get(self._url, params=params, headers=self._headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Error fetching providers: %s", exc)
            raise RegistryUnavailable(str(exc) or type(exc).__name__) from exc

        if response.status_code >= 400:
            logger.error("Error fetching providers: status %d", response.status_code)
            raise RegistryUnavailable(f"status {response.status_code}: {response.text}")

        try:
            rows: Any = response.json()
        except ValueError as exc:
            raise RegistryUnavailable(f"undecodable provider list: {exc}") from exc
        if not isinstance(rows, list):
            raise RegistryUnavailable("provider list is not a JSON array")

        return order_providers(_parse_rows(rows))


class CachedProviderRegistry(ProviderRegistry):
    """Serve a snapshot of another registry for at most ``ttl_s`` seconds."""

    def __init__(
        self,
        inner: ProviderRegistry,
        ttl_s: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._ttl_s = ttl_s
        self._clock = clock
        self._snapshot: tuple[ProviderConfig, ...] | None = None
        self._fetched_at = 0.0

    def invalidate(self) -> None:
        """Drop the cached snapshot."""
        self._snapshot = None

    async def list_active_providers(self) -> list[ProviderConfig]:
        now = self._clock()
        if self._snapshot is not None and now - self._fetched_at < self._ttl_s:
            return list(self._snapshot)

        providers = await self._inner.list_active_providers()
        self._snapshot = tuple(providers)
        self._fetched_at = now
        return list(providers)


def _parse_rows(rows: list[Any]) -> list[ProviderConfig]:
    # A malformed row is dropped so the remaining providers stay usable.
    providers: list[ProviderConfig] = []
    for row in rows:
        try:
            providers.append(ProviderConfig.from_row(row))
        except (KeyError, TypeError, ValidationError) as exc:
            row_id = row.get("id") if isinstance(row, dict) else None
            logger.warning("Skipping invalid provider row %s: %s", row_id, exc)
    return providers
