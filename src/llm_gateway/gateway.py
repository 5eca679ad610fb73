"""Sequential dispatch over configured providers with a default fallback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, SecretStr

from llm_gateway.classifier import classify_exception, classify_status
from llm_gateway.dialects import BaseDialect, VendorDialect, get_dialect, resolve_vendor
from llm_gateway.errors import (
    Cancelled,
    CandidateFailed,
    FallbackFailed,
    GatewayError,
    RegistryUnavailable,
    UnrecognizedVendor,
)
from llm_gateway.registry import ProviderRegistry
from llm_gateway.types import (
    AssistantMessage,
    CanonicalResponse,
    GenerationRequest,
    ProviderConfig,
    WireRequest,
)

if TYPE_CHECKING:
    from llm_gateway.settings import GatewaySettings

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_FALLBACK_MODEL = "google/gemini-3-flash-preview"
FALLBACK_PROVENANCE = "default"

T = TypeVar("T")

# InvalidURL is raised while building the request and is not an HTTPError
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class FallbackConfig(BaseModel):
    """Last-resort Chat Completions backend, configured out of band."""

    model_config = ConfigDict(frozen=True)

    url: str = DEFAULT_FALLBACK_URL
    api_key: SecretStr | None = None
    model: str = DEFAULT_FALLBACK_MODEL


class _CallScope:
    """Cancellation signal and deadline of a single generate call."""

    def __init__(self, cancel: asyncio.Event | None, deadline_s: float | None) -> None:
        self._loop = asyncio.get_running_loop()
        self._cancel = cancel
        self._deadline = self._loop.time() + deadline_s if deadline_s is not None else None

    def check(self) -> None:
        """Raise Cancelled if the caller gave up on this call."""
        if self._cancel is not None and self._cancel.is_set():
            raise Cancelled("cancellation requested by caller")
        if self._deadline is not None and self._loop.time() >= self._deadline:
            raise Cancelled("deadline exceeded")

    def budget(self, timeout_s: float) -> float:
        if self._deadline is None:
            return timeout_s
        return max(0.0, min(timeout_s, self._deadline - self._loop.time()))

    async def run(self, aw: Awaitable[T], timeout_s: float) -> T:
        """Await ``aw`` unless cancellation, the deadline or ``timeout_s`` comes first.

        Raises Cancelled for the first two and asyncio.TimeoutError for the
        last. The pending call is cancelled before returning either way.
        """
        call = asyncio.ensure_future(aw)
        waiters: set[asyncio.Future] = {call}
        if self._cancel is not None:
            waiters.add(asyncio.ensure_future(self._cancel.wait()))
        try:
            await asyncio.wait(waiters, timeout=self.budget(timeout_s), return_when=asyncio.FIRST_COMPLETED)
        finally:
            finished = call.done()
            for task in waiters:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

        if finished:
            return call.result()
        self.check()
        raise asyncio.TimeoutError(f"no response within {timeout_s}s")


class Gateway:
    """Dispatch one canonical request to the first provider that answers.

    Providers are tried one at a time in registry order, each exactly once.
    Candidate failures are logged and skipped. When every candidate has
    failed the default fallback backend is called once; only its failure
    (or a registry failure, or cancellation) reaches the caller.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        fallback: FallbackConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 60.0,
    ) -> None:
        self._registry = registry
        self._fallback = fallback or FallbackConfig()
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None
        self._timeout_s = timeout_s

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        registry: ProviderRegistry | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> Gateway:
        """Build a gateway from process configuration.

        The registry shares the gateway's HTTP client.
        """
        shared = client or httpx.AsyncClient(timeout=settings.attempt_timeout_s)
        gateway = cls(
            registry or settings.build_registry(shared),
            settings.fallback_config(),
            client=shared,
            timeout_s=settings.attempt_timeout_s,
        )
        gateway._owns_client = client is None
        return gateway

    async def aclose(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Gateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def generate(
        self,
        req: GenerationRequest,
        *,
        cancel: asyncio.Event | None = None,
        deadline_s: float | None = None,
    ) -> CanonicalResponse:
        """Produce a completion for ``req``.

        ``cancel`` aborts the in-flight call and everything after it once
        set; ``deadline_s`` bounds the whole call. Both surface as Cancelled.
        Raises RegistryUnavailable, RateLimited, PaymentRequired or
        FallbackFailed otherwise.
        """
        scope = _CallScope(cancel, deadline_s)
        scope.check()
        providers = await self._load_providers(scope)

        for provider in providers:
            scope.check()
            try:
                message = await self._attempt(provider, req, scope)
            except (UnrecognizedVendor, CandidateFailed) as exc:
                logger.warning("%s failed: %s", provider.display_name, exc)
                continue
            logger.info("Success with %s", provider.display_name)
            return CanonicalResponse(message=message, provenance=provider.display_name)

        scope.check()
        try:
            message = await self._call_fallback(req, scope)
        except Cancelled:
            raise
        except GatewayError as exc:
            logger.error("Default backend failed: %s", exc)
            raise
        logger.info("Success with default backend (fallback)")
        return CanonicalResponse(message=message, provenance=FALLBACK_PROVENANCE)

    async def _load_providers(self, scope: _CallScope) -> list[ProviderConfig]:
        try:
            return await scope.run(self._registry.list_active_providers(), self._timeout_s)
        except asyncio.TimeoutError as exc:
            raise RegistryUnavailable(f"no provider list within {self._timeout_s}s") from exc

    async def _attempt(
        self,
        provider: ProviderConfig,
        req: GenerationRequest,
        scope: _CallScope,
    ) -> AssistantMessage:
        profile = resolve_vendor(provider.vendor_kind)
        dialect = get_dialect(profile.dialect)
        model = provider.model_override or profile.default_model
        base_url = provider.base_url_override or profile.base_url
        wire = dialect.build_request(req, provider.credential.get_secret_value(), model, base_url)

        logger.info("Trying %s (%s/%s)", provider.display_name, provider.vendor_kind, model)
        name = provider.display_name
        try:
            response = await scope.run(self._post(wire), self._timeout_s)
        except asyncio.TimeoutError as exc:
            raise CandidateFailed(name, f"timed out after {self._timeout_s}s") from exc
        except TRANSPORT_ERRORS as exc:
            scope.check()
            raise CandidateFailed(name, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise CandidateFailed(name, response.text, status_code=response.status_code)
        return self._decode(name, dialect, response)

    async def _call_fallback(self, req: GenerationRequest, scope: _CallScope) -> AssistantMessage:
        if self._fallback.api_key is None:
            raise FallbackFailed("default backend credential is not configured")

        dialect = get_dialect(VendorDialect.CHAT_COMPLETIONS)
        model = req.model_override or self._fallback.model
        wire = dialect.build_request(req, self._fallback.api_key.get_secret_value(), model, self._fallback.url)

        logger.info("Using default backend (fallback) with %s", model)
        try:
            response = await scope.run(self._post(wire), self._timeout_s)
        except asyncio.TimeoutError as exc:
            raise FallbackFailed(f"default backend timed out after {self._timeout_s}s") from exc
        except TRANSPORT_ERRORS as exc:
            scope.check()
            raise classify_exception(exc) from exc

        if not response.is_success:
            raise classify_status(response.status_code, response.text)
        try:
            return self._decode(FALLBACK_PROVENANCE, dialect, response)
        except CandidateFailed as exc:
            raise FallbackFailed(str(exc)) from exc

    async def _post(self, wire: WireRequest) -> httpx.Response:
        return await self._client.post(wire.url, headers=wire.headers, json=wire.body)

    @staticmethod
    def _decode(name: str, dialect: BaseDialect, response: httpx.Response) -> AssistantMessage:
        try:
            return dialect.normalize(response.json())
        except ValueError as exc:
            raise CandidateFailed(name, f"unparseable response: {exc}") from exc
