"""Package specific exception hierarchy."""

from __future__ import annotations

_SNIPPET_LIMIT = 200


def truncate(text: str, limit: int = _SNIPPET_LIMIT) -> str:
    """Shorten error text for inclusion in messages and logs."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class GatewayError(Exception):
    """Base exception for llm_gateway package."""

    kind = "gateway_error"
    retryable = False

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = truncate(detail) if detail else None
        if self.detail:
            message = f"{message} Last error: {self.detail}"
        super().__init__(message)


class RegistryUnavailable(GatewayError):
    """Raised when the provider configuration store cannot be read."""

    kind = "registry_unavailable"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Provider registry is unavailable.", detail)


class UnrecognizedVendor(GatewayError):
    """Raised when a provider row names a vendor kind we cannot speak to."""

    kind = "unrecognized_vendor"

    def __init__(self, vendor_kind: str) -> None:
        super().__init__(f"Vendor kind '{vendor_kind}' is not recognized.")
        self.vendor_kind = vendor_kind


class CandidateFailed(GatewayError):
    """A single configured provider failed; only ever logged."""

    kind = "candidate_failed"

    def __init__(self, provider: str, reason: str, status_code: int | None = None) -> None:
        suffix = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{provider}: {truncate(reason)}{suffix}")
        self.provider = provider
        self.status_code = status_code


class RateLimited(GatewayError):
    """The default backend rejected the request with HTTP 429."""

    kind = "rate_limited"
    retryable = True

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Request limit exceeded. Try again later.", detail)


class PaymentRequired(GatewayError):
    """The default backend rejected the request with HTTP 402."""

    kind = "payment_required"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Insufficient credits for the default backend.", detail)


class FallbackFailed(GatewayError):
    """Every configured provider and the default backend failed."""

    kind = "fallback_failed"

    def __init__(self, detail: str | None = None, status_code: int | None = None) -> None:
        super().__init__("All generation providers failed.", detail)
        self.status_code = status_code


class Cancelled(GatewayError):
    """The caller cancelled the request or its deadline expired."""

    kind = "cancelled"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("Generation request was cancelled.", detail)
