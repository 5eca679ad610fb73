"""Map default backend failures onto the terminal error kinds."""

from __future__ import annotations

from llm_gateway.errors import FallbackFailed, GatewayError, PaymentRequired, RateLimited


def classify_status(status_code: int, body: str) -> GatewayError:
    """Classify a non-2xx response from the default backend.

    The status code alone decides the kind; the body is kept only as
    diagnostic detail.
    """
    if status_code == 429:
        return RateLimited(body or None)
    if status_code == 402:
        return PaymentRequired(body or None)
    return FallbackFailed(f"default backend returned {status_code}: {body}", status_code=status_code)


def classify_exception(exc: BaseException) -> GatewayError:
    """Classify a transport or decoding failure from the default backend."""
    if isinstance(exc, GatewayError):
        return exc
    text = str(exc) or type(exc).__name__
    return FallbackFailed(text)
