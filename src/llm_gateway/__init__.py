"""Generation request gateway with ordered provider fallback."""

from .errors import (
    Cancelled,
    CandidateFailed,
    FallbackFailed,
    GatewayError,
    PaymentRequired,
    RateLimited,
    RegistryUnavailable,
    UnrecognizedVendor,
)
from .gateway import FallbackConfig, Gateway
from .registry import (
    CachedProviderRegistry,
    ProviderRegistry,
    RestProviderRegistry,
    StaticProviderRegistry,
)
from .settings import GatewaySettings
from .types import (
    AssistantMessage,
    CanonicalResponse,
    GenerationRequest,
    Message,
    ProviderConfig,
    ToolCall,
    ToolDef,
)

__all__ = [
    "AssistantMessage",
    "CachedProviderRegistry",
    "Cancelled",
    "CandidateFailed",
    "CanonicalResponse",
    "FallbackConfig",
    "FallbackFailed",
    "Gateway",
    "GatewayError",
    "GatewaySettings",
    "GenerationRequest",
    "Message",
    "PaymentRequired",
    "ProviderConfig",
    "ProviderRegistry",
    "RateLimited",
    "RegistryUnavailable",
    "RestProviderRegistry",
    "StaticProviderRegistry",
    "ToolCall",
    "ToolDef",
    "UnrecognizedVendor",
]
