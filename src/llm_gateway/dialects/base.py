"""Dialect-agnostic base interfaces and helpers."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any

from llm_gateway.types import AssistantMessage, GenerationRequest, WireRequest


class VendorDialect(str, enum.Enum):
    """Wire shapes the gateway knows how to speak."""

    CHAT_COMPLETIONS = "chat_completions"
    MESSAGES = "messages"


class BaseDialect(ABC):
    """Abstract base class for dialect implementations.

    Implementations are stateless: they translate a canonical request into a
    vendor request and a decoded vendor response back into the canonical
    assistant message. No I/O happens here.
    """

    dialect: VendorDialect

    @abstractmethod
    def build_request(
        self,
        req: GenerationRequest,
        credential: str,
        model: str,
        base_url: str,
    ) -> WireRequest:
        """Translate a canonical request into a wire request."""
        raise NotImplementedError

    @abstractmethod
    def normalize(self, data: Any) -> AssistantMessage:
        """Translate a decoded response body; raise ValueError if malformed."""
        raise NotImplementedError
