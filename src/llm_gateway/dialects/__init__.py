"""Dialect definitions and the vendor catalogue."""

from __future__ import annotations

from dataclasses import dataclass

from llm_gateway.errors import UnrecognizedVendor

from .base import BaseDialect, VendorDialect
from .chat_completions import ChatCompletionsDialect
from .messages import MessagesDialect

_DIALECTS: dict[VendorDialect, BaseDialect] = {
    VendorDialect.CHAT_COMPLETIONS: ChatCompletionsDialect(),
    VendorDialect.MESSAGES: MessagesDialect(),
}


@dataclass(frozen=True)
class VendorProfile:
    """Wire dialect and defaults for one vendor kind."""

    dialect: VendorDialect
    base_url: str
    default_model: str


VENDOR_PROFILES: dict[str, VendorProfile] = {
    "groq": VendorProfile(
        VendorDialect.CHAT_COMPLETIONS,
        "https://api.groq.com/openai/v1/chat/completions",
        "llama-3.3-70b-versatile",
    ),
    "openai": VendorProfile(
        VendorDialect.CHAT_COMPLETIONS,
        "https://api.openai.com/v1/chat/completions",
        "gpt-4o-mini",
    ),
    "openrouter": VendorProfile(
        VendorDialect.CHAT_COMPLETIONS,
        "https://openrouter.ai/api/v1/chat/completions",
        "google/gemini-2.5-flash",
    ),
    "google": VendorProfile(
        VendorDialect.CHAT_COMPLETIONS,
        "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
        "gemini-2.5-flash",
    ),
    "anthropic": VendorProfile(
        VendorDialect.MESSAGES,
        "https://api.anthropic.com/v1/messages",
        "claude-sonnet-4-20250514",
    ),
}


def resolve_vendor(vendor_kind: str) -> VendorProfile:
    """Return the profile for a vendor kind."""
    try:
        return VENDOR_PROFILES[vendor_kind]
    except KeyError as exc:
        raise UnrecognizedVendor(vendor_kind) from exc


def get_dialect(dialect: VendorDialect) -> BaseDialect:
    """Return the implementation for a dialect tag."""
    return _DIALECTS[dialect]


__all__ = [
    "BaseDialect",
    "ChatCompletionsDialect",
    "MessagesDialect",
    "VENDOR_PROFILES",
    "VendorDialect",
    "VendorProfile",
    "get_dialect",
    "resolve_vendor",
]
