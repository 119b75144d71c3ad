"""Build ordered provider chains from configuration.

The chain order is plain data (``*_priority_chain`` in providers.yaml), so it
can be inspected and tested independently of the orchestrator.
"""

from __future__ import annotations

import httpx

from .base import ProviderClient
from .config import EndpointConfig, ProviderConfig, ProviderSettings
from .image import G4FImageProvider, ReveImageProvider
from .text import ChatCompletionsProvider, GeminiTextProvider
from .vision import GeminiVisionProvider

TEXT_PROVIDER_TYPES: dict[str, type[ProviderClient]] = {
    "chat_completions": ChatCompletionsProvider,
    "gemini": GeminiTextProvider,
}

IMAGE_PROVIDER_TYPES: dict[str, type[ProviderClient]] = {
    "g4f": G4FImageProvider,
    "reve": ReveImageProvider,
}

VISION_PROVIDER_TYPES: dict[str, type[ProviderClient]] = {
    "gemini_vision": GeminiVisionProvider,
}


def _build(
    entries: list[tuple[str, EndpointConfig]],
    types: dict[str, type[ProviderClient]],
    settings: ProviderSettings,
    http_client: httpx.AsyncClient | None,
) -> list[ProviderClient]:
    chain = []
    for name, entry in entries:
        provider_cls = types.get(entry.type)
        if provider_cls is None:
            raise ValueError(
                f"Unknown provider type '{entry.type}' for '{name}'. "
                f"Expected one of: {', '.join(sorted(types))}"
            )
        chain.append(provider_cls(name, entry, settings=settings, http_client=http_client))
    return chain


def build_text_chain(
    config: ProviderConfig,
    http_client: httpx.AsyncClient | None = None,
) -> list[ProviderClient]:
    """Text providers in fallback order."""
    return _build(
        config.get_text_chain(), TEXT_PROVIDER_TYPES, config.provider_settings, http_client
    )


def build_image_chain(
    config: ProviderConfig,
    http_client: httpx.AsyncClient | None = None,
) -> list[ProviderClient]:
    """Image providers in fallback order."""
    return _build(
        config.get_image_chain(), IMAGE_PROVIDER_TYPES, config.provider_settings, http_client
    )


def build_vision_chain(
    config: ProviderConfig,
    http_client: httpx.AsyncClient | None = None,
) -> list[ProviderClient]:
    """Vision providers in fallback order."""
    return _build(
        config.get_vision_chain(), VISION_PROVIDER_TYPES, config.provider_settings, http_client
    )
