"""Provider configuration loading and validation."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file
load_dotenv()

_logger = logging.getLogger("llm_fallback")

# Environment variable that points at an alternative providers.yaml
CONFIG_PATH_ENV = "SOCIALS_STUDIO_PROVIDERS_CONFIG"


class ProviderSettings(BaseModel):
    """Global provider settings."""

    timeout_seconds: float = 60.0
    system_prompt: str = "You are an assistant specialized in creating social media content."


class EndpointConfig(BaseModel):
    """Fields shared by every provider definition.

    Credentials and model overrides are resolved on every call so that a
    missing key only affects the provider that needs it.
    """

    type: str
    enabled: bool = True
    model: str
    model_env: str | None = None
    base_url: str | None = None
    base_url_env: str | None = None
    api_key: str | None = None
    api_key_env: str | None = None
    requires_api_key: bool = True
    timeout: float | None = None

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.getenv(self.api_key_env) or None
        return None

    def get_base_url(self) -> str | None:
        """Get base URL from environment or config."""
        if self.base_url_env:
            from_env = os.getenv(self.base_url_env)
            if from_env:
                return from_env.rstrip("/")
        if self.base_url:
            return self.base_url.rstrip("/")
        return None

    def get_model(self) -> str:
        """Get model name, honouring the environment override."""
        if self.model_env:
            override = os.getenv(self.model_env)
            if override:
                return override
        return self.model


class TextProviderConfig(EndpointConfig):
    """Configuration for a text provider."""

    temperature: float = 0.7
    max_tokens: int = 1000


class ImageProviderConfig(EndpointConfig):
    """Configuration for an image provider."""

    response_format: str = "url"
    settings: dict[str, Any] = Field(default_factory=dict)


class VisionProviderConfig(EndpointConfig):
    """Configuration for an image-analysis provider."""

    temperature: float = 0.4
    max_tokens: int = 2048


class HistoryConfig(BaseModel):
    """Generation history backend (Supabase / PostgREST)."""

    enabled: bool = True
    url_env: str = "SUPABASE_URL"
    service_key_env: str = "SUPABASE_SERVICE_ROLE_KEY"
    history_table: str = "generation_history"
    usage_table: str = "usage_statistics"
    timeout: float = 5.0

    def get_url(self) -> str | None:
        """Get the backend URL from environment."""
        url = os.getenv(self.url_env)
        return url.rstrip("/") if url else None

    def get_service_key(self) -> str | None:
        """Get the service key from environment."""
        return os.getenv(self.service_key_env) or None


def _default_text_providers() -> dict[str, TextProviderConfig]:
    return {
        "g4f": TextProviderConfig(
            type="chat_completions",
            model="gpt-4o",
            model_env="G4F_TEXT_MODEL",
            base_url="https://g4f.dev/api/v1",
            requires_api_key=False,
        ),
        "perplexity": TextProviderConfig(
            type="chat_completions",
            model="llama-3.1-sonar-small-128k-online",
            base_url="https://api.perplexity.ai",
            api_key_env="PERPLEXITY_API_KEY",
        ),
        "gemini": TextProviderConfig(
            type="gemini",
            model="gemini-2.5-flash",
            model_env="GEMINI_TEXT_MODEL",
            base_url="https://generativelanguage.googleapis.com/v1beta",
            api_key_env="GEMINI_API_KEY",
        ),
        "reve": TextProviderConfig(
            type="chat_completions",
            enabled=False,
            model="reve-ai",
            base_url="https://api.reve.com/v1",
            base_url_env="REVE_API_ENDPOINT",
            api_key_env="REVE_API_KEY",
        ),
    }


def _default_image_providers() -> dict[str, ImageProviderConfig]:
    return {
        "g4f": ImageProviderConfig(
            type="g4f",
            model="pollinations",
            model_env="G4F_IMAGE_MODEL",
            base_url="https://g4f.dev/api/v1",
            requires_api_key=False,
            timeout=90,
        ),
        "reve": ImageProviderConfig(
            type="reve",
            model="reve",
            base_url="https://api.reve.com/v1",
            api_key_env="REVE_API_KEY",
            timeout=120,
        ),
    }


def _default_vision_providers() -> dict[str, VisionProviderConfig]:
    return {
        "gemini": VisionProviderConfig(
            type="gemini_vision",
            model="gemini-2.5-flash",
            model_env="GEMINI_VISION_MODEL",
            base_url="https://generativelanguage.googleapis.com/v1beta",
            api_key_env="GEMINI_API_KEY",
        ),
    }


class ProviderConfig(BaseModel):
    """Full provider configuration.

    The ``*_priority_chain`` lists are the fallback order: cheapest/free
    providers first, paid ones last. An empty chain means "every enabled
    provider in definition order".
    """

    provider_settings: ProviderSettings = Field(default_factory=ProviderSettings)
    text_providers: dict[str, TextProviderConfig] = Field(default_factory=_default_text_providers)
    image_providers: dict[str, ImageProviderConfig] = Field(default_factory=_default_image_providers)
    vision_providers: dict[str, VisionProviderConfig] = Field(default_factory=_default_vision_providers)
    text_priority_chain: list[str] = Field(default_factory=lambda: ["g4f", "perplexity", "gemini"])
    image_priority_chain: list[str] = Field(default_factory=lambda: ["g4f", "reve"])
    vision_priority_chain: list[str] = Field(default_factory=lambda: ["gemini"])
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    @staticmethod
    def _ordered(
        providers: dict[str, EndpointConfig],
        chain: list[str],
    ) -> list[tuple[str, Any]]:
        names = chain or list(providers)
        ordered = []
        for name in names:
            config = providers.get(name)
            if config is None:
                _logger.warning(f"Provider '{name}' is in a priority chain but not defined")
                continue
            if config.enabled:
                ordered.append((name, config))
        return ordered

    def get_text_chain(self) -> list[tuple[str, TextProviderConfig]]:
        """Get enabled text providers in fallback order."""
        return self._ordered(self.text_providers, self.text_priority_chain)

    def get_image_chain(self) -> list[tuple[str, ImageProviderConfig]]:
        """Get enabled image providers in fallback order."""
        return self._ordered(self.image_providers, self.image_priority_chain)

    def get_vision_chain(self) -> list[tuple[str, VisionProviderConfig]]:
        """Get enabled vision providers in fallback order."""
        return self._ordered(self.vision_providers, self.vision_priority_chain)


def default_config_path() -> Path:
    """Path of config/providers.yaml relative to the project root."""
    return Path(__file__).parent.parent.parent.parent / "config" / "providers.yaml"


def load_provider_config(config_path: Path | None = None) -> ProviderConfig:
    """Load provider configuration from YAML file."""
    if config_path is None:
        env_path = os.getenv(CONFIG_PATH_ENV)
        config_path = Path(env_path) if env_path else default_config_path()

    if not config_path.exists():
        # Return default config if file doesn't exist
        return ProviderConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return ProviderConfig(**data)
