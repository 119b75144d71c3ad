"""Provider client contract shared by every vendor adapter.

A provider client wraps exactly one outbound call to one vendor endpoint.
``attempt()`` checks the credential, bounds the call with a timeout and
converts every expected failure into a ``ProviderError`` so the fallback
chain can move on. There is no retry at this level.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .config import EndpointConfig, ProviderSettings
from .errors import ConfigurationError, ProviderError, UnsupportedOperationError

_logger = logging.getLogger("ai_calls")


class GenerationKind(str, Enum):
    """Capability a provider offers."""

    TEXT = "text"
    IMAGE = "image"
    VISION = "vision"


class ImageOperation(str, Enum):
    """Image operation requested from an image provider."""

    CREATE = "create"
    EDIT = "edit"
    REMIX = "remix"


class GenerationRequest(BaseModel):
    """Immutable description of one generation.

    ``metadata`` carries request context (platform, tone, request type) that
    is only used for history records, never sent to providers.
    """

    model_config = ConfigDict(frozen=True)

    kind: GenerationKind
    prompt: str
    system: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None

    # Image generation
    operation: ImageOperation = ImageOperation.CREATE
    width: int | None = None
    height: int | None = None
    quality: Literal["standard", "hd"] | None = None
    image_base64: str | None = None
    mask_base64: str | None = None
    strength: float | None = None

    # Vision
    image_data: str | None = None

    user_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


@dataclass
class ProviderResult:
    """Normalized outcome of one successful provider attempt."""

    provider: str
    model: str
    text: str | None = None
    image_base64: str | None = None
    image_url: str | None = None
    duration_ms: int = 0
    tokens_used: int | None = None
    credits_used: int | None = None
    credits_remaining: int | None = None
    content_violation: bool = False


class ProviderClient(ABC):
    """Base class for a single vendor endpoint.

    Subclasses implement ``_send()``; it receives the resolved API key (or
    ``None`` for keyless providers) and performs exactly one HTTP call.
    """

    kind: GenerationKind
    operations: frozenset[ImageOperation] = frozenset({ImageOperation.CREATE})

    def __init__(
        self,
        name: str,
        config: EndpointConfig,
        settings: ProviderSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the provider client.

        Args:
            name: Provider name as used in the priority chain.
            config: Endpoint configuration for this provider.
            settings: Global provider settings (timeouts, system prompt).
            http_client: Shared HTTP client. Created lazily if None.
        """
        self.name = name
        self.config = config
        self.settings = settings or ProviderSettings()
        self._http_client = http_client
        self._owns_client = http_client is None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, model={self.config.model!r})"

    @property
    def timeout(self) -> float:
        """Upper bound in seconds for a single attempt."""
        return self.config.timeout or self.settings.timeout_seconds

    @property
    def is_configured(self) -> bool:
        """Whether the credential this provider needs is available."""
        return not self.config.requires_api_key or bool(self.config.get_api_key())

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client if this provider created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _require_credential(self) -> str | None:
        api_key = self.config.get_api_key()
        if self.config.requires_api_key and not api_key:
            env_name = self.config.api_key_env or "api_key"
            raise ConfigurationError(self.name, f"{env_name} not configured")
        return api_key

    async def attempt(self, request: GenerationRequest) -> ProviderResult:
        """Run one attempt against this provider.

        Args:
            request: The generation request.

        Returns:
            ProviderResult with elapsed time filled in.

        Raises:
            UnsupportedOperationError: Operation not offered (no network call).
            ConfigurationError: Credential missing (no network call made).
            ProviderError: Network failure, error status, timeout or
                malformed vendor response.
        """
        if request.operation not in self.operations:
            raise UnsupportedOperationError(
                self.name, f"operation '{request.operation.value}' is not supported"
            )
        api_key = self._require_credential()
        model = self.config.get_model()
        start_time = time.time()

        _logger.info(
            f"AI_REQUEST | provider:{self.name} | kind:{request.kind.value} | "
            f"model:{model} | operation:{request.operation.value}\n"
            f"--- PROMPT ---\n{request.prompt}\n"
            f"--- END REQUEST ---"
        )

        try:
            result = await asyncio.wait_for(self._send(request, api_key), timeout=self.timeout)
        except ProviderError as e:
            _logger.warning(f"AI_ERROR | provider:{self.name} | error:{e.reason}")
            raise
        except asyncio.TimeoutError as e:
            _logger.warning(f"AI_ERROR | provider:{self.name} | error:timeout")
            raise ProviderError(self.name, f"timed out after {self.timeout:g}s") from e
        except httpx.HTTPStatusError as e:
            body = e.response.text[:500]
            _logger.warning(
                f"AI_ERROR | provider:{self.name} | status:{e.response.status_code} | body:{body}"
            )
            raise ProviderError(
                self.name, f"HTTP {e.response.status_code} - {body}"
            ) from e
        except httpx.HTTPError as e:
            _logger.warning(f"AI_ERROR | provider:{self.name} | error:{type(e).__name__}: {e}")
            raise ProviderError(self.name, f"{type(e).__name__}: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            _logger.warning(f"AI_ERROR | provider:{self.name} | malformed response: {e!r}")
            raise ProviderError(self.name, f"malformed response: {type(e).__name__}: {e}") from e

        result.duration_ms = int((time.time() - start_time) * 1000)

        preview = result.text if result.text is not None else (result.image_url or "<base64 image>")
        _logger.info(
            f"AI_RESPONSE | provider:{self.name} | model:{result.model} | "
            f"duration:{result.duration_ms / 1000:.2f}s | tokens:{result.tokens_used}\n"
            f"--- RESPONSE ---\n{preview}\n"
            f"--- END RESPONSE ---"
        )
        return result

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST a JSON payload and raise on error status."""
        client = await self._get_http_client()
        response = await client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        return response

    def _json_object(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a response body that must be a JSON object."""
        data = response.json()
        if not isinstance(data, dict):
            raise ProviderError(
                self.name, f"malformed response: expected a JSON object, got {type(data).__name__}"
            )
        return data

    def _base_url(self) -> str:
        base_url = self.config.get_base_url()
        if not base_url:
            raise ConfigurationError(self.name, "base_url not configured")
        return base_url

    @abstractmethod
    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        """Perform the vendor call and map its response."""
