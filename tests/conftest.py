"""Shared test fixtures and configuration.

Provides stub providers with scripted outcomes, MockTransport-backed HTTP
clients for vendor endpoints, and a mock history recorder. Nothing here
touches the network.
"""

from __future__ import annotations

from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest

from socials_studio.providers.base import (
    GenerationKind,
    GenerationRequest,
    ImageOperation,
    ProviderClient,
    ProviderResult,
)
from socials_studio.providers.config import EndpointConfig, ProviderConfig, ProviderSettings
from socials_studio.services.history import HistoryRecorder


class StubProvider(ProviderClient):
    """Provider whose single attempt returns or raises a scripted outcome."""

    kind = GenerationKind.TEXT

    def __init__(
        self,
        name: str,
        *,
        text: str | None = "stub text",
        image_url: str | None = None,
        image_base64: str | None = None,
        error: BaseException | None = None,
        configured: bool = True,
        model: str = "stub-model",
        tokens_used: int | None = 42,
        credits_used: int | None = None,
        operations: frozenset[ImageOperation] | None = None,
    ):
        config = EndpointConfig(
            type="stub",
            model=model,
            api_key="test-key" if configured else None,
            api_key_env=None if configured else f"STUB_{name.upper()}_UNSET_KEY",
        )
        super().__init__(name, config, settings=ProviderSettings(timeout_seconds=5))
        if operations is not None:
            self.operations = operations
        self.calls = 0
        self.requests: list[GenerationRequest] = []
        self._text = text
        self._image_url = image_url
        self._image_base64 = image_base64
        self._error = error
        self._tokens_used = tokens_used
        self._credits_used = credits_used

    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        self.calls += 1
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return ProviderResult(
            provider=self.name,
            model=self.config.model,
            text=self._text,
            image_url=self._image_url,
            image_base64=self._image_base64,
            tokens_used=self._tokens_used,
            credits_used=self._credits_used,
        )


@pytest.fixture
def stub_provider() -> Callable[..., StubProvider]:
    """Factory for stub providers.

    Usage:
        def test_something(stub_provider):
            g4f = stub_provider("g4f", error=httpx.ConnectError("down"))
    """
    return StubProvider


@pytest.fixture
def text_request() -> GenerationRequest:
    return GenerationRequest(kind=GenerationKind.TEXT, prompt="Write about coffee")


@pytest.fixture
def image_request() -> GenerationRequest:
    return GenerationRequest(kind=GenerationKind.IMAGE, prompt="A cup of coffee")


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def mock_recorder() -> AsyncMock:
    """HistoryRecorder double that records successfully."""
    recorder = AsyncMock(spec=HistoryRecorder)
    recorder.record_safely.return_value = True
    return recorder


@pytest.fixture
def empty_config() -> ProviderConfig:
    """Provider config with no providers at all."""
    return ProviderConfig(
        text_providers={},
        image_providers={},
        vision_providers={},
        text_priority_chain=[],
        image_priority_chain=[],
        vision_priority_chain=[],
    )
