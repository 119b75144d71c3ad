"""Integration tests for socials_studio.api.main - FastAPI REST endpoints.

All tests use the FastAPI TestClient with a GenerationService built on stub
providers, so no vendor is contacted. Covered:

- ``POST /api/generate/text`` - every text type, validation, exhaustion.
- ``POST /api/generate/image`` - create, social-media, edit validation.
- ``POST /api/analyze/image`` - analysis and exhaustion.
- ``GET`` descriptions and ``/health``.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from socials_studio.api.main import create_app
from socials_studio.providers.base import ImageOperation
from socials_studio.providers.errors import ProviderError
from socials_studio.services.generation import GenerationService
from socials_studio.settings import ServerSettings


@pytest.fixture
def build_client(empty_config, mock_recorder):
    """Create a TestClient around the given provider chains."""
    clients = []

    def _build(text=(), image=(), vision=()):
        service = GenerationService(
            empty_config,
            text_providers=list(text),
            image_providers=list(image),
            vision_providers=list(vision),
            recorder=mock_recorder,
        )
        client = TestClient(create_app(service=service, settings=ServerSettings()))
        client.__enter__()
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def test_client(build_client, stub_provider):
    """Client with one working provider per chain."""
    return build_client(
        text=[stub_provider(
            "g4f", model="gpt-4o", text="POST:\nHello coffee lovers\nHASHTAGS: #coffee #beans"
        )],
        image=[stub_provider(
            "reve",
            text=None,
            image_base64="aW1hZ2U=",
            credits_used=1,
            operations=frozenset(ImageOperation),
        )],
        vision=[stub_provider("gemini", text="A mug of coffee")],
    )


# ---------------------------------------------------------------------------
# Text generation.
# ---------------------------------------------------------------------------


class TestGenerateText:
    """Test POST /api/generate/text."""

    def test_social_media_post(self, test_client, mock_recorder):
        resp = test_client.post("/api/generate/text", json={
            "prompt": "new espresso blend",
            "type": "social-media",
            "platform": "instagram",
            "tone": "casual",
            "targetAudience": "coffee fans",
            "userId": "user-1",
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["content"] == "Hello coffee lovers"
        assert body["data"]["hashtags"] == ["coffee", "beans"]
        assert body["data"]["modelUsed"] == "gpt-4o"
        assert "generationTimeMs" in body["metadata"]
        mock_recorder.record_safely.assert_awaited_once()

    def test_general_text(self, test_client):
        resp = test_client.post("/api/generate/text", json={"prompt": "hello"})

        assert resp.status_code == 200
        assert resp.json()["data"]["text"].startswith("POST:")

    def test_variations_use_text_to_improve(self, test_client):
        resp = test_client.post("/api/generate/text", json={
            "type": "variations",
            "textToImprove": "Best coffee in town",
            "variationsCount": 2,
        })

        assert resp.status_code == 200
        assert len(resp.json()["data"]["variations"]) == 2

    def test_improve(self, test_client):
        resp = test_client.post("/api/generate/text", json={
            "type": "improve",
            "textToImprove": "coffe good",
        })

        assert resp.status_code == 200
        assert "text" in resp.json()["data"]

    @pytest.mark.parametrize("payload, fragment", [
        ({}, "prompt or textToImprove is required"),
        ({"prompt": "x", "type": "social-media"}, "platform is required"),
        ({"prompt": "x", "type": "improve"}, "textToImprove is required"),
        ({"prompt": "x", "type": "poem"}, "type"),
        ({"prompt": "x", "type": "social-media", "platform": "myspace"}, "platform"),
    ])
    def test_invalid_body_is_400(self, test_client, payload, fragment):
        resp = test_client.post("/api/generate/text", json=payload)

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Invalid request"
        assert fragment in body["details"]

    def test_exhaustion_is_500_with_attempts(self, build_client, stub_provider):
        client = build_client(text=[
            stub_provider("g4f", error=httpx.ConnectError("unreachable")),
            stub_provider("perplexity", configured=False),
            stub_provider("gemini", error=ProviderError("gemini", "HTTP 503 - overloaded")),
        ])

        resp = client.post("/api/generate/text", json={"prompt": "hello"})

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Failed to generate text"
        assert [a["provider"] for a in body["attempts"]] == ["g4f", "perplexity", "gemini"]
        assert body["attempts"][1]["errorType"] == "ConfigurationError"
        assert "overloaded" in body["details"]


# ---------------------------------------------------------------------------
# Image generation.
# ---------------------------------------------------------------------------


class TestGenerateImage:
    """Test POST /api/generate/image."""

    def test_create(self, test_client):
        resp = test_client.post("/api/generate/image", json={
            "prompt": "espresso macro shot",
            "width": 1024,
            "height": 1024,
        })

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["imageBase64"] == "aW1hZ2U="
        assert data["creditsUsed"] == 1
        assert data["contentViolation"] is False

    def test_social_media_requires_platform(self, test_client):
        resp = test_client.post("/api/generate/image", json={
            "prompt": "espresso", "type": "social-media",
        })
        assert resp.status_code == 400

    def test_edit_requires_image(self, test_client):
        resp = test_client.post("/api/generate/image", json={"prompt": "blue", "type": "edit"})

        assert resp.status_code == 400
        assert "imageBase64 is required" in resp.json()["details"]

    def test_strength_out_of_range(self, test_client):
        resp = test_client.post("/api/generate/image", json={
            "prompt": "x", "type": "remix", "imageBase64": "aW1n", "strength": 1.5,
        })
        assert resp.status_code == 400

    def test_exhaustion_is_500(self, build_client, stub_provider):
        client = build_client(image=[stub_provider("g4f", error=ProviderError("g4f", "no image"))])

        resp = client.post("/api/generate/image", json={"prompt": "x"})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to generate image"


# ---------------------------------------------------------------------------
# Image analysis.
# ---------------------------------------------------------------------------


class TestAnalyzeImage:
    """Test POST /api/analyze/image."""

    def test_analysis(self, test_client):
        resp = test_client.post("/api/analyze/image", json={
            "imageData": "data:image/png;base64,aGVsbG8=",
        })

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["analysis"] == "A mug of coffee"
        assert data["prompt"].startswith("Describe this image")

    def test_image_data_required(self, test_client):
        assert test_client.post("/api/analyze/image", json={"prompt": "what?"}).status_code == 400

    def test_no_vision_provider_is_500(self, build_client):
        client = build_client()

        resp = client.post("/api/analyze/image", json={"imageData": "aGVsbG8="})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to analyze image"
        assert resp.json()["attempts"] == []


# ---------------------------------------------------------------------------
# Descriptions and health.
# ---------------------------------------------------------------------------


class TestInfoEndpoints:
    """GET descriptions and health."""

    @pytest.mark.parametrize("path, chain", [
        ("/api/generate/text", ["g4f"]),
        ("/api/generate/image", ["reve"]),
        ("/api/analyze/image", ["gemini"]),
    ])
    def test_descriptions_list_active_chain(self, test_client, path, chain):
        resp = test_client.get(path)

        assert resp.status_code == 200
        assert resp.json()["providers"] == chain

    def test_health(self, test_client):
        resp = test_client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["chains"]["text"] == ["g4f"]
