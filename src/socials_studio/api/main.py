"""Socials Studio - FastAPI application.

Thin HTTP layer over :class:`~socials_studio.services.GenerationService`.
Routes validate the body, dispatch on ``type`` and wrap the result in the
response envelope. Provider selection and fallback live in the service.

Endpoints
---------
========  ==========================  ======================================
Method    Path                        Purpose
========  ==========================  ======================================
POST      ``/api/generate/text``      General, social post, variations, improve
GET       ``/api/generate/text``      Endpoint description and text chain
POST      ``/api/generate/image``     Create, edit, remix, social-media image
GET       ``/api/generate/image``     Endpoint description and image chain
POST      ``/api/analyze/image``      Image analysis
GET       ``/api/analyze/image``      Endpoint description and vision chain
GET       ``/health``                 Liveness and configured chains
========  ==========================  ======================================

Responses
---------
Success::

    200 {"success": true, "data": {...}, "metadata": {"generationTimeMs": n}}

Invalid body::

    400 {"error": "Invalid request", "details": "..."}

Every provider failed::

    500 {"error": "Failed to generate text", "details": "...", "attempts": [...]}

Usage
-----
CLI (installed entry point)::

    socials-studio serve

Direct invocation::

    python -m socials_studio.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from socials_studio import __version__
from socials_studio.api.models import (
    AnalyzeImageRequest,
    ImageGenerateRequest,
    TextGenerateRequest,
)
from socials_studio.providers.config import load_provider_config
from socials_studio.services import (
    AllProvidersExhausted,
    AnalysisResult,
    GenerationService,
    ImageResult,
    TextResult,
)
from socials_studio.settings import ServerSettings, get_settings

logger = logging.getLogger(__name__)


def _envelope(result: TextResult | ImageResult | AnalysisResult) -> dict[str, Any]:
    return {
        "success": True,
        "data": result.to_response(),
        "metadata": {
            "generationTimeMs": result.generation_time_ms,
            "provider": result.provider,
        },
    }


def _exhausted_response(error: str, exc: AllProvidersExhausted) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": error,
            "details": str(exc),
            "attempts": [attempt.to_dict() for attempt in exc.attempts],
        },
    )


def _validation_details(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    messages = []
    for err in exc.errors():
        msg = str(err.get("msg", "")).removeprefix("Value error, ")
        location = ".".join(str(part) for part in err.get("loc", ())[1:])
        messages.append(f"{location}: {msg}" if location else msg)
    return "; ".join(messages)


def _get_service(request: Request) -> GenerationService:
    return request.app.state.service


def create_app(
    service: GenerationService | None = None,
    settings: ServerSettings | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: Pre-built generation service. When None, one is created from
            the providers config on startup and closed on shutdown.
        settings: Server settings. Loaded from the environment when None.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # --- Startup -------------------------------------------------------
        owns_service = service is None
        app.state.service = service or GenerationService(
            load_provider_config(settings.providers_config)
        )
        logger.info(f"Provider chains: {app.state.service.describe_chains()}")

        yield

        # --- Shutdown ------------------------------------------------------
        if owns_service:
            await app.state.service.aclose()

    app = FastAPI(
        title="Socials Studio",
        description="Social-media text and image generation with provider fallback.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": _validation_details(exc)},
        )

    # -----------------------------------------------------------------------
    # Text
    # -----------------------------------------------------------------------

    @app.post("/api/generate/text")
    async def generate_text(body: TextGenerateRequest, request: Request):
        """Run one text operation against the text chain."""
        service = _get_service(request)
        try:
            if body.type == "social-media":
                result = await service.generate_social_post(
                    body.to_post_params(), user_id=body.user_id
                )
            elif body.type == "variations":
                result = await service.generate_variations(
                    body.text_to_improve or body.prompt,
                    count=body.variations_count,
                    user_id=body.user_id,
                )
            elif body.type == "improve":
                result = await service.improve_text(
                    body.text_to_improve,
                    instructions=body.prompt,
                    user_id=body.user_id,
                )
            else:
                result = await service.generate_text(body.prompt, user_id=body.user_id)
        except AllProvidersExhausted as e:
            return _exhausted_response("Failed to generate text", e)
        return _envelope(result)

    @app.get("/api/generate/text")
    async def describe_text(request: Request) -> dict[str, Any]:
        return {
            "endpoint": "/api/generate/text",
            "method": "POST",
            "types": ["general", "social-media", "variations", "improve"],
            "parameters": {
                "prompt": "Prompt, or topic for social-media posts",
                "type": "general | social-media | variations | improve",
                "platform": "instagram | facebook | twitter | linkedin | tiktok",
                "tone": "professional | casual | funny | inspirational",
                "targetAudience": "Audience description",
                "includeHashtags": "boolean (default true)",
                "includeEmojis": "boolean (default true)",
                "variationsCount": "1-5 (default 3)",
                "textToImprove": "Source text for improve and variations",
                "userId": "Owner for generation history",
            },
            "providers": _get_service(request).describe_chains()["text"],
        }

    # -----------------------------------------------------------------------
    # Images
    # -----------------------------------------------------------------------

    @app.post("/api/generate/image")
    async def generate_image(body: ImageGenerateRequest, request: Request):
        """Run one image operation against the image chain."""
        service = _get_service(request)
        try:
            if body.type == "social-media":
                result = await service.generate_social_media_image(
                    body.prompt, body.platform, user_id=body.user_id
                )
            elif body.type == "edit":
                result = await service.edit_image(
                    body.prompt,
                    body.image_base64,
                    mask_base64=body.mask_base64,
                    user_id=body.user_id,
                )
            elif body.type == "remix":
                result = await service.remix_image(
                    body.prompt,
                    body.image_base64,
                    strength=body.strength,
                    user_id=body.user_id,
                )
            else:
                result = await service.generate_image(
                    body.prompt,
                    width=body.width,
                    height=body.height,
                    quality=body.quality,
                    user_id=body.user_id,
                )
        except AllProvidersExhausted as e:
            return _exhausted_response("Failed to generate image", e)
        return _envelope(result)

    @app.get("/api/generate/image")
    async def describe_image(request: Request) -> dict[str, Any]:
        return {
            "endpoint": "/api/generate/image",
            "method": "POST",
            "types": ["create", "edit", "remix", "social-media"],
            "parameters": {
                "prompt": "Image description (required)",
                "type": "create | edit | remix | social-media",
                "platform": "instagram | facebook | twitter | linkedin | story",
                "imageBase64": "Source image for edit and remix",
                "maskBase64": "Optional edit mask",
                "strength": "Remix strength 0-1",
                "width": "Pixels",
                "height": "Pixels",
                "quality": "standard | hd",
                "userId": "Owner for generation history",
            },
            "providers": _get_service(request).describe_chains()["image"],
        }

    # -----------------------------------------------------------------------
    # Vision
    # -----------------------------------------------------------------------

    @app.post("/api/analyze/image")
    async def analyze_image(body: AnalyzeImageRequest, request: Request):
        """Analyze an image against the vision chain."""
        service = _get_service(request)
        try:
            result = await service.analyze_image(
                body.image_data, prompt=body.prompt, user_id=body.user_id
            )
        except AllProvidersExhausted as e:
            return _exhausted_response("Failed to analyze image", e)
        return _envelope(result)

    @app.get("/api/analyze/image")
    async def describe_analysis(request: Request) -> dict[str, Any]:
        return {
            "endpoint": "/api/analyze/image",
            "method": "POST",
            "parameters": {
                "imageData": "Base64 image or data URL (required)",
                "prompt": "Question or instruction (optional)",
                "userId": "Owner (analyses are not recorded)",
            },
            "providers": _get_service(request).describe_chains()["vision"],
        }

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        return {
            "status": "ok",
            "version": __version__,
            "chains": _get_service(request).describe_chains(),
        }

    return app


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from ``SOCIALS_STUDIO_HOST`` and
    ``SOCIALS_STUDIO_PORT``. Defaults to ``127.0.0.1:8000``.
    """
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "socials_studio.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
