"""CLI commands - thin wrappers over the generation service and the API server."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ..content.models import Platform, SocialPostParams, Tone
from ..providers.config import load_provider_config
from ..services import AllProvidersExhausted, GenerationService, TextResult
from ..settings import get_settings
from .console import console, print_info
from .display import show_exhausted, show_post_config, show_post_result, show_providers_table


def build_service(config_path: Optional[Path] = None) -> GenerationService:
    """Create the generation service from the providers config."""
    return GenerationService(load_provider_config(config_path))


def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
) -> None:
    """Run the HTTP API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    print_info(f"Serving on http://{host}:{port}")
    uvicorn.run(
        "socials_studio.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
    )


def post(
    topic: str = typer.Argument(..., help="What the post is about"),
    platform: Platform = typer.Option(Platform.INSTAGRAM, "--platform", help="Target platform"),
    tone: Tone = typer.Option(Tone.PROFESSIONAL, "--tone", help="Writing tone"),
    audience: Optional[str] = typer.Option(None, "--audience", "-a", help="Target audience"),
    no_hashtags: bool = typer.Option(False, "--no-hashtags", help="Do not ask for hashtags"),
    no_emojis: bool = typer.Option(False, "--no-emojis", help="Do not ask for emojis"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="providers.yaml path"),
) -> None:
    """Generate one social-media post."""
    params = SocialPostParams(
        topic=topic,
        platform=platform,
        tone=tone,
        target_audience=audience,
        include_hashtags=not no_hashtags,
        include_emojis=not no_emojis,
    )
    show_post_config(console, params)

    try:
        result = asyncio.run(_generate_post(params, config))
    except AllProvidersExhausted as e:
        show_exhausted(console, e)
        raise typer.Exit(1)

    show_post_result(console, result)


async def _generate_post(params: SocialPostParams, config_path: Optional[Path]) -> TextResult:
    service = build_service(config_path)
    try:
        return await service.generate_social_post(params)
    finally:
        await service.aclose()


def providers(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="providers.yaml path"),
) -> None:
    """Show each provider chain in fallback order."""
    service = build_service(config)
    try:
        show_providers_table(console, service.provider_status())
    finally:
        asyncio.run(service.aclose())
