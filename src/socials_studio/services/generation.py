"""Generation Service - one entry point for every generation operation.

Each operation follows the same flow:

    build prompt -> resolve against the provider chain -> parse response
    -> record history (best-effort) -> return result

Only ``AllProvidersExhausted`` escapes from a generation call. History
failures are logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import httpx

from ..content.models import ImagePlatform, SocialPostParams
from ..content.parser import parse_social_post, parse_variations
from ..content.prompts import (
    DEFAULT_ANALYSIS_PROMPT,
    SOCIAL_IMAGE_DIMENSIONS,
    build_improve_prompt,
    build_social_post_prompt,
    build_variations_prompt,
    clamp_variations_count,
)
from ..providers.base import (
    GenerationKind,
    GenerationRequest,
    ImageOperation,
    ProviderClient,
)
from ..providers.config import ProviderConfig, load_provider_config
from ..providers.registry import build_image_chain, build_text_chain, build_vision_chain
from .fallback import FallbackOrchestrator, GenerationOutcome
from .history import HistoryRecorder, UsageRecord, serialize_result

_logger = logging.getLogger("generation")


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass
class TextResult:
    """Result of a text operation."""

    provider: str
    model_used: str
    generation_time_ms: int
    tokens_used: int | None = None
    text: str | None = None
    content: str | None = None
    hashtags: list[str] | None = None
    variations: list[str] | None = None
    failed_providers: list[str] = field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: GenerationOutcome, **fields: Any) -> "TextResult":
        return cls(
            provider=outcome.provider,
            model_used=outcome.model,
            generation_time_ms=outcome.result.duration_ms,
            tokens_used=outcome.result.tokens_used,
            failed_providers=[a.provider for a in outcome.failures],
            **fields,
        )

    def to_response(self) -> dict[str, Any]:
        return _drop_none({
            "text": self.text,
            "content": self.content,
            "hashtags": self.hashtags,
            "variations": self.variations,
            "tokensUsed": self.tokens_used,
            "modelUsed": self.model_used,
            "generationTimeMs": self.generation_time_ms,
        })


@dataclass
class ImageResult:
    """Result of an image operation."""

    provider: str
    model_used: str
    generation_time_ms: int
    image_base64: str | None = None
    image_url: str | None = None
    credits_used: int | None = None
    credits_remaining: int | None = None
    content_violation: bool = False
    failed_providers: list[str] = field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: GenerationOutcome) -> "ImageResult":
        result = outcome.result
        return cls(
            provider=outcome.provider,
            model_used=result.model,
            generation_time_ms=result.duration_ms,
            image_base64=result.image_base64,
            image_url=result.image_url,
            credits_used=result.credits_used,
            credits_remaining=result.credits_remaining,
            content_violation=result.content_violation,
            failed_providers=[a.provider for a in outcome.failures],
        )

    def to_response(self) -> dict[str, Any]:
        return _drop_none({
            "imageBase64": self.image_base64,
            "imageUrl": self.image_url,
            "modelUsed": self.model_used,
            "generationTimeMs": self.generation_time_ms,
            "creditsUsed": self.credits_used,
            "creditsRemaining": self.credits_remaining,
            "contentViolation": self.content_violation,
        })


@dataclass
class AnalysisResult:
    """Result of an image analysis."""

    provider: str
    analysis: str
    prompt: str
    model_used: str
    generation_time_ms: int

    def to_response(self) -> dict[str, Any]:
        return {
            "analysis": self.analysis,
            "prompt": self.prompt,
            "modelUsed": self.model_used,
            "generationTimeMs": self.generation_time_ms,
        }


class GenerationService:
    """Text, image and vision generation over fallback chains.

    Usage:
        service = GenerationService()
        post = await service.generate_social_post(params, user_id="u-1")
        await service.aclose()
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        text_providers: Sequence[ProviderClient] | None = None,
        image_providers: Sequence[ProviderClient] | None = None,
        vision_providers: Sequence[ProviderClient] | None = None,
        orchestrator: FallbackOrchestrator | None = None,
        recorder: HistoryRecorder | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the service.

        Args:
            config: Provider configuration. If None, loads from default config file.
            text_providers: Explicit text chain (overrides config).
            image_providers: Explicit image chain (overrides config).
            vision_providers: Explicit vision chain (overrides config).
            orchestrator: Fallback orchestrator to use.
            recorder: History recorder to use.
            http_client: Shared HTTP client. Created if None.
        """
        self.config = config or load_provider_config()
        self._owns_client = http_client is None
        # Attempts are bounded by the provider timeout, not the client
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=10.0)
        )

        self.text_providers = list(
            text_providers if text_providers is not None
            else build_text_chain(self.config, self._http_client)
        )
        self.image_providers = list(
            image_providers if image_providers is not None
            else build_image_chain(self.config, self._http_client)
        )
        self.vision_providers = list(
            vision_providers if vision_providers is not None
            else build_vision_chain(self.config, self._http_client)
        )
        self.orchestrator = orchestrator or FallbackOrchestrator()
        self.recorder = recorder or HistoryRecorder(self.config.history, self._http_client)

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        if self._owns_client:
            await self._http_client.aclose()

    def describe_chains(self) -> dict[str, list[str]]:
        """Provider names per capability, in fallback order."""
        return {
            "text": [p.name for p in self.text_providers],
            "image": [p.name for p in self.image_providers],
            "vision": [p.name for p in self.vision_providers],
        }

    def provider_status(self) -> list[dict[str, Any]]:
        """Per-provider model and credential status for display."""
        rows = []
        for kind, chain in (
            ("text", self.text_providers),
            ("image", self.image_providers),
            ("vision", self.vision_providers),
        ):
            for position, provider in enumerate(chain, start=1):
                rows.append({
                    "kind": kind,
                    "position": position,
                    "name": provider.name,
                    "model": provider.config.get_model(),
                    "configured": provider.is_configured,
                })
        return rows

    async def _record(self, record: UsageRecord) -> None:
        """Best-effort history write.

        Shielded so a cancelled request does not abort a write in progress.
        """
        try:
            await asyncio.shield(self.recorder.record_safely(record))
        except Exception:
            _logger.exception("History recorder raised unexpectedly")

    async def _record_text(self, prompt: str, request: GenerationRequest, result: TextResult) -> None:
        if not request.user_id:
            return
        await self._record(UsageRecord(
            user_id=request.user_id,
            generation_type="text",
            prompt=prompt,
            result=serialize_result(result.to_response()),
            model_used=result.model_used,
            tokens_used=result.tokens_used,
            generation_time_ms=result.generation_time_ms,
            metadata=dict(request.metadata),
        ))

    async def _record_image(self, request: GenerationRequest, result: ImageResult) -> None:
        if not request.user_id:
            return
        metadata = {
            **request.metadata,
            "width": request.width,
            "height": request.height,
            "quality": request.quality,
            "contentViolation": result.content_violation,
            "creditsRemaining": result.credits_remaining,
        }
        await self._record(UsageRecord(
            user_id=request.user_id,
            generation_type="image",
            prompt=request.prompt,
            result=result.image_base64 or result.image_url or "",
            model_used=result.model_used,
            generation_time_ms=result.generation_time_ms,
            cost=result.credits_used,
            metadata=metadata,
        ))

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    async def generate_text(self, prompt: str, user_id: str | None = None) -> TextResult:
        """General-purpose completion."""
        request = GenerationRequest(
            kind=GenerationKind.TEXT,
            prompt=prompt,
            user_id=user_id,
            metadata={"type": "general"},
        )
        outcome = await self.orchestrator.resolve(request, self.text_providers)
        result = TextResult.from_outcome(outcome, text=outcome.result.text)
        await self._record_text(prompt, request, result)
        return result

    async def generate_social_post(
        self,
        params: SocialPostParams,
        user_id: str | None = None,
    ) -> TextResult:
        """Generate a post for a platform and split out its hashtags."""
        request = GenerationRequest(
            kind=GenerationKind.TEXT,
            prompt=build_social_post_prompt(params),
            temperature=0.9,
            max_tokens=1024,
            user_id=user_id,
            metadata={
                "type": "social-media",
                "platform": params.platform.value,
                "tone": params.tone.value,
            },
        )
        outcome = await self.orchestrator.resolve(request, self.text_providers)
        post = parse_social_post(outcome.result.text)
        result = TextResult.from_outcome(outcome, content=post.content, hashtags=post.hashtags)
        await self._record_text(params.topic, request, result)
        return result

    async def generate_variations(
        self,
        text: str,
        count: int | None = 3,
        user_id: str | None = None,
    ) -> TextResult:
        """Reword ``text`` ``count`` times (1-5) with a single provider call."""
        count = clamp_variations_count(count)
        request = GenerationRequest(
            kind=GenerationKind.TEXT,
            prompt=build_variations_prompt(text, count),
            temperature=0.9,
            user_id=user_id,
            metadata={"type": "variations", "count": count},
        )
        outcome = await self.orchestrator.resolve(request, self.text_providers)
        variations = parse_variations(outcome.result.text, limit=count)
        result = TextResult.from_outcome(outcome, variations=variations)
        await self._record_text(text, request, result)
        return result

    async def improve_text(
        self,
        text: str,
        instructions: str | None = None,
        user_id: str | None = None,
    ) -> TextResult:
        """Rewrite ``text``, optionally following ``instructions``."""
        request = GenerationRequest(
            kind=GenerationKind.TEXT,
            prompt=build_improve_prompt(text, instructions),
            temperature=0.7,
            user_id=user_id,
            metadata={"type": "improve"},
        )
        outcome = await self.orchestrator.resolve(request, self.text_providers)
        result = TextResult.from_outcome(outcome, text=outcome.result.text)
        await self._record_text(instructions or text, request, result)
        return result

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    async def _generate_image(self, request: GenerationRequest) -> ImageResult:
        outcome = await self.orchestrator.resolve(request, self.image_providers)
        result = ImageResult.from_outcome(outcome)
        if result.content_violation:
            _logger.warning(f"Content violation flagged by {result.provider}")
        await self._record_image(request, result)
        return result

    async def generate_image(
        self,
        prompt: str,
        width: int | None = None,
        height: int | None = None,
        quality: str | None = None,
        user_id: str | None = None,
    ) -> ImageResult:
        """Create an image from a prompt."""
        return await self._generate_image(GenerationRequest(
            kind=GenerationKind.IMAGE,
            prompt=prompt,
            width=width,
            height=height,
            quality=quality,
            user_id=user_id,
            metadata={"type": "create"},
        ))

    async def generate_social_media_image(
        self,
        prompt: str,
        platform: ImagePlatform,
        user_id: str | None = None,
    ) -> ImageResult:
        """Create an image sized for a social-media placement."""
        width, height = SOCIAL_IMAGE_DIMENSIONS[platform]
        return await self._generate_image(GenerationRequest(
            kind=GenerationKind.IMAGE,
            prompt=prompt,
            width=width,
            height=height,
            quality="hd",
            user_id=user_id,
            metadata={"type": "social-media", "platform": platform.value},
        ))

    async def edit_image(
        self,
        prompt: str,
        image_base64: str,
        mask_base64: str | None = None,
        user_id: str | None = None,
    ) -> ImageResult:
        """Edit an existing image, optionally within a mask."""
        return await self._generate_image(GenerationRequest(
            kind=GenerationKind.IMAGE,
            operation=ImageOperation.EDIT,
            prompt=prompt,
            image_base64=image_base64,
            mask_base64=mask_base64,
            user_id=user_id,
            metadata={"type": "edit"},
        ))

    async def remix_image(
        self,
        prompt: str,
        image_base64: str,
        strength: float | None = None,
        user_id: str | None = None,
    ) -> ImageResult:
        """Combine a prompt with a reference image."""
        return await self._generate_image(GenerationRequest(
            kind=GenerationKind.IMAGE,
            operation=ImageOperation.REMIX,
            prompt=prompt,
            image_base64=image_base64,
            strength=strength,
            user_id=user_id,
            metadata={"type": "remix"},
        ))

    # ------------------------------------------------------------------
    # Vision
    # ------------------------------------------------------------------

    async def analyze_image(
        self,
        image_data: str,
        prompt: str | None = None,
        user_id: str | None = None,
    ) -> AnalysisResult:
        """Describe or answer a question about an image."""
        prompt = prompt or DEFAULT_ANALYSIS_PROMPT
        request = GenerationRequest(
            kind=GenerationKind.VISION,
            prompt=prompt,
            image_data=image_data,
            user_id=user_id,
        )
        outcome = await self.orchestrator.resolve(request, self.vision_providers)
        return AnalysisResult(
            provider=outcome.provider,
            analysis=outcome.result.text or "",
            prompt=prompt,
            model_used=outcome.model,
            generation_time_ms=outcome.result.duration_ms,
        )
