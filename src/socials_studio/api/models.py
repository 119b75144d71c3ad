"""Pydantic request models for the generation API.

Request bodies use camelCase keys (``targetAudience``, ``imageBase64``...);
snake_case field names are accepted as well. Cross-field rules raise
``ValueError`` so FastAPI reports them as request validation errors, which
the app turns into 400 responses.

Models
------
TextGenerateRequest
    Payload for ``POST /api/generate/text``.
ImageGenerateRequest
    Payload for ``POST /api/generate/image``.
AnalyzeImageRequest
    Payload for ``POST /api/analyze/image``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..content.models import ImagePlatform, Platform, SocialPostParams, Tone

TextGenerationType = Literal["general", "social-media", "variations", "improve"]
ImageGenerationType = Literal["create", "edit", "remix", "social-media"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextGenerateRequest(_CamelModel):
    """Request body for ``POST /api/generate/text``.

    Attributes:
        prompt: Free prompt, or the topic for ``social-media`` posts.
        type: Operation to run.
        platform: Target platform, required for ``social-media``.
        tone: Voice of the post.
        target_audience: Audience description for the post.
        include_hashtags: Ask for a hashtags section.
        include_emojis: Ask for emojis.
        variations_count: Number of variations, clamped to 1..5.
        text_to_improve: Source text for ``improve`` and ``variations``.
        user_id: Owner for generation history.
    """

    prompt: str | None = None
    type: TextGenerationType = "general"
    platform: Platform | None = None
    tone: Tone = Tone.PROFESSIONAL
    target_audience: str | None = None
    include_hashtags: bool = True
    include_emojis: bool = True
    variations_count: int = 3
    text_to_improve: str | None = None
    user_id: str | None = None

    @model_validator(mode="after")
    def _check_inputs(self) -> "TextGenerateRequest":
        if not self.prompt and not self.text_to_improve:
            raise ValueError("prompt or textToImprove is required")
        if self.type == "social-media" and self.platform is None:
            raise ValueError("platform is required for social-media posts")
        if self.type == "improve" and not self.text_to_improve:
            raise ValueError("textToImprove is required to improve text")
        return self

    def to_post_params(self) -> SocialPostParams:
        """Social-post parameters, with the prompt as the topic."""
        return SocialPostParams(
            topic=self.prompt or self.text_to_improve or "",
            platform=self.platform,
            tone=self.tone,
            target_audience=self.target_audience,
            include_hashtags=self.include_hashtags,
            include_emojis=self.include_emojis,
        )


class ImageGenerateRequest(_CamelModel):
    """Request body for ``POST /api/generate/image``."""

    prompt: str = Field(..., min_length=1)
    type: ImageGenerationType = "create"
    platform: ImagePlatform | None = None
    image_base64: str | None = None
    mask_base64: str | None = None
    strength: float | None = Field(default=None, ge=0.0, le=1.0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    quality: Literal["standard", "hd"] | None = None
    user_id: str | None = None

    @model_validator(mode="after")
    def _check_inputs(self) -> "ImageGenerateRequest":
        if self.type == "social-media" and self.platform is None:
            raise ValueError("platform is required for social-media images")
        if self.type in ("edit", "remix") and not self.image_base64:
            raise ValueError(f"imageBase64 is required to {self.type} an image")
        return self


class AnalyzeImageRequest(_CamelModel):
    """Request body for ``POST /api/analyze/image``."""

    image_data: str = Field(..., min_length=1)
    prompt: str | None = None
    user_id: str | None = None
