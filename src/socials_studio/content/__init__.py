"""Content Shaper - prompt building and response parsing."""

from .models import ImagePlatform, Platform, SocialPost, SocialPostParams, Tone
from .parser import extract_hashtags, parse_social_post, parse_variations
from .prompts import (
    DEFAULT_ANALYSIS_PROMPT,
    PLATFORM_CHARACTER_LIMITS,
    SOCIAL_IMAGE_DIMENSIONS,
    build_improve_prompt,
    build_social_post_prompt,
    build_variations_prompt,
    clamp_variations_count,
)

__all__ = [
    "ImagePlatform",
    "Platform",
    "SocialPost",
    "SocialPostParams",
    "Tone",
    "extract_hashtags",
    "parse_social_post",
    "parse_variations",
    "DEFAULT_ANALYSIS_PROMPT",
    "PLATFORM_CHARACTER_LIMITS",
    "SOCIAL_IMAGE_DIMENSIONS",
    "build_improve_prompt",
    "build_social_post_prompt",
    "build_variations_prompt",
    "clamp_variations_count",
]
