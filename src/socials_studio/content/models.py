"""Data models for social-media content."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Platform(str, Enum):
    """Platform a text post is written for."""

    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    TIKTOK = "tiktok"


class ImagePlatform(str, Enum):
    """Placement a social-media image is sized for."""

    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    STORY = "story"


class Tone(str, Enum):
    """Writing tone for generated posts."""

    PROFESSIONAL = "professional"
    CASUAL = "casual"
    FUNNY = "funny"
    INSPIRATIONAL = "inspirational"


class SocialPostParams(BaseModel):
    """Structured parameters for a social-media post prompt."""

    model_config = ConfigDict(frozen=True)

    topic: str
    platform: Platform
    tone: Tone = Tone.PROFESSIONAL
    target_audience: str | None = None
    include_hashtags: bool = True
    include_emojis: bool = True


@dataclass
class SocialPost:
    """Post body and hashtags parsed from a provider response."""

    content: str
    hashtags: list[str] = field(default_factory=list)
