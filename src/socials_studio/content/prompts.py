"""Prompt building for social-media content.

Every builder is a pure function: the same parameters always render the same
prompt string. Platform choice only changes the wording (character limit),
never the control flow.
"""

from __future__ import annotations

from .models import ImagePlatform, Platform, SocialPostParams

# Maximum post length per platform, stated to the model as guidance
PLATFORM_CHARACTER_LIMITS: dict[Platform, int] = {
    Platform.INSTAGRAM: 2200,
    Platform.FACEBOOK: 63206,
    Platform.TWITTER: 280,
    Platform.LINKEDIN: 3000,
    Platform.TIKTOK: 150,
}

# Image dimensions (width, height) per placement
SOCIAL_IMAGE_DIMENSIONS: dict[ImagePlatform, tuple[int, int]] = {
    ImagePlatform.INSTAGRAM: (1080, 1080),  # square post
    ImagePlatform.FACEBOOK: (1200, 630),  # shared post
    ImagePlatform.TWITTER: (1200, 675),  # card
    ImagePlatform.LINKEDIN: (1200, 627),  # post
    ImagePlatform.STORY: (1080, 1920),  # 9:16
}

DEFAULT_TARGET_AUDIENCE = "general audience"

DEFAULT_ANALYSIS_PROMPT = "Describe this image in detail for use on social media."

DEFAULT_IMPROVE_INSTRUCTIONS = (
    "Improve the following text, making it clearer, more engaging and more "
    "professional while keeping its original meaning."
)

MAX_VARIATIONS = 5


def build_social_post_prompt(params: SocialPostParams) -> str:
    """Render the instruction for a social-media post.

    The response format asks for ``POST:`` and ``HASHTAGS:`` sections, which
    ``parse_social_post`` understands.

    Args:
        params: Topic, platform, tone, audience and inclusion flags.

    Returns:
        Prompt string.
    """
    platform = params.platform.value
    max_chars = PLATFORM_CHARACTER_LIMITS[params.platform]
    audience = params.target_audience or DEFAULT_TARGET_AUDIENCE
    emojis = "Include" if params.include_emojis else "Do not include"
    hashtags = "Include" if params.include_hashtags else "Do not include"

    lines = [
        f"Create an engaging {platform} post about: {params.topic}",
        "",
        "Specifications:",
        f"- Tone: {params.tone.value}",
        f"- Target audience: {audience}",
        f"- Character limit: {max_chars}",
        f"- {emojis} relevant emojis",
        f"- {hashtags} strategic hashtags",
        "",
        "Response format:",
        "POST:",
        "[post content here]",
    ]
    if params.include_hashtags:
        lines += ["", "HASHTAGS:", "#hashtag1 #hashtag2 #hashtag3"]
    lines += ["", "Create authentic, relevant content optimized for engagement."]

    return "\n".join(lines)


def build_variations_prompt(text: str, count: int) -> str:
    """Ask for ``count`` rewordings of ``text``, one per line."""
    return (
        f"Create {count} different variations of the following text, keeping the "
        f"same idea but using different words:\n\n{text}\n\n"
        f"Return only the {count} variations, one per line."
    )


def build_improve_prompt(text: str, instructions: str | None = None) -> str:
    """Ask for an improved version of ``text``."""
    return (
        f"{instructions or DEFAULT_IMPROVE_INSTRUCTIONS}\n\n"
        f'Original text:\n"""\n{text}\n"""\n\n'
        f"Improved text:"
    )


def clamp_variations_count(count: int | None) -> int:
    """Keep the requested variation count within 1..MAX_VARIATIONS."""
    if not count:
        return 3
    return max(1, min(count, MAX_VARIATIONS))
