"""Tests for prompt building."""

import pytest

from socials_studio.content.models import ImagePlatform, Platform, SocialPostParams, Tone
from socials_studio.content.prompts import (
    PLATFORM_CHARACTER_LIMITS,
    SOCIAL_IMAGE_DIMENSIONS,
    build_improve_prompt,
    build_social_post_prompt,
    build_variations_prompt,
    clamp_variations_count,
)


def params(**overrides):
    values = dict(topic="cold brew launch", platform=Platform.INSTAGRAM)
    values.update(overrides)
    return SocialPostParams(**values)


class TestSocialPostPrompt:
    """Rendering of the social-post instruction."""

    def test_same_params_render_identical_prompts(self):
        first = build_social_post_prompt(params(tone=Tone.FUNNY, target_audience="students"))
        second = build_social_post_prompt(params(tone=Tone.FUNNY, target_audience="students"))
        assert first == second

    @pytest.mark.parametrize("platform", list(Platform))
    def test_platform_changes_only_the_stated_limit(self, platform):
        prompt = build_social_post_prompt(params(platform=platform))

        assert f"Create an engaging {platform.value} post about: cold brew launch" in prompt
        assert f"- Character limit: {PLATFORM_CHARACTER_LIMITS[platform]}" in prompt

    def test_twitter_limit(self):
        assert "- Character limit: 280" in build_social_post_prompt(params(platform=Platform.TWITTER))

    def test_defaults(self):
        prompt = build_social_post_prompt(params())

        assert "- Tone: professional" in prompt
        assert "- Target audience: general audience" in prompt
        assert "- Include relevant emojis" in prompt
        assert "- Include strategic hashtags" in prompt
        assert "POST:" in prompt
        assert "HASHTAGS:" in prompt

    def test_flags_off(self):
        prompt = build_social_post_prompt(params(include_hashtags=False, include_emojis=False))

        assert "- Do not include relevant emojis" in prompt
        assert "- Do not include strategic hashtags" in prompt
        assert "HASHTAGS:" not in prompt


class TestOtherPrompts:
    """Variations, improvement and constants."""

    def test_variations_prompt_states_count(self):
        prompt = build_variations_prompt("Great coffee", 4)
        assert "Create 4 different variations" in prompt
        assert "Great coffee" in prompt

    def test_improve_prompt_uses_default_instructions(self):
        prompt = build_improve_prompt("rough draft")
        assert prompt.startswith("Improve the following text")
        assert '"""\nrough draft\n"""' in prompt

    @pytest.mark.parametrize("requested, expected", [
        (None, 3), (0, 3), (1, 1), (3, 3), (5, 5), (12, 5), (-2, 1),
    ])
    def test_clamp_variations_count(self, requested, expected):
        assert clamp_variations_count(requested) == expected

    def test_story_is_vertical(self):
        assert SOCIAL_IMAGE_DIMENSIONS[ImagePlatform.STORY] == (1080, 1920)
        assert SOCIAL_IMAGE_DIMENSIONS[ImagePlatform.INSTAGRAM] == (1080, 1080)
