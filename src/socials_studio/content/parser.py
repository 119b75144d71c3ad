"""Parse provider responses into structured content.

Parsing is purely textual and never raises: missing markers degrade to
"whole text is the body, no hashtags".
"""

from __future__ import annotations

import re

from .models import SocialPost

# Hashtags: '#' followed by word characters (unicode letters included)
HASHTAG_PATTERN = re.compile(r"#(\w+)")

_HASHTAGS_MARKER = re.compile(r"HASHTAGS:", re.IGNORECASE)
_POST_LABEL = re.compile(r"POST:\s*", re.IGNORECASE)


def extract_hashtags(text: str | None) -> list[str]:
    """Extract hashtags (without '#') in scan order.

    Repeated hashtags are kept; no de-duplication is done.
    """
    if not text:
        return []
    return HASHTAG_PATTERN.findall(text)


def parse_social_post(raw: str | None) -> SocialPost:
    """Split a raw post response into body and hashtags.

    The body is the text after the first ``POST:`` label (or from the start
    without one) up to the ``HASHTAGS:`` marker (or the end). A preamble
    before the label is dropped. Hashtags are scanned from the full raw text.

    Args:
        raw: Provider response text.

    Returns:
        SocialPost with content and hashtags.
    """
    text = raw or ""

    label = _POST_LABEL.search(text)
    start = label.end() if label else 0
    marker = _HASHTAGS_MARKER.search(text, start)
    end = marker.start() if marker else len(text)

    return SocialPost(content=text[start:end].strip(), hashtags=extract_hashtags(text))


def parse_variations(raw: str | None, limit: int | None = None) -> list[str]:
    """Split a variations response into non-empty lines."""
    lines = [line.strip() for line in (raw or "").splitlines()]
    variations = [line for line in lines if line]
    if limit is not None:
        variations = variations[:limit]
    return variations
