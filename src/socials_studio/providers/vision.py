"""Image analysis (vision) providers."""

from __future__ import annotations

import base64
import binascii
import re
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from .base import GenerationKind, GenerationRequest, ProviderClient, ProviderResult
from .config import VisionProviderConfig
from .errors import ProviderError
from .text import parse_gemini_response

_DATA_URL_PATTERN = re.compile(r"^data:(image/[\w.+-]+);base64,", re.IGNORECASE)

DEFAULT_MIME_TYPE = "image/jpeg"


def split_image_data(image_data: str) -> tuple[str, str]:
    """Split a base64 image or data URL into (mime_type, base64_payload).

    The MIME type comes from the data URL when present, otherwise it is
    sniffed from the decoded bytes, otherwise ``image/jpeg`` is assumed.

    Args:
        image_data: Raw base64 string or ``data:image/...;base64,`` URL.

    Returns:
        Tuple of (mime_type, base64 payload without prefix).
    """
    match = _DATA_URL_PATTERN.match(image_data)
    if match:
        return match.group(1).lower(), image_data[match.end():]
    return sniff_mime_type(image_data), image_data


def sniff_mime_type(payload: str) -> str:
    """Detect the MIME type of a base64 encoded image with Pillow."""
    try:
        raw = base64.b64decode(payload, validate=False)
        with Image.open(BytesIO(raw)) as img:
            mime = Image.MIME.get(img.format or "")
    except (binascii.Error, UnidentifiedImageError, OSError, ValueError):
        return DEFAULT_MIME_TYPE
    return mime or DEFAULT_MIME_TYPE


class GeminiVisionProvider(ProviderClient):
    """Gemini multimodal ``generateContent`` with an inline image part."""

    kind = GenerationKind.VISION
    config: VisionProviderConfig

    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        if not request.image_data:
            raise ProviderError(self.name, "no image data in request")

        model = self.config.get_model()
        mime_type, payload_b64 = split_image_data(request.image_data)
        url = f"{self._base_url()}/models/{model}:generateContent"

        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": request.prompt},
                        {"inline_data": {"mime_type": mime_type, "data": payload_b64}},
                    ],
                }
            ],
            "generationConfig": {
                "temperature": (
                    request.temperature
                    if request.temperature is not None
                    else self.config.temperature
                ),
                "maxOutputTokens": request.max_tokens or self.config.max_tokens,
            },
        }

        response = await self._post_json(url, payload, {"x-goog-api-key": api_key or ""})
        return parse_gemini_response(self.name, self._json_object(response), model)
