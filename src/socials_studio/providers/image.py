"""Image generation providers.

Supports:
- GPT4Free images API (free, create only, returns a URL)
- REVE image API (paid, create / edit / remix, returns base64)
"""

from __future__ import annotations

from typing import Any

from .base import (
    GenerationKind,
    GenerationRequest,
    ImageOperation,
    ProviderClient,
    ProviderResult,
)
from .config import ImageProviderConfig
from .errors import ProviderError


class G4FImageProvider(ProviderClient):
    """GPT4Free ``/images/generate`` endpoint (Pollinations, Flux, ...)."""

    kind = GenerationKind.IMAGE
    config: ImageProviderConfig

    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        model = self.config.get_model()
        payload: dict[str, Any] = {
            "model": model,
            "prompt": request.prompt,
            "response_format": self.config.response_format,
            **self.config.settings,
        }
        if request.width and request.height:
            payload["size"] = f"{request.width}x{request.height}"

        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        response = await self._post_json(f"{self._base_url()}/images/generate", payload, headers)
        data = self._json_object(response)

        image = data["data"][0]
        if not isinstance(image, dict):
            raise ProviderError(self.name, "malformed response: image entry is not an object")
        image_url = image.get("url")
        image_base64 = image.get("b64_json")
        if not image_url and not image_base64:
            raise ProviderError(self.name, "response contained no image")

        return ProviderResult(
            provider=self.name,
            model=data.get("model") or model,
            image_url=image_url,
            image_base64=image_base64,
        )


def _int_header(value: str | None) -> int:
    """Parse a numeric response header, defaulting to 0."""
    try:
        return int(value or 0)
    except ValueError:
        return 0


class ReveImageProvider(ProviderClient):
    """REVE image API.

    Credits and content-violation details arrive as ``X-Reve-*`` response
    headers; the image itself is base64 in the JSON body.
    """

    kind = GenerationKind.IMAGE
    operations = frozenset({ImageOperation.CREATE, ImageOperation.EDIT, ImageOperation.REMIX})
    config: ImageProviderConfig

    def _build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        operation = request.operation

        if operation == ImageOperation.CREATE:
            payload: dict[str, Any] = {"prompt": request.prompt, **self.config.settings}
            if request.width:
                payload["width"] = request.width
            if request.height:
                payload["height"] = request.height
            if request.quality:
                payload["quality"] = request.quality
            return payload

        if not request.image_base64:
            raise ProviderError(self.name, f"image_base64 is required for {operation.value}")

        payload = {"image": request.image_base64, "prompt": request.prompt}
        if operation == ImageOperation.EDIT and request.mask_base64:
            payload["mask"] = request.mask_base64
        if operation == ImageOperation.REMIX and request.strength:
            payload["strength"] = request.strength
        return payload

    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        operation = request.operation.value
        url = f"{self._base_url()}/image/{operation}"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        client = await self._get_http_client()
        response = await client.post(url, json=self._build_payload(request), headers=headers)

        if response.is_error:
            error_code = response.headers.get("X-Reve-Error-Code")
            raise ProviderError(
                self.name,
                f"[{error_code}] HTTP {response.status_code} - {response.text[:500]}",
            )

        data = self._json_object(response)
        if not isinstance(data.get("image"), str):
            raise ProviderError(self.name, "malformed response: no base64 image in body")
        return ProviderResult(
            provider=self.name,
            model=response.headers.get("X-Reve-Version") or f"reve-{operation}",
            image_base64=data["image"],
            credits_used=_int_header(response.headers.get("X-Reve-Credits-Used")),
            credits_remaining=_int_header(response.headers.get("X-Reve-Credits-Remaining")),
            content_violation=response.headers.get("X-Reve-Content-Violation") == "true",
        )
