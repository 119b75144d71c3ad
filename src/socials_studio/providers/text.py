"""Text generation providers.

Two wire formats cover every text vendor:

- OpenAI-style ``/chat/completions`` (GPT4Free, Perplexity, REVE chat)
- Google Gemini ``generateContent``
"""

from __future__ import annotations

from typing import Any

from .base import GenerationKind, GenerationRequest, ProviderClient, ProviderResult
from .config import TextProviderConfig
from .errors import ProviderError


def _extract_chat_text(data: dict[str, Any]) -> Any:
    """Pull the completion text out of a chat-completions style envelope.

    Some OpenAI-compatible vendors answer with a bare ``content`` or
    ``text`` field instead of ``choices``. The value is returned as found;
    callers check it is a string.
    """
    choices = data.get("choices") or []
    if choices:
        choice = choices[0]
        if not isinstance(choice, dict):
            return choice
        message = choice.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if content is None:
            content = choice.get("text")
        return content
    return data.get("content") or data.get("text")


def parse_gemini_response(
    provider: str,
    data: dict[str, Any],
    model: str,
) -> ProviderResult:
    """Map a Gemini ``generateContent`` response to a ProviderResult.

    Args:
        provider: Provider name for error reporting.
        data: Decoded JSON response.
        model: Model requested, used when the response omits ``modelVersion``.

    Returns:
        ProviderResult with text and token usage.

    Raises:
        ProviderError: No candidate or no text in the response.
    """
    candidates = data.get("candidates") or []
    if not candidates:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        raise ProviderError(provider, f"no candidates returned (block reason: {block_reason})")

    candidate = candidates[0]
    parts = (candidate.get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts)
    if not text:
        raise ProviderError(
            provider, f"empty response (finish reason: {candidate.get('finishReason')})"
        )

    usage = data.get("usageMetadata") or {}
    return ProviderResult(
        provider=provider,
        model=data.get("modelVersion") or model,
        text=text,
        tokens_used=usage.get("totalTokenCount"),
        content_violation=candidate.get("finishReason") == "SAFETY",
    )


class ChatCompletionsProvider(ProviderClient):
    """OpenAI-compatible chat completions endpoint.

    Usage:
        provider = ChatCompletionsProvider("perplexity", config)
        result = await provider.attempt(request)
    """

    kind = GenerationKind.TEXT
    config: TextProviderConfig

    def _endpoint(self) -> str:
        base_url = self._base_url()
        if base_url.endswith("/chat/completions"):
            return base_url
        return f"{base_url}/chat/completions"

    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        model = self.config.get_model()
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": request.system or self.settings.system_prompt},
                {"role": "user", "content": request.prompt},
            ],
            "temperature": (
                request.temperature if request.temperature is not None else self.config.temperature
            ),
            "max_tokens": request.max_tokens or self.config.max_tokens,
        }

        response = await self._post_json(self._endpoint(), payload, headers)
        data = self._json_object(response)

        text = _extract_chat_text(data)
        if text is not None and not isinstance(text, str):
            raise ProviderError(
                self.name, f"malformed response: completion is {type(text).__name__}, not text"
            )
        if not text:
            raise ProviderError(self.name, "empty completion in response")

        usage = data.get("usage") or {}
        return ProviderResult(
            provider=self.name,
            model=data.get("model") or model,
            text=text,
            tokens_used=usage.get("total_tokens"),
        )


class GeminiTextProvider(ProviderClient):
    """Google Gemini text generation via the REST ``generateContent`` API."""

    kind = GenerationKind.TEXT
    config: TextProviderConfig

    async def _send(self, request: GenerationRequest, api_key: str | None) -> ProviderResult:
        model = self.config.get_model()
        url = f"{self._base_url()}/models/{model}:generateContent"

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "systemInstruction": {
                "parts": [{"text": request.system or self.settings.system_prompt}]
            },
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
