"""Fallback Orchestrator - tries providers in order until one succeeds.

Providers are attempted strictly one after another, in the order the caller
supplies. Each provider gets exactly one attempt per call. Cheap or free
providers go first in the chain so paid ones only run when needed.

Usage:
    orchestrator = FallbackOrchestrator()
    outcome = await orchestrator.resolve(request, [g4f, perplexity, gemini])
    print(outcome.provider, outcome.result.text)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from ..providers.base import GenerationRequest, ProviderClient, ProviderResult
from ..providers.errors import ConfigurationError, ProviderError

_logger = logging.getLogger("llm_fallback")

# Type for progress event callback
FallbackEventCallback = Callable[[dict[str, Any]], Awaitable[None]] | None


@dataclass
class ProviderAttempt:
    """Record of a single provider attempt."""

    provider: str
    success: bool
    error: str | None = None
    error_type: str | None = None
    duration_ms: int = 0

    @property
    def skipped(self) -> bool:
        """True when the provider was not configured and made no call."""
        return self.error_type == ConfigurationError.__name__

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "error": self.error,
            "errorType": self.error_type,
        }


@dataclass
class GenerationOutcome:
    """Successful result of a fallback resolution."""

    result: ProviderResult
    provider: str
    attempts: list[ProviderAttempt] = field(default_factory=list)

    @property
    def model(self) -> str:
        return self.result.model

    @property
    def failures(self) -> list[ProviderAttempt]:
        """Attempts that failed before the successful one."""
        return [attempt for attempt in self.attempts if not attempt.success]


class AllProvidersExhausted(Exception):
    """Every provider in the chain failed or was unavailable.

    Attributes:
        attempts: One failed attempt per provider, in chain order.
    """

    def __init__(self, attempts: list[ProviderAttempt]):
        self.attempts = attempts
        if attempts:
            trail = "; ".join(f"{a.provider}: {a.error}" for a in attempts)
            message = f"All providers exhausted ({len(attempts)} tried) - {trail}"
        else:
            message = "No providers available"
        super().__init__(message)

    @property
    def providers(self) -> list[str]:
        return [attempt.provider for attempt in self.attempts]


class FallbackOrchestrator:
    """Resolves a request against an ordered chain of providers.

    Features:
    - First configured, first successful: returns on the first success
    - Unconfigured providers cede to the next one like failing ones
    - Ordered exhaustion trail for diagnostics
    - Usage statistics
    """

    def __init__(self, event_callback: FallbackEventCallback = None):
        """Initialize the orchestrator.

        Args:
            event_callback: Optional async callback for progress events.
        """
        self._event_callback = event_callback
        self._stats: dict[str, Any] = {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "provider_usage": {},
        }

    async def _emit_event(self, event: dict[str, Any]) -> None:
        """Emit a progress event if callback is set."""
        if self._event_callback:
            await self._event_callback(event)

    async def resolve(
        self,
        request: GenerationRequest,
        providers: Sequence[ProviderClient],
    ) -> GenerationOutcome:
        """Try each provider in order and return the first success.

        Args:
            request: The generation request.
            providers: Provider clients in priority order.

        Returns:
            GenerationOutcome tagged with the provider that satisfied it.

        Raises:
            AllProvidersExhausted: Every provider failed or was unconfigured.
        """
        self._stats["total_calls"] += 1
        attempts: list[ProviderAttempt] = []

        for provider in providers:
            await self._emit_event({
                "type": "attempt",
                "kind": request.kind.value,
                "provider": provider.name,
                "failed_providers": [a.provider for a in attempts],
            })

            start_time = time.time()
            try:
                result = await provider.attempt(request)
            except ProviderError as e:
                duration_ms = int((time.time() - start_time) * 1000)
                attempts.append(ProviderAttempt(
                    provider=provider.name,
                    success=False,
                    error=e.reason,
                    error_type=type(e).__name__,
                    duration_ms=duration_ms,
                ))
                if isinstance(e, ConfigurationError):
                    _logger.info(f"{provider.name} skipped: {e.reason}")
                else:
                    _logger.warning(f"{provider.name} failed: {e.reason}")
                await self._emit_event({
                    "type": "failure",
                    "kind": request.kind.value,
                    "provider": provider.name,
                    "error": e.reason[:100],
                    "failed_providers": [a.provider for a in attempts],
                })
                continue

            attempts.append(ProviderAttempt(
                provider=provider.name,
                success=True,
                duration_ms=result.duration_ms,
            ))
            self._stats["successful_calls"] += 1
            self._stats["provider_usage"][provider.name] = \
                self._stats["provider_usage"].get(provider.name, 0) + 1

            _logger.info(
                f"{provider.name} succeeded in {result.duration_ms}ms "
                f"(model: {result.model}, after {len(attempts) - 1} failures)"
            )
            await self._emit_event({
                "type": "success",
                "kind": request.kind.value,
                "provider": provider.name,
                "model": result.model,
                "duration_ms": result.duration_ms,
                "failed_providers": [a.provider for a in attempts if not a.success],
            })
            return GenerationOutcome(result=result, provider=provider.name, attempts=attempts)

        # All providers exhausted
        self._stats["failed_calls"] += 1
        _logger.error(
            f"All providers exhausted for {request.kind.value} "
            f"after {len(attempts)} attempts"
        )
        await self._emit_event({
            "type": "exhausted",
            "kind": request.kind.value,
            "failed_providers": [a.provider for a in attempts],
        })
        raise AllProvidersExhausted(attempts)

    def get_stats(self) -> dict[str, Any]:
        """Get usage statistics."""
        stats = self._stats.copy()
        stats["provider_usage"] = dict(self._stats["provider_usage"])
        return stats

    def reset_stats(self) -> None:
        """Reset usage statistics."""
        self._stats = {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "provider_usage": {},
        }
