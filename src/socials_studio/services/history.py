"""Generation history persistence (Supabase / PostgREST).

Writes one ``generation_history`` row per successful generation and keeps a
per-user daily aggregate in ``usage_statistics``. Persistence is best-effort:
``record_safely`` never lets a failure reach the caller.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Literal

import httpx

from ..providers.config import HistoryConfig

_logger = logging.getLogger("history")


class PersistenceError(Exception):
    """Writing generation history failed."""


@dataclass
class UsageRecord:
    """One generation event to persist."""

    user_id: str
    generation_type: Literal["text", "image"]
    prompt: str
    result: str
    model_used: str
    tokens_used: int | None = None
    generation_time_ms: int | None = None
    cost: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_history_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "generation_type": self.generation_type,
            "prompt": self.prompt,
            "result": self.result,
            "model_used": self.model_used,
            "tokens_used": self.tokens_used,
            "generation_time_ms": self.generation_time_ms,
            "cost": self.cost,
            "metadata": self.metadata,
        }


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


class HistoryRecorder:
    """Persists generation events to a PostgREST backend.

    Usage:
        recorder = HistoryRecorder(config.history)
        await recorder.record_safely(UsageRecord(...))
    """

    def __init__(
        self,
        config: HistoryConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or HistoryConfig()
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def is_configured(self) -> bool:
        """Whether history is enabled and the backend credentials exist."""
        return (
            self.config.enabled
            and bool(self.config.get_url())
            and bool(self.config.get_service_key())
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client if this recorder created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _headers(self, key: str) -> dict[str, str]:
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    async def record(self, record: UsageRecord, today: date | None = None) -> None:
        """Insert the history row and bump the daily usage counters.

        Args:
            record: Generation event.
            today: Aggregation day, defaults to the current UTC date.

        Raises:
            PersistenceError: Backend not configured or any write failed.
        """
        base_url = self.config.get_url()
        key = self.config.get_service_key()
        if not base_url or not key:
            raise PersistenceError("history backend not configured")

        client = await self._get_http_client()
        headers = self._headers(key)

        try:
            response = await client.post(
                f"{base_url}/rest/v1/{self.config.history_table}",
                json=record.to_history_row(),
                headers={**headers, "Prefer": "return=minimal"},
                timeout=self.config.timeout,
            )
            response.raise_for_status()

            await self._increment_usage(client, base_url, headers, record, today or _today_utc())
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"HTTP {e.response.status_code} from {e.request.url.path}: {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"{type(e).__name__}: {e}") from e

        _logger.info(
            f"HISTORY_SAVED | user:{record.user_id} | type:{record.generation_type} | "
            f"model:{record.model_used}"
        )

    async def _increment_usage(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        headers: dict[str, str],
        record: UsageRecord,
        day: date,
    ) -> None:
        url = f"{base_url}/rest/v1/{self.config.usage_table}"

        response = await client.get(
            url,
            params={
                "select": "text_generations_count,image_generations_count,"
                          "total_tokens_used,total_cost",
                "user_id": f"eq.{record.user_id}",
                "date": f"eq.{day.isoformat()}",
            },
            headers=headers,
            timeout=self.config.timeout,
        )
        response.raise_for_status()
        rows = response.json()
        current = rows[0] if rows else {}

        is_text = record.generation_type == "text"
        row = {
            "user_id": record.user_id,
            "date": day.isoformat(),
            "text_generations_count": (current.get("text_generations_count") or 0) + int(is_text),
            "image_generations_count": (
                (current.get("image_generations_count") or 0) + int(not is_text)
            ),
            "total_tokens_used": (current.get("total_tokens_used") or 0) + (record.tokens_used or 0),
            "total_cost": (current.get("total_cost") or 0) + (record.cost or 0),
        }

        response = await client.post(
            url,
            params={"on_conflict": "user_id,date"},
            json=row,
            headers={**headers, "Prefer": "resolution=merge-duplicates,return=minimal"},
            timeout=self.config.timeout,
        )
        response.raise_for_status()

    async def record_safely(self, record: UsageRecord) -> bool:
        """Record without ever raising.

        Skips silently when there is no user id or no backend.

        Returns:
            True if the record was written.
        """
        if not record.user_id:
            return False
        if not self.is_configured:
            _logger.debug("History backend not configured, skipping record")
            return False

        try:
            await self.record(record)
        except PersistenceError as e:
            _logger.error(f"Error saving generation history: {e}")
            return False
        return True


def serialize_result(payload: dict[str, Any]) -> str:
    """JSON-encode a result payload for the ``result`` column."""
    return json.dumps(payload, ensure_ascii=False, default=str)
