"""LUIS v2 intent recognizer client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from basicbot.core.errors import CollaboratorError
from basicbot.services.base import Intent, IntentRecognizer, RecognizerResult


class LuisRecognizer(IntentRecognizer):
    """Resolve intents and entities with a published LUIS application."""

    name = "luis"

    def __init__(
        self,
        endpoint: str,
        app_id: str,
        subscription_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{str(endpoint).rstrip('/')}/luis/v2.0/apps/{app_id}"
        self._subscription_key = subscription_key
        self._timeout = timeout
        self._transport = transport
        self._logger = logging.getLogger("basicbot.services.luis")

    async def recognize(self, text: str) -> RecognizerResult:
        params = {
            "q": text,
            "subscription-key": self._subscription_key,
            "verbose": "true",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._url, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorError(self.name, str(exc)) from exc

        if not isinstance(data, dict):
            raise CollaboratorError(self.name, "expected a JSON object")

        top = data.get("topScoringIntent") or {}
        result = RecognizerResult(
            top_intent=Intent.parse(top.get("intent")),
            score=float(top.get("score") or 0.0),
            entities=_group_entities(data.get("entities") or []),
        )
        self._logger.debug(
            "LUIS intent=%s score=%.2f entities=%s",
            result.top_intent.value,
            result.score,
            sorted(result.entities),
        )
        return result


def _group_entities(entities: list[Any]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for entity in entities:
        if not isinstance(entity, dict) or not entity.get("type"):
            continue
        value = entity.get("entity")
        resolution = entity.get("resolution") or {}
        resolved = resolution.get("values") if isinstance(resolution, dict) else None
        if resolved:
            value = resolved[0]
        if value is None:
            continue
        grouped.setdefault(str(entity["type"]), []).append(str(value))
    return grouped
