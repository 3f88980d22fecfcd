"""QnA Maker knowledge base client."""

from __future__ import annotations

import logging

import httpx

from basicbot.core.errors import CollaboratorError
from basicbot.services.base import Answer, KnowledgeBase

NO_MATCH_ID = -1


class QnAMakerKnowledgeBase(KnowledgeBase):
    """Query a published QnA Maker knowledge base over its runtime endpoint."""

    name = "qnamaker"

    def __init__(
        self,
        host: str,
        kb_id: str,
        endpoint_key: str,
        *,
        top: int = 1,
        score_threshold: float = 0.3,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{str(host).rstrip('/')}/knowledgebases/{kb_id}/generateAnswer"
        self._endpoint_key = endpoint_key
        self._top = top
        # QnA Maker scores range 0-100; the threshold is configured as a fraction.
        self._score_threshold = score_threshold * 100
        self._timeout = timeout
        self._transport = transport
        self._logger = logging.getLogger("basicbot.services.qna")

    async def get_answers(self, question: str) -> list[Answer]:
        headers = {
            "Authorization": f"EndpointKey {self._endpoint_key}",
            "Content-Type": "application/json",
        }
        payload = {"question": question, "top": self._top}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, headers=headers, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorError(self.name, str(exc)) from exc

        if not isinstance(data, dict):
            raise CollaboratorError(self.name, "expected a JSON object")

        answers: list[Answer] = []
        for item in data.get("answers", []) or []:
            if not isinstance(item, dict) or item.get("id") == NO_MATCH_ID:
                continue
            score = float(item.get("score") or 0.0)
            text = str(item.get("answer") or "").strip()
            if not text or score < self._score_threshold:
                continue
            answers.append(Answer(text=text, score=score / 100))

        answers.sort(key=lambda answer: answer.score, reverse=True)
        self._logger.debug("QnA Maker returned %d usable answer(s)", len(answers))
        return answers
