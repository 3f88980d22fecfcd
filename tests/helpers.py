"""Stub collaborators and a bot harness shared by the test suite."""

from __future__ import annotations

import asyncio

from basicbot.activity import ActivityType, InboundActivity
from basicbot.bot import BasicBot
from basicbot.core.config import RESOURCES_DIR
from basicbot.dialogs import build_dialog_set
from basicbot.services.base import (
    Answer,
    Intent,
    IntentRecognizer,
    KnowledgeBase,
    Product,
    ProductCatalog,
    RecognizerResult,
)
from basicbot.state.models import RECORD_TYPES, RecordKind, ShoppingRecord
from basicbot.state.store import MemoryStateStorage, StateStore


class StubKnowledgeBase(KnowledgeBase):
    name = "stub-kb"

    def __init__(self, answers: dict[str, list[Answer]] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[str] = []

    async def get_answers(self, question: str) -> list[Answer]:
        self.calls.append(question)
        return list(self.answers.get(question, []))


class ScriptedRecognizer(IntentRecognizer):
    """Returns canned results per utterance; anything else is ``None`` with no entities."""

    name = "scripted"

    def __init__(self, results: dict[str, RecognizerResult] | None = None) -> None:
        self.results = results or {}
        self.calls: list[str] = []

    async def recognize(self, text: str) -> RecognizerResult:
        self.calls.append(text)
        return self.results.get(text, RecognizerResult(top_intent=Intent.NONE))


class StubCatalog(ProductCatalog):
    name = "stub-catalog"

    def __init__(self, products: list[Product] | None = None) -> None:
        self.products = products or []
        self.queries: list[dict] = []

    async def find_products(self, record: ShoppingRecord) -> list[Product]:
        self.queries.append(record.to_dict())
        return list(self.products)


class BotHarness:
    """Bot wired to in-memory state and stub collaborators."""

    def __init__(self, knowledge_base=None, recognizer=None, catalog=None) -> None:
        self.storage = MemoryStateStorage()
        self.knowledge_base = knowledge_base or StubKnowledgeBase()
        self.recognizer = recognizer or ScriptedRecognizer()
        self.catalog = catalog or StubCatalog()
        self.bot = BasicBot(
            knowledge_base=self.knowledge_base,
            recognizer=self.recognizer,
            dialogs=build_dialog_set(self.catalog),
            user_state=StateStore("user", self.storage),
            conversation_state=StateStore("conversation", self.storage),
            welcome_card_path=RESOURCES_DIR / "welcome_card.json",
            catalog=self.catalog,
        )

    def say(self, text: str, *, user_id: str = "user-1", conversation_id: str = "conv-1"):
        activity = InboundActivity(
            type=ActivityType.MESSAGE,
            conversation_id=conversation_id,
            user_id=user_id,
            text=text,
        )
        return asyncio.run(self.bot.handle_turn(activity))

    def texts(self, text: str, **kwargs) -> list[str | None]:
        return [reply.text for reply in self.say(text, **kwargs).outbox]

    def record(self, scope: str, key: str, kind: RecordKind):
        payload = self.storage.read(scope, key).get(kind.value)
        return RECORD_TYPES[kind].from_dict(payload) if payload is not None else None

    def stack(self, conversation_id: str = "conv-1"):
        return self.record("conversation", conversation_id, RecordKind.DIALOG_STACK)


def intent(name: Intent, **entities: list[str]) -> RecognizerResult:
    return RecognizerResult(top_intent=name, score=0.9, entities=dict(entities))
