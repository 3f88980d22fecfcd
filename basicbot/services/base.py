"""Collaborator interfaces and the payloads they exchange."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

from basicbot.state.models import ShoppingRecord

# Price range choices offered by the shopping dialog; they are labels, never price bounds.
PRICE_BUCKETS = ("Under $75", "$75 to $250", "Over $250")


class Intent(str, Enum):
    """Intents the recognizer can report."""

    GREETING = "Greeting"
    SHOES = "Shoes"
    CANCEL = "Cancel"
    HELP = "Help"
    NONE = "None"

    @classmethod
    def parse(cls, value: str | None) -> "Intent":
        for intent in cls:
            if value and intent.value.lower() == value.lower():
                return intent
        return cls.NONE


@dataclass(slots=True)
class Answer:
    """Knowledge base answer with its relevance score."""

    text: str
    score: float


@dataclass(slots=True)
class RecognizerResult:
    """Top intent plus entity values in the order the recognizer reported them."""

    top_intent: Intent
    score: float = 0.0
    entities: dict[str, list[str]] = field(default_factory=dict)

    @property
    def has_entities(self) -> bool:
        return any(self.entities.values())


@dataclass(slots=True, frozen=True)
class Product:
    name: str
    price: float
    image: str
    category: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Product":
        def pick(*keys: str) -> Any:
            for key in keys:
                if key in payload:
                    return payload[key]
            return None

        return cls(
            name=str(pick("name", "Name") or ""),
            price=float(pick("price", "Price") or 0.0),
            image=str(pick("image", "Image") or ""),
            category=str(pick("category", "Categorie", "categorie") or ""),
        )


class KnowledgeBase(ABC):
    """Answers FAQ-style questions."""

    name: str

    @abstractmethod
    async def get_answers(self, question: str) -> Sequence[Answer]:
        """Return ranked answers, best first; empty when nothing matches."""


class IntentRecognizer(ABC):
    """Classifies an utterance and extracts entities."""

    name: str

    @abstractmethod
    async def recognize(self, text: str) -> RecognizerResult:
        """Return the recognizer result for a single utterance."""


class ProductCatalog(ABC):
    """Looks up products matching the shopping slots."""

    name: str

    @abstractmethod
    async def find_products(self, record: ShoppingRecord) -> list[Product]:
        """Return products matching the record."""
