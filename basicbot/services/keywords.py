"""Deterministic keyword recognizer used when no LUIS application is configured."""

from __future__ import annotations

import re

from basicbot.services.base import PRICE_BUCKETS, Intent, IntentRecognizer, RecognizerResult

CANCEL_KEYWORDS = {"cancel", "stop", "quit", "abort", "nevermind"}
CANCEL_PHRASES = ["never mind", "forget it"]
HELP_KEYWORDS = {"help", "confused"}
HELP_PHRASES = ["what can you do", "how does this work"]
GREETING_KEYWORDS = {"hello", "hi", "hey", "hiya", "greetings", "howdy"}
GREETING_PHRASES = ["good morning", "good afternoon", "good evening", "my name is"]
SHOES_KEYWORDS = {"shoe", "shoes", "shop", "shopping", "footwear"}

CATEGORY_ALIASES = {
    "sneaker": "sneakers",
    "sneakers": "sneakers",
    "trainers": "sneakers",
    "loafer": "loafers",
    "loafers": "loafers",
    "boot": "boots",
    "boots": "boots",
}

NAME_PATTERN = re.compile(r"\b(?:my name is|call me)\s+([a-z][a-z'\-]+)", re.IGNORECASE)
CITY_PATTERN = re.compile(r"\b(?:live in|from)\s+([a-z][a-z'\-]+)", re.IGNORECASE)
PRICE = r"\$?\s*(\d+(?:[.,]\d+)?)"
BETWEEN_PATTERN = re.compile(rf"\bbetween\s+{PRICE}\s+(?:and|to)\s+{PRICE}", re.IGNORECASE)
PRICE_MIN_PATTERN = re.compile(rf"\b(?:over|above|more than|at least|from)\s+{PRICE}", re.IGNORECASE)
PRICE_MAX_PATTERN = re.compile(rf"\b(?:under|below|less than|at most|up to)\s+{PRICE}", re.IGNORECASE)
BUCKET_LABELS = {bucket.lower() for bucket in PRICE_BUCKETS}


class KeywordRecognizer(IntentRecognizer):
    """Keyword intent classifier with regex entity extraction."""

    name = "keyword"

    async def recognize(self, text: str) -> RecognizerResult:
        message = text.lower()
        tokens = [token.strip(" ,.!?;:\"'()") for token in message.split()]
        entities = self._extract_entities(text, message, tokens)
        intent = self._classify_intent(message, tokens)
        score = 0.5 if intent is Intent.NONE else 0.9
        return RecognizerResult(top_intent=intent, score=score, entities=entities)

    def _classify_intent(self, message: str, tokens: list[str]) -> Intent:
        words = set(tokens)
        if words & CANCEL_KEYWORDS or any(phrase in message for phrase in CANCEL_PHRASES):
            return Intent.CANCEL
        if words & HELP_KEYWORDS or any(phrase in message for phrase in HELP_PHRASES):
            return Intent.HELP
        if words & SHOES_KEYWORDS or any(token in CATEGORY_ALIASES for token in tokens):
            return Intent.SHOES
        if words & GREETING_KEYWORDS or any(phrase in message for phrase in GREETING_PHRASES):
            return Intent.GREETING
        return Intent.NONE

    def _extract_entities(self, text: str, message: str, tokens: list[str]) -> dict[str, list[str]]:
        entities: dict[str, list[str]] = {}

        name = NAME_PATTERN.search(text)
        if name:
            entities["userName"] = [name.group(1).lower()]

        city = CITY_PATTERN.search(text)
        if city:
            entities["userLocation"] = [city.group(1).strip().lower()]

        categories = [CATEGORY_ALIASES[token] for token in tokens if token in CATEGORY_ALIASES]
        if categories:
            entities["productCategorie"] = categories

        if message.strip(" .!") in BUCKET_LABELS:
            return entities

        between = BETWEEN_PATTERN.search(text)
        if between:
            entities["priceMin"] = [between.group(1)]
            entities["priceMax"] = [between.group(2)]
        else:
            minimum = PRICE_MIN_PATTERN.search(text)
            if minimum:
                entities["priceMin"] = [minimum.group(1)]
            maximum = PRICE_MAX_PATTERN.search(text)
            if maximum:
                entities["priceMax"] = [maximum.group(1)]

        return entities
