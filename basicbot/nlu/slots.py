"""Map recognizer entities onto greeting and shopping slots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from basicbot.state.models import GreetingRecord, ShoppingRecord

logger = logging.getLogger("basicbot.slots")

# Exact entity first, pattern.any fallback second.
NAME_ENTITIES = ("userName", "userName_patternAny")
CITY_ENTITIES = ("userLocation", "userLocation_patternAny")
CATEGORY_ENTITIES = ("productCategorie", "productCategorie_patternAny")
PRICE_MIN_ENTITIES = ("priceMin", "priceMin_patternAny")
PRICE_MAX_ENTITIES = ("priceMax", "priceMax_patternAny")

Entities = Mapping[str, Sequence[str]]


@dataclass(slots=True)
class GreetingSlots:
    name: str | None = None
    city: str | None = None


@dataclass(slots=True)
class ShoppingSlots:
    """Category is optional; prices are always present because extraction replaces them."""

    category: str | None = None
    price_min: float = 0.0
    price_max: float = 0.0


def capitalize_first(value: str) -> str:
    """Upper-case the first character only; ``"mcDonald"`` stays ``"McDonald"``."""

    return value[:1].upper() + value[1:]


def first_value(entities: Entities, aliases: Sequence[str]) -> str | None:
    for alias in aliases:
        for value in entities.get(alias) or ():
            if value is None:
                continue
            text = str(value).strip()
            if text:
                return text
    return None


def parse_price(value: str) -> float:
    return float(value.strip().lstrip("$").replace(",", ""))


def extract_greeting_slots(entities: Entities) -> GreetingSlots:
    name = first_value(entities, NAME_ENTITIES)
    city = first_value(entities, CITY_ENTITIES)
    return GreetingSlots(
        name=capitalize_first(name) if name else None,
        city=capitalize_first(city) if city else None,
    )


def extract_shopping_slots(entities: Entities) -> ShoppingSlots:
    category = first_value(entities, CATEGORY_ENTITIES)
    slots = ShoppingSlots(category=capitalize_first(category) if category else None)

    for field_name, aliases in (("price_min", PRICE_MIN_ENTITIES), ("price_max", PRICE_MAX_ENTITIES)):
        raw = first_value(entities, aliases)
        if raw is None:
            continue
        try:
            setattr(slots, field_name, parse_price(raw))
        except ValueError:
            logger.warning("Ignoring unparseable %s value %r", field_name, raw)

    return slots


def has_entities(entities: Entities) -> bool:
    return any(values for values in entities.values())


def apply_greeting_slots(record: GreetingRecord, entities: Entities) -> bool:
    """Merge extracted greeting slots into ``record``; returns whether extraction ran."""

    if not has_entities(entities):
        return False

    slots = extract_greeting_slots(entities)
    if slots.name:
        record.name = slots.name
    if slots.city:
        record.city = slots.city
    logger.debug("Greeting slots after extraction: name=%s city=%s", record.name, record.city)
    return True


def apply_shopping_slots(record: ShoppingRecord, entities: Entities) -> bool:
    """Merge extracted shopping slots into ``record``; prices are always replaced."""

    if not has_entities(entities):
        return False

    slots = extract_shopping_slots(entities)
    if slots.category:
        record.category = slots.category
    record.price_min = slots.price_min
    record.price_max = slots.price_max
    logger.debug(
        "Shopping slots after extraction: category=%s price_min=%s price_max=%s",
        record.category,
        record.price_min,
        record.price_max,
    )
    return True
