"""Card payloads rendered by the dialogs."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from basicbot.activity import (
    ADAPTIVE_CARD_CONTENT_TYPE,
    Activity,
    AttachmentLayout,
    CardAction,
    CardImage,
    HeroCard,
    PromptOptions,
)
from basicbot.services.base import PRICE_BUCKETS, Product

GREETING_CATEGORIES = ("Clothing", "Shoes", "Accessories")
SHOE_CATEGORIES = ("Sneakers", "Loafers", "Boots")
PRODUCT_ACTIONS = (
    ("Buy this item", "Buy"),
    ("See more like this", "More"),
    ("Ask a question", "Question"),
)


def choice_card(choices: Iterable[str]) -> HeroCard:
    return HeroCard(buttons=[CardAction(title=choice, value=choice) for choice in choices])


def choice_prompt(text: str, choices: Iterable[str]) -> PromptOptions:
    return PromptOptions(prompt=Activity(text=text, attachments=[choice_card(choices).to_attachment()]))


def greeting_categories(name: str | None) -> PromptOptions:
    return choice_prompt(f"Hello {name}, what are you looking for today?", GREETING_CATEGORIES)


def shoe_categories() -> PromptOptions:
    return choice_prompt("Great what Kind of shoes?", SHOE_CATEGORIES)


def price_ranges() -> PromptOptions:
    return choice_prompt("Got it. What price range?", PRICE_BUCKETS)


def product_card(product: Product) -> HeroCard:
    return HeroCard(
        title=product.name,
        subtitle=_format_price(product.price),
        text=product.name,
        images=[CardImage(url=product.image)] if product.image else [],
        buttons=[CardAction(title=title, value=value) for title, value in PRODUCT_ACTIONS],
    )


def product_carousel(products: list[Product]) -> PromptOptions:
    if not products:
        return PromptOptions(prompt=Activity(text="could not find anything"))
    return PromptOptions(
        prompt=Activity(
            text="What do you think of these?",
            attachments=[product_card(product).to_attachment() for product in products],
            attachment_layout=AttachmentLayout.CAROUSEL,
        )
    )


def _format_price(price: float) -> str:
    return f"{price:g}"


@lru_cache(maxsize=4)
def _load_card(path: str) -> dict:
    with Path(path).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def welcome_card(path: Path) -> Activity:
    """Adaptive card greeting members who join the conversation."""

    return Activity(
        attachments=[{"contentType": ADAPTIVE_CARD_CONTENT_TYPE, "content": _load_card(str(path))}],
    )
