"""Shoe shopping flow: category, price range, product carousel, goodbye."""

from __future__ import annotations

import logging

from basicbot.dialogs import cards
from basicbot.dialogs.engine import Dialog, Prompt, StepContext, StepResult
from basicbot.nlu.slots import capitalize_first
from basicbot.services.base import ProductCatalog
from basicbot.state.models import RecordKind, ShoppingRecord

SHOPPING_DIALOG = "shopping"
CATEGORY_PROMPT = "shopping.category"
PRICE_PROMPT = "shopping.price"
PRODUCTS_PROMPT = "shopping.products"

logger = logging.getLogger("basicbot.dialogs")


def _typed_category(text: str) -> str | None:
    return text if text in cards.SHOE_CATEGORIES else None


async def initialize_state(step: StepContext) -> StepResult:
    context = step.context
    if context.user_state.get(context.user_key, RecordKind.SHOPPING) is None:
        seeded = ShoppingRecord.from_dict(step.options) if step.options else ShoppingRecord()
        context.user_state.set(context.user_key, RecordKind.SHOPPING, seeded)
    return step.next()


async def prompt_for_category(step: StepContext) -> StepResult:
    record = step.context.shopping_record()
    if _typed_category(step.context.text) or record.category is not None:
        return step.next()
    return step.prompt(CATEGORY_PROMPT, cards.shoe_categories())


async def prompt_for_price(step: StepContext) -> StepResult:
    record = step.context.shopping_record()
    candidate = _typed_category(step.context.text) or record.category
    if not (record.category and record.category.strip()) and candidate:
        record.category = capitalize_first(candidate)

    if record.price_min == 0 and record.price_max == 0:
        return step.prompt(PRICE_PROMPT, cards.price_ranges())
    return step.next()


def show_products(catalog: ProductCatalog):
    async def step_fn(step: StepContext) -> StepResult:
        record = step.context.shopping_record()
        # The chosen price bucket is not mapped onto price_min/price_max here.
        products = await catalog.find_products(record)
        logger.info("Catalog %s returned %d product(s) for %s", catalog.name, len(products), record.to_dict())
        return step.prompt(PRODUCTS_PROMPT, cards.product_carousel(products))

    return step_fn


async def say_goodbye(step: StepContext) -> StepResult:
    step.context.send_text("Good bye!")
    return step.end()


def build_shopping_dialog(catalog: ProductCatalog) -> tuple[Dialog, list[Prompt]]:
    dialog = Dialog(
        SHOPPING_DIALOG,
        (initialize_state, prompt_for_category, prompt_for_price, show_products(catalog), say_goodbye),
    )
    prompts = [Prompt(CATEGORY_PROMPT), Prompt(PRICE_PROMPT), Prompt(PRODUCTS_PROMPT)]
    return dialog, prompts
