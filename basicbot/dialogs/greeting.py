"""Greeting flow: learn the user's name, then offer the shop categories."""

from __future__ import annotations

from basicbot.activity import Activity, PromptOptions
from basicbot.dialogs import cards
from basicbot.dialogs.engine import Dialog, Prompt, PromptValidation, StepContext, StepResult
from basicbot.nlu.slots import capitalize_first
from basicbot.state.models import GreetingRecord, RecordKind

GREETING_DIALOG = "greeting"
NAME_PROMPT = "greeting.name"
CATEGORY_PROMPT = "greeting.category"

NAME_MIN_LENGTH = 3


def validate_name(text: str) -> PromptValidation:
    value = (text or "").strip()
    if len(value) >= NAME_MIN_LENGTH:
        return PromptValidation(ok=True, value=value)
    return PromptValidation(
        ok=False,
        message=f"Names needs to be at least `{NAME_MIN_LENGTH}` characters long.",
    )


async def initialize_state(step: StepContext) -> StepResult:
    context = step.context
    if context.user_state.get(context.user_key, RecordKind.GREETING) is None:
        seeded = GreetingRecord.from_dict(step.options) if step.options else GreetingRecord()
        context.user_state.set(context.user_key, RecordKind.GREETING, seeded)
    return step.next()


async def prompt_for_name(step: StepContext) -> StepResult:
    record = step.context.greeting_record()
    if record.name and record.name.strip():
        return step.next()
    return step.prompt(NAME_PROMPT, PromptOptions(prompt=Activity(text="What is your name?")))


async def prompt_for_category(step: StepContext) -> StepResult:
    record = step.context.greeting_record()
    typed_name = step.result if isinstance(step.result, str) else None
    if not (record.name and record.name.strip()) and typed_name:
        record.name = capitalize_first(typed_name)
    return step.prompt(CATEGORY_PROMPT, cards.greeting_categories(record.name))


def build_greeting_dialog() -> tuple[Dialog, list[Prompt]]:
    dialog = Dialog(GREETING_DIALOG, (initialize_state, prompt_for_name, prompt_for_category))
    prompts = [Prompt(NAME_PROMPT, validate_name), Prompt(CATEGORY_PROMPT)]
    return dialog, prompts
