"""Dialog package exports."""

from .engine import Dialog, DialogContext, DialogSet, DialogTurnStatus, Prompt, PromptValidation, StepContext
from .greeting import GREETING_DIALOG, build_greeting_dialog
from .shopping import SHOPPING_DIALOG, build_shopping_dialog

__all__ = [
    "Dialog",
    "DialogContext",
    "DialogSet",
    "DialogTurnStatus",
    "Prompt",
    "PromptValidation",
    "StepContext",
    "GREETING_DIALOG",
    "SHOPPING_DIALOG",
    "build_dialog_set",
]


def build_dialog_set(catalog) -> DialogSet:
    """Register the greeting and shopping dialogs with their prompts."""

    dialogs = DialogSet()
    for dialog, prompts in (build_greeting_dialog(), build_shopping_dialog(catalog)):
        dialogs.add(dialog)
        for prompt in prompts:
            dialogs.add_prompt(prompt)
    return dialogs
