"""Dialog-stack engine running dialogs defined as ordered lists of steps.

A dialog is data: an id plus a tuple of async step callables. Each step
receives a :class:`StepContext` and returns a :class:`StepResult` saying
whether to advance, suspend on a prompt, start a child dialog, or finish.
The engine owns the :class:`DialogStackState`; steps never touch it directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from basicbot.activity import PromptOptions
from basicbot.core.errors import DialogError
from basicbot.state.models import DialogFrame, DialogStackState, FrameState
from basicbot.turn import TurnContext

logger = logging.getLogger("basicbot.dialogs")


class DialogTurnStatus(str, Enum):
    EMPTY = "empty"
    WAITING = "waiting"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class StepAction(str, Enum):
    NEXT = "next"
    PROMPT = "prompt"
    BEGIN = "begin"
    END = "end"


@dataclass(slots=True)
class StepResult:
    action: StepAction
    result: Any = None
    prompt_id: str | None = None
    options: PromptOptions | None = None
    dialog_id: str | None = None
    dialog_options: dict[str, Any] | None = None


@dataclass(slots=True)
class PromptValidation:
    ok: bool
    value: Any = None
    message: str | None = None


Validator = Callable[[str], PromptValidation]


@dataclass(frozen=True, slots=True)
class Prompt:
    """Named input prompt; without a validator any text is accepted."""

    id: str
    validator: Validator | None = None

    def validate(self, text: str) -> PromptValidation:
        if self.validator is None:
            return PromptValidation(ok=True, value=text)
        return self.validator(text)


class StepContext:
    """View of the running frame handed to a step."""

    def __init__(self, dc: "DialogContext", frame: DialogFrame, result: Any) -> None:
        self._dc = dc
        self._frame = frame
        self.result = result

    @property
    def context(self) -> TurnContext:
        return self._dc.context

    @property
    def index(self) -> int:
        return self._frame.step_index

    @property
    def options(self) -> dict[str, Any] | None:
        return self._frame.options

    @property
    def values(self) -> dict[str, Any]:
        return self._frame.values

    def next(self, result: Any = None) -> StepResult:
        return StepResult(StepAction.NEXT, result=result)

    def prompt(self, prompt_id: str, options: PromptOptions) -> StepResult:
        return StepResult(StepAction.PROMPT, prompt_id=prompt_id, options=options)

    def begin_dialog(self, dialog_id: str, options: dict[str, Any] | None = None) -> StepResult:
        return StepResult(StepAction.BEGIN, dialog_id=dialog_id, dialog_options=options)

    def end(self, result: Any = None) -> StepResult:
        return StepResult(StepAction.END, result=result)


Step = Callable[[StepContext], Awaitable[StepResult]]


@dataclass(frozen=True, slots=True)
class Dialog:
    id: str
    steps: tuple[Step, ...]


class DialogSet:
    """Registry of dialogs and prompts shared by every turn."""

    def __init__(self) -> None:
        self._dialogs: dict[str, Dialog] = {}
        self._prompts: dict[str, Prompt] = {}

    def add(self, dialog: Dialog) -> "DialogSet":
        if dialog.id in self._dialogs:
            raise DialogError(f"dialog {dialog.id!r} is already registered")
        if not dialog.steps:
            raise DialogError(f"dialog {dialog.id!r} has no steps")
        self._dialogs[dialog.id] = dialog
        return self

    def add_prompt(self, prompt: Prompt) -> "DialogSet":
        if prompt.id in self._prompts:
            raise DialogError(f"prompt {prompt.id!r} is already registered")
        self._prompts[prompt.id] = prompt
        return self

    def find(self, dialog_id: str) -> Dialog:
        dialog = self._dialogs.get(dialog_id)
        if dialog is None:
            raise DialogError(f"unknown dialog {dialog_id!r}")
        return dialog

    def find_prompt(self, prompt_id: str) -> Prompt:
        prompt = self._prompts.get(prompt_id)
        if prompt is None:
            raise DialogError(f"unknown prompt {prompt_id!r}")
        return prompt

    def create_context(self, context: TurnContext) -> "DialogContext":
        return DialogContext(self, context, context.dialog_stack())


class DialogContext:
    """Engine operations bound to one turn and one conversation's stack."""

    def __init__(self, dialogs: DialogSet, context: TurnContext, stack: DialogStackState) -> None:
        self.dialogs = dialogs
        self.context = context
        self.stack = stack

    @property
    def active_dialog(self) -> DialogFrame | None:
        return self.stack.top

    async def begin(self, dialog_id: str, options: dict[str, Any] | None = None) -> DialogTurnStatus:
        self.dialogs.find(dialog_id)
        frame = DialogFrame(dialog_id=dialog_id, options=options)
        self.stack.frames.append(frame)
        logger.info("Begin dialog %s (depth=%d)", dialog_id, len(self.stack.frames))
        return await self._run(frame, None)

    async def continue_top(self) -> DialogTurnStatus:
        frame = self.stack.top
        if frame is None:
            return DialogTurnStatus.EMPTY

        if not frame.waiting:
            return await self._run(frame, self.context.text)

        prompt = self.dialogs.find_prompt(frame.prompt_id or "")
        validation = prompt.validate(self.context.text)
        if not validation.ok:
            logger.info("Prompt %s rejected input in dialog %s", prompt.id, frame.dialog_id)
            if validation.message:
                self.context.send_text(validation.message)
            if frame.prompt is not None:
                self.context.send(frame.prompt.retry_prompt or frame.prompt.prompt)
            return DialogTurnStatus.WAITING

        frame.state = FrameState.ACTIVE
        frame.prompt = None
        frame.prompt_id = None
        frame.step_index += 1
        return await self._run(frame, validation.value)

    async def reprompt(self) -> None:
        frame = self.stack.top
        if frame is not None and frame.waiting and frame.prompt is not None:
            self.context.send(frame.prompt.prompt)

    async def cancel_all(self) -> DialogTurnStatus:
        if self.stack.is_empty:
            return DialogTurnStatus.EMPTY
        cancelled = [frame.dialog_id for frame in self.stack.frames]
        self.stack.frames.clear()
        logger.info("Cancelled dialogs %s", cancelled)
        return DialogTurnStatus.CANCELLED

    async def end(self, result: Any = None) -> DialogTurnStatus:
        if self.stack.is_empty:
            return DialogTurnStatus.EMPTY
        return await self._complete(result)

    async def _run(self, frame: DialogFrame, result: Any) -> DialogTurnStatus:
        while True:
            dialog = self.dialogs.find(frame.dialog_id)
            if frame.step_index >= len(dialog.steps):
                return await self._complete(result)

            outcome = await dialog.steps[frame.step_index](StepContext(self, frame, result))

            if outcome.action is StepAction.NEXT:
                frame.step_index += 1
                result = outcome.result
            elif outcome.action is StepAction.PROMPT:
                if outcome.options is None:
                    raise DialogError(f"prompt {outcome.prompt_id!r} issued without options")
                self.dialogs.find_prompt(outcome.prompt_id or "")
                frame.prompt_id = outcome.prompt_id
                frame.prompt = outcome.options
                frame.state = FrameState.WAITING
                self.context.send(outcome.options.prompt)
                return DialogTurnStatus.WAITING
            elif outcome.action is StepAction.BEGIN:
                return await self.begin(outcome.dialog_id or "", outcome.dialog_options)
            else:
                return await self._complete(outcome.result)

    async def _complete(self, result: Any) -> DialogTurnStatus:
        finished = self.stack.frames.pop()
        finished.state = FrameState.COMPLETE
        logger.info("Dialog %s complete", finished.dialog_id)

        parent = self.stack.top
        if parent is None:
            return DialogTurnStatus.COMPLETE
        # The parent's current step started the child; resume at the step after it.
        parent.step_index += 1
        return await self._run(parent, result)
