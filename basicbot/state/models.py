"""Dataclasses representing persisted user and conversation state."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from basicbot.activity import PromptOptions


class RecordKind(str, Enum):
    """Record kinds stored per scope key."""

    GREETING = "greeting"
    SHOPPING = "shopping"
    DIALOG_STACK = "dialog_stack"


@dataclass(slots=True)
class GreetingRecord:
    """Slots collected by the greeting flow."""

    name: str | None = None
    city: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "GreetingRecord":
        return cls(name=payload.get("name"), city=payload.get("city"))


@dataclass(slots=True)
class ShoppingRecord:
    """Slots collected by the shopping flow."""

    category: str | None = None
    price_min: float = 0.0
    price_max: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ShoppingRecord":
        return cls(
            category=payload.get("category"),
            price_min=float(payload.get("price_min") or 0.0),
            price_max=float(payload.get("price_max") or 0.0),
        )

    def to_catalog_payload(self) -> dict[str, Any]:
        """Wire shape expected by the product catalog service."""

        return {"Categorie": self.category, "PriceMin": self.price_min, "PriceMax": self.price_max}


class FrameState(str, Enum):
    ACTIVE = "active"
    WAITING = "waiting"
    COMPLETE = "complete"


@dataclass(slots=True)
class DialogFrame:
    """One dialog invocation on the stack."""

    dialog_id: str
    step_index: int = 0
    prompt_id: str | None = None
    prompt: PromptOptions | None = None
    options: dict[str, Any] | None = None
    values: dict[str, Any] = field(default_factory=dict)
    state: FrameState = FrameState.ACTIVE

    @property
    def waiting(self) -> bool:
        return self.state is FrameState.WAITING

    def to_dict(self) -> dict[str, Any]:
        return {
            "dialog_id": self.dialog_id,
            "step_index": self.step_index,
            "prompt_id": self.prompt_id,
            "prompt": self.prompt.to_dict() if self.prompt else None,
            "options": self.options,
            "values": dict(self.values),
            "state": self.state.value,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DialogFrame":
        prompt = payload.get("prompt")
        return cls(
            dialog_id=payload["dialog_id"],
            step_index=int(payload.get("step_index", 0)),
            prompt_id=payload.get("prompt_id"),
            prompt=PromptOptions.from_dict(prompt) if prompt else None,
            options=payload.get("options"),
            values=dict(payload.get("values") or {}),
            state=FrameState(payload.get("state", FrameState.ACTIVE.value)),
        )


@dataclass(slots=True)
class DialogStackState:
    """Ordered stack of active dialogs; the last frame is the innermost."""

    frames: list[DialogFrame] = field(default_factory=list)

    @property
    def top(self) -> DialogFrame | None:
        return self.frames[-1] if self.frames else None

    @property
    def is_empty(self) -> bool:
        return not self.frames

    def to_dict(self) -> dict[str, Any]:
        return {"frames": [frame.to_dict() for frame in self.frames]}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DialogStackState":
        return cls(frames=[DialogFrame.from_dict(frame) for frame in payload.get("frames", [])])


RECORD_TYPES: dict[RecordKind, type] = {
    RecordKind.GREETING: GreetingRecord,
    RecordKind.SHOPPING: ShoppingRecord,
    RecordKind.DIALOG_STACK: DialogStackState,
}
