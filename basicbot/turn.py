"""Per-turn context threaded through the dispatcher, engine and dialog steps."""

from __future__ import annotations

from dataclasses import dataclass, field

from basicbot.activity import Activity, InboundActivity
from basicbot.state.models import DialogStackState, GreetingRecord, RecordKind, ShoppingRecord
from basicbot.state.store import StateStore


@dataclass
class TurnContext:
    """Everything one turn reads and writes.

    Replies are collected in ``outbox``; ``responded`` flips on the first send.
    """

    activity: InboundActivity
    user_state: StateStore
    conversation_state: StateStore
    outbox: list[Activity] = field(default_factory=list)
    responded: bool = False
    intent: str | None = None
    outcome: str = "ignored"

    @property
    def text(self) -> str:
        return self.activity.text

    @property
    def user_key(self) -> str:
        return self.activity.user_id

    @property
    def conversation_key(self) -> str:
        return self.activity.conversation_id

    def send(self, activity: Activity) -> None:
        self.outbox.append(activity)
        self.responded = True

    def send_text(self, text: str) -> None:
        self.send(Activity(text=text))

    def greeting_record(self) -> GreetingRecord:
        return self.user_state.get_or_default(self.user_key, RecordKind.GREETING, GreetingRecord)

    def shopping_record(self) -> ShoppingRecord:
        return self.user_state.get_or_default(self.user_key, RecordKind.SHOPPING, ShoppingRecord)

    def dialog_stack(self) -> DialogStackState:
        return self.conversation_state.get_or_default(
            self.conversation_key, RecordKind.DIALOG_STACK, DialogStackState
        )

    def commit(self) -> None:
        self.user_state.commit(self.user_key)
        self.conversation_state.commit(self.conversation_key)
