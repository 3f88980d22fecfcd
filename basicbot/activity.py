"""Dataclasses describing inbound events and outbound replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

HERO_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.hero"
ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"


class ActivityType(str, Enum):
    """Inbound event kinds understood by the bot."""

    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversationUpdate"


class AttachmentLayout(str, Enum):
    LIST = "list"
    CAROUSEL = "carousel"


@dataclass(slots=True)
class InboundActivity:
    """Single inbound event received from the channel."""

    type: ActivityType
    conversation_id: str
    user_id: str
    text: str = ""
    members_added: list[str] = field(default_factory=list)
    recipient_id: str = "bot"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "InboundActivity":
        """Build an activity from a request body, raising ``ValueError`` on bad input."""

        raw_type = payload.get("type")
        try:
            activity_type = ActivityType(raw_type)
        except ValueError as exc:
            raise ValueError(f"unsupported activity type: {raw_type!r}") from exc

        conversation_id = payload.get("conversation_id")
        if not conversation_id:
            raise ValueError("conversation_id is required")

        user_id = payload.get("user_id") or ""
        text = payload.get("text") or ""
        if activity_type is ActivityType.MESSAGE:
            if not user_id:
                raise ValueError("user_id is required for message activities")
            if not text.strip():
                raise ValueError("text is required for message activities")

        members = payload.get("members_added") or []
        if not isinstance(members, list):
            raise ValueError("members_added must be a list of member ids")

        return cls(
            type=activity_type,
            conversation_id=str(conversation_id),
            user_id=str(user_id),
            text=text,
            members_added=[str(member) for member in members],
            recipient_id=str(payload.get("recipient_id") or "bot"),
        )


@dataclass(slots=True)
class CardAction:
    title: str
    value: str
    type: str = "imBack"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "title": self.title, "value": self.value}


@dataclass(slots=True)
class CardImage:
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url}


@dataclass(slots=True)
class HeroCard:
    """Hero card with optional text fields, images and buttons."""

    title: str | None = None
    subtitle: str | None = None
    text: str | None = None
    images: list[CardImage] = field(default_factory=list)
    buttons: list[CardAction] = field(default_factory=list)

    def to_attachment(self) -> dict[str, Any]:
        content: dict[str, Any] = {
            key: value
            for key, value in (("title", self.title), ("subtitle", self.subtitle), ("text", self.text))
            if value is not None
        }
        if self.images:
            content["images"] = [image.to_dict() for image in self.images]
        content["buttons"] = [button.to_dict() for button in self.buttons]
        return {"contentType": HERO_CARD_CONTENT_TYPE, "content": content}


@dataclass(slots=True)
class Activity:
    """Outbound reply; attachments are already in their wire form."""

    text: str | None = None
    attachments: list[dict[str, Any]] = field(default_factory=list)
    attachment_layout: AttachmentLayout = AttachmentLayout.LIST

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": "message"}
        if self.text is not None:
            payload["text"] = self.text
        if self.attachments:
            payload["attachments"] = list(self.attachments)
            payload["attachment_layout"] = self.attachment_layout.value
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Activity":
        return cls(
            text=payload.get("text"),
            attachments=list(payload.get("attachments", [])),
            attachment_layout=AttachmentLayout(payload.get("attachment_layout", AttachmentLayout.LIST.value)),
        )


@dataclass(slots=True)
class PromptOptions:
    """What a suspended dialog step sent, and what to send on a failed retry."""

    prompt: Activity
    retry_prompt: Activity | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt.to_dict(),
            "retry_prompt": self.retry_prompt.to_dict() if self.retry_prompt else None,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PromptOptions":
        retry = payload.get("retry_prompt")
        return cls(
            prompt=Activity.from_dict(payload["prompt"]),
            retry_prompt=Activity.from_dict(retry) if retry else None,
        )
