"""Turn dispatcher: knowledge base first, then intents, interrupts and dialogs."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from basicbot.activity import ActivityType, InboundActivity
from basicbot.core.config import Settings
from basicbot.core.errors import ConfigurationError, DialogError
from basicbot.dialogs import GREETING_DIALOG, SHOPPING_DIALOG, build_dialog_set
from basicbot.dialogs.cards import welcome_card
from basicbot.dialogs.engine import DialogContext, DialogSet, DialogTurnStatus
from basicbot.nlu.slots import apply_greeting_slots, apply_shopping_slots
from basicbot.services.base import Intent, IntentRecognizer, KnowledgeBase, ProductCatalog
from basicbot.services.catalog import HttpProductCatalog, JsonProductCatalog
from basicbot.services.faq import FaqKnowledgeBase
from basicbot.services.keywords import KeywordRecognizer
from basicbot.services.luis import LuisRecognizer
from basicbot.services.qna import QnAMakerKnowledgeBase
from basicbot.state.store import StateStorage, StateStore
from basicbot.turn import TurnContext

logger = logging.getLogger("basicbot.bot")

LAUNCH_DIALOGS = {
    Intent.GREETING: GREETING_DIALOG,
    Intent.SHOES: SHOPPING_DIALOG,
}

CANCELLED_MESSAGE = "Ok. I've canceled our last activity."
NOTHING_TO_CANCEL_MESSAGE = "I don't have anything to cancel."
HELP_MESSAGES = (
    "Let me try to provide some help.",
    "I understand greetings, being asked for help, or being asked to cancel what I am doing.",
)
NOT_UNDERSTOOD_MESSAGE = "I didn't understand what you just said to me."


class BasicBot:
    """Handles one inbound activity at a time and commits state after each."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        recognizer: IntentRecognizer,
        dialogs: DialogSet,
        user_state: StateStore,
        conversation_state: StateStore,
        welcome_card_path: Path,
        catalog: ProductCatalog | None = None,
    ) -> None:
        self.knowledge_base = knowledge_base
        self.recognizer = recognizer
        self.dialogs = dialogs
        self.user_state = user_state
        self.conversation_state = conversation_state
        self.welcome_card_path = Path(welcome_card_path)
        self.catalog = catalog

    @asynccontextmanager
    async def turn_scope(self, activity: InboundActivity) -> AsyncIterator[TurnContext]:
        context = TurnContext(
            activity=activity,
            user_state=self.user_state,
            conversation_state=self.conversation_state,
        )
        try:
            yield context
        finally:
            context.commit()

    async def handle_turn(self, activity: InboundActivity) -> TurnContext:
        async with self.turn_scope(activity) as context:
            if activity.type is ActivityType.MESSAGE:
                await self._on_message(context)
            elif activity.type is ActivityType.CONVERSATION_UPDATE:
                self._on_members_added(context)
        return context

    def _on_members_added(self, context: TurnContext) -> None:
        for member in context.activity.members_added:
            if member == context.activity.recipient_id:
                continue
            context.send(welcome_card(self.welcome_card_path))
        context.outcome = "welcome" if context.responded else "ignored"

    async def _on_message(self, context: TurnContext) -> None:
        answers = await self.knowledge_base.get_answers(context.text)
        if answers:
            logger.info("Answered from %s (score=%.2f)", self.knowledge_base.name, answers[0].score)
            context.send_text(answers[0].text)
            context.outcome = "knowledge_answer"
            return

        await self._on_intent(context)

    async def _on_intent(self, context: TurnContext) -> None:
        result = await self.recognizer.recognize(context.text)
        intent = result.top_intent
        context.intent = intent.value

        if result.has_entities:
            apply_greeting_slots(context.greeting_record(), result.entities)
            apply_shopping_slots(context.shopping_record(), result.entities)

        dc = self.dialogs.create_context(context)

        if await self._handle_interrupt(dc, intent):
            return

        try:
            status = await dc.continue_top()
        except DialogError:
            logger.exception("Active dialog could not continue; clearing the stack")
            await dc.cancel_all()
            status = DialogTurnStatus.EMPTY

        logger.debug("Dialog stack status %s", status.value)
        context.outcome = status.value
        if context.responded:
            return

        if status is DialogTurnStatus.EMPTY:
            dialog_id = LAUNCH_DIALOGS.get(intent)
            if dialog_id:
                await dc.begin(dialog_id)
                context.outcome = "dialog_started"
            else:
                context.send_text(NOT_UNDERSTOOD_MESSAGE)
                context.outcome = "not_understood"
        elif status is DialogTurnStatus.WAITING:
            pass
        elif status is DialogTurnStatus.COMPLETE:
            await dc.end()
        else:
            logger.warning("Unexpected dialog status %s; cancelling all dialogs", status.value)
            await dc.cancel_all()

    async def _handle_interrupt(self, dc: DialogContext, intent: Intent) -> bool:
        context = dc.context

        if intent is not Intent.NONE:
            active = dc.active_dialog.dialog_id if dc.active_dialog else None
            logger.info("Interrupt %s (active dialog: %s)", intent.value, active)

        if intent is Intent.CANCEL:
            if dc.active_dialog is not None:
                await dc.cancel_all()
                context.send_text(CANCELLED_MESSAGE)
            else:
                context.send_text(NOTHING_TO_CANCEL_MESSAGE)
            context.outcome = "cancel"
            return True

        if intent is Intent.HELP:
            for line in HELP_MESSAGES:
                context.send_text(line)
            if dc.active_dialog is not None:
                await dc.reprompt()
            context.outcome = "help"
            return True

        dialog_id = LAUNCH_DIALOGS.get(intent)
        if dialog_id:
            await dc.cancel_all()
            await dc.begin(dialog_id)
            context.outcome = "dialog_started"
            return True

        return False


def build_knowledge_base(settings: Settings) -> KnowledgeBase:
    if settings.qna_enabled:
        if not (settings.qna_host and settings.qna_kb_id and settings.qna_endpoint_key):
            raise ConfigurationError(
                "knowledge_backend=qnamaker requires QNA_HOST, QNA_KB_ID and QNA_ENDPOINT_KEY"
            )
        return QnAMakerKnowledgeBase(
            str(settings.qna_host),
            settings.qna_kb_id,
            settings.qna_endpoint_key,
            top=settings.qna_top,
            score_threshold=settings.qna_score_threshold,
            timeout=settings.http_timeout_seconds,
        )
    return FaqKnowledgeBase(
        settings.faq_index_path,
        settings.faq_metadata_path,
        min_score=settings.faq_min_score,
    )


def build_recognizer(settings: Settings) -> IntentRecognizer:
    if settings.luis_enabled:
        if not (settings.luis_endpoint and settings.luis_app_id and settings.luis_key):
            raise ConfigurationError(
                "recognizer_backend=luis requires LUIS_ENDPOINT, LUIS_APP_ID and LUIS_KEY"
            )
        return LuisRecognizer(
            str(settings.luis_endpoint),
            settings.luis_app_id,
            settings.luis_key,
            timeout=settings.http_timeout_seconds,
        )
    return KeywordRecognizer()


def build_catalog(settings: Settings) -> ProductCatalog:
    if settings.catalog_base_url:
        return HttpProductCatalog(str(settings.catalog_base_url), timeout=settings.http_timeout_seconds)
    return JsonProductCatalog(settings.catalog_path)


def build_bot(settings: Settings, storage: StateStorage) -> BasicBot:
    """Wire collaborators from settings; raises ``ConfigurationError`` on missing settings."""

    if not Path(settings.welcome_card_path).is_file():
        raise ConfigurationError(f"welcome card not found at {settings.welcome_card_path}")

    catalog = build_catalog(settings)
    return BasicBot(
        knowledge_base=build_knowledge_base(settings),
        recognizer=build_recognizer(settings),
        dialogs=build_dialog_set(catalog),
        user_state=StateStore("user", storage),
        conversation_state=StateStore("conversation", storage),
        welcome_card_path=settings.welcome_card_path,
        catalog=catalog,
    )
