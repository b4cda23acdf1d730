import logging
from typing import Optional

from django.conf import settings

from staffgate.apps.telegram_bot import steps  # noqa: F401  (registers step handlers)
from staffgate.apps.telegram_bot.approvals import handle_callback
from staffgate.apps.telegram_bot.dedup import UpdateDeduplicator
from staffgate.apps.telegram_bot.flow import reply
from staffgate.apps.telegram_bot.fsm_store import ConversationStore
from staffgate.apps.telegram_bot.keyboards import kb_start_menu
from staffgate.apps.telegram_bot.messages import TelegramUpdate
from staffgate.apps.telegram_bot.registry import get_step_meta, resolve_step
from staffgate.apps.telegram_bot.steps import MSG_UNKNOWN, MSG_WELCOME, StepContext

logger = logging.getLogger(__name__)


class TelegramBot:
    """Route one Telegram update to the conversation or to the approval workflow."""

    def __init__(
        self,
        store: Optional[ConversationStore] = None,
        dedup: Optional[UpdateDeduplicator] = None,
    ):
        self.store = store or ConversationStore()
        if dedup is None and settings.TELEGRAM_DEDUP_ENABLED:
            dedup = UpdateDeduplicator()
        self.dedup = dedup

    def handle_update(self, update: TelegramUpdate) -> None:
        if self.dedup and self.dedup.seen(update.update_id):
            logger.info(f"[bot] Update {update.update_id} already processed, skipping")
            return
        try:
            self._dispatch(update)
        except Exception:
            if self.dedup:
                self.dedup.forget(update.update_id)
            raise

    def _dispatch(self, update: TelegramUpdate) -> None:
        if update.is_callback:
            handle_callback(update)
            return
        if update.chat_id is None:
            logger.warning(f"[bot] Update {update.update_id} has no chat, ignoring")
            return
        self.handle_message(update)

    def handle_message(self, update: TelegramUpdate) -> None:
        chat_id = update.chat_id

        if update.command == "cancel":
            self.store.clear(chat_id)
            logger.info(f"[bot] Chat {chat_id} cancelled its conversation")
            reply(chat_id, "❌ Cancelled.\n\n" + MSG_WELCOME, kb_start_menu())
            return

        step = self.store.get_or_create(chat_id)
        meta = get_step_meta(resolve_step(step.step))
        if meta is None:
            logger.warning(f"[bot] Chat {chat_id} is at unknown step {step.step!r}")
            reply(chat_id, MSG_UNKNOWN)
            return

        logger.debug(f"[bot] Chat {chat_id} at {meta.step.value}: {meta.description}")
        meta.handler(StepContext(update=update, step=step, store=self.store))
