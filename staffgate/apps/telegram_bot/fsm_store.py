import logging

from staffgate.apps.telegram_bot.models import Step, StepName

logger = logging.getLogger(__name__)

# Collected answers a step may write back into the conversation row
FIELDS = ("role", "company_name", "name", "email", "password", "confirmation_code")


class ConversationStore:
    """Keyed access to the per-chat Step rows; the only writer of conversation state."""

    def get_or_create(self, chat_id: int) -> Step:
        step, created = Step.objects.get_or_create(
            chat_id=chat_id, defaults={"step": StepName.START}
        )
        if created:
            logger.info(f"[fsm] New conversation for chat {chat_id}")
        return step

    def advance(self, step: Step, next_step: StepName, **fields) -> Step:
        """Record collected answers and move to `next_step` in one write."""
        unknown = set(fields) - set(FIELDS)
        if unknown:
            raise ValueError(f"Unknown conversation fields: {sorted(unknown)}")
        for name, value in fields.items():
            setattr(step, name, value)
        previous = step.step
        step.step = next_step
        step.save(update_fields=[*fields, "step", "updated_at"])
        logger.info(f"[fsm] chat {step.chat_id}: {previous} -> {next_step}")
        return step

    def clear(self, chat_id: int) -> None:
        Step.objects.filter(chat_id=chat_id).delete()
