from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from staffgate.apps.telegram_bot.exceptions import InvalidCallbackToken

SEPARATOR = "_"


class Decision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class Subject(str, Enum):
    COMPANY = "company"
    WORKER = "worker"


@dataclass(frozen=True)
class CallbackToken:
    """Inline-button payload: `<decision>_<subject>_<account id>`."""

    decision: Decision
    subject: Subject
    account_id: int

    def __post_init__(self) -> None:
        if not isinstance(self.decision, Decision):
            raise InvalidCallbackToken(f"Unknown decision: {self.decision!r}")
        if not isinstance(self.subject, Subject):
            raise InvalidCallbackToken(f"Unknown subject: {self.subject!r}")
        if (
            isinstance(self.account_id, bool)
            or not isinstance(self.account_id, int)
            or self.account_id <= 0
        ):
            raise InvalidCallbackToken(f"Invalid account id: {self.account_id!r}")

    @classmethod
    def parse(cls, raw: str | None) -> "CallbackToken":
        parts = (raw or "").split(SEPARATOR)
        if len(parts) != 3:
            raise InvalidCallbackToken(f"Malformed callback token: {raw!r}")
        decision, subject, account_id = parts
        try:
            return cls(Decision(decision), Subject(subject), int(account_id))
        except ValueError as exc:
            raise InvalidCallbackToken(f"Malformed callback token: {raw!r}") from exc

    def encode(self) -> str:
        return SEPARATOR.join(
            (self.decision.value, self.subject.value, str(self.account_id))
        )
