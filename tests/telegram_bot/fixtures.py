from typing import Callable, List
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from staffgate.apps.telegram_bot.bot import TelegramBot
from staffgate.apps.telegram_bot.fsm_store import ConversationStore
from staffgate.apps.telegram_bot.gateway import TelegramGateway
from staffgate.apps.telegram_bot.messages import TelegramUpdate

PHOTO_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


@pytest.fixture
def gateway_mock(mocker: MockerFixture) -> MagicMock:
    """Every TelegramGateway built by the app is this autospec mock."""
    gateway = mocker.create_autospec(TelegramGateway, instance=True)
    gateway.get_chat.return_value = True
    gateway.send_message.return_value = 501
    gateway.edit_message_text.return_value = True
    gateway.answer_callback_query.return_value = True
    gateway.get_file.return_value = "photos/file_7.jpg"
    gateway.download_file.return_value = PHOTO_BYTES
    mocker.patch(
        "staffgate.apps.telegram_bot.gateway.TelegramGateway", return_value=gateway
    )
    return gateway


@pytest.fixture
def confirmation_mail_mock(mocker: MockerFixture) -> MagicMock:
    return mocker.patch(
        "staffgate.apps.telegram_bot.steps.send_confirmation_code", return_value=True
    )


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture
def bot(store: ConversationStore) -> TelegramBot:
    return TelegramBot(store=store)


@pytest.fixture
def say(bot: TelegramBot, db, gateway_mock: MagicMock) -> Callable[..., None]:
    """Feed one text (or photo) message from a chat through the bot."""

    def _say(chat_id: int, text: str = "", photo: str | None = None) -> None:
        bot.handle_update(
            TelegramUpdate(chat_id=chat_id, text=text, photo_file_id=photo)
        )

    return _say


def sent_texts(gateway: MagicMock, chat_id: int) -> List[str]:
    return [c.args[1] for c in gateway.send_message.call_args_list if c.args[0] == chat_id]


def last_sent(gateway: MagicMock, chat_id: int) -> str:
    texts = sent_texts(gateway, chat_id)
    assert texts, f"nothing was sent to chat {chat_id}"
    return texts[-1]
