from unittest.mock import MagicMock

import pytest
import requests

from staffgate.apps.telegram_bot.gateway import TelegramGateway

API = "https://api.telegram.test"


def _response(ok=True, status_code=200, body=None, content=b""):
    r = MagicMock(spec=requests.Response)
    r.ok = ok
    r.status_code = status_code
    r.text = str(body)
    r.content = content
    r.json.return_value = body
    return r


@pytest.fixture
def session(mocker) -> MagicMock:
    return mocker.create_autospec(requests.Session, instance=True)


@pytest.fixture
def gateway(session) -> TelegramGateway:
    return TelegramGateway(token="T0K", api_root=API + "/", timeout=3, session=session)


def test_send_message_posts_json_and_returns_message_id(gateway, session):
    session.post.return_value = _response(body={"ok": True, "result": {"message_id": 31}})

    message_id = gateway.send_message(5, "<b>hi</b>", reply_markup={"remove_keyboard": True})

    assert message_id == 31
    url = session.post.call_args.args[0]
    assert url == f"{API}/botT0K/sendMessage"
    assert session.post.call_args.kwargs["json"] == {
        "chat_id": 5,
        "text": "<b>hi</b>",
        "parse_mode": "HTML",
        "reply_markup": {"remove_keyboard": True},
    }
    assert session.post.call_args.kwargs["timeout"] == 3


def test_provider_rejection_is_reported_as_none(gateway, session):
    session.post.return_value = _response(
        body={"ok": False, "description": "Forbidden: bot was blocked by the user"}
    )

    assert gateway.send_message(5, "hi") is None
    assert gateway.get_chat(5) is False


def test_http_errors_and_network_errors(gateway, session):
    session.post.return_value = _response(ok=False, status_code=502, body="bad gateway")
    assert gateway.edit_message_text(5, 9, "done") is False

    session.post.side_effect = requests.ConnectionError("down")
    assert gateway.answer_callback_query("cbq") is False


def test_non_json_body(gateway, session):
    r = _response(body=None)
    r.json.side_effect = ValueError("not json")
    session.post.return_value = r

    assert gateway.get_chat(5) is False


def test_edit_message_text_can_clear_the_keyboard(gateway, session):
    session.post.return_value = _response(body={"ok": True, "result": True})

    assert gateway.edit_message_text(5, 9, "done", reply_markup={"inline_keyboard": []})
    assert session.post.call_args.kwargs["json"]["reply_markup"] == {"inline_keyboard": []}


def test_get_file_and_download(gateway, session):
    session.post.return_value = _response(
        body={"ok": True, "result": {"file_id": "f", "file_path": "photos/file_1.jpg"}}
    )
    session.get.return_value = _response(content=b"jpeg-bytes")

    path = gateway.get_file("f")
    data = gateway.download_file(path)

    assert path == "photos/file_1.jpg"
    assert data == b"jpeg-bytes"
    assert session.get.call_args.args[0] == f"{API}/file/botT0K/photos/file_1.jpg"


def test_download_failure(gateway, session):
    session.get.return_value = _response(ok=False, status_code=404)
    assert gateway.download_file("photos/gone.jpg") is None

    session.get.side_effect = requests.Timeout("slow")
    assert gateway.download_file("photos/slow.jpg") is None


def test_defaults_come_from_settings(settings):
    settings.TELEGRAM_BOT_TOKEN = "from-settings"
    settings.TELEGRAM_API_ROOT = "https://api.example"

    gateway = TelegramGateway()

    assert gateway.api_url == "https://api.example/botfrom-settings"
