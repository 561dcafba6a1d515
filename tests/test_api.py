"""Tests for the webhook and OAuth callback routes."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from aurora_assistant.api import BotServices, create_app
from aurora_assistant.api.bot import (
    ALREADY_REGISTERED,
    CALENDAR_CONNECTED,
    CONNECT_FIRST,
    ERROR_REPLY,
    GREETING,
    process_message,
)
from aurora_assistant.config import Settings
from aurora_assistant.driver import MessageHandler
from aurora_assistant.exceptions import IntegrationError, MessageRejectedError, UnknownAgentError
from aurora_assistant.integrations.google_oauth import AuthUrl, GoogleOAuthClient, TokenSet
from aurora_assistant.integrations.telegram import TelegramClient, TelegramMessage
from aurora_assistant.storage import User


@pytest.fixture
def oauth():
    client = MagicMock(spec=GoogleOAuthClient)
    client.generate_auth_url.return_value = AuthUrl(url="https://accounts.example/auth?state=s1", state="s1")
    return client


@pytest.fixture
def services(storage, oauth):
    return BotServices(
        settings=Settings(_env_file=None),
        storage=storage,
        telegram=MagicMock(spec=TelegramClient),
        oauth_factory=lambda: oauth,
        handler=MagicMock(spec=MessageHandler),
        bot_username="aurora_bot",
    )


@pytest.fixture
def client(services):
    return TestClient(create_app(services))


def _update(text: str | None = "hello", chat_id: int = 1001, **extra) -> dict:
    message = {
        "message_id": 1,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": chat_id, "first_name": "Sam", "language_code": "en"},
        **extra,
    }
    if text is not None:
        message["text"] = text
    return {"update_id": 100, "message": message}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestWebhook:
    def test_start_registers_new_user(self, client, services):
        response = client.post("/telegram_webhook", json=_update("/start"))

        assert response.json() == {"ok": True}
        user = services.storage.get_user("1001")
        assert user.google_oauth_state == "s1"
        assert user.language == "en"
        args, kwargs = services.telegram.send_message.call_args
        assert args == (1001, GREETING)
        assert kwargs["reply_markup"]["inline_keyboard"][0][0]["url"] == "https://accounts.example/auth?state=s1"

    def test_start_refreshes_state_for_unconnected_user(self, client, services):
        services.storage.create_user(User(id="1001", google_oauth_state="old"))

        client.post("/telegram_webhook", json=_update("/start"))

        assert services.storage.get_user("1001").google_oauth_state == "s1"

    def test_start_for_connected_user(self, client, services, connected_user, oauth):
        client.post("/telegram_webhook", json=_update("/start"))

        services.telegram.send_message.assert_called_once_with(1001, ALREADY_REGISTERED, parse_mode=None)
        oauth.generate_auth_url.assert_not_called()

    def test_unconnected_user_is_asked_to_connect(self, client, services):
        client.post("/telegram_webhook", json=_update("what's today?"))

        services.telegram.send_message.assert_called_once_with(1001, CONNECT_FIRST, parse_mode=None)
        services.handler.handle.assert_not_called()

    def test_connected_user_message_is_handled(self, client, services, connected_user):
        client.post("/telegram_webhook", json=_update("what's today?"))

        services.handler.handle.assert_called_once()
        message = services.handler.handle.call_args.args[0]
        assert message.text == "what's today?"

    def test_voice_message_is_handled(self, client, services, connected_user):
        client.post("/telegram_webhook", json=_update(None, voice={"file_id": "v1", "duration": 3}))

        services.handler.handle.assert_called_once()

    def test_other_commands_and_updates_are_ignored(self, client, services, connected_user):
        assert client.post("/telegram_webhook", json=_update("/help")).json() == {"ok": True}
        assert client.post("/telegram_webhook", json={"update_id": 5}).json() == {"ok": True}

        services.handler.handle.assert_not_called()
        services.telegram.send_message.assert_not_called()


class TestOAuthCallback:
    @pytest.mark.parametrize(
        "params, body",
        [
            ({"error": "access_denied"}, "Google oauth error: access_denied"),
            ({"state": "s1"}, "Google oauth error: no code"),
            ({"code": "c"}, "Google oauth error: no state"),
            ({"code": "c", "state": "unknown"}, "Google oauth error: user not found"),
        ],
    )
    def test_bad_requests(self, client, params, body):
        response = client.get("/googleoauth2", params=params)
        assert response.status_code == 400
        assert response.text == body

    def test_failed_exchange(self, client, services, oauth):
        services.storage.create_user(User(id="1001", google_oauth_state="s1"))
        oauth.exchange_code.side_effect = IntegrationError("google_oauth", "invalid_grant", 400)

        response = client.get("/googleoauth2", params={"code": "c", "state": "s1"})

        assert response.status_code == 400
        assert not services.storage.get_user("1001").is_connected

    def test_success_stores_tokens_and_redirects(self, client, services, oauth):
        services.storage.create_user(User(id="1001", google_oauth_state="s1"))
        expires = datetime.now(timezone.utc) + timedelta(hours=1)
        oauth.exchange_code.return_value = TokenSet(access_token="a", expires_at=expires, refresh_token="r")

        response = client.get("/googleoauth2", params={"code": "c", "state": "s1"}, follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "https://t.me/aurora_bot"
        user = services.storage.get_user("1001")
        assert user.google_access_token == "a"
        assert user.google_refresh_token == "r"
        assert user.google_oauth_state is None
        services.telegram.send_message.assert_called_once_with("1001", CALENDAR_CONNECTED, parse_mode=None)


class TestProcessMessage:
    def _message(self) -> TelegramMessage:
        return TelegramMessage.model_validate(_update()["message"])

    def test_agent_error_sends_apology(self, services):
        services.handler.handle.side_effect = UnknownAgentError("Travel agent")

        process_message(services, self._message())

        services.telegram.send_message.assert_called_once_with(1001, ERROR_REPLY, parse_mode=None)

    def test_rejected_message_is_silent(self, services):
        services.handler.handle.side_effect = MessageRejectedError("User not found")

        process_message(services, self._message())

        services.telegram.send_message.assert_not_called()

    def test_failed_apology_is_logged_not_raised(self, services):
        services.handler.handle.side_effect = UnknownAgentError("Travel agent")
        services.telegram.send_message.side_effect = IntegrationError("telegram", "down")

        process_message(services, self._message())
