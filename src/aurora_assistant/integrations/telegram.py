"""Telegram Bot API client and update models.

Only the handful of Bot API methods the assistant uses are wrapped. Update
payloads are parsed with pydantic models that ignore fields we do not read.
"""

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import IntegrationError
from ..logging import get_logger

logger = get_logger(__name__)

API_URL = "https://api.telegram.org"


class TelegramModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TelegramUser(TelegramModel):
    id: int
    is_bot: bool = False
    first_name: str | None = None
    username: str | None = None
    language_code: str | None = None


class TelegramChat(TelegramModel):
    id: int
    type: str


class TelegramVoice(TelegramModel):
    file_id: str
    duration: int | None = None
    mime_type: str | None = None


class TelegramMessage(TelegramModel):
    message_id: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    date: int | None = None
    text: str | None = None
    voice: TelegramVoice | None = None

    @property
    def is_private(self) -> bool:
        return self.chat.type == "private"

    @property
    def is_command(self) -> bool:
        return bool(self.text and self.text.startswith("/"))

    @property
    def command(self) -> str | None:
        """Command name without the slash or bot mention, e.g. 'start'."""
        if not self.is_command:
            return None
        return self.text.split()[0][1:].split("@")[0]


class TelegramUpdate(TelegramModel):
    update_id: int
    message: TelegramMessage | None = None


class TelegramClient:
    """Synchronous Bot API client."""

    def __init__(
        self,
        token: str,
        http_client: httpx.Client | None = None,
        base_url: str = API_URL,
    ):
        self.token = token
        self.http = http_client or httpx.Client(timeout=30.0)
        self.base_url = base_url.rstrip("/")

    def send_message(
        self,
        chat_id: int | str,
        text: str,
        parse_mode: str | None = "HTML",
        reply_markup: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a message and return the sent Message object."""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return self._call("sendMessage", payload)

    def send_chat_action(self, chat_id: int | str, action: str = "typing") -> None:
        self._call("sendChatAction", {"chat_id": chat_id, "action": action})

    def get_file(self, file_id: str) -> dict[str, Any]:
        """File object for ``file_id``; ``file_path`` is used for downloads."""
        return self._call("getFile", {"file_id": file_id})

    def download_file(self, file_path: str) -> bytes:
        url = f"{self.base_url}/file/bot{self.token}/{file_path}"
        try:
            response = self.http.get(url)
        except httpx.HTTPError as e:
            raise IntegrationError("telegram", str(e)) from e
        if response.is_error:
            raise IntegrationError("telegram", "file download failed", response.status_code)
        return response.content

    def _call(self, method: str, payload: dict[str, Any]) -> Any:
        try:
            response = self.http.post(f"{self.base_url}/bot{self.token}/{method}", json=payload)
        except httpx.HTTPError as e:
            raise IntegrationError("telegram", f"{method}: {e}") from e

        try:
            data = response.json() if response.content else {}
        except ValueError as e:
            raise IntegrationError(
                "telegram",
                f"{method}: unreadable response {response.text[:200]!r}",
                status_code=response.status_code,
            ) from e
        if response.is_error or not data.get("ok"):
            raise IntegrationError(
                "telegram",
                f"{method}: {data.get('description', response.text)}",
                status_code=response.status_code,
            )
        return data.get("result")


def url_button_markup(text: str, url: str) -> dict[str, Any]:
    """Inline keyboard with a single URL button."""
    return {"inline_keyboard": [[{"text": text, "url": url}]]}
