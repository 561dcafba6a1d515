"""
Row models for the assistant's SQLite database.

Each dataclass maps 1:1 to a table. Timestamps default to the current UTC
time so callers only supply the domain-specific columns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..ids import compose_id

DIRECTIONS = ("incoming", "outgoing")
MESSAGE_TYPES = ("text", "image", "audio", "document")
RECORD_ROLES = ("user", "assistant")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """Represents a row in the 'users' table.

    The id is the Telegram chat id of the user's private chat.
    """
    id: str
    language: Optional[str] = None
    google_oauth_state: Optional[str] = None
    google_access_token: Optional[str] = None
    google_refresh_token: Optional[str] = None
    google_access_token_expires_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_connected(self) -> bool:
        return bool(self.google_access_token)


@dataclass
class InferenceRecord:
    """Represents a row in the 'inference_records' table.

    One atomic step of the model-facing conversation of a message turn.
    Exactly one of ``content``, ``tool_call_json`` and ``tool_result_json``
    may be set.
    """
    user_message_id: str
    user_id: str
    order: int
    role: str
    content: Optional[str] = None
    tool_call_json: Optional[str] = None
    tool_result_json: Optional[str] = None
    id: str = field(default_factory=lambda: compose_id("inference_record"))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.role not in RECORD_ROLES:
            raise ValueError(f"Invalid inference record role: {self.role}")
        payloads = [
            p for p in (self.content, self.tool_call_json, self.tool_result_json)
            if p is not None
        ]
        if len(payloads) > 1:
            raise ValueError("An inference record carries at most one payload")

    @property
    def kind(self) -> str:
        """'tool_call', 'tool_result' or 'content'."""
        if self.tool_call_json is not None:
            return "tool_call"
        if self.tool_result_json is not None:
            return "tool_result"
        return "content"


@dataclass
class MessageTurn:
    """Represents a row in the 'messages' table.

    ``id`` is the Telegram message id, unique together with ``user_id``.
    ``inference_records`` is populated by queries that load the turn with
    its records and is not a column.
    """
    id: str
    user_id: str
    direction: str
    type: str
    text: Optional[str] = None
    file_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    inference_records: list[InferenceRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Invalid message direction: {self.direction}")
        if self.type not in MESSAGE_TYPES:
            raise ValueError(f"Invalid message type: {self.type}")


@dataclass
class IdeaFolder:
    """Represents a row in the 'idea_folders' table."""
    user_id: str
    name: str
    id: str = field(default_factory=lambda: compose_id("idea_folder"))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


@dataclass
class Idea:
    """Represents a row in the 'ideas' table."""
    user_id: str
    name: str
    description: Optional[str] = None
    folder_id: Optional[str] = None
    id: str = field(default_factory=lambda: compose_id("idea"))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
