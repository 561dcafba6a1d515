"""Shared test fixtures and configuration."""

from datetime import datetime, timedelta, timezone
from itertools import count
from unittest.mock import MagicMock

import pytest

from aurora_assistant.clients.base import BaseLLMClient
from aurora_assistant.storage import Storage, User
from aurora_assistant.types import (
    FinishReason,
    MessageRole,
    ToolCall,
    UnifiedMessage,
    UnifiedResponse,
    UsageStats,
)

_call_ids = count(1)


def text_response(content: str) -> UnifiedResponse:
    """Model response carrying plain text."""
    return UnifiedResponse(
        message=UnifiedMessage(role=MessageRole.ASSISTANT, content=content),
        finish_reason=FinishReason.STOP,
        usage=UsageStats(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


def tool_response(name: str, arguments: dict | None = None, call_id: str | None = None) -> UnifiedResponse:
    """Model response carrying a single tool call."""
    return UnifiedResponse(
        message=UnifiedMessage(
            role=MessageRole.ASSISTANT,
            tool_calls=[
                ToolCall(
                    id=call_id or f"call_{next(_call_ids)}",
                    name=name,
                    arguments=arguments or {},
                )
            ],
        ),
        finish_reason=FinishReason.TOOL_USE,
    )


def tool_calls_response(*calls: tuple[str, dict], content: str | None = None) -> UnifiedResponse:
    """Model response carrying several tool calls, optionally with text."""
    return UnifiedResponse(
        message=UnifiedMessage(
            role=MessageRole.ASSISTANT,
            content=content,
            tool_calls=[
                ToolCall(id=f"call_{next(_call_ids)}", name=name, arguments=arguments)
                for name, arguments in calls
            ],
        ),
        finish_reason=FinishReason.TOOL_USE,
    )


def select(agent_name: str) -> UnifiedResponse:
    """Router response selecting ``agent_name``."""
    return tool_response("select_agent", {"name": agent_name})


def done() -> UnifiedResponse:
    """Router response ending the run."""
    return tool_response("done")


def scripted_client(*responses: UnifiedResponse) -> MagicMock:
    """Mock LLM client returning ``responses`` in order."""
    client = MagicMock(spec=BaseLLMClient)
    client.model = "test-model"
    client.generate.side_effect = list(responses)
    return client


@pytest.fixture
def mock_client():
    """Create a mock LLM client."""
    client = MagicMock(spec=BaseLLMClient)
    client.model = "test-model"
    return client


@pytest.fixture
def storage(tmp_path):
    """Fresh SQLite database in a temporary directory."""
    db = Storage(str(tmp_path / "aurora.db"))
    db.create_all_tables()
    return db


@pytest.fixture
def connected_user(storage):
    """A registered user with valid Google tokens."""
    user = User(
        id="1001",
        google_access_token="access-token",
        google_refresh_token="refresh-token",
        google_access_token_expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )
    storage.create_user(user)
    return user


@pytest.fixture
def sample_tool_call():
    """Create a sample tool call."""
    return ToolCall(
        id="call_123",
        name="get_calendars",
        arguments={},
    )
