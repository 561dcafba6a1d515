"""Tests for unified types."""

from aurora_assistant.types import (
    AgentResult,
    FinishReason,
    MessageRole,
    ToolCall,
    ToolResult,
    UnifiedMessage,
    UnifiedResponse,
    default_format,
    serialize_tool_content,
)


class TestMessageRole:
    """Tests for MessageRole enum."""

    def test_enum_values(self):
        """Test that enum has expected values."""
        assert MessageRole.SYSTEM.value == "system"
        assert MessageRole.USER.value == "user"
        assert MessageRole.ASSISTANT.value == "assistant"
        assert MessageRole.TOOL.value == "tool"


class TestToolCall:
    """Tests for ToolCall dataclass."""

    def test_to_dict(self):
        tc = ToolCall(id="call_1", name="get_events", arguments={"calendar_id": "primary"})
        assert tc.to_dict() == {
            "id": "call_1",
            "name": "get_events",
            "arguments": {"calendar_id": "primary"},
        }

    def test_from_dict_defaults_missing_arguments(self):
        tc = ToolCall.from_dict({"id": "call_1", "name": "done"})
        assert tc.arguments == {}


class TestUnifiedMessage:
    """Tests for UnifiedMessage dataclass."""

    def test_text_message(self):
        msg = UnifiedMessage(role=MessageRole.ASSISTANT, content="Hello")
        assert msg.is_text
        assert msg.to_dict() == {"role": "assistant", "content": "Hello"}

    def test_tool_call_message_is_not_text(self, sample_tool_call):
        msg = UnifiedMessage(role=MessageRole.ASSISTANT, tool_calls=[sample_tool_call])
        assert not msg.is_text
        assert msg.to_dict()["tool_calls"][0]["name"] == "get_calendars"

    def test_empty_content_is_still_text(self):
        assert UnifiedMessage(role=MessageRole.ASSISTANT, content="").is_text


class TestUnifiedResponse:
    def test_raw_defaults_to_empty(self):
        response = UnifiedResponse(
            message=UnifiedMessage(role=MessageRole.ASSISTANT, content="hi"),
            finish_reason=FinishReason.STOP,
        )
        assert response.raw == ""
        assert response.usage is None


class TestToolResult:
    """Tests for ToolResult."""

    def test_to_message_serializes_structured_content(self, sample_tool_call):
        result = ToolResult(tool_call=sample_tool_call, content=[{"id": "primary"}])
        msg = result.to_message()

        assert msg.role == MessageRole.TOOL
        assert msg.tool_call_id == "call_123"
        assert msg.name == "get_calendars"
        assert msg.content == '[{"id": "primary"}]'

    def test_string_content_is_kept(self, sample_tool_call):
        result = ToolResult(tool_call=sample_tool_call, content="Ideas agent")
        assert result.to_message().content == "Ideas agent"

    def test_to_dict_payload(self, sample_tool_call):
        result = ToolResult(tool_call=sample_tool_call, content={"ok": True})
        assert result.to_dict() == {
            "tool": {"id": "call_123", "name": "get_calendars", "arguments": {}},
            "content": {"ok": True},
        }

    def test_none_content_serializes_to_null(self):
        assert serialize_tool_content(None) == "null"


class TestAgentResult:
    """Tests for AgentResult formatting."""

    def test_default_format_is_output_then_tool_results(self, sample_tool_call):
        call_msg = UnifiedMessage(role=MessageRole.ASSISTANT, tool_calls=[sample_tool_call])
        result = AgentResult(
            agent_name="Google Calendar agent",
            output=[call_msg],
            tool_results=[ToolResult(tool_call=sample_tool_call, content=[])],
        )

        formatted = result.format()

        assert formatted[0] is call_msg
        assert formatted[1].role == MessageRole.TOOL
        assert formatted == default_format(result)
        assert result.tool_calls == [sample_tool_call]

    def test_formatter_overrides_projection(self):
        result = AgentResult(
            agent_name="Ideas agent",
            output=[UnifiedMessage(role=MessageRole.ASSISTANT, content="hi")],
        )
        result.with_formatter(lambda r: [])
        assert result.format() == []
