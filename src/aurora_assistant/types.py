"""Unified types for the assistant.

These types provide a provider-agnostic interface for LLM interactions and
for the results agents produce inside a network run. All clients convert
their provider-specific formats to/from these types.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class MessageRole(Enum):
    """Role of a message in the conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(Enum):
    """Reason why the model stopped generating."""
    STOP = "stop"
    TOOL_USE = "tool_use"
    LENGTH = "length"
    ERROR = "error"


@dataclass
class ToolCall:
    """A tool call requested by the model."""
    id: str
    name: str
    arguments: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCall":
        return cls(
            id=data["id"],
            name=data["name"],
            arguments=data.get("arguments") or {},
        )


@dataclass
class UsageStats:
    """Token usage statistics."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class UnifiedMessage:
    """A message in the conversation history.

    This is the canonical message format used throughout the network.
    Each LLM client converts to/from this format internally.

    Attributes:
        role: The role of the message sender
        content: Text content of the message (optional for tool calls)
        tool_calls: List of tool calls (only for assistant messages)
        tool_call_id: ID of the tool call this message responds to (only for tool role)
        name: Name of the tool (only for tool role)
    """
    role: MessageRole
    content: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None

    @property
    def is_text(self) -> bool:
        return self.content is not None and not self.tool_calls

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary representation."""
        result: dict[str, Any] = {"role": self.role.value}
        if self.content is not None:
            result["content"] = self.content
        if self.tool_calls:
            result["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            result["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            result["name"] = self.name
        return result


@dataclass
class UnifiedResponse:
    """Response from an LLM provider.

    Attributes:
        message: The assistant's response message
        finish_reason: Why the model stopped generating
        usage: Token usage statistics (optional)
        raw: Raw text of the provider response, empty when the model was not called
    """
    message: UnifiedMessage
    finish_reason: FinishReason
    usage: UsageStats | None = None
    raw: str = ""


# ==================== network run types ====================


@dataclass
class ToolResult:
    """The outcome of one executed tool call.

    ``content`` is whatever the tool handler returned. It is kept as data so
    it can be persisted verbatim and only serialized when shown to a model.
    """
    tool_call: ToolCall
    content: Any = None

    def to_message(self) -> UnifiedMessage:
        """Render the result as a tool-role message for the model."""
        return UnifiedMessage(
            role=MessageRole.TOOL,
            content=serialize_tool_content(self.content),
            tool_call_id=self.tool_call.id,
            name=self.tool_call.name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"tool": self.tool_call.to_dict(), "content": self.content}


def serialize_tool_content(content: Any) -> str:
    """Serialize tool output to the string form the model consumes."""
    if isinstance(content, str):
        return content
    return json.dumps(content, default=str)


@dataclass
class AgentResult:
    """Everything one agent invocation produced.

    Attributes:
        agent_name: Name of the agent that ran
        output: Messages produced by the model, text first then tool calls
        tool_results: Results of the tool calls in ``output``, in call order
        prompt: Messages that were sent to the model
        raw: Raw model output, empty when the model was not called
        formatter: Optional projection used instead of the default ``format``
    """
    agent_name: str
    output: list[UnifiedMessage] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)
    prompt: list[UnifiedMessage] = field(default_factory=list)
    raw: str = ""
    formatter: Callable[["AgentResult"], list[UnifiedMessage]] | None = None

    def with_formatter(
        self, formatter: Callable[["AgentResult"], list[UnifiedMessage]]
    ) -> "AgentResult":
        self.formatter = formatter
        return self

    def format(self) -> list[UnifiedMessage]:
        """Project the result into history messages for later agents."""
        if self.formatter is not None:
            return self.formatter(self)
        return default_format(self)

    @property
    def tool_calls(self) -> list[ToolCall]:
        return [tc for msg in self.output for tc in (msg.tool_calls or [])]


def default_format(result: AgentResult) -> list[UnifiedMessage]:
    """Output messages followed by their tool results."""
    return list(result.output) + [tr.to_message() for tr in result.tool_results]
