"""Aurora Assistant - a Telegram personal assistant built on a network of LLM agents.

A routing agent picks which specialist agent (executive, calendar, ideas)
handles each step of a message; results are persisted so later messages
see earlier exchanges.
"""

from .exceptions import (
    AgentError,
    ClientError,
    MessageRejectedError,
    RoutingError,
    ToolError,
    UnknownAgentError,
)
from .network import Agent, Network, NetworkState, RoutingAgent
from .types import (
    AgentResult,
    FinishReason,
    MessageRole,
    ToolCall,
    ToolResult,
    UnifiedMessage,
    UnifiedResponse,
)

__all__ = [
    # network
    "Agent",
    "Network",
    "NetworkState",
    "RoutingAgent",
    # types
    "AgentResult",
    "FinishReason",
    "MessageRole",
    "ToolCall",
    "ToolResult",
    "UnifiedMessage",
    "UnifiedResponse",
    # exceptions
    "AgentError",
    "ClientError",
    "MessageRejectedError",
    "RoutingError",
    "ToolError",
    "UnknownAgentError",
]
