"""LLM clients.

Agents depend on ``BaseLLMClient`` only; ``OpenAIClient`` is the
implementation wired in by ``AgentClients.from_settings``.
"""

from .base import BaseLLMClient, RetryPolicy, ToolChoice, retry_transient
from .openai import OpenAIClient

__all__ = [
    "BaseLLMClient",
    "OpenAIClient",
    "RetryPolicy",
    "ToolChoice",
    "retry_transient",
]
