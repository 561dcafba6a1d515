"""Core agent components.

- PromptBuilder: resolves system prompts and builds messages
- ToolExecutor: validates and dispatches tool calls
- history: converts persisted inference records to and from model messages
"""

from .history import (
    build_exchange_records,
    flatten_turns,
    message_to_record,
    record_to_message,
    records_to_messages,
    result_to_records,
)
from .prompt_builder import PromptBuilder, SystemPrompt
from .tool_executor import ToolExecutor

__all__ = [
    "PromptBuilder",
    "SystemPrompt",
    "ToolExecutor",
    "build_exchange_records",
    "flatten_turns",
    "message_to_record",
    "record_to_message",
    "records_to_messages",
    "result_to_records",
]
