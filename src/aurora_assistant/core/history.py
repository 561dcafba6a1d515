"""Conversion between persisted inference records and model messages.

Persisted records are the only cross-session memory the network has. This
module turns them into prompt turns (oldest first) and turns the results of
a finished run back into records with contiguous ``order`` values.
"""

import json
from typing import Any, Iterable

from ..storage.models import InferenceRecord, MessageTurn
from ..types import AgentResult, MessageRole, ToolCall, UnifiedMessage


def flatten_turns(turns: Iterable[MessageTurn]) -> list[InferenceRecord]:
    """Flatten turns loaded newest first into records ordered oldest first.

    Storage returns turns newest first and each turn's records newest first,
    so a single reversal of the flattened list gives replay order.
    """
    records = [record for turn in turns for record in turn.inference_records]
    records.reverse()
    return records


def record_to_message(record: InferenceRecord) -> UnifiedMessage:
    """Rebuild the prompt turn a record stands for.

    - tool-call payload -> assistant turn carrying that single tool call
    - tool-result payload -> tool turn answering the call id in the payload
    - anything else -> plain turn with the stored role and text
    """
    if record.tool_call_json is not None:
        tool_call = ToolCall.from_dict(json.loads(record.tool_call_json))
        return UnifiedMessage(role=MessageRole.ASSISTANT, tool_calls=[tool_call])

    if record.tool_result_json is not None:
        payload = json.loads(record.tool_result_json)
        tool = payload.get("tool") or {}
        content = payload.get("content")
        return UnifiedMessage(
            role=MessageRole.TOOL,
            content=content if isinstance(content, str) else json.dumps(content, default=str),
            tool_call_id=tool.get("id"),
            name=tool.get("name"),
        )

    return UnifiedMessage(role=MessageRole(record.role), content=record.content or "")


def records_to_messages(records: Iterable[InferenceRecord]) -> list[UnifiedMessage]:
    return [record_to_message(record) for record in records]


def message_to_record(
    message: UnifiedMessage,
    user_message_id: str,
    user_id: str,
    order: int,
) -> InferenceRecord:
    """Inverse of ``record_to_message``."""
    if message.tool_calls:
        return InferenceRecord(
            user_message_id=user_message_id,
            user_id=user_id,
            order=order,
            role="assistant",
            tool_call_json=json.dumps(message.tool_calls[0].to_dict()),
        )

    if message.role == MessageRole.TOOL:
        payload = {
            "tool": {"id": message.tool_call_id, "name": message.name, "arguments": {}},
            "content": _maybe_json(message.content),
        }
        return InferenceRecord(
            user_message_id=user_message_id,
            user_id=user_id,
            order=order,
            role="assistant",
            tool_result_json=json.dumps(payload, default=str),
        )

    role = "user" if message.role == MessageRole.USER else "assistant"
    return InferenceRecord(
        user_message_id=user_message_id,
        user_id=user_id,
        order=order,
        role=role,
        content=message.content or "",
    )


def result_to_records(
    result: AgentResult,
    user_message_id: str,
    user_id: str,
    start_order: int,
) -> list[InferenceRecord]:
    """Project one agent step into one or two records.

    The step's first output entry becomes the primary record. When that
    entry is a tool call, the result of that call follows it so the pair
    stays adjacent on replay. A step that never called the model has no
    output and yields nothing.
    """
    if not result.output:
        return []

    primary = result.output[0]
    if not primary.tool_calls:
        return [
            InferenceRecord(
                user_message_id=user_message_id,
                user_id=user_id,
                order=start_order,
                role="assistant",
                content=primary.content or "",
            )
        ]

    tool_call = primary.tool_calls[0]
    records = [
        InferenceRecord(
            user_message_id=user_message_id,
            user_id=user_id,
            order=start_order,
            role="assistant",
            tool_call_json=json.dumps(tool_call.to_dict()),
        )
    ]
    tool_result = next(
        (tr for tr in result.tool_results if tr.tool_call.id == tool_call.id), None
    )
    if tool_result is not None:
        records.append(
            InferenceRecord(
                user_message_id=user_message_id,
                user_id=user_id,
                order=start_order + 1,
                role="assistant",
                tool_result_json=json.dumps(tool_result.to_dict(), default=str),
            )
        )
    return records


def build_exchange_records(
    user_message_id: str,
    user_id: str,
    text: str,
    results: Iterable[AgentResult],
) -> list[InferenceRecord]:
    """Records for a whole exchange: the user turn at order 0, then each step.

    Orders are contiguous and follow the order the steps ran in.
    """
    records = [
        InferenceRecord(
            user_message_id=user_message_id,
            user_id=user_id,
            order=0,
            role="user",
            content=text,
        )
    ]
    for result in results:
        records.extend(
            result_to_records(result, user_message_id, user_id, start_order=len(records))
        )
    return records


def _maybe_json(content: str | None) -> Any:
    if content is None:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return content
