"""OpenAI chat-completions client.

Each agent role gets its own ``OpenAIClient`` carrying the role's model and
request options from settings and config.yaml. Unified messages and tools
are converted to the chat-completions format here, and SDK errors are
mapped onto the assistant's ``ClientError`` family.
"""

import json
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

import openai
from openai import OpenAI

from ..exceptions import (
    AuthenticationError,
    ClientError,
    InvalidResponseError,
    ProviderUnavailableError,
    RateLimitError,
)
from ..logging import get_logger
from ..types import (
    FinishReason,
    MessageRole,
    ToolCall,
    UnifiedMessage,
    UnifiedResponse,
    UsageStats,
)
from .base import BaseLLMClient, ToolChoice, retry_transient

if TYPE_CHECKING:
    from ..tools.base import BaseTool

logger = get_logger(__name__)

# request options a role may set under llm: / agents.<role>: in config.yaml
REQUEST_OPTIONS = frozenset(
    {
        "temperature",
        "top_p",
        "max_tokens",
        "seed",
        "presence_penalty",
        "frequency_penalty",
        "parallel_tool_calls",
    }
)

FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "tool_calls": FinishReason.TOOL_USE,
    "length": FinishReason.LENGTH,
}


class OpenAIClient(BaseLLMClient):
    """Chat-completions client for one agent role."""

    def __init__(
        self,
        api_key: str | None,
        model: str,
        client_config: dict[str, Any] | None = None,
        sdk: OpenAI | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: OpenAI API key.
            model: Model used for every request of this role.
            client_config: Request options, see ``REQUEST_OPTIONS``.
            sdk: Preconfigured SDK client, mainly for tests.

        Raises:
            ValueError: If ``client_config`` holds an unknown option.
        """
        super().__init__(model, client_config)
        unknown = sorted(set(self.client_config) - REQUEST_OPTIONS)
        if unknown:
            raise ValueError(f"Unsupported options for model {model}: {', '.join(unknown)}")
        self.sdk = sdk or OpenAI(api_key=api_key)

    @retry_transient()
    def generate(
        self,
        messages: list[UnifiedMessage],
        tools: list["BaseTool"] | None = None,
        tool_choice: ToolChoice = "auto",
    ) -> UnifiedResponse:
        request = self.build_request(messages, tools, tool_choice)
        logger.debug(
            f"{self.model}: {len(messages)} messages, {len(tools or [])} tools, tool_choice={tool_choice}"
        )
        with openai_errors():
            completion = self.sdk.chat.completions.create(**request)
        return parse_completion(completion)

    def build_request(
        self,
        messages: list[UnifiedMessage],
        tools: list["BaseTool"] | None,
        tool_choice: ToolChoice,
    ) -> dict[str, Any]:
        """Keyword arguments for ``chat.completions.create``.

        When a tool call is forced the model is asked for a single call
        unless the role configured ``parallel_tool_calls`` itself.
        """
        request: dict[str, Any] = {
            **self.client_config,
            "model": self.model,
            "messages": [to_openai_message(m) for m in messages],
        }
        if not tools:
            request.pop("parallel_tool_calls", None)
            return request

        request["tools"] = [tool.to_schema() for tool in tools]
        request["tool_choice"] = tool_choice
        if tool_choice == "required":
            request.setdefault("parallel_tool_calls", False)
        return request


@contextmanager
def openai_errors() -> Iterator[None]:
    """Re-raise SDK errors as ``ClientError`` subclasses."""
    try:
        yield
    except openai.AuthenticationError as e:
        raise AuthenticationError(f"OpenAI rejected the API key: {e}") from e
    except openai.RateLimitError as e:
        raise RateLimitError("OpenAI rate limit exceeded", retry_after=_retry_after(e)) from e
    except (openai.APIConnectionError, openai.InternalServerError) as e:
        raise ProviderUnavailableError(f"OpenAI API unavailable: {e}") from e
    except openai.OpenAIError as e:
        raise ClientError(f"OpenAI request failed: {e}") from e


def _retry_after(error: openai.APIStatusError) -> float | None:
    value = error.response.headers.get("retry-after")
    try:
        return float(value) if value else None
    except ValueError:
        return None


def parse_completion(completion: Any) -> UnifiedResponse:
    """Convert a ``ChatCompletion`` into a unified response.

    Raises:
        InvalidResponseError: If the completion has no choices or a tool
            call carries arguments that are not JSON.
    """
    try:
        choice = completion.choices[0]
        tool_calls = [
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=json.loads(call.function.arguments or "{}"),
            )
            for call in choice.message.tool_calls or []
        ]
    except (IndexError, AttributeError, ValueError) as e:
        raise InvalidResponseError(f"Unreadable chat completion: {e}") from e

    usage = None
    if completion.usage is not None:
        usage = UsageStats(
            prompt_tokens=completion.usage.prompt_tokens,
            completion_tokens=completion.usage.completion_tokens,
            total_tokens=completion.usage.total_tokens,
        )

    return UnifiedResponse(
        message=UnifiedMessage(
            role=MessageRole.ASSISTANT,
            content=choice.message.content,
            tool_calls=tool_calls or None,
        ),
        finish_reason=FINISH_REASONS.get(choice.finish_reason, FinishReason.STOP),
        usage=usage,
        raw=completion.model_dump_json(),
    )


def to_openai_message(message: UnifiedMessage) -> dict[str, Any]:
    """One unified message in chat-completions format."""
    if message.role == MessageRole.TOOL:
        return {"role": "tool", "tool_call_id": message.tool_call_id, "content": message.content}

    entry: dict[str, Any] = {"role": message.role.value, "content": message.content}
    if message.role == MessageRole.ASSISTANT and message.tool_calls:
        entry["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
            }
            for call in message.tool_calls
        ]
    return entry
