"""Agent definition and single-step execution.

An agent is a named bundle of a system prompt, a tool set and a model
client. One ``run`` is one model call plus the execution of the tool calls
in that response. Agents keep nothing between runs; everything a later step
needs flows through the network state.
"""

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..clients.base import BaseLLMClient, ToolChoice
from ..core import PromptBuilder, SystemPrompt, ToolExecutor
from ..logging import get_logger
from ..tools.base import BaseTool, ToolContext
from ..types import AgentResult, MessageRole, ToolCall, UnifiedMessage

if TYPE_CHECKING:
    from .network import Network, NetworkState

logger = get_logger(__name__)


@dataclass
class AgentInvocation:
    """What an agent is about to send to its model.

    ``before_invoke`` may rewrite ``prompt`` and ``history`` or set ``stop``
    to skip the model call entirely.

    Attributes:
        user_input: The message the network is running for
        prompt: System prompt followed by the user's input
        history: Formatted results of earlier steps in this run
        network: The active network, if any
        state: The active run state, if any
        stop: Skip the model call when True
    """
    user_input: str
    prompt: list[UnifiedMessage]
    history: list[UnifiedMessage] = field(default_factory=list)
    network: "Network | None" = None
    state: "NetworkState | None" = None
    stop: bool = False

    @property
    def messages(self) -> list[UnifiedMessage]:
        return self.prompt + self.history


class Agent:
    """An LLM-bound unit with its own system prompt and tools.

    Subclasses customize a run through two stages, both identity here:

    - ``before_invoke(invocation)`` runs before the model is called
    - ``after_invoke(result)`` runs after tools have executed

    ``select_tool_calls`` decides which of the requested tool calls run.
    """

    tool_choice: ToolChoice = "auto"

    def __init__(
        self,
        name: str,
        description: str,
        system: SystemPrompt,
        client: BaseLLMClient,
        tools: list[BaseTool] | None = None,
    ):
        """Initialize an agent.

        Args:
            name: Unique name within a network; routing refers to agents by it.
            description: Shown to the routing agent to help it choose.
            system: System prompt, or a callable of the network producing one.
            client: LLM client used for this agent's model calls.
            tools: Tools the model may call.
        """
        self.name = name
        self.description = description
        self.client = client
        self.prompt_builder = PromptBuilder(system)
        self.tool_executor = ToolExecutor(tools or [], owner=name)

    @property
    def tools(self) -> list[BaseTool]:
        return list(self.tool_executor.tools.values())

    def before_invoke(self, invocation: AgentInvocation) -> AgentInvocation:
        return invocation

    def after_invoke(self, result: AgentResult) -> AgentResult:
        return result

    def select_tool_calls(self, tool_calls: list[ToolCall]) -> list[ToolCall]:
        """Tool calls of a model reply that get executed. All of them by default."""
        return tool_calls

    def run(
        self,
        user_input: str,
        network: "Network | None" = None,
        state: "NetworkState | None" = None,
    ) -> AgentResult:
        """Run one step of this agent.

        Tool and client errors propagate to the caller.
        """
        invocation = self.before_invoke(
            AgentInvocation(
                user_input=user_input,
                prompt=self.prompt_builder.build_prompt(user_input, network),
                history=state.format() if state is not None else [],
                network=network,
                state=state,
            )
        )

        if invocation.stop:
            logger.info(f"agent '{self.name}' stopped before calling the model")
            return self.after_invoke(
                AgentResult(agent_name=self.name, prompt=invocation.messages)
            )

        messages = invocation.messages
        logger.debug(f"agent '{self.name}' calling {self.client.model or 'model'} with {len(messages)} messages")
        response = self.client.generate(
            messages=messages,
            tools=self.tools or None,
            tool_choice=self.tool_choice,
        )
        output = split_output(response.message)

        context = ToolContext(network=network, state=state, agent=self)
        tool_calls = self.select_tool_calls(
            [tc for msg in output for tc in (msg.tool_calls or [])]
        )
        tool_results = self.tool_executor.execute_tool_calls(tool_calls, context)

        result = AgentResult(
            agent_name=self.name,
            output=output,
            tool_results=tool_results,
            prompt=messages,
            raw=response.raw or json.dumps(response.message.to_dict()),
        )
        return self.after_invoke(result)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', tools={len(self.tool_executor.tools)})"


def split_output(message: UnifiedMessage) -> list[UnifiedMessage]:
    """Split a model message into a text entry and a tool-call entry.

    The text entry comes first. A message with neither text nor tool calls
    still yields an empty text entry so every model call produces output.
    """
    output: list[UnifiedMessage] = []
    if message.content or not message.tool_calls:
        output.append(UnifiedMessage(role=MessageRole.ASSISTANT, content=message.content or ""))
    if message.tool_calls:
        output.append(UnifiedMessage(role=MessageRole.ASSISTANT, tool_calls=list(message.tool_calls)))
    return output
