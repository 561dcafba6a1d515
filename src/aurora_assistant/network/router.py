"""Routing agent.

The router is an agent whose only tools are ``select_agent`` and ``done``.
It is forced to call a tool on every turn, and the first tool it calls
decides what happens next in the network loop.
"""

import json
from typing import TYPE_CHECKING

from pydantic import Field

from ..clients.base import BaseLLMClient, ToolChoice
from ..clients.openai import to_openai_message
from ..core import records_to_messages
from ..exceptions import NetworkContextError, UnknownAgentError
from ..logging import get_logger
from ..tools.base import BaseTool, ToolContext, ToolParams
from ..types import AgentResult, MessageRole, ToolCall, UnifiedMessage
from .agent import Agent, AgentInvocation
from .network import INFERENCE_RECORDS_KEY
from .prompts import format_router_prompt

if TYPE_CHECKING:
    from .network import Network, NetworkState

logger = get_logger(__name__)

ROUTER_NAME = "Default routing agent"


class SelectAgentParams(ToolParams):
    name: str = Field(description="The name of the agent that should handle the request")


class SelectAgentTool(BaseTool):
    """Returns the name of the agent to run next.

    The tool exists so the model answers with the agent name as valid JSON.
    """

    params_model = SelectAgentParams

    @property
    def name(self) -> str:
        return "select_agent"

    @property
    def description(self) -> str:
        return "Select an agent to handle the input, based off of the current conversation"

    def execute(self, params: SelectAgentParams, context: ToolContext) -> str:
        network = context.network
        if network is None:
            raise NetworkContextError()

        agent = network.get_agent(params.name)
        if agent is None:
            raise UnknownAgentError(params.name, list(network.agents))
        return agent.name


class DoneTool(BaseTool):
    """Signals that the last message is ready to be sent to the user."""

    @property
    def name(self) -> str:
        return "done"

    @property
    def description(self) -> str:
        return (
            "Finalize the conversation when a message contains a final and "
            "formatted text response for the user."
        )

    def execute(self, params: None, context: ToolContext) -> None:
        return None


def router_system_prompt(network: "Network | None") -> str:
    if network is None:
        raise NetworkContextError()
    return format_router_prompt(network.available_agents())


class RoutingAgent(Agent):
    """Agent that chooses the next agent to run, or ends the run."""

    tool_choice: ToolChoice = "required"

    def __init__(self, client: BaseLLMClient, name: str = ROUTER_NAME):
        super().__init__(
            name=name,
            description="Selects which agents to work on based off of the current prompt and input.",
            system=router_system_prompt,
            client=client,
            tools=[SelectAgentTool(), DoneTool()],
        )

    def before_invoke(self, invocation: AgentInvocation) -> AgentInvocation:
        """Collapse the whole conversation into one user message.

        The message holds a JSON array of OpenAI-format turns: persisted
        records, then the current user input, then this run's history.
        """
        if invocation.network is None:
            raise NetworkContextError()

        persisted = []
        if invocation.state is not None:
            persisted = invocation.state.kv.get(INFERENCE_RECORDS_KEY) or []

        transcript = [
            *(to_openai_message(m) for m in records_to_messages(persisted)),
            to_openai_message(invocation.prompt[1]),
            *(to_openai_message(m) for m in invocation.history),
        ]
        invocation.prompt = [
            invocation.prompt[0],
            UnifiedMessage(role=MessageRole.USER, content=json.dumps(transcript, default=str)),
        ]
        invocation.history = []
        return invocation

    def select_tool_calls(self, tool_calls: list[ToolCall]) -> list[ToolCall]:
        """Execute only the first requested call; any others are dropped."""
        return tool_calls[:1]

    def on_route(self, result: AgentResult) -> str | None:
        """Name of the agent to run next, or None when routing is over.

        Only the first tool result counts.
        """
        if not result.tool_results:
            logger.warning("router returned no tool call, ending the run")
            return None

        first = result.tool_results[0]
        if first.tool_call.name == "done":
            return None
        if isinstance(first.content, str):
            return first.content
        return None

    def route(
        self,
        user_input: str,
        network: "Network",
        state: "NetworkState",
    ) -> str | None:
        result = self.run(user_input, network, state)
        agent_name = self.on_route(result)
        logger.debug(f"router selected {agent_name!r}")
        return agent_name
