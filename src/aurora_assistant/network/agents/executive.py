"""Executive agent factory.

Creates the general-purpose assistant that writes the replies users see.
"""

from ...clients.base import BaseLLMClient
from ...core import records_to_messages
from ..agent import Agent, AgentInvocation
from ..network import INFERENCE_RECORDS_KEY
from ..prompts import EXECUTIVE_PROMPT

EXECUTIVE_AGENT_NAME = "Executive Director agent"


class ExecutiveAgent(Agent):
    """General assistant that sees the persisted conversation.

    Persisted records are spliced between the system prompt and the current
    user message so the model answers with the earlier exchanges in view.
    """

    def before_invoke(self, invocation: AgentInvocation) -> AgentInvocation:
        persisted = []
        if invocation.state is not None:
            persisted = invocation.state.kv.get(INFERENCE_RECORDS_KEY) or []

        system, user = invocation.prompt[0], invocation.prompt[-1]
        invocation.prompt = [system, *records_to_messages(persisted), user]
        return invocation


def create_executive_agent(client: BaseLLMClient) -> ExecutiveAgent:
    """Create the executive agent.

    Args:
        client: LLM client for the agent.

    Returns:
        Configured ExecutiveAgent with no tools.
    """
    return ExecutiveAgent(
        name=EXECUTIVE_AGENT_NAME,
        description=(
            "Responds to general inquiries and acts as a helpful personal assistant, "
            "orchestrates the outputs of other agents and provides final responses to the user."
        ),
        system=EXECUTIVE_PROMPT,
        client=client,
    )
