"""Ideas agent factory.

Creates the agent that stores and looks up the user's ideas.
"""

from ...clients.base import BaseLLMClient
from ...storage import Storage
from ...tools.ideas import create_ideas_tools
from ...types import AgentResult, UnifiedMessage, default_format
from ..agent import Agent
from ..prompts import IDEAS_PROMPT

IDEAS_AGENT_NAME = "Ideas agent"


def _skip_empty(result: AgentResult) -> list[UnifiedMessage]:
    """Hide a step that a hook stopped before the model was called.

    Only such steps have an empty ``raw``; after a model call ``raw`` holds
    the response, even when the reply text is empty.
    """
    if result.raw == "":
        return []
    return default_format(result)


class IdeasAgent(Agent):
    """Ideas agent whose steps without a model call leave no history.

    A step is stopped by setting ``stop`` in ``before_invoke``. Later agents
    in the run do not see it, while replies from the model are kept.
    """

    def after_invoke(self, result: AgentResult) -> AgentResult:
        return result.with_formatter(_skip_empty)


def create_ideas_agent(client: BaseLLMClient, storage: Storage, user_id: str) -> IdeasAgent:
    """Create the ideas agent.

    Args:
        client: LLM client for the agent.
        storage: Database holding ideas and folders.
        user_id: User whose ideas the tools operate on.

    Returns:
        Configured IdeasAgent.
    """
    return IdeasAgent(
        name=IDEAS_AGENT_NAME,
        description=(
            "An agent that manages the user's ideas. It can perform CRUD operations "
            "on the ideas and their folders."
        ),
        system=IDEAS_PROMPT,
        client=client,
        tools=create_ideas_tools(storage, user_id),
    )
