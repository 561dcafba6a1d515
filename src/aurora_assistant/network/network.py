"""Network of agents and the routing loop.

The network owns the agent roster, the routing agent and the loop that
alternates "ask the router" and "run the chosen agent" until the router
signals completion or the iteration cap is reached.
"""

from typing import TYPE_CHECKING, Any

from ..exceptions import UnknownAgentError
from ..logging import get_logger
from ..types import AgentResult, MessageRole, UnifiedMessage
from .agent import Agent

if TYPE_CHECKING:
    from .router import RoutingAgent

logger = get_logger(__name__)

# state key holding the persisted inference records replayed into the run
INFERENCE_RECORDS_KEY = "inference_records"

DEFAULT_MAX_ITERATIONS = 5


class NetworkState:
    """Mutable state of one network run.

    Holds a key-value store, the ordered results of every agent step and
    the iteration counter. One instance per incoming message.
    """

    def __init__(self, kv: dict[str, Any] | None = None):
        self.kv: dict[str, Any] = dict(kv or {})
        self.results: list[AgentResult] = []
        self.iteration = 0

    def append_result(self, result: AgentResult) -> None:
        self.results.append(result)

    def format(self) -> list[UnifiedMessage]:
        """History of this run as seen by the next agent."""
        return [message for result in self.results for message in result.format()]

    @property
    def last_result(self) -> AgentResult | None:
        return self.results[-1] if self.results else None

    def last_assistant_text(self) -> str | None:
        """Most recent non-empty assistant text in the formatted history."""
        for message in reversed(self.format()):
            if message.role == MessageRole.ASSISTANT and message.is_text and message.content:
                return message.content
        return None


class Network:
    """Runs agents chosen by a routing agent over shared state."""

    def __init__(
        self,
        name: str,
        agents: list[Agent],
        router: "RoutingAgent",
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        state: NetworkState | None = None,
    ):
        """Initialize the network.

        Args:
            name: Display name, used in logs.
            agents: Roster of agents the router may select. Names must be unique.
            router: Routing agent deciding which agent runs next.
            max_iterations: Hard cap on agent invocations per run.
            state: Default state used by ``run`` when none is passed.

        Raises:
            ValueError: If two agents share a name or max_iterations is negative.
        """
        if max_iterations < 0:
            raise ValueError("max_iterations must be >= 0")

        self.name = name
        self.router = router
        self.max_iterations = max_iterations
        self.state = state or NetworkState()
        self.agents: dict[str, Agent] = {}
        for agent in agents:
            if agent.name in self.agents:
                raise ValueError(f"Duplicate agent name '{agent.name}' in network '{name}'")
            self.agents[agent.name] = agent

    def available_agents(self) -> list[Agent]:
        return list(self.agents.values())

    def get_agent(self, name: str) -> Agent | None:
        return self.agents.get(name)

    def run(self, user_input: str, state: NetworkState | None = None) -> NetworkState:
        """Route ``user_input`` through the network.

        The router runs at most ``max_iterations + 1`` times and agents at
        most ``max_iterations`` times. Reaching the cap ends the run with
        whatever output was produced last.

        Raises:
            UnknownAgentError: If the router selects an agent not in the roster.
        """
        state = state if state is not None else self.state
        logger.info(f"network '{self.name}' started with {len(self.agents)} agents")

        while True:
            agent_name = self.router.route(user_input, self, state)
            if agent_name is None:
                logger.info(f"router finished after {state.iteration} iterations")
                break

            if state.iteration >= self.max_iterations:
                logger.warning(
                    f"iteration cap ({self.max_iterations}) reached, "
                    f"router wanted '{agent_name}'"
                )
                break

            agent = self.get_agent(agent_name)
            if agent is None:
                raise UnknownAgentError(agent_name, list(self.agents))

            logger.info(f"iteration {state.iteration + 1}: running agent '{agent.name}'")
            state.append_result(agent.run(user_input, self, state))
            state.iteration += 1

        return state

    def __repr__(self) -> str:
        return f"Network(name='{self.name}', agents={list(self.agents)})"
