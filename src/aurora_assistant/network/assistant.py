"""Assembly of the assistant network for one user message."""

from dataclasses import dataclass

from ..clients import OpenAIClient
from ..clients.base import BaseLLMClient
from ..config import Settings
from ..integrations.google_calendar import GoogleCalendarClient
from ..storage import InferenceRecord, Storage
from ..tools.calendar import TokenProvider
from .agents import create_calendar_agent, create_executive_agent, create_ideas_agent
from .network import DEFAULT_MAX_ITERATIONS, INFERENCE_RECORDS_KEY, Network, NetworkState
from .router import RoutingAgent

NETWORK_NAME = "Project Aurora Network"


@dataclass
class AgentClients:
    """One LLM client per agent role."""
    router: BaseLLMClient
    executive: BaseLLMClient
    calendar: BaseLLMClient
    ideas: BaseLLMClient

    @classmethod
    def from_settings(cls, settings: Settings, yaml_config: dict | None = None) -> "AgentClients":
        """Create clients from settings, applying config.yaml overrides.

        ``llm`` holds client config shared by every agent; ``agents.<role>``
        may override the model and add client config for one role.
        """
        yaml_config = yaml_config or {}
        shared = {k: v for k, v in (yaml_config.get("llm") or {}).items() if k != "model"}
        overrides = yaml_config.get("agents") or {}

        def make(role: str, default_model: str) -> BaseLLMClient:
            role_config = dict(overrides.get(role) or {})
            model = role_config.pop("model", None) or default_model
            return OpenAIClient(
                api_key=settings.openai_api_key,
                model=model,
                client_config={**shared, **role_config},
            )

        return cls(
            router=make("router", settings.router_model),
            executive=make("executive", settings.executive_model),
            calendar=make("calendar", settings.calendar_model),
            ideas=make("ideas", settings.ideas_model),
        )


def create_assistant_network(
    clients: AgentClients,
    storage: Storage,
    user_id: str,
    calendar: GoogleCalendarClient,
    access_token: TokenProvider,
    inference_records: list[InferenceRecord] | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    timezone: str = "UTC+1 Europe/Berlin",
) -> Network:
    """Build a fresh network for one message of ``user_id``.

    ``inference_records`` are the persisted records, oldest first, replayed
    into the router transcript and the executive agent's prompt.
    """
    agents = [
        create_executive_agent(clients.executive),
        create_calendar_agent(clients.calendar, calendar, access_token, timezone),
        create_ideas_agent(clients.ideas, storage, user_id),
    ]
    return Network(
        name=NETWORK_NAME,
        agents=agents,
        router=RoutingAgent(clients.router),
        max_iterations=max_iterations,
        state=NetworkState({INFERENCE_RECORDS_KEY: list(inference_records or [])}),
    )
