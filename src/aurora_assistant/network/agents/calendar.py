"""Calendar agent factory.

Creates the agent that reads and creates Google Calendar events.
"""

from ...clients.base import BaseLLMClient
from ...integrations.google_calendar import GoogleCalendarClient
from ...tools.calendar import TokenProvider, create_calendar_tools
from ..agent import Agent
from ..prompts import format_calendar_prompt

CALENDAR_AGENT_NAME = "Google Calendar agent"


def create_calendar_agent(
    client: BaseLLMClient,
    calendar: GoogleCalendarClient,
    access_token: TokenProvider,
    timezone: str,
) -> Agent:
    """Create the calendar agent.

    The system prompt is rendered on every run so it always carries the
    current date and weekday.

    Args:
        client: LLM client for the agent.
        calendar: Calendar API client.
        access_token: Returns a valid Google access token for the user.
        timezone: Timezone label shown to the model.

    Returns:
        Configured calendar Agent.
    """
    return Agent(
        name=CALENDAR_AGENT_NAME,
        description="Manages Google Calendar events",
        system=lambda network: format_calendar_prompt(timezone),
        client=client,
        tools=create_calendar_tools(calendar, access_token),
    )
