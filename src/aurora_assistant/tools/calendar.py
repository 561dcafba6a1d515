"""Google Calendar tools for the calendar agent.

Each tool asks the token provider for an access token at call time, so a
refresh happens lazily and only when a calendar call is actually made.
"""

from typing import Any, Callable

from pydantic import Field

from ..integrations.google_calendar import GoogleCalendarClient
from .base import BaseTool, ToolContext, ToolParams

TokenProvider = Callable[[], str]

RFC3339_HINT = (
    "Must be an RFC3339 timestamp with mandatory time zone offset, for example, "
    "2011-06-03T10:00:00-07:00, 2011-06-03T10:00:00Z. Milliseconds may be provided but are ignored."
)


class CalendarTool(BaseTool):
    """Base for tools that call the Calendar API on the user's behalf."""

    def __init__(self, calendar: GoogleCalendarClient, access_token: TokenProvider):
        self.calendar = calendar
        self.access_token = access_token


class GetCalendarsTool(CalendarTool):
    @property
    def name(self) -> str:
        return "get_calendars"

    @property
    def description(self) -> str:
        return "Returns all of the user's calendars"

    def execute(self, params: None, context: ToolContext) -> list[dict[str, Any]]:
        return self.calendar.get_calendars(self.access_token())


class GetEventsParams(ToolParams):
    calendar_id: str = Field(description="The ID of the calendar to get events from")
    time_min: str | None = Field(
        default=None,
        description=(
            "Lower bound (exclusive) for an event's end time to filter by. Optional. "
            f"{RFC3339_HINT} If time_max is set, time_min must be smaller than time_max."
        ),
    )
    time_max: str | None = Field(
        default=None,
        description=(
            "Upper bound (exclusive) for an event's start time to filter by. Optional. "
            f"{RFC3339_HINT} If time_min is set, time_max must be greater than time_min."
        ),
    )


class GetEventsTool(CalendarTool):
    params_model = GetEventsParams

    @property
    def name(self) -> str:
        return "get_events"

    @property
    def description(self) -> str:
        return "Returns all of the events for a given calendar"

    def execute(self, params: GetEventsParams, context: ToolContext) -> list[dict[str, Any]]:
        return self.calendar.get_events(
            self.access_token(),
            params.calendar_id,
            time_min=params.time_min,
            time_max=params.time_max,
        )


class EventInput(ToolParams):
    start: str = Field(
        description="The start time of the event. A combined date-time value (formatted according to RFC3339)."
    )
    end: str = Field(
        description="The end time of the event. A combined date-time value (formatted according to RFC3339)."
    )
    description: str = Field(description="The description of the event.")
    summary: str | None = Field(default=None, description="The title of the event.")


class CreateEventParams(ToolParams):
    calendar_id: str = Field(description="The ID of the calendar to create the event in")
    event: EventInput


class CreateEventTool(CalendarTool):
    params_model = CreateEventParams

    @property
    def name(self) -> str:
        return "create_event"

    @property
    def description(self) -> str:
        return "Creates a new event in the user's Google Calendar"

    def execute(self, params: CreateEventParams, context: ToolContext) -> dict[str, Any]:
        event: dict[str, Any] = {
            "start": {"dateTime": params.event.start},
            "end": {"dateTime": params.event.end},
            "description": params.event.description,
        }
        if params.event.summary:
            event["summary"] = params.event.summary
        return self.calendar.create_event(self.access_token(), params.calendar_id, event)


def create_calendar_tools(
    calendar: GoogleCalendarClient, access_token: TokenProvider
) -> list[BaseTool]:
    return [
        GetCalendarsTool(calendar, access_token),
        GetEventsTool(calendar, access_token),
        CreateEventTool(calendar, access_token),
    ]
