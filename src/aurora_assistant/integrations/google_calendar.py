"""Google Calendar REST API client.

Thin wrapper over the v3 endpoints the calendar agent needs. Every call takes
an access token so the caller decides when tokens get refreshed.
"""

from typing import Any
from urllib.parse import quote

import httpx

from ..exceptions import IntegrationError

BASE_URL = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarClient:
    """Client for the Google Calendar v3 API."""

    def __init__(self, http_client: httpx.Client | None = None, base_url: str = BASE_URL):
        self.http = http_client or httpx.Client(timeout=30.0)
        self.base_url = base_url.rstrip("/")

    def get_calendars(self, access_token: str) -> list[dict[str, Any]]:
        """Calendar list entries of the user."""
        data = self._request("GET", "/users/me/calendarList", access_token)
        return data.get("items", [])

    def get_user_settings(self, access_token: str) -> list[dict[str, Any]]:
        data = self._request("GET", "/users/me/settings", access_token)
        return data.get("items", [])

    def get_events(
        self,
        access_token: str,
        calendar_id: str,
        time_min: str | None = None,
        time_max: str | None = None,
    ) -> list[dict[str, Any]]:
        """Events of a calendar, optionally bounded by RFC3339 timestamps."""
        params = {}
        if time_min:
            params["timeMin"] = time_min
        if time_max:
            params["timeMax"] = time_max
        data = self._request(
            "GET", f"/calendars/{quote(calendar_id, safe='')}/events", access_token, params=params
        )
        return data.get("items", [])

    def get_event(self, access_token: str, calendar_id: str, event_id: str) -> dict[str, Any]:
        return self._request(
            "GET",
            f"/calendars/{quote(calendar_id, safe='')}/events/{quote(event_id, safe='')}",
            access_token,
        )

    def create_event(
        self, access_token: str, calendar_id: str, event: dict[str, Any]
    ) -> dict[str, Any]:
        """Insert an event. ``event`` is a Calendar API event resource."""
        return self._request(
            "POST", f"/calendars/{quote(calendar_id, safe='')}/events", access_token, json=event
        )

    def _request(
        self,
        method: str,
        path: str,
        access_token: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = self.http.request(
                method,
                f"{self.base_url}{path}",
                headers={"Authorization": f"Bearer {access_token}"},
                params=params,
                json=json,
            )
        except httpx.HTTPError as e:
            raise IntegrationError("google_calendar", str(e)) from e

        if response.is_error:
            raise IntegrationError(
                "google_calendar", response.text, status_code=response.status_code
            )
        try:
            return response.json()
        except ValueError as e:
            raise IntegrationError(
                "google_calendar", "unreadable response", status_code=response.status_code
            ) from e
