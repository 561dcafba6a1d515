"""Google OAuth 2.0 client for the Calendar scopes.

Holds the tokens of one user. ``get_access_token`` hands out the current
access token and refreshes it when it is close to expiry; the returned
``AccessToken`` says whether a refresh happened so the caller can persist
the new tokens.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import httpx

from ..exceptions import CredentialError, IntegrationError
from ..logging import get_logger

logger = get_logger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.freebusy",
    "https://www.googleapis.com/auth/calendar.settings.readonly",
    "https://www.googleapis.com/auth/calendar.events.freebusy",
    "https://www.googleapis.com/auth/calendar.app.created",
    "https://www.googleapis.com/auth/calendar.calendarlist.readonly",
    "https://www.googleapis.com/auth/calendar.calendars.readonly",
    "https://www.googleapis.com/auth/calendar.events.public.readonly",
]

# access tokens this close to expiry are refreshed before use
EXPIRY_BUFFER = timedelta(seconds=30)


@dataclass
class AuthUrl:
    url: str
    state: str


@dataclass
class TokenSet:
    """Tokens returned by the token endpoint.

    ``refresh_token`` is only present on a code exchange.
    """
    access_token: str
    expires_at: datetime
    refresh_token: str | None = None


@dataclass
class AccessToken:
    """Result of ``get_access_token``.

    Attributes:
        token: A usable access token
        refreshed: True when the token was obtained through a refresh
        tokens: The new token set when ``refreshed`` is True
    """
    token: str
    refreshed: bool = False
    tokens: TokenSet | None = None


class GoogleOAuthClient:
    """OAuth client for one user's Google Calendar access."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        access_token: str | None = None,
        refresh_token: str | None = None,
        expires_at: datetime | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.expires_at = expires_at
        self.http = http_client or httpx.Client(timeout=30.0)

    def generate_auth_url(self) -> AuthUrl:
        """Build the consent URL with a fresh random ``state``."""
        state = str(uuid.uuid4())
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "access_type": "offline",
            "scope": " ".join(SCOPES),
            "include_granted_scopes": "true",
            "response_type": "code",
            "state": state,
        }
        return AuthUrl(url=f"{AUTH_URL}?{urlencode(params)}", state=state)

    def exchange_code(self, code: str) -> TokenSet:
        """Exchange an authorization code for tokens.

        Raises:
            IntegrationError: If Google rejects the code.
        """
        tokens = self._request_tokens(
            {
                "grant_type": "authorization_code",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            action="exchange Google OAuth code",
        )
        self.set_tokens(tokens.access_token, tokens.expires_at, tokens.refresh_token)
        return tokens

    def refresh_access_token(self, refresh_token: str) -> TokenSet:
        """Obtain a new access token. The refresh token itself is kept.

        Raises:
            IntegrationError: If Google rejects the refresh token.
        """
        tokens = self._request_tokens(
            {
                "grant_type": "refresh_token",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
            },
            action="refresh Google OAuth access token",
        )
        self.access_token = tokens.access_token
        self.expires_at = tokens.expires_at
        return tokens

    def get_access_token(self) -> AccessToken:
        """Return a usable access token, refreshing it when needed.

        Raises:
            CredentialError: If the token expired and there is no refresh token.
        """
        now = datetime.now(timezone.utc)
        if self.access_token and self.expires_at and self.expires_at > now + EXPIRY_BUFFER:
            return AccessToken(token=self.access_token)

        if not self.refresh_token:
            raise CredentialError("No refresh token available. User needs to authenticate.")

        logger.info("refreshing Google access token")
        tokens = self.refresh_access_token(self.refresh_token)
        return AccessToken(token=tokens.access_token, refreshed=True, tokens=tokens)

    def set_tokens(
        self,
        access_token: str | None,
        expires_at: datetime | None,
        refresh_token: str | None,
    ) -> None:
        self.access_token = access_token
        self.expires_at = _as_utc(expires_at)
        self.refresh_token = refresh_token

    def _request_tokens(self, form: dict[str, str], action: str) -> TokenSet:
        try:
            response = self.http.post(TOKEN_URL, data=form)
        except httpx.HTTPError as e:
            raise IntegrationError("google_oauth", f"Failed to {action}: {e}") from e
        if response.status_code != 200:
            raise IntegrationError(
                "google_oauth",
                f"Failed to {action}: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            return TokenSet(
                access_token=data["access_token"],
                expires_at=datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"])),
                refresh_token=data.get("refresh_token"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise IntegrationError(
                "google_oauth",
                f"Failed to {action}: unreadable token response",
                status_code=response.status_code,
            ) from e


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
