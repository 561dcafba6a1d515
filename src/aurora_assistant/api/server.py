"""FastAPI server hosting the Telegram webhook and the Google OAuth callback."""

from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from ..config import get_settings
from ..exceptions import IntegrationError
from ..integrations.telegram import TelegramUpdate
from ..logging import get_logger
from .bot import CALENDAR_CONNECTED, accept_message, handle_start_command, process_message
from .services import BotServices

logger = get_logger(__name__)


def create_app(services: BotServices | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Prebuilt collaborators. When omitted they are built from
            settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = BotServices.from_settings(get_settings())
        yield

    app = FastAPI(
        title="Aurora Assistant",
        description="Telegram personal assistant backed by a network of LLM agents",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/telegram_webhook")
    def telegram_webhook(update: TelegramUpdate, request: Request, background_tasks: BackgroundTasks) -> dict:
        """Receive a Bot API update.

        Only private text and voice messages are acted on; everything else
        is acknowledged and dropped so Telegram does not redeliver it.
        """
        services: BotServices = request.app.state.services
        message = update.message
        if message is None:
            return {"ok": True}

        if message.command == "start":
            handle_start_command(services, message)
        elif message.is_command:
            logger.debug(f"ignoring unknown command {message.command!r}")
        elif message.text or message.voice is not None:
            if accept_message(services, message):
                background_tasks.add_task(process_message, services, message)
        return {"ok": True}

    @app.get("/googleoauth2", response_model=None)
    def google_oauth_callback(
        request: Request,
        code: str | None = None,
        state: str | None = None,
        error: str | None = None,
    ) -> PlainTextResponse | RedirectResponse:
        """Finish the OAuth flow started by /start."""
        services: BotServices = request.app.state.services

        if error:
            return PlainTextResponse(f"Google oauth error: {error}", status_code=400)
        if not code:
            return PlainTextResponse("Google oauth error: no code", status_code=400)
        if not state:
            return PlainTextResponse("Google oauth error: no state", status_code=400)

        user = services.storage.get_user_by_oauth_state(state)
        if user is None:
            return PlainTextResponse("Google oauth error: user not found", status_code=400)

        try:
            tokens = services.oauth_factory().exchange_code(code)
        except IntegrationError as e:
            logger.error(f"oauth code exchange failed for user {user.id}: {e}")
            return PlainTextResponse("Google oauth error: code exchange failed", status_code=400)

        services.storage.update_tokens(
            user.id,
            tokens.access_token,
            tokens.expires_at,
            refresh_token=tokens.refresh_token,
            clear_oauth_state=True,
        )
        logger.info(f"user {user.id} connected Google Calendar")

        services.telegram.send_message(user.id, CALENDAR_CONNECTED, parse_mode=None)
        return RedirectResponse(f"https://t.me/{services.bot_username or ''}")

    return app


app = create_app()
