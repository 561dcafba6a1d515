"""Chat-facing behavior outside the agent network.

Handles the /start command, gates messages from users who have not
connected Google Calendar, and runs accepted messages through the
message handler.
"""

from ..exceptions import AgentError, IntegrationError, MessageRejectedError
from ..integrations.telegram import TelegramMessage, url_button_markup
from ..logging import get_logger
from ..storage import User
from .services import BotServices

logger = get_logger(__name__)

GREETING = (
    "Hi! I'm Aurora, your personal AI assistant. I can manage your events and quickly "
    "store your ideas right in the Telegram chat. Connect Google Calendar using the button below"
)
CONNECT_BUTTON = "Connect Google Calendar"
ALREADY_REGISTERED = "You are already registered"
CONNECT_FIRST = "Please connect your Google Calendar first using /start command."
CALENDAR_CONNECTED = "Google Calendar connected successfully! Start chatting =D"
ERROR_REPLY = "Something went wrong while handling your message. Please try again later."


def handle_start_command(services: BotServices, message: TelegramMessage) -> None:
    """Register the chat and send the Google Calendar connect link."""
    chat_id = message.chat.id
    user = services.storage.get_user(str(chat_id))

    if user is not None and user.is_connected:
        services.telegram.send_message(chat_id, ALREADY_REGISTERED, parse_mode=None)
        return

    auth = services.oauth_factory().generate_auth_url()
    if user is None:
        language = message.from_user.language_code if message.from_user else None
        services.storage.create_user(
            User(id=str(chat_id), language=language, google_oauth_state=auth.state)
        )
    else:
        services.storage.set_oauth_state(user.id, auth.state)

    services.telegram.send_message(
        chat_id,
        GREETING,
        parse_mode=None,
        reply_markup=url_button_markup(CONNECT_BUTTON, auth.url),
    )


def accept_message(services: BotServices, message: TelegramMessage) -> bool:
    """Whether a text or voice message should go to the network.

    Users without Google tokens get a reminder instead.
    """
    user = services.storage.get_user(str(message.chat.id))
    if user is None or not user.is_connected:
        services.telegram.send_message(message.chat.id, CONNECT_FIRST, parse_mode=None)
        return False
    return True


def process_message(services: BotServices, message: TelegramMessage) -> None:
    """Background task body: run the handler and report failures to the chat."""
    try:
        services.handler.handle(message)
    except MessageRejectedError as e:
        logger.warning(f"message {message.message_id} rejected: {e}")
    except AgentError as e:
        logger.exception(f"message {message.message_id} failed: {e}")
        _send_error_reply(services, message.chat.id)


def _send_error_reply(services: BotServices, chat_id: int) -> None:
    try:
        services.telegram.send_message(chat_id, ERROR_REPLY, parse_mode=None)
    except IntegrationError as e:
        logger.error(f"could not deliver error reply to {chat_id}: {e}")
