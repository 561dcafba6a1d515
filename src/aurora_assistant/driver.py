"""Message handling: one incoming Telegram message to one persisted exchange.

``MessageHandler.handle`` loads the user and their recent history, runs the
assistant network on the message text, replies in the chat, and stores the
exchange. Any error aborts the whole thing before anything is written.
"""

from typing import Callable

from .config import Settings
from .core import build_exchange_records, flatten_turns
from .exceptions import MessageRejectedError
from .integrations.google_calendar import GoogleCalendarClient
from .integrations.google_oauth import GoogleOAuthClient, TokenSet
from .integrations.telegram import TelegramClient, TelegramMessage
from .integrations.transcription import Transcriber
from .logging import get_logger
from .network import AgentClients, NetworkState, create_assistant_network
from .storage import InferenceRecord, MessageTurn, Storage, User

logger = get_logger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't put together a reply. Please try again."


class TrackedAccessToken:
    """Token provider for calendar tools that remembers refreshes.

    Calling it returns a usable access token. When the OAuth client had to
    refresh, the new tokens are kept in ``refreshed`` until the caller
    persists them.
    """

    def __init__(self, oauth: GoogleOAuthClient):
        self.oauth = oauth
        self.refreshed: TokenSet | None = None

    def __call__(self) -> str:
        result = self.oauth.get_access_token()
        if result.refreshed:
            self.refreshed = result.tokens
        return result.token


class MessageHandler:
    """Runs the assistant for incoming chat messages."""

    def __init__(
        self,
        settings: Settings,
        storage: Storage,
        telegram: TelegramClient,
        clients: AgentClients,
        oauth_factory: Callable[[], GoogleOAuthClient],
        calendar: GoogleCalendarClient | None = None,
        transcriber: Transcriber | None = None,
    ):
        """Initialize the handler.

        Args:
            settings: Application settings (history limit, iteration cap, timezone).
            storage: Database for users, turns and inference records.
            telegram: Bot API client used to reply.
            clients: LLM clients for the router and each agent.
            oauth_factory: Creates an OAuth client; one is made per message
                because it holds that user's tokens.
            calendar: Calendar API client.
            transcriber: Voice note transcriber. Voice messages are rejected without one.
        """
        self.settings = settings
        self.storage = storage
        self.telegram = telegram
        self.clients = clients
        self.oauth_factory = oauth_factory
        self.calendar = calendar or GoogleCalendarClient()
        self.transcriber = transcriber

    def handle(self, message: TelegramMessage) -> str:
        """Process one message end to end and return the reply sent.

        Raises:
            MessageRejectedError: Non-private chat, unknown user or a message
                with neither text nor voice.
            AgentError: Any failure inside the network or its collaborators.
        """
        if not message.is_private:
            raise MessageRejectedError("Message is not from a private chat")

        chat_id = message.chat.id
        user = self.storage.get_user(str(chat_id))
        if user is None:
            raise MessageRejectedError("User not found")

        self.telegram.send_chat_action(chat_id, "typing")

        oauth = self.oauth_factory()
        oauth.set_tokens(
            user.google_access_token,
            user.google_access_token_expires_at,
            user.google_refresh_token,
        )
        access_token = TrackedAccessToken(oauth)

        turns = self.storage.find_message_turns_by_user(user.id, self.settings.history_limit)
        records = flatten_turns(turns)
        logger.debug(f"replaying {len(records)} inference records from {len(turns)} turns")

        text = self.get_message_text(message)

        network = create_assistant_network(
            clients=self.clients,
            storage=self.storage,
            user_id=user.id,
            calendar=self.calendar,
            access_token=access_token,
            inference_records=records,
            max_iterations=self.settings.max_iterations,
            timezone=self.settings.timezone,
        )
        state = network.run(text)

        reply = self.compose_reply(state)
        sent = self.telegram.send_message(chat_id, reply, parse_mode="HTML")

        incoming = MessageTurn(
            id=str(message.message_id),
            user_id=user.id,
            direction="incoming",
            type="audio" if message.voice is not None and not message.text else "text",
            text=text,
            file_id=message.voice.file_id if message.voice is not None else None,
        )
        outgoing = MessageTurn(
            id=str(sent["message_id"]),
            user_id=user.id,
            direction="outgoing",
            type="text",
            text=sent.get("text", reply),
        )
        self.storage.save_exchange(
            incoming, outgoing, self.exchange_records(incoming, user, text, state)
        )

        if access_token.refreshed is not None:
            self.storage.update_tokens(
                user.id,
                access_token.refreshed.access_token,
                access_token.refreshed.expires_at,
                refresh_token=access_token.refreshed.refresh_token,
            )

        logger.info(f"handled message {message.message_id} in {state.iteration} iterations")
        return reply

    def get_message_text(self, message: TelegramMessage) -> str:
        """Text of the message, transcribing voice notes.

        Raises:
            MessageRejectedError: If there is nothing to read.
        """
        if message.text:
            return message.text

        if message.voice is None or not message.voice.file_id:
            raise MessageRejectedError("Message is not a voice message")
        if self.transcriber is None:
            raise MessageRejectedError("Voice messages are not supported")

        file = self.telegram.get_file(message.voice.file_id)
        if not file.get("file_path"):
            raise MessageRejectedError("Failed to get voice message")

        audio = self.telegram.download_file(file["file_path"])
        return self.transcriber.transcribe(audio)

    @staticmethod
    def compose_reply(state: NetworkState) -> str:
        return state.last_assistant_text() or FALLBACK_REPLY

    @staticmethod
    def exchange_records(
        incoming: MessageTurn, user: User, text: str, state: NetworkState
    ) -> list[InferenceRecord]:
        return build_exchange_records(incoming.id, user.id, text, state.results)
