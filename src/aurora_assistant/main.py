"""Main entry point for the assistant CLI.

Subcommands:
    serve    run the webhook server
    init-db  create the database tables
    chat     talk to the agent network from the terminal as a stored user
"""

import argparse
import sys

from .config import Settings, get_settings, load_yaml_config
from .core import flatten_turns
from .driver import TrackedAccessToken
from .exceptions import (
    AgentError,
    AuthenticationError,
    ProviderUnavailableError,
    RateLimitError,
)
from .integrations.google_calendar import GoogleCalendarClient
from .integrations.google_oauth import GoogleOAuthClient
from .logging import setup_logging
from .network import AgentClients, create_assistant_network
from .storage import Storage


def _start_server(host: str, port: int) -> None:
    """Start the API server."""
    import uvicorn

    from .api import app

    print(f"Starting webhook server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


def _init_db(settings: Settings) -> None:
    Storage(settings.database_path).create_all_tables()
    print(f"Database ready at {settings.database_path}")


def run_chat(settings: Settings, user_id: str) -> None:
    """Run the interactive chat loop for a stored user.

    Each line is routed through a fresh network seeded with the user's
    persisted history, the same way a Telegram message is. Nothing is sent
    to Telegram and nothing is persisted.
    """
    storage = Storage(settings.database_path)
    user = storage.get_user(user_id)
    if user is None:
        print(f"Error: user {user_id} not found. Send /start to the bot first.")
        sys.exit(1)

    try:
        settings.require("openai_api_key")
        clients = AgentClients.from_settings(settings, load_yaml_config())
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    oauth = GoogleOAuthClient(
        client_id=settings.google_oauth_client_id or "",
        client_secret=settings.google_oauth_client_secret or "",
        redirect_uri=settings.google_oauth_redirect_uri or "",
    )
    oauth.set_tokens(
        user.google_access_token,
        user.google_access_token_expires_at,
        user.google_refresh_token,
    )
    access_token = TrackedAccessToken(oauth)
    calendar = GoogleCalendarClient()

    print(f"Aurora chat for user {user_id}. Type 'exit' to quit.")
    print("-" * 50)

    while True:
        try:
            user_input = input("You: ")
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break

        if user_input.lower() in ("exit", "quit"):
            print("Goodbye!")
            break

        if not user_input.strip():
            continue

        records = flatten_turns(
            storage.find_message_turns_by_user(user.id, settings.history_limit)
        )
        network = create_assistant_network(
            clients=clients,
            storage=storage,
            user_id=user.id,
            calendar=calendar,
            access_token=access_token,
            inference_records=records,
            max_iterations=settings.max_iterations,
            timezone=settings.timezone,
        )

        try:
            state = network.run(user_input)
            print(f"Aurora: {state.last_assistant_text() or '(no reply)'}")
        except AuthenticationError as e:
            print(f"Authentication error: {e}")
            print("Please check your API key.")
        except RateLimitError as e:
            print(f"Rate limit exceeded: {e}")
            print("Please wait a moment and try again.")
        except ProviderUnavailableError as e:
            print(f"Provider unavailable: {e}")
            print("Please try again later.")
        except AgentError as e:
            print(f"Agent error: {e}")

    if access_token.refreshed is not None:
        storage.update_tokens(
            user.id,
            access_token.refreshed.access_token,
            access_token.refreshed.expires_at,
        )


def main():
    """Main entry point for the assistant CLI."""
    parser = argparse.ArgumentParser(description="Aurora personal assistant")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (also settable via AURORA_LOG_LEVEL env var)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the webhook server")
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the API server (default: 8000)"
    )
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for the API server (default: 127.0.0.1)"
    )

    subparsers.add_parser("init-db", help="Create the database tables")

    chat = subparsers.add_parser("chat", help="Chat with the agent network as a stored user")
    chat.add_argument("user_id", help="Telegram chat id of a registered user")

    args = parser.parse_args()

    # setup logging early
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level)

    if args.command == "serve":
        _start_server(args.host, args.port)
    elif args.command == "init-db":
        _init_db(settings)
    elif args.command == "chat":
        run_chat(settings, args.user_id)


if __name__ == "__main__":
    main()
