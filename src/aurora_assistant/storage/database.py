"""
SQLite storage for the assistant.

Provides Storage with the queries the bot needs: users and their OAuth
tokens, message turns with their inference records, and ideas with their
folders.

Uses a context-manager pattern for connection lifecycle so every public
method runs in its own transaction.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, Optional

from ..logging import get_logger
from .models import Idea, IdeaFolder, InferenceRecord, MessageTurn, User, utcnow

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    language TEXT,
    google_oauth_state TEXT,
    google_access_token TEXT,
    google_refresh_token TEXT,
    google_access_token_expires_at TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users(id),
    direction TEXT NOT NULL CHECK (direction IN ('incoming', 'outgoing')),
    type TEXT NOT NULL CHECK (type IN ('text', 'image', 'audio', 'document')),
    text TEXT,
    file_id TEXT,
    created_at TEXT NOT NULL,
    PRIMARY KEY (id, user_id)
);

CREATE TABLE IF NOT EXISTS inference_records (
    id TEXT PRIMARY KEY,
    user_message_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    "order" INTEGER NOT NULL,
    role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
    content TEXT,
    tool_call_json TEXT,
    tool_result_json TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (user_id, user_message_id, "order"),
    FOREIGN KEY (user_message_id, user_id) REFERENCES messages(id, user_id)
);

CREATE TABLE IF NOT EXISTS idea_folders (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS ideas (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    folder_id TEXT REFERENCES idea_folders(id),
    name TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT
);
"""


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class Storage:
    """Central handler for all SQLite operations.

    Usage:
        storage = Storage("aurora.db")
        storage.create_all_tables()
        storage.create_user(User(id="42"))
    """

    def __init__(self, db_file: str):
        self.db_file = db_file

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield a connection with foreign keys enabled.

        Commits on successful exit, rolls back on exception, and always
        closes the connection.
        """
        conn = sqlite3.connect(self.db_file)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            logger.exception("Database operation failed, transaction rolled back.")
            raise
        finally:
            conn.close()

    def create_all_tables(self) -> None:
        """Create all tables if they do not already exist."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"Database ready at {self.db_file}")

    # ----------------------------------------------------------------
    # Users
    # ----------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row) if row else None

    def get_user_by_oauth_state(self, state: str) -> Optional[User]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE google_oauth_state = ?", (state,)
            ).fetchone()
        return self._row_to_user(row) if row else None

    def create_user(self, user: User) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO users
                   (id, language, google_oauth_state, google_access_token,
                    google_refresh_token, google_access_token_expires_at, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    user.id, user.language, user.google_oauth_state,
                    user.google_access_token, user.google_refresh_token,
                    _ts(user.google_access_token_expires_at), _ts(user.created_at),
                ),
            )

    def set_oauth_state(self, user_id: str, state: Optional[str]) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE users SET google_oauth_state = ? WHERE id = ?", (state, user_id)
            )

    def update_tokens(
        self,
        user_id: str,
        access_token: str,
        expires_at: datetime,
        refresh_token: Optional[str] = None,
        clear_oauth_state: bool = False,
    ) -> None:
        """Store fresh Google tokens for a user.

        A refresh response carries no refresh token; the stored one is kept
        in that case.
        """
        assignments = ["google_access_token = ?", "google_access_token_expires_at = ?"]
        params: list[Any] = [access_token, _ts(expires_at)]
        if refresh_token is not None:
            assignments.append("google_refresh_token = ?")
            params.append(refresh_token)
        if clear_oauth_state:
            assignments.append("google_oauth_state = NULL")
        params.append(user_id)
        with self._get_connection() as conn:
            conn.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id = ?", params
            )

    # ----------------------------------------------------------------
    # Message turns and inference records
    # ----------------------------------------------------------------

    def find_message_turns_by_user(self, user_id: str, limit: int) -> list[MessageTurn]:
        """Return the user's latest message turns, newest first.

        Each turn carries its inference records ordered newest first
        (created_at, then order).
        """
        with self._get_connection() as conn:
            rows = conn.execute(
                """SELECT * FROM messages WHERE user_id = ?
                   ORDER BY created_at DESC, rowid DESC LIMIT ?""",
                (user_id, limit),
            ).fetchall()
            turns = [self._row_to_turn(r) for r in rows]
            for turn in turns:
                record_rows = conn.execute(
                    """SELECT * FROM inference_records
                       WHERE user_id = ? AND user_message_id = ?
                       ORDER BY created_at DESC, "order" DESC""",
                    (user_id, turn.id),
                ).fetchall()
                turn.inference_records = [self._row_to_record(r) for r in record_rows]
        return turns

    def insert_message_turn(self, turn: MessageTurn) -> None:
        with self._get_connection() as conn:
            self._insert_turn(conn, turn)

    def insert_inference_records(self, records: list[InferenceRecord]) -> None:
        with self._get_connection() as conn:
            self._insert_records(conn, records)

    def save_exchange(
        self,
        incoming: MessageTurn,
        outgoing: Optional[MessageTurn],
        records: list[InferenceRecord],
    ) -> None:
        """Persist a completed exchange in a single transaction."""
        with self._get_connection() as conn:
            self._insert_turn(conn, incoming)
            if outgoing is not None:
                self._insert_turn(conn, outgoing)
            self._insert_records(conn, records)
        logger.debug(
            f"saved exchange for message {incoming.id} with {len(records)} inference records"
        )

    def _insert_turn(self, conn: sqlite3.Connection, turn: MessageTurn) -> None:
        conn.execute(
            """INSERT INTO messages
               (id, user_id, direction, type, text, file_id, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                turn.id, turn.user_id, turn.direction, turn.type,
                turn.text, turn.file_id, _ts(turn.created_at),
            ),
        )

    def _insert_records(self, conn: sqlite3.Connection, records: list[InferenceRecord]) -> None:
        conn.executemany(
            """INSERT INTO inference_records
               (id, user_message_id, user_id, "order", role, content,
                tool_call_json, tool_result_json, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            [
                (
                    r.id, r.user_message_id, r.user_id, r.order, r.role, r.content,
                    r.tool_call_json, r.tool_result_json, _ts(r.created_at),
                )
                for r in records
            ],
        )

    # ----------------------------------------------------------------
    # Ideas and folders
    # ----------------------------------------------------------------

    def list_folders(self, user_id: str) -> list[IdeaFolder]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM idea_folders WHERE user_id = ? ORDER BY created_at",
                (user_id,),
            ).fetchall()
        return [self._row_to_folder(r) for r in rows]

    def get_folder(self, user_id: str, folder_id: str) -> Optional[IdeaFolder]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM idea_folders WHERE user_id = ? AND id = ?",
                (user_id, folder_id),
            ).fetchone()
        return self._row_to_folder(row) if row else None

    def create_folder(self, folder: IdeaFolder) -> IdeaFolder:
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO idea_folders (id, user_id, name, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (folder.id, folder.user_id, folder.name,
                 _ts(folder.created_at), _ts(folder.updated_at)),
            )
        return folder

    def list_ideas(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's ideas with their folder's id and name."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """SELECT i.*, f.name AS folder_name FROM ideas i
                   LEFT JOIN idea_folders f ON f.id = i.folder_id
                   WHERE i.user_id = ? ORDER BY i.created_at""",
                (user_id,),
            ).fetchall()
        return [self._idea_view(r) for r in rows]

    def get_idea(self, user_id: str, idea_id: str) -> Optional[dict[str, Any]]:
        with self._get_connection() as conn:
            row = conn.execute(
                """SELECT i.*, f.name AS folder_name FROM ideas i
                   LEFT JOIN idea_folders f ON f.id = i.folder_id
                   WHERE i.user_id = ? AND i.id = ?""",
                (user_id, idea_id),
            ).fetchone()
        return self._idea_view(row) if row else None

    def create_idea(self, idea: Idea) -> Idea:
        with self._get_connection() as conn:
            conn.execute(
                """INSERT INTO ideas
                   (id, user_id, folder_id, name, description, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (idea.id, idea.user_id, idea.folder_id, idea.name, idea.description,
                 _ts(idea.created_at), _ts(idea.updated_at)),
            )
        return idea

    # ----------------------------------------------------------------
    # Row mapping
    # ----------------------------------------------------------------

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            language=row["language"],
            google_oauth_state=row["google_oauth_state"],
            google_access_token=row["google_access_token"],
            google_refresh_token=row["google_refresh_token"],
            google_access_token_expires_at=_dt(row["google_access_token_expires_at"]),
            created_at=_dt(row["created_at"]) or utcnow(),
        )

    @staticmethod
    def _row_to_turn(row: sqlite3.Row) -> MessageTurn:
        return MessageTurn(
            id=row["id"],
            user_id=row["user_id"],
            direction=row["direction"],
            type=row["type"],
            text=row["text"],
            file_id=row["file_id"],
            created_at=_dt(row["created_at"]) or utcnow(),
        )

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> InferenceRecord:
        return InferenceRecord(
            id=row["id"],
            user_message_id=row["user_message_id"],
            user_id=row["user_id"],
            order=row["order"],
            role=row["role"],
            content=row["content"],
            tool_call_json=row["tool_call_json"],
            tool_result_json=row["tool_result_json"],
            created_at=_dt(row["created_at"]) or utcnow(),
        )

    @staticmethod
    def _row_to_folder(row: sqlite3.Row) -> IdeaFolder:
        return IdeaFolder(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            created_at=_dt(row["created_at"]) or utcnow(),
            updated_at=_dt(row["updated_at"]),
        )

    @staticmethod
    def _idea_view(row: sqlite3.Row) -> dict[str, Any]:
        folder = None
        if row["folder_id"]:
            folder = {"id": row["folder_id"], "name": row["folder_name"]}
        return {
            "id": row["id"],
            "name": row["name"],
            "description": row["description"],
            "folder": folder,
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
