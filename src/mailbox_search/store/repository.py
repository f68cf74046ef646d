"""SQLite-backed store for mailboxes, conversations and messages.

Besides plain CRUD, the repository owns the keyword match predicate. It is
registered on every connection as the deterministic SQL function
``search_index_matches(search_index, query_index)``.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

import structlog

from mailbox_search.exceptions import ConversationNotFoundError, MailboxNotFoundError, StoreError
from mailbox_search.models import Conversation, ConversationMessage, Mailbox, SearchResult
from mailbox_search.search.filters import NEWEST_FIRST, OrderBy, SqlFilter

logger = structlog.get_logger()


_SCHEMA_VERSION = 1


def search_index_matches(search_index: str | None, query_index: str | None) -> int:
    """Hybrid exact + prefix match of a stored index against query tokens.

    A row matches when its tokens contain every query token, or when any of
    its tokens starts with any query token. An unset index never matches; an
    empty query token set is contained in every set index.
    """

    if search_index is None or query_index is None:
        return 0

    stored = search_index.split(" ") if search_index else []
    query = query_index.split(" ") if query_index else []

    if set(query).issubset(stored):
        return 1
    return int(any(word.startswith(token) for word in stored for token in query))


class MailStoreRepository:
    """Repository for the mail store rows used by indexing and search."""

    def __init__(self, db_path: Path) -> None:
        """Create a repository.

        Args:
            db_path: Path to the SQLite database file.
        """

        self._db_path = db_path

    @property
    def db_path(self) -> Path:
        return self._db_path

    def initialize(self) -> None:
        """Create or upgrade the store schema."""

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS _schema_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

            current_version = self._get_schema_version(conn)
            if current_version is None:
                self._create_schema_v1(conn)
                self._set_schema_version(conn, _SCHEMA_VERSION)
                conn.commit()
                logger.info("mail_store_schema_created", version=_SCHEMA_VERSION)
                return

            if current_version != _SCHEMA_VERSION:
                raise RuntimeError(
                    f"Unsupported schema version {current_version}; expected {_SCHEMA_VERSION}"
                )

    def create_mailbox(self, name: str, slug: str | None = None) -> Mailbox:
        created_at = datetime.now(timezone.utc)
        slug = slug or name.strip().lower().replace(" ", "-")

        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO mailboxes (name, slug, created_at_iso) VALUES (?, ?, ?)",
                (name, slug, created_at.isoformat()),
            )
            conn.commit()

        return Mailbox(id=int(cursor.lastrowid), name=name, slug=slug, created_at=created_at)

    def get_mailbox(self, mailbox_id: int) -> Mailbox | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, slug, created_at_iso FROM mailboxes WHERE id = ?",
                (mailbox_id,),
            ).fetchone()

        if row is None:
            return None
        return Mailbox(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            created_at=datetime.fromisoformat(row["created_at_iso"]),
        )

    def create_conversation(
        self,
        mailbox_id: int,
        *,
        email_from: str | None = None,
        subject: str | None = None,
    ) -> Conversation:
        """Create a conversation in an existing mailbox.

        Raises:
            MailboxNotFoundError: If the mailbox does not exist.
        """

        if self.get_mailbox(mailbox_id) is None:
            raise MailboxNotFoundError(f"Mailbox {mailbox_id} not found")

        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO conversations (mailbox_id, email_from, subject, created_at_iso)
                VALUES (?, ?, ?, ?)
                """,
                (mailbox_id, email_from, subject, created_at.isoformat()),
            )
            conn.commit()

        return Conversation(
            id=int(cursor.lastrowid),
            mailbox_id=mailbox_id,
            email_from=email_from,
            subject=subject,
            created_at=created_at,
        )

    def get_conversation(self, conversation_id: int) -> Conversation | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, mailbox_id, email_from, subject, created_at_iso
                FROM conversations
                WHERE id = ?
                """,
                (conversation_id,),
            ).fetchone()

        if row is None:
            return None
        return Conversation(
            id=row["id"],
            mailbox_id=row["mailbox_id"],
            email_from=row["email_from"],
            subject=row["subject"],
            created_at=datetime.fromisoformat(row["created_at_iso"]),
        )

    def add_message(self, conversation_id: int, body: str | None) -> ConversationMessage:
        """Store a message; its search index stays unset until indexed.

        Raises:
            ConversationNotFoundError: If the conversation does not exist.
        """

        if self.get_conversation(conversation_id) is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")

        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO conversation_messages (conversation_id, body, created_at_iso)
                VALUES (?, ?, ?)
                """,
                (conversation_id, body, created_at.isoformat()),
            )
            conn.commit()

        return ConversationMessage(
            id=int(cursor.lastrowid),
            conversation_id=conversation_id,
            body=body,
            created_at=created_at,
        )

    def get_message(self, message_id: int) -> ConversationMessage | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, conversation_id, body, cleaned_up_text, search_index, created_at_iso
                FROM conversation_messages
                WHERE id = ?
                """,
                (message_id,),
            ).fetchone()

        if row is None:
            return None
        return self._row_to_message(row)

    def list_message_ids(self, mailbox_id: int | None = None) -> list[int]:
        """Return message ids, oldest first, optionally scoped to one mailbox."""

        with self._connect() as conn:
            if mailbox_id is None:
                rows = conn.execute("SELECT id FROM conversation_messages ORDER BY id").fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT m.id
                    FROM conversation_messages m
                    JOIN conversations c ON c.id = m.conversation_id
                    WHERE c.mailbox_id = ?
                    ORDER BY m.id
                    """,
                    (mailbox_id,),
                ).fetchall()

        return [int(row[0]) for row in rows]

    def set_cleaned_up_text(self, message_id: int, cleaned_up_text: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE conversation_messages SET cleaned_up_text = ? WHERE id = ?",
                (cleaned_up_text, message_id),
            )
            conn.commit()

    def update_search_index(self, message_id: int, search_index: str) -> None:
        """Replace a message's search index in a single update."""

        with self._connect() as conn:
            conn.execute(
                "UPDATE conversation_messages SET search_index = ? WHERE id = ?",
                (search_index, message_id),
            )
            conn.commit()

    def search_messages(
        self,
        query_index: str,
        mailbox_id: int,
        *,
        filters: Sequence[SqlFilter] = (),
        order_by: Sequence[OrderBy] = NEWEST_FIRST,
        limit: int = 1000,
    ) -> list[SearchResult]:
        """Return messages of one mailbox whose index matches the query tokens.

        Args:
            query_index: Space-separated query tokens.
            mailbox_id: Mailbox every row is scoped to.
            filters: Extra predicates, ANDed together.
            order_by: Ordering terms; defaults to newest first.
            limit: Max rows.

        Returns:
            Matching rows in the requested order, not deduplicated.
        """

        clauses = [
            "c.mailbox_id = ?",
            "search_index_matches(m.search_index, ?) = 1",
        ]
        params: list[object] = [mailbox_id, query_index]
        for extra in filters:
            clauses.append(f"({extra.clause})")
            params.extend(extra.params)

        ordering = ", ".join(term.to_sql() for term in (order_by or NEWEST_FIRST))
        params.append(limit)

        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT m.id, m.conversation_id, m.cleaned_up_text
                FROM conversation_messages m
                JOIN conversations c ON c.id = m.conversation_id
                WHERE {" AND ".join(clauses)}
                ORDER BY {ordering}
                LIMIT ?;
                """,
                params,
            ).fetchall()

        return [
            SearchResult(
                id=row["id"],
                conversation_id=row["conversation_id"],
                cleaned_up_text=row["cleaned_up_text"],
            )
            for row in rows
        ]

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.OperationalError as exc:
            raise StoreError(f"Unable to open mail store at {self._db_path}: {exc}") from exc
        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON;")
            conn.create_function(
                "search_index_matches", 2, search_index_matches, deterministic=True
            )
            yield conn
        except sqlite3.OperationalError as exc:
            raise StoreError(f"Mail store operation failed: {exc}") from exc
        finally:
            conn.close()

    def _get_schema_version(self, conn: sqlite3.Connection) -> int | None:
        row = conn.execute(
            "SELECT value FROM _schema_meta WHERE key = 'schema_version'"
        ).fetchone()
        if row is None:
            return None
        return int(row[0])

    def _set_schema_version(self, conn: sqlite3.Connection, version: int) -> None:
        conn.execute(
            "INSERT OR REPLACE INTO _schema_meta(key, value) VALUES('schema_version', ?) ",
            (str(version),),
        )

    def _create_schema_v1(self, conn: sqlite3.Connection) -> None:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS mailboxes (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                created_at_iso TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS conversations (
                id INTEGER PRIMARY KEY,
                mailbox_id INTEGER NOT NULL REFERENCES mailboxes(id) ON DELETE CASCADE,
                email_from TEXT,
                subject TEXT,
                created_at_iso TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_conversations_mailbox_id
                ON conversations(mailbox_id);

            CREATE TABLE IF NOT EXISTS conversation_messages (
                id INTEGER PRIMARY KEY,
                conversation_id INTEGER NOT NULL
                    REFERENCES conversations(id) ON DELETE CASCADE,
                body TEXT,
                cleaned_up_text TEXT,
                search_index TEXT,
                created_at_iso TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_conversation_messages_conversation_id
                ON conversation_messages(conversation_id);
            """
        )

    def _row_to_message(self, row: sqlite3.Row) -> ConversationMessage:
        return ConversationMessage(
            id=row["id"],
            conversation_id=row["conversation_id"],
            body=row["body"],
            cleaned_up_text=row["cleaned_up_text"],
            search_index=row["search_index"],
            created_at=datetime.fromisoformat(row["created_at_iso"]),
        )
