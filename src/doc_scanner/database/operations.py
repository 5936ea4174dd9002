"""Database operations for the synced item store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Final, Generator, List, Optional, Sequence

from loguru import logger

from ..models import Item, ItemKind
from .models import DashboardRow, SyncedDocument, TaskStatus, create_tables_sql


DATABASE_PATH: Final[Path] = Path("doc_scanner.db")


class DatabaseError(Exception):
    """Base exception for database operations."""
    pass


@contextmanager
def get_db_connection(db_path: Path = DATABASE_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database connections with proper cleanup.

    Args:
        db_path: Path to the SQLite database file.

    Yields:
        A configured SQLite connection with row factory enabled.

    Raises:
        DatabaseError: If database connection or operations fail.
    """
    db_connection: sqlite3.Connection | None = None
    try:
        db_connection = sqlite3.connect(str(db_path))
        db_connection.row_factory = sqlite3.Row  # Enable dict-like access
        db_connection.execute("PRAGMA foreign_keys = ON")
        logger.debug(f"Database connection established to {db_path}")
        yield db_connection
    except sqlite3.Error as e:
        logger.error(f"Database error occurred: {e}")
        if db_connection is not None:
            db_connection.rollback()
        raise DatabaseError(f"Database operation failed: {e}") from e
    finally:
        if db_connection is not None:
            db_connection.close()
            logger.debug("Database connection closed")


def initialize_database(db_path: Path = DATABASE_PATH) -> None:
    """Create database tables if they don't exist.

    Args:
        db_path: Path to the SQLite database file.

    Raises:
        DatabaseError: If table creation fails.
    """
    try:
        with get_db_connection(db_path) as db_connection:
            for table_sql in create_tables_sql():
                db_connection.execute(table_sql)
            db_connection.commit()

            logger.info("Database tables initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise DatabaseError(f"Database initialization failed: {e}") from e


def sync_document_items(
    document_id: str,
    items: Sequence[Item],
    label: Optional[str] = None,
    db_path: Path = DATABASE_PATH,
    now: Optional[datetime] = None
) -> int:
    """Replace a document's synced items and update its task rows.

    Task rows are keyed on (document_id, content). New tasks are created with
    the current time; a task whose done flag changed is closed or reopened.
    Rows for tasks that disappeared from the document are kept.

    Args:
        document_id: Identifier of the synced document.
        items: The document's full item list from its latest scan.
        label: Optional short label for the document.
        db_path: Path to the SQLite database file.
        now: Sync timestamp; defaults to the current time.

    Returns:
        Number of items stored.

    Raises:
        DatabaseError: If the database operation fails.
        ValueError: If document_id is empty.
    """
    if not document_id.strip():
        raise ValueError("Document ID cannot be empty")

    synced_at: datetime = now or datetime.now()

    try:
        with get_db_connection(db_path) as db_connection:
            db_connection.execute(
                """INSERT INTO documents (document_id, label, synced_at) VALUES (?, ?, ?)
                   ON CONFLICT(document_id) DO UPDATE SET
                       label = COALESCE(excluded.label, documents.label),
                       synced_at = excluded.synced_at""",
                (document_id, label, synced_at.isoformat())
            )
            db_connection.execute("DELETE FROM items WHERE document_id = ?", (document_id,))
            db_connection.executemany(
                """INSERT INTO items (document_id, position, kind, text, section_id, done)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                [
                    (document_id, position, item.kind.value, item.text, item.section_id, int(item.done))
                    for position, item in enumerate(items)
                ]
            )

            task_items: Dict[str, Item] = {item.text: item for item in items if item.is_task}
            for item in task_items.values():
                _upsert_task(db_connection, document_id, item, synced_at)

            db_connection.commit()
            logger.info(
                f"Synced document {document_id}: {len(items)} items, {len(task_items)} tasks"
            )
            return len(items)

    except Exception as e:
        logger.error(f"Failed to sync document {document_id}: {e}")
        raise DatabaseError(f"Failed to sync document {document_id}: {e}") from e


def _upsert_task(
    db_connection: sqlite3.Connection,
    document_id: str,
    item: Item,
    synced_at: datetime
) -> None:
    status: TaskStatus = TaskStatus.CLOSED if item.done else TaskStatus.OPEN
    existing: sqlite3.Row | None = db_connection.execute(
        "SELECT id, status FROM tasks WHERE document_id = ? AND content = ?",
        (document_id, item.text)
    ).fetchone()

    if existing is None:
        db_connection.execute(
            """INSERT INTO tasks (document_id, content, section_id, status, created_at, closed_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                document_id, item.text, item.section_id or None, status.value,
                synced_at.isoformat(), synced_at.isoformat() if item.done else None
            )
        )
        logger.debug(f"Added task row for {document_id}: {item.text}")
        return

    if existing["status"] == status.value:
        db_connection.execute(
            "UPDATE tasks SET section_id = ? WHERE id = ?",
            (item.section_id or None, int(existing["id"]))
        )
        return

    db_connection.execute(
        "UPDATE tasks SET status = ?, section_id = ?, closed_at = ? WHERE id = ?",
        (
            status.value, item.section_id or None,
            synced_at.isoformat() if item.done else None, int(existing["id"])
        )
    )
    logger.debug(f"Task in {document_id} moved to {status.value}: {item.text}")


def load_corpus(db_path: Path = DATABASE_PATH) -> Dict[str, List[Item]]:
    """Return every document's last-synced item list.

    Raises:
        DatabaseError: If the database query fails.
    """
    try:
        with get_db_connection(db_path) as db_connection:
            corpus: Dict[str, List[Item]] = {
                str(row["document_id"]): []
                for row in db_connection.execute("SELECT document_id FROM documents").fetchall()
            }
            rows: list[sqlite3.Row] = db_connection.execute(
                "SELECT * FROM items ORDER BY document_id, position"
            ).fetchall()
            for row in rows:
                corpus.setdefault(str(row["document_id"]), []).append(Item(
                    kind=ItemKind(str(row["kind"])),
                    text=str(row["text"]),
                    section_id=str(row["section_id"]),
                    done=bool(row["done"]),
                ))

            logger.info(f"Loaded {len(rows)} synced items across {len(corpus)} documents")
            return corpus

    except Exception as e:
        logger.error(f"Failed to load synced items: {e}")
        raise DatabaseError(f"Failed to load synced items: {e}") from e


def load_task_rows(db_path: Path = DATABASE_PATH) -> List[DashboardRow]:
    """Return all persisted task rows.

    Raises:
        DatabaseError: If the database query fails.
    """
    try:
        with get_db_connection(db_path) as db_connection:
            rows: list[sqlite3.Row] = db_connection.execute("SELECT * FROM tasks ORDER BY id").fetchall()
            task_rows: List[DashboardRow] = [
                DashboardRow(
                    status=TaskStatus(str(row["status"])),
                    content=str(row["content"]),
                    created_at=datetime.fromisoformat(str(row["created_at"])),
                    document_id=str(row["document_id"]),
                    closed_at=datetime.fromisoformat(str(row["closed_at"])) if row["closed_at"] else None,
                    section_id=str(row["section_id"]) if row["section_id"] else None,
                )
                for row in rows
            ]

            logger.info(f"Loaded {len(task_rows)} task rows")
            return task_rows

    except Exception as e:
        logger.error(f"Failed to load task rows: {e}")
        raise DatabaseError(f"Failed to load task rows: {e}") from e


def load_documents(db_path: Path = DATABASE_PATH) -> List[SyncedDocument]:
    """Return sync metadata for every document.

    Raises:
        DatabaseError: If the database query fails.
    """
    try:
        with get_db_connection(db_path) as db_connection:
            rows: list[sqlite3.Row] = db_connection.execute(
                """SELECT d.document_id, d.label, d.synced_at, COUNT(i.id) AS item_count
                   FROM documents d
                   LEFT JOIN items i ON i.document_id = d.document_id
                   GROUP BY d.document_id
                   ORDER BY d.document_id"""
            ).fetchall()
            return [
                SyncedDocument(
                    document_id=str(row["document_id"]),
                    label=str(row["label"]) if row["label"] else None,
                    synced_at=datetime.fromisoformat(str(row["synced_at"])),
                    item_count=int(row["item_count"]),
                )
                for row in rows
            ]

    except Exception as e:
        logger.error(f"Failed to load documents: {e}")
        raise DatabaseError(f"Failed to load documents: {e}") from e


def load_document_labels(db_path: Path = DATABASE_PATH) -> Dict[str, str]:
    """Return {document_id: label} for documents that have a label."""
    return {
        document.document_id: document.label
        for document in load_documents(db_path)
        if document.label
    }
