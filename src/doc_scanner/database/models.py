"""Database models for the synced item store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final, Optional


class TaskStatus(Enum):
    """Lifecycle status of a synced task row."""
    OPEN = "Open"
    CLOSED = "Closed"


@dataclass(frozen=True)
class DashboardRow:
    """Model representing one persisted task row.

    Status and timestamps are owned by the store, not computed by the scanner.
    """
    status: TaskStatus
    content: str
    created_at: datetime
    document_id: str
    closed_at: Optional[datetime] = None
    section_id: Optional[str] = None


@dataclass(frozen=True)
class SyncedDocument:
    """Model representing a document's last sync."""
    document_id: str
    label: Optional[str]
    synced_at: datetime
    item_count: int


def create_tables_sql() -> tuple[str, str, str]:
    """Return SQL statements for creating the database tables.

    Returns:
        A tuple containing (documents_sql, items_sql, tasks_sql).
    """
    documents_table_sql: Final[str] = """
    CREATE TABLE IF NOT EXISTS documents (
        document_id TEXT PRIMARY KEY,
        label TEXT,
        synced_at TIMESTAMP NOT NULL
    )
    """

    items_table_sql: Final[str] = """
    CREATE TABLE IF NOT EXISTS items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        document_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        kind TEXT NOT NULL,
        text TEXT NOT NULL,
        section_id TEXT NOT NULL,
        done INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (document_id) REFERENCES documents (document_id) ON DELETE CASCADE
    )
    """

    tasks_table_sql: Final[str] = """
    CREATE TABLE IF NOT EXISTS tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        document_id TEXT NOT NULL,
        content TEXT NOT NULL,
        section_id TEXT,
        status TEXT NOT NULL,
        created_at TIMESTAMP NOT NULL,
        closed_at TIMESTAMP,
        UNIQUE (document_id, content)
    )
    """

    return documents_table_sql, items_table_sql, tasks_table_sql
