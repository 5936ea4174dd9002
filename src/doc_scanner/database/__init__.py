"""Database package: the sync sink for scanned items."""

from .models import DashboardRow, SyncedDocument, TaskStatus
from .operations import (
    DATABASE_PATH,
    DatabaseError,
    initialize_database,
    sync_document_items,
    load_corpus,
    load_task_rows,
    load_documents,
    load_document_labels,
)

__all__ = [
    # Models
    "DashboardRow",
    "SyncedDocument",
    "TaskStatus",
    # Exceptions
    "DatabaseError",
    # Operations
    "DATABASE_PATH",
    "initialize_database",
    "sync_document_items",
    "load_corpus",
    "load_task_rows",
    "load_documents",
    "load_document_labels",
]
