"""
Scan session.

Fetches a document's tree and comments concurrently, scans them, and keeps
the result of the most recently requested scan only. A scan that is
overtaken by a newer request is discarded when it completes.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..database.operations import DATABASE_PATH, DatabaseError, sync_document_items
from ..sources.base import DocumentSource, FetchError, describe_fetch_error
from .document_scanner import DocumentScanner, ScanResult


class ScanSession:
    """Holds the current scan result for the outline view."""

    def __init__(
        self,
        source: DocumentSource,
        scanner: Optional[DocumentScanner] = None,
        on_result: Optional[Callable[[Optional[ScanResult]], None]] = None
    ) -> None:
        """Initialize scan session.

        Args:
            source: Where document trees and comments are fetched from.
            scanner: Document scanner to run on fetched documents.
            on_result: Called whenever the current result changes; receives
                None when the result is cleared.
        """
        self.source = source
        self.scanner = scanner or DocumentScanner()
        self.on_result = on_result
        self.current: Optional[ScanResult] = None
        self.status_message: str = "Ready"
        self._generation: int = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def scan(self, document_id: str) -> Optional[ScanResult]:
        """Scan a document and make it the current result.

        Returns:
            The applied result, or None when the fetch failed or a newer scan
            was requested before this one completed.
        """
        self._generation += 1
        generation = self._generation
        self.status_message = f"Scanning {document_id}..."
        logger.debug(f"Scan {generation} requested for {document_id}")

        try:
            tree, comments = await asyncio.gather(
                asyncio.to_thread(self.source.fetch_tree, document_id),
                asyncio.to_thread(self.source.fetch_comments, document_id),
            )
        except FetchError as e:
            if generation != self._generation:
                logger.debug(f"Ignoring failure of stale scan {generation} for {document_id}: {e}")
                return None
            logger.warning(f"Fetch failed for {document_id}: {e}")
            self.status_message = describe_fetch_error(e)
            self._apply(None)
            return None

        if generation != self._generation:
            logger.debug(f"Discarding stale scan {generation} for {document_id} (latest is {self._generation})")
            return None

        result = self.scanner.scan(tree, comments, document_id=document_id)
        self.status_message = f"Found {len(result.items)} items in {document_id}"
        self._apply(result)
        return result

    def sync(self, db_path: Path = DATABASE_PATH, label: Optional[str] = None) -> bool:
        """Hand the current items to the sync store.

        The current result is kept whether or not the sync succeeds, so a
        failed sync can be retried.

        Returns:
            True if the items were stored.
        """
        result = self.current
        if result is None or result.document_id is None:
            self.status_message = "Nothing to sync"
            return False

        try:
            count = sync_document_items(result.document_id, result.items, label=label, db_path=db_path)
        except DatabaseError as e:
            logger.error(f"Sync failed for {result.document_id}: {e}")
            self.status_message = f"Sync failed: {e}"
            return False

        self.status_message = f"Synced {count} items from {result.document_id}"
        return True

    def _apply(self, result: Optional[ScanResult]) -> None:
        self.current = result
        if self.on_result is not None:
            self.on_result(result)
