"""Document source that fetches documents and comments over HTTP."""

from __future__ import annotations

from typing import Any, List, Optional

import requests
from loguru import logger

from ..models import Comment, DocumentTree, MalformedNodeError, parse_comments
from .base import (
    DocumentNotFoundError,
    DocumentSource,
    PermissionDeniedError,
    TransientFetchError,
)


class HttpDocumentSource(DocumentSource):
    """Fetch document trees from a document-store HTTP API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None
    ) -> None:
        """Initialize HTTP document source.

        Args:
            base_url: API root, e.g. https://docs.example.com/v1
            token: Bearer token sent with every request
            timeout_seconds: Request timeout
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout_seconds
        self.session = session or requests.Session()
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})
        logger.info(f"HttpDocumentSource initialized for {self.base_url} with {timeout_seconds}s timeout")

    def fetch_tree(self, document_id: str) -> DocumentTree:
        payload = self._get_json(f"/documents/{document_id}", document_id)
        try:
            return DocumentTree.from_dict(payload)
        except MalformedNodeError as e:
            raise TransientFetchError(f"Unexpected document payload for {document_id}: {e}") from e

    def fetch_comments(self, document_id: str) -> List[Comment]:
        payload = self._get_json(f"/documents/{document_id}/comments", document_id)
        if isinstance(payload, dict):
            payload = payload.get("comments") or []
        if not isinstance(payload, list):
            raise TransientFetchError(f"Unexpected comments payload for {document_id}")
        return parse_comments(payload)

    def _get_json(self, path: str, document_id: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransientFetchError(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        if response.status_code in (401, 403):
            raise PermissionDeniedError(f"Access denied to document {document_id} (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise TransientFetchError(f"HTTP {response.status_code} fetching {url}")

        try:
            return response.json()
        except ValueError as e:
            raise TransientFetchError(f"Invalid JSON from {url}: {e}") from e
