"""Document source backed by JSON exports in a local directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Union

from loguru import logger

from ..models import Comment, DocumentTree, MalformedNodeError, parse_comments
from .base import (
    DocumentNotFoundError,
    DocumentSource,
    PermissionDeniedError,
    TransientFetchError,
)


class LocalDocumentSource(DocumentSource):
    """Read `<id>.json` document exports and optional `<id>.comments.json` files."""

    DOCUMENT_SUFFIX = ".json"
    COMMENTS_SUFFIX = ".comments.json"

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        logger.debug(f"LocalDocumentSource initialized at {self.directory}")

    def fetch_tree(self, document_id: str) -> DocumentTree:
        path = self._path(document_id, self.DOCUMENT_SUFFIX)
        if not path.is_file():
            raise DocumentNotFoundError(f"Document not found: {document_id}")

        raw = self._read_json(path)
        try:
            return DocumentTree.from_dict(raw)
        except MalformedNodeError as e:
            raise TransientFetchError(f"Document {document_id} is not a document tree: {e}") from e

    def fetch_comments(self, document_id: str) -> List[Comment]:
        path = self._path(document_id, self.COMMENTS_SUFFIX)
        if not path.is_file():
            return []

        raw = self._read_json(path)
        if isinstance(raw, dict):
            raw = raw.get("comments") or []
        if not isinstance(raw, list):
            raise TransientFetchError(f"Comments for {document_id} are not a list")
        return parse_comments(raw)

    def list_documents(self) -> List[str]:
        """Identifiers of all exported documents, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(
            path.name[:-len(self.DOCUMENT_SUFFIX)]
            for path in self.directory.glob(f"*{self.DOCUMENT_SUFFIX}")
            if not path.name.endswith(self.COMMENTS_SUFFIX)
        )

    def _path(self, document_id: str, suffix: str) -> Path:
        if not document_id or "/" in document_id or "\\" in document_id or document_id.startswith("."):
            raise DocumentNotFoundError(f"Invalid document id: {document_id!r}")
        return self.directory / f"{document_id}{suffix}"

    def _read_json(self, path: Path) -> Any:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except PermissionError as e:
            raise PermissionDeniedError(f"Cannot read {path}: {e}") from e
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransientFetchError(f"Failed to read {path}: {e}") from e
