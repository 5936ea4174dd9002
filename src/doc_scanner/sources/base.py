"""Document source interface and fetch errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import Comment, DocumentTree


class FetchError(Exception):
    """Base exception for document and comment retrieval."""
    pass


class DocumentNotFoundError(FetchError):
    """Raised when the document does not exist."""
    pass


class PermissionDeniedError(FetchError):
    """Raised when the document cannot be read with the current credentials."""
    pass


class TransientFetchError(FetchError):
    """Raised for failures that may succeed on retry."""
    pass


class DocumentSource(ABC):
    """Abstract base class for document stores."""

    @abstractmethod
    def fetch_tree(self, document_id: str) -> DocumentTree:
        """Fetch and parse the document tree."""
        pass

    @abstractmethod
    def fetch_comments(self, document_id: str) -> List[Comment]:
        """Fetch the document's comments."""
        pass


def describe_fetch_error(error: FetchError) -> str:
    """Short status message for a fetch failure."""
    if isinstance(error, DocumentNotFoundError):
        return f"Document not found: {error}"
    if isinstance(error, PermissionDeniedError):
        return f"Permission denied: {error}"
    if isinstance(error, TransientFetchError):
        return f"Temporarily unavailable: {error}"
    return f"Fetch failed: {error}"
