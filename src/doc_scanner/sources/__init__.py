"""Document sources: where scanned document trees and comments come from."""

from .base import (
    DocumentNotFoundError,
    DocumentSource,
    FetchError,
    PermissionDeniedError,
    TransientFetchError,
    describe_fetch_error,
)
from .http import HttpDocumentSource
from .local import LocalDocumentSource

__all__ = [
    "DocumentSource",
    "LocalDocumentSource",
    "HttpDocumentSource",
    # Exceptions
    "FetchError",
    "DocumentNotFoundError",
    "PermissionDeniedError",
    "TransientFetchError",
    "describe_fetch_error",
]
