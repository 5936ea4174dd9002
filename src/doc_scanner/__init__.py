"""Document Scanner - outline, task and tag extraction for rich documents."""

from .models import Comment, DocumentTree, Item, ItemKind, Section
from .scanner.document_scanner import DocumentScanner, ScanResult
from .index.tag_index import TagIndex

__version__ = "0.1.0"

__all__ = [
    "Comment",
    "DocumentTree",
    "Item",
    "ItemKind",
    "Section",
    "DocumentScanner",
    "ScanResult",
    "TagIndex",
]
