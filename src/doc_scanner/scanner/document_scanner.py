"""
Document scanner.

Folds the tree walk over body, header and footer regions and the comment
annotations into one ordered item list for a document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Sequence

from loguru import logger

from ..models import Comment, DocumentTree, Item, ItemKind
from .classifier import ParagraphClassifier
from .comments import CommentAnnotator
from .walker import TreeWalker, WalkState


@dataclass(frozen=True)
class ScanResult:
    """Items extracted from one document scan."""
    items: List[Item] = field(default_factory=lambda: [])
    local_tags: FrozenSet[str] = frozenset()
    recognized_count: int = 0  # tree headings, tasks and tag lines; comment tasks excluded
    document_id: Optional[str] = None
    scanned_at: datetime = field(default_factory=datetime.now)

    @property
    def is_worth_showing(self) -> bool:
        """Whether the document has anything for the outline panel."""
        return self.recognized_count > 0

    @property
    def tasks(self) -> List[Item]:
        return [item for item in self.items if item.is_task]

    @property
    def headings(self) -> List[Item]:
        return [item for item in self.items if item.kind is ItemKind.HEADING]


class DocumentScanner:
    """Scan a document tree and its comments into a ScanResult."""

    def __init__(
        self,
        classifier: Optional[ParagraphClassifier] = None,
        reset_section_per_region: bool = False
    ) -> None:
        """Initialize document scanner.

        Args:
            classifier: Paragraph classifier to use.
            reset_section_per_region: Start header and footer regions at the
                top-level section instead of inheriting the last body heading.
        """
        self.walker = TreeWalker(classifier)
        self.annotator = CommentAnnotator()
        self.reset_section_per_region = reset_section_per_region

    def scan(
        self,
        tree: DocumentTree,
        comments: Sequence[Comment] = (),
        document_id: Optional[str] = None
    ) -> ScanResult:
        """Extract items in body, headers, footers, comments order.

        Args:
            tree: Parsed document tree.
            comments: The document's comments.
            document_id: Identifier recorded on the result.

        Returns:
            ScanResult with items, distinct tags and recognized item count.
        """
        state = self.walker.walk(tree.body, tree.lists)
        for region in (*tree.headers, *tree.footers):
            if self.reset_section_per_region:
                state = WalkState(items=state.items, recognized_count=state.recognized_count)
            state = self.walker.walk(region, tree.lists, state)

        comment_items = self.annotator.annotate(comments)
        items: List[Item] = state.items + comment_items
        local_tags = frozenset(item.text for item in items if item.kind is ItemKind.TAG)

        result = ScanResult(
            items=items,
            local_tags=local_tags,
            recognized_count=state.recognized_count,
            document_id=document_id,
        )
        logger.debug(
            f"Scanned document {document_id or '<unnamed>'}: {len(items)} items, "
            f"{len(local_tags)} distinct tags, {len(comment_items)} comment tasks"
        )
        return result
