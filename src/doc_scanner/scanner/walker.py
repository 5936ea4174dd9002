"""
Depth-first traversal of document content.

The walker drives the paragraph classifier over body, header and footer
content, re-entering table cells in row-major order, and attributes every
item to the section cursor at the moment it is emitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from loguru import logger

from ..models import (
    TOP_LEVEL_SECTION,
    Item,
    ItemKind,
    ListDefinition,
    Paragraph,
    Section,
    StructuralElement,
    Table,
)
from .classifier import ClassificationKind, ParagraphClassifier


@dataclass
class WalkState:
    """Mutable state owned by one traversal invocation."""
    section: Section = TOP_LEVEL_SECTION
    items: List[Item] = field(default_factory=lambda: [])
    recognized_count: int = 0


class TreeWalker:
    """Walk content sequences and collect classified items."""

    def __init__(self, classifier: Optional[ParagraphClassifier] = None) -> None:
        self.classifier: ParagraphClassifier = classifier or ParagraphClassifier()

    def walk(
        self,
        content: Sequence[StructuralElement],
        lists: Mapping[str, ListDefinition],
        state: Optional[WalkState] = None
    ) -> WalkState:
        """Walk one content sequence.

        Args:
            content: Elements to visit, in document order.
            lists: The document's list definitions.
            state: State to continue from. A fresh one starts at the top-level section.

        Returns:
            The state after the walk, holding the emitted items.
        """
        state = state if state is not None else WalkState()
        for element in content:
            if isinstance(element, Table):
                self._walk_table(element, lists, state)
            elif isinstance(element, Paragraph):
                self._visit_paragraph(element, lists, state)
            else:
                logger.debug(f"Skipping unsupported element: {type(element).__name__}")
        return state

    def _walk_table(self, table: Table, lists: Mapping[str, ListDefinition], state: WalkState) -> None:
        for row in table.rows:
            for cell in row.cells:
                self.walk(cell.content, lists, state)

    def _visit_paragraph(
        self,
        paragraph: Paragraph,
        lists: Mapping[str, ListDefinition],
        state: WalkState
    ) -> None:
        result = self.classifier.classify(paragraph, lists)

        if result.kind is ClassificationKind.HEADING:
            state.section = Section(title=result.text, section_id=result.section_id)
            state.items.append(Item(kind=ItemKind.HEADING, text=result.text, section_id=result.section_id))
        elif result.kind is ClassificationKind.TASK:
            state.items.append(Item(
                kind=ItemKind.TASK,
                text=result.text,
                section_id=state.section.section_id,
                done=result.done,
            ))
        elif result.kind is ClassificationKind.TAG_LINE:
            for tag in result.tags:
                state.items.append(Item(kind=ItemKind.TAG, text=tag, section_id=state.section.section_id))
        else:
            return

        state.recognized_count += 1
