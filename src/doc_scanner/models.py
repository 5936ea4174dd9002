"""Typed document model and scan item types.

Raw document trees arrive as nested dicts in the rich-document API shape.
They are parsed into the frozen dataclasses below once, at the boundary, so the
scanner never has to probe optional keys while walking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger


class MalformedNodeError(Exception):
    """Raised when a content element lacks its expected sub-structure."""
    pass


UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class TextRun:
    """A run of text sharing one style."""
    content: str
    strikethrough: bool = False


@dataclass(frozen=True)
class Bullet:
    """List membership of a paragraph."""
    list_id: str
    nesting_level: int = 0


@dataclass(frozen=True)
class Paragraph:
    """A paragraph element with its runs and structural metadata."""
    runs: Tuple[TextRun, ...] = ()
    named_style: Optional[str] = None
    heading_id: str = ""
    bullet: Optional[Bullet] = None

    @property
    def text(self) -> str:
        return "".join(run.content for run in self.runs)

    @property
    def has_strikethrough(self) -> bool:
        return any(run.strikethrough for run in self.runs)

    @property
    def heading_level(self) -> Optional[int]:
        """Heading level from the named style, or None for body text."""
        if not self.named_style or not self.named_style.startswith("HEADING_"):
            return None
        level = self.named_style[len("HEADING_"):]
        return int(level) if level.isdigit() else None


@dataclass(frozen=True)
class TableCell:
    content: Tuple[StructuralElement, ...] = ()


@dataclass(frozen=True)
class TableRow:
    cells: Tuple[TableCell, ...] = ()


@dataclass(frozen=True)
class Table:
    """A table element; cell content re-enters the same traversal."""
    rows: Tuple[TableRow, ...] = ()


StructuralElement = Union[Paragraph, Table]


@dataclass(frozen=True)
class NestingLevel:
    glyph_type: Optional[str] = None
    glyph_symbol: Optional[str] = None


@dataclass(frozen=True)
class ListDefinition:
    """Per-nesting-level glyph metadata for one list."""
    nesting_levels: Tuple[NestingLevel, ...] = ()

    # Checkbox lists come back either explicitly typed or with an
    # unspecified glyph type and no bullet symbol.
    CHECKBOX_GLYPH_TYPES = frozenset({"CHECKBOX"})
    UNSPECIFIED_GLYPH_TYPES = frozenset({"", "GLYPH_TYPE_UNSPECIFIED"})

    def is_checkbox(self, nesting_level: int) -> bool:
        """Check whether the glyph at a nesting level is a checkbox."""
        if nesting_level < 0 or nesting_level >= len(self.nesting_levels):
            return False
        level = self.nesting_levels[nesting_level]
        glyph_type = (level.glyph_type or "").upper()
        if glyph_type in self.CHECKBOX_GLYPH_TYPES:
            return True
        return glyph_type in self.UNSPECIFIED_GLYPH_TYPES and not level.glyph_symbol


@dataclass(frozen=True)
class DocumentTree:
    """A fetched document: body, header and footer regions, list lookup."""
    body: Tuple[StructuralElement, ...] = ()
    headers: Tuple[Tuple[StructuralElement, ...], ...] = ()
    footers: Tuple[Tuple[StructuralElement, ...], ...] = ()
    lists: Dict[str, ListDefinition] = field(default_factory=lambda: {})

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> DocumentTree:
        """Parse an API-shaped document dict.

        Args:
            raw: Document resource as returned by the document store.

        Returns:
            Parsed DocumentTree. Malformed elements are dropped.
        """
        if not isinstance(raw, Mapping):
            raise MalformedNodeError(f"Document must be a mapping, got {type(raw).__name__}")

        body = raw.get("body") or {}
        return cls(
            body=parse_content(_mapping(body).get("content")),
            headers=_parse_regions(raw.get("headers")),
            footers=_parse_regions(raw.get("footers")),
            lists=_parse_lists(raw.get("lists")),
        )


@dataclass(frozen=True)
class Comment:
    """A document comment, independent of the tree."""
    text: str
    author_name: str = UNKNOWN_AUTHOR

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Comment:
        if not isinstance(raw, Mapping):
            raise MalformedNodeError(f"Comment must be a mapping, got {type(raw).__name__}")
        text = raw.get("content", raw.get("text")) or ""
        author = _mapping(raw.get("author")).get("displayName") or raw.get("authorName")
        return cls(text=str(text), author_name=str(author or UNKNOWN_AUTHOR))


def parse_comments(raw: Optional[Sequence[Any]]) -> List[Comment]:
    """Parse a comment list, skipping entries that are not comments."""
    comments: List[Comment] = []
    for entry in raw or []:
        try:
            comments.append(Comment.from_dict(entry))
        except MalformedNodeError as e:
            logger.debug(f"Skipping malformed comment: {e}")
    return comments


@dataclass(frozen=True)
class Section:
    """The heading context items are attributed to."""
    title: str
    section_id: str


TOP_LEVEL_SECTION = Section(title="", section_id="")


class ItemKind(Enum):
    HEADING = "heading"
    TASK = "task"
    TAG = "tag"
    COMMENT_TASK = "comment_task"


@dataclass(frozen=True)
class Item:
    """One classified unit extracted from a document.

    Immutable snapshot; `done` is only meaningful for tasks.
    """
    kind: ItemKind
    text: str
    section_id: str = ""
    done: bool = False

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("Item text cannot be empty")

    @property
    def is_task(self) -> bool:
        return self.kind in (ItemKind.TASK, ItemKind.COMMENT_TASK)


def parse_content(raw: Optional[Sequence[Any]]) -> Tuple[StructuralElement, ...]:
    """Parse a `content` sequence, dropping elements that cannot be used."""
    elements: List[StructuralElement] = []
    if raw is None:
        return ()
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        logger.debug(f"Skipping content that is not a sequence: {type(raw).__name__}")
        return ()

    for index, entry in enumerate(raw):
        try:
            element = _parse_element(entry)
        except MalformedNodeError as e:
            logger.debug(f"Skipping malformed element {index}: {e}")
            continue
        if element is not None:
            elements.append(element)
    return tuple(elements)


def _parse_element(raw: Any) -> Optional[StructuralElement]:
    if not isinstance(raw, Mapping):
        raise MalformedNodeError(f"element is a {type(raw).__name__}")
    if "paragraph" in raw:
        return _parse_paragraph(raw["paragraph"])
    if "table" in raw:
        return _parse_table(raw["table"])
    # Section breaks, tables of contents and the like carry nothing to scan
    return None


def _parse_paragraph(raw: Any) -> Paragraph:
    if not isinstance(raw, Mapping):
        raise MalformedNodeError("paragraph is not a mapping")

    runs: List[TextRun] = []
    for element in _sequence(raw.get("elements"), "paragraph elements"):
        text_run = _mapping(element).get("textRun")
        if not isinstance(text_run, Mapping):
            continue
        style = _mapping(text_run.get("textStyle"))
        runs.append(TextRun(
            content=str(text_run.get("content") or ""),
            strikethrough=bool(style.get("strikethrough", False)),
        ))

    style = _mapping(raw.get("paragraphStyle"))
    bullet: Optional[Bullet] = None
    raw_bullet = raw.get("bullet")
    if isinstance(raw_bullet, Mapping) and raw_bullet.get("listId"):
        bullet = Bullet(
            list_id=str(raw_bullet["listId"]),
            nesting_level=_int(raw_bullet.get("nestingLevel"), 0),
        )

    return Paragraph(
        runs=tuple(runs),
        named_style=_str_or_none(style.get("namedStyleType")),
        heading_id=str(style.get("headingId") or ""),
        bullet=bullet,
    )


def _parse_table(raw: Any) -> Table:
    if not isinstance(raw, Mapping):
        raise MalformedNodeError("table is not a mapping")

    rows: List[TableRow] = []
    for raw_row in _sequence(raw.get("tableRows"), "table rows"):
        if not isinstance(raw_row, Mapping):
            logger.debug("Skipping table row that is not a mapping")
            continue
        cells = tuple(
            TableCell(content=parse_content(cell.get("content")))
            for cell in _sequence(raw_row.get("tableCells"), "table cells")
            if isinstance(cell, Mapping)
        )
        rows.append(TableRow(cells=cells))
    return Table(rows=tuple(rows))


def _parse_regions(raw: Any) -> Tuple[Tuple[StructuralElement, ...], ...]:
    """Parse header or footer regions in encounter order."""
    if not isinstance(raw, Mapping):
        return ()
    return tuple(parse_content(_mapping(region).get("content")) for region in raw.values())


def _parse_lists(raw: Any) -> Dict[str, ListDefinition]:
    lists: Dict[str, ListDefinition] = {}
    if not isinstance(raw, Mapping):
        return lists

    for list_id, definition in raw.items():
        properties = _mapping(_mapping(definition).get("listProperties"))
        try:
            raw_levels = _sequence(properties.get("nestingLevels"), "nesting levels")
        except MalformedNodeError as e:
            logger.debug(f"Skipping malformed list {list_id}: {e}")
            continue
        levels = tuple(
            NestingLevel(
                glyph_type=_str_or_none(level.get("glyphType")),
                glyph_symbol=_str_or_none(level.get("glyphSymbol")),
            )
            for level in raw_levels
            if isinstance(level, Mapping)
        )
        lists[str(list_id)] = ListDefinition(nesting_levels=levels)
    return lists


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sequence(value: Any, what: str) -> Sequence[Any]:
    """Return a list-shaped field, treating a missing one as empty."""
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise MalformedNodeError(f"{what} is a {type(value).__name__}, not a list")
    return value


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
