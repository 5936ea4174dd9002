"""
Paragraph classification.

Decides whether a paragraph is a heading, a task, a tag-bearing line or plain
text. Task and tag conventions are checked through an ordered rule table;
the first rule that matches wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple

from loguru import logger

from ..models import ListDefinition, Paragraph


CHECKED_BOX_PATTERN = re.compile(r'^\[\s*[xX]\s*\]')
EMPTY_BOX_PATTERN = re.compile(r'^\[\s*\]')
TODO_PATTERN = re.compile(r'^todo:', re.IGNORECASE)
TAG_PATTERN = re.compile(r'(?<![\w#])#[\w-]+')


class ClassificationKind(Enum):
    NONE = "none"
    HEADING = "heading"
    TASK = "task"
    TAG_LINE = "tag_line"


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one paragraph."""
    kind: ClassificationKind
    text: str = ""
    section_id: str = ""
    done: bool = False
    tags: Tuple[str, ...] = ()


NO_MATCH = Classification(kind=ClassificationKind.NONE)


@dataclass(frozen=True)
class ParagraphContext:
    """What the rules get to look at for one paragraph."""
    paragraph: Paragraph
    text: str
    strikethrough: bool
    lists: Mapping[str, ListDefinition]


@dataclass(frozen=True)
class ClassificationRule:
    """A named predicate/constructor pair in the precedence table."""
    name: str
    matches: Callable[[ParagraphContext], bool]
    build: Callable[[ParagraphContext], Classification]


def _prefixed_task(pattern: re.Pattern[str], done: bool) -> Callable[[ParagraphContext], Classification]:
    def build(context: ParagraphContext) -> Classification:
        text = pattern.sub('', context.text, count=1).strip()
        if not text:
            return NO_MATCH
        return Classification(kind=ClassificationKind.TASK, text=text, done=done)
    return build


def _is_native_checkbox(context: ParagraphContext) -> bool:
    bullet = context.paragraph.bullet
    if bullet is None:
        return False
    definition = context.lists.get(bullet.list_id)
    return definition is not None and definition.is_checkbox(bullet.nesting_level)


def _native_task(context: ParagraphContext) -> Classification:
    return Classification(kind=ClassificationKind.TASK, text=context.text, done=context.strikethrough)


def _tag_line(context: ParagraphContext) -> Classification:
    return Classification(
        kind=ClassificationKind.TAG_LINE,
        text=context.text,
        tags=tuple(TAG_PATTERN.findall(context.text)),
    )


# Explicit text conventions outrank native checkbox detection; tags are the
# fallback for prose lines.
DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("checked_box", lambda c: bool(CHECKED_BOX_PATTERN.match(c.text)),
                       _prefixed_task(CHECKED_BOX_PATTERN, done=True)),
    ClassificationRule("empty_box", lambda c: bool(EMPTY_BOX_PATTERN.match(c.text)),
                       _prefixed_task(EMPTY_BOX_PATTERN, done=False)),
    ClassificationRule("todo_marker", lambda c: bool(TODO_PATTERN.match(c.text)),
                       _prefixed_task(TODO_PATTERN, done=False)),
    ClassificationRule("native_checkbox", _is_native_checkbox, _native_task),
    ClassificationRule("tag_line", lambda c: bool(TAG_PATTERN.search(c.text)), _tag_line),
)


class ParagraphClassifier:
    """Classify paragraphs using a fixed precedence of rules."""

    def __init__(self, rules: Optional[Tuple[ClassificationRule, ...]] = None) -> None:
        self.rules: Tuple[ClassificationRule, ...] = rules if rules is not None else DEFAULT_RULES

    @property
    def precedence(self) -> List[str]:
        """Rule names in evaluation order."""
        return [rule.name for rule in self.rules]

    def classify(
        self,
        paragraph: Paragraph,
        lists: Optional[Mapping[str, ListDefinition]] = None
    ) -> Classification:
        """Classify one paragraph.

        Args:
            paragraph: Paragraph to classify.
            lists: The document's list definitions, keyed by list id.

        Returns:
            The classification; NO_MATCH for blank or plain text.
        """
        text = paragraph.text.strip()
        if not text:
            return NO_MATCH

        if paragraph.heading_level is not None:
            return Classification(
                kind=ClassificationKind.HEADING,
                text=text,
                section_id=paragraph.heading_id,
            )

        context = ParagraphContext(
            paragraph=paragraph,
            text=text,
            strikethrough=paragraph.has_strikethrough,
            lists=lists if lists is not None else {},
        )
        for rule in self.rules:
            if rule.matches(context):
                logger.trace(f"Paragraph matched rule '{rule.name}'")
                return rule.build(context)
        return NO_MATCH
