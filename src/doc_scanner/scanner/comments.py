"""Comment annotation: surface TODO markers left in document comments."""

from __future__ import annotations

import re
from typing import List, Sequence

from loguru import logger

from ..models import Comment, Item, ItemKind
from ..utils.text_utils import strip_marker


COMMENT_TODO_PATTERN = re.compile(r'todo:[ \t]*', re.IGNORECASE)


class CommentAnnotator:
    """Turn comments carrying a TODO marker into comment-task items."""

    def annotate(self, comments: Sequence[Comment]) -> List[Item]:
        items: List[Item] = []
        for comment in comments:
            text = comment.text.strip()
            if not text or not COMMENT_TODO_PATTERN.search(text):
                continue

            content = strip_marker(text, COMMENT_TODO_PATTERN)
            if not content:
                logger.debug(f"Ignoring empty TODO comment by {comment.author_name}")
                continue

            items.append(Item(
                kind=ItemKind.COMMENT_TASK,
                text=format_comment_task(content, comment.author_name),
                section_id="",
            ))
        return items


def format_comment_task(content: str, author_name: str) -> str:
    return f"{content} (Comment by {author_name})"
