#!/usr/bin/env python3
"""Pytest-based tests for the scanner system."""

from __future__ import annotations

from typing import List

import pytest

from doc_scanner.models import Comment, DocumentTree, Item, ItemKind, Paragraph, TextRun, Bullet, ListDefinition, NestingLevel
from doc_scanner.scanner.classifier import ClassificationKind, ParagraphClassifier
from doc_scanner.scanner.comments import CommentAnnotator
from doc_scanner.scanner.document_scanner import DocumentScanner
from doc_scanner.scanner.walker import TreeWalker

from .builders import checkbox_list, document, heading, paragraph, table


def make_paragraph(text: str, strikethrough: bool = False, bullet: Bullet | None = None) -> Paragraph:
    return Paragraph(runs=(TextRun(text, strikethrough),), bullet=bullet)


def scan(raw: dict, comments: List[Comment] | None = None) -> List[Item]:
    return DocumentScanner().scan(DocumentTree.from_dict(raw), comments or []).items


@pytest.fixture
def classifier() -> ParagraphClassifier:
    return ParagraphClassifier()


# ---------------------------------------------------------------------------
# Paragraph classifier
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", ["[x] Buy milk", "[X] Buy milk", "[ x ] Buy milk", "[\tX  ]Buy milk"])
def test_checked_bracket_is_done_task(classifier: ParagraphClassifier, text: str) -> None:
    result = classifier.classify(make_paragraph(text))

    assert result.kind is ClassificationKind.TASK
    assert result.done is True
    assert result.text == "Buy milk"


@pytest.mark.parametrize("text", ["[] Call Bob", "[ ] Call Bob", "[   ]Call Bob"])
def test_empty_bracket_is_open_task(classifier: ParagraphClassifier, text: str) -> None:
    result = classifier.classify(make_paragraph(text))

    assert result.kind is ClassificationKind.TASK
    assert result.done is False
    assert result.text == "Call Bob"


@pytest.mark.parametrize("text", ["TODO: ship it", "todo:ship it", "ToDo:   ship it"])
def test_todo_marker_is_open_task(classifier: ParagraphClassifier, text: str) -> None:
    result = classifier.classify(make_paragraph(text))

    assert result.kind is ClassificationKind.TASK
    assert result.done is False
    assert result.text == "ship it"


def test_todo_marker_must_lead_the_line(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(make_paragraph("Remember the todo: list"))

    assert result.kind is ClassificationKind.NONE


def test_heading_takes_identifier_from_style(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(Paragraph(
        runs=(TextRun("Goals #q3"),), named_style="HEADING_2", heading_id="h.abc"
    ))

    assert result.kind is ClassificationKind.HEADING
    assert result.text == "Goals #q3"
    assert result.section_id == "h.abc"


def test_heading_without_identifier_gets_empty_id(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(Paragraph(runs=(TextRun("Intro"),), named_style="HEADING_1"))

    assert result.kind is ClassificationKind.HEADING
    assert result.section_id == ""


def test_title_style_is_not_a_heading(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(Paragraph(runs=(TextRun("My Doc"),), named_style="TITLE"))

    assert result.kind is ClassificationKind.NONE


def test_tag_line_extracts_every_tag(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(make_paragraph("Buy milk #errand #today"))

    assert result.kind is ClassificationKind.TAG_LINE
    assert result.tags == ("#errand", "#today")


def test_tags_allow_hyphen_and_underscore(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(make_paragraph("see #follow-up and #q3_plan."))

    assert result.tags == ("#follow-up", "#q3_plan")


def test_hash_inside_a_word_is_not_a_tag(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(make_paragraph("see issue#12 and ##draft then #ok"))

    assert result.kind is ClassificationKind.TAG_LINE
    assert result.tags == ("#ok",)


def test_line_with_only_embedded_hashes_is_plain_text(classifier: ParagraphClassifier) -> None:
    assert classifier.classify(make_paragraph("C# and abc#def")).kind is ClassificationKind.NONE


def test_bracket_task_wins_over_tags(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(make_paragraph("[x] Buy milk #errand"))

    assert result.kind is ClassificationKind.TASK
    assert result.done is True
    assert result.text == "Buy milk #errand"
    assert result.tags == ()


def test_blank_paragraph_is_none(classifier: ParagraphClassifier) -> None:
    assert classifier.classify(make_paragraph("   \n")).kind is ClassificationKind.NONE
    assert classifier.classify(Paragraph()).kind is ClassificationKind.NONE


def test_bare_bracket_has_no_task_text(classifier: ParagraphClassifier) -> None:
    assert classifier.classify(make_paragraph("[x]")).kind is ClassificationKind.NONE


def test_plain_text_is_none(classifier: ParagraphClassifier) -> None:
    assert classifier.classify(make_paragraph("Just some prose.")).kind is ClassificationKind.NONE


def test_runs_are_concatenated(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(Paragraph(runs=(TextRun("[ ] Wri"), TextRun("te report\n"))))

    assert result.kind is ClassificationKind.TASK
    assert result.text == "Write report"


def test_native_checkbox_done_follows_strikethrough(classifier: ParagraphClassifier) -> None:
    lists = {"list.1": ListDefinition(nesting_levels=(NestingLevel(glyph_type="CHECKBOX"),))}
    bullet = Bullet(list_id="list.1")

    open_task = classifier.classify(make_paragraph("Water plants", bullet=bullet), lists)
    done_task = classifier.classify(make_paragraph("Water plants", strikethrough=True, bullet=bullet), lists)

    assert open_task.kind is ClassificationKind.TASK and open_task.done is False
    assert done_task.kind is ClassificationKind.TASK and done_task.done is True
    assert done_task.text == "Water plants"


def test_native_checkbox_with_tags_is_only_a_task(classifier: ParagraphClassifier) -> None:
    lists = {"l": ListDefinition(nesting_levels=(NestingLevel(glyph_type="CHECKBOX"),))}
    result = classifier.classify(make_paragraph("Plan trip #travel", bullet=Bullet(list_id="l")), lists)

    assert result.kind is ClassificationKind.TASK
    assert result.tags == ()


def test_bracket_convention_outranks_native_checkbox(classifier: ParagraphClassifier) -> None:
    lists = {"l": ListDefinition(nesting_levels=(NestingLevel(glyph_type="CHECKBOX"),))}
    result = classifier.classify(make_paragraph("[ ] Not yet", strikethrough=True, bullet=Bullet(list_id="l")), lists)

    assert result.done is False
    assert result.text == "Not yet"


def test_unspecified_glyph_without_symbol_is_checkbox(classifier: ParagraphClassifier) -> None:
    lists = {
        "check": ListDefinition(nesting_levels=(NestingLevel(glyph_type="GLYPH_TYPE_UNSPECIFIED"),)),
        "bullet": ListDefinition(nesting_levels=(NestingLevel(glyph_type="GLYPH_TYPE_UNSPECIFIED", glyph_symbol="●"),)),
        "numbered": ListDefinition(nesting_levels=(NestingLevel(glyph_type="DECIMAL"),)),
    }

    assert classifier.classify(make_paragraph("a", bullet=Bullet("check")), lists).kind is ClassificationKind.TASK
    assert classifier.classify(make_paragraph("a", bullet=Bullet("bullet")), lists).kind is ClassificationKind.NONE
    assert classifier.classify(make_paragraph("a", bullet=Bullet("numbered")), lists).kind is ClassificationKind.NONE


def test_checkbox_glyph_is_resolved_per_nesting_level(classifier: ParagraphClassifier) -> None:
    lists = {"l": ListDefinition(nesting_levels=(
        NestingLevel(glyph_type="DECIMAL"),
        NestingLevel(glyph_type="CHECKBOX"),
    ))}

    top = classifier.classify(make_paragraph("Step", bullet=Bullet("l", 0)), lists)
    nested = classifier.classify(make_paragraph("Step", bullet=Bullet("l", 1)), lists)
    beyond = classifier.classify(make_paragraph("Step", bullet=Bullet("l", 5)), lists)

    assert top.kind is ClassificationKind.NONE
    assert nested.kind is ClassificationKind.TASK
    assert beyond.kind is ClassificationKind.NONE


def test_unknown_list_is_not_a_checkbox(classifier: ParagraphClassifier) -> None:
    result = classifier.classify(make_paragraph("Orphan #tag", bullet=Bullet("missing")), {})

    assert result.kind is ClassificationKind.TAG_LINE


def test_precedence_is_inspectable(classifier: ParagraphClassifier) -> None:
    assert classifier.precedence == ["checked_box", "empty_box", "todo_marker", "native_checkbox", "tag_line"]


# ---------------------------------------------------------------------------
# Tree walker and document scanner
# ---------------------------------------------------------------------------

def test_items_inherit_the_latest_heading() -> None:
    items = scan(document([
        paragraph("[ ] before any heading"),
        heading("Groceries", "h.1"),
        paragraph("[x] Buy milk"),
        paragraph("Pick up #errand"),
        heading("Work", "h.2", level=2),
        paragraph("TODO: file report"),
    ]))

    assert [(item.kind, item.text, item.section_id) for item in items] == [
        (ItemKind.TASK, "before any heading", ""),
        (ItemKind.HEADING, "Groceries", "h.1"),
        (ItemKind.TASK, "Buy milk", "h.1"),
        (ItemKind.TAG, "#errand", "h.1"),
        (ItemKind.HEADING, "Work", "h.2"),
        (ItemKind.TASK, "file report", "h.2"),
    ]


def test_multiple_tags_become_separate_items() -> None:
    items = scan(document([paragraph("Buy milk #errand #today")]))

    assert [(item.kind, item.text) for item in items] == [
        (ItemKind.TAG, "#errand"),
        (ItemKind.TAG, "#today"),
    ]


def test_task_line_with_tags_yields_one_task() -> None:
    items = scan(document([paragraph("[x] Buy milk #errand")]))

    assert len(items) == 1
    assert items[0].kind is ItemKind.TASK
    assert items[0].done is True
    assert items[0].text == "Buy milk #errand"


def test_table_cells_are_visited_row_major() -> None:
    items = scan(document([
        table(
            [[paragraph("#a")], [paragraph("#b")]],
            [[paragraph("#c")], [paragraph("#d")]],
        )
    ]))

    assert [item.text for item in items] == ["#a", "#b", "#c", "#d"]


def test_nested_table_tag_inherits_heading_before_outer_table() -> None:
    nested = table([[paragraph("Deep #nested")]])
    items = scan(document([
        heading("Plan", "h.plan"),
        table(
            [[paragraph("[ ] cell one")], [paragraph("cell two"), nested]],
            [[paragraph("cell three")], [paragraph("cell four")]],
        ),
        paragraph("After #table"),
    ]))

    nested_tag = next(item for item in items if item.text == "#nested")
    assert nested_tag.section_id == "h.plan"
    assert [item.text for item in items] == ["Plan", "cell one", "#nested", "#table"]


def test_heading_inside_table_updates_section_for_following_siblings() -> None:
    items = scan(document([
        table([[heading("In table", "h.t")]]),
        paragraph("[ ] after table"),
    ]))

    assert items[-1].section_id == "h.t"


def test_headers_and_footers_follow_body_and_inherit_last_section() -> None:
    items = scan(document(
        body=[heading("Body", "h.body"), paragraph("body #tag")],
        headers=[[paragraph("[ ] header task")]],
        footers=[[paragraph("footer #note")]],
    ))

    assert [(item.text, item.section_id) for item in items] == [
        ("Body", "h.body"),
        ("#tag", "h.body"),
        ("header task", "h.body"),
        ("#note", "h.body"),
    ]


def test_section_reset_per_region_is_opt_in() -> None:
    tree = DocumentTree.from_dict(document(
        body=[heading("Body", "h.body")],
        footers=[[paragraph("[ ] footer task")]],
    ))

    result = DocumentScanner(reset_section_per_region=True).scan(tree)

    assert result.items[-1].section_id == ""


def test_comment_tasks_come_last() -> None:
    items = scan(
        document(body=[paragraph("#body")], footers=[[paragraph("#footer")]]),
        [Comment("TODO: check numbers", "Ada")],
    )

    assert [item.kind for item in items] == [ItemKind.TAG, ItemKind.TAG, ItemKind.COMMENT_TASK]
    assert items[-1].text == "check numbers (Comment by Ada)"
    assert items[-1].section_id == ""


def test_local_tags_and_recognized_count() -> None:
    result = DocumentScanner().scan(DocumentTree.from_dict(document([
        heading("Trip", "h.1"),
        paragraph("Pack #travel #gear"),
        paragraph("More #travel"),
        paragraph("[ ] book hotel"),
        paragraph("plain prose"),
    ])))

    assert result.local_tags == frozenset({"#travel", "#gear"})
    # heading + two tag lines + task; tokens are not counted individually
    assert result.recognized_count == 4
    assert result.is_worth_showing


def test_comment_tasks_do_not_count_as_recognized() -> None:
    result = DocumentScanner().scan(
        DocumentTree.from_dict(document([paragraph("nothing here")])),
        [Comment("TODO: write the intro", "Ada")],
    )

    assert [item.kind for item in result.items] == [ItemKind.COMMENT_TASK]
    assert result.recognized_count == 0
    assert not result.is_worth_showing


def test_empty_document_is_not_worth_showing() -> None:
    result = DocumentScanner().scan(DocumentTree.from_dict(document([paragraph("nothing here")])))

    assert result.items == []
    assert result.recognized_count == 0
    assert not result.is_worth_showing


def test_walker_continues_past_malformed_elements() -> None:
    raw = document([
        {"paragraph": "not a mapping"},
        {"sectionBreak": {}},
        {"table": {"tableRows": [{"tableCells": [{}]}, "junk"]}},
        42,
        paragraph("[ ] still found"),
    ])

    items = scan(raw)

    assert [item.text for item in items] == ["still found"]


@pytest.mark.parametrize("malformed", [
    {"paragraph": {"elements": 5}},
    {"paragraph": {"elements": "[ ] not a run list"}},
    {"table": {"tableRows": 5}},
    {"table": {"tableRows": [{"tableCells": 7}]}},
    {"paragraph": {
        "elements": [{"textRun": {"content": "Looks like a heading\n"}}],
        "paragraphStyle": {"namedStyleType": 5, "headingId": "h.9"},
    }},
])
def test_wrongly_typed_fields_do_not_stop_the_scan(malformed: dict) -> None:
    items = scan(document([malformed, paragraph("#kept")]))

    assert [(item.kind, item.text) for item in items] == [(ItemKind.TAG, "#kept")]


def test_list_with_malformed_nesting_levels_is_not_a_checkbox() -> None:
    items = scan(document(
        [paragraph("Call the venue", list_id="broken"), paragraph("#kept")],
        lists={
            "broken": {"listProperties": {"nestingLevels": 5}},
            "odd": {"listProperties": {"nestingLevels": [{"glyphType": 3, "glyphSymbol": ["●"]}]}},
        },
    ))

    assert [item.text for item in items] == ["#kept"]


def test_walker_state_is_per_invocation() -> None:
    walker = TreeWalker()
    first = walker.walk(DocumentTree.from_dict(document([heading("One", "h.1")])).body, {})
    second = walker.walk(DocumentTree.from_dict(document([paragraph("[ ] task")])).body, {})

    assert first.section.section_id == "h.1"
    assert second.items[0].section_id == ""


# ---------------------------------------------------------------------------
# Comment annotator
# ---------------------------------------------------------------------------

def test_comment_annotator_keeps_only_todo_comments() -> None:
    items = CommentAnnotator().annotate([
        Comment("Looks good to me", "Ada"),
        Comment("todo: rename section", "Grace"),
        Comment("Please TODO: add sources", "Linus"),
        Comment("   ", "Nobody"),
        Comment("TODO:", "Empty"),
    ])

    assert [item.text for item in items] == [
        "rename section (Comment by Grace)",
        "Please add sources (Comment by Linus)",
    ]
    assert all(item.kind is ItemKind.COMMENT_TASK for item in items)


def test_comment_text_keeps_its_line_breaks() -> None:
    items = CommentAnnotator().annotate([Comment("  TODO:  check totals\nthen  re-run the export  ", "Ada")])

    assert items[0].text == "check totals\nthen  re-run the export (Comment by Ada)"


def test_comment_author_defaults_to_unknown() -> None:
    comment = Comment.from_dict({"content": "TODO: tidy"})

    assert CommentAnnotator().annotate([comment])[0].text == "tidy (Comment by Unknown)"


def test_items_reject_empty_text() -> None:
    with pytest.raises(ValueError):
        Item(kind=ItemKind.TAG, text="  ")


def test_native_checkbox_in_document() -> None:
    items = scan(document(
        [
            paragraph("Water plants", list_id="kix.list1"),
            paragraph("Feed cat", list_id="kix.list1", strikethrough=True),
            paragraph("Plain bullet #pets", list_id="kix.list2"),
        ],
        lists={
            "kix.list1": checkbox_list(),
            "kix.list2": checkbox_list(glyph_type=None, glyph_symbol="●"),
        },
    ))

    assert [(item.kind, item.text, item.done) for item in items] == [
        (ItemKind.TASK, "Water plants", False),
        (ItemKind.TASK, "Feed cat", True),
        (ItemKind.TAG, "#pets", False),
    ]
