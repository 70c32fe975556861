#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_repair.py
"""Unit tests for structural list repair.

Tests cover:
- Demotion of non-item children into the preceding item
- Nesting of sibling lists by numbering style
- Idempotence of the repair pass

"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from flaremark.ast import Admonition, Document, List, ListItem, Node, Paragraph, Text, iter_nodes
from flaremark.diagnostics import DiagnosticCollector
from flaremark.preprocess import repair_tree


def _para(text: str) -> Paragraph:
    return Paragraph(content=[Text(content=text)])


def _item(*children: Node) -> ListItem:
    return ListItem(children=list(children))


@pytest.mark.unit
class TestDemotion:
    """Tests for content sitting directly inside a list."""

    def test_orphan_paragraph_joins_previous_item(self) -> None:
        """Test that a paragraph between items is moved into the first item."""
        doc = Document(
            children=[List(ordered=True, items=[_item(Text(content="First")), _para("Orphan"), _item(Text(content="Second"))])]
        )
        diagnostics = DiagnosticCollector()

        repaired = repair_tree(doc, diagnostics)

        lst = repaired.children[0]
        assert len(lst.items) == 2
        assert all(isinstance(item, ListItem) for item in lst.items)
        assert lst.items[0].children == [Text(content="First"), _para("Orphan")]
        assert lst.items[1].children == [Text(content="Second")]
        assert len(diagnostics.warnings) == 1
        assert diagnostics.warnings[0].category == "structural"

    def test_content_before_first_item_gets_synthetic_item(self) -> None:
        """Test that leading content is anchored to an empty synthetic item."""
        doc = Document(children=[List(ordered=False, items=[_para("Lead"), _item(Text(content="A"))])])

        lst = repair_tree(doc).children[0]

        assert lst.items[0].metadata["synthetic"] is True
        assert lst.items[0].children == [_para("Lead")]
        assert lst.items[1].children == [Text(content="A")]

    def test_bare_nested_list_is_demoted(self) -> None:
        """Test that a list directly inside a list moves into the previous item."""
        inner = List(ordered=True, style="lower-alpha", items=[_item(Text(content="a"))])
        doc = Document(children=[List(ordered=True, items=[_item(Text(content="Main")), inner])])

        lst = repair_tree(doc).children[0]

        assert len(lst.items) == 1
        assert isinstance(lst.items[0].children[-1], List)

    def test_admonition_inside_list_is_demoted(self) -> None:
        """Test that a note between items is attached to the previous item."""
        note = Admonition(kind="note", children=[_para("Careful")])
        doc = Document(children=[List(ordered=True, items=[_item(Text(content="One")), note])])

        lst = repair_tree(doc).children[0]

        assert lst.items[0].children[-1] == note

    def test_empty_list_removed(self) -> None:
        """Test that lists without items disappear."""
        doc = Document(children=[List(ordered=True, items=[]), _para("After")])

        repaired = repair_tree(doc)

        assert repaired.children == [_para("After")]

    def test_input_not_modified(self) -> None:
        """Test that repair returns a new tree."""
        lst = List(ordered=True, items=[_item(Text(content="First")), _para("Orphan")])
        doc = Document(children=[lst])

        repair_tree(doc)

        assert len(lst.items) == 2
        assert isinstance(lst.items[1], Paragraph)


@pytest.mark.unit
class TestContainerRules:
    """Tests for rules applied to sibling sequences."""

    def test_stray_items_wrapped(self) -> None:
        """Test that list items outside a list are wrapped in one list."""
        doc = Document(children=[_item(Text(content="a")), _item(Text(content="b")), _para("x")])

        repaired = repair_tree(doc)

        assert isinstance(repaired.children[0], List)
        assert len(repaired.children[0].items) == 2
        assert repaired.children[1] == _para("x")

    def test_alpha_list_after_numbered_list_is_nested(self) -> None:
        """Test that an adjacent lower-alpha list nests under the numbered list."""
        numbered = List(ordered=True, items=[_item(Text(content="1")), _item(Text(content="2"))])
        alpha = List(ordered=True, style="lower-alpha", items=[_item(Text(content="a"))])

        repaired = repair_tree(Document(children=[numbered, alpha]))

        assert len(repaired.children) == 1
        last = repaired.children[0].items[-1]
        assert isinstance(last.children[-1], List)
        assert last.children[-1].style == "lower-alpha"

    def test_continued_list_numbering(self) -> None:
        """Test that a continued list starts after the previous list."""
        first = List(ordered=True, items=[_item(Text(content="a")), _item(Text(content="b"))])
        second = List(ordered=True, items=[_item(Text(content="c"))], metadata={"continue": True})

        repaired = repair_tree(Document(children=[first, _para("between"), second]))

        assert repaired.children[2].start == 3

    def test_unordered_list_not_nested(self) -> None:
        """Test that adjacent bullet lists stay siblings."""
        doc = Document(
            children=[
                List(ordered=True, items=[_item(Text(content="1"))]),
                List(ordered=False, items=[_item(Text(content="x"))]),
            ]
        )

        assert len(repair_tree(doc).children) == 2


# ----------------------------------------------------------------------
# Property tests
# ----------------------------------------------------------------------

_words = st.text(alphabet="abcdefgh ", min_size=1, max_size=8)
_paragraphs = _words.map(_para)
_texts = _words.map(lambda text: Text(content=text))
_styles = st.sampled_from(["arabic", "lower-alpha", "lower-roman", "upper-alpha"])


def _lists(children: st.SearchStrategy[Node]) -> st.SearchStrategy[Node]:
    items = st.lists(children, max_size=3).map(lambda kids: ListItem(children=kids))
    return st.builds(
        lambda ordered, style, entries, cont: List(
            ordered=ordered,
            style=style if ordered else "arabic",
            items=entries,
            metadata={"continue": True} if cont else {},
        ),
        st.booleans(),
        _styles,
        st.lists(st.one_of(items, children), max_size=4),
        st.booleans(),
    )


_blocks = st.recursive(st.one_of(_paragraphs, _texts), _lists, max_leaves=12)
_documents = st.lists(
    st.one_of(_blocks, _blocks.map(lambda block: ListItem(children=[block]))), max_size=5
).map(lambda children: Document(children=children))


def _lists_hold_only_items(node: Node) -> bool:
    return all(
        all(isinstance(item, ListItem) for item in n.items) for n in iter_nodes(node) if isinstance(n, List)
    )


@pytest.mark.unit
class TestRepairProperties:
    """Property-based tests for the repair stage."""

    @given(_documents)
    def test_repair_is_idempotent(self, doc: Document) -> None:
        """Property: repairing a repaired tree changes nothing and reports nothing."""
        once = repair_tree(doc)
        diagnostics = DiagnosticCollector()

        twice = repair_tree(once, diagnostics)

        assert twice == once
        assert len(diagnostics) == 0

    @given(_documents)
    def test_lists_only_contain_items(self, doc: Document) -> None:
        """Property: after repair every list holds only list items."""
        repaired = repair_tree(doc)

        assert _lists_hold_only_items(repaired)
        assert not any(isinstance(child, ListItem) for child in repaired.children)
