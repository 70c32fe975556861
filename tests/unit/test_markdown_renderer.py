#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_markdown_renderer.py
"""Unit tests for MarkdownRenderer.

Tests cover:
- List items with attached blocks
- CommonMark and Writerside flavors
- Tables with and without spans
- Escaping and variable placeholders

"""

import json

import pytest

from flaremark.ast import (
    Admonition,
    CodeBlock,
    CollapsibleSection,
    Document,
    Image,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
    VariablePlaceholder,
)
from flaremark.diagnostics import DiagnosticCollector
from flaremark.options import MarkdownRendererOptions
from flaremark.preprocess import repair_tree
from flaremark.renderers import MarkdownRenderer

WRITERSIDE = MarkdownRendererOptions(flavor="writerside")


def _para(text: str) -> Paragraph:
    return Paragraph(content=[Text(content=text)])


def _item(*children: Node) -> ListItem:
    return ListItem(children=list(children))


def _render(*children: Node, options: MarkdownRendererOptions | None = None) -> str:
    return MarkdownRenderer(options).render_to_string(Document(children=list(children)))


@pytest.mark.unit
class TestLists:
    """Tests for list rendering."""

    def test_orphan_paragraph_continuation(self) -> None:
        """Test that an attached paragraph is indented under its item."""
        doc = Document(
            children=[List(ordered=True, items=[_item(Text(content="First")), _para("Orphan"), _item(Text(content="Second"))])]
        )

        output = MarkdownRenderer().render_to_string(repair_tree(doc))

        assert output == "1. First\n\n   Orphan\n\n2. Second\n"

    def test_tight_list(self) -> None:
        """Test that items without blocks are not separated."""
        output = _render(List(ordered=False, items=[_item(Text(content="a")), _item(Text(content="b"))]))

        assert output == "- a\n- b\n"

    def test_nested_list_indented(self) -> None:
        """Test that a nested list is indented to the content column."""
        nested = List(ordered=False, items=[_item(Text(content="a")), _item(Text(content="b"))])

        output = _render(List(ordered=True, items=[_item(Text(content="Main"), nested)]))

        assert output == "1. Main\n\n   - a\n   - b\n"

    def test_start_number(self) -> None:
        """Test numbering from a start value."""
        output = _render(List(ordered=True, start=4, items=[_item(Text(content="d")), _item(Text(content="e"))]))

        assert output == "4. d\n5. e\n"

    def test_adjacent_lists_separated(self) -> None:
        """Test that adjacent lists are kept apart with a comment."""
        output = _render(
            List(ordered=False, items=[_item(Text(content="a"))]),
            List(ordered=False, items=[_item(Text(content="b"))]),
        )

        assert output == "- a\n\n<!-- -->\n\n- b\n"

    def test_writerside_list_type(self) -> None:
        """Test the Writerside attribute for lettered lists."""
        output = _render(List(ordered=True, style="lower-alpha", items=[_item(Text(content="a"))]), options=WRITERSIDE)

        assert output == '1. a\n{type="alpha-lower"}\n'

    def test_commonmark_lettered_list_reported(self) -> None:
        """Test that CommonMark falls back to numbers and records the lost numbering style."""
        diagnostics = DiagnosticCollector()
        doc = Document(children=[List(ordered=True, style="upper-roman", items=[_item(Text(content="a"))])])

        output = MarkdownRenderer(diagnostics=diagnostics).render_to_string(doc)

        assert output == "1. a\n"
        assert [(d.severity, d.category) for d in diagnostics] == [("info", "structural")]
        assert "upper-roman" in diagnostics.diagnostics[0].message

    def test_writerside_lettered_list_not_reported(self) -> None:
        """Test that Writerside keeps lettered numbering without a diagnostic."""
        diagnostics = DiagnosticCollector()
        doc = Document(children=[List(ordered=True, style="lower-alpha", items=[_item(Text(content="a"))])])

        MarkdownRenderer(WRITERSIDE, diagnostics=diagnostics).render_to_string(doc)

        assert len(diagnostics) == 0

    def test_bullet_char_option(self) -> None:
        """Test the unordered marker option."""
        output = _render(
            List(ordered=False, items=[_item(Text(content="a"))]), options=MarkdownRendererOptions(bullet_char="*")
        )

        assert output == "* a\n"


@pytest.mark.unit
class TestAdmonitions:
    """Tests for note/tip/warning output."""

    def test_commonmark_label(self) -> None:
        """Test the bold label form."""
        assert _render(Admonition(kind="note", children=[_para("Save often.")])) == "> **Note:** Save often.\n"

    def test_commonmark_paragraphs_kept(self) -> None:
        """Test that paragraphs of a note stay separate inside the quote."""
        output = _render(Admonition(kind="tip", children=[_para("A"), _para("B")]))

        assert output == "> **Tip:** A\n>\n> B\n"

    def test_writerside_style(self) -> None:
        """Test the Writerside attribute after the quote."""
        output = _render(Admonition(kind="caution", children=[_para("Careful.")]), options=WRITERSIDE)

        assert output == '> Careful.\n{style="warning"}\n'

    def test_admonition_in_item(self) -> None:
        """Test a note attached to a list item."""
        note = Admonition(kind="note", children=[_para("x")])

        output = _render(List(ordered=True, items=[_item(Text(content="Step"), note)]))

        assert output == "1. Step\n\n   > **Note:** x\n"


@pytest.mark.unit
class TestCollapsible:
    """Tests for collapsible sections."""

    def test_commonmark_details(self) -> None:
        """Test the details element."""
        section = CollapsibleSection(title=[Text(content="More")], children=[_para("Body")], level=1)

        assert _render(section) == "<details>\n<summary>More</summary>\n\nBody\n\n</details>\n"

    def test_writerside_collapsible(self) -> None:
        """Test the Writerside collapsible element."""
        section = CollapsibleSection(title=[Text(content="A & B")], children=[_para("Body")], level=1)

        output = _render(section, options=WRITERSIDE)

        assert output == '<collapsible title="A &amp; B">\n\nBody\n\n</collapsible>\n'


@pytest.mark.unit
class TestTables:
    """Tests for table rendering."""

    @staticmethod
    def _cell(text: str, colspan: int = 1) -> TableCell:
        return TableCell(content=[Text(content=text)], colspan=colspan)

    def test_pipe_table(self) -> None:
        """Test a simple pipe table."""
        table = Table(
            header=TableRow(cells=[self._cell("A"), self._cell("B")], is_header=True),
            rows=[TableRow(cells=[self._cell("1"), self._cell("2")])],
        )

        assert _render(table) == "| A | B |\n| --- | --- |\n| 1 | 2 |\n"

    def test_span_falls_back_to_html(self) -> None:
        """Test that spans produce an HTML table."""
        table = Table(
            header=TableRow(cells=[self._cell("A"), self._cell("B")], is_header=True),
            rows=[TableRow(cells=[self._cell("wide", colspan=2)])],
        )

        output = _render(table)

        assert output.startswith("<table>")
        assert '<td colspan="2">wide</td>' in output

    def test_span_flattened_without_html_tables(self) -> None:
        """Test that spans are flattened into empty cells when HTML tables are off."""
        table = Table(rows=[TableRow(cells=[self._cell("wide", colspan=2)])])

        output = _render(table, options=MarkdownRendererOptions(html_tables=False))

        assert "| wide |  |" in output


@pytest.mark.unit
class TestInline:
    """Tests for inline output."""

    def test_escaping(self) -> None:
        """Test escaping of formatting characters."""
        assert _render(_para("a*b_c [x]")) == "a\\*b\\_c \\[x\\]\n"

    def test_line_start_protected(self) -> None:
        """Test that a paragraph starting with a number and dot is not a list."""
        assert _render(_para("1. not a list")) == "1\\. not a list\n"

    def test_placeholders(self) -> None:
        """Test the placeholder spelling of each flavor."""
        paragraph = Paragraph(content=[VariablePlaceholder(name="General.ProductName", value="W")])

        assert _render(paragraph) == "{{General.ProductName}}\n"
        assert _render(paragraph, options=WRITERSIDE) == '<var name="General.ProductName"/>\n'

    def test_internal_link(self) -> None:
        """Test a rewritten cross-reference."""
        link = Link(url="Guide/Install.md", content=[Text(content="Install")], metadata={"internal": True})

        assert _render(Paragraph(content=[link])) == "[Install](Guide/Install.md)\n"

    def test_writerside_image_style(self) -> None:
        """Test the Writerside image attribute."""
        output = _render(Paragraph(content=[Image(url="Images/screen.png", alt_text="Screen")]), options=WRITERSIDE)

        assert output == '![Screen](Images/screen.png){style="block"}\n'

    def test_code_fence_longer_than_content(self) -> None:
        """Test that the fence outgrows backticks in the code."""
        output = _render(CodeBlock(content="```\nx\n```", language="md"))

        assert output.startswith("````md\n")
        assert output.endswith("\n````\n")


@pytest.mark.unit
class TestVariablesFiles:
    """Tests for variables listings."""

    def test_json_listing(self) -> None:
        """Test the CommonMark JSON listing."""
        listing = MarkdownRenderer().adapter.variables_file({"General.Version": "4.2", "General.ProductName": "W"})

        assert listing.name == "variables.json"
        assert json.loads(listing.content) == {"General.ProductName": "W", "General.Version": "4.2"}
        assert list(json.loads(listing.content)) == ["General.ProductName", "General.Version"]

    def test_writerside_listing(self) -> None:
        """Test the Writerside v.list file."""
        listing = MarkdownRenderer(WRITERSIDE).adapter.variables_file({"General.ProductName": 'Widget "Pro"'})

        assert listing.name == "v.list"
        assert '<var name="General.ProductName" value="Widget &quot;Pro&quot;"/>' in listing.content
        assert listing.content.rstrip().endswith("</vars>")

    def test_custom_file_name(self) -> None:
        """Test the file name option."""
        options = MarkdownRendererOptions(variables_file_name="vars.json")

        assert MarkdownRenderer(options).adapter.variables_file({}).name == "vars.json"
