#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_flare_parser.py
"""Unit tests for the Flare topic parser."""

import pytest
from utils import topic

from flaremark.ast import (
    Admonition,
    CodeBlock,
    CollapsibleMarker,
    CrossReference,
    FragmentRef,
    GlossaryTermRef,
    Image,
    Link,
    List,
    ListItem,
    Paragraph,
    Table,
    Text,
    VariableRef,
    collect_text,
)
from flaremark.exceptions import InvalidOptionsError, ParsingError
from flaremark.options import FlareParserOptions, MarkdownRendererOptions
from flaremark.parsers import FlareParser, is_internal_topic_link, split_anchor


@pytest.mark.unit
class TestBasicParsing:
    """Tests for plain XHTML content."""

    def test_paragraph(self) -> None:
        """Test parsing a single paragraph."""
        doc = FlareParser().parse(topic("<p>Hello world</p>"))

        assert len(doc.children) == 1
        assert isinstance(doc.children[0], Paragraph)
        assert collect_text(doc.children[0]) == "Hello world"

    def test_title_and_source_path_metadata(self) -> None:
        """Test that the topic title and path are recorded."""
        doc = FlareParser(source_path="Content/Intro.htm").parse(topic("<p>x</p>", title="Introduction"))

        assert doc.metadata["title"] == "Introduction"
        assert doc.metadata["source_path"] == "Content/Intro.htm"

    def test_empty_document_raises(self) -> None:
        """Test that empty input is a parsing error."""
        with pytest.raises(ParsingError):
            FlareParser().parse("   ")

    def test_wrong_options_type(self) -> None:
        """Test that renderer options are rejected."""
        with pytest.raises(InvalidOptionsError):
            FlareParser(MarkdownRendererOptions())  # type: ignore[arg-type]

    def test_code_block_language(self) -> None:
        """Test that the language class of a pre block is kept."""
        doc = FlareParser().parse(topic('<pre class="language-python"><code>print(1)</code></pre>'))

        block = doc.children[0]
        assert isinstance(block, CodeBlock)
        assert block.language == "python"
        assert block.content == "print(1)"

    def test_table_header_row(self) -> None:
        """Test that a leading row of th cells becomes the header."""
        doc = FlareParser().parse(
            topic("<table><tr><th>Name</th><th>Value</th></tr><tr><td>a</td><td>1</td></tr></table>")
        )

        table = doc.children[0]
        assert isinstance(table, Table)
        assert table.header is not None
        assert [collect_text(cell) for cell in table.header.cells] == ["Name", "Value"]
        assert len(table.rows) == 1

    def test_image_dimensions_from_style(self) -> None:
        """Test that pixel dimensions are read from inline CSS."""
        doc = FlareParser().parse(topic('<p><img src="Images/a.png" style="width: 16px; height: 12px;" /></p>'))

        image = doc.children[0].content[0]
        assert isinstance(image, Image)
        assert (image.width, image.height) == (16, 12)


@pytest.mark.unit
class TestListParsing:
    """Tests that lists are kept as written."""

    def test_list_keeps_invalid_children(self) -> None:
        """Test that a paragraph directly inside a list is not moved."""
        doc = FlareParser().parse(topic("<ol><li>First</li><p>Orphan</p><li>Second</li></ol>"))

        lst = doc.children[0]
        assert isinstance(lst, List)
        assert [type(item) for item in lst.items] == [ListItem, Paragraph, ListItem]

    def test_list_style_from_css(self) -> None:
        """Test the list-style-type property."""
        doc = FlareParser().parse(topic('<ol style="list-style-type: lower-alpha;"><li>A</li></ol>'))

        assert doc.children[0].style == "lower-alpha"

    def test_list_style_from_type_attribute(self) -> None:
        """Test the type attribute."""
        doc = FlareParser().parse(topic('<ol type="i"><li>A</li></ol>'))

        assert doc.children[0].style == "lower-roman"

    def test_continue_attribute(self) -> None:
        """Test that MadCap:continue is recorded on the list."""
        doc = FlareParser().parse(topic('<ol MadCap:continue="true"><li>A</li></ol>'))

        assert doc.children[0].metadata["continue"] is True

    def test_whitespace_between_items_is_dropped(self) -> None:
        """Test that formatting whitespace does not become items."""
        doc = FlareParser().parse(topic("<ul>\n  <li>A</li>\n  <li>B</li>\n</ul>"))

        assert all(isinstance(item, ListItem) for item in doc.children[0].items)
        assert len(doc.children[0].items) == 2


@pytest.mark.unit
class TestExtensionParsing:
    """Tests for MadCap authoring extensions."""

    def test_variable(self) -> None:
        """Test that a variable becomes a VariableRef."""
        doc = FlareParser().parse(topic('<p>Product: <MadCap:variable name="General.ProductName" /></p>'))

        ref = doc.children[0].content[-1]
        assert isinstance(ref, VariableRef)
        assert (ref.namespace, ref.key) == ("General", "ProductName")
        assert ref.name == "General.ProductName"

    def test_snippets(self) -> None:
        """Test block and inline snippets."""
        doc = FlareParser().parse(
            topic(
                '<MadCap:snippetBlock src="../Snippets/Block.flsnp" />'
                '<p>Inline <MadCap:snippetText src="../Snippets/Text.flsnp" /></p>'
            )
        )

        block = doc.children[0]
        assert isinstance(block, FragmentRef)
        assert block.inline is False
        inline = doc.children[1].content[-1]
        assert isinstance(inline, FragmentRef)
        assert inline.inline is True

    def test_xref_with_anchor(self) -> None:
        """Test that an xref is split into target and anchor."""
        doc = FlareParser().parse(topic('<p><MadCap:xref href="Other.htm#Setup">See other</MadCap:xref></p>'))

        xref = doc.children[0].content[0]
        assert isinstance(xref, CrossReference)
        assert (xref.target, xref.anchor) == ("Other.htm", "Setup")

    def test_topic_link_becomes_cross_reference(self) -> None:
        """Test that a plain anchor to a topic is a cross-reference."""
        doc = FlareParser().parse(topic('<p><a href="Guide/Install.htm">Install</a></p>'))

        assert isinstance(doc.children[0].content[0], CrossReference)

    def test_external_link_stays_link(self) -> None:
        """Test that web links are not cross-references."""
        doc = FlareParser().parse(topic('<p><a href="https://example.com/page.htm">Site</a></p>'))

        assert isinstance(doc.children[0].content[0], Link)

    def test_dropdown(self) -> None:
        """Test that a drop-down becomes a collapsible marker."""
        doc = FlareParser().parse(
            topic(
                "<MadCap:dropDown><MadCap:dropDownHead><MadCap:dropDownHotspot>More</MadCap:dropDownHotspot>"
                "</MadCap:dropDownHead><MadCap:dropDownBody><p>Hidden</p></MadCap:dropDownBody></MadCap:dropDown>"
            )
        )

        marker = doc.children[0]
        assert isinstance(marker, CollapsibleMarker)
        assert collect_text(marker.title) == "More"
        assert isinstance(marker.children[0], Paragraph)

    def test_conditions_attribute(self) -> None:
        """Test that condition tags are attached to the node."""
        doc = FlareParser().parse(topic('<p MadCap:conditions="Default.Internal,Print">Text</p>'))

        assert doc.children[0].conditions == ("Default.Internal", "Print")

    def test_document_conditions(self) -> None:
        """Test that conditions on the html element land in the metadata."""
        doc = FlareParser().parse(topic("<p>x</p>", conditions="Default.Deprecated"))

        assert doc.metadata["conditions"] == ("Default.Deprecated",)

    def test_keywords_are_ignored(self) -> None:
        """Test that index keywords produce no text."""
        doc = FlareParser().parse(topic('<p>Text<MadCap:keyword term="index" /></p>'))

        assert collect_text(doc.children[0]) == "Text"

    def test_toggler_text_kept(self) -> None:
        """Test that a toggler is unwrapped and its text stays in the paragraph."""
        doc = FlareParser().parse(
            topic('<h2>Advanced</h2><p><MadCap:toggler targets="x">Show the advanced options</MadCap:toggler></p>')
        )

        assert len(doc.children) == 2
        assert isinstance(doc.children[1], Paragraph)
        assert collect_text(doc.children[1]) == "Show the advanced options"

    def test_glossary_term(self) -> None:
        """Test that a glossary term becomes a GlossaryTermRef with its text."""
        doc = FlareParser().parse(
            topic('<p>Call the <MadCap:glossaryTerm glossTerm="Glossary.Term3">REST  API</MadCap:glossaryTerm>.</p>')
        )

        ref = doc.children[0].content[1]
        assert isinstance(ref, GlossaryTermRef)
        assert ref.term == "REST API"
        assert collect_text(doc.children[0]) == "Call the REST API."

    def test_empty_glossary_term_dropped(self) -> None:
        """Test that a glossary term without text produces nothing."""
        doc = FlareParser().parse(topic("<p>Text<MadCap:glossaryTerm> </MadCap:glossaryTerm></p>"))

        assert not any(isinstance(node, GlossaryTermRef) for node in doc.children[0].content)


@pytest.mark.unit
class TestAdmonitionParsing:
    """Tests for note/tip/warning blocks."""

    def test_label_span_removed(self) -> None:
        """Test that a noteInDiv label span is dropped."""
        doc = FlareParser().parse(topic('<div class="note"><p><span class="noteInDiv">Note:</span> Save often.</p></div>'))

        note = doc.children[0]
        assert isinstance(note, Admonition)
        assert note.kind == "note"
        assert collect_text(note.children) == "Save often."

    def test_bold_label_removed(self) -> None:
        """Test that a bold leading label is dropped."""
        doc = FlareParser().parse(topic('<p class="warning"><b>Warning:</b> Back up first.</p>'))

        note = doc.children[0]
        assert note.kind == "warning"
        assert collect_text(note.children) == "Back up first."

    def test_paragraphs_stay_separate(self) -> None:
        """Test that each paragraph of a note is its own block."""
        doc = FlareParser().parse(topic('<div class="tip"><p>One.</p><p>Two.</p></div>'))

        note = doc.children[0]
        assert [type(child) for child in note.children] == [Paragraph, Paragraph]


@pytest.mark.unit
class TestLinkHelpers:
    """Tests for topic link helpers."""

    @pytest.mark.parametrize(
        "href,expected",
        [
            ("Install.htm", True),
            ("../Guide/Install.html#top", True),
            ("https://example.com/a.htm", False),
            ("mailto:someone@example.com", False),
            ("#anchor", False),
            ("image.png", False),
        ],
    )
    def test_is_internal_topic_link(self, href: str, expected: bool) -> None:
        """Test detection of links to other topics."""
        assert is_internal_topic_link(href) is expected

    def test_split_anchor(self) -> None:
        """Test splitting of anchors."""
        assert split_anchor("a.htm#b") == ("a.htm", "b")
        assert split_anchor("a.htm") == ("a.htm", None)
        assert split_anchor("a.htm#") == ("a.htm", None)


@pytest.mark.unit
def test_parser_options_backend_validation() -> None:
    """Test that an unknown parser backend is rejected."""
    with pytest.raises(InvalidOptionsError):
        FlareParserOptions(parser_backend="regex")  # type: ignore[arg-type]


@pytest.mark.unit
def test_text_whitespace_collapsed() -> None:
    """Test that source line breaks collapse to single spaces."""
    doc = FlareParser().parse(topic("<p>one\n    two</p>"))

    assert isinstance(doc.children[0].content[0], Text)
    assert doc.children[0].content[0].content == "one two"
