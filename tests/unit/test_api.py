#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_api.py
"""Unit tests for the conversion entry points.

Tests cover:
- Full pipeline output for list repair and nested content
- Validation strictness handling of warnings
- Variable modes and the variables listing
- Skipped documents and writing results
- Glossary conversion and glossary term links

"""

import pytest
from utils import topic

from flaremark import ConversionOptions, convert, convert_file, convert_glossary, convert_glossary_file
from flaremark.api import _expect_document
from flaremark.ast import Document, List, ListItem, Paragraph, Text
from flaremark.exceptions import (
    FileNotFoundError,
    FragmentCycleError,
    MissingFragmentError,
    ParsingError,
    StrictValidationError,
)
from flaremark.options import MarkdownRendererOptions, NormalizerOptions
from flaremark.preprocess.resolver import FragmentCache

ORPHAN_TOPIC = topic("<ol><li>First</li><p>Orphan</p><li>Second</li></ol>")
VARIABLE_TOPIC = topic('<p>Welcome to <MadCap:variable name="General.ProductName" />.</p>')


@pytest.mark.unit
class TestPipeline:
    """Tests for the complete parse, repair, normalize and render chain."""

    def test_orphan_paragraph(self) -> None:
        """Test that an orphan paragraph ends up attached to the previous item."""
        result = convert(ORPHAN_TOPIC)

        assert result.content == ". First\n+\nOrphan\n. Second\n"
        assert [d.category for d in result.warnings] == ["structural"]

    def test_nested_note_markdown(self) -> None:
        """Test a note inside a list item rendered as Markdown."""
        source = topic('<ol><li>One</li><li>Two<div class="note"><p>Careful.</p></div></li></ol>')

        result = convert(source, ConversionOptions(target="markdown"))

        assert result.content == "1. One\n\n2. Two\n\n   > **Note:** Careful.\n"
        assert result.warnings == []

    def test_document_input(self) -> None:
        """Test that an already parsed Document is accepted."""
        doc = Document(children=[List(ordered=False, items=[ListItem(children=[Text(content="x")])])])

        assert convert(doc).content == "* x\n"

    def test_paragraph_with_numbered_text(self) -> None:
        """Test that text looking like a list marker stays a paragraph."""
        doc = Document(children=[Paragraph(content=[Text(content=". not a list")])])

        assert convert(doc).content == "{empty}. not a list\n"

    def test_non_document_after_repair_is_a_parsing_error(self) -> None:
        """Test that a repair stage returning something other than a Document is reported."""
        with pytest.raises(ParsingError, match="Paragraph instead of a Document"):
            _expect_document(Paragraph(content=[Text(content="x")]), "repair")


@pytest.mark.unit
class TestValidationStrictness:
    """Tests for strict, normal and lenient validation."""

    def test_strict_raises_with_diagnostics(self) -> None:
        """Test that any warning fails a strict conversion."""
        options = ConversionOptions(validation_strictness="strict")

        with pytest.raises(StrictValidationError) as exc_info:
            convert(ORPHAN_TOPIC, options, source_path="Content/Steps.htm")

        assert exc_info.value.diagnostics[0].category == "structural"

    def test_strict_without_warnings(self) -> None:
        """Test that a clean topic converts under strict validation."""
        options = ConversionOptions(validation_strictness="strict")

        assert convert(topic("<p>Clean.</p>"), options).content == "Clean.\n"

    def test_strict_missing_variable_with_embedded_text(self) -> None:
        """Test that a missing variable with stored text still fails strict validation."""
        source = topic('<p>Hi <MadCap:variable name="General.Missing">Stale</MadCap:variable></p>')

        with pytest.raises(StrictValidationError) as exc_info:
            convert(source, ConversionOptions(validation_strictness="strict"))

        assert [d.key for d in exc_info.value.diagnostics] == ["General.Missing"]

    def test_lenient_downgrades_structural(self) -> None:
        """Test that repairs are informational under lenient validation."""
        result = convert(ORPHAN_TOPIC, ConversionOptions(validation_strictness="lenient"))

        assert result.warnings == []
        assert [d.severity for d in result.diagnostics if d.category == "structural"] == ["info"]

    def test_lenient_keeps_reference_warnings(self) -> None:
        """Test that missing variables still warn under lenient validation."""
        result = convert(VARIABLE_TOPIC, ConversionOptions(validation_strictness="lenient"))

        assert [d.category for d in result.warnings] == ["reference"]
        assert result.content == "Welcome to General.ProductName.\n"


@pytest.mark.unit
class TestVariables:
    """Tests for variable modes at the API level."""

    def test_flatten(self, variables) -> None:
        """Test that values are substituted and no listing is produced."""
        result = convert(VARIABLE_TOPIC, variables=variables)

        assert result.content == "Welcome to Widget Pro.\n"
        assert result.variables_file is None

    def test_reference(self, variables) -> None:
        """Test attribute references and the listing."""
        options = ConversionOptions(normalizer=NormalizerOptions(variable_mode="reference"))

        result = convert(VARIABLE_TOPIC, options, variables=variables)

        assert result.content == "Welcome to {general-product-name}.\n"
        assert result.variables_file is not None
        assert result.variables_file.name == "variables.adoc"
        assert result.variables_file.content == ":general-product-name: Widget Pro\n"

    def test_include(self, variables) -> None:
        """Test that include mode pulls the listing into the document."""
        options = ConversionOptions(normalizer=NormalizerOptions(variable_mode="include"))

        result = convert(VARIABLE_TOPIC, options, variables=variables)

        assert result.content.startswith("include::variables.adoc[]\n\n")

    def test_reference_markdown_json(self, variables) -> None:
        """Test placeholders and listing for commonmark output."""
        options = ConversionOptions(
            target="markdown",
            normalizer=NormalizerOptions(variable_mode="reference"),
            renderer=MarkdownRendererOptions(variable_name_convention="snake_case"),
        )

        result = convert(VARIABLE_TOPIC, options, variables=variables)

        assert result.content == "Welcome to {{general_product_name}}.\n"
        assert result.variables_file is not None
        assert result.variables_file.name == "variables.json"
        assert '"general_product_name": "Widget Pro"' in result.variables_file.content


@pytest.mark.unit
class TestFiles:
    """Tests for file-based conversion and output."""

    def test_convert_file_with_fragments(self, fragment_cache: FragmentCache) -> None:
        """Test a topic with a snippet and a cross-reference from an in-memory project."""
        result = convert_file("Project/Content/Intro.htm", fragments=fragment_cache)

        assert result.content.startswith("== Intro\n")
        assert "xref:Guide/Install.adoc[installing]" in result.content
        assert "Shared text." in result.content
        assert result.warnings == []
        assert result.source_path == "Project/Content/Intro.htm"

    def test_convert_file_missing(self, fragment_cache: FragmentCache) -> None:
        """Test that a missing topic raises."""
        with pytest.raises(FileNotFoundError):
            convert_file("Project/Content/Nope.htm", fragments=fragment_cache)

    def test_cycle_aborts(self, fragment_cache: FragmentCache) -> None:
        """Test that a fragment cycle aborts the document."""
        source = topic('<MadCap:snippetBlock src="Resources/Snippets/LoopA.flsnp" />')

        with pytest.raises(FragmentCycleError):
            convert(source, source_path="Project/Content/Intro.htm", fragments=fragment_cache)

    def test_missing_fragment_abort(self, fragment_cache: FragmentCache) -> None:
        """Test the abort policy for missing fragments."""
        source = topic('<MadCap:snippetBlock src="Resources/Snippets/Gone.flsnp" />')
        options = ConversionOptions(normalizer=NormalizerOptions(missing_fragment_policy="abort"))

        with pytest.raises(MissingFragmentError):
            convert(source, options, source_path="Project/Content/Intro.htm", fragments=fragment_cache)

    def test_write_with_variables(self, tmp_path, variables) -> None:
        """Test that the listing is written next to the document."""
        options = ConversionOptions(normalizer=NormalizerOptions(variable_mode="reference"))
        result = convert(VARIABLE_TOPIC, options, variables=variables)

        written = result.write(tmp_path / "intro.adoc")

        assert written == [tmp_path / "intro.adoc", tmp_path / "variables.adoc"]
        assert (tmp_path / "intro.adoc").read_text(encoding="utf-8") == result.content

    def test_skipped_document(self, tmp_path) -> None:
        """Test that an excluded document produces nothing."""
        options = ConversionOptions(normalizer=NormalizerOptions(exclude_conditions=("internal",)))

        result = convert(topic("<p>x</p>", conditions="Default.Internal"), options)

        assert result.skipped
        assert result.content == ""
        assert result.write(tmp_path / "out.adoc") == []
        assert not (tmp_path / "out.adoc").exists()
        assert result.to_dict()["skipped"] is True


GLOSSARY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    "<CatapultGlossary>"
    '<GlossaryEntry conditions="Default.Internal"><Terms><Term>REST API</Term></Terms>'
    '<Definition Link="/Content/Reference/Api.htm">Interface over HTTP.</Definition></GlossaryEntry>'
    "<GlossaryEntry><Terms><Term>Widget</Term></Terms><Definition>The product.</Definition></GlossaryEntry>"
    "</CatapultGlossary>"
)


@pytest.mark.unit
class TestGlossary:
    """Tests for glossary conversion and glossary term links."""

    def test_convert_glossary(self) -> None:
        """Test anchored entries and definition links in AsciiDoc."""
        result = convert_glossary(GLOSSARY, source_path="Project/Glossaries/Glossary.flglo")

        assert result.content.startswith("== Glossary\n")
        assert "[[glossary-rest-api]]\n==== REST API" in result.content
        assert "xref:Content/Reference/Api.adoc[Api]" in result.content
        assert "[[glossary-widget]]\n==== Widget" in result.content
        assert result.warnings == []

    def test_excluded_entries_reported(self) -> None:
        """Test that excluded entries are dropped and listed first in the diagnostics."""
        options = ConversionOptions(normalizer=NormalizerOptions(exclude_conditions=("internal",)))

        result = convert_glossary(GLOSSARY, options)

        assert "REST API" not in result.content
        assert "The product." in result.content
        assert result.diagnostics[0].category == "exclusion"

    def test_convert_glossary_file(self, tmp_path) -> None:
        """Test reading a glossary from disk with a custom title and Markdown output."""
        path = tmp_path / "Glossary.flglo"
        path.write_text(GLOSSARY, encoding="utf-8")

        result = convert_glossary_file(path, ConversionOptions(target="markdown"), title="Terms")

        assert result.content.startswith("# Terms\n")
        assert result.source_path == str(path)

    def test_glossary_term_links_to_entry(self) -> None:
        """Test that a glossary term in a topic links to the converted glossary."""
        source = topic('<p>Use the <MadCap:glossaryTerm glossTerm="Glossary.Term0">REST API</MadCap:glossaryTerm>.</p>')
        options = ConversionOptions(normalizer=NormalizerOptions(glossary_target="Glossary.adoc"))

        result = convert(source, options)

        assert result.content == "Use the xref:Glossary.adoc#glossary-rest-api[REST API].\n"
        assert result.warnings == []
