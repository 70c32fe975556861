#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_glossary.py
"""Unit tests for reading and laying out Flare glossaries.

Tests cover:
- Terms, synonyms, definitions, links and conditions from ``.flglo``
- Skipped entries and malformed XML
- Letter grouping, anchors and duplicate terms
- Excluded entries and definitions with markup

"""

import pytest

from flaremark.ast import CrossReference, Emphasis, Heading, List, Paragraph, collect_text
from flaremark.diagnostics import DiagnosticCollector
from flaremark.exceptions import ParsingError
from flaremark.preprocess import GlossaryEntry, build_glossary_document, parse_flglo

GLOSSARY = """<?xml version="1.0" encoding="utf-8"?>
<CatapultGlossary xmlns:MadCap="http://www.madcapsoftware.com/Schemas/MadCap.xsd">
  <GlossaryEntry glossTerm="Glossary.Term0" MadCap:conditions="Default.Internal">
    <Terms>
      <Term>REST  API</Term>
      <Term>Web API</Term>
    </Terms>
    <Definition Link="/Content/Reference/Api.htm">Interface over <b>HTTP</b> &amp; JSON.</Definition>
  </GlossaryEntry>
  <GlossaryEntry glossTerm="Glossary.Term1">
    <Terms><Term>Widget</Term></Terms>
    <Definition>A thing &lt;made&gt; here.</Definition>
  </GlossaryEntry>
  <GlossaryEntry glossTerm="Glossary.Term2">
    <Terms><Term>Orphan</Term></Terms>
    <Definition />
  </GlossaryEntry>
</CatapultGlossary>
"""


@pytest.mark.unit
class TestParseFlglo:
    """Tests for reading glossary entries."""

    def test_entries(self) -> None:
        """Test terms, synonyms, links and conditions of the entries."""
        api, widget = parse_flglo(GLOSSARY)

        assert api.terms == ("REST API", "Web API")
        assert api.term == "REST API"
        assert api.anchor == "glossary-rest-api"
        assert api.link == "/Content/Reference/Api.htm"
        assert api.conditions == ("Default.Internal",)
        assert api.entry_id == "Glossary.Term0"
        assert widget.conditions == ()
        assert widget.link is None

    def test_definition_markup(self) -> None:
        """Test that markup in a definition is kept and plain text stays escaped."""
        api, widget = parse_flglo(GLOSSARY)

        assert api.definition == "Interface over <b>HTTP</b> &amp; JSON."
        assert widget.definition == "A thing &lt;made&gt; here."

    def test_malformed(self) -> None:
        """Test that broken XML is reported with the file name."""
        with pytest.raises(ParsingError, match="Glossary.flglo"):
            parse_flglo("<CatapultGlossary><GlossaryEntry>", "Glossary.flglo")


@pytest.mark.unit
class TestBuildGlossaryDocument:
    """Tests for laying out entries as a document."""

    def test_grouped_by_initial(self) -> None:
        """Test the title, letter headings and anchored term headings."""
        entries = [
            GlossaryEntry(terms=("widget",), definition="W."),
            GlossaryEntry(terms=("3D view",), definition="Three."),
            GlossaryEntry(terms=("Alpha",), definition="A."),
            GlossaryEntry(terms=("Ändern",), definition="Change."),
        ]

        document = build_glossary_document(entries, title="Terms")

        headings = [
            (h.level, collect_text(h), h.metadata.get("id")) for h in document.children if isinstance(h, Heading)
        ]
        assert headings == [
            (1, "Terms", None),
            (2, "#", None),
            (3, "3D view", "glossary-3d-view"),
            (2, "A", None),
            (3, "Alpha", "glossary-alpha"),
            (3, "Ändern", "glossary-andern"),
            (2, "W", None),
            (3, "widget", "glossary-widget"),
        ]
        assert document.metadata["title"] == "Terms"

    def test_synonyms_definition_and_link(self) -> None:
        """Test the blocks following a term heading."""
        document = build_glossary_document(parse_flglo(GLOSSARY))

        also, definition, see = document.children[3:6]
        assert isinstance(also.content[0], Emphasis)
        assert collect_text(also) == "Also: Web API"
        assert collect_text(definition) == "Interface over HTTP & JSON."
        assert isinstance(see, Paragraph)
        xref = see.content[1]
        assert isinstance(xref, CrossReference)
        assert xref.target == "Content/Reference/Api.htm"
        assert collect_text(see) == "See Api."

    def test_plain_definition_unescaped(self) -> None:
        """Test that a text-only definition becomes one paragraph."""
        document = build_glossary_document([GlossaryEntry(terms=("Widget",), definition="A &lt;b&gt; tag.")])

        assert collect_text(document.children[-1]) == "A <b> tag."

    def test_block_definition(self) -> None:
        """Test that a definition with block markup keeps its structure."""
        entry = GlossaryEntry(terms=("Steps",), definition="<p>Do this:</p><ul><li>one</li><li>two</li></ul>")

        document = build_glossary_document([entry])

        assert isinstance(document.children[-1], List)
        assert collect_text(document.children[-2]) == "Do this:"

    def test_excluded_entries(self) -> None:
        """Test that entries with excluded conditions are left out and reported."""
        diagnostics = DiagnosticCollector()

        document = build_glossary_document(
            parse_flglo(GLOSSARY), exclude_conditions=("internal",), diagnostics=diagnostics
        )

        assert "REST API" not in collect_text(document)
        assert "Widget" in collect_text(document)
        assert [(d.severity, d.category, d.key) for d in diagnostics] == [("info", "exclusion", "Default.Internal")]

    def test_duplicate_terms(self) -> None:
        """Test that a repeated term gets a distinct anchor and a warning."""
        diagnostics = DiagnosticCollector()
        entries = [
            GlossaryEntry(terms=("Cache",), definition="One."),
            GlossaryEntry(terms=("cache",), definition="Two."),
        ]

        document = build_glossary_document(entries, diagnostics=diagnostics)

        anchors = [h.metadata.get("id") for h in document.children if isinstance(h, Heading) and h.level == 3]
        assert anchors == ["glossary-cache", "glossary-cache-2"]
        assert [d.category for d in diagnostics.warnings] == ["reference"]
