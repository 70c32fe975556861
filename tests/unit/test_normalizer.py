#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_normalizer.py
"""Unit tests for authoring-extension normalization.

Tests cover:
- Variable modes and missing variable policies
- Fragment inclusion, missing fragments and cycles
- Condition exclusion, cross-references and drop-downs
- Glossary term links and similar-name suggestions

"""

from typing import Optional

import pytest
from utils import memory_project, topic

from flaremark.ast import (
    CollapsibleSection,
    Comment,
    CrossReference,
    Document,
    FragmentRef,
    Link,
    Paragraph,
    Strong,
    Text,
    VariablePlaceholder,
    VariableRef,
    collect_text,
    iter_nodes,
)
from flaremark.diagnostics import DiagnosticCollector
from flaremark.exceptions import FragmentCycleError, MissingFragmentError, MissingVariableError
from flaremark.options import NormalizerOptions
from flaremark.parsers import FlareParser
from flaremark.preprocess import (
    ExtensionNormalizer,
    FragmentCache,
    compile_exclusion_patterns,
    repair_tree,
    rewrite_topic_target,
)

INTRO = "Project/Content/Intro.htm"


def _prepare(body: str, source_path: Optional[str] = INTRO, conditions: Optional[str] = None) -> Document:
    document = FlareParser(source_path=source_path).parse(topic(body, conditions=conditions))
    repaired = repair_tree(document)
    assert isinstance(repaired, Document)
    return repaired


@pytest.mark.unit
class TestVariables:
    """Tests for variable resolution."""

    def test_flatten_replaces_value(self, variables) -> None:
        """Test that flatten mode inlines the value."""
        doc = _prepare('<p>Use <MadCap:variable name="General.ProductName" /> today.</p>')

        result = ExtensionNormalizer(variables=variables).normalize(doc)

        assert collect_text(result.document) == "Use Widget Pro today."
        assert not any(isinstance(node, (VariableRef, VariablePlaceholder)) for node in iter_nodes(result.document))
        assert result.variables == {}

    def test_reference_mode_keeps_placeholder(self, variables) -> None:
        """Test that reference mode records used variables in first-use order."""
        doc = _prepare(
            '<p><MadCap:variable name="General.Version" /> and <MadCap:variable name="General.ProductName" />'
            ' and <MadCap:variable name="General.Version" /></p>'
        )
        options = NormalizerOptions(variable_mode="reference")

        result = ExtensionNormalizer(options, variables=variables).normalize(doc)

        placeholders = [node for node in iter_nodes(result.document) if isinstance(node, VariablePlaceholder)]
        assert [p.name for p in placeholders] == ["General.Version", "General.ProductName", "General.Version"]
        assert list(result.variables) == ["General.Version", "General.ProductName"]
        assert result.variables["General.ProductName"] == "Widget Pro"

    def test_bare_key_qualified_in_reference_mode(self, variables) -> None:
        """Test that a unique bare key is listed under its qualified name."""
        doc = _prepare('<p><MadCap:variable name="Version" /></p>')
        options = NormalizerOptions(variable_mode="reference")

        result = ExtensionNormalizer(options, variables=variables).normalize(doc)

        assert result.variables == {"General.Version": "4.2"}

    def test_missing_variable_emits_key(self, variables) -> None:
        """Test the default policy of writing the variable name."""
        diagnostics = DiagnosticCollector()
        doc = _prepare('<p>Edition: <MadCap:variable name="Edition" /></p>')

        result = ExtensionNormalizer(variables=variables, diagnostics=diagnostics).normalize(doc)

        assert collect_text(result.document) == "Edition: Edition"
        assert [(d.severity, d.category, d.key) for d in diagnostics] == [("warning", "reference", "Edition")]

    def test_missing_variable_empty(self, variables) -> None:
        """Test the empty policy."""
        doc = _prepare('<p>A<MadCap:variable name="Nope.Var" />B</p>')
        options = NormalizerOptions(missing_variable_policy="empty")

        result = ExtensionNormalizer(options, variables=variables).normalize(doc)

        assert collect_text(result.document) == "AB"

    def test_missing_variable_abort(self, variables) -> None:
        """Test the abort policy."""
        doc = _prepare('<p><MadCap:variable name="Nope.Var" /></p>')
        options = NormalizerOptions(missing_variable_policy="abort")

        with pytest.raises(MissingVariableError):
            ExtensionNormalizer(options, variables=variables).normalize(doc)

    def test_embedded_text_does_not_bypass_policy(self) -> None:
        """Test that text stored in an unknown variable element still counts as missing."""
        doc = Document(children=[Paragraph(content=[VariableRef(namespace="A", key="B", fallback="Widget")])])
        diagnostics = DiagnosticCollector()

        result = ExtensionNormalizer(diagnostics=diagnostics).normalize(doc)

        assert collect_text(result.document) == "A.B"
        assert [(d.severity, d.key) for d in diagnostics] == [("warning", "A.B")]

    def test_embedded_policy_keeps_source_text(self) -> None:
        """Test that the embedded policy writes the stored text and still warns."""
        doc = _prepare('<p>Hi <MadCap:variable name="General.Missing">Stale</MadCap:variable></p>')
        diagnostics = DiagnosticCollector()
        options = NormalizerOptions(missing_variable_policy="embedded", variable_mode="reference")

        result = ExtensionNormalizer(options, diagnostics=diagnostics).normalize(doc)

        assert collect_text(result.document) == "Hi Stale"
        assert result.variables == {}
        assert [(d.severity, d.category) for d in diagnostics] == [("warning", "reference")]

    def test_embedded_policy_without_text_writes_name(self) -> None:
        """Test that an empty variable element falls back to its name."""
        doc = _prepare('<p><MadCap:variable name="General.Missing" /></p>')
        options = NormalizerOptions(missing_variable_policy="embedded")

        result = ExtensionNormalizer(options).normalize(doc)

        assert collect_text(result.document) == "General.Missing"

    def test_abort_with_embedded_text(self, variables) -> None:
        """Test that the abort policy raises even when the element carries text."""
        doc = _prepare('<p>Hi <MadCap:variable name="General.Missing">Stale</MadCap:variable></p>')
        options = NormalizerOptions(missing_variable_policy="abort")

        with pytest.raises(MissingVariableError) as exc_info:
            ExtensionNormalizer(options, variables=variables).normalize(doc)

        assert exc_info.value.reference == "General.Missing"

    def test_similar_names_suggested(self, variables) -> None:
        """Test that a misspelled variable names its closest definitions."""
        doc = _prepare('<p><MadCap:variable name="General.ProductNme" /></p>')
        diagnostics = DiagnosticCollector()

        ExtensionNormalizer(variables=variables, diagnostics=diagnostics).normalize(doc)

        assert "did you mean General.ProductName" in diagnostics.warnings[0].message

    def test_abort_error_carries_suggestions(self, variables) -> None:
        """Test that the abort error lists the similar names."""
        doc = _prepare('<p><MadCap:variable name="General.Versoin" /></p>')
        options = NormalizerOptions(missing_variable_policy="abort")

        with pytest.raises(MissingVariableError) as exc_info:
            ExtensionNormalizer(options, variables=variables).normalize(doc)

        assert exc_info.value.suggestions[0] == "General.Version"
        assert "did you mean General.Version" in str(exc_info.value)


@pytest.mark.unit
class TestFragments:
    """Tests for snippet inclusion."""

    def test_block_fragment_included(self, fragment_cache: FragmentCache) -> None:
        """Test that a block snippet is spliced into the document."""
        doc = _prepare('<h1>T</h1><MadCap:snippetBlock src="Resources/Snippets/Shared.flsnp" />')

        result = ExtensionNormalizer(fragments=fragment_cache).normalize(doc)

        assert isinstance(result.document.children[1], Paragraph)
        assert collect_text(result.document.children[1]) == "Shared text."
        assert not any(isinstance(node, FragmentRef) for node in iter_nodes(result.document))

    def test_empty_shared_cache_is_used(self, fragment_cache: FragmentCache) -> None:
        """Test that a cache with nothing loaded yet is shared, not replaced."""
        assert len(fragment_cache) == 0
        doc = _prepare('<MadCap:snippetBlock src="Resources/Snippets/Shared.flsnp" />')

        normalizer = ExtensionNormalizer(fragments=fragment_cache)
        normalizer.normalize(doc)

        assert normalizer.fragments is fragment_cache
        assert normalizer.loader is fragment_cache.loader
        assert fragment_cache.load_count("Project/Content/Resources/Snippets/Shared.flsnp") == 1

    def test_fragment_included_twice_is_independent(self, fragment_cache: FragmentCache) -> None:
        """Test that two inclusions of one fragment are separate copies parsed once."""
        doc = _prepare(
            '<MadCap:snippetBlock src="Resources/Snippets/Shared.flsnp" />'
            '<MadCap:snippetBlock src="Resources/Snippets/Shared.flsnp" />'
        )

        result = ExtensionNormalizer(fragments=fragment_cache).normalize(doc)

        first, second = result.document.children
        assert first == second
        assert first is not second
        assert first.content[0] is not second.content[0]
        assert fragment_cache.load_count("Project/Content/Resources/Snippets/Shared.flsnp") == 1

    def test_inline_fragment(self, fragment_cache: FragmentCache) -> None:
        """Test that an inline snippet contributes its paragraph content."""
        doc = _prepare('<p>Product: <MadCap:snippetText src="Resources/Snippets/Name.flsnp" />.</p>')

        result = ExtensionNormalizer(fragments=fragment_cache).normalize(doc)

        assert len(result.document.children) == 1
        assert collect_text(result.document) == "Product: Widget."

    def test_fragment_variables_resolved_in_place(self, variables) -> None:
        """Test that variables inside a fragment are resolved."""
        cache = FragmentCache(
            loader=memory_project({"Content/s.flsnp": topic('<p><MadCap:variable name="General.ProductName" /></p>')})
        )
        doc = _prepare('<MadCap:snippetBlock src="s.flsnp" />', source_path="Content/t.htm")

        result = ExtensionNormalizer(variables=variables, fragments=cache).normalize(doc)

        assert collect_text(result.document) == "Widget Pro"

    def test_cycle_raises_with_chain(self, fragment_cache: FragmentCache) -> None:
        """Test that mutually including fragments raise a cycle error naming the chain."""
        doc = _prepare('<MadCap:snippetBlock src="Resources/Snippets/LoopA.flsnp" />')
        diagnostics = DiagnosticCollector()

        with pytest.raises(FragmentCycleError) as exc_info:
            ExtensionNormalizer(fragments=fragment_cache, diagnostics=diagnostics).normalize(doc)

        snippets = "Project/Content/Resources/Snippets"
        assert exc_info.value.chain == [INTRO, f"{snippets}/LoopA.flsnp", f"{snippets}/LoopB.flsnp", f"{snippets}/LoopA.flsnp"]
        assert diagnostics.by_category("cyclic")

    def test_same_fragment_in_sequence_is_not_a_cycle(self) -> None:
        """Test that a fragment included twice by one parent is fine."""
        cache = FragmentCache(
            loader=memory_project(
                {
                    "C/outer.flsnp": topic('<MadCap:snippetBlock src="inner.flsnp" /><MadCap:snippetBlock src="inner.flsnp" />'),
                    "C/inner.flsnp": topic("<p>in</p>"),
                }
            )
        )
        doc = _prepare('<MadCap:snippetBlock src="outer.flsnp" />', source_path="C/t.htm")

        result = ExtensionNormalizer(fragments=cache).normalize(doc)

        assert collect_text(result.document) == "inin"

    def test_missing_fragment_placeholder(self, fragment_cache: FragmentCache) -> None:
        """Test that a missing block fragment leaves a comment and a warning."""
        diagnostics = DiagnosticCollector()
        doc = _prepare('<MadCap:snippetBlock src="Nope.flsnp" />')

        result = ExtensionNormalizer(fragments=fragment_cache, diagnostics=diagnostics).normalize(doc)

        assert isinstance(result.document.children[0], Comment)
        assert "Nope.flsnp" in result.document.children[0].content
        assert [d.category for d in diagnostics.warnings] == ["reference"]

    def test_missing_inline_fragment_emits_nothing(self, fragment_cache: FragmentCache) -> None:
        """Test that a missing inline fragment is dropped."""
        doc = _prepare('<p>A<MadCap:snippetText src="Nope.flsnp" />B</p>')

        result = ExtensionNormalizer(fragments=fragment_cache).normalize(doc)

        assert collect_text(result.document) == "AB"

    def test_missing_fragment_drop_and_abort(self, fragment_cache: FragmentCache) -> None:
        """Test the drop and abort policies."""
        body = '<p>before</p><MadCap:snippetBlock src="Nope.flsnp" />'

        dropped = ExtensionNormalizer(
            NormalizerOptions(missing_fragment_policy="drop"), fragments=fragment_cache
        ).normalize(_prepare(body))
        assert len(dropped.document.children) == 1

        with pytest.raises(MissingFragmentError):
            ExtensionNormalizer(NormalizerOptions(missing_fragment_policy="abort"), fragments=fragment_cache).normalize(
                _prepare(body)
            )


@pytest.mark.unit
class TestExclusion:
    """Tests for condition-based exclusion."""

    def test_excluded_subtree_is_not_resolved(self, fragment_cache: FragmentCache) -> None:
        """Test that nothing inside excluded content is resolved or reported."""
        doc = _prepare(
            '<div MadCap:conditions="Default.Deprecated">'
            '<p><MadCap:variable name="Nope.Var" /></p>'
            '<MadCap:snippetBlock src="Nope.flsnp" />'
            "</div><p>Kept</p>"
        )
        diagnostics = DiagnosticCollector()
        options = NormalizerOptions(exclude_conditions=("deprecated",))

        result = ExtensionNormalizer(options, fragments=fragment_cache, diagnostics=diagnostics).normalize(doc)

        assert collect_text(result.document) == "Kept"
        assert {d.category for d in diagnostics} == {"exclusion"}
        assert all(d.severity == "info" for d in diagnostics)
        assert fragment_cache.load_count("Project/Content/Nope.flsnp") == 0

    def test_whole_document_excluded(self) -> None:
        """Test that a document whose root is excluded is skipped."""
        doc = _prepare("<p>x</p>", conditions="Default.Internal")
        options = NormalizerOptions(exclude_conditions=("internal",))

        result = ExtensionNormalizer(options).normalize(doc)

        assert result.skipped
        assert result.document is None

    def test_unmatched_conditions_kept(self) -> None:
        """Test that content with other conditions stays."""
        doc = _prepare('<p MadCap:conditions="Default.Print">x</p>')
        options = NormalizerOptions(exclude_conditions=("deprecated",))

        result = ExtensionNormalizer(options).normalize(doc)

        assert collect_text(result.document) == "x"

    def test_invalid_pattern_matches_literally(self) -> None:
        """Test that an invalid regular expression is used as a substring."""
        patterns = compile_exclusion_patterns(["a[b", "^Default\\.Old"])

        assert patterns[0].search("xa[by")
        assert patterns[1].search("default.oldstuff")


@pytest.mark.unit
class TestCrossReferences:
    """Tests for cross-reference rewriting."""

    def test_rewritten_to_target_extension(self, project_files) -> None:
        """Test that an existing topic target gets the output extension."""
        diagnostics = DiagnosticCollector()
        doc = _prepare('<p><MadCap:xref href="Guide/Install.htm#Steps">Install</MadCap:xref></p>')

        result = ExtensionNormalizer(
            loader=memory_project(project_files), diagnostics=diagnostics, target="markdown"
        ).normalize(doc)

        link = result.document.children[0].content[0]
        assert isinstance(link, Link)
        assert link.url == "Guide/Install.md#Steps"
        assert link.metadata["internal"] is True
        assert len(diagnostics) == 0
        assert not any(isinstance(node, CrossReference) for node in iter_nodes(result.document))

    def test_missing_target_warns(self, project_files) -> None:
        """Test that a missing target is kept unchanged with a warning."""
        diagnostics = DiagnosticCollector()
        doc = _prepare('<p><MadCap:xref href="Gone.htm">Gone</MadCap:xref></p>')

        result = ExtensionNormalizer(loader=memory_project(project_files), diagnostics=diagnostics).normalize(doc)

        assert result.document.children[0].content[0].url == "Gone.htm"
        assert [(d.category, d.key) for d in diagnostics.warnings] == [("reference", "Gone.htm")]

    def test_empty_text_uses_target_stem(self, project_files) -> None:
        """Test that an xref without text is labelled with the target's name."""
        doc = _prepare('<p><MadCap:xref href="Guide/Install.htm" /></p>')

        result = ExtensionNormalizer(loader=memory_project(project_files)).normalize(doc)

        assert collect_text(result.document) == "Install"

    def test_no_check_without_source_path(self) -> None:
        """Test that targets are not checked when the document has no path."""
        diagnostics = DiagnosticCollector()
        doc = _prepare('<p><MadCap:xref href="Gone.htm">Gone</MadCap:xref></p>', source_path=None)

        result = ExtensionNormalizer(diagnostics=diagnostics).normalize(doc)

        assert result.document.children[0].content[0].url == "Gone.adoc"
        assert len(diagnostics) == 0

    @pytest.mark.parametrize(
        "target,fmt,expected",
        [
            ("a.htm", "asciidoc", "a.adoc"),
            ("../b/c.HTML", "markdown", "../b/c.md"),
            ("d.htm", "html", "d.html"),
            ("e.pdf", "asciidoc", "e.pdf"),
        ],
    )
    def test_rewrite_topic_target(self, target: str, fmt: str, expected: str) -> None:
        """Test extension rewriting."""
        assert rewrite_topic_target(target, fmt) == expected


GLOSSARY_TERM = '<p>Call the <MadCap:glossaryTerm glossTerm="Glossary.Term3">REST API</MadCap:glossaryTerm>.</p>'


@pytest.mark.unit
class TestGlossaryTerms:
    """Tests for glossary term references."""

    def test_kept_as_text_without_target(self) -> None:
        """Test that a term stays plain text when no glossary is converted."""
        diagnostics = DiagnosticCollector()

        result = ExtensionNormalizer(diagnostics=diagnostics).normalize(_prepare(GLOSSARY_TERM))

        assert collect_text(result.document) == "Call the REST API."
        assert not any(isinstance(node, Link) for node in iter_nodes(result.document))
        assert [(d.severity, d.category, d.key) for d in diagnostics] == [("info", "reference", "REST API")]

    def test_linked_to_glossary_anchor(self) -> None:
        """Test that a term links to its entry in the glossary document."""
        options = NormalizerOptions(glossary_target="glossary.adoc")

        result = ExtensionNormalizer(options).normalize(_prepare(GLOSSARY_TERM))

        link = result.document.children[0].content[1]
        assert isinstance(link, Link)
        assert link.url == "glossary.adoc#glossary-rest-api"
        assert link.metadata["glossary_term"] == "REST API"
        assert collect_text(link) == "REST API"


DROPDOWN = (
    "<MadCap:dropDown><MadCap:dropDownHead><MadCap:dropDownHotspot>{title}</MadCap:dropDownHotspot>"
    "</MadCap:dropDownHead><MadCap:dropDownBody>{body}</MadCap:dropDownBody></MadCap:dropDown>"
)


@pytest.mark.unit
class TestCollapsible:
    """Tests for drop-down conversion."""

    def test_nested_levels(self) -> None:
        """Test that nested drop-downs record their depth."""
        inner = DROPDOWN.format(title="Inner", body="<p>deep</p>")
        doc = _prepare(DROPDOWN.format(title="Outer", body="<p>top</p>" + inner))

        result = ExtensionNormalizer().normalize(doc)

        outer = result.document.children[0]
        assert isinstance(outer, CollapsibleSection)
        assert outer.level == 1
        nested = outer.children[-1]
        assert isinstance(nested, CollapsibleSection)
        assert nested.level == 2
        assert collect_text(nested.title) == "Inner"

    def test_untitled_gets_default_title(self) -> None:
        """Test the default title for a drop-down without hotspot text."""
        doc = _prepare(DROPDOWN.format(title="", body="<p>x</p>"))

        result = ExtensionNormalizer().normalize(doc)

        assert collect_text(result.document.children[0].title) == "More Information"

    def test_disabled_collapsible_becomes_bold_paragraph(self) -> None:
        """Test that with collapsibles disabled the title is a bold paragraph."""
        doc = _prepare(DROPDOWN.format(title="Details", body="<p>Body</p>"))

        result = ExtensionNormalizer(NormalizerOptions(enable_collapsible=False)).normalize(doc)

        title, body = result.document.children
        assert isinstance(title.content[0], Strong)
        assert collect_text(title) == "Details"
        assert collect_text(body) == "Body"

    def test_dropdown_in_fragment_counts_inclusion_depth(self) -> None:
        """Test that a drop-down inside an included fragment nests under the including one."""
        cache = FragmentCache(
            loader=memory_project({"C/s.flsnp": topic(DROPDOWN.format(title="Inner", body="<p>x</p>"))})
        )
        doc = _prepare(DROPDOWN.format(title="Outer", body='<MadCap:snippetBlock src="s.flsnp" />'), source_path="C/t.htm")

        result = ExtensionNormalizer(fragments=cache).normalize(doc)

        assert result.document.children[0].children[0].level == 2


@pytest.mark.unit
def test_normalized_tree_has_no_extension_nodes(fragment_cache: FragmentCache, variables) -> None:
    """Test that no authoring-extension node survives normalization."""
    doc = _prepare(
        '<p><MadCap:variable name="General.ProductName" /> <MadCap:xref href="Guide/Install.htm">x</MadCap:xref></p>'
        '<MadCap:snippetBlock src="Resources/Snippets/Shared.flsnp" />'
        + DROPDOWN.format(title="T", body="<p>b</p>")
    )

    result = ExtensionNormalizer(variables=variables, fragments=fragment_cache).normalize(doc)

    extension_types = (VariableRef, FragmentRef, CrossReference)
    assert not any(isinstance(node, extension_types) for node in iter_nodes(result.document))
