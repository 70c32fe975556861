#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/preprocess/normalizer.py
"""Resolution of Flare authoring extensions.

``ExtensionNormalizer`` turns a repaired tree into a canonical tree: every
``VariableRef``, ``FragmentRef``, ``CrossReference``, ``GlossaryTermRef``
and ``CollapsibleMarker`` is replaced by canonical nodes, and subtrees whose
condition tags match an exclusion pattern are pruned.

Exclusion is checked before anything else is done with a node, so nothing
inside an excluded subtree is ever resolved: no fragment is loaded and no
missing-variable warning is emitted for content that is dropped anyway.

Fragments are included as deep copies and normalized in the context of the
inclusion site (source path for relative references, collapsible depth).
The chain of fragments being expanded is carried explicitly; revisiting a
path on it raises ``FragmentCycleError``.

"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import PurePosixPath
from typing import Optional

from flaremark.ast.nodes import (
    CollapsibleMarker,
    CollapsibleSection,
    Comment,
    CrossReference,
    Document,
    FragmentRef,
    GlossaryTermRef,
    Link,
    Node,
    Paragraph,
    Strong,
    Text,
    VariablePlaceholder,
    VariableRef,
    collect_text,
    is_inline_node,
)
from flaremark.ast.transforms import NodeTransformer, TransformResult
from flaremark.constants import INTERNAL_LINK_EXTENSIONS, TARGET_EXTENSIONS, TargetFormat
from flaremark.diagnostics import DiagnosticCollector
from flaremark.exceptions import (
    FileAccessError,
    FileNotFoundError,
    FlaremarkError,
    FragmentCycleError,
    MissingFragmentError,
    MissingVariableError,
    ParsingError,
)
from flaremark.options.normalize import NormalizerOptions
from flaremark.preprocess.resolver import ContentLoader, FragmentCache, VariableTable, normalize_path
from flaremark.utils.text import glossary_anchor

logger = logging.getLogger(__name__)


def compile_exclusion_patterns(patterns: tuple[str, ...] | list[str]) -> list[re.Pattern[str]]:
    """Compile exclusion patterns as case-insensitive regular expressions.

    Patterns that are not valid regular expressions match as literal
    substrings.
    """
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            logger.warning("Invalid exclusion pattern %r (%s); matching it literally", pattern, exc)
            compiled.append(re.compile(re.escape(pattern), re.IGNORECASE))
    return compiled


def rewrite_topic_target(target: str, target_format: TargetFormat) -> str:
    """Replace a topic link's ``.htm``/``.html`` extension with the output extension.

    >>> rewrite_topic_target("../Guide/Install.htm", "asciidoc")
    '../Guide/Install.adoc'

    """
    lowered = target.lower()
    for extension in INTERNAL_LINK_EXTENSIONS:
        if lowered.endswith(extension):
            return target[: -len(extension)] + TARGET_EXTENSIONS[target_format]
    return target


@dataclass(frozen=True)
class _Scope:
    """Walk state that changes with the position in the tree."""

    source_path: Optional[str] = None
    inclusion_stack: tuple[str, ...] = ()
    collapsible_depth: int = 0


@dataclass
class NormalizationResult:
    """Outcome of normalizing one document.

    Parameters
    ----------
    document : Document or None
        Canonical tree; None when the document root was excluded
    variables : dict[str, str]
        Variables kept as placeholders, in first-use order (empty in
        ``flatten`` mode)

    """

    document: Optional[Document]
    variables: dict[str, str] = field(default_factory=dict)

    @property
    def skipped(self) -> bool:
        """Whether the whole document was excluded by its conditions."""
        return self.document is None


class ExtensionNormalizer(NodeTransformer):
    """Rewrite authoring-extension nodes into canonical nodes.

    One instance normalizes one document; the variable table and fragment
    cache may be shared between instances.

    Parameters
    ----------
    options : NormalizerOptions or None, default None
        Normalization settings
    variables : Mapping[str, str] or None, default None
        Variable definitions keyed by ``Namespace.Name``
    fragments : FragmentCache or None, default None
        Shared fragment cache. A private cache over ``loader`` is created
        when omitted.
    diagnostics : DiagnosticCollector or None, default None
        Per-document diagnostic sink
    target : {"asciidoc", "markdown", "html"}, default "asciidoc"
        Output syntax, selects the cross-reference extension
    loader : ContentLoader or None, default None
        Used to check cross-reference targets; defaults to the fragment
        cache's loader

    Examples
    --------
    >>> normalizer = ExtensionNormalizer(variables={"General.Product": "Widget"})
    >>> result = normalizer.normalize(repaired_document, source_path="Content/Intro.htm")
    >>> result.skipped
    False

    """

    def __init__(
        self,
        options: Optional[NormalizerOptions] = None,
        variables: Optional[Mapping[str, str]] = None,
        fragments: Optional[FragmentCache] = None,
        diagnostics: Optional[DiagnosticCollector] = None,
        target: TargetFormat = "asciidoc",
        loader: Optional[ContentLoader] = None,
    ):
        """Initialize the normalizer."""
        self.options = options or NormalizerOptions()
        if variables is None:
            variables = VariableTable()
        self.variables = variables if isinstance(variables, VariableTable) else VariableTable(variables)
        self.fragments = fragments if fragments is not None else FragmentCache(loader=loader)
        self.loader: ContentLoader = loader if loader is not None else self.fragments.loader
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.target = target
        self._patterns = compile_exclusion_patterns(self.options.exclude_conditions)
        self._scope = _Scope()
        self._used_variables: dict[str, str] = {}
        self._merged_fragment_diagnostics: set[str] = set()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def normalize(self, document: Document, source_path: Optional[str] = None) -> NormalizationResult:
        """Normalize a repaired document.

        Parameters
        ----------
        document : Document
            Structurally repaired tree; not modified
        source_path : str or None, default None
            Path of the topic. Falls back to ``document.metadata["source_path"]``.
            Relative fragment and cross-reference targets are resolved
            against it.

        Returns
        -------
        NormalizationResult
            Canonical document (None when skipped) and the variables listing

        Raises
        ------
        FragmentCycleError
            If a fragment includes itself directly or transitively
        MissingVariableError, MissingFragmentError
            Under the ``abort`` policies

        """
        source_path = source_path or document.metadata.get("source_path")
        stack = (normalize_path(source_path),) if source_path else ()
        self._scope = _Scope(source_path=source_path, inclusion_stack=stack)
        self._used_variables = {}

        result = self.transform(document)
        if result is None:
            logger.info("Document %s excluded by its conditions", source_path or "<string>")
            return NormalizationResult(document=None)
        if not isinstance(result, Document):
            raise FlaremarkError(f"Normalization produced {type(result).__name__} instead of a Document")
        return NormalizationResult(document=result, variables=dict(self._used_variables))

    @contextmanager
    def _scoped(self, **changes: object) -> Iterator[_Scope]:
        previous = self._scope
        self._scope = replace(previous, **changes)  # type: ignore[arg-type]
        try:
            yield self._scope
        finally:
            self._scope = previous

    # ------------------------------------------------------------------
    # Exclusion
    # ------------------------------------------------------------------

    def transform(self, node: Node) -> TransformResult:
        """Prune excluded subtrees before visiting them."""
        tag = self._matching_condition(node)
        if tag is not None:
            self.diagnostics.info(
                "exclusion", f"Removed {type(node).__name__} with excluded condition '{tag}'", node=node, key=tag
            )
            return None
        return node.accept(self)

    def _matching_condition(self, node: Node) -> Optional[str]:
        if not self._patterns:
            return None
        for tag in node.conditions:
            if any(pattern.search(tag) for pattern in self._patterns):
                return tag
        return None

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def visit_variable_ref(self, node: VariableRef) -> TransformResult:
        """Replace a variable reference by its value or a placeholder."""
        value = self.variables.lookup(node.namespace, node.key)
        if value is None:
            return self._missing_variable(node)

        if self.options.variable_mode == "flatten":
            return Text(content=value, metadata=dict(node.metadata), source_location=node.source_location)

        name = self.variables.qualify(node.namespace, node.key) or node.name
        self._used_variables.setdefault(name, value)
        return VariablePlaceholder(
            name=name, value=value, metadata=dict(node.metadata), source_location=node.source_location
        )

    def _missing_variable(self, node: VariableRef) -> TransformResult:
        policy = self.options.missing_variable_policy
        suggestions = self.variables.similar(node.name)
        if policy == "abort":
            location = node.source_location.describe() if node.source_location else self._scope.source_path
            raise MissingVariableError(node.name, location=location, suggestions=suggestions)

        message = f"Variable not found: {node.name}"
        if suggestions:
            message += f" (did you mean {', '.join(suggestions)}?)"
        self.diagnostics.warning("reference", message, node=node, key=node.name)
        if policy == "empty":
            return None
        content = node.fallback if policy == "embedded" and node.fallback else node.name
        return Text(content=content, metadata=dict(node.metadata), source_location=node.source_location)

    # ------------------------------------------------------------------
    # Fragments
    # ------------------------------------------------------------------

    def visit_fragment_ref(self, node: FragmentRef) -> TransformResult:
        """Expand a fragment inclusion into a normalized copy of the fragment."""
        path = self.fragments.resolve_path(node.src, self._scope.source_path)
        if path in self._scope.inclusion_stack:
            chain = list(self._scope.inclusion_stack) + [path]
            self.diagnostics.add("error", "cyclic", "Fragment inclusion cycle: " + " -> ".join(chain), node, path)
            raise FragmentCycleError(chain)

        try:
            fragment, repair_diagnostics = self.fragments.get_copy(path)
        except (FileNotFoundError, FileAccessError, ParsingError) as exc:
            return self._missing_fragment(node, path, exc)

        if path not in self._merged_fragment_diagnostics:
            self._merged_fragment_diagnostics.add(path)
            self.diagnostics.merge(repair_diagnostics)

        with self._scoped(source_path=path, inclusion_stack=self._scope.inclusion_stack + (path,)):
            included = self.transform(fragment)
        if not isinstance(included, Document):
            return None

        logger.debug("Included fragment %s (%d blocks)", path, len(included.children))
        if node.inline:
            return self._inline_content(included.children, node)
        return included.children

    def _inline_content(self, blocks: list[Node], node: FragmentRef) -> list[Node]:
        """Return the inline content of a fragment's blocks for an inline inclusion."""
        content: list[Node] = []
        for block in blocks:
            if content and not is_inline_node(block):
                content.append(Text(content=" "))
            if isinstance(block, Paragraph):
                content.extend(block.content)
            elif is_inline_node(block):
                content.append(block)
            else:
                self.diagnostics.warning(
                    "structural",
                    f"{type(block).__name__} in inline fragment {node.src}; kept as plain text",
                    node=block,
                    key=node.src,
                )
                content.append(Text(content=collect_text(block)))
        return content

    def _missing_fragment(self, node: FragmentRef, path: str, error: Exception) -> TransformResult:
        policy = self.options.missing_fragment_policy
        if policy == "abort":
            raise MissingFragmentError(path, location=self._scope.source_path) from error
        reason = "not found" if isinstance(error, FileNotFoundError) else f"unreadable ({error})"
        self.diagnostics.warning("reference", f"Fragment {reason}: {node.src}", node=node, key=path)
        if policy == "drop" or node.inline:
            return None
        return Comment(content=f"Missing fragment: {node.src}", source_location=node.source_location)

    # ------------------------------------------------------------------
    # Cross-references
    # ------------------------------------------------------------------

    def visit_cross_reference(self, node: CrossReference) -> TransformResult:
        """Turn a cross-reference into an internal Link."""
        content = self._transform_children(node.content)
        if not collect_text(content).strip():
            content = [Text(content=PurePosixPath(node.target.replace("\\", "/")).stem or node.target)]

        target = node.target
        if self._target_missing(node):
            self.diagnostics.warning(
                "reference", f"Cross-reference target not found: {node.target}", node=node, key=node.target
            )
        elif self.options.rewrite_cross_references:
            target = rewrite_topic_target(node.target, self.target)

        url = f"{target}#{node.anchor}" if node.anchor else target
        metadata = dict(node.metadata)
        metadata.update({"internal": True, "target": target, "anchor": node.anchor})
        return Link(url=url, content=content, metadata=metadata, source_location=node.source_location)

    def _target_missing(self, node: CrossReference) -> bool:
        if not (self.options.check_cross_references and self._scope.source_path and node.target):
            return False
        base = os.path.dirname(self._scope.source_path)
        return not self.loader.exists(normalize_path(os.path.join(base, node.target)))

    # ------------------------------------------------------------------
    # Glossary terms
    # ------------------------------------------------------------------

    def visit_glossary_term_ref(self, node: GlossaryTermRef) -> TransformResult:
        """Link a glossary term to its entry in the glossary document, or keep its text."""
        content = self._transform_children(node.content) or [Text(content=node.term)]
        target = self.options.glossary_target
        if target is None:
            self.diagnostics.info(
                "reference", f"Glossary term '{node.term}' kept as text (no glossary target)", node=node, key=node.term
            )
            return content

        anchor = glossary_anchor(node.term)
        metadata = dict(node.metadata)
        metadata.update({"internal": True, "target": target, "anchor": anchor, "glossary_term": node.term})
        return Link(url=f"{target}#{anchor}", content=content, metadata=metadata, source_location=node.source_location)

    # ------------------------------------------------------------------
    # Collapsible sections
    # ------------------------------------------------------------------

    def visit_collapsible_marker(self, node: CollapsibleMarker) -> TransformResult:
        """Turn a drop-down into a CollapsibleSection (or a titled run of blocks)."""
        title = self._transform_children(node.title)
        if not collect_text(title).strip():
            title = [Text(content=self.options.default_collapsible_title)]

        if not self.options.enable_collapsible:
            heading = Paragraph(content=[Strong(content=title)], source_location=node.source_location)
            return [heading] + self._transform_children(node.children)

        level = self._scope.collapsible_depth + 1
        with self._scoped(collapsible_depth=level):
            children = self._transform_children(node.children)
        return CollapsibleSection(
            title=title,
            children=children,
            level=level,
            metadata=dict(node.metadata),
            source_location=node.source_location,
        )

    def visit_collapsible_section(self, node: CollapsibleSection) -> TransformResult:
        """Recompute the nesting level of an already canonical section."""
        if not self.options.enable_collapsible:
            heading = Paragraph(content=[Strong(content=self._transform_children(node.title))])
            return [heading] + self._transform_children(node.children)
        level = self._scope.collapsible_depth + 1
        with self._scoped(collapsible_depth=level):
            children = self._transform_children(node.children)
        return replace(node, title=self._transform_children(node.title), children=children, level=level)
