#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/preprocess/glossary.py
"""Flare glossaries (``.flglo``).

A glossary file lists entries, each with one or more terms and a
definition::

    <CatapultGlossary>
      <GlossaryEntry glossTerm="Glossary.Term0" conditions="Default.Internal">
        <Terms>
          <Term>API</Term>
          <Term>Interface</Term>
        </Terms>
        <Definition Link="/Content/Reference/Api.htm">Application programming interface.</Definition>
      </GlossaryEntry>
    </CatapultGlossary>

``parse_flglo`` reads the entries. ``build_glossary_document`` turns them
into an ordinary Document: one heading per initial letter, then one
anchored heading per entry followed by its definition. Each target renders
it with its own syntax, and ``MadCap:glossaryTerm`` links (see
``NormalizerOptions.glossary_target``) land on the entry's anchor.

"""

from __future__ import annotations

import html
import logging
import re
import unicodedata
from dataclasses import dataclass
from itertools import groupby
from pathlib import PurePosixPath
from typing import Any, Optional, Sequence

import defusedxml.ElementTree as ET

from flaremark.ast.nodes import CrossReference, Document, Emphasis, Heading, Node, Paragraph, Text
from flaremark.constants import CONDITION_ATTRIBUTES, DEFAULT_GLOSSARY_TITLE
from flaremark.diagnostics import DiagnosticCollector
from flaremark.exceptions import ParsingError
from flaremark.options.flare import FlareParserOptions
from flaremark.parsers.flare import FlareParser
from flaremark.preprocess.normalizer import compile_exclusion_patterns
from flaremark.preprocess.resolver import local_xml_name
from flaremark.utils.text import glossary_anchor

logger = logging.getLogger(__name__)

_MARKUP_RE = re.compile(r"<[a-zA-Z/]")


@dataclass(frozen=True)
class GlossaryEntry:
    """One glossary entry.

    Parameters
    ----------
    terms : tuple of str
        The term first, then its synonyms
    definition : str
        Definition text, or XHTML markup when the definition has elements
    conditions : tuple of str, default ()
        Condition tags of the entry
    link : str or None, default None
        Topic the definition links to
    entry_id : str or None, default None
        Flare's ``glossTerm`` identifier

    """

    terms: tuple[str, ...]
    definition: str
    conditions: tuple[str, ...] = ()
    link: Optional[str] = None
    entry_id: Optional[str] = None

    @property
    def term(self) -> str:
        """The primary term."""
        return self.terms[0]

    @property
    def anchor(self) -> str:
        """Anchor id of the entry in the converted glossary."""
        return glossary_anchor(self.term)


def parse_flglo(text: str, source: str = "<string>") -> list[GlossaryEntry]:
    """Parse a Flare ``.flglo`` glossary.

    Entries without a term or without a definition are skipped.

    Parameters
    ----------
    text : str
        XML of a ``CatapultGlossary``
    source : str, default "<string>"
        Name used in error messages

    Returns
    -------
    list of GlossaryEntry
        Entries in file order

    Raises
    ------
    ParsingError
        If the XML is malformed

    """
    try:
        root = ET.fromstring(text.lstrip("\ufeff").encode("utf-8"))
    except ET.ParseError as exc:
        raise ParsingError(f"Malformed glossary '{source}': {exc}", parsing_stage="flglo", original_error=exc)

    entries: list[GlossaryEntry] = []
    for element in root.iter():
        if local_xml_name(element.tag) != "GlossaryEntry":
            continue
        terms = tuple(
            term
            for term in (" ".join("".join(child.itertext()).split()) for child in _descendants(element, "Term"))
            if term
        )
        definition_element = next(iter(_descendants(element, "Definition")), None)
        definition = _inner_markup(definition_element) if definition_element is not None else ""
        if not terms or not definition:
            logger.debug("Skipping glossary entry without term or definition in %s", source)
            continue
        link = (definition_element.get("Link") or "").strip() if definition_element is not None else ""
        entries.append(
            GlossaryEntry(
                terms=terms,
                definition=definition,
                conditions=_entry_conditions(element),
                link=link or None,
                entry_id=element.get("glossTerm"),
            )
        )
    logger.debug("Parsed %d glossary entries from %s", len(entries), source)
    return entries


def _descendants(element: Any, name: str) -> list[Any]:
    return [child for child in element.iter() if child is not element and local_xml_name(child.tag) == name]


def _entry_conditions(element: Any) -> tuple[str, ...]:
    values: list[str] = []
    for attribute, raw in element.attrib.items():
        name = local_xml_name(attribute).lower()
        if name == "conditions" or name in CONDITION_ATTRIBUTES:
            values.extend(part.strip() for part in re.split(r"[,;]", raw) if part.strip())
    return tuple(values)


def _inner_markup(element: Any) -> str:
    """Return the content of an element as XHTML without namespace prefixes."""
    for child in element.iter():
        if isinstance(child.tag, str):
            child.tag = local_xml_name(child.tag)
    parts = [html.escape(element.text or "", quote=False)]
    parts.extend(ET.tostring(child, encoding="unicode") for child in element)
    return "".join(parts).strip()


def _initial(term: str) -> str:
    """Index letter of a term; ``#`` for terms not starting with a letter."""
    letter = unicodedata.normalize("NFKD", term[:1])[:1].upper()
    return letter if "A" <= letter <= "Z" else "#"


def build_glossary_document(
    entries: Sequence[GlossaryEntry],
    *,
    title: str = DEFAULT_GLOSSARY_TITLE,
    exclude_conditions: Sequence[str] = (),
    parser_options: Optional[FlareParserOptions] = None,
    diagnostics: Optional[DiagnosticCollector] = None,
    source_path: Optional[str] = None,
) -> Document:
    """Lay out glossary entries as a Document.

    Entries are sorted by term (case-insensitive) and grouped under a
    level-2 heading per initial letter. Each entry is a level-3 heading
    whose ``metadata["id"]`` is the entry anchor, an ``Also:`` line naming
    its synonyms, the definition, and a cross-reference when the
    definition links to a topic.

    Parameters
    ----------
    entries : sequence of GlossaryEntry
        Parsed entries
    title : str, default "Glossary"
        Text of the level-1 heading
    exclude_conditions : sequence of str, default ()
        Exclusion patterns, matched as in ``NormalizerOptions``
    parser_options : FlareParserOptions, optional
        Used to parse definitions that contain markup
    diagnostics : DiagnosticCollector, optional
        Receives ``exclusion`` info and duplicate-anchor warnings
    source_path : str, optional
        Path of the glossary file, recorded in the metadata

    Returns
    -------
    Document
        Canonical tree ready for normalization and rendering

    """
    patterns = compile_exclusion_patterns(tuple(exclude_conditions))
    kept: list[GlossaryEntry] = []
    for entry in entries:
        tag = next((c for c in entry.conditions if any(p.search(c) for p in patterns)), None)
        if tag is None:
            kept.append(entry)
        elif diagnostics is not None:
            diagnostics.info(
                "exclusion", f"Removed glossary entry '{entry.term}' with excluded condition '{tag}'", key=tag
            )

    parser = FlareParser(parser_options, source_path=source_path)
    children: list[Node] = [Heading(level=1, content=[Text(content=title)])]
    anchors: dict[str, int] = {}
    ordered = sorted(kept, key=lambda e: (_initial(e.term), e.term.casefold()))
    for letter, group in groupby(ordered, key=lambda e: _initial(e.term)):
        children.append(Heading(level=2, content=[Text(content=letter)]))
        for entry in group:
            anchor = entry.anchor
            anchors[anchor] = anchors.get(anchor, 0) + 1
            if anchors[anchor] > 1:
                anchor = f"{anchor}-{anchors[anchor]}"
                if diagnostics is not None:
                    diagnostics.warning("reference", f"Duplicate glossary term '{entry.term}'; anchored as {anchor}")
            children.extend(_entry_blocks(entry, anchor, parser))

    metadata: dict[str, Any] = {"title": title}
    if source_path:
        metadata["source_path"] = source_path
    logger.info("Glossary %s: %d of %d entries kept", source_path or "<string>", len(kept), len(entries))
    return Document(children=children, metadata=metadata)


def _entry_blocks(entry: GlossaryEntry, anchor: str, parser: FlareParser) -> list[Node]:
    blocks: list[Node] = [Heading(level=3, content=[Text(content=entry.term)], metadata={"id": anchor})]
    if len(entry.terms) > 1:
        blocks.append(Paragraph(content=[Emphasis(content=[Text(content="Also: " + ", ".join(entry.terms[1:]))])]))

    if _MARKUP_RE.search(entry.definition):
        blocks.extend(parser.convert_to_ast(f"<html><body>{entry.definition}</body></html>").children)
    else:
        blocks.append(Paragraph(content=[Text(content=html.unescape(entry.definition))]))

    if entry.link:
        target = entry.link.lstrip("/")
        label = PurePosixPath(target.split("#", 1)[0]).stem or target
        path, _, anchor_part = target.partition("#")
        blocks.append(
            Paragraph(
                content=[
                    Text(content="See "),
                    CrossReference(target=path, anchor=anchor_part or None, content=[Text(content=label)]),
                    Text(content="."),
                ]
            )
        )
    return blocks
