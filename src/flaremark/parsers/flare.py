#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/parsers/flare.py
"""Flare topic to tree parser.

This module converts MadCap Flare XHTML topics (and snippet files, which use
the same markup) into the node tree. The parser is deliberately faithful to
the source: list containers keep whatever children the author wrote, and
authoring extensions become extension nodes. Fixing containment is the job
of ``flaremark.preprocess.repair``; resolving extensions is the job of
``flaremark.preprocess.normalizer``.

Recognized extensions
---------------------
``MadCap:variable name="Set.Name"``
    VariableRef
``MadCap:snippetBlock src="..."`` / ``MadCap:snippetText src="..."``
    FragmentRef (block / inline)
``MadCap:xref href="..."`` and ``<a href="topic.htm">``
    CrossReference
``MadCap:dropDown`` with ``dropDownHead``/``dropDownHotspot``/``dropDownBody``
    CollapsibleMarker
``MadCap:glossaryTerm``
    GlossaryTermRef
``MadCap:toggler``
    unwrapped; its text stays in the paragraph
``MadCap:keyword`` / ``MadCap:concept``
    dropped (index markers without visible text)
``MadCap:conditions`` / ``data-mc-conditions`` attributes
    ``metadata["conditions"]`` on the produced nodes
``MadCap:continue="true"`` on ``<ol>``
    ``metadata["continue"]`` on the List

"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

from flaremark.ast.nodes import (
    Admonition,
    BlockQuote,
    Code,
    CodeBlock,
    CollapsibleMarker,
    Comment,
    CrossReference,
    Document,
    Emphasis,
    FragmentRef,
    GlossaryTermRef,
    Heading,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    SourceLocation,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    VariableRef,
    collect_text,
    is_inline_node,
)
from flaremark.constants import (
    ADMONITION_CLASS_MAP,
    ADMONITION_LABEL_CLASSES,
    ADMONITION_LABELS,
    CONDITION_ATTRIBUTES,
    CONTINUE_ATTRIBUTES,
    FLARE_DROPDOWN_BODY_TAG,
    FLARE_DROPDOWN_HEAD_TAG,
    FLARE_DROPDOWN_HOTSPOT_TAG,
    FLARE_DROPDOWN_TAG,
    FLARE_GLOSSARY_TERM_TAG,
    FLARE_IGNORED_TAGS,
    FLARE_SNIPPET_BLOCK_TAG,
    FLARE_SNIPPET_TEXT_TAG,
    FLARE_VARIABLE_TAG,
    FLARE_XREF_TAG,
    INTERNAL_LINK_EXTENSIONS,
    LIST_STYLE_TYPE_MAP,
    LIST_TYPE_ATTRIBUTE_MAP,
)
from flaremark.exceptions import ParsingError
from flaremark.options.flare import FlareParserOptions
from flaremark.parsers.base import BaseParser

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_DIMENSION_RE = re.compile(r"^\s*(\d+)(?:\.\d+)?\s*(?:px)?\s*$", re.IGNORECASE)
_STYLE_DIMENSION_RE = r"(?:^|;)\s*{name}\s*:\s*(\d+)(?:\.\d+)?\s*px"
_LIST_STYLE_RE = re.compile(r"list-style-type\s*:\s*([a-z-]+)", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*:", re.IGNORECASE)


def is_internal_topic_link(href: str) -> bool:
    """Return True for relative links to another topic (``.htm``/``.html``).

    Absolute URLs, ``mailto:`` links, protocol-relative URLs and pure
    anchors are not topic links.
    """
    if not href or href.startswith(("#", "//")) or _SCHEME_RE.match(href):
        return False
    path = href.split("#", 1)[0].split("?", 1)[0]
    return path.lower().endswith(INTERNAL_LINK_EXTENSIONS)


def split_anchor(href: str) -> tuple[str, Optional[str]]:
    """Split ``path#anchor`` into path and anchor (None when absent)."""
    if "#" in href:
        path, anchor = href.split("#", 1)
        return path, anchor or None
    return href, None


class FlareParser(BaseParser):
    """Convert Flare XHTML topics to a node tree.

    Parameters
    ----------
    options : FlareParserOptions or None, default = None
        Parsing options
    source_path : str or None, default = None
        Path of the topic, recorded on source locations

    Examples
    --------
    >>> doc = FlareParser().parse("<html><body><p>Hello</p></body></html>")
    >>> type(doc.children[0]).__name__
    'Paragraph'

    """

    BLOCK_ELEMENTS = frozenset(
        {
            "address",
            "article",
            "aside",
            "blockquote",
            "dd",
            "details",
            "div",
            "dl",
            "dt",
            "fieldset",
            "figcaption",
            "figure",
            "footer",
            "h1",
            "h2",
            "h3",
            "h4",
            "h5",
            "h6",
            "header",
            "hr",
            "li",
            "main",
            "nav",
            "ol",
            "p",
            "pre",
            "section",
            "summary",
            "table",
            "ul",
            FLARE_SNIPPET_BLOCK_TAG,
            FLARE_DROPDOWN_TAG,
            FLARE_DROPDOWN_HEAD_TAG,
            FLARE_DROPDOWN_BODY_TAG,
        }
    )

    _SKIPPED_ELEMENTS = frozenset({"script", "style", "head", "title", "meta", "link", "colgroup", "col"})

    _ELEMENT_HANDLERS = {
        "p": "_process_paragraph_to_ast",
        "div": "_process_block_to_ast",
        "section": "_process_block_to_ast",
        "article": "_process_block_to_ast",
        "main": "_process_block_to_ast",
        "h1": "_process_heading_to_ast",
        "h2": "_process_heading_to_ast",
        "h3": "_process_heading_to_ast",
        "h4": "_process_heading_to_ast",
        "h5": "_process_heading_to_ast",
        "h6": "_process_heading_to_ast",
        "ol": "_process_list_to_ast",
        "ul": "_process_list_to_ast",
        "li": "_process_list_item_to_ast",
        "pre": "_process_code_block_to_ast",
        "blockquote": "_process_blockquote_to_ast",
        "table": "_process_table_to_ast",
        "strong": "_process_strong_to_ast",
        "b": "_process_strong_to_ast",
        "em": "_process_emphasis_to_ast",
        "i": "_process_emphasis_to_ast",
        "a": "_process_link_to_ast",
        "img": "_process_image_to_ast",
        FLARE_VARIABLE_TAG: "_process_variable_to_ast",
        FLARE_SNIPPET_BLOCK_TAG: "_process_snippet_to_ast",
        FLARE_SNIPPET_TEXT_TAG: "_process_snippet_to_ast",
        FLARE_XREF_TAG: "_process_xref_to_ast",
        FLARE_DROPDOWN_TAG: "_process_dropdown_to_ast",
        FLARE_GLOSSARY_TERM_TAG: "_process_glossary_term_to_ast",
    }

    def __init__(self, options: FlareParserOptions | None = None, source_path: Optional[str] = None):
        """Initialize the parser with options and the topic path."""
        BaseParser._validate_options_type(options, FlareParserOptions, "flare")
        options = options or FlareParserOptions()
        super().__init__(options, source_path)
        self.options: FlareParserOptions = options
        self._in_code_block = False

    def parse(self, input_data: Union[str, Path, bytes]) -> Document:
        """Parse a Flare topic into a tree.

        Parameters
        ----------
        input_data : str, Path or bytes
            Topic markup, raw bytes, or a path to the topic file

        Returns
        -------
        Document
            Parsed document

        Raises
        ------
        ParsingError
            If the markup cannot be parsed
        FileNotFoundError
            If a path was given and does not exist

        """
        return self.convert_to_ast(self._load_text_content(input_data))

    def convert_to_ast(self, html_content: str) -> Document:
        """Convert topic markup to a Document.

        Parameters
        ----------
        html_content : str
            Topic markup

        Returns
        -------
        Document
            Parsed document. ``metadata`` holds ``title``, ``source_path`` and
            the ``conditions`` of the ``<html>``/``<body>`` elements.

        """
        from bs4 import BeautifulSoup
        from bs4.element import Tag
        from bs4.exceptions import FeatureNotFound

        self._in_code_block = False

        if not html_content.strip():
            raise ParsingError("Empty document", parsing_stage="flare")

        try:
            soup = BeautifulSoup(html_content, self.options.parser_backend)
        except FeatureNotFound as e:
            raise ParsingError(
                f"Parser backend '{self.options.parser_backend}' is not installed",
                parsing_stage="flare",
                original_error=e,
            ) from e
        except Exception as e:
            raise ParsingError(f"Could not parse topic markup: {e}", parsing_stage="flare", original_error=e) from e

        metadata: dict[str, Any] = {}
        if self.source_path:
            metadata["source_path"] = self.source_path

        title_tag = soup.find("title")
        if isinstance(title_tag, Tag) and title_tag.get_text(strip=True):
            metadata["title"] = title_tag.get_text(strip=True)

        conditions: list[str] = []
        for tag_name in ("html", "body"):
            element = soup.find(tag_name)
            if isinstance(element, Tag):
                conditions.extend(self._conditions(element))
        if conditions:
            metadata["conditions"] = tuple(conditions)

        body = soup.find("body")
        root = body if isinstance(body, Tag) else soup
        children = self._process_block_container(root)

        logger.debug("Parsed %s into %d top-level blocks", self.source_path or "<string>", len(children))
        return Document(children=children, metadata=metadata, source_location=self._location(root))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _process_node_to_ast(self, node: Any) -> Node | list[Node] | None:
        """Process a BeautifulSoup node to tree nodes.

        Parameters
        ----------
        node : Any
            BeautifulSoup node to process

        Returns
        -------
        Node, list of Node, or None
            Resulting node(s)

        """
        from bs4.element import Comment as SoupComment
        from bs4.element import NavigableString, PreformattedString

        if isinstance(node, SoupComment):
            comment_text = str(node).strip()
            if self.options.keep_comments and comment_text:
                return Comment(content=comment_text)
            return None

        # Doctype, CDATA, processing instructions
        if isinstance(node, PreformattedString):
            return None

        if isinstance(node, NavigableString):
            text = str(node)
            if self.options.collapse_whitespace and not self._in_code_block:
                text = _WHITESPACE_RE.sub(" ", text)
            return Text(content=text) if text else None

        if not isinstance(getattr(node, "name", None), str):
            return None

        name = node.name.lower()
        if name in self._SKIPPED_ELEMENTS or name in FLARE_IGNORED_TAGS:
            return None

        if name == "br":
            result: Node | list[Node] | None = LineBreak()
        elif name == "hr":
            result = ThematicBreak()
        elif name == "code":
            result = Text(content=node.get_text()) if self._in_code_block else Code(content=node.get_text())
        elif name in self._ELEMENT_HANDLERS:
            result = getattr(self, self._ELEMENT_HANDLERS[name])(node)
        elif self._is_block_element(node):
            result = self._process_block_to_ast(node)
        else:
            # Unknown inline element (span, font, MadCap:conditionalText, ...)
            result = self._process_children_to_inline(node)

        return self._decorate(result, node)

    def _decorate(self, result: Node | list[Node] | None, element: Any) -> Node | list[Node] | None:
        """Attach the element's conditions and source location to the produced nodes."""
        if result is None:
            return None
        conditions = self._conditions(element)
        nodes = result if isinstance(result, list) else [result]
        for node in nodes:
            if conditions:
                existing = tuple(node.metadata.get("conditions", ()))
                node.metadata["conditions"] = existing + tuple(c for c in conditions if c not in existing)
            if node.source_location is None and not isinstance(node, Text):
                node.source_location = self._location(element)
        return result

    def _conditions(self, element: Any) -> tuple[str, ...]:
        values: list[str] = []
        for attribute in CONDITION_ATTRIBUTES:
            raw = element.get(attribute)
            if raw:
                values.extend(part.strip() for part in re.split(r"[,;]", str(raw)) if part.strip())
        return tuple(values)

    def _location(self, element: Any) -> Optional[SourceLocation]:
        if not self.options.record_source_lines:
            return None
        element_id = element.get("id") if hasattr(element, "get") else None
        return SourceLocation(
            format="flare",
            line=getattr(element, "sourceline", None),
            column=getattr(element, "sourcepos", None),
            element_id=str(element_id) if element_id else None,
            path=self.source_path,
        )

    def _is_block_element(self, node: Any) -> bool:
        """Check if an element is block-level."""
        name = getattr(node, "name", None)
        if not isinstance(name, str):
            return False
        return name.lower() in self.BLOCK_ELEMENTS

    def _has_block_children(self, node: Any) -> bool:
        """Check if an element has any block-level children."""
        return any(self._is_block_element(child) for child in getattr(node, "children", ()))

    # ------------------------------------------------------------------
    # Block handling
    # ------------------------------------------------------------------

    def _process_block_container(self, node: Any) -> list[Node]:
        """Process a block container element (body, div, section, ...).

        Inline content found between blocks is wrapped in a Paragraph;
        whitespace-only runs are dropped.

        Parameters
        ----------
        node : Any
            Block container element

        Returns
        -------
        list of Node
            Block nodes in source order

        """
        children: list[Node] = []
        inline_buffer: list[Node] = []

        def flush() -> None:
            if _has_visible_content(inline_buffer):
                children.append(Paragraph(content=list(inline_buffer)))
            inline_buffer.clear()

        for child in node.children:
            nodes = self._process_node_to_ast(child)
            if nodes is None:
                continue
            for item in nodes if isinstance(nodes, list) else [nodes]:
                if is_inline_node(item):
                    inline_buffer.append(item)
                else:
                    flush()
                    children.append(item)
        flush()
        return children

    def _process_block_to_ast(self, node: Any) -> Node | list[Node] | None:
        """Process a generic block element (div, section, ...).

        Admonition classes produce an Admonition. Other containers are
        flattened into their block children, or a Paragraph when they only
        hold inline content.
        """
        kind = self._admonition_kind(node)
        if kind:
            return self._process_admonition_to_ast(node, kind)
        if self._has_block_children(node):
            return self._process_block_container(node)
        content = self._process_children_to_inline(node)
        if _has_visible_content(content):
            return Paragraph(content=content)
        return None

    def _process_paragraph_to_ast(self, node: Any) -> Node | list[Node] | None:
        """Process a ``<p>`` element.

        Flare allows block snippets inside paragraphs; such paragraphs are
        split around the block content.
        """
        kind = self._admonition_kind(node)
        if kind:
            return self._process_admonition_to_ast(node, kind)
        if self._has_block_children(node):
            return self._process_block_container(node)
        content = self._process_children_to_inline(node)
        if _has_visible_content(content):
            return Paragraph(content=content)
        return None

    def _process_heading_to_ast(self, node: Any) -> Heading:
        """Process heading element to Heading node."""
        return Heading(level=int(node.name[1]), content=self._process_children_to_inline(node))

    def _process_list_to_ast(self, node: Any) -> List:
        """Process a list container without repairing it.

        Every child the author put into the container is kept in order:
        ``<li>`` elements become ListItem nodes, nested ``<ol>``/``<ul>``
        stay bare List nodes, other blocks stay what they are and loose
        inline content is wrapped in a Paragraph.

        Parameters
        ----------
        node : Any
            List element (ul or ol)

        Returns
        -------
        List
            List node whose ``items`` may contain non-item nodes

        """
        ordered = node.name.lower() == "ol"
        items: list[Node] = []
        inline_buffer: list[Node] = []

        def flush() -> None:
            if _has_visible_content(inline_buffer):
                items.append(Paragraph(content=list(inline_buffer)))
            inline_buffer.clear()

        for child in node.children:
            nodes = self._process_node_to_ast(child)
            if nodes is None:
                continue
            for item in nodes if isinstance(nodes, list) else [nodes]:
                if is_inline_node(item):
                    inline_buffer.append(item)
                else:
                    flush()
                    items.append(item)
        flush()

        metadata: dict[str, Any] = {}
        if any(str(node.get(attr, "")).lower() == "true" for attr in CONTINUE_ATTRIBUTES):
            metadata["continue"] = True

        return List(
            ordered=ordered,
            items=items,
            start=self._list_start(node),
            style=self._list_style(node) if ordered else "arabic",  # type: ignore[arg-type]
            metadata=metadata,
        )

    def _list_start(self, node: Any) -> int:
        try:
            return int(str(node.get("start", "1")).strip())
        except ValueError:
            logger.debug("Ignoring invalid list start %r", node.get("start"))
            return 1

    def _list_style(self, node: Any) -> str:
        match = _LIST_STYLE_RE.search(str(node.get("style", "")))
        if match and match.group(1).lower() in LIST_STYLE_TYPE_MAP:
            return LIST_STYLE_TYPE_MAP[match.group(1).lower()]
        type_attr = str(node.get("type", "")).strip()
        return LIST_TYPE_ATTRIBUTE_MAP.get(type_attr, "arabic")

    def _process_list_item_to_ast(self, node: Any) -> ListItem:
        """Process a ``<li>`` element.

        Inline children stay unwrapped so the converter can tell the item's
        leading inline run apart from its block content.
        """
        children: list[Node] = []
        for child in node.children:
            nodes = self._process_node_to_ast(child)
            if nodes is None:
                continue
            children.extend(nodes if isinstance(nodes, list) else [nodes])
        return ListItem(children=_drop_blank_inline_runs(children))

    def _process_code_block_to_ast(self, node: Any) -> CodeBlock:
        """Process a ``<pre>`` element to a CodeBlock."""
        language = None
        code = node.find("code")
        for element in (node, code):
            if element is None:
                continue
            for css_class in element.get("class", []) or []:
                if css_class.startswith(("language-", "lang-")):
                    language = css_class.split("-", 1)[1]
        self._in_code_block = True
        try:
            content = node.get_text()
        finally:
            self._in_code_block = False
        return CodeBlock(content=content.strip("\n"), language=language)

    def _process_blockquote_to_ast(self, node: Any) -> BlockQuote:
        """Process a ``<blockquote>`` element."""
        if self._has_block_children(node):
            return BlockQuote(children=self._process_block_container(node))
        content = self._process_children_to_inline(node)
        return BlockQuote(children=[Paragraph(content=content)] if _has_visible_content(content) else [])

    def _process_table_to_ast(self, node: Any) -> Table:
        """Process a ``<table>`` element.

        The first row inside ``<thead>``, or a first row made only of
        ``<th>`` cells, becomes the header.
        """
        from bs4.element import Tag

        header: Optional[TableRow] = None
        rows: list[TableRow] = []
        caption = None

        caption_tag = node.find("caption", recursive=False)
        if isinstance(caption_tag, Tag):
            caption = _WHITESPACE_RE.sub(" ", caption_tag.get_text()).strip() or None

        for section in node.find_all(["thead", "tbody", "tfoot", "tr"], recursive=False):
            row_tags = [section] if section.name == "tr" else section.find_all("tr", recursive=False)
            for row_tag in row_tags:
                cell_tags = row_tag.find_all(["td", "th"], recursive=False)
                if not cell_tags:
                    continue
                row = TableRow(cells=[self._process_table_cell(cell) for cell in cell_tags])
                is_header_row = section.name == "thead" or all(cell.name == "th" for cell in cell_tags)
                if header is None and not rows and is_header_row:
                    row.is_header = True
                    header = row
                else:
                    rows.append(row)

        return Table(rows=rows, header=header, caption=caption)

    def _process_table_cell(self, node: Any) -> TableCell:
        if self._has_block_children(node):
            content = self._process_block_container(node)
        else:
            content = _drop_blank_inline_runs(self._process_children_to_inline(node))
        return TableCell(
            content=content,
            colspan=_int_attribute(node, "colspan", 1),
            rowspan=_int_attribute(node, "rowspan", 1),
            source_location=self._location(node),
        )

    def _admonition_kind(self, node: Any) -> Optional[str]:
        for css_class in node.get("class", []) or []:
            kind = ADMONITION_CLASS_MAP.get(css_class.lower())
            if kind:
                return kind
        return None

    def _process_admonition_to_ast(self, node: Any, kind: str) -> Admonition:
        """Process a note/tip/warning element.

        The label (a ``noteInDiv``-style span, a bold ``Note`` or a leading
        ``Note:``) is removed; each remaining paragraph stays a separate
        body block.
        """
        for label in node.find_all(True):
            classes = {c.lower() for c in label.get("class", []) or []}
            if classes & ADMONITION_LABEL_CLASSES:
                label.decompose()
                break

        if not self._has_block_children(node):
            body: list[Node] = [Paragraph(content=self._process_children_to_inline(node))]
        else:
            body = self._process_block_container(node)

        body = _strip_admonition_label(body, kind)
        return Admonition(kind=kind, children=body)  # type: ignore[arg-type]

    def _process_dropdown_to_ast(self, node: Any) -> CollapsibleMarker:
        """Process a ``MadCap:dropDown`` element.

        The hotspot text (or the whole head) is the title; the body blocks
        become the marker's children.
        """
        from bs4.element import Tag

        head = node.find(FLARE_DROPDOWN_HEAD_TAG, recursive=False)
        hotspot = (head or node).find(FLARE_DROPDOWN_HOTSPOT_TAG)
        title_source = hotspot if isinstance(hotspot, Tag) else head
        title = self._process_children_to_inline(title_source) if isinstance(title_source, Tag) else []

        body_tag = node.find(FLARE_DROPDOWN_BODY_TAG, recursive=False)
        if isinstance(body_tag, Tag):
            children = self._process_block_container(body_tag)
        else:
            if isinstance(head, Tag):
                head.extract()
            children = self._process_block_container(node)

        return CollapsibleMarker(title=_trim_inline(title), children=children)

    # ------------------------------------------------------------------
    # Extension elements
    # ------------------------------------------------------------------

    def _process_variable_to_ast(self, node: Any) -> Optional[VariableRef]:
        """Process ``MadCap:variable`` into a VariableRef."""
        name = str(node.get("name", "")).strip()
        if not name:
            logger.debug("Skipping MadCap:variable without a name")
            return None
        namespace, key = name.split(".", 1) if "." in name else ("", name)
        fallback = _WHITESPACE_RE.sub(" ", node.get_text()).strip() or None
        return VariableRef(namespace=namespace, key=key, fallback=fallback)

    def _process_snippet_to_ast(self, node: Any) -> Optional[FragmentRef]:
        """Process ``MadCap:snippetBlock``/``MadCap:snippetText`` into a FragmentRef."""
        src = str(node.get("src", "")).strip()
        if not src:
            logger.debug("Skipping snippet without src")
            return None
        return FragmentRef(src=src, inline=node.name.lower() == FLARE_SNIPPET_TEXT_TAG)

    def _process_xref_to_ast(self, node: Any) -> Node | list[Node] | None:
        """Process ``MadCap:xref`` into a CrossReference."""
        href = str(node.get("href", "")).strip()
        content = self._process_children_to_inline(node)
        if not href:
            return content or None
        if not is_internal_topic_link(href):
            return Link(url=href, content=content)
        target, anchor = split_anchor(href)
        return CrossReference(target=target, anchor=anchor, content=content)

    def _process_glossary_term_to_ast(self, node: Any) -> Optional[GlossaryTermRef]:
        """Process ``MadCap:glossaryTerm``; the term is the element's text."""
        content = _trim_inline(self._process_children_to_inline(node))
        term = _WHITESPACE_RE.sub(" ", collect_text(content)).strip()
        if not term:
            return None
        return GlossaryTermRef(term=term, content=content)

    # ------------------------------------------------------------------
    # Inline handling
    # ------------------------------------------------------------------

    def _process_children_to_inline(self, node: Any) -> list[Node]:
        """Process element children to inline nodes only.

        Block elements found in an inline context contribute their inline
        content so text is never lost.
        """
        result: list[Node] = []
        for child in node.children:
            nodes = self._process_node_to_ast(child)
            if nodes is None:
                continue
            for item in nodes if isinstance(nodes, list) else [nodes]:
                if is_inline_node(item):
                    result.append(item)
                else:
                    logger.debug("Block %s found in inline context; keeping its text", type(item).__name__)
                    text = collect_text(item).strip()
                    if text:
                        result.append(Text(content=f" {text} "))
        return result

    def _process_strong_to_ast(self, node: Any) -> Strong:
        """Process ``<b>``/``<strong>``."""
        return Strong(content=self._process_children_to_inline(node))

    def _process_emphasis_to_ast(self, node: Any) -> Emphasis:
        """Process ``<i>``/``<em>``."""
        return Emphasis(content=self._process_children_to_inline(node))

    def _process_link_to_ast(self, node: Any) -> Node | list[Node] | None:
        """Process ``<a>``; links to other topics become cross-references."""
        href = str(node.get("href", "")).strip()
        content = self._process_children_to_inline(node)
        if not href:
            # Bookmark anchors (<a name="...">) only carry their text
            return content or None
        if is_internal_topic_link(href):
            target, anchor = split_anchor(href)
            return CrossReference(target=target, anchor=anchor, content=content)
        title = node.get("title")
        return Link(url=href, content=content, title=str(title) if title else None)

    def _process_image_to_ast(self, node: Any) -> Optional[Image]:
        """Process ``<img>``, reading dimensions from attributes or inline style."""
        src = str(node.get("src", "")).strip()
        if not src:
            return None
        style = str(node.get("style", ""))
        title = node.get("title")
        return Image(
            url=src,
            alt_text=str(node.get("alt", "")).strip(),
            title=str(title).strip() if title else None,
            width=_dimension(node.get("width"), style, "width"),
            height=_dimension(node.get("height"), style, "height"),
            classes=tuple(node.get("class", []) or []),
        )


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _has_visible_content(nodes: list[Node]) -> bool:
    """Return True unless the nodes are only whitespace text."""
    return any(not isinstance(node, Text) or node.content.strip() for node in nodes)


def _trim_inline(nodes: list[Node]) -> list[Node]:
    """Strip whitespace at both ends of an inline run."""
    nodes = list(nodes)
    while nodes and isinstance(nodes[0], Text) and not nodes[0].content.strip():
        nodes.pop(0)
    while nodes and isinstance(nodes[-1], Text) and not nodes[-1].content.strip():
        nodes.pop()
    if nodes and isinstance(nodes[0], Text):
        nodes[0] = Text(content=nodes[0].content.lstrip(), metadata=nodes[0].metadata)
    if nodes and isinstance(nodes[-1], Text):
        nodes[-1] = Text(content=nodes[-1].content.rstrip(), metadata=nodes[-1].metadata)
    return nodes


def _drop_blank_inline_runs(children: list[Node]) -> list[Node]:
    """Remove inline runs that consist only of whitespace text."""
    result: list[Node] = []
    run: list[Node] = []
    for child in children + [None]:  # type: ignore[list-item]
        if child is not None and is_inline_node(child):
            run.append(child)
            continue
        if _has_visible_content(run):
            result.extend(run)
        run = []
        if child is not None:
            result.append(child)
    return result


def _strip_admonition_label(body: list[Node], kind: str) -> list[Node]:
    """Remove the label run from the first body paragraph.

    A leading Strong/Emphasis whose text is a label is dropped (a colon is
    optional), as is a leading ``Label:`` text prefix. A first paragraph
    left empty by the removal is dropped as a whole.
    """
    if not body or not isinstance(body[0], Paragraph):
        return body
    labels = ADMONITION_LABELS.get(kind, (kind,))
    label_pattern = re.compile(r"^\s*(?:" + "|".join(map(re.escape, labels)) + r")\s*:\s*", re.IGNORECASE)
    content = _trim_inline(body[0].content)
    if content and isinstance(content[0], (Strong, Emphasis)):
        label_text = collect_text(content[0]).strip().rstrip(":").strip().lower()
        if label_text in labels:
            content = content[1:]
            if content and isinstance(content[0], Text):
                content[0] = Text(content=re.sub(r"^\s*:?\s*", "", content[0].content))
    elif content and isinstance(content[0], Text):
        stripped = label_pattern.sub("", content[0].content, count=1)
        if stripped != content[0].content:
            content[0] = Text(content=stripped)

    content = _trim_inline([node for node in content if not (isinstance(node, Text) and node.content == "")])
    if not _has_visible_content(content):
        return body[1:]
    first = Paragraph(content=content, metadata=body[0].metadata, source_location=body[0].source_location)
    return [first] + body[1:]


def _int_attribute(node: Any, name: str, default: int) -> int:
    try:
        return max(1, int(str(node.get(name, default)).strip()))
    except ValueError:
        return default


def _dimension(value: Any, style: str, name: str) -> Optional[int]:
    """Read a pixel dimension from an attribute, falling back to inline CSS."""
    if value is not None:
        match = _DIMENSION_RE.match(str(value))
        if match:
            return int(match.group(1))
    match = re.search(_STYLE_DIMENSION_RE.format(name=name), style, re.IGNORECASE)
    if match:
        return int(match.group(1))
    return None
