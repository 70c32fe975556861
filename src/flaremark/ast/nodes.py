#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/ast/nodes.py
"""Tree node classes for Flare topic representation.

This module defines the closed node hierarchy that every stage of the
pipeline works on. Parsed topics, structurally repaired topics and canonical
(extension-free) topics all use the same classes; the only difference is
which node kinds may still appear.

Node Hierarchy
--------------
All nodes inherit from the base Node class and support the visitor pattern.
Each concrete class dispatches to exactly one ``visit_*`` method, so a
visitor that implements every abstract method of ``NodeVisitor`` handles
every node kind.

Block-level nodes:
    - Document, Heading, Paragraph, CodeBlock, BlockQuote
    - List, ListItem, Table, TableRow, TableCell
    - Admonition, CollapsibleSection, ThematicBreak, RawBlock, Comment

Inline nodes:
    - Text, Emphasis, Strong, Code, LineBreak
    - Link, Image, RawInline, VariablePlaceholder

Authoring extensions (removed by the extension normalizer):
    - VariableRef, FragmentRef, CrossReference, GlossaryTermRef, CollapsibleMarker

Conditions
----------
Conditional-exclusion tags are kept in ``node.metadata["conditions"]`` as a
tuple of strings. Any node kind may carry them.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Literal, Optional

ListStyle = Literal["arabic", "lower-alpha", "lower-roman", "upper-alpha", "upper-roman"]
AdmonitionKind = Literal["note", "tip", "warning", "caution", "important"]

LIST_STYLES: tuple[str, ...] = ("arabic", "lower-alpha", "lower-roman", "upper-alpha", "upper-roman")
ADMONITION_KINDS: tuple[str, ...] = ("note", "tip", "warning", "caution", "important")


@dataclass
class SourceLocation:
    """Source location information for tree nodes.

    Parameters
    ----------
    format : str
        Source format (e.g., 'flare')
    line : int or None, default = None
        Line number in the source document
    column : int or None, default = None
        Column number in the source document
    element_id : str or None, default = None
        Source element identifier (the HTML ``id`` attribute)
    path : str or None, default = None
        Path of the topic or fragment the node came from

    """

    format: str
    line: Optional[int] = None
    column: Optional[int] = None
    element_id: Optional[str] = None
    path: Optional[str] = None

    def describe(self) -> str:
        """Return a short human readable location hint."""
        parts = []
        if self.path:
            parts.append(self.path)
        if self.line is not None:
            parts.append(f"line {self.line}")
        if self.element_id:
            parts.append(f"#{self.element_id}")
        return ", ".join(parts)


class Node(ABC):
    """Base class for all tree nodes.

    Parameters
    ----------
    metadata : dict, default = empty dict
        Arbitrary metadata associated with this node
    source_location : SourceLocation or None, default = None
        Information about where this node came from in the source

    """

    metadata: dict[str, Any]
    source_location: Optional[SourceLocation]

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass

    @property
    def conditions(self) -> tuple[str, ...]:
        """Conditional-exclusion tags attached to this node."""
        return tuple(self.metadata.get("conditions", ()))


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass
class Document(Node):
    """Root document node containing all other nodes.

    Parameters
    ----------
    children : list of Node, default = empty list
        Block-level nodes in the document
    metadata : dict, default = empty dict
        Document metadata (title, source path)
    source_location : SourceLocation or None, default = None
        Source location information

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this document.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_document method

        Returns
        -------
        Any
            Result from visitor.visit_document(self)

        """
        return visitor.visit_document(self)


@dataclass
class Heading(Node):
    """Heading node with level 1-6.

    Parameters
    ----------
    level : int
        Heading level (1-6)
    content : list of Node, default = empty list
        Inline content of the heading

    """

    level: int
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        """Validate heading level."""
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this heading."""
        return visitor.visit_heading(self)


@dataclass
class Paragraph(Node):
    """Paragraph node containing inline content."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this paragraph."""
        return visitor.visit_paragraph(self)


@dataclass
class CodeBlock(Node):
    """Code block node with optional language.

    Parameters
    ----------
    content : str
        Literal code content, never escaped
    language : str or None, default = None
        Language identifier for syntax highlighting

    """

    content: str
    language: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this code block."""
        return visitor.visit_code_block(self)


@dataclass
class BlockQuote(Node):
    """Block quote node containing other block elements."""

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this block quote."""
        return visitor.visit_block_quote(self)


@dataclass
class List(Node):
    """List node (ordered or unordered).

    Parameters
    ----------
    ordered : bool
        True for ordered lists, False for unordered
    items : list of Node, default = empty list
        List items. Parsed input may hold non-item children here; after
        structural repair every entry is a ListItem.
    start : int, default = 1
        Starting number for ordered lists
    style : {'arabic', 'lower-alpha', 'lower-roman', 'upper-alpha', 'upper-roman'}, default = 'arabic'
        Numbering style, scoped to this list only
    metadata : dict, default = empty dict
        List metadata. ``continue`` marks a list whose numbering continues
        the preceding ordered sibling.
    source_location : SourceLocation or None, default = None
        Source location information

    """

    ordered: bool
    items: list[Node] = field(default_factory=list)
    start: int = 1
    style: ListStyle = "arabic"
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        """Validate the numbering style."""
        if self.style not in LIST_STYLES:
            raise ValueError(f"Unknown list style: {self.style}")

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this list.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_list method

        Returns
        -------
        Any
            Result from visitor.visit_list(self)

        """
        return visitor.visit_list(self)


@dataclass
class ListItem(Node):
    """List item node.

    The children hold the item's content in source order. The converter
    splits them into a primary inline run and secondary blocks. Items created
    by structural repair carry ``metadata["synthetic"] = True``; they have no
    primary content and all of their children are secondary blocks.

    Parameters
    ----------
    children : list of Node, default = empty list
        Inline and block nodes of the item
    metadata : dict, default = empty dict
        List item metadata
    source_location : SourceLocation or None, default = None
        Source location information

    """

    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    @property
    def synthetic(self) -> bool:
        """Whether this item was created by structural repair."""
        return bool(self.metadata.get("synthetic", False))

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this list item."""
        return visitor.visit_list_item(self)


@dataclass
class Table(Node):
    """Table node with optional header row.

    Parameters
    ----------
    rows : list of TableRow, default = empty list
        Body rows
    header : TableRow or None, default = None
        Header row
    caption : str or None, default = None
        Table caption

    """

    rows: list[TableRow] = field(default_factory=list)
    header: Optional[TableRow] = None
    caption: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table."""
        return visitor.visit_table(self)


@dataclass
class TableRow(Node):
    """Table row node."""

    cells: list[TableCell] = field(default_factory=list)
    is_header: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table row."""
        return visitor.visit_table_row(self)


@dataclass
class TableCell(Node):
    """Table cell node.

    Parameters
    ----------
    content : list of Node, default = empty list
        Cell content. Either inline nodes or block nodes.
    colspan : int, default = 1
        Number of columns spanned
    rowspan : int, default = 1
        Number of rows spanned

    """

    content: list[Node] = field(default_factory=list)
    colspan: int = 1
    rowspan: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this table cell."""
        return visitor.visit_table_cell(self)


@dataclass
class ThematicBreak(Node):
    """Thematic break (horizontal rule) node."""

    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this thematic break."""
        return visitor.visit_thematic_break(self)


@dataclass
class Admonition(Node):
    """Admonition (note, tip, warning, ...) block.

    Parameters
    ----------
    kind : {'note', 'tip', 'warning', 'caution', 'important'}
        Admonition kind
    children : list of Node, default = empty list
        Body blocks. The label run is stripped by the parser, every
        remaining paragraph stays a separate block.
    title : str or None, default = None
        Optional explicit title

    """

    kind: AdmonitionKind
    children: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        """Validate the admonition kind."""
        if self.kind not in ADMONITION_KINDS:
            raise ValueError(f"Unknown admonition kind: {self.kind}")

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this admonition."""
        return visitor.visit_admonition(self)


@dataclass
class CollapsibleSection(Node):
    """Canonical foldable title/body block.

    Parameters
    ----------
    title : list of Node
        Inline title content
    children : list of Node, default = empty list
        Body blocks
    level : int, default = 1
        Nesting level; 1 for an outermost section, ancestors + 1 otherwise

    """

    title: list[Node] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    level: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this collapsible section."""
        return visitor.visit_collapsible_section(self)


@dataclass
class CollapsibleMarker(Node):
    """Source drop-down construct (head/body pair) before normalization."""

    title: list[Node] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this collapsible marker."""
        return visitor.visit_collapsible_marker(self)


@dataclass
class RawBlock(Node):
    """Block of target-specific markup emitted verbatim.

    Parameters
    ----------
    content : str
        Raw markup
    format : str, default = 'html'
        Markup the content is written in. Renderers drop blocks of a
        foreign format.

    """

    content: str
    format: str = "html"
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this raw block."""
        return visitor.visit_raw_block(self)


@dataclass
class Comment(Node):
    """Comment emitted in the target's comment syntax."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this comment."""
        return visitor.visit_comment(self)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass
class Text(Node):
    """Plain text node."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this text."""
        return visitor.visit_text(self)


@dataclass
class Emphasis(Node):
    """Emphasis (italic) node."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this emphasis."""
        return visitor.visit_emphasis(self)


@dataclass
class Strong(Node):
    """Strong (bold) node."""

    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this strong node."""
        return visitor.visit_strong(self)


@dataclass
class Code(Node):
    """Inline code node."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this inline code."""
        return visitor.visit_code(self)


@dataclass
class LineBreak(Node):
    """Hard line break node."""

    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this line break."""
        return visitor.visit_line_break(self)


@dataclass
class Link(Node):
    """Hyperlink node.

    Parameters
    ----------
    url : str
        Link target
    content : list of Node, default = empty list
        Link text
    title : str or None, default = None
        Optional title attribute

    Notes
    -----
    Links produced from cross-references carry ``metadata["internal"] = True``
    so that targets with a dedicated cross-reference syntax can use it.

    """

    url: str
    content: list[Node] = field(default_factory=list)
    title: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this link."""
        return visitor.visit_link(self)


@dataclass
class Image(Node):
    """Image node.

    Parameters
    ----------
    url : str
        Image source path or URL
    alt_text : str, default = ''
        Alternative text description
    title : str or None, default = None
        Optional image title
    width : int or None, default = None
        Declared width in pixels
    height : int or None, default = None
        Declared height in pixels
    classes : tuple of str, default = ()
        Styling classes from the source element

    """

    url: str
    alt_text: str = ""
    title: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    classes: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this image."""
        return visitor.visit_image(self)


@dataclass
class RawInline(Node):
    """Inline target-specific markup emitted verbatim."""

    content: str
    format: str = "html"
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this raw inline markup."""
        return visitor.visit_raw_inline(self)


@dataclass
class VariablePlaceholder(Node):
    """Canonical variable placeholder kept for target-specific emission.

    Parameters
    ----------
    name : str
        Fully qualified variable name (``Namespace.Key``)
    value : str
        Resolved value, used by targets without a placeholder syntax and for
        the variables listing

    """

    name: str
    value: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this variable placeholder."""
        return visitor.visit_variable_placeholder(self)


# ============================================================================
# Authoring Extension Nodes
# ============================================================================


@dataclass
class VariableRef(Node):
    """Reference to a named variable.

    Parameters
    ----------
    namespace : str
        Variable set name; empty when the source gave a bare key
    key : str
        Variable name within the set
    fallback : str or None, default = None
        Text the source already carried inside the reference element

    """

    namespace: str
    key: str
    fallback: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    @property
    def name(self) -> str:
        """Fully qualified name of the variable."""
        return f"{self.namespace}.{self.key}" if self.namespace else self.key

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this variable reference."""
        return visitor.visit_variable_ref(self)


@dataclass
class FragmentRef(Node):
    """Inclusion point of a reusable content fragment.

    Parameters
    ----------
    src : str
        Fragment path as written in the source, relative to the including
        document
    inline : bool, default = False
        True for inline inclusions, whose paragraphs are spliced into the
        surrounding inline run

    """

    src: str
    inline: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this fragment reference."""
        return visitor.visit_fragment_ref(self)


@dataclass
class CrossReference(Node):
    """Cross-document reference.

    Parameters
    ----------
    target : str
        Target path without the anchor
    anchor : str or None, default = None
        Anchor id (without ``#``), preserved verbatim
    content : list of Node, default = empty list
        Link text

    """

    target: str
    anchor: Optional[str] = None
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this cross-reference."""
        return visitor.visit_cross_reference(self)


@dataclass
class GlossaryTermRef(Node):
    """Use of a glossary term in running text.

    Parameters
    ----------
    term : str
        The term as written, used to derive the glossary anchor
    content : list of Node, default = empty list
        Inline content shown for the term

    """

    term: str
    content: list[Node] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    source_location: Optional[SourceLocation] = None

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this glossary term."""
        return visitor.visit_glossary_term_ref(self)


# ============================================================================
# Tree helpers
# ============================================================================

INLINE_NODE_TYPES: tuple[type[Node], ...] = (
    Text,
    Emphasis,
    Strong,
    Code,
    LineBreak,
    Link,
    Image,
    RawInline,
    VariablePlaceholder,
    VariableRef,
    CrossReference,
    GlossaryTermRef,
)

EXTENSION_NODE_TYPES: tuple[type[Node], ...] = (
    VariableRef,
    FragmentRef,
    CrossReference,
    GlossaryTermRef,
    CollapsibleMarker,
)


def is_inline_node(node: Node) -> bool:
    """Return True when the node belongs in an inline run.

    Inline fragment inclusions count as inline; block inclusions do not.
    """
    if isinstance(node, FragmentRef):
        return node.inline
    return isinstance(node, INLINE_NODE_TYPES)


def get_node_children(node: Node) -> list[Node]:
    """Get all child nodes from a node.

    Parameters
    ----------
    node : Node
        The node to get children from

    Returns
    -------
    list of Node
        List of child nodes (empty list if node has no children)

    Examples
    --------
    >>> heading = Heading(level=1, content=[Text("Hello"), Strong(content=[Text("world")])])
    >>> len(get_node_children(heading))
    2

    """
    if isinstance(node, (Document, BlockQuote, ListItem, Admonition)):
        return list(node.children)

    if isinstance(node, (CollapsibleSection, CollapsibleMarker)):
        return list(node.title) + list(node.children)

    if isinstance(node, (Heading, Paragraph, Emphasis, Strong, Link, TableCell, CrossReference, GlossaryTermRef)):
        return list(node.content)

    if isinstance(node, List):
        return list(node.items)

    if isinstance(node, Table):
        children: list[Node] = []
        if node.header:
            children.append(node.header)
        children.extend(node.rows)
        return children

    if isinstance(node, TableRow):
        return list(node.cells)

    return []


def replace_node_children(node: Node, new_children: list[Node]) -> Node:
    """Create a copy of a node with replaced children.

    Parameters
    ----------
    node : Node
        The node to copy and modify
    new_children : list of Node
        New children to use in the copy

    Returns
    -------
    Node
        New node with replaced children

    Raises
    ------
    ValueError
        If the node type doesn't support children or the children don't fit

    Notes
    -----
    Collapsible nodes keep their title; ``new_children`` replaces the body
    only. Tables take the first row flagged ``is_header`` as the header.

    """
    if isinstance(node, (Document, BlockQuote, ListItem, Admonition, CollapsibleSection, CollapsibleMarker)):
        return replace(node, children=new_children)

    if isinstance(node, (Heading, Paragraph, Emphasis, Strong, Link, TableCell, CrossReference, GlossaryTermRef)):
        return replace(node, content=new_children)

    if isinstance(node, List):
        return replace(node, items=new_children)

    if isinstance(node, Table):
        if not all(isinstance(child, TableRow) for child in new_children):
            raise ValueError("Table children must all be TableRow instances")
        header = next((row for row in new_children if row.is_header), None)  # type: ignore[attr-defined]
        rows = [row for row in new_children if row is not header]
        return replace(node, header=header, rows=rows)  # type: ignore[arg-type]

    if isinstance(node, TableRow):
        if not all(isinstance(child, TableCell) for child in new_children):
            raise ValueError("TableRow children must all be TableCell instances")
        return replace(node, cells=new_children)  # type: ignore[arg-type]

    raise ValueError(f"Node type {type(node).__name__} does not support children")


def collect_text(nodes: list[Node] | Node) -> str:
    """Return the plain text of a node or node list.

    Images contribute their alt text, variable placeholders their value.
    """
    if isinstance(nodes, Node):
        nodes = [nodes]
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, (Text, Code)):
            parts.append(node.content)
        elif isinstance(node, Image):
            parts.append(node.alt_text)
        elif isinstance(node, VariablePlaceholder):
            parts.append(node.value)
        elif isinstance(node, VariableRef):
            parts.append(node.fallback or "")
        elif isinstance(node, LineBreak):
            parts.append(" ")
        else:
            parts.append(collect_text(get_node_children(node)))
    return "".join(parts)
