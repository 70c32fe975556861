#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/ast/visitors.py
"""Visitor pattern implementation for tree traversal.

Every node kind has one abstract ``visit_*`` method on ``NodeVisitor``. A
concrete visitor that forgets a node kind cannot be instantiated, which keeps
the converter, the repair stage and the normalizer exhaustive over the closed
node set.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from flaremark.ast.nodes import (
    Admonition,
    BlockQuote,
    Code,
    CodeBlock,
    CollapsibleMarker,
    CollapsibleSection,
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
    Paragraph,
    RawBlock,
    RawInline,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    VariablePlaceholder,
    VariableRef,
)


class NodeVisitor(ABC):
    """Abstract base class for tree node visitors.

    Subclasses implement one visit_* method per node type. The return value
    is up to the visitor: renderers append to an output buffer and return
    None, transformers return replacement nodes.

    Examples
    --------
    Visitors are dispatched through ``Node.accept``:

        >>> class TextCounter(NodeVisitor):
        ...     def visit_text(self, node):
        ...         return 1
        ...     # ... remaining visit_* methods ...
        >>> Text(content="hello").accept(TextCounter())
        1

    """

    @abstractmethod
    def visit_document(self, node: Document) -> Any:
        """Visit a Document node.

        Parameters
        ----------
        node : Document
            The document node to visit

        Returns
        -------
        Any
            Result of processing this node

        """
        pass

    @abstractmethod
    def visit_list(self, node: List) -> Any:
        """Visit a List node.

        Parameters
        ----------
        node : List
            The list node to visit

        Returns
        -------
        Any
            Result of processing this node

        """
        pass

    @abstractmethod
    def visit_heading(self, node: Heading) -> Any:
        """Visit a Heading node."""
        pass

    @abstractmethod
    def visit_paragraph(self, node: Paragraph) -> Any:
        """Visit a Paragraph node."""
        pass

    @abstractmethod
    def visit_code_block(self, node: CodeBlock) -> Any:
        """Visit a CodeBlock node."""
        pass

    @abstractmethod
    def visit_block_quote(self, node: BlockQuote) -> Any:
        """Visit a BlockQuote node."""
        pass

    @abstractmethod
    def visit_list_item(self, node: ListItem) -> Any:
        """Visit a ListItem node."""
        pass

    @abstractmethod
    def visit_table(self, node: Table) -> Any:
        """Visit a Table node."""
        pass

    @abstractmethod
    def visit_table_row(self, node: TableRow) -> Any:
        """Visit a TableRow node."""
        pass

    @abstractmethod
    def visit_table_cell(self, node: TableCell) -> Any:
        """Visit a TableCell node."""
        pass

    @abstractmethod
    def visit_thematic_break(self, node: ThematicBreak) -> Any:
        """Visit a ThematicBreak node."""
        pass

    @abstractmethod
    def visit_admonition(self, node: Admonition) -> Any:
        """Visit a Admonition node."""
        pass

    @abstractmethod
    def visit_collapsible_section(self, node: CollapsibleSection) -> Any:
        """Visit a CollapsibleSection node."""
        pass

    @abstractmethod
    def visit_collapsible_marker(self, node: CollapsibleMarker) -> Any:
        """Visit a CollapsibleMarker node."""
        pass

    @abstractmethod
    def visit_raw_block(self, node: RawBlock) -> Any:
        """Visit a RawBlock node."""
        pass

    @abstractmethod
    def visit_comment(self, node: Comment) -> Any:
        """Visit a Comment node."""
        pass

    @abstractmethod
    def visit_text(self, node: Text) -> Any:
        """Visit a Text node."""
        pass

    @abstractmethod
    def visit_emphasis(self, node: Emphasis) -> Any:
        """Visit a Emphasis node."""
        pass

    @abstractmethod
    def visit_strong(self, node: Strong) -> Any:
        """Visit a Strong node."""
        pass

    @abstractmethod
    def visit_code(self, node: Code) -> Any:
        """Visit a Code node."""
        pass

    @abstractmethod
    def visit_line_break(self, node: LineBreak) -> Any:
        """Visit a LineBreak node."""
        pass

    @abstractmethod
    def visit_link(self, node: Link) -> Any:
        """Visit a Link node."""
        pass

    @abstractmethod
    def visit_image(self, node: Image) -> Any:
        """Visit a Image node."""
        pass

    @abstractmethod
    def visit_raw_inline(self, node: RawInline) -> Any:
        """Visit a RawInline node."""
        pass

    @abstractmethod
    def visit_variable_placeholder(self, node: VariablePlaceholder) -> Any:
        """Visit a VariablePlaceholder node."""
        pass

    @abstractmethod
    def visit_variable_ref(self, node: VariableRef) -> Any:
        """Visit a VariableRef node."""
        pass

    @abstractmethod
    def visit_fragment_ref(self, node: FragmentRef) -> Any:
        """Visit a FragmentRef node."""
        pass

    @abstractmethod
    def visit_cross_reference(self, node: CrossReference) -> Any:
        """Visit a CrossReference node."""
        pass

    @abstractmethod
    def visit_glossary_term_ref(self, node: GlossaryTermRef) -> Any:
        """Visit a GlossaryTermRef node."""
        pass
