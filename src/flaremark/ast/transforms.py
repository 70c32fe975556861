#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/ast/transforms.py
"""Tree transformation utilities.

``NodeTransformer`` is the base of the structural repair stage and the
extension normalizer. A visit method returns a replacement node, ``None`` to
remove the node, or a list of nodes to splice in its place.

Examples
--------
Uppercase every text node:

    >>> class Upper(NodeTransformer):
    ...     def visit_text(self, node):
    ...         return Text(content=node.content.upper())
    >>> new_doc = Upper().transform(doc)

"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Union

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
    Node,
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
    get_node_children,
    replace_node_children,
)
from flaremark.ast.visitors import NodeVisitor

TransformResult = Union[Node, list[Node], None]


class NodeTransformer(NodeVisitor):
    """Base class for transforming tree nodes.

    Subclasses override visit_* methods that return modified nodes, None to
    remove nodes, or a list of nodes to splice into the parent. The default
    implementation rebuilds every container with transformed children and
    copies leaves, so the input tree is never mutated.

    """

    def transform(self, node: Node) -> TransformResult:
        """Transform a tree node.

        Parameters
        ----------
        node : Node
            Node to transform

        Returns
        -------
        Node, list of Node or None
            Transformed node, nodes to splice, or None to remove

        """
        return node.accept(self)

    def _transform_children(self, children: list[Node]) -> list[Node]:
        """Transform a list of child nodes, splicing list results.

        Parameters
        ----------
        children : list of Node
            Children to transform

        Returns
        -------
        list of Node
            Transformed children (None results dropped, lists flattened)

        """
        result: list[Node] = []
        for child in children:
            transformed = self.transform(child)
            if transformed is None:
                continue
            if isinstance(transformed, list):
                result.extend(transformed)
            else:
                result.append(transformed)
        return result

    def _generic_transform(self, node: Node) -> Node:
        """Transform a node by rebuilding it with transformed children.

        Parameters
        ----------
        node : Node
            Node to transform

        Returns
        -------
        Node
            Copy of the node with children replaced

        """
        children = get_node_children(node)
        if not children:
            return _copy_leaf(node)
        return replace_node_children(node, self._transform_children(children))

    def visit_document(self, node: Document) -> TransformResult:
        """Transform a Document node."""
        return replace(node, children=self._transform_children(node.children), metadata=node.metadata.copy())

    def visit_heading(self, node: Heading) -> TransformResult:
        """Transform a Heading node."""
        return self._generic_transform(node)

    def visit_paragraph(self, node: Paragraph) -> TransformResult:
        """Transform a Paragraph node."""
        return self._generic_transform(node)

    def visit_code_block(self, node: CodeBlock) -> TransformResult:
        """Transform a CodeBlock node."""
        return replace(node, metadata=node.metadata.copy())

    def visit_block_quote(self, node: BlockQuote) -> TransformResult:
        """Transform a BlockQuote node."""
        return self._generic_transform(node)

    def visit_list(self, node: List) -> TransformResult:
        """Transform a List node."""
        return replace(node, items=self._transform_children(node.items), metadata=node.metadata.copy())

    def visit_list_item(self, node: ListItem) -> TransformResult:
        """Transform a ListItem node."""
        return replace(node, children=self._transform_children(node.children), metadata=node.metadata.copy())

    def visit_table(self, node: Table) -> TransformResult:
        """Transform a Table node."""
        header = self.transform(node.header) if node.header else None
        return replace(
            node,
            header=header if isinstance(header, TableRow) else None,
            rows=[row for row in self._transform_children(list(node.rows)) if isinstance(row, TableRow)],
            metadata=node.metadata.copy(),
        )

    def visit_table_row(self, node: TableRow) -> TransformResult:
        """Transform a TableRow node."""
        cells = [cell for cell in self._transform_children(list(node.cells)) if isinstance(cell, TableCell)]
        return replace(node, cells=cells)

    def visit_table_cell(self, node: TableCell) -> TransformResult:
        """Transform a TableCell node."""
        return self._generic_transform(node)

    def visit_thematic_break(self, node: ThematicBreak) -> TransformResult:
        """Transform a ThematicBreak node."""
        return _copy_leaf(node)

    def visit_admonition(self, node: Admonition) -> TransformResult:
        """Transform an Admonition node."""
        return self._generic_transform(node)

    def visit_collapsible_section(self, node: CollapsibleSection) -> TransformResult:
        """Transform a CollapsibleSection node."""
        return replace(
            node,
            title=self._transform_children(node.title),
            children=self._transform_children(node.children),
        )

    def visit_collapsible_marker(self, node: CollapsibleMarker) -> TransformResult:
        """Transform a CollapsibleMarker node."""
        return replace(
            node,
            title=self._transform_children(node.title),
            children=self._transform_children(node.children),
        )

    def visit_raw_block(self, node: RawBlock) -> TransformResult:
        """Transform a RawBlock node."""
        return _copy_leaf(node)

    def visit_comment(self, node: Comment) -> TransformResult:
        """Transform a Comment node."""
        return _copy_leaf(node)

    def visit_text(self, node: Text) -> TransformResult:
        """Transform a Text node."""
        return _copy_leaf(node)

    def visit_emphasis(self, node: Emphasis) -> TransformResult:
        """Transform an Emphasis node."""
        return self._generic_transform(node)

    def visit_strong(self, node: Strong) -> TransformResult:
        """Transform a Strong node."""
        return self._generic_transform(node)

    def visit_code(self, node: Code) -> TransformResult:
        """Transform a Code node."""
        return _copy_leaf(node)

    def visit_line_break(self, node: LineBreak) -> TransformResult:
        """Transform a LineBreak node."""
        return _copy_leaf(node)

    def visit_link(self, node: Link) -> TransformResult:
        """Transform a Link node."""
        return self._generic_transform(node)

    def visit_image(self, node: Image) -> TransformResult:
        """Transform an Image node."""
        return _copy_leaf(node)

    def visit_raw_inline(self, node: RawInline) -> TransformResult:
        """Transform a RawInline node."""
        return _copy_leaf(node)

    def visit_variable_placeholder(self, node: VariablePlaceholder) -> TransformResult:
        """Transform a VariablePlaceholder node."""
        return _copy_leaf(node)

    def visit_variable_ref(self, node: VariableRef) -> TransformResult:
        """Transform a VariableRef node."""
        return _copy_leaf(node)

    def visit_fragment_ref(self, node: FragmentRef) -> TransformResult:
        """Transform a FragmentRef node."""
        return _copy_leaf(node)

    def visit_cross_reference(self, node: CrossReference) -> TransformResult:
        """Transform a CrossReference node."""
        return self._generic_transform(node)

    def visit_glossary_term_ref(self, node: GlossaryTermRef) -> TransformResult:
        """Transform a GlossaryTermRef node."""
        return self._generic_transform(node)


def clone_tree(node: Node) -> Node:
    """Create a deep copy of a tree.

    Fragment inclusions always go through this function so that two
    inclusion sites never share nodes.

    Parameters
    ----------
    node : Node
        Node to clone

    Returns
    -------
    Node
        Deep copy of the node

    Examples
    --------
    >>> cloned_doc = clone_tree(doc)
    >>> cloned_doc is doc
    False

    """
    return copy.deepcopy(node)


def iter_nodes(node: Node):
    """Yield ``node`` and all of its descendants depth-first, pre-order."""
    yield node
    for child in get_node_children(node):
        yield from iter_nodes(child)


def _copy_leaf(node: Node) -> Node:
    return replace(node, metadata=dict(node.metadata))
