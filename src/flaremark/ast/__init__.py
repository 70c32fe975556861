#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/ast/__init__.py
"""Tree representation of Flare topics.

The same node classes describe a topic at every stage of the pipeline:

- nodes: node classes, including the authoring-extension nodes
- visitors: visitor base class with one method per node kind
- transforms: tree-to-tree transformer, cloning and traversal helpers

Examples
--------
    >>> from flaremark.ast import Document, List, ListItem, Text
    >>> doc = Document(children=[List(ordered=True, items=[ListItem(children=[Text("First")])])])

"""

from flaremark.ast.nodes import (
    ADMONITION_KINDS,
    EXTENSION_NODE_TYPES,
    INLINE_NODE_TYPES,
    LIST_STYLES,
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
    SourceLocation,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
    VariablePlaceholder,
    VariableRef,
    collect_text,
    get_node_children,
    is_inline_node,
    replace_node_children,
)
from flaremark.ast.transforms import NodeTransformer, clone_tree, iter_nodes
from flaremark.ast.visitors import NodeVisitor

__all__ = [
    "ADMONITION_KINDS",
    "EXTENSION_NODE_TYPES",
    "INLINE_NODE_TYPES",
    "LIST_STYLES",
    "Admonition",
    "BlockQuote",
    "Code",
    "CodeBlock",
    "CollapsibleMarker",
    "CollapsibleSection",
    "Comment",
    "CrossReference",
    "Document",
    "Emphasis",
    "FragmentRef",
    "GlossaryTermRef",
    "Heading",
    "Image",
    "LineBreak",
    "Link",
    "List",
    "ListItem",
    "Node",
    "NodeTransformer",
    "NodeVisitor",
    "Paragraph",
    "RawBlock",
    "RawInline",
    "SourceLocation",
    "Strong",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "ThematicBreak",
    "VariablePlaceholder",
    "VariableRef",
    "clone_tree",
    "collect_text",
    "get_node_children",
    "is_inline_node",
    "iter_nodes",
    "replace_node_children",
]
