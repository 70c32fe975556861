#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/preprocess/repair.py
"""Structural repair of parsed topics.

Flare topics regularly violate HTML's list content model: paragraphs and
notes sit directly inside ``<ol>``, nested lists are not wrapped in an
``<li>``, and ``<li>`` elements appear outside any list. The parser keeps
that containment as written; this stage rewrites it so that every List holds
only ListItems.

Rules
-----
Demotion
    Inside a List every non-item child (paragraph, admonition, bare nested
    list, ...) is appended to the preceding item, the anchor. Content before
    the first item gets a synthetic anchor item with no primary content.
Stray items
    Consecutive ListItems outside any List are wrapped in one unordered List.
Sibling nesting
    An ordered sub-style list that directly follows an ordered list of an
    enclosing style (``a.`` after ``1.``, ``i.`` after ``a.``) is moved under
    the previous list's last item.
Continuation
    A List flagged ``continue`` starts after the last number of the
    preceding ordered list in the same container.
Empty lists
    Lists left without items are removed.

The stage is idempotent: repairing a repaired tree changes nothing and
records no diagnostics.

"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from flaremark.ast.nodes import List, ListItem, Node
from flaremark.ast.transforms import NodeTransformer, TransformResult
from flaremark.diagnostics import DiagnosticCollector

logger = logging.getLogger(__name__)

# Styles a sub-list style nests under when the two lists are adjacent siblings
_NESTS_UNDER: dict[str, frozenset[str]] = {
    "lower-alpha": frozenset({"arabic", "upper-alpha", "upper-roman"}),
    "lower-roman": frozenset({"lower-alpha"}),
    "upper-alpha": frozenset({"arabic", "upper-roman"}),
}


class StructuralRepairTransformer(NodeTransformer):
    """Transformer enforcing list containment rules.

    Parameters
    ----------
    diagnostics : DiagnosticCollector or None, default None
        Sink for ``structural`` diagnostics

    """

    def __init__(self, diagnostics: Optional[DiagnosticCollector] = None):
        """Initialize the transformer."""
        self.diagnostics = diagnostics

    def _warn(self, message: str, node: Node) -> None:
        if self.diagnostics is not None:
            self.diagnostics.warning("structural", message, node=node)
        else:
            logger.debug("%s", message)

    def _transform_children(self, children: list[Node]) -> list[Node]:
        """Transform children, then apply the container-level rules."""
        return self._repair_sequence(super()._transform_children(children))

    def visit_list(self, node: List) -> TransformResult:
        """Demote non-item children into the preceding item."""
        entries = NodeTransformer._transform_children(self, node.items)

        items: list[ListItem] = []
        anchor_children: list[Node] = []
        for entry in entries:
            if isinstance(entry, ListItem):
                if items:
                    items[-1] = replace(items[-1], children=self._repair_sequence(anchor_children))
                items.append(entry)
                anchor_children = list(entry.children)
                continue

            if not items:
                self._warn(f"{type(entry).__name__} before the first list item; added an empty item", entry)
                items.append(ListItem(children=[], metadata={"synthetic": True}, source_location=entry.source_location))
                anchor_children = []
            else:
                self._warn(f"{type(entry).__name__} directly inside a list; moved into the preceding item", entry)
            anchor_children.append(entry)

        if items:
            items[-1] = replace(items[-1], children=self._repair_sequence(anchor_children))

        if not items:
            if self.diagnostics is not None:
                self.diagnostics.info("structural", "Removed empty list", node=node)
            return None
        return replace(node, items=list(items), metadata=node.metadata.copy())

    def _repair_sequence(self, children: list[Node]) -> list[Node]:
        """Apply stray-item wrapping, sibling nesting and continuation numbering."""
        result = self._nest_sibling_lists(self._wrap_stray_items(children))
        return _number_continued_lists(result)

    def _wrap_stray_items(self, children: list[Node]) -> list[Node]:
        if not any(isinstance(child, ListItem) for child in children):
            return children
        result: list[Node] = []
        run: list[ListItem] = []

        def flush() -> None:
            if run:
                self._warn(f"{len(run)} list item(s) outside a list; wrapped in a list", run[0])
                result.append(List(ordered=False, items=list(run), source_location=run[0].source_location))
                run.clear()

        for child in children:
            if isinstance(child, ListItem):
                run.append(child)
            else:
                flush()
                result.append(child)
        flush()
        return result

    def _nest_sibling_lists(self, children: list[Node]) -> list[Node]:
        result: list[Node] = []
        for child in children:
            previous = result[-1] if result else None
            if isinstance(child, List) and isinstance(previous, List) and _nests_under(child, previous):
                last = previous.items[-1]
                self._warn(f"{child.style} list following a {previous.style} list; nested under its last item", child)
                nested_item = replace(last, children=self._repair_sequence(list(last.children) + [child]))
                result[-1] = replace(previous, items=list(previous.items[:-1]) + [nested_item])
                continue
            result.append(child)
        return result


def _nests_under(candidate: List, previous: List) -> bool:
    if not (candidate.ordered and previous.ordered and previous.items):
        return False
    if candidate.metadata.get("continue"):
        return False
    return previous.style in _NESTS_UNDER.get(candidate.style, frozenset())


def _number_continued_lists(children: list[Node]) -> list[Node]:
    result: list[Node] = []
    last_ordered: Optional[List] = None
    for child in children:
        if isinstance(child, List) and child.ordered:
            if child.metadata.get("continue") and last_ordered is not None:
                start = last_ordered.start + len(last_ordered.items)
                if child.start != start:
                    child = replace(child, start=start)
            last_ordered = child
        result.append(child)
    return result


def repair_tree(node: Node, diagnostics: Optional[DiagnosticCollector] = None) -> Node:
    """Repair list containment in a tree.

    Parameters
    ----------
    node : Node
        Root of the tree, usually a Document. It is not modified.
    diagnostics : DiagnosticCollector or None, default None
        Receives one ``structural`` diagnostic per repair

    Returns
    -------
    Node
        Repaired copy of the tree

    Examples
    --------
    >>> doc = Document(children=[List(ordered=True, items=[
    ...     ListItem(children=[Text("First")]),
    ...     Paragraph(content=[Text("Orphan")]),
    ...     ListItem(children=[Text("Second")]),
    ... ])])
    >>> repaired = repair_tree(doc)
    >>> len(repaired.children[0].items)
    2

    """
    result = StructuralRepairTransformer(diagnostics).transform(node)
    if isinstance(result, Node):
        return result
    # Only an empty root list repairs to nothing
    return replace(node, items=[]) if isinstance(node, List) else node
