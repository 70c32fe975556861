#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/structure.py
"""Structural conversion of canonical trees into target markup.

``StructuralRenderer`` walks a canonical Document depth first and decides
the structure of the output: which blocks exist, which list item a block
belongs to, how deep a list is, and how many delimited blocks enclose a
construct. The target spelling is delegated to a ``SyntaxAdapter``.

List items
----------
Every item is split into ``ItemParts``: one primary line (the first inline
run, or the item's first paragraph when nothing precedes it) and the
secondary blocks that follow. The adapter emits exactly one continuation
for each secondary block, so empty blocks are dropped before they reach it.

Context
-------
The walk state (list depth, enclosing list frames, delimited block depth,
table depth) lives in an immutable ``ConversionContext``. A new context is
swapped in for the duration of a subtree and the previous one restored
afterwards, so sibling subtrees never see each other's state.

Failures
--------
A block that cannot be rendered is replaced by a paragraph holding its
plain text and a ``structural`` warning is recorded; the rest of the
document is still converted.

"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Sequence

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
    collect_text,
    is_inline_node,
)
from flaremark.ast.visitors import NodeVisitor
from flaremark.constants import DEFAULT_COLLAPSIBLE_TITLE
from flaremark.diagnostics import DiagnosticCollector
from flaremark.exceptions import FlaremarkError
from flaremark.options.base import BaseRendererOptions
from flaremark.renderers.base import BaseRenderer
from flaremark.renderers.images import classify_image
from flaremark.renderers.syntax import (
    ItemParts,
    ListFrame,
    RenderedBlock,
    RenderedCell,
    RenderedTable,
    SyntaxAdapter,
)

logger = logging.getLogger(__name__)

# Errors a malformed subtree may raise while it is rendered
_RECOVERABLE_ERRORS = (FlaremarkError, ValueError, TypeError, AttributeError, KeyError, IndexError, RecursionError)


@dataclass(frozen=True)
class ConversionContext:
    """Walk state for the subtree being rendered.

    Parameters
    ----------
    list_depth : int, default 0
        Number of enclosing lists
    list_stack : tuple of ListFrame, default ()
        The enclosing lists, outermost first
    delimiter_depth : int, default 0
        Number of enclosing delimited blocks (admonitions, collapsibles)
    table_depth : int, default 0
        Number of enclosing tables
    escape_context : str, default "text"
        Escaping context for text nodes
    diagnostics : DiagnosticCollector or None
        Sink of the document being converted

    """

    list_depth: int = 0
    list_stack: tuple[ListFrame, ...] = ()
    delimiter_depth: int = 0
    table_depth: int = 0
    escape_context: str = "text"
    diagnostics: Optional[DiagnosticCollector] = field(default=None, compare=False)


class StructuralRenderer(NodeVisitor, BaseRenderer):
    """Render canonical trees through a syntax adapter.

    Parameters
    ----------
    options : BaseRendererOptions or None, default None
        Renderer options; defaults to ``options_class()``
    adapter : SyntaxAdapter or None, default None
        Spelling rules; defaults to ``adapter_class(options)``
    diagnostics : DiagnosticCollector or None, default None
        Sink for rendering diagnostics
    include_variables : bool, default False
        Emit an include of the variables listing at the top of the document

    """

    adapter_class: Optional[type[SyntaxAdapter]] = None
    options_class: type[BaseRendererOptions] = BaseRendererOptions

    def __init__(
        self,
        options: Optional[BaseRendererOptions] = None,
        adapter: Optional[SyntaxAdapter] = None,
        diagnostics: Optional[DiagnosticCollector] = None,
        include_variables: bool = False,
    ):
        """Initialize the renderer."""
        BaseRenderer._validate_options_type(options, self.options_class, type(self).__name__)
        options = options or self.options_class()
        BaseRenderer.__init__(self, options)
        self.options: BaseRendererOptions = options
        if adapter is None:
            if self.adapter_class is None:
                raise TypeError(f"{type(self).__name__} needs a syntax adapter")
            adapter = self.adapter_class(options)
        self.adapter = adapter
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.include_variables = include_variables
        self._context = ConversionContext(diagnostics=self.diagnostics)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def render_to_string(self, doc: Document) -> str:
        """Render a canonical Document to target markup.

        Parameters
        ----------
        doc : Document
            Canonical tree

        Returns
        -------
        str
            Normalized target markup ending in a single newline

        """
        self._context = ConversionContext(diagnostics=self.diagnostics)
        body = self.adapter.join_blocks(self._render_blocks(doc.children))
        variables_name = None
        if self.include_variables:
            variables_name = self.options.variables_file_name or self.adapter.default_variables_file
        return self.adapter.finalize(self.adapter.document(body, variables_name))

    @contextmanager
    def _scoped(self, **changes: object) -> Iterator[ConversionContext]:
        previous = self._context
        self._context = replace(previous, **changes)  # type: ignore[arg-type]
        try:
            yield self._context
        finally:
            self._context = previous

    def _warn(self, category: str, message: str, node: Node) -> None:
        sink = self._context.diagnostics
        if sink is not None:
            sink.warning(category, message, node=node)  # type: ignore[arg-type]
        else:
            logger.warning("%s", message)

    # ------------------------------------------------------------------
    # Block sequences
    # ------------------------------------------------------------------

    def _render_blocks(self, nodes: Sequence[Node]) -> list[RenderedBlock]:
        """Render sibling blocks; loose inline runs become paragraphs."""
        blocks: list[RenderedBlock] = []
        run: list[Node] = []

        def flush() -> None:
            if run:
                block = self._render_block(Paragraph(content=list(run), source_location=run[0].source_location))
                run.clear()
                if block.text.strip():
                    blocks.append(block)

        for node in nodes:
            if is_inline_node(node):
                run.append(node)
                continue
            flush()
            block = self._render_block(node)
            if block.text.strip():
                blocks.append(block)
        flush()
        return blocks

    def _render_block(self, node: Node) -> RenderedBlock:
        """Render one block, degrading it to plain text if rendering fails."""
        try:
            if isinstance(node, List):
                text, open_levels = self._render_list(node)
                kind = "nested-list" if self._context.list_depth > 0 else "list"
                return RenderedBlock(kind, text, open_levels)  # type: ignore[arg-type]
            if isinstance(node, Paragraph):
                image = self._sole_block_image(node.content)
                if image is not None:
                    return RenderedBlock("image", self.adapter.image(image, block=True))
                return RenderedBlock("paragraph", node.accept(self))
            text = node.accept(self)
        except _RECOVERABLE_ERRORS as exc:
            plain = " ".join(collect_text(node).split())
            self._warn("structural", f"Could not convert {type(node).__name__} ({exc}); emitted as plain text", node)
            return RenderedBlock("paragraph", self.adapter.paragraph(self.adapter.escape_text(plain)) if plain else "")

        if isinstance(node, Admonition):
            return RenderedBlock("admonition", text)
        if isinstance(node, Heading):
            return RenderedBlock("heading", text)
        return RenderedBlock("block", text)

    def _render_inline(self, nodes: Sequence[Node]) -> str:
        return "".join(node.accept(self) for node in nodes)

    def _sole_block_image(self, nodes: Sequence[Node]) -> Optional[Image]:
        """Return the image of a run that consists of a single block image."""
        images = [node for node in nodes if isinstance(node, Image)]
        if len(images) != 1:
            return None
        placement = classify_image(
            images[0],
            nodes,
            max_size=self.options.inline_image_max_size,
            text_threshold=self.options.sole_image_text_threshold,
        )
        return images[0] if placement == "block" else None

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def _render_list(self, node: List) -> tuple[str, int]:
        """Render a list; also return how many list levels stay open after it."""
        depth = self._context.list_depth + 1
        frame = ListFrame(ordered=node.ordered, style=node.style, start=node.start, depth=depth)
        if node.ordered and not self.adapter.supports_list_style(node.style):
            message = f"{node.style} numbering not supported by {self.adapter.name}; using arabic numerals"
            self.diagnostics.info("structural", message, node=node)
        items: list[ItemParts] = []
        with self._scoped(list_depth=depth, list_stack=self._context.list_stack + (frame,)):
            for entry in node.items:
                if isinstance(entry, ListItem):
                    items.append(self._extract_item(entry))
                    continue
                # Unrepaired input: attach the block to the previous item
                self._warn("structural", f"{type(entry).__name__} directly inside a list", entry)
                block = self._render_block(entry)
                if not block.text.strip():
                    continue
                if items:
                    items[-1] = replace(items[-1], secondary=items[-1].secondary + (block,))
                else:
                    items.append(ItemParts(primary="", secondary=(block,), synthetic=True))

        if not items:
            return "", 0
        return self.adapter.list_block(frame, items), 1 + items[-1].trailing_levels

    def _extract_item(self, item: ListItem) -> ItemParts:
        """Split an item into its primary inline run and secondary blocks."""
        synthetic = bool(item.metadata.get("synthetic"))
        primary: Optional[str] = "" if synthetic else None
        secondary: list[RenderedBlock] = []
        run: list[Node] = []

        def flush() -> None:
            nonlocal primary
            if not run:
                return
            nodes = list(run)
            run.clear()
            image = self._sole_block_image(nodes)
            if image is not None:
                if primary is None:
                    primary = ""
                secondary.append(RenderedBlock("image", self.adapter.image(image, block=True)))
                return
            text = self._render_inline(nodes).strip()
            if not text:
                return
            if primary is None:
                primary = text
            else:
                secondary.append(RenderedBlock("paragraph", self.adapter.paragraph(text)))

        for child in item.children:
            if is_inline_node(child):
                run.append(child)
                continue
            if isinstance(child, Paragraph) and primary is None and not run:
                run.extend(child.content)
                flush()
                continue
            flush()
            if primary is None:
                primary = ""
            block = self._render_block(child)
            if block.text.strip():
                secondary.append(block)
        flush()

        return ItemParts(primary=primary or "", secondary=tuple(secondary), synthetic=synthetic)

    def visit_list(self, node: List) -> str:
        """Render a list."""
        return self._render_list(node)[0]

    def visit_list_item(self, node: ListItem) -> str:
        """Render an item found outside a list as a one-item bullet list."""
        self._warn("structural", "List item outside a list", node)
        return self._render_list(List(ordered=False, items=[node]))[0]

    # ------------------------------------------------------------------
    # Other blocks
    # ------------------------------------------------------------------

    def visit_document(self, node: Document) -> str:
        """Render a nested document as a block sequence."""
        return self.adapter.join_blocks(self._render_blocks(node.children))

    def visit_heading(self, node: Heading) -> str:
        """Render a heading; inside lists and blocks it becomes a bold paragraph."""
        text = self._render_inline(node.content).strip()
        if not text:
            return ""
        if self._context.list_depth or self._context.delimiter_depth or self._context.table_depth:
            return self.adapter.paragraph(self.adapter.strong(text))
        return self.adapter.heading(node.level, text, anchor=node.metadata.get("id"))

    def visit_paragraph(self, node: Paragraph) -> str:
        """Render a paragraph."""
        text = self._render_inline(node.content).strip()
        return self.adapter.paragraph(text) if text else ""

    def visit_code_block(self, node: CodeBlock) -> str:
        """Render a literal block."""
        return self.adapter.code_block(node.content, node.language)

    def visit_block_quote(self, node: BlockQuote) -> str:
        """Render a quotation."""
        body = self.adapter.join_blocks(self._render_blocks(node.children))
        return self.adapter.block_quote(body) if body.strip() else ""

    def visit_admonition(self, node: Admonition) -> str:
        """Render a note/tip/warning; each body paragraph stays separate."""
        depth = self._context.delimiter_depth
        with self._scoped(delimiter_depth=depth + 1):
            body = self._render_blocks(node.children)
        if not body:
            return ""
        return self.adapter.admonition(node.kind, node.title, body, depth)

    def visit_collapsible_section(self, node: CollapsibleSection) -> str:
        """Render a foldable section with a delimiter heavier than its ancestors'."""
        depth = self._context.delimiter_depth
        title = self._render_inline(node.title).strip() or self.adapter.escape_text(DEFAULT_COLLAPSIBLE_TITLE)
        with self._scoped(delimiter_depth=depth + 1):
            body = self._render_blocks(node.children)
        return self.adapter.collapsible(title, body, node.level, depth)

    def visit_thematic_break(self, node: ThematicBreak) -> str:
        """Render a horizontal rule."""
        return self.adapter.thematic_break()

    def visit_comment(self, node: Comment) -> str:
        """Render a comment unless comments are disabled."""
        if not self.options.emit_comments or not node.content.strip():
            return ""
        return self.adapter.comment(node.content.strip())

    def visit_raw_block(self, node: RawBlock) -> str:
        """Emit raw content; HTML goes through the passthrough mode."""
        if node.format == self.adapter.name:
            return node.content
        return self.adapter.raw_block(node.content)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def visit_table(self, node: Table) -> str:
        """Render a table."""
        nested = self._context.table_depth > 0
        rows_with_header = ([node.header] if node.header else []) + list(node.rows)
        with self._scoped(table_depth=self._context.table_depth + 1, escape_context="table"):
            header = tuple(self._render_cell(cell) for cell in node.header.cells) if node.header else None
            rows = tuple(tuple(self._render_cell(cell) for cell in row.cells) for row in node.rows)
        table = RenderedTable(
            header=header,
            rows=rows,
            columns=self._compute_table_columns(rows_with_header),
            caption=node.caption,
            nested=nested,
        )
        if table.columns == 0:
            return ""
        return self.adapter.table(table)

    def _render_cell(self, cell: TableCell) -> RenderedCell:
        block = any(not is_inline_node(child) for child in cell.content)
        if block:
            text = self.adapter.join_blocks(self._render_blocks(cell.content))
        else:
            text = self._render_inline(cell.content).strip()
        return RenderedCell(
            text=text,
            plain=" ".join(collect_text(cell).split()),
            colspan=cell.colspan,
            rowspan=cell.rowspan,
            block=block,
        )

    def visit_table_row(self, node: TableRow) -> str:
        """Render a row outside its table as its cells' text."""
        return " ".join(self._render_cell(cell).text for cell in node.cells)

    def visit_table_cell(self, node: TableCell) -> str:
        """Render a cell outside its table."""
        return self._render_cell(node).text

    # ------------------------------------------------------------------
    # Inline nodes
    # ------------------------------------------------------------------

    def visit_text(self, node: Text) -> str:
        """Escape text for the target."""
        return self.adapter.escape_text(node.content.replace("\n", " "), self._context.escape_context)

    def visit_emphasis(self, node: Emphasis) -> str:
        """Render italic text."""
        text = self._render_inline(node.content)
        return self.adapter.emphasis(text) if text.strip() else text

    def visit_strong(self, node: Strong) -> str:
        """Render bold text."""
        text = self._render_inline(node.content)
        return self.adapter.strong(text) if text.strip() else text

    def visit_code(self, node: Code) -> str:
        """Render inline code."""
        return self.adapter.code(node.content)

    def visit_line_break(self, node: LineBreak) -> str:
        """Render a hard line break."""
        return self.adapter.line_break()

    def visit_link(self, node: Link) -> str:
        """Render a hyperlink or a rewritten cross-reference."""
        with self._scoped(escape_context="link"):
            text = self._render_inline(node.content).strip()
        return self.adapter.link(node.url, text, node.title, internal=bool(node.metadata.get("internal")))

    def visit_image(self, node: Image) -> str:
        """Render an image inside running text."""
        return self.adapter.image(node, block=False)

    def visit_raw_inline(self, node: RawInline) -> str:
        """Emit raw inline content; HTML goes through the passthrough mode."""
        if node.format == self.adapter.name:
            return node.content
        return self.adapter.raw_inline(node.content)

    def visit_variable_placeholder(self, node: VariablePlaceholder) -> str:
        """Render a reference into the variables listing."""
        return self.adapter.variable_placeholder(self.adapter.variable_name(node.name), node.value)

    # ------------------------------------------------------------------
    # Authoring extensions left in the tree
    # ------------------------------------------------------------------

    def visit_variable_ref(self, node: VariableRef) -> str:
        """Emit an unresolved variable as its source text."""
        self._warn("reference", f"Unresolved variable {node.name} reached the renderer", node)
        return self.adapter.escape_text(node.fallback or node.name, self._context.escape_context)

    def visit_fragment_ref(self, node: FragmentRef) -> str:
        """Emit an unresolved fragment inclusion as a comment."""
        self._warn("reference", f"Unresolved fragment {node.src} reached the renderer", node)
        if node.inline or not self.options.emit_comments:
            return ""
        return self.adapter.comment(f"Fragment not included: {node.src}")

    def visit_cross_reference(self, node: CrossReference) -> str:
        """Emit an unresolved cross-reference as a link to its source target."""
        self._warn("reference", f"Unresolved cross-reference {node.target} reached the renderer", node)
        url = node.target + (f"#{node.anchor}" if node.anchor else "")
        with self._scoped(escape_context="link"):
            text = self._render_inline(node.content).strip()
        return self.adapter.link(url, text or self.adapter.escape_text(url, "link"), internal=False)

    def visit_glossary_term_ref(self, node: GlossaryTermRef) -> str:
        """Emit an unresolved glossary term as its text."""
        self._warn("reference", f"Unresolved glossary term '{node.term}' reached the renderer", node)
        return self._render_inline(node.content) or self.adapter.escape_text(node.term, self._context.escape_context)

    def visit_collapsible_marker(self, node: CollapsibleMarker) -> str:
        """Render an unresolved drop-down like a collapsible section."""
        section = CollapsibleSection(title=node.title, children=node.children, level=self._context.delimiter_depth + 1)
        return self.visit_collapsible_section(section)
