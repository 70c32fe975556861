#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/syntax.py
"""Target syntax adapters.

The structural converter decides *what* is emitted and in which order; a
``SyntaxAdapter`` decides *how* each construct is spelled in the target
syntax. Adapters receive already rendered text (inline runs, item parts,
table cells) and return text. They hold no state besides their options.

"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Literal, Optional, Sequence

from flaremark.ast.nodes import Image
from flaremark.options.base import BaseRendererOptions
from flaremark.renderers.text import normalize_output
from flaremark.utils.html_sanitizer import sanitize_html_content
from flaremark.utils.text import convert_variable_name

BlockKind = Literal["paragraph", "nested-list", "admonition", "image", "heading", "list", "block"]


@dataclass(frozen=True)
class ListFrame:
    """Description of the list being rendered.

    Parameters
    ----------
    ordered : bool
        Numbered list
    style : str, default "arabic"
        Numbering style
    start : int, default 1
        First number
    depth : int, default 1
        Structural depth; the outermost list is 1

    """

    ordered: bool
    style: str = "arabic"
    start: int = 1
    depth: int = 1


@dataclass(frozen=True)
class RenderedBlock:
    """A rendered block and what kind of block it was.

    ``open_levels`` is only set for nested lists: the number of list levels
    that are still open after the block's last line.
    """

    kind: BlockKind
    text: str
    open_levels: int = 0


@dataclass(frozen=True)
class ItemParts:
    """A list item split into its primary line and its secondary blocks.

    Parameters
    ----------
    primary : str
        Rendered first inline run; empty for items that start with a block
    secondary : tuple of RenderedBlock
        Blocks that follow the primary content, each needing a continuation
    synthetic : bool, default False
        Item was created by structural repair to hold orphaned content

    """

    primary: str
    secondary: tuple[RenderedBlock, ...] = ()
    synthetic: bool = False

    @property
    def trailing_levels(self) -> int:
        """List levels left open when the item ends with a nested list."""
        if self.secondary and self.secondary[-1].kind == "nested-list":
            return self.secondary[-1].open_levels
        return 0


@dataclass(frozen=True)
class RenderedCell:
    """A rendered table cell.

    ``text`` is the target markup, ``plain`` the cell's plain text (used when
    a target has to flatten the cell), ``block`` marks cells holding blocks.
    """

    text: str
    plain: str
    colspan: int = 1
    rowspan: int = 1
    block: bool = False


@dataclass(frozen=True)
class RenderedTable:
    """A table whose cells are rendered."""

    header: Optional[tuple[RenderedCell, ...]]
    rows: tuple[tuple[RenderedCell, ...], ...]
    columns: int
    caption: Optional[str] = None
    nested: bool = False

    @property
    def has_spans(self) -> bool:
        return any(cell.colspan > 1 or cell.rowspan > 1 for row in self.all_rows for cell in row)

    @property
    def has_blocks(self) -> bool:
        return any(cell.block for row in self.all_rows for cell in row)

    @property
    def all_rows(self) -> tuple[tuple[RenderedCell, ...], ...]:
        return ((self.header,) if self.header else ()) + self.rows


@dataclass(frozen=True)
class VariablesFile:
    """Variables listing written next to the converted documents.

    Parameters
    ----------
    name : str
        File name (``variables.adoc``, ``v.list``, ``variables.json``)
    content : str
        File content

    """

    name: str
    content: str


class SyntaxAdapter(ABC):
    """Spelling rules of one target syntax.

    Parameters
    ----------
    options : BaseRendererOptions
        Renderer options of the target

    """

    name: ClassVar[str]
    default_variables_file: ClassVar[str]
    literal_pattern: ClassVar[Optional[re.Pattern[str]]] = None
    keep_blank_before: ClassVar[Optional[re.Pattern[str]]] = None

    def __init__(self, options: BaseRendererOptions):
        """Initialize the adapter."""
        self.options = options

    # ------------------------------------------------------------------
    # Inline constructs
    # ------------------------------------------------------------------

    @abstractmethod
    def escape_text(self, text: str, context: str = "text") -> str:
        """Escape literal text for the target."""

    @abstractmethod
    def strong(self, text: str) -> str:
        """Spell bold text."""

    @abstractmethod
    def emphasis(self, text: str) -> str:
        """Spell italic text."""

    @abstractmethod
    def code(self, code: str) -> str:
        """Spell inline code (``code`` is not escaped)."""

    @abstractmethod
    def line_break(self) -> str:
        """Spell a hard line break."""

    @abstractmethod
    def link(self, url: str, text: str, title: Optional[str] = None, internal: bool = False) -> str:
        """Spell a hyperlink; ``text`` is already rendered."""

    @abstractmethod
    def image(self, image: Image, block: bool) -> str:
        """Spell an inline or block image."""

    @abstractmethod
    def variable_placeholder(self, name: str, value: str) -> str:
        """Spell a reference to a variable defined in the variables listing."""

    def raw_inline(self, content: str) -> str:
        """Emit raw HTML kept from the source according to the passthrough mode."""
        if self.options.html_passthrough_mode == "escape":
            return self.escape_text(content)
        filtered = sanitize_html_content(content, self.options.html_passthrough_mode)
        return self._wrap_raw_inline(filtered) if filtered else ""

    def _wrap_raw_inline(self, html: str) -> str:
        return html

    def variable_name(self, name: str) -> str:
        """Apply the configured naming convention and prefix."""
        return convert_variable_name(name, self.options.variable_name_convention, self.options.variable_prefix)

    # ------------------------------------------------------------------
    # Block constructs
    # ------------------------------------------------------------------

    @abstractmethod
    def heading(self, level: int, text: str, anchor: Optional[str] = None) -> str:
        """Spell a section heading."""

    @abstractmethod
    def paragraph(self, text: str) -> str:
        """Spell a paragraph from its rendered inline content."""

    @abstractmethod
    def code_block(self, code: str, language: Optional[str]) -> str:
        """Spell a literal code block."""

    @abstractmethod
    def block_quote(self, body: str) -> str:
        """Spell a quotation around rendered blocks."""

    @abstractmethod
    def thematic_break(self) -> str:
        """Spell a horizontal rule."""

    @abstractmethod
    def comment(self, text: str) -> str:
        """Spell a comment that is not part of the visible output."""

    def raw_block(self, content: str) -> str:
        """Emit a raw HTML block according to the passthrough mode."""
        if self.options.html_passthrough_mode == "escape":
            return self.paragraph(self.escape_text(content))
        filtered = sanitize_html_content(content, self.options.html_passthrough_mode)
        return self._wrap_raw_block(filtered) if filtered.strip() else ""

    def _wrap_raw_block(self, html: str) -> str:
        return html

    def supports_list_style(self, style: str) -> bool:
        """Whether ``list_block`` can express a numbering style."""
        return True

    @abstractmethod
    def list_block(self, frame: ListFrame, items: Sequence[ItemParts]) -> str:
        """Spell a whole list from its extracted items."""

    @abstractmethod
    def admonition(self, kind: str, title: Optional[str], body: Sequence[RenderedBlock], depth: int) -> str:
        """Spell a note/tip/warning block.

        ``depth`` is the number of enclosing delimited blocks.
        """

    @abstractmethod
    def collapsible(self, title: str, body: Sequence[RenderedBlock], level: int, depth: int) -> str:
        """Spell a foldable section.

        ``level`` is the collapsible nesting level (1 for the outermost),
        ``depth`` the number of enclosing delimited blocks.
        """

    @abstractmethod
    def table(self, table: RenderedTable) -> str:
        """Spell a table."""

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def join_blocks(self, blocks: Sequence[RenderedBlock]) -> str:
        """Join sibling blocks with blank lines, skipping empty ones."""
        return "\n\n".join(block.text for block in blocks if block.text.strip())

    def document(self, body: str, variables_file: Optional[str] = None) -> str:
        """Wrap the rendered body; ``variables_file`` is set in include mode."""
        return body

    def finalize(self, text: str) -> str:
        """Apply the final whitespace normalization."""
        return normalize_output(text, self.literal_pattern, self.keep_blank_before)

    @abstractmethod
    def variables_content(self, variables: dict[str, str]) -> str:
        """Format the variables listing; keys are already converted names."""

    def variables_file(self, variables: dict[str, str]) -> VariablesFile:
        """Build the variables listing artifact.

        Parameters
        ----------
        variables : dict[str, str]
            Variable values keyed by qualified source name

        Returns
        -------
        VariablesFile
            Listing sorted by emitted name

        """
        converted: dict[str, str] = {}
        for source_name, value in variables.items():
            converted.setdefault(self.variable_name(source_name), value)
        ordered = dict(sorted(converted.items()))
        name = self.options.variables_file_name or self.default_variables_file
        return VariablesFile(name=name, content=self.variables_content(ordered))
