#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/asciidoc.py
"""AsciiDoc rendering.

Lists use repeated markers (``.``/``..`` for ordered, ``*``/``**`` for
unordered) so the nesting depth is visible on every item. Blocks attached to
an item follow a ``+`` continuation line; after a nested list, one empty
line per list level that has to be closed precedes the ``+`` so the block is
attached to the right ancestor item. Numbering styles are written once as a
block attribute line (``[loweralpha]``) directly above the list.

Admonitions and collapsible sections are example-style blocks delimited by
``====``; each enclosing delimited block adds one ``=`` so nested blocks
never close their parent.

"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from flaremark.ast.nodes import Image
from flaremark.constants import (
    ASCIIDOC_ADMONITION_LABELS,
    ASCIIDOC_LIST_STYLE_DIRECTIVES,
    DEFAULT_ASCIIDOC_VARIABLES_FILE,
)
from flaremark.options.asciidoc import AsciiDocRendererOptions
from flaremark.renderers.structure import StructuralRenderer
from flaremark.renderers.syntax import ItemParts, ListFrame, RenderedBlock, RenderedCell, RenderedTable, SyntaxAdapter
from flaremark.renderers.text import ASCIIDOC_CONTINUATION_RE, ASCIIDOC_LITERAL_RE
from flaremark.utils.escape import escape_asciidoc, protect_asciidoc_line_start
from flaremark.utils.text import asciidoc_attribute_name

_URL_SCHEME_RE = re.compile(r"^(?:https?|ftp|irc)://", re.IGNORECASE)
_LIST_KINDS = ("list", "nested-list")


class AsciiDocSyntax(SyntaxAdapter):
    """AsciiDoc spelling rules.

    Parameters
    ----------
    options : AsciiDocRendererOptions
        AsciiDoc rendering options

    """

    name = "asciidoc"
    default_variables_file = DEFAULT_ASCIIDOC_VARIABLES_FILE
    literal_pattern = ASCIIDOC_LITERAL_RE
    keep_blank_before = ASCIIDOC_CONTINUATION_RE

    options: AsciiDocRendererOptions

    # ------------------------------------------------------------------
    # Inline
    # ------------------------------------------------------------------

    def escape_text(self, text: str, context: str = "text") -> str:
        return escape_asciidoc(text, context)

    def strong(self, text: str) -> str:
        return f"*{text}*"

    def emphasis(self, text: str) -> str:
        return f"_{text}_"

    def code(self, code: str) -> str:
        # Literal monospace: nothing inside is interpreted
        return f"`+{code}+`"

    def line_break(self) -> str:
        return " +\n"

    def link(self, url: str, text: str, title: Optional[str] = None, internal: bool = False) -> str:
        url = url.replace(" ", "%20")
        if internal and self.options.use_xref_macro:
            return f"xref:{url}[{text}]"
        if _URL_SCHEME_RE.match(url) and (not text or text == escape_asciidoc(url, "link")):
            return url
        return f"link:{url}[{text}]"

    def image(self, image: Image, block: bool) -> str:
        alt = image.alt_text.replace("]", r"\]")
        attributes = [f'"{alt}"' if "," in alt else alt]
        if image.width:
            attributes.append(f"width={image.width}")
        if image.height:
            attributes.append(f"height={image.height}")
        if block and image.title:
            attributes.append('title="{}"'.format(image.title.replace('"', "&quot;")))
        macro = "image::" if block else "image:"
        return f"{macro}{image.url.replace(' ', '%20')}[{','.join(attributes)}]"

    def variable_name(self, name: str) -> str:
        """Attribute names are lowercase with dashes or underscores."""
        return asciidoc_attribute_name(super().variable_name(name))

    def variable_placeholder(self, name: str, value: str) -> str:
        return "{" + name + "}"

    def _wrap_raw_inline(self, html: str) -> str:
        return f"pass:[{html}]"

    def _wrap_raw_block(self, html: str) -> str:
        return f"++++\n{html.strip()}\n++++"

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def heading(self, level: int, text: str, anchor: Optional[str] = None) -> str:
        # Level 1 maps to a level-1 section (==); = is reserved for the document title
        prefix = "=" * (min(level, 5) + 1)
        heading = f"{prefix} {text}"
        return f"[[{anchor}]]\n{heading}" if anchor else heading

    def paragraph(self, text: str) -> str:
        # Lists and titles can interrupt a paragraph on any line
        return "\n".join(protect_asciidoc_line_start(line) for line in text.split("\n"))

    def code_block(self, code: str, language: Optional[str]) -> str:
        code = code.rstrip("\n")
        fence = "----"
        while re.search(rf"^{fence}$", code, re.MULTILINE):
            fence += "-"
        header = f"[source,{language}]\n" if language else ""
        return f"{header}{fence}\n{code}\n{fence}"

    def block_quote(self, body: str) -> str:
        return f"____\n{body}\n____"

    def thematic_break(self) -> str:
        return "'''"

    def comment(self, text: str) -> str:
        if "\n" in text:
            return f"////\n{text}\n////"
        return f"// {text}"

    def list_block(self, frame: ListFrame, items: Sequence[ItemParts]) -> str:
        """Render a list with depth markers and ``+`` continuations.

        Examples
        --------
        A nested alphabetic list under the first item of a numbered list::

            . Main
            +
            [loweralpha]
            .. A
            .. B

        """
        marker = ("." if frame.ordered else "*") * frame.depth
        indent = " " * (self.options.list_indent * (frame.depth - 1))

        lines: list[str] = []
        attributes: list[str] = []
        if frame.ordered:
            directive = ASCIIDOC_LIST_STYLE_DIRECTIVES.get(frame.style)
            if directive:
                attributes.append(directive)
            if frame.start != 1:
                attributes.append(f"start={frame.start}")
        if attributes:
            lines.append(f"[{','.join(attributes)}]")

        for item in items:
            lines.append(f"{indent}{marker} {item.primary or '{empty}'}")
            previous: Optional[RenderedBlock] = None
            for block in item.secondary:
                if previous is not None and previous.kind == "nested-list":
                    lines.extend([""] * previous.open_levels)
                lines.append("+")
                lines.append(block.text)
                previous = block
        return "\n".join(lines)

    def admonition(self, kind: str, title: Optional[str], body: Sequence[RenderedBlock], depth: int) -> str:
        label = ASCIIDOC_ADMONITION_LABELS.get(kind, "NOTE")
        single = len(body) == 1 and body[0].kind == "paragraph"
        if self.options.admonition_style != "block" and single and not title:
            return f"{label}: {body[0].text}"

        fence = "=" * (4 + depth)
        lines = [f".{escape_asciidoc(title)}"] if title else []
        lines.extend([f"[{label}]", fence, self.join_blocks(body), fence])
        return "\n".join(lines)

    def collapsible(self, title: str, body: Sequence[RenderedBlock], level: int, depth: int) -> str:
        fence = "=" * (4 + depth)
        content = self.join_blocks(body)
        lines = [f".{title}", "[%collapsible]", fence]
        if content:
            lines.append(content)
        lines.append(fence)
        return "\n".join(lines)

    def table(self, table: RenderedTable) -> str:
        separator = "!" if table.nested else "|"
        attributes = [f'cols="{table.columns}*"']
        table_options = []
        if table.header:
            table_options.append("header")
        if self.options.table_autowidth:
            table_options.append("autowidth")
        if table_options:
            attributes.append(f'options="{",".join(table_options)}"')
        if self.options.table_frame != "all":
            attributes.append(f"frame={self.options.table_frame}")
        if self.options.table_grid != "all":
            attributes.append(f"grid={self.options.table_grid}")

        lines = [f".{table.caption}"] if table.caption else []
        lines.append(f"[{','.join(attributes)}]")
        lines.append(f"{separator}===")
        for index, row in enumerate(table.all_rows):
            if index:
                lines.append("")
            lines.extend(self._cell(cell, separator) for cell in row)
        lines.append(f"{separator}===")
        return "\n".join(lines)

    @staticmethod
    def _cell(cell: RenderedCell, separator: str) -> str:
        span = ""
        if cell.colspan > 1 and cell.rowspan > 1:
            span = f"{cell.colspan}.{cell.rowspan}+"
        elif cell.colspan > 1:
            span = f"{cell.colspan}+"
        elif cell.rowspan > 1:
            span = f".{cell.rowspan}+"
        style = "a" if cell.block else ""
        return f"{span}{style}{separator}{cell.text}"

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def join_blocks(self, blocks: Sequence[RenderedBlock]) -> str:
        """Join blocks; adjacent lists are kept apart with an empty ``//-`` comment."""
        parts: list[str] = []
        previous: Optional[RenderedBlock] = None
        for block in blocks:
            if not block.text.strip():
                continue
            if previous is not None and previous.kind in _LIST_KINDS and block.kind in _LIST_KINDS:
                parts.append("//-")
            parts.append(block.text)
            previous = block
        return "\n\n".join(parts)

    def document(self, body: str, variables_file: Optional[str] = None) -> str:
        if variables_file:
            return f"include::{variables_file}[]\n\n{body}"
        return body

    def variables_content(self, variables: dict[str, str]) -> str:
        lines = [f":{name}: {' '.join(value.split())}".rstrip() for name, value in variables.items()]
        return "\n".join(lines) + "\n" if lines else ""


class AsciiDocRenderer(StructuralRenderer):
    """Render canonical trees to AsciiDoc.

    Parameters
    ----------
    options : AsciiDocRendererOptions or None, default None
        AsciiDoc rendering options

    Examples
    --------
    >>> doc = Document(children=[List(ordered=True, items=[ListItem(children=[Text("First")])])])
    >>> AsciiDocRenderer().render_to_string(doc)
    '. First\\n'

    """

    adapter_class = AsciiDocSyntax
    options_class = AsciiDocRendererOptions
