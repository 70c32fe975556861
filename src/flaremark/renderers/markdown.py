#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/markdown.py
"""Markdown rendering (CommonMark and Writerside flavors).

Blocks attached to a list item are separated from the item's first line by
a blank line and indented to the item's content column, which is how
CommonMark continues an item. Nested lists are indented the same way, so
their depth follows from the indentation of their markers.

The ``writerside`` flavor adds the attribute lists Writerside understands:
``{type="alpha-lower"}`` after a list with a letter or roman style,
``{style="note"}`` after an admonition quote and ``{style="inline"}`` /
``{style="block"}`` after images, plus ``<collapsible>`` elements and
``<var name=""/>`` placeholders with a ``v.list`` variables file.

"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from flaremark.ast.nodes import Image
from flaremark.constants import (
    DEFAULT_JSON_VARIABLES_FILE,
    DEFAULT_WRITERSIDE_VARIABLES_FILE,
    WRITERSIDE_ADMONITION_STYLES,
    WRITERSIDE_LIST_TYPES,
)
from flaremark.options.markdown import MarkdownRendererOptions
from flaremark.renderers.html import json_variables, render_html_table
from flaremark.renderers.structure import StructuralRenderer
from flaremark.renderers.syntax import ItemParts, ListFrame, RenderedBlock, RenderedCell, RenderedTable, SyntaxAdapter
from flaremark.renderers.text import MARKDOWN_LITERAL_RE
from flaremark.utils.escape import (
    escape_html_entities,
    escape_inline_code,
    escape_markdown,
    escape_xml_attribute,
    protect_markdown_line_start,
)

_LIST_KINDS = ("list", "nested-list")
_BACKSLASH_ESCAPE_RE = re.compile(r"\\(.)")

WRITERSIDE_VARS_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<!DOCTYPE vars SYSTEM "https://resources.jetbrains.com/writerside/1.0/vars.dtd">\n'
)


def _indent(text: str, prefix: str) -> str:
    return "\n".join(prefix + line if line.strip() else "" for line in text.split("\n"))


def _quote(text: str) -> str:
    return "\n".join(f"> {line}" if line.strip() else ">" for line in text.split("\n"))


class MarkdownSyntax(SyntaxAdapter):
    """Markdown spelling rules for both flavors.

    Parameters
    ----------
    options : MarkdownRendererOptions
        Markdown rendering options

    """

    name = "markdown"
    literal_pattern = MARKDOWN_LITERAL_RE

    options: MarkdownRendererOptions

    @property
    def writerside(self) -> bool:
        return self.options.flavor == "writerside"

    @property  # type: ignore[override]
    def default_variables_file(self) -> str:  # type: ignore[override]
        return DEFAULT_WRITERSIDE_VARIABLES_FILE if self.writerside else DEFAULT_JSON_VARIABLES_FILE

    # ------------------------------------------------------------------
    # Inline
    # ------------------------------------------------------------------

    def escape_text(self, text: str, context: str = "text") -> str:
        return escape_markdown(text, context)

    def strong(self, text: str) -> str:
        marker = self.options.emphasis_symbol * 2
        return f"{marker}{text}{marker}"

    def emphasis(self, text: str) -> str:
        return f"{self.options.emphasis_symbol}{text}{self.options.emphasis_symbol}"

    def code(self, code: str) -> str:
        code, delimiter = escape_inline_code(code, "`")
        return f"{delimiter}{code}{delimiter}"

    def line_break(self) -> str:
        return "\\\n"

    def link(self, url: str, text: str, title: Optional[str] = None, internal: bool = False) -> str:
        destination = f"<{url}>" if " " in url else url
        if not text:
            return f"<{url}>" if "://" in url or url.startswith("mailto:") else f"[{url}]({destination})"
        title_part = ' "{}"'.format(title.replace('"', '\\"')) if title else ""
        return f"[{text}]({destination}{title_part})"

    def image(self, image: Image, block: bool) -> str:
        alt = escape_markdown(image.alt_text, "image_alt")
        destination = f"<{image.url}>" if " " in image.url else image.url
        title_part = ' "{}"'.format(image.title.replace('"', '\\"')) if image.title else ""
        markup = f"![{alt}]({destination}{title_part})"
        if self.writerside:
            width = f'width="{image.width}" ' if image.width else ""
            markup += f'{{{width}style="{"block" if block else "inline"}"}}'
        return markup

    def variable_placeholder(self, name: str, value: str) -> str:
        if self.writerside:
            return f'<var name="{escape_xml_attribute(name)}"/>'
        return "{{" + name + "}}"

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def heading(self, level: int, text: str, anchor: Optional[str] = None) -> str:
        heading = f"{'#' * min(level, 6)} {text}"
        if anchor and self.writerside:
            heading += f' {{id="{anchor}"}}'
        return heading

    def paragraph(self, text: str) -> str:
        # A list marker or block quote can interrupt a paragraph on any line
        return "\n".join(protect_markdown_line_start(line) for line in text.split("\n"))

    def code_block(self, code: str, language: Optional[str]) -> str:
        code = code.rstrip("\n")
        longest = max((len(run) for run in re.findall(r"`+", code)), default=0)
        fence = "`" * max(3, longest + 1)
        return f"{fence}{language or ''}\n{code}\n{fence}"

    def block_quote(self, body: str) -> str:
        return _quote(body)

    def thematic_break(self) -> str:
        return "---"

    def comment(self, text: str) -> str:
        return f"<!-- {text.replace('--', '- -')} -->"

    def supports_list_style(self, style: str) -> bool:
        """CommonMark numbers with arabic numerals only."""
        return style == "arabic" or (self.writerside and style in WRITERSIDE_LIST_TYPES)

    def list_block(self, frame: ListFrame, items: Sequence[ItemParts]) -> str:
        """Render a list; blocks of an item are indented to its content column.

        Examples
        --------
        An item with a continuation paragraph::

            1. First

               Orphan

            2. Second

        """
        rendered: list[str] = []
        loose = any(item.secondary for item in items)
        for index, item in enumerate(items):
            marker = f"{frame.start + index}." if frame.ordered else self.options.bullet_char
            padding = " " * (len(marker) + 1)
            first = f"{marker} {item.primary}" if item.primary else marker
            lines = first.split("\n")
            parts = [lines[0]] + [padding + line if line.strip() else "" for line in lines[1:]]
            for block in item.secondary:
                parts.append("")
                parts.append(_indent(block.text, padding))
            rendered.append("\n".join(parts))

        text = ("\n\n" if loose else "\n").join(rendered)
        list_type = WRITERSIDE_LIST_TYPES.get(frame.style) if frame.ordered else None
        if self.writerside and list_type:
            text += f'\n{{type="{list_type}"}}'
        return text

    def admonition(self, kind: str, title: Optional[str], body: Sequence[RenderedBlock], depth: int) -> str:
        blocks = [block for block in body if block.text.strip()]
        texts = [block.text for block in blocks]
        if self.writerside:
            style = WRITERSIDE_ADMONITION_STYLES.get(kind, "note")
            title_attribute = f' title="{escape_xml_attribute(title)}"' if title else ""
            return _quote("\n\n".join(texts)) + f'\n{{style="{style}"{title_attribute}}}'

        label = self.strong(f"{escape_markdown(title) if title else kind.capitalize()}:")
        if blocks and blocks[0].kind == "paragraph":
            texts[0] = f"{label} {texts[0]}"
        else:
            texts.insert(0, label)
        return _quote("\n\n".join(texts))

    def collapsible(self, title: str, body: Sequence[RenderedBlock], level: int, depth: int) -> str:
        content = self.join_blocks(body)
        if self.writerside:
            plain = _BACKSLASH_ESCAPE_RE.sub(r"\1", title)
            opening = f'<collapsible title="{escape_xml_attribute(plain)}">'
            closing = "</collapsible>"
        else:
            opening = f"<details>\n<summary>{title}</summary>"
            closing = "</details>"
        return f"{opening}\n\n{content}\n\n{closing}" if content else f"{opening}\n{closing}"

    def table(self, table: RenderedTable) -> str:
        if (table.has_spans or table.has_blocks) and self.options.html_tables:
            return render_html_table(table, lambda cell: escape_html_entities(cell.plain))

        columns = table.columns
        header = self._pipe_row(table.header, columns) if table.header else ["" for _ in range(columns)]
        lines = []
        if table.caption:
            lines.extend([self.emphasis(escape_markdown(table.caption)), ""])
        lines.append("| " + " | ".join(header) + " |")
        lines.append("|" + "|".join(" --- " for _ in range(columns)) + "|")
        for row in table.rows:
            lines.append("| " + " | ".join(self._pipe_row(row, columns)) + " |")
        return "\n".join(lines)

    @staticmethod
    def _pipe_row(row: Sequence[RenderedCell], columns: int) -> list[str]:
        cells: list[str] = []
        for cell in row:
            text = escape_markdown(cell.plain, "table") if cell.block else cell.text
            cells.append(text.replace("\\\n", "<br>").replace("\n", " "))
            # Spanned columns are flattened into empty cells
            cells.extend("" for _ in range(cell.colspan - 1))
        cells.extend("" for _ in range(columns - len(cells)))
        return cells[:columns]

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def join_blocks(self, blocks: Sequence[RenderedBlock]) -> str:
        """Join blocks; adjacent lists are kept apart with an empty comment."""
        parts: list[str] = []
        previous: Optional[RenderedBlock] = None
        for block in blocks:
            if not block.text.strip():
                continue
            if previous is not None and previous.kind in _LIST_KINDS and block.kind in _LIST_KINDS:
                parts.append("<!-- -->")
            parts.append(block.text)
            previous = block
        return "\n\n".join(parts)

    def variables_content(self, variables: dict[str, str]) -> str:
        if not self.writerside:
            return json_variables(variables)
        lines = [WRITERSIDE_VARS_HEADER + "<vars>"]
        for name, value in variables.items():
            lines.append(f'    <var name="{escape_xml_attribute(name)}" value="{escape_xml_attribute(value)}"/>')
        lines.append("</vars>")
        return "\n".join(lines) + "\n"


class MarkdownRenderer(StructuralRenderer):
    """Render canonical trees to Markdown.

    Parameters
    ----------
    options : MarkdownRendererOptions or None, default None
        Markdown rendering options

    """

    adapter_class = MarkdownSyntax
    options_class = MarkdownRendererOptions
