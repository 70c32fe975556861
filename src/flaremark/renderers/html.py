#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/html.py
"""Sanitized presentation-HTML rendering.

The output is an HTML fragment (no ``<html>``/``<head>`` shell). Secondary
blocks of a list item are nested inside its ``<li>``; admonitions become
``<div class="admonition note">`` and collapsible sections ``<details>``.
When ``sanitize`` is enabled the finished fragment goes through bleach with
the allow lists from ``flaremark.constants``.

"""

from __future__ import annotations

import json
from typing import Callable, Optional, Sequence

from flaremark.ast.nodes import Image
from flaremark.constants import DEFAULT_JSON_VARIABLES_FILE, HTML_LIST_TYPES
from flaremark.options.html import HtmlRendererOptions
from flaremark.renderers.structure import StructuralRenderer
from flaremark.renderers.syntax import ItemParts, ListFrame, RenderedBlock, RenderedCell, RenderedTable, SyntaxAdapter
from flaremark.renderers.text import HTML_LITERAL_RE, normalize_output
from flaremark.utils.escape import escape_html_entities, escape_xml_attribute
from flaremark.utils.html_sanitizer import sanitize_html_string


def render_html_table(table: RenderedTable, cell_content: Callable[[RenderedCell], str]) -> str:
    """Build an HTML table from rendered cells.

    Parameters
    ----------
    table : RenderedTable
        Table to render
    cell_content : callable
        Returns the HTML content of a cell

    Returns
    -------
    str
        ``<table>`` markup with spans preserved

    """

    def row_html(row: Sequence[RenderedCell], tag: str) -> str:
        cells = []
        for cell in row:
            spans = ""
            if cell.colspan > 1:
                spans += f' colspan="{cell.colspan}"'
            if cell.rowspan > 1:
                spans += f' rowspan="{cell.rowspan}"'
            cells.append(f"<{tag}{spans}>{cell_content(cell)}</{tag}>")
        return "<tr>" + "".join(cells) + "</tr>"

    lines = ["<table>"]
    if table.caption:
        lines.append(f"<caption>{escape_html_entities(table.caption)}</caption>")
    if table.header:
        lines.extend(["<thead>", row_html(table.header, "th"), "</thead>"])
    lines.append("<tbody>")
    lines.extend(row_html(row, "td") for row in table.rows)
    lines.extend(["</tbody>", "</table>"])
    return "\n".join(lines)


def json_variables(variables: dict[str, str]) -> str:
    """Format a variables listing as a JSON object."""
    return json.dumps(variables, indent=2, ensure_ascii=False) + "\n"


class HtmlSyntax(SyntaxAdapter):
    """Presentation-HTML spelling rules."""

    name = "html"
    default_variables_file = DEFAULT_JSON_VARIABLES_FILE
    literal_pattern = HTML_LITERAL_RE

    options: HtmlRendererOptions

    def escape_text(self, text: str, context: str = "text") -> str:
        return escape_html_entities(text)

    def strong(self, text: str) -> str:
        return f"<strong>{text}</strong>"

    def emphasis(self, text: str) -> str:
        return f"<em>{text}</em>"

    def code(self, code: str) -> str:
        return f"<code>{escape_html_entities(code)}</code>"

    def line_break(self) -> str:
        return "<br>"

    def link(self, url: str, text: str, title: Optional[str] = None, internal: bool = False) -> str:
        title_attribute = f' title="{escape_xml_attribute(title)}"' if title else ""
        return f'<a href="{escape_xml_attribute(url)}"{title_attribute}>{text or escape_html_entities(url)}</a>'

    def image(self, image: Image, block: bool) -> str:
        attributes = [f'src="{escape_xml_attribute(image.url)}"', f'alt="{escape_xml_attribute(image.alt_text)}"']
        if image.title:
            attributes.append(f'title="{escape_xml_attribute(image.title)}"')
        if image.width:
            attributes.append(f'width="{image.width}"')
        if image.height:
            attributes.append(f'height="{image.height}"')
        if not block:
            attributes.append('class="inline"')
        tag = f"<img {' '.join(attributes)}>"
        return f'<p class="image">{tag}</p>' if block else tag

    def variable_placeholder(self, name: str, value: str) -> str:
        return f'<span data-variable="{escape_xml_attribute(name)}">{escape_html_entities(value)}</span>'

    def heading(self, level: int, text: str, anchor: Optional[str] = None) -> str:
        level = min(level, 6)
        id_attribute = f' id="{escape_xml_attribute(anchor)}"' if anchor else ""
        return f"<h{level}{id_attribute}>{text}</h{level}>"

    def paragraph(self, text: str) -> str:
        return f"<p>{text}</p>"

    def code_block(self, code: str, language: Optional[str]) -> str:
        class_attribute = f' class="language-{escape_xml_attribute(language)}"' if language else ""
        return f"<pre><code{class_attribute}>{escape_html_entities(code.rstrip(chr(10)))}</code></pre>"

    def block_quote(self, body: str) -> str:
        return f"<blockquote>\n{body}\n</blockquote>"

    def thematic_break(self) -> str:
        return "<hr>"

    def comment(self, text: str) -> str:
        return f"<!-- {text.replace('--', '- -')} -->"

    def list_block(self, frame: ListFrame, items: Sequence[ItemParts]) -> str:
        tag = "ol" if frame.ordered else "ul"
        attributes = ""
        if frame.ordered:
            list_type = HTML_LIST_TYPES.get(frame.style)
            if list_type:
                attributes += f' type="{list_type}"'
            if frame.start != 1:
                attributes += f' start="{frame.start}"'

        lines = [f"<{tag}{attributes}>"]
        for item in items:
            if not item.secondary:
                lines.append(f"<li>{item.primary}</li>")
                continue
            parts = [f"<li>{item.primary}" if item.primary else "<li>"]
            parts.extend(block.text for block in item.secondary)
            parts.append("</li>")
            lines.append("\n".join(parts))
        lines.append(f"</{tag}>")
        return "\n".join(lines)

    def admonition(self, kind: str, title: Optional[str], body: Sequence[RenderedBlock], depth: int) -> str:
        lines = [f'<div class="{self.options.admonition_class} {kind}">']
        if title:
            lines.append(f'<p class="admonition-title">{escape_html_entities(title)}</p>')
        lines.append(self.join_blocks(body))
        lines.append("</div>")
        return "\n".join(lines)

    def collapsible(self, title: str, body: Sequence[RenderedBlock], level: int, depth: int) -> str:
        open_attribute = " open" if self.options.collapsible_open else ""
        lines = [f'<details class="collapsible"{open_attribute}>', f"<summary>{title}</summary>"]
        content = self.join_blocks(body)
        if content:
            lines.append(content)
        lines.append("</details>")
        return "\n".join(lines)

    def table(self, table: RenderedTable) -> str:
        return render_html_table(table, lambda cell: cell.text)

    def join_blocks(self, blocks: Sequence[RenderedBlock]) -> str:
        return "\n".join(block.text for block in blocks if block.text.strip())

    def finalize(self, text: str) -> str:
        if self.options.sanitize:
            text = sanitize_html_string(text)
        return normalize_output(text, self.literal_pattern)

    def variables_content(self, variables: dict[str, str]) -> str:
        return json_variables(variables)


class HtmlRenderer(StructuralRenderer):
    """Render canonical trees to sanitized HTML fragments.

    Parameters
    ----------
    options : HtmlRendererOptions or None, default None
        HTML rendering options

    """

    adapter_class = HtmlSyntax
    options_class = HtmlRendererOptions
