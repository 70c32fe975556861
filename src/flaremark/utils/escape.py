#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/utils/escape.py
"""Format-specific text escaping utilities.

This module provides escape functions for the output syntaxes to ensure
special characters in topic text are not read as markup.

"""

from __future__ import annotations

import html
import re

_ASCIIDOC_CONSTRAINED_RE = re.compile(r"([*_`#])")
_ASCIIDOC_LINE_START_RE = re.compile(
    r"^(\s*)([.*\-=|]+\s|\.[^\s.]|\[|//|:[\w-]+:|(?:NOTE|TIP|WARNING|CAUTION|IMPORTANT):\s)"
)


def escape_asciidoc(text: str, context: str = "text") -> str:
    r"""Escape special AsciiDoc characters in text content.

    Formatting marks (``*``, ``_``, backtick, ``#``) are backslash escaped and
    attribute references (``{name}``) are neutralized. Block syntax at the
    start of a line is handled by ``protect_asciidoc_line_start``.

    Parameters
    ----------
    text : str
        Text to escape
    context : {'text', 'table', 'link'}, default = 'text'
        ``table`` also escapes cell separators, ``link`` escapes closing
        brackets of macro text

    Returns
    -------
    str
        Escaped text safe for AsciiDoc

    Examples
    --------
        >>> escape_asciidoc("Use *bold* and {attr}")
        'Use \\*bold\\* and \\{attr}'
        >>> escape_asciidoc("A | B", "table")
        'A \\| B'

    """
    if not text:
        return text

    result = _ASCIIDOC_CONSTRAINED_RE.sub(r"\\\1", text)
    result = result.replace("{", r"\{")

    if context == "table":
        result = result.replace("|", r"\|")
    elif context == "link":
        result = result.replace("]", r"\]")

    return result


def protect_asciidoc_line_start(text: str) -> str:
    """Keep a paragraph from being read as a list, title, comment or admonition.

    >>> protect_asciidoc_line_start(". Not a list item")
    '{empty}. Not a list item'

    """
    match = _ASCIIDOC_LINE_START_RE.match(text)
    if not match:
        return text
    return f"{match.group(1)}{{empty}}{text[len(match.group(1)):]}"


def escape_markdown(text: str, context: str = "text") -> str:
    r"""Escape markdown with context awareness.

    Different contexts require different escaping strategies.

    Parameters
    ----------
    text : str
        Text to escape
    context : {'text', 'table', 'link', 'image_alt'}, default = 'text'
        Context where text will be used

    Returns
    -------
    str
        Escaped text

    Examples
    --------
        >>> escape_markdown("Text with [brackets]", "text")
        'Text with \\[brackets\\]'
        >>> escape_markdown("Cell | with | pipes", "table")
        'Cell \\| with \\| pipes'

    """
    if not text:
        return text

    if context in ("link", "image_alt"):
        return text.replace("[", r"\[").replace("]", r"\]")

    # \ ` * _ { } [ ] < and # can all trigger formatting or raw HTML
    special_chars = "\\`*_{}[]<#"
    result = "".join("\\" + char if char in special_chars else char for char in text)

    if context == "table":
        result = result.replace("|", r"\|")
    return result


def protect_markdown_line_start(text: str) -> str:
    r"""Keep a paragraph from being read as a list item, quote or rule.

    >>> protect_markdown_line_start("1. Not a list item")
    '1\\. Not a list item'

    """
    text = re.sub(r"^(\d+)([.)])(\s|$)", r"\1\\\2\3", text)
    return re.sub(r"^([>+\-=])", r"\\\1", text)


def escape_inline_code(code: str, delimiter: str = "`") -> tuple[str, str]:
    """Escape inline code and determine appropriate delimiter.

    Handles cases where code contains the delimiter character by
    using a longer delimiter sequence.

    Parameters
    ----------
    code : str
        Code content to escape
    delimiter : str, default = '`'
        Preferred delimiter character

    Returns
    -------
    tuple[str, str]
        (escaped_code, delimiter_to_use)

    Examples
    --------
        >>> escape_inline_code("simple code", "`")
        ('simple code', '`')
        >>> escape_inline_code("code with ` backtick", "`")
        ('code with ` backtick', '``')

    """
    if not code:
        return code, delimiter

    longest = max((len(run) for run in re.findall(re.escape(delimiter) + "+", code)), default=0)
    if longest == 0:
        return code, delimiter

    final_delimiter = delimiter * (longest + 1)
    if code.startswith(delimiter) or code.endswith(delimiter):
        code = f" {code} "
    return code, final_delimiter


def escape_html_entities(text: str) -> str:
    """Escape HTML special characters to entities.

    Examples
    --------
        >>> escape_html_entities("<script>alert('XSS')</script>")
        '&lt;script&gt;alert(&#x27;XSS&#x27;)&lt;/script&gt;'

    """
    if not text:
        return text
    return html.escape(text, quote=True)


def escape_xml_attribute(text: str) -> str:
    """Escape a value for a double-quoted XML attribute."""
    return html.escape(text, quote=True).replace("&#x27;", "'")
