#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/text.py
"""Final whitespace normalization of rendered output.

Rules, applied in one pass:

* CRLF and CR line endings become LF
* trailing whitespace is removed from every line outside literal regions
* runs of blank lines collapse to one blank line outside literal regions,
  unless the run precedes a line matching ``keep_blank_before``
* leading blank lines are removed and the text ends in exactly one newline

Literal regions (code fences, passthrough blocks, ``<pre>``) are kept
verbatim.
"""

from __future__ import annotations

import re
from typing import Optional

ASCIIDOC_LITERAL_RE = re.compile(r"^(-{4,}|\.{4,}|\+{4,})$.*?^\1$", re.MULTILINE | re.DOTALL)
MARKDOWN_LITERAL_RE = re.compile(r"^([ \t]*)(`{3,}|~{3,})[^\n]*$.*?^\1\2[ \t]*$", re.MULTILINE | re.DOTALL)
HTML_LITERAL_RE = re.compile(r"<pre\b.*?</pre>", re.IGNORECASE | re.DOTALL)

# An AsciiDoc list continuation after blank lines attaches to an ancestor item
ASCIIDOC_CONTINUATION_RE = re.compile(r"^\+$")


def _literal_lines(text: str, literal_pattern: Optional[re.Pattern[str]]) -> set[int]:
    lines: set[int] = set()
    if literal_pattern is None:
        return lines
    for match in literal_pattern.finditer(text):
        first = text.count("\n", 0, match.start())
        last = text.count("\n", 0, match.end())
        lines.update(range(first, last + 1))
    return lines


def normalize_output(
    text: str,
    literal_pattern: Optional[re.Pattern[str]] = None,
    keep_blank_before: Optional[re.Pattern[str]] = None,
) -> str:
    """Normalize line endings and blank lines of rendered text.

    Parameters
    ----------
    text : str
        Rendered output
    literal_pattern : re.Pattern or None, default None
        Regions matching this pattern are left untouched
    keep_blank_before : re.Pattern or None, default None
        Blank-line runs directly before a matching line are kept as they are

    Returns
    -------
    str
        Normalized text; empty when there is no content

    Examples
    --------
    >>> normalize_output("a  \\r\\n\\n\\n\\nb")
    'a\\n\\nb\\n'

    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    literal = _literal_lines(text, literal_pattern)
    lines = text.split("\n")

    result: list[str] = []
    blanks = 0
    for index, line in enumerate(lines):
        if index in literal:
            if blanks and result:
                result.append("")
            blanks = 0
            result.append(line)
            continue
        line = line.rstrip()
        if not line:
            blanks += 1
            continue
        if blanks and result:
            keep = keep_blank_before is not None and keep_blank_before.match(line)
            result.extend([""] * (blanks if keep else 1))
        blanks = 0
        result.append(line)

    while result and not result[-1].strip():
        result.pop()
    if not result:
        return ""
    return "\n".join(result) + "\n"
