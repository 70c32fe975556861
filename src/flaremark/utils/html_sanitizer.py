#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/utils/html_sanitizer.py
"""HTML sanitization utilities for security.

Raw HTML that survives from a topic (``RawBlock``/``RawInline`` nodes) and
the complete output of the HTML target pass through this module.

The module supports multiple strategies for raw HTML fragments:
- pass-through: No sanitization (use only with trusted content)
- escape: HTML-escape all content
- drop: Remove HTML nodes entirely
- sanitize: Remove dangerous elements/attributes but preserve safe HTML
"""

from __future__ import annotations

import html
import logging
from typing import Iterable, Mapping, Optional

from bleach.sanitizer import Cleaner

from flaremark.constants import (
    HTML_ALLOWED_ATTRIBUTES,
    HTML_ALLOWED_PROTOCOLS,
    HTML_ALLOWED_TAGS,
    HtmlPassthroughMode,
)

logger = logging.getLogger(__name__)


def sanitize_html_content(content: str, mode: HtmlPassthroughMode = "escape") -> str:
    """Sanitize HTML content string according to the specified mode.

    Parameters
    ----------
    content : str
        HTML content to sanitize
    mode : {"pass-through", "escape", "drop", "sanitize"}, default "escape"
        Sanitization mode

    Returns
    -------
    str
        Sanitized HTML content

    Examples
    --------
    >>> sanitize_html_content("<script>alert('xss')</script>", mode="escape")
    '&lt;script&gt;alert(&#x27;xss&#x27;)&lt;/script&gt;'

    >>> sanitize_html_content("<script>alert('xss')</script>", mode="drop")
    ''

    >>> sanitize_html_content("<p>Hello <strong>world</strong></p>", mode="sanitize")
    '<p>Hello <strong>world</strong></p>'

    """
    if mode == "pass-through":
        return content

    if mode == "escape":
        return html.escape(content)

    if mode == "drop":
        return ""

    return sanitize_html_string(content)


def sanitize_html_string(
    content: str,
    tags: Optional[Iterable[str]] = None,
    attributes: Optional[Mapping[str, list[str]]] = None,
    protocols: Optional[Iterable[str]] = None,
) -> str:
    """Remove every element, attribute and URL scheme outside the allow lists.

    Disallowed elements are removed together with their markup but their
    text is kept (escaped); ``script`` and ``style`` content is dropped.

    Parameters
    ----------
    content : str
        HTML to clean
    tags, attributes, protocols : optional
        Allow lists; default to the package's presentation-HTML lists

    Returns
    -------
    str
        Cleaned HTML

    """
    cleaner = Cleaner(
        tags=frozenset(tags if tags is not None else HTML_ALLOWED_TAGS),
        attributes=dict(attributes if attributes is not None else HTML_ALLOWED_ATTRIBUTES),
        protocols=frozenset(protocols if protocols is not None else HTML_ALLOWED_PROTOCOLS),
        strip=True,
        strip_comments=False,
    )
    cleaned = cleaner.clean(_drop_script_content(content))
    if cleaned != content:
        logger.debug("Sanitizer changed %d characters of HTML", abs(len(content) - len(cleaned)))
    return cleaned


def _drop_script_content(content: str) -> str:
    """Remove script and style elements including their text."""
    from bs4 import BeautifulSoup

    if "<script" not in content.lower() and "<style" not in content.lower():
        return content
    soup = BeautifulSoup(content, "html.parser")
    for element in soup.find_all(["script", "style"]):
        element.decompose()
    return str(soup)
