#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/html.py
"""Configuration options for sanitized HTML rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from flaremark.options.base import BaseRendererOptions


@dataclass(frozen=True)
class HtmlRendererOptions(BaseRendererOptions):
    """Configuration options for tree-to-HTML rendering.

    The output is an HTML fragment without a page shell.

    Parameters
    ----------
    sanitize : bool, default True
        Run the finished fragment through bleach with the allow list from
        ``flaremark.constants``.
    collapsible_open : bool, default False
        Render ``<details>`` elements expanded.
    admonition_class : str, default "admonition"
        Class on admonition ``<div>`` elements; the kind is added as a
        second class.

    """

    sanitize: bool = field(
        default=True,
        metadata={"help": "Sanitize the generated HTML with bleach", "importance": "security"},
    )
    collapsible_open: bool = field(
        default=False,
        metadata={"help": "Render collapsible sections expanded"},
    )
    admonition_class: str = field(
        default="admonition",
        metadata={"help": "CSS class for admonition blocks", "importance": "advanced"},
    )
