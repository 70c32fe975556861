#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/markdown.py
"""Configuration options for Markdown rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from flaremark.constants import MarkdownFlavor
from flaremark.options.base import BaseRendererOptions, _check_choice


@dataclass(frozen=True)
class MarkdownRendererOptions(BaseRendererOptions):
    """Configuration options for tree-to-Markdown rendering.

    Parameters
    ----------
    flavor : {"commonmark", "writerside"}, default "commonmark"
        ``commonmark`` sticks to CommonMark plus pipe tables and ``<details>``
        blocks. ``writerside`` adds Writerside attribute lists
        (``{style="note"}``, ``{type="alpha-lower"}``), ``<collapsible>``
        tags, ``<var name=""/>`` placeholders and a ``v.list`` variables file.
    bullet_char : {"-", "*", "+"}, default "-"
        Marker for unordered list items.
    emphasis_symbol : {"*", "_"}, default "*"
        Delimiter for emphasis (strong uses it doubled).
    html_tables : bool, default True
        Fall back to an HTML table when a table has spans or block content
        that a pipe table cannot hold. When False such cells are flattened.

    """

    flavor: MarkdownFlavor = field(
        default="commonmark",
        metadata={
            "help": "Markdown flavor: commonmark or writerside",
            "choices": ["commonmark", "writerside"],
            "importance": "core",
        },
    )
    bullet_char: str = field(
        default="-",
        metadata={"help": "Unordered list marker", "choices": ["-", "*", "+"]},
    )
    emphasis_symbol: str = field(
        default="*",
        metadata={"help": "Emphasis delimiter", "choices": ["*", "_"]},
    )
    html_tables: bool = field(
        default=True,
        metadata={"help": "Use HTML tables for tables a pipe table cannot express", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate Markdown renderer options."""
        super().__post_init__()
        _check_choice("flavor", self.flavor, ("commonmark", "writerside"))
        _check_choice("bullet_char", self.bullet_char, ("-", "*", "+"))
        _check_choice("emphasis_symbol", self.emphasis_symbol, ("*", "_"))
