#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/flare.py
"""Configuration options for parsing Flare topics."""

from __future__ import annotations

from dataclasses import dataclass, field

from flaremark.constants import HtmlParserBackend
from flaremark.options.base import BaseParserOptions, _check_choice


@dataclass(frozen=True)
class FlareParserOptions(BaseParserOptions):
    """Configuration options for Flare-to-tree parsing.

    Parameters
    ----------
    parser_backend : {"html.parser", "lxml", "html5lib"}, default "html.parser"
        BeautifulSoup tree builder. ``html.parser`` keeps the ``MadCap:``
        prefixed tag names and records source line numbers.
    keep_comments : bool, default False
        Keep HTML comments from the source as Comment nodes.
    collapse_whitespace : bool, default True
        Collapse runs of whitespace in text the way a browser does.
    record_source_lines : bool, default True
        Attach line/column information to nodes for diagnostics.

    """

    parser_backend: HtmlParserBackend = field(
        default="html.parser",
        metadata={
            "help": "BeautifulSoup parser backend",
            "choices": ["html.parser", "lxml", "html5lib"],
            "importance": "advanced",
        },
    )
    keep_comments: bool = field(
        default=False,
        metadata={"help": "Keep source HTML comments", "importance": "advanced"},
    )
    collapse_whitespace: bool = field(
        default=True,
        metadata={"help": "Collapse whitespace runs in text", "importance": "advanced"},
    )
    record_source_lines: bool = field(
        default=True,
        metadata={"help": "Record source line numbers for diagnostics", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate parser options."""
        super().__post_init__()
        _check_choice("parser_backend", self.parser_backend, ("html.parser", "lxml", "html5lib"))
