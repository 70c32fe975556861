#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/asciidoc.py
"""Configuration options for AsciiDoc rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from flaremark.constants import (
    DEFAULT_TABLE_FRAME,
    DEFAULT_TABLE_GRID,
    AsciiDocAdmonitionStyle,
    TableFrame,
    TableGrid,
)
from flaremark.exceptions import InvalidOptionsError
from flaremark.options.base import BaseRendererOptions, _check_choice


@dataclass(frozen=True)
class AsciiDocRendererOptions(BaseRendererOptions):
    """Configuration options for tree-to-AsciiDoc rendering.

    Parameters
    ----------
    list_indent : int, default 0
        Spaces of indentation per nesting level in front of list markers.
        AsciiDoc derives nesting from the marker length, so indentation is
        cosmetic.
    admonition_style : {"auto", "paragraph", "block"}, default "auto"
        ``paragraph`` always emits ``NOTE: text``, ``block`` always emits a
        delimited ``[NOTE]`` block, ``auto`` uses the paragraph form for a
        single untitled paragraph and the block form otherwise.
    table_frame : {"all", "topbot", "sides", "ends", "none"}, default "all"
        Value of the table ``frame`` attribute.
    table_grid : {"all", "rows", "cols", "none"}, default "all"
        Value of the table ``grid`` attribute.
    table_autowidth : bool, default False
        Add the ``autowidth`` option instead of equal column widths.
    use_xref_macro : bool, default True
        Emit rewritten cross-references with ``xref:`` rather than ``link:``.

    """

    list_indent: int = field(
        default=0,
        metadata={"help": "Spaces of indentation per list nesting level", "type": int},
    )
    admonition_style: AsciiDocAdmonitionStyle = field(
        default="auto",
        metadata={
            "help": "Admonition syntax: auto, paragraph (NOTE: text) or block ([NOTE] ====)",
            "choices": ["auto", "paragraph", "block"],
            "importance": "core",
        },
    )
    table_frame: TableFrame = field(
        default=DEFAULT_TABLE_FRAME,
        metadata={"help": "Table frame attribute", "choices": ["all", "topbot", "sides", "ends", "none"]},
    )
    table_grid: TableGrid = field(
        default=DEFAULT_TABLE_GRID,
        metadata={"help": "Table grid attribute", "choices": ["all", "rows", "cols", "none"]},
    )
    table_autowidth: bool = field(
        default=False,
        metadata={"help": "Size table columns to their content", "importance": "advanced"},
    )
    use_xref_macro: bool = field(
        default=True,
        metadata={"help": "Use xref: for internal cross-references", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate AsciiDoc renderer options.

        Raises
        ------
        InvalidOptionsError
            If any field value is outside its valid range.

        """
        super().__post_init__()
        if self.list_indent < 0:
            raise InvalidOptionsError(
                f"list_indent must be non-negative, got {self.list_indent}",
                parameter_name="list_indent",
                parameter_value=self.list_indent,
            )
        _check_choice("admonition_style", self.admonition_style, ("auto", "paragraph", "block"))
        _check_choice("table_frame", self.table_frame, ("all", "topbot", "sides", "ends", "none"))
        _check_choice("table_grid", self.table_grid, ("all", "rows", "cols", "none"))
