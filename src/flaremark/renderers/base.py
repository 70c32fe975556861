#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/base.py
"""Base classes for tree renderers.

This module defines the abstract base class that the target renderers
inherit from. ``BaseRenderer`` provides the common interface for turning a
canonical Document into text and writing it to a path or stream.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Union

from flaremark.ast.nodes import Document, TableRow
from flaremark.exceptions import FileAccessError, InvalidOptionsError
from flaremark.options.base import BaseRendererOptions


class BaseRenderer(ABC):
    """Abstract base class for all tree renderers.

    Parameters
    ----------
    options : BaseRendererOptions or None, default = None
        Target-specific rendering options

    Examples
    --------
    Creating a custom renderer:

        >>> class PlainTextRenderer(BaseRenderer):
        ...     def render_to_string(self, doc):
        ...         return collect_text(doc)

    """

    def __init__(self, options: BaseRendererOptions | None = None):
        """Initialize the renderer with optional configuration."""
        self.options = options

    @abstractmethod
    def render_to_string(self, doc: Document) -> str:
        """Render the tree to a string.

        Parameters
        ----------
        doc : Document
            Canonical Document to render

        Returns
        -------
        str
            Rendered document

        Raises
        ------
        RenderingError
            If rendering fails

        """

    def render(self, doc: Document, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Render the tree and write it to a file or stream.

        Parameters
        ----------
        doc : Document
            Canonical Document to render
        output : str, Path, IO[bytes] or IO[str]
            Output destination

        """
        self.write_text_output(self.render_to_string(doc), output)

    @staticmethod
    def _compute_table_columns(rows: list[TableRow]) -> int:
        """Compute the maximum number of columns needed for a table.

        Parameters
        ----------
        rows : list[TableRow]
            All table rows (including header)

        Returns
        -------
        int
            Maximum column count accounting for colspan

        """
        max_cols = 0
        for row in rows:
            col_count = sum(cell.colspan for cell in row.cells)
            max_cols = max(max_cols, col_count)
        return max_cols

    @staticmethod
    def _validate_options_type(options: BaseRendererOptions | None, expected_type: type, renderer_name: str) -> None:
        """Validate that options are of the correct type for this renderer.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                f"{renderer_name} expects {expected_type.__name__}, got {type(options).__name__}",
                parameter_name="options",
                parameter_value=type(options).__name__,
            )

    @staticmethod
    def write_text_output(text: str, output: Union[str, Path, IO[bytes], IO[str]]) -> None:
        """Write text output to a file path or an IO stream.

        Binary streams receive UTF-8 bytes; text streams receive the string.

        Raises
        ------
        FileAccessError
            If the output file cannot be written
        TypeError
            If output type is not supported

        Examples
        --------
            >>> from io import StringIO
            >>> buffer = StringIO()
            >>> BaseRenderer.write_text_output("= Title", buffer)
            >>> buffer.getvalue()
            '= Title'

        """
        if isinstance(output, (str, Path)):
            path = Path(output)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8")
            except OSError as exc:
                raise FileAccessError(str(path), original_error=exc) from exc
            return
        if hasattr(output, "write"):
            try:
                output.write(text)  # type: ignore[arg-type]
            except TypeError:
                output.write(text.encode("utf-8"))  # type: ignore[arg-type]
            return
        raise TypeError(f"Unsupported output type: {type(output).__name__}")
