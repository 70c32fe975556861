#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/parsers/base.py
"""Base classes for source parsers.

A parser turns raw source markup into a ``Document`` tree that may still
contain authoring-extension nodes and malformed list containment. Repair and
normalization happen later in the pipeline.

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from flaremark.ast.nodes import Document
from flaremark.exceptions import FileAccessError, FileNotFoundError, InvalidOptionsError
from flaremark.options.base import BaseParserOptions

logger = logging.getLogger(__name__)


class BaseParser(ABC):
    """Abstract base class for all source parsers.

    Parameters
    ----------
    options : BaseParserOptions or None, default = None
        Format-specific parsing options
    source_path : str or None, default = None
        Path of the document being parsed, recorded in source locations

    Examples
    --------
    Creating a custom parser:

        >>> class PlainParser(BaseParser):
        ...     def parse(self, input_data):
        ...         text = self._load_text_content(input_data)
        ...         return Document(children=[Paragraph(content=[Text(content=text)])])

    """

    def __init__(self, options: BaseParserOptions | None = None, source_path: Optional[str] = None):
        """Initialize the parser with optional configuration."""
        self.options: BaseParserOptions | None = options
        self.source_path = source_path

    @staticmethod
    def _validate_options_type(options: BaseParserOptions | None, expected_type: type, parser_name: str) -> None:
        """Validate that options are of the correct type for this parser.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                f"{parser_name} parser expected options of type '{expected_type.__name__}' "
                f"but received '{type(options).__name__}'",
                parameter_name="options",
                parameter_value=type(options).__name__,
            )

    def _load_text_content(self, input_data: Union[str, Path, bytes]) -> str:
        """Return markup text for a path, raw bytes or a markup string.

        Strings are treated as markup unless they look like a single-line
        path to an existing file; ``Path`` objects are always read.

        Raises
        ------
        FileNotFoundError
            If a ``Path`` does not exist
        FileAccessError
            If the file cannot be read or decoded

        """
        if isinstance(input_data, bytes):
            return input_data.decode("utf-8-sig", errors="replace")

        if isinstance(input_data, str) and ("<" in input_data or "\n" in input_data):
            return input_data

        path = Path(input_data)
        if isinstance(input_data, str) and not path.is_file():
            return input_data
        if not path.exists():
            raise FileNotFoundError(str(path))
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileAccessError(str(path), original_error=exc) from exc
        if self.source_path is None:
            self.source_path = str(path)
        return text

    @abstractmethod
    def parse(self, input_data: Union[str, Path, bytes]) -> Document:
        """Parse the input document into a tree.

        Parameters
        ----------
        input_data : str, Path or bytes
            Markup text, raw bytes, or a path to read

        Returns
        -------
        Document
            Parsed document, possibly containing extension nodes

        Raises
        ------
        ParsingError
            If the input cannot be parsed at all

        """
        raise NotImplementedError
