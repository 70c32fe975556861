#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/base.py
"""Base classes for parser, normalizer and renderer options.

Every options record is a frozen dataclass. Field metadata carries the
``help`` text and an ``importance`` tier that the CLI uses to build its
arguments; validation happens in ``__post_init__``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields, replace
from typing import Any, Sequence

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from flaremark.constants import (
    DEFAULT_INLINE_IMAGE_MAX_SIZE,
    DEFAULT_SOLE_IMAGE_TEXT_THRESHOLD,
    HtmlPassthroughMode,
    VariableNameConvention,
)
from flaremark.exceptions import InvalidOptionsError

VARIABLE_NAME_CONVENTIONS = ("original", "camelCase", "snake_case", "kebab-case")
HTML_PASSTHROUGH_MODES = ("pass-through", "escape", "drop", "sanitize")


def _check_choice(name: str, value: Any, choices: Sequence[Any]) -> None:
    if value not in choices:
        raise InvalidOptionsError(
            f"{name} must be one of {', '.join(map(str, choices))}, got {value!r}",
            parameter_name=name,
            parameter_value=value,
        )


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        Raises
        ------
        InvalidOptionsError
            If a keyword does not name a field

        """
        known = {f.name for f in fields(self)}  # type: ignore[arg-type]
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise InvalidOptionsError(
                f"Unknown option(s) for {type(self).__name__}: {', '.join(unknown)}",
                parameter_name=unknown[0],
            )
        return replace(self, **kwargs)  # type: ignore[type-var]


@dataclass(frozen=True)
class BaseParserOptions(CloneFrozenMixin):
    """Base class for all parser options.

    Parsers turn source markup into the node tree.
    """

    def __post_init__(self) -> None:
        """Validate parser options."""
        pass


@dataclass(frozen=True)
class BaseRendererOptions(CloneFrozenMixin):
    """Base class for all renderer options.

    The structural converter shares these settings across targets; the
    subclasses add target-specific emission settings.

    Parameters
    ----------
    inline_image_max_size : int, default 32
        Images whose declared width and height are all at or below this many
        pixels are treated as inline icons.
    sole_image_text_threshold : int, default 3
        Maximum number of surrounding non-whitespace characters for an image
        to count as the sole content of its paragraph.
    variable_name_convention : {"original", "camelCase", "snake_case", "kebab-case"}, default "original"
        Naming convention applied to variable placeholders and the variables
        listing. Targets with stricter identifier rules post-process the
        result (AsciiDoc attribute names are always lowercase).
    variable_prefix : str, default ""
        Prefix prepended to every variable name in placeholders and listing.
    variables_file_name : str or None, default None
        Name of the variables listing artifact. None uses the target default.
    html_passthrough_mode : {"pass-through", "escape", "drop", "sanitize"}, default "sanitize"
        How raw HTML fragments kept from the source are emitted.
    emit_comments : bool, default True
        Whether Comment nodes (missing fragment placeholders, source
        comments) appear in the output as target comments.

    """

    inline_image_max_size: int = field(
        default=DEFAULT_INLINE_IMAGE_MAX_SIZE,
        metadata={"help": "Largest declared image dimension (px) treated as an inline icon", "importance": "core"},
    )
    sole_image_text_threshold: int = field(
        default=DEFAULT_SOLE_IMAGE_TEXT_THRESHOLD,
        metadata={
            "help": "Surrounding characters tolerated for an image to count as its paragraph's only content",
            "importance": "advanced",
        },
    )
    variable_name_convention: VariableNameConvention = field(
        default="original",
        metadata={
            "help": "Naming convention for variable placeholders and the variables listing",
            "choices": list(VARIABLE_NAME_CONVENTIONS),
            "importance": "core",
        },
    )
    variable_prefix: str = field(
        default="",
        metadata={"help": "Prefix for every emitted variable name", "importance": "advanced"},
    )
    variables_file_name: str | None = field(
        default=None,
        metadata={"help": "File name of the variables listing (default depends on the target)", "importance": "core"},
    )
    html_passthrough_mode: HtmlPassthroughMode = field(
        default="sanitize",
        metadata={
            "help": "How to handle raw HTML content: pass-through, escape, drop, or sanitize",
            "choices": list(HTML_PASSTHROUGH_MODES),
            "importance": "security",
        },
    )
    emit_comments: bool = field(
        default=True,
        metadata={"help": "Emit comment nodes as target comments", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate shared renderer options.

        Raises
        ------
        InvalidOptionsError
            If any field value is outside its valid range.

        """
        if self.inline_image_max_size < 0:
            raise InvalidOptionsError(
                f"inline_image_max_size must be non-negative, got {self.inline_image_max_size}",
                parameter_name="inline_image_max_size",
                parameter_value=self.inline_image_max_size,
            )
        if self.sole_image_text_threshold < 0:
            raise InvalidOptionsError(
                f"sole_image_text_threshold must be non-negative, got {self.sole_image_text_threshold}",
                parameter_name="sole_image_text_threshold",
                parameter_value=self.sole_image_text_threshold,
            )
        _check_choice("variable_name_convention", self.variable_name_convention, VARIABLE_NAME_CONVENTIONS)
        _check_choice("html_passthrough_mode", self.html_passthrough_mode, HTML_PASSTHROUGH_MODES)
