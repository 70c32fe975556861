#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/conversion.py
"""Top-level options record for a conversion."""

from __future__ import annotations

from dataclasses import dataclass, field

from flaremark.constants import DEFAULT_VALIDATION_STRICTNESS, TARGET_FORMATS, TargetFormat, ValidationStrictness
from flaremark.exceptions import InvalidOptionsError
from flaremark.options.asciidoc import AsciiDocRendererOptions
from flaremark.options.base import BaseRendererOptions, CloneFrozenMixin, _check_choice
from flaremark.options.flare import FlareParserOptions
from flaremark.options.html import HtmlRendererOptions
from flaremark.options.markdown import MarkdownRendererOptions
from flaremark.options.normalize import NormalizerOptions

RENDERER_OPTIONS_CLASSES: dict[str, type[BaseRendererOptions]] = {
    "asciidoc": AsciiDocRendererOptions,
    "markdown": MarkdownRendererOptions,
    "html": HtmlRendererOptions,
}


@dataclass(frozen=True)
class ConversionOptions(CloneFrozenMixin):
    """Everything a single conversion needs to know.

    Parameters
    ----------
    target : {"asciidoc", "markdown", "html"}, default "asciidoc"
        Output syntax.
    validation_strictness : {"strict", "normal", "lenient"}, default "normal"
        ``strict`` fails the document when any warning was collected,
        ``normal`` reports warnings next to the output, ``lenient`` reports
        structural repairs as informational only.
    parser : FlareParserOptions
        Source parsing options.
    normalizer : NormalizerOptions
        Extension handling options.
    renderer : BaseRendererOptions or None, default None
        Options for the target renderer; must match ``target``. None uses the
        target's defaults.

    Examples
    --------
    >>> options = ConversionOptions(target="markdown")
    >>> options.renderer_options
    MarkdownRendererOptions(...)

    """

    target: TargetFormat = field(
        default="asciidoc",
        metadata={"help": "Output syntax", "choices": list(TARGET_FORMATS), "importance": "core"},
    )
    validation_strictness: ValidationStrictness = field(
        default=DEFAULT_VALIDATION_STRICTNESS,
        metadata={
            "help": "How warnings affect the result: strict, normal or lenient",
            "choices": ["strict", "normal", "lenient"],
            "importance": "core",
        },
    )
    parser: FlareParserOptions = field(default_factory=FlareParserOptions)
    normalizer: NormalizerOptions = field(default_factory=NormalizerOptions)
    renderer: BaseRendererOptions | None = None

    def __post_init__(self) -> None:
        """Validate the target and that the renderer options match it."""
        _check_choice("target", self.target, TARGET_FORMATS)
        _check_choice("validation_strictness", self.validation_strictness, ("strict", "normal", "lenient"))
        expected = RENDERER_OPTIONS_CLASSES[self.target]
        if self.renderer is not None and not isinstance(self.renderer, expected):
            raise InvalidOptionsError(
                f"target {self.target!r} expects {expected.__name__}, got {type(self.renderer).__name__}",
                parameter_name="renderer",
                parameter_value=type(self.renderer).__name__,
            )

    @property
    def renderer_options(self) -> BaseRendererOptions:
        """Renderer options for the target, defaults when none were given."""
        if self.renderer is not None:
            return self.renderer
        return RENDERER_OPTIONS_CLASSES[self.target]()
