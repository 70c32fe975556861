#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/__init__.py
"""Options records for parsing, normalization and rendering."""

from flaremark.options.asciidoc import AsciiDocRendererOptions
from flaremark.options.base import BaseParserOptions, BaseRendererOptions, CloneFrozenMixin
from flaremark.options.conversion import RENDERER_OPTIONS_CLASSES, ConversionOptions
from flaremark.options.flare import FlareParserOptions
from flaremark.options.html import HtmlRendererOptions
from flaremark.options.markdown import MarkdownRendererOptions
from flaremark.options.normalize import NormalizerOptions

__all__ = [
    "AsciiDocRendererOptions",
    "BaseParserOptions",
    "BaseRendererOptions",
    "CloneFrozenMixin",
    "ConversionOptions",
    "FlareParserOptions",
    "HtmlRendererOptions",
    "MarkdownRendererOptions",
    "NormalizerOptions",
    "RENDERER_OPTIONS_CLASSES",
]
