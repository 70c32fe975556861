#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/__init__.py
"""Renderers turning canonical trees into target markup.

Every renderer is a ``StructuralRenderer`` bound to a ``SyntaxAdapter``:
the structural walk (lists, continuations, delimited blocks) is shared and
only the spelling differs between targets.

Available renderers:
- AsciiDocRenderer: AsciiDoc with ``+`` list continuations
- MarkdownRenderer: CommonMark or Writerside Markdown
- HtmlRenderer: sanitized presentation-HTML fragments

Examples
--------
    >>> from flaremark.renderers import get_renderer_class
    >>> renderer = get_renderer_class("asciidoc")()
    >>> text = renderer.render_to_string(document)

"""

from flaremark.exceptions import InvalidOptionsError
from flaremark.renderers.asciidoc import AsciiDocRenderer, AsciiDocSyntax
from flaremark.renderers.base import BaseRenderer
from flaremark.renderers.html import HtmlRenderer, HtmlSyntax
from flaremark.renderers.markdown import MarkdownRenderer, MarkdownSyntax
from flaremark.renderers.structure import ConversionContext, StructuralRenderer
from flaremark.renderers.syntax import SyntaxAdapter, VariablesFile

RENDERERS: dict[str, type[StructuralRenderer]] = {
    "asciidoc": AsciiDocRenderer,
    "markdown": MarkdownRenderer,
    "html": HtmlRenderer,
}


def get_renderer_class(target: str) -> type[StructuralRenderer]:
    """Return the renderer class for a target format.

    Raises
    ------
    InvalidOptionsError
        If the target is unknown

    """
    try:
        return RENDERERS[target]
    except KeyError:
        raise InvalidOptionsError(
            f"Unknown target format {target!r}; expected one of {', '.join(RENDERERS)}",
            parameter_name="target",
            parameter_value=target,
        ) from None


__all__ = [
    "AsciiDocRenderer",
    "AsciiDocSyntax",
    "BaseRenderer",
    "ConversionContext",
    "HtmlRenderer",
    "HtmlSyntax",
    "MarkdownRenderer",
    "MarkdownSyntax",
    "RENDERERS",
    "StructuralRenderer",
    "SyntaxAdapter",
    "VariablesFile",
    "get_renderer_class",
]
