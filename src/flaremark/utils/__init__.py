#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/utils/__init__.py
"""Utility modules for the flaremark package.

This package contains escaping helpers for the output syntaxes, HTML
sanitization, and variable name conventions.
"""

from flaremark.utils.text import asciidoc_attribute_name, convert_variable_name, split_words

__all__ = [
    "asciidoc_attribute_name",
    "convert_variable_name",
    "split_words",
]
