#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/utils/text.py
"""Variable name conventions and glossary anchors.

Flare variables are named ``Set.Name`` with PascalCase names. The output
syntaxes want other spellings: AsciiDoc attribute names are lowercase,
Writerside and JSON listings are free-form. These helpers derive every
spelling from the same word split.

Examples
--------
    >>> convert_variable_name("General.ProductName", "kebab-case")
    'general-product-name'
    >>> convert_variable_name("General.ProductName", "camelCase")
    'generalProductName'
    >>> asciidoc_attribute_name("General.ProductName")
    'general-product-name'

"""

from __future__ import annotations

import re
import unicodedata

from flaremark.constants import VariableNameConvention

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def split_words(name: str) -> list[str]:
    """Split an identifier into words at separators and case changes.

    >>> split_words("Company.HTTPServerName_v2")
    ['Company', 'HTTP', 'Server', 'Name', 'v', '2']

    """
    normalized = unicodedata.normalize("NFD", name)
    normalized = "".join(char for char in normalized if unicodedata.category(char) != "Mn")
    return _WORD_RE.findall(normalized)


def convert_variable_name(name: str, convention: VariableNameConvention = "original", prefix: str = "") -> str:
    """Apply a naming convention and prefix to a variable name.

    Parameters
    ----------
    name : str
        Fully qualified variable name (``Set.Name``)
    convention : {"original", "camelCase", "snake_case", "kebab-case"}, default "original"
        Target spelling; ``original`` keeps the name unchanged
    prefix : str, default ""
        Prepended verbatim after the convention is applied

    Returns
    -------
    str
        Converted name

    """
    words = split_words(name)
    if convention == "original" or not words:
        converted = name
    elif convention == "camelCase":
        converted = words[0].lower() + "".join(word[:1].upper() + word[1:].lower() for word in words[1:])
    elif convention == "snake_case":
        converted = "_".join(word.lower() for word in words)
    else:
        converted = "-".join(word.lower() for word in words)
    return f"{prefix}{converted}"


def asciidoc_attribute_name(name: str) -> str:
    """Return a valid AsciiDoc attribute name for an already converted name.

    Attribute names are case-insensitive and may only hold word characters
    and hyphens, so everything else becomes a hyphen and the result is
    lowercased. Names that are already valid and lowercase (kebab-case,
    snake_case) are returned unchanged.
    """
    if re.fullmatch(r"[a-z0-9][a-z0-9_-]*", name):
        return name
    words = split_words(name)
    attribute = "-".join(word.lower() for word in words) if words else re.sub(r"[^\w-]+", "-", name.lower())
    attribute = re.sub(r"-{2,}", "-", attribute).strip("-")
    return attribute or "variable"


def glossary_anchor(term: str) -> str:
    """Return the anchor id of a glossary entry.

    >>> glossary_anchor("Single Sign-On (SSO)")
    'glossary-single-sign-on-sso'
    >>> glossary_anchor("Ändern")
    'glossary-andern'

    """
    folded = unicodedata.normalize("NFKD", term).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", folded.lower()).strip("-")
    return f"glossary-{slug}" if slug else "glossary"
