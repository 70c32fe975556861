#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the flaremark library.

Constants are organized by category:
1. Type Definitions - All Literal types and type aliases
2. Source Dialect - Flare element, attribute and class names
3. Normalization Defaults - Variables, fragments, exclusions
4. Rendering Defaults - Shared and per-target output settings
5. Security Constants - HTML sanitization allow lists
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions - All Literal Types and Type Aliases
# =============================================================================

TargetFormat = Literal["asciidoc", "markdown", "html"]
VariableMode = Literal["flatten", "reference", "include"]
MissingVariablePolicy = Literal["key", "empty", "embedded", "abort"]
MissingFragmentPolicy = Literal["placeholder", "drop", "abort"]
ValidationStrictness = Literal["strict", "normal", "lenient"]
VariableNameConvention = Literal["original", "camelCase", "snake_case", "kebab-case"]
MarkdownFlavor = Literal["commonmark", "writerside"]
AsciiDocAdmonitionStyle = Literal["auto", "paragraph", "block"]
TableFrame = Literal["all", "topbot", "sides", "ends", "none"]
TableGrid = Literal["all", "rows", "cols", "none"]
HtmlParserBackend = Literal["html.parser", "lxml", "html5lib"]
HtmlPassthroughMode = Literal["pass-through", "escape", "drop", "sanitize"]
DiagnosticSeverity = Literal["info", "warning", "error"]
DiagnosticCategory = Literal["structural", "reference", "cyclic", "exclusion"]

TARGET_FORMATS: tuple[str, ...] = ("asciidoc", "markdown", "html")

# =============================================================================
# Source Dialect
# =============================================================================

# Tag names are lowercased by the HTML parser backends.
FLARE_VARIABLE_TAG = "madcap:variable"
FLARE_SNIPPET_BLOCK_TAG = "madcap:snippetblock"
FLARE_SNIPPET_TEXT_TAG = "madcap:snippettext"
FLARE_XREF_TAG = "madcap:xref"
FLARE_DROPDOWN_TAG = "madcap:dropdown"
FLARE_DROPDOWN_HEAD_TAG = "madcap:dropdownhead"
FLARE_DROPDOWN_HOTSPOT_TAG = "madcap:dropdownhotspot"
FLARE_DROPDOWN_BODY_TAG = "madcap:dropdownbody"
FLARE_KEYWORD_TAG = "madcap:keyword"
FLARE_CONCEPT_TAG = "madcap:concept"
FLARE_GLOSSARY_TERM_TAG = "madcap:glossaryterm"

CONDITION_ATTRIBUTES: tuple[str, ...] = ("madcap:conditions", "data-mc-conditions")
CONTINUE_ATTRIBUTES: tuple[str, ...] = ("madcap:continue", "data-mc-continue")

# Index and concept markers carry no visible content. Togglers are unwrapped
# like other unknown inline elements so their text stays.
FLARE_IGNORED_TAGS: frozenset[str] = frozenset({FLARE_KEYWORD_TAG, FLARE_CONCEPT_TAG})

ADMONITION_CLASS_MAP: dict[str, str] = {
    "note": "note",
    "mc-note": "note",
    "tip": "tip",
    "mc-tip": "tip",
    "warning": "warning",
    "attention": "warning",
    "mc-warning": "warning",
    "caution": "caution",
    "important": "important",
}

ADMONITION_LABELS: dict[str, tuple[str, ...]] = {
    "note": ("note",),
    "tip": ("tip",),
    "warning": ("warning", "attention"),
    "caution": ("caution",),
    "important": ("important",),
}

# Label spans Flare stylesheets put at the start of a note
ADMONITION_LABEL_CLASSES: frozenset[str] = frozenset(
    {"noteindiv", "warningindiv", "tipindiv", "cautionindiv", "importantindiv", "attentionindiv"}
)

LIST_STYLE_TYPE_MAP: dict[str, str] = {
    "decimal": "arabic",
    "lower-alpha": "lower-alpha",
    "lower-latin": "lower-alpha",
    "lower-roman": "lower-roman",
    "upper-alpha": "upper-alpha",
    "upper-latin": "upper-alpha",
    "upper-roman": "upper-roman",
}

LIST_TYPE_ATTRIBUTE_MAP: dict[str, str] = {
    "1": "arabic",
    "a": "lower-alpha",
    "i": "lower-roman",
    "A": "upper-alpha",
    "I": "upper-roman",
}

# =============================================================================
# Normalization Defaults
# =============================================================================

DEFAULT_VARIABLE_MODE: VariableMode = "flatten"
DEFAULT_MISSING_VARIABLE_POLICY: MissingVariablePolicy = "key"
DEFAULT_MISSING_FRAGMENT_POLICY: MissingFragmentPolicy = "placeholder"
DEFAULT_VALIDATION_STRICTNESS: ValidationStrictness = "normal"

FLARE_VARIABLE_EXTENSION = ".flvar"
FLARE_GLOSSARY_EXTENSION = ".flglo"
SNIPPET_FALLBACK_DIRECTORY: tuple[str, ...] = ("Content", "Resources", "Snippets")
INTERNAL_LINK_EXTENSIONS: tuple[str, ...] = (".htm", ".html")

# Condition tags that usually mark content not meant for publication
DEFAULT_EXCLUSION_PATTERNS: tuple[str, ...] = (
    r"\b(Black|Red|Gray|Grey)\b",
    r"\b(deprecated?|deprecation|obsolete|legacy|old)\b",
    r"\b(paused?|halted?|stopped?|discontinued?|retired?)\b",
    r"\b(print[\s\-_]?only|printonly)\b",
    r"\b(cancelled?|canceled?|abandoned|shelved)\b",
    r"\b(hidden|internal|private|draft)\b",
)

# =============================================================================
# Rendering Defaults
# =============================================================================

TARGET_EXTENSIONS: dict[str, str] = {
    "asciidoc": ".adoc",
    "markdown": ".md",
    "html": ".html",
}

DEFAULT_INLINE_IMAGE_MAX_SIZE = 32
DEFAULT_SOLE_IMAGE_TEXT_THRESHOLD = 3
ICON_PATH_PATTERN = r"(?:^|[/\\])(?:gui|icons?|buttons?)(?:[/\\]|$)"

DEFAULT_COLLAPSIBLE_TITLE = "More Information"
DEFAULT_GLOSSARY_TITLE = "Glossary"
DEFAULT_TABLE_FRAME: TableFrame = "all"
DEFAULT_TABLE_GRID: TableGrid = "all"

DEFAULT_ASCIIDOC_VARIABLES_FILE = "variables.adoc"
DEFAULT_WRITERSIDE_VARIABLES_FILE = "v.list"
DEFAULT_JSON_VARIABLES_FILE = "variables.json"

ASCIIDOC_ADMONITION_LABELS: dict[str, str] = {
    "note": "NOTE",
    "tip": "TIP",
    "warning": "WARNING",
    "caution": "CAUTION",
    "important": "IMPORTANT",
}

ASCIIDOC_LIST_STYLE_DIRECTIVES: dict[str, str] = {
    "lower-alpha": "loweralpha",
    "lower-roman": "lowerroman",
    "upper-alpha": "upperalpha",
    "upper-roman": "upperroman",
}

WRITERSIDE_LIST_TYPES: dict[str, str] = {
    "lower-alpha": "alpha-lower",
    "lower-roman": "roman-lower",
    "upper-alpha": "alpha-upper",
    "upper-roman": "roman-upper",
}

# Writerside only knows three admonition styles
WRITERSIDE_ADMONITION_STYLES: dict[str, str] = {
    "note": "note",
    "tip": "tip",
    "warning": "warning",
    "caution": "warning",
    "important": "warning",
}

HTML_LIST_TYPES: dict[str, str] = {
    "lower-alpha": "a",
    "lower-roman": "i",
    "upper-alpha": "A",
    "upper-roman": "I",
}

# =============================================================================
# Security Constants
# =============================================================================

HTML_ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        "a", "blockquote", "br", "code", "details", "div", "em", "h1", "h2", "h3", "h4", "h5", "h6",
        "hr", "img", "li", "ol", "p", "pre", "span", "strong", "summary", "table", "tbody", "td",
        "th", "thead", "tr", "ul", "caption",
    }
)

HTML_ALLOWED_ATTRIBUTES: dict[str, list[str]] = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height", "class"],
    "ol": ["start", "type"],
    "div": ["class"],
    "p": ["class"],
    "span": ["class", "data-variable"],
    "code": ["class"],
    "pre": ["class"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan"],
    "details": ["class", "open"],
    "h1": ["id"],
    "h2": ["id"],
    "h3": ["id"],
    "h4": ["id"],
    "h5": ["id"],
    "h6": ["id"],
}

HTML_ALLOWED_PROTOCOLS: frozenset[str] = frozenset({"http", "https", "mailto"})
