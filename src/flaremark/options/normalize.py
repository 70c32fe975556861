#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/options/normalize.py
"""Configuration options for authoring-extension normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from flaremark.constants import (
    DEFAULT_COLLAPSIBLE_TITLE,
    DEFAULT_MISSING_FRAGMENT_POLICY,
    DEFAULT_MISSING_VARIABLE_POLICY,
    DEFAULT_VARIABLE_MODE,
    MissingFragmentPolicy,
    MissingVariablePolicy,
    VariableMode,
)
from flaremark.exceptions import InvalidOptionsError
from flaremark.options.base import CloneFrozenMixin, _check_choice


@dataclass(frozen=True)
class NormalizerOptions(CloneFrozenMixin):
    """Configuration options for the extension normalizer.

    Parameters
    ----------
    variable_mode : {"flatten", "reference", "include"}, default "flatten"
        ``flatten`` replaces variable references by their value.
        ``reference`` keeps placeholders and produces a variables listing.
        ``include`` behaves like ``reference`` and additionally asks the
        target to pull the listing into the document (an AsciiDoc
        ``include::`` line, for instance).
    missing_variable_policy : {"key", "empty", "embedded", "abort"}, default "key"
        Fallback for unknown variables: the literal variable name, an empty
        string, the text stored inside the variable tag (the name when the
        tag is empty), or abort the document. Every fallback except
        ``abort`` records a ``reference`` warning.
    missing_fragment_policy : {"placeholder", "drop", "abort"}, default "placeholder"
        Fallback for unknown fragments: a comment naming the fragment,
        nothing, or abort the document.
    exclude_conditions : tuple of str, default ()
        Exclusion patterns. A node is dropped with its subtree when one of
        its condition tags matches a pattern (case-insensitive regular
        expression search; invalid expressions match as plain substrings).
    enable_collapsible : bool, default True
        Convert drop-downs to collapsible sections. When False the title
        becomes a bold paragraph followed by the body.
    default_collapsible_title : str, default "More Information"
        Title for drop-downs without a hotspot text.
    rewrite_cross_references : bool, default True
        Rewrite ``.htm`` cross-reference targets to the target extension.
    check_cross_references : bool, default True
        Check that internal cross-reference targets exist (requires a source
        path) and warn otherwise.
    glossary_target : str or None, default None
        Document holding the converted glossary, as written in links (for
        example ``glossary.adoc``). Glossary terms link to
        ``<glossary_target>#glossary-<term>``; when None they are kept as
        plain text.

    """

    variable_mode: VariableMode = field(
        default=DEFAULT_VARIABLE_MODE,
        metadata={
            "help": "Variable handling: flatten, reference or include",
            "choices": ["flatten", "reference", "include"],
            "importance": "core",
        },
    )
    missing_variable_policy: MissingVariablePolicy = field(
        default=DEFAULT_MISSING_VARIABLE_POLICY,
        metadata={
            "help": "Fallback for unknown variables: key, empty, embedded or abort",
            "choices": ["key", "empty", "embedded", "abort"],
            "importance": "core",
        },
    )
    missing_fragment_policy: MissingFragmentPolicy = field(
        default=DEFAULT_MISSING_FRAGMENT_POLICY,
        metadata={
            "help": "Fallback for unknown fragments: placeholder, drop or abort",
            "choices": ["placeholder", "drop", "abort"],
            "importance": "core",
        },
    )
    exclude_conditions: tuple[str, ...] = field(
        default=(),
        metadata={"help": "Condition patterns whose content is removed", "importance": "core"},
    )
    enable_collapsible: bool = field(
        default=True,
        metadata={"help": "Emit collapsible sections for drop-downs", "importance": "core"},
    )
    default_collapsible_title: str = field(
        default=DEFAULT_COLLAPSIBLE_TITLE,
        metadata={"help": "Title for untitled drop-downs", "importance": "advanced"},
    )
    rewrite_cross_references: bool = field(
        default=True,
        metadata={"help": "Rewrite .htm cross-reference targets to the output extension", "importance": "core"},
    )
    check_cross_references: bool = field(
        default=True,
        metadata={"help": "Warn about cross-references to missing topics", "importance": "advanced"},
    )
    glossary_target: Optional[str] = field(
        default=None,
        metadata={"help": "Link glossary terms to anchors in this document", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate normalizer options."""
        _check_choice("variable_mode", self.variable_mode, ("flatten", "reference", "include"))
        _check_choice(
            "missing_variable_policy", self.missing_variable_policy, ("key", "empty", "embedded", "abort")
        )
        _check_choice("missing_fragment_policy", self.missing_fragment_policy, ("placeholder", "drop", "abort"))
        if isinstance(self.exclude_conditions, str) or not all(
            isinstance(pattern, str) for pattern in self.exclude_conditions
        ):
            raise InvalidOptionsError(
                "exclude_conditions must be a sequence of strings",
                parameter_name="exclude_conditions",
                parameter_value=self.exclude_conditions,
            )
        # Lists passed by callers are frozen so the record stays hashable
        object.__setattr__(self, "exclude_conditions", tuple(self.exclude_conditions))
