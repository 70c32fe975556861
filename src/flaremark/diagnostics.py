#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/diagnostics.py
"""Structured diagnostics collected during a conversion.

Every recoverable problem (a repaired list, a missing variable, an
unresolved cross-reference) becomes a ``Diagnostic`` in the document's
``DiagnosticCollector`` and is logged at the same time. Collectors are
created per document and never shared between conversions.

Categories
----------
structural
    Malformed containment that was repaired automatically.
reference
    Missing variable, fragment or cross-reference target.
cyclic
    Fragment inclusion cycle. The document is aborted as well.
exclusion
    Content removed because of its condition tags (informational).

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional

from flaremark.ast.nodes import Node, SourceLocation
from flaremark.constants import DiagnosticCategory, DiagnosticSeverity, ValidationStrictness

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"info": logging.DEBUG, "warning": logging.WARNING, "error": logging.ERROR}


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found while converting a document.

    Parameters
    ----------
    severity : {"info", "warning", "error"}
        How serious the problem is
    category : {"structural", "reference", "cyclic", "exclusion"}
        What kind of problem it is
    message : str
        Human readable description
    location : SourceLocation or None, default None
        Where the offending node came from
    key : str or None, default None
        Variable name, fragment path or link target involved
    node_type : str or None, default None
        Class name of the node involved

    """

    severity: DiagnosticSeverity
    category: DiagnosticCategory
    message: str
    location: Optional[SourceLocation] = None
    key: Optional[str] = None
    node_type: Optional[str] = None

    def __str__(self) -> str:
        """Format as ``severity [category] message (location)``."""
        where = self.location.describe() if self.location else ""
        suffix = f" ({where})" if where else ""
        return f"{self.severity} [{self.category}] {self.message}{suffix}"

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable representation."""
        return {
            "severity": self.severity,
            "category": self.category,
            "message": self.message,
            "location": self.location.describe() if self.location else None,
            "line": self.location.line if self.location else None,
            "key": self.key,
            "node_type": self.node_type,
        }


@dataclass
class DiagnosticCollector:
    """Per-document diagnostic sink.

    Parameters
    ----------
    strictness : {"strict", "normal", "lenient"}, default "normal"
        Under ``lenient`` structural warnings are recorded as ``info``.
    path : str or None, default None
        Source path used as the location when a node has none

    """

    strictness: ValidationStrictness = "normal"
    path: Optional[str] = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(
        self,
        severity: DiagnosticSeverity,
        category: DiagnosticCategory,
        message: str,
        node: Optional[Node] = None,
        key: Optional[str] = None,
    ) -> Diagnostic:
        """Record a diagnostic and log it.

        Parameters
        ----------
        severity : {"info", "warning", "error"}
            Requested severity before strictness adjustment
        category : {"structural", "reference", "cyclic", "exclusion"}
            Diagnostic category
        message : str
            Description of the problem
        node : Node, optional
            Node the problem is about; supplies the location
        key : str, optional
            Reference involved

        Returns
        -------
        Diagnostic
            The recorded diagnostic

        """
        if self.strictness == "lenient" and category == "structural" and severity == "warning":
            severity = "info"
        location = node.source_location if node is not None else None
        if location is None and self.path:
            location = SourceLocation(format="flare", path=self.path)
        diagnostic = Diagnostic(
            severity=severity,
            category=category,
            message=message,
            location=location,
            key=key,
            node_type=type(node).__name__ if node is not None else None,
        )
        self.diagnostics.append(diagnostic)
        logger.log(_LOG_LEVELS[severity], "%s", diagnostic)
        return diagnostic

    def warning(
        self, category: DiagnosticCategory, message: str, node: Optional[Node] = None, key: Optional[str] = None
    ) -> Diagnostic:
        """Record a warning-level diagnostic."""
        return self.add("warning", category, message, node=node, key=key)

    def info(
        self, category: DiagnosticCategory, message: str, node: Optional[Node] = None, key: Optional[str] = None
    ) -> Diagnostic:
        """Record an informational diagnostic."""
        return self.add("info", category, message, node=node, key=key)

    def merge(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Record diagnostics produced elsewhere, applying this collector's strictness."""
        for diagnostic in diagnostics:
            lenient = self.strictness == "lenient"
            if lenient and diagnostic.category == "structural" and diagnostic.severity == "warning":
                diagnostic = replace(diagnostic, severity="info")
            self.diagnostics.append(diagnostic)
            logger.log(_LOG_LEVELS[diagnostic.severity], "%s", diagnostic)

    @property
    def warnings(self) -> list[Diagnostic]:
        """Diagnostics of severity warning or error."""
        return [d for d in self.diagnostics if d.severity != "info"]

    def by_category(self, category: DiagnosticCategory) -> list[Diagnostic]:
        """Diagnostics of one category."""
        return [d for d in self.diagnostics if d.category == category]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)
