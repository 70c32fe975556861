#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/preprocess/resolver.py
"""Variable and fragment resolution.

This module holds the two lookup structures shared by every document of a
batch:

``VariableTable``
    Immutable mapping from ``Namespace.Key`` to text, usually loaded from a
    Flare project's ``.flvar`` variable sets.
``FragmentCache``
    Lazily populated, thread-safe memo of parsed and structurally repaired
    fragment (snippet) files. Each path is read and parsed at most once;
    callers always receive a private deep copy.

Both read their inputs through a ``ContentLoader`` so that the file system
can be swapped for an in-memory mapping or a remote store.

Examples
--------
Load a project's variables and share a fragment cache between documents:

    >>> variables = VariableTable.from_directory("Project/VariableSets")
    >>> fragments = FragmentCache(project_root="MyProject")
    >>> variables.lookup("General", "ProductName")
    'Widget Pro'

"""

from __future__ import annotations

import difflib
import logging
import os
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

import defusedxml.ElementTree as ET

from flaremark.ast.nodes import Document
from flaremark.ast.transforms import clone_tree
from flaremark.constants import FLARE_VARIABLE_EXTENSION, SNIPPET_FALLBACK_DIRECTORY
from flaremark.diagnostics import Diagnostic, DiagnosticCollector
from flaremark.exceptions import FileAccessError, FileNotFoundError, FlaremarkError, ParsingError
from flaremark.options.flare import FlareParserOptions

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Normalize a path for use as a cache or loader key."""
    return os.path.normpath(path.replace("\\", "/"))


# ============================================================================
# Loaders
# ============================================================================


@runtime_checkable
class ContentLoader(Protocol):
    """Narrow interface for reading topics, fragments and variable sets."""

    def read_text(self, path: str) -> str:
        """Return the text stored at ``path``.

        Raises
        ------
        FileNotFoundError
            If nothing is stored at ``path``
        FileAccessError
            If the content exists but cannot be read

        """
        ...

    def exists(self, path: str) -> bool:
        """Return True when ``path`` can be read."""
        ...


class FileSystemLoader:
    """Read UTF-8 files from the local file system."""

    def read_text(self, path: str) -> str:
        """Read a file, stripping a UTF-8 byte order mark."""
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(path)
        try:
            return file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileAccessError(path, original_error=exc) from exc

    def exists(self, path: str) -> bool:
        """Return True for an existing regular file."""
        return Path(path).is_file()


class MemoryLoader:
    """Serve content from an in-memory mapping of path to text.

    Parameters
    ----------
    files : Mapping[str, str]
        Path to text. Keys are normalized the same way lookups are.

    """

    def __init__(self, files: Mapping[str, str]):
        """Initialize from a mapping."""
        self._files = {normalize_path(path): text for path, text in files.items()}

    def read_text(self, path: str) -> str:
        """Return the stored text."""
        try:
            return self._files[normalize_path(path)]
        except KeyError:
            raise FileNotFoundError(path) from None

    def exists(self, path: str) -> bool:
        """Return True when the path is in the mapping."""
        return normalize_path(path) in self._files


# ============================================================================
# Variables
# ============================================================================


def parse_flvar(text: str, namespace: str) -> dict[str, str]:
    """Parse a Flare ``.flvar`` variable set.

    Parameters
    ----------
    text : str
        XML of a ``CatapultVariableSet``
    namespace : str
        Variable set name, normally the file stem

    Returns
    -------
    dict[str, str]
        ``Namespace.Name`` to value. The value is the ``EvaluatedDefinition``
        attribute when present, then the element text, then the
        ``Definition`` attribute.

    Raises
    ------
    ParsingError
        If the XML is malformed

    """
    try:
        root = ET.fromstring(text.lstrip("\ufeff").encode("utf-8"))
    except ET.ParseError as exc:
        raise ParsingError(f"Malformed variable set '{namespace}': {exc}", parsing_stage="flvar", original_error=exc)

    values: dict[str, str] = {}
    for element in root.iter():
        if local_xml_name(element.tag) != "Variable":
            continue
        name = (element.get("Name") or "").strip()
        if not name:
            continue
        text_value = (element.text or "").strip()
        value = element.get("EvaluatedDefinition") or text_value or element.get("Definition") or ""
        values[f"{namespace}.{name}"] = value
    return values


def local_xml_name(tag: str) -> str:
    """Return an XML tag name without its ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


class VariableTable(Mapping[str, str]):
    """Immutable mapping from ``Namespace.Key`` to variable text.

    Lookups are case-sensitive. The table is read-only after construction
    and can be shared between threads.

    Parameters
    ----------
    values : Mapping[str, str], optional
        Fully qualified name to value

    Examples
    --------
    >>> table = VariableTable({"General.ProductName": "Widget"})
    >>> table.lookup("General", "ProductName")
    'Widget'
    >>> table.lookup("", "ProductName")
    'Widget'

    """

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        """Initialize the table from a mapping."""
        self._values: dict[str, str] = dict(values or {})
        by_key: dict[str, list[str]] = {}
        for name in self._values:
            by_key.setdefault(name.split(".", 1)[-1], []).append(name)
        self._by_key = {key: tuple(names) for key, names in by_key.items()}

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableTable({len(self)} variables)"

    def lookup(self, namespace: str, key: str) -> Optional[str]:
        """Resolve a variable reference.

        Parameters
        ----------
        namespace : str
            Variable set name; may be empty
        key : str
            Variable name

        Returns
        -------
        str or None
            The value, or None when the variable is unknown. A bare key
            (empty namespace) resolves only when exactly one set defines it.

        """
        name = self.qualify(namespace, key)
        return self._values[name] if name is not None else None

    def qualify(self, namespace: str, key: str) -> Optional[str]:
        """Return the defined name a reference resolves to, or None."""
        if namespace:
            name = f"{namespace}.{key}"
            return name if name in self._values else None
        if key in self._values:
            return key
        candidates = self._by_key.get(key, ())
        if len(candidates) == 1:
            return candidates[0]
        if len(candidates) > 1:
            logger.debug("Ambiguous bare variable %r defined in %s", key, ", ".join(candidates))
        return None

    def similar(self, name: str, limit: int = 3) -> list[str]:
        """Return defined names close to ``name``, best match first.

        Both the qualified names and the bare keys are compared, so a
        reference with a misspelled or missing namespace still finds its
        candidates. Matching ignores case.

        >>> VariableTable({"General.ProductName": "Widget"}).similar("General.ProductNme")
        ['General.ProductName']

        """
        candidates: dict[str, str] = {}
        for defined in self._values:
            candidates.setdefault(defined.lower(), defined)
        if "." not in name:
            for key, names in self._by_key.items():
                if len(names) == 1:
                    candidates.setdefault(key.lower(), names[0])
        matches = difflib.get_close_matches(name.lower(), list(candidates), n=limit * 2, cutoff=0.6)
        found: list[str] = []
        for match in matches:
            defined = candidates[match]
            if defined not in found:
                found.append(defined)
        return found[:limit]

    @classmethod
    def merged(cls, *tables: Mapping[str, str]) -> VariableTable:
        """Combine tables; later tables override earlier ones."""
        values: dict[str, str] = {}
        for table in tables:
            values.update(table)
        return cls(values)

    @classmethod
    def from_flvar(cls, text: str, namespace: str) -> VariableTable:
        """Build a table from one ``.flvar`` document."""
        return cls(parse_flvar(text, namespace))

    @classmethod
    def from_directory(cls, directory: str | Path, loader: Optional[ContentLoader] = None) -> VariableTable:
        """Load every ``.flvar`` file below ``directory``.

        The namespace of each file is its stem. Files are loaded in sorted
        path order, so later files override earlier ones deterministically.

        Raises
        ------
        FileNotFoundError
            If ``directory`` does not exist
        ParsingError
            If a variable set is malformed

        """
        root = Path(directory)
        if not root.is_dir():
            raise FileNotFoundError(str(root), message=f"Variable directory not found: {root}")
        loader = loader or FileSystemLoader()
        values: dict[str, str] = {}
        files = sorted(root.rglob(f"*{FLARE_VARIABLE_EXTENSION}"))
        for path in files:
            values.update(parse_flvar(loader.read_text(str(path)), path.stem))
        logger.info("Loaded %d variables from %d variable set(s) in %s", len(values), len(files), root)
        return cls(values)


# ============================================================================
# Fragments
# ============================================================================


@dataclass(frozen=True)
class FragmentEntry:
    """A cached fragment: its repaired tree and the repair diagnostics."""

    path: str
    document: Document
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)


class FragmentCache:
    """Thread-safe memo of parsed, structurally repaired fragments.

    Each fragment path is loaded and parsed at most once per cache, also
    under concurrent access: loads of the same path are serialized by a
    per-path lock, loads of distinct paths run in parallel. Failures are
    memoized too, so a missing fragment is looked up only once.

    Parameters
    ----------
    loader : ContentLoader, optional
        Where fragments are read from (file system by default)
    project_root : str, optional
        Flare project directory used for the ``Content/Resources/Snippets``
        fallback. When omitted it is derived from the including document's
        path (the parent of its ``Content`` directory).
    parser_options : FlareParserOptions, optional
        Options for parsing fragment files

    """

    def __init__(
        self,
        loader: Optional[ContentLoader] = None,
        project_root: Optional[str] = None,
        parser_options: Optional[FlareParserOptions] = None,
    ):
        """Initialize an empty cache."""
        self.loader: ContentLoader = loader or FileSystemLoader()
        self.project_root = project_root
        self.parser_options = parser_options or FlareParserOptions()
        self._entries: dict[str, FragmentEntry | FlaremarkError] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        self._load_counts: dict[str, int] = {}

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def load_count(self, path: str) -> int:
        """Number of times ``path`` was actually read and parsed."""
        return self._load_counts.get(normalize_path(path), 0)

    def resolve_path(self, src: str, including_path: Optional[str]) -> str:
        """Resolve a fragment reference to a loader path.

        The reference is resolved relative to the including document's
        directory. When nothing exists there, the file name is looked up in
        the project's ``Content/Resources/Snippets`` directory. When neither
        exists the relative resolution is returned so errors name it.

        Parameters
        ----------
        src : str
            Fragment reference as written in the source
        including_path : str or None
            Path of the topic or fragment containing the reference

        Returns
        -------
        str
            Normalized path

        """
        src = src.replace("\\", "/")
        if os.path.isabs(src):
            return normalize_path(src)

        base = os.path.dirname(including_path) if including_path else (self.project_root or "")
        primary = normalize_path(os.path.join(base, src))
        if self.loader.exists(primary):
            return primary

        project_root = self.project_root or _find_project_root(including_path)
        if project_root is not None:
            fallback = normalize_path(os.path.join(project_root, *SNIPPET_FALLBACK_DIRECTORY, os.path.basename(src)))
            if self.loader.exists(fallback):
                logger.debug("Fragment %s resolved through snippet directory fallback: %s", src, fallback)
                return fallback
        return primary

    def get(self, path: str) -> FragmentEntry:
        """Return the cached entry for ``path``, loading it on first use.

        The entry's document must not be modified; use ``get_copy`` to
        obtain a tree for inclusion.

        Raises
        ------
        FileNotFoundError
            If the fragment does not exist
        ParsingError
            If the fragment cannot be parsed

        """
        key = normalize_path(path)
        cached = self._entries.get(key)
        if cached is None:
            with self._guard:
                lock = self._locks.setdefault(key, threading.Lock())
            with lock:
                cached = self._entries.get(key)
                if cached is None:
                    cached = self._load(key)
                    self._entries[key] = cached
        if isinstance(cached, FlaremarkError):
            raise cached
        return cached

    def get_copy(self, path: str) -> tuple[Document, tuple[Diagnostic, ...]]:
        """Return a private deep copy of a fragment's tree and its repair diagnostics."""
        entry = self.get(path)
        document = clone_tree(entry.document)
        if not isinstance(document, Document):
            raise FlaremarkError(f"Copy of fragment {entry.path} is not a Document")
        return document, entry.diagnostics

    def _load(self, key: str) -> FragmentEntry | FlaremarkError:
        # Local imports keep the parser and repair stage out of the import
        # graph of code that only needs variable tables.
        from flaremark.parsers.flare import FlareParser
        from flaremark.preprocess.repair import repair_tree

        self._load_counts[key] = self._load_counts.get(key, 0) + 1
        logger.debug("Loading fragment %s", key)
        try:
            text = self.loader.read_text(key)
            document = FlareParser(self.parser_options, source_path=key).convert_to_ast(text)
        except (FileNotFoundError, FileAccessError, ParsingError) as exc:
            logger.debug("Fragment %s could not be loaded: %s", key, exc)
            return exc
        collector = DiagnosticCollector(path=key)
        repaired = repair_tree(document, collector)
        if not isinstance(repaired, Document):
            return ParsingError(f"Repair of fragment {key} did not produce a Document", parsing_stage="repair")
        return FragmentEntry(path=key, document=repaired, diagnostics=tuple(collector.diagnostics))


def _find_project_root(path: Optional[str]) -> Optional[str]:
    """Return the parent of the nearest ``Content`` directory above ``path``."""
    if not path:
        return None
    parts = Path(normalize_path(path)).parts
    for index in range(len(parts) - 1, -1, -1):
        if parts[index].lower() == SNIPPET_FALLBACK_DIRECTORY[0].lower():
            return str(Path(*parts[:index])) if index else "."
    return None
