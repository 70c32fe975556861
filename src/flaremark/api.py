#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/api.py
"""The exported API functions for topic conversion.

A conversion runs these stages on one document:

1. parse the Flare markup (skipped when a Document is passed in)
2. repair list containment
3. normalize authoring extensions (variables, fragments, cross-references,
   drop-downs, condition exclusion)
4. repair again, for content brought in by fragments
5. render through the target's structural renderer

All recoverable problems end up in ``ConversionResult.diagnostics``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from flaremark.ast.nodes import Document
from flaremark.constants import DEFAULT_GLOSSARY_TITLE
from flaremark.diagnostics import Diagnostic, DiagnosticCollector
from flaremark.exceptions import FlaremarkError, ParsingError, RenderingError, StrictValidationError
from flaremark.options.conversion import ConversionOptions
from flaremark.parsers.flare import FlareParser
from flaremark.preprocess.glossary import build_glossary_document, parse_flglo
from flaremark.preprocess.normalizer import ExtensionNormalizer
from flaremark.preprocess.repair import repair_tree
from flaremark.preprocess.resolver import ContentLoader, FileSystemLoader, FragmentCache, VariableTable
from flaremark.renderers import get_renderer_class
from flaremark.renderers.base import BaseRenderer
from flaremark.renderers.syntax import VariablesFile
from flaremark.utils.decorators import debug_timer

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Output of converting one document.

    Parameters
    ----------
    content : str
        Target markup; empty when the document was skipped
    diagnostics : list of Diagnostic
        Everything recorded while converting, in order
    variables_file : VariablesFile or None
        Variables listing; None in ``flatten`` mode or when skipped
    skipped : bool
        The document root matched an exclusion pattern
    target : str
        Target format
    source_path : str or None
        Path of the converted topic, when known

    """

    content: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    variables_file: Optional[VariablesFile] = None
    skipped: bool = False
    target: str = "asciidoc"
    source_path: Optional[str] = None

    @property
    def warnings(self) -> list[Diagnostic]:
        """Diagnostics of severity warning or error."""
        return [d for d in self.diagnostics if d.severity != "info"]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable summary (without the content)."""
        return {
            "source_path": self.source_path,
            "target": self.target,
            "skipped": self.skipped,
            "variables_file": self.variables_file.name if self.variables_file else None,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def write(self, output_path: Union[str, Path], write_variables: bool = True) -> list[Path]:
        """Write the content, and the variables listing next to it.

        Parameters
        ----------
        output_path : str or Path
            Destination of the converted document
        write_variables : bool, default True
            Also write ``variables_file`` into the same directory

        Returns
        -------
        list of Path
            Files written; nothing is written for a skipped document

        """
        if self.skipped:
            return []
        output_path = Path(output_path)
        BaseRenderer.write_text_output(self.content, output_path)
        written = [output_path]
        if write_variables and self.variables_file is not None:
            variables_path = output_path.parent / self.variables_file.name
            BaseRenderer.write_text_output(self.variables_file.content, variables_path)
            written.append(variables_path)
        return written


def convert(
    source: Union[str, Document],
    options: Optional[ConversionOptions] = None,
    *,
    source_path: Optional[str] = None,
    variables: Optional[Mapping[str, str]] = None,
    fragments: Optional[FragmentCache] = None,
    loader: Optional[ContentLoader] = None,
) -> ConversionResult:
    """Convert one Flare topic to the target syntax.

    Parameters
    ----------
    source : str or Document
        Topic markup, or an already parsed Document
    options : ConversionOptions, optional
        Conversion settings; defaults to AsciiDoc output
    source_path : str, optional
        Path of the topic; relative fragment and cross-reference targets are
        resolved against it
    variables : Mapping[str, str], optional
        Variable definitions keyed by ``Namespace.Name`` (a VariableTable or
        a plain dict)
    fragments : FragmentCache, optional
        Fragment cache to share between conversions
    loader : ContentLoader, optional
        Source of fragment and topic files; defaults to the file system

    Returns
    -------
    ConversionResult
        Converted content, diagnostics and the variables listing

    Raises
    ------
    ParsingError
        If the topic markup cannot be parsed
    FragmentCycleError
        If a fragment includes itself directly or transitively
    MissingVariableError, MissingFragmentError
        Under the ``abort`` policies
    StrictValidationError
        Under ``strict`` validation when any warning was recorded

    Examples
    --------
    >>> result = convert("<html><body><ol><li>First</li><p>Orphan</p></ol></body></html>")
    >>> print(result.content)
    . First
    +
    Orphan
    <BLANKLINE>

    """
    options = options or ConversionOptions()
    diagnostics = DiagnosticCollector(strictness=options.validation_strictness, path=source_path)

    if isinstance(source, Document):
        document = source
    else:
        with debug_timer(logger, "Parsing (flare)"):
            document = FlareParser(options.parser, source_path=source_path).convert_to_ast(source)
    source_path = source_path or document.metadata.get("source_path")

    with debug_timer(logger, "Structural repair"):
        repaired = _expect_document(repair_tree(document, diagnostics), "repair")

    if fragments is None:
        fragments = FragmentCache(loader=loader, parser_options=options.parser)
    normalizer = ExtensionNormalizer(
        options.normalizer,
        variables=variables if variables is not None else VariableTable(),
        fragments=fragments,
        diagnostics=diagnostics,
        target=options.target,
        loader=loader,
    )
    with debug_timer(logger, "Extension normalization"):
        normalized = normalizer.normalize(repaired, source_path=source_path)

    if normalized.skipped:
        _check_strict(options, diagnostics, source_path)
        return ConversionResult(
            content="",
            diagnostics=list(diagnostics),
            skipped=True,
            target=options.target,
            source_path=source_path,
        )

    repaired_again = repair_tree(normalized.document, diagnostics)  # type: ignore[arg-type]
    canonical = _expect_document(repaired_again, "post-normalization repair")

    renderer_class = get_renderer_class(options.target)
    renderer = renderer_class(
        options.renderer_options,
        diagnostics=diagnostics,
        include_variables=options.normalizer.variable_mode == "include",
    )
    try:
        with debug_timer(logger, f"Rendering ({options.target})"):
            content = renderer.render_to_string(canonical)
    except FlaremarkError:
        raise
    except Exception as e:
        raise RenderingError(f"Rendering failed: {e!r}", rendering_stage=options.target, original_error=e) from e

    variables_file = None
    if options.normalizer.variable_mode != "flatten":
        variables_file = renderer.adapter.variables_file(normalized.variables)

    _check_strict(options, diagnostics, source_path)
    return ConversionResult(
        content=content,
        diagnostics=list(diagnostics),
        variables_file=variables_file,
        skipped=False,
        target=options.target,
        source_path=source_path,
    )


def convert_file(
    path: Union[str, Path],
    options: Optional[ConversionOptions] = None,
    *,
    variables: Optional[Mapping[str, str]] = None,
    fragments: Optional[FragmentCache] = None,
    loader: Optional[ContentLoader] = None,
) -> ConversionResult:
    """Read a topic through the loader and convert it.

    Parameters
    ----------
    path : str or Path
        Topic file
    options, variables, fragments, loader
        As for ``convert``

    Returns
    -------
    ConversionResult
        Converted content, diagnostics and the variables listing

    Raises
    ------
    FileNotFoundError
        If the topic does not exist

    """
    loader = loader or (fragments.loader if fragments is not None else FileSystemLoader())
    source_path = str(path)
    text = loader.read_text(source_path)
    logger.info("Converting %s", source_path)
    return convert(
        text, options, source_path=source_path, variables=variables, fragments=fragments, loader=loader
    )


def convert_glossary(
    source: str,
    options: Optional[ConversionOptions] = None,
    *,
    source_path: Optional[str] = None,
    title: str = DEFAULT_GLOSSARY_TITLE,
    variables: Optional[Mapping[str, str]] = None,
) -> ConversionResult:
    """Convert a Flare ``.flglo`` glossary to the target syntax.

    Entries whose conditions match ``options.normalizer.exclude_conditions``
    are left out. Every entry gets the anchor that ``MadCap:glossaryTerm``
    links point to when ``NormalizerOptions.glossary_target`` names the
    converted glossary.

    Parameters
    ----------
    source : str
        Glossary XML
    options : ConversionOptions, optional
        Conversion settings
    source_path : str, optional
        Path of the glossary file
    title : str, default "Glossary"
        Title heading of the converted glossary
    variables : Mapping[str, str], optional
        Variable definitions for variables used in definitions

    Returns
    -------
    ConversionResult
        Converted glossary and diagnostics

    Raises
    ------
    ParsingError
        If the glossary XML is malformed

    """
    options = options or ConversionOptions()
    entries = parse_flglo(source, source_path or "<string>")
    collector = DiagnosticCollector(strictness=options.validation_strictness, path=source_path)
    document = build_glossary_document(
        entries,
        title=title,
        exclude_conditions=options.normalizer.exclude_conditions,
        parser_options=options.parser,
        diagnostics=collector,
        source_path=source_path,
    )
    # Definition links are project-relative, not relative to the glossary file
    normalizer = options.normalizer.create_updated(check_cross_references=False)
    result = convert(
        document, options.create_updated(normalizer=normalizer), source_path=source_path, variables=variables
    )
    result.diagnostics[:0] = list(collector)
    _check_strict(options, collector, source_path)
    return result


def convert_glossary_file(
    path: Union[str, Path],
    options: Optional[ConversionOptions] = None,
    *,
    title: str = DEFAULT_GLOSSARY_TITLE,
    variables: Optional[Mapping[str, str]] = None,
    loader: Optional[ContentLoader] = None,
) -> ConversionResult:
    """Read a ``.flglo`` glossary through the loader and convert it.

    Raises
    ------
    FileNotFoundError
        If the glossary does not exist

    """
    loader = loader or FileSystemLoader()
    source_path = str(path)
    logger.info("Converting glossary %s", source_path)
    return convert_glossary(
        loader.read_text(source_path), options, source_path=source_path, title=title, variables=variables
    )


def _check_strict(options: ConversionOptions, diagnostics: DiagnosticCollector, source_path: Optional[str]) -> None:
    if options.validation_strictness == "strict" and diagnostics.warnings:
        raise StrictValidationError(diagnostics.warnings, path=source_path)


def _expect_document(node: Any, stage: str) -> Document:
    if not isinstance(node, Document):
        raise ParsingError(
            f"Structural repair produced {type(node).__name__} instead of a Document", parsing_stage=stage
        )
    return node
