"""flaremark - MadCap Flare topic normalization and conversion.

flaremark reads Flare topics (XHTML with ``MadCap:`` authoring extensions),
repairs their structure, resolves variables, snippets, cross-references,
drop-downs and conditional content, and renders the result as AsciiDoc,
Markdown (CommonMark or Writerside) or sanitized HTML.

Examples
--------
Convert a single topic:

    >>> from flaremark import convert_file, ConversionOptions
    >>> result = convert_file("Content/Intro.htm", ConversionOptions(target="markdown"))
    >>> print(result.content)

Convert a folder in parallel with shared variables:

    >>> from flaremark import VariableTable, convert_batch
    >>> variables = VariableTable.from_directory("Project/VariableSets")
    >>> results = convert_batch(["Content/A.htm", "Content/B.htm"], variables=variables)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

__version__ = "0.1.0"

from flaremark.api import ConversionResult, convert, convert_file, convert_glossary, convert_glossary_file
from flaremark.batch import BatchItemResult, BatchJob, convert_batch
from flaremark.diagnostics import Diagnostic, DiagnosticCollector, SourceLocation
from flaremark.exceptions import (
    FlaremarkError,
    FragmentCycleError,
    MissingFragmentError,
    MissingVariableError,
    StrictValidationError,
)
from flaremark.options import (
    AsciiDocRendererOptions,
    ConversionOptions,
    FlareParserOptions,
    HtmlRendererOptions,
    MarkdownRendererOptions,
    NormalizerOptions,
)
from flaremark.preprocess import FileSystemLoader, FragmentCache, MemoryLoader, VariableTable

__all__ = [
    "__version__",
    "AsciiDocRendererOptions",
    "BatchItemResult",
    "BatchJob",
    "ConversionOptions",
    "ConversionResult",
    "Diagnostic",
    "DiagnosticCollector",
    "FileSystemLoader",
    "FlareParserOptions",
    "FlaremarkError",
    "FragmentCache",
    "FragmentCycleError",
    "HtmlRendererOptions",
    "MarkdownRendererOptions",
    "MemoryLoader",
    "MissingFragmentError",
    "MissingVariableError",
    "NormalizerOptions",
    "SourceLocation",
    "StrictValidationError",
    "VariableTable",
    "convert",
    "convert_batch",
    "convert_file",
    "convert_glossary",
    "convert_glossary_file",
]
