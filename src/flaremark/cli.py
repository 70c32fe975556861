#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/cli.py
"""Command-line interface for flaremark.

Examples
--------
Convert a Flare content folder to AsciiDoc::

    $ flaremark Content/ --to asciidoc -o build/adoc --variables Project/VariableSets

Writerside Markdown with variables kept as references and the default
exclusion patterns::

    $ flaremark Content/ --to markdown --markdown-flavor writerside \\
        --variable-mode reference --default-exclusions -o build/md

A glossary converted next to the topics, with glossary terms linking into
it::

    $ flaremark Content/ -o build/adoc --glossary Project/Glossaries/Main.flglo

"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from flaremark.batch import BatchItemResult, BatchJob, convert_batch, output_path_for
from flaremark.api import convert_glossary_file
from flaremark.constants import DEFAULT_EXCLUSION_PATTERNS, INTERNAL_LINK_EXTENSIONS, TARGET_EXTENSIONS, TARGET_FORMATS
from flaremark.exceptions import FileNotFoundError, FlaremarkError
from flaremark.logging_utils import configure_logging
from flaremark.options.asciidoc import AsciiDocRendererOptions
from flaremark.options.base import BaseRendererOptions
from flaremark.options.conversion import ConversionOptions
from flaremark.options.html import HtmlRendererOptions
from flaremark.options.markdown import MarkdownRendererOptions
from flaremark.options.normalize import NormalizerOptions
from flaremark.preprocess.resolver import VariableTable

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4

_STATUS_STYLES = {
    "converted": "green",
    "skipped": "yellow",
    "failed": "red",
    "timeout": "red",
    "cancelled": "yellow",
}


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="flaremark",
        description="Convert MadCap Flare topics to AsciiDoc, Markdown or HTML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="+", help="Topic files or directories (searched recursively)")
    parser.add_argument("--to", dest="target", choices=TARGET_FORMATS, default="asciidoc", help="Output syntax")
    parser.add_argument("-o", "--output-dir", help="Write converted topics here, keeping the folder layout")
    parser.add_argument("--variables", metavar="DIR", help="Directory of .flvar variable sets")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Condition pattern (regular expression) whose content is removed; repeatable",
    )
    parser.add_argument(
        "--default-exclusions",
        action="store_true",
        help="Also exclude the usual draft, deprecated and print-only condition tags",
    )
    parser.add_argument(
        "--variable-mode",
        choices=["flatten", "reference", "include"],
        default="flatten",
        help="Substitute variable values, or keep references with a variables file",
    )
    parser.add_argument(
        "--missing-variables",
        choices=["key", "empty", "embedded", "abort"],
        default="key",
        help="Fallback for undefined variables; embedded keeps the text stored in the tag",
    )
    parser.add_argument(
        "--missing-fragments",
        choices=["placeholder", "drop", "abort"],
        default="placeholder",
        help="Fallback for snippets that cannot be loaded",
    )
    parser.add_argument(
        "--strictness",
        choices=["strict", "normal", "lenient"],
        default="normal",
        help="strict fails a topic on any warning",
    )
    parser.add_argument("--no-collapsible", action="store_true", help="Render drop-downs as plain sections")
    parser.add_argument("--glossary", metavar="FILE", help="Also convert this .flglo glossary (requires -o)")
    parser.add_argument(
        "--glossary-target",
        metavar="PATH",
        help="Link glossary terms to this document; defaults to the converted --glossary file",
    )
    parser.add_argument(
        "--markdown-flavor",
        choices=["commonmark", "writerside"],
        default="commonmark",
        help="Markdown dialect (with --to markdown)",
    )
    parser.add_argument("--jobs", type=int, default=None, metavar="N", help="Parallel conversions")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds allowed per topic")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    parser.add_argument("--log-file", help="Also write log messages to this file")
    parser.add_argument("--trace", action="store_true", help="Timestamps and thread names in log output")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    return parser


def collect_input_files(inputs: Sequence[str]) -> list[Path]:
    """Expand input arguments into topic files.

    Directories are searched recursively for ``.htm``/``.html`` topics.
    Missing paths are logged and skipped.
    """
    files: list[Path] = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in INTERNAL_LINK_EXTENSIONS)
            )
        elif path.is_file():
            files.append(path)
        else:
            logger.warning("Input not found: %s", item)
    return files


def build_options(parsed_args: argparse.Namespace) -> ConversionOptions:
    """Translate parsed arguments into ConversionOptions.

    Raises
    ------
    InvalidOptionsError
        If an exclusion pattern or option value is invalid

    """
    patterns = list(parsed_args.exclude)
    if parsed_args.default_exclusions:
        patterns.extend(DEFAULT_EXCLUSION_PATTERNS)

    normalizer = NormalizerOptions(
        variable_mode=parsed_args.variable_mode,
        missing_variable_policy=parsed_args.missing_variables,
        missing_fragment_policy=parsed_args.missing_fragments,
        exclude_conditions=tuple(patterns),
        enable_collapsible=not parsed_args.no_collapsible,
        glossary_target=_glossary_target(parsed_args),
    )
    renderer: BaseRendererOptions
    if parsed_args.target == "markdown":
        renderer = MarkdownRendererOptions(flavor=parsed_args.markdown_flavor)
    elif parsed_args.target == "html":
        renderer = HtmlRendererOptions()
    else:
        renderer = AsciiDocRendererOptions()
    return ConversionOptions(
        target=parsed_args.target,
        validation_strictness=parsed_args.strictness,
        normalizer=normalizer,
        renderer=renderer,
    )


def _glossary_target(parsed_args: argparse.Namespace) -> Optional[str]:
    if parsed_args.glossary_target:
        return parsed_args.glossary_target
    if parsed_args.glossary:
        return Path(parsed_args.glossary).stem + TARGET_EXTENSIONS[parsed_args.target]
    return None


def convert_glossary_to(
    parsed_args: argparse.Namespace, options: ConversionOptions, variables: VariableTable
) -> int:
    """Convert the ``--glossary`` file into the output directory; returns an exit code."""
    glossary = Path(parsed_args.glossary)
    try:
        result = convert_glossary_file(glossary, options, variables=variables)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR
    except FlaremarkError as e:
        print(f"Error: glossary {glossary}: {e}", file=sys.stderr)
        return EXIT_ERROR
    output_path = Path(parsed_args.output_dir) / (glossary.stem + TARGET_EXTENSIONS[options.target])
    result.write(output_path, write_variables=False)
    logger.info("Wrote glossary %s (%d warnings)", output_path, len(result.warnings))
    return EXIT_SUCCESS


def _common_root(files: Sequence[Path]) -> Optional[Path]:
    parents = [f.resolve().parent for f in files]
    if not parents:
        return None
    root = parents[0]
    for parent in parents[1:]:
        while root not in (parent, *parent.parents):
            root = root.parent
    return root


def render_summary(console: Console, results: Sequence[BatchItemResult]) -> None:
    """Print per-topic problems and the status counts."""
    problems = Table(title="Problems", show_lines=False)
    problems.add_column("Topic", style="cyan")
    problems.add_column("Status")
    problems.add_column("Detail", overflow="fold")
    for item in results:
        style = _STATUS_STYLES[item.status]
        if item.error is not None:
            problems.add_row(item.job.source_path, f"[{style}]{item.status}[/{style}]", str(item.error))
        elif item.result is not None:
            for diagnostic in item.result.warnings:
                problems.add_row(item.job.source_path, f"[yellow]{diagnostic.severity}[/yellow]", str(diagnostic))
    if problems.row_count:
        console.print(problems)

    summary = Table(title="Conversion Summary")
    summary.add_column("Status", style="cyan", no_wrap=True)
    summary.add_column("Count", style="magenta")
    for status in _STATUS_STYLES:
        count = sum(1 for item in results if item.status == status)
        if count:
            summary.add_row(status.capitalize(), str(count))
    summary.add_row("Total", str(len(results)))
    warnings = sum(item.warning_count for item in results)
    if warnings:
        summary.add_row("Warnings", str(warnings))
    console.print(summary)


def main(args: Optional[list[str]] = None) -> int:
    """Run the command line; returns the process exit code."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    configure_logging(parsed_args.log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)

    if parsed_args.jobs is not None and parsed_args.jobs < 1:
        print("Error: --jobs must be at least 1", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        options = build_options(parsed_args)
    except FlaremarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    if parsed_args.glossary and not parsed_args.output_dir:
        print("Error: --glossary requires --output-dir", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    files = collect_input_files(parsed_args.input)
    if not files:
        print("Error: No valid input files found", file=sys.stderr)
        return EXIT_FILE_ERROR

    variables = VariableTable()
    if parsed_args.variables:
        if not Path(parsed_args.variables).is_dir():
            print(f"Error: --variables must be a directory: {parsed_args.variables}", file=sys.stderr)
            return EXIT_FILE_ERROR
        variables = VariableTable.from_directory(parsed_args.variables)
        logger.info("Loaded %d variable(s) from %s", len(variables), parsed_args.variables)

    root = _common_root(files)
    jobs = [
        BatchJob(
            source_path=str(f),
            output_path=(
                str(output_path_for(f.resolve(), options.target, parsed_args.output_dir, root))
                if parsed_args.output_dir
                else None
            ),
        )
        for f in files
    ]

    console = Console(stderr=True)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        disable=parsed_args.no_progress,
    ) as progress:
        task_id = progress.add_task("[cyan]Converting...", total=len(jobs))
        results = convert_batch(
            jobs,
            options,
            variables=variables,
            max_workers=parsed_args.jobs,
            timeout=parsed_args.timeout,
            progress_callback=lambda item: progress.advance(task_id),
        )

    if not parsed_args.output_dir and len(results) == 1 and results[0].result is not None:
        sys.stdout.write(results[0].result.content)
    else:
        render_summary(console, results)

    if parsed_args.glossary:
        code = convert_glossary_to(parsed_args, options, variables)
        if code != EXIT_SUCCESS:
            return code

    return EXIT_SUCCESS if all(item.ok for item in results) else EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
