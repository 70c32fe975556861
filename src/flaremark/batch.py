#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/batch.py
"""Parallel conversion of many topics.

Each topic is one task on a thread pool. The variable table and the
fragment cache are shared by all tasks; every task gets its own diagnostics
and walk state. A failing topic is reported in its ``BatchItemResult`` and
never stops the batch.

Cancellation stops the dispatch of new tasks; tasks already running finish
normally. The timeout applies to each task as a whole.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Literal, Mapping, Optional, Union

from flaremark.api import ConversionResult, convert_file
from flaremark.constants import TARGET_EXTENSIONS
from flaremark.exceptions import FlaremarkError
from flaremark.options.conversion import ConversionOptions
from flaremark.preprocess.resolver import ContentLoader, FileSystemLoader, FragmentCache, VariableTable

logger = logging.getLogger(__name__)

BatchStatus = Literal["converted", "skipped", "failed", "timeout", "cancelled"]


@dataclass(frozen=True)
class BatchJob:
    """One topic to convert.

    Parameters
    ----------
    source_path : str
        Topic file
    output_path : str or None, default None
        Where to write the result; None keeps it in memory only

    """

    source_path: str
    output_path: Optional[str] = None


@dataclass
class BatchItemResult:
    """Outcome of one job."""

    job: BatchJob
    status: BatchStatus
    result: Optional[ConversionResult] = None
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status in ("converted", "skipped")

    @property
    def warning_count(self) -> int:
        return len(self.result.warnings) if self.result else 0


ProgressCallback = Callable[[BatchItemResult], None]


def output_path_for(
    source_path: Union[str, Path],
    target: str,
    output_dir: Union[str, Path],
    input_root: Optional[Union[str, Path]] = None,
) -> Path:
    """Map a topic path to its output path, keeping the layout under ``input_root``.

    >>> str(output_path_for("Content/Guide/Intro.htm", "asciidoc", "out", "Content"))
    'out/Guide/Intro.adoc'

    """
    source = Path(source_path)
    relative = Path(source.name)
    if input_root is not None:
        try:
            relative = source.relative_to(input_root)
        except ValueError:
            pass
    return Path(output_dir) / relative.with_suffix(TARGET_EXTENSIONS[target])


def convert_batch(
    jobs: Iterable[Union[BatchJob, str]],
    options: Optional[ConversionOptions] = None,
    *,
    variables: Optional[Mapping[str, str]] = None,
    fragments: Optional[FragmentCache] = None,
    loader: Optional[ContentLoader] = None,
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[BatchItemResult]:
    """Convert many topics in parallel.

    Parameters
    ----------
    jobs : iterable of BatchJob or str
        Topics to convert; plain strings are source paths
    options : ConversionOptions, optional
        Shared conversion settings
    variables : Mapping[str, str], optional
        Shared, read-only variable definitions
    fragments : FragmentCache, optional
        Shared fragment cache; one is created for the batch when omitted
    loader : ContentLoader, optional
        Source of topic and fragment files
    max_workers : int, optional
        Thread count; defaults to ``min(8, cpu_count)``
    timeout : float, optional
        Seconds a single topic may take before it is reported as timed out
    cancel_event : threading.Event, optional
        When set, no further topics are started
    progress_callback : callable, optional
        Called with each BatchItemResult as it completes

    Returns
    -------
    list of BatchItemResult
        One result per job, in job order

    """
    options = options or ConversionOptions()
    queue = deque(enumerate(BatchJob(job) if isinstance(job, str) else job for job in jobs))
    total = len(queue)
    loader = loader or FileSystemLoader()
    if fragments is None:
        fragments = FragmentCache(loader=loader, parser_options=options.parser)
    if variables is None:
        variables = VariableTable()
    workers = max_workers or min(8, os.cpu_count() or 1)

    results: dict[int, BatchItemResult] = {}
    pending: dict[Future[ConversionResult], tuple[int, BatchJob, float]] = {}

    def record(index: int, item: BatchItemResult) -> None:
        results[index] = item
        if progress_callback is not None:
            progress_callback(item)

    logger.info("Converting %d topic(s) with %d worker(s)", total, workers)
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="flaremark")
    try:
        while queue or pending:
            while queue and len(pending) < workers and not (cancel_event is not None and cancel_event.is_set()):
                index, job = queue.popleft()
                future = executor.submit(_run_job, job, options, variables, fragments, loader)
                pending[future] = (index, job, time.monotonic())
            if not pending:
                break

            done, _ = wait(list(pending), timeout=_wait_time(pending, timeout), return_when=FIRST_COMPLETED)
            for future in done:
                index, job, started = pending.pop(future)
                record(index, _collect(future, job, started))

            if timeout is not None:
                now = time.monotonic()
                for future, (index, job, started) in list(pending.items()):
                    if now - started >= timeout:
                        del pending[future]
                        future.cancel()
                        logger.error("Timed out after %.1fs: %s", timeout, job.source_path)
                        error = TimeoutError(f"Conversion exceeded {timeout}s")
                        record(index, BatchItemResult(job=job, status="timeout", error=error, elapsed=now - started))
    finally:
        executor.shutdown(wait=timeout is None, cancel_futures=True)

    for index, job in queue:
        results[index] = BatchItemResult(job=job, status="cancelled")
    if queue:
        logger.warning("Batch cancelled; %d topic(s) not converted", len(queue))
    return [results[index] for index in range(total)]


def _wait_time(pending: Mapping[Future[ConversionResult], tuple[int, BatchJob, float]], timeout: Optional[float]):
    if timeout is None:
        return None
    oldest = min(started for _, _, started in pending.values())
    return max(0.0, oldest + timeout - time.monotonic())


def _run_job(
    job: BatchJob,
    options: ConversionOptions,
    variables: Mapping[str, str],
    fragments: FragmentCache,
    loader: ContentLoader,
) -> ConversionResult:
    result = convert_file(job.source_path, options, variables=variables, fragments=fragments, loader=loader)
    if job.output_path:
        result.write(job.output_path)
    return result


def _collect(future: Future[ConversionResult], job: BatchJob, started: float) -> BatchItemResult:
    elapsed = time.monotonic() - started
    try:
        result = future.result()
    except FlaremarkError as e:
        logger.error("Failed to convert %s: %s", job.source_path, e)
        return BatchItemResult(job=job, status="failed", error=e, elapsed=elapsed)
    except Exception as e:
        logger.exception("Unexpected error converting %s", job.source_path)
        return BatchItemResult(job=job, status="failed", error=e, elapsed=elapsed)
    status: BatchStatus = "skipped" if result.skipped else "converted"
    return BatchItemResult(job=job, status=status, result=result, elapsed=elapsed)
