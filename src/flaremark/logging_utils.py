#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Centralized logging utilities for flaremark entry points."""

from __future__ import annotations

import logging
import sys
from typing import Optional

# Parser backends log every recoverable markup problem at DEBUG/INFO
_NOISY_LIBRARY_LOGGERS = ("bs4", "html5lib", "chardet", "charset_normalizer")


def resolve_log_level(log_level: int | str) -> int:
    """Return the numeric level for a level name or number, defaulting to INFO."""
    if isinstance(log_level, int):
        return log_level
    return getattr(logging, str(log_level).upper(), logging.INFO)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Configure root logging handlers for the CLI and batch runs.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or string name (e.g., "INFO").
    log_file : str, optional
        Optional path to a log file for teeing log output.
    trace_mode : bool, default False
        When true, emit timestamps, logger names and thread names so that
        messages from parallel document conversions can be told apart.

    Returns
    -------
    logging.Logger
        The configured root logger instance.

    """
    resolved_level = resolve_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    if trace_mode:
        format_str = "[%(asctime)s] [%(levelname)s] [%(threadName)s] [%(name)s] %(message)s"
        date_format: Optional[str] = "%Y-%m-%d %H:%M:%S"
    else:
        format_str = "%(levelname)s: %(message)s"
        date_format = None
    formatter = logging.Formatter(format_str, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_file)
        except OSError as exc:  # pragma: no cover - handled at runtime
            root_logger.warning("Could not create log file %s: %s", log_file, exc)

    if not trace_mode:
        for name in _NOISY_LIBRARY_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))

    return root_logger
