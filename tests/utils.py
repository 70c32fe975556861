"""Test utilities for the flaremark test suite.

This module provides helpers for building Flare topics, variable sets and
in-memory projects used across the tests.
"""

from typing import Mapping, Optional

from flaremark.preprocess.resolver import MemoryLoader

FLARE_NAMESPACE = 'xmlns:MadCap="http://www.madcapsoftware.com/Schemas/MadCap.xsd"'


def topic(body: str, title: Optional[str] = None, conditions: Optional[str] = None) -> str:
    """Wrap body markup in a Flare topic shell."""
    head = f"<head><title>{title}</title></head>" if title else "<head></head>"
    condition_attribute = f' MadCap:conditions="{conditions}"' if conditions else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f"<html {FLARE_NAMESPACE}{condition_attribute}>{head}<body>{body}</body></html>"
    )


def flvar(variables: Mapping[str, str]) -> str:
    """Build a ``.flvar`` variable set document."""
    entries = "".join(
        f'<Variable Name="{name}" EvaluatedDefinition="{value}">{value}</Variable>' for name, value in variables.items()
    )
    return f'<?xml version="1.0" encoding="utf-8"?><CatapultVariableSet>{entries}</CatapultVariableSet>'


def memory_project(files: Mapping[str, str]) -> MemoryLoader:
    """Return a loader serving the given project files."""
    return MemoryLoader(files)
