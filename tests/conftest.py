"""Pytest configuration and shared fixtures for the flaremark test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from utils import memory_project, topic

from flaremark.preprocess.resolver import FragmentCache, VariableTable

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - full pipeline tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def variables() -> VariableTable:
    """Provide a small variable table.

    Returns
    -------
    VariableTable
        ``General.ProductName`` and ``General.Version`` plus a duplicated bare key.

    """
    return VariableTable(
        {
            "General.ProductName": "Widget Pro",
            "General.Version": "4.2",
            "General.Edition": "Standard",
            "Print.Edition": "Print",
        }
    )


@pytest.fixture
def project_files() -> dict[str, str]:
    """Provide an in-memory Flare project with topics and snippets.

    Returns
    -------
    dict[str, str]
        Path to file content.

    """
    return {
        "Project/Content/Intro.htm": topic(
            "<h1>Intro</h1><p>See <a href=\"Guide/Install.htm\">installing</a>.</p>"
            '<MadCap:snippetBlock src="Resources/Snippets/Shared.flsnp" />'
        ),
        "Project/Content/Guide/Install.htm": topic("<h1>Install</h1><p>Run the installer.</p>"),
        "Project/Content/Resources/Snippets/Shared.flsnp": topic("<p>Shared text.</p>"),
        "Project/Content/Resources/Snippets/Name.flsnp": topic("<p>Widget</p>"),
        "Project/Content/Resources/Snippets/LoopA.flsnp": topic('<MadCap:snippetBlock src="LoopB.flsnp" />'),
        "Project/Content/Resources/Snippets/LoopB.flsnp": topic('<MadCap:snippetBlock src="LoopA.flsnp" />'),
    }


@pytest.fixture
def fragment_cache(project_files) -> FragmentCache:
    """Provide a fragment cache over the in-memory project."""
    return FragmentCache(loader=memory_project(project_files))
