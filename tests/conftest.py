"""Shared test fixtures for rekku.

Provides reusable fixtures for loading the OpenAPI fixture document,
creating isolated config environments, managing output state, and running
CLI commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from rekku.models import ParsedDocument
from rekku.output import OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
MOCK_OPENAPI = FIXTURES_DIR / "mock_openapi.json"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_openapi_path() -> Path:
    """Path to the JSON fixture document."""
    return MOCK_OPENAPI


@pytest.fixture
def mock_openapi_raw() -> dict[str, Any]:
    """The fixture document as a plain dict."""
    with open(MOCK_OPENAPI, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def mock_document(mock_openapi_raw: dict[str, Any]) -> ParsedDocument:
    """The fixture document, extracted."""
    from rekku.parser.extractor import extract_document

    return extract_document(mock_openapi_raw, "3.0.3")


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, clears all REKKU_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["REKKU_WORKSPACE", "REKKU_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager for tests that don't care about output."""
    output = OutputManager(no_color=True, quiet=True, rich_tables=False)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a colourless output manager with debug messages enabled."""
    output = OutputManager(no_color=True, verbose=True, rich_tables=False)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
