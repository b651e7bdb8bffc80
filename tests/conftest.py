"""Shared test fixtures for sdkwrap.

Provides reusable fixtures for loading the sample manifest, creating
isolated config environments, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
import yaml

from sdkwrap.models import SdkMetadata
from sdkwrap.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
NETBOX_MANIFEST = FIXTURES_DIR / "netbox_sdk.yaml"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Undo the handlers ``main_callback`` installs on the ``sdkwrap`` logger.

    A RichHandler left behind would keep writing to a stream CliRunner has
    already closed, and ``propagate=False`` would hide records from caplog.
    """
    yield
    logger = logging.getLogger("sdkwrap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Manifest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def netbox_raw() -> dict[str, Any]:
    """Load the raw NetBox manifest dict."""
    with open(NETBOX_MANIFEST, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def netbox_metadata(netbox_raw: dict[str, Any]) -> SdkMetadata:
    """Metadata extracted from the NetBox manifest."""
    from sdkwrap.reflection.manifest import extract_metadata

    return extract_metadata(netbox_raw)


@pytest.fixture
def netbox_manifest_path(tmp_path: Path) -> Path:
    """Copy of the NetBox manifest inside tmp_path."""
    path = tmp_path / "netbox_sdk.yaml"
    path.write_text(NETBOX_MANIFEST.read_text(encoding="utf-8"), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all SDKWRAP_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "SDKWRAP_TARGET",
        "SDKWRAP_OUTPUT",
        "SDKWRAP_CLASS_PATTERN",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager for the test."""
    output = OutputManager(format=OutputFormat.JSON)
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


# ---------------------------------------------------------------------------
# Python client module fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_client(monkeypatch: pytest.MonkeyPatch):
    """Import ``tests/fixtures/sample_client.py`` as top-level ``sample_client``."""
    import importlib

    monkeypatch.syspath_prepend(str(FIXTURES_DIR))
    return importlib.import_module("sample_client")
