"""Shared test fixtures for dummy.

Provides reusable fixtures for loading fixture documents, building API
models, isolating configuration, managing output state, and running CLI
commands.  These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from dummy.generator import ValueGenerator
from dummy.models import API, OpenAPIDocument
from dummy.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When CliRunner or capsys redirects those streams and
    the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def users_raw() -> dict[str, Any]:
    """Raw users document (YAML) as a dict."""
    with open(FIXTURES_DIR / "users.yml", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def examples_raw() -> dict[str, Any]:
    """Raw examples document (JSON) as a dict."""
    with open(FIXTURES_DIR / "examples.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def users_document(users_raw: dict[str, Any]) -> OpenAPIDocument:
    return OpenAPIDocument.model_validate(users_raw)


@pytest.fixture
def examples_document(examples_raw: dict[str, Any]) -> OpenAPIDocument:
    return OpenAPIDocument.model_validate(examples_raw)


# ---------------------------------------------------------------------------
# Built API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def generator() -> ValueGenerator:
    """A seeded value generator so x-faker values are reproducible."""
    return ValueGenerator(seed=1234)


@pytest.fixture
def users_api(users_document: OpenAPIDocument, generator: ValueGenerator) -> API:
    from dummy.parser.builder import build_api

    return build_api(users_document, generator)


@pytest.fixture
def examples_api(examples_document: OpenAPIDocument, generator: ValueGenerator) -> API:
    from dummy.parser.builder import build_api

    return build_api(examples_document, generator)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty working directory with no ``DUMMY_*`` variables set.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for var in [
        "DUMMY_SPEC",
        "DUMMY_HOST",
        "DUMMY_PORT",
        "DUMMY_REQUEST_TIMEOUT",
        "DUMMY_FAKER_SEED",
        "DUMMY_FAKER_LOCALE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
