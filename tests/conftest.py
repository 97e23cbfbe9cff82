"""Shared test fixtures for netage.

Provides sample documents, isolated config environments, run contexts,
output state management and a CLI runner. These fixtures are discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from netage import config as config_module
from netage.document import parse_document
from netage.linter import LinterRegistry
from netage.models import DocumentConfig
from netage.output import OutputFormat, OutputManager, reset_output, set_output
from netage.plugins.runner import RunContext
from netage.pubsub import PubSubHub, Topic


SAMPLE_SPEC = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Sample Netage Specification</title>
</head>
<body>
  <section id="abstract"><p>A sample document.</p></section>
  <section id="sotd"><p>Status of this document.</p></section>
  <section id="intro" class="informative">
    <h2>Introduction</h2>
    <p>See <a href="#conformance">conformance</a>.</p>
  </section>
  <section id="conformance">
    <h2>Conformance</h2>
    <p>Normative text.</p>
  </section>
  <section id="privsec">
    <h2>Privacy and Security Considerations</h2>
    <p>None.</p>
  </section>
</body>
</html>
"""

BROKEN_SPEC = """<!DOCTYPE html>
<html>
<head><title>Broken</title></head>
<body>
  <section id="nohead"><p>No heading here. <a href="#missing">dangling</a></p></section>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager keeps references to sys.stdout/sys.stderr. When the
    CliRunner swaps those streams and the test ends, the references go
    stale, so a fresh manager must be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_frozen_profiles(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "_frozen_profiles", {})
    monkeypatch.setattr(config_module, "_frozen_default", None)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_SPEC


@pytest.fixture
def broken_html() -> str:
    return BROKEN_SPEC


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "draft.html"
    path.write_text(SAMPLE_SPEC, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Run contexts
# ---------------------------------------------------------------------------


class Recorder:
    """Collects the payloads published on a hub topic."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, *payload) -> None:
        self.calls.append(payload)

    @property
    def messages(self) -> list[str]:
        return [str(call[0]) for call in self.calls]


@pytest.fixture
def make_ctx():
    """Factory building a :class:`RunContext` for a document and config."""

    def _make(html: str = SAMPLE_SPEC, location: str | None = None, **config) -> RunContext:
        return RunContext(
            document=parse_document(html),
            config=DocumentConfig.model_validate(config),
            hub=PubSubHub(),
            linter=LinterRegistry(),
            location=location,
        )

    return _make


@pytest.fixture
def warnings_of():
    """Subscribe a :class:`Recorder` to ``warn`` on a context's hub."""

    def _subscribe(ctx: RunContext) -> Recorder:
        recorder = Recorder()
        ctx.hub.sub(Topic.WARN, recorder)
        return recorder

    return _subscribe


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, clears
    ``NETAGE_*`` environment variables and changes the working directory
    to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("netage.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("NETAGE_PROFILE", raising=False)
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


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
