"""End-to-end tests for the netage CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from netage import __version__
from netage.app import app, main
from netage.exceptions import ConfigError


@pytest.fixture
def broken_file(isolated_config: Path, broken_html: str) -> Path:
    path = isolated_config / "broken.html"
    path.write_text(broken_html, encoding="utf-8")
    return path


@pytest.fixture
def draft(isolated_config: Path, sample_file: Path) -> Path:
    return sample_file


# ---------------------------------------------------------------------------
# Root application
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"netage {__version__}" in result.output

    def test_no_arguments_prints_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert result.exit_code == 0
        assert "process" in result.output
        assert "build" in result.output


# ---------------------------------------------------------------------------
# process
# ---------------------------------------------------------------------------


class TestProcess:
    def test_document_to_stdout(self, cli_runner, draft: Path) -> None:
        result = cli_runner.invoke(app, ["process", str(draft)])
        assert result.exit_code == 0, result.output
        assert "NETAGE-BASIC.css" in result.output
        assert "This section is non-normative." in result.output
        assert "specStatus" in result.output

    def test_config_file_and_output(self, cli_runner, draft: Path, isolated_config: Path) -> None:
        config = isolated_config / "doc.json"
        config.write_text(json.dumps({"specStatus": "NETAGE-CV"}), encoding="utf-8")
        target = isolated_config / "index.html"

        result = cli_runner.invoke(
            app, ["process", str(draft), "-c", str(config), "-o", str(target)]
        )
        assert result.exit_code == 0, result.output
        written = target.read_text(encoding="utf-8")
        assert "NETAGE-CV.css" in written
        assert "Wrote" in result.output

    def test_yaml_config_file(self, cli_runner, draft: Path, isolated_config: Path) -> None:
        config = isolated_config / "doc.yaml"
        config.write_text("specStatus: NETAGE-FINAL\nnoToc: true\n", encoding="utf-8")
        result = cli_runner.invoke(app, ["process", str(draft), "-c", str(config)])
        assert result.exit_code == 0, result.output
        assert "NETAGE-FINAL.css" in result.output
        assert "fixup.js" not in result.output

    def test_project_config(self, cli_runner, draft: Path, isolated_config: Path) -> None:
        (isolated_config / "netage.json").write_text(
            json.dumps({"config": {"specStatus": "NETAGE-LD"}}), encoding="utf-8"
        )
        result = cli_runner.invoke(app, ["process", str(draft)])
        assert result.exit_code == 0, result.output
        assert "NETAGE-LD.css" in result.output

    def test_fragment_in_source(self, cli_runner, draft: Path) -> None:
        result = cli_runner.invoke(app, ["process", f"{draft}#conformance"])
        assert result.exit_code == 0, result.output
        assert 'window.location.href = "#conformance"' in result.output

    def test_unknown_profile(self, cli_runner, draft: Path) -> None:
        result = cli_runner.invoke(app, ["-p", "ghost", "process", str(draft)])
        assert result.exit_code == 1
        assert isinstance(result.exception, ConfigError)

    def test_lint_findings_reported(self, cli_runner, broken_file: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "process", str(broken_file)])
        assert result.exit_code == 0
        assert "[privsec-section]" in result.output
        assert "a[href='#missing']" in result.output


# ---------------------------------------------------------------------------
# lint
# ---------------------------------------------------------------------------


class TestLint:
    def test_clean_document(self, cli_runner, draft: Path) -> None:
        result = cli_runner.invoke(app, ["lint", str(draft)])
        assert result.exit_code == 0, result.output
        assert "No lint findings." in result.output

    def test_findings_exit_one(self, cli_runner, broken_file: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "lint", str(broken_file)])
        assert result.exit_code == 1
        assert "[no-headingless-sections]" in result.output
        assert "[local-refs-exist]" in result.output

    def test_json_findings(self, cli_runner, broken_file: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "lint", str(broken_file)])
        assert result.exit_code == 1
        findings = json.loads(result.stdout)
        assert [f["rule"] for f in findings] == [
            "privsec-section",
            "no-headingless-sections",
            "local-refs-exist",
        ]
        assert findings[2]["elements"] == ["a[href='#missing']"]


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class TestListings:
    def test_profiles(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "profiles"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Name\tDescription\tPlugins"
        assert lines[1].startswith("netage\t")
        assert "netage/defaults, netage/style" in lines[1]

    def test_plugins_and_rules(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "plugins"])
        assert result.exit_code == 0
        assert "netage/style\t0.1.0\t" in result.output
        assert "privsec-section\t" in result.output
        assert "local-refs-exist\t" in result.output


# ---------------------------------------------------------------------------
# Exit codes of the console entry point
# ---------------------------------------------------------------------------


class TestMainExitCodes:
    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path) -> None:
        monkeypatch.setattr("netage.app._setup_signal_handlers", lambda: None)

    def _exit_code(self, monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["netage", *args])
        with pytest.raises(SystemExit) as exc_info:
            main()
        return exc_info.value.code

    def test_success(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._exit_code(monkeypatch, "--plain", "profiles") == 0

    def test_version(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._exit_code(monkeypatch, "--version") == 0

    @pytest.mark.parametrize(
        "args",
        [
            ("--bogus",),
            ("process",),
            ("build", "--unknown-flag"),
            ("build", "a", "b"),
        ],
    )
    def test_bad_arguments_exit_127(self, monkeypatch: pytest.MonkeyPatch, args) -> None:
        assert self._exit_code(monkeypatch, *args) == 127

    def test_build_failure_exits_one(
        self, monkeypatch: pytest.MonkeyPatch, isolated_config: Path
    ) -> None:
        code = self._exit_code(monkeypatch, "build", "ghost", "-o", str(isolated_config / "out"))
        assert code == 1

    def test_build_without_profile_exits_zero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._exit_code(monkeypatch, "build") == 0

    def test_netage_error_uses_its_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert self._exit_code(monkeypatch, "--no-color", "process", "missing.html") == 1
        assert "Error: Document not found" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        isolated_config: Path,
    ) -> None:
        def explode(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr("netage.commands.profiles.print_table", explode)
        assert self._exit_code(monkeypatch, "--no-color", "profiles") == 1
        assert "Debug log" in capsys.readouterr().err
        logs = list((isolated_config / "data" / "netage" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "kaboom" in logs[0].read_text()
