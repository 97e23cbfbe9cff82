"""Tests for the archive builder and the ``build`` command."""

from __future__ import annotations

import asyncio
import json
import re
import zipfile
from pathlib import Path

import pytest

from netage.app import app
from netage.builder import WORKER_NAME, Builder, get_version, make_banner
from netage.config import save_profile
from netage.exceptions import BuildError
from netage.models import Profile

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


@pytest.fixture
def out_dir(isolated_config: Path) -> Path:
    return isolated_config / "dist"


def _build(out_dir: Path, name: str = "netage", debug: bool = False):
    return asyncio.run(Builder(out_dir).build(name, debug=debug))


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class TestBuilder:
    def test_writes_archive_map_and_worker(self, out_dir: Path) -> None:
        result = _build(out_dir)
        assert result.archive == out_dir / "netage-netage.pyz"
        assert result.source_map == out_dir / "netage-netage.pyz.map"
        assert result.worker == out_dir / WORKER_NAME
        assert result.archive.is_file()
        assert result.source_map.is_file()
        assert "def serve" in result.worker.read_text(encoding="utf-8")

    def test_archive_is_a_zip_application(self, out_dir: Path) -> None:
        result = _build(out_dir)
        with zipfile.ZipFile(result.archive) as archive:
            names = archive.namelist()
            main_source = archive.read("__main__.py").decode("utf-8")
        assert "netage/__init__.py" in names
        assert "netage/profiles/netage.yaml" in names
        assert "netage/worker.py" not in names
        assert not any("__pycache__" in name for name in names)
        assert "freeze_profile" in main_source
        assert "netage/style" in main_source

    def test_banner_prefix(self, out_dir: Path) -> None:
        result = _build(out_dir)
        data = result.archive.read_bytes()
        assert data.startswith(b"#!/usr/bin/env python3\n")
        banner = make_banner(get_version(), "netage").encode("utf-8")
        assert data[len(banner):len(banner) + 4] == b"PK\x03\x04"

    def test_source_map_offsets_point_at_entries(self, out_dir: Path) -> None:
        result = _build(out_dir)
        data = result.archive.read_bytes()
        source_map = json.loads(result.source_map.read_text(encoding="utf-8"))

        assert source_map["file"] == "netage-netage.pyz"
        assert source_map["profile"] == "netage"
        assert len(source_map["members"]) == result.members
        for member in source_map["members"]:
            offset = member["offset"]
            assert data[offset:offset + 4] == b"PK\x03\x04", member["name"]
        main = [m for m in source_map["members"] if m["name"] == "__main__.py"]
        assert main[0]["source"] is None

    def test_debug_stores_uncompressed(self, out_dir: Path) -> None:
        result = _build(out_dir, debug=True)
        with zipfile.ZipFile(result.archive) as archive:
            assert {info.compress_type for info in archive.infolist()} == {zipfile.ZIP_STORED}
        assert json.loads(result.source_map.read_text(encoding="utf-8"))["debug"] is True

    def test_release_is_compressed(self, out_dir: Path) -> None:
        result = _build(out_dir)
        with zipfile.ZipFile(result.archive) as archive:
            assert {info.compress_type for info in archive.infolist()} == {zipfile.ZIP_DEFLATED}

    def test_unknown_profile(self, out_dir: Path) -> None:
        with pytest.raises(BuildError, match="Unknown profile 'ghost'"):
            _build(out_dir, "ghost")
        assert not out_dir.exists()

    def test_profile_with_unknown_plugin(self, out_dir: Path) -> None:
        save_profile(Profile(name="broken", plugins=["netage/style", "ghost/plugin"]))
        with pytest.raises(BuildError, match="ghost/plugin"):
            _build(out_dir, "broken")

    def test_user_profile_is_frozen_in(self, out_dir: Path) -> None:
        save_profile(Profile(name="lean", plugins=["netage/informative"]))
        result = _build(out_dir, "lean")
        with zipfile.ZipFile(result.archive) as archive:
            main_source = archive.read("__main__.py").decode("utf-8")
        assert "netage/informative" in main_source
        assert "netage/style" not in main_source

    def test_compile_failure_reported(self, out_dir: Path, tmp_path: Path) -> None:
        package = tmp_path / "pkg" / "netage"
        package.mkdir(parents=True)
        (package / "__init__.py").write_text("")
        (package / "bad.py").write_text("def broken(:\n")
        builder = Builder(out_dir, package_root=package)
        with pytest.raises(BuildError, match="Compilation failed"):
            asyncio.run(builder.build("netage"))

    def test_empty_name(self, out_dir: Path) -> None:
        with pytest.raises(BuildError):
            _build(out_dir, "")


# ---------------------------------------------------------------------------
# build command
# ---------------------------------------------------------------------------


class TestBuildCommand:
    @pytest.mark.parametrize("flag", ["-h", "--help"])
    def test_help(self, cli_runner, flag: str) -> None:
        result = cli_runner.invoke(app, ["build", flag])
        assert result.exit_code == 0
        text = _strip_ansi(result.output)
        assert "--profile" in text
        assert "--debug" in text

    def test_positional_profile(self, cli_runner, out_dir: Path) -> None:
        result = cli_runner.invoke(app, ["build", "netage", "-o", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert (out_dir / "netage-netage.pyz").is_file()
        assert "Generating netage-netage.pyz. Please wait..." in result.output

    def test_profile_option_and_debug(self, cli_runner, out_dir: Path) -> None:
        result = cli_runner.invoke(app, ["build", "-p", "netage", "-d", "-o", str(out_dir)])
        assert result.exit_code == 0, result.output
        source_map = json.loads((out_dir / "netage-netage.pyz.map").read_text(encoding="utf-8"))
        assert source_map["debug"] is True

    def test_no_profile_is_a_no_op(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["build"])
        assert result.exit_code == 0
        assert not (isolated_config / "builds").exists()

    def test_failure_exits_one(self, cli_runner, out_dir: Path) -> None:
        result = cli_runner.invoke(app, ["build", "ghost", "-o", str(out_dir)])
        assert result.exit_code == 1
        assert "Unknown profile 'ghost'" in result.output
