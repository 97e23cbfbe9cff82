"""Bundle a profile into a single executable archive.

:class:`Builder` packages the ``netage`` package together with one frozen
profile into ``builds/netage-<profile>.pyz``, a zip application runnable
with ``python netage-<profile>.pyz process draft.html``. Third-party
dependencies are not bundled; they must be installed where the archive
runs.

Alongside the archive the builder writes:

* ``netage-<profile>.pyz.map`` -- a JSON source map listing, for every
  archive member, the source file it came from and the byte offset of its
  entry in the archive.
* ``netage-worker.py`` -- a copy of :mod:`netage.worker`.

The archive starts with a shebang and a version banner. Zip readers locate
entries from the end of the file, so the prefix is harmless; the offsets
in the source map are shifted by its length.

Usage::

    builder = Builder(Path("builds"))
    result = asyncio.run(builder.build("netage"))
"""

from __future__ import annotations

import asyncio
import hashlib
import importlib.metadata
import io
import json
import logging
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import pathspec

import netage
from netage.config import load_profile, profile_exists
from netage.exceptions import BuildError
from netage.models import GlobalConfig, Profile
from netage.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(netage.__file__).resolve().parent
"""Directory of the installed ``netage`` package."""

WORKER_SOURCE = PACKAGE_ROOT / "worker.py"
WORKER_NAME = "netage-worker.py"

EXCLUDE_PATTERNS = [
    "__pycache__/",
    "*.pyc",
    "*.pyo",
    "/worker.py",
]
"""Gitignore-style patterns of package files left out of archives."""

_MAIN_TEMPLATE = '''\
"""Entry point of the netage bundle for profile {profile_name!r}.

Generated by netage {version}. Do not edit.
"""

import json

from netage.app import main
from netage.config import freeze_profile
from netage.models import Profile

_FROZEN_PROFILE = json.loads({frozen_profile!r})

freeze_profile(Profile.model_validate(_FROZEN_PROFILE))

if __name__ == "__main__":
    main()
'''


@dataclass
class BuildResult:
    """Paths written by :meth:`Builder.build`."""

    archive: Path
    source_map: Path
    worker: Path
    members: int


def get_version() -> str:
    """Return the installed netage version.

    Falls back to :data:`netage.__version__` when running from a source
    tree without package metadata.
    """
    try:
        return importlib.metadata.version("netage")
    except importlib.metadata.PackageNotFoundError:
        return netage.__version__


def make_banner(version: str, name: str) -> str:
    return f"#!/usr/bin/env python3\n# netage {version} (profile: {name})\n"


class Builder:
    """Builds per-profile archives into *output_dir*.

    Args:
        output_dir: Where archives are written. Created if missing.
        global_config: Supplies entry-point plugin filtering for validation.
        package_root: Package directory to bundle. Defaults to the
            installed ``netage`` package.
    """

    def __init__(
        self,
        output_dir: Path,
        global_config: Optional[GlobalConfig] = None,
        package_root: Optional[Path] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.package_root = package_root or PACKAGE_ROOT
        self._manager = PluginManager(global_config)
        self._spec = pathspec.PathSpec.from_lines("gitignore", EXCLUDE_PATTERNS)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def resolve_profile(self, name: str) -> Profile:
        """Load profile *name* and check that all its plugins exist.

        Raises:
            BuildError: If the profile or one of its plugins is unknown.
        """
        if not profile_exists(name):
            raise BuildError(f"Unknown profile '{name}'")
        profile = load_profile(name)
        missing = self._manager.validate(profile)
        if missing:
            raise BuildError(
                f"Profile '{name}' names unknown plugin(s): {', '.join(missing)}"
            )
        return profile

    def collect_files(self) -> list[Path]:
        """Return the package files to bundle, sorted, minus excluded patterns."""
        files = []
        for path in sorted(self.package_root.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(self.package_root).as_posix()
            if self._spec.match_file(relative):
                continue
            files.append(path)
        return files

    def compile_sources(self, files: list[Path]) -> None:
        """Byte-compile every Python file, reporting all failures at once.

        Raises:
            BuildError: Listing each file that does not compile.
        """
        problems = []
        for path in files:
            if path.suffix != ".py":
                continue
            try:
                compile(path.read_bytes(), str(path), "exec")
            except (SyntaxError, ValueError) as exc:
                problems.append(f"{path}: {exc}")
        if problems:
            raise BuildError("Compilation failed:\n" + "\n".join(problems))

    def write_archive(
        self, profile: Profile, files: list[Path], debug: bool, version: str
    ) -> tuple[bytes, list[dict[str, Any]]]:
        """Create the zip archive in memory.

        Returns:
            The archive bytes and the source map members (offsets not yet
            shifted by the banner).
        """
        compression = zipfile.ZIP_STORED if debug else zipfile.ZIP_DEFLATED
        buffer = io.BytesIO()
        sources: dict[str, Optional[Path]] = {}

        with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
            prefix = self.package_root.name
            for path in files:
                member = f"{prefix}/{path.relative_to(self.package_root).as_posix()}"
                archive.write(path, member)
                sources[member] = path
            frozen = json.dumps(profile.model_dump(mode="json"), sort_keys=True)
            main_source = _MAIN_TEMPLATE.format(
                profile_name=profile.name, version=version, frozen_profile=frozen
            )
            archive.writestr("__main__.py", main_source)
            sources["__main__.py"] = None
            infos = archive.infolist()

        data = buffer.getvalue()
        members = []
        for info in infos:
            source = sources[info.filename]
            start = info.header_offset
            members.append(
                {
                    "name": info.filename,
                    "source": str(source) if source is not None else None,
                    "offset": start,
                    "size": info.file_size,
                    "sha256": hashlib.sha256(
                        source.read_bytes() if source is not None else main_source.encode("utf-8")
                    ).hexdigest(),
                }
            )
        return data, members

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def build(self, name: str, debug: bool = False) -> BuildResult:
        """Build the archive for profile *name*.

        Args:
            name: Profile to bundle.
            debug: Store members uncompressed for easier inspection.

        Raises:
            BuildError: If the profile cannot be resolved or a module does
                not compile.
        """
        if not name:
            raise BuildError("A profile name is required")

        profile = self.resolve_profile(name)
        version = get_version()
        logger.info("Building profile '%s' with netage %s", name, version)

        files = await asyncio.to_thread(self.collect_files)
        await asyncio.to_thread(self.compile_sources, files)
        data, members = await asyncio.to_thread(
            self.write_archive, profile, files, debug, version
        )

        archive_path = self.output_dir / f"netage-{name}.pyz"
        map_path = self.output_dir / f"netage-{name}.pyz.map"
        source_map = {
            "version": 1,
            "file": archive_path.name,
            "profile": profile.name,
            "debug": debug,
            "members": members,
        }
        await asyncio.to_thread(self.output_dir.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(
            _append_boilerplate, archive_path, map_path, data, source_map, version, name
        )

        worker_path = self.output_dir / WORKER_NAME
        await asyncio.to_thread(shutil.copyfile, WORKER_SOURCE, worker_path)
        logger.info("Wrote %s (%d members)", archive_path, len(members))
        return BuildResult(
            archive=archive_path,
            source_map=map_path,
            worker=worker_path,
            members=len(members),
        )


def _append_boilerplate(
    archive_path: Path,
    map_path: Path,
    data: bytes,
    source_map: dict[str, Any],
    version: str,
    name: str,
) -> None:
    """Write the archive behind the banner and the source map with shifted offsets."""
    banner = make_banner(version, name).encode("utf-8")
    for member in source_map["members"]:
        member["offset"] += len(banner)
    source_map["banner"] = len(banner)

    archive_path.write_bytes(banner + data)
    archive_path.chmod(0o755)
    map_path.write_text(json.dumps(source_map, indent=2) + "\n", encoding="utf-8")
