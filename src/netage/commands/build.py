"""Build command -- bundle a profile into ``builds/netage-<profile>.pyz``.

The profile may be given positionally or with ``--profile``/``-p``;
without either the command does nothing. ``--debug``/``-d`` stores the
archive members uncompressed. Exit codes: 0 on success, 1 when the build
fails, 127 when the arguments cannot be parsed (see :func:`netage.app.main`).

Usage::

    netage build netage
    netage build --profile netage --debug -o dist
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from netage.output import debug, error, info, success

BUILD_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def build_command(
    name: Optional[str] = typer.Argument(None, metavar="[PROFILE]", help="Profile to build."),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile to build (same as the argument)."
    ),
    debug_build: bool = typer.Option(
        False, "--debug", "-d", help="Disable compression to ease debugging."
    ),
    output_dir: Path = typer.Option(
        Path("builds"), "--output", "-o", help="Directory for the archive."
    ),
) -> None:
    """Build a netage profile into a single archive.

    Example::

        netage build netage
    """
    from netage.builder import Builder
    from netage.config import load_global_config
    from netage.exceptions import NetageError

    target = profile or name
    if not target:
        debug("No profile given, nothing to build.")
        return

    info(f"Generating netage-{target}.pyz. Please wait...")
    try:
        builder = Builder(output_dir, global_config=load_global_config())
        result = asyncio.run(builder.build(target, debug=debug_build))
    except NetageError as exc:
        error(str(exc))
        raise typer.Exit(code=1)
    success(f"Built {result.archive} ({result.members} members)")
    info(f"Source map: {result.source_map}")
