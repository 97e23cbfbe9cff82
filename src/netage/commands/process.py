"""Process and lint commands.

``netage process`` runs a profile over a document and writes the exported
HTML to stdout or a file. ``netage lint`` runs the same pipeline but only
reports the lint findings.

Both load the document with :func:`~netage.document.load_source` (a path,
``-`` for stdin, or an http(s) URL) and resolve the profile and project
configuration with :func:`~netage.config.resolve_config`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import typer

from netage.output import (
    error,
    get_output,
    info,
    lint_warning,
    print_json,
    warning,
    write_document,
)

if TYPE_CHECKING:
    from netage.pipeline import ProcessResult


def _run(
    ctx: typer.Context,
    source: str,
    config_file: Optional[str],
    profile: Optional[str],
    location: Optional[str],
) -> ProcessResult:
    """Load, configure and process *source*; report run diagnostics."""
    from netage.config import load_config_file, resolve_config
    from netage.document import load_source
    from netage.pipeline import process_document

    cli_profile = profile or (ctx.obj or {}).get("profile")
    global_cfg, active, project = resolve_config(cli_profile=cli_profile)
    html, source_location = load_source(source)
    user_config = load_config_file(config_file) if config_file else {}

    get_output().debug(f"Using profile '{active.name}'")
    result = process_document(
        html,
        user_config,
        profile=active,
        location=location or source_location,
        global_config=global_cfg,
        project=project,
    )
    for message in result.errors:
        error(message)
    return result


def process_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document path, URL, or '-' for stdin."),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the result here instead of stdout."
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="JSON or YAML document configuration."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile to run."),
    location: Optional[str] = typer.Option(
        None, "--location", help="URL the document will be served from."
    ),
) -> None:
    """Process a document with the active profile.

    Configuration warnings and lint findings go to stderr; the document
    goes to stdout unless ``--output`` is given. Exits 1 when a plugin
    failed, after writing the document.

    Example::

        netage process draft.html -o index.html
        netage process https://example.org/draft.html -c netage.yaml
    """
    result = _run(ctx, source, config_file, profile, location)
    findings = {str(finding) for finding in result.findings}
    for message in result.warnings:
        if message not in findings:
            warning(message)
    for finding in result.findings:
        lint_warning(finding)

    write_document(result.html, output)
    if output:
        info(f"Wrote {output}")
    if result.errors:
        raise typer.Exit(code=1)


def lint_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document path, URL, or '-' for stdin."),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="JSON or YAML document configuration."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Profile to run."),
) -> None:
    """Report lint findings for a document. Exits 1 if there are any.

    With ``--json`` the findings are printed to stdout as a JSON array.
    """
    from netage.output import OutputFormat

    result = _run(ctx, source, config_file, profile, None)
    if get_output().format == OutputFormat.JSON:
        print_json([finding.model_dump(mode="json") for finding in result.findings])
    else:
        for finding in result.findings:
            lint_warning(finding)
        if not result.findings:
            info("No lint findings.")
    if result.findings or result.errors:
        raise typer.Exit(code=1)
