"""Run a profile over one document, from HTML in to HTML out.

:func:`process_document` is the single entry point shared by the CLI and
the worker::

    result = process_document(html, {"specStatus": "NETAGE-CV"})
    print(result.html)
    for finding in result.findings:
        print(finding)

The document's embedded configuration is merged under *user_config*, a
fresh hub and lint registry are created, the profile's plugins run in
order, and the exported HTML is returned together with every diagnostic
published during the run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from netage.config import DEFAULT_PROFILE, load_profile, resolve_document_config
from netage.document import parse_document
from netage.exceptions import ConfigError
from netage.export import export_document
from netage.linter import LinterRegistry
from netage.models import DocumentConfig, GlobalConfig, LintWarning, Profile
from netage.plugins.manager import PluginManager
from netage.plugins.runner import RunContext, RunReport
from netage.pubsub import PubSubHub, Topic

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Everything a run produced.

    Attributes:
        html: The exported document.
        config: The effective configuration after all plugins ran.
        warnings: Text of every ``warn`` event, lint findings included.
        findings: The lint findings alone.
        errors: Text of every ``error`` event.
        report: Which plugins completed or failed.
    """

    html: str
    config: DocumentConfig
    warnings: list[str] = field(default_factory=list)
    findings: list[LintWarning] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    report: RunReport = field(default_factory=RunReport)


def _as_profile(profile: Union[Profile, str, None]) -> Profile:
    if isinstance(profile, Profile):
        return profile
    return load_profile(profile or DEFAULT_PROFILE)


async def process_document_async(
    html: str,
    user_config: Optional[Mapping[str, Any]] = None,
    profile: Union[Profile, str, None] = None,
    location: Optional[str] = None,
    global_config: Optional[GlobalConfig] = None,
    project: Optional[Mapping[str, Any]] = None,
) -> ProcessResult:
    """Process *html* with *profile* and return the exported result.

    Args:
        html: The source document.
        user_config: Author configuration, taking precedence over the
            configuration embedded in the document.
        profile: A :class:`Profile` or profile name. Defaults to ``netage``.
        location: URL of the document, used for fragment navigation.
        global_config: Supplies the plugin allow/deny lists.
        project: Project configuration (``./netage.json``), whose ``config``
            mapping ranks below the embedded configuration.

    Raises:
        ConfigError: If the configuration or profile is invalid.
        PluginError: If the profile names an unknown plugin.
    """
    if user_config is not None and not isinstance(user_config, Mapping):
        raise ConfigError(
            f"Invalid document configuration: expected an object, got {type(user_config).__name__}"
        )
    resolved = _as_profile(profile)
    soup = parse_document(html)
    mapping = resolve_document_config(
        soup, dict(user_config or {}), dict(project) if project else None
    )
    try:
        config = DocumentConfig.model_validate(mapping)
    except ValidationError as exc:
        raise ConfigError(f"Invalid document configuration: {exc}") from exc

    manager = PluginManager(global_config)
    runner = manager.get_runner(resolved)
    ctx = RunContext(
        document=soup,
        config=config,
        hub=PubSubHub(),
        linter=LinterRegistry(),
        location=location,
    )

    warnings: list[str] = []
    findings: list[LintWarning] = []
    errors: list[str] = []

    def on_warn(message: Any, *_: Any) -> None:
        if isinstance(message, LintWarning):
            findings.append(message)
        warnings.append(str(message))

    def on_error(message: Any, *_: Any) -> None:
        errors.append(str(message))

    ctx.hub.sub(Topic.WARN, on_warn)
    ctx.hub.sub(Topic.ERROR, on_error)

    logger.debug("Processing document with profile '%s'", resolved.name)
    report = await runner.run_all(ctx)
    exported = export_document(ctx)
    return ProcessResult(
        html=exported,
        config=ctx.config,
        warnings=warnings,
        findings=findings,
        errors=errors,
        report=report,
    )


def process_document(
    html: str,
    user_config: Optional[Mapping[str, Any]] = None,
    profile: Union[Profile, str, None] = None,
    location: Optional[str] = None,
    global_config: Optional[GlobalConfig] = None,
    project: Optional[Mapping[str, Any]] = None,
) -> ProcessResult:
    """Synchronous wrapper around :func:`process_document_async`."""
    return asyncio.run(
        process_document_async(html, user_config, profile, location, global_config, project)
    )
