"""Linter plugin.

:class:`LinterPlugin` registers the core rules during install and, when it
runs, evaluates every enabled rule against the document. Each finding is
published as a ``warn`` event with the :class:`~netage.models.LintWarning`
as payload, so it must be the last plugin of a profile.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from netage.linter import CORE_RULES
from netage.models import LintWarning
from netage.plugins.base import Plugin
from netage.pubsub import Topic

if TYPE_CHECKING:
    from netage.plugins.runner import RunContext

logger = logging.getLogger(__name__)


class LinterPlugin(Plugin):
    """Evaluate the enabled lint rules and publish their findings."""

    def __init__(self) -> None:
        self.warnings: list[LintWarning] = []

    @property
    def name(self) -> str:
        return "netage/linter"

    @property
    def description(self) -> str:
        return "Check the document against the enabled lint rules"

    def install(self, ctx: RunContext) -> None:
        ctx.linter.register(*CORE_RULES)

    def run(self, ctx: RunContext) -> None:
        self.warnings = ctx.linter.lint(ctx.config, ctx.document)
        for warning in self.warnings:
            ctx.hub.pub(Topic.WARN, warning)
        logger.debug("Linting produced %d warning(s)", len(self.warnings))
