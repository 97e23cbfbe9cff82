"""Configuration defaults plugin.

This module provides :class:`DefaultsPlugin`. It must be the first plugin
of a profile: every later plugin reads the configuration it produces.

The merge itself lives in :func:`netage.defaults.merge_defaults`. Only the
keys the user actually set are passed to it, so a field that merely has a
model default never overrides a baked-in value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from netage.defaults import (
    CORE_DEFAULTS,
    NETAGE_DEFAULTS,
    UNOFFICIAL_STATUS,
    merge_defaults,
)
from netage.linter import privsec_section_rule
from netage.models import DocumentConfig
from netage.plugins.base import Plugin

if TYPE_CHECKING:
    from netage.plugins.runner import RunContext

logger = logging.getLogger(__name__)


class DefaultsPlugin(Plugin):
    """Merge the Netage defaults into the run's configuration."""

    @property
    def name(self) -> str:
        return "netage/defaults"

    @property
    def description(self) -> str:
        return "Apply the core and Netage configuration defaults"

    def install(self, ctx: RunContext) -> None:
        ctx.linter.register(privsec_section_rule)

    def run(self, ctx: RunContext) -> None:
        user = ctx.config.to_mapping(exclude_unset=True)
        profile_defaults = NETAGE_DEFAULTS
        if user.get("specStatus") == UNOFFICIAL_STATUS:
            logger.debug("specStatus is '%s', skipping Netage defaults", UNOFFICIAL_STATUS)
            profile_defaults = None
        merged = merge_defaults(CORE_DEFAULTS, profile_defaults, user, hub=ctx.hub)
        ctx.config = DocumentConfig.model_validate(merged)
