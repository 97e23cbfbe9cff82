"""Run context and the runner that sequences plugins over a document.

This module provides two core components:

* :class:`RunContext` -- The explicit state shared by every plugin of a
  run: the document tree, the effective configuration, the pub/sub hub,
  the lint registry, and the document's location.
* :class:`PluginRunner` -- Installs and then runs the plugins of a profile
  strictly in order, publishing the lifecycle events plugins subscribe to.

The run is single-threaded: each plugin's :meth:`~netage.plugins.base.Plugin.run`
is awaited before the next one starts, so the declared order is the only
discipline needed to keep document mutations from interfering.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup

from netage.linter import LinterRegistry
from netage.models import DocumentConfig
from netage.plugins.base import Plugin
from netage.pubsub import PubSubHub, Topic

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """State threaded through every plugin of one document-processing run.

    Attributes:
        document: The document tree, mutated in place by plugins.
        config: The effective configuration. The ``netage/defaults``
            plugin replaces it with the merged configuration; later plugins
            read and may update it.
        hub: Event bus for lifecycle and diagnostic events.
        linter: Registry receiving lint rules during the install phase.
        location: URL of the document, if known. Its fragment drives the
            style plugin's navigation fixup.
    """

    document: BeautifulSoup
    config: DocumentConfig = field(default_factory=DocumentConfig)
    hub: PubSubHub = field(default_factory=PubSubHub)
    linter: LinterRegistry = field(default_factory=LinterRegistry)
    location: Optional[str] = None


@dataclass
class RunReport:
    """Outcome of :meth:`PluginRunner.run_all`.

    Attributes:
        completed: Names of plugins whose run finished without raising.
        failed: Mapping of plugin name to the exception it raised.
    """

    completed: list[str] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class PluginRunner:
    """Installs and runs plugins in declaration order.

    The runner holds an immutable snapshot of the plugin list it was
    created with.
    """

    def __init__(self, plugins: list[Plugin]) -> None:
        """Initialize the runner with a list of plugins.

        Args:
            plugins: Ordered plugin instances. Both phases follow this order.
        """
        self._plugins = list(plugins)

    @property
    def plugins(self) -> list[Plugin]:
        return list(self._plugins)

    def install_all(self, ctx: RunContext) -> None:
        """Call every plugin's ``install`` phase.

        Install failures propagate: a plugin that cannot install leaves the
        document in a state later plugins were not written for.
        """
        for plugin in self._plugins:
            logger.debug("Installing plugin '%s'", plugin.name)
            plugin.install(ctx)

    async def run_all(self, ctx: RunContext) -> RunReport:
        """Run the whole pipeline over ``ctx.document``.

        Sequence:

        1. :meth:`install_all`.
        2. Publish :attr:`Topic.START_ALL` with the configuration.
        3. Run each plugin, awaiting awaitable results. A plugin that
           raises is logged and reported as :attr:`Topic.ERROR`; the
           remaining plugins still run.
        4. Publish :attr:`Topic.PLUGINS_DONE`, then :attr:`Topic.END_ALL`,
           with the (possibly replaced) configuration.

        Returns:
            A :class:`RunReport` listing completed and failed plugins.
        """
        report = RunReport()
        self.install_all(ctx)
        ctx.hub.pub(Topic.START_ALL, ctx.config)

        for plugin in self._plugins:
            logger.debug("Running plugin '%s'", plugin.name)
            try:
                result = plugin.run(ctx)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.error("Plugin '%s' failed: %s", plugin.name, exc, exc_info=True)
                ctx.hub.pub(Topic.ERROR, f"Plugin '{plugin.name}' failed: {exc}", exc)
                report.failed[plugin.name] = exc
            else:
                report.completed.append(plugin.name)

        ctx.hub.pub(Topic.PLUGINS_DONE, ctx.config)
        ctx.hub.pub(Topic.END_ALL, ctx.config)
        return report
