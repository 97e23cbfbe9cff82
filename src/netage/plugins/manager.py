"""Plugin manager -- name resolution, filtering, and pipeline assembly.

This module contains :class:`PluginManager`, which maps the plugin names
used in profiles to plugin classes. Names come from two places:

* :data:`BUILTIN_PLUGINS` -- the plugins shipped with netage.
* The ``netage.plugins`` entry-point group, for third-party packages::

    [project.entry-points."netage.plugins"]
    "acme/stamp" = "acme_netage.stamp:StampPlugin"

The *enabled* and *disabled* lists in :class:`~netage.models.PluginsConfig`
filter what is available: *disabled* names are dropped from every pipeline,
and a non-empty *enabled* list restricts which entry points are loaded.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from netage.exceptions import PluginError
from netage.models import GlobalConfig, Profile
from netage.plugins.base import Plugin
from netage.plugins.defaults.plugin import DefaultsPlugin
from netage.plugins.informative.plugin import InformativePlugin
from netage.plugins.linter.plugin import LinterPlugin
from netage.plugins.logos.plugin import LogosPlugin
from netage.plugins.runner import PluginRunner
from netage.plugins.style.plugin import StylePlugin

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "netage.plugins"
"""The entry-point group name used for third-party plugin discovery."""

BUILTIN_PLUGINS: dict[str, type[Plugin]] = {
    "netage/defaults": DefaultsPlugin,
    "netage/style": StylePlugin,
    "netage/logos": LogosPlugin,
    "netage/informative": InformativePlugin,
    "netage/linter": LinterPlugin,
}
"""Plugins shipped with netage, keyed by the name used in profiles."""


class PluginManager:
    """Resolves plugin names and assembles pipelines for profiles.

    Plugin classes are registered once; every call to :meth:`create`
    returns a fresh instance, since an instance serves a single run.

    Example:
        Typical usage::

            manager = PluginManager()
            manager.discover(global_config)
            runner = manager.get_runner(profile)
    """

    def __init__(self, config: Optional[GlobalConfig] = None) -> None:
        self._config = config or GlobalConfig()
        self._classes: dict[str, type[Plugin]] = dict(BUILTIN_PLUGINS)
        self._discovered = False

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, config: Optional[GlobalConfig] = None) -> list[str]:
        """Register plugins advertised in the ``netage.plugins`` entry-point group.

        Built-in names cannot be shadowed by entry points. Entry points that
        fail to load are logged as warnings and skipped.

        Args:
            config: Replaces the configuration given to the constructor.

        Returns:
            The names registered from entry points.
        """
        if config is not None:
            self._config = config
        enabled_set = set(self._config.plugins.enabled)
        loaded_names: list[str] = []

        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            name = ep.name
            if name in BUILTIN_PLUGINS:
                logger.debug("Entry point '%s' shadows a built-in plugin, skipping", name)
                continue
            if enabled_set and name not in enabled_set:
                logger.debug("Plugin '%s' not in enabled list, skipping", name)
                continue
            try:
                plugin_cls = ep.load()
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", name, exc)
                continue
            self.register(name, plugin_cls)
            loaded_names.append(name)

        self._discovered = True
        return loaded_names

    def register(self, name: str, plugin_cls: type[Plugin]) -> None:
        """Make *plugin_cls* available under *name*.

        Raises:
            PluginError: If *name* is already registered to another class.
        """
        existing = self._classes.get(name)
        if existing is not None and existing is not plugin_cls:
            raise PluginError(f"Plugin '{name}' is already registered")
        self._classes[name] = plugin_cls
        logger.debug("Registered plugin '%s'", name)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def is_disabled(self, name: str) -> bool:
        return name in self._config.plugins.disabled

    def create(self, name: str) -> Plugin:
        """Instantiate the plugin registered under *name*.

        Raises:
            PluginError: If *name* is unknown or the plugin cannot be built.
        """
        if not self._discovered:
            self.discover()
        try:
            plugin_cls = self._classes[name]
        except KeyError:
            raise PluginError(f"Unknown plugin '{name}'") from None
        try:
            return plugin_cls()
        except Exception as exc:
            raise PluginError(f"Cannot create plugin '{name}': {exc}") from exc

    def validate(self, profile: Profile) -> list[str]:
        """Return the plugin names of *profile* that cannot be resolved."""
        if not self._discovered:
            self.discover()
        return [name for name in profile.plugins if name not in self._classes]

    def plugins_for(self, profile: Profile) -> list[Plugin]:
        """Build fresh plugin instances for *profile*, in profile order.

        Disabled plugins are left out.
        """
        plugins = []
        for name in profile.plugins:
            if self.is_disabled(name):
                logger.info("Plugin '%s' is disabled, skipping", name)
                continue
            plugins.append(self.create(name))
        return plugins

    def get_runner(self, profile: Profile) -> PluginRunner:
        return PluginRunner(self.plugins_for(profile))

    def list_plugins(self) -> list[dict[str, str]]:
        """List every registered plugin with its metadata.

        Returns:
            Dicts with ``"name"``, ``"version"``, ``"description"`` and
            ``"disabled"`` keys, in registration order.
        """
        if not self._discovered:
            self.discover()
        listing = []
        for name in self._classes:
            plugin = self.create(name)
            listing.append(
                {
                    "name": name,
                    "version": plugin.version,
                    "description": plugin.description,
                    "disabled": "yes" if self.is_disabled(name) else "no",
                }
            )
        return listing
