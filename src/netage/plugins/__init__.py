"""Plugin system for netage -- the contract, the runner, and name resolution.

Every transformation of a document is a plugin. A profile lists plugin
names in order; :class:`PluginManager` turns the names into instances and
:class:`PluginRunner` installs and runs them over a :class:`RunContext`.

Key classes:

* :class:`Plugin` -- Abstract base class that all plugins must extend.
* :class:`PluginManager` -- Resolves built-in and entry-point plugins.
* :class:`PluginRunner` -- Sequences the install and run phases.
* :class:`RunContext` -- Document, configuration, hub and linter of a run.

Example:
    Running a profile by hand::

        from netage.plugins import PluginManager, RunContext

        manager = PluginManager()
        runner = manager.get_runner(profile)
        ctx = RunContext(document=soup)
        asyncio.run(runner.run_all(ctx))
"""

from netage.plugins.base import Plugin
from netage.plugins.runner import PluginRunner, RunContext, RunReport
from netage.plugins.manager import BUILTIN_PLUGINS, PluginManager

__all__ = [
    "BUILTIN_PLUGINS",
    "Plugin",
    "PluginManager",
    "PluginRunner",
    "RunContext",
    "RunReport",
]
