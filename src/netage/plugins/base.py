"""Abstract base class for netage plugins.

Every plugin must subclass :class:`Plugin` and implement the :attr:`name`
property. The two phases, :meth:`install` and :meth:`run`, are optional --
default implementations are no-ops so plugins only override what they need.

Built-in plugins are listed in :data:`~netage.plugins.manager.BUILTIN_PLUGINS`;
third-party packages register theirs as entry points in the
``netage.plugins`` group. Both are resolved by
:class:`~netage.plugins.manager.PluginManager`.

Example:
    Minimal plugin implementation::

        class Stamp(Plugin):
            @property
            def name(self) -> str:
                return "acme/stamp"

            def run(self, ctx):
                ctx.document.body.append(ctx.document.new_tag("hr"))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Optional

if TYPE_CHECKING:
    from netage.plugins.runner import RunContext


class Plugin(ABC):
    """Base class for all netage plugins.

    Subclasses must implement the :attr:`name` property. Both phase methods
    have default no-op implementations.

    The plugin lifecycle within one document-processing run is:

    1. Instantiation -- the :class:`PluginManager` calls the no-arg constructor.
    2. :meth:`install` -- called for every plugin, in profile order, before
       any plugin runs. Side effects that must precede every other plugin's
       mutations (and lint rule registration) belong here.
    3. :meth:`run` -- called once, in profile order, after the previous
       plugin's run has completed.

    A plugin instance serves a single run. Running the same instance twice
    on one document is not supported: several plugins are not idempotent.

    See Also:
        :class:`~netage.plugins.runner.PluginRunner` for how the phases are
        sequenced.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique plugin name used in profiles and logging.

        Returns:
            A namespaced identifier (e.g. ``"netage/style"``).
        """
        ...

    @property
    def version(self) -> str:
        """Return the plugin version string. Defaults to ``"0.1.0"``."""
        return "0.1.0"

    @property
    def description(self) -> str:
        """Return a brief description of what the plugin does."""
        return ""

    def install(self, ctx: RunContext) -> None:
        """Pre-run phase, invoked before any plugin's :meth:`run`.

        Args:
            ctx: The run context shared by all plugins.
        """

    def run(self, ctx: RunContext) -> Optional[Awaitable[Any]]:
        """Main phase. May return an awaitable, which the runner awaits.

        The return value is otherwise ignored; raising marks the plugin as
        failed.

        Args:
            ctx: The run context shared by all plugins.
        """
        return None
