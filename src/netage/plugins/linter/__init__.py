"""Document linter plugin.

Registers the core lint rules and, as the last plugin of a profile,
publishes every finding as a ``warn`` event.

See Also:
    :class:`~netage.plugins.linter.plugin.LinterPlugin`
    :mod:`netage.linter` for the registry and the rules.
"""

from netage.plugins.linter.plugin import LinterPlugin

__all__ = ["LinterPlugin"]
