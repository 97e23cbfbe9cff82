"""Header logos plugin.

See Also:
    :class:`~netage.plugins.logos.plugin.LogosPlugin`
"""

from netage.plugins.logos.plugin import LogosPlugin

__all__ = ["LogosPlugin"]
