"""Netage style plugin.

Links the stylesheet matching the document's ``specStatus``, injects
resource hints and the viewport declaration, and schedules the navigation
fixup script.

See Also:
    :class:`~netage.plugins.style.plugin.StylePlugin`
"""

from netage.plugins.style.plugin import StylePlugin, StyleState, resolve_stylesheet

__all__ = ["StylePlugin", "StyleState", "resolve_stylesheet"]
