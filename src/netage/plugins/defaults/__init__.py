"""Configuration defaults plugin.

Replaces the run's configuration with the user's settings merged over the
core and Netage defaults, and registers the ``privsec-section`` lint rule.

See Also:
    :class:`~netage.plugins.defaults.plugin.DefaultsPlugin`
    :func:`netage.defaults.merge_defaults` for the merge rules.
"""

from netage.plugins.defaults.plugin import DefaultsPlugin

__all__ = ["DefaultsPlugin"]
