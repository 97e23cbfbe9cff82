"""Informative section annotation plugin."""

from netage.plugins.informative.plugin import InformativePlugin

__all__ = ["InformativePlugin"]
