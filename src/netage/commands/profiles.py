"""Listing commands for profiles, plugins and lint rules."""

from __future__ import annotations

from netage.output import print_table


def profiles_command() -> None:
    """List the available profiles and their plugin pipelines."""
    from netage.config import list_profiles, load_profile

    rows = []
    for name in list_profiles():
        profile = load_profile(name)
        rows.append([profile.name, profile.description, ", ".join(profile.plugins)])
    print_table(["Name", "Description", "Plugins"], rows, title="Profiles")


def plugins_command() -> None:
    """List the registered plugins and the lint rules netage ships."""
    from netage.config import load_global_config
    from netage.linter import SHIPPED_RULES
    from netage.plugins.manager import PluginManager

    manager = PluginManager(load_global_config())
    plugins = manager.list_plugins()
    print_table(
        ["Name", "Version", "Description", "Disabled"],
        [[p["name"], p["version"], p["description"], p["disabled"]] for p in plugins],
        title="Plugins",
    )
    print_table(
        ["Rule", "Description"],
        [[rule.name, rule.description] for rule in SHIPPED_RULES],
        title="Lint rules",
    )
