"""Canonical Pydantic models shared across all netage modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Tool configuration models** -- serialised as JSON or YAML in the user's
config directory or shipped with the package:
    :class:`OutputConfig`, :class:`PluginsConfig`, :class:`GlobalConfig`,
    and :class:`Profile`.

**Document models** -- built for every document-processing run:
    :class:`SpecStatus`, :class:`LogoDescriptor`, :class:`DocumentConfig`,
    and :class:`LintWarning`.

All models use Pydantic v2. :class:`DocumentConfig` uses ``extra="allow"``
so that keys the Netage profile does not recognise pass through unchanged
and remain readable by third-party plugins via ``model_extra``.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Tool config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class PluginsConfig(BaseModel):
    """Explicit plugin allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/netage/config.json``.

    Loaded and saved by :func:`~netage.config.load_global_config` and
    :func:`~netage.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~netage.config.resolve_config`
    for the full precedence chain.
    """

    default_profile: Optional[str] = None
    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)


class Profile(BaseModel):
    """A named, ordered plugin pipeline stored as YAML.

    The packaged ``netage`` profile lives in ``netage/profiles/netage.yaml``;
    users can add their own under the ``profiles/`` config directory. The
    order of :attr:`plugins` is significant: plugins are installed and run
    strictly in that order, and the linter must come last.

    Example::

        Profile(
            name="netage",
            plugins=["netage/defaults", "netage/style", "netage/linter"],
        )
    """

    name: str
    description: str = ""
    plugins: list[str] = Field(
        default_factory=list, description="Plugin names in execution order"
    )


# --- Document models ---


class SpecStatus(str, enum.Enum):
    """Specification status codes recognised by the Netage style plugin.

    Each code selects one stylesheet. Matching is case-insensitive; any
    other value falls back to :attr:`NETAGE_BASIC`.
    """

    NETAGE_BASIC = "NETAGE-BASIC"
    NETAGE_CV = "NETAGE-CV"
    NETAGE_LD = "NETAGE-LD"
    NETAGE_FINAL = "NETAGE-FINAL"


class LogoDescriptor(BaseModel):
    """A logo shown in the document header.

    Frozen: descriptors that are part of the baked-in defaults must never
    be modified by a run.
    """

    model_config = ConfigDict(frozen=True)

    src: str
    alt: str = ""
    height: Optional[int] = None
    width: Optional[int] = None
    url: str = ""


class DocumentConfig(BaseModel):
    """Effective configuration for one document-processing run.

    Keys use the camelCase names authors write in their configuration
    (``specStatus``, ``noToc`` ...) and are exposed as snake_case
    attributes. Unknown keys are preserved in ``model_extra``.

    ``lint`` is either a mapping of rule name to enabled flag or ``False``
    to disable linting entirely.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    spec_status: Optional[str] = Field(default=None, alias="specStatus")
    lint: Union[bool, dict[str, bool]] = Field(default_factory=dict)
    pluralize: bool = False
    license: Optional[str] = None
    logos: list[LogoDescriptor] = Field(default_factory=list)
    xref: bool = False
    no_toc: bool = Field(default=False, alias="noToc")
    do_json_ld: bool = Field(default=False, alias="doJsonLd")
    prepend_w3c: bool = Field(default=False, alias="prependW3C")
    add_section_links: bool = Field(default=True, alias="addSectionLinks")

    def to_mapping(self, exclude_unset: bool = False) -> dict[str, Any]:
        """Return the configuration as a camelCase mapping, extras included."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset)

    def enabled_rules(self) -> set[str]:
        """Names of the lint rules switched on for this run."""
        if not isinstance(self.lint, dict):
            return set()
        return {name for name, enabled in self.lint.items() if enabled}


class LintWarning(BaseModel):
    """A single finding reported by a lint rule."""

    rule: str
    message: str
    hint: str = ""
    elements: list[str] = Field(
        default_factory=list, description="Short descriptions of offending elements"
    )

    def __str__(self) -> str:
        return f"[{self.rule}] {self.message}"
