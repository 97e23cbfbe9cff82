"""Baked-in configuration defaults and the merge that applies them.

:func:`merge_defaults` overlays a chain of mappings, later ones winning on
key collisions, with two special cases:

* ``lint`` is merged key by key across all layers instead of being
  replaced wholesale, unless the last layer sets ``lint`` to ``False``, which
  disables linting regardless of the other layers.
* A missing ``specStatus`` is filled with :data:`DEFAULT_SPEC_STATUS` and a
  warning is published on the hub.

The default mappings are module-level constants shared by every run, so
their values are deep-copied into the result and never mutated.

Example::

    >>> merge_defaults({"lint": {"a": True}}, {"lint": {"b": False}})["lint"]
    {'a': True, 'b': False}
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Optional

from netage.models import SpecStatus
from netage.pubsub import PubSubHub, Topic

logger = logging.getLogger(__name__)

DEFAULT_SPEC_STATUS = SpecStatus.NETAGE_BASIC.value
"""Status substituted when a document does not declare one."""

UNOFFICIAL_STATUS = "unofficial"
"""Status for which the Netage layer of defaults is skipped."""

CORE_DEFAULTS: dict[str, Any] = {
    "lint": {
        "no-headingless-sections": True,
        "local-refs-exist": True,
        "privsec-section": False,
    },
    "pluralize": False,
    "addSectionLinks": True,
}
"""Defaults shared by every profile."""

NETAGE_DEFAULTS: dict[str, Any] = {
    "lint": {
        "privsec-section": True,
    },
    "pluralize": True,
    "doJsonLd": False,
    "license": "w3c-software-doc",
    "logos": [
        {
            "src": "https://docs.netage.nl/respec_resources/logo.png",
            "alt": "Netage",
            "height": 160,
            "width": 258,
            "url": "https://www.netage.nl/",
        },
    ],
    "xref": True,
    "prependW3C": False,
}
"""Defaults specific to the Netage publishing house."""


def missing_spec_status_message() -> str:
    return f"`specStatus` missing. Defaulting to '{DEFAULT_SPEC_STATUS}'."


def merge_defaults(
    *layers: Optional[Mapping[str, Any]],
    hub: Optional[PubSubHub] = None,
) -> dict[str, Any]:
    """Merge configuration *layers*, lowest precedence first.

    Typically called as ``merge_defaults(CORE_DEFAULTS, NETAGE_DEFAULTS,
    user_config, hub=hub)``. ``None`` layers are skipped.

    Args:
        *layers: Mappings from option name to value. The last one is the
            user's configuration.
        hub: Hub on which to publish the missing-``specStatus`` warning.

    Returns:
        A new dict holding the effective configuration. Keys the layers do
        not recognise pass through unchanged.
    """
    present = [layer for layer in layers if layer is not None]
    merged: dict[str, Any] = {}
    for layer in present:
        for key, value in layer.items():
            merged[key] = copy.deepcopy(value)

    user_lint = present[-1].get("lint") if present else None
    if user_lint is False:
        merged["lint"] = False
    else:
        lint: dict[str, bool] = {}
        for layer in present:
            layer_lint = layer.get("lint")
            if isinstance(layer_lint, Mapping):
                lint.update(layer_lint)
        merged["lint"] = lint

    if not merged.get("specStatus"):
        merged["specStatus"] = DEFAULT_SPEC_STATUS
        message = missing_spec_status_message()
        logger.debug(message)
        if hub is not None:
            hub.pub(Topic.WARN, message)

    return merged
