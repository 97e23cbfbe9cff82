"""Netage style plugin.

This module provides :class:`StylePlugin`, which attaches the Netage
stylesheet matching the document's specification status.

Install phase (before any plugin runs):

* ``<meta name="viewport">`` becomes the first element of ``<head>`` unless
  the document already declares one.
* Resource hints for the Netage origin, the fixup script, the base
  stylesheet and the logo follow it, then a best-effort link to the base
  stylesheet. Hints and the base stylesheet are marked ``removeOnSave``.

Run phase:

* ``specStatus`` is resolved case-insensitively by
  :func:`resolve_stylesheet`; unknown codes use the ``NETAGE-BASIC``
  stylesheet and a missing code is set to ``NETAGE-BASIC`` with a warning.
* A missing ``<head>`` or ``<body>`` is created first, as
  :func:`~netage.document.ensure_structure` does for parsed documents.
* The stylesheet is linked in ``<head>`` and, on ``beforesave``, moved to
  the end of the exported document's ``<head>``.
* Unless ``noToc`` is set, the fixup script is appended to ``<body>`` once,
  on ``end-all``. When the document location has a fragment the script
  re-navigates to it after loading.

Missing optional elements are never an error.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from netage.defaults import DEFAULT_SPEC_STATUS, missing_spec_status_message
from netage.document import (
    REMOVE_ON_SAVE,
    create_resource_hint,
    ensure_structure,
    link_css,
    to_key_value_pairs,
)
from netage.models import SpecStatus
from netage.plugins.base import Plugin
from netage.pubsub import Topic

if TYPE_CHECKING:
    from netage.plugins.runner import RunContext

logger = logging.getLogger(__name__)

STYLESHEET_BASE_URL = "https://netage.github.io/respec_resources/styles/"
FIXUP_SCRIPT_URL = "https://www.w3.org/scripts/TR/2016/fixup.js"
BASE_STYLESHEET_URL = "https://www.w3.org/StyleSheets/TR/2016/base.css"
NETAGE_ORIGIN = "https://www.netage.nl"
LOGO_URL = "https://cloudbox.netage.nl/f/53b55b7650994d1f8528/?dl=1"

VIEWPORT_CONTENT = {
    "width": "device-width",
    "initial-scale": "1",
    "shrink-to-fit": "no",
}

RESOURCE_HINTS = (
    {"hint": "preconnect", "href": NETAGE_ORIGIN},
    {"hint": "preload", "href": FIXUP_SCRIPT_URL, "as_": "script"},
    {"hint": "preload", "href": BASE_STYLESHEET_URL, "as_": "style"},
    {"hint": "preload", "href": LOGO_URL, "as_": "image"},
)


class StyleState(str, enum.Enum):
    """Progress of a :class:`StylePlugin` through one run."""

    UNINITIALIZED = "uninitialized"
    HINTS_INJECTED = "hints-injected"
    STYLE_LINKED = "style-linked"
    FIXUP_SCHEDULED = "fixup-scheduled"
    EXPORT_FINALIZED = "export-finalized"


def resolve_stylesheet(spec_status: Optional[str]) -> str:
    """Return the stylesheet URL for *spec_status*.

    Matching ignores case. Unknown or empty codes map to the
    ``NETAGE-BASIC`` stylesheet.

    Example::

        >>> resolve_stylesheet("netage-cv")
        'https://netage.github.io/respec_resources/styles/NETAGE-CV.css'
    """
    code = (spec_status or "").strip().upper()
    try:
        status = SpecStatus(code)
    except ValueError:
        status = SpecStatus.NETAGE_BASIC
    return f"{STYLESHEET_BASE_URL}{status.value}.css"


def create_meta_viewport(soup: BeautifulSoup) -> Tag:
    content = to_key_value_pairs(VIEWPORT_CONTENT).replace('"', "")
    return soup.new_tag("meta", attrs={"name": "viewport", "content": content})


def create_base_style(soup: BeautifulSoup) -> Tag:
    link = soup.new_tag("link", rel="stylesheet", href=BASE_STYLESHEET_URL)
    link["class"] = [REMOVE_ON_SAVE]
    return link


def create_fixup_script(soup: BeautifulSoup, location: Optional[str]) -> Tag:
    script = soup.new_tag("script", src=FIXUP_SCRIPT_URL)
    fragment = urlsplit(location).fragment if location else ""
    if fragment:
        script["onload"] = f"window.location.href = {json.dumps('#' + fragment)}"
    return script


class StylePlugin(Plugin):
    """Link the Netage stylesheet selected by ``specStatus``.

    Attributes:
        state: Current :class:`StyleState`.
        stylesheet_url: The stylesheet linked by :meth:`run`, if any.
    """

    def __init__(self) -> None:
        self.state = StyleState.UNINITIALIZED
        self.stylesheet_url: Optional[str] = None

    @property
    def name(self) -> str:
        return "netage/style"

    @property
    def description(self) -> str:
        return "Link the Netage stylesheet for the document's specStatus"

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install(self, ctx: RunContext) -> None:
        soup = ctx.document
        ensure_structure(soup)
        head = soup.head
        elements = [create_resource_hint(soup, **hint) for hint in RESOURCE_HINTS]
        elements.append(create_base_style(soup))
        if head.find("meta", attrs={"name": "viewport"}) is None:
            elements.insert(0, create_meta_viewport(soup))
        for index, element in enumerate(elements):
            head.insert(index, element)
        self.state = StyleState.HINTS_INJECTED

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, ctx: RunContext) -> None:
        ensure_structure(ctx.document)
        if not ctx.config.spec_status:
            ctx.config.spec_status = DEFAULT_SPEC_STATUS
            ctx.hub.pub(Topic.WARN, missing_spec_status_message())

        self.stylesheet_url = resolve_stylesheet(ctx.config.spec_status)
        logger.debug("Using stylesheet %s", self.stylesheet_url)
        link_css(ctx.document, self.stylesheet_url)
        ctx.hub.sub(Topic.BEFORE_SAVE, self._move_stylesheet)
        self.state = StyleState.STYLE_LINKED

        if not ctx.config.no_toc:
            document, location = ctx.document, ctx.location

            def attach_fixup(*_: object) -> None:
                document.body.append(create_fixup_script(document, location))

            ctx.hub.sub(Topic.END_ALL, attach_fixup, once=True)
            self.state = StyleState.FIXUP_SCHEDULED

    def _move_stylesheet(self, export_doc: BeautifulSoup) -> None:
        head = export_doc.head
        if head is None or self.stylesheet_url is None:
            return
        link = head.find("link", href=self.stylesheet_url)
        if link is None:
            return
        head.append(link.extract())
        self.state = StyleState.EXPORT_FINALIZED
