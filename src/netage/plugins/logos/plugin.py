"""Render the configured logos into the document header.

Each :class:`~netage.models.LogoDescriptor` becomes an ``<img>``, wrapped
in ``<a class="logo">`` when the descriptor has a ``url``. Logos are placed
at the start of ``div.head``, in configuration order. A missing
``div.head`` is created as the first child of ``<body>``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from netage.document import ensure_structure
from netage.models import LogoDescriptor
from netage.plugins.base import Plugin

if TYPE_CHECKING:
    from netage.plugins.runner import RunContext


def render_logo(soup: BeautifulSoup, logo: LogoDescriptor) -> Tag:
    img = soup.new_tag("img", src=logo.src, alt=logo.alt)
    if logo.height is not None:
        img["height"] = str(logo.height)
    if logo.width is not None:
        img["width"] = str(logo.width)
    if not logo.url:
        return img
    anchor = soup.new_tag("a", href=logo.url)
    anchor["class"] = ["logo"]
    anchor.append(img)
    return anchor


def _header(soup: BeautifulSoup) -> Tag:
    head = soup.body.find("div", class_="head")
    if head is None:
        head = soup.new_tag("div")
        head["class"] = ["head"]
        soup.body.insert(0, head)
    return head


class LogosPlugin(Plugin):
    """Insert the configured logos at the top of ``div.head``."""

    @property
    def name(self) -> str:
        return "netage/logos"

    @property
    def description(self) -> str:
        return "Render header logos"

    def run(self, ctx: RunContext) -> None:
        logos = ctx.config.logos
        if not logos:
            return
        soup = ctx.document
        ensure_structure(soup)
        header = _header(soup)
        for index, logo in enumerate(logos):
            header.insert(index, render_logo(soup, logo))
