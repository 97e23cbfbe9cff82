"""Annotate informative sections.

:class:`InformativePlugin` inserts the paragraph
``<p><em>This section is non-normative.</em></p>`` right after the first
``h2``-``h6`` heading of every ``section.informative``. Sections without a
heading are left alone.

The plugin is not idempotent: running it twice on one document annotates
every section twice.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from netage.document import first_heading
from netage.plugins.base import Plugin

if TYPE_CHECKING:
    from netage.plugins.runner import RunContext

logger = logging.getLogger(__name__)

NON_NORMATIVE_TEXT = "This section is non-normative."


def build_annotation(soup: BeautifulSoup) -> Tag:
    para = soup.new_tag("p")
    emphasis = soup.new_tag("em")
    emphasis.string = NON_NORMATIVE_TEXT
    para.append(emphasis)
    return para


class InformativePlugin(Plugin):
    """Mark ``section.informative`` elements as non-normative."""

    @property
    def name(self) -> str:
        return "netage/informative"

    @property
    def description(self) -> str:
        return "Annotate informative sections as non-normative"

    def run(self, ctx: RunContext) -> None:
        soup = ctx.document
        annotated = 0
        for section in soup.select("section.informative"):
            heading = first_heading(section)
            if heading is None:
                continue
            heading.insert_after(build_annotation(soup))
            annotated += 1
        logger.debug("Annotated %d informative section(s)", annotated)
