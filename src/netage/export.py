"""Produce the publishable HTML of a processed document.

:func:`export_document` never touches the live document. It works on a
copy, from which processing-only elements (class ``removeOnSave`` and the
embedded configuration script) are removed. Subscribers to ``beforesave``
then get the copy to finalize it; the style plugin uses this to move its
stylesheet to the end of ``<head>``. Finally the viewport declaration is
moved back to the top of ``<head>``, where browsers expect it.
"""

from __future__ import annotations

import copy
import logging

from bs4 import BeautifulSoup

from netage.config import EMBEDDED_CONFIG_CLASS
from netage.document import REMOVE_ON_SAVE, ensure_structure, serialize
from netage.plugins.runner import RunContext
from netage.pubsub import Topic

logger = logging.getLogger(__name__)


def prepare_export(ctx: RunContext) -> BeautifulSoup:
    """Return the cleaned, finalized copy of ``ctx.document``."""
    export_doc = copy.copy(ctx.document)
    ensure_structure(export_doc)

    removed = 0
    for element in export_doc.find_all(class_=REMOVE_ON_SAVE):
        element.decompose()
        removed += 1
    for script in export_doc.find_all("script", class_=EMBEDDED_CONFIG_CLASS):
        script.decompose()
    logger.debug("Removed %d processing-only element(s)", removed)

    ctx.hub.pub(Topic.BEFORE_SAVE, export_doc)

    viewport = export_doc.head.find("meta", attrs={"name": "viewport"})
    if viewport is not None:
        export_doc.head.insert(0, viewport.extract())
    return export_doc


def export_document(ctx: RunContext) -> str:
    """Serialize the publishable version of ``ctx.document``."""
    return serialize(prepare_export(ctx))
