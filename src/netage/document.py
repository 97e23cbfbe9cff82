"""Load, parse and mutate HTML specification documents.

The document tree is a :class:`bs4.BeautifulSoup` object built with the
standard-library ``html.parser`` backend. That parser does not synthesise
missing ``<html>``, ``<head>`` or ``<body>`` elements, so
:func:`parse_document` adds them: every plugin may rely on
``soup.head`` and ``soup.body`` being present.

Sources are loaded by :func:`load_source` from a local path, ``-`` for
stdin, or an ``http(s)`` URL fetched with :mod:`httpx`. The URL (or a
``file://`` URL for local paths) becomes the run's *location*, whose
fragment drives the style plugin's navigation fixup.

The remaining helpers build the elements plugins insert: resource hints,
stylesheet links, and ``key=value`` attribute strings.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Iterable, Optional, Union
from urllib.parse import urlsplit

import httpx
from bs4 import BeautifulSoup, Doctype, Tag

from netage.exceptions import DocumentError

HEADING_TAGS = ["h2", "h3", "h4", "h5", "h6"]
"""Heading levels that can title a section, in rank order."""

REMOVE_ON_SAVE = "removeOnSave"
"""Class marking elements that exist only while processing."""


# --- Loading ---


def load_source(source: str, timeout: float = 30.0) -> tuple[str, Optional[str]]:
    """Read an HTML document from a URL, file path, or stdin (``-``).

    Args:
        source: An ``http(s)`` URL, a file path, or ``-``.
        timeout: Request timeout in seconds for URL sources.

    Returns:
        A ``(html, location)`` tuple. *location* is the URL the document was
        fetched from, a ``file://`` URL for local files, or ``None`` for
        stdin.

    Raises:
        DocumentError: If the source cannot be read.
    """
    if source == "-":
        try:
            return sys.stdin.read(), None
        except OSError as exc:
            raise DocumentError(f"Failed to read from stdin: {exc}") from exc

    if source.startswith(("http://", "https://")):
        try:
            response = httpx.get(source, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DocumentError(
                f"HTTP {exc.response.status_code} fetching document from {source}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DocumentError(f"Failed to fetch document from {source}: {exc}") from exc
        return response.text, source

    # Keep a fragment written after a local path ("draft.html#intro").
    path_part, _, fragment = source.partition("#")
    path = Path(path_part).expanduser()
    if not path.is_file():
        raise DocumentError(f"Document not found: {path}")
    try:
        html = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentError(f"Cannot read document {path}: {exc}") from exc
    location = path.resolve().as_uri()
    if fragment:
        location = f"{location}#{fragment}"
    return html, location


# --- Parsing and serialisation ---


def parse_document(html: str) -> BeautifulSoup:
    """Parse *html* and guarantee ``<html>``, ``<head>`` and ``<body>`` exist.

    Content found outside ``<html>`` is moved into ``<body>``.
    """
    soup = BeautifulSoup(html, "html.parser")
    ensure_structure(soup)
    return soup


def ensure_structure(soup: BeautifulSoup) -> None:
    """Create any missing ``<html>``, ``<head>`` or ``<body>`` element in place."""
    root = soup.find("html")
    if root is None:
        root = soup.new_tag("html")
        for node in [n for n in soup.contents if not _is_doctype(n)]:
            root.append(node.extract())
        soup.append(root)

    # Empty tags are falsy, so compare against None explicitly.
    head = soup.find("head")
    if head is None:
        head = soup.new_tag("head")
        root.insert(0, head)

    body = soup.find("body")
    if body is None:
        body = soup.new_tag("body")
        for node in list(root.contents):
            if node is head or (isinstance(node, Tag) and node.name in ("head", "body")):
                continue
            body.append(node.extract())
        root.append(body)


def serialize(soup: BeautifulSoup) -> str:
    """Return the document as an HTML string."""
    return str(soup)


def _is_doctype(node: Any) -> bool:
    return isinstance(node, Doctype)


# --- Element helpers ---


def element_children(tag: Tag) -> list[Tag]:
    """Return the element children of *tag*, skipping text and comments."""
    return [child for child in tag.children if isinstance(child, Tag)]


def first_heading(section: Tag) -> Optional[Tag]:
    """Return the first ``h2``-``h6`` descendant of *section* in document order."""
    return section.find(HEADING_TAGS)


def describe(tag: Tag) -> str:
    """Short CSS-like description of *tag* for diagnostics (``section#intro``)."""
    text = tag.name
    if tag.get("id"):
        text += f"#{tag['id']}"
    classes = tag.get("class") or []
    if classes:
        text += "".join(f".{cls}" for cls in classes)
    return text


def to_key_value_pairs(
    mapping: dict[str, Any], delimiter: str = ", ", separator: str = "="
) -> str:
    """Join *mapping* as ``key=value`` pairs (``width=device-width, initial-scale=1``)."""
    return delimiter.join(f"{key}{separator}{value}" for key, value in mapping.items())


def create_resource_hint(
    soup: BeautifulSoup,
    hint: str,
    href: str,
    as_: Optional[str] = None,
    cors_mode: Optional[str] = None,
    dont_remove: bool = False,
) -> Tag:
    """Build a ``<link>`` resource hint.

    ``dns-prefetch`` and ``preconnect`` hints point at the origin of *href*
    and are marked ``crossorigin``. ``preload`` hints carry the ``as``
    destination. Unless *dont_remove* is set, the hint is marked
    ``removeOnSave`` so it disappears from exported documents.

    Raises:
        ValueError: If *hint* or *href* is empty.
    """
    if not hint:
        raise ValueError("A resource hint type is required")
    if not href:
        raise ValueError("A resource hint href is required")

    link = soup.new_tag("link", rel=hint)
    if hint in ("dns-prefetch", "preconnect"):
        parts = urlsplit(href)
        href = f"{parts.scheme}://{parts.netloc}" if parts.netloc else href
        link["crossorigin"] = cors_mode or "anonymous"
    elif hint == "preload" and as_:
        link["as"] = as_
    link["href"] = href
    if not dont_remove:
        link["class"] = [REMOVE_ON_SAVE]
    return link


def link_css(soup: BeautifulSoup, urls: Union[str, Iterable[str]]) -> list[Tag]:
    """Append a stylesheet ``<link>`` to the head for each URL and return them."""
    if isinstance(urls, str):
        urls = [urls]
    links = []
    for url in urls:
        link = soup.new_tag("link", rel="stylesheet", href=url)
        soup.head.append(link)
        links.append(link)
    return links
