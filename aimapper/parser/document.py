"""HTML document parsing.

Everything downstream queries the tree returned by :func:`parse_html`; the
helpers below are the only places that know about BeautifulSoup specifics
beyond ``select``/``find``/``get_text``.
"""
from __future__ import annotations

import html as html_lib
import re

from bs4 import BeautifulSoup

EMPTY_DOCUMENT = "<body></body>"

_HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_BLOCK_BREAK = re.compile(r"\n\s*\n")


def parse_html(html: str | None) -> BeautifulSoup:
    """Build a queryable tree from an HTML string, page or fragment.

    Empty input yields a minimal ``<body></body>`` document so callers never
    branch on "no document". lxml recovers from malformed markup.
    """
    return BeautifulSoup(html or EMPTY_DOCUMENT, "lxml")


def title_text(soup: BeautifulSoup) -> str:
    title = soup.find("title")
    return title.get_text().strip() if title else ""


def meta_content(soup: BeautifulSoup, name: str) -> str | None:
    """Return the ``content`` of ``<meta name=...>`` (case-insensitive name)."""
    meta = soup.find("meta", attrs={"name": lambda value: value and value.lower() == name})
    if meta is None:
        return None
    return meta.get("content")


def meta_property(soup: BeautifulSoup, prop: str) -> str | None:
    meta = soup.find("meta", attrs={"property": prop})
    return meta.get("content") if meta else None


def link_href(soup: BeautifulSoup, rel: str) -> str | None:
    """Return the ``href`` of the first ``<link>`` whose rel contains ``rel``."""
    link = soup.find("link", attrs={"rel": lambda val: val and rel in val})
    if link is None:
        return None
    return link.get("href")


def body_text(soup: BeautifulSoup) -> str:
    """Raw text content of ``<body>``. Script and style contents are not text."""
    body = soup.body
    if body is None:
        return soup.get_text()
    return body.get_text()


def headings(soup: BeautifulSoup) -> list[dict]:
    """All headings in document order as ``{"level": int, "text": str}``."""
    return [
        {"level": int(node.name[1]), "text": node.get_text().strip()}
        for node in soup.find_all(list(_HEADING_TAGS))
    ]


def text_to_html(text: str) -> str:
    """Wrap plain text in a minimal document, one ``<p>`` per blank-line block."""
    blocks = [block.strip() for block in _BLOCK_BREAK.split(text or "")]
    paragraphs = "".join(f"<p>{html_lib.escape(block)}</p>\n\n" for block in blocks if block)
    return f"<html><body>\n{paragraphs}</body></html>"
