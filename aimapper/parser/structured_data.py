"""JSON-LD and microdata collection."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

from aimapper.logging import get_logger

logger = get_logger(__name__)

ARTICLE_TYPES = ("article", "newsarticle", "blogposting", "howto", "faqpage", "webpage")
ENTITY_RELATION_KEYS = frozenset({"sameAs", "mentions", "knowsAbout", "subjectOf"})
AUTHOR_KEYS = frozenset({"author", "creator"})


@dataclass
class StructuredData:
    """Everything the extractor needs to know about embedded schema markup.

    Attributes:
        types: Schema types in discovery order, JSON-LD before microdata
        has_article_schema: An article-like type is present
        has_faq_schema: A FAQPage type is present
        has_breadcrumb: BreadcrumbList type or an aria-label="breadcrumb" element
        has_entity_relations: sameAs/mentions/knowsAbout/subjectOf anywhere
        has_author: author/creator key or itemprop="author"
        has_image_citation: image.author key or caption/credit markup
        date_modified: First dateModified value found, unparsed
        valid_blocks: JSON-LD blocks that parsed
        invalid_blocks: JSON-LD blocks that failed to parse
    """
    types: list[str] = field(default_factory=list)
    has_article_schema: bool = False
    has_faq_schema: bool = False
    has_breadcrumb: bool = False
    has_entity_relations: bool = False
    has_author: bool = False
    has_image_citation: bool = False
    date_modified: str | None = None
    valid_blocks: int = 0
    invalid_blocks: int = 0


@dataclass
class _Walk:
    types: list[str] = field(default_factory=list)
    relations: bool = False
    author: bool = False
    image_author: bool = False
    date_modified: str | None = None

    def add_type(self, value: Any) -> None:
        if isinstance(value, str) and value and value not in self.types:
            self.types.append(value)


def _walk(root: Any, state: _Walk) -> None:
    """Visit nested JSON-LD objects and arrays at any depth.

    Uses an explicit stack so deeply nested payloads cannot exhaust the
    interpreter's recursion limit. Each dict entry is checked just before
    its value is visited, which keeps discovery order depth-first.
    """
    stack: list[tuple[str | None, Any]] = [(None, root)]
    while stack:
        key, node = stack.pop()
        if key is not None:
            _check_key(key, node, state)

        if isinstance(node, list):
            stack.extend((None, item) for item in reversed(node))
            continue
        if not isinstance(node, dict):
            continue

        type_value = node.get("@type")
        if isinstance(type_value, list):
            for value in type_value:
                state.add_type(value)
        else:
            state.add_type(type_value)

        stack.extend(reversed(list(node.items())))


def _check_key(key: Any, value: Any, state: _Walk) -> None:
    if key in ENTITY_RELATION_KEYS:
        state.relations = True
    if key in AUTHOR_KEYS and value:
        state.author = True
    if key == "image" and _has_image_author(value):
        state.image_author = True
    if key == "dateModified" and state.date_modified is None and isinstance(value, str):
        state.date_modified = value.strip()


def _has_image_author(value: Any) -> bool:
    items = value if isinstance(value, list) else [value]
    return any(isinstance(item, dict) and bool(item.get("author")) for item in items)


def _itemprop_values(soup: BeautifulSoup) -> set[str]:
    values: set[str] = set()
    for node in soup.find_all(attrs={"itemprop": True}):
        values.update(node.get("itemprop", "").split())
    return values


def _microdata_types(soup: BeautifulSoup) -> list[str]:
    found = []
    for node in soup.find_all(attrs={"itemtype": True}):
        for itemtype in node.get("itemtype", "").split():
            name = itemtype.rstrip("/").rsplit("/", 1)[-1]
            if name:
                found.append(name)
    return found


def _has_caption_markup(soup: BeautifulSoup) -> bool:
    if soup.find("figcaption"):
        return True
    return soup.find(class_=lambda value: value and ("byline" in value.lower() or "credit" in value.lower())) is not None


def collect_structured_data(soup: BeautifulSoup) -> StructuredData:
    """Collect schema types and schema-derived hints from a parsed document.

    Malformed JSON-LD blocks are skipped and counted in ``invalid_blocks``.
    """
    state = _Walk()
    valid = 0
    invalid = 0

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.get_text().strip()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError is a ValueError, as are oversized integer literals
            invalid += 1
            logger.debug("json_ld_parse_error", error=str(e))
            continue
        valid += 1
        _walk(data, state)

    for name in _microdata_types(soup):
        state.add_type(name)

    itemprops = _itemprop_values(soup)
    lowered = [t.lower() for t in state.types]

    date_modified = state.date_modified
    if date_modified is None:
        meta = soup.find("meta", attrs={"property": "article:modified_time"})
        if meta and meta.get("content"):
            date_modified = meta["content"].strip()
    if date_modified is None:
        node = soup.find(attrs={"itemprop": "dateModified"})
        if node is not None:
            date_modified = (node.get("content") or node.get("datetime") or node.get_text()).strip() or None

    return StructuredData(
        types=state.types,
        has_article_schema=any(key in t for t in lowered for key in ARTICLE_TYPES),
        has_faq_schema="faqpage" in lowered,
        has_breadcrumb=(
            any("breadcrumblist" in t for t in lowered)
            or soup.find(attrs={"aria-label": lambda v: v and v.lower() == "breadcrumb"}) is not None
        ),
        has_entity_relations=state.relations or bool(itemprops & ENTITY_RELATION_KEYS),
        has_author=state.author or "author" in itemprops,
        has_image_citation=state.image_author or _has_caption_markup(soup),
        date_modified=date_modified,
        valid_blocks=valid,
        invalid_blocks=invalid,
    )
