"""Discovery of Google Photos images in a document."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator, List, Optional, Set, Tuple

from .config import DEFAULT_SIZE_GRAMMAR, DEFAULT_TARGET_RESOLUTION, ExtractorConfig
from .documents import ALL_ELEMENTS, DocumentSource
from .models import ImageRecord, SourceClass
from .urls import is_in_scope, markup_pattern, to_canonical

logger = logging.getLogger("gmaps_photos")

IMAGE_SELECTORS: Tuple[str, ...] = (
    'img[src*="googleusercontent.com/gps-cs/"]',
    'img[src*="lh3.googleusercontent.com/gps-cs/"]',
    'img[src*="lh4.googleusercontent.com/gps-cs/"]',
    'img[src*="lh5.googleusercontent.com/gps-cs/"]',
)
LAZY_LOAD_ATTRIBUTES: Tuple[str, ...] = ("data-src", "data-lazy-src", "data-original")
SNAPSHOT_ATTRIBUTES: Tuple[str, ...] = ("src", "alt") + LAZY_LOAD_ATTRIBUTES

DEFAULT_IMAGE_LABEL = "Google Photos image"
BACKGROUND_LABEL = "Google Photos background image"
MARKUP_LABEL = "Google Photos image (from page source)"

_CSS_URL = re.compile(r"url\(\s*['\"]?(.*?)['\"]?\s*\)")
_MARKUP_URL = markup_pattern()

# (source_url, label, origin, source_ref)
Candidate = Tuple[str, str, SourceClass, Optional[Any]]


def _image_attribute_candidates(document: DocumentSource) -> Iterator[Candidate]:
    for selector in IMAGE_SELECTORS:
        for node in document.query_selector_all(selector):
            src = document.read_attribute(node, "src")
            if not src:
                continue
            alt = (document.read_attribute(node, "alt") or "").strip()
            yield src, alt or DEFAULT_IMAGE_LABEL, SourceClass.ATTRIBUTE, node


def _data_attribute_candidates(document: DocumentSource) -> Iterator[Candidate]:
    for node in document.query_selector_all(ALL_ELEMENTS):
        for name in LAZY_LOAD_ATTRIBUTES:
            value = document.read_attribute(node, name)
            if value:
                label = f"{DEFAULT_IMAGE_LABEL} (from {name})"
                yield value, label, SourceClass.DATA_ATTRIBUTE, node


def parse_css_urls(value: Optional[str]) -> List[str]:
    """Return every ``url(...)`` argument in a CSS background value."""
    if not value or value.strip() == "none":
        return []
    return [match for match in _CSS_URL.findall(value) if match]


def _background_candidates(document: DocumentSource) -> Iterator[Candidate]:
    for node in document.query_selector_all(ALL_ELEMENTS):
        for url in parse_css_urls(document.read_computed_background(node)):
            yield url, BACKGROUND_LABEL, SourceClass.BACKGROUND, node


def _markup_candidates(document: DocumentSource) -> Iterator[Candidate]:
    for url in _MARKUP_URL.findall(document.raw_markup() or ""):
        yield url, MARKUP_LABEL, SourceClass.MARKUP, None


def scan(document: DocumentSource, config: Optional[ExtractorConfig] = None) -> List[ImageRecord]:
    """Collect deduplicated image records in discovery order.

    Image attributes are read first, then lazy-load data attributes, then
    computed backgrounds, and finally the raw markup. A canonical URL seen
    earlier always wins over later sightings.
    """
    target = config.target_resolution if config else DEFAULT_TARGET_RESOLUTION
    grammar = config.size_grammar if config else DEFAULT_SIZE_GRAMMAR

    records: List[ImageRecord] = []
    seen: Set[str] = set()
    sources = (
        _image_attribute_candidates,
        _data_attribute_candidates,
        _background_candidates,
        _markup_candidates,
    )
    for source in sources:
        for source_url, label, origin, node in source(document):
            if not is_in_scope(source_url):
                continue
            canonical = to_canonical(source_url, target, grammar)
            if canonical in seen:
                continue
            record = ImageRecord(
                source_url=source_url,
                canonical_url=canonical,
                label=label,
                origin=origin,
                source_ref=node,
            )
            seen.add(canonical)
            records.append(record)

    logger.info("Found %d Google Photos images", len(records))
    return records
