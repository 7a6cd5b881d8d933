"""Helpers for label sanitizing and filename derivation."""

from __future__ import annotations

import re
import time
from typing import Optional
from urllib.parse import urlparse

FILENAME_PREFIX = "gmaps_image"
IMAGE_EXTENSION = "jpg"
SHORT_ID_LENGTH = 16
MAX_LABEL_LENGTH = 30

LABEL_STRIP_PATTERN = re.compile(r"[^\w\s]|_")
WHITESPACE_PATTERN = re.compile(r"\s+")
ID_STRIP_PATTERN = re.compile(r"[^A-Za-z0-9_-]+")


def sanitize_label(value: str, max_length: int = MAX_LABEL_LENGTH) -> str:
    """Keep letters, digits and single underscores between words."""
    cleaned = LABEL_STRIP_PATTERN.sub("", value or "")
    cleaned = WHITESPACE_PATTERN.sub("_", cleaned.strip())
    return cleaned[:max_length].strip("_")


def extract_short_id(canonical_url: str, length: int = SHORT_ID_LENGTH) -> str:
    """Return the photo id from the last path segment, before any directive."""
    segment = urlparse(canonical_url).path.rstrip("/").rsplit("/", 1)[-1]
    image_id = ID_STRIP_PATTERN.sub("", segment.split("=", 1)[0])
    if not image_id:
        raise ValueError(f"No image id in {canonical_url!r}")
    return image_id[:length]


def derive_filename(
    canonical_url: str,
    ordinal_index: int,
    label: Optional[str] = None,
) -> str:
    """Build a local filename such as ``Jane_Doe_gmaps_image_3_AF1QipN.jpg``."""
    try:
        short_id = extract_short_id(canonical_url)
    except (AttributeError, TypeError, ValueError):
        short_id = str(int(time.time() * 1000))
    name = f"{FILENAME_PREFIX}_{ordinal_index + 1}_{short_id}"
    if label:
        label_slug = sanitize_label(label)
        if label_slug:
            name = f"{label_slug}_{name}"
    return f"{name}.{IMAGE_EXTENSION}"
