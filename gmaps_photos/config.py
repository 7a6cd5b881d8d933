"""Configuration objects and constants for the photo extractor."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_TARGET_RESOLUTION = "s2048-v1"
DEFAULT_SIZE_GRAMMAR = "v2"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
CONTRIBUTOR_PATH = "google.com/maps/contrib/"


@dataclass
class ExtractorConfig:
    """Top-level settings that control scanning and downloading behaviour."""

    output_root: Path
    download_delay: float = 1.0
    target_resolution: str = DEFAULT_TARGET_RESOLUTION
    size_grammar: str = DEFAULT_SIZE_GRAMMAR
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 30.0
    wait_after_load: float = 2.0
    navigation_timeout: float = 30.0
    headless: bool = True
