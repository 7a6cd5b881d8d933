"""High-level orchestration for capturing pages and downloading their photos."""

from __future__ import annotations

import logging
from typing import List, Optional

from playwright.async_api import (
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import CONTRIBUTOR_PATH, ExtractorConfig
from .documents import SNAPSHOT_SCRIPT, PageSnapshot
from .downloader import ALL, DownloadOrchestrator, ProgressCallback, Selection
from .models import DownloadSummary, ImageRecord
from .scanner import IMAGE_SELECTORS, SNAPSHOT_ATTRIBUTES, scan

logger = logging.getLogger("gmaps_photos")


def is_contributor_page(url: str) -> bool:
    """Return True for Google Maps contributor pages."""
    return CONTRIBUTOR_PATH in url


async def capture_page(
    playwright: Playwright,
    url: str,
    config: ExtractorConfig,
) -> PageSnapshot:
    """Render ``url`` with Playwright and snapshot what the scanner reads."""
    if not is_contributor_page(url):
        logger.warning("%s is not a Google Maps contributor page", url)
    browser = await playwright.chromium.launch(headless=config.headless)
    page = await browser.new_page(user_agent=config.user_agent)
    page.set_default_navigation_timeout(config.navigation_timeout * 1000)
    try:
        logger.info("Loading %s", url)
        await page.goto(url, wait_until="networkidle")
        if config.wait_after_load:
            # Give lazy-loaded thumbnails a chance to materialize.
            await page.wait_for_timeout(int(config.wait_after_load * 1000))
        payload = await page.evaluate(
            SNAPSHOT_SCRIPT,
            {"selectors": list(IMAGE_SELECTORS), "attributes": list(SNAPSHOT_ATTRIBUTES)},
        )
    finally:
        await browser.close()
    snapshot = PageSnapshot.from_payload(payload)
    logger.debug("Captured %d elements from %s", len(snapshot.elements), url)
    return snapshot


async def scan_url(url: str, config: ExtractorConfig) -> List[ImageRecord]:
    """Capture ``url`` and return the photos found on it."""
    async with async_playwright() as playwright:
        try:
            snapshot = await capture_page(playwright, url, config)
        except PlaywrightTimeoutError as exc:
            logger.error("Timeout while loading %s: %s", url, exc)
            raise RuntimeError(f"Failed to load {url}") from exc
    return scan(snapshot, config)


async def download_from_url(
    url: str,
    config: ExtractorConfig,
    selection: Selection = ALL,
    label: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> DownloadSummary:
    """Scan ``url`` and download the selected photos into ``config.output_root``."""
    records = await scan_url(url, config)
    orchestrator = DownloadOrchestrator(config)
    return await orchestrator.run(records, selection, on_progress=on_progress, label=label)
