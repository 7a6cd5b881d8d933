"""Sequential image downloading with a direct-link fallback."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Collection, List, Optional, Sequence, Union

import requests
from filetype import guess

from .config import ExtractorConfig
from .models import DownloadJob, DownloadSummary, ImageRecord, JobOutcome, JobState
from .utils import derive_filename

logger = logging.getLogger("gmaps_photos")

ALL = "all"
CHUNK_SIZE = 64 * 1024

Selection = Union[str, Collection[int]]
ProgressCallback = Callable[[int, int, str], Any]
FallbackSaver = Callable[[str, Path, ExtractorConfig], bool]
Sleep = Callable[[float], Awaitable[Any]]


class EmptySelectionError(ValueError):
    """Raised when a run is requested with no images selected."""


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def direct_link_save(url: str, destination: Path, config: ExtractorConfig) -> bool:
    """Save ``url`` straight to ``destination`` without the identifying header.

    Non-2xx replies are rejected before anything is written. The payload
    itself is not inspected; the return value says whether a complete body
    reached the disk. A failed or empty transfer leaves no file behind.
    """
    written = 0
    try:
        with requests.get(url, stream=True, timeout=config.request_timeout) as resp:
            resp.raise_for_status()
            with destination.open("wb") as handle:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    handle.write(chunk)
                    written += len(chunk)
    except (requests.RequestException, OSError) as exc:
        logger.warning("Direct link download of %s failed: %s", url, exc)
        destination.unlink(missing_ok=True)
        return False
    if not written:
        destination.unlink(missing_ok=True)
        return False
    return True


def build_jobs(
    records: Sequence[ImageRecord],
    selection: Selection = ALL,
    label: Optional[str] = None,
) -> List[DownloadJob]:
    """Pair selected records with filenames, keeping scan order and indices."""
    if isinstance(selection, str):
        if selection != ALL:
            raise ValueError(f"Unsupported selection mode {selection!r}")
        chosen = range(len(records))
    else:
        wanted = set(selection)
        chosen = [index for index in range(len(records)) if index in wanted]
        ignored = sorted(index for index in wanted if not 0 <= index < len(records))
        if ignored:
            logger.warning("Ignoring out-of-range selection indices: %s", ignored)
    return [
        DownloadJob(
            record=records[index],
            filename=derive_filename(records[index].canonical_url, index, label),
            ordinal_index=index,
        )
        for index in chosen
    ]


class DownloadOrchestrator:
    """Fetch selected images one at a time and save them under ``output_root``."""

    def __init__(
        self,
        config: ExtractorConfig,
        session: Optional[requests.Session] = None,
        fallback_saver: Optional[FallbackSaver] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.fallback_saver = fallback_saver or direct_link_save
        self._sleep = sleep or asyncio.sleep

    def _fetch(self, url: str) -> bytes:
        resp = self.session.get(
            url,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.request_timeout,
        )
        try:
            resp.raise_for_status()
            return resp.content
        finally:
            resp.close()

    async def _download(self, job: DownloadJob, destination: Path) -> JobOutcome:
        url = job.record.canonical_url
        logger.debug("Fetching %s", url)
        try:
            data = await asyncio.to_thread(self._fetch, url)
            if detect_image_format(data) is None:
                logger.warning("Payload from %s does not look like an image", url)
            destination.write_bytes(data)
        except (requests.RequestException, OSError) as exc:
            logger.warning("Failed to download %s: %s", job.filename, exc)
            saved = await asyncio.to_thread(self.fallback_saver, url, destination, self.config)
            if not saved:
                return JobOutcome(job=job, state=JobState.FALLBACK_FAILED, error=str(exc))
            logger.info("Saved %s via direct link", job.filename)
            return JobOutcome(
                job=job, state=JobState.FALLBACK_SAVED, path=destination, error=str(exc)
            )
        logger.info("Downloaded: %s", job.filename)
        return JobOutcome(job=job, state=JobState.SAVED, path=destination)

    async def run(
        self,
        records: Sequence[ImageRecord],
        selection: Selection = ALL,
        on_progress: Optional[ProgressCallback] = None,
        label: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DownloadSummary:
        """Download the selected records in order, never more than one at a time.

        A failed fetch falls back to a direct-link save and the batch carries
        on. Every job is followed by the configured delay. ``on_progress`` is
        told ``(index, total, filename)`` before each job starts.
        """
        jobs = build_jobs(records, selection, label)
        if not jobs:
            raise EmptySelectionError("No images selected for download")

        output_dir = self.config.output_root
        output_dir.mkdir(parents=True, exist_ok=True)
        summary = DownloadSummary(planned=len(jobs))
        logger.info("Starting download of %d images...", len(jobs))

        for position, job in enumerate(jobs):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Download cancelled after %d/%d images", position, len(jobs))
                summary.cancelled = True
                break
            if on_progress is not None:
                on_progress(position, len(jobs), job.filename)
            outcome = await self._download(job, output_dir / job.filename)
            summary.record(outcome)
            await self._sleep(self.config.download_delay)

        logger.info(
            "Finished: %d saved, %d via fallback, %d failed",
            summary.saved,
            summary.fallback_saved,
            summary.fallback_failed,
        )
        return summary
