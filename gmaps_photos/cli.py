"""Command-line entry point for the Google Maps photo extractor."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_SIZE_GRAMMAR, DEFAULT_TARGET_RESOLUTION, ExtractorConfig
from .crawler import scan_url
from .documents import HtmlDocument
from .downloader import ALL, DownloadOrchestrator, EmptySelectionError, Selection
from .models import ImageRecord
from .scanner import scan
from .urls import SIZE_DIRECTIVE_GRAMMARS
from .utils import derive_filename

logger = logging.getLogger("gmaps_photos.cli")


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("url", nargs="?", help="Google Maps contributor page to render")
    source.add_argument(
        "--html",
        type=Path,
        help="Scan a saved HTML file instead of rendering a live page",
    )
    parser.add_argument(
        "--resolution",
        default=DEFAULT_TARGET_RESOLUTION,
        help="Size directive appended to every photo URL",
    )
    parser.add_argument(
        "--size-grammar",
        default=DEFAULT_SIZE_GRAMMAR,
        choices=sorted(SIZE_DIRECTIVE_GRAMMARS),
        help="Grammar used to strip existing size directives",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=2.0,
        help="Seconds to wait after network idle so lazy images can load",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--label",
        default=None,
        help="Author label prepended to every filename",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_download_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        default="downloads",
        type=Path,
        help="Directory where images should be written",
    )
    parser.add_argument(
        "--select",
        type=parse_selection,
        default=ALL,
        help="Comma-separated 1-based image numbers as listed by 'scan' (default: all)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=1.0,
        help="Seconds to wait between downloads",
    )


def parse_selection(value: Optional[str]) -> Selection:
    """Turn ``"1,3,5"`` into zero-based indices; ``"all"`` selects everything."""
    if value is None or value == ALL:
        return ALL
    indices = set()
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            number = int(part)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Invalid image number: {part!r}") from None
        indices.add(number - 1)
    return indices


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find Google Photos images on Google Maps contributor pages and download them in high resolution.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="List the photos found on a page")
    _add_source_arguments(scan_parser)

    download_parser = subparsers.add_parser(
        "download", help="Download photos found on a page"
    )
    _add_source_arguments(download_parser)
    _add_download_arguments(download_parser)

    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> ExtractorConfig:
    return ExtractorConfig(
        output_root=Path(getattr(args, "output", "downloads")).resolve(),
        download_delay=getattr(args, "delay", 1.0),
        target_resolution=args.resolution,
        size_grammar=args.size_grammar,
        wait_after_load=args.wait,
        navigation_timeout=args.timeout,
    )


def _collect_records(args: argparse.Namespace, config: ExtractorConfig) -> List[ImageRecord]:
    if args.html is not None:
        html = args.html.read_text(encoding="utf-8")
        return scan(HtmlDocument(html), config)
    return asyncio.run(scan_url(args.url, config))


def _print_records(records: Sequence[ImageRecord], label: Optional[str]) -> None:
    for index, record in enumerate(records):
        filename = derive_filename(record.canonical_url, index, label)
        sys.stdout.write(f"{index + 1:3d}. {filename}  [{record.label}]\n")
        sys.stdout.write(f"     {record.source_url[:60]}...\n")
    sys.stdout.flush()


def _log_progress(index: int, total: int, filename: str) -> None:
    logger.info("Downloading %d/%d: %s", index + 1, total, filename)


def _run_scan(args: argparse.Namespace, config: ExtractorConfig) -> int:
    records = _collect_records(args, config)
    logger.info(
        "Found %d Google Photos images, will download at %s resolution",
        len(records),
        config.target_resolution,
    )
    _print_records(records, args.label)
    return 0


def _run_download(args: argparse.Namespace, config: ExtractorConfig) -> int:
    records = _collect_records(args, config)
    orchestrator = DownloadOrchestrator(config)
    overall_start = time.perf_counter()
    try:
        summary = asyncio.run(
            orchestrator.run(records, args.select, on_progress=_log_progress, label=args.label)
        )
    except EmptySelectionError as exc:
        logger.error("%s", exc)
        return 1
    total_elapsed = time.perf_counter() - overall_start
    logger.info(
        "Completed in %.2fs: %d/%d saved directly, %d via fallback link, %d failed",
        total_elapsed,
        summary.saved,
        summary.planned,
        summary.fallback_saved,
        summary.fallback_failed,
    )
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    config = _build_config(args)
    if args.command == "scan":
        status = _run_scan(args, config)
    else:
        status = _run_download(args, config)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
