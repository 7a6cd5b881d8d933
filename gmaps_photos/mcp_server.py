"""MCP server exposing gmaps-photos scan/download tools."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .config import ExtractorConfig
from .crawler import download_from_url, scan_url
from .downloader import ALL

logger = logging.getLogger("gmaps_photos.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="gmaps-photos")


@mcp.tool()
async def scan_photos(url: str) -> List[Dict[str, Any]]:
    """Render a Google Maps contributor page and list the photos on it."""

    config = ExtractorConfig(output_root=Path.cwd())
    records = await scan_url(url, config)
    return [
        {
            "index": index,
            "source_url": record.source_url,
            "canonical_url": record.canonical_url,
            "label": record.label,
            "origin": record.origin.value,
        }
        for index, record in enumerate(records)
    ]


@mcp.tool()
async def download_photos(
    url: str,
    output_dir: str,
    indices: Optional[List[int]] = None,
    label: Optional[str] = None,
) -> Dict[str, Any]:
    """Download photos from a contributor page; ``indices`` are zero-based scan positions."""

    config = ExtractorConfig(output_root=Path(output_dir).expanduser().resolve())
    selection = ALL if indices is None else set(indices)
    summary = await download_from_url(url, config, selection, label=label)
    return {
        "planned": summary.planned,
        "saved": summary.saved,
        "fallback_saved": summary.fallback_saved,
        "fallback_failed": summary.fallback_failed,
        "files": [str(outcome.path) for outcome in summary.outcomes if outcome.path],
    }


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
