"""Shared fixtures for the gmaps-photos test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from gmaps_photos.config import ExtractorConfig
from gmaps_photos.documents import PageSnapshot


@pytest.fixture
def config(tmp_path: Path) -> ExtractorConfig:
    return ExtractorConfig(output_root=tmp_path / "downloads", download_delay=0.25)


@pytest.fixture
def snapshot_factory():
    def _build(elements=(), markup: str = "") -> PageSnapshot:
        return PageSnapshot(list(elements), markup)

    return _build
