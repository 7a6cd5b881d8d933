"""Data models used throughout the extraction pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional


class SourceClass(enum.Enum):
    """Location in the document where an image URL was discovered."""

    ATTRIBUTE = "attribute"
    DATA_ATTRIBUTE = "data-attribute"
    BACKGROUND = "background"
    MARKUP = "markup"


class JobState(enum.Enum):
    """How a download job ended."""

    SAVED = "saved"
    FALLBACK_SAVED = "fallback-saved"
    FALLBACK_FAILED = "fallback-failed"


@dataclass(frozen=True)
class ImageRecord:
    """Image reference discovered while scanning a document."""

    source_url: str
    canonical_url: str
    label: str
    origin: SourceClass
    source_ref: Optional[Any] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class DownloadJob:
    """One selected record paired with the filename it will be saved under."""

    record: ImageRecord
    filename: str
    ordinal_index: int


@dataclass
class JobOutcome:
    """Terminal result of a download job."""

    job: DownloadJob
    state: JobState
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.state in (JobState.FALLBACK_SAVED, JobState.FALLBACK_FAILED)


@dataclass
class DownloadSummary:
    """Counts reported once an orchestrator run finishes."""

    planned: int = 0
    saved: int = 0
    fallback_saved: int = 0
    fallback_failed: int = 0
    cancelled: bool = False
    outcomes: List[JobOutcome] = field(default_factory=list)

    @property
    def completed(self) -> int:
        """Jobs that reached DONE, whichever save path they took."""
        return len(self.outcomes)

    def record(self, outcome: JobOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.state is JobState.SAVED:
            self.saved += 1
        elif outcome.state is JobState.FALLBACK_SAVED:
            self.fallback_saved += 1
        else:
            self.fallback_failed += 1
