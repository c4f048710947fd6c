"""Outcome summaries for pipeline and submitter runs"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class IngestionResult:
    """Result of one ingestion run for a single source"""

    source: str
    listed: int = 0
    inserted: int = 0
    skipped_existing: int = 0
    skipped_empty: int = 0
    failed: int = 0
    listing_failed: bool = False
    error: Optional[str] = None  # Set when the run ended on an unexpected exception
    inserted_ids: List[str] = field(default_factory=list)

    def __repr__(self):
        if self.error:
            return f"IngestionResult(source={self.source}, error={self.error})"
        if self.listing_failed:
            return f"IngestionResult(source={self.source}, listing_failed=True)"
        return (
            f"IngestionResult("
            f"source={self.source}, "
            f"listed={self.listed}, "
            f"inserted={self.inserted}, "
            f"skipped={self.skipped_existing + self.skipped_empty}, "
            f"failed={self.failed})"
        )


@dataclass
class SubmissionResult:
    """Result of one analysis submitter run"""

    submitted: int = 0
    failed: int = 0
    job_ids: dict = field(default_factory=dict)

    def __repr__(self):
        return f"SubmissionResult(submitted={self.submitted}, failed={self.failed})"
