"""Ingestion pipeline: list, deduplicate, fetch, normalize and persist"""

from datetime import datetime
from typing import Callable, Optional

from ..database import RecordStore
from ..models import CandidateRef, RawDetail, VideoRecord, IngestionResult, NO_DOWNLOAD, UNTITLED_VIDEO
from ..scrapers import BaseScraper, AuthenticationError
from ..utils import (
    RetryPolicy,
    get_logger,
    bind_run,
    normalize_date,
    normalize_duration,
    normalize_url,
)
from ..utils.logger import RunLogger

logger = get_logger(__name__)


class IngestionPipeline:
    """
    Runs one source scraper against the record store.

    Existence checks before and after the slow detail fetch only avoid
    wasted work; the store's unique source id is what keeps inserts
    idempotent across concurrent runs.
    """

    def __init__(
        self,
        store: RecordStore,
        retry_policy: Optional[RetryPolicy] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.retry_policy = retry_policy or RetryPolicy()
        self.clock = clock

    def run(self, scraper: BaseScraper, limit: int = 5) -> IngestionResult:
        """
        Ingest the most recent videos of one source.

        Args:
            scraper: Source adapter, bound to an open page driver
            limit: Maximum number of candidates to list

        Returns:
            IngestionResult with per-outcome counts

        Raises:
            AuthenticationError: If a gated source cannot log in
        """
        log = bind_run(logger, source=scraper.name)
        result = IngestionResult(source=scraper.name)

        log.info(f"Starting ingestion for {scraper.name} (limit={limit})")

        if scraper.requires_authentication:
            self._authenticate(scraper, log)

        try:
            candidates = self.retry_policy.call(
                lambda: scraper.list_recent(limit),
                description=f"{scraper.name}: list recent videos",
            )
        except Exception as e:
            log.error(f"Listing failed for {scraper.name}, ending run: {e}")
            result.listing_failed = True
            return result

        result.listed = len(candidates)
        log.info(f"Listed {len(candidates)} candidates for {scraper.name}")

        for candidate in candidates:
            self._process_candidate(scraper, candidate, result, log)

        log.info(f"Ingestion finished: {result}")
        return result

    def _authenticate(self, scraper: BaseScraper, log: RunLogger):
        try:
            self.retry_policy.call(scraper.authenticate, description=f"{scraper.name}: authenticate")
        except AuthenticationError:
            log.error(f"Authentication failed for {scraper.name}")
            raise
        except Exception as e:
            log.error(f"Authentication failed for {scraper.name}: {e}")
            raise AuthenticationError(f"Could not log in to {scraper.name}: {e}") from e

    def _process_candidate(
        self,
        scraper: BaseScraper,
        candidate: CandidateRef,
        result: IngestionResult,
        log: RunLogger,
    ):
        """Fetch, normalize and store one candidate; failures stay local to it"""
        try:
            stored = self.store.exists(candidate.source_id)
        except Exception as e:
            log.error(f"Failed to look up {candidate.source_id}: {e}")
            result.failed += 1
            return

        if stored:
            log.info(f"Video {candidate.source_id} already stored, skipping")
            result.skipped_existing += 1
            return

        try:
            detail = self.retry_policy.call(
                lambda: scraper.fetch_detail(candidate),
                description=f"{scraper.name}: fetch {candidate.source_id}",
            )
        except Exception as e:
            log.error(f"Failed to fetch {candidate.source_id}: {e}")
            result.failed += 1
            return

        if detail is None:
            log.warning(f"No usable video found for {candidate.source_id}, skipping")
            result.skipped_empty += 1
            return

        record = self.build_record(scraper, candidate, detail)
        record.download_url = self._resolve_download_url(scraper, record.download_url, log)

        # The id may only be known after the detail fetch
        if record.source_id != candidate.source_id:
            try:
                stored = self.store.exists(record.source_id)
            except Exception as e:
                log.error(f"Failed to look up {record.source_id}: {e}")
                result.failed += 1
                return

            if stored:
                log.info(f"Video {record.source_id} already stored, skipping")
                result.skipped_existing += 1
                return

        try:
            inserted = self.store.insert_if_absent(record)
        except Exception as e:
            log.error(f"Failed to store {record.source_id}: {e}")
            result.failed += 1
            return

        if inserted:
            result.inserted += 1
            result.inserted_ids.append(record.source_id)
        else:
            result.skipped_existing += 1

    def build_record(self, scraper: BaseScraper, candidate: CandidateRef, detail: RawDetail) -> VideoRecord:
        """Normalize raw values into the stored record shape"""
        merged = detail.merged_with(candidate.fields)
        title = (merged.title or "").strip()

        return VideoRecord(
            source_id=merged.source_id or candidate.source_id,
            content_provider=scraper.content_provider,
            published_date=normalize_date(merged.published_date, scraper.date_format, now=self.clock()),
            title=title or UNTITLED_VIDEO,
            description=(merged.description or "").strip(),
            personalities=merged.personalities_text(),
            duration=normalize_duration(merged.duration),
            download_url=normalize_url(merged.download_url, base_url=candidate.detail_url),
        )

    def _resolve_download_url(self, scraper: BaseScraper, url: str, log: RunLogger) -> str:
        """Apply the scraper's optional download URL post-processing"""
        if url == NO_DOWNLOAD:
            return url
        try:
            return self.retry_policy.call(
                lambda: scraper.resolve_download_url(url),
                description=f"{scraper.name}: resolve download url",
            )
        except Exception as e:
            log.warning(f"Keeping extracted download url {url}: {e}")
            return url
