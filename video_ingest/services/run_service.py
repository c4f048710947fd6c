"""Process-level wiring shared by the CLI and the Celery workers"""

from typing import Iterable, List, Optional

from .analysis_client import AnalysisClient
from .analysis_submitter import AnalysisSubmitter
from .ingestion_pipeline import IngestionPipeline
from ..database import DatabaseManager
from ..models import IngestionResult, SubmissionResult
from ..scrapers import PageDriver, AuthenticationError, SOURCES, build_scraper
from ..scrapers.http_driver import HttpPageDriver
from ..scrapers.page_driver import DEFAULT_USER_AGENT
from ..scrapers.playwright_driver import PlaywrightPageDriver
from ..utils import Config, RetryPolicy, get_logger

logger = get_logger(__name__)

DEFAULT_DATABASE_URL = "data/videos.db"


def build_store(config: Config) -> DatabaseManager:
    """Open the record store configured under `database.url`"""
    return DatabaseManager(config.get("database.url", DEFAULT_DATABASE_URL))


def build_retry_policy(config: Config) -> RetryPolicy:
    retry = config.retry
    return RetryPolicy(
        max_attempts=int(retry.get("max_attempts", 3)),
        base_delay=float(retry.get("base_delay", 2.0)),
    )


def build_driver(config: Config, source: str) -> PageDriver:
    """
    Page driver for one source run.

    Sources listed under `browser.http_sources` are fetched as plain HTML;
    everything else gets a headless Chromium page.
    """
    browser = config.browser
    user_agent = browser.get("user_agent") or DEFAULT_USER_AGENT
    timeout_ms = int(browser.get("timeout_ms", 45000))

    if source in (browser.get("http_sources") or []):
        return HttpPageDriver(user_agent=user_agent, timeout_ms=timeout_ms)
    return PlaywrightPageDriver(
        headless=browser.get("headless", True),
        user_agent=user_agent,
        timeout_ms=timeout_ms,
    )


def resolve_sources(config: Config, sources: Optional[Iterable[str]] = None) -> List[str]:
    """Requested sources, or the configured ones, validated against the registry"""
    names = list(sources or config.ingestion.get("sources") or SOURCES)
    unknown = [name for name in names if name not in SOURCES]
    if unknown:
        raise ValueError(f"Unknown source(s): {', '.join(unknown)}")
    return names


def build_analysis_client(config: Config) -> AnalysisClient:
    analysis = config.analysis
    return AnalysisClient(
        url=analysis.get("url"),
        token=analysis.get("token") or "",
        workspace=analysis.get("workspace", "demo-en"),
        timeout=float(analysis.get("timeout", 30)),
        verify_ssl=analysis.get("verify_ssl", True),
    )


class RunService:
    """Runs ingestion per source and the analysis submitter against one store"""

    def __init__(self, config: Config, store: DatabaseManager):
        self.config = config
        self.store = store
        self.pipeline = IngestionPipeline(store, retry_policy=build_retry_policy(config))

    def ingest_source(self, source: str, limit: Optional[int] = None) -> IngestionResult:
        """
        Run the pipeline for one source in its own browsing session.

        Raises:
            AuthenticationError: If the source requires a login that fails
        """
        if limit is None:
            limit = int(self.config.ingestion.get("limit", 5))

        with build_driver(self.config, source) as driver:
            scraper = build_scraper(source, driver, self.config)
            return self.pipeline.run(scraper, limit=limit)

    def ingest(self, sources: Optional[Iterable[str]] = None, limit: Optional[int] = None):
        """
        Run each source sequentially; a failing source does not stop the others.

        Returns:
            Tuple of (results, sources whose authentication failed)
        """
        results = []
        auth_failures = []
        for source in resolve_sources(self.config, sources):
            try:
                results.append(self.ingest_source(source, limit))
            except AuthenticationError as e:
                logger.error(f"Skipping {source}: {e}")
                auth_failures.append(source)
            except Exception as e:
                logger.error(f"Error ingesting {source}: {e}", exc_info=True)
                results.append(IngestionResult(source=source, error=str(e)))
        return results, auth_failures

    def submit(self, batch_size: Optional[int] = None) -> SubmissionResult:
        """Submit pending videos to the analysis service"""
        analysis = self.config.analysis
        if batch_size is None:
            batch_size = int(analysis.get("batch_size", 5))

        client = build_analysis_client(self.config)
        try:
            submitter = AnalysisSubmitter(
                self.store,
                client,
                language=analysis.get("language", "en"),
                channel_mapping=analysis.get("channel_mapping", "left"),
                tasks=analysis.get("tasks"),
            )
            return submitter.run(batch_size=batch_size)
        finally:
            client.close()
