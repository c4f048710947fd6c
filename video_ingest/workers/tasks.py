from dataclasses import asdict
from typing import Optional

from .celery_app import app

from ..models import IngestionResult
from ..scrapers import AuthenticationError
from ..services.run_service import RunService, build_store
from ..utils import load_config
from ..utils.logger import get_logger, bind_run

logger = get_logger(__name__, service_name="celery-tasks")


@app.task(name="video_ingest.workers.tasks.ingest_source_task", queue="ingestion")
def ingest_source_task(source: str, limit: Optional[int] = None):
    """Run the ingestion pipeline for one source in an isolated worker"""
    log = bind_run(logger, source=source)
    log.info(f"Starting ingestion task for {source}")

    config = load_config()
    with build_store(config) as store:
        try:
            result = RunService(config, store).ingest_source(source, limit)
        except AuthenticationError as e:
            # The chord callback only runs if every header task succeeds
            log.error(f"Ingestion task for {source} aborted: {e}")
            return {"source": source, "authentication_failed": True}
        except Exception as e:
            log.error(f"Ingestion task for {source} failed: {e}", exc_info=True)
            return asdict(IngestionResult(source=source, error=str(e)))

    log.info(f"Ingestion task finished: {result}")
    return asdict(result)


@app.task(name="video_ingest.workers.tasks.submit_analyses_task", queue="analysis")
def submit_analyses_task(ingestion_results: Optional[list] = None, batch_size: Optional[int] = None):
    """
    Submit pending videos for analysis.

    When used as a chord callback, `ingestion_results` holds the results of
    the ingestion tasks; they are only logged.
    """
    log = bind_run(logger)
    log.info("Starting analysis submission task")
    if ingestion_results:
        inserted = sum(r.get("inserted", 0) for r in ingestion_results if r)
        log.info(f"{inserted} videos ingested by {len(ingestion_results)} source tasks")

    config = load_config()
    with build_store(config) as store:
        result = RunService(config, store).submit(batch_size)

    log.info(f"Analysis submission task finished: {result}")
    return asdict(result)
