from celery import Celery
from dotenv import load_dotenv

from ..utils import load_config

load_dotenv()

celery_config = load_config().celery
broker_url = celery_config.get("broker_url", "redis://localhost:6379/0")

app = Celery(
    "video_ingest",
    broker=broker_url,
    backend=celery_config.get("result_backend", broker_url),
    include=["video_ingest.workers.tasks"]
)

# Configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # One source run, browser included
    worker_prefetch_multiplier=1,  # One browser session per worker process
    task_routes={
        "video_ingest.workers.tasks.ingest_source_task": {"queue": "ingestion"},
        "video_ingest.workers.tasks.submit_analyses_task": {"queue": "analysis"},
    },
)

if __name__ == "__main__":
    app.start()
