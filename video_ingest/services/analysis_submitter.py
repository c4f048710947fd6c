"""Forwards stored videos without an analysis id to the analysis service"""

from typing import List, Optional

from .analysis_client import AnalysisClient
from ..database import RecordStore
from ..models import PendingAnalysis, SubmissionResult
from ..utils import get_logger, bind_run

logger = get_logger(__name__)


class AnalysisSubmitter:
    """
    Submits pending videos one at a time and records the returned job id.

    A failed submission leaves the video pending; the next run picks it
    up again because selection is by missing analysis id.
    """

    def __init__(
        self,
        store: RecordStore,
        client: AnalysisClient,
        language: str = "en",
        channel_mapping: str = "left",
        tasks: Optional[List[str]] = None,
    ):
        self.store = store
        self.client = client
        self.language = language
        self.channel_mapping = channel_mapping
        self.tasks = list(tasks) if tasks else ["mxt"]

    def build_payload(self, video: PendingAnalysis) -> dict:
        """Analysis request body for one video"""
        return {
            "type": "video",
            "external_id": video.source_id,
            "filename": f"{video.source_id}.mp4",
            "title": video.title,
            "source": {
                "type": "URL",
                "url": video.download_url,
            },
            "analysis_parameters": {
                "transcript_language": self.language,
                "audio_channel_mapping": self.channel_mapping,
                "tasks": list(self.tasks),
            },
        }

    def run(self, batch_size: int = 5) -> SubmissionResult:
        """Submit up to `batch_size` pending videos sequentially"""
        log = bind_run(logger)
        result = SubmissionResult()

        pending = self.store.list_without_analysis_id(batch_size)
        log.info(f"Submitting {len(pending)} videos for analysis")

        for video in pending:
            try:
                job_id = self.client.submit(self.build_payload(video))
            except Exception as e:
                log.error(f"Failed to submit {video.source_id}: {e}")
                result.failed += 1
                continue

            if not job_id:
                log.warning(f"No analysis_request_id for {video.source_id}")
                result.failed += 1
                continue

            try:
                self.store.set_analysis_id(video.source_id, job_id)
            except Exception as e:
                log.error(f"Submitted {video.source_id} as {job_id} but could not record it: {e}")
                result.failed += 1
                continue

            result.submitted += 1
            result.job_ids[video.source_id] = job_id
            log.info(f"Sent {video.source_id} for analysis, analysis id: {job_id}")

        log.info(f"Submission finished: {result}")
        return result
