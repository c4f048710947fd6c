"""Record store contract used by the pipeline and the analysis submitter"""

from abc import ABC, abstractmethod
from typing import List

from ..models import VideoRecord, PendingAnalysis


class RecordStore(ABC):
    """Persisted-state boundary for ingested videos"""

    @abstractmethod
    def exists(self, source_id: str) -> bool:
        """Check whether a video with this source id is stored"""
        pass

    @abstractmethod
    def insert_if_absent(self, record: VideoRecord) -> bool:
        """
        Insert a record unless its source id is already stored.

        Must be atomic at the storage layer: a duplicate is a silent no-op
        that keeps the first-inserted values.

        Returns:
            True if a row was written, False if the id already existed
        """
        pass

    @abstractmethod
    def list_without_analysis_id(self, limit: int) -> List[PendingAnalysis]:
        """Videos that have not been submitted for analysis yet"""
        pass

    @abstractmethod
    def set_analysis_id(self, source_id: str, job_id: str) -> bool:
        """Attach the analysis job id to a video (only if none is set yet)"""
        pass
