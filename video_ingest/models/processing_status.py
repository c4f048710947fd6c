"""Analysis submission state for stored videos"""

from enum import Enum
from typing import Optional


class AnalysisStatus(str, Enum):
    """Status of the analysis request for a video"""
    UNSUBMITTED = "unsubmitted"
    SUBMITTED = "submitted"

    @classmethod
    def for_analysis_id(cls, analysis_id: Optional[str]) -> "AnalysisStatus":
        """Derive the status from the stored analysis identifier"""
        return cls.SUBMITTED if analysis_id else cls.UNSUBMITTED
