"""Data models for ingested video records and run outcomes"""

from .video_metadata import (
    VideoRecord,
    CandidateRef,
    RawDetail,
    PendingAnalysis,
    UNKNOWN_DATE,
    UNTITLED_VIDEO,
    ZERO_DURATION,
    NO_DOWNLOAD,
)
from .processing_status import AnalysisStatus
from .run_result import IngestionResult, SubmissionResult

__all__ = [
    "VideoRecord",
    "CandidateRef",
    "RawDetail",
    "PendingAnalysis",
    "AnalysisStatus",
    "IngestionResult",
    "SubmissionResult",
    "UNKNOWN_DATE",
    "UNTITLED_VIDEO",
    "ZERO_DURATION",
    "NO_DOWNLOAD",
]
