"""Ingestion and analysis submission services"""

from .ingestion_pipeline import IngestionPipeline
from .analysis_client import AnalysisClient, AnalysisConfigurationError, AnalysisRequestError
from .analysis_submitter import AnalysisSubmitter
from .run_service import RunService, build_store

__all__ = [
    "IngestionPipeline",
    "AnalysisClient",
    "AnalysisConfigurationError",
    "AnalysisRequestError",
    "AnalysisSubmitter",
    "RunService",
    "build_store",
]
