"""Video record model and the raw shapes produced by source adapters"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from .processing_status import AnalysisStatus

# Sentinels stored when a field cannot be extracted or normalized
UNKNOWN_DATE = "Unknown Date"
UNTITLED_VIDEO = "Untitled Video"
ZERO_DURATION = "00:00:00"
NO_DOWNLOAD = "No download available"


@dataclass
class CandidateRef:
    """Minimal reference to a video discovered on a source listing page"""

    source_id: str  # Id as known at listing time (may be replaced after detail fetch)
    detail_url: str
    fields: Dict[str, Any] = field(default_factory=dict)  # Source-supplied values, e.g. duration

    def __repr__(self):
        return f"CandidateRef(id={self.source_id}, url={self.detail_url})"


@dataclass
class RawDetail:
    """Source-specific, not yet normalized values for one video"""

    title: Optional[str] = None
    published_date: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None
    personalities: Union[str, List[str], None] = None
    download_url: Optional[str] = None
    source_id: Optional[str] = None  # Set when the real id is only known on the detail page

    def merged_with(self, candidate_fields: Dict[str, Any]) -> "RawDetail":
        """Fill empty values from fields the listing page already supplied"""
        values = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value in (None, "", []):
                value = candidate_fields.get(f.name, value)
            values[f.name] = value
        return RawDetail(**values)

    def personalities_text(self) -> str:
        """Comma-joined personalities"""
        if not self.personalities:
            return ""
        if isinstance(self.personalities, str):
            return self.personalities.strip()
        return ", ".join(p.strip() for p in self.personalities if p and p.strip())


@dataclass
class VideoRecord:
    """Canonical, normalized video record as persisted"""

    source_id: str
    content_provider: str
    published_date: str = UNKNOWN_DATE  # DD/MM/YYYY
    title: str = UNTITLED_VIDEO
    description: str = ""
    personalities: str = ""
    duration: str = ZERO_DURATION  # HH:MM:SS
    download_url: str = NO_DOWNLOAD
    analysis_id: Optional[str] = None

    @property
    def status(self) -> AnalysisStatus:
        return AnalysisStatus.for_analysis_id(self.analysis_id)

    def __repr__(self):
        return (
            f"VideoRecord("
            f"id={self.source_id}, "
            f"provider={self.content_provider}, "
            f"date={self.published_date}, "
            f"status={self.status.value})"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage"""
        return {
            "source_id": self.source_id,
            "content_provider": self.content_provider,
            "published_date": self.published_date,
            "title": self.title,
            "description": self.description,
            "personalities": self.personalities,
            "duration": self.duration,
            "download_url": self.download_url,
            "analysis_id": self.analysis_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VideoRecord":
        """Create from dictionary"""
        return cls(
            source_id=data["source_id"],
            content_provider=data["content_provider"],
            published_date=data.get("published_date") or UNKNOWN_DATE,
            title=data.get("title") or UNTITLED_VIDEO,
            description=data.get("description") or "",
            personalities=data.get("personalities") or "",
            duration=data.get("duration") or ZERO_DURATION,
            download_url=data.get("download_url") or NO_DOWNLOAD,
            analysis_id=data.get("analysis_id"),
        )


@dataclass
class PendingAnalysis:
    """Stored video still waiting for an analysis request"""

    source_id: str
    title: str
    download_url: str
