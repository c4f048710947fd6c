"""Database manager backing the record store"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine, Column, Integer, String, DateTime, Text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .record_store import RecordStore
from ..models import VideoRecord, PendingAnalysis
from ..utils import get_logger

logger = get_logger(__name__)

Base = declarative_base()

# Dialects with native "INSERT ... ON CONFLICT DO NOTHING"
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class StoreInitializationError(RuntimeError):
    """Raised when the database cannot be reached or its schema created"""


class VideoRow(Base):
    """Database model for ingested videos"""
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(String, nullable=False, unique=True, index=True)
    content_provider = Column(String, nullable=False)
    published_date = Column(String, nullable=False)  # DD/MM/YYYY or "Unknown Date"
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    personalities = Column(Text, nullable=False, default="")
    duration = Column(String, nullable=False)  # HH:MM:SS
    download_url = Column(Text, nullable=False)
    analysis_id = Column(String, nullable=True)  # NULL until submitted for analysis
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def to_record(self) -> VideoRecord:
        """Convert the row to the domain model"""
        return VideoRecord(
            source_id=self.source_id,
            content_provider=self.content_provider,
            published_date=self.published_date,
            title=self.title,
            description=self.description,
            personalities=self.personalities,
            duration=self.duration,
            download_url=self.download_url,
            analysis_id=self.analysis_id,
        )


def database_url_from(value: str) -> str:
    """Accept either a SQLAlchemy URL or a bare SQLite file path"""
    if "://" in value:
        return value
    db_path = Path(value)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


class DatabaseManager(RecordStore):
    """Manages database connections and record store operations"""

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize database manager and create tables"""
        self.database_url = database_url_from(database_url)

        try:
            self.engine = create_engine(self.database_url, echo=echo)
            self.SessionLocal = sessionmaker(bind=self.engine)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreInitializationError(f"Could not initialize database: {e}") from e

        logger.info(f"Database initialized ({self.engine.dialect.name})")

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def close(self):
        """Release pooled connections"""
        self.engine.dispose()

    def get_session(self) -> Session:
        """Get a database session"""
        return self.SessionLocal()

    def exists(self, source_id: str) -> bool:
        """Check if a video record exists"""
        session = self.get_session()
        try:
            return session.query(VideoRow.id).filter_by(source_id=source_id).first() is not None
        finally:
            session.close()

    def insert_if_absent(self, record: VideoRecord) -> bool:
        """Insert a video record, ignoring duplicates of its source id"""
        values = record.to_dict()
        values.pop("analysis_id", None)
        now = datetime.now()
        values["created_at"] = now
        values["updated_at"] = now

        insert = _UPSERT_INSERTS.get(self.engine.dialect.name)
        session = self.get_session()
        try:
            if insert is not None:
                stmt = insert(VideoRow).values(**values).on_conflict_do_nothing(
                    index_elements=["source_id"]
                )
                result = session.execute(stmt)
                session.commit()
                inserted = result.rowcount == 1
            else:
                session.add(VideoRow(**values))
                try:
                    session.commit()
                    inserted = True
                except IntegrityError:
                    session.rollback()
                    inserted = False
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if inserted:
            logger.info(f"Saved metadata for video {record.source_id}")
        else:
            logger.info(f"Video {record.source_id} already stored, insert ignored")
        return inserted

    def list_without_analysis_id(self, limit: int = 5) -> List[PendingAnalysis]:
        """Get the most recently stored videos that lack an analysis id"""
        session = self.get_session()
        try:
            rows = (
                session.query(VideoRow)
                .filter(VideoRow.analysis_id.is_(None))
                .order_by(VideoRow.id.desc())
                .limit(limit)
                .all()
            )
            return [
                PendingAnalysis(
                    source_id=row.source_id,
                    title=row.title,
                    download_url=row.download_url,
                )
                for row in rows
            ]
        finally:
            session.close()

    def set_analysis_id(self, source_id: str, job_id: str) -> bool:
        """Attach an analysis job id; a video already submitted is left untouched"""
        session = self.get_session()
        try:
            updated = (
                session.query(VideoRow)
                .filter(VideoRow.source_id == source_id, VideoRow.analysis_id.is_(None))
                .update(
                    {VideoRow.analysis_id: job_id, VideoRow.updated_at: datetime.now()},
                    synchronize_session=False,
                )
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        if updated:
            logger.info(f"Set analysis id for {source_id} to {job_id}")
        else:
            logger.warning(f"Analysis id for {source_id} not set (unknown video or already submitted)")
        return bool(updated)

    def get_video_record(self, source_id: str) -> Optional[VideoRecord]:
        """Get a video record by source id"""
        session = self.get_session()
        try:
            row = session.query(VideoRow).filter_by(source_id=source_id).first()
            return row.to_record() if row else None
        finally:
            session.close()

    def count_videos(self) -> int:
        """Number of stored videos"""
        session = self.get_session()
        try:
            return session.query(VideoRow).count()
        finally:
            session.close()
