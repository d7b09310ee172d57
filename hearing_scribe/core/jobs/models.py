import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Integer, DateTime, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from hearing_scribe.core.database.base import Base
from hearing_scribe.core.common.enums import TranscriptionEngine
from .types import JobStatus

def utc_now():
    return datetime.now(timezone.utc)

class TranscriptionJobModel(Base):
    """
    One hearing upload and the lifecycle of its transcription pipeline.
    """
    __tablename__ = "transcription_jobs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title = Column(String, nullable=False)
    # Proper nouns / terms used to bias the LLM correction pass
    glossary = Column(Text, nullable=True)

    engine = Column(SQLEnum(TranscriptionEngine), nullable=False, default=TranscriptionEngine.DEEPGRAM)
    status = Column(SQLEnum(JobStatus), nullable=False, default=JobStatus.UPLOADING, index=True)
    progress = Column(Integer, nullable=False, default=0)
    error_message = Column(String, nullable=True)

    media_url = Column(String, nullable=True)
    media_size_bytes = Column(Integer, nullable=True)

    meta = Column(JSON, default=dict)  # Output pointers (counts, degraded flag)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    # Deleting a job deletes its utterances.
    # String reference keeps core free of a hard import on the transcription feature.
    utterances = relationship(
        "UtteranceModel",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="UtteranceModel.sort_order"
    )
