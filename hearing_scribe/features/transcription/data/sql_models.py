import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Float, Integer, ForeignKey, DateTime, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID
from hearing_scribe.core.database.base import Base


def utc_now():
    return datetime.now(timezone.utc)


class UtteranceModel(Base):
    """
    The Atomic Unit: one timed, speaker-attributed span of speech.
    Timing is fixed at insert; only speaker_label and text are rewritten by the correction pass.
    """
    __tablename__ = "utterances"
    __table_args__ = (
        UniqueConstraint("job_id", "sort_order", name="uq_utterances_job_sort_order"),
        Index("idx_utterances_job_sort_order", "job_id", "sort_order"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    job_id = Column(UUID(as_uuid=True), ForeignKey("transcription_jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    speaker_label = Column(String, nullable=False, default="SPEAKER_00")
    text = Column(Text, nullable=False)

    start_time = Column(Float, nullable=False)  # Key for player seeking
    end_time = Column(Float, nullable=False)

    # [{"word": ..., "start": ..., "end": ..., "confidence": ..., "speaker": ...}] or NULL
    words = Column(JSON, nullable=True)

    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utc_now)

    job = relationship("TranscriptionJobModel", back_populates="utterances")
