from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional
from uuid import UUID
from hearing_scribe.core.common.enums import TranscriptionEngine
from ..types import JobStatus

@dataclass(frozen=True)
class JobSubmission:
    """
    DTO for requesting a new transcription job.
    """
    title: str
    engine: TranscriptionEngine = TranscriptionEngine.DEEPGRAM
    glossary: Optional[str] = None
    media_url: Optional[str] = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Job title cannot be empty.")

@dataclass(frozen=True)
class JobSnapshot:
    """
    Read-only copy of a job row, detached from any DB session.
    """
    id: UUID
    title: str
    engine: TranscriptionEngine
    status: JobStatus
    progress: int
    glossary: Optional[str] = None
    media_url: Optional[str] = None
    media_size_bytes: Optional[int] = None
    error_message: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

@dataclass(frozen=True)
class JobStatusView:
    """What the polling client sees."""
    status: JobStatus
    progress: int
    label: str
    title: str
