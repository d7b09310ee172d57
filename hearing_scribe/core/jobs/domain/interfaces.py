from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Dict, Any, List
from uuid import UUID

from hearing_scribe.core.common.enums import TranscriptionEngine
from ..types import JobStatus
from .models import JobSubmission, JobSnapshot

class IJobRepository(ABC):
    """
    Contract for Job persistence.
    Every write is scoped to a single job id.
    """

    @abstractmethod
    def create_job(self, submission: JobSubmission) -> UUID:
        """Creates a job in UPLOADING state and returns its id."""
        pass

    @abstractmethod
    def get_job(self, job_id: UUID) -> Optional[JobSnapshot]:
        pass

    @abstractmethod
    def update_progress(self, job_id: UUID, progress: int, status: Optional[JobStatus] = None) -> None:
        """Persists progress (and optionally status). Last write wins."""
        pass

    @abstractmethod
    def set_engine(self, job_id: UUID, engine: TranscriptionEngine) -> None:
        pass

    @abstractmethod
    def set_media(self, job_id: UUID, media_url: str, size_bytes: Optional[int] = None) -> None:
        pass

    @abstractmethod
    def mark_started(self, job_id: UUID) -> None:
        pass

    @abstractmethod
    def mark_error(self, job_id: UUID, message: str) -> None:
        """Moves the job to ERROR without touching progress."""
        pass

    @abstractmethod
    def merge_meta(self, job_id: UUID, meta: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def reset_for_retry(self, job_id: UUID) -> bool:
        """Drops utterances and returns the job to UPLOADING/0."""
        pass

    @abstractmethod
    def delete_job(self, job_id: UUID) -> bool:
        pass

    @abstractmethod
    def find_stale(self, statuses: List[JobStatus], older_than: datetime) -> List[UUID]:
        pass
