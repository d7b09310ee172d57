from dataclasses import dataclass
from typing import Optional
from uuid import UUID
from hearing_scribe.core.jobs.types import JobStatus


@dataclass(frozen=True)
class PipelineOutcome:
    """
    Structured result handed back to whatever triggered the run.
    On failure, `stage` names where it broke and `error` is the persisted message.
    """
    job_id: UUID
    status: JobStatus
    progress: int
    stage: Optional[str] = None
    error: Optional[str] = None
    utterance_count: int = 0
    corrected_count: int = 0
    degraded: bool = False

    @property
    def ok(self) -> bool:
        return self.status == JobStatus.COMPLETED
