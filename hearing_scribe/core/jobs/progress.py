# File: hearing_scribe/core/jobs/progress.py

import logging
from dataclasses import dataclass
from uuid import UUID

from .types import JobStatus, STATUS_ORDER
from .domain.interfaces import IJobRepository

logger = logging.getLogger(__name__)


class InvalidTransitionError(ValueError):
    pass


@dataclass(frozen=True)
class ProgressState:
    job_id: UUID
    status: JobStatus
    progress: int


class ProgressTracker:
    """
    Explicit progress state for one pipeline run.

    The run and the polling client live in different request lifetimes, so every
    change is written through to the repository immediately. Progress never moves
    backwards and status only moves forward (or to ERROR).
    """

    def __init__(self, job_id: UUID, repository: IJobRepository,
                 status: JobStatus = JobStatus.UPLOADING, progress: int = 0):
        self._repo = repository
        self._state = ProgressState(job_id=job_id, status=status, progress=progress)

    @property
    def state(self) -> ProgressState:
        return self._state

    @property
    def progress(self) -> int:
        return self._state.progress

    @property
    def status(self) -> JobStatus:
        return self._state.status

    def advance(self, progress: int, status: JobStatus = None) -> ProgressState:
        current = self._state
        if current.status.is_terminal:
            raise InvalidTransitionError(f"Job {current.job_id} is already {current.status.value}.")

        new_status = status or current.status
        if new_status == JobStatus.ERROR:
            raise InvalidTransitionError("Use fail() to move a job to ERROR.")
        if STATUS_ORDER[new_status] < STATUS_ORDER[current.status]:
            raise InvalidTransitionError(
                f"Cannot move job {current.job_id} from {current.status.value} back to {new_status.value}."
            )

        new_progress = max(current.progress, min(100, int(progress)))
        self._repo.update_progress(
            current.job_id,
            new_progress,
            new_status if new_status != current.status else None
        )
        self._state = ProgressState(job_id=current.job_id, status=new_status, progress=new_progress)
        logger.debug(f"Job {current.job_id}: {new_status.value} {new_progress}%")
        return self._state

    def fail(self, message: str) -> ProgressState:
        """Terminal ERROR; progress stays at the last milestone reached."""
        current = self._state
        if current.status.is_terminal:
            raise InvalidTransitionError(f"Job {current.job_id} is already {current.status.value}.")
        self._repo.mark_error(current.job_id, message)
        self._state = ProgressState(job_id=current.job_id, status=JobStatus.ERROR, progress=current.progress)
        return self._state
