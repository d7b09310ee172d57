import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.enums import TranscriptionEngine
from ..domain.interfaces import IJobRepository
from ..domain.models import JobSubmission, JobStatusView
from ..data.repository import SqlJobRepository
from ..types import JobStatus, STATUS_LABELS

logger = logging.getLogger(__name__)

STALE_STATUSES = [JobStatus.TRANSCRIBING, JobStatus.FORMATTING]


class JobManager:
    """
    Public API for the Jobs Core Module.
    Owns the job lifecycle; the actual work is routed to the pipeline feature.
    """

    def __init__(self, repo: Optional[IJobRepository] = None, orchestrator=None):
        # In a full DI framework, this would be injected.
        self.repo = repo or SqlJobRepository()
        self._orchestrator = orchestrator

    @property
    def orchestrator(self):
        if self._orchestrator is None:
            # Lazy import to prevent circular dependencies (core -> features)
            from hearing_scribe.features.pipeline.service.api import build_orchestrator
            self._orchestrator = build_orchestrator()
        return self._orchestrator

    def submit_job(self, submission: JobSubmission) -> UUID:
        """Create a Job Record in UPLOADING state."""
        job_id = self.repo.create_job(submission)
        logger.info(f"Job Submitted: {job_id} [{submission.engine.value}] '{submission.title}'")
        return job_id

    def attach_media(self, job_id: UUID, media_url: str, size_bytes: Optional[int] = None) -> None:
        """Records where the upload landed. The job stays in UPLOADING until run."""
        if not media_url:
            raise ValueError("media_url cannot be empty.")
        self.repo.set_media(job_id, media_url, size_bytes)

    def run_job(self, job_id: UUID, engine: Optional[TranscriptionEngine] = None):
        """
        Executes the pipeline for a job.
        Stage failures come back in the returned PipelineOutcome, they are not raised.
        """
        logger.info(f"Starting Job {job_id}...")
        outcome = self.orchestrator.run(job_id, engine)
        if outcome.ok:
            logger.info(f"Job {job_id} Completed successfully.")
        else:
            logger.error(f"Job {job_id} Failed at {outcome.stage}: {outcome.error}")
        return outcome

    def get_status(self, job_id: UUID) -> Optional[JobStatusView]:
        """What the polling client sees. None when the job does not exist."""
        job = self.repo.get_job(job_id)
        if not job:
            return None
        label, fallback = STATUS_LABELS[job.status]
        progress = job.progress if job.progress is not None else fallback
        return JobStatusView(status=job.status, progress=progress, label=label, title=job.title)

    def reprocess(self, job_id: UUID, engine: Optional[TranscriptionEngine] = None):
        """
        Manual retry: drops the previous run's utterances and starts a fresh run.
        Not guarded against a run still in flight; last write wins.
        """
        if not self.repo.reset_for_retry(job_id):
            raise LookupError(f"Job {job_id} not found.")
        logger.info(f"Job {job_id} reset for reprocessing.")
        return self.run_job(job_id, engine)

    def delete_job(self, job_id: UUID) -> bool:
        deleted = self.repo.delete_job(job_id)
        if deleted:
            logger.info(f"Job {job_id} deleted with its utterances.")
        return deleted

    def sweep_stale_jobs(self, ttl_minutes: Optional[int] = None) -> List[UUID]:
        """
        Watchdog for abandoned runs: jobs stuck in TRANSCRIBING/FORMATTING with no
        progress write for longer than the TTL are moved to ERROR.
        Meant to be called by a scheduler; nothing calls it implicitly.
        """
        ttl = ttl_minutes if ttl_minutes is not None else settings.STALE_JOB_TTL_MINUTES
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=ttl)

        stale = self.repo.find_stale(STALE_STATUSES, cutoff)
        for job_id in stale:
            logger.warning(f"Job {job_id} stalled (no progress for {ttl} min). Marking as error.")
            self.repo.mark_error(job_id, f"stalled: no progress for {ttl} minutes")
        return stale
