from uuid import UUID

from hearing_scribe.core.jobs.data.repository import SqlJobRepository
from hearing_scribe.core.jobs.progress import ProgressTracker
from hearing_scribe.core.jobs.types import JobStatus
from hearing_scribe.features.intelligence.data.azure_chat_adapter import AzureChatAdapter
from hearing_scribe.features.transcription.data.repository import SqlUtteranceRepository
from ..domain.models import CorrectionSummary
from .job_handler import CorrectionHandler


def format_transcription(job_id: UUID) -> CorrectionSummary:
    """
    Standalone API: runs only the correction pass over an already transcribed job.

    Raises:
        LookupError: the job does not exist or has no utterances.
        InvalidTransitionError: the job already reached a terminal status.
    """
    jobs = SqlJobRepository()
    job = jobs.get_job(job_id)
    if not job:
        raise LookupError(f"Job {job_id} not found.")

    utterances = SqlUtteranceRepository()
    if utterances.count_for_job(job_id) == 0:
        raise LookupError(f"No utterances found for job {job_id}.")

    tracker = ProgressTracker(job_id, jobs, status=job.status, progress=job.progress)
    # Finished jobs raise InvalidTransitionError here
    tracker.advance(job.progress, JobStatus.FORMATTING)

    handler = CorrectionHandler(AzureChatAdapter(), utterances)
    return handler.handle(
        job_id, job.glossary, tracker,
        before_complete=lambda s: jobs.merge_meta(job_id, s.to_meta())
    )
