from typing import Optional
from uuid import UUID

from hearing_scribe.core.common.enums import TranscriptionEngine
from ..domain.models import PipelineOutcome
from .orchestrator import PipelineOrchestrator


def build_orchestrator() -> PipelineOrchestrator:
    """Wires the production adapters."""
    from hearing_scribe.core.jobs.data.repository import SqlJobRepository
    from hearing_scribe.features.intelligence.data.azure_chat_adapter import AzureChatAdapter
    from hearing_scribe.features.media.data.ffmpeg_adapter import FFmpegAdapter
    from hearing_scribe.features.media.data.http_fetcher import HttpMediaFetcher
    from hearing_scribe.features.transcription.data.repository import SqlUtteranceRepository
    from hearing_scribe.features.transcription.service.api import build_backend

    return PipelineOrchestrator(
        jobs=SqlJobRepository(),
        utterances=SqlUtteranceRepository(),
        fetcher=HttpMediaFetcher(),
        transcoder=FFmpegAdapter(),
        backend_factory=build_backend,
        chat_model=AzureChatAdapter()
    )


def process_transcription(job_id: UUID, engine: Optional[TranscriptionEngine] = None) -> PipelineOutcome:
    """
    Standalone API: runs the whole pipeline for one job.
    Never raises for stage failures; inspect the returned outcome.
    """
    return build_orchestrator().run(job_id, engine)


def get_progress(job_id: UUID):
    """
    Standalone API for the polling client: {status, progress, label, title} or None.
    """
    from hearing_scribe.core.jobs.service.manager import JobManager
    return JobManager().get_status(job_id)
