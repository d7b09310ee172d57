# File: hearing_scribe/features/pipeline/service/orchestrator.py
import logging
from contextlib import contextmanager
from typing import Callable, Optional
from uuid import UUID

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.enums import TranscriptionEngine
from hearing_scribe.core.common.exceptions import StageError, TranscodeError, ChunkingError
from hearing_scribe.core.jobs.domain.interfaces import IJobRepository
from hearing_scribe.core.jobs.progress import ProgressTracker, InvalidTransitionError
from hearing_scribe.core.jobs.types import JobStatus, PipelineStage
from hearing_scribe.features.formatting.service.job_handler import CorrectionHandler
from hearing_scribe.features.intelligence.domain.interfaces import IChatModel
from hearing_scribe.features.media.domain.interfaces import IAudioTranscoder, IMediaFetcher
from hearing_scribe.features.media.domain.models import MediaAsset
from hearing_scribe.features.media.service.chunker import ChunkSplitter
from hearing_scribe.features.media.service.normalizer import MediaNormalizer
from hearing_scribe.features.transcription.domain.interfaces import ITranscriptionBackend, IUtteranceRepository
from hearing_scribe.features.transcription.service.job_handler import TranscriptionHandler
from hearing_scribe.features.transcription.service.persister import UtterancePersister
from ..domain.models import PipelineOutcome

logger = logging.getLogger(__name__)

# Progress milestones owned by the orchestrator
TRANSCRIPTION_START = 15
DOWNLOADED = 20
HANDOFF_TO_FORMATTING = 65


def format_error(error: StageError, limit: Optional[int] = None) -> str:
    """'<stage>: <message>' or 'Configuration error (<stage>): <message>', bounded in length."""
    limit = limit or settings.ERROR_MESSAGE_MAX_CHARS
    if error.is_configuration_error:
        message = f"Configuration error ({error.stage}): {error.cause}"
    else:
        message = f"{error.stage}: {error.cause}"
    if len(message) > limit:
        message = message[:limit - 3] + "..."
    return message


@contextmanager
def stage(name: PipelineStage):
    """Tags anything raised inside the block with the stage it came from."""
    try:
        yield
    except StageError:
        raise
    except (TranscodeError, ChunkingError) as e:
        # Conversion runs inside the backend call but is reported as its own stage
        raise StageError(PipelineStage.NORMALIZE.value, e) from e
    except Exception as e:
        raise StageError(name.value, e) from e


class PipelineOrchestrator:
    """
    Runs one job end to end: download -> normalize/transcribe -> persist -> correct.

    Stages run strictly in sequence. Any stage failure is converted into a
    persisted ERROR status and returned as a PipelineOutcome; nothing raises past run().
    Work committed before the failure (utterances, corrected labels) is kept.
    """

    def __init__(self,
                 jobs: IJobRepository,
                 utterances: IUtteranceRepository,
                 fetcher: IMediaFetcher,
                 transcoder: IAudioTranscoder,
                 backend_factory: Callable[[TranscriptionEngine], ITranscriptionBackend],
                 chat_model: IChatModel):
        self.jobs = jobs
        self.utterances = utterances
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.backend_factory = backend_factory
        self.chat_model = chat_model

    def run(self, job_id: UUID, engine: Optional[TranscriptionEngine] = None) -> PipelineOutcome:
        job = self.jobs.get_job(job_id)
        if not job:
            logger.error(f"Job {job_id} not found.")
            return PipelineOutcome(job_id=job_id, status=JobStatus.ERROR, progress=0,
                                   stage=PipelineStage.LOAD.value, error="Job not found")
        if job.status.is_terminal:
            # Not persisted: the job keeps its terminal state
            return PipelineOutcome(job_id=job_id, status=job.status, progress=job.progress,
                                   stage=PipelineStage.LOAD.value,
                                   error=f"Job is already {job.status.value}; reprocess it to run again")

        tracker = ProgressTracker(job_id, self.jobs, status=job.status, progress=job.progress)
        utterance_count = 0
        degraded = False

        try:
            with stage(PipelineStage.LOAD):
                engine = TranscriptionEngine(engine or job.engine or settings.DEFAULT_ENGINE)
                if engine != job.engine:
                    self.jobs.set_engine(job_id, engine)
                if not job.media_url:
                    raise ValueError("Job has no media attached")
                backend = self.backend_factory(engine)

                logger.info(f"Job {job_id}: starting pipeline with engine '{engine.value}'")
                self.jobs.mark_started(job_id)
                tracker.advance(TRANSCRIPTION_START, JobStatus.TRANSCRIBING)

            with stage(PipelineStage.TRANSCRIBE):
                backend.ensure_configured()

            with stage(PipelineStage.DOWNLOAD):
                asset = MediaAsset(url=job.media_url, data=self.fetcher.fetch(job.media_url))
                tracker.advance(DOWNLOADED)

            with stage(PipelineStage.TRANSCRIBE):
                handler = TranscriptionHandler(
                    backend=backend,
                    normalizer=MediaNormalizer(self.transcoder),
                    splitter=ChunkSplitter(self.transcoder),
                    report=tracker.advance
                )
                result = handler.handle(asset)
                degraded = result.degraded

            with stage(PipelineStage.PERSIST):
                utterance_count = UtterancePersister(self.utterances).persist(job_id, result.utterances)
                self.jobs.merge_meta(job_id, {
                    "utterance_count": utterance_count,
                    "chunk_count": result.chunk_count,
                    "degraded": result.degraded,
                    "duration_seconds": result.duration_seconds,
                })
                tracker.advance(HANDOFF_TO_FORMATTING, JobStatus.FORMATTING)

            with stage(PipelineStage.FORMAT):
                correction = CorrectionHandler(self.chat_model, self.utterances)
                summary = correction.handle(
                    job_id, job.glossary, tracker,
                    before_complete=lambda s: self.jobs.merge_meta(job_id, s.to_meta())
                )

        except StageError as e:
            return self._fail(tracker, e, utterance_count, degraded)

        logger.info(f"Job {job_id}: completed ({utterance_count} utterances, {summary.corrected_count} corrected)")
        return PipelineOutcome(
            job_id=job_id,
            status=tracker.status,
            progress=tracker.progress,
            utterance_count=utterance_count,
            corrected_count=summary.corrected_count,
            degraded=degraded
        )

    def _fail(self, tracker: ProgressTracker, error: StageError,
              utterance_count: int, degraded: bool) -> PipelineOutcome:
        message = format_error(error)
        logger.error(f"Job {tracker.state.job_id} failed at {error.stage}: {error.cause}", exc_info=error.cause)
        try:
            tracker.fail(message)
        except InvalidTransitionError:
            # Already terminal: the stored status stays as it is
            logger.warning(f"Job {tracker.state.job_id} is already {tracker.status.value}; error not persisted.")
        except Exception as e:
            # The store itself may be what broke; the caller still gets the outcome
            logger.exception(f"Could not persist error status for job {tracker.state.job_id}: {e}")
        return PipelineOutcome(
            job_id=tracker.state.job_id,
            status=tracker.status if tracker.status == JobStatus.COMPLETED else JobStatus.ERROR,
            progress=tracker.progress,
            stage=error.stage,
            error=message,
            utterance_count=utterance_count,
            degraded=degraded
        )
