# File: hearing_scribe/features/formatting/service/job_handler.py
import logging
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import ConfigurationError
from hearing_scribe.core.jobs.progress import ProgressTracker
from hearing_scribe.core.jobs.types import JobStatus
from hearing_scribe.features.intelligence.domain.interfaces import IChatModel
from hearing_scribe.features.intelligence.domain.models import ChatMessage
from hearing_scribe.features.transcription.domain.interfaces import IUtteranceRepository
from hearing_scribe.features.transcription.domain.models import StoredUtterance
from ..domain.models import CorrectionItem, CorrectionUpdate, BatchOutcome, CorrectionSummary
from .prompts import build_system_prompt, build_user_prompt
from .response_parser import extract_json_array, to_updates

logger = logging.getLogger(__name__)

CORRECTION_START = 70
CORRECTION_SPAN = 20


def make_batches(utterances: Sequence[StoredUtterance], size: int) -> List[List[StoredUtterance]]:
    """Consecutive fixed-size slices; the last one may be shorter."""
    if size < 1:
        raise ValueError("Batch size must be >= 1")
    return [list(utterances[i:i + size]) for i in range(0, len(utterances), size)]


class CorrectionHandler:
    """
    Worker class for the FORMATTING stage.

    Re-labels speakers and repairs text batch by batch. Correction is best-effort:
    a failed LLM call, a malformed reply or an unparseable one skips that batch only.
    Updates are written as soon as a batch is parsed so earlier batches survive later failures.
    """

    def __init__(self,
                 model: IChatModel,
                 repository: IUtteranceRepository,
                 batch_size: Optional[int] = None,
                 max_tokens: Optional[int] = None,
                 temperature: Optional[float] = None):
        self.model = model
        self.repository = repository
        self.batch_size = batch_size or settings.CORRECTION_BATCH_SIZE
        self.max_tokens = max_tokens or settings.CORRECTION_MAX_TOKENS
        self.temperature = temperature if temperature is not None else settings.CORRECTION_TEMPERATURE

    def handle(self, job_id: UUID, glossary: Optional[str], tracker: ProgressTracker,
               before_complete: Optional[Callable[[CorrectionSummary], None]] = None) -> CorrectionSummary:
        """
        Runs every batch, then moves the job to COMPLETED/100.
        `before_complete` receives the summary while the job is still FORMATTING,
        so a failure there can still end the run in ERROR.
        """
        # Missing credentials are a configuration error for the whole stage, not a skipped batch
        self.model.ensure_configured()

        utterances = self.repository.list_for_job(job_id)
        batches = make_batches(utterances, self.batch_size)
        system_prompt = build_system_prompt(glossary)

        tracker.advance(CORRECTION_START)
        logger.info(f"Job {job_id}: correcting {len(utterances)} utterances in {len(batches)} batches")

        summary = CorrectionSummary()
        for index, batch in enumerate(batches):
            outcome = self._process_batch(index, batch, system_prompt)
            summary.outcomes.append(outcome)
            tracker.advance(CORRECTION_START + round((index + 1) / len(batches) * CORRECTION_SPAN))

        if before_complete:
            before_complete(summary)
        tracker.advance(100, JobStatus.COMPLETED)
        logger.info(
            f"Job {job_id}: formatting done. {summary.corrected_count} updates, "
            f"{summary.failed_batches}/{summary.batch_count} batches skipped."
        )
        return summary

    def _process_batch(self, index: int, batch: List[StoredUtterance], system_prompt: str) -> BatchOutcome:
        items = [
            CorrectionItem(id=str(u.id), speaker=u.speaker_label, text=u.text, start_time=u.start_time)
            for u in batch
        ]
        messages = [
            ChatMessage("system", system_prompt),
            ChatMessage("user", build_user_prompt(items)),
        ]

        try:
            response = self.model.complete(messages, max_tokens=self.max_tokens, temperature=self.temperature)
            parsed = extract_json_array(response)
            updates = to_updates(parsed) if parsed is not None else None
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning(f"Batch {index}: LLM call failed, skipping. {e}")
            return BatchOutcome(index=index, size=len(batch), failed=True, reason=str(e))

        if updates is None:
            logger.warning(f"Batch {index}: LLM response is not a JSON array, skipping.")
            return BatchOutcome(index=index, size=len(batch), failed=True, reason="unparseable response")

        applied = self._apply(batch, updates)
        return BatchOutcome(index=index, size=len(batch), applied=applied)

    def _apply(self, batch: List[StoredUtterance], updates: List[CorrectionUpdate]) -> int:
        # Only ids that were actually sent in this batch may be touched
        known = {str(u.id): u.id for u in batch}
        applied = 0
        for update in updates:
            utterance_id = known.get(update.id)
            if utterance_id is None:
                logger.debug(f"Ignoring update for unknown id {update.id}")
                continue
            if self.repository.update_utterance(utterance_id, update.speaker_label, update.text):
                applied += 1
        return applied
