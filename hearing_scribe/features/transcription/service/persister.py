# File: hearing_scribe/features/transcription/service/persister.py
import logging
from typing import List
from uuid import UUID

from ..domain.interfaces import IUtteranceRepository
from ..domain.models import (
    RawUtterance, UtteranceRecord,
    PLACEHOLDER_SPEAKER, EMPTY_TRANSCRIPT_TEXT, speaker_label_for
)

logger = logging.getLogger(__name__)


def to_records(utterances: List[RawUtterance]) -> List[UtteranceRecord]:
    """
    Maps backend output onto the canonical row shape.
    sort_order is the input position; timing is clamped so 0 <= start <= end.
    """
    if not utterances:
        return [UtteranceRecord(
            speaker_label=PLACEHOLDER_SPEAKER,
            text=EMPTY_TRANSCRIPT_TEXT,
            start_time=0.0,
            end_time=0.0,
            sort_order=0
        )]

    records = []
    for order, utt in enumerate(utterances):
        start = max(0.0, float(utt.start))
        end = max(start, float(utt.end))
        records.append(UtteranceRecord(
            speaker_label=speaker_label_for(utt.speaker),
            text=utt.text,
            start_time=start,
            end_time=end,
            sort_order=order,
            words=[w.to_dict() for w in utt.words] if utt.words else None
        ))
    return records


class UtterancePersister:
    """
    Writes one run's utterances as a single bulk insert.
    """

    def __init__(self, repository: IUtteranceRepository):
        self.repository = repository

    def persist(self, job_id: UUID, utterances: List[RawUtterance]) -> int:
        records = to_records(utterances)
        if not utterances:
            logger.warning(f"Job {job_id}: backend returned nothing, storing placeholder utterance.")

        count = self.repository.bulk_insert(job_id, records)
        logger.info(f"Job {job_id}: saved {count} utterances.")
        return count
