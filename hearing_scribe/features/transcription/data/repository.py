import logging
from typing import List, Optional
from uuid import UUID

from hearing_scribe.core.database.connection import SessionLocal, register_models
from hearing_scribe.core.common.exceptions import PersistenceError
from .sql_models import UtteranceModel
from ..domain.interfaces import IUtteranceRepository
from ..domain.models import UtteranceRecord, StoredUtterance

logger = logging.getLogger(__name__)

register_models()


def _to_stored(row: UtteranceModel) -> StoredUtterance:
    return StoredUtterance(
        id=row.id,
        job_id=row.job_id,
        speaker_label=row.speaker_label,
        text=row.text,
        start_time=row.start_time,
        end_time=row.end_time,
        sort_order=row.sort_order,
        words=row.words
    )


class SqlUtteranceRepository(IUtteranceRepository):

    def bulk_insert(self, job_id: UUID, records: List[UtteranceRecord]) -> int:
        with SessionLocal() as db:
            try:
                db.add_all([
                    UtteranceModel(
                        job_id=job_id,
                        speaker_label=r.speaker_label,
                        text=r.text,
                        start_time=r.start_time,
                        end_time=r.end_time,
                        words=r.words,
                        sort_order=r.sort_order
                    )
                    for r in records
                ])
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Failed to save utterances for job {job_id}: {e}")
                raise PersistenceError(f"Failed to save utterances: {e}") from e
        return len(records)

    def update_utterance(self, utterance_id: UUID, speaker_label: Optional[str], text: Optional[str]) -> bool:
        with SessionLocal() as db:
            row = db.get(UtteranceModel, utterance_id)
            if not row:
                return False
            if speaker_label is not None:
                row.speaker_label = speaker_label
            if text is not None:
                row.text = text
            db.commit()
            return True

    def list_for_job(self, job_id: UUID) -> List[StoredUtterance]:
        with SessionLocal() as db:
            rows = (
                db.query(UtteranceModel)
                .filter(UtteranceModel.job_id == job_id)
                .order_by(UtteranceModel.sort_order)
                .all()
            )
            return [_to_stored(r) for r in rows]

    def count_for_job(self, job_id: UUID) -> int:
        with SessionLocal() as db:
            return db.query(UtteranceModel).filter(UtteranceModel.job_id == job_id).count()

    def delete_for_job(self, job_id: UUID) -> int:
        with SessionLocal() as db:
            deleted = (
                db.query(UtteranceModel)
                .filter(UtteranceModel.job_id == job_id)
                .delete(synchronize_session=False)
            )
            db.commit()
            return deleted
