from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from uuid import UUID

from hearing_scribe.core.database.connection import SessionLocal, register_models
from hearing_scribe.core.common.enums import TranscriptionEngine
from ..models import TranscriptionJobModel
from ..types import JobStatus
from ..domain.interfaces import IJobRepository
from ..domain.models import JobSubmission, JobSnapshot

# Job rows own utterances through a string relationship; make sure the mapper can resolve it.
register_models()


def _to_snapshot(job: TranscriptionJobModel) -> JobSnapshot:
    return JobSnapshot(
        id=job.id,
        title=job.title,
        engine=job.engine,
        status=job.status,
        progress=job.progress or 0,
        glossary=job.glossary,
        media_url=job.media_url,
        media_size_bytes=job.media_size_bytes,
        error_message=job.error_message,
        meta=dict(job.meta or {}),
        updated_at=job.updated_at
    )


class SqlJobRepository(IJobRepository):

    def create_job(self, submission: JobSubmission) -> UUID:
        with SessionLocal() as db:
            glossary = (submission.glossary or "").strip() or None
            job = TranscriptionJobModel(
                title=submission.title.strip(),
                glossary=glossary,
                engine=submission.engine,
                status=JobStatus.UPLOADING,
                progress=0,
                media_url=submission.media_url,
                meta={}
            )
            db.add(job)
            db.commit()
            db.refresh(job)
            return job.id

    def get_job(self, job_id: UUID) -> Optional[JobSnapshot]:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            return _to_snapshot(job) if job else None

    def update_progress(self, job_id: UUID, progress: int, status: Optional[JobStatus] = None) -> None:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                raise LookupError(f"Job {job_id} not found.")
            job.progress = progress
            if status is not None:
                job.status = status
                if status == JobStatus.COMPLETED:
                    job.finished_at = datetime.now(timezone.utc)
            job.updated_at = datetime.now(timezone.utc)
            db.commit()

    def set_engine(self, job_id: UUID, engine: TranscriptionEngine) -> None:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                raise LookupError(f"Job {job_id} not found.")
            job.engine = engine
            db.commit()

    def set_media(self, job_id: UUID, media_url: str, size_bytes: Optional[int] = None) -> None:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                raise LookupError(f"Job {job_id} not found.")
            job.media_url = media_url
            job.media_size_bytes = size_bytes
            db.commit()

    def mark_started(self, job_id: UUID) -> None:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                raise LookupError(f"Job {job_id} not found.")
            job.started_at = datetime.now(timezone.utc)
            job.finished_at = None
            job.error_message = None
            db.commit()

    def mark_error(self, job_id: UUID, message: str) -> None:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                raise LookupError(f"Job {job_id} not found.")
            job.status = JobStatus.ERROR
            job.error_message = message
            now = datetime.now(timezone.utc)
            job.updated_at = now
            job.finished_at = now
            db.commit()

    def merge_meta(self, job_id: UUID, meta: Dict[str, Any]) -> None:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                raise LookupError(f"Job {job_id} not found.")
            # Re-assign so the JSON column is flagged dirty
            merged = dict(job.meta or {})
            merged.update(meta)
            job.meta = merged
            db.commit()

    def reset_for_retry(self, job_id: UUID) -> bool:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                return False
            # delete-orphan cascade removes the previous run's utterances
            job.utterances.clear()
            job.status = JobStatus.UPLOADING
            job.progress = 0
            job.error_message = None
            job.meta = {}
            job.started_at = None
            job.finished_at = None
            job.updated_at = datetime.now(timezone.utc)
            db.commit()
            return True

    def delete_job(self, job_id: UUID) -> bool:
        with SessionLocal() as db:
            job = db.get(TranscriptionJobModel, job_id)
            if not job:
                return False
            db.delete(job)
            db.commit()
            return True

    def find_stale(self, statuses: List[JobStatus], older_than: datetime) -> List[UUID]:
        with SessionLocal() as db:
            rows = (
                db.query(TranscriptionJobModel.id)
                .filter(
                    TranscriptionJobModel.status.in_(statuses),
                    TranscriptionJobModel.updated_at < older_than
                )
                .all()
            )
            return [row.id for row in rows]
