from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID
from .models import TranscriptionResult, UtteranceRecord, StoredUtterance


class ITranscriptionBackend(ABC):
    """
    Contract for any remote speech-to-text provider.
    Stateless per call: audio in, chunk-local ordered utterances out.
    Chunk offsets are applied by the caller, never here.
    """
    name: str = "backend"

    # Provider per-request ceiling. None means no ceiling (no size-driven conversion/chunking).
    max_upload_bytes: Optional[int] = None

    @abstractmethod
    def ensure_configured(self) -> None:
        """
        Raises:
            ConfigurationError: endpoint or credential missing.
        """
        pass

    @abstractmethod
    def transcribe(self, audio: bytes, content_type: str, filename: str) -> TranscriptionResult:
        """
        Transcribes one audio buffer.

        Raises:
            ConfigurationError: endpoint or credential missing.
            ProviderError: non-success response / timeout.
        """
        pass


class IUtteranceRepository(ABC):

    @abstractmethod
    def bulk_insert(self, job_id: UUID, records: List[UtteranceRecord]) -> int:
        """Inserts all records in a single transaction; returns the row count."""
        pass

    @abstractmethod
    def update_utterance(self, utterance_id: UUID, speaker_label: Optional[str], text: Optional[str]) -> bool:
        """Rewrites label and/or text of one row. Timing is never touched."""
        pass

    @abstractmethod
    def list_for_job(self, job_id: UUID) -> List[StoredUtterance]:
        """All utterances of a job in sort order."""
        pass

    @abstractmethod
    def count_for_job(self, job_id: UUID) -> int:
        pass

    @abstractmethod
    def delete_for_job(self, job_id: UUID) -> int:
        pass
