# File: hearing_scribe/features/transcription/domain/models.py
from dataclasses import dataclass, field, replace
from typing import List, Optional, Dict, Any
from uuid import UUID

PLACEHOLDER_SPEAKER = "SPEAKER_00"
EMPTY_TRANSCRIPT_TEXT = "(Nenhum conteúdo transcrito)"


def speaker_label_for(index: Optional[int]) -> str:
    """0 -> 'SPEAKER_00', 7 -> 'SPEAKER_07'. Missing index maps to the placeholder."""
    return f"SPEAKER_{(index or 0):02d}"


@dataclass(frozen=True)
class WordTiming:
    """
    One recognised word with its own timing, used for highlight-as-you-play.
    """
    word: str
    start: float
    end: float
    confidence: float = 0.0
    speaker: Optional[int] = None

    def shifted(self, offset: float) -> "WordTiming":
        return replace(self, start=self.start + offset, end=self.end + offset)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
            "speaker": self.speaker if self.speaker is not None else 0,
        }


@dataclass(frozen=True)
class RawUtterance:
    """
    What a backend hands back: chunk-local timing, numeric speaker index (or none).
    """
    text: str
    start: float
    end: float
    speaker: Optional[int] = None
    words: Optional[List[WordTiming]] = None

    def shifted(self, offset: float) -> "RawUtterance":
        """Moves the utterance (and its words) onto the global timeline."""
        if not offset:
            return self
        words = [w.shifted(offset) for w in self.words] if self.words else self.words
        return replace(self, start=self.start + offset, end=self.end + offset, words=words)


@dataclass(frozen=True)
class TranscriptionResult:
    """
    The complete, ordered output of one backend call (or of all chunks merged).
    """
    utterances: List[RawUtterance] = field(default_factory=list)
    duration_seconds: float = 0.0
    # True when the provider returned no utterances and we fell back to the whole transcript
    degraded: bool = False
    chunk_count: int = 1
    engine: str = ""


@dataclass(frozen=True)
class UtteranceRecord:
    """Canonical row shape, before insert."""
    speaker_label: str
    text: str
    start_time: float
    end_time: float
    sort_order: int
    words: Optional[List[Dict[str, Any]]] = None


@dataclass(frozen=True)
class StoredUtterance:
    """Canonical row shape, as read back from the store."""
    id: UUID
    job_id: UUID
    speaker_label: str
    text: str
    start_time: float
    end_time: float
    sort_order: int
    words: Optional[List[Dict[str, Any]]] = None
