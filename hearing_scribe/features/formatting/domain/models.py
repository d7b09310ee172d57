from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CorrectionItem:
    """One utterance as the LLM sees it. Timing is sent for context only."""
    id: str
    speaker: str
    text: str
    start_time: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "speaker": self.speaker, "text": self.text, "start_time": self.start_time}


@dataclass(frozen=True)
class CorrectionUpdate:
    """A parsed correction. None means 'leave this field as it is'."""
    id: str
    speaker_label: Optional[str] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class BatchOutcome:
    index: int
    size: int
    applied: int = 0
    failed: bool = False
    reason: Optional[str] = None


@dataclass
class CorrectionSummary:
    """Result of one correction pass over a job."""
    outcomes: List[BatchOutcome] = field(default_factory=list)

    @property
    def batch_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed_batches(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def corrected_count(self) -> int:
        return sum(o.applied for o in self.outcomes)

    def to_meta(self) -> Dict[str, Any]:
        return {
            "correction_batches": self.batch_count,
            "failed_batches": self.failed_batches,
            "corrected_count": self.corrected_count,
        }
