from dataclasses import dataclass
from typing import Dict
from uuid import UUID


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a chat-completion conversation."""
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class TranscriptSummary:
    """Structured hearing summary produced on demand for a finished job."""
    job_id: UUID
    text: str
    utterance_count: int
