import logging
from typing import Iterable, Iterator, List, Optional, Sequence
from uuid import UUID

from hearing_scribe.core.config.settings import settings
from hearing_scribe.features.transcription.domain.interfaces import IUtteranceRepository
from hearing_scribe.features.transcription.domain.models import StoredUtterance
from ..domain.interfaces import IChatModel
from ..domain.models import ChatMessage, TranscriptSummary
from .prompts import SUMMARY_SYSTEM_PROMPT, SUMMARY_USER_TEMPLATE, SUMMARY_FALLBACK, CHAT_SYSTEM_TEMPLATE

logger = logging.getLogger(__name__)

# Only these roles may come from the client; the system turn is always ours
ALLOWED_CHAT_ROLES = ("user", "assistant")


def _default_model() -> IChatModel:
    from ..data.azure_chat_adapter import AzureChatAdapter
    return AzureChatAdapter()


def _default_repository() -> IUtteranceRepository:
    from hearing_scribe.features.transcription.data.repository import SqlUtteranceRepository
    return SqlUtteranceRepository()


def build_transcript_text(utterances: Sequence[StoredUtterance]) -> str:
    """'[JUIZ(A)]: Bom dia.' one line per utterance, in sort order."""
    ordered = sorted(utterances, key=lambda u: u.sort_order)
    return "\n".join(f"[{u.speaker_label}]: {u.text}" for u in ordered)


def collect_stream(tokens: Iterable[str]) -> str:
    """Reassembles a streamed answer by concatenation in arrival order."""
    return "".join(tokens)


def summarize_transcription(job_id: UUID,
                            model: Optional[IChatModel] = None,
                            repository: Optional[IUtteranceRepository] = None) -> TranscriptSummary:
    """
    Standalone API: structured summary of a hearing.

    Raises:
        LookupError: the job has no utterances.
        ProviderError: the LLM call failed.
    """
    repository = repository or _default_repository()
    utterances = repository.list_for_job(job_id)
    if not utterances:
        raise LookupError(f"No utterances found for job {job_id}.")

    model = model or _default_model()
    messages = [
        ChatMessage("system", SUMMARY_SYSTEM_PROMPT),
        ChatMessage("user", SUMMARY_USER_TEMPLATE.format(transcript=build_transcript_text(utterances))),
    ]
    text = model.complete(messages, max_tokens=settings.SUMMARY_MAX_TOKENS)

    logger.info(f"Summary generated for job {job_id} ({len(utterances)} utterances)")
    return TranscriptSummary(job_id=job_id, text=text or SUMMARY_FALLBACK, utterance_count=len(utterances))


def chat_about_transcription(job_id: UUID,
                             messages: List[ChatMessage],
                             model: Optional[IChatModel] = None,
                             repository: Optional[IUtteranceRepository] = None) -> Iterator[str]:
    """
    Standalone API: streams an answer grounded on the job's transcript.
    An empty transcript is allowed; the model is told so by the empty section.
    """
    if not messages:
        raise ValueError("messages must not be empty")

    repository = repository or _default_repository()
    transcript = build_transcript_text(repository.list_for_job(job_id))

    conversation = [ChatMessage("system", CHAT_SYSTEM_TEMPLATE.format(transcript=transcript))]
    conversation.extend(m for m in messages if m.role in ALLOWED_CHAT_ROLES)

    model = model or _default_model()
    return model.stream(conversation, max_tokens=settings.CHAT_MAX_TOKENS)
