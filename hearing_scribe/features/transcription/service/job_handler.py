# File: hearing_scribe/features/transcription/service/job_handler.py
import logging
from typing import Callable, List, Optional

from hearing_scribe.features.media.domain.models import MediaAsset
from hearing_scribe.features.media.service.normalizer import MediaNormalizer
from hearing_scribe.features.media.service.chunker import ChunkSplitter
from ..domain.interfaces import ITranscriptionBackend
from ..domain.models import TranscriptionResult, RawUtterance

logger = logging.getLogger(__name__)

# Progress milestones reported while transcribing
NORMALIZE_START = 25
NORMALIZE_DONE = 30
BACKEND_START = 35
BACKEND_SPAN = 20
BACKEND_DONE = 55


class TranscriptionHandler:
    """
    Worker class responsible for turning one media file into ordered utterances.

    Normalize -> (split if still too large) -> backend call(s) -> merged result.
    Chunk offsets are applied here, so backends stay stateless per call.
    Nothing is persisted by this class.
    """

    def __init__(self,
                 backend: ITranscriptionBackend,
                 normalizer: MediaNormalizer,
                 splitter: ChunkSplitter,
                 report: Optional[Callable[[int], None]] = None):
        self.backend = backend
        self.normalizer = normalizer
        self.splitter = splitter
        self.report = report or (lambda progress: None)

    def handle(self, asset: MediaAsset) -> TranscriptionResult:
        self.backend.ensure_configured()
        ceiling = self.backend.max_upload_bytes

        # 1. Normalize
        self.report(NORMALIZE_START)
        audio = self.normalizer.normalize(asset, ceiling)
        self.report(NORMALIZE_DONE)

        # 2. Single call when the provider accepts the whole file
        self.report(BACKEND_START)
        if not self.splitter.needs_split(audio, ceiling):
            result = self.backend.transcribe(audio.data, audio.content_type, audio.filename)
            self.report(BACKEND_DONE)
            return result

        # 3. Chunked: strictly sequential, in index order
        merged: List[RawUtterance] = []
        degraded = False
        duration = 0.0
        chunk_count = 0
        for chunk in self.splitter.split(audio):
            logger.info(f"Transcribing chunk {chunk.index + 1}/{chunk.total} (offset {chunk.offset_seconds:.0f}s)")
            part = self.backend.transcribe(chunk.data, self.splitter.encoding.content_type, chunk.filename)

            merged.extend(u.shifted(chunk.offset_seconds) for u in part.utterances)
            degraded = degraded or part.degraded
            duration = chunk.offset_seconds + (part.duration_seconds or chunk.duration_seconds)
            chunk_count = chunk.total

            self.report(BACKEND_START + round((chunk.index + 1) / chunk.total * BACKEND_SPAN))

        logger.info(f"All chunks done: {len(merged)} utterances")
        self.report(BACKEND_DONE)
        return TranscriptionResult(
            utterances=merged,
            duration_seconds=duration,
            degraded=degraded,
            chunk_count=chunk_count,
            engine=self.backend.name
        )
