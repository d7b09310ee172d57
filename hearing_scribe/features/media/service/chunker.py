# File: hearing_scribe/features/media/service/chunker.py

import logging
import math
import tempfile
from pathlib import Path
from typing import Iterator, Optional

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import ChunkingError, TranscodeError
from ..domain.interfaces import IAudioTranscoder
from ..domain.models import NormalizedAudio, AudioChunk, AudioEncoding

logger = logging.getLogger(__name__)


class ChunkSplitter:
    """
    Splits audio that is still over the provider ceiling into fixed-length windows.

    Chunks are produced lazily, one at a time, so only one chunk buffer is alive
    while the caller transcribes it.
    """

    def __init__(self, transcoder: IAudioTranscoder,
                 chunk_duration: Optional[int] = None,
                 encoding: Optional[AudioEncoding] = None):
        self.transcoder = transcoder
        self.chunk_duration = chunk_duration or settings.CHUNK_DURATION_SEC
        self.encoding = encoding or AudioEncoding.from_settings()

    @staticmethod
    def needs_split(audio: NormalizedAudio, max_bytes: Optional[int]) -> bool:
        return max_bytes is not None and audio.size_bytes > max_bytes

    def chunk_count(self, duration_seconds: float) -> int:
        return math.ceil(duration_seconds / self.chunk_duration)

    def split(self, audio: NormalizedAudio) -> Iterator[AudioChunk]:
        """
        Yields chunks in index order.

        Raises:
            ChunkingError: the duration is zero or could not be probed.
            TranscodeError: cutting a window failed.
        """
        with tempfile.TemporaryDirectory(prefix="hearing_scribe_chunks_") as tmp:
            source = Path(tmp) / f"full.{self.encoding.format}"
            source.write_bytes(audio.data)

            try:
                duration = self.transcoder.probe_duration(source)
            except TranscodeError as e:
                raise ChunkingError(f"Could not determine audio duration: {e}") from e
            if not duration or duration <= 0:
                raise ChunkingError(f"Could not determine audio duration (got {duration!r})")

            total = self.chunk_count(duration)
            logger.info(f"Audio: {duration:.0f}s, splitting into {total} chunks of {self.chunk_duration}s")

            for index in range(total):
                start = index * self.chunk_duration
                chunk_path = Path(tmp) / f"chunk_{index}.{self.encoding.format}"

                self.transcoder.cut(source, chunk_path, start, self.chunk_duration, self.encoding)
                data = chunk_path.read_bytes()
                chunk_path.unlink()

                logger.info(f"Chunk {index + 1}/{total}: {len(data) / 1024 / 1024:.1f}MB")
                yield AudioChunk(
                    index=index,
                    total=total,
                    offset_seconds=float(start),
                    duration_seconds=float(min(self.chunk_duration, duration - start)),
                    data=data
                )
