from hearing_scribe.core.common.enums import TranscriptionEngine
from hearing_scribe.features.media.data.ffmpeg_adapter import FFmpegAdapter
from hearing_scribe.features.media.domain.models import MediaAsset
from hearing_scribe.features.media.service.normalizer import MediaNormalizer
from hearing_scribe.features.media.service.chunker import ChunkSplitter
from ..data.whisper_adapter import WhisperAdapter
from ..data.deepgram_adapter import DeepgramAdapter
from ..domain.interfaces import ITranscriptionBackend
from ..domain.models import TranscriptionResult
from .job_handler import TranscriptionHandler


def build_backend(engine: TranscriptionEngine) -> ITranscriptionBackend:
    """Factory: engine enum -> concrete provider adapter."""
    if engine == TranscriptionEngine.WHISPER:
        return WhisperAdapter()
    if engine == TranscriptionEngine.DEEPGRAM:
        return DeepgramAdapter()
    raise ValueError(f"Unknown transcription engine: {engine}")


def run_transcription(data: bytes, filename: str,
                      engine: TranscriptionEngine = TranscriptionEngine.DEEPGRAM) -> TranscriptionResult:
    """
    Standalone API for running transcription directly.
    Useful for testing or CLI tools without the full Job system.
    """
    transcoder = FFmpegAdapter()
    handler = TranscriptionHandler(
        backend=build_backend(engine),
        normalizer=MediaNormalizer(transcoder),
        splitter=ChunkSplitter(transcoder)
    )
    return handler.handle(MediaAsset(url=filename, data=data))
