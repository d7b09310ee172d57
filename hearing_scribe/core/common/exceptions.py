# File: hearing_scribe/core/common/exceptions.py

from typing import Optional


class PipelineError(RuntimeError):
    """Base class for every failure raised inside the transcription pipeline."""


class ConfigurationError(PipelineError):
    """A required endpoint or credential is missing."""


class ProviderError(PipelineError):
    """An external provider answered with a non-success status (or not at all)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MediaDownloadError(ProviderError):
    pass


class TranscodeError(PipelineError):
    """ffmpeg/ffprobe exited non-zero or timed out."""


class ChunkingError(PipelineError):
    pass


class PersistenceError(PipelineError):
    pass


class StageError(PipelineError):
    """
    Wraps any exception raised while a pipeline stage was running,
    so the orchestrator can report *where* it happened.
    """

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause

    @property
    def is_configuration_error(self) -> bool:
        return isinstance(self.cause, ConfigurationError)
