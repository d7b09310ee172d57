from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlparse
from hearing_scribe.core.common.enums import FileType
from hearing_scribe.core.config.settings import settings

VIDEO_EXTENSIONS = frozenset({"mp4", "mkv", "avi", "mov", "webm", "flv", "wmv"})

# Passthrough content types for audio that is sent as-is
AUDIO_CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "flac": "audio/flac",
}
DEFAULT_CONTENT_TYPE = "audio/mpeg"


def extension_of(location: str) -> str:
    """'https://x/media/abc.MP4?token=1' -> 'mp4'. Query strings are ignored."""
    path = urlparse(location).path or location
    suffix = PurePosixPath(path).suffix
    return suffix[1:].lower() if suffix else ""


def kind_for_extension(extension: str) -> FileType:
    if extension in VIDEO_EXTENSIONS:
        return FileType.VIDEO
    if extension in AUDIO_CONTENT_TYPES:
        return FileType.AUDIO
    return FileType.UNKNOWN


@dataclass(frozen=True)
class AudioEncoding:
    """
    Target encoding for everything we transcode.
    Mono, fixed bitrate/rate MP3 keeps uploads small and predictable.
    """
    bitrate_kbps: int = 128
    sample_rate_hz: int = 22050
    channels: int = 1
    format: str = "mp3"
    codec: str = "libmp3lame"
    content_type: str = "audio/mpeg"

    @classmethod
    def from_settings(cls) -> "AudioEncoding":
        return cls(
            bitrate_kbps=settings.AUDIO_BITRATE_KBPS,
            sample_rate_hz=settings.AUDIO_SAMPLE_RATE_HZ,
            channels=settings.AUDIO_CHANNELS
        )


@dataclass(frozen=True)
class MediaAsset:
    """
    The uploaded file, fetched into memory.
    """
    url: str
    data: bytes

    @property
    def extension(self) -> str:
        return extension_of(self.url)

    @property
    def kind(self) -> FileType:
        return kind_for_extension(self.extension)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class NormalizedAudio:
    """
    Audio ready for a transcription provider.
    """
    data: bytes
    content_type: str
    filename: str
    converted: bool = False

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AudioChunk:
    """
    One fixed-length window of a longer recording.
    offset_seconds = index * chunk duration, applied to every timestamp the backend returns.
    """
    index: int
    total: int
    offset_seconds: float
    duration_seconds: float
    data: bytes

    @property
    def filename(self) -> str:
        return f"chunk_{self.index}.mp3"
