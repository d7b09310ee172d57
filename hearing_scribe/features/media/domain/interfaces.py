from abc import ABC, abstractmethod
from pathlib import Path
from .models import AudioEncoding


class IAudioTranscoder(ABC):
    """
    Contract for the external conversion tool.
    Abstracts FFmpeg/FFprobe away from the normalization and chunking logic.
    """

    @abstractmethod
    def transcode(self, input_path: Path, output_path: Path, encoding: AudioEncoding) -> None:
        """
        Drops any video stream and re-encodes the audio track.

        Raises:
            TranscodeError: non-zero exit or timeout.
        """
        pass

    @abstractmethod
    def probe_duration(self, input_path: Path) -> float:
        """
        Returns the container duration in seconds.

        Raises:
            TranscodeError: the tool failed or printed something that is not a number.
        """
        pass

    @abstractmethod
    def cut(self, input_path: Path, output_path: Path, start_seconds: float,
            duration_seconds: float, encoding: AudioEncoding) -> None:
        """Re-encodes the window [start, start + duration) into its own file."""
        pass


class IMediaFetcher(ABC):
    """Contract for pulling the uploaded media out of object storage."""

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """
        Raises:
            MediaDownloadError: any non-2xx response.
        """
        pass
