import subprocess
import logging
from pathlib import Path
from typing import List, Optional
from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import TranscodeError
from ..domain.interfaces import IAudioTranscoder
from ..domain.models import AudioEncoding

logger = logging.getLogger(__name__)

class FFmpegAdapter(IAudioTranscoder):
    """
    Concrete implementation of IAudioTranscoder using FFmpeg / FFprobe subprocesses.
    """

    def __init__(self,
                 ffmpeg_binary: Optional[str] = None,
                 ffprobe_binary: Optional[str] = None,
                 transcode_timeout: Optional[int] = None,
                 chunk_timeout: Optional[int] = None,
                 probe_timeout: Optional[int] = None):
        self.ffmpeg = ffmpeg_binary or settings.FFMPEG_BINARY
        self.ffprobe = ffprobe_binary or settings.FFPROBE_BINARY
        self.transcode_timeout = transcode_timeout or settings.TRANSCODE_TIMEOUT_SEC
        self.chunk_timeout = chunk_timeout or settings.CHUNK_TIMEOUT_SEC
        self.probe_timeout = probe_timeout or settings.PROBE_TIMEOUT_SEC

    @staticmethod
    def _encoding_args(encoding: AudioEncoding) -> List[str]:
        # -vn: Disable video
        # -ac 1: Mono is enough for speech recognition
        return [
            "-vn",
            "-acodec", encoding.codec,
            "-ab", f"{encoding.bitrate_kbps}k",
            "-ar", str(encoding.sample_rate_hz),
            "-ac", str(encoding.channels),
        ]

    def transcode(self, input_path: Path, output_path: Path, encoding: AudioEncoding) -> None:
        if not input_path.exists():
            raise FileNotFoundError(f"Media not found: {input_path}")

        cmd = [
            self.ffmpeg,
            "-y",
            "-i", str(input_path),
            *self._encoding_args(encoding),
            str(output_path)
        ]
        self._run(cmd, self.transcode_timeout, "Audio conversion")

    def cut(self, input_path: Path, output_path: Path, start_seconds: float,
            duration_seconds: float, encoding: AudioEncoding) -> None:
        # -ss after -i: accurate seek, chunks are re-encoded anyway
        cmd = [
            self.ffmpeg,
            "-y",
            "-i", str(input_path),
            "-ss", str(start_seconds),
            "-t", str(duration_seconds),
            *self._encoding_args(encoding),
            str(output_path)
        ]
        self._run(cmd, self.chunk_timeout, "Audio chunking")

    def probe_duration(self, input_path: Path) -> float:
        cmd = [
            self.ffprobe,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "csv=p=0",
            str(input_path)
        ]
        output = self._run(cmd, self.probe_timeout, "Duration probe")
        try:
            return float(output.strip())
        except ValueError:
            raise TranscodeError(f"Duration probe returned no duration: {output.strip()[:200]!r}")

    def _run(self, cmd: List[str], timeout: int, what: str) -> str:
        logger.info(f"Executing: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.CalledProcessError as e:
            error_message = (e.stderr or "").strip() or str(e)
            logger.error(f"{what} failed. STDERR: {error_message}")
            raise TranscodeError(f"{what} failed: {error_message[-500:]}") from e
        except subprocess.TimeoutExpired as e:
            logger.error(f"{what} timed out after {timeout}s")
            raise TranscodeError(f"{what} timed out after {timeout}s") from e
        except FileNotFoundError as e:
            raise TranscodeError(f"{what} failed: binary not found ({cmd[0]})") from e
        return result.stdout or ""
