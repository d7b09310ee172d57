from typing import Optional

from ..data.ffmpeg_adapter import FFmpegAdapter
from ..data.http_fetcher import HttpMediaFetcher
from ..domain.models import MediaAsset, NormalizedAudio
from .normalizer import MediaNormalizer


def fetch_media(url: str) -> MediaAsset:
    """
    Standalone API: Downloads the uploaded file.
    Does NOT interact with the database.
    """
    return MediaAsset(url=url, data=HttpMediaFetcher().fetch(url))


def normalize_file(data: bytes, filename: str, max_bytes: Optional[int] = None) -> NormalizedAudio:
    """
    Standalone API: Normalizes a local buffer with the default FFmpeg toolchain.
    """
    normalizer = MediaNormalizer(FFmpegAdapter())
    return normalizer.normalize(MediaAsset(url=filename, data=data), max_bytes)
