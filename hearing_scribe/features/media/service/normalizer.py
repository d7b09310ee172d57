# File: hearing_scribe/features/media/service/normalizer.py

import logging
import tempfile
from pathlib import Path
from typing import Optional

from hearing_scribe.core.common.enums import FileType
from ..domain.interfaces import IAudioTranscoder
from ..domain.models import (
    MediaAsset, NormalizedAudio, AudioEncoding,
    AUDIO_CONTENT_TYPES, DEFAULT_CONTENT_TYPE
)

logger = logging.getLogger(__name__)


class MediaNormalizer:
    """
    Turns an uploaded file into something a transcription provider accepts.

    Rules:
    1. Video container -> always transcoded to mono MP3.
    2. Audio over the provider ceiling -> transcoded (smaller bitrate, mono).
    3. Anything else -> passed through untouched, content type from the extension.
    """

    def __init__(self, transcoder: IAudioTranscoder, encoding: Optional[AudioEncoding] = None):
        self.transcoder = transcoder
        self.encoding = encoding or AudioEncoding.from_settings()

    def needs_conversion(self, asset: MediaAsset, max_bytes: Optional[int]) -> bool:
        if asset.kind == FileType.VIDEO:
            return True
        return max_bytes is not None and asset.size_bytes > max_bytes

    def normalize(self, asset: MediaAsset, max_bytes: Optional[int] = None) -> NormalizedAudio:
        if not self.needs_conversion(asset, max_bytes):
            extension = asset.extension
            return NormalizedAudio(
                data=asset.data,
                content_type=AUDIO_CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE),
                filename=f"audio.{extension or 'mp3'}",
                converted=False
            )

        logger.info(
            f"Converting {asset.kind.value} ({asset.size_bytes / 1024 / 1024:.1f}MB, "
            f".{asset.extension or '?'}) to {self.encoding.format}..."
        )

        # Temp files live only for this call, success or failure
        with tempfile.TemporaryDirectory(prefix="hearing_scribe_") as tmp:
            input_path = Path(tmp) / f"input.{asset.extension or 'bin'}"
            output_path = Path(tmp) / f"output.{self.encoding.format}"
            input_path.write_bytes(asset.data)

            self.transcoder.transcode(input_path, output_path, self.encoding)
            data = output_path.read_bytes()

        logger.info(f"Converted: {len(data) / 1024 / 1024:.1f}MB")
        return NormalizedAudio(
            data=data,
            content_type=self.encoding.content_type,
            filename=f"audio.{self.encoding.format}",
            converted=True
        )
