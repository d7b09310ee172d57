import logging
from typing import Optional

import requests

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import MediaDownloadError
from ..domain.interfaces import IMediaFetcher

logger = logging.getLogger(__name__)


class HttpMediaFetcher(IMediaFetcher):
    """Downloads uploaded media from object storage (signed/public URL)."""

    def __init__(self, timeout: Optional[int] = None, http: Optional[requests.Session] = None,
                 chunk_size: int = 1024 * 1024):
        self.timeout = timeout or settings.MEDIA_DOWNLOAD_TIMEOUT_SEC
        self.http = http or requests.Session()
        self.chunk_size = chunk_size

    def fetch(self, url: str) -> bytes:
        logger.info(f"Downloading media from: {url}")
        try:
            with self.http.get(url, stream=True, timeout=self.timeout) as res:
                if not 200 <= res.status_code < 300:
                    raise MediaDownloadError(
                        f"Could not download media from storage (HTTP {res.status_code})",
                        status_code=res.status_code
                    )
                # Stream to memory in pieces; media can be hundreds of MB
                buffer = bytearray()
                for piece in res.iter_content(chunk_size=self.chunk_size):
                    if piece:
                        buffer.extend(piece)
        except requests.RequestException as e:
            raise MediaDownloadError(f"Could not download media from storage: {e}") from e

        logger.info(f"Downloaded: {len(buffer) / 1024 / 1024:.1f}MB")
        return bytes(buffer)
