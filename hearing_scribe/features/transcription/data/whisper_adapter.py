# File: hearing_scribe/features/transcription/data/whisper_adapter.py
import logging
from typing import Optional

import requests

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import ConfigurationError, ProviderError
from ..domain.interfaces import ITranscriptionBackend
from ..domain.models import TranscriptionResult, RawUtterance

logger = logging.getLogger(__name__)


class WhisperAdapter(ITranscriptionBackend):
    """
    Segment-only backend: Azure OpenAI Whisper deployment.
    No diarization, so every segment carries the placeholder speaker (index None).
    """
    name = "whisper"

    def __init__(self,
                 endpoint: Optional[str] = None,
                 api_key: Optional[str] = None,
                 deployment: Optional[str] = None,
                 api_version: Optional[str] = None,
                 language: Optional[str] = None,
                 timeout: Optional[int] = None,
                 max_upload_bytes: Optional[int] = None,
                 http: Optional[requests.Session] = None):
        self.endpoint = (endpoint if endpoint is not None else settings.AZURE_OPENAI_ENDPOINT).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AZURE_OPENAI_API_KEY
        self.deployment = deployment or settings.WHISPER_DEPLOYMENT
        self.api_version = api_version or settings.WHISPER_API_VERSION
        self.language = language or settings.WHISPER_LANGUAGE
        self.timeout = timeout or settings.WHISPER_TIMEOUT_SEC
        self.max_upload_bytes = max_upload_bytes or settings.WHISPER_MAX_UPLOAD_BYTES
        self.http = http or requests.Session()

    @property
    def url(self) -> str:
        return (f"{self.endpoint}/openai/deployments/{self.deployment}"
                f"/audio/transcriptions?api-version={self.api_version}")

    def ensure_configured(self) -> None:
        if not self.endpoint or not self.api_key:
            raise ConfigurationError("AZURE_OPENAI_ENDPOINT or AZURE_OPENAI_API_KEY is not set")

    def transcribe(self, audio: bytes, content_type: str, filename: str) -> TranscriptionResult:
        self.ensure_configured()

        logger.info(f"Sending {len(audio) / 1024 / 1024:.1f}MB to Whisper ({self.deployment})...")

        try:
            res = self.http.post(
                self.url,
                headers={"api-key": self.api_key},
                files={"file": (filename, audio, content_type)},
                data={
                    "response_format": "verbose_json",
                    "language": self.language,
                    "timestamp_granularities[]": "segment",
                },
                timeout=self.timeout
            )
        except requests.Timeout as e:
            raise ProviderError(f"Whisper API timeout ({self.timeout}s); audio may be too long") from e
        except requests.RequestException as e:
            raise ProviderError(f"Whisper API unreachable: {e}") from e

        if not res.ok:
            snippet = (res.text or "")[:settings.PROVIDER_ERROR_SNIPPET_CHARS]
            logger.error(f"Whisper API error {res.status_code}: {snippet}")
            raise ProviderError(f"Whisper API {res.status_code}: {snippet}", status_code=res.status_code)

        return self._parse_response(res.json())

    def _parse_response(self, data: dict) -> TranscriptionResult:
        segments = data.get("segments") or []
        full_text = (data.get("text") or "").strip()
        duration = float(data.get("duration") or 0.0)

        logger.info(f"Whisper OK: {len(segments)} segments, {len(full_text)} chars")

        if not segments and full_text:
            # Never drop a non-empty transcript: one utterance spanning the whole file
            logger.warning("Whisper returned no segments; using whole-transcript fallback.")
            return TranscriptionResult(
                utterances=[RawUtterance(text=full_text, start=0.0, end=duration)],
                duration_seconds=duration,
                degraded=True,
                engine=self.name
            )

        utterances = [
            RawUtterance(
                text=(seg.get("text") or "").strip(),
                start=float(seg.get("start") or 0.0),
                end=float(seg.get("end") or 0.0)
            )
            for seg in segments
        ]
        return TranscriptionResult(utterances=utterances, duration_seconds=duration, engine=self.name)
