# File: hearing_scribe/features/transcription/data/deepgram_adapter.py
import logging
from typing import Optional, List

import requests

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import ConfigurationError, ProviderError
from ..domain.interfaces import ITranscriptionBackend
from ..domain.models import TranscriptionResult, RawUtterance, WordTiming

logger = logging.getLogger(__name__)


class DeepgramAdapter(ITranscriptionBackend):
    """
    Diarizing backend: Deepgram pre-recorded API.
    Speakers come back as integer indices; word timings are kept when present.
    """
    name = "deepgram"
    # Deepgram accepts large bodies; only video containers get converted.
    max_upload_bytes = None

    def __init__(self,
                 api_key: Optional[str] = None,
                 url: Optional[str] = None,
                 model: Optional[str] = None,
                 language: Optional[str] = None,
                 utt_split: Optional[str] = None,
                 timeout: Optional[int] = None,
                 http: Optional[requests.Session] = None):
        self.api_key = api_key if api_key is not None else settings.DEEPGRAM_API_KEY
        self.url = url or settings.DEEPGRAM_URL
        self.model = model or settings.DEEPGRAM_MODEL
        self.language = language or settings.DEEPGRAM_LANGUAGE
        self.utt_split = utt_split or settings.DEEPGRAM_UTT_SPLIT
        self.timeout = timeout or settings.DEEPGRAM_TIMEOUT_SEC
        self.http = http or requests.Session()

    def ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError("DEEPGRAM_API_KEY is not set")

    def query_params(self) -> dict:
        return {
            "model": self.model,
            "language": self.language,
            "smart_format": "true",
            "diarize": "true",
            "punctuate": "true",
            "paragraphs": "true",
            "utterances": "true",
            "utt_split": self.utt_split,
        }

    def transcribe(self, audio: bytes, content_type: str, filename: str) -> TranscriptionResult:
        self.ensure_configured()

        logger.info(f"Sending {len(audio) / 1024 / 1024:.1f}MB ({filename}) to Deepgram {self.model}...")

        try:
            res = self.http.post(
                self.url,
                params=self.query_params(),
                headers={
                    "Authorization": f"Token {self.api_key}",
                    "Content-Type": content_type,
                },
                data=audio,
                timeout=self.timeout
            )
        except requests.Timeout as e:
            raise ProviderError(f"Deepgram API timeout ({self.timeout}s)") from e
        except requests.RequestException as e:
            raise ProviderError(f"Deepgram API unreachable: {e}") from e

        if not res.ok:
            snippet = (res.text or "")[:settings.PROVIDER_ERROR_SNIPPET_CHARS]
            logger.error(f"Deepgram API error {res.status_code}: {snippet}")
            raise ProviderError(f"Deepgram API {res.status_code}: {snippet}", status_code=res.status_code)

        return self._parse_response(res.json())

    def _parse_response(self, data: dict) -> TranscriptionResult:
        results = (data or {}).get("results") or {}
        raw_utterances = results.get("utterances") or []
        duration = float(((data or {}).get("metadata") or {}).get("duration") or 0.0)

        logger.info(f"Deepgram returned {len(raw_utterances)} utterances")

        if not raw_utterances:
            transcript = self._channel_transcript(results)
            if not transcript:
                return TranscriptionResult(utterances=[], duration_seconds=duration, engine=self.name)
            # Degraded: no diarization, no timing. Keep the text rather than fail the job.
            logger.warning("Deepgram returned no utterances; using channel transcript fallback.")
            return TranscriptionResult(
                utterances=[RawUtterance(text=transcript, start=0.0, end=0.0, speaker=0)],
                duration_seconds=duration,
                degraded=True,
                engine=self.name
            )

        utterances = []
        for utt in raw_utterances:
            utterances.append(RawUtterance(
                text=(utt.get("transcript") or "").strip(),
                start=float(utt.get("start") or 0.0),
                end=float(utt.get("end") or 0.0),
                speaker=utt.get("speaker") if utt.get("speaker") is not None else 0,
                words=self._parse_words(utt.get("words"))
            ))
        return TranscriptionResult(utterances=utterances, duration_seconds=duration, engine=self.name)

    @staticmethod
    def _channel_transcript(results: dict) -> str:
        channels = results.get("channels") or []
        if not channels:
            return ""
        alternatives = channels[0].get("alternatives") or []
        if not alternatives:
            return ""
        return (alternatives[0].get("transcript") or "").strip()

    @staticmethod
    def _parse_words(words) -> Optional[List[WordTiming]]:
        if not words:
            return None
        return [
            WordTiming(
                word=w.get("word", ""),
                start=float(w.get("start") or 0.0),
                end=float(w.get("end") or 0.0),
                confidence=float(w.get("confidence") or 0.0),
                speaker=w.get("speaker") if w.get("speaker") is not None else 0
            )
            for w in words
        ]
