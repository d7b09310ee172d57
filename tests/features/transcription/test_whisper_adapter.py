# File: tests/features/transcription/test_whisper_adapter.py

import pytest
import requests
from hearing_scribe.core.common.exceptions import ConfigurationError, ProviderError
from hearing_scribe.features.transcription.data.whisper_adapter import WhisperAdapter
from fakes import FakeHttp, FakeResponse


def _adapter(*responses, **kwargs):
    http = FakeHttp(*responses)
    params = dict(endpoint="https://tjmg.openai.azure.com/", api_key="secret", http=http)
    params.update(kwargs)
    return WhisperAdapter(**params), http


def test_segments_are_mapped_in_order_without_speaker():
    adapter, http = _adapter(FakeResponse(200, json_data={
        "text": "Bom dia. Pode sentar.",
        "duration": 4.2,
        "segments": [
            {"text": " Bom dia.", "start": 0.0, "end": 1.5},
            {"text": " Pode sentar. ", "start": 1.5, "end": 4.2},
        ]
    }))

    result = adapter.transcribe(b"audio", "audio/mpeg", "audio.mp3")

    assert [u.text for u in result.utterances] == ["Bom dia.", "Pode sentar."]
    assert [(u.start, u.end) for u in result.utterances] == [(0.0, 1.5), (1.5, 4.2)]
    assert all(u.speaker is None for u in result.utterances)
    assert result.degraded is False

    call = http.calls[0]
    assert call["url"] == ("https://tjmg.openai.azure.com/openai/deployments/whisper"
                           "/audio/transcriptions?api-version=2025-01-01")
    assert call["headers"] == {"api-key": "secret"}
    assert call["files"]["file"] == ("audio.mp3", b"audio", "audio/mpeg")
    assert call["data"]["response_format"] == "verbose_json"
    assert call["data"]["language"] == "pt"
    assert call["data"]["timestamp_granularities[]"] == "segment"


def test_empty_segments_fall_back_to_whole_transcript():
    adapter, _ = _adapter(FakeResponse(200, json_data={"text": "Texto inteiro.", "duration": 12.0, "segments": []}))

    result = adapter.transcribe(b"audio", "audio/mpeg", "audio.mp3")

    assert len(result.utterances) == 1
    only = result.utterances[0]
    assert (only.text, only.start, only.end) == ("Texto inteiro.", 0.0, 12.0)
    assert result.degraded is True


def test_nothing_transcribed_returns_empty_result():
    adapter, _ = _adapter(FakeResponse(200, json_data={"text": "", "segments": []}))
    assert adapter.transcribe(b"audio", "audio/mpeg", "audio.mp3").utterances == []


def test_provider_error_embeds_status_and_body():
    adapter, _ = _adapter(FakeResponse(413, text="Maximum content size limit exceeded" + "x" * 1000))

    with pytest.raises(ProviderError) as exc:
        adapter.transcribe(b"audio", "audio/mpeg", "audio.mp3")

    assert exc.value.status_code == 413
    assert "Whisper API 413" in str(exc.value)
    assert len(str(exc.value)) < 350


def test_timeout_is_a_provider_error():
    adapter, _ = _adapter(requests.Timeout("read timed out"))
    with pytest.raises(ProviderError):
        adapter.transcribe(b"audio", "audio/mpeg", "audio.mp3")


def test_missing_credentials_is_configuration_error():
    adapter, http = _adapter(endpoint="", api_key="")
    with pytest.raises(ConfigurationError):
        adapter.transcribe(b"audio", "audio/mpeg", "audio.mp3")
    assert http.calls == []
