# File: tests/features/pipeline/test_orchestrator.py

import json
import pytest
from hearing_scribe.core.common.enums import TranscriptionEngine
from hearing_scribe.core.common.exceptions import ConfigurationError, MediaDownloadError, ProviderError
from hearing_scribe.core.jobs.data.repository import SqlJobRepository
from hearing_scribe.core.jobs.domain.models import JobSubmission
from hearing_scribe.core.jobs.types import JobStatus
from hearing_scribe.features.intelligence.data.azure_chat_adapter import AzureChatAdapter
from hearing_scribe.features.pipeline.service.orchestrator import PipelineOrchestrator
from hearing_scribe.features.transcription.data.deepgram_adapter import DeepgramAdapter
from hearing_scribe.features.transcription.data.repository import SqlUtteranceRepository
from hearing_scribe.features.transcription.domain.models import RawUtterance, TranscriptionResult
from fakes import FakeBackend, FakeChatModel, FakeFetcher, FakeHttp, FakeResponse, FakeTranscoder

HEARING = [
    (0, "Qual é o seu nome completo?", 0.0, 2.0),
    (1, "Maria da Silva.", 2.4, 3.5),
    (0, "A senhora jura dizer a verdade?", 4.0, 6.0),
    (1, "Juro.", 6.3, 6.8),
]


def judge_and_witness(messages):
    """LLM reply: questions are the judge, answers are the deponent."""
    items = json.loads(messages[1].content)
    return "```json\n" + json.dumps([
        {"id": i["id"], "speaker_label": "JUIZ(A)" if i["text"].endswith("?") else "DEPOENTE", "text": i["text"]}
        for i in items
    ]) + "\n```"


class ProgressSpy:
    """Wraps the job repository and records every progress write."""

    def __init__(self, repo):
        self.repo = repo
        self.writes = []
        original = repo.update_progress

        def spy(job_id, progress, status=None):
            self.writes.append(progress)
            original(job_id, progress, status)

        repo.update_progress = spy


@pytest.fixture
def jobs():
    return SqlJobRepository()


@pytest.fixture
def utterances():
    return SqlUtteranceRepository()


def _job(jobs, url="https://storage.example/media/audiencia.mp3", engine=TranscriptionEngine.DEEPGRAM):
    return jobs.create_job(JobSubmission(title="Audiência de instrução", engine=engine, media_url=url))


def _orchestrator(jobs, utterances, backend, chat=None, fetcher=None, transcoder=None):
    return PipelineOrchestrator(
        jobs=jobs,
        utterances=utterances,
        fetcher=fetcher or FakeFetcher(b"ID3audio"),
        transcoder=transcoder or FakeTranscoder(),
        backend_factory=lambda engine: backend,
        chat_model=chat or FakeChatModel(judge_and_witness)
    )


def test_deepgram_run_relabels_alternating_speakers(jobs, utterances):
    """Full happy path through the real Deepgram adapter with a fake HTTP session."""
    job_id = _job(jobs)
    deepgram = DeepgramAdapter(api_key="dg-key", http=FakeHttp(FakeResponse(200, json_data={
        "metadata": {"duration": 7.0},
        "results": {"utterances": [
            {"speaker": s, "transcript": t, "start": a, "end": b} for s, t, a, b in HEARING
        ]}
    })))
    spy = ProgressSpy(jobs)

    outcome = _orchestrator(jobs, utterances, deepgram).run(job_id)

    assert outcome.ok
    assert outcome.utterance_count == 4
    assert outcome.corrected_count == 4

    stored = utterances.list_for_job(job_id)
    assert [u.sort_order for u in stored] == [0, 1, 2, 3]
    assert [u.speaker_label for u in stored] == ["JUIZ(A)", "DEPOENTE", "JUIZ(A)", "DEPOENTE"]
    assert [u.start_time for u in stored] == [0.0, 2.4, 4.0, 6.3]

    job = jobs.get_job(job_id)
    assert job.status == JobStatus.COMPLETED
    assert job.progress == 100
    assert job.meta["utterance_count"] == 4
    assert job.meta["corrected_count"] == 4
    assert spy.writes == sorted(spy.writes)
    assert spy.writes[:3] == [15, 20, 25]
    assert 65 in spy.writes and spy.writes[-1] == 100


def test_provider_500_fails_job_without_utterances(jobs, utterances):
    job_id = _job(jobs, engine=TranscriptionEngine.WHISPER)
    backend = FakeBackend(ProviderError("Whisper API 500: upstream failure", status_code=500))

    outcome = _orchestrator(jobs, utterances, backend).run(job_id)

    assert outcome.status == JobStatus.ERROR
    assert outcome.stage == "transcribe"
    assert outcome.error == "transcribe: Whisper API 500: upstream failure"

    job = jobs.get_job(job_id)
    assert job.status == JobStatus.ERROR
    # Last milestone reached before the backend call
    assert job.progress == 35
    assert job.error_message == outcome.error
    assert utterances.count_for_job(job_id) == 0


def test_download_failure_reports_download_stage(jobs, utterances):
    job_id = _job(jobs)
    fetcher = FakeFetcher(error=MediaDownloadError("Could not download media from storage (HTTP 404)", 404))

    outcome = _orchestrator(jobs, utterances, FakeBackend(), fetcher=fetcher).run(job_id)

    assert outcome.stage == "download"
    assert jobs.get_job(job_id).progress == 15


def test_transcode_failure_reports_normalize_stage(jobs, utterances):
    job_id = _job(jobs, url="https://storage.example/media/audiencia.mp4")

    outcome = _orchestrator(jobs, utterances, FakeBackend(), transcoder=FakeTranscoder(fail_transcode=True)).run(job_id)

    assert outcome.stage == "normalize"
    assert outcome.error.startswith("normalize: Audio conversion failed")
    assert jobs.get_job(job_id).progress == 25


def test_missing_credentials_is_a_distinct_configuration_error(jobs, utterances):
    job_id = _job(jobs)
    fetcher = FakeFetcher(b"audio")
    backend = FakeBackend(config_error=ConfigurationError("DEEPGRAM_API_KEY is not set"))

    outcome = _orchestrator(jobs, utterances, backend, fetcher=fetcher).run(job_id)

    assert outcome.error == "Configuration error (transcribe): DEEPGRAM_API_KEY is not set"
    # Fails before any download
    assert fetcher.urls == []
    assert jobs.get_job(job_id).status == JobStatus.ERROR


def test_error_message_is_truncated(jobs, utterances):
    job_id = _job(jobs)
    backend = FakeBackend(ProviderError("Deepgram API 502: " + "x" * 2000, 502))

    outcome = _orchestrator(jobs, utterances, backend).run(job_id)

    assert len(outcome.error) <= 500
    assert len(jobs.get_job(job_id).error_message) <= 500


def test_empty_transcript_persists_placeholder_and_completes(jobs, utterances):
    job_id = _job(jobs)
    chat = FakeChatModel("[]")

    outcome = _orchestrator(jobs, utterances, FakeBackend(TranscriptionResult()), chat=chat).run(job_id)

    assert outcome.ok
    stored = utterances.list_for_job(job_id)
    assert len(stored) == 1
    assert stored[0].text == "(Nenhum conteúdo transcrito)"


def test_llm_outage_still_completes_with_raw_labels(jobs, utterances):
    job_id = _job(jobs)
    backend = FakeBackend(TranscriptionResult(utterances=[
        RawUtterance(text=t, start=a, end=b, speaker=s) for s, t, a, b in HEARING
    ]))
    chat = FakeChatModel(ProviderError("LLM API 503: unavailable", 503))

    outcome = _orchestrator(jobs, utterances, backend, chat=chat).run(job_id)

    assert outcome.ok
    assert jobs.get_job(job_id).meta["failed_batches"] == 1
    assert [u.speaker_label for u in utterances.list_for_job(job_id)] == [
        "SPEAKER_00", "SPEAKER_01", "SPEAKER_00", "SPEAKER_01"
    ]


def test_formatting_config_error_keeps_persisted_utterances(jobs, utterances):
    job_id = _job(jobs)
    backend = FakeBackend(TranscriptionResult(utterances=[RawUtterance(text="Bom dia.", start=0.0, end=1.0)]))
    chat = FakeChatModel(config_error=ConfigurationError("AZURE_OPENAI_ENDPOINT or AZURE_OPENAI_API_KEY is not set"))

    outcome = _orchestrator(jobs, utterances, backend, chat=chat).run(job_id)

    assert outcome.stage == "format"
    assert outcome.error.startswith("Configuration error (format)")
    assert jobs.get_job(job_id).progress == 65
    assert utterances.count_for_job(job_id) == 1


def test_engine_override_is_recorded(jobs, utterances):
    job_id = _job(jobs, engine=TranscriptionEngine.DEEPGRAM)
    chosen = []

    orchestrator = _orchestrator(jobs, utterances, FakeBackend(), chat=FakeChatModel("[]"))
    orchestrator.backend_factory = lambda engine: chosen.append(engine) or FakeBackend()

    orchestrator.run(job_id, TranscriptionEngine.WHISPER)

    assert chosen == [TranscriptionEngine.WHISPER]
    assert jobs.get_job(job_id).engine == TranscriptionEngine.WHISPER


def test_job_without_media_fails_at_load(jobs, utterances):
    job_id = _job(jobs, url=None)

    outcome = _orchestrator(jobs, utterances, FakeBackend()).run(job_id)

    assert outcome.stage == "load"
    assert jobs.get_job(job_id).status == JobStatus.ERROR


def test_finished_job_is_not_rerun(jobs, utterances):
    job_id = _job(jobs)
    jobs.update_progress(job_id, 100, JobStatus.COMPLETED)
    backend = FakeBackend()

    outcome = _orchestrator(jobs, utterances, backend).run(job_id)

    assert outcome.status == JobStatus.COMPLETED
    assert outcome.error is not None
    assert backend.calls == []


def test_malformed_llm_body_only_skips_the_batch(jobs, utterances):
    job_id = _job(jobs)
    backend = FakeBackend(TranscriptionResult(utterances=[
        RawUtterance(text=t, start=a, end=b, speaker=s) for s, t, a, b in HEARING
    ]))
    chat = AzureChatAdapter(
        endpoint="https://tjmg.openai.azure.com",
        api_key="secret",
        http=FakeHttp(FakeResponse(200, json_data={"choices": ["oops"]}))
    )

    outcome = _orchestrator(jobs, utterances, backend, chat=chat).run(job_id)

    assert outcome.ok
    job = jobs.get_job(job_id)
    assert job.status == JobStatus.COMPLETED
    assert job.meta["failed_batches"] == 1
    assert utterances.count_for_job(job_id) == 4


def test_summary_write_failure_never_reopens_a_completed_job(jobs, utterances):
    job_id = _job(jobs)
    backend = FakeBackend(TranscriptionResult(utterances=[RawUtterance(text="Bom dia.", start=0.0, end=1.0)]))
    original = jobs.merge_meta

    def flaky(job, meta):
        if "corrected_count" in meta:
            raise RuntimeError("db went away")
        original(job, meta)

    jobs.merge_meta = flaky

    outcome = _orchestrator(jobs, utterances, backend, chat=FakeChatModel("[]")).run(job_id)

    assert outcome.stage == "format"
    assert outcome.error == "format: db went away"
    job = jobs.get_job(job_id)
    # Failed while still FORMATTING, never after COMPLETED
    assert job.status == JobStatus.ERROR
    assert job.progress == 90
    assert job.error_message == "format: db went away"
