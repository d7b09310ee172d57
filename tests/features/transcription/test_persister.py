# File: tests/features/transcription/test_persister.py

import pytest
from hearing_scribe.core.common.exceptions import PersistenceError
from hearing_scribe.core.jobs.data.repository import SqlJobRepository
from hearing_scribe.core.jobs.domain.models import JobSubmission
from hearing_scribe.features.transcription.data.repository import SqlUtteranceRepository
from hearing_scribe.features.transcription.domain.models import (
    RawUtterance, UtteranceRecord, WordTiming, EMPTY_TRANSCRIPT_TEXT
)
from hearing_scribe.features.transcription.service.persister import UtterancePersister, to_records


@pytest.fixture
def job_id():
    return SqlJobRepository().create_job(JobSubmission(title="Audiência"))


def test_sort_order_follows_input_order(job_id):
    repo = SqlUtteranceRepository()
    utterances = [
        RawUtterance(text="Bom dia.", start=0.0, end=1.0, speaker=0),
        RawUtterance(text="Bom dia, Excelência.", start=1.2, end=2.0, speaker=1),
        RawUtterance(text="Qual o seu nome?", start=2.1, end=3.0, speaker=0),
    ]

    count = UtterancePersister(repo).persist(job_id, utterances)

    stored = repo.list_for_job(job_id)
    assert count == 3
    assert [u.sort_order for u in stored] == [0, 1, 2]
    assert [u.speaker_label for u in stored] == ["SPEAKER_00", "SPEAKER_01", "SPEAKER_00"]
    assert [u.text for u in stored] == ["Bom dia.", "Bom dia, Excelência.", "Qual o seu nome?"]


def test_empty_result_persists_single_placeholder(job_id):
    repo = SqlUtteranceRepository()

    UtterancePersister(repo).persist(job_id, [])

    stored = repo.list_for_job(job_id)
    assert len(stored) == 1
    assert stored[0].text == EMPTY_TRANSCRIPT_TEXT
    assert stored[0].speaker_label == "SPEAKER_00"
    assert (stored[0].start_time, stored[0].end_time, stored[0].sort_order) == (0.0, 0.0, 0)


def test_segment_only_output_gets_placeholder_label():
    records = to_records([RawUtterance(text="Sem locutor.", start=0.0, end=1.0)])
    assert records[0].speaker_label == "SPEAKER_00"


def test_timing_is_clamped():
    records = to_records([
        RawUtterance(text="a", start=-0.2, end=1.0),
        RawUtterance(text="b", start=5.0, end=4.0),
    ])
    assert (records[0].start_time, records[0].end_time) == (0.0, 1.0)
    assert (records[1].start_time, records[1].end_time) == (5.0, 5.0)


def test_word_detail_is_serialized(job_id):
    repo = SqlUtteranceRepository()
    words = [WordTiming(word="Juro", start=3.0, end=3.4, confidence=0.97)]

    UtterancePersister(repo).persist(job_id, [RawUtterance(text="Juro.", start=3.0, end=3.6, speaker=1, words=words)])

    stored = repo.list_for_job(job_id)[0]
    assert stored.words == [{"word": "Juro", "start": 3.0, "end": 3.4, "confidence": 0.97, "speaker": 0}]


def test_bulk_insert_is_all_or_nothing(job_id):
    repo = SqlUtteranceRepository()
    duplicate_order = [
        UtteranceRecord(speaker_label="SPEAKER_00", text="a", start_time=0.0, end_time=1.0, sort_order=0),
        UtteranceRecord(speaker_label="SPEAKER_00", text="b", start_time=1.0, end_time=2.0, sort_order=0),
    ]

    with pytest.raises(PersistenceError):
        repo.bulk_insert(job_id, duplicate_order)

    assert repo.count_for_job(job_id) == 0


def test_update_touches_label_and_text_only(job_id):
    repo = SqlUtteranceRepository()
    UtterancePersister(repo).persist(job_id, [RawUtterance(text="data venha", start=1.0, end=2.0)])
    original = repo.list_for_job(job_id)[0]

    assert repo.update_utterance(original.id, "ADV. AUTOR", "data venia") is True

    updated = repo.list_for_job(job_id)[0]
    assert (updated.speaker_label, updated.text) == ("ADV. AUTOR", "data venia")
    assert (updated.start_time, updated.end_time, updated.sort_order) == (1.0, 2.0, 0)


def test_delete_for_job(job_id):
    repo = SqlUtteranceRepository()
    UtterancePersister(repo).persist(job_id, [RawUtterance(text="a", start=0, end=1)] * 3)
    assert repo.delete_for_job(job_id) == 3
    assert repo.count_for_job(job_id) == 0
