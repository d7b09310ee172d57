# File: tests/features/formatting/test_response_parser.py

import pytest
from hearing_scribe.features.formatting.domain.models import CorrectionUpdate
from hearing_scribe.features.formatting.service.response_parser import (
    extract_json_array, parse_correction_response
)

ARRAY = '[{"id": "u1", "speaker_label": "JUIZ(A)", "text": "Bom dia."}, {"id": "u2", "speaker_label": "DEPOENTE", "text": "Bom dia."}]'
EXPECTED = [
    CorrectionUpdate(id="u1", speaker_label="JUIZ(A)", text="Bom dia."),
    CorrectionUpdate(id="u2", speaker_label="DEPOENTE", text="Bom dia."),
]


@pytest.mark.parametrize("response", [
    ARRAY,
    f"```json\n{ARRAY}\n```",
    f"```\n{ARRAY}\n```",
    f"Aqui está o resultado corrigido:\n{ARRAY}\nEspero ter ajudado.",
], ids=["bare", "fenced-json", "fenced-plain", "embedded"])
def test_all_accepted_shapes_give_same_updates(response):
    assert parse_correction_response(response) == EXPECTED


def test_bare_object_is_not_an_array():
    assert extract_json_array('{"id": "u1"}') is None


def test_unparseable_response_yields_nothing():
    assert parse_correction_response("Desculpe, não consigo ajudar com isso.") == []
    assert parse_correction_response("") == []
    assert parse_correction_response("[{broken json") == []


def test_fenced_block_wins_over_prose_brackets():
    response = f"Nota [1]: veja abaixo.\n```json\n{ARRAY}\n```"
    assert parse_correction_response(response) == EXPECTED


def test_malformed_items_are_skipped():
    response = '[{"speaker_label": "JUIZ(A)"}, "texto solto", {"id": "u3", "speaker": "ESCRIVÃO(Ã)", "text": "  "}]'
    assert parse_correction_response(response) == [CorrectionUpdate(id="u3", speaker_label="ESCRIVÃO(Ã)", text=None)]
