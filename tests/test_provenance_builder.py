import pytest

from lettertrust.audit.provenance_builder import build_provenance, calculate_percent_changed
from lettertrust.models.diff import ContentDiff
from lettertrust.models.provenance import LetterMetadata, Reviewer

from tests.fixtures.provenance_inputs import make_provenance_input
from tests.fixtures.sample_letters import FIXED_TIME


@pytest.mark.parametrize("draft, final, expected", [
    ("", "anything", 100.0),
    ("", "", 100.0),
    ("abcd", "abcd", 0.0),
    ("abcd", "abXd", 25.0),
    ("abc", "abcdef", 50.0),
    ("abcdefg", "abcdefX", 14.3),
    ("abcd", "", 100.0),
])
def test_percent_changed_is_positional(draft, final, expected):
    assert calculate_percent_changed(draft, final) == expected


def test_record_structure():
    record = build_provenance(make_provenance_input(), now=FIXED_TIME)
    data = record.data

    assert record.letter_id == "letter-001"
    assert record.created_at == FIXED_TIME
    assert len(record.hash) == 64

    assert data.generated_at == "2025-01-01T08:00:00+00:00"
    assert data.approved_at == "2025-01-01T09:30:00+00:00"
    assert data.primary_model == "drafting-model-large"
    assert data.patient.id == "patient-42"

    assert [(s.type, s.id) for s in data.source_files] == [("recording", "rec-1"), ("document", "doc-1")]
    assert data.source_files[0].name == "Recording from 2025-01-01T08:00:00+00:00"
    assert data.source_files[1].name == "angiogram.pdf"

    assert data.extracted_values[0].verified_at == "2025-01-01T09:30:00+00:00"
    assert data.extracted_values[1].verified is False
    assert data.hallucination_checks[0].dismiss_reason == "Date confirmed with patient"
    assert data.hallucination_checks[0].severity == "warning"

    assert data.reviewing_physician.email == "alex.lee@heartclinic.org"
    assert data.review_duration_ms == 270000
    assert data.content_diff.original.startswith("Dear Dr. Chen")


def test_edits_are_sorted_by_index():
    record = build_provenance(make_provenance_input(), now=FIXED_TIME)
    assert [(e.type, e.index) for e in record.data.edits] == [("addition", 80), ("modification", 120)]


def test_missing_metadata_gets_defaults():
    inputs = make_provenance_input(
        letter=LetterMetadata(id="letter-002"),
        patient_id=None,
        recording=None,
        documents=[],
        verified_values=[],
        dismissed_flags=[],
        content_diff=ContentDiff(),
    )
    data = build_provenance(inputs, now=FIXED_TIME).data

    assert data.primary_model == "unknown"
    assert data.critic_model is None
    assert data.patient.id == "unknown"
    assert data.generated_at == FIXED_TIME.isoformat()
    assert data.content_diff.percent_changed == 100.0
    assert data.input_tokens == 0
    assert data.verification_rate == 0.0
    assert data.source_files == []


def test_reviewer_identity_is_mandatory():
    with pytest.raises(ValueError, match="Reviewer identity"):
        build_provenance(make_provenance_input(reviewer=Reviewer(id="  ", name="x", email="x")))

    with pytest.raises(ValueError, match="Letter id"):
        build_provenance(make_provenance_input(letter=LetterMetadata(id="")))


def test_engine_version_comes_from_settings(monkeypatch):
    monkeypatch.setenv("LETTERTRUST_ENGINE_VERSION", "lettertrust-test")
    record = build_provenance(make_provenance_input(), now=FIXED_TIME)
    assert record.data.engine_version == "lettertrust-test"
