import logging
from dataclasses import replace

import pytest

from lettertrust.audit.provenance_builder import build_provenance
from lettertrust.audit.verification import (
    ProvenanceIntegrityError,
    assert_provenance_integrity,
    verify_provenance,
)
from lettertrust.models.provenance import IntegrityStatus, ProvenanceRecord
from lettertrust.storage import InMemoryProvenanceLedger, ProvenanceAlreadyExistsError

from tests.fixtures.provenance_inputs import make_provenance_input
from tests.fixtures.sample_letters import FIXED_TIME


@pytest.fixture
def record():
    return build_provenance(make_provenance_input(), now=FIXED_TIME)


def _tampered(record):
    data = replace(record.data, hallucination_risk_score=0)
    return ProvenanceRecord(record.letter_id, data, record.hash, record.created_at)


def test_untouched_record_verifies(record):
    verification = verify_provenance(record.data, record.hash)

    assert verification.status is IntegrityStatus.VERIFIED
    assert verification.verified
    assert verification.computed_hash == record.hash
    assert assert_provenance_integrity(record).verified


def test_tampering_is_reported_distinctly(record, caplog):
    tampered = _tampered(record)

    with caplog.at_level(logging.ERROR, logger="lettertrust.audit"):
        verification = verify_provenance(tampered.data, tampered.hash)

    assert verification.status is IntegrityStatus.TAMPERED
    assert not verification.verified
    assert verification.stored_hash == record.hash
    assert verification.computed_hash != record.hash
    assert "integrity failure" in caplog.text


def test_assert_integrity_raises_on_tamper(record):
    with pytest.raises(ProvenanceIntegrityError) as exc:
        assert_provenance_integrity(_tampered(record))

    assert isinstance(exc.value, ValueError)
    assert exc.value.letter_id == "letter-001"
    assert exc.value.verification.status is IntegrityStatus.TAMPERED


def test_forged_hash_is_rejected(record):
    forged = replace(record, hash="0" * 64)
    assert verify_provenance(forged.data, forged.hash).status is IntegrityStatus.TAMPERED


def test_ledger_commit_and_read(record):
    ledger = InMemoryProvenanceLedger()
    ledger.commit(record)

    assert "letter-001" in ledger
    assert len(ledger) == 1
    assert ledger.get("letter-001") is record
    assert ledger.verify("letter-001").verified


def test_ledger_is_append_only(record):
    ledger = InMemoryProvenanceLedger()
    ledger.commit(record)

    with pytest.raises(ProvenanceAlreadyExistsError):
        ledger.commit(record)


def test_ledger_refuses_a_tampered_write(record):
    ledger = InMemoryProvenanceLedger()

    with pytest.raises(ProvenanceIntegrityError):
        ledger.commit(_tampered(record))
    assert len(ledger) == 0


def test_ledger_detects_tampering_after_write(record):
    ledger = InMemoryProvenanceLedger()
    ledger.commit(record)
    # Simulate storage corruption
    ledger._records["letter-001"] = _tampered(record)

    with pytest.raises(ProvenanceIntegrityError):
        ledger.get("letter-001")
    assert ledger.verify("letter-001").status is IntegrityStatus.TAMPERED


def test_unknown_letter_raises_key_error():
    ledger = InMemoryProvenanceLedger()
    with pytest.raises(KeyError):
        ledger.get("missing")
    with pytest.raises(KeyError):
        ledger.verify("missing")
