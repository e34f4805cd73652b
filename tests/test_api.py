from unittest.mock import patch

from fastapi.testclient import TestClient

from lettertrust.api.main import app
from lettertrust.audit.provenance_builder import build_provenance

from tests.fixtures.provenance_inputs import make_provenance_input
from tests.fixtures.sample_letters import FIXED_TIME, UNSOURCED_VESSEL_LETTER

client = TestClient(app)


def test_health_check():
    """Verify the API is alive."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_assess_single_vessel_finding_is_medium_risk():
    payload = {"letter_id": "letter-1", "letter_text": UNSOURCED_VESSEL_LETTER}

    with patch("lettertrust.api.main.trigger_blocked_letter_alert") as mock_alert:
        response = client.post("/assess", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["risk_score"] == 30
    assert data["risk_level"] == "medium"
    assert data["should_approve"] is True
    assert len(data["flags"]) == 1
    mock_alert.assert_not_called()


def test_assess_blocked_letter_triggers_alert():
    payload = {
        "letter_id": "letter-2",
        "letter_text": "The LAD shows 70% stenosis. The RCA shows 50% stenosis.",
    }

    with patch("lettertrust.api.main.trigger_blocked_letter_alert") as mock_alert:
        response = client.post("/assess", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["risk_score"] == 60
    assert data["risk_level"] == "critical"
    assert data["should_approve"] is False
    mock_alert.assert_called_once()
    assert mock_alert.call_args.kwargs["letter_id"] == "letter-2"


def test_assess_with_sourced_anchor_is_clean():
    payload = {
        "letter_text": UNSOURCED_VESSEL_LETTER,
        "source_anchors": [{
            "id": "anchor-1",
            "segment_text": "LAD shows 70%",
            "start_index": 4,
            "end_index": 17,
            "source_excerpt": "LAD 70% stenosis on angiogram",
        }],
    }

    response = client.post("/assess", json=payload)

    assert response.status_code == 200
    assert response.json()["risk_score"] == 0
    assert response.json()["flags"] == []


def test_assess_engine_error_returns_500():
    with patch("lettertrust.api.main.assess_draft", side_effect=RuntimeError("boom")):
        response = client.post("/assess", json={"letter_text": "anything"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Assessment failed"


def test_diff_endpoint():
    response = client.post("/diff", json={"original": "a b c", "modified": "a x c"})

    assert response.status_code == 200
    data = response.json()
    assert data["additions"] == 1
    assert data["deletions"] == 1
    assert {"operation": "delete", "text": "b"} in data["entries"]
    assert {"operation": "insert", "text": "x"} in data["entries"]


def test_verify_provenance_accepts_untouched_record():
    record = build_provenance(make_provenance_input(), now=FIXED_TIME)

    response = client.post(
        "/provenance/verify",
        json={"data": record.data.to_dict(), "hash": record.hash},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "VERIFIED"
    assert response.json()["computed_hash"] == record.hash


def test_verify_provenance_rejects_tampered_record():
    record = build_provenance(make_provenance_input(), now=FIXED_TIME)
    data = record.data.to_dict()
    data["hallucination_risk_score"] = 0

    response = client.post("/provenance/verify", json={"data": data, "hash": record.hash})

    assert response.status_code == 409
    assert response.json()["detail"]["status"] == "TAMPERED"


def test_verify_provenance_rejects_malformed_data():
    response = client.post("/provenance/verify", json={"data": {"letter_id": "x"}, "hash": "0" * 64})
    assert response.status_code == 422
