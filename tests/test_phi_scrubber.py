import logging

from lettertrust.phi.scrubber import (
    REDACTED,
    PHIScrubbingFilter,
    is_sensitive_key,
    scrub_object_phi,
    scrub_phi,
    scrub_url_phi,
    truncate_phi,
)


def test_scrub_phi_redacts_identifier_shapes():
    text = (
        "Medicare 2123 45670 1, mobile 0412 345 678, "
        "mail john@example.com, born 15/03/1960"
    )
    scrubbed = scrub_phi(text)

    assert "[MEDICARE_REDACTED]" in scrubbed
    assert "[PHONE_REDACTED]" in scrubbed
    assert "[EMAIL_REDACTED]" in scrubbed
    assert "[DATE_REDACTED]" in scrubbed
    for raw in ["2123 45670 1", "0412 345 678", "john@example.com", "15/03/1960"]:
        assert raw not in scrubbed


def test_scrub_phi_redacts_json_fields_and_uuids():
    text = 'payload {"name": "John Smith"} for 123e4567-e89b-12d3-a456-426614174000'
    scrubbed = scrub_phi(text)

    assert "John Smith" not in scrubbed
    assert '"name":"[REDACTED]"' in scrubbed
    assert "[UUID_REDACTED]" in scrubbed


def test_scrub_phi_passes_non_strings_through():
    assert scrub_phi(None) is None
    assert scrub_phi(42) == 42
    assert scrub_phi("") == ""


def test_sensitive_keys_match_case_insensitive_fragments():
    assert is_sensitive_key("patientName")
    assert is_sensitive_key("PATIENT_ID")
    assert is_sensitive_key("dateOfBirth")
    assert is_sensitive_key("x-authorization-header")
    assert not is_sensitive_key("risk_score")
    assert not is_sensitive_key(7)


def test_scrub_object_handles_nesting_and_unknown_keys():
    payload = {
        "patientName": "John Smith",
        "notes": "emailed john@example.com",
        "nested": {"phone": "0412 345 678", "count": 3},
        "items": ["john@example.com", {"email": "x"}],
        "pair": ("0412 345 678", 1),
        7: "plain",
    }
    scrubbed = scrub_object_phi(payload)

    assert scrubbed["patientName"] == REDACTED
    assert scrubbed["notes"] == "emailed [EMAIL_REDACTED]"
    assert scrubbed["nested"] == {"phone": REDACTED, "count": 3}
    assert scrubbed["items"] == ["[EMAIL_REDACTED]", {"email": REDACTED}]
    assert scrubbed["pair"] == ("[PHONE_REDACTED]", 1)
    assert scrubbed[7] == "plain"
    # Input is left untouched
    assert payload["patientName"] == "John Smith"


def test_scrub_object_redacts_past_depth_limit():
    assert scrub_object_phi({"a": {"b": {"c": "x"}}}, max_depth=2) == {"a": {"b": REDACTED}}

    deep = current = {}
    for _ in range(15):
        current["level"] = {}
        current = current["level"]
    current["leaf"] = "john@example.com"

    scrubbed = scrub_object_phi(deep)
    assert "john@example.com" not in repr(scrubbed)
    assert REDACTED in repr(scrubbed)


def test_scrub_url_drops_ids_and_query():
    url = "/letters/123e4567-e89b-12d3-a456-426614174000/approve?patient=John"
    assert scrub_url_phi(url) == "/letters/[ID_REDACTED]/approve?[PARAMS_REDACTED]"
    assert scrub_url_phi("/health") == "/health"
    assert scrub_url_phi(None) is None


def test_truncate_phi():
    assert truncate_phi("short") == "short"
    assert truncate_phi("x" * 150) == "x" * 50 + "...[TRUNCATED]"
    assert truncate_phi("abcdefghij", max_length=4) == "ab...[TRUNCATED]"


def test_logging_filter_scrubs_message_and_args():
    record = logging.LogRecord(
        name="lettertrust.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Contact john@example.com about %s",
        args=("0412 345 678",),
        exc_info=None,
    )

    assert PHIScrubbingFilter().filter(record) is True
    assert record.getMessage() == "Contact [EMAIL_REDACTED] about [PHONE_REDACTED]"
