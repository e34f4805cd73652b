import pytest

from lettertrust.telemetry import (
    emit_assessment_telemetry,
    emit_exception_telemetry,
    emit_integrity_telemetry,
    scrub_exception_for_telemetry,
)


def test_emit_assessment_telemetry_does_not_crash():
    """
    Telemetry safely no-ops when no active span exists (local / tests).
    """
    emit_assessment_telemetry(
        latency_ms=12,
        risk_score=30,
        risk_level="medium",
        critical_count=1,
        warning_count=0,
    )
    emit_integrity_telemetry("VERIFIED")
    emit_integrity_telemetry("TAMPERED")
    emit_exception_telemetry(RuntimeError("letter text here"))


def test_assessment_attributes_are_type_locked():
    with pytest.raises(AssertionError):
        emit_assessment_telemetry(
            latency_ms=12.5,
            risk_score=30,
            risk_level="medium",
            critical_count=1,
            warning_count=0,
        )

    with pytest.raises(AssertionError):
        emit_assessment_telemetry(
            latency_ms=12,
            risk_score=30,
            risk_level="severe",
            critical_count=1,
            warning_count=0,
        )


def test_integrity_status_is_restricted():
    with pytest.raises(AssertionError):
        emit_integrity_telemetry("UNKNOWN")


def test_exception_scrubbing_keeps_class_name_only():
    scrubbed = scrub_exception_for_telemetry(ValueError("John Smith DOB 15/03/1960"))
    assert scrubbed == "ValueError"
