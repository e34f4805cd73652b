"""
Hospital-tenant safe telemetry.
No PHI, no letter text, no payloads: counts, scores and categories only.
"""
import os
import logging
from typing import Literal

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.trace import get_current_span

logger = logging.getLogger("lettertrust.telemetry")


def init_telemetry():
    """
    Initialize Azure Application Insights via OpenTelemetry.
    Disabled when no connection string is configured (local / tests).
    """
    connection_string = os.getenv("AZURE_APPINSIGHTS_CONNECTION_STRING")

    if not connection_string:
        return

    configure_azure_monitor(connection_string=connection_string)
    logger.info("Telemetry exporter configured")


def emit_assessment_telemetry(
    latency_ms: int,
    risk_score: int,
    risk_level: Literal["low", "medium", "high", "critical"],
    critical_count: int,
    warning_count: int,
):
    """
    Emit one event per draft assessment. Attributes are locked to these five.
    """
    assert isinstance(latency_ms, int), "latency_ms must be int"
    assert isinstance(risk_score, int), "risk_score must be int"
    assert risk_level in ("low", "medium", "high", "critical"), f"unknown risk_level {risk_level}"
    assert isinstance(critical_count, int), "critical_count must be int"
    assert isinstance(warning_count, int), "warning_count must be int"

    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="lettertrust.assessment",
        attributes={
            "latency_ms": latency_ms,
            "risk_score": risk_score,
            "risk_level": risk_level,
            "critical_count": critical_count,
            "warning_count": warning_count,
        },
    )


def emit_integrity_telemetry(status: Literal["VERIFIED", "TAMPERED"]):
    assert status in ("VERIFIED", "TAMPERED"), f"status must be VERIFIED or TAMPERED, got {status}"

    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="lettertrust.provenance_integrity",
        attributes={"integrity_status": status},
    )


def scrub_exception_for_telemetry(exception: Exception) -> str:
    """
    Never log str(e): messages may carry letter text. Class name only.
    """
    return type(exception).__name__


def emit_exception_telemetry(exception: Exception):
    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="lettertrust.exception",
        attributes={"exception_type": scrub_exception_for_telemetry(exception)},
    )
