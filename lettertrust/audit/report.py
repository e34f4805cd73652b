from datetime import datetime, timezone

from lettertrust.models.provenance import ProvenanceData

BANNER = "=" * 80


def _utc(timestamp: str) -> str:
    try:
        parsed = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError):
        return str(timestamp)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_provenance_report(data: ProvenanceData) -> str:
    """
    Fixed-width report for physicians and regulatory export.
    """
    lines = [BANNER, "LETTER PROVENANCE REPORT", BANNER, ""]

    lines.append(f"Letter ID: {data.letter_id}")
    lines.append(f"Engine Version: {data.engine_version}")
    lines.append(f"Generated: {_utc(data.generated_at)}")
    lines.append(f"Approved: {_utc(data.approved_at)}")
    lines.append("")

    lines.append("AI MODELS USED:")
    lines.append(f"  Primary: {data.primary_model}")
    if data.critic_model:
        lines.append(f"  Critic: {data.critic_model}")
    lines.append(f"  Input Tokens: {data.input_tokens:,}")
    lines.append(f"  Output Tokens: {data.output_tokens:,}")
    lines.append(f"  Generation Time: {data.generation_duration_ms / 1000:.2f}s")
    lines.append("")

    lines.append("SOURCE MATERIALS:")
    for source in data.source_files:
        lines.append(f"  - {source.type.upper()}: {source.name}")
    lines.append("")

    total_values = len(data.extracted_values)
    verified_count = sum(1 for v in data.extracted_values if v.verified)
    verified_pct = (verified_count / total_values * 100) if total_values else 0.0
    lines.append("CLINICAL VALUES EXTRACTED:")
    lines.append(f"  Total: {total_values}")
    lines.append(f"  Verified: {verified_count} ({verified_pct:.1f}%)")
    for value in data.extracted_values:
        status = "[VERIFIED]" if value.verified else "[NOT VERIFIED]"
        unit = f" {value.unit}" if value.unit else ""
        lines.append(f"    {status} {value.name}: {value.value}{unit}")
    lines.append("")

    critical_count = sum(1 for h in data.hallucination_checks if h.severity == "critical")
    dismissed_count = sum(1 for h in data.hallucination_checks if h.dismissed)
    lines.append("HALLUCINATION CHECKS:")
    lines.append(f"  Total Flags: {len(data.hallucination_checks)}")
    lines.append(f"  Critical: {critical_count}")
    lines.append(f"  Dismissed: {dismissed_count}")
    lines.append(f"  Hallucination Risk Score: {data.hallucination_risk_score}/100")
    lines.append("")

    physician = data.reviewing_physician
    lines.append("REVIEW PROCESS:")
    lines.append(f"  Physician: {physician.name} ({physician.email})")
    lines.append(f"  Review Duration: {data.review_duration_ms / 1000 / 60:.1f} minutes")
    lines.append(f"  Content Changed: {data.content_diff.percent_changed:.1f}%")
    lines.append(f"  Edits Made: {len(data.edits)}")
    lines.append("")

    lines.append("QUALITY METRICS:")
    lines.append(f"  Verification Rate: {data.verification_rate * 100:.1f}%")
    lines.append(f"  Hallucination Risk: {data.hallucination_risk_score}/100")
    lines.append("")

    lines.extend([BANNER, "END OF REPORT", BANNER])
    return "\n".join(lines)
