from typing import List

from lettertrust.models.flag import FlagSeverity, HallucinationFlag
from lettertrust.scoring.risk import calculate_hallucination_risk, group_flags_by_severity

NO_FLAGS_MESSAGE = "No potential hallucinations detected. All clinical statements are sourced."

SEGMENT_PREVIEW_CHARS = 80


def _preview(segment: str) -> str:
    if len(segment) > SEGMENT_PREVIEW_CHARS:
        return segment[:SEGMENT_PREVIEW_CHARS] + "..."
    return segment


def _section(title: str, flags: List[HallucinationFlag]) -> List[str]:
    lines = [f"{title} ({len(flags)}):"]
    for flag in flags:
        lines.append(f'- {flag.reason}: "{_preview(flag.segment_text)}"')
    return lines


def generate_hallucination_report(flags: List[HallucinationFlag]) -> str:
    """
    Plain-text summary shown to the physician next to the draft.
    Dismissed flags are left out, and a fully dismissed list reads as clean.
    """
    grouped = group_flags_by_severity(flags)
    critical = grouped[FlagSeverity.CRITICAL.value]
    warning = grouped[FlagSeverity.WARNING.value]

    if not critical and not warning:
        return NO_FLAGS_MESSAGE

    risk = calculate_hallucination_risk(flags)

    lines = [
        "HALLUCINATION RISK REPORT",
        f"Risk: {risk.level.value.upper()} (score: {risk.score}/100)",
        "",
    ]
    if critical:
        lines.extend(_section("Critical Flags", critical))
        lines.append("")
    if warning:
        lines.extend(_section("Warnings", warning))
        lines.append("")

    return "\n".join(lines).rstrip("\n")
