from lettertrust.models.flag import HallucinationFlag


def make_flag(severity, dismissed=False, n=0, segment="segment"):
    return HallucinationFlag(
        id=f"hallucination-{n}",
        segment_text=segment,
        start_index=0,
        end_index=len(segment),
        reason=f"{severity.value} reason",
        severity=severity,
        dismissed=dismissed,
    )
