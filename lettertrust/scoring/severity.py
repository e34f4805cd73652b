from lettertrust.models.flag import FlagSeverity

"""
Centralized severity -> score weight mapping.

This file must NOT import from any other scoring modules.
"""

SEVERITY_WEIGHTS = {
    FlagSeverity.CRITICAL: 30,
    FlagSeverity.WARNING: 10,
}


def severity_to_weight(severity: FlagSeverity) -> int:
    if severity not in SEVERITY_WEIGHTS:
        raise ValueError(f"Unknown severity: {severity}")

    return SEVERITY_WEIGHTS[severity]
