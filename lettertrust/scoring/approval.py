import logging
from typing import List

from lettertrust.models.clinical import ClinicalValue, ClinicalValueType
from lettertrust.models.flag import FlagSeverity, HallucinationFlag
from lettertrust.models.risk import ApprovalGate, RiskLevel
from lettertrust.scoring.risk import calculate_hallucination_risk
from lettertrust.scoring.thresholds import HIGH_RISK_WARNING_SCORE, MIN_VERIFICATION_RATE

logger = logging.getLogger("lettertrust.scoring")

# Value types that block approval until a physician verifies them
BLOCKING_VALUE_TYPES = {ClinicalValueType.MEASUREMENT, ClinicalValueType.DIAGNOSIS}


def calculate_verification_rate(values: List[ClinicalValue]) -> float:
    """Share (0-1) of values that are anchored or physician-verified."""
    if not values:
        return 0.0
    supported = sum(1 for v in values if v.source_anchor_id or v.verified)
    return supported / len(values)


def validate_approval_requirements(
    flags: List[HallucinationFlag],
    clinical_values: List[ClinicalValue],
    verification_rate: float,
) -> ApprovalGate:
    errors: List[str] = []
    warnings: List[str] = []

    unverified = [
        v for v in clinical_values
        if v.type in BLOCKING_VALUE_TYPES and not v.verified
    ]
    if unverified:
        errors.append(
            f"{len(unverified)} critical clinical values not verified: "
            + ", ".join(v.name for v in unverified)
        )

    open_critical = [f for f in flags if f.severity == FlagSeverity.CRITICAL and not f.dismissed]
    if open_critical:
        errors.append(f"{len(open_critical)} critical hallucination flags not addressed")

    risk = calculate_hallucination_risk(flags)
    if risk.level == RiskLevel.CRITICAL:
        errors.append(f"Hallucination risk is critical (score: {risk.score}/100)")

    open_warning = [f for f in flags if f.severity == FlagSeverity.WARNING and not f.dismissed]
    if open_warning:
        warnings.append(f"{len(open_warning)} warning-level hallucination flags remain")

    if verification_rate < MIN_VERIFICATION_RATE:
        warnings.append(
            f"Low verification rate: {verification_rate * 100:.1f}% (recommended: >80%)"
        )

    if risk.score > HIGH_RISK_WARNING_SCORE:
        warnings.append(
            f"High hallucination risk score: {risk.score}/100 (recommended: <70)"
        )

    gate = ApprovalGate(is_valid=not errors, errors=errors, warnings=warnings)
    logger.info(
        f"Approval requirements validated: is_valid={gate.is_valid} "
        f"errors={len(errors)} warnings={len(warnings)}"
    )
    return gate
