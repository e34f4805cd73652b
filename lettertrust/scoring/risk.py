import logging
from typing import Dict, List

from lettertrust.models.flag import FlagSeverity, HallucinationFlag
from lettertrust.models.risk import ApprovalRecommendation, HallucinationRisk, RiskLevel
from lettertrust.scoring.severity import severity_to_weight
from lettertrust.scoring.thresholds import (
    CRITICAL_RISK_MIN,
    HIGH_RISK_MIN,
    MAX_RISK_SCORE,
    MEDIUM_RISK_MIN,
)

logger = logging.getLogger("lettertrust.scoring")


def group_flags_by_severity(flags: List[HallucinationFlag]) -> Dict[str, List[HallucinationFlag]]:
    """
    Partition non-dismissed flags by severity. Dismissed flags land in neither group.
    """
    active = [f for f in flags if not f.dismissed]
    return {
        FlagSeverity.CRITICAL.value: [f for f in active if f.severity == FlagSeverity.CRITICAL],
        FlagSeverity.WARNING.value: [f for f in active if f.severity == FlagSeverity.WARNING],
    }


def risk_level_for_score(score: int) -> RiskLevel:
    if score >= CRITICAL_RISK_MIN:
        return RiskLevel.CRITICAL
    if score >= HIGH_RISK_MIN:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_MIN:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_hallucination_risk(flags: List[HallucinationFlag]) -> HallucinationRisk:
    grouped = group_flags_by_severity(flags)
    critical = grouped[FlagSeverity.CRITICAL.value]
    warning = grouped[FlagSeverity.WARNING.value]

    raw = (
        len(critical) * severity_to_weight(FlagSeverity.CRITICAL)
        + len(warning) * severity_to_weight(FlagSeverity.WARNING)
    )
    score = min(MAX_RISK_SCORE, raw)

    return HallucinationRisk(
        score=score,
        level=risk_level_for_score(score),
        flag_count=len(flags),
        critical_count=len(critical),
        warning_count=len(warning),
    )


def recommend_approval(flags: List[HallucinationFlag]) -> ApprovalRecommendation:
    risk = calculate_hallucination_risk(flags)

    if risk.level == RiskLevel.CRITICAL:
        recommendation = ApprovalRecommendation(
            should_approve=False,
            reason=f"{risk.critical_count} critical hallucination(s) detected",
            action_required="Review and correct all critical flags before approval",
        )
    elif risk.level == RiskLevel.HIGH:
        recommendation = ApprovalRecommendation(
            should_approve=False,
            reason=f"High hallucination risk (score: {risk.score})",
            action_required="Review all flagged sections and verify against sources",
        )
    elif risk.level == RiskLevel.MEDIUM:
        recommendation = ApprovalRecommendation(
            should_approve=True,
            reason="Moderate hallucination risk - manual review recommended",
            action_required="Review flagged sections before final approval",
        )
    else:
        recommendation = ApprovalRecommendation(
            should_approve=True,
            reason="Low hallucination risk",
            action_required="Perform standard review",
        )

    logger.info(
        f"Approval recommendation: level={risk.level.value} score={risk.score} "
        f"should_approve={recommendation.should_approve}"
    )
    return recommendation
