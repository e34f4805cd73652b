import logging
from typing import List, Optional, Sequence

from lettertrust.models.clinical import ClinicalValue, SourceAnchor
from lettertrust.models.flag import FlagSeverity, HallucinationFlag, RuleFinding
from lettertrust.models.sources import LetterSources
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.dates import UnsourcedDateRule
from lettertrust.rules.device import UnsourcedDeviceSizeRule
from lettertrust.rules.evidence import SourceEvidence
from lettertrust.rules.history import UnsourcedHistoryRule
from lettertrust.rules.measurement import UnsourcedMeasurementRule
from lettertrust.rules.medication import UnsourcedMedicationChangeRule
from lettertrust.rules.referring_doctor import UnknownReferringDoctorRule
from lettertrust.rules.vessel import UnsourcedVesselFindingRule

# Registry order is the order flag ids are assigned in
DEFAULT_RULES: List[DetectionRule] = [
    UnsourcedMeasurementRule(),
    UnknownReferringDoctorRule(),
    UnsourcedDateRule(),
    UnsourcedVesselFindingRule(),
    UnsourcedMedicationChangeRule(),
    UnsourcedDeviceSizeRule(),
    UnsourcedHistoryRule(),
]


class HallucinationDetector:
    """
    Runs every registered rule against a draft letter and turns the
    findings into flags.
    """

    def __init__(self, rules: Optional[Sequence[DetectionRule]] = None):
        self.rules = list(DEFAULT_RULES if rules is None else rules)
        self.logger = logging.getLogger("lettertrust.rules")

    def detect(
        self,
        letter_text: str,
        sources: Optional[LetterSources] = None,
        source_anchors: Optional[List[SourceAnchor]] = None,
        clinical_values: Optional[List[ClinicalValue]] = None,
    ) -> List[HallucinationFlag]:
        letter_text = letter_text or ""
        evidence = SourceEvidence.from_sources(sources, source_anchors)
        values = list(clinical_values or [])

        flags: List[HallucinationFlag] = []
        for rule in self.rules:
            for finding in self._safe_run(rule, letter_text, evidence, values):
                flags.append(HallucinationFlag(
                    id=f"hallucination-{len(flags)}",
                    segment_text=finding.segment_text,
                    start_index=finding.start_index,
                    end_index=finding.end_index,
                    reason=finding.reason,
                    severity=finding.severity,
                ))

        critical = sum(1 for f in flags if f.severity == FlagSeverity.CRITICAL)
        self.logger.info(
            f"Hallucination detection complete: total={len(flags)} "
            f"critical={critical} warning={len(flags) - critical}"
        )
        return flags

    def _safe_run(
        self,
        rule: DetectionRule,
        letter_text: str,
        evidence: SourceEvidence,
        values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        try:
            return list(rule.evaluate(letter_text, evidence, values))
        except Exception as e:
            self.logger.warning(f"Rule Execution Failed: rule={rule.name} error={type(e).__name__}")
            return []


def detect_hallucinations(
    letter_text: str,
    sources: Optional[LetterSources] = None,
    source_anchors: Optional[List[SourceAnchor]] = None,
    clinical_values: Optional[List[ClinicalValue]] = None,
) -> List[HallucinationFlag]:
    return HallucinationDetector().detect(letter_text, sources, source_anchors, clinical_values)
