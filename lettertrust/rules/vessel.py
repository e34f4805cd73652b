import re
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

VESSEL_FINDING_PATTERN = re.compile(
    r"\b(LMCA|LAD|LCx|RCA|D1|D2|OM1|OM2)\s+[^.]*?(\d{1,3})\s*%",
    re.IGNORECASE,
)

ANCHOR_WINDOW = 200


class UnsourcedVesselFindingRule(DetectionRule):
    """
    Coronary vessel stenosis findings need an anchor whose excerpt names
    the same vessel. Matching source text alone is not enough.
    """

    SEVERITY = FlagSeverity.CRITICAL

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings = []
        for match in VESSEL_FINDING_PATTERN.finditer(letter_text):
            vessel = match.group(1)
            anchored = any(
                vessel.lower() in (anchor.source_excerpt or "").lower()
                for anchor in evidence.anchors_near(match.start(), ANCHOR_WINDOW)
            )
            if not anchored:
                findings.append(self.finding(
                    match,
                    f"Vessel finding for {vessel} lacks source citation",
                ))
        return findings
