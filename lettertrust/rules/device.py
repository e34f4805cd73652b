import re
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

STENT_SIZE_PATTERN = re.compile(
    r"(\d+\.?\d*)\s*(?:x|×)\s*(\d+)\s*mm\s+stent",
    re.IGNORECASE,
)

ANCHOR_WINDOW = 200


class UnsourcedDeviceSizeRule(DetectionRule):
    SEVERITY = FlagSeverity.CRITICAL

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings = []
        for match in STENT_SIZE_PATTERN.finditer(letter_text):
            diameter, length = match.group(1), match.group(2)
            anchored = any(
                diameter in (anchor.source_excerpt or "") or length in (anchor.source_excerpt or "")
                for anchor in evidence.anchors_near(match.start(), ANCHOR_WINDOW)
            )
            if not anchored:
                findings.append(self.finding(match, "Stent size specification lacks source citation"))
        return findings
