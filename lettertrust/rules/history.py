import re
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

HISTORY_PATTERN = re.compile(r"(?:history of|previous|prior)\s+([^.,]{10,50})", re.IGNORECASE)

MIN_DETAIL_LENGTH = 15
ANCHOR_WINDOW = 150


class UnsourcedHistoryRule(DetectionRule):
    """
    Past-history phrases ("history of ...", "prior ...") long enough to be
    specific must be traceable to the sources.
    """

    SEVERITY = FlagSeverity.WARNING

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings = []
        for match in HISTORY_PATTERN.finditer(letter_text):
            detail = match.group(1).strip()
            # Short phrases are too generic to judge
            if len(detail) < MIN_DETAIL_LENGTH:
                continue
            if evidence.anchor_near(match.start(), ANCHOR_WINDOW):
                continue
            if evidence.contains(detail):
                continue
            findings.append(self.finding(match, "Patient history detail lacks source citation"))
        return findings
