import re
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.phi.patterns import MONTH_ABBREVIATIONS, MONTH_NAMES
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

_MONTHS = "|".join(sorted(MONTH_NAMES + MONTH_ABBREVIATIONS, key=len, reverse=True))

DATE_PATTERN = re.compile(
    r"\b("
    r"\d{1,2}\s+(?:" + _MONTHS + r")\.?\s+\d{4}"
    r"|(?:" + _MONTHS + r")\.?\s+\d{1,2},?\s+\d{4}"
    r"|\d{1,2}/\d{1,2}/\d{4}"
    r"|\d{4}-\d{1,2}-\d{1,2}"
    r")\b",
    re.IGNORECASE,
)

# Consultation and letter dates sit next to an anchored header
ANCHOR_WINDOW = 100


class UnsourcedDateRule(DetectionRule):
    SEVERITY = FlagSeverity.WARNING

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings = []
        for match in DATE_PATTERN.finditer(letter_text):
            date = match.group(1)
            if evidence.contains(date):
                continue
            if evidence.anchor_near(match.start(), ANCHOR_WINDOW):
                continue
            findings.append(self.finding(match, f'Specific date "{date}" not found in sources'))
        return findings
