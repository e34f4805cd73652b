import re
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

REFERRING_DOCTOR_PATTERN = re.compile(
    r"(?:dear|from|referred\s+by)\s+dr\.?\s+([a-z][a-z'-]+)",
    re.IGNORECASE,
)


class UnknownReferringDoctorRule(DetectionRule):
    """
    Doctor names in the greeting or referral line must come from a source.
    """

    SEVERITY = FlagSeverity.WARNING

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings = []
        for match in REFERRING_DOCTOR_PATTERN.finditer(letter_text):
            doctor = match.group(1)
            if not evidence.contains(doctor):
                findings.append(self.finding(
                    match,
                    f'Referring doctor name "{doctor}" not found in sources',
                ))
        return findings
