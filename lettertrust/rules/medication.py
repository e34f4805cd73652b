import re
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

MEDICATION_CHANGE_PATTERN = re.compile(
    r"(?:started|commenced|increased|decreased|ceased)\s+([a-z]+)\s+(\d+\.?\d*\s*mg)",
    re.IGNORECASE,
)


def _dose_in_sources(dose: str, evidence: SourceEvidence) -> bool:
    compact = re.sub(r"\s+", "", dose)
    spaced = re.sub(r"(\d)mg", r"\1 mg", compact, flags=re.IGNORECASE)
    return evidence.contains(compact) or evidence.contains(spaced)


class UnsourcedMedicationChangeRule(DetectionRule):
    SEVERITY = FlagSeverity.WARNING

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings = []
        for match in MEDICATION_CHANGE_PATTERN.finditer(letter_text):
            medication, dose = match.group(1), match.group(2)
            if evidence.contains(medication) and _dose_in_sources(dose, evidence):
                continue
            findings.append(self.finding(
                match,
                f'Medication change "{medication} {dose}" not found in sources',
            ))
        return findings
