from abc import ABC, abstractmethod
from typing import List

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.evidence import SourceEvidence


class DetectionRule(ABC):
    """
    Base class for all hallucination detection rules.

    A rule looks at the letter in isolation from every other rule and
    reports the segments it could not trace back to the evidence.
    """

    SEVERITY: FlagSeverity = FlagSeverity.WARNING

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        """
        Return zero or more findings for the letter.
        """
        pass

    def finding(self, match, reason: str, group: int = 0) -> RuleFinding:
        return RuleFinding(
            segment_text=match.group(group),
            start_index=match.start(group),
            end_index=match.end(group),
            reason=reason,
            severity=self.SEVERITY,
        )
