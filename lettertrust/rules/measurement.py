import re
from typing import Dict, List, Pattern

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.evidence import SourceEvidence

# Names that refer to the same measurement; the first entry is the canonical one
MEASUREMENT_ALIASES = [
    ["lvef", "ef", "ejection fraction"],
    ["blood pressure", "bp"],
    ["heart rate", "hr", "pulse"],
    ["qrs"],
    ["qtc"],
    ["pr interval", "pr"],
    ["tapse"],
    ["ava", "valve area", "aortic valve area"],
    ["mean gradient"],
    ["peak gradient"],
    ["creatinine", "cr"],
    ["egfr"],
    ["hba1c"],
    ["ldl"],
    ["hdl"],
    ["cholesterol"],
    ["triglycerides"],
    ["troponin"],
    ["bnp"],
    ["potassium", "k"],
    ["sodium", "na"],
    ["haemoglobin", "hemoglobin", "hb"],
    ["weight"],
    ["bmi"],
]

MEASUREMENT_NAMES = [
    "lvef", "ef", "ejection fraction", "blood pressure", "bp", "heart rate", "hr",
    "qrs", "qtc", "pr interval", "tapse", "ava", "valve area", "mean gradient",
    "peak gradient", "creatinine", "egfr", "hba1c", "ldl", "hdl", "cholesterol",
    "triglycerides", "troponin", "bnp", "potassium", "sodium", "haemoglobin",
    "hemoglobin", "weight", "bmi",
]

_ALIASES_BY_NAME: Dict[str, List[str]] = {
    name: group for group in MEASUREMENT_ALIASES for name in group
}

MEASUREMENT_PATTERN = re.compile(
    r"\b(?P<name>" + "|".join(sorted((re.escape(n) for n in MEASUREMENT_NAMES), key=len, reverse=True)) + r")\b"
    r"[^\d.\n]{0,20}?"
    r"(?P<value>\d+(?:\.\d+)?(?:/\d+)?)"
    r"\s*(?P<unit>%|mmhg|bpm|ms|mmol/l|umol/l|µmol/l|g/l|ng/l|pg/ml|kg|cm2|cm²)?",
    re.IGNORECASE,
)

# Filler between name and value in a source may not contain digits, so
# "35 years old, LVEF 60%" never supports "LVEF 35%"
SOURCE_FILLER_CHARS = 30


def source_pattern(name: str, value: str) -> Pattern:
    """
    Match the measurement in a source segment: an alias of the name followed
    by the value, or the value (with an optional percent sign) directly
    followed by the alias. The value is bounded so 5 never matches 15.
    """
    aliases = _ALIASES_BY_NAME.get(name.lower(), [name.lower()])
    names = "|".join(sorted((re.escape(a) for a in aliases), key=len, reverse=True))
    number = r"(?<!\d)(?<!\d\.)" + re.escape(value) + r"(?!\d|\.\d)"
    return re.compile(
        r"\b(?:" + names + r")\b[^\d\n]{0," + str(SOURCE_FILLER_CHARS) + r"}?" + number
        + r"|" + number + r"\s*%?\s*(?:" + names + r")\b",
        re.IGNORECASE,
    )


class UnsourcedMeasurementRule(DetectionRule):
    """
    Measurements in the letter must appear in a source under the same name
    (or an alias) with the same value, or match a verified clinical value.
    """

    SEVERITY = FlagSeverity.WARNING

    def evaluate(
        self,
        letter_text: str,
        evidence: SourceEvidence,
        clinical_values: List[ClinicalValue],
    ) -> List[RuleFinding]:
        findings: List[RuleFinding] = []
        flagged_spans = []

        verified = {
            (v.name.strip().lower(), v.value.strip().lower())
            for v in clinical_values
            if v.verified
        }

        for match in MEASUREMENT_PATTERN.finditer(letter_text):
            name = match.group("name").lower()
            value = match.group("value")

            if (name, value.lower()) in verified:
                continue
            if evidence.matches(source_pattern(name, value)):
                continue
            if evidence.anchor_covers(match.start(), match.end()):
                continue

            findings.append(self.finding(
                match,
                f'Measurement "{match.group(0).strip()}" not found in sources',
            ))
            flagged_spans.append((match.start(), match.end()))

        # Extracted values without an anchor that made it into the letter verbatim
        for value in clinical_values:
            if value.source_anchor_id or value.verified:
                continue

            text = value.display_text
            position = letter_text.find(text)
            if position == -1 or evidence.contains(text):
                continue

            end = position + len(text)
            if any(s <= position < e for s, e in flagged_spans):
                continue

            findings.append(RuleFinding(
                segment_text=text,
                start_index=position,
                end_index=end,
                reason=f"Clinical {value.type.value} lacks source citation",
                severity=self.SEVERITY,
            ))

        return findings
