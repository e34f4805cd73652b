import logging

from lettertrust.models.flag import FlagSeverity, RuleFinding
from lettertrust.models.sources import LetterSources
from lettertrust.rules.base import DetectionRule
from lettertrust.rules.registry import DEFAULT_RULES, HallucinationDetector
from lettertrust.rules.vessel import UnsourcedVesselFindingRule


class ExplodingRule(DetectionRule):
    def evaluate(self, letter_text, evidence, clinical_values):
        raise RuntimeError("malformed input")


class AlwaysFlagRule(DetectionRule):
    SEVERITY = FlagSeverity.WARNING

    def evaluate(self, letter_text, evidence, clinical_values):
        return [RuleFinding("x", 0, 1, "always", self.SEVERITY)]


def test_failing_rule_does_not_block_others(caplog):
    detector = HallucinationDetector(rules=[ExplodingRule(), UnsourcedVesselFindingRule()])

    with caplog.at_level(logging.WARNING, logger="lettertrust.rules"):
        flags = detector.detect("The LAD shows 70% stenosis.", LetterSources())

    assert len(flags) == 1
    assert flags[0].severity == FlagSeverity.CRITICAL
    assert "ExplodingRule" in caplog.text
    assert "RuntimeError" in caplog.text
    # Exception message may quote letter text, so it stays out of the log
    assert "malformed input" not in caplog.text


def test_custom_registry_and_ids():
    detector = HallucinationDetector(rules=[AlwaysFlagRule(), AlwaysFlagRule()])
    flags = detector.detect("anything")

    assert [f.id for f in flags] == ["hallucination-0", "hallucination-1"]
    assert all(f.dismissed is False for f in flags)


def test_empty_registry_flags_nothing():
    assert HallucinationDetector(rules=[]).detect("The LAD shows 70% stenosis.") == []


def test_default_registry_contents():
    names = [rule.name for rule in DEFAULT_RULES]
    assert names == [
        "UnsourcedMeasurementRule",
        "UnknownReferringDoctorRule",
        "UnsourcedDateRule",
        "UnsourcedVesselFindingRule",
        "UnsourcedMedicationChangeRule",
        "UnsourcedDeviceSizeRule",
        "UnsourcedHistoryRule",
    ]
    assert HallucinationDetector().rules == DEFAULT_RULES
