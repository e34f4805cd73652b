"""
Review pipeline: the order in which the checks run around a draft.

    sources --obfuscate--> drafting engine (external) --> draft
    draft --detect--> flags --score--> risk / recommendation / report
    physician edits --> final --diff--> stats + edits --> provenance --> ledger
"""
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional

from lettertrust.audit.provenance_builder import build_provenance
from lettertrust.diff.changes import summarize_changes
from lettertrust.diff.engine import calculate_stats, diff_texts
from lettertrust.models.clinical import ClinicalValue, SourceAnchor
from lettertrust.models.diff import ContentDiff, DiffEntry, DiffStats
from lettertrust.models.flag import HallucinationFlag
from lettertrust.models.phi import PHI, DeobfuscationMap
from lettertrust.models.provenance import ProvenanceInput, ProvenanceRecord
from lettertrust.models.risk import ApprovalRecommendation, HallucinationRisk
from lettertrust.models.sources import LetterSources
from lettertrust.phi.obfuscation import obfuscate_phi
from lettertrust.phi.validation import validate_obfuscation
from lettertrust.rules.registry import HallucinationDetector
from lettertrust.scoring.report import generate_hallucination_report
from lettertrust.scoring.risk import calculate_hallucination_risk, recommend_approval
from lettertrust.storage import ProvenanceLedger
from lettertrust.telemetry import emit_assessment_telemetry

logger = logging.getLogger("lettertrust.pipeline")


class PHILeakError(ValueError):
    """Obfuscated text still contains raw PHI and must not leave the boundary."""

    def __init__(self, leaked_fields: List[str]):
        self.leaked_fields = leaked_fields
        super().__init__(f"PHI still present after obfuscation: {', '.join(leaked_fields)}")


@dataclass(frozen=True)
class ObfuscatedSources:
    sources: LetterSources
    deobfuscation_map: DeobfuscationMap
    tokens_replaced: int


@dataclass(frozen=True)
class DraftAssessment:
    flags: List[HallucinationFlag]
    risk: HallucinationRisk
    recommendation: ApprovalRecommendation
    report: str


@dataclass(frozen=True)
class ApprovalOutcome:
    record: ProvenanceRecord
    diff: List[DiffEntry]
    diff_stats: DiffStats
    content_diff: ContentDiff


def _guarded(text: str, phi: PHI, session_id: str, locale: Optional[str]):
    result = obfuscate_phi(text, phi, session_id=session_id, locale=locale)
    validation = validate_obfuscation(result.obfuscated_text, phi)
    if not validation.is_safe:
        raise PHILeakError(validation.leaked_phi)
    return result


def _map_strings(data, fn):
    if isinstance(data, str):
        return fn(data)
    if isinstance(data, dict):
        return {k: _map_strings(v, fn) for k, v in data.items()}
    if isinstance(data, list):
        return [_map_strings(v, fn) for v in data]
    return data


def obfuscate_sources(
    sources: LetterSources,
    phi: PHI,
    session_id: str,
    locale: Optional[str] = None,
) -> ObfuscatedSources:
    """
    Obfuscate every free-text source before it is sent to a drafting model.

    All texts share session_id, so one map restores the whole bundle. Raises
    PHILeakError if the leak validator still finds raw PHI in any of them.
    """
    extra = {}
    replaced = 0
    last_map: Optional[DeobfuscationMap] = None

    def run(text: Optional[str]) -> Optional[str]:
        nonlocal replaced, last_map
        if not text:
            return text
        result = _guarded(text, phi, session_id, locale)
        extra.update(result.deobfuscation_map.extra_mappings)
        replaced += result.tokens_replaced
        last_map = result.deobfuscation_map
        return result.obfuscated_text

    transcript = sources.transcript
    if transcript is not None:
        transcript = replace(
            transcript,
            text=run(transcript.text),
            speakers=[replace(s, text=run(s.text)) for s in transcript.speakers],
        )

    user_input = sources.user_input
    if user_input is not None:
        user_input = replace(user_input, text=run(user_input.text))

    documents = [
        replace(
            doc,
            extracted_data=_map_strings(doc.extracted_data, run),
            raw_text=run(doc.raw_text),
        )
        for doc in (sources.documents or [])
    ]

    if last_map is None:
        last_map = obfuscate_phi("", phi, session_id=session_id, locale=locale).deobfuscation_map

    deobfuscation_map = DeobfuscationMap(
        session_id=session_id,
        tokens=last_map.tokens,
        phi=phi,
        extra_mappings=extra,
    )

    logger.info(f"Sources obfuscated: session={session_id} tokens_replaced={replaced}")
    return ObfuscatedSources(
        sources=LetterSources(transcript=transcript, user_input=user_input, documents=documents),
        deobfuscation_map=deobfuscation_map,
        tokens_replaced=replaced,
    )


def assess_draft(
    letter_text: str,
    sources: Optional[LetterSources] = None,
    source_anchors: Optional[List[SourceAnchor]] = None,
    clinical_values: Optional[List[ClinicalValue]] = None,
    detector: Optional[HallucinationDetector] = None,
) -> DraftAssessment:
    start_time = time.perf_counter()

    detector = detector or HallucinationDetector()
    flags = detector.detect(letter_text, sources, source_anchors, clinical_values)
    risk = calculate_hallucination_risk(flags)
    recommendation = recommend_approval(flags)
    report = generate_hallucination_report(flags)

    latency_ms = int((time.perf_counter() - start_time) * 1000)
    emit_assessment_telemetry(
        latency_ms=latency_ms,
        risk_score=risk.score,
        risk_level=risk.level.value,
        critical_count=risk.critical_count,
        warning_count=risk.warning_count,
    )

    logger.info(
        f"Draft assessed: flags={len(flags)} score={risk.score} level={risk.level.value} "
        f"latency_ms={latency_ms}"
    )
    return DraftAssessment(flags=flags, risk=risk, recommendation=recommendation, report=report)


def approve_letter(
    inputs: ProvenanceInput,
    ledger: Optional[ProvenanceLedger] = None,
    now: Optional[datetime] = None,
    max_cells: Optional[int] = None,
) -> ApprovalOutcome:
    """
    Diff the physician's final text against the draft, build the provenance
    record and commit it when a ledger is given.

    inputs.content_diff is replaced by the edits computed here.
    """
    if inputs.reviewer is None or not (inputs.reviewer.id or "").strip():
        raise ValueError("Reviewer identity is required")

    now = now or datetime.now(timezone.utc)
    draft = inputs.letter.content_draft or ""
    final = inputs.letter.content_final or ""

    entries = diff_texts(draft, final, max_cells=max_cells)
    stats = calculate_stats(entries)
    content_diff = summarize_changes(draft, final, inputs.reviewer.id, timestamp=now, max_cells=max_cells)

    record = build_provenance(replace(inputs, content_diff=content_diff), now=now)

    if ledger is not None:
        ledger.commit(record)

    logger.info(
        f"Letter approved: letter_id={record.letter_id} hash={record.hash} "
        f"percent_changed={stats.percent_changed} edits={content_diff.change_count}"
    )
    return ApprovalOutcome(record=record, diff=entries, diff_stats=stats, content_diff=content_diff)
