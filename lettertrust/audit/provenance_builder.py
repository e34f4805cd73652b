import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

from lettertrust.audit.hash_utils import calculate_provenance_hash
from lettertrust.config import get_settings
from lettertrust.models.diff import ChangeType, ContentDiff
from lettertrust.models.provenance import (
    ContentDiffSummary,
    EditEntry,
    ExtractedValueEntry,
    HallucinationCheckEntry,
    PatientEntry,
    PhysicianEntry,
    ProvenanceData,
    ProvenanceInput,
    ProvenanceRecord,
    SourceFileEntry,
)

logger = logging.getLogger("lettertrust.audit")


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def calculate_percent_changed(draft: str, final: str) -> float:
    """
    Position-by-position character comparison, rounded to one decimal.

    This is the audit metric. It is cheaper and coarser than the token diff
    used for display, and the two are not expected to agree.
    """
    if not draft:
        return 100.0

    final = final or ""
    max_length = max(len(draft), len(final))
    matches = sum(1 for a, b in zip(draft, final) if a == b)

    percent_changed = 100 - (matches / max_length) * 100
    return math.floor(percent_changed * 10 + 0.5) / 10


def _source_files(inputs: ProvenanceInput) -> List[SourceFileEntry]:
    files: List[SourceFileEntry] = []

    if inputs.recording is not None:
        created = _iso(inputs.recording.created_at)
        files.append(SourceFileEntry(
            id=inputs.recording.id,
            type="recording",
            name=f"Recording from {created}",
            created_at=created,
        ))

    for doc in inputs.documents:
        files.append(SourceFileEntry(
            id=doc.id,
            type="document",
            name=doc.filename,
            created_at=_iso(doc.created_at),
        ))

    return files


def _edits(content_diff: ContentDiff) -> List[EditEntry]:
    edits: List[EditEntry] = []

    for change in content_diff.additions:
        edits.append(EditEntry(
            type=ChangeType.ADDITION.value,
            index=change.index,
            timestamp=_iso(change.timestamp),
            new_text=change.new_text,
        ))

    for change in content_diff.deletions:
        edits.append(EditEntry(
            type=ChangeType.DELETION.value,
            index=change.index,
            timestamp=_iso(change.timestamp),
            original_text=change.original_text,
        ))

    for change in content_diff.modifications:
        edits.append(EditEntry(
            type=ChangeType.MODIFICATION.value,
            index=change.index,
            timestamp=_iso(change.timestamp),
            original_text=change.original_text,
            new_text=change.new_text,
        ))

    # Stable sort keeps additions before deletions before modifications at equal index
    edits.sort(key=lambda e: e.index)
    return edits


def build_provenance(
    inputs: ProvenanceInput,
    now: Optional[datetime] = None,
) -> ProvenanceRecord:
    """
    Builds the single immutable provenance record for an approved letter.

    Enforces that the approving physician is identified. The returned record
    carries the hash of its own data and is ready to be committed as one unit.
    """
    # -------------------------------
    # Human accountability checks
    # -------------------------------
    if inputs.reviewer is None or not (inputs.reviewer.id or "").strip():
        raise ValueError("Reviewer identity is required")

    letter = inputs.letter
    if not (letter.id or "").strip():
        raise ValueError("Letter id is required")

    now = now or datetime.now(timezone.utc)
    settings = get_settings()

    draft = letter.content_draft or ""
    final = letter.content_final or ""
    percent_changed = calculate_percent_changed(draft, final)

    extracted_values = [
        ExtractedValueEntry(
            id=v.id,
            name=v.name,
            value=v.value,
            verified=v.verified,
            unit=v.unit,
            verified_at=_iso(v.verified_at),
            verified_by=v.verified_by,
            source_anchor_id=v.source_anchor_id,
        )
        for v in inputs.verified_values
    ]

    hallucination_checks = [
        HallucinationCheckEntry(
            id=f.id,
            flagged_text=f.segment_text,
            severity=f.severity.value,
            reason=f.reason,
            dismissed=f.dismissed,
            dismissed_at=_iso(f.dismissed_at),
            dismissed_by=f.dismissed_by,
            dismiss_reason=f.dismiss_reason,
        )
        for f in inputs.dismissed_flags
    ]

    source_files = _source_files(inputs)
    edits = _edits(inputs.content_diff)

    data = ProvenanceData(
        letter_id=letter.id,
        engine_version=settings.engine_version,
        generated_at=_iso(letter.generated_at) or _iso(now),
        approved_at=_iso(letter.approved_at) or _iso(now),
        primary_model=letter.primary_model or "unknown",
        critic_model=letter.critic_model or None,
        source_files=source_files,
        patient=PatientEntry(id=inputs.patient_id or letter.patient_id or "unknown"),
        extracted_values=extracted_values,
        hallucination_checks=hallucination_checks,
        reviewing_physician=PhysicianEntry(
            id=inputs.reviewer.id,
            name=inputs.reviewer.name,
            email=inputs.reviewer.email,
        ),
        review_duration_ms=inputs.review_duration_ms,
        edits=edits,
        content_diff=ContentDiffSummary(
            original=draft,
            final=final,
            percent_changed=percent_changed,
        ),
        verification_rate=letter.verification_rate or 0.0,
        hallucination_risk_score=letter.hallucination_risk_score or 0,
        input_tokens=letter.input_tokens or 0,
        output_tokens=letter.output_tokens or 0,
        generation_duration_ms=letter.generation_duration_ms or 0,
    )

    record_hash = calculate_provenance_hash(data)

    logger.info(
        f"Provenance record built: letter_id={letter.id} hash={record_hash} "
        f"source_files={len(source_files)} values={len(extracted_values)} "
        f"checks={len(hallucination_checks)} edits={len(edits)} "
        f"percent_changed={percent_changed}"
    )

    return ProvenanceRecord(
        letter_id=letter.id,
        data=data,
        hash=record_hash,
        created_at=now,
    )
