from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from lettertrust.models.clinical import ClinicalValue
from lettertrust.models.diff import ContentDiff
from lettertrust.models.flag import HallucinationFlag


# =========================================================
# Builder inputs
# =========================================================
@dataclass(frozen=True)
class LetterMetadata:
    id: str
    letter_type: str = "NEW_PATIENT"
    content_draft: Optional[str] = None
    content_final: Optional[str] = None
    primary_model: Optional[str] = None
    critic_model: Optional[str] = None
    verification_rate: Optional[float] = None
    hallucination_risk_score: Optional[int] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    generation_duration_ms: Optional[int] = None
    generated_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    patient_id: Optional[str] = None
    recording_id: Optional[str] = None


@dataclass(frozen=True)
class Reviewer:
    """Identity of the approving physician (mandatory for every record)."""
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class RecordingRef:
    id: str
    created_at: datetime


@dataclass(frozen=True)
class DocumentRef:
    id: str
    filename: str
    created_at: datetime
    document_type: Optional[str] = None


@dataclass(frozen=True)
class ProvenanceInput:
    letter: LetterMetadata
    reviewer: Reviewer
    content_diff: ContentDiff
    review_duration_ms: int
    patient_id: Optional[str] = None
    recording: Optional[RecordingRef] = None
    documents: List[DocumentRef] = field(default_factory=list)
    verified_values: List[ClinicalValue] = field(default_factory=list)
    dismissed_flags: List[HallucinationFlag] = field(default_factory=list)


# =========================================================
# Persisted record (all leaves are JSON primitives)
# =========================================================
@dataclass(frozen=True)
class SourceFileEntry:
    id: str
    type: Literal["recording", "document"]
    name: str
    created_at: str


@dataclass(frozen=True)
class PatientEntry:
    id: str


@dataclass(frozen=True)
class ExtractedValueEntry:
    id: str
    name: str
    value: str
    verified: bool
    unit: Optional[str] = None
    verified_at: Optional[str] = None
    verified_by: Optional[str] = None
    source_anchor_id: Optional[str] = None


@dataclass(frozen=True)
class HallucinationCheckEntry:
    id: str
    flagged_text: str
    severity: str
    reason: str
    dismissed: bool
    dismissed_at: Optional[str] = None
    dismissed_by: Optional[str] = None
    dismiss_reason: Optional[str] = None


@dataclass(frozen=True)
class PhysicianEntry:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class EditEntry:
    type: Literal["addition", "deletion", "modification"]
    index: int
    timestamp: str
    original_text: Optional[str] = None
    new_text: Optional[str] = None


@dataclass(frozen=True)
class ContentDiffSummary:
    original: str
    final: str
    percent_changed: float


@dataclass(frozen=True)
class ProvenanceData:
    """
    Complete chain of custody for one approved letter.
    Logically immutable: any later change must surface as a hash mismatch.
    """
    letter_id: str
    engine_version: str
    generated_at: str
    approved_at: str

    primary_model: str
    critic_model: Optional[str]

    source_files: List[SourceFileEntry]
    patient: PatientEntry

    extracted_values: List[ExtractedValueEntry]
    hallucination_checks: List[HallucinationCheckEntry]

    reviewing_physician: PhysicianEntry
    review_duration_ms: int

    edits: List[EditEntry]
    content_diff: ContentDiffSummary

    verification_rate: float
    hallucination_risk_score: int

    input_tokens: int
    output_tokens: int
    generation_duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProvenanceData":
        return cls(
            letter_id=payload["letter_id"],
            engine_version=payload["engine_version"],
            generated_at=payload["generated_at"],
            approved_at=payload["approved_at"],
            primary_model=payload["primary_model"],
            critic_model=payload.get("critic_model"),
            source_files=[SourceFileEntry(**s) for s in payload.get("source_files", [])],
            patient=PatientEntry(**payload["patient"]),
            extracted_values=[ExtractedValueEntry(**v) for v in payload.get("extracted_values", [])],
            hallucination_checks=[
                HallucinationCheckEntry(**h) for h in payload.get("hallucination_checks", [])
            ],
            reviewing_physician=PhysicianEntry(**payload["reviewing_physician"]),
            review_duration_ms=payload["review_duration_ms"],
            edits=[EditEntry(**e) for e in payload.get("edits", [])],
            content_diff=ContentDiffSummary(**payload["content_diff"]),
            verification_rate=payload["verification_rate"],
            hallucination_risk_score=payload["hallucination_risk_score"],
            input_tokens=payload["input_tokens"],
            output_tokens=payload["output_tokens"],
            generation_duration_ms=payload["generation_duration_ms"],
        )


@dataclass(frozen=True)
class ProvenanceRecord:
    """Record and hash, persisted together as one append-only row."""
    letter_id: str
    data: ProvenanceData
    hash: str
    created_at: datetime


# =========================================================
# Integrity verification
# =========================================================
class IntegrityStatus(str, Enum):
    VERIFIED = "VERIFIED"
    TAMPERED = "TAMPERED"


@dataclass(frozen=True)
class ProvenanceVerification:
    status: IntegrityStatus
    stored_hash: str
    computed_hash: str

    @property
    def verified(self) -> bool:
        return self.status is IntegrityStatus.VERIFIED
