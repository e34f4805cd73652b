import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from lettertrust.audit.verification import verify_provenance
from lettertrust.config import get_settings
from lettertrust.diff.changes import render_unified
from lettertrust.diff.engine import calculate_stats, diff_texts
from lettertrust.integration.alerts import trigger_blocked_letter_alert
from lettertrust.models.clinical import ClinicalValue, ClinicalValueType, SourceAnchor, SourceType
from lettertrust.models.provenance import ProvenanceData
from lettertrust.models.sources import (
    DocumentSource,
    LetterSources,
    SpeakerSegment,
    TranscriptSource,
    UserInputSource,
)
from lettertrust.orchestrator.review_pipeline import assess_draft
from lettertrust.phi.scrubber import PHIScrubbingFilter, scrub_url_phi
from lettertrust.telemetry import emit_exception_telemetry, emit_integrity_telemetry, init_telemetry

# --- 1. SETUP AUDIT LOGGING ---
settings = get_settings()
logging.basicConfig(
    filename=settings.audit_log_path,
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
for handler in logging.getLogger().handlers:
    handler.addFilter(PHIScrubbingFilter())
audit_logger = logging.getLogger("audit")

tags_metadata = [
    {
        "name": "Verification",
        "description": "Hallucination checks, draft/final diffs and provenance integrity.",
    },
    {
        "name": "System",
        "description": "Health checks and operational metadata.",
    },
]

app = FastAPI(
    title="LetterTrust Verification Engine",
    description="""
    **Verification and audit core** for AI-drafted clinical letters.

    * **Hallucination detection:** rule registry over the draft and its sources.
    * **Risk scoring:** bounded 0-100 score with an approval recommendation.
    * **Provenance:** SHA-256 tamper evidence for approved letters.
    """,
    version="1.0.0",
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
)

init_telemetry()


# --- MIDDLEWARE: AUDIT TRAIL ---
@app.middleware("http")
async def audit_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    client = request.client.host if request.client else "unknown"
    audit_logger.info(
        f"METHOD={request.method} PATH={scrub_url_phi(request.url.path)} "
        f"STATUS={response.status_code} CLIENT={client} "
        f"DURATION={process_time:.4f}s"
    )
    return response


# --- DATA MODELS ---
class SpeakerModel(BaseModel):
    speaker: str
    text: str
    timestamp: float = 0.0


class TranscriptModel(BaseModel):
    id: str = "transcript"
    text: str
    speakers: List[SpeakerModel] = []
    mode: str = "DICTATION"


class UserInputModel(BaseModel):
    id: str = "user-input"
    text: str


class DocumentModel(BaseModel):
    id: str
    type: str = "OTHER"
    name: str = ""
    extracted_data: Dict[str, Any] = {}
    raw_text: Optional[str] = None


class SourcesModel(BaseModel):
    transcript: Optional[TranscriptModel] = None
    user_input: Optional[UserInputModel] = None
    documents: List[DocumentModel] = []


class AnchorModel(BaseModel):
    id: str
    segment_text: str
    start_index: int
    end_index: int
    source_type: SourceType = SourceType.TRANSCRIPT
    source_id: str = ""
    source_excerpt: str = ""
    confidence: float = 1.0


class ClinicalValueModel(BaseModel):
    id: str
    name: str
    value: str
    type: ClinicalValueType = ClinicalValueType.MEASUREMENT
    unit: Optional[str] = None
    verified: bool = False
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    source_anchor_id: Optional[str] = None


class AssessRequest(BaseModel):
    letter_id: str = "unknown"
    letter_text: str
    sources: SourcesModel = Field(default_factory=SourcesModel)
    source_anchors: List[AnchorModel] = []
    clinical_values: List[ClinicalValueModel] = []


class AssessResponse(BaseModel):
    risk_score: int
    risk_level: str
    should_approve: bool
    reason: str
    action_required: str
    flags: List[Dict[str, Any]]
    report: str


class DiffRequest(BaseModel):
    original: str
    modified: str


class DiffResponse(BaseModel):
    entries: List[Dict[str, str]]
    additions: int
    deletions: int
    percent_changed: int
    unified: str


class VerifyProvenanceRequest(BaseModel):
    data: Dict[str, Any]
    hash: str


class VerifyProvenanceResponse(BaseModel):
    status: str
    verified: bool
    stored_hash: str
    computed_hash: str


def _to_sources(model: SourcesModel) -> LetterSources:
    transcript = None
    if model.transcript is not None:
        transcript = TranscriptSource(
            id=model.transcript.id,
            text=model.transcript.text,
            speakers=[SpeakerSegment(**s.model_dump()) for s in model.transcript.speakers],
            mode=model.transcript.mode,
        )
    user_input = None
    if model.user_input is not None:
        user_input = UserInputSource(id=model.user_input.id, text=model.user_input.text)
    return LetterSources(
        transcript=transcript,
        user_input=user_input,
        documents=[DocumentSource(**d.model_dump()) for d in model.documents],
    )


# --- ENDPOINTS ---
@app.get("/health", tags=["System"])
def health():
    return {"status": "ok", "engine_version": get_settings().engine_version}


@app.post("/assess", response_model=AssessResponse, tags=["Verification"])
def assess(request: AssessRequest):
    """
    Run hallucination detection and risk scoring over a draft letter.
    """
    try:
        assessment = assess_draft(
            request.letter_text,
            sources=_to_sources(request.sources),
            source_anchors=[SourceAnchor(**a.model_dump()) for a in request.source_anchors],
            clinical_values=[ClinicalValue(**v.model_dump()) for v in request.clinical_values],
        )

        if not assessment.recommendation.should_approve:
            trigger_blocked_letter_alert(
                letter_id=request.letter_id,
                risk=assessment.risk,
                recommendation=assessment.recommendation,
            )

        return {
            "risk_score": assessment.risk.score,
            "risk_level": assessment.risk.level.value,
            "should_approve": assessment.recommendation.should_approve,
            "reason": assessment.recommendation.reason,
            "action_required": assessment.recommendation.action_required,
            "flags": [f.to_dict() for f in assessment.flags],
            "report": assessment.report,
        }

    except Exception as e:
        emit_exception_telemetry(e)
        audit_logger.error(f"ENGINE_ERROR: {type(e).__name__}")
        raise HTTPException(status_code=500, detail="Assessment failed")


@app.post("/diff", response_model=DiffResponse, tags=["Verification"])
def diff(request: DiffRequest):
    entries = diff_texts(request.original, request.modified)
    stats = calculate_stats(entries)
    return {
        "entries": [e.to_dict() for e in entries],
        "additions": stats.additions,
        "deletions": stats.deletions,
        "percent_changed": stats.percent_changed,
        "unified": render_unified(entries),
    }


@app.post("/provenance/verify", response_model=VerifyProvenanceResponse, tags=["Verification"])
def verify(request: VerifyProvenanceRequest):
    """
    Recompute the hash of a stored provenance record.
    Responds 409 when the record has been altered.
    """
    try:
        data = ProvenanceData.from_dict(request.data)
    except (KeyError, TypeError) as e:
        raise HTTPException(status_code=422, detail=f"Malformed provenance data: {type(e).__name__}")

    # Hash the payload as received so unknown extra keys still count as tampering
    verification = verify_provenance(request.data, request.hash)
    emit_integrity_telemetry(verification.status.value)

    if not verification.verified:
        audit_logger.error(
            f"PROVENANCE_TAMPERED: letter_id={data.letter_id} "
            f"stored={verification.stored_hash} computed={verification.computed_hash}"
        )
        raise HTTPException(
            status_code=409,
            detail={
                "status": verification.status.value,
                "stored_hash": verification.stored_hash,
                "computed_hash": verification.computed_hash,
            },
        )

    return {
        "status": verification.status.value,
        "verified": True,
        "stored_hash": verification.stored_hash,
        "computed_hash": verification.computed_hash,
    }
