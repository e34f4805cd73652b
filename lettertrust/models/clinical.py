from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ClinicalValueType(str, Enum):
    MEASUREMENT = "measurement"
    DIAGNOSIS = "diagnosis"
    MEDICATION = "medication"
    PROCEDURE = "procedure"


class SourceType(str, Enum):
    TRANSCRIPT = "transcript"
    DOCUMENT = "document"
    USER_INPUT = "user-input"


@dataclass(frozen=True)
class SourceAnchor:
    """
    Pre-validated span linking a letter statement to where it came from.
    Anchored statements are exempt from hallucination flagging.
    """
    id: str
    segment_text: str
    start_index: int
    end_index: int
    source_type: SourceType
    source_id: str            # recording id or document id
    source_excerpt: str
    confidence: float = 1.0   # 0-1
    timestamp: Optional[float] = None    # transcript sources
    page_number: Optional[int] = None    # document sources


@dataclass(frozen=True)
class ClinicalValue:
    """
    A clinical value extracted during drafting.
    Superseded by a new letter version, never deleted.
    """
    id: str
    name: str
    value: str
    type: ClinicalValueType = ClinicalValueType.MEASUREMENT
    unit: Optional[str] = None
    verified: bool = False
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None
    source_anchor_id: Optional[str] = None

    @property
    def display_text(self) -> str:
        return f"{self.name} {self.value}{self.unit or ''}"
