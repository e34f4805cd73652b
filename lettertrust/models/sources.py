from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SpeakerSegment:
    speaker: str
    text: str
    timestamp: float = 0.0


@dataclass(frozen=True)
class TranscriptSource:
    id: str
    text: str
    speakers: List[SpeakerSegment] = field(default_factory=list)
    mode: str = "DICTATION"   # "AMBIENT" | "DICTATION"


@dataclass(frozen=True)
class UserInputSource:
    id: str
    text: str


@dataclass(frozen=True)
class DocumentSource:
    id: str
    type: str
    name: str
    extracted_data: Dict[str, Any] = field(default_factory=dict)
    raw_text: Optional[str] = None


@dataclass(frozen=True)
class LetterSources:
    """
    Named bundle of everything the drafting engine was given.
    Every category is optional.
    """
    transcript: Optional[TranscriptSource] = None
    user_input: Optional[UserInputSource] = None
    documents: List[DocumentSource] = field(default_factory=list)
