from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class DiffOperation(str, Enum):
    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class DiffEntry:
    operation: DiffOperation
    text: str

    def to_dict(self) -> dict:
        return {"operation": self.operation.value, "text": self.text}


@dataclass(frozen=True)
class DiffStats:
    additions: int
    deletions: int
    percent_changed: int


class ChangeType(str, Enum):
    ADDITION = "addition"
    DELETION = "deletion"
    MODIFICATION = "modification"


@dataclass(frozen=True)
class TextChange:
    type: ChangeType
    index: int                          # character offset in the draft
    timestamp: datetime
    user_id: str
    original_text: Optional[str] = None
    new_text: Optional[str] = None


@dataclass(frozen=True)
class ContentDiff:
    """Physician edits grouped by kind, as consumed by the provenance builder."""
    additions: List[TextChange] = field(default_factory=list)
    deletions: List[TextChange] = field(default_factory=list)
    modifications: List[TextChange] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.additions) + len(self.deletions) + len(self.modifications)
