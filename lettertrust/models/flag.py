from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class FlagSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


@dataclass(frozen=True)
class RuleFinding:
    """Raw output of a single detection rule, before an id is assigned."""
    segment_text: str
    start_index: int
    end_index: int
    reason: str
    severity: FlagSeverity


@dataclass
class HallucinationFlag:
    """
    A letter segment that could not be traced to any source.

    The detector always creates flags with dismissed=False. The dismissal
    fields are only ever written by a physician action downstream.
    """
    id: str
    segment_text: str
    start_index: int
    end_index: int
    reason: str
    severity: FlagSeverity
    dismissed: bool = False
    dismissed_at: Optional[datetime] = None
    dismissed_by: Optional[str] = None
    dismiss_reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return not self.dismissed

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "segment_text": self.segment_text,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "reason": self.reason,
            "severity": self.severity.value,
            "dismissed": self.dismissed,
            "dismissed_at": self.dismissed_at.isoformat() if self.dismissed_at else None,
            "dismissed_by": self.dismissed_by,
            "dismiss_reason": self.dismiss_reason,
        }
