from dataclasses import dataclass, field
from enum import Enum
from typing import List


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class HallucinationRisk:
    score: int              # 0-100
    level: RiskLevel
    flag_count: int         # every flag passed in, dismissed ones included
    critical_count: int     # non-dismissed only
    warning_count: int      # non-dismissed only


@dataclass(frozen=True)
class ApprovalRecommendation:
    """
    Decision support for the reviewing physician, not an execution command.
    """
    should_approve: bool
    reason: str
    action_required: str


@dataclass(frozen=True)
class ApprovalGate:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
