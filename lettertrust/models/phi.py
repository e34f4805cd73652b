from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class PHI:
    """
    Patient identifying fields. Supplied per request, never persisted.
    """
    name: str
    date_of_birth: str                  # ISO or DD/MM/YYYY
    medicare_number: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ObfuscationTokens:
    name_token: str
    dob_token: str
    medicare_token: Optional[str] = None
    gender_token: Optional[str] = None
    address_token: Optional[str] = None
    phone_token: Optional[str] = None
    email_token: Optional[str] = None


@dataclass
class DeobfuscationMap:
    """
    Session-scoped reversal table. Must not outlive the session that built it.
    """
    session_id: str
    tokens: ObfuscationTokens
    phi: PHI
    extra_mappings: Dict[str, str] = field(default_factory=dict)

    def token_table(self) -> Dict[str, str]:
        """All token -> original value pairs, fixed fields and ad hoc ones."""
        table = {
            self.tokens.name_token: self.phi.name,
            self.tokens.dob_token: self.phi.date_of_birth,
        }
        optional = [
            (self.tokens.medicare_token, self.phi.medicare_number),
            (self.tokens.gender_token, self.phi.gender),
            (self.tokens.address_token, self.phi.address),
            (self.tokens.phone_token, self.phi.phone_number),
            (self.tokens.email_token, self.phi.email),
        ]
        for token, value in optional:
            if token and value:
                table[token] = value
        table.update(self.extra_mappings)
        return table


@dataclass(frozen=True)
class ObfuscationResult:
    obfuscated_text: str
    deobfuscation_map: DeobfuscationMap
    tokens_replaced: int


@dataclass(frozen=True)
class ObfuscationValidation:
    is_safe: bool
    leaked_phi: List[str]
