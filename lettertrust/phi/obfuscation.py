"""
Reversible PHI obfuscation for text leaving the trusted boundary
(drafting model prompts, logs, error trackers).

Matching runs most-specific first so later passes never see half-replaced
text: name, date of birth, Medicare number, gender (context only), email,
phone, address.

Tokens look like [[PATIENT_KDOBNHAF]]. The suffix is derived from
(session_id, field) and uses letters only, so numeric patterns can never
match inside a token. A surface form that differs from the canonical PHI
value (other case, other date format, other spacing) gets its own variant
token in extra_mappings so the reversal restores the exact original text.
"""
import hashlib
import logging
import re
import uuid
from typing import Dict, Optional, Pattern

from lettertrust.config import get_settings
from lettertrust.models.phi import (
    PHI,
    DeobfuscationMap,
    ObfuscationResult,
    ObfuscationTokens,
)
from lettertrust.phi.patterns import EMAIL, GENDER_CONTEXTS, PHONE_PATTERNS
from lettertrust.phi.variants import (
    dob_pattern,
    medicare_pattern,
    phone_pattern,
    phrase_pattern,
)

logger = logging.getLogger("lettertrust.phi")

_HEX_TO_ALPHA = str.maketrans("0123456789abcdef", "ABCDEFGHIJKLMNOP")


def _digest(material: str, length: int) -> str:
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:length].translate(_HEX_TO_ALPHA)


def make_token(session_id: str, field: str, surface: Optional[str] = None) -> str:
    base = f"{field}_{_digest(f'{session_id}:{field}', 8)}"
    if surface is None:
        return f"[[{base}]]"
    return f"[[{base}_{_digest(f'{session_id}:{field}:{surface}', 6)}]]"


def build_tokens(session_id: str, phi: PHI) -> ObfuscationTokens:
    return ObfuscationTokens(
        name_token=make_token(session_id, "PATIENT"),
        dob_token=make_token(session_id, "DOB"),
        medicare_token=make_token(session_id, "MEDICARE") if phi.medicare_number else None,
        gender_token=make_token(session_id, "GENDER") if phi.gender else None,
        address_token=make_token(session_id, "ADDRESS") if phi.address else None,
        phone_token=make_token(session_id, "PHONE") if phi.phone_number else None,
        email_token=make_token(session_id, "EMAIL") if phi.email else None,
    )


class _Substituter:
    """
    Applies one pattern at a time and records every token it hands out.
    Lives for a single obfuscate_phi call.
    """

    def __init__(self, session_id: str, extra_mappings: Dict[str, str]):
        self.session_id = session_id
        self.extra_mappings = extra_mappings
        self.count = 0

    def apply(
        self,
        text: str,
        pattern: Optional[Pattern],
        field: str,
        canonical: Optional[str],
        token: Optional[str],
        group: Optional[str] = None,
    ) -> str:
        if pattern is None:
            return text

        def _replace(match: re.Match) -> str:
            surface = match.group(group) if group else match.group(0)
            if canonical is not None and token is not None and surface == canonical:
                replacement = token
            else:
                replacement = make_token(self.session_id, field, surface)
                self.extra_mappings[replacement] = surface
            self.count += 1
            if not group:
                return replacement
            start = match.start(group) - match.start(0)
            end = match.end(group) - match.start(0)
            whole = match.group(0)
            return whole[:start] + replacement + whole[end:]

        return pattern.sub(_replace, text)


def _gender_patterns(gender: Optional[str]):
    if not gender or not gender.strip():
        return []
    escaped = re.escape(gender.strip())
    return [re.compile(t.replace("{gender}", escaped), re.IGNORECASE) for t in GENDER_CONTEXTS]


def _exact_pattern(value: Optional[str]) -> Optional[Pattern]:
    if not value or not value.strip():
        return None
    return re.compile(r"(?<![\w.])" + re.escape(value.strip()) + r"(?![\w])", re.IGNORECASE)


def obfuscate_phi(
    text: str,
    phi: PHI,
    session_id: Optional[str] = None,
    locale: Optional[str] = None,
) -> ObfuscationResult:
    """
    Replace every detectable PHI occurrence in text with a session token.

    Pass the same session_id on every call in one drafting session to get
    identical tokens each time. Never raises; missing optional fields are skipped.
    """
    session_id = session_id or uuid.uuid4().hex
    locale = (locale or get_settings().phone_locale).upper()
    tokens = build_tokens(session_id, phi)
    extra_mappings: Dict[str, str] = {}
    sub = _Substituter(session_id, extra_mappings)

    out = text or ""

    # 1. Name
    out = sub.apply(out, phrase_pattern(phi.name), "PATIENT", phi.name, tokens.name_token)

    # 2. Date of birth (ISO and slash forms)
    out = sub.apply(out, dob_pattern(phi.date_of_birth), "DOB", phi.date_of_birth, tokens.dob_token)

    # 3. Medicare number, any separator layout
    out = sub.apply(
        out, medicare_pattern(phi.medicare_number), "MEDICARE", phi.medicare_number, tokens.medicare_token
    )

    # 4. Gender, only inside explicit context
    for pattern in _gender_patterns(phi.gender):
        out = sub.apply(out, pattern, "GENDER", phi.gender, tokens.gender_token, group="value")

    # 5. Email: the patient's first, then anything else email-shaped
    out = sub.apply(out, _exact_pattern(phi.email), "EMAIL", phi.email, tokens.email_token)
    out = sub.apply(out, EMAIL, "EMAIL", phi.email, tokens.email_token)

    # 6. Phone: the patient's number in any layout, then locale-shaped numbers
    out = sub.apply(out, phone_pattern(phi.phone_number), "PHONE", phi.phone_number, tokens.phone_token)
    out = sub.apply(out, PHONE_PATTERNS.get(locale), "PHONE", phi.phone_number, tokens.phone_token)

    # 7. Free-text address line
    out = sub.apply(out, phrase_pattern(phi.address), "ADDRESS", phi.address, tokens.address_token)

    logger.info(
        f"PHI obfuscation complete: tokens_replaced={sub.count} "
        f"ad_hoc_tokens={len(extra_mappings)} text_length={len(text or '')}"
    )

    return ObfuscationResult(
        obfuscated_text=out,
        deobfuscation_map=DeobfuscationMap(
            session_id=session_id,
            tokens=tokens,
            phi=phi,
            extra_mappings=extra_mappings,
        ),
        tokens_replaced=sub.count,
    )


def deobfuscate_phi(obfuscated_text: str, deobfuscation_map: DeobfuscationMap) -> str:
    """
    Restore every token, fixed fields and extra_mappings alike.
    """
    restored = obfuscated_text or ""
    replaced = 0
    for token, value in deobfuscation_map.token_table().items():
        occurrences = restored.count(token)
        if occurrences:
            restored = restored.replace(token, value)
            replaced += occurrences

    logger.info(f"PHI deobfuscation complete: tokens_restored={replaced}")
    return restored
