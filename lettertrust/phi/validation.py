"""
Independent leak check run after obfuscation.

Re-scans for every raw PHI value without reusing the obfuscation step's
matches, so a skipped or broken substitution still shows up here.
"""
import logging
import re
from typing import List

from lettertrust.models.phi import PHI, ObfuscationValidation
from lettertrust.phi.variants import (
    digits_of,
    dob_pattern,
    phone_digit_variants,
)

logger = logging.getLogger("lettertrust.phi")


def _normalized(text: str) -> str:
    return re.sub(r"[\s,]+", " ", text).strip().lower()


def _digits_present(text: str, digit_variants: List[str]) -> bool:
    if not digit_variants:
        return False
    # Compare on a digits-only projection of each numeric run (separators stripped)
    runs = re.findall(r"\+?\d[\d\s().-]*\d", text)
    projected = [digits_of(run) for run in runs]
    return any(d and d in run for d in digit_variants for run in projected)


def validate_obfuscation(text: str, phi: PHI) -> ObfuscationValidation:
    leaked: List[str] = []
    text = text or ""
    normalized_text = _normalized(text)

    if phi.name and phi.name.strip():
        name = _normalized(phi.name)
        if re.search(r"(?<!\w)" + re.escape(name) + r"(?!\w)", normalized_text):
            leaked.append("name")

    dob = dob_pattern(phi.date_of_birth)
    if dob is not None and dob.search(text):
        leaked.append("date_of_birth")

    medicare_digits = digits_of(phi.medicare_number)
    if medicare_digits and _digits_present(text, [medicare_digits]):
        leaked.append("medicare_number")

    if phi.address and phi.address.strip():
        if _normalized(phi.address) in normalized_text:
            leaked.append("address")

    if phi.phone_number and _digits_present(text, phone_digit_variants(phi.phone_number)):
        leaked.append("phone_number")

    if phi.email and phi.email.strip() and phi.email.strip().lower() in text.lower():
        leaked.append("email")

    if leaked:
        logger.warning(f"PHI leak detected after obfuscation: fields={leaked}")

    return ObfuscationValidation(is_safe=not leaked, leaked_phi=leaked)
