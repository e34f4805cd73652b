"""
Surface-form builders for known PHI values.

Each helper turns one canonical value into a compiled regex that matches the
ways that value tends to be written in letters and dictations.
"""
import re
from typing import List, Optional, Pattern

from lettertrust.phi.patterns import DOB_ISO, DOB_SLASH, MONTH_ABBREVIATIONS, MONTH_NAMES


def phrase_pattern(value: Optional[str]) -> Optional[Pattern]:
    """Whole-phrase, case-insensitive, tolerant of runs of whitespace and commas."""
    if not value or not value.strip():
        return None
    parts = [re.escape(p) for p in re.split(r"[\s,]+", value.strip()) if p]
    if not parts:
        return None
    return re.compile(r"(?<!\w)" + r"[\s,]+".join(parts) + r"(?!\w)", re.IGNORECASE)


def digits_of(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def digit_sequence_pattern(digit_variants: List[str], allow_plus: bool = False) -> Optional[Pattern]:
    """
    Match any of the digit sequences with optional separators between digits.
    """
    alternatives = []
    for digits in sorted(set(d for d in digit_variants if d), key=len, reverse=True):
        alternatives.append(r"[\s().-]{0,2}".join(digits))
    if not alternatives:
        return None
    prefix = r"\+?" if allow_plus else ""
    return re.compile(r"(?<![\d+])" + prefix + "(?:" + "|".join(alternatives) + r")(?!\d)")


def generate_dob_variants(dob: str) -> List[str]:
    variants: List[str] = [dob] if dob else []

    iso = DOB_ISO.match(dob or "")
    slash = DOB_SLASH.match(dob or "")

    if iso:
        year, month, day = iso.groups()
    elif slash:
        day, month, year = slash.groups()
    else:
        return variants

    d, m = int(day), int(month)
    if not (1 <= m <= 12 and 1 <= d <= 31):
        return variants

    dd, mm = f"{d:02d}", f"{m:02d}"
    variants.extend([
        f"{year}-{mm}-{dd}",
        f"{dd}/{mm}/{year}",
        f"{mm}/{dd}/{year}",
        f"{d}/{m}/{year}",
        f"{m}/{d}/{year}",
        f"{dd}-{mm}-{year}",
        f"{d} {MONTH_ABBREVIATIONS[m - 1]} {year}",
        f"{d} {MONTH_NAMES[m - 1]} {year}",
    ])

    seen = set()
    unique = []
    for v in variants:
        if v not in seen:
            seen.add(v)
            unique.append(v)
    return unique


def dob_pattern(dob: Optional[str]) -> Optional[Pattern]:
    variants = generate_dob_variants(dob or "")
    if not variants:
        return None
    alternatives = "|".join(re.escape(v) for v in sorted(variants, key=len, reverse=True))
    return re.compile(r"(?<![\w/-])(?:" + alternatives + r")(?![\w/-])", re.IGNORECASE)


def medicare_pattern(medicare_number: Optional[str]) -> Optional[Pattern]:
    digits = digits_of(medicare_number)
    if not digits:
        return None
    return digit_sequence_pattern([digits])


def phone_digit_variants(phone: Optional[str]) -> List[str]:
    digits = digits_of(phone)
    if not digits:
        return []
    variants = [digits]
    # Trunk prefix <-> country code (AU / UK style numbers)
    if digits.startswith("0") and len(digits) >= 9:
        variants.append("61" + digits[1:])
        variants.append("44" + digits[1:])
    if digits.startswith("61") and len(digits) == 11:
        variants.append("0" + digits[2:])
    if digits.startswith("44") and len(digits) >= 11:
        variants.append("0" + digits[2:])
    return variants


def phone_pattern(phone: Optional[str]) -> Optional[Pattern]:
    return digit_sequence_pattern(phone_digit_variants(phone), allow_plus=True)
