"""
Shared pattern source-of-truth for PHI handling.

The codec, the leak validator and the telemetry scrubber all read from here
so a pattern fix lands everywhere at once.
"""
import re

EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

# Phone shapes per locale. Selected by LETTERTRUST_PHONE_LOCALE or an explicit locale= argument.
PHONE_PATTERNS = {
    "AU": re.compile(r"(?<![\w+])(?:\+61|61|0)[\s.-]?[2-478](?:[\s.-]?\d){8}(?!\d)"),
    "US": re.compile(r"(?<![\w+])(?:\+?1[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}(?!\d)"),
    "UK": re.compile(r"(?<![\w+])(?:\+44[\s.-]?|0)(?:\d[\s.-]?){9}\d(?!\d)"),
}

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

DOB_ISO = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
DOB_SLASH = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Gender is only a PHI token next to explicit context ("45-year-old male", "Gender: male")
GENDER_CONTEXTS = [
    r"(?P<ctx>\b\d{1,3}[\s-]*(?:year|yr)s?[\s-]*old[\s-]+)(?P<value>{gender})(?!\w)",
    r"(?P<ctx>\b(?:gender|sex)\s*:\s*)(?P<value>{gender})(?!\w)",
]

# ---------------------------------------------------------------
# Generic scrubbing for telemetry / error payloads (no known PHI)
# ---------------------------------------------------------------
SCRUB_PATTERNS = {
    "MEDICARE": (re.compile(r"\b\d{4}\s?\d{5}\s?\d\b"), "[MEDICARE_REDACTED]"),
    "PHONE_AU": (re.compile(r"(?<![\w+])(?:\+?61|0)[2-478](?:[\s.-]?\d){8}\b"), "[PHONE_REDACTED]"),
    "PHONE_INTL": (
        re.compile(r"(?<![\w+])\+\d{1,3}[\s.-]?\d{1,4}[\s.-]?\d{1,4}[\s.-]?\d{1,9}\b"),
        "[PHONE_REDACTED]",
    ),
    "EMAIL": (EMAIL, "[EMAIL_REDACTED]"),
    "DATE_NUMERIC": (re.compile(r"\b\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}\b"), "[DATE_REDACTED]"),
    "DATE_ISO": (re.compile(r"\b\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}\b"), "[DATE_REDACTED]"),
    "UUID": (
        re.compile(r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b", re.IGNORECASE),
        "[UUID_REDACTED]",
    ),
    "JSON_FIELD": (
        re.compile(
            r'"(patient|name|email|phone|dob|dateOfBirth|date_of_birth|medicare|address)":\s*"[^"]*"',
            re.IGNORECASE,
        ),
        r'"\1":"[REDACTED]"',
    ),
}

SCRUB_ORDER = [
    "MEDICARE", "PHONE_AU", "PHONE_INTL", "EMAIL",
    "DATE_NUMERIC", "DATE_ISO", "UUID", "JSON_FIELD",
]

URL_UUID_SEGMENT = re.compile(
    r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)
URL_QUERY = re.compile(r"\?.*$")
