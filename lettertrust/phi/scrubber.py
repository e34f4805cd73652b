"""
PHI scrubbing for anything headed to logs, telemetry or error trackers.

Unlike the codec this works without knowing the patient: it strips
PHI-shaped strings and fully redacts values stored under sensitive keys.
"""
import logging
from typing import Any

from lettertrust.phi.patterns import SCRUB_ORDER, SCRUB_PATTERNS, URL_QUERY, URL_UUID_SEGMENT

REDACTED = "[REDACTED]"

# Matched as case-insensitive fragments of the key name
SENSITIVE_KEYS = [
    "patient",
    "name",
    "firstName",
    "lastName",
    "email",
    "phone",
    "phoneNumber",
    "mobile",
    "dob",
    "dateOfBirth",
    "date_of_birth",
    "birthDate",
    "medicare",
    "medicareNumber",
    "address",
    "streetAddress",
    "encryptedData",
    "phi",
    "transcript",
    "transcriptRaw",
    "content",
    "contentFinal",
    "password",
    "token",
    "secret",
    "key",
    "authorization",
    "cookie",
    "ssn",
    "socialSecurity",
]

_SENSITIVE_FRAGMENTS = [k.lower() for k in SENSITIVE_KEYS]


def scrub_phi(text: Any) -> Any:
    """Replace PHI-shaped substrings. Non-strings pass through untouched."""
    if not text or not isinstance(text, str):
        return text

    for rule_name in SCRUB_ORDER:
        pattern, replacement = SCRUB_PATTERNS[rule_name]
        text = pattern.sub(replacement, text)
    return text


def is_sensitive_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(fragment in lowered for fragment in _SENSITIVE_FRAGMENTS)


def scrub_object_phi(obj: Any, max_depth: int = 10) -> Any:
    """
    Recursively scrub dicts, lists and tuples of arbitrary shape.

    Values under sensitive keys are replaced wholesale. Anything nested deeper
    than max_depth is redacted rather than returned unscrubbed.
    """
    if isinstance(obj, str):
        return scrub_phi(obj)

    if isinstance(obj, (dict, list, tuple)) and max_depth <= 0:
        return REDACTED

    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            if is_sensitive_key(key):
                result[key] = REDACTED
            else:
                result[key] = scrub_object_phi(value, max_depth - 1)
        return result

    if isinstance(obj, (list, tuple)):
        scrubbed = [scrub_object_phi(item, max_depth - 1) for item in obj]
        return tuple(scrubbed) if isinstance(obj, tuple) else scrubbed

    return obj


def scrub_url_phi(url: Any) -> Any:
    """Drop UUID path segments and the whole query string."""
    if not url or not isinstance(url, str):
        return url
    url = URL_UUID_SEGMENT.sub("/[ID_REDACTED]", url)
    return URL_QUERY.sub("?[PARAMS_REDACTED]", url)


def truncate_phi(text: Any, max_length: int = 100) -> Any:
    if not text or not isinstance(text, str) or len(text) <= max_length:
        return text
    return text[: max_length // 2] + "...[TRUNCATED]"


class PHIScrubbingFilter(logging.Filter):
    """
    Logging filter that scrubs record messages and arguments before any
    handler formats them.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = scrub_phi(record.msg)
        if isinstance(record.args, dict):
            record.args = scrub_object_phi(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(scrub_object_phi(a) for a in record.args)
        return True
