"""
PII scrubbing for agreement logs.

Agreement requests carry contact details, government ID numbers and bank
data. Free text is scanned for those shapes and each hit is swapped for a
short stable digest, so two log lines about the same tenant still correlate.
Fields that hold ID or bank numbers, legal text or the rendered PDF are
replaced with a size-only marker whatever their content.
"""

from __future__ import annotations

import hashlib
import re
from typing import Any, Dict, Mapping, Pattern, Tuple

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+'-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# Aadhaar 4-4-4, SSN 3-2-4, PAN AAAAA9999A, IFSC AAAA0XXXXXX.
GOV_ID_RE = re.compile(
    r"\b(?:\d{4}[- ]\d{4}[- ]\d{4}|\d{3}-\d{2}-\d{4}|[A-Z]{5}\d{4}[A-Z]|[A-Z]{4}0[A-Z0-9]{6})\b"
)
# At least 9 digits, optional country code and separators.
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{8,}\d")

# Single pass; at the same offset an ID wins over a phone number.
_DETECTORS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("EMAIL", EMAIL_RE),
    ("ID", GOV_ID_RE),
    ("PHONE", PHONE_RE),
)
_PII_RE = re.compile("|".join(f"(?P<{label}>{pattern.pattern})" for label, pattern in _DETECTORS))

# Compared after lowercasing and dropping underscores.
REDACTED_KEYS = frozenset(
    {
        "idproofnumber",
        "bankaccountnumber",
        "bankifsc",
        "taxid",
        "terms",
        "specialconditions",
        "pdfdocument",
        "pdfbase64",
        "pdfbytes",
    }
)

MAX_TEXT_LENGTH = 500


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]


def scrub_text(text: str) -> str:
    """Replace emails, ID numbers and phone numbers with ``[LABEL:digest]``."""
    if not text:
        return text
    return _PII_RE.sub(lambda m: f"[{m.lastgroup}:{_digest(m.group(0))}]", text)


def _redacted(value: Any) -> Dict[str, Any]:
    return {"redacted": True, "size": len(value) if hasattr(value, "__len__") else None}


def _is_redacted_key(key: Any) -> bool:
    return str(key).lower().replace("_", "") in REDACTED_KEYS


def scrub_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return _redacted(value)
    if isinstance(value, str):
        cleaned = scrub_text(value)
        return f"[TEXT:{_digest(cleaned)}]" if len(cleaned) > MAX_TEXT_LENGTH else cleaned
    if isinstance(value, Mapping):
        return sanitize_log_payload(value)
    if isinstance(value, (list, tuple)):
        return type(value)(scrub_value(item) for item in value)
    return value


def sanitize_log_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Scrub every value of a log payload, redacting sensitive keys outright."""
    if not isinstance(payload, Mapping):
        return {}
    return {
        key: _redacted(value) if value is not None and _is_redacted_key(key) else scrub_value(value)
        for key, value in payload.items()
    }
