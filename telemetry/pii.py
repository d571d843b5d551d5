from __future__ import annotations

import hashlib
import re
from typing import Any, Dict

# Contact details typed in by the operator usually look like one of these.
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{8,}\d")

# Log keys that carry personal data of tenants or owners.
SENSITIVE_FIELDS = {
    "contact",
    "tenant_name",
    "owner",
}


def hash_token(text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"[HASH:{digest}]"


def scrub_text(text: str) -> str:
    """Hash e-mail addresses and phone numbers found in free text."""
    if not text:
        return text
    scrubbed = EMAIL_RE.sub(lambda m: f"[EMAIL_{hash_token(m.group(0))}]", text)
    return PHONE_RE.sub(lambda m: f"[PHONE_{hash_token(m.group(0))}]", scrubbed)


def scrub_value(value: Any) -> Any:
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, dict):
        return sanitize_log_payload(value)
    if isinstance(value, (list, tuple)):
        return [scrub_value(item) for item in value]
    return value


def sanitize_log_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Hash personal fields and scrub the rest of a log payload."""
    if not isinstance(payload, dict):
        return {}

    cleaned: Dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            cleaned[key] = value
        elif str(key).lower() in SENSITIVE_FIELDS:
            cleaned[key] = hash_token(str(value))
        else:
            cleaned[key] = scrub_value(value)
    return cleaned
