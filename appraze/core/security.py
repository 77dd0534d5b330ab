import re
import html
import secrets
import uuid
from typing import Any, Dict


def sanitize_input(text: str) -> str:
    """Basic input sanitization to prevent XSS."""
    if not isinstance(text, str):
        return text
    # Escape HTML characters
    sanitized = html.escape(text)
    # Remove potentially dangerous script tags or attributes (basic)
    sanitized = re.sub(r'<script.*?>.*?</script>', '', sanitized, flags=re.DOTALL | re.IGNORECASE)
    return sanitized


def sanitize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively sanitize a dictionary payload."""
    sanitized = {}
    for key, value in payload.items():
        if isinstance(value, str):
            sanitized[key] = sanitize_input(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_payload(value)
        elif isinstance(value, list):
            sanitized[key] = [sanitize_payload(v) if isinstance(v, dict) else sanitize_input(v) if isinstance(v, str) else v for v in value]
        else:
            sanitized[key] = value
    return sanitized


def generate_invite_token() -> str:
    """Single-use invitation token (random UUID4)."""
    return str(uuid.uuid4())


def generate_slug(name: str) -> str:
    """Lower-case, hyphenated slug with a short random suffix to keep it unique."""
    base = re.sub(r"\s+", "-", name.strip().lower())
    base = re.sub(r"[^a-z0-9-]", "", base) or "team"
    return f"{base}-{secrets.token_hex(3)}"
