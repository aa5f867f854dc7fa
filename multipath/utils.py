import secrets
from datetime import datetime, timezone


def new_id() -> str:
    # ~22 url-safe chars
    return secrets.token_urlsafe(16)


def utcnow() -> datetime:
    # aware UTC; local-day math converts it to the configured zone
    return datetime.now(timezone.utc)


def normalize_name(name: str) -> str:
    return (name or "").strip().lower()
