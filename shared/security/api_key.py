"""
Internal service key used by callers of the payment API (checkout, back office).

A missing INTERNAL_API_KEY falls back to an insecure default with a loud
warning, so local runs and tests still start.
"""
import os
import secrets
import warnings

_INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "")

if not _INTERNAL_API_KEY:
    warnings.warn(
        "INTERNAL_API_KEY is not set. Payment endpoints accept the insecure "
        "default key. Set this env var in production!",
        stacklevel=2,
    )
    _INTERNAL_API_KEY = "insecure-default-change-me"

INTERNAL_API_KEY: str = _INTERNAL_API_KEY


def verify_api_key(provided_key: str | None) -> bool:
    """Constant-time comparison against the configured internal key."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), INTERNAL_API_KEY)
