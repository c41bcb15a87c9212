from .api_key import INTERNAL_API_KEY, verify_api_key
from .dependencies import verify_internal_api_key

__all__ = [
    "INTERNAL_API_KEY",
    "verify_api_key",
    "verify_internal_api_key",
]
