"""Auth package: identity model and session manager."""
from .models import Identity, SessionState, mask_api_key
from .session import SessionManager

__all__ = [
    "Identity",
    "SessionState",
    "SessionManager",
    "mask_api_key",
]
