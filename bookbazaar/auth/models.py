"""Auth models - identity of the logged-in principal and session state."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionState(str, Enum):
    """Where the session manager is in its lifecycle."""
    UNAUTHENTICATED = "unauthenticated"  # No token, no identity
    RESOLVING = "resolving"  # Token held, identity not yet confirmed
    AUTHENTICATED = "authenticated"  # Token and confirmed identity


class Identity(BaseModel):
    """Profile returned by ``GET /auth/me``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str
    username: str
    email: str
    is_admin: bool = Field(default=False, alias="isAdmin")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Some backends send numeric ids
        return str(v) if v is not None else v


def mask_api_key(api_key: Optional[str]) -> Optional[str]:
    """Display form of an API key: first 8 characters, then 24 asterisks."""
    if not api_key:
        return None
    return f"{api_key[:8]}{'*' * 24}"
