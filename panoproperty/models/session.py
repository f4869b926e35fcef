"""Signed-in user identity mirrored from the auth session."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class UserSession(BaseModel):
    """Identity of the current auth session."""
    user_id: str = Field(..., description="Auth user ID")
    email: Optional[str] = None
    full_name: Optional[str] = None

    @classmethod
    def from_auth_session(cls, session: Any) -> Optional["UserSession"]:
        """Convert a supabase ``Session`` (or None) into a UserSession."""
        user = getattr(session, "user", None) if session is not None else None
        if user is None:
            return None
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(
            user_id=str(user.id),
            email=getattr(user, "email", None),
            full_name=metadata.get("full_name"),
        )
