"""SavedProperty model - user favorites relation."""

from typing import Optional
from pydantic import BaseModel, Field


class SavedProperty(BaseModel):
    """A (user, property) favorite; the row existing means saved."""
    user_id: str = Field(..., description="Auth user ID")
    property_id: str = Field(..., description="Property ID")
    created_at: Optional[str] = None
