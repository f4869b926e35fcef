"""Profile model - per-user row in the profiles table."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """What a signed-in user may do."""
    BUYER = "buyer"
    SELLER = "seller"


DEFAULT_ROLE = Role.BUYER
DEFAULT_SELLER_NAME = "Property Seller"


class Profile(BaseModel):
    """User profile keyed by auth user ID."""
    model_config = {"use_enum_values": True}

    id: str = Field(..., description="Auth user ID")
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role = Field(default=DEFAULT_ROLE, description="buyer or seller")
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        """Build a profile from a ``profiles`` row, tolerating unknown roles."""
        role = row.get("role")
        if role not in (Role.BUYER.value, Role.SELLER.value):
            role = DEFAULT_ROLE
        return cls(
            id=str(row["id"]),
            email=row.get("email"),
            full_name=row.get("full_name"),
            avatar_url=row.get("avatar_url"),
            role=role,
            created_at=row.get("created_at"),
        )

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(exclude={"created_at"}, exclude_none=True)

    @property
    def display_name(self) -> str:
        return self.full_name or DEFAULT_SELLER_NAME
