"""Property listing models and the row mapping for the properties table."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class ListingType(str, Enum):
    """Whether the price is a sale price or a monthly rent."""
    SALE = "sale"
    RENT = "rent"


class PropertyType(str, Enum):
    """Kinds of dwelling a listing can describe."""
    HOUSE = "house"
    CONDO = "condo"
    APARTMENT = "apartment"
    TOWNHOUSE = "townhouse"
    VILLA = "villa"


class Panorama(BaseModel):
    """A labeled 360° image."""
    url: str = Field(..., description="Public image URL")
    label: str = Field(..., description="Room or view name")


class Agent(BaseModel):
    """Listing agent contact card."""
    name: str = ""
    phone: str = ""
    email: str = ""
    photo: str = ""


class ListingFields(BaseModel):
    """Everything stored on a properties row except its ID."""
    model_config = {"use_enum_values": True}

    seller_id: Optional[str] = Field(None, description="Owning user ID, null for seed listings")
    title: str
    address: str
    city: str
    state: str
    zip: str = ""
    price: float = Field(..., ge=0, description="Sale price or monthly rent")
    listing_type: ListingType
    property_type: PropertyType
    bedrooms: float = Field(..., ge=0)
    bathrooms: float = Field(..., ge=0)
    sqft: int = Field(..., gt=0)
    year_built: int
    is_new: bool = False
    is_featured: bool = False
    description: str = ""
    features: list[str] = Field(default_factory=list, description="Display-ordered feature labels")
    thumbnail_url: Optional[str] = None
    matterport_url: str = ""
    agent: Agent = Field(default_factory=Agent)


class Property(ListingFields):
    """Real estate listing as the browsing views use it."""
    id: str = Field(..., description="Property ID")
    panoramas: list[Panorama] = Field(default_factory=list, description="360° photos, first is the card fallback")


PROPERTY_TYPES = [t.value for t in PropertyType]
LISTING_TYPES = [t.value for t in ListingType]


def property_from_row(row: dict[str, Any], panoramas: Optional[list[Panorama]] = None) -> Property:
    """Build a Property from a ``properties`` row and its ordered panoramas."""
    return Property(
        id=str(row["id"]),
        seller_id=row.get("seller_id"),
        title=row.get("title") or "",
        address=row.get("address") or "",
        city=row.get("city") or "",
        state=row.get("state") or "",
        zip=row.get("zip") or "",
        price=row.get("price") or 0,
        listing_type=row.get("listing_type") or ListingType.SALE,
        property_type=row.get("property_type") or PropertyType.HOUSE,
        bedrooms=row.get("bedrooms") or 0,
        bathrooms=row.get("bathrooms") or 0,
        sqft=row.get("sqft") or 1,
        year_built=row.get("year_built") or 0,
        is_new=bool(row.get("is_new")),
        is_featured=bool(row.get("is_featured")),
        description=row.get("description") or "",
        features=row.get("features") or [],
        panoramas=panoramas or [],
        thumbnail_url=row.get("thumbnail_url") or None,
        matterport_url=row.get("matterport_url") or "",
        agent=Agent(
            name=row.get("agent_name") or "",
            phone=row.get("agent_phone") or "",
            email=row.get("agent_email") or "",
            photo=row.get("agent_photo") or "",
        ),
    )


def property_to_row(prop: ListingFields) -> dict[str, Any]:
    """Flatten listing fields into ``properties`` columns.

    The row carries no ``id`` (generated by the database) and no panoramas
    (stored in ``property_photos``).
    """
    return {
        "seller_id": prop.seller_id,
        "title": prop.title,
        "address": prop.address,
        "city": prop.city,
        "state": prop.state,
        "zip": prop.zip,
        "price": prop.price,
        "listing_type": prop.listing_type,
        "property_type": prop.property_type,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "sqft": prop.sqft,
        "year_built": prop.year_built,
        "description": prop.description,
        "is_new": prop.is_new,
        "is_featured": prop.is_featured,
        "features": list(prop.features),
        "matterport_url": prop.matterport_url,
        "thumbnail_url": prop.thumbnail_url,
        "agent_name": prop.agent.name,
        "agent_phone": prop.agent.phone,
        "agent_email": prop.agent.email,
        "agent_photo": prop.agent.photo,
    }
