"""Catalog loading, seller profiles, and listing deletion."""

import json
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, ValidationError

from panoproperty.models.photo import panoramas_by_property
from panoproperty.models.profile import Profile, DEFAULT_SELLER_NAME
from panoproperty.models.property import Property, property_from_row
from panoproperty.models.session import UserSession
from panoproperty.services.supabase_client import (
    list_properties,
    list_properties_by_seller,
    list_photos_for_properties,
    get_profile,
    delete_photos_for_property,
    delete_property,
)
from panoproperty.utils.config import AppConfig
from panoproperty.utils.errors import OwnershipError, SupabaseError
from panoproperty.utils.logging import get_structured_logger, log_timing, mask_user_id

logger = get_structured_logger(__name__)

SEED_PATH = Path(__file__).resolve().parent.parent / "data" / "seed_properties.json"

NOT_OWNER_DELETE_ERROR = "You can only delete your own listings."


class SellerProfile(BaseModel):
    """A seller's public page: profile (if any) and their listings."""
    seller_id: str
    profile: Optional[Profile] = None
    properties: list[Property] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.profile.display_name if self.profile else DEFAULT_SELLER_NAME

    @property
    def listing_count_label(self) -> str:
        count = len(self.properties)
        return f"{count} {'Property' if count == 1 else 'Properties'}"


class DeleteResult(BaseModel):
    deleted: bool = False
    error: Optional[str] = None


def load_seed_properties() -> list[Property]:
    """Bundled demo listings (no seller)."""
    with SEED_PATH.open(encoding="utf-8") as f:
        return [Property.model_validate(item) for item in json.load(f)]


async def _with_panoramas(rows: list[dict]) -> list[Property]:
    """Map rows to properties; rows the models reject are skipped."""
    photos = await list_photos_for_properties([str(row["id"]) for row in rows])
    grouped = panoramas_by_property(photos)

    properties = []
    for row in rows:
        property_id = str(row["id"])
        try:
            properties.append(property_from_row(row, grouped.get(property_id, [])))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed property row",
                property_id=property_id,
                error_count=e.error_count(),
                fields=sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]}),
            )
    return properties


async def load_properties(include_seed: Optional[bool] = None) -> list[Property]:
    """Every stored listing, newest first, followed by the seed listings."""
    if include_seed is None:
        include_seed = AppConfig.INCLUDE_SEED

    with log_timing("catalog_load", logger=logger):
        rows = await list_properties()
        properties = await _with_panoramas(rows)

    if include_seed:
        known = {p.id for p in properties}
        properties.extend(p for p in load_seed_properties() if p.id not in known)

    logger.info("Catalog loaded", stored=len(rows), total=len(properties))
    return properties


async def load_seller_profile(seller_id: str) -> SellerProfile:
    """Profile and listings for the seller page; a missing profile is allowed."""
    with log_timing("seller_profile_load", logger=logger, seller_id=mask_user_id(seller_id)):
        profile_row = await get_profile(seller_id)
        rows = await list_properties_by_seller(seller_id)
        properties = await _with_panoramas(rows)

    return SellerProfile(
        seller_id=seller_id,
        profile=Profile.from_row(profile_row) if profile_row else None,
        properties=properties,
    )


async def delete_listing(session: Optional[UserSession], prop: Property) -> DeleteResult:
    """Delete a listing the signed-in seller owns, photos first."""
    try:
        if session is None or prop.seller_id is None or prop.seller_id != session.user_id:
            raise OwnershipError(NOT_OWNER_DELETE_ERROR)
        await delete_photos_for_property(prop.id)
        await delete_property(prop.id, session.user_id)
    except OwnershipError as e:
        logger.warning("Delete rejected", property_id=prop.id, error=str(e))
        return DeleteResult(error=str(e))
    except SupabaseError as e:
        logger.error(
            "Failed to delete listing",
            user_id=mask_user_id(session.user_id),
            property_id=prop.id,
            error=str(e),
        )
        return DeleteResult(error=str(e))

    logger.info("Listing deleted", user_id=mask_user_id(session.user_id), property_id=prop.id)
    return DeleteResult(deleted=True)
