"""Saved-properties workflow: per-user favorites with an optimistic local cache.

The cached ID list trusts local mutations and is never refreshed in the
background, so saves made from another session only appear after the next
``load``.
"""

from typing import Callable, Iterable, Optional

from panoproperty.models.property import Property
from panoproperty.models.session import UserSession
from panoproperty.services.supabase_client import (
    list_saved_property_ids,
    insert_saved_property,
    delete_saved_property,
)
from panoproperty.utils.errors import SupabaseError
from panoproperty.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


class SavedProperties:
    """Saved property IDs of one user."""

    def __init__(self, on_auth_required: Optional[Callable[[], None]] = None):
        self.on_auth_required = on_auth_required
        self.user_id: Optional[str] = None
        self.ids: list[str] = []
        self.error: Optional[str] = None

    async def load(self, user_id: str) -> list[str]:
        """Replace the cache with the user's saved IDs from the backend."""
        ids = await list_saved_property_ids(user_id)
        self.replace(user_id, ids)
        logger.debug("Saved properties loaded", user_id=mask_user_id(user_id), count=len(ids))
        return ids

    def replace(self, user_id: str, ids: list[str]) -> None:
        self.user_id = user_id
        self.ids = list(ids)
        self.error = None

    def clear(self) -> None:
        self.user_id = None
        self.ids = []
        self.error = None

    def is_saved(self, property_id: str) -> bool:
        return property_id in self.ids

    async def toggle(self, session: Optional[UserSession], property_id: str) -> Optional[bool]:
        """Save or unsave a property.

        Returns the new saved state, or None when nobody is signed in (the
        sign-in prompt is shown instead). Backend failures leave the cache
        unchanged and are reported through ``error``.
        """
        if session is None:
            logger.info("Save requires sign-in", property_id=property_id)
            if self.on_auth_required:
                self.on_auth_required()
            return None

        self.error = None
        try:
            if self.user_id != session.user_id:
                await self.load(session.user_id)

            if self.is_saved(property_id):
                await delete_saved_property(session.user_id, property_id)
                self.ids = [pid for pid in self.ids if pid != property_id]
                saved = False
            else:
                await insert_saved_property(session.user_id, property_id)
                self.ids = [*self.ids, property_id]
                saved = True
        except SupabaseError as e:
            self.error = str(e)
            logger.error(
                "Failed to toggle saved property",
                user_id=mask_user_id(session.user_id),
                property_id=property_id,
                error=str(e),
            )
            return self.is_saved(property_id)

        logger.info(
            "Saved property toggled",
            user_id=mask_user_id(session.user_id),
            property_id=property_id,
            saved=saved,
        )
        return saved

    def saved_properties(self, catalog: Iterable[Property]) -> list[Property]:
        """Catalog entries the user saved, in catalog order."""
        saved = set(self.ids)
        return [p for p in catalog if p.id in saved]
