"""Supabase client wrapper with async context manager support."""

from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from panoproperty.models.saved_property import SavedProperty
from panoproperty.utils.config import AppConfig
from panoproperty.utils.errors import SupabaseError, StorageUploadError
import logging

logger = logging.getLogger(__name__)

PROPERTIES_TABLE = "properties"
PHOTOS_TABLE = "property_photos"
PROFILES_TABLE = "profiles"
SAVED_TABLE = "saved_properties"

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = AppConfig.SUPABASE_URL
        key = AppConfig.SUPABASE_ANON_KEY

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")

        # The anon key acts as the signed-in user, so the session must persist
        # and refresh for row level security to see the same identity.
        options = ClientOptions(
            auto_refresh_token=True,
            persist_session=True,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


async def close_supabase_client() -> None:
    """Drop the client singleton."""
    global _client
    if _client:
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


def _error_message(error: Exception) -> str:
    """Backend message without wrapper noise (postgrest APIError carries ``message``)."""
    message = getattr(error, "message", None)
    return str(message) if message else str(error)


# Properties table operations
async def list_properties() -> list[dict]:
    """All property rows, newest first."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROPERTIES_TABLE).select("*").order("created_at", desc=True).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def list_properties_by_seller(seller_id: str) -> list[dict]:
    """Property rows owned by a seller, newest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PROPERTIES_TABLE)
                .select("*")
                .eq("seller_id", seller_id)
                .order("created_at", desc=True)
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def insert_property(row: dict) -> dict:
    """Insert a property row and return it with its generated ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROPERTIES_TABLE).insert(row).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))
        if result.data and len(result.data) > 0:
            return result.data[0]
        raise SupabaseError("Failed to save property")


async def update_property(property_id: str, seller_id: str, row: dict) -> dict:
    """Update a property row owned by ``seller_id``."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PROPERTIES_TABLE)
                .update(row)
                .eq("id", property_id)
                .eq("seller_id", seller_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseError(_error_message(e))
        if result.data and len(result.data) > 0:
            return result.data[0]
        raise SupabaseError(f"Failed to save property: {property_id}")


async def delete_property(property_id: str, seller_id: str) -> None:
    """Delete a property row owned by ``seller_id``."""
    async with SupabaseClient() as client:
        try:
            client.table(PROPERTIES_TABLE).delete().eq("id", property_id).eq("seller_id", seller_id).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))


# Property photos table operations
async def list_photos_for_properties(property_ids: list[str]) -> list[dict]:
    """Photo rows for any of the given properties."""
    if not property_ids:
        return []
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(PHOTOS_TABLE)
                .select("*")
                .in_("property_id", property_ids)
                .order("sort_order")
                .execute()
            )
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def delete_photos_for_property(property_id: str) -> None:
    """Remove every photo row of a property."""
    async with SupabaseClient() as client:
        try:
            client.table(PHOTOS_TABLE).delete().eq("property_id", property_id).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def insert_photos(rows: list[dict]) -> list[dict]:
    """Insert photo rows in one request."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PHOTOS_TABLE).insert(rows).execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(_error_message(e))


# Profiles table operations
async def get_profile(user_id: str) -> Optional[dict]:
    """Get a profile row by user ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROFILES_TABLE).select("*").eq("id", user_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def create_profile(row: dict) -> dict:
    """Create a profile row."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROFILES_TABLE).insert(row).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))
        if result.data and len(result.data) > 0:
            return result.data[0]
        raise SupabaseError("Failed to create profile: no data returned")


async def update_profile_role(user_id: str, role: str) -> None:
    """Persist a role change."""
    async with SupabaseClient() as client:
        try:
            client.table(PROFILES_TABLE).update({"role": role}).eq("id", user_id).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))


# Saved properties table operations
async def list_saved_property_ids(user_id: str) -> list[str]:
    """IDs of the properties a user saved."""
    async with SupabaseClient() as client:
        try:
            result = client.table(SAVED_TABLE).select("property_id").eq("user_id", user_id).execute()
            return [str(row["property_id"]) for row in (result.data or [])]
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def insert_saved_property(user_id: str, property_id: str) -> None:
    row = SavedProperty(user_id=user_id, property_id=property_id).model_dump(exclude_none=True)
    async with SupabaseClient() as client:
        try:
            client.table(SAVED_TABLE).insert(row).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))


async def delete_saved_property(user_id: str, property_id: str) -> None:
    async with SupabaseClient() as client:
        try:
            client.table(SAVED_TABLE).delete().eq("user_id", user_id).eq("property_id", property_id).execute()
        except Exception as e:
            raise SupabaseError(_error_message(e))


# Storage operations
async def upload_public_file(bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> str:
    """Upload (overwriting) a file and return its public URL."""
    file_options: dict[str, Any] = {"upsert": "true"}
    if content_type:
        file_options["content-type"] = content_type

    async with SupabaseClient() as client:
        try:
            client.storage.from_(bucket).upload(path, content, file_options)
        except Exception as e:
            raise StorageUploadError(_error_message(e))
        return client.storage.from_(bucket).get_public_url(path)
