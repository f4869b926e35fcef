"""Error handling utilities."""


class PanoPropertyError(Exception):
    """Base exception for the PanoProperty client."""
    pass


class SupabaseError(PanoPropertyError):
    """Supabase table or auth operation error."""
    pass


class StorageUploadError(SupabaseError):
    """Upload to a Supabase storage bucket failed."""
    pass


class ListingValidationError(PanoPropertyError):
    """Listing form input is incomplete or malformed."""

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = fields or {}


class OwnershipError(PanoPropertyError):
    """Seller tried to act on a listing they do not own."""
    pass
