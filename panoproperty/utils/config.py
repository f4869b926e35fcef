"""Application configuration read from environment variables."""

import os


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class AppConfig:
    """Backend and storage settings.

    Attributes are read at import time; ``load()`` re-reads them after the
    environment changes.
    """

    SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
    THUMBNAIL_BUCKET = os.environ.get("PANOPROPERTY_THUMBNAIL_BUCKET", "property-thumbnails")
    PANORAMA_BUCKET = os.environ.get("PANOPROPERTY_PANORAMA_BUCKET", "property-360")
    SITE_URL = os.environ.get("PANOPROPERTY_SITE_URL", "http://localhost:5173")
    STATE_FILE = os.environ.get("PANOPROPERTY_STATE_FILE") or None
    INCLUDE_SEED = _env_flag("PANOPROPERTY_INCLUDE_SEED", "true")
    OAUTH_PROVIDER = os.environ.get("PANOPROPERTY_OAUTH_PROVIDER", "google")

    @classmethod
    def load(cls) -> None:
        """Re-read every setting from the current environment."""
        cls.SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
        cls.SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
        cls.THUMBNAIL_BUCKET = os.environ.get("PANOPROPERTY_THUMBNAIL_BUCKET", "property-thumbnails")
        cls.PANORAMA_BUCKET = os.environ.get("PANOPROPERTY_PANORAMA_BUCKET", "property-360")
        cls.SITE_URL = os.environ.get("PANOPROPERTY_SITE_URL", "http://localhost:5173")
        cls.STATE_FILE = os.environ.get("PANOPROPERTY_STATE_FILE") or None
        cls.INCLUDE_SEED = _env_flag("PANOPROPERTY_INCLUDE_SEED", "true")
        cls.OAUTH_PROVIDER = os.environ.get("PANOPROPERTY_OAUTH_PROVIDER", "google")
