"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ["PANOPROPERTY_SITE_URL"] = "https://panoproperty.test/"
for name in (
    "PANOPROPERTY_STATE_FILE",
    "PANOPROPERTY_THUMBNAIL_BUCKET",
    "PANOPROPERTY_PANORAMA_BUCKET",
    "PANOPROPERTY_INCLUDE_SEED",
    "PANOPROPERTY_OAUTH_PROVIDER",
):
    os.environ.pop(name, None)

from panoproperty.utils.config import AppConfig

AppConfig.load()

from panoproperty.models.filters import Filters
from panoproperty.models.session import UserSession
from panoproperty.services.local_store import LocalStore, PendingRoleStore, reset_shared_stores
from tests.utils.factories import create_property


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = MagicMock()
    client.table = MagicMock(return_value=MagicMock())
    return client


@pytest.fixture
def seller_session():
    return UserSession(user_id="seller-1", email="seller@example.com", full_name="Sam Seller")


@pytest.fixture
def buyer_session():
    return UserSession(user_id="buyer-1", email="buyer@example.com")


@pytest.fixture
def pending_roles():
    """Pending role store kept in memory only."""
    return PendingRoleStore(LocalStore())


@pytest.fixture
def empty_filters():
    return Filters()


@pytest.fixture
def example_properties():
    """Two listings: a pricey featured one and a cheap new one."""
    return [
        create_property(id="1", price=100, is_featured=True, is_new=False),
        create_property(id="2", price=50, is_featured=False, is_new=True),
    ]


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time


@pytest.fixture(autouse=True)
def reset_supabase_singleton():
    """Drop any client created by a test."""
    import panoproperty.services.supabase_client as supabase_client
    supabase_client._client = None
    yield
    supabase_client._client = None


@pytest.fixture(autouse=True)
def reset_pending_role_store():
    """Each test starts with an empty shared client-state store."""
    reset_shared_stores()
    yield
    reset_shared_stores()
