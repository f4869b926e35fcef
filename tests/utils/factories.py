"""Test data factories using Faker."""

from types import SimpleNamespace
from typing import Optional
from faker import Faker

from panoproperty.models.property import Agent, Panorama, Property

fake = Faker()


def create_property_row(seller_id: Optional[str] = None, **overrides) -> dict:
    """A ``properties`` row as Supabase returns it."""
    row = {
        "id": fake.uuid4(),
        "seller_id": seller_id,
        "title": fake.sentence(nb_words=3).rstrip("."),
        "address": fake.street_address(),
        "city": fake.city(),
        "state": fake.state_abbr(),
        "zip": fake.zipcode(),
        "price": fake.random_int(min=100000, max=2000000),
        "listing_type": "sale",
        "property_type": "house",
        "bedrooms": fake.random_int(min=1, max=5),
        "bathrooms": 2,
        "sqft": fake.random_int(min=600, max=4000),
        "year_built": fake.random_int(min=1900, max=2024),
        "description": fake.text(max_nb_chars=120),
        "is_new": False,
        "is_featured": False,
        "features": ["Garage", "Garden"],
        "matterport_url": "",
        "thumbnail_url": None,
        "agent_name": fake.name(),
        "agent_phone": "(415) 555-0100",
        "agent_email": fake.email(),
        "agent_photo": "",
        "created_at": "2024-12-09T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def create_photo_row(property_id: str, sort_order: int, label: Optional[str] = None) -> dict:
    return {
        "id": fake.uuid4(),
        "property_id": property_id,
        "label": label or f"Room {sort_order}",
        "url": f"https://cdn.test/{property_id}/{sort_order}.jpg",
        "sort_order": sort_order,
    }


def create_profile_row(user_id: str, role: str = "buyer", **overrides) -> dict:
    row = {
        "id": user_id,
        "email": fake.email(),
        "full_name": fake.name(),
        "avatar_url": None,
        "role": role,
    }
    row.update(overrides)
    return row


def create_property(**overrides) -> Property:
    """A valid Property with one panorama."""
    values = {
        "id": fake.uuid4(),
        "seller_id": None,
        "title": fake.sentence(nb_words=3).rstrip("."),
        "address": fake.street_address(),
        "city": "San Francisco",
        "state": "CA",
        "zip": "94105",
        "price": 500000,
        "listing_type": "sale",
        "property_type": "condo",
        "bedrooms": 2,
        "bathrooms": 1,
        "sqft": 1000,
        "year_built": 2000,
        "panoramas": [Panorama(url="https://cdn.test/pano.jpg", label="Living Room")],
        "agent": Agent(name=fake.name(), email=fake.email()),
    }
    values.update(overrides)
    return Property(**values)


def create_auth_session(user_id: str, email: Optional[str] = None, full_name: Optional[str] = None):
    """Object shaped like a supabase auth ``Session``."""
    user = SimpleNamespace(
        id=user_id,
        email=email or fake.email(),
        user_metadata={"full_name": full_name} if full_name else {},
    )
    return SimpleNamespace(user=user, access_token="token")
