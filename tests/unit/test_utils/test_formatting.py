"""Tests for display formatting helpers."""

import pytest

from panoproperty.models.property import Panorama
from panoproperty.utils.formatting import card_image_url, format_price, format_price_per_sqft, price_per_sqft
from tests.utils.factories import create_property


@pytest.mark.unit
@pytest.mark.parametrize("price,listing_type,expected", [
    (1825000, "sale", "$1,825,000"),
    (5400, "rent", "$5,400/mo"),
    (950.5, "sale", "$950.5"),
    (0, "sale", "$0"),
])
def test_format_price(price, listing_type, expected):
    assert format_price(price, listing_type) == expected


@pytest.mark.unit
def test_price_per_sqft_rounds():
    prop = create_property(price=1825000, sqft=1460)

    assert price_per_sqft(prop) == 1250
    assert format_price_per_sqft(prop) == "$1,250/sqft"


@pytest.mark.unit
def test_card_image_prefers_thumbnail():
    prop = create_property(thumbnail_url="https://cdn.test/thumb.jpg")

    assert card_image_url(prop) == "https://cdn.test/thumb.jpg"


@pytest.mark.unit
def test_card_image_falls_back_to_first_panorama():
    prop = create_property(panoramas=[
        Panorama(url="https://cdn.test/first.jpg", label="Living Room"),
        Panorama(url="https://cdn.test/second.jpg", label="Kitchen"),
    ])

    assert card_image_url(prop) == "https://cdn.test/first.jpg"


@pytest.mark.unit
def test_card_image_without_media():
    assert card_image_url(create_property(panoramas=[])) is None
