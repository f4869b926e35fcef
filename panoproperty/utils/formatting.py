"""Display helpers for listing cards and detail pages."""

from typing import Optional

from panoproperty.models.property import ListingType, Property


def _group_thousands(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def format_price(price: float, listing_type: str) -> str:
    """``$1,825,000`` for sales, ``$5,400/mo`` for rentals."""
    text = f"${_group_thousands(price)}"
    if listing_type == ListingType.RENT.value:
        return f"{text}/mo"
    return text


def price_per_sqft(prop: Property) -> int:
    return round(prop.price / prop.sqft)


def format_price_per_sqft(prop: Property) -> str:
    return f"${price_per_sqft(prop):,}/sqft"


def card_image_url(prop: Property) -> Optional[str]:
    """Thumbnail if one was uploaded, otherwise the first panorama."""
    if prop.thumbnail_url:
        return prop.thumbnail_url
    if prop.panoramas:
        return prop.panoramas[0].url
    return None
