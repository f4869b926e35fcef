"""Client-side search filtering and sorting of listings."""

import math
from typing import Iterable, Optional

from panoproperty.models.filters import Filters, SortKey, NUMERIC_FILTER_FIELDS
from panoproperty.models.property import Property, PROPERTY_TYPES


def parse_number(value: str) -> Optional[float]:
    """Parse a numeric criterion.

    Returns None for an empty string (no constraint) and NaN for text that
    is not a finite number.
    """
    text = value.strip() if value else ""
    if not text:
        return None
    try:
        number = float(text.replace(",", ""))
    except ValueError:
        return math.nan
    if math.isnan(number) or math.isinf(number):
        return math.nan
    return number


def invalid_filter_fields(filters: Filters) -> list[str]:
    """Names of numeric criteria whose text is not a number."""
    invalid = []
    for field in NUMERIC_FILTER_FIELDS:
        number = parse_number(getattr(filters, field))
        if number is not None and math.isnan(number):
            invalid.append(field)
    return invalid


def has_active_filters(filters: Filters) -> bool:
    return any(value != "" for value in filters.model_dump().values())


def _matches_search(prop: Property, term: str) -> bool:
    term = term.lower()
    return any(
        term in field.lower()
        for field in (prop.title, prop.address, prop.city, prop.state)
    )


def matches(prop: Property, filters: Filters) -> bool:
    """True when the property satisfies every non-empty criterion.

    A non-numeric bound compares as NaN, and NaN never satisfies a bound,
    so such a criterion excludes every property.
    """
    if filters.search and not _matches_search(prop, filters.search):
        return False

    if filters.city and prop.city != filters.city:
        return False

    if filters.property_type and prop.property_type != filters.property_type:
        return False

    if filters.listing_type and prop.listing_type != filters.listing_type:
        return False

    min_price = parse_number(filters.min_price)
    if min_price is not None and not prop.price >= min_price:
        return False

    max_price = parse_number(filters.max_price)
    if max_price is not None and not prop.price <= max_price:
        return False

    bedrooms = parse_number(filters.bedrooms)
    if bedrooms is not None and not prop.bedrooms >= bedrooms:
        return False

    bathrooms = parse_number(filters.bathrooms)
    if bathrooms is not None and not prop.bathrooms >= bathrooms:
        return False

    return True


def sort_properties(properties: Iterable[Property], sort_key: str = SortKey.FEATURED) -> list[Property]:
    """Stable sort by one of the SortKey orderings; unknown keys sort as featured."""
    try:
        key = SortKey(sort_key)
    except ValueError:
        key = SortKey.FEATURED

    items = list(properties)
    if key == SortKey.PRICE_ASC:
        return sorted(items, key=lambda p: p.price)
    if key == SortKey.PRICE_DESC:
        return sorted(items, key=lambda p: p.price, reverse=True)
    if key == SortKey.NEWEST:
        return sorted(items, key=lambda p: p.year_built, reverse=True)
    if key == SortKey.SQFT:
        return sorted(items, key=lambda p: p.sqft, reverse=True)
    # Featured first, then new; ties keep their incoming order.
    return sorted(items, key=lambda p: (not p.is_featured, not p.is_new))


def apply_filters(
    properties: Iterable[Property],
    filters: Optional[Filters] = None,
    sort_key: str = SortKey.FEATURED,
) -> list[Property]:
    """Filter then sort; the input is never modified."""
    filters = filters or Filters()
    return sort_properties((p for p in properties if matches(p, filters)), sort_key)


def available_cities(properties: Iterable[Property]) -> list[str]:
    """Distinct cities for the city dropdown, alphabetical."""
    return sorted({p.city for p in properties if p.city})


def available_property_types() -> list[str]:
    return list(PROPERTY_TYPES)


def featured_properties(properties: Iterable[Property], limit: int = 2) -> list[Property]:
    """The highlighted strip shown above an unfiltered, featured-sorted grid."""
    return [p for p in properties if p.is_featured][:limit]
