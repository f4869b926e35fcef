"""Search filter and sort models."""

from enum import Enum
from pydantic import BaseModel


class SortKey(str, Enum):
    """Result orderings offered by the sort menu."""
    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"
    SQFT = "sqft"


class Filters(BaseModel):
    """Search criteria as typed by the user; an empty string means no constraint."""
    search: str = ""
    city: str = ""
    property_type: str = ""
    listing_type: str = ""
    min_price: str = ""
    max_price: str = ""
    bedrooms: str = ""
    bathrooms: str = ""


NUMERIC_FILTER_FIELDS = ("min_price", "max_price", "bedrooms", "bathrooms")
