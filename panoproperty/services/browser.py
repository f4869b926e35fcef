"""Browse state: the loaded listings plus the active filters and sort."""

from typing import Iterable, Optional

from panoproperty.models.filters import Filters, SortKey
from panoproperty.models.property import Property
from panoproperty.models.session import UserSession
from panoproperty.services import catalog
from panoproperty.services.property_filters import (
    apply_filters,
    available_cities,
    featured_properties,
    has_active_filters,
    invalid_filter_fields,
)
from panoproperty.utils.errors import SupabaseError
from panoproperty.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


class PropertyBrowser:
    """Listing cache that form submissions and deletions update in place.

    The cache is never re-fetched after a local change; it reflects what
    this client did, not what other sessions did since the last ``load``.
    """

    def __init__(self, properties: Optional[Iterable[Property]] = None):
        self.properties: list[Property] = list(properties or [])
        self.filters = Filters()
        self.sort_key: str = SortKey.FEATURED.value
        self.error: Optional[str] = None

    async def load(self, include_seed: Optional[bool] = None) -> list[Property]:
        """Fetch the catalog; on failure keep the seed listings and report the error."""
        try:
            self.properties = await catalog.load_properties(include_seed=include_seed)
            self.error = None
        except SupabaseError as e:
            self.error = str(e)
            logger.error("Failed to load listings", error=str(e))
            if include_seed is not False:
                self.properties = catalog.load_seed_properties()
        return self.properties

    # Filters and sort

    def set_filters(self, **values: str) -> None:
        self.filters = self.filters.model_copy(update=values)

    def clear_filters(self) -> None:
        self.filters = Filters()

    def set_sort(self, sort_key: str) -> None:
        self.sort_key = SortKey(sort_key).value

    @property
    def visible(self) -> list[Property]:
        return apply_filters(self.properties, self.filters, self.sort_key)

    @property
    def result_count(self) -> int:
        return len(self.visible)

    @property
    def invalid_filters(self) -> list[str]:
        return invalid_filter_fields(self.filters)

    @property
    def featured(self) -> list[Property]:
        """Featured strip, shown only for the default sort with no filters."""
        if self.sort_key != SortKey.FEATURED.value or has_active_filters(self.filters):
            return []
        return featured_properties(self.properties)

    @property
    def cities(self) -> list[str]:
        return available_cities(self.properties)

    # Listing cache updates

    def get(self, property_id: str) -> Optional[Property]:
        return next((p for p in self.properties if p.id == property_id), None)

    def add_listing(self, prop: Property) -> None:
        """New listings go to the top of the list."""
        self.properties.insert(0, prop)

    def replace_listing(self, prop: Property) -> None:
        self.properties = [prop if p.id == prop.id else p for p in self.properties]

    def remove_listing(self, property_id: str) -> None:
        self.properties = [p for p in self.properties if p.id != property_id]

    def my_listings(self, user_id: str) -> list[Property]:
        return [p for p in self.properties if p.seller_id == user_id]

    async def delete_listing(self, session: Optional[UserSession], prop: Property) -> catalog.DeleteResult:
        result = await catalog.delete_listing(session, prop)
        if result.deleted:
            self.remove_listing(prop.id)
        else:
            self.error = result.error
        return result
