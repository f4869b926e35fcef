"""Shareable deep links and history-state navigation.

A listing is addressable as ``?property=<id>`` and a seller page as
``?seller=<id>``. The link is read once when the app loads; navigating
afterwards pushes new history entries instead of reloading.
"""

from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit
from pydantic import BaseModel

from panoproperty.utils.config import AppConfig

PROPERTY_PARAM = "property"
SELLER_PARAM = "seller"


class DeepLink(BaseModel):
    property_id: Optional[str] = None
    seller_id: Optional[str] = None

    @property
    def page(self) -> str:
        if self.property_id:
            return "detail"
        if self.seller_id:
            return "seller"
        return "home"


def parse_deep_link(url: str) -> DeepLink:
    """Property or seller ID from a URL; a property link wins when both are present."""
    query = parse_qs(urlsplit(url).query)
    property_id = (query.get(PROPERTY_PARAM) or [None])[0] or None
    seller_id = (query.get(SELLER_PARAM) or [None])[0] or None
    if property_id:
        return DeepLink(property_id=property_id)
    return DeepLink(seller_id=seller_id)


def _with_params(url: str, set_params: dict[str, str], drop: tuple[str, ...]) -> str:
    parts = urlsplit(url)
    query = parse_qs(parts.query, keep_blank_values=True)
    for name in drop:
        query.pop(name, None)
    for name, value in set_params.items():
        query[name] = [value]
    return urlunsplit(parts._replace(query=urlencode(query, doseq=True)))


def property_link(property_id: str, base_url: Optional[str] = None) -> str:
    return _with_params(base_url or AppConfig.SITE_URL, {PROPERTY_PARAM: property_id}, (SELLER_PARAM,))


def seller_link(seller_id: str, base_url: Optional[str] = None) -> str:
    return _with_params(base_url or AppConfig.SITE_URL, {SELLER_PARAM: seller_id}, (PROPERTY_PARAM,))


def home_link(base_url: Optional[str] = None) -> str:
    return _with_params(base_url or AppConfig.SITE_URL, {}, (PROPERTY_PARAM, SELLER_PARAM))


class HistoryRouter:
    """In-app navigation that records history-state entries."""

    def __init__(self, initial_url: Optional[str] = None):
        url = initial_url or AppConfig.SITE_URL
        self.entries: list[str] = [url]
        self.initial = parse_deep_link(url)
        self.current = self.initial

    @property
    def current_url(self) -> str:
        return self.entries[-1]

    def _push(self, url: str, link: DeepLink) -> str:
        if url != self.current_url:
            self.entries.append(url)
        self.current = link
        return url

    def open_property(self, property_id: str) -> str:
        return self._push(property_link(property_id, self.current_url), DeepLink(property_id=property_id))

    def open_seller(self, seller_id: str) -> str:
        return self._push(seller_link(seller_id, self.current_url), DeepLink(seller_id=seller_id))

    def go_home(self) -> str:
        return self._push(home_link(self.current_url), DeepLink())

    def back(self) -> str:
        """Pop one history entry (never past the first)."""
        if len(self.entries) > 1:
            self.entries.pop()
        self.current = parse_deep_link(self.current_url)
        return self.current_url
