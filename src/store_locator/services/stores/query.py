"""Query-facing contract over the normalizer and the store index."""

from __future__ import annotations

from typing import Optional, Union
from urllib.parse import urlencode

from ...config import settings
from ...models.domain import Distance, DistanceUnit, GeoPoint, PageRequest, StorePage
from ..geospatial import parse_distance
from ..normalizer import normalize
from .index import StoreIndex

SEARCH_PATH = "/stores/search/by-location"

RadiusLike = Union[Distance, str]


class ProximityQueryService:
    def __init__(self, index: StoreIndex, api_prefix: str | None = None) -> None:
        self.index = index
        self.api_prefix = (settings.api_prefix if api_prefix is None else api_prefix).rstrip("/")

    @staticmethod
    def resolve_radius(radius: RadiusLike) -> Distance:
        if isinstance(radius, Distance):
            return radius
        return parse_distance(radius, DistanceUnit(settings.default_distance_unit))

    def find_near(self, raw_location: str, radius: RadiusLike, page: PageRequest) -> StorePage:
        """Normalize ``raw_location`` and return the matching page of stores, nearest first."""
        point = normalize(raw_location)
        return self.find_near_point(point, radius, page)

    def find_near_point(self, point: GeoPoint, radius: RadiusLike, page: PageRequest) -> StorePage:
        return self.index.query_near(point, self.resolve_radius(radius), page)

    def build_nearby_link_template(
        self,
        point: GeoPoint,
        radius: RadiusLike,
        host: Optional[str] = None,
    ) -> str:
        """Reference to the by-location search for ``point``; absolute only when a host is known."""
        query = urlencode(
            {
                "location": f"{point.latitude},{point.longitude}",
                "distance": str(self.resolve_radius(radius)),
            },
            safe=",",
        )
        path = f"{self.api_prefix}{SEARCH_PATH}?{query}"
        host = (host or "").strip()
        if not host:
            return path
        # forwarded hosts may list several proxies; the first is the client-facing one
        host = host.split(",")[0].strip().rstrip("/")
        if "://" not in host:
            host = f"{settings.link_scheme}://{host}"
        return f"{host}{path}"
