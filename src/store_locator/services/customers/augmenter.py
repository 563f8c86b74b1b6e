"""Attach a "stores nearby" link to customer representations."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from ...errors import NormalizationError
from ...models.domain import CustomerView, Distance, DistanceUnit, GeoPoint, Link
from ..normalizer import point_from_pair

logger = logging.getLogger(__name__)

STORES_NEARBY_REL = "stores-nearby"
DEFAULT_NEARBY_RADIUS = Distance(50, DistanceUnit.KILOMETERS)


class NearbyLinkBuilder(Protocol):
    def build_nearby_link_template(
        self, point: GeoPoint, radius: Distance, host: Optional[str] = None
    ) -> str: ...


class NearbyLinkAugmenter:
    def __init__(self, link_builder: NearbyLinkBuilder, radius: Distance = DEFAULT_NEARBY_RADIUS) -> None:
        self.link_builder = link_builder
        self.radius = radius

    def augment(self, view: CustomerView, host: Optional[str] = None) -> CustomerView:
        """Return ``view`` with a stores-nearby link when the customer has a located address."""
        address = view.customer.address
        if address is None or address.location is None:
            return view

        location = address.location
        try:
            point = point_from_pair(location.longitude, location.latitude)
        except NormalizationError as exc:
            logger.warning(f"Customer {view.customer.id} has an unusable location: {exc.message}")
            return view

        href = self.link_builder.build_nearby_link_template(point, self.radius, host)
        return view.with_link(Link(rel=STORES_NEARBY_REL, href=href))
