"""Domain models for stores, customers and geospatial queries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A (longitude, latitude) pair in decimal degrees."""

    longitude: float
    latitude: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.longitude)
            and math.isfinite(self.latitude)
            and -180.0 <= self.longitude <= 180.0
            and -90.0 <= self.latitude <= 90.0
        )


@dataclass(frozen=True, slots=True)
class Address:
    street: str
    city: str
    postal_code: str
    location: Optional[GeoPoint] = None


@dataclass(frozen=True, slots=True)
class StoreRecord:
    """A store as held by the index. ``id`` stays empty until the index assigns one."""

    name: str
    address: Address
    id: str = ""


class DistanceUnit(str, Enum):
    METERS = "m"
    KILOMETERS = "km"
    MILES = "mi"

    @property
    def meters_per_unit(self) -> float:
        return _METERS_PER_UNIT[self]


_METERS_PER_UNIT = {
    DistanceUnit.METERS: 1.0,
    DistanceUnit.KILOMETERS: 1000.0,
    DistanceUnit.MILES: 1609.344,
}


@dataclass(frozen=True, slots=True)
class Distance:
    magnitude: float
    unit: DistanceUnit = DistanceUnit.KILOMETERS

    def to_meters(self) -> float:
        return self.magnitude * self.unit.meters_per_unit

    def __str__(self) -> str:
        magnitude = int(self.magnitude) if float(self.magnitude).is_integer() else self.magnitude
        return f"{magnitude}{self.unit.value}"


DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True, slots=True)
class PageRequest:
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True, slots=True)
class StoreMatch:
    store: StoreRecord
    distance_meters: float


@dataclass(frozen=True, slots=True)
class StorePage:
    """One page of a proximity query plus the number of matches across all pages."""

    matches: tuple[StoreMatch, ...]
    total: int
    offset: int
    limit: int

    @property
    def has_next_page(self) -> bool:
        return (self.offset + len(self.matches)) < self.total


@dataclass(frozen=True, slots=True)
class CustomerLocation:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class CustomerAddress:
    street: str
    zip_code: str
    city: str
    location: Optional[CustomerLocation] = None


@dataclass(frozen=True, slots=True)
class Customer:
    """Customer entity owned by the customer directory; read-only for link augmentation."""

    id: int
    firstname: str
    lastname: str
    address: Optional[CustomerAddress] = None


@dataclass(frozen=True, slots=True)
class Link:
    rel: str
    href: str


@dataclass(frozen=True, slots=True)
class CustomerView:
    """Customer representation plus the links attached to it, keyed by relation name."""

    customer: Customer
    links: Mapping[str, Link] = field(default_factory=lambda: MappingProxyType({}))

    def with_link(self, link: Link) -> "CustomerView":
        return CustomerView(customer=self.customer, links=MappingProxyType({**self.links, link.rel: link}))
