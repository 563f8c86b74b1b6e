"""Process-wide service instances, exposed as FastAPI dependencies."""

from __future__ import annotations

import functools

from .config import settings
from .data.customers_repository import CustomerRepository
from .data.stores_repository import get_store_backend
from .models.domain import DistanceUnit
from .services.customers import NearbyLinkAugmenter
from .services.geospatial import parse_distance
from .services.stores import ProximityQueryService, StoreIndex


@functools.lru_cache(maxsize=1)
def get_store_index() -> StoreIndex:
    return StoreIndex(backend=get_store_backend())


@functools.lru_cache(maxsize=1)
def get_query_service() -> ProximityQueryService:
    return ProximityQueryService(get_store_index())


@functools.lru_cache(maxsize=1)
def get_augmenter() -> NearbyLinkAugmenter:
    radius = parse_distance(settings.nearby_radius, DistanceUnit(settings.default_distance_unit))
    return NearbyLinkAugmenter(get_query_service(), radius=radius)


@functools.lru_cache(maxsize=1)
def get_customer_repository() -> CustomerRepository:
    return CustomerRepository()


def clear_service_caches() -> None:
    """Drop cached instances so the next request builds fresh ones."""
    for provider in (get_store_index, get_query_service, get_augmenter, get_customer_repository):
        provider.cache_clear()
