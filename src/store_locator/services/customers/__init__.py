"""Customer service helpers."""

from .augmenter import STORES_NEARBY_REL, NearbyLinkAugmenter, NearbyLinkBuilder

__all__ = [
    "NearbyLinkAugmenter",
    "NearbyLinkBuilder",
    "STORES_NEARBY_REL",
]
