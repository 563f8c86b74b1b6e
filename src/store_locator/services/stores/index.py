"""In-memory geospatial index of store records."""

from __future__ import annotations

import logging
import math
import threading
import uuid
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from shapely.errors import GEOSException
from shapely.geometry import Point
from shapely.strtree import STRtree

from ...data.stores_repository import StoreBackend
from ...errors import IndexUnavailable, InvalidQuery
from ...models.domain import Distance, GeoPoint, PageRequest, StoreMatch, StorePage, StoreRecord
from ..geospatial import great_circle_meters, search_boxes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Immutable view of the index; replaced wholesale on every write."""

    records: tuple[StoreRecord, ...]
    by_id: Mapping[str, StoreRecord]
    located: tuple[StoreRecord, ...]
    tree: Optional[STRtree]

    @property
    def spatial_index_ready(self) -> bool:
        return self.tree is not None or not self.located


def _build_snapshot(records: tuple[StoreRecord, ...]) -> _Snapshot:
    located = tuple(record for record in records if record.address.location is not None)
    tree: Optional[STRtree] = None
    if located:
        try:
            tree = STRtree(
                [Point(record.address.location.longitude, record.address.location.latitude) for record in located]
            )
        except (GEOSException, ValueError, TypeError) as exc:
            logger.error(f"Failed to build spatial index over {len(located)} stores: {exc}")
    return _Snapshot(
        records=records,
        by_id=MappingProxyType({record.id: record for record in records}),
        located=located,
        tree=tree,
    )


class StoreIndex:
    """Store records plus an STRtree over their locations.

    Writers serialize on a lock and publish a fresh snapshot with a single
    assignment; readers use whichever snapshot is current when they start.
    """

    def __init__(self, backend: StoreBackend | None = None) -> None:
        self.backend = backend
        self._write_lock = threading.Lock()
        self._snapshot = _build_snapshot(())

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    def _publish(self, additions: Sequence[StoreRecord]) -> None:
        if self.backend is not None:
            self.backend.save(additions)
        self._snapshot = _build_snapshot(self._snapshot.records + tuple(additions))

    def insert(self, record: StoreRecord) -> StoreRecord:
        stored = replace(record, id=self._new_id())
        with self._write_lock:
            self._publish([stored])
        logger.debug(f"Inserted store {stored.id} ({stored.name})")
        return stored

    def bulk_insert(self, records: Iterable[StoreRecord]) -> int:
        """Insert all records with one reindex; nothing is published if the backend write fails."""
        stored = [replace(record, id=self._new_id()) for record in records]
        if not stored:
            return 0
        with self._write_lock:
            self._publish(stored)
        logger.info(f"Bulk inserted {len(stored)} stores")
        return len(stored)

    def load_from_backend(self) -> int:
        """Populate the index from durable storage without writing back."""
        if self.backend is None:
            return 0
        with self._write_lock:
            known = self._snapshot.by_id
            loaded = [record for record in self.backend.load() if record.id not in known]
            if loaded:
                self._snapshot = _build_snapshot(self._snapshot.records + tuple(loaded))
        logger.info(f"Loaded {len(loaded)} stores from backend")
        return len(loaded)

    def count(self) -> int:
        return len(self._snapshot.records)

    @property
    def spatial_index_ready(self) -> bool:
        return self._snapshot.spatial_index_ready

    def get(self, store_id: str) -> StoreRecord | None:
        return self._snapshot.by_id.get(store_id)

    def list(self, page: PageRequest) -> tuple[list[StoreRecord], int]:
        _validate_page(page)
        records = self._snapshot.records
        return list(records[page.offset : page.offset + page.limit]), len(records)

    def query_near(self, point: GeoPoint, radius: Distance, page: PageRequest) -> StorePage:
        """Stores within ``radius`` of ``point``, nearest first, ties ordered by id."""

        if not isinstance(point, GeoPoint) or not point.is_valid():
            raise InvalidQuery(f"Query point is not a valid coordinate: {point!r}")
        if not isinstance(radius, Distance) or not math.isfinite(radius.magnitude) or radius.magnitude < 0:
            raise InvalidQuery(f"Query radius must be a finite, non-negative distance: {radius!r}")
        _validate_page(page)

        snapshot = self._snapshot
        if not snapshot.located:
            return StorePage(matches=(), total=0, offset=page.offset, limit=page.limit)
        if snapshot.tree is None:
            raise IndexUnavailable("Geospatial index not available for store locations.")

        radius_meters = radius.to_meters()
        candidates: set[int] = set()
        try:
            for search_box in search_boxes(point, radius_meters):
                candidates.update(int(position) for position in snapshot.tree.query(search_box))
        except (GEOSException, ValueError, TypeError) as exc:
            raise IndexUnavailable(f"Geospatial index query failed: {exc}") from exc

        matches: list[StoreMatch] = []
        for position in candidates:
            record = snapshot.located[position]
            distance = great_circle_meters(point, record.address.location)
            if distance <= radius_meters:
                matches.append(StoreMatch(store=record, distance_meters=distance))
        matches.sort(key=lambda match: (match.distance_meters, match.store.id))

        window = tuple(matches[page.offset : page.offset + page.limit])
        return StorePage(matches=window, total=len(matches), offset=page.offset, limit=page.limit)


def _validate_page(page: PageRequest) -> None:
    if page.offset < 0:
        raise InvalidQuery(f"Page offset must be >= 0, got {page.offset}")
    if page.limit < 1:
        raise InvalidQuery(f"Page limit must be >= 1, got {page.limit}")
