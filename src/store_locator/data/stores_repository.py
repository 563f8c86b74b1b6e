"""Durable storage for store records backed by a Supabase table."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import NormalizationError, StorageUnavailable
from ..models.domain import Address, StoreRecord
from ..services.normalizer import point_from_pair

logger = logging.getLogger(__name__)

# PostgREST caps a single select; larger tables are read in ranges
SELECT_PAGE_SIZE = 1000


class StoreBackend(Protocol):
    def load(self) -> Sequence[StoreRecord]: ...

    def save(self, records: Sequence[StoreRecord]) -> None: ...


def record_to_row(record: StoreRecord) -> dict[str, Any]:
    location = record.address.location
    return {
        "id": record.id,
        "name": record.name,
        "street": record.address.street,
        "city": record.address.city,
        "zip": record.address.postal_code,
        "latitude": location.latitude if location else None,
        "longitude": location.longitude if location else None,
    }


def row_to_record(row: dict[str, Any]) -> StoreRecord:
    latitude, longitude = row.get("latitude"), row.get("longitude")
    location = None
    if latitude is not None and longitude is not None:
        location = point_from_pair(float(longitude), float(latitude))
    return StoreRecord(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        address=Address(
            street=str(row.get("street") or ""),
            city=str(row.get("city") or ""),
            postal_code=str(row.get("zip") or ""),
            location=location,
        ),
    )


class SupabaseStoreBackend:
    """Mirror of the store index in a Supabase table."""

    def __init__(self, client: Any, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.supabase_stores_table

    def load(self) -> list[StoreRecord]:
        records: list[StoreRecord] = []
        start = 0
        try:
            while True:
                response = (
                    self.client.table(self.table)
                    .select("*")
                    .range(start, start + SELECT_PAGE_SIZE - 1)
                    .execute()
                )
                rows = response.data or []
                for row in rows:
                    try:
                        records.append(row_to_record(row))
                    except (KeyError, ValueError, TypeError, NormalizationError) as e:
                        logger.warning(f"Skipping invalid store row: {e}")
                if len(rows) < SELECT_PAGE_SIZE:
                    break
                start += SELECT_PAGE_SIZE
        except Exception as exc:
            raise StorageUnavailable(f"Failed to load stores from '{self.table}': {exc}") from exc
        return records

    def save(self, records: Sequence[StoreRecord]) -> None:
        if not records:
            return
        try:
            # single insert call so the batch lands in one transaction
            self.client.table(self.table).insert([record_to_row(record) for record in records]).execute()
        except Exception as exc:
            raise StorageUnavailable(f"Failed to persist {len(records)} store(s): {exc}") from exc


def get_store_backend() -> StoreBackend | None:
    """Return the configured durable backend, or None when running in memory only."""
    client = get_supabase_client()
    if client is None:
        return None
    return SupabaseStoreBackend(client)
