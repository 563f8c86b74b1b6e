"""Store-facing API schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..models.domain import Address, DistanceUnit, GeoPoint, StoreMatch, StorePage, StoreRecord
from ..services.geospatial import convert_meters


class StoreSummaryModel(BaseModel):
    id: str
    name: str
    street: str
    city: str
    postalCode: str
    longitude: float | None = None
    latitude: float | None = None
    distanceFromQueryPoint: float | None = None

    @classmethod
    def from_record(cls, record: StoreRecord, distance: float | None = None) -> "StoreSummaryModel":
        location = record.address.location
        return cls(
            id=record.id,
            name=record.name,
            street=record.address.street,
            city=record.address.city,
            postalCode=record.address.postal_code,
            longitude=location.longitude if location else None,
            latitude=location.latitude if location else None,
            distanceFromQueryPoint=distance,
        )

    @classmethod
    def from_match(cls, match: StoreMatch, unit: DistanceUnit) -> "StoreSummaryModel":
        return cls.from_record(match.store, round(convert_meters(match.distance_meters, unit), 6))


class StoreSearchResponse(BaseModel):
    items: List[StoreSummaryModel]
    distanceUnit: str
    offset: int
    limit: int
    total: int
    has_next_page: bool

    @classmethod
    def from_page(cls, page: StorePage, unit: DistanceUnit) -> "StoreSearchResponse":
        return cls(
            items=[StoreSummaryModel.from_match(match, unit) for match in page.matches],
            distanceUnit=unit.value,
            offset=page.offset,
            limit=page.limit,
            total=page.total,
            has_next_page=page.has_next_page,
        )


class StoreListResponse(BaseModel):
    items: List[StoreSummaryModel]
    offset: int
    limit: int
    total: int
    has_next_page: bool


class StoreCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    street: str = ""
    city: str = ""
    postalCode: str = ""
    longitude: float = Field(..., ge=-180.0, le=180.0)
    latitude: float = Field(..., ge=-90.0, le=90.0)

    def to_record(self) -> StoreRecord:
        return StoreRecord(
            name=self.name,
            address=Address(
                street=self.street,
                city=self.city,
                postal_code=self.postalCode,
                location=GeoPoint(longitude=self.longitude, latitude=self.latitude),
            ),
        )
