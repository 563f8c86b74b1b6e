"""Store endpoints: listing, insertion and proximity search."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...config import settings
from ...dependencies import get_query_service, get_store_index
from ...models.domain import PageRequest
from ...schemas.stores import StoreCreateRequest, StoreListResponse, StoreSearchResponse, StoreSummaryModel
from ...services.normalizer import point_from_pair
from ...services.stores import ProximityQueryService, StoreIndex

router = APIRouter(prefix="/stores", tags=["stores"])


def _page(offset: int, limit: int | None) -> PageRequest:
    return PageRequest(offset=offset, limit=limit or settings.default_page_size)


@router.get("", response_model=StoreListResponse, status_code=status.HTTP_200_OK)
def list_stores(
    offset: int = Query(default=0, ge=0, description="Zero-based index of the first store"),
    limit: int | None = Query(default=None, ge=1, le=settings.max_page_size, description="Page size"),
    index: StoreIndex = Depends(get_store_index),
) -> StoreListResponse:
    page = _page(offset, limit)
    records, total = index.list(page)
    return StoreListResponse(
        items=[StoreSummaryModel.from_record(record) for record in records],
        offset=page.offset,
        limit=page.limit,
        total=total,
        has_next_page=(page.offset + len(records)) < total,
    )


@router.post("", response_model=StoreSummaryModel, status_code=status.HTTP_201_CREATED)
def create_store(payload: StoreCreateRequest, index: StoreIndex = Depends(get_store_index)) -> StoreSummaryModel:
    return StoreSummaryModel.from_record(index.insert(payload.to_record()))


@router.get("/search/by-location", response_model=StoreSearchResponse, status_code=status.HTTP_200_OK)
def find_by_location(
    location: str = Query(..., description="Two numbers, 'latitude,longitude' or 'longitude,latitude'"),
    distance: str = Query(default="50km", description="Search radius such as 500m, 5km or 3mi"),
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=settings.max_page_size),
    service: ProximityQueryService = Depends(get_query_service),
) -> StoreSearchResponse:
    radius = service.resolve_radius(distance)
    page = service.find_near(location, radius, _page(offset, limit))
    return StoreSearchResponse.from_page(page, radius.unit)


@router.get("/search/near", response_model=StoreSearchResponse, status_code=status.HTTP_200_OK)
def find_near_point(
    longitude: float = Query(...),
    latitude: float = Query(...),
    distance: str = Query(default="50km", description="Search radius such as 500m, 5km or 3mi"),
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=settings.max_page_size),
    service: ProximityQueryService = Depends(get_query_service),
) -> StoreSearchResponse:
    radius = service.resolve_radius(distance)
    page = service.find_near_point(point_from_pair(longitude, latitude), radius, _page(offset, limit))
    return StoreSearchResponse.from_page(page, radius.unit)


@router.get("/{store_id}", response_model=StoreSummaryModel, status_code=status.HTTP_200_OK)
def get_store(store_id: str, index: StoreIndex = Depends(get_store_index)) -> StoreSummaryModel:
    record = index.get(store_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Store '{store_id}' not found.")
    return StoreSummaryModel.from_record(record)
