"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...dependencies import get_store_index
from ...services.stores import StoreIndex

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/index", status_code=status.HTTP_200_OK)
def health_index(index: StoreIndex = Depends(get_store_index)) -> dict:
    """Report store count, spatial index readiness and whether a durable backend is attached."""
    return {
        "stores": index.count(),
        "spatial_index_ready": index.spatial_index_ready,
        "backend_configured": index.backend is not None,
    }
