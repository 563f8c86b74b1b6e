"""Customer endpoints; every representation carries a stores-nearby link when located."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from ...config import settings
from ...data.customers_repository import CustomerRepository
from ...dependencies import get_augmenter, get_customer_repository
from ...models.domain import Customer, CustomerView, Link
from ...schemas.customers import CustomerCreateRequest, CustomerListResponse, CustomerModel
from ...services.customers import NearbyLinkAugmenter

router = APIRouter(prefix="/customers", tags=["customers"])


def _represent(
    customer: Customer,
    augmenter: NearbyLinkAugmenter,
    forwarded_host: str | None,
) -> CustomerModel:
    self_link = Link(rel="self", href=f"{settings.api_prefix}/customers/{customer.id}")
    view = CustomerView(customer=customer).with_link(self_link)
    return CustomerModel.from_view(augmenter.augment(view, host=forwarded_host))


@router.get("", response_model=CustomerListResponse, status_code=status.HTTP_200_OK)
def list_customers(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=settings.max_page_size),
    x_forwarded_host: str | None = Header(default=None),
    repository: CustomerRepository = Depends(get_customer_repository),
    augmenter: NearbyLinkAugmenter = Depends(get_augmenter),
) -> CustomerListResponse:
    limit = limit or settings.default_page_size
    customers, total = repository.list(offset=offset, limit=limit)
    return CustomerListResponse(
        items=[_represent(customer, augmenter, x_forwarded_host) for customer in customers],
        offset=offset,
        limit=limit,
        total=total,
        has_next_page=(offset + len(customers)) < total,
    )


@router.post("", response_model=CustomerModel, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreateRequest,
    x_forwarded_host: str | None = Header(default=None),
    repository: CustomerRepository = Depends(get_customer_repository),
    augmenter: NearbyLinkAugmenter = Depends(get_augmenter),
) -> CustomerModel:
    customer = repository.add(payload.to_customer())
    return _represent(customer, augmenter, x_forwarded_host)


@router.get("/{customer_id}", response_model=CustomerModel, status_code=status.HTTP_200_OK)
def get_customer(
    customer_id: int,
    x_forwarded_host: str | None = Header(default=None),
    repository: CustomerRepository = Depends(get_customer_repository),
    augmenter: NearbyLinkAugmenter = Depends(get_augmenter),
) -> CustomerModel:
    customer = repository.get(customer_id)
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Customer {customer_id} not found.")
    return _represent(customer, augmenter, x_forwarded_host)
