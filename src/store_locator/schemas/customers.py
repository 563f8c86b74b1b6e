"""Customer-facing API schemas."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Customer, CustomerAddress, CustomerLocation, CustomerView


class LocationModel(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class AddressModel(BaseModel):
    street: str = ""
    city: str = ""
    zipCode: str = ""
    location: LocationModel | None = None


class LinkModel(BaseModel):
    href: str


class CustomerCreateRequest(BaseModel):
    firstname: str
    lastname: str
    address: AddressModel | None = None

    def to_customer(self) -> Customer:
        address = None
        if self.address is not None:
            location = None
            if self.address.location is not None:
                location = CustomerLocation(
                    latitude=self.address.location.latitude,
                    longitude=self.address.location.longitude,
                )
            address = CustomerAddress(
                street=self.address.street,
                zip_code=self.address.zipCode,
                city=self.address.city,
                location=location,
            )
        return Customer(id=0, firstname=self.firstname, lastname=self.lastname, address=address)


class CustomerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    firstname: str
    lastname: str
    address: AddressModel | None = None
    links: Dict[str, LinkModel] = Field(default_factory=dict, alias="_links")

    @classmethod
    def from_view(cls, view: CustomerView) -> "CustomerModel":
        customer = view.customer
        address = None
        if customer.address is not None:
            location = customer.address.location
            address = AddressModel(
                street=customer.address.street,
                city=customer.address.city,
                zipCode=customer.address.zip_code,
                location=LocationModel(latitude=location.latitude, longitude=location.longitude) if location else None,
            )
        return cls(
            id=customer.id,
            firstname=customer.firstname,
            lastname=customer.lastname,
            address=address,
            links={rel: LinkModel(href=link.href) for rel, link in view.links.items()},
        )


class CustomerListResponse(BaseModel):
    items: List[CustomerModel]
    offset: int
    limit: int
    total: int
    has_next_page: bool
