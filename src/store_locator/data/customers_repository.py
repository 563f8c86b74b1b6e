"""In-memory customer directory consumed by the customer endpoints."""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Optional

from ..models.domain import Customer


class CustomerRepository:
    """Thread-safe customer store keyed by a generated integer id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._customers: dict[int, Customer] = {}

    def add(self, customer: Customer) -> Customer:
        with self._lock:
            saved = replace(customer, id=next(self._ids))
            self._customers[saved.id] = saved
        return saved

    def get(self, customer_id: int) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def list(self, offset: int = 0, limit: Optional[int] = None) -> tuple[list[Customer], int]:
        with self._lock:
            customers = sorted(self._customers.values(), key=lambda customer: customer.id)
        end = None if limit is None else offset + limit
        return customers[offset:end], len(customers)
