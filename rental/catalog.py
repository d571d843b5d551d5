"""In-memory index of houses and tenants, persisted on every change."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from rental.errors import DuplicateIdError, HouseNotFoundError, InvalidValueError, PersistenceError
from rental.models import House, Tenant, build_record, require_non_negative
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TenantRegistration:
    tenant: Tenant
    # Available houses in the tenant's preferred location at registration time.
    suggestions: List[House] = field(default_factory=list)


def _normalize_id(kind: str, value: Any) -> str:
    record_id = str(value if value is not None else "").strip()
    if not record_id:
        raise InvalidValueError(f"{kind} ID must not be empty.")
    return record_id


class Catalog:
    """
    Houses and tenants keyed by id, iterated in insertion order.

    Every mutation runs under the lock shared with the booking engine and
    rewrites the affected collection through the record store before returning.
    """

    def __init__(
        self,
        store: Any,
        *,
        lock: Optional[threading.RLock] = None,
        houses: Iterable[House] = (),
        tenants: Iterable[Tenant] = (),
    ) -> None:
        self._store = store
        self._lock = lock or threading.RLock()
        self._houses: Dict[str, House] = {}
        self._tenants: Dict[str, Tenant] = {}
        self.reset(houses, tenants)

    def reset(self, houses: Iterable[House], tenants: Iterable[Tenant]) -> None:
        """Replace the contents with loaded records, keeping the first of any duplicate id."""
        with self._lock:
            self._houses = {}
            self._tenants = {}
            for house in houses:
                if house.id in self._houses:
                    logger.warning("house_duplicate_skipped", extra={"house_id": house.id})
                    continue
                self._houses[house.id] = house
            for tenant in tenants:
                if tenant.id in self._tenants:
                    logger.warning("tenant_duplicate_skipped", extra={"tenant_id": tenant.id})
                    continue
                self._tenants[tenant.id] = tenant

    # Lookups ---------------------------------------------------------------
    @property
    def houses(self) -> List[House]:
        return list(self._houses.values())

    @property
    def tenants(self) -> List[Tenant]:
        return list(self._tenants.values())

    @property
    def house_index(self) -> Dict[str, House]:
        return dict(self._houses)

    @property
    def tenant_index(self) -> Dict[str, Tenant]:
        return dict(self._tenants)

    def get_house(self, house_id: str) -> Optional[House]:
        return self._houses.get((house_id or "").strip())

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return self._tenants.get((tenant_id or "").strip())

    def has_house(self, house_id: str) -> bool:
        return self.get_house(house_id) is not None

    def has_tenant(self, tenant_id: str) -> bool:
        return self.get_tenant(tenant_id) is not None

    def available_houses_in(self, location: str) -> List[House]:
        return [h for h in self._houses.values() if h.available and h.matches_location(location)]

    # Houses ----------------------------------------------------------------
    def add_house(self, house_id: str, location: str, price: Any, bedrooms: Any, owner: str) -> House:
        with self._lock:
            house_id = _normalize_id("House", house_id)
            if house_id in self._houses:
                raise DuplicateIdError("House", house_id)
            price_value = require_non_negative("Price", price)
            bedroom_value = require_non_negative("Bedrooms", bedrooms)
            if bedroom_value != bedroom_value.to_integral_value():
                raise InvalidValueError("Bedrooms must be a whole number.")
            house = build_record(
                House,
                id=house_id,
                location=location,
                price=price_value,
                bedrooms=int(bedroom_value),
                owner=owner,
            )
            self._houses[house.id] = house
            logger.info(
                "house_added",
                extra={"house_id": house.id, "location": house.location, "owner": house.owner},
            )
            self._persist_houses(result=house)
            return house

    def remove_house(self, house_id: str) -> House:
        with self._lock:
            house = self._houses.pop((house_id or "").strip(), None)
            if house is None:
                raise HouseNotFoundError(house_id)
            logger.info("house_removed", extra={"house_id": house.id})
            self._persist_houses(result=house)
            return house

    def search_houses(self, location: str, max_price: Any) -> List[House]:
        limit: Decimal = require_non_negative("Max price", max_price)
        with self._lock:
            return [h for h in self.available_houses_in(location) if h.price <= limit]

    # Tenants ---------------------------------------------------------------
    def register_tenant(
        self, tenant_id: str, name: str, contact: str, preferred_location: str
    ) -> TenantRegistration:
        with self._lock:
            tenant_id = _normalize_id("Tenant", tenant_id)
            if tenant_id in self._tenants:
                raise DuplicateIdError("Tenant", tenant_id)
            tenant = build_record(
                Tenant,
                id=tenant_id,
                name=name,
                contact=contact,
                preferred_location=preferred_location,
            )
            self._tenants[tenant.id] = tenant
            registration = TenantRegistration(
                tenant=tenant,
                suggestions=self.available_houses_in(tenant.preferred_location),
            )
            logger.info(
                "tenant_registered",
                extra={
                    "tenant_id": tenant.id,
                    "tenant_name": tenant.name,
                    "contact": tenant.contact,
                    "suggestions": len(registration.suggestions),
                },
            )
            try:
                self._store.save_tenants(self.tenants)
            except PersistenceError as exc:
                exc.result = registration
                raise
            return registration

    def _persist_houses(self, *, result: Any) -> None:
        try:
            self._store.save_houses(self.houses)
        except PersistenceError as exc:
            exc.result = result
            raise
