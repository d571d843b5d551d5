"""Owns the store, the catalog and the booking engine for one console session."""

from __future__ import annotations

import threading
from datetime import date
from typing import Any, List, Optional

from rental.booking import BookingEngine
from rental.catalog import Catalog, TenantRegistration
from rental.errors import PersistenceError
from rental.models import House, RentalAgreement, format_agreement_id
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


class RentalSystem:
    def __init__(self, store: Any) -> None:
        self.store = store
        self._lock = threading.RLock()
        self.catalog = Catalog(store, lock=self._lock)
        self.booking = BookingEngine(self.catalog, store, lock=self._lock)

    @classmethod
    def open(cls, store: Any) -> "RentalSystem":
        """Create a system and load everything the store holds."""
        system = cls(store)
        system.load()
        return system

    def load(self) -> None:
        with self._lock:
            houses = self.store.load_houses()
            tenants = self.store.load_tenants()
            self.catalog.reset(houses, tenants)
            agreements = self.store.load_agreements(self.catalog.house_index, self.catalog.tenant_index)
            self.booking.restore(agreements)
        logger.info(
            "rental_data_loaded",
            extra={
                "houses": len(self.catalog.houses),
                "tenants": len(self.catalog.tenants),
                "agreements": len(self.booking.agreements),
                "next_agreement_id": format_agreement_id(self.booking.next_number),
            },
        )

    def save_all(self) -> None:
        """Rewrite all three collections; raise the first failure after trying each."""
        first_error: Optional[PersistenceError] = None
        with self._lock:
            for save, records in (
                (self.store.save_houses, self.catalog.houses),
                (self.store.save_tenants, self.catalog.tenants),
                (self.store.save_agreements, self.booking.agreements),
            ):
                try:
                    save(records)
                except PersistenceError as exc:
                    first_error = first_error or exc
        if first_error is not None:
            raise first_error

    # Operations --------------------------------------------------------------
    def add_house(self, house_id: str, location: str, price: Any, bedrooms: Any, owner: str) -> House:
        return self.catalog.add_house(house_id, location, price, bedrooms, owner)

    def remove_house(self, house_id: str) -> House:
        with self._lock:
            linked = self.booking.agreements_for_house(house_id)
            if linked and self.catalog.has_house(house_id):
                # Allowed, but these agreements will be dropped on the next load.
                logger.warning(
                    "house_removed_with_agreements",
                    extra={"house_id": house_id, "agreement_ids": [a.id for a in linked]},
                )
            return self.catalog.remove_house(house_id)

    def search_houses(self, location: str, max_price: Any) -> List[House]:
        return self.catalog.search_houses(location, max_price)

    def register_tenant(
        self, tenant_id: str, name: str, contact: str, preferred_location: str
    ) -> TenantRegistration:
        return self.catalog.register_tenant(tenant_id, name, contact, preferred_location)

    def book_house(
        self, house_id: str, tenant_id: str, start_date: date, end_date: date, deposit: Any
    ) -> RentalAgreement:
        return self.booking.book_house(house_id, tenant_id, start_date, end_date, deposit)
