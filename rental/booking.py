"""
Booking engine: the only place a house goes from available to booked.

A house is booked at most once. There is no release operation, so the
transition is one way, and availability is rebuilt at startup by replaying the
stored agreements (the houses file has no availability column).
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Any, Iterable, List, Optional, Set

from rental.catalog import Catalog
from rental.errors import (
    HouseNotAvailableError,
    HouseNotFoundError,
    InvalidDateRangeError,
    PersistenceError,
    TenantNotFoundError,
)
from rental.models import (
    RentalAgreement,
    build_record,
    format_agreement_id,
    require_non_negative,
)
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


def next_agreement_number(agreements: Iterable[RentalAgreement]) -> int:
    """1 + the largest numeric suffix among the ids, or 1 when there is none."""
    numbers = [a.number for a in agreements if a.number is not None]
    return max(numbers, default=0) + 1


class BookingEngine:
    def __init__(
        self,
        catalog: Catalog,
        store: Any,
        *,
        lock: Optional[threading.RLock] = None,
        next_number: int = 1,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._lock = lock or threading.RLock()
        self._agreements: List[RentalAgreement] = []
        self._next_number = next_number

    @property
    def agreements(self) -> List[RentalAgreement]:
        return list(self._agreements)

    @property
    def next_number(self) -> int:
        return self._next_number

    def agreements_for_house(self, house_id: str) -> List[RentalAgreement]:
        house_id = (house_id or "").strip()
        return [a for a in self._agreements if a.house_id == house_id]

    def restore(self, agreements: Iterable[RentalAgreement]) -> List[RentalAgreement]:
        """
        Replay loaded agreements: mark their houses booked and reset the id counter.

        Every agreement whose house and tenant exist is kept; agreements are never
        deleted. Repeated ids or several agreements on one house (a house id reused
        after removal) are only logged, and the house simply stays booked.
        """
        loaded = list(agreements)
        with self._lock:
            kept: List[RentalAgreement] = []
            seen_ids: Set[str] = set()
            booked_houses: Set[str] = set()
            for agreement in loaded:
                house = self._catalog.get_house(agreement.house_id)
                if house is None or not self._catalog.has_tenant(agreement.tenant_id):
                    logger.warning(
                        "agreement_skipped",
                        extra={
                            "agreement_id": agreement.id,
                            "house_id": agreement.house_id,
                            "reason": "dangling_reference",
                        },
                    )
                    continue
                conflict = None
                if agreement.id in seen_ids:
                    conflict = "duplicate_id"
                elif agreement.house_id in booked_houses:
                    conflict = "house_already_booked"
                if conflict:
                    logger.warning(
                        "agreement_conflict",
                        extra={"agreement_id": agreement.id, "house_id": agreement.house_id, "reason": conflict},
                    )
                seen_ids.add(agreement.id)
                booked_houses.add(agreement.house_id)
                house.available = False
                kept.append(agreement)
            self._agreements = kept
            self._next_number = next_agreement_number(loaded)
        logger.info(
            "agreements_restored",
            extra={"agreements": len(kept), "next_agreement_id": format_agreement_id(self._next_number)},
        )
        return kept

    def book_house(
        self,
        house_id: str,
        tenant_id: str,
        start_date: date,
        end_date: date,
        deposit: Any,
    ) -> RentalAgreement:
        # Check-then-act must not interleave with another booking or catalog change.
        with self._lock:
            house = self._catalog.get_house(house_id)
            if house is None:
                raise HouseNotFoundError(house_id)
            if not house.available:
                raise HouseNotAvailableError(house.id)
            tenant = self._catalog.get_tenant(tenant_id)
            if tenant is None:
                raise TenantNotFoundError(tenant_id)
            if end_date < start_date:
                raise InvalidDateRangeError(start_date, end_date)
            deposit_value = require_non_negative("Deposit", deposit)

            agreement = build_record(
                RentalAgreement,
                id=format_agreement_id(self._next_number),
                house_id=house.id,
                tenant_id=tenant.id,
                start_date=start_date,
                end_date=end_date,
                deposit=deposit_value,
            )
            self._next_number += 1
            self._agreements.append(agreement)
            house.available = False
            logger.info(
                "house_booked",
                extra={
                    "agreement_id": agreement.id,
                    "house_id": house.id,
                    "tenant_id": tenant.id,
                    "start_date": agreement.start_date,
                    "end_date": agreement.end_date,
                    "deposit": agreement.deposit,
                },
            )
            try:
                self._store.save_agreements(self.agreements)
            except PersistenceError as exc:
                exc.result = agreement
                raise
            return agreement
