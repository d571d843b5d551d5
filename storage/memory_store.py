from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Set

from rental.errors import PersistenceError
from rental.models import House, RentalAgreement, Tenant
from storage.flat_file_store import keep_resolvable_agreements


class InMemoryStore:
    """Demo-mode store: same contract as FlatFileStore, nothing touches disk."""

    def __init__(
        self,
        houses: Optional[Iterable[House]] = None,
        tenants: Optional[Iterable[Tenant]] = None,
        agreements: Optional[Iterable[RentalAgreement]] = None,
    ) -> None:
        self.houses: List[House] = [h.model_copy() for h in houses or []]
        self.tenants: List[Tenant] = list(tenants or [])
        self.agreements: List[RentalAgreement] = list(agreements or [])
        # Collections named here raise PersistenceError on save.
        self.failing: Set[str] = set()
        self.save_counts: Dict[str, int] = {"houses": 0, "tenants": 0, "agreements": 0}

    # Loading ---------------------------------------------------------------
    def load_houses(self) -> List[House]:
        # Availability is rebuilt from agreements, so hand out fresh copies.
        return [h.model_copy(update={"available": True}) for h in self.houses]

    def load_tenants(self) -> List[Tenant]:
        return list(self.tenants)

    def load_agreements(
        self, house_index: Mapping[str, House], tenant_index: Mapping[str, Tenant]
    ) -> List[RentalAgreement]:
        return keep_resolvable_agreements(self.agreements, house_index, tenant_index)

    # Saving ----------------------------------------------------------------
    def save_houses(self, houses: Iterable[House]) -> None:
        self._check("houses")
        self.houses = [h.model_copy() for h in houses]

    def save_tenants(self, tenants: Iterable[Tenant]) -> None:
        self._check("tenants")
        self.tenants = list(tenants)

    def save_agreements(self, agreements: Iterable[RentalAgreement]) -> None:
        self._check("agreements")
        self.agreements = list(agreements)

    def _check(self, collection: str) -> None:
        if collection in self.failing:
            raise PersistenceError(f"Error saving {collection}: store unavailable", collection=collection)
        self.save_counts[collection] += 1
