"""
Comma-delimited flat file persistence for houses, tenants and agreements.

Each save rewrites the whole collection: the lines go to a sibling ``.tmp``
file which then replaces the target, so readers never see a half-written file.
Loading is forgiving. Bad lines are logged and skipped instead of aborting
startup.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from rental.config import Settings
from rental.errors import PersistenceError
from rental.models import FIELD_DELIMITER, House, RentalAgreement, Tenant
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)

HOUSE_FIELDS = ("id", "location", "price", "bedrooms", "owner")
TENANT_FIELDS = ("id", "name", "contact", "preferred_location")
AGREEMENT_FIELDS = ("id", "house_id", "tenant_id", "start_date", "end_date", "deposit")

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_house(house: House) -> str:
    return FIELD_DELIMITER.join(
        [house.id, house.location, f"{house.price:.2f}", str(house.bedrooms), house.owner]
    )


def format_tenant(tenant: Tenant) -> str:
    return FIELD_DELIMITER.join([tenant.id, tenant.name, tenant.contact, tenant.preferred_location])


def format_agreement(agreement: RentalAgreement) -> str:
    return FIELD_DELIMITER.join(
        [
            agreement.id,
            agreement.house_id,
            agreement.tenant_id,
            agreement.start_date.isoformat(),
            agreement.end_date.isoformat(),
            f"{agreement.deposit:.2f}",
        ]
    )


def keep_resolvable_agreements(
    agreements: Iterable[RentalAgreement],
    house_index: Mapping[str, Any],
    tenant_index: Mapping[str, Any],
) -> List[RentalAgreement]:
    """Drop agreements whose house or tenant no longer exists."""
    kept: List[RentalAgreement] = []
    for agreement in agreements:
        if agreement.house_id not in house_index or agreement.tenant_id not in tenant_index:
            logger.warning(
                "agreement_dropped",
                extra={
                    "agreement_id": agreement.id,
                    "house_id": agreement.house_id,
                    "tenant_id": agreement.tenant_id,
                    "reason": "dangling_reference",
                },
            )
            continue
        kept.append(agreement)
    return kept


class FlatFileStore:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.houses_path: Path = settings.houses_path
        self.tenants_path: Path = settings.tenants_path
        self.agreements_path: Path = settings.agreements_path
        self._max_retries = max(1, settings.save_retries)
        self._retry_backoff_seconds = settings.save_backoff_seconds

    # Loading ---------------------------------------------------------------
    def load_houses(self) -> List[House]:
        return self._read_records(self.houses_path, HOUSE_FIELDS, House)

    def load_tenants(self) -> List[Tenant]:
        return self._read_records(self.tenants_path, TENANT_FIELDS, Tenant)

    def load_agreements(
        self, house_index: Mapping[str, House], tenant_index: Mapping[str, Tenant]
    ) -> List[RentalAgreement]:
        agreements = self._read_records(self.agreements_path, AGREEMENT_FIELDS, RentalAgreement)
        return keep_resolvable_agreements(agreements, house_index, tenant_index)

    # Saving ----------------------------------------------------------------
    def save_houses(self, houses: Iterable[House]) -> None:
        self._write_lines(self.houses_path, [format_house(h) for h in houses], "houses")

    def save_tenants(self, tenants: Iterable[Tenant]) -> None:
        self._write_lines(self.tenants_path, [format_tenant(t) for t in tenants], "tenants")

    def save_agreements(self, agreements: Iterable[RentalAgreement]) -> None:
        self._write_lines(self.agreements_path, [format_agreement(a) for a in agreements], "agreements")

    # Internals -------------------------------------------------------------
    def _read_records(self, path: Path, fields: Sequence[str], model: Type[ModelT]) -> List[ModelT]:
        records: List[ModelT] = []
        try:
            with path.open("rb") as handle:
                for line_no, raw in enumerate(handle, start=1):
                    try:
                        line = raw.decode("utf-8")
                    except UnicodeDecodeError:
                        logger.warning(
                            "record_skipped",
                            extra={"file": path.name, "line": line_no, "reason": "encoding"},
                        )
                        continue
                    if not line.strip():
                        continue
                    parts = [part.strip() for part in line.rstrip("\r\n").split(FIELD_DELIMITER)]
                    if len(parts) != len(fields):
                        logger.warning(
                            "record_skipped",
                            extra={"file": path.name, "line": line_no, "reason": "field_count"},
                        )
                        continue
                    try:
                        records.append(model.model_validate(dict(zip(fields, parts))))
                    except ValidationError as exc:
                        logger.warning(
                            "record_skipped",
                            extra={
                                "file": path.name,
                                "line": line_no,
                                "reason": "invalid",
                                "error": str(exc)[:200],
                            },
                        )
        except FileNotFoundError:
            return []
        except OSError as exc:
            # Keep whatever was read before the failure; the tool stays usable.
            logger.error("collection_load_failed", extra={"file": path.name, "error": str(exc)})
        logger.info("collection_loaded", extra={"file": path.name, "records": len(records)})
        return records

    def _write_lines(self, path: Path, lines: List[str], collection: str) -> None:
        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            try:
                with tmp_path.open("w", encoding="utf-8", newline="\n") as handle:
                    for line in lines:
                        handle.write(line)
                        handle.write("\n")
                os.replace(tmp_path, path)
            except OSError:
                if tmp_path.exists():
                    tmp_path.unlink()
                raise

        try:
            self._with_retry(_write)
        except OSError as exc:
            logger.error(
                "collection_save_failed",
                extra={"collection": collection, "file": path.name, "error": str(exc)},
            )
            raise PersistenceError(f"Error saving {collection}: {exc}", collection=collection) from exc
        logger.info("collection_saved", extra={"collection": collection, "records": len(lines)})

    def _with_retry(self, fn: Callable[[], Any]) -> Any:
        delay = self._retry_backoff_seconds
        for attempt in range(self._max_retries):
            try:
                return fn()
            except OSError:
                if attempt >= self._max_retries - 1:
                    raise
                time.sleep(delay)
                delay *= 2
