import logging
import threading
from datetime import date
from decimal import Decimal

import pytest

from rental.booking import next_agreement_number
from rental.errors import (
    HouseNotAvailableError,
    HouseNotFoundError,
    InvalidDateRangeError,
    InvalidValueError,
    PersistenceError,
    TenantNotFoundError,
)
from rental.models import RentalAgreement

START = date(2024, 1, 1)
END = date(2024, 12, 31)


def _agreement(agreement_id, house_id="H1", tenant_id="T1"):
    return RentalAgreement(
        id=agreement_id,
        house_id=house_id,
        tenant_id=tenant_id,
        start_date=START,
        end_date=END,
        deposit=Decimal("100"),
    )


@pytest.fixture()
def stocked(system):
    system.add_house("H1", "Downtown", 1200, 3, "Olive")
    system.add_house("H2", "Uptown", 800, 2, "Sam")
    system.add_house("H3", "Uptown", 850, 2, "Kim")
    system.register_tenant("T1", "Ann", "555-0100", "Downtown")
    system.register_tenant("T2", "Ben", "ben@example.com", "Uptown")
    return system


def test_booking_marks_house_unavailable_and_saves_agreements(stocked, memory_store):
    agreement = stocked.book_house("H1", "T1", START, END, "1200")

    assert agreement.id == "A1"
    assert (agreement.house_id, agreement.tenant_id) == ("H1", "T1")
    assert agreement.deposit == Decimal("1200.00")
    assert stocked.catalog.get_house("H1").available is False
    assert memory_store.agreements == [agreement]
    # Availability is rebuilt from agreements, so the houses file is not rewritten.
    assert memory_store.save_counts["houses"] == 3


def test_second_booking_of_the_same_house_fails(stocked):
    stocked.book_house("H1", "T1", START, END, 100)

    with pytest.raises(HouseNotAvailableError):
        stocked.book_house("H1", "T2", START, END, 100)

    assert len(stocked.booking.agreements) == 1


def test_agreement_ids_increase_across_houses(stocked):
    ids = [stocked.book_house(h, "T1", START, END, 0).id for h in ("H2", "H1", "H3")]

    assert ids == ["A1", "A2", "A3"]
    assert stocked.booking.next_number == 4


def test_unknown_house(stocked, memory_store):
    with pytest.raises(HouseNotFoundError):
        stocked.book_house("H404", "T1", START, END, 100)

    assert stocked.booking.agreements == []
    assert memory_store.agreements == []
    assert stocked.booking.next_number == 1


def test_unknown_tenant(stocked):
    with pytest.raises(TenantNotFoundError):
        stocked.book_house("H1", "T404", START, END, 100)
    assert stocked.catalog.get_house("H1").available


def test_end_before_start_changes_nothing(stocked, memory_store):
    with pytest.raises(InvalidDateRangeError):
        stocked.book_house("H1", "T1", date(2024, 5, 1), date(2024, 4, 30), 100)

    assert stocked.catalog.get_house("H1").available
    assert stocked.booking.agreements == []
    assert memory_store.save_counts["agreements"] == 0


def test_single_day_lease_is_allowed(stocked):
    agreement = stocked.book_house("H1", "T1", START, START, 100)
    assert agreement.start_date == agreement.end_date


def test_negative_deposit_is_rejected(stocked):
    with pytest.raises(InvalidValueError):
        stocked.book_house("H1", "T1", START, END, "-0.01")

    assert stocked.catalog.get_house("H1").available
    assert stocked.booking.next_number == 1


def test_preconditions_are_checked_in_order(stocked):
    stocked.book_house("H1", "T1", START, END, 100)

    with pytest.raises(HouseNotFoundError):
        stocked.book_house("H404", "T404", END, START, -1)
    with pytest.raises(HouseNotAvailableError):
        stocked.book_house("H1", "T404", END, START, -1)
    with pytest.raises(TenantNotFoundError):
        stocked.book_house("H2", "T404", END, START, -1)
    with pytest.raises(InvalidDateRangeError):
        stocked.book_house("H2", "T1", END, START, -1)


def test_failed_save_keeps_the_booking(stocked, memory_store):
    memory_store.failing.add("agreements")

    with pytest.raises(PersistenceError) as excinfo:
        stocked.book_house("H1", "T1", START, END, 100)

    assert excinfo.value.result.id == "A1"
    assert not stocked.catalog.get_house("H1").available

    memory_store.failing.clear()
    assert stocked.book_house("H2", "T1", START, END, 100).id == "A2"
    assert [a.id for a in memory_store.agreements] == ["A1", "A2"]


def test_concurrent_bookings_of_one_house_have_a_single_winner(stocked):
    barrier = threading.Barrier(8)
    outcomes = []

    def attempt():
        barrier.wait()
        try:
            outcomes.append(stocked.book_house("H1", "T1", START, END, 100).id)
        except HouseNotAvailableError:
            outcomes.append("rejected")

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["A1"] + ["rejected"] * 7
    assert len(stocked.booking.agreements) == 1


def test_next_agreement_number():
    assert next_agreement_number([]) == 1
    assert next_agreement_number([_agreement("A3"), _agreement("A10"), _agreement("LEGACY")]) == 11


def test_restore_keeps_every_resolvable_agreement(stocked, caplog):
    caplog.set_level(logging.WARNING)
    kept = stocked.booking.restore(
        [
            _agreement("A1", "H1"),
            _agreement("A2", "H1"),
            _agreement("A1", "H2"),
            _agreement("A7", "H2", "T2"),
            _agreement("A8", "H404"),
        ]
    )

    assert [a.id for a in kept] == ["A1", "A2", "A1", "A7"]
    conflicts = [r.reason for r in caplog.records if r.getMessage() == "agreement_conflict"]
    assert conflicts == ["house_already_booked", "duplicate_id", "house_already_booked"]
    skipped = [r.agreement_id for r in caplog.records if r.getMessage() == "agreement_skipped"]
    assert skipped == ["A8"]
    assert not stocked.catalog.get_house("H1").available
    assert not stocked.catalog.get_house("H2").available
    assert stocked.catalog.get_house("H3").available
    assert stocked.booking.next_number == 9
