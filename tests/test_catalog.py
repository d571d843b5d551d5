from datetime import date
from decimal import Decimal

import pytest

from rental.errors import DuplicateIdError, HouseNotFoundError, InvalidValueError, PersistenceError


def test_added_houses_are_all_available(system):
    for i in range(1, 4):
        system.add_house(f"H{i}", "Downtown", 900 + i, 2, "Olive")

    houses = system.catalog.houses
    assert [h.id for h in houses] == ["H1", "H2", "H3"]
    assert all(h.available for h in houses)


def test_add_house_rewrites_the_whole_collection(system, memory_store):
    system.add_house("H1", "Downtown", 1000, 2, "Olive")
    system.add_house("H2", "Uptown", 800, 1, "Sam")

    assert [h.id for h in memory_store.houses] == ["H1", "H2"]
    assert memory_store.save_counts["houses"] == 2


def test_duplicate_house_id_leaves_catalog_untouched(system, memory_store):
    system.add_house("H1", "Downtown", 1000, 2, "Olive")

    with pytest.raises(DuplicateIdError):
        system.add_house(" H1 ", "Uptown", 500, 1, "Sam")

    assert system.catalog.get_house("H1").location == "Downtown"
    assert len(system.catalog.houses) == 1
    assert memory_store.save_counts["houses"] == 1


@pytest.mark.parametrize("price,bedrooms", [(-1, 2), ("100", -1), ("1e400000", 1)])
def test_bad_numbers_are_rejected_before_any_change(system, memory_store, price, bedrooms):
    with pytest.raises(InvalidValueError):
        system.add_house("H1", "Downtown", price, bedrooms, "Olive")

    assert system.catalog.houses == []
    assert memory_store.save_counts["houses"] == 0


def test_text_fields_may_not_hold_the_delimiter(system):
    with pytest.raises(InvalidValueError):
        system.add_house("H1", "Down,town", 100, 1, "Olive")
    with pytest.raises(InvalidValueError):
        system.add_house("   ", "Downtown", 100, 1, "Olive")
    assert system.catalog.houses == []


def test_price_is_kept_in_cents(system):
    house = system.add_house("H1", "Downtown", "1200.555", 3, "Olive")
    assert house.price == Decimal("1200.56")


def test_search_matches_available_houses_by_location_and_price(system):
    system.add_house("H3", "downtown", 950, 2, "Ada")
    system.add_house("H1", "Uptown", 500, 1, "Bo")
    system.add_house("H2", "DOWNTOWN", 1000, 3, "Cy")
    system.add_house("H4", "Downtown", "1000.01", 3, "Di")
    system.add_house("H5", "Downtown", 700, 1, "Ed")
    system.register_tenant("T1", "Ann", "555-0100", "Downtown")
    system.book_house("H5", "T1", date(2024, 1, 1), date(2024, 6, 30), 500)

    result = system.search_houses("Downtown", 1000)

    assert [h.id for h in result] == ["H3", "H2"]


def test_search_rejects_negative_max_price(system):
    with pytest.raises(InvalidValueError):
        system.search_houses("Downtown", -1)


def test_remove_house_persists_remaining_houses(system, memory_store):
    system.add_house("H1", "Downtown", 1000, 2, "Olive")
    system.add_house("H2", "Uptown", 800, 1, "Sam")

    removed = system.remove_house("H1")

    assert removed.id == "H1"
    assert not system.catalog.has_house("H1")
    assert [h.id for h in memory_store.houses] == ["H2"]


def test_remove_missing_house(system, memory_store):
    with pytest.raises(HouseNotFoundError):
        system.remove_house("H404")
    assert memory_store.save_counts["houses"] == 0


def test_register_tenant_suggests_available_houses_in_preferred_location(system, memory_store):
    system.add_house("H1", "Downtown", 1000, 2, "Olive")
    system.add_house("H2", "Uptown", 800, 1, "Sam")
    system.add_house("H3", "downtown", 900, 1, "Kim")
    system.register_tenant("T0", "Zoe", "zoe@example.com", "Uptown")
    system.book_house("H3", "T0", date(2024, 1, 1), date(2024, 2, 1), 0)

    registration = system.register_tenant("T1", "Ann", "555-0100", "DOWNTOWN")

    assert registration.tenant.id == "T1"
    assert [h.id for h in registration.suggestions] == ["H1"]
    assert [t.id for t in memory_store.tenants] == ["T0", "T1"]


def test_duplicate_tenant_id_leaves_catalog_untouched(system, memory_store):
    system.register_tenant("T1", "Ann", "555-0100", "Downtown")

    with pytest.raises(DuplicateIdError):
        system.register_tenant("T1", "Ben", "555-0199", "Uptown")

    assert system.catalog.get_tenant("T1").name == "Ann"
    assert memory_store.save_counts["tenants"] == 1


def test_failed_save_keeps_the_new_house_in_memory(system, memory_store):
    memory_store.failing.add("houses")

    with pytest.raises(PersistenceError) as excinfo:
        system.add_house("H1", "Downtown", 1000, 2, "Olive")

    assert excinfo.value.result.id == "H1"
    assert system.catalog.has_house("H1")
    assert memory_store.houses == []
