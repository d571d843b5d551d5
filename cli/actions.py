"""One function per menu entry: prompt, call the rental system, print the outcome."""

from __future__ import annotations

from typing import List

from cli.prompts import DATE_HINT, Console, ask_amount, ask_count, ask_date
from rental.errors import (
    HouseNotAvailableError,
    HouseNotFoundError,
    InvalidDateRangeError,
    TenantNotFoundError,
)
from rental.models import House, RentalAgreement, Tenant
from rental.system import RentalSystem


def describe_house(house: House) -> str:
    return f"[{house.id}, {house.location}, {house.price:.2f}, {house.bedrooms}, {house.owner}]"


def describe_tenant(tenant: Tenant) -> str:
    return f"[{tenant.id}, {tenant.name}, {tenant.contact}, {tenant.preferred_location}]"


def describe_agreement(agreement: RentalAgreement, house: House, tenant: Tenant) -> List[str]:
    return [
        f"Agreement ID: {agreement.id}",
        f"House: {describe_house(house)}",
        f"Tenant: {describe_tenant(tenant)}",
        f"Start Date: {agreement.start_date.isoformat()}",
        f"End Date: {agreement.end_date.isoformat()}",
        f"Deposit: {agreement.deposit:.2f}",
    ]


def add_house(system: RentalSystem, console: Console) -> None:
    house_id = console.ask("Enter House ID: ")
    if system.catalog.has_house(house_id):
        console.say("House ID already exists.")
        return
    location = console.ask("Enter Location: ")
    price = ask_amount(console, "Enter Price: ", "Price")
    bedrooms = ask_count(console, "Enter Bedrooms: ", "Bedrooms")
    owner = console.ask("Enter Owner: ")
    system.add_house(house_id, location, price, bedrooms, owner)
    console.say("House added successfully.")


def remove_house(system: RentalSystem, console: Console) -> None:
    house_id = console.ask("Enter House ID to remove: ")
    system.remove_house(house_id)
    console.say("House removed successfully.")


def search_houses(system: RentalSystem, console: Console) -> None:
    location = console.ask("Enter Location: ")
    max_price = ask_amount(console, "Enter Max Price: ", "Max price")
    results = system.search_houses(location, max_price)
    console.say(f"Found {len(results)} house(s):")
    for house in results:
        console.say(describe_house(house))


def register_tenant(system: RentalSystem, console: Console) -> None:
    tenant_id = console.ask("Enter Tenant ID: ")
    if system.catalog.has_tenant(tenant_id):
        console.say("Tenant ID already exists.")
        return
    name = console.ask("Enter Name: ")
    contact = console.ask("Enter Contact: ")
    preferred_location = console.ask("Enter Preferred Location: ")
    registration = system.register_tenant(tenant_id, name, contact, preferred_location)
    console.say("Tenant registered successfully.")
    if registration.suggestions:
        console.say(f"Available houses in {registration.tenant.preferred_location}:")
        for house in registration.suggestions:
            console.say(describe_house(house))


def book_house(system: RentalSystem, console: Console) -> None:
    # Fail fast on the ids; the booking engine repeats every check under its lock.
    house_id = console.ask("Enter House ID: ")
    house = system.catalog.get_house(house_id)
    if house is None:
        raise HouseNotFoundError(house_id)
    if not house.available:
        raise HouseNotAvailableError(house.id)
    tenant_id = console.ask("Enter Tenant ID: ")
    tenant = system.catalog.get_tenant(tenant_id)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)
    start_date = ask_date(console, f"Enter Start Date ({DATE_HINT}): ", "Start date")
    end_date = ask_date(console, f"Enter End Date ({DATE_HINT}): ", "End date")
    if end_date < start_date:
        raise InvalidDateRangeError(start_date, end_date)
    deposit = ask_amount(console, "Enter Deposit: ", "Deposit")
    agreement = system.book_house(house.id, tenant.id, start_date, end_date, deposit)
    console.say("House booked successfully.")
    for line in describe_agreement(agreement, house, tenant):
        console.say(line)
