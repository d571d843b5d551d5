"""
Rental desk domain package.

Houses, tenants and booking agreements, with the no-double-booking rule
enforced by the booking engine. Callers (the console menu now) go through
`RentalSystem`.
"""

from .booking import BookingEngine, next_agreement_number
from .catalog import Catalog, TenantRegistration
from .models import House, RentalAgreement, Tenant
from .system import RentalSystem

__all__ = [
    "BookingEngine",
    "Catalog",
    "House",
    "RentalAgreement",
    "RentalSystem",
    "Tenant",
    "TenantRegistration",
    "next_agreement_number",
]
