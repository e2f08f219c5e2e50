"""
Effective price of a reservation or appointment.

customPrice > totalPrice > service price > 0

Cashbox totals, analytics and reservation rows all go through
effective_price() so the figures agree everywhere.
"""
from typing import Iterable, Optional, Union

from core.models import Appointment, Reservation, Service

Priced = Union[Appointment, Reservation]


def _service_of(item: Priced) -> Optional[Service]:
    if isinstance(item, Appointment):
        return item.service if isinstance(item.service, Service) else None
    return item.service


def service_price(item: Priced, services: Optional[Iterable[Service]] = None) -> float:
    """Catalog price of the item's service: populated document first, then lookup by id."""
    service = _service_of(item)
    if service is not None and service.price is not None:
        return service.price

    if services is not None:
        service_id = item.service_ref
        for candidate in services:
            if candidate.id == service_id:
                return candidate.price if candidate.price is not None else 0
    return 0


def effective_price(item: Priced, services: Optional[Iterable[Service]] = None) -> float:
    if item.custom_price is not None:
        return item.custom_price
    if item.total_price is not None:
        return item.total_price
    return service_price(item, services)


def additional_total(appointment: Appointment) -> float:
    return sum(extra.price or 0 for extra in appointment.additional_items)


def line_total(appointment: Appointment, services: Optional[Iterable[Service]] = None) -> float:
    """Effective price plus purchased extras (cashbox line)."""
    return effective_price(appointment, services) + additional_total(appointment)
