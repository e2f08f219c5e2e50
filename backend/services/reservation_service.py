"""
Reservation endpoints of the booking API.
"""
from typing import List, Optional

from core.errors import api_errors
from core.http import ApiClient, unwrap
from core.models import MultipleReservationsCreate, Reservation, ReservationCreate


async def get_reservations_by_organization(api: ApiClient, organization_id: str) -> List[Reservation]:
    with api_errors("Could not load reservations"):
        body = await api.get(f"/reservations/{organization_id}")
    return [Reservation.model_validate(r) for r in unwrap(body) or []]


async def create_reservation(api: ApiClient, data: ReservationCreate) -> Reservation:
    with api_errors("Could not create the reservation"):
        body = await api.post("/reservations", json=data.model_dump(mode="json", by_alias=True))
    return Reservation.model_validate(unwrap(body))


async def create_multiple_reservations(api: ApiClient, data: MultipleReservationsCreate) -> List[Reservation]:
    """
    Book several services in one go. The API answers with
    {policy, outcome, reservations: [...]}; older versions return the bare list.
    """
    with api_errors("Could not create the reservations"):
        body = await api.post(
            "/reservations/multi",
            json=data.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    data_ = unwrap(body)
    if isinstance(data_, dict) and isinstance(data_.get("reservations"), list):
        data_ = data_["reservations"]
    return [Reservation.model_validate(r) for r in data_ or []]


async def get_reservation_by_id(api: ApiClient, reservation_id: str) -> Reservation:
    with api_errors("Could not load the reservation"):
        body = await api.get(f"/reservations/{reservation_id}")
    return Reservation.model_validate(unwrap(body))


async def update_reservation(api: ApiClient, reservation_id: str, updated_data: dict) -> Optional[Reservation]:
    with api_errors("Could not update the reservation"):
        body = await api.put(f"/reservations/{reservation_id}", json=updated_data)
    data = unwrap(body)
    return Reservation.model_validate(data) if data else None


async def update_reservation_status(
    api: ApiClient,
    reservation_id: str,
    status: str,
    skip_notification: bool = False,
) -> Optional[Reservation]:
    """
    Approve or reject a reservation. skip_notification suppresses the
    customer message (WhatsApp/email) the API sends on status changes.
    """
    return await update_reservation(
        api,
        reservation_id,
        {"status": status, "skipNotification": skip_notification},
    )


async def cancel_reservation(api: ApiClient, reservation_id: str, notify_client: bool = False):
    """Soft cancel: changes the status and cancels linked appointments."""
    with api_errors("Could not cancel the reservation"):
        await api.put(f"/reservations/{reservation_id}/cancel", json={"notifyClient": notify_client})


async def delete_reservation(api: ApiClient, reservation_id: str, delete_appointments: bool = False):
    params = {"deleteAppointments": "true"} if delete_appointments else None
    with api_errors("Could not delete the reservation"):
        await api.delete(f"/reservations/{reservation_id}", params=params)


async def preview_recurring_reservations(api: ApiClient, data: MultipleReservationsCreate) -> dict:
    with api_errors("Could not preview the recurring series"):
        body = await api.post(
            "/reservations/multi/preview",
            json=data.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return unwrap(body)
