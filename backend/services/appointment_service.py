"""
Appointment endpoints of the booking API.
"""
import time
from datetime import datetime
from typing import List, Optional

from core.errors import api_errors
from core.http import ApiClient, unwrap
from core.models import AggregatedBucket, Appointment, AppointmentsBatchCreate, BatchConfirmResult


def as_local_iso(value: datetime) -> str:
    """
    Wall-clock timestamp without offset (YYYY-MM-DDTHH:MM:SS).
    The API reads it in the organization's timezone.
    """
    return value.strftime("%Y-%m-%dT%H:%M:%S")


def _parse_list(body) -> List[Appointment]:
    return [Appointment.model_validate(a) for a in unwrap(body) or []]


async def get_appointments_by_organization(
    api: ApiClient,
    organization_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Appointment]:
    params = {
        "startDate": start.isoformat() if start else None,
        "endDate": end.isoformat() if end else None,
        "_t": str(int(time.time() * 1000)),  # defeat intermediary caches
    }
    with api_errors("Could not load appointments for the organization"):
        body = await api.get(f"/appointments/organization/{organization_id}/dates", params=params)
    return _parse_list(body)


async def get_appointments_aggregated(
    api: ApiClient,
    organization_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    granularity: str = "day",
    employee_ids: Optional[List[str]] = None,
) -> List[AggregatedBucket]:
    params = {
        "startDate": start.isoformat() if start else None,
        "endDate": end.isoformat() if end else None,
        "granularity": granularity,
        "employeeIds": ",".join(employee_ids) if employee_ids else None,
    }
    with api_errors("Could not load aggregated buckets"):
        body = await api.get(f"/appointments/organization/{organization_id}/aggregated", params=params)
    return [AggregatedBucket.model_validate(b) for b in unwrap(body) or []]


async def get_appointment_by_id(api: ApiClient, appointment_id: str) -> Appointment:
    with api_errors("Could not load the appointment"):
        body = await api.get(f"/appointments/{appointment_id}")
    return Appointment.model_validate(unwrap(body))


async def get_appointments_by_employee(api: ApiClient, employee_id: str) -> List[Appointment]:
    with api_errors("Could not load appointments"):
        body = await api.get(f"/appointments/employee/{employee_id}")
    return _parse_list(body)


async def get_appointments_by_client(api: ApiClient, client_id: str) -> List[Appointment]:
    with api_errors("Could not load the client's appointments"):
        body = await api.get(f"/appointments/client/{client_id}")
    return _parse_list(body)


async def create_appointment(api: ApiClient, data: dict) -> Appointment:
    with api_errors("Could not create the appointment"):
        body = await api.post("/appointments", json=data)
    return Appointment.model_validate(unwrap(body))


async def create_appointments_batch(api: ApiClient, data: AppointmentsBatchCreate) -> List[Appointment]:
    payload = data.model_dump(mode="json", by_alias=True)
    payload["startDate"] = as_local_iso(data.start_date)
    with api_errors("Could not create the appointments"):
        body = await api.post("/appointments/batch", json=payload)
    return _parse_list(body)


async def update_appointment(api: ApiClient, appointment_id: str, updated_data: dict) -> Appointment:
    payload = dict(updated_data)
    for key in ("startDate", "endDate"):
        if isinstance(payload.get(key), datetime):
            payload[key] = as_local_iso(payload[key])
    with api_errors("Could not update the appointment"):
        body = await api.put(f"/appointments/{appointment_id}", json=payload)
    return Appointment.model_validate(unwrap(body))


async def delete_appointment(api: ApiClient, appointment_id: str):
    with api_errors("Could not delete the appointment"):
        await api.delete(f"/appointments/{appointment_id}")


async def batch_confirm_appointments(
    api: ApiClient,
    appointment_ids: List[str],
    organization_id: str,
) -> BatchConfirmResult:
    with api_errors("Could not confirm the appointments"):
        body = await api.put(
            "/appointments/batch-confirm",
            json={"appointmentIds": appointment_ids, "organizationId": organization_id},
        )
    return BatchConfirmResult.model_validate(unwrap(body) or {})
