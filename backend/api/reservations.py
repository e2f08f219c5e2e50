"""
Reservations API - the approval table of the admin dashboard.

Handles:
- Table rows (filters, one row per booking group)
- Single approve/reject (needs an assigned employee to approve)
- Group approve/reject (one customer notification per booking)
- Employee assignment, cancellation, deletion
- Public multi-service booking
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from core.auth import get_public_client, require_organization, require_session
from core.cache import invalidate_organization
from core.errors import EmployeeRequiredError
from core.http import ApiClient
from core.models import (
    EmployeeAssignment, MultipleReservationsCreate, ReservationFilters, StatusUpdate,
)
from core.models.reservation import APPROVED, REJECTED
from core.org_context import get_context
from services.catalog_service import get_employees_by_organization, get_services_by_organization
from services.reservation_groups import (
    bulk_update_group,
    filter_reservations,
    group_members,
    policy_help_text,
    update_status,
    visible_rows,
)
from services.reservation_service import (
    cancel_reservation,
    create_multiple_reservations,
    delete_reservation,
    get_reservation_by_id,
    get_reservations_by_organization,
    update_reservation,
)

router = APIRouter()

GROUP_ACTIONS = {"approve": APPROVED, "reject": REJECTED}


def _reports_changed(org_id: str):
    """Reservation changes create or drop appointments; cached reports are stale."""
    invalidate_organization(org_id, ["analytics"])


# ─────────────────────────────────────────────────────────────────────────────
# TABLE
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/rows")
async def list_rows(
    status: Optional[str] = None,
    employee_id: Optional[str] = None,
    service_id: Optional[str] = None,
    search: Optional[str] = None,
    only_future: bool = True,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    """Filtered rows; groups are summarized over every reservation of the organization."""
    reservations = await get_reservations_by_organization(api, org_id)
    services = await get_services_by_organization(api, org_id)
    employees = await get_employees_by_organization(api, org_id)

    filters = ReservationFilters(
        status=status,
        employee_id=employee_id,
        service_id=service_id,
        search=search,
        only_future=only_future,
    )
    visible = filter_reservations(reservations, filters)
    rows = visible_rows(visible, universe=reservations, services=services, employees=employees)

    policy = get_context(api.session, org_id).reservation_policy
    return {
        "rows": [r.model_dump(mode="json", by_alias=True) for r in rows],
        "total": len(visible),
        "policy": policy,
        "policyHelp": policy_help_text(policy),
    }


# ─────────────────────────────────────────────────────────────────────────────
# STATUS
# ─────────────────────────────────────────────────────────────────────────────

@router.put("/{reservation_id}/status")
async def set_status(
    reservation_id: str,
    data: StatusUpdate,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    reservation = await get_reservation_by_id(api, reservation_id)
    try:
        updated = await update_status(api, reservation, data.status)
    except EmployeeRequiredError:
        raise HTTPException(400, "Assign an employee before approving the reservation")

    _reports_changed(org_id)
    api.session.notices.success("Reservation updated", f"Reservation {data.status}")
    return {
        "reservation": updated.model_dump(mode="json", by_alias=True) if updated else None,
        "notices": api.session.notices.dump(),
    }


@router.post("/groups/{group_id}/{action}")
async def update_group(
    group_id: str,
    action: str,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    """Approve or reject every pending reservation of a booking group."""
    status = GROUP_ACTIONS.get(action)
    if status is None:
        raise HTTPException(400, "Action must be 'approve' or 'reject'")

    reservations = await get_reservations_by_organization(api, org_id)
    members = group_members(reservations).get(group_id)
    if not members:
        raise HTTPException(404, "Group not found")

    result = await bulk_update_group(api, members, status)
    if result.succeeded:
        _reports_changed(org_id)
    return {
        **result.model_dump(mode="json", by_alias=True),
        "complete": result.complete,
        "notices": api.session.notices.dump(),
    }


# ─────────────────────────────────────────────────────────────────────────────
# OTHER ACTIONS
# ─────────────────────────────────────────────────────────────────────────────

@router.put("/{reservation_id}/employee")
async def assign_employee(
    reservation_id: str,
    data: EmployeeAssignment,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    updated = await update_reservation(api, reservation_id, {"employeeId": data.employee_id})
    _reports_changed(org_id)
    return {"reservation": updated.model_dump(mode="json", by_alias=True) if updated else None}


@router.put("/{reservation_id}/cancel")
async def cancel(
    reservation_id: str,
    notify_client: bool = False,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    await cancel_reservation(api, reservation_id, notify_client)
    _reports_changed(org_id)
    return {"success": True}


@router.delete("/{reservation_id}")
async def delete(
    reservation_id: str,
    delete_appointments: bool = False,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    await delete_reservation(api, reservation_id, delete_appointments)
    _reports_changed(org_id)
    return {"success": True}


@router.post("/multi")
async def book_services(
    data: MultipleReservationsCreate,
    api: ApiClient = Depends(get_public_client),
) -> dict:
    """Public booking page: one request for several services, sharing a groupId."""
    reservations = await create_multiple_reservations(api, data)
    return {"reservations": [r.model_dump(mode="json", by_alias=True) for r in reservations]}
