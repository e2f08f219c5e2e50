"""
Reservation table logic: filtering, grouping and approval.

A customer booking several services at once produces reservations sharing a
groupId. The table shows one row per group (its first member) with a
summary, and approving/rejecting the row updates every pending member.

Bulk updates are sequential and not transactional. Only the last call of a
group lets the API notify the customer, so one booking produces one message
instead of one per service. A failing member does not stop the rest; the
result lists what failed.
"""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from core.errors import ApiError, EmployeeRequiredError
from core.http import ApiClient
from core.models import (
    BulkFailure,
    BulkUpdateResult,
    Employee,
    GroupSummary,
    Reservation,
    ReservationFilters,
    ReservationRow,
    Service,
)
from core.models.reservation import APPROVED, AUTO_APPROVED, PENDING, REJECTED
from services.pricing import effective_price
from services.reservation_service import update_reservation_status

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    PENDING: "Pending",
    APPROVED: "Approved",
    REJECTED: "Rejected",
    AUTO_APPROVED: "Auto-approved",
    "cancelled_by_customer": "Cancelled by customer",
    "cancelled_by_admin": "Cancelled by admin",
}

STATUS_COLORS = {
    PENDING: "yellow",
    APPROVED: "green",
    REJECTED: "red",
    AUTO_APPROVED: "teal",
}

# Pending first, then auto-approved, approved, rejected, everything else
STATUS_PRIORITY = {PENDING: 0, AUTO_APPROVED: 1, APPROVED: 2, REJECTED: 3}

POLICY_HELP = {
    "auto_if_available": (
        "Reservations are confirmed and the appointment is created automatically "
        "when there is immediate availability. Otherwise the reservation stays pending."
    ),
    "manual": "Reservations require manual approval. No appointments are created automatically.",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, "Unknown")


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, "gray")


def policy_help_text(policy: Optional[str]) -> str:
    return POLICY_HELP.get(policy or "manual", POLICY_HELP["manual"])


# ─────────────────────────────────────────────────────────────────────────────
# FILTERING
# ─────────────────────────────────────────────────────────────────────────────

def _matches_search(reservation: Reservation, term: str) -> bool:
    details = reservation.customer_details
    haystacks = (details.name or "", details.phone or "", details.email or "")
    return any(term in h.lower() for h in haystacks)


def filter_reservations(
    reservations: Iterable[Reservation],
    filters: Optional[ReservationFilters] = None,
    now: Optional[datetime] = None,
) -> List[Reservation]:
    """Apply the table filters and order pending-first, then by start time."""
    filters = filters or ReservationFilters()
    now = now or datetime.now(timezone.utc)
    items = list(reservations)

    if filters.only_future:
        cutoff = now - timedelta(minutes=1)
        items = [r for r in items if r.start_date > cutoff]

    if filters.status and filters.status != "all":
        items = [r for r in items if r.status == filters.status]

    if filters.employee_id and filters.employee_id != "all":
        items = [r for r in items if r.employee_ref == filters.employee_id]

    if filters.service_id and filters.service_id != "all":
        items = [r for r in items if r.service_ref == filters.service_id]

    term = (filters.search or "").strip().lower()
    if term:
        items = [r for r in items if _matches_search(r, term)]

    items.sort(key=lambda r: (STATUS_PRIORITY.get(r.status, 99), r.start_date))
    return items


# ─────────────────────────────────────────────────────────────────────────────
# GROUPING
# ─────────────────────────────────────────────────────────────────────────────

def group_members(reservations: Iterable[Reservation]) -> Dict[str, List[Reservation]]:
    """groupId -> members in input order. Reservations without a groupId are left out."""
    groups: Dict[str, List[Reservation]] = OrderedDict()
    for reservation in reservations:
        if reservation.group_id:
            groups.setdefault(reservation.group_id, []).append(reservation)
    return groups


def is_grouped(reservation: Reservation, groups: Dict[str, List[Reservation]]) -> bool:
    """Grouped only when its group has more than one member; otherwise a singleton."""
    if not reservation.group_id:
        return False
    return len(groups.get(reservation.group_id, [])) > 1


def _service_name(reservation: Reservation, services: Optional[Iterable[Service]]) -> str:
    if reservation.service is not None:
        return reservation.service.name
    if services is not None:
        for service in services:
            if service.id == reservation.service_ref:
                return service.name
    return "Service"


def summarize_group(
    group_id: str,
    members: List[Reservation],
    services: Optional[List[Service]] = None,
) -> GroupSummary:
    names = [_service_name(m, services) for m in members]
    return GroupSummary(
        group_id=group_id,
        size=len(members),
        service_count=len(members),
        service_names=", ".join(names),
        member_ids=[m.id for m in members if m.id],
        pending_count=sum(1 for m in members if m.status == PENDING),
        total_price=sum(effective_price(m, services) for m in members),
    )


def employee_name(reservation: Reservation, employees: Optional[Iterable[Employee]] = None) -> Optional[str]:
    """Populated employee name first, then lookup by id."""
    if isinstance(reservation.employee_id, Employee):
        name = (reservation.employee_id.names or "").strip()
        if name:
            return name
    employee_id = reservation.employee_ref
    if employee_id and employees is not None:
        for employee in employees:
            if employee.id == employee_id:
                return employee.names
    return None


def visible_rows(
    reservations: List[Reservation],
    universe: Optional[List[Reservation]] = None,
    services: Optional[List[Service]] = None,
    employees: Optional[List[Employee]] = None,
) -> List[ReservationRow]:
    """
    One row per singleton, one row per group.

    Groups are formed over `universe` (defaults to `reservations`) so that a
    filtered view still summarizes the whole booking; the group's row sits at
    its first member present in `reservations`.
    """
    groups = group_members(universe if universe is not None else reservations)
    rows: List[ReservationRow] = []
    seen_groups = set()

    for reservation in reservations:
        group = None
        if is_grouped(reservation, groups):
            if reservation.group_id in seen_groups:
                continue
            seen_groups.add(reservation.group_id)
            group = summarize_group(reservation.group_id, groups[reservation.group_id], services)

        rows.append(ReservationRow(
            reservation=reservation,
            status_label=status_label(reservation.status),
            status_color=status_color(reservation.status),
            employee_name=employee_name(reservation, employees),
            price=effective_price(reservation, services),
            group=group,
        ))

    return rows


# ─────────────────────────────────────────────────────────────────────────────
# APPROVAL
# ─────────────────────────────────────────────────────────────────────────────

async def update_status(api: ApiClient, reservation: Reservation, status: str) -> Optional[Reservation]:
    """Approve or reject one reservation. Approval needs an assigned employee."""
    if status == APPROVED and not reservation.has_employee:
        raise EmployeeRequiredError(reservation.id)
    return await update_reservation_status(api, reservation.id, status)


async def bulk_update_group(api: ApiClient, members: List[Reservation], status: str) -> BulkUpdateResult:
    """
    Apply `status` to every pending member, one request at a time.

    All calls but the last carry skipNotification=True. Nothing is rolled
    back when a call fails.
    """
    pending = [m for m in members if m.status == PENDING]
    result = BulkUpdateResult(status=status, requested=len(pending))

    for index, member in enumerate(pending):
        is_last = index == len(pending) - 1
        try:
            await update_reservation_status(api, member.id, status, skip_notification=not is_last)
            result.succeeded.append(member.id)
        except ApiError as e:
            logger.error(f"[Reservations] {status} failed for {member.id}: {e}")
            result.failed.append(BulkFailure(reservation_id=member.id, message=str(e)))

    summary = f"{len(result.succeeded)}/{result.requested} reservations {status}"
    if result.failed:
        api.session.notices.warning("Group partially updated", summary)
    elif result.requested:
        api.session.notices.success("Group updated", summary)

    logger.info(f"[Reservations] Group update: {summary}")
    return result
