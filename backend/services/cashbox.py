"""
Cashbox: income over a date interval, per-service totals and bulk
confirmation of pending appointments.
"""
import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from config import settings
from core.http import ApiClient
from core.models import Appointment, BatchConfirmResult, CashboxLine, CashboxSummary, Service, ServiceTotals
from services.appointment_service import batch_confirm_appointments
from services.pricing import additional_total, effective_price, service_price

logger = logging.getLogger(__name__)

INTERVALS = ("daily", "weekly", "biweekly", "monthly", "custom")
OTHER_SERVICE = "Other"

NOT_CONFIRMABLE = {
    "confirmed",
    "cancelled",
    "cancelled_by_customer",
    "cancelled_by_admin",
    "attended",
    "no_show",
}


def _day_bounds(first: date, last: date, tz: tzinfo) -> tuple[datetime, datetime]:
    return (
        datetime.combine(first, time.min, tzinfo=tz),
        datetime.combine(last, time.max, tzinfo=tz),
    )


def cashbox_range(
    interval: str,
    day: Optional[date] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> tuple[datetime, datetime]:
    """
    [start, end] of a preset interval, both inclusive, in the org timezone.

    daily uses `day` (default today); the other presets are anchored on today.
    Weeks run Monday to Sunday; biweekly is the 1st-15th or the 16th-month end.
    """
    tz = tz or timezone.utc
    today = (now or datetime.now(tz)).astimezone(tz).date()

    if interval == "daily":
        base = day or today
        return _day_bounds(base, base, tz)
    if interval == "weekly":
        monday = today - timedelta(days=today.weekday())
        return _day_bounds(monday, monday + timedelta(days=6), tz)

    last_day = calendar.monthrange(today.year, today.month)[1]
    if interval == "biweekly":
        if today.day <= 15:
            return _day_bounds(today.replace(day=1), today.replace(day=15), tz)
        return _day_bounds(today.replace(day=16), today.replace(day=last_day), tz)
    if interval == "monthly":
        return _day_bounds(today.replace(day=1), today.replace(day=last_day), tz)

    raise ValueError(f"Interval '{interval}' needs explicit start and end dates")


def can_confirm(status: Optional[str]) -> bool:
    return (status or "pending") not in NOT_CONFIRMABLE


def _service_label(appointment: Appointment, catalog: Optional[List[Service]] = None) -> str:
    if appointment.service_name:
        return appointment.service_name
    if catalog:
        for service in catalog:
            if service.id == appointment.service_ref and service.name:
                return service.name
    return OTHER_SERVICE


def summarize_cashbox(
    appointments: Iterable[Appointment],
    start: datetime,
    end: datetime,
    service_names: Optional[List[str]] = None,
    currency: Optional[str] = None,
    catalog: Optional[List[Service]] = None,
) -> CashboxSummary:
    """
    Totals over the appointments, optionally restricted to some service names.

    Each line is effective price plus additional items, with the org's
    service catalog resolving services sent as bare ids. The service
    options come from the unfiltered list.
    """
    items = sorted(appointments, key=lambda a: a.start_date, reverse=True)
    options = sorted({_service_label(a, catalog) for a in items})
    if service_names:
        wanted = set(service_names)
        items = [a for a in items if _service_label(a, catalog) in wanted]

    summary: Dict[str, ServiceTotals] = {}
    lines: List[CashboxLine] = []
    total = 0.0

    for appointment in items:
        base = service_price(appointment, catalog)
        used = effective_price(appointment, catalog)
        extras = additional_total(appointment)
        line_total = used + extras
        total += line_total

        name = _service_label(appointment, catalog)
        totals = summary.setdefault(name, ServiceTotals())
        totals.count += 1
        totals.total += line_total

        lines.append(CashboxLine(
            appointment_id=appointment.id,
            start_date=appointment.start_date,
            client_name=appointment.client_name,
            service_name=name,
            base_price=base,
            used_price=used,
            additional_total=extras,
            line_total=line_total,
            custom_price_applied=appointment.custom_price is not None and appointment.custom_price != base,
            status=appointment.status or "pending",
            can_confirm=can_confirm(appointment.status),
        ))

    count = len(items)
    return CashboxSummary(
        start=start,
        end=end,
        currency=currency or settings.default_currency,
        total_income=total,
        total_count=count,
        average_ticket=total / count if count else 0,
        services_summary=summary,
        lines=lines,
        service_options=options,
    )


async def confirm_pending(
    api: ApiClient,
    appointments: Iterable[Appointment],
    organization_id: str,
) -> Optional[BatchConfirmResult]:
    """Confirm every confirmable appointment in one batch call; None when there is nothing to do."""
    ids = [a.id for a in appointments if a.id and can_confirm(a.status)]
    if not ids:
        api.session.notices.info("No pending appointments", "There are no pending appointments to confirm.")
        return None

    result = await batch_confirm_appointments(api, ids, organization_id)

    parts = []
    if result.confirmed:
        parts.append(f"{len(result.confirmed)} confirmed.")
    if result.already_confirmed:
        parts.append(f"{len(result.already_confirmed)} already confirmed.")
    if result.failed:
        parts.append(f"{len(result.failed)} failed.")
    message = " ".join(parts)

    if result.failed:
        api.session.notices.warning("Process completed", message)
    else:
        api.session.notices.success("Process completed", message)
    logger.info(f"[Cashbox] Batch confirm for {organization_id}: {message}")
    return result
