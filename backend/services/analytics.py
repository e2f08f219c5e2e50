"""
Business report built from raw appointments.

Everything here is a pure pass over lists already fetched from the booking
API: filtering, KPIs, zero-filled time buckets, per-employee and
per-service rollups, a weekday x hour demand heatmap and a few rule-based
insights. Dates are bucketed in the organization's timezone.
"""
import calendar
import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from core.models import (
    Appointment,
    DashboardReport,
    Employee,
    EmployeeRollup,
    Heatmap,
    Insight,
    Kpis,
    Service,
    ServiceRollup,
    TimeBucket,
)
from services.pricing import effective_price

logger = logging.getLogger(__name__)

GRANULARITIES = ("day", "week", "month")
HEATMAP_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
HEATMAP_HOURS = list(range(8, 20))

INACTIVE_CLIENT_DAYS = 60
LOW_DEMAND_SHARE = 0.05


def _local_day(value: datetime, tz: Optional[tzinfo]) -> date:
    return value.astimezone(tz or timezone.utc).date()


# ─────────────────────────────────────────────────────────────────────────────
# FILTERING & KPIs
# ─────────────────────────────────────────────────────────────────────────────

def filter_appointments(
    appointments: Iterable[Appointment],
    start: Optional[date] = None,
    end: Optional[date] = None,
    employee_id: Optional[str] = None,
    service_id: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> List[Appointment]:
    """Inclusive day range plus optional employee and service."""
    result = []
    for appointment in appointments:
        day = _local_day(appointment.start_date, tz)
        if start and day < start:
            continue
        if end and day > end:
            continue
        if employee_id and appointment.employee_ref != employee_id:
            continue
        if service_id and appointment.service_ref != service_id:
            continue
        result.append(appointment)
    return result


def is_cancelled(status: Optional[str]) -> bool:
    return bool(status) and status.startswith("cancelled")


def compute_kpis(appointments: List[Appointment], services: Optional[List[Service]] = None) -> Kpis:
    total = len(appointments)
    revenue = sum(effective_price(a, services) for a in appointments)
    customers = {a.client_ref for a in appointments if a.client_ref}
    cancelled = sum(1 for a in appointments if is_cancelled(a.status))
    return Kpis(
        total_appointments=total,
        total_customers=len(customers),
        total_revenue=revenue,
        average_ticket=revenue / total if total else 0,
        cancellation_rate=(cancelled / total) * 100 if total else 0,
    )


# ─────────────────────────────────────────────────────────────────────────────
# TIME SERIES
# ─────────────────────────────────────────────────────────────────────────────

def bucket_start(day: date, granularity: str) -> date:
    if granularity == "week":
        return day - timedelta(days=day.weekday())
    if granularity == "month":
        return day.replace(day=1)
    return day


def _next_bucket(start: date, granularity: str) -> date:
    if granularity == "week":
        return start + timedelta(days=7)
    if granularity == "month":
        return (start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return start + timedelta(days=1)


def bucket_key(start: date, granularity: str) -> str:
    if granularity == "week":
        year, week, _ = start.isocalendar()
        return f"{year}-W{week:02d}"
    if granularity == "month":
        return start.strftime("%Y-%m")
    return start.isoformat()


def bucket_label(start: date, granularity: str) -> str:
    if granularity == "week":
        return f"Wk {start.isocalendar()[1]:02d}"
    if granularity == "month":
        return start.strftime("%b %Y")
    return start.strftime("%d/%m")


def build_time_buckets(
    appointments: List[Appointment],
    granularity: str = "day",
    start: Optional[date] = None,
    end: Optional[date] = None,
    services: Optional[List[Service]] = None,
    tz: Optional[tzinfo] = None,
) -> List[TimeBucket]:
    """
    Zero-filled buckets covering [start, end].

    A missing bound falls back to the earliest/latest appointment; with no
    bound and no data the series is empty. Weeks start on Monday.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity}")

    days = [_local_day(a.start_date, tz) for a in appointments]
    first = start or (min(days) if days else None)
    last = end or (max(days) if days else None)
    if first is None or last is None or first > last:
        return []

    buckets: Dict[date, TimeBucket] = OrderedDict()
    cursor = bucket_start(first, granularity)
    while cursor <= last:
        buckets[cursor] = TimeBucket(
            key=bucket_key(cursor, granularity),
            label=bucket_label(cursor, granularity),
            start=cursor,
        )
        cursor = _next_bucket(cursor, granularity)

    for appointment, day in zip(appointments, days):
        bucket = buckets.get(bucket_start(day, granularity))
        if bucket is None:
            continue
        bucket.appointments += 1
        bucket.revenue += effective_price(appointment, services)

    return list(buckets.values())


# ─────────────────────────────────────────────────────────────────────────────
# ROLLUPS & HEATMAP
# ─────────────────────────────────────────────────────────────────────────────

def rollup_by_employee(
    appointments: List[Appointment],
    employees: List[Employee],
    services: Optional[List[Service]] = None,
) -> List[EmployeeRollup]:
    """Revenue per known employee, highest first."""
    known = {e.id: e for e in employees}
    rows: Dict[str, EmployeeRollup] = {}
    for appointment in appointments:
        employee = known.get(appointment.employee_ref)
        if employee is None:
            continue
        row = rows.setdefault(employee.id, EmployeeRollup(employee_id=employee.id, name=employee.names))
        row.appointments += 1
        row.revenue += effective_price(appointment, services)
    return sorted(rows.values(), key=lambda r: r.revenue, reverse=True)


def rollup_by_service(appointments: List[Appointment], services: List[Service]) -> List[ServiceRollup]:
    """Appointment count per known service, busiest first."""
    known = {s.id: s for s in services}
    rows: Dict[str, ServiceRollup] = {}
    for appointment in appointments:
        service = known.get(appointment.service_ref)
        if service is None:
            continue
        row = rows.setdefault(service.id, ServiceRollup(service_id=service.id, name=service.name))
        row.appointments += 1
        row.revenue += effective_price(appointment, services)
    return sorted(rows.values(), key=lambda r: r.appointments, reverse=True)


def build_heatmap(appointments: List[Appointment], tz: Optional[tzinfo] = None) -> Heatmap:
    raw = [[0] * len(HEATMAP_HOURS) for _ in HEATMAP_DAYS]
    for appointment in appointments:
        local = appointment.start_date.astimezone(tz or timezone.utc)
        if local.hour in HEATMAP_HOURS:
            raw[local.weekday()][HEATMAP_HOURS.index(local.hour)] += 1

    peak = max(1, max(max(row) for row in raw))
    normalized = [[count / peak for count in row] for row in raw]
    return Heatmap(days=list(HEATMAP_DAYS), hours=list(HEATMAP_HOURS), raw=raw, normalized=normalized)


# ─────────────────────────────────────────────────────────────────────────────
# INSIGHTS
# ─────────────────────────────────────────────────────────────────────────────

def inactive_clients(history: List[Appointment], now: datetime) -> List[str]:
    """Clients whose latest visit is more than 60 days old."""
    last_seen: Dict[str, datetime] = {}
    names: Dict[str, str] = {}
    for appointment in history:
        client_id = appointment.client_ref
        if not client_id or is_cancelled(appointment.status):
            continue
        if client_id not in last_seen or appointment.start_date > last_seen[client_id]:
            last_seen[client_id] = appointment.start_date
        names[client_id] = appointment.client_name or client_id

    cutoff = now - timedelta(days=INACTIVE_CLIENT_DAYS)
    return sorted(names[cid] for cid, seen in last_seen.items() if seen < cutoff)


def low_demand_services(appointments: List[Appointment], services: List[Service]) -> List[str]:
    """Active services with less than 5% of the period's bookings, unbooked ones included."""
    total = len(appointments)
    if total == 0:
        return []
    counts: Dict[str, int] = {}
    for appointment in appointments:
        counts[appointment.service_ref] = counts.get(appointment.service_ref, 0) + 1
    return [
        s.name for s in services
        if s.is_active and counts.get(s.id, 0) / total < LOW_DEMAND_SHARE
    ]


def month_end_projection(
    appointments: List[Appointment],
    now: datetime,
    services: Optional[List[Service]] = None,
    tz: Optional[tzinfo] = None,
) -> float:
    """Revenue so far this month, extrapolated linearly to the month's last day."""
    today = _local_day(now, tz)
    month_start = today.replace(day=1)
    so_far = sum(
        effective_price(a, services)
        for a in appointments
        if month_start <= _local_day(a.start_date, tz) <= today
    )
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return (so_far / today.day) * days_in_month


def build_insights(
    appointments: List[Appointment],
    services: List[Service],
    history: Optional[List[Appointment]] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[Insight]:
    now = now or datetime.now(timezone.utc)
    insights: List[Insight] = []

    inactive = inactive_clients(history if history is not None else appointments, now)
    if inactive:
        insights.append(Insight(
            kind="inactive_clients",
            severity="warning",
            message=f"{len(inactive)} clients have not visited in over {INACTIVE_CLIENT_DAYS} days",
            value=len(inactive),
            items=inactive,
        ))

    low = low_demand_services(appointments, services)
    if low:
        insights.append(Insight(
            kind="low_demand_services",
            severity="info",
            message=f"{len(low)} services account for less than {int(LOW_DEMAND_SHARE * 100)}% of bookings",
            value=len(low),
            items=low,
        ))

    projection = month_end_projection(appointments, now, services, tz)
    insights.append(Insight(
        kind="month_end_projection",
        severity="info",
        message=f"Projected revenue at month end: {projection:,.0f}",
        value=projection,
    ))
    return insights


def build_dashboard(
    appointments: List[Appointment],
    employees: List[Employee],
    services: List[Service],
    start: Optional[date] = None,
    end: Optional[date] = None,
    granularity: str = "day",
    employee_id: Optional[str] = None,
    service_id: Optional[str] = None,
    history: Optional[List[Appointment]] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DashboardReport:
    filtered = filter_appointments(appointments, start, end, employee_id, service_id, tz)
    logger.debug(f"[Analytics] {len(filtered)}/{len(appointments)} appointments in window")

    return DashboardReport(
        start=start,
        end=end,
        granularity=granularity,
        kpis=compute_kpis(filtered, services),
        time_series=build_time_buckets(filtered, granularity, start, end, services, tz),
        by_employee=rollup_by_employee(filtered, employees, services),
        by_service=rollup_by_service(filtered, services),
        heatmap=build_heatmap(filtered, tz),
        insights=build_insights(filtered, services, history, now, tz),
    )
