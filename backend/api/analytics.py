"""
Analytics API - business report and cashbox.

Handles:
- Dashboard report (KPIs, time series, rollups, heatmap, insights)
- Cashbox summary for a preset or custom interval
- Confirming every pending appointment of the cashbox view
"""
import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from fastapi import APIRouter, Depends, HTTPException, Query

from config import settings
from core.auth import require_organization, require_session
from core.cache import cache_get, cache_set, invalidate_organization, tenant_key
from core.http import ApiClient
from core.models import CashboxSummary, DashboardReport
from services.analytics import GRANULARITIES, build_dashboard
from services.appointment_service import get_appointments_by_organization
from services.cashbox import INTERVALS, cashbox_range, confirm_pending, summarize_cashbox
from services.catalog_service import get_employees_by_organization, get_services_by_organization
from services.organization_service import get_organization_by_id

logger = logging.getLogger(__name__)

router = APIRouter()


async def _org_timezone(api: ApiClient, org_id: str) -> tzinfo:
    organization = await get_organization_by_id(api, org_id)
    if organization.timezone:
        try:
            return ZoneInfo(organization.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"[Analytics] Unknown timezone '{organization.timezone}' for {org_id}, using UTC")
    return timezone.utc


def _current_month(today: date) -> tuple[date, date]:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


# ─────────────────────────────────────────────────────────────────────────────
# DASHBOARD
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/dashboard")
async def dashboard(
    start: Optional[date] = None,
    end: Optional[date] = None,
    granularity: str = "day",
    employee_id: Optional[str] = None,
    service_id: Optional[str] = None,
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> DashboardReport:
    """Report over [start, end] (defaults to the current month)."""
    if granularity not in GRANULARITIES:
        raise HTTPException(400, f"granularity must be one of {', '.join(GRANULARITIES)}")

    tz = await _org_timezone(api, org_id)
    now = datetime.now(tz)
    if start is None and end is None:
        start, end = _current_month(now.date())

    cache_key = tenant_key(
        org_id, api.session.token, "dashboard", start, end, granularity, employee_id, service_id
    )
    cached = cache_get("analytics", cache_key)
    if cached is not None:
        return cached

    range_start = datetime.combine(start, time.min, tzinfo=tz) if start else None
    range_end = datetime.combine(end, time.max, tzinfo=tz) if end else None
    appointments = await get_appointments_by_organization(api, org_id, range_start, range_end)
    history = await get_appointments_by_organization(
        api, org_id, now - timedelta(days=settings.analytics_history_days), now
    )
    employees = await get_employees_by_organization(api, org_id)
    services = await get_services_by_organization(api, org_id)

    report = build_dashboard(
        appointments,
        employees,
        services,
        start=start,
        end=end,
        granularity=granularity,
        employee_id=employee_id,
        service_id=service_id,
        history=history,
        now=now,
        tz=tz,
    )
    cache_set("analytics", cache_key, report)
    return report


# ─────────────────────────────────────────────────────────────────────────────
# CASHBOX
# ─────────────────────────────────────────────────────────────────────────────

async def _cashbox_window(
    api: ApiClient,
    org_id: str,
    interval: str,
    day: Optional[date],
    start: Optional[date],
    end: Optional[date],
) -> tuple[datetime, datetime, tzinfo]:
    if interval not in INTERVALS:
        raise HTTPException(400, f"interval must be one of {', '.join(INTERVALS)}")

    tz = await _org_timezone(api, org_id)
    if interval == "custom":
        if start is None or end is None:
            raise HTTPException(400, "Custom interval needs start and end")
        if start > end:
            raise HTTPException(400, "start must not be after end")
        return datetime.combine(start, time.min, tzinfo=tz), datetime.combine(end, time.max, tzinfo=tz), tz

    range_start, range_end = cashbox_range(interval, day=day, tz=tz)
    return range_start, range_end, tz


@router.get("/cashbox")
async def cashbox(
    interval: str = "daily",
    day: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    services: List[str] = Query(default=[]),
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> CashboxSummary:
    range_start, range_end, _ = await _cashbox_window(api, org_id, interval, day, start, end)
    appointments = await get_appointments_by_organization(api, org_id, range_start, range_end)
    catalog = await get_services_by_organization(api, org_id)

    organization = await get_organization_by_id(api, org_id)
    return summarize_cashbox(
        appointments, range_start, range_end, services, organization.currency, catalog=catalog
    )


@router.post("/cashbox/confirm-pending")
async def cashbox_confirm_pending(
    interval: str = "daily",
    day: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    services: List[str] = Query(default=[]),
    api: ApiClient = Depends(require_session),
    org_id: str = Depends(require_organization),
) -> dict:
    """Confirm the confirmable appointments currently shown in the cashbox."""
    range_start, range_end, _ = await _cashbox_window(api, org_id, interval, day, start, end)
    appointments = await get_appointments_by_organization(api, org_id, range_start, range_end)
    catalog = await get_services_by_organization(api, org_id)
    shown = summarize_cashbox(appointments, range_start, range_end, services, catalog=catalog)
    shown_ids = {line.appointment_id for line in shown.lines}

    result = await confirm_pending(api, [a for a in appointments if a.id in shown_ids], org_id)
    if result is not None:
        invalidate_organization(org_id, ["analytics"])
    return {
        "result": result.model_dump(mode="json", by_alias=True) if result else None,
        "notices": api.session.notices.dump(),
    }
