"""
Membership, plan and membership-notification endpoints of the booking API.
"""
import logging
from typing import List, Optional

from core.cache import cache_get, cache_set
from core.errors import ApiError, api_errors
from core.http import ApiClient, unwrap
from core.models import Membership, Plan

logger = logging.getLogger(__name__)


async def get_current_membership(api: ApiClient, organization_id: str) -> Optional[Membership]:
    """Current membership of the organization, or None when it has none (404)."""
    try:
        with api_errors("Could not load the membership"):
            body = await api.get(f"/memberships/{organization_id}/current")
    except ApiError as e:
        if e.status_code == 404:
            return None
        raise

    data = unwrap(body)
    if not data:
        return None
    return Membership.model_validate(data)


async def check_access(api: ApiClient, organization_id: str) -> bool:
    """Whether the organization may use the dashboard. Any failure means no access."""
    try:
        with api_errors("Could not verify membership access"):
            body = await api.get(f"/memberships/check-access/{organization_id}")
    except ApiError as e:
        logger.error(f"[Memberships] Access check failed for {organization_id}: {e}")
        return False
    data = unwrap(body) or {}
    return bool(data.get("hasAccess"))


async def renew_membership(api: ApiClient, membership_id: str, payment_amount: float) -> dict:
    """Register a manual payment."""
    with api_errors("Could not renew the membership"):
        body = await api.post(
            f"/memberships/{membership_id}/renew",
            json={"paymentAmount": payment_amount},
        )
    return unwrap(body)


async def change_plan(api: ApiClient, membership_id: str, plan_id: str) -> dict:
    with api_errors("Could not change the plan"):
        body = await api.put(f"/memberships/{membership_id}/plan", json={"planId": plan_id})
    return unwrap(body)


# ─────────────────────────────────────────────────────────────────────────────
# SUPERADMIN
# ─────────────────────────────────────────────────────────────────────────────

async def get_all_memberships(
    api: ApiClient,
    status: Optional[str] = None,
    plan_id: Optional[str] = None,
) -> List[Membership]:
    with api_errors("Could not load memberships"):
        body = await api.get("/memberships", params={"status": status, "planId": plan_id})
    return [Membership.model_validate(m) for m in unwrap(body) or []]


async def create_membership(
    api: ApiClient,
    organization_id: str,
    plan_id: str,
    start_date: Optional[str] = None,
    trial_days: Optional[int] = None,
) -> dict:
    payload = {"organizationId": organization_id, "planId": plan_id}
    if start_date:
        payload["startDate"] = start_date
    if trial_days is not None:
        payload["trialDays"] = trial_days
    with api_errors("Could not create the membership"):
        body = await api.post("/memberships", json=payload)
    return unwrap(body)


async def suspend_membership(api: ApiClient, membership_id: str, reason: Optional[str] = None) -> dict:
    with api_errors("Could not suspend the membership"):
        body = await api.post(f"/memberships/{membership_id}/suspend", json={"reason": reason})
    return unwrap(body)


async def reactivate_membership(api: ApiClient, membership_id: str, new_period_end: Optional[str] = None) -> dict:
    with api_errors("Could not reactivate the membership"):
        body = await api.post(
            f"/memberships/{membership_id}/reactivate",
            json={"newPeriodEnd": new_period_end},
        )
    return unwrap(body)


async def get_all_plans(api: ApiClient) -> List[Plan]:
    cached = cache_get("plans", "all_plans")
    if cached is not None:
        return cached

    with api_errors("Could not load plans"):
        body = await api.get("/plans")
    plans = [Plan.model_validate(p) for p in unwrap(body) or []]
    cache_set("plans", "all_plans", plans)
    return plans


# ─────────────────────────────────────────────────────────────────────────────
# NOTIFICATIONS
# ─────────────────────────────────────────────────────────────────────────────

async def get_admin_notifications(api: ApiClient, organization_id: str) -> list:
    with api_errors("Could not load notifications"):
        body = await api.get(f"/notifications/admin/{organization_id}")
    return unwrap(body) or []


async def get_membership_notifications(api: ApiClient, organization_id: str) -> list:
    with api_errors("Could not load membership notifications"):
        body = await api.get(f"/notifications/membership/{organization_id}")
    return unwrap(body) or []


async def mark_notification_as_read(api: ApiClient, notification_id: str) -> dict:
    with api_errors("Could not mark the notification as read"):
        body = await api.put(f"/notifications/mark-as-read/{notification_id}")
    return unwrap(body)
