"""
Core Hub — Billing routes.

Routes:
- /plans — List subscription plans (public)
- /orgs/{org_id}/membership-status — Membership view-model for the dashboard
- /orgs/{org_id}/check-access — Whether the organization may use the dashboard
- /memberships/{membership_id}/renew, /plan — Manual payment, plan change
- /orgs/{org_id}/membership-notifications — Expiry and payment notices
- /orgs/{org_id}/payment-activation — Confirm a checkout activated the plan
"""
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, Request

from core.auth import get_public_client, require_session
from core.http import ApiClient
from core.models.billing import (
    MembershipRenewal, MembershipStatus, PaymentActivation, PaymentActivationRequest, Plan, PlanChange,
)
from services.membership_service import (
    change_plan,
    check_access,
    get_all_plans,
    get_membership_notifications,
    mark_notification_as_read,
    renew_membership,
)
from services.membership_status import get_membership_status
from services.payment_activation import check_activation, wait_for_activation

router = APIRouter()


@router.get("/plans")
async def list_plans(api: ApiClient = Depends(get_public_client)) -> List[Plan]:
    """List available subscription plans (public, cached)."""
    return await get_all_plans(api)


@router.get("/orgs/{org_id}/membership-status")
async def membership_status(org_id: str, api: ApiClient = Depends(require_session)) -> MembershipStatus:
    return await get_membership_status(api, org_id)


@router.get("/orgs/{org_id}/check-access")
async def membership_access(org_id: str, api: ApiClient = Depends(require_session)) -> dict:
    return {"hasAccess": await check_access(api, org_id)}


@router.post("/memberships/{membership_id}/renew")
async def renew(
    membership_id: str,
    data: MembershipRenewal,
    api: ApiClient = Depends(require_session),
) -> dict:
    result = await renew_membership(api, membership_id, data.payment_amount)
    return {"membership": result, "notices": api.session.notices.dump()}


@router.put("/memberships/{membership_id}/plan")
async def update_plan(
    membership_id: str,
    data: PlanChange,
    api: ApiClient = Depends(require_session),
) -> dict:
    result = await change_plan(api, membership_id, data.plan_id)
    return {"membership": result}


# ─────────────────────────────────────────────────────────────────────────────
# NOTIFICATIONS
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/orgs/{org_id}/membership-notifications")
async def membership_notifications(org_id: str, api: ApiClient = Depends(require_session)) -> list:
    return await get_membership_notifications(api, org_id)


@router.put("/notifications/{notification_id}/read")
async def read_notification(notification_id: str, api: ApiClient = Depends(require_session)) -> dict:
    return {"notification": await mark_notification_as_read(api, notification_id)}


# ─────────────────────────────────────────────────────────────────────────────
# PAYMENT ACTIVATION
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/orgs/{org_id}/payment-activation/check")
async def payment_activation_check(
    org_id: str,
    data: PaymentActivationRequest,
    api: ApiClient = Depends(require_session),
) -> PaymentActivation:
    """A single attempt, for callers that run their own interval timer."""
    initiated_at = data.payment_initiated_at or datetime.now(timezone.utc)
    membership = await check_activation(api, org_id, initiated_at)
    if membership is None:
        return PaymentActivation(status="pending", attempts=1, max_attempts=1)
    return PaymentActivation(status="activated", attempts=1, max_attempts=1, membership=membership)


@router.post("/orgs/{org_id}/payment-activation/wait")
async def payment_activation_wait(
    org_id: str,
    data: PaymentActivationRequest,
    request: Request,
    api: ApiClient = Depends(require_session),
) -> PaymentActivation:
    """
    Poll until the membership shows this payment or the attempts run out. Call again to retry.
    Polling stops as soon as the client disconnects.
    """
    return await wait_for_activation(
        api, org_id, data.payment_initiated_at, cancelled=request.is_disconnected
    )
