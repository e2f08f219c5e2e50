"""
Membership status view-model.

Pure derivation from a membership snapshot; recomputed on every fetch.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Optional
from pydantic import ValidationError

from config import settings
from core.errors import ApiError
from core.http import ApiClient
from core.models import Membership, MembershipStatus, MembershipSummary, MembershipUi
from core.models.billing import ACTIVE, GRACE_PERIOD, PAST_DUE, SUSPENDED, TRIAL
from services.membership_service import get_current_membership

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
WARNING_DAYS = 3
RENEWAL_WINDOW_DAYS = 7


def days_until(end: datetime, now: datetime) -> int:
    """Whole days left, rounded up; zero or negative once the period ended."""
    return math.ceil((end - now).total_seconds() / SECONDS_PER_DAY)


def status_color_and_message(status: str, days: int) -> tuple[str, str]:
    """First matching rule wins; an elapsed period is red whatever the stored status."""
    if days <= 0:
        return "red", "Your membership has expired"
    if status == SUSPENDED:
        return "red", "Your membership is suspended. Renew to reactivate."
    if status in (GRACE_PERIOD, PAST_DUE):
        return "orange", "Grace period. Renew today to avoid suspension."
    if days <= WARNING_DAYS:
        return "yellow", f"Your membership expires in {days} days"
    if status == TRIAL:
        return "green", "Your trial is active"
    return "green", "Your membership is active"


def derive_membership_status(
    membership: Optional[Membership],
    now: Optional[datetime] = None,
) -> MembershipStatus:
    if membership is None:
        return MembershipStatus(has_active_membership=False)

    now = now or datetime.now(timezone.utc)
    days = days_until(membership.current_period_end, now)
    color, message = status_color_and_message(membership.status, days)

    plan = membership.plan_details
    plan_name = plan.display_name if plan else (membership.plan or "")

    return MembershipStatus(
        has_active_membership=True,
        membership=MembershipSummary(
            plan=plan_name,
            status=membership.status,
            current_period_end=membership.current_period_end,
            days_until_expiration=days,
            next_payment_due=membership.next_payment_due,
            last_payment_date=membership.last_payment_date,
            last_payment_amount=membership.last_payment_amount,
        ),
        ui=MembershipUi(
            status_color=color,
            status_message=message,
            show_renewal_button=days <= RENEWAL_WINDOW_DAYS or membership.status != ACTIVE,
            show_upgrade_button=bool(plan and plan.slug == settings.upgradeable_plan_slug),
        ),
    )


async def get_membership_status(api: ApiClient, organization_id: str) -> MembershipStatus:
    """Fetch and derive; on failure the dashboard treats the org as having no membership."""
    try:
        membership = await get_current_membership(api, organization_id)
    except (ApiError, ValidationError) as e:
        logger.error(f"[Membership] Could not load status for {organization_id}: {e}")
        return MembershipStatus(has_active_membership=False)
    return derive_membership_status(membership)
