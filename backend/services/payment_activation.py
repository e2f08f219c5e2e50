"""
Payment activation.

After the checkout redirect the payment provider notifies the booking API
asynchronously, so the membership flips to active some seconds later. We
poll the current membership at a fixed interval until it shows this
payment, then give up with a timeout the user can retry.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from config import settings
from core.http import ApiClient
from core.models import Membership, PaymentActivation
from core.models.billing import ACTIVE
from core.polling import STOPPED, FixedIntervalPoller
from services.membership_service import get_current_membership

logger = logging.getLogger(__name__)


def is_activated(
    membership: Optional[Membership],
    payment_initiated_at: datetime,
    skew_seconds: Optional[int] = None,
) -> bool:
    """Active, with a last payment no older than the checkout start (minus clock skew)."""
    if membership is None or membership.status != ACTIVE or membership.last_payment_date is None:
        return False
    skew = timedelta(seconds=settings.payment_clock_skew_seconds if skew_seconds is None else skew_seconds)
    return membership.last_payment_date >= payment_initiated_at - skew


async def check_activation(
    api: ApiClient,
    organization_id: str,
    payment_initiated_at: datetime,
) -> Optional[Membership]:
    """One attempt: the membership when this payment activated it, else None."""
    membership = await get_current_membership(api, organization_id)
    if is_activated(membership, payment_initiated_at):
        return membership
    return None


async def wait_for_activation(
    api: ApiClient,
    organization_id: str,
    payment_initiated_at: Optional[datetime] = None,
    interval_seconds: Optional[float] = None,
    max_attempts: Optional[int] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    cancelled: Optional[Callable[[], Awaitable[bool]]] = None,
) -> PaymentActivation:
    """
    Poll until activated or out of attempts. Each call starts again from zero.

    `cancelled` is asked before every attempt; once it answers True the
    poll stops without another request (the caller went away).
    """
    initiated_at = payment_initiated_at or datetime.now(timezone.utc)
    attempts = max_attempts or settings.payment_poll_max_attempts

    async def attempt() -> Optional[Membership]:
        if cancelled is not None and await cancelled():
            poller.stop()
            return None
        return await check_activation(api, organization_id, initiated_at)

    poller = FixedIntervalPoller(
        name=f"payment-activation:{organization_id}",
        check=attempt,
        interval_seconds=interval_seconds or settings.payment_poll_interval_seconds,
        max_attempts=attempts,
        sleep=sleep,
    )
    result = await poller.run()

    if result.outcome == STOPPED:
        logger.info(f"[Payments] Activation wait for {organization_id} cancelled after {result.attempts} attempts")
        return PaymentActivation(status="stopped", attempts=result.attempts, max_attempts=attempts)

    if result.done:
        api.session.notices.success("Payment confirmed", "Your plan is now active.")
        return PaymentActivation(
            status="activated",
            attempts=result.attempts,
            max_attempts=attempts,
            membership=result.value,
        )

    logger.warning(f"[Payments] Activation not seen for {organization_id} after {result.attempts} attempts")
    api.session.notices.warning(
        "Still processing",
        "We have not received the payment confirmation yet. You can check again in a moment.",
    )
    return PaymentActivation(status="timeout", attempts=result.attempts, max_attempts=attempts)
