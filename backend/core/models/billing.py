"""
Billing models - plans, organization memberships, membership status view.
"""
from typing import List, Optional, Union
from pydantic import BaseModel, Field

from core.models.base import ApiModel, UtcDatetime

# Membership.status values
ACTIVE = "active"
TRIAL = "trial"
PENDING = "pending"
GRACE_PERIOD = "grace_period"
PAST_DUE = "past_due"  # Older API name for the grace period
SUSPENDED = "suspended"
CANCELLED = "cancelled"
EXPIRED = "expired"


class PlanLimits(ApiModel):
    max_employees: Optional[int] = None  # None = unlimited
    max_services: Optional[int] = None
    max_appointments_per_month: Optional[int] = None
    max_storage_gb: Optional[float] = Field(None, alias="maxStorageGB")
    custom_branding: bool = False
    whatsapp_integration: bool = False
    analytics_advanced: bool = False
    priority_support: bool = False


class Plan(ApiModel):
    """Pricing/limits template referenced by a membership."""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    slug: str = ""
    display_name: str = ""
    price: float = 0
    billing_cycle: Optional[str] = None  # 'monthly', 'yearly', 'lifetime'
    characteristics: List[str] = []
    domain_type: Optional[str] = None  # 'subdomain', 'custom_domain'
    limits: Optional[PlanLimits] = None
    description: Optional[str] = None
    is_active: bool = True


class MembershipNotificationFlags(ApiModel):
    three_days_sent: bool = False
    one_day_sent: bool = False
    expiration_sent: bool = False
    grace_period_day1_sent: bool = False
    grace_period_day2_sent: bool = False


class Membership(ApiModel):
    """Organization subscription record."""
    id: Optional[str] = Field(None, alias="_id")
    organization_id: Optional[str] = None
    plan: Optional[Union[Plan, str]] = Field(None, alias="planId")
    status: str
    start_date: Optional[UtcDatetime] = None
    current_period_start: Optional[UtcDatetime] = None
    current_period_end: UtcDatetime
    trial_end: Optional[UtcDatetime] = None
    notifications: Optional[MembershipNotificationFlags] = None
    last_payment_date: Optional[UtcDatetime] = None
    last_payment_amount: float = 0
    next_payment_due: Optional[UtcDatetime] = None
    auto_renew: bool = False
    admin_notes: Optional[str] = None
    suspended_at: Optional[UtcDatetime] = None
    suspension_reason: Optional[str] = None
    cancelled_at: Optional[UtcDatetime] = None
    cancellation_reason: Optional[str] = None

    @property
    def plan_details(self) -> Optional[Plan]:
        return self.plan if isinstance(self.plan, Plan) else None


class MembershipSummary(ApiModel):
    plan: str
    status: str
    current_period_end: UtcDatetime
    days_until_expiration: int
    next_payment_due: Optional[UtcDatetime] = None
    last_payment_date: Optional[UtcDatetime] = None
    last_payment_amount: float = 0


class MembershipUi(ApiModel):
    status_color: str  # 'green', 'yellow', 'orange', 'red'
    status_message: str
    show_renewal_button: bool
    show_upgrade_button: bool


class MembershipStatus(ApiModel):
    """Membership view-model shown on the dashboard."""
    has_active_membership: bool
    membership: Optional[MembershipSummary] = None
    ui: Optional[MembershipUi] = None


class MembershipRenewal(BaseModel):
    """Manual payment registration."""
    payment_amount: float = Field(..., alias="paymentAmount")

    class Config:
        populate_by_name = True


class PlanChange(BaseModel):
    plan_id: str = Field(..., alias="planId")

    class Config:
        populate_by_name = True


class PaymentActivationRequest(BaseModel):
    """Sent by the payment-success page right after the checkout redirect."""
    payment_initiated_at: Optional[UtcDatetime] = Field(None, alias="paymentInitiatedAt")

    class Config:
        populate_by_name = True


class PaymentActivation(ApiModel):
    """Result of waiting for a payment to activate the membership."""
    status: str  # 'activated', 'pending', 'timeout', 'stopped'
    attempts: int = 0
    max_attempts: int = 0
    membership: Optional[Membership] = None
