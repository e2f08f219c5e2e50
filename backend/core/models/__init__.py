"""
Core Pydantic models shared across the gateway.
"""
from .base import ApiModel, UtcDatetime, ref_id
from .catalog import Service, Employee, Client
from .org import (
    Organization,
    OpeningHours,
    Branding,
    Location,
    Role,
    ReservationPolicy,
    ReservationPolicyUpdate,
    WhatsappMeta,
)
from .billing import (
    Plan,
    PlanLimits,
    Membership,
    MembershipSummary,
    MembershipUi,
    MembershipStatus,
    MembershipRenewal,
    PlanChange,
    PaymentActivation,
    PaymentActivationRequest,
)
from .reservation import (
    Reservation,
    CustomerDetails,
    ReservationCreate,
    MultipleReservationsCreate,
    ServiceSelection,
    RecurrencePattern,
    GroupSummary,
    ReservationRow,
    ReservationFilters,
    StatusUpdate,
    EmployeeAssignment,
    BulkFailure,
    BulkUpdateResult,
)
from .appointment import (
    Appointment,
    AdditionalItem,
    AppointmentsBatchCreate,
    BatchConfirmResult,
    AggregatedBucket,
)
from .analytics import (
    TimeBucket,
    EmployeeRollup,
    ServiceRollup,
    Heatmap,
    Kpis,
    Insight,
    DashboardReport,
    CashboxLine,
    ServiceTotals,
    CashboxSummary,
)
from .user import LoginRequest, LoginResponse, TokenRefresh

__all__ = [
    # Base
    "ApiModel", "UtcDatetime", "ref_id",
    # Catalog
    "Service", "Employee", "Client",
    # Org
    "Organization", "OpeningHours", "Branding", "Location", "Role",
    "ReservationPolicy", "ReservationPolicyUpdate", "WhatsappMeta",
    # Billing
    "Plan", "PlanLimits", "Membership", "MembershipSummary", "MembershipUi",
    "MembershipStatus", "MembershipRenewal", "PlanChange", "PaymentActivation", "PaymentActivationRequest",
    # Reservations
    "Reservation", "CustomerDetails", "ReservationCreate", "MultipleReservationsCreate",
    "ServiceSelection", "RecurrencePattern", "GroupSummary", "ReservationRow",
    "ReservationFilters", "StatusUpdate", "EmployeeAssignment", "BulkFailure", "BulkUpdateResult",
    # Appointments
    "Appointment", "AdditionalItem", "AppointmentsBatchCreate", "BatchConfirmResult",
    "AggregatedBucket",
    # Analytics
    "TimeBucket", "EmployeeRollup", "ServiceRollup", "Heatmap", "Kpis", "Insight",
    "DashboardReport", "CashboxLine", "ServiceTotals", "CashboxSummary",
    # Auth
    "LoginRequest", "LoginResponse", "TokenRefresh",
]
