"""
Reservation models - booking requests, display rows, bulk outcomes.
"""
from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field

from core.models.base import ApiModel, UtcDatetime, ref_id
from core.models.catalog import Employee, Service

# Reservation.status values
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
AUTO_APPROVED = "auto_approved"
CANCELLED_BY_CUSTOMER = "cancelled_by_customer"
CANCELLED_BY_ADMIN = "cancelled_by_admin"


class CustomerDetails(ApiModel):
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[UtcDatetime] = None


class Reservation(ApiModel):
    """A customer booking request awaiting (or past) approval."""
    id: Optional[str] = Field(None, alias="_id")
    service_id: Optional[Union[Service, str]] = None
    employee_id: Optional[Union[Employee, str]] = None
    start_date: UtcDatetime
    customer: Optional[str] = None
    customer_details: CustomerDetails = Field(default_factory=CustomerDetails)
    organization_id: Optional[str] = None
    status: str = PENDING
    group_id: Optional[str] = None
    appointment_id: Optional[str] = None
    error_message: Optional[str] = None
    custom_price: Optional[float] = None
    total_price: Optional[float] = None

    @property
    def service(self) -> Optional[Service]:
        return self.service_id if isinstance(self.service_id, Service) else None

    @property
    def service_ref(self) -> Optional[str]:
        return ref_id(self.service_id)

    @property
    def employee_ref(self) -> Optional[str]:
        return ref_id(self.employee_id)

    @property
    def has_employee(self) -> bool:
        return bool(self.employee_ref)


class ServiceSelection(ApiModel):
    service_id: str
    employee_id: Optional[str] = None
    duration: Optional[int] = None


class RecurrencePattern(ApiModel):
    type: str  # 'none', 'weekly'
    interval_weeks: Optional[int] = None
    days_of_week: Optional[List[int]] = None
    occurrences: Optional[int] = None
    end_date: Optional[UtcDatetime] = None


class ReservationCreate(ApiModel):
    service_id: str
    employee_id: Optional[str] = None
    start_date: UtcDatetime
    customer_details: CustomerDetails
    organization_id: str
    status: str = PENDING


class MultipleReservationsCreate(ApiModel):
    """One customer booking several services in sequence."""
    services: List[ServiceSelection]
    start_date: UtcDatetime
    customer_details: CustomerDetails
    organization_id: str
    client_package_id: Optional[str] = None
    recurrence_pattern: Optional[RecurrencePattern] = None


class GroupSummary(ApiModel):
    """Synthetic summary shown on the row that stands in for a reservation group."""
    group_id: str
    badge: str = "Group"
    size: int
    service_count: int
    service_names: str
    member_ids: List[str] = []
    pending_count: int = 0
    total_price: float = 0


class ReservationRow(ApiModel):
    """One visible line in the reservation table."""
    reservation: Reservation
    status_label: str
    status_color: str
    employee_name: Optional[str] = None
    price: float = 0
    group: Optional[GroupSummary] = None


class ReservationFilters(BaseModel):
    status: Optional[str] = None  # None = all
    employee_id: Optional[str] = None
    service_id: Optional[str] = None
    search: Optional[str] = None
    only_future: bool = True


class StatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]


class EmployeeAssignment(BaseModel):
    employee_id: str = Field(..., alias="employeeId")

    class Config:
        populate_by_name = True


class BulkFailure(ApiModel):
    reservation_id: Optional[str] = None
    message: str


class BulkUpdateResult(ApiModel):
    """Outcome of approving/rejecting a reservation group."""
    status: str
    requested: int
    succeeded: List[str] = []
    failed: List[BulkFailure] = []

    @property
    def complete(self) -> bool:
        return not self.failed
