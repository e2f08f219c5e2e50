"""
Appointment models - confirmed scheduled services.
"""
from typing import Dict, List, Optional, Union
from pydantic import Field

from core.models.base import ApiModel, UtcDatetime, ref_id
from core.models.catalog import Client, Employee, Service


class AdditionalItem(ApiModel):
    name: str
    price: float = 0


class Appointment(ApiModel):
    """A confirmed scheduled service instance."""
    id: Optional[str] = Field(None, alias="_id")
    client: Optional[Union[Client, str]] = None
    service: Optional[Union[Service, str]] = None
    employee: Optional[Union[Employee, str]] = None
    employee_requested_by_client: bool = False
    start_date: UtcDatetime
    end_date: Optional[UtcDatetime] = None
    status: Optional[str] = None  # 'pending', 'confirmed', 'attended', 'no_show', 'cancelled*'
    organization_id: Optional[str] = None
    advance_payment: Optional[float] = None
    custom_price: Optional[float] = None
    additional_items: List[AdditionalItem] = []
    total_price: Optional[float] = None
    reminder_sent: Optional[bool] = None

    @property
    def service_ref(self) -> Optional[str]:
        return ref_id(self.service)

    @property
    def employee_ref(self) -> Optional[str]:
        return ref_id(self.employee)

    @property
    def client_ref(self) -> Optional[str]:
        return ref_id(self.client)

    @property
    def service_name(self) -> Optional[str]:
        return self.service.name if isinstance(self.service, Service) else None

    @property
    def client_name(self) -> Optional[str]:
        return self.client.name if isinstance(self.client, Client) else None


class AppointmentsBatchCreate(ApiModel):
    """Several services for one client, scheduled back to back."""
    services: List[str]
    employee: str
    client: str
    start_date: UtcDatetime
    organization_id: str
    advance_payment: Optional[float] = None
    employee_requested_by_client: bool = False
    custom_prices: Optional[Dict[str, float]] = None  # {serviceId: price}
    additional_items_by_service: Optional[Dict[str, List[AdditionalItem]]] = None


class BatchConfirmResult(ApiModel):
    confirmed: List[str] = []
    already_confirmed: List[str] = []
    failed: List[str] = []


class AggregatedBucket(ApiModel):
    """Server-side revenue/appointment bucket."""
    key: str
    ingresos: float = 0  # revenue
    citas: int = 0  # appointments
    timestamp: Optional[int] = None
