"""
Analytics and cashbox report models.
"""
from datetime import date
from typing import Dict, List, Optional

from core.models.base import ApiModel, UtcDatetime


class TimeBucket(ApiModel):
    key: str
    label: str
    start: date
    revenue: float = 0
    appointments: int = 0


class EmployeeRollup(ApiModel):
    employee_id: str
    name: str
    appointments: int = 0
    revenue: float = 0


class ServiceRollup(ApiModel):
    service_id: str
    name: str
    appointments: int = 0
    revenue: float = 0


class Heatmap(ApiModel):
    """Demand by weekday (Mon..Sun rows) and hour (columns)."""
    days: List[str]
    hours: List[int]
    raw: List[List[int]]
    normalized: List[List[float]]


class Kpis(ApiModel):
    total_appointments: int = 0
    total_customers: int = 0
    total_revenue: float = 0
    average_ticket: float = 0
    cancellation_rate: float = 0  # percent


class Insight(ApiModel):
    kind: str  # 'inactive_clients', 'low_demand_services', 'month_end_projection'
    severity: str  # 'info', 'warning'
    message: str
    value: Optional[float] = None
    items: List[str] = []


class DashboardReport(ApiModel):
    start: Optional[date] = None
    end: Optional[date] = None
    granularity: str
    kpis: Kpis
    time_series: List[TimeBucket]
    by_employee: List[EmployeeRollup]
    by_service: List[ServiceRollup]
    heatmap: Heatmap
    insights: List[Insight] = []


class CashboxLine(ApiModel):
    appointment_id: Optional[str] = None
    start_date: UtcDatetime
    client_name: Optional[str] = None
    service_name: str
    base_price: float = 0
    used_price: float = 0
    additional_total: float = 0
    line_total: float = 0
    custom_price_applied: bool = False
    status: Optional[str] = None
    can_confirm: bool = False


class ServiceTotals(ApiModel):
    count: int = 0
    total: float = 0


class CashboxSummary(ApiModel):
    start: UtcDatetime
    end: UtcDatetime
    currency: str
    total_income: float = 0
    total_count: int = 0
    average_ticket: float = 0
    services_summary: Dict[str, ServiceTotals] = {}
    lines: List[CashboxLine] = []
    service_options: List[str] = []
