"""
Catalog models - services offered, employees, clients.
"""
from typing import Optional
from pydantic import Field

from core.models.base import ApiModel, UtcDatetime


class Service(ApiModel):
    """A bookable service."""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    type: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None  # minutes
    is_active: Optional[bool] = None
    hide_price: Optional[bool] = None
    max_concurrent_appointments: Optional[int] = None


class Employee(ApiModel):
    """Staff member who performs services."""
    id: Optional[str] = Field(None, alias="_id")
    names: str = ""
    email: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None


class Client(ApiModel):
    """End customer of an organization."""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    phone_number: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[UtcDatetime] = None
