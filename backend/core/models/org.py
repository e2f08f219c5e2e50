"""
Organization-related models.
"""
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from core.models.base import ApiModel

ReservationPolicy = Literal["manual", "auto_if_available"]


class Role(ApiModel):
    name: str
    permissions: List[str] = []


class Location(ApiModel):
    lat: float
    lng: float


class BreakPeriod(ApiModel):
    day: int  # 0..6
    start: str
    end: str
    note: Optional[str] = None


class OpeningHours(ApiModel):
    start: Optional[str] = None
    end: Optional[str] = None
    business_days: Optional[List[int]] = None  # 0..6
    breaks: List[BreakPeriod] = []


class Branding(ApiModel):
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    theme_color: Optional[str] = None
    pwa_name: Optional[str] = None
    pwa_short_name: Optional[str] = None
    pwa_description: Optional[str] = None
    pwa_icon: Optional[str] = None
    footer_text_color: Optional[str] = None
    manifest: Optional[Dict] = None


class Organization(ApiModel):
    """Tenant record as returned by the booking API."""
    id: Optional[str] = Field(None, alias="_id")
    name: str
    email: Optional[str] = None
    location: Optional[Location] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    whatsapp_url: Optional[str] = None
    tiktok_url: Optional[str] = None
    role: Optional[Union[Role, str]] = None
    is_active: Optional[bool] = None
    referred_count: Optional[int] = None
    referred_reward: Optional[str] = None
    service_count: Optional[int] = None
    service_reward: Optional[str] = None
    opening_hours: Optional[OpeningHours] = None
    client_id_whatsapp: Optional[str] = None
    branding: Optional[Branding] = None
    domains: List[str] = []
    reservation_policy: ReservationPolicy = "manual"
    currency: Optional[str] = None
    timezone: Optional[str] = None


class ReservationPolicyUpdate(BaseModel):
    """Switch between manual approval and automatic booking."""
    policy: ReservationPolicy


class WhatsappMeta(BaseModel):
    """WhatsApp session status pushed by the messaging service."""
    code: Optional[str] = None  # 'connecting', 'waiting_qr', 'ready', 'disconnected', ...
    reason: Optional[str] = None
    ready_since: Optional[int] = None  # epoch ms
    me: Optional[Dict] = None
