"""
Auth-related models.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from core.models.base import ApiModel


class LoginRequest(BaseModel):
    """Dashboard sign-in."""
    email: str
    password: str
    organization_id: str = Field(..., alias="organizationId")

    class Config:
        populate_by_name = True


class LoginResponse(ApiModel):
    """Session grant returned by the booking API."""
    user_id: str
    organization_id: Optional[str] = None
    token: str
    user_type: str
    user_permissions: List[str] = []
    expires_at: Optional[str] = None  # ISO timestamp


class TokenRefresh(ApiModel):
    token: str
    expires_at: Optional[str] = None
