"""
Login and token refresh against the booking API.
"""
import logging
from typing import Optional

from core.errors import ApiError, api_errors
from core.http import ApiClient, unwrap
from core.models import LoginResponse, TokenRefresh

logger = logging.getLogger(__name__)


async def login(api: ApiClient, email: str, password: str, organization_id: str) -> LoginResponse:
    """Sign in and record the grant on the client's session."""
    with api_errors("Could not sign in"):
        body = await api.post(
            "/login",
            json={"email": email, "password": password, "organizationId": organization_id},
        )
    grant = LoginResponse.model_validate(unwrap(body))

    api.session.login_success(
        user_id=grant.user_id,
        organization_id=grant.organization_id or organization_id,
        token=grant.token,
        role=grant.user_type,
        permissions=grant.user_permissions,
        expires_at=grant.expires_at,
    )
    logger.info(f"[Auth] User {grant.user_id} signed in to {organization_id}")
    return grant


async def refresh_token(api: ApiClient) -> Optional[TokenRefresh]:
    """Explicit refresh; returns None when the API refuses."""
    if not api.session.token:
        return None
    try:
        with api_errors("Could not refresh the session"):
            body = await api.post("/login/refresh", json={})
    except ApiError as e:
        logger.error(f"[Auth] Token refresh failed: {e}")
        return None

    grant = TokenRefresh.model_validate(unwrap(body))
    api.session.refresh_token_success(grant.token, grant.expires_at)
    return grant
