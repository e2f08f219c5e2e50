"""
Request authentication - builds the session and API client for each request.

Provides:
- bearer_token(): Extract the token from an Authorization header
- get_session(): AuthSession from the request headers
- get_api_client(): ApiClient bound to that session (closed after the request)
- get_public_client(): ApiClient without credentials
- require_session(): Reject anonymous requests
- require_organization(): Organization id of the request
"""
from typing import AsyncIterator, Optional
from fastapi import Depends, Header, HTTPException

from core.http import ApiClient
from core.session import AuthSession


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer <token>' -> '<token>'. A bare token is accepted as is."""
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if value and scheme.lower() == "bearer":
        return value.strip() or None
    return authorization.strip() or None


def get_session(
    authorization: Optional[str] = Header(None),
    x_organization_id: Optional[str] = Header(None),
    x_token_expires_at: Optional[str] = Header(None),
) -> AuthSession:
    """Session for the current request."""
    return AuthSession.from_token(
        bearer_token(authorization),
        organization_id=x_organization_id,
        expires_at=x_token_expires_at,
    )


async def get_api_client(
    session: AuthSession = Depends(get_session),
    x_tenant_domain: Optional[str] = Header(None),
) -> AsyncIterator[ApiClient]:
    """Authenticated booking API client for the request."""
    client = ApiClient(session=session, tenant_domain=x_tenant_domain)
    try:
        yield client
    finally:
        await client.close()


async def get_public_client(
    x_tenant_domain: Optional[str] = Header(None),
) -> AsyncIterator[ApiClient]:
    """Client for endpoints that need no credentials (tenant config, plans, login)."""
    client = ApiClient(tenant_domain=x_tenant_domain, public=True)
    try:
        yield client
    finally:
        await client.close()


def require_session(api: ApiClient = Depends(get_api_client)) -> ApiClient:
    """The request's client, provided the caller sent a token."""
    if not api.session.is_authenticated:
        raise HTTPException(401, "Missing bearer token")
    return api


def require_organization(api: ApiClient = Depends(require_session)) -> str:
    """Organization id of the request (X-Organization-Id)."""
    organization_id = api.session.organization_id
    if not organization_id:
        raise HTTPException(400, "Missing X-Organization-Id header")
    return organization_id
