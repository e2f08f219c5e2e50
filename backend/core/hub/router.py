"""
Core Hub — platform-level routes.

Routes:
- /login — Sign in / refresh the bearer token
- /tenant — Resolve a hostname to a tenant
- /organization-config — Organization for the tenant domain (public)
- /orgs/{org_id} — Organization context, update
- /orgs/{org_id}/reservation-policy — Manual vs automatic booking
- /orgs/{org_id}/whatsapp-meta — WhatsApp session status
- /orgs/{org_id}/context — Reset the caller's context and cached org data
"""
from dataclasses import asdict
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from core.auth import get_public_client, require_session
from core.cache import invalidate_organization
from core.http import ApiClient
from core.domains import extract_tenant_from_host
from core.org_context import get_context
from core.models import (
    LoginRequest, LoginResponse, Organization, ReservationPolicyUpdate, TokenRefresh, WhatsappMeta,
)
from services.auth_service import login, refresh_token
from services.organization_service import get_organization_by_id, get_organization_config, update_organization
from services.reservation_groups import policy_help_text

router = APIRouter()


# ─────────────────────────────────────────────────────────────────────────────
# SESSION ENDPOINTS
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/login")
async def sign_in(data: LoginRequest, api: ApiClient = Depends(get_public_client)) -> LoginResponse:
    """Sign in against the booking API and hand the grant back to the caller."""
    return await login(api, data.email, data.password, data.organization_id)


@router.post("/login/refresh")
async def refresh(api: ApiClient = Depends(require_session)) -> TokenRefresh:
    grant = await refresh_token(api)
    if grant is None:
        raise HTTPException(401, "Could not refresh the session")
    return grant


# ─────────────────────────────────────────────────────────────────────────────
# TENANT ENDPOINTS
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/tenant")
async def resolve_tenant(hostname: str, main_domain: Optional[str] = None) -> dict:
    """Classify a hostname as signup, landing, tenant subdomain or custom domain."""
    return asdict(extract_tenant_from_host(hostname, main_domain))


@router.get("/organization-config")
async def organization_config(api: ApiClient = Depends(get_public_client)) -> Organization:
    """Branding bootstrap: the organization behind X-Tenant-Domain."""
    organization = await get_organization_config(api)
    if organization is None:
        raise HTTPException(404, "No organization for this domain")
    return organization


# ─────────────────────────────────────────────────────────────────────────────
# ORGANIZATION ENDPOINTS
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/orgs/{org_id}")
async def get_organization_context(org_id: str, api: ApiClient = Depends(require_session)) -> dict:
    """Organization plus WhatsApp status. Load failures come back in `error`."""
    context = get_context(api.session, org_id)
    await context.fetch_organization(api, org_id)
    return {**context.to_dict(), "notices": api.session.notices.dump()}


@router.put("/orgs/{org_id}")
async def update_organization_details(
    org_id: str,
    data: dict,
    api: ApiClient = Depends(require_session),
) -> Organization:
    organization = await update_organization(api, org_id, data)
    get_context(api.session, org_id).update_organization_state(organization)
    return organization


@router.put("/orgs/{org_id}/reservation-policy")
async def set_reservation_policy(
    org_id: str,
    data: ReservationPolicyUpdate,
    api: ApiClient = Depends(require_session),
) -> dict:
    context = get_context(api.session, org_id)
    await context.update_reservation_policy(api, org_id, data.policy)
    return {
        "reservationPolicy": context.reservation_policy,
        "helpText": policy_help_text(context.reservation_policy),
        "error": context.error,
        "notices": api.session.notices.dump(),
    }


@router.put("/orgs/{org_id}/whatsapp-meta")
async def set_whatsapp_meta(
    org_id: str,
    data: WhatsappMeta,
    api: ApiClient = Depends(require_session),
) -> dict:
    """
    Record the messaging service's session status; only the sent fields change.
    The caller must be able to read the organization upstream first.
    """
    await get_organization_by_id(api, org_id)
    context = get_context(api.session, org_id)
    context.set_whatsapp_meta(data)
    return context.to_dict()


@router.delete("/orgs/{org_id}/context")
async def clear_organization_context(org_id: str, api: ApiClient = Depends(require_session)) -> dict:
    """Reset the caller's context and drop the organization's cached data so the next load is fresh."""
    await get_organization_by_id(api, org_id)
    get_context(api.session, org_id).clear()
    invalidate_organization(org_id, ["org", "catalog", "analytics"])
    return {"success": True}
