"""
Organization endpoints of the booking API.
"""
import logging
from typing import List, Optional

from core.cache import cache_delete, cache_get, cache_set, invalidate_organization, tenant_key
from core.errors import ApiError, api_errors
from core.http import ApiClient, unwrap
from core.models import Organization

logger = logging.getLogger(__name__)


async def create_organization(api: ApiClient, data: dict) -> Organization:
    with api_errors("Could not create the organization"):
        body = await api.post("/organizations", json=data)
    return Organization.model_validate(unwrap(body))


async def get_organizations(api: ApiClient) -> List[Organization]:
    with api_errors("Could not load organizations"):
        body = await api.get("/organizations")
    return [Organization.model_validate(o) for o in unwrap(body) or []]


async def get_organization_by_id(api: ApiClient, organization_id: str) -> Organization:
    """Cached per caller token; another token always goes to the API first."""
    cache_key = tenant_key(organization_id, api.session.token, "id")
    cached = cache_get("org", cache_key)
    if cached is not None:
        return cached

    with api_errors("Could not load the organization"):
        body = await api.get(f"/organizations/{organization_id}")
    organization = Organization.model_validate(unwrap(body))
    cache_set("org", cache_key, organization)
    return organization


async def update_organization(api: ApiClient, organization_id: str, updated_data: dict) -> Organization:
    """PUT the given fields; the API answers with the whole updated organization."""
    with api_errors("Could not update the organization"):
        body = await api.put(f"/organizations/{organization_id}", json=updated_data)
    organization = Organization.model_validate(unwrap(body))
    invalidate_organization(organization_id, ["org", "analytics"])
    cache_delete("org", f"domain:{api.tenant_domain}")
    cache_set("org", tenant_key(organization_id, api.session.token, "id"), organization)
    return organization


async def delete_organization(api: ApiClient, organization_id: str):
    with api_errors("Could not delete the organization"):
        await api.delete(f"/organizations/{organization_id}")
    invalidate_organization(organization_id)


async def get_organization_config(api: ApiClient) -> Optional[Organization]:
    """
    Organization for the current tenant domain (branding bootstrap).
    This endpoint answers with the bare organization, not the envelope.
    """
    cache_key = f"domain:{api.tenant_domain}"
    cached = cache_get("org", cache_key)
    if cached is not None:
        return cached

    try:
        with api_errors("Could not load the organization for this domain"):
            body = await api.get("/organization-config")
    except ApiError as e:
        if e.status_code == 404:
            logger.info(f"[Organizations] No organization for domain {api.tenant_domain}")
            return None
        raise

    if not body:
        return None
    organization = Organization.model_validate(body)
    cache_set("org", cache_key, organization)
    return organization
