"""
Services and employees of an organization (cached per caller in the catalog pool).
"""
from typing import List

from core.cache import cache_get, cache_set, tenant_key
from core.errors import api_errors
from core.http import ApiClient, unwrap
from core.models import Employee, Service


async def get_services_by_organization(api: ApiClient, organization_id: str) -> List[Service]:
    cache_key = tenant_key(organization_id, api.session.token, "services")
    cached = cache_get("catalog", cache_key)
    if cached is not None:
        return cached

    with api_errors("Could not load services for the organization"):
        body = await api.get(f"/services/organization/{organization_id}")
    services = [Service.model_validate(s) for s in unwrap(body) or []]
    cache_set("catalog", cache_key, services)
    return services


async def get_employees_by_organization(api: ApiClient, organization_id: str) -> List[Employee]:
    cache_key = tenant_key(organization_id, api.session.token, "employees")
    cached = cache_get("catalog", cache_key)
    if cached is not None:
        return cached

    with api_errors("Could not load employees for the organization"):
        body = await api.get(f"/employees/organization/{organization_id}")
    employees = [Employee.model_validate(e) for e in unwrap(body) or []]
    cache_set("catalog", cache_key, employees)
    return employees
