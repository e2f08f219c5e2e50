"""
Route tests: the gateway app with the booking API replaced by MockApi.
"""
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from core.auth import bearer_token, get_api_client, get_public_client, get_session
from core.session import AuthSession
from main import app
from factories import ok

HEADERS = {"Authorization": "Bearer token-123", "X-Organization-Id": "org-1"}
FUTURE = (datetime.now(timezone.utc) + timedelta(days=2)).replace(microsecond=0)


@pytest.fixture
def client(mock_api):
    async def api_override(session: AuthSession = Depends(get_session)):
        api = mock_api.client(session=session)
        try:
            yield api
        finally:
            await api.close()

    async def public_override():
        api = mock_api.client(public=True)
        try:
            yield api
        finally:
            await api.close()

    app.dependency_overrides[get_api_client] = api_override
    app.dependency_overrides[get_public_client] = public_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _reservation(id, group_id=None, status="pending", employee_id=None):
    return {
        "_id": id,
        "serviceId": {"_id": "svc-1", "name": "Haircut", "price": 30000},
        "employeeId": employee_id,
        "startDate": FUTURE.isoformat(),
        "status": status,
        "groupId": group_id,
        "customerDetails": {"name": "Ana Ruiz", "phone": "300"},
    }


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("abc") == "abc"
    assert bearer_token(None) is None


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/").json()["routes"]["reservations"] == "/api/reservations"


def test_protected_routes_need_a_token(client):
    response = client.get("/api/hub/billing/orgs/org-1/membership-status")
    assert response.status_code == 401


def test_login_returns_the_grant(client, mock_api):
    mock_api.add("POST", "/login", ok({
        "userId": "u1", "organizationId": "org-1", "token": "tok", "userType": "admin",
        "userPermissions": ["reservations:approve"], "expiresAt": "2099-01-01T00:00:00Z",
    }))
    response = client.post("/api/hub/login", json={"email": "a@b.co", "password": "x", "organizationId": "org-1"})
    assert response.status_code == 200
    assert response.json()["token"] == "tok"
    assert "Authorization" not in mock_api.requests[0].headers


def test_tenant_resolution(client):
    response = client.get("/api/hub/tenant", params={"hostname": "salon.agenditapp.com", "main_domain": "agenditapp.com"})
    assert response.json() == {"type": "tenant", "slug": "salon"}


def test_organization_config_404(client, mock_api):
    mock_api.add("GET", "/organization-config", {"message": "Not found"}, status=404)
    assert client.get("/api/hub/organization-config").status_code == 404


def test_backend_errors_surface_as_detail(client, mock_api):
    mock_api.add("GET", "/plans", {"message": "Plans unavailable"}, status=503)
    response = client.get("/api/hub/billing/plans")
    assert response.status_code == 503
    assert response.json() == {"detail": "Plans unavailable"}


def test_membership_status_route(client, mock_api):
    mock_api.add("GET", "/memberships/org-1/current", ok({
        "_id": "mem-1", "status": "active", "currentPeriodEnd": "2099-01-01T00:00:00Z",
        "planId": {"_id": "p", "slug": "plan-esencial", "displayName": "Esencial"},
    }))
    body = client.get("/api/hub/billing/orgs/org-1/membership-status", headers=HEADERS).json()
    assert body["hasActiveMembership"] is True
    assert body["ui"]["statusColor"] == "green"
    assert body["ui"]["showUpgradeButton"] is True
    assert body["ui"]["showRenewalButton"] is False


def test_reservation_rows_collapse_groups(client, mock_api):
    mock_api.add("GET", "/reservations/org-1", ok([
        _reservation("a", group_id="g1"),
        _reservation("b", group_id="g1"),
        _reservation("c"),
    ]))
    mock_api.add("GET", "/services/organization/org-1", ok([{"_id": "svc-1", "name": "Haircut", "price": 30000}]))
    mock_api.add("GET", "/employees/organization/org-1", ok([]))

    body = client.get("/api/reservations/rows", headers=HEADERS).json()

    assert body["total"] == 3
    assert len(body["rows"]) == 2
    assert body["rows"][0]["group"]["memberIds"] == ["a", "b"]
    assert body["policy"] == "manual"


def test_group_approve_route(client, mock_api):
    mock_api.add("GET", "/reservations/org-1", ok([
        _reservation("a", group_id="g1"),
        _reservation("b", group_id="g1"),
        _reservation("c", group_id="g1"),
    ]))
    for rid in "abc":
        mock_api.add("PUT", f"/reservations/{rid}", ok(None))

    body = client.post("/api/reservations/groups/g1/approve", headers=HEADERS).json()

    assert body["succeeded"] == ["a", "b", "c"]
    assert body["complete"] is True
    flags = [mock_api.json_bodies("PUT", f"/reservations/{rid}")[0]["skipNotification"] for rid in "abc"]
    assert flags == [True, True, False]
    assert body["notices"][0]["color"] == "green"


def test_group_route_rejects_unknown_action_and_group(client, mock_api):
    mock_api.add("GET", "/reservations/org-1", ok([]))
    assert client.post("/api/reservations/groups/g1/archive", headers=HEADERS).status_code == 400
    assert client.post("/api/reservations/groups/g1/approve", headers=HEADERS).status_code == 404


def test_single_approve_without_employee_is_400(client, mock_api):
    mock_api.add("GET", "/reservations/a", ok(_reservation("a")))
    response = client.put("/api/reservations/a/status", json={"status": "approved"}, headers=HEADERS)
    assert response.status_code == 400
    assert mock_api.calls("PUT", "/reservations/a") == []


def test_cashbox_route(client, mock_api):
    mock_api.add("GET", "/organizations/org-1", ok({"_id": "org-1", "name": "Salón", "currency": "USD"}))
    mock_api.add("GET", "/services/organization/org-1", ok([
        {"_id": "svc-1", "name": "Haircut", "price": 30000},
        {"_id": "svc-2", "name": "Beard", "price": 15000},
    ]))
    mock_api.add("GET", "/appointments/organization/org-1/dates", ok([
        {"_id": "x1", "startDate": FUTURE.isoformat(), "status": "pending",
         "service": {"_id": "svc-1", "name": "Haircut", "price": 30000}},
        {"_id": "x2", "startDate": FUTURE.isoformat(), "status": "pending", "service": "svc-2"},
    ]))

    body = client.get("/api/analytics/cashbox", params={"interval": "monthly"}, headers=HEADERS).json()

    assert body["currency"] == "USD"
    assert body["totalIncome"] == 45000
    assert body["servicesSummary"]["Beard"]["total"] == 15000
    request = mock_api.calls("GET", "/appointments/organization/org-1/dates")[0]
    assert "startDate" in request.url.params and "endDate" in request.url.params


def test_cashbox_custom_interval_needs_dates(client, mock_api):
    mock_api.add("GET", "/organizations/org-1", ok({"_id": "org-1", "name": "Salón"}))
    response = client.get("/api/analytics/cashbox", params={"interval": "custom"}, headers=HEADERS)
    assert response.status_code == 400


def test_dashboard_route(client, mock_api):
    mock_api.add("GET", "/organizations/org-1", ok({"_id": "org-1", "name": "Salón", "timezone": "America/Bogota"}))
    mock_api.add("GET", "/appointments/organization/org-1/dates", ok([]))
    mock_api.add("GET", "/employees/organization/org-1", ok([]))
    mock_api.add("GET", "/services/organization/org-1", ok([]))

    response = client.get(
        "/api/analytics/dashboard",
        params={"start": "2026-03-01", "end": "2026-03-07", "granularity": "day"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["timeSeries"]) == 7
    assert body["kpis"]["totalAppointments"] == 0
    assert client.get("/api/analytics/dashboard", params={"granularity": "year"}, headers=HEADERS).status_code == 400


def test_payment_activation_check(client, mock_api):
    mock_api.add("GET", "/memberships/org-1/current", ok({
        "_id": "mem-1", "status": "active", "currentPeriodEnd": "2099-01-01T00:00:00Z",
        "lastPaymentDate": "2026-03-18T12:00:05Z",
    }))
    body = client.post(
        "/api/hub/billing/orgs/org-1/payment-activation/check",
        json={"paymentInitiatedAt": "2026-03-18T12:00:00Z"},
        headers=HEADERS,
    ).json()
    assert body["status"] == "activated"


def test_whatsapp_meta_route_keeps_unsent_fields(client, mock_api):
    mock_api.add("GET", "/organizations/org-9", ok({"_id": "org-9", "name": "Barbería"}))
    client.put("/api/hub/orgs/org-9/whatsapp-meta", json={"code": "ready", "reason": "ok"}, headers=HEADERS)
    body = client.put("/api/hub/orgs/org-9/whatsapp-meta", json={"reason": "quiet hours"}, headers=HEADERS).json()
    assert body["whatsappStatus"] == "ready"
    assert body["whatsappReason"] == "quiet hours"
    assert body["whatsappIsReady"] is True


# ─────────────────────────────────────────────────────────────────────────────
# CALLER ISOLATION
# ─────────────────────────────────────────────────────────────────────────────

OWNER = {"Authorization": "Bearer owner-token", "X-Organization-Id": "org-1"}
STRANGER = {"Authorization": "Bearer stranger-token", "X-Organization-Id": "org-1"}


def _owner_only(body):
    def handler(request):
        if request.headers.get("Authorization") == "Bearer owner-token":
            return httpx.Response(200, json=ok(body))
        return httpx.Response(401, json={"message": "Invalid token"})
    return handler


def test_cached_organization_is_not_served_to_another_token(client, mock_api):
    mock_api.add("GET", "/organizations/org-1", handler=_owner_only(
        {"_id": "org-1", "name": "Secret Salon", "email": "owner@x.co"}
    ))

    owner = client.get("/api/hub/orgs/org-1", headers=OWNER).json()
    stranger = client.get("/api/hub/orgs/org-1", headers=STRANGER).json()

    assert owner["organization"]["name"] == "Secret Salon"
    assert stranger["organization"] is None
    assert stranger["error"] == "Could not load the organization"
    assert len(mock_api.calls("GET", "/organizations/org-1")) == 2


def test_whatsapp_meta_and_context_reset_need_upstream_access(client, mock_api):
    mock_api.add("GET", "/organizations/org-1", handler=_owner_only({"_id": "org-1", "name": "Secret Salon"}))
    client.put("/api/hub/orgs/org-1/whatsapp-meta", json={"code": "ready"}, headers=OWNER)

    assert client.put("/api/hub/orgs/org-1/whatsapp-meta", json={"code": "failed"}, headers=STRANGER).status_code == 401
    assert client.delete("/api/hub/orgs/org-1/context", headers=STRANGER).status_code == 401

    body = client.get("/api/hub/orgs/org-1", headers=OWNER).json()
    assert body["whatsappIsReady"] is True


def test_group_approval_refreshes_cached_dashboard(client, mock_api):
    mock_api.add("GET", "/organizations/org-1", ok({"_id": "org-1", "name": "Salón"}))
    mock_api.add("GET", "/appointments/organization/org-1/dates", ok([]))
    mock_api.add("GET", "/employees/organization/org-1", ok([]))
    mock_api.add("GET", "/services/organization/org-1", ok([]))
    mock_api.add("GET", "/reservations/org-1", ok([_reservation("a", group_id="g1"), _reservation("b", group_id="g1")]))
    mock_api.add("PUT", "/reservations/a", ok(None))
    mock_api.add("PUT", "/reservations/b", ok(None))
    params = {"start": "2026-03-01", "end": "2026-03-07"}

    client.get("/api/analytics/dashboard", params=params, headers=HEADERS)
    client.get("/api/analytics/dashboard", params=params, headers=HEADERS)
    fetched = len(mock_api.calls("GET", "/appointments/organization/org-1/dates"))

    client.post("/api/reservations/groups/g1/approve", headers=HEADERS)
    client.get("/api/analytics/dashboard", params=params, headers=HEADERS)

    assert fetched == 2
    assert len(mock_api.calls("GET", "/appointments/organization/org-1/dates")) == 4


def test_single_status_accepts_only_approve_or_reject(client, mock_api):
    mock_api.add("GET", "/reservations/a", ok(_reservation("a", employee_id="emp-1")))
    response = client.put("/api/reservations/a/status", json={"status": "cancelled_by_admin"}, headers=HEADERS)
    assert response.status_code == 422
    assert mock_api.calls("GET", "/reservations/a") == []


def test_membership_status_route_survives_malformed_membership(client, mock_api):
    mock_api.add("GET", "/memberships/org-1/current", ok({"_id": "m", "status": "active"}))
    response = client.get("/api/hub/billing/orgs/org-1/membership-status", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["hasActiveMembership"] is False
