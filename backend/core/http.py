"""
Booking API HTTP client.

Every call carries the tenant header. Authenticated clients also send the
bearer token, refresh it shortly before it expires, and translate the API's
auth failures into session changes:

- 403 + reason=membership_suspended -> notice + MembershipSuspendedError
- 401                               -> logout + notice + SessionExpiredError

Public clients (booking pages, plan listings) only send the tenant header.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

from config import settings
from core.errors import ApiError, MembershipSuspendedError, SessionExpiredError
from core.session import AuthSession

logger = logging.getLogger(__name__)

REFRESH_PATH = "/login/refresh"


def unwrap(body: Any) -> Any:
    """Return the `data` member of the API's {code, status, data, message} envelope."""
    if isinstance(body, dict):
        return body.get("data")
    return body


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


class ApiClient:
    """Async client for the booking API, bound to one auth session."""

    def __init__(
        self,
        session: Optional[AuthSession] = None,
        base_url: Optional[str] = None,
        tenant_domain: Optional[str] = None,
        public: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.session = session or AuthSession()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.tenant_domain = tenant_domain or settings.tenant_domain
        self.public = public
        self._transport = transport
        self._timeout = timeout or settings.request_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=transport,
        )
        self._refresh_lock = asyncio.Lock()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        await self._client.aclose()

    # ─────────────────────────────────────────────────────────────────────────
    # TOKEN REFRESH
    # ─────────────────────────────────────────────────────────────────────────

    async def _ensure_fresh_token(self):
        """Refresh the token once if it is about to expire; concurrent callers wait."""
        if self.public or not self.session.token:
            return
        if not self.session.expires_within(settings.token_refresh_threshold_seconds):
            return

        stale_token = self.session.token
        async with self._refresh_lock:
            if self.session.token != stale_token:
                # Another request already refreshed while we waited
                return
            await self._refresh_token(stale_token)

    async def _refresh_token(self, current_token: str):
        # Bare client: no auth handling, so a failing refresh cannot recurse
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as bare:
                response = await bare.post(
                    REFRESH_PATH,
                    json={},
                    headers={
                        "Authorization": f"Bearer {current_token}",
                        "X-Tenant-Domain": self.tenant_domain,
                    },
                )
            response.raise_for_status()
            data = unwrap(_json_or_none(response)) or {}
        except httpx.HTTPError as e:
            logger.error(f"[ApiClient] Token refresh failed: {e}")
            return

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            logger.warning("[ApiClient] Token refresh returned no token, keeping current one")
            return

        self.session.refresh_token_success(token, data.get("expiresAt"))
        logger.info("[ApiClient] Token refreshed")

    # ─────────────────────────────────────────────────────────────────────────
    # REQUESTS
    # ─────────────────────────────────────────────────────────────────────────

    def _headers(self, extra: Optional[dict] = None) -> dict:
        headers = {"X-Tenant-Domain": self.tenant_domain}
        if not self.public and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        headers: Optional[dict] = None,
    ) -> Any:
        """Send a request and return the parsed JSON body (None when empty)."""
        await self._ensure_fresh_token()
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        response = await self._client.request(
            method,
            path,
            params=params or None,
            json=json,
            headers=self._headers(headers),
        )
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        body = _json_or_none(response)
        if response.status_code < 400:
            return body

        detail = body if isinstance(body, dict) else {}
        message = detail.get("message") or ""

        if not self.public:
            if response.status_code == 403 and detail.get("reason") == "membership_suspended":
                org_id = detail.get("orgId")
                logger.warning(f"[ApiClient] Membership suspended for org {org_id}")
                self.session.notices.error(
                    "Membership suspended",
                    message or "Your membership is suspended. Renew to reactivate.",
                )
                raise MembershipSuspendedError(message, organization_id=org_id, payload=body)

            if response.status_code == 401:
                logger.info("[ApiClient] 401 from API, clearing session")
                self.session.logout()
                self.session.notices.warning(
                    "Session expired",
                    "Your session has expired. Please sign in again.",
                )
                raise SessionExpiredError(message, payload=body)

        raise ApiError(message, status_code=response.status_code, payload=body)

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)
