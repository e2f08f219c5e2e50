"""
Organization context of a dashboard session.

Holds the current organization plus the WhatsApp session status shown in
the header. Loads and saves go through the organization service; failures
are logged, stored in `error` and turned into a notice instead of raising.
"""
import logging
from typing import Dict, Optional

from core.cache import cache_get, cache_set, tenant_key
from core.errors import ApiError
from core.http import ApiClient
from core.session import AuthSession
from core.models import Organization, ReservationPolicy, WhatsappMeta
from services.organization_service import (
    get_organization_by_id,
    get_organization_config,
    update_organization,
)

logger = logging.getLogger(__name__)


class OrganizationContext:
    """Organization state with loading/error flags."""

    def __init__(self):
        self.organization: Optional[Organization] = None
        self.loading: bool = True
        self.error: Optional[str] = None

        self.whatsapp_status: str = ""
        self.whatsapp_reason: Optional[str] = None
        self.whatsapp_ready_since: Optional[int] = None
        self.whatsapp_me: Optional[Dict] = None

        self.saving_policy: bool = False

    # ── loading ──────────────────────────────────────────────────────────────

    async def fetch_organization(self, api: ApiClient, organization_id: str) -> Optional[Organization]:
        self.loading = True
        self.error = None
        try:
            self.organization = await get_organization_by_id(api, organization_id)
        except ApiError as e:
            logger.error(f"[Organization] Error fetching {organization_id}: {e}")
            self.error = "Could not load the organization"
            api.session.notices.error("Error", self.error)
        finally:
            self.loading = False
        return self.organization

    async def fetch_organization_config(self, api: ApiClient) -> Optional[Organization]:
        """Organization for the tenant domain the client is bound to."""
        self.loading = True
        self.error = None
        try:
            self.organization = await get_organization_config(api)
        except ApiError as e:
            logger.error(f"[Organization] Error fetching config for {api.tenant_domain}: {e}")
            self.error = "Could not load the organization for this domain"
            api.session.notices.error("Error", self.error)
        finally:
            self.loading = False
        return self.organization

    async def update_reservation_policy(
        self,
        api: ApiClient,
        organization_id: str,
        policy: ReservationPolicy,
    ) -> Optional[Organization]:
        self.saving_policy = True
        try:
            self.organization = await update_organization(
                api, organization_id, {"reservationPolicy": policy}
            )
            api.session.notices.success("Saved", "Reservation policy updated")
        except ApiError as e:
            logger.error(f"[Organization] Error updating reservation policy: {e}")
            self.error = "Could not update the reservation policy"
            api.session.notices.error("Error", self.error)
        finally:
            self.saving_policy = False
        return self.organization

    # ── local updates ────────────────────────────────────────────────────────

    def set_whatsapp_meta(self, meta: WhatsappMeta):
        """Apply only the fields the sender actually set."""
        provided = meta.model_dump(exclude_unset=True)
        if "code" in provided:
            self.whatsapp_status = provided["code"] or ""
        if "reason" in provided:
            self.whatsapp_reason = provided["reason"]
        if "ready_since" in provided:
            self.whatsapp_ready_since = provided["ready_since"]
        if "me" in provided:
            self.whatsapp_me = provided["me"]

    def update_organization_state(self, organization: Organization):
        self.organization = organization

    def clear(self):
        self.organization = None
        self.loading = False
        self.error = None
        self.whatsapp_status = ""
        self.whatsapp_reason = None
        self.whatsapp_ready_since = None
        self.whatsapp_me = None

    # ── selectors ────────────────────────────────────────────────────────────

    @property
    def reservation_policy(self) -> str:
        if self.organization is None:
            return "manual"
        return self.organization.reservation_policy or "manual"

    @property
    def whatsapp_is_ready(self) -> bool:
        return self.whatsapp_status == "ready"

    def to_dict(self) -> dict:
        return {
            "organization": self.organization.model_dump(mode="json", by_alias=True) if self.organization else None,
            "loading": self.loading,
            "error": self.error,
            "reservationPolicy": self.reservation_policy,
            "whatsappStatus": self.whatsapp_status,
            "whatsappReason": self.whatsapp_reason,
            "whatsappReadySince": self.whatsapp_ready_since,
            "whatsappMe": self.whatsapp_me,
            "whatsappIsReady": self.whatsapp_is_ready,
        }


def get_context(session: AuthSession, organization_id: str) -> OrganizationContext:
    """Context of one organization as seen by one session (keyed by its token)."""
    cache_key = tenant_key(organization_id, session.token, "context")
    context = cache_get("context", cache_key)
    if context is None:
        context = OrganizationContext()
        cache_set("context", cache_key, context)
    return context
