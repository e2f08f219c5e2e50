"""
Auth session state.

Holds what the dashboard keeps about the signed-in user (token, role,
permissions, organization) and mirrors it into a key/value storage under
the `app_` prefix so a session can be restored later.
"""
from datetime import datetime, timezone, timedelta
from typing import List, MutableMapping, Optional

from core.notifications import NoticeFeed

STORAGE_PREFIX = "app_"

# Keys outside the prefix that logout also clears
_EXTRA_LOGOUT_KEYS = ("app_dev_slug", "sa_is_impersonating", "sa_backup")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp (with or without 'Z'); naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AuthSession:
    """Authentication state for one dashboard user."""

    def __init__(self, storage: Optional[MutableMapping[str, str]] = None):
        self.storage: MutableMapping[str, str] = storage if storage is not None else {}
        self.notices = NoticeFeed()

        self.user_id: Optional[str] = self._get("userId")
        self.token: Optional[str] = self._get("token")
        self.role: Optional[str] = self._get("role")
        self.expires_at: Optional[str] = self._get("token_expires_at")
        self.organization_id: Optional[str] = None
        self.permissions: List[str] = []

    @classmethod
    def from_storage(cls, storage: MutableMapping[str, str]) -> "AuthSession":
        """Restore a session from previously persisted storage."""
        return cls(storage)

    @classmethod
    def from_token(
        cls,
        token: Optional[str],
        organization_id: Optional[str] = None,
        expires_at: Optional[str] = None,
    ) -> "AuthSession":
        """Build a request-scoped session from a bearer token."""
        session = cls()
        if token:
            session.token = token
            session._set("token", token)
        if expires_at:
            session.expires_at = expires_at
            session._set("token_expires_at", expires_at)
        session.organization_id = organization_id
        return session

    # ── storage helpers ──────────────────────────────────────────────────────

    def _get(self, key: str) -> Optional[str]:
        return self.storage.get(f"{STORAGE_PREFIX}{key}")

    def _set(self, key: str, value: str):
        self.storage[f"{STORAGE_PREFIX}{key}"] = value

    def _remove(self, key: str):
        self.storage.pop(f"{STORAGE_PREFIX}{key}", None)

    # ── state ────────────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def expires_at_dt(self) -> Optional[datetime]:
        return parse_timestamp(self.expires_at)

    def expires_within(self, seconds: float, now: Optional[datetime] = None) -> bool:
        """True if the token is still valid but expires within `seconds`."""
        expires = self.expires_at_dt
        if expires is None:
            return False
        now = now or datetime.now(timezone.utc)
        remaining = expires - now
        return timedelta(0) < remaining < timedelta(seconds=seconds)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    # ── transitions ──────────────────────────────────────────────────────────

    def login_success(
        self,
        user_id: str,
        organization_id: str,
        token: str,
        role: str,
        permissions: List[str],
        expires_at: Optional[str] = None,
    ):
        self.user_id = user_id
        self.organization_id = organization_id
        self.token = token
        self.role = role
        self.permissions = list(permissions)
        self.expires_at = expires_at or None

        self._set("userId", user_id)
        self._set("token", token)
        self._set("role", role)
        if expires_at:
            self._set("token_expires_at", expires_at)

    def refresh_token_success(self, token: str, expires_at: Optional[str] = None):
        self.token = token
        self.expires_at = expires_at or None

        self._set("token", token)
        if expires_at:
            self._set("token_expires_at", expires_at)

    def set_organization_id(self, organization_id: str):
        self.organization_id = organization_id

    def set_permissions(self, permissions: List[str]):
        self.permissions = list(permissions)

    def logout(self):
        self.user_id = None
        self.organization_id = None
        self.token = None
        self.role = None
        self.permissions = []
        self.expires_at = None

        for key in ("userId", "token", "role", "token_expires_at"):
            self._remove(key)
        for key in _EXTRA_LOGOUT_KEYS:
            self.storage.pop(key, None)
