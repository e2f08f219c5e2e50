"""
Tenant resolution from the request hostname.

- app.<main>        -> signup (no branding)
- <slug>.<main>     -> tenant subdomain
- <main>, www.<main> -> landing
- localhost         -> tenant (dev mode, slug comes from ?slug= or a dev header)
- anything else     -> custom domain
"""
import re
from dataclasses import dataclass
from typing import Optional

from config import settings

_SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
_LOCAL_HOSTS = ("localhost", "127.0.0.1")


@dataclass(frozen=True)
class DomainInfo:
    type: str  # 'signup', 'tenant', 'custom', 'landing'
    slug: Optional[str] = None


def extract_tenant_from_host(hostname: str, main_domain: Optional[str] = None) -> DomainInfo:
    main = (main_domain or settings.main_domain).lower()
    normalized = hostname.lower().strip()

    if normalized in _LOCAL_HOSTS:
        return DomainInfo("tenant")

    if normalized == f"{settings.signup_subdomain}.{main}":
        return DomainInfo("signup")

    if normalized in (main, f"www.{main}"):
        return DomainInfo("landing")

    if normalized.endswith(f".{main}"):
        slug = normalized[: -(len(main) + 1)]
        if slug and slug != "www" and _SLUG_RE.match(slug):
            return DomainInfo("tenant", slug)

    return DomainInfo("custom")


def post_signup_redirect_url(slug: str, exchange_code: str, hostname: str, port: Optional[int] = None) -> str:
    """Where to send a freshly signed-up organization to exchange its login code."""
    if hostname in _LOCAL_HOSTS:
        return f"http://localhost:{port or 3000}/exchange?code={exchange_code}&slug={slug}"
    return f"https://{slug}.{settings.main_domain}/exchange?code={exchange_code}"
